"""Timing model - resolution arithmetic and beat helpers.

A resolution is the triple ``(bars, beats_per_bar, steps_per_beat)``.  The
total step count is always derived from it and is never stored on its own::

	steps = bars * beats_per_bar * steps_per_beat

Every helper here is a pure function.  Malformed input (strings, ``None``,
NaN, values below one) is coerced to a sensible integer instead of raising,
because these values arrive straight from interactive controls.
"""

import dataclasses
import math
import typing

import drumbox.constants


def to_int (value: typing.Any, fallback: int) -> int:

	"""Floor ``value`` to an int, or return ``fallback`` when it is not a finite number."""

	if isinstance(value, bool):
		return int(value)

	try:
		number = float(value)
	except (TypeError, ValueError):
		return fallback

	if not math.isfinite(number):
		return fallback

	return int(math.floor(number))


def to_positive_int (value: typing.Any, fallback: int, minimum: int = 1) -> int:

	"""Coerce ``value`` to an int no smaller than ``minimum``."""

	return max(minimum, to_int(value, fallback))


def compute_steps (bars: typing.Any = drumbox.constants.DEFAULT_BARS, beats_per_bar: typing.Any = drumbox.constants.DEFAULT_BEATS_PER_BAR, steps_per_beat: typing.Any = drumbox.constants.DEFAULT_STEPS_PER_BEAT) -> int:

	"""
	Return the total step count for a resolution, coercing each factor first.
	"""

	return (
		to_positive_int(bars, drumbox.constants.DEFAULT_BARS)
		* to_positive_int(beats_per_bar, drumbox.constants.DEFAULT_BEATS_PER_BAR)
		* to_positive_int(steps_per_beat, drumbox.constants.DEFAULT_STEPS_PER_BEAT)
	)


@dataclasses.dataclass(frozen=True)
class Resolution:

	"""
	The grid shape of a pattern.

	Attributes:
		bars: Number of bars in the loop (>= 1).
		beats_per_bar: Beats in each bar (>= 1).
		steps_per_beat: Grid steps in each beat (>= 1).

	Build one from untrusted input with :meth:`coerce`; the plain
	constructor assumes the values are already valid.
	"""

	bars: int = drumbox.constants.DEFAULT_BARS
	beats_per_bar: int = drumbox.constants.DEFAULT_BEATS_PER_BAR
	steps_per_beat: int = drumbox.constants.DEFAULT_STEPS_PER_BEAT

	@classmethod
	def coerce (cls, bars: typing.Any = None, beats_per_bar: typing.Any = None, steps_per_beat: typing.Any = None) -> "Resolution":

		"""Build a valid resolution from arbitrary values, using defaults for anything unusable."""

		return cls(
			bars = to_positive_int(bars, drumbox.constants.DEFAULT_BARS),
			beats_per_bar = to_positive_int(beats_per_bar, drumbox.constants.DEFAULT_BEATS_PER_BAR),
			steps_per_beat = to_positive_int(steps_per_beat, drumbox.constants.DEFAULT_STEPS_PER_BEAT),
		)

	def replace (self, bars: typing.Any = None, beats_per_bar: typing.Any = None, steps_per_beat: typing.Any = None) -> "Resolution":

		"""Return a copy with the given factors changed.

		A factor that is ``None`` or not a finite number keeps its current
		value; anything else is floored and clamped to at least one.
		"""

		return Resolution(
			bars = to_positive_int(bars, self.bars),
			beats_per_bar = to_positive_int(beats_per_bar, self.beats_per_bar),
			steps_per_beat = to_positive_int(steps_per_beat, self.steps_per_beat),
		)

	@property
	def steps (self) -> int:

		"""Total number of steps in the loop."""

		return self.bars * self.beats_per_bar * self.steps_per_beat

	@property
	def steps_per_bar (self) -> int:

		"""Number of steps in one bar."""

		return self.beats_per_bar * self.steps_per_beat


def beat_end (step: int, steps_per_beat: int, total_steps: int) -> int:

	"""Index one past the last step of the beat containing ``step``, capped at ``total_steps``."""

	spb = max(1, steps_per_beat)

	return min(total_steps, (step // spb + 1) * spb)
