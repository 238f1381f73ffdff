"""Transcription of boolean step rows into rhythmic notation events.

A track row is read left to right as a series of runs:

- A **hit run** starts on an onset (a ``True`` step) and sustains silently
  until the next onset or the end of the row.  There is no note-off.
- A **rest run** covers the ``False`` steps before the next onset.

Each run is cut at every beat boundary, so no single event spans two
beats, and each beat-sized chunk is split greedily into power-of-two
pieces, largest first.  On the default grid (four steps per beat) that is
the table ``16, 8, 4, 2, 1`` steps mapped to whole, half, quarter, eighth
and sixteenth.  Every piece of a hit run after the first is a
*continuation*: it keeps the bar's time accounting correct, but it is not
a new onset and surfaces usually hide it (no ties are drawn).

Grids whose steps per beat carry an odd factor (3, 5, 6, ...) are written
as tuplets of the next lower power-of-two grid; a piece that fills a whole
beat is written as a plain quarter.

Everything here is pure: the same row always gives the same events.

Example::

	row = [True, False, False, False] * 4
	events = drumbox.notation.transcribe(row, steps_per_beat=4, track_id="hh")
	[e.duration_class.value for e in events]   # ['quarter'] * 4
"""

import dataclasses
import enum
import fractions
import typing

import drumbox.constants.durations
import drumbox.timing

if typing.TYPE_CHECKING:
	from drumbox.state import StateSnapshot


DurationClass = drumbox.constants.durations.DurationClass


@dataclasses.dataclass(frozen=True)
class NotationEvent:

	"""
	One note or rest on the staff.

	Attributes:
		track_id: The track this event belongs to.
		start_step: Grid index where the event begins.
		length_in_steps: Number of grid steps it covers (always >= 1).
		duration_class: Written note value, or ``None`` for pieces shorter
			than the shortest supported value.
		is_rest: True for silence.
		is_continuation: True for the sustained tail of an earlier onset.
		tuplet: ``(actual, normal)`` ratio for tuplet grids, e.g. ``(3, 2)``
			for triplet eighths; ``None`` for plain values.
	"""

	track_id: str
	start_step: int
	length_in_steps: int
	duration_class: typing.Optional[DurationClass]
	is_rest: bool = False
	is_continuation: bool = False
	tuplet: typing.Optional[typing.Tuple[int, int]] = None

	@property
	def end_step (self) -> int:
		return self.start_step + self.length_in_steps

	@property
	def is_onset (self) -> bool:

		"""True when this event is a freshly struck note."""

		return not self.is_rest and not self.is_continuation


class ContinuationDisplay (str, enum.Enum):

	"""How a surface should present continuation events."""

	SHOW = "show"
	HIDE = "hide"


def next_onset (row: typing.Sequence[bool], start: int) -> int:

	"""Index of the first ``True`` at or after ``start``, or ``len(row)``."""

	for i in range(start, len(row)):
		if row[i]:
			return i

	return len(row)


def decompose_steps (length: int) -> typing.List[int]:

	"""Split ``length`` into power-of-two pieces, largest first.

	The split is canonical: ``7 -> [4, 2, 1]``, ``6 -> [4, 2]``, ``3 -> [2, 1]``.
	"""

	parts: typing.List[int] = []
	remaining = length

	while remaining > 0:
		piece = 1 << (remaining.bit_length() - 1)
		parts.append(piece)
		remaining -= piece

	return parts


def written_duration (length: int, steps_per_beat: int) -> typing.Tuple[typing.Optional[DurationClass], typing.Optional[typing.Tuple[int, int]]]:

	"""Return ``(duration_class, tuplet)`` for a piece of ``length`` steps.

	The beat is a quarter note.  On a power-of-two grid a step is
	``1 / (4 * steps_per_beat)`` of a whole note.  Otherwise steps are
	written on the largest power-of-two grid below ``steps_per_beat`` and
	tagged with the tuplet ratio.
	"""

	spb = max(1, steps_per_beat)

	if spb & (spb - 1) == 0:
		return drumbox.constants.durations.from_fraction(fractions.Fraction(length, 4 * spb)), None

	if length == spb:
		return DurationClass.QUARTER, None

	written_grid = 1 << (spb.bit_length() - 1)

	return drumbox.constants.durations.from_fraction(fractions.Fraction(length, 4 * written_grid)), (spb, written_grid)


def transcribe (steps: typing.Sequence[typing.Any], steps_per_beat: typing.Any = drumbox.constants.DEFAULT_STEPS_PER_BEAT, track_id: str = "") -> typing.Tuple[NotationEvent, ...]:

	"""Convert one track's step row into beat-bounded notation events.

	Parameters:
		steps: The boolean step row (any truthy value counts as a hit).
		steps_per_beat: Grid steps in one beat; beat boundaries fall on
			multiples of this.
		track_id: Copied onto every event.

	Returns:
		Events in left-to-right order.  Their lengths sum to ``len(steps)``
		and none has zero length.
	"""

	row = [bool(v) for v in steps] if isinstance(steps, (list, tuple)) else []
	spb = drumbox.timing.to_positive_int(steps_per_beat, drumbox.constants.DEFAULT_STEPS_PER_BEAT)
	total = len(row)

	events: typing.List[NotationEvent] = []
	position = 0

	while position < total:

		is_hit = row[position]
		run_end = next_onset(row, position + 1) if is_hit else next_onset(row, position)

		cursor = position

		while cursor < run_end:

			chunk_end = min(run_end, drumbox.timing.beat_end(cursor, spb, total))
			length = chunk_end - cursor
			pieces = [length] if length == spb else decompose_steps(length)

			for piece in pieces:

				duration_class, tuplet = written_duration(piece, spb)

				events.append(NotationEvent(
					track_id = track_id,
					start_step = cursor,
					length_in_steps = piece,
					duration_class = duration_class,
					is_rest = not is_hit,
					is_continuation = is_hit and cursor > position,
					tuplet = tuplet,
				))

				cursor += piece

		position = run_end

	return tuple(events)


def transcribe_pattern (snapshot: "StateSnapshot") -> typing.Dict[str, typing.Tuple[NotationEvent, ...]]:

	"""Transcribe every track of a state snapshot, in track display order."""

	return {
		track.id: transcribe(snapshot.pattern.get(track.id, ()), snapshot.steps_per_beat, track.id)
		for track in snapshot.tracks
	}


def present (events: typing.Iterable[NotationEvent], policy: ContinuationDisplay = ContinuationDisplay.HIDE) -> typing.Tuple[NotationEvent, ...]:

	"""Apply a continuation display policy.

	With ``HIDE`` each continuation becomes a silent slot of the same length
	(a rest), so the bar still adds up but only onsets are drawn.  With
	``SHOW`` the events pass through unchanged.
	"""

	if policy == ContinuationDisplay.SHOW:
		return tuple(events)

	return tuple(
		dataclasses.replace(event, is_rest=True, is_continuation=False) if event.is_continuation else event
		for event in events
	)
