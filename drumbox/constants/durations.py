"""Notation duration classes and the step-length table used by transcription.

Values are fractions of a whole note. On the default grid (four steps per
beat) one step is a sixteenth, so the greedy table reads::

	16 steps -> whole
	 8 steps -> half
	 4 steps -> quarter
	 2 steps -> eighth
	 1 step  -> sixteenth

Finer grids shift the table down (eight steps per beat makes one step a
thirty-second) and coarser grids shift it up.
"""

import enum
import fractions
import typing


class DurationClass (str, enum.Enum):

	"""Written note value of a notation event."""

	WHOLE = "whole"
	HALF = "half"
	QUARTER = "quarter"
	EIGHTH = "eighth"
	SIXTEENTH = "sixteenth"
	THIRTY_SECOND = "thirty_second"
	SIXTY_FOURTH = "sixty_fourth"

	@property
	def fraction (self) -> fractions.Fraction:

		"""Length of this value as a fraction of a whole note."""

		return _FRACTIONS[self]

	@property
	def symbol (self) -> str:

		"""Short code used by text surfaces (``w``, ``h``, ``q``, ``8``, ``16`` ...)."""

		return _SYMBOLS[self]


_FRACTIONS: typing.Dict[DurationClass, fractions.Fraction] = {
	DurationClass.WHOLE: fractions.Fraction(1, 1),
	DurationClass.HALF: fractions.Fraction(1, 2),
	DurationClass.QUARTER: fractions.Fraction(1, 4),
	DurationClass.EIGHTH: fractions.Fraction(1, 8),
	DurationClass.SIXTEENTH: fractions.Fraction(1, 16),
	DurationClass.THIRTY_SECOND: fractions.Fraction(1, 32),
	DurationClass.SIXTY_FOURTH: fractions.Fraction(1, 64),
}

_SYMBOLS: typing.Dict[DurationClass, str] = {
	DurationClass.WHOLE: "w",
	DurationClass.HALF: "h",
	DurationClass.QUARTER: "q",
	DurationClass.EIGHTH: "8",
	DurationClass.SIXTEENTH: "16",
	DurationClass.THIRTY_SECOND: "32",
	DurationClass.SIXTY_FOURTH: "64",
}


def from_fraction (value: fractions.Fraction) -> typing.Optional[DurationClass]:

	"""Return the duration class whose length is exactly ``value``, or ``None``."""

	for duration, length in _FRACTIONS.items():
		if length == value:
			return duration

	return None
