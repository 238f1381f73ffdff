import math

import pytest

import drumbox.timing


@pytest.mark.parametrize("bars, beats_per_bar, steps_per_beat, expected", [
	(1, 4, 4, 16),
	(2, 4, 4, 32),
	(1, 3, 4, 12),
	(3, 7, 2, 42),
	(1, 1, 1, 1),
])
def test_compute_steps_is_product_of_factors (bars: int, beats_per_bar: int, steps_per_beat: int, expected: int) -> None:

	"""Total steps is always bars * beats per bar * steps per beat."""

	assert drumbox.timing.compute_steps(bars, beats_per_bar, steps_per_beat) == expected


def test_compute_steps_coerces_bad_factors () -> None:

	"""Non-numeric and non-finite factors fall back to defaults; small ones clamp to one."""

	assert drumbox.timing.compute_steps("x", None, math.nan) == 1 * 4 * 4
	assert drumbox.timing.compute_steps(0, -3, 2.9) == 1 * 1 * 2
	assert drumbox.timing.compute_steps("2", "4", "4") == 32


def test_to_int_floors_and_falls_back () -> None:

	"""to_int floors finite numbers and returns the fallback otherwise."""

	assert drumbox.timing.to_int(3.9, 0) == 3
	assert drumbox.timing.to_int(-0.5, 0) == -1
	assert drumbox.timing.to_int(math.inf, 7) == 7
	assert drumbox.timing.to_int([1], 7) == 7
	assert drumbox.timing.to_int(True, 7) == 1


def test_resolution_derived_values () -> None:

	"""steps and steps_per_bar are derived from the three factors."""

	resolution = drumbox.timing.Resolution(bars=2, beats_per_bar=3, steps_per_beat=4)

	assert resolution.steps == 24
	assert resolution.steps_per_bar == 12


def test_resolution_coerce_uses_defaults () -> None:

	"""coerce() replaces unusable values with the default 1 x 4 x 4."""

	assert drumbox.timing.Resolution.coerce(None, "?", math.nan) == drumbox.timing.Resolution(1, 4, 4)


def test_resolution_replace_keeps_unspecified_factors () -> None:

	"""replace() only changes the factors given, and clamps them to at least one."""

	resolution = drumbox.timing.Resolution(bars=1, beats_per_bar=4, steps_per_beat=4)

	assert resolution.replace(bars=2) == drumbox.timing.Resolution(2, 4, 4)
	assert resolution.replace(steps_per_beat=0) == drumbox.timing.Resolution(1, 4, 1)
	assert resolution.replace(beats_per_bar="bad") == resolution


def test_beat_end () -> None:

	"""beat_end is one past the last step of the beat, capped at the row length."""

	assert drumbox.timing.beat_end(5, 4, 16) == 8
	assert drumbox.timing.beat_end(4, 4, 16) == 8
	assert drumbox.timing.beat_end(14, 4, 15) == 15
	assert drumbox.timing.beat_end(2, 0, 16) == 3
