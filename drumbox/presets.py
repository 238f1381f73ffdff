"""Built-in rhythm presets.

Every preset is one bar of 4/4 in sixteenths, written against the stock
``hh`` / ``sn`` / ``bd`` tracks.  Step indices per beat read
``1 e & a | 2 e & a | 3 e & a | 4 e & a``::

	 0  1  2  3 |  4  5  6  7 |  8  9 10 11 | 12 13 14 15
"""

import dataclasses
import logging
import typing

import drumbox.constants
import drumbox.state

logger = logging.getLogger(__name__)


PRESET_STEPS = 16


@dataclasses.dataclass(frozen=True)
class Preset:

	"""A named pattern with its suggested tempo."""

	id: str
	name: str
	description: str
	bpm: float
	pattern: typing.Mapping[str, typing.Tuple[bool, ...]]


def _rows (**rows: typing.List[int]) -> typing.Dict[str, typing.Tuple[bool, ...]]:

	return {track_id: drumbox.state.to_bool_row(values, PRESET_STEPS) for track_id, values in rows.items()}


_PRESETS: typing.Dict[str, Preset] = {}


def register (preset: Preset) -> None:

	"""Add (or replace) a preset, keyed by its lower-case id."""

	_PRESETS[preset.id.strip().lower()] = preset


register(Preset(
	id = "rock",
	name = "Basic rock",
	description = "Eighth-note hi-hat, snare on 2 and 4, kick on 1 and 3.",
	bpm = 92,
	pattern = _rows(
		hh = [1,0,1,0, 1,0,1,0, 1,0,1,0, 1,0,1,0],
		sn = [0,0,0,0, 1,0,0,0, 0,0,0,0, 1,0,0,0],
		bd = [1,0,0,0, 0,0,0,0, 1,0,0,0, 0,0,0,0],
	),
))

register(Preset(
	id = "funk",
	name = "Basic funk",
	description = "Sixteenth-note hi-hat over a syncopated kick.",
	bpm = 98,
	pattern = _rows(
		hh = [1,1,1,1, 1,1,1,1, 1,1,1,1, 1,1,1,1],
		sn = [0,0,0,0, 1,0,0,0, 0,0,0,0, 1,0,0,0],
		bd = [1,0,0,1, 0,0,1,0, 1,0,0,0, 0,1,0,0],
	),
))

register(Preset(
	id = "pop",
	name = "Basic pop",
	description = "Solid kick with eighth-note hi-hat and snare on 2 and 4.",
	bpm = 104,
	pattern = _rows(
		hh = [1,0,1,0, 1,0,1,0, 1,0,1,0, 1,0,1,0],
		sn = [0,0,0,0, 1,0,0,0, 0,0,0,0, 1,0,0,0],
		bd = [1,0,0,0, 0,0,1,0, 1,0,0,0, 0,0,1,0],
	),
))

register(Preset(
	id = "half",
	name = "Half-time",
	description = "Snare on 3 for a half-time feel, eighth-note hi-hat.",
	bpm = 78,
	pattern = _rows(
		hh = [1,0,1,0, 1,0,1,0, 1,0,1,0, 1,0,1,0],
		sn = [0,0,0,0, 0,0,0,0, 1,0,0,0, 0,0,0,0],
		bd = [1,0,0,0, 0,0,1,0, 0,0,0,0, 1,0,0,0],
	),
))


def get (name: typing.Any) -> typing.Optional[Preset]:

	"""Look up a preset by id, ignoring case and surrounding spaces."""

	key = str(name or "").strip().lower()

	return _PRESETS.get(key) if key else None


def names () -> typing.List[str]:

	"""Ids of all registered presets, in registration order."""

	return list(_PRESETS)


def list_presets () -> typing.List[Preset]:

	"""All registered presets, in registration order."""

	return list(_PRESETS.values())


def apply (name: typing.Any, store: drumbox.state.PatternStore) -> typing.Optional[Preset]:

	"""Load a preset into ``store`` as a single edit.

	Forces one bar of 4/4 sixteenths, replaces the pattern, sets the tempo
	and clears the playhead.  The current tracks are kept; tracks the
	preset does not mention start empty.  Returns the preset, or ``None``
	(after logging a warning) when the name is unknown.
	"""

	preset = get(name)

	if preset is None:
		logger.warning(f"Preset not found: {name!r}")
		return None

	def load (draft: drumbox.state.StateDraft) -> None:
		draft.bars = 1
		draft.beats_per_bar = drumbox.constants.DEFAULT_BEATS_PER_BAR
		draft.steps_per_beat = drumbox.constants.DEFAULT_STEPS_PER_BEAT
		draft.pattern = {track_id: list(row) for track_id, row in preset.pattern.items()}
		draft.bpm = preset.bpm
		draft.current_step = drumbox.constants.NO_STEP

	store.update(load)

	logger.info(f"Preset loaded: {preset.name}")

	return preset
