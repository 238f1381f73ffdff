"""YAML configuration for the editor.

All sections are optional::

	sequencer:
	  bpm: 92
	  bars: 1
	  beats_per_bar: 4
	  steps_per_beat: 4

	tracks:
	  - {id: hh, label: Hi-hat, short_label: HH}
	  - {id: sn, label: Snare}
	  - {id: bd, label: Kick}

	editor:
	  preset: rock
	  hide_continuations: true
	  tempo_debounce: 0.12
"""

import dataclasses
import logging
import os
import typing

import yaml

import drumbox.constants
import drumbox.notation
import drumbox.state


logger = logging.getLogger(__name__)


DEFAULT_CONFIG_PATH = "drumbox.yaml"


def load_config (config_path: str = DEFAULT_CONFIG_PATH) -> typing.Dict[str, typing.Any]:

	"""
	Load configuration from a YAML file.

	A missing file logs a warning and gives an empty config.  Malformed YAML
	raises ``yaml.YAMLError``.
	"""

	if not os.path.exists(config_path):
		logger.warning(f"Config file {config_path} not found. Using defaults.")
		return {}

	with open(config_path, 'r') as f:
		data = yaml.safe_load(f)

	if data is None:
		return {}

	if not isinstance(data, dict):
		logger.warning(f"Config file {config_path} does not contain a mapping. Using defaults.")
		return {}

	return data


def _section (data: typing.Mapping[str, typing.Any], name: str) -> typing.Mapping[str, typing.Any]:

	value = data.get(name)

	return value if isinstance(value, typing.Mapping) else {}


@dataclasses.dataclass
class EditorConfig:

	"""
	Settings needed to build a store and an editor.

	Values are kept as given; the store coerces and clamps them when it is
	built, so a bad value never stops the editor from starting.
	"""

	bpm: typing.Any = drumbox.constants.DEFAULT_BPM
	bars: typing.Any = drumbox.constants.DEFAULT_BARS
	beats_per_bar: typing.Any = drumbox.constants.DEFAULT_BEATS_PER_BAR
	steps_per_beat: typing.Any = drumbox.constants.DEFAULT_STEPS_PER_BEAT
	tracks: typing.Optional[typing.List[typing.Any]] = None
	preset: typing.Optional[str] = None
	hide_continuations: bool = True
	tempo_debounce: float = drumbox.constants.TEMPO_DEBOUNCE_SECONDS

	@classmethod
	def from_dict (cls, data: typing.Any) -> "EditorConfig":

		"""Build a config from a loaded YAML document, ignoring anything unrecognised."""

		if not isinstance(data, typing.Mapping):
			return cls()

		sequencer = _section(data, "sequencer")
		editor = _section(data, "editor")
		tracks = data.get("tracks")

		tempo_debounce = editor.get("tempo_debounce", drumbox.constants.TEMPO_DEBOUNCE_SECONDS)

		try:
			tempo_debounce = max(0.0, float(tempo_debounce))
		except (TypeError, ValueError):
			logger.warning(f"Invalid tempo_debounce {tempo_debounce!r}. Using default.")
			tempo_debounce = drumbox.constants.TEMPO_DEBOUNCE_SECONDS

		preset = editor.get("preset")

		return cls(
			bpm = sequencer.get("bpm", drumbox.constants.DEFAULT_BPM),
			bars = sequencer.get("bars", drumbox.constants.DEFAULT_BARS),
			beats_per_bar = sequencer.get("beats_per_bar", drumbox.constants.DEFAULT_BEATS_PER_BAR),
			steps_per_beat = sequencer.get("steps_per_beat", drumbox.constants.DEFAULT_STEPS_PER_BEAT),
			tracks = list(tracks) if isinstance(tracks, list) else None,
			preset = str(preset) if preset else None,
			hide_continuations = bool(editor.get("hide_continuations", True)),
			tempo_debounce = tempo_debounce,
		)

	@property
	def continuation_display (self) -> drumbox.notation.ContinuationDisplay:
		return drumbox.notation.ContinuationDisplay.HIDE if self.hide_continuations else drumbox.notation.ContinuationDisplay.SHOW

	def build_store (self) -> drumbox.state.PatternStore:

		"""Create a store from these settings."""

		return drumbox.state.PatternStore(
			tracks = self.tracks,
			bars = self.bars,
			beats_per_bar = self.beats_per_bar,
			steps_per_beat = self.steps_per_beat,
			bpm = self.bpm,
		)
