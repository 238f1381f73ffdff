import drumbox.notation
import drumbox.presets
import drumbox.state


def test_builtin_presets () -> None:

	"""Rock, funk, pop and half-time are available with their tempos."""

	assert drumbox.presets.names() == ["rock", "funk", "pop", "half"]
	assert [p.bpm for p in drumbox.presets.list_presets()] == [92, 98, 104, 78]


def test_lookup_ignores_case () -> None:

	"""Preset ids are matched case-insensitively."""

	assert drumbox.presets.get(" Rock ").id == "rock"
	assert drumbox.presets.get("jazz") is None
	assert drumbox.presets.get(None) is None


def test_apply_loads_pattern_and_tempo (store: drumbox.state.PatternStore) -> None:

	"""Applying a preset replaces the pattern and tempo in a single revision."""

	received: list = []
	store.subscribe(lambda kind, snapshot: received.append(kind), drumbox.state.CONTENT_KINDS)

	preset = drumbox.presets.apply("rock", store)
	snapshot = store.get()

	assert preset.name == "Basic rock"
	assert snapshot.bpm == 92
	assert snapshot.pattern_revision == 1
	assert snapshot.active_steps("sn") == [4, 12]
	assert snapshot.active_steps("bd") == [0, 8]
	assert len(received) == 1


def test_apply_forces_one_bar_of_sixteenths () -> None:

	"""A preset resets the grid to 1 x 4 x 4 and clears the playhead."""

	store = drumbox.state.PatternStore(bars=2, beats_per_bar=3, steps_per_beat=3)
	store.set_current_step(10)

	drumbox.presets.apply("funk", store)
	snapshot = store.get()

	assert snapshot.steps == 16
	assert snapshot.current_step == -1
	assert snapshot.pattern["hh"] == (True,) * 16


def test_apply_keeps_tracks_and_clears_unmentioned () -> None:

	"""Tracks the preset does not mention stay, with empty rows."""

	store = drumbox.state.PatternStore(tracks=[{"id": "bd"}, {"id": "cp", "label": "Clap"}])
	store.set_pattern({"cp": [True] * 16})

	drumbox.presets.apply("pop", store)
	snapshot = store.get()

	assert snapshot.track_ids == ("bd", "cp")
	assert snapshot.active_steps("bd") == [0, 6, 8, 14]
	assert snapshot.active_steps("cp") == []


def test_apply_unknown_preset_changes_nothing (store: drumbox.state.PatternStore, caplog) -> None:

	"""An unknown name logs a warning and leaves the store alone."""

	assert drumbox.presets.apply("polka", store) is None
	assert store.pattern_revision == 0
	assert "polka" in caplog.text


def test_rock_notation () -> None:

	"""The rock groove reads as eighth-note hats and quarter-note snare and kick onsets."""

	store = drumbox.state.PatternStore()
	drumbox.presets.apply("rock", store)

	events = drumbox.notation.transcribe_pattern(store.get())

	assert [e.duration_class.value for e in events["hh"]] == ["eighth"] * 8
	assert [e.start_step for e in events["sn"] if e.is_onset] == [4, 12]
	assert [e.start_step for e in events["bd"] if e.is_onset] == [0, 8]
