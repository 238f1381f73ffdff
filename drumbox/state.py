"""Pattern state store - the single source of truth for the editable rhythm.

:class:`PatternStore` owns the track list, the resolution, the per-track
boolean step rows, the tempo and the playback cursor.  It is the only
writer; everyone else reads immutable :class:`StateSnapshot` objects or
subscribes to tagged change notifications.

Every public mutator ends by re-normalising the whole state, so after any
call these hold:

- ``steps == bars * beats_per_bar * steps_per_beat``
- every track has exactly one pattern row, of length ``steps``
- no row exists for a track that is not in the track list
- ``bpm`` is within ``[MIN_BPM, MAX_BPM]``
- ``current_step`` is ``-1`` or a valid step index

When the step count or the track set changes, rows are resized by index:
steps that exist in both grids keep their value, new steps are off, and
steps past the new end are dropped.

The pattern revision counts content changes and is what the render gate
watches.  It moves exactly once per call that changes the pattern (or the
grid structure), never for a redundant write, and wraps at ``2**32``.

Example::

	store = drumbox.state.PatternStore()
	store.toggle_step("bd", 0, True)
	store.set_resolution(bars=2)
	store.get().pattern["bd"][:4]   # (True, False, False, False)
"""

import dataclasses
import enum
import logging
import math
import types
import typing

import drumbox.constants
import drumbox.event_emitter
import drumbox.timing


logger = logging.getLogger(__name__)


PatternRow = typing.Tuple[bool, ...]


class ChangeKind (str, enum.Enum):

	"""Tag delivered with every store notification."""

	STRUCTURE = "structure"
	PATTERN = "pattern"
	PLAYHEAD = "playhead"
	TEMPO = "tempo"
	TRANSPORT = "transport"


# Notification kinds that change what the notation shows.
CONTENT_KINDS = frozenset({ChangeKind.STRUCTURE, ChangeKind.PATTERN})


@dataclasses.dataclass(frozen=True)
class Track:

	"""
	One instrument lane.

	Attributes:
		id: Stable, unique key used for the pattern row.
		label: Display name.
		short_label: Optional abbreviation for narrow surfaces.
	"""

	id: str
	label: str
	short_label: typing.Optional[str] = None

	@classmethod
	def coerce (cls, value: typing.Any) -> typing.Optional["Track"]:

		"""Build a track from a ``Track`` or a mapping, or return ``None`` when there is no usable id."""

		if isinstance(value, Track):
			value = dataclasses.asdict(value)

		if not isinstance(value, typing.Mapping):
			return None

		track_id = str(value.get("id") or "").strip()

		if not track_id:
			return None

		short_label = value.get("short_label", value.get("shortLabel"))

		return cls(
			id = track_id,
			label = str(value.get("label") or track_id),
			short_label = str(short_label) if short_label else None,
		)


def default_tracks () -> typing.Tuple[Track, ...]:

	"""The stock kit: hi-hat, snare, kick."""

	return tuple(Track(id=i, label=label, short_label=short) for i, label, short in drumbox.constants.DEFAULT_TRACKS)


def normalize_tracks (tracks: typing.Any) -> typing.Tuple[Track, ...]:

	"""Clean a track list: drop entries without an id, keep the first of any duplicate id.

	Falls back to :func:`default_tracks` when nothing usable remains.
	"""

	if isinstance(tracks, (str, bytes)) or not isinstance(tracks, typing.Iterable):
		return default_tracks()

	clean: typing.List[Track] = []
	seen: typing.Set[str] = set()

	for value in tracks:

		track = Track.coerce(value)

		if track is None or track.id in seen:
			continue

		seen.add(track.id)
		clean.append(track)

	return tuple(clean) if clean else default_tracks()


def to_bool_row (values: typing.Any, length: int) -> PatternRow:

	"""Coerce ``values`` to exactly ``length`` booleans.

	The overlapping prefix is copied by index, anything beyond the source is
	``False``, and anything beyond ``length`` is dropped.  Input that is not
	a list or tuple gives an all-off row.
	"""

	if not isinstance(values, (list, tuple)):
		return (False,) * length

	limit = min(len(values), length)

	return tuple(bool(v) for v in values[:limit]) + (False,) * (length - limit)


def normalize_pattern (source: typing.Any, tracks: typing.Sequence[Track], steps: int) -> typing.Dict[str, PatternRow]:

	"""Build one row per track from ``source``, resizing by index and dropping unknown ids."""

	src = source if isinstance(source, typing.Mapping) else {}

	return {track.id: to_bool_row(src.get(track.id), steps) for track in tracks}


def empty_pattern (tracks: typing.Sequence[Track], steps: int) -> typing.Dict[str, PatternRow]:

	"""All-off rows for every track."""

	return {track.id: (False,) * steps for track in tracks}


def clamp_bpm (value: typing.Any) -> float:

	"""Clamp a tempo to the supported range; non-numeric input gives the default tempo."""

	try:
		bpm = float(value)
	except (TypeError, ValueError):
		return float(drumbox.constants.DEFAULT_BPM)

	if not math.isfinite(bpm):
		return float(drumbox.constants.DEFAULT_BPM)

	return float(max(drumbox.constants.MIN_BPM, min(drumbox.constants.MAX_BPM, bpm)))


def clamp_step (value: typing.Any, steps: int) -> int:

	"""Return ``value`` as a step index, or ``-1`` when it is not within ``[0, steps)``."""

	index = drumbox.timing.to_int(value, drumbox.constants.NO_STEP)

	return index if 0 <= index < steps else drumbox.constants.NO_STEP


@dataclasses.dataclass(frozen=True)
class StateSnapshot:

	"""
	An immutable view of the store at one moment.

	``pattern`` is a read-only mapping of track id to a tuple of booleans.
	"""

	tracks: typing.Tuple[Track, ...]
	resolution: drumbox.timing.Resolution
	pattern: typing.Mapping[str, PatternRow]
	bpm: float
	current_step: int
	is_playing: bool
	pattern_revision: int

	@property
	def steps (self) -> int:
		return self.resolution.steps

	@property
	def bars (self) -> int:
		return self.resolution.bars

	@property
	def beats_per_bar (self) -> int:
		return self.resolution.beats_per_bar

	@property
	def steps_per_beat (self) -> int:
		return self.resolution.steps_per_beat

	@property
	def steps_per_bar (self) -> int:
		return self.resolution.steps_per_bar

	@property
	def track_ids (self) -> typing.Tuple[str, ...]:
		return tuple(track.id for track in self.tracks)

	def active_steps (self, track_id: str) -> typing.List[int]:

		"""Indices of the steps that are on for ``track_id`` (empty for unknown ids)."""

		return [i for i, hit in enumerate(self.pattern.get(track_id, ())) if hit]


@dataclasses.dataclass
class StateDraft:

	"""
	A mutable copy of the state handed to :meth:`PatternStore.update`.

	Edit any field freely; the store re-normalises everything when the
	mutator returns.  ``steps`` is read-only and follows the three
	resolution factors.
	"""

	tracks: typing.List[typing.Any]
	bars: typing.Any
	beats_per_bar: typing.Any
	steps_per_beat: typing.Any
	bpm: typing.Any
	current_step: typing.Any
	is_playing: typing.Any
	pattern: typing.Dict[str, typing.Any]

	@property
	def steps (self) -> int:
		return drumbox.timing.compute_steps(self.bars, self.beats_per_bar, self.steps_per_beat)


# Keys accepted by PatternStore.set().
PATCH_KEYS = frozenset({"tracks", "bars", "beats_per_bar", "steps_per_beat", "bpm", "current_step", "is_playing", "pattern"})


class PatternStore:

	"""Authoritative pattern, timing and transport state for one editor."""

	def __init__ (
		self,
		tracks: typing.Any = None,
		bars: typing.Any = drumbox.constants.DEFAULT_BARS,
		beats_per_bar: typing.Any = drumbox.constants.DEFAULT_BEATS_PER_BAR,
		steps_per_beat: typing.Any = drumbox.constants.DEFAULT_STEPS_PER_BEAT,
		bpm: typing.Any = drumbox.constants.DEFAULT_BPM,
		pattern: typing.Any = None
	) -> None:

		"""Create a store; every argument is coerced, so any input gives a valid state."""

		self._tracks = normalize_tracks(tracks)
		self._resolution = drumbox.timing.Resolution.coerce(bars, beats_per_bar, steps_per_beat)
		self._pattern = normalize_pattern(pattern, self._tracks, self._resolution.steps)
		self._bpm = clamp_bpm(bpm)
		self._current_step = drumbox.constants.NO_STEP
		self._is_playing = False
		self._revision = 0

		self._snapshot: typing.Optional[StateSnapshot] = None
		self.events = drumbox.event_emitter.EventEmitter()

	# ------------------------------------------------------------------
	# Reads
	# ------------------------------------------------------------------

	def get (self) -> StateSnapshot:

		"""Return an immutable snapshot of the current state."""

		if self._snapshot is None:
			self._snapshot = StateSnapshot(
				tracks = self._tracks,
				resolution = self._resolution,
				pattern = types.MappingProxyType(self._pattern),
				bpm = self._bpm,
				current_step = self._current_step,
				is_playing = self._is_playing,
				pattern_revision = self._revision,
			)

		return self._snapshot

	@property
	def steps (self) -> int:
		return self._resolution.steps

	@property
	def resolution (self) -> drumbox.timing.Resolution:
		return self._resolution

	@property
	def tracks (self) -> typing.Tuple[Track, ...]:
		return self._tracks

	@property
	def track_ids (self) -> typing.Tuple[str, ...]:
		return tuple(track.id for track in self._tracks)

	@property
	def pattern_revision (self) -> int:
		return self._revision

	@property
	def bpm (self) -> float:
		return self._bpm

	@property
	def current_step (self) -> int:
		return self._current_step

	@property
	def is_playing (self) -> bool:
		return self._is_playing

	def get_track (self, track_id: typing.Any) -> typing.Optional[Track]:

		"""Look up a track by id."""

		key = str(track_id or "").strip()

		for track in self._tracks:
			if track.id == key:
				return track

		return None

	def get_step (self, track_id: typing.Any, step_index: typing.Any) -> bool:

		"""Read one step; unknown tracks and out-of-range indices read as ``False``."""

		location = self._locate(track_id, step_index)

		if location is None:
			return False

		key, index = location

		return self._pattern[key][index]

	def has_any_active_step (self) -> bool:

		"""True if any track has at least one step on."""

		return any(any(row) for row in self._pattern.values())

	def subscribe (self, callback: typing.Callable[[ChangeKind, StateSnapshot], typing.Any], kinds: typing.Optional[typing.Iterable[ChangeKind]] = None) -> typing.Callable[[], None]:

		"""Register for change notifications and return an unsubscribe function.

		The callback receives ``(kind, snapshot)``.  Pass ``kinds`` to listen
		to a subset, e.g. ``drumbox.state.CONTENT_KINDS`` for everything that
		affects notation.
		"""

		return self.events.subscribe(callback, kinds)

	# ------------------------------------------------------------------
	# Whole-state writes
	# ------------------------------------------------------------------

	def update (self, mutator: typing.Callable[[StateDraft], typing.Any]) -> StateSnapshot:

		"""Apply an arbitrary edit to a draft copy of the state, then normalise and commit it.

		If the step count or track set changes, rows are resized by index
		rather than cleared.  The revision moves once if the pattern or the
		grid structure differs afterwards.  If the mutator raises, nothing
		is committed.
		"""

		if not callable(mutator):
			return self.get()

		draft = StateDraft(
			tracks = list(self._tracks),
			bars = self._resolution.bars,
			beats_per_bar = self._resolution.beats_per_bar,
			steps_per_beat = self._resolution.steps_per_beat,
			bpm = self._bpm,
			current_step = self._current_step,
			is_playing = self._is_playing,
			pattern = {key: list(row) for key, row in self._pattern.items()},
		)

		mutator(draft)

		tracks = normalize_tracks(draft.tracks)
		resolution = drumbox.timing.Resolution.coerce(draft.bars, draft.beats_per_bar, draft.steps_per_beat)

		self._commit(
			tracks = tracks,
			resolution = resolution,
			pattern = normalize_pattern(draft.pattern, tracks, resolution.steps),
			bpm = clamp_bpm(draft.bpm),
			current_step = clamp_step(draft.current_step, resolution.steps),
			is_playing = bool(draft.is_playing),
		)

		return self.get()

	def set (self, patch: typing.Any) -> StateSnapshot:

		"""Apply a partial change given as a mapping of field names to values.

		Accepted keys are ``tracks``, ``bars``, ``beats_per_bar``,
		``steps_per_beat``, ``bpm``, ``current_step``, ``is_playing`` and
		``pattern``.  ``steps`` is always derived, so it is ignored here, as
		are unknown keys.
		"""

		if not isinstance(patch, typing.Mapping):
			return self.get()

		ignored = [key for key in patch if key not in PATCH_KEYS]

		if ignored:
			logger.debug(f"Ignoring unknown state keys: {ignored}")

		def apply_patch (draft: StateDraft) -> None:
			for key, value in patch.items():
				if key in PATCH_KEYS:
					setattr(draft, key, value)

		return self.update(apply_patch)

	# ------------------------------------------------------------------
	# Pattern writes
	# ------------------------------------------------------------------

	def reset_pattern (self, keep_playhead: bool = False) -> StateSnapshot:

		"""Turn every step off; also clears the playhead unless ``keep_playhead`` is set."""

		self._commit(
			pattern = empty_pattern(self._tracks, self.steps),
			current_step = self._current_step if keep_playhead else drumbox.constants.NO_STEP,
			force_revision = True,
		)

		return self.get()

	def set_pattern (self, next_pattern: typing.Any, reset_playhead: bool = False) -> StateSnapshot:

		"""Replace the whole pattern.

		Rows are coerced to booleans of the current length, unknown track ids
		are dropped and missing tracks start empty.
		"""

		self._commit(
			pattern = normalize_pattern(next_pattern, self._tracks, self.steps),
			current_step = drumbox.constants.NO_STEP if reset_playhead else self._current_step,
			force_revision = True,
		)

		return self.get()

	def toggle_step (self, track_id: typing.Any, step_index: typing.Any, force_value: typing.Optional[bool] = None) -> typing.Optional[bool]:

		"""Flip one step, or force it to ``force_value``.

		Returns the stored value afterwards, or ``None`` when the track is
		unknown or the index is outside ``[0, steps)``.  Writing the value a
		step already has is a no-op and does not move the revision.
		"""

		location = self._locate(track_id, step_index)

		if location is None:
			logger.debug(f"Rejected step edit: track={track_id!r} step={step_index!r}")
			return None

		key, index = location
		row = self._pattern[key]
		value = (not row[index]) if force_value is None else bool(force_value)

		if row[index] == value:
			return value

		pattern = dict(self._pattern)
		pattern[key] = row[:index] + (value,) + row[index + 1:]

		self._commit(pattern=pattern)

		return value

	def set_step (self, track_id: typing.Any, step_index: typing.Any, value: typing.Any) -> typing.Optional[bool]:

		"""Force one step on or off; same return contract as :meth:`toggle_step`."""

		return self.toggle_step(track_id, step_index, bool(value))

	# ------------------------------------------------------------------
	# Structure writes
	# ------------------------------------------------------------------

	def set_tracks (self, tracks: typing.Any, preserve_pattern: bool = False) -> StateSnapshot:

		"""Replace the track list.

		With ``preserve_pattern`` the rows of tracks whose id survives are
		kept; otherwise every track starts empty.  Removed ids are dropped
		either way.
		"""

		next_tracks = normalize_tracks(tracks)
		source = self._pattern if preserve_pattern else {}

		self._commit(
			tracks = next_tracks,
			pattern = normalize_pattern(source, next_tracks, self.steps),
			force_revision = True,
		)

		return self.get()

	def set_resolution (self, bars: typing.Any = None, beats_per_bar: typing.Any = None, steps_per_beat: typing.Any = None) -> StateSnapshot:

		"""Change any of the resolution factors; ``None`` keeps the current value.

		Rows keep every step that still fits and grow with off steps.  The
		playhead is cleared if it falls outside the new grid.
		"""

		resolution = self._resolution.replace(bars, beats_per_bar, steps_per_beat)

		self._commit(
			resolution = resolution,
			pattern = normalize_pattern(self._pattern, self._tracks, resolution.steps),
			current_step = clamp_step(self._current_step, resolution.steps),
			force_revision = True,
		)

		return self.get()

	# ------------------------------------------------------------------
	# Cursor, tempo and transport writes
	# ------------------------------------------------------------------

	def set_current_step (self, step_index: typing.Any) -> int:

		"""Record the step the playback engine is sounding (``-1`` for none).

		This is the hot path during playback: it never touches the pattern
		or the revision.
		"""

		step = clamp_step(step_index, self.steps)

		if step != self._current_step:

			self._current_step = step

			if self._snapshot is not None:
				self._snapshot = dataclasses.replace(self._snapshot, current_step=step)

			self.events.emit(ChangeKind.PLAYHEAD, self.get())

		return step

	def set_bpm (self, bpm: typing.Any) -> float:

		"""Set the tempo, clamped to the supported range. Returns the stored value."""

		self._commit(bpm=clamp_bpm(bpm))

		return self._bpm

	def set_playing (self, is_playing: typing.Any) -> bool:

		"""Record whether the playback engine is running."""

		self._commit(is_playing=bool(is_playing))

		return self._is_playing

	# ------------------------------------------------------------------
	# Internals
	# ------------------------------------------------------------------

	def _locate (self, track_id: typing.Any, step_index: typing.Any) -> typing.Optional[typing.Tuple[str, int]]:

		"""Resolve a (track, step) address, or ``None`` if it does not exist."""

		key = str(track_id or "").strip()

		if key not in self._pattern:
			return None

		index = drumbox.timing.to_int(step_index, drumbox.constants.NO_STEP)

		if not 0 <= index < self.steps:
			return None

		return key, index

	def _commit (
		self,
		tracks: typing.Optional[typing.Tuple[Track, ...]] = None,
		resolution: typing.Optional[drumbox.timing.Resolution] = None,
		pattern: typing.Optional[typing.Dict[str, PatternRow]] = None,
		bpm: typing.Optional[float] = None,
		current_step: typing.Optional[int] = None,
		is_playing: typing.Optional[bool] = None,
		force_revision: bool = False
	) -> None:

		"""Swap in already-normalised values, bump the revision once if needed, and notify.

		Arguments left as ``None`` keep their current value.
		"""

		structure_changed = (
			(tracks is not None and tracks != self._tracks)
			or (resolution is not None and resolution != self._resolution)
		)
		content_changed = pattern is not None and pattern != self._pattern
		structural_call = force_revision and (tracks is not None or resolution is not None)

		changed: typing.List[ChangeKind] = []

		if tracks is not None:
			self._tracks = tracks

		if resolution is not None:
			self._resolution = resolution

		if pattern is not None:
			self._pattern = pattern

		if structure_changed or content_changed or force_revision:
			self._revision = (self._revision + 1) % drumbox.constants.REVISION_MODULUS
			changed.append(ChangeKind.STRUCTURE if structure_changed or structural_call else ChangeKind.PATTERN)

		if current_step is not None and current_step != self._current_step:
			self._current_step = current_step
			changed.append(ChangeKind.PLAYHEAD)

		if bpm is not None and bpm != self._bpm:
			self._bpm = bpm
			changed.append(ChangeKind.TEMPO)

		if is_playing is not None and is_playing != self._is_playing:
			self._is_playing = is_playing
			changed.append(ChangeKind.TRANSPORT)

		if not changed:
			return

		self._snapshot = None
		snapshot = self.get()

		for kind in changed:
			self.events.emit(kind, snapshot)
