"""Editor orchestrator - wires the store to playback, notation and tempo control.

The :class:`Editor` keeps the two update cadences apart:

- Cursor ticks from the playback engine go straight to
  :meth:`PatternStore.set_current_step` and never reach the render gate.
- Pattern and structure changes reach the gate through a store
  subscription and are coalesced to one redraw per frame.

Collaborators are explicit protocols.  The playback engine is optional: if
it is missing, transport actions log a warning and do nothing, while
editing and notation keep working.

Example::

	store = drumbox.state.PatternStore()
	surface = drumbox.display.TextSurface()
	editor = drumbox.editor.Editor(store, surface, engine=my_engine)
	editor.start()
	editor.toggle_step("bd", 0)
"""

import logging
import math
import typing

import drumbox.constants
import drumbox.debounce
import drumbox.notation
import drumbox.presets
import drumbox.render_gate
import drumbox.state


logger = logging.getLogger(__name__)


@typing.runtime_checkable
class PlaybackEngine (typing.Protocol):

	"""The sound engine.  It owns wall-clock timing; the store only records what it reports."""

	@property
	def is_playing (self) -> bool:
		...

	def start (self) -> None:

		"""Begin playback. May raise if the output cannot be opened."""

		...

	def stop (self) -> None:
		...

	def set_bpm (self, bpm: float) -> None:
		...

	def set_on_step (self, callback: typing.Callable[[int], None]) -> None:

		"""Register the per-tick callback that receives the sounding step index."""

		...


class Editor:

	"""Owns one editing session: store, render gate, tempo debounce and transport."""

	def __init__ (
		self,
		store: drumbox.state.PatternStore,
		surface: typing.Optional[drumbox.render_gate.RenderSurface],
		engine: typing.Optional[PlaybackEngine] = None,
		frame_scheduler: typing.Optional[drumbox.render_gate.FrameScheduler] = None,
		display: drumbox.notation.ContinuationDisplay = drumbox.notation.ContinuationDisplay.HIDE,
		tempo_debounce: float = drumbox.constants.TEMPO_DEBOUNCE_SECONDS,
		default_preset: typing.Optional[str] = None
	) -> None:

		"""
		Parameters:
			store: The session's state.
			surface: Where notation is drawn, or ``None`` to run without notation.
			engine: Playback engine, or ``None`` to run without transport.
			frame_scheduler: Display frame source for the render gate;
				defaults to an asyncio scheduler.
			display: Continuation display policy.
			tempo_debounce: Seconds of quiet before a dragged tempo reaches
				a running engine.
			default_preset: Preset loaded by :meth:`start` when the pattern
				is empty.
		"""

		self.store = store
		self.engine = engine
		self.default_preset = default_preset

		self.gate: typing.Optional[drumbox.render_gate.RenderGate] = None

		if surface is None:
			logger.warning("No render surface - notation is disabled")
		else:
			self.gate = drumbox.render_gate.RenderGate(
				source = store,
				surface = surface,
				scheduler = frame_scheduler if frame_scheduler is not None else drumbox.render_gate.AsyncioFrameScheduler(),
				display = display,
			)

		self._send_bpm_later = drumbox.debounce.Debouncer(self._send_bpm, delay=tempo_debounce)
		self._unsubscribe = store.subscribe(self._on_content_change, drumbox.state.CONTENT_KINDS)

		if engine is not None:
			engine.set_on_step(self.on_engine_step)

	# ------------------------------------------------------------------
	# Lifecycle
	# ------------------------------------------------------------------

	def start (self) -> None:

		"""Load the default preset into an empty pattern, then schedule the first redraw."""

		preset = None

		if self.default_preset and not self.store.has_any_active_step():
			preset = self.apply_preset(self.default_preset)

		if preset is None:
			self.refresh()

		logger.info("Editor ready")

	def close (self) -> None:

		"""Stop listening to the store and drop pending frames and tempo updates."""

		self._unsubscribe()
		self._send_bpm_later.cancel()

		if self.gate is not None:
			self.gate.close()

	def refresh (self) -> None:

		"""Force a redraw on the next frame (e.g. after the surface was resized)."""

		if self.gate is None:
			return

		self.gate.invalidate()
		self._request_redraw()

	def render_now (self) -> bool:

		"""Run the render gate immediately instead of waiting for a frame."""

		if self.gate is None:
			return False

		return self.gate.flush()

	# ------------------------------------------------------------------
	# Editing
	# ------------------------------------------------------------------

	def toggle_step (self, track_id: typing.Any, step_index: typing.Any, force_value: typing.Optional[bool] = None) -> typing.Optional[bool]:

		"""Toggle a grid cell; ``None`` means the edit was rejected."""

		return self.store.toggle_step(track_id, step_index, force_value)

	def clear_pattern (self) -> None:

		"""Turn every step off and clear the playhead."""

		self.store.reset_pattern(keep_playhead=False)
		self.refresh()

	def apply_preset (self, name: str) -> typing.Optional[drumbox.presets.Preset]:

		"""Load a preset, push its tempo to the engine and redraw."""

		preset = drumbox.presets.apply(name, self.store)

		if preset is None:
			return None

		self._send_bpm(self.store.bpm)
		self.refresh()

		return preset

	def set_resolution (self, bars: typing.Any = None, beats_per_bar: typing.Any = None, steps_per_beat: typing.Any = None) -> drumbox.state.StateSnapshot:

		"""Change the grid resolution, keeping every note that still fits."""

		return self.store.set_resolution(bars, beats_per_bar, steps_per_beat)

	def set_tracks (self, tracks: typing.Any, preserve_pattern: bool = True) -> drumbox.state.StateSnapshot:

		"""Replace the track list, keeping rows for ids that survive unless told otherwise."""

		return self.store.set_tracks(tracks, preserve_pattern=preserve_pattern)

	# ------------------------------------------------------------------
	# Tempo
	# ------------------------------------------------------------------

	def input_bpm (self, value: typing.Any) -> float:

		"""Tempo control is being dragged.

		The store takes the value at once; a running engine gets it only
		after the drag pauses.  Input that is not a number is ignored.
		"""

		if not _is_number(value):
			return self.store.bpm

		bpm = self.store.set_bpm(value)

		if self.engine is not None and self.engine.is_playing:
			self._send_bpm_later(bpm)

		return bpm

	def commit_bpm (self, value: typing.Any) -> float:

		"""Tempo control was released: store and send the value immediately."""

		bpm = self.store.set_bpm(value)

		self._send_bpm_later.cancel()
		self._send_bpm(bpm)

		return bpm

	# ------------------------------------------------------------------
	# Transport
	# ------------------------------------------------------------------

	def toggle_play (self) -> bool:

		"""Start or stop playback. Returns whether playback is running afterwards."""

		if self.engine is None:
			logger.warning("No playback engine - transport is disabled")
			return False

		if self.store.is_playing:
			self.stop()
			return False

		try:
			self.engine.set_bpm(self.store.bpm)
			self.engine.start()

		except Exception as exc:
			logger.error(f"Could not start playback: {exc}")
			self._reset_transport()
			return False

		self.store.set_playing(True)
		logger.info(f"Playing at {self.store.bpm:g} BPM")

		return True

	def stop (self) -> None:

		"""Stop playback and clear the playhead."""

		if self.engine is not None:
			self.engine.stop()

		self._send_bpm_later.cancel()
		self._reset_transport()
		logger.info("Stopped")

	def on_engine_step (self, step_index: int) -> None:

		"""Per-tick callback from the engine. Updates the cursor only."""

		self.store.set_current_step(step_index)

	# ------------------------------------------------------------------
	# Internals
	# ------------------------------------------------------------------

	def _reset_transport (self) -> None:

		def stopped (draft: drumbox.state.StateDraft) -> None:
			draft.is_playing = False
			draft.current_step = drumbox.constants.NO_STEP

		self.store.update(stopped)

	def _send_bpm (self, bpm: float) -> None:

		if self.engine is None:
			return

		try:
			self.engine.set_bpm(bpm)
		except Exception as exc:
			logger.warning(f"Engine rejected tempo {bpm:g}: {exc}")

	def _on_content_change (self, kind: drumbox.state.ChangeKind, snapshot: drumbox.state.StateSnapshot) -> None:
		self._request_redraw()

	def _request_redraw (self) -> None:

		"""Queue a frame for the gate.

		Runs inside store notifications, so a scheduler that cannot queue a
		frame (e.g. no running event loop) is logged rather than raised; the
		next request or :meth:`render_now` still draws.
		"""

		if self.gate is None:
			return

		try:
			self.gate.request()
		except Exception as exc:
			logger.warning(f"Could not schedule a redraw: {exc}")


def _is_number (value: typing.Any) -> bool:

	try:
		return math.isfinite(float(value))
	except (TypeError, ValueError):
		return False
