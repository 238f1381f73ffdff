"""Render gate - decides when notation must be re-transcribed and redrawn.

Playback moves the cursor many times per second, and none of that should
cost a transcription.  The gate watches a change token instead:

- **Revision mode** (:class:`RevisionDetector`) compares the store's
  ``pattern_revision`` with the last value drawn.
- **Signature mode** (:class:`SignatureDetector`) is for state sources that
  do not expose a revision.  It builds a string from the tracks, their
  active step indices and the grid shape.

The detector is chosen once, when the gate is built (see
:func:`detector_for`).

Redraw requests are coalesced to at most one per display frame.  The
policy is trailing-edge: :meth:`RenderGate.request` only marks a frame as
wanted, and when the frame fires the gate reads the *latest* state.  Any
number of edits inside one frame produce one transcription.

Example::

	gate = drumbox.render_gate.RenderGate(store, surface, scheduler)
	store.subscribe(lambda kind, snap: gate.request(), drumbox.state.CONTENT_KINDS)
"""

import asyncio
import logging
import typing

import drumbox.constants
import drumbox.notation

if typing.TYPE_CHECKING:
	from drumbox.state import StateSnapshot


logger = logging.getLogger(__name__)


EventsByTrack = typing.Dict[str, typing.Tuple[drumbox.notation.NotationEvent, ...]]


@typing.runtime_checkable
class StateSource (typing.Protocol):

	"""Anything the gate can read a state snapshot from."""

	def get (self) -> typing.Any:

		"""Return the current state."""

		...


@typing.runtime_checkable
class RenderSurface (typing.Protocol):

	"""A drawing target for notation events."""

	def draw (self, events_by_track: EventsByTrack, snapshot: typing.Any) -> None:

		"""Replace whatever is shown with these events."""

		...


@typing.runtime_checkable
class FrameScheduler (typing.Protocol):

	"""Runs a callback on the next display frame."""

	def request_frame (self, callback: typing.Callable[[], None]) -> None:

		"""Arrange for ``callback`` to run once on the next frame."""

		...

	def cancel (self) -> None:

		"""Drop any frame that has been requested but not run."""

		...


class ChangeDetector (typing.Protocol):

	"""Produces a token that changes whenever the notation would change."""

	def token (self, snapshot: typing.Any) -> typing.Hashable:
		...


class RevisionDetector:

	"""Uses the store's pattern revision counter as the change token."""

	def token (self, snapshot: typing.Any) -> typing.Hashable:
		return snapshot.pattern_revision


class SignatureDetector:

	"""Builds a content signature for sources that have no revision counter.

	The signature lists each track's id, label and active step indices, in
	track order, followed by the grid shape, e.g.
	``"hh/Hi-hat:0,2,|sn/Snare:4,|grid:1x4x4"``.  Track edits and resolution
	changes that keep the step count therefore still change it.
	"""

	def token (self, snapshot: typing.Any) -> typing.Hashable:
		return pattern_signature(snapshot)


def pattern_signature (snapshot: typing.Any) -> str:

	"""Deterministic signature of a snapshot's pattern, tracks and grid shape.

	Sources without a ``resolution`` contribute their step count instead,
	and sources without ``tracks`` fall back to the pattern's keys.
	"""

	pattern = getattr(snapshot, "pattern", {}) or {}
	tracks = getattr(snapshot, "tracks", None)
	resolution = getattr(snapshot, "resolution", None)

	if resolution is not None:
		steps = resolution.steps
		grid = f"grid:{resolution.bars}x{resolution.beats_per_bar}x{resolution.steps_per_beat}"
	else:
		steps = int(getattr(snapshot, "steps", drumbox.constants.DEFAULT_STEPS))
		grid = f"steps:{steps}"

	if tracks is not None:
		keys = [(track.id, f"{track.id}/{track.label}") for track in tracks]
	else:
		keys = [(track_id, track_id) for track_id in pattern]

	parts: typing.List[str] = []

	for track_id, name in keys:
		row = pattern.get(track_id, ())
		packed = "".join(f"{i}," for i in range(min(steps, len(row))) if row[i])
		parts.append(f"{name}:{packed}")

	parts.append(grid)

	return "|".join(parts)


def detector_for (source: typing.Any) -> ChangeDetector:

	"""Pick revision mode when ``source`` exposes ``pattern_revision``, signature mode otherwise."""

	if hasattr(source, "pattern_revision"):
		return RevisionDetector()

	return SignatureDetector()


class AsyncioFrameScheduler:

	"""
	Frame scheduler driven by an asyncio event loop.

	The first request in a frame schedules one callback ``1 / frame_rate``
	seconds ahead; further requests before it fires are absorbed.  The most
	recently requested callback is the one that runs.
	"""

	def __init__ (self, frame_rate: float = drumbox.constants.FRAME_RATE, loop: typing.Optional[asyncio.AbstractEventLoop] = None) -> None:

		"""
		Parameters:
			frame_rate: Frames per second.
			loop: Event loop to schedule on; defaults to the running loop at request time.
		"""

		self.frame_interval = 1.0 / max(1.0, float(frame_rate))
		self._loop = loop
		self._handle: typing.Optional[asyncio.TimerHandle] = None
		self._callback: typing.Optional[typing.Callable[[], None]] = None

	@property
	def pending (self) -> bool:
		return self._handle is not None

	def request_frame (self, callback: typing.Callable[[], None]) -> None:

		"""Queue ``callback`` for the next frame, replacing any callback already queued."""

		self._callback = callback

		if self._handle is not None:
			return

		loop = self._loop or asyncio.get_running_loop()
		self._handle = loop.call_later(self.frame_interval, self._run)

	def cancel (self) -> None:

		"""Drop the queued frame, if any."""

		if self._handle is not None:
			self._handle.cancel()

		self._handle = None
		self._callback = None

	def _run (self) -> None:

		callback = self._callback
		self._handle = None
		self._callback = None

		if callback is not None:
			callback()


class RenderGate:

	"""Coalesces redraw requests and only transcribes when the pattern changed."""

	def __init__ (
		self,
		source: StateSource,
		surface: RenderSurface,
		scheduler: FrameScheduler,
		detector: typing.Optional[ChangeDetector] = None,
		display: drumbox.notation.ContinuationDisplay = drumbox.notation.ContinuationDisplay.HIDE
	) -> None:

		"""
		Parameters:
			source: Where to read state from (usually a ``PatternStore``).
			surface: Receives the events to draw.
			scheduler: Provides display frames.
			detector: Change detection strategy; chosen from ``source``
				when omitted.
			display: Continuation display policy applied before drawing.
		"""

		self.source = source
		self.surface = surface
		self.scheduler = scheduler
		self.detector = detector if detector is not None else detector_for(source)
		self.display = display

		self.transcriptions = 0
		self._last_token: typing.Optional[typing.Hashable] = None
		self._has_drawn = False
		self._pending = False

	@property
	def pending (self) -> bool:
		return self._pending

	def request (self) -> None:

		"""Ask for a redraw check on the next frame. Repeated calls inside one frame collapse into one.

		If the scheduler raises, the error propagates and the gate is left
		without a pending frame, so a later request can try again.
		"""

		if self._pending:
			return

		self._pending = True

		try:
			self.scheduler.request_frame(self._on_frame)
		except Exception:
			self._pending = False
			raise

	def invalidate (self) -> None:

		"""Forget the last drawn token so the next frame redraws even if nothing changed."""

		self._last_token = None
		self._has_drawn = False

	def close (self) -> None:

		"""Cancel any queued frame; the gate can still be flushed by hand afterwards."""

		self._pending = False
		self.scheduler.cancel()

	def flush (self) -> bool:

		"""Run the check now instead of waiting for the frame. Returns True if it redrew."""

		self._pending = False

		return self._check()

	def _on_frame (self) -> None:

		if not self._pending:
			return

		self._pending = False
		self._check()

	def _check (self) -> bool:

		"""Compare tokens and redraw when they differ."""

		snapshot = self.source.get()
		token = self.detector.token(snapshot)

		if self._has_drawn and token == self._last_token:
			return False

		self._last_token = token
		self._has_drawn = True
		self.render(snapshot)

		return True

	def render (self, snapshot: "StateSnapshot") -> EventsByTrack:

		"""Transcribe ``snapshot`` and hand the result to the surface, unconditionally."""

		self.transcriptions += 1

		events_by_track = {
			track_id: drumbox.notation.present(events, self.display)
			for track_id, events in drumbox.notation.transcribe_pattern(snapshot).items()
		}

		self.surface.draw(events_by_track, snapshot)

		logger.debug(f"Notation redrawn ({self.transcriptions} transcriptions)")

		return events_by_track
