import typing

import pytest

import drumbox.state


class ManualFrameScheduler:

	"""Frame scheduler stub that only advances when the test says so."""

	def __init__ (self) -> None:

		"""Start with no frame queued."""

		self.callback: typing.Optional[typing.Callable[[], None]] = None
		self.requests = 0

	def request_frame (self, callback: typing.Callable[[], None]) -> None:

		"""Remember the callback for the next frame."""

		self.requests += 1
		self.callback = callback

	def cancel (self) -> None:

		"""Forget the queued frame."""

		self.callback = None

	def run_frame (self) -> None:

		"""Fire the queued frame, if any."""

		callback = self.callback
		self.callback = None

		if callback is not None:
			callback()


class RecordingSurface:

	"""Render surface stub that keeps every draw call."""

	def __init__ (self) -> None:

		"""Start with no draws."""

		self.calls: typing.List[typing.Tuple[typing.Dict[str, typing.Any], typing.Any]] = []

	def draw (self, events_by_track: typing.Dict[str, typing.Any], snapshot: typing.Any) -> None:

		"""Record the events and snapshot."""

		self.calls.append((events_by_track, snapshot))


class FakeEngine:

	"""Playback engine stub."""

	def __init__ (self, fail_start: bool = False) -> None:

		"""Optionally make start() raise."""

		self.fail_start = fail_start
		self.bpm_calls: typing.List[float] = []
		self.on_step: typing.Optional[typing.Callable[[int], None]] = None
		self._playing = False

	@property
	def is_playing (self) -> bool:
		return self._playing

	def start (self) -> None:

		"""Start, or raise if configured to fail."""

		if self.fail_start:
			raise RuntimeError("audio device unavailable")

		self._playing = True

	def stop (self) -> None:

		"""Stop."""

		self._playing = False

	def set_bpm (self, bpm: float) -> None:

		"""Record the tempo."""

		self.bpm_calls.append(bpm)

	def set_on_step (self, callback: typing.Callable[[int], None]) -> None:

		"""Keep the per-tick callback."""

		self.on_step = callback

	def tick (self, step: int) -> None:

		"""Simulate the engine reaching ``step``."""

		if self.on_step is not None:
			self.on_step(step)


@pytest.fixture
def store () -> drumbox.state.PatternStore:

	"""A default store: 16 steps, hi-hat / snare / kick, empty pattern."""

	return drumbox.state.PatternStore()


@pytest.fixture
def scheduler () -> ManualFrameScheduler:

	"""A frame scheduler the test advances by hand."""

	return ManualFrameScheduler()


@pytest.fixture
def surface () -> RecordingSurface:

	"""A surface that records draw calls."""

	return RecordingSurface()


@pytest.fixture
def engine () -> FakeEngine:

	"""A playback engine that always starts."""

	return FakeEngine()
