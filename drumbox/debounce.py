import asyncio
import typing

import drumbox.constants


class Debouncer:

	"""
	Trailing-edge debounce on an asyncio loop.

	Each call cancels the pending one and restarts the delay, so only the
	last call in a burst runs, ``delay`` seconds after the burst ends.  Used
	to keep rapid tempo drags from flooding the playback engine.
	"""

	def __init__ (self, fn: typing.Callable[..., typing.Any], delay: float = drumbox.constants.TEMPO_DEBOUNCE_SECONDS, loop: typing.Optional[asyncio.AbstractEventLoop] = None) -> None:

		"""
		Parameters:
			fn: The function to call.
			delay: Quiet period in seconds before ``fn`` runs.
			loop: Event loop to schedule on; defaults to the running loop at call time.
		"""

		self.fn = fn
		self.delay = max(0.0, float(delay))
		self._loop = loop
		self._handle: typing.Optional[asyncio.TimerHandle] = None
		self._args: typing.Tuple[typing.Any, ...] = ()

	@property
	def pending (self) -> bool:
		return self._handle is not None

	def __call__ (self, *args: typing.Any) -> None:

		"""Schedule ``fn(*args)``, superseding any call still waiting."""

		self.cancel()

		self._args = args
		loop = self._loop or asyncio.get_running_loop()
		self._handle = loop.call_later(self.delay, self._fire)

	def cancel (self) -> None:

		"""Drop the pending call without running it."""

		if self._handle is not None:
			self._handle.cancel()
			self._handle = None

	def flush (self) -> None:

		"""Run the pending call immediately, if there is one."""

		if self._handle is None:
			return

		self._handle.cancel()
		self._fire()

	def _fire (self) -> None:

		self._handle = None
		args = self._args
		self._args = ()

		self.fn(*args)
