import typing


ListenerType = typing.Callable[..., typing.Any]

WILDCARD = "*"


class EventEmitter:

	"""
	A synchronous, tagged event registry.

	Listeners receive the event name as their first argument, followed by
	whatever the emitter passes.  Listeners registered under ``"*"`` receive
	every event.
	"""

	def __init__ (self) -> None:

		"""
		Initialize an empty listener registry.
		"""

		self._listeners: typing.Dict[str, typing.List[ListenerType]] = {}


	def on (self, event_name: str, callback: ListenerType) -> None:

		"""
		Register a callback for an event name (or ``"*"`` for all events).
		"""

		self._listeners.setdefault(event_name, []).append(callback)


	def off (self, event_name: str, callback: ListenerType) -> None:

		"""
		Unregister a previously registered callback.

		Raises ``ValueError`` if the callback is not registered for the event.
		"""

		if callback not in self._listeners.get(event_name, []):
			raise ValueError(f"Callback not registered for event {event_name!r}")

		self._listeners[event_name].remove(callback)


	def subscribe (self, callback: ListenerType, event_names: typing.Optional[typing.Iterable[str]] = None) -> typing.Callable[[], None]:

		"""
		Register ``callback`` for several events at once and return a function that removes it again.

		With no ``event_names`` the callback is registered as a wildcard.
		Calling the returned function more than once is harmless.
		"""

		names = list(event_names) if event_names is not None else [WILDCARD]

		for name in names:
			self.on(name, callback)

		def unsubscribe () -> None:
			while names:
				self.off(names.pop(), callback)

		return unsubscribe


	def listener_count (self, event_name: typing.Optional[str] = None) -> int:

		"""
		Number of registered callbacks, for one event or in total.
		"""

		if event_name is not None:
			return len(self._listeners.get(event_name, []))

		return sum(len(listeners) for listeners in self._listeners.values())


	def emit (self, event_name: str, *args: typing.Any) -> None:

		"""
		Call every listener for ``event_name``, then every wildcard listener.

		The listener lists are copied first, so a callback may unsubscribe
		itself (or others) while the event is being delivered.
		"""

		targeted = list(self._listeners.get(event_name, []))
		wildcards = list(self._listeners.get(WILDCARD, [])) if event_name != WILDCARD else []

		for callback in targeted + wildcards:
			callback(event_name, *args)
