import pytest

import drumbox.event_emitter


def test_on_and_emit () -> None:

	"""Listeners receive the event name followed by the emitted arguments."""

	emitter = drumbox.event_emitter.EventEmitter()
	received: list = []

	emitter.on("tick", lambda name, value: received.append((name, value)))
	emitter.emit("tick", 42)

	assert received == [("tick", 42)]


def test_wildcard_receives_every_event () -> None:

	"""Listeners registered under '*' see all events, after the targeted ones."""

	emitter = drumbox.event_emitter.EventEmitter()
	order: list = []

	emitter.on("*", lambda name: order.append(("any", name)))
	emitter.on("a", lambda name: order.append(("a", name)))

	emitter.emit("a")
	emitter.emit("b")

	assert order == [("a", "a"), ("any", "a"), ("any", "b")]


def test_off_removes_callback () -> None:

	"""off() prevents a previously registered callback from being called."""

	emitter = drumbox.event_emitter.EventEmitter()
	received: list = []

	def cb (name: str) -> None:
		received.append(name)

	emitter.on("tick", cb)
	emitter.off("tick", cb)
	emitter.emit("tick")

	assert received == []


def test_off_raises_for_unregistered_callback () -> None:

	"""off() raises ValueError when the callback was never registered."""

	emitter = drumbox.event_emitter.EventEmitter()

	with pytest.raises(ValueError, match="tick"):
		emitter.off("tick", lambda name: None)


def test_subscribe_returns_unsubscribe () -> None:

	"""subscribe() registers for several events and the returned function removes them all."""

	emitter = drumbox.event_emitter.EventEmitter()
	received: list = []

	unsubscribe = emitter.subscribe(lambda name: received.append(name), ["a", "b"])

	emitter.emit("a")
	emitter.emit("b")
	emitter.emit("c")

	assert received == ["a", "b"]
	assert emitter.listener_count() == 2

	unsubscribe()
	emitter.emit("a")

	assert received == ["a", "b"]
	assert emitter.listener_count() == 0


def test_callback_may_unsubscribe_during_emit () -> None:

	"""Removing a listener while an event is delivered does not skip the others."""

	emitter = drumbox.event_emitter.EventEmitter()
	received: list = []

	def first (name: str) -> None:
		received.append("first")
		emitter.off("tick", first)

	emitter.on("tick", first)
	emitter.on("tick", lambda name: received.append("second"))

	emitter.emit("tick")
	emitter.emit("tick")

	assert received == ["first", "second", "second"]


def test_unsubscribe_twice_is_harmless () -> None:

	"""A second call to the unsubscribe function does nothing."""

	emitter = drumbox.event_emitter.EventEmitter()
	unsubscribe = emitter.subscribe(lambda name: None, ["a", "b"])

	unsubscribe()
	unsubscribe()

	assert emitter.listener_count() == 0
