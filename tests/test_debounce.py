import asyncio

import pytest

import drumbox.debounce


@pytest.mark.asyncio
async def test_only_last_call_in_burst_runs () -> None:

	"""A burst of calls collapses into one call with the final arguments."""

	calls: list = []
	debounced = drumbox.debounce.Debouncer(calls.append, delay=0.02)

	for value in (100, 110, 120):
		debounced(value)

	assert debounced.pending
	assert calls == []

	await asyncio.sleep(0.08)

	assert calls == [120]
	assert not debounced.pending


@pytest.mark.asyncio
async def test_cancel_drops_pending_call () -> None:

	"""cancel() discards the waiting call."""

	calls: list = []
	debounced = drumbox.debounce.Debouncer(calls.append, delay=0.02)

	debounced(100)
	debounced.cancel()

	await asyncio.sleep(0.05)

	assert calls == []


@pytest.mark.asyncio
async def test_flush_runs_immediately () -> None:

	"""flush() runs the waiting call now, and only once."""

	calls: list = []
	debounced = drumbox.debounce.Debouncer(calls.append, delay=0.02)

	debounced(140)
	debounced.flush()

	assert calls == [140]

	await asyncio.sleep(0.05)
	debounced.flush()

	assert calls == [140]


@pytest.mark.asyncio
async def test_separate_bursts_each_fire () -> None:

	"""Calls separated by more than the delay both run."""

	calls: list = []
	debounced = drumbox.debounce.Debouncer(calls.append, delay=0.01)

	debounced(1)
	await asyncio.sleep(0.05)
	debounced(2)
	await asyncio.sleep(0.05)

	assert calls == [1, 2]


def test_negative_delay_is_clamped () -> None:

	"""A negative delay is treated as zero."""

	assert drumbox.debounce.Debouncer(print, delay=-1).delay == 0.0
