from __future__ import annotations

import asyncio
from typing import Callable

import pytest

from desknotify.bus.events import RawSignal
from desknotify.bus.hub import SignalHub
from desknotify.errors import SessionClosedError, TransportError
from desknotify.protocol.signals import ActionInvoked, CloseReason, NotificationClosed


async def _until(predicate: Callable[[], bool]) -> None:
    for _ in range(100):
        if predicate():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition not reached")


def test_hub_starts_idle_and_drops_signals(transport) -> None:
    async def _run() -> None:
        hub = SignalHub(transport)
        assert not hub.is_active
        assert transport.subscribe_count == 0

        async with hub.listen() as listener:
            assert hub.is_active
            handler = transport.handlers[0]
        assert not hub.is_active

        # a late delivery through a stale handler is ignored while idle
        handler(RawSignal("NotificationClosed", [1, 1]))
        assert listener._queue.empty()

    asyncio.run(_run())


def test_reactivation_opens_exactly_one_fresh_subscription(transport) -> None:
    async def _run() -> None:
        hub = SignalHub(transport)

        async with hub.listen():
            async with hub.listen():
                assert transport.subscribe_count == 1
                assert hub.listener_count == 2
            assert hub.is_active
        assert not hub.is_active
        assert transport.unsubscribe_count == 1
        assert transport.handlers == []

        async with hub.listen():
            assert transport.subscribe_count == 2
            assert len(transport.handlers) == 1

    asyncio.run(_run())


def test_signals_fan_out_to_every_listener(transport) -> None:
    async def _run() -> None:
        hub = SignalHub(transport)
        async with hub.listen() as first, hub.listen() as second:
            transport.emit("ActionInvoked", 3, "reply")
            transport.emit("NotificationClosed", 3, 2)

            expected = [ActionInvoked(3, "reply"), NotificationClosed(3, CloseReason.DISMISSED)]
            assert [await first.get(), await first.get()] == expected
            assert [await second.get(), await second.get()] == expected

    asyncio.run(_run())


def test_unrecognized_and_malformed_signals_are_dropped(transport) -> None:
    async def _run() -> None:
        hub = SignalHub(transport)
        async with hub.listen() as listener:
            transport.emit("SomethingNew", 1, 2)
            transport.emit("NotificationClosed", 1)
            transport.emit("NotificationClosed", 1, 3)

            assert await listener.get() == NotificationClosed(1, CloseReason.CLOSED)
            assert listener._queue.empty()

    asyncio.run(_run())


def test_wait_for_resolves_with_action_before_close(transport) -> None:
    async def _run() -> None:
        hub = SignalHub(transport)
        waiter = asyncio.create_task(hub.wait_for(5))
        await _until(lambda: hub.listener_count == 1)

        transport.emit("NotificationClosed", 4, 1)
        transport.emit("ActionInvoked", 5, "x")
        transport.emit("NotificationClosed", 5, 2)

        assert await waiter == ActionInvoked(5, "x")
        assert hub.listener_count == 0
        assert not hub.is_active

    asyncio.run(_run())


def test_cancelled_wait_only_detaches_itself(transport) -> None:
    async def _run() -> None:
        hub = SignalHub(transport)
        abandoned = asyncio.create_task(hub.wait_for(1))
        kept = asyncio.create_task(hub.wait_for(2))
        await _until(lambda: hub.listener_count == 2)

        abandoned.cancel()
        with pytest.raises(asyncio.CancelledError):
            await abandoned
        assert hub.listener_count == 1
        assert hub.is_active
        assert transport.unsubscribe_count == 0

        transport.emit("NotificationClosed", 2, 1)
        assert await kept == NotificationClosed(2, CloseReason.EXPIRED)
        assert transport.unsubscribe_count == 1

    asyncio.run(_run())


def test_close_wakes_listeners_and_rejects_new_ones(transport) -> None:
    async def _run() -> None:
        hub = SignalHub(transport)
        waiter = asyncio.create_task(hub.wait_for(1))
        await _until(lambda: hub.listener_count == 1)

        await hub.close()

        with pytest.raises(SessionClosedError):
            await waiter
        assert hub.is_closed
        assert not hub.is_active
        assert transport.handlers == []

        with pytest.raises(SessionClosedError):
            async with hub.listen():
                pass

        await hub.close()
        assert transport.unsubscribe_count == 1

    asyncio.run(_run())


def test_listener_iteration_stops_when_hub_closes(transport) -> None:
    async def _run() -> None:
        hub = SignalHub(transport)
        seen = []

        async def consume() -> None:
            async with hub.listen() as listener:
                async for signal in listener:
                    seen.append(signal)

        consumer = asyncio.create_task(consume())
        await _until(lambda: hub.listener_count == 1)
        transport.emit("ActionInvoked", 8, "default")
        await _until(lambda: len(seen) == 1)
        await hub.close()
        await consumer

        assert seen == [ActionInvoked(8, "default")]

    asyncio.run(_run())


def test_failed_subscription_leaves_hub_idle(transport) -> None:
    async def _run() -> None:
        hub = SignalHub(transport)
        transport.failures["subscribe"] = TransportError("no bus")

        with pytest.raises(TransportError):
            async with hub.listen():
                pass
        assert not hub.is_active
        assert hub.listener_count == 0

        del transport.failures["subscribe"]
        async with hub.listen():
            assert hub.is_active

    asyncio.run(_run())
