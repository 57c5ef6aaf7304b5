from __future__ import annotations

import asyncio
from typing import Callable

import pytest
from dbus_next import Variant

from desknotify.errors import ProtocolError, SessionClosedError, TransportError
from desknotify.protocol.capabilities import Capability
from desknotify.protocol.signals import ActionInvoked, CloseReason, NotificationClosed
from desknotify.protocol.types import Action, Notification, ServerInformation
from desknotify.session.notifications import Notifications


async def _until(predicate: Callable[[], bool]) -> None:
    for _ in range(100):
        if predicate():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition not reached")


def test_round_trip_against_stub_transport(transport) -> None:
    async def _run() -> None:
        n = await Notifications.open(transport)
        assert n.capabilities == {Capability.BODY, Capability.SOUND}

        notification_id = await n.notify(Notification(summary="Hello"))
        sent = transport.calls_to("Notify")[0]
        assert [v.value for v in sent] == ["", 0, "", "Hello", "", [], {}, -1]

        waiter = asyncio.create_task(n.wait_closed(notification_id))
        await _until(lambda: n.hub.listener_count == 1)
        transport.emit("NotificationClosed", notification_id, 1)

        assert await waiter == NotificationClosed(notification_id, CloseReason.EXPIRED)
        await n.close()

    asyncio.run(_run())


def test_open_fails_when_capability_query_fails(transport) -> None:
    transport.failures["GetCapabilities"] = TransportError("rejected", "org.freedesktop.DBus.Error.Failed")

    with pytest.raises(TransportError) as excinfo:
        asyncio.run(Notifications.open(transport))
    assert excinfo.value.error_name == "org.freedesktop.DBus.Error.Failed"
    # borrowed transport is left alone
    assert not transport.closed


def test_capabilities_are_replaced_on_refresh(transport) -> None:
    async def _run() -> None:
        n = await Notifications.open(transport)
        assert n.has_capability(Capability.SOUND)

        transport.capabilities = ["actions", "x-kde-urls"]
        assert await n.refresh_capabilities() == {Capability.ACTIONS}
        assert n.capabilities == {Capability.ACTIONS}
        assert not n.has_capability(Capability.SOUND)

    asyncio.run(_run())


def test_server_information_is_parsed_positionally(transport) -> None:
    async def _run() -> None:
        n = await Notifications.open(transport)
        assert await n.get_server_information() == ServerInformation("stubd", "tests", "1.0", "1.2")

        transport.server_info = ["stubd", "tests"]
        with pytest.raises(ProtocolError):
            await n.get_server_information()

    asyncio.run(_run())


def test_close_notification_sends_uint32_id(transport) -> None:
    async def _run() -> None:
        n = await Notifications.open(transport)
        await n.close_notification(12)
        assert transport.calls_to("CloseNotification") == [[Variant("u", 12)]]

    asyncio.run(_run())


def test_notify_and_wait_listens_before_sending(transport) -> None:
    async def _run() -> None:
        n = await Notifications.open(transport)
        notification = Notification(summary="Pick one", actions=[Action("yes", "Yes")])

        async def answer() -> None:
            await _until(lambda: transport.calls_to("Notify"))
            transport.emit("ActionInvoked", transport.next_id, "yes")
            transport.emit("NotificationClosed", transport.next_id, 2)

        responder = asyncio.create_task(answer())
        notification_id, signal = await n.notify_and_wait(notification)
        await responder

        assert signal == ActionInvoked(notification_id, "yes")
        assert n.hub.listener_count == 0

    asyncio.run(_run())


def test_transport_errors_surface_to_the_caller(transport) -> None:
    async def _run() -> None:
        n = await Notifications.open(transport)
        transport.failures["Notify"] = TransportError("connection lost")
        with pytest.raises(TransportError):
            await n.notify(Notification(summary="s"))
        assert len(transport.calls_to("Notify")) == 1

    asyncio.run(_run())


def test_borrowed_transport_survives_close(transport) -> None:
    async def _run() -> None:
        n = await Notifications.open(transport)
        assert not n.owns_transport
        await n.close()
        assert n.is_closed
        assert not transport.closed

    asyncio.run(_run())


def test_owned_transport_is_closed_once(transport) -> None:
    async def _run() -> None:
        async with Notifications(transport, owns_transport=True) as n:
            await n.refresh_capabilities()
        assert transport.closed

        transport.closed = False
        await n.close()
        assert not transport.closed

    asyncio.run(_run())


def test_closed_session_fails_fast(transport) -> None:
    async def _run() -> None:
        n = await Notifications.open(transport)
        waiter = asyncio.create_task(n.wait_closed(3))
        await _until(lambda: n.hub.listener_count == 1)
        await n.close()

        with pytest.raises(SessionClosedError):
            await waiter
        with pytest.raises(SessionClosedError):
            await n.notify(Notification(summary="late"))
        with pytest.raises(SessionClosedError):
            await n.close_notification(1)
        with pytest.raises(SessionClosedError):
            await n.get_server_information()
        with pytest.raises(SessionClosedError):
            await n.wait_closed(1)
        with pytest.raises(SessionClosedError):
            n.listen()
        with pytest.raises(SessionClosedError):
            n.capabilities
        with pytest.raises(SessionClosedError):
            n.has_capability(Capability.BODY)
        with pytest.raises(SessionClosedError):
            await n.refresh_capabilities()

    asyncio.run(_run())
