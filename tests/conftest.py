from __future__ import annotations

from typing import Any, Sequence

import pytest
from dbus_next import Variant

from desknotify.bus.events import RawSignal
from desknotify.bus.transport import SignalHandler, Transport


class StubTransport(Transport):
    """Records method calls and lets tests inject raw signals."""

    def __init__(
        self,
        capabilities: Sequence[str] = ("body", "sound"),
        server_info: Sequence[str] = ("stubd", "tests", "1.0", "1.2"),
    ) -> None:
        self.capabilities = list(capabilities)
        self.server_info = list(server_info)
        self.calls: list[tuple[str, list[Variant]]] = []
        self.handlers: list[SignalHandler] = []
        self.subscribe_count = 0
        self.unsubscribe_count = 0
        self.failures: dict[str, Exception] = {}
        self.closed = False
        self.next_id = 41

    async def call(self, member: str, args: Sequence[Variant] = ()) -> list[Any]:
        self.calls.append((member, list(args)))
        if member in self.failures:
            raise self.failures[member]
        if member == "GetCapabilities":
            return [list(self.capabilities)]
        if member == "GetServerInformation":
            return list(self.server_info)
        if member == "Notify":
            self.next_id += 1
            return [self.next_id]
        return []

    async def subscribe(self, handler: SignalHandler) -> None:
        if "subscribe" in self.failures:
            raise self.failures["subscribe"]
        self.subscribe_count += 1
        self.handlers.append(handler)

    async def unsubscribe(self, handler: SignalHandler) -> None:
        self.unsubscribe_count += 1
        self.handlers.remove(handler)

    async def close(self) -> None:
        self.closed = True

    def emit(self, member: str, *args: Any) -> None:
        for handler in list(self.handlers):
            handler(RawSignal(member, list(args)))

    def calls_to(self, member: str) -> list[list[Variant]]:
        return [args for name, args in self.calls if name == member]


@pytest.fixture
def transport() -> StubTransport:
    return StubTransport()
