"""
D-Bus 传输实现 - 基于 dbus-next 的 asyncio 消息总线。

本模块把 Transport 接口映射到 dbus-next 的低层 API：
- call()：构造 METHOD_CALL 消息，签名由各参数 Variant 的签名拼接而成
- subscribe()：注册消息处理器 + 向总线守护进程发送 AddMatch 规则
- unsubscribe()：移除处理器 + RemoveMatch
- close()：断开连接

错误回复（MessageType.ERROR）统一转换为 TransportError，携带 D-Bus 错误名。
"""

from __future__ import annotations

import asyncio
from typing import Any, Sequence

from dbus_next import BusType, Message, MessageType, Variant
from dbus_next.aio import MessageBus
from loguru import logger

from desknotify.bus.events import RawSignal
from desknotify.bus.transport import (
    NOTIFICATIONS_BUS_NAME,
    NOTIFICATIONS_INTERFACE,
    NOTIFICATIONS_OBJECT_PATH,
    SignalHandler,
    Transport,
)
from desknotify.errors import TransportError
from desknotify.protocol.marshal import signature_of

_DBUS_NAME = "org.freedesktop.DBus"
_DBUS_PATH = "/org/freedesktop/DBus"

_BUS_TYPES = {
    "session": BusType.SESSION,
    "system": BusType.SYSTEM,
}


class DBusTransport(Transport):
    """
    通过 D-Bus 连接通知服务的传输层。

    属性:
        bus: dbus-next 的 MessageBus 连接
        bus_name / object_path / interface: 通知服务在总线上的地址
        _handlers: 已订阅的处理器 → 包装后的 dbus-next 消息处理器
    """

    def __init__(
        self,
        bus: MessageBus,
        bus_name: str = NOTIFICATIONS_BUS_NAME,
        object_path: str = NOTIFICATIONS_OBJECT_PATH,
        interface: str = NOTIFICATIONS_INTERFACE,
    ):
        self.bus = bus
        self.bus_name = bus_name
        self.object_path = object_path
        self.interface = interface
        self._handlers: dict[SignalHandler, Any] = {}
        self._pending: set[asyncio.Task] = set()  # 后台撤销匹配规则的任务

    @classmethod
    async def connect(
        cls,
        bus_type: str = "session",
        address: str | None = None,
        **service: str,
    ) -> DBusTransport:
        """
        建立新的总线连接。

        参数:
            bus_type: "session" 或 "system"
            address: 显式总线地址（如 "unix:path=/run/user/1000/bus"），优先于 bus_type
            **service: 可选覆盖 bus_name / object_path / interface

        异常:
            TransportError: 连接或认证失败
        """
        if bus_type not in _BUS_TYPES:
            raise ValueError(f"Unknown bus type: {bus_type}")
        try:
            bus = await MessageBus(bus_address=address, bus_type=_BUS_TYPES[bus_type]).connect()
        except Exception as e:
            raise TransportError(f"Failed to connect to {bus_type} bus: {e}") from e
        logger.info(f"Connected to {bus_type} bus as {bus.unique_name}")
        return cls(bus, **service)

    @property
    def match_rule(self) -> str:
        """只接收通知服务接口和对象路径上的信号。"""
        return f"type='signal',interface='{self.interface}',path='{self.object_path}'"

    async def call(self, member: str, args: Sequence[Variant] = ()) -> list[Any]:
        message = Message(
            destination=self.bus_name,
            path=self.object_path,
            interface=self.interface,
            member=member,
            signature=signature_of(args),
            body=[arg.value for arg in args],
        )
        logger.debug(f"Calling {self.interface}.{member}")
        return await self._send(message)

    async def subscribe(self, handler: SignalHandler) -> None:
        if handler in self._handlers:
            return

        def on_message(msg: Message) -> None:
            if (
                msg.message_type == MessageType.SIGNAL
                and msg.interface == self.interface
                and msg.path == self.object_path
            ):
                handler(RawSignal(member=msg.member, args=list(msg.body)))

        self.bus.add_message_handler(on_message)
        self._handlers[handler] = on_message
        try:
            await self._bus_call("AddMatch", self.match_rule)
        except BaseException as e:
            self.bus.remove_message_handler(on_message)
            del self._handlers[handler]
            if not isinstance(e, TransportError):
                # 被取消时 AddMatch 可能已经发出，后台撤销该规则
                self._discard_match()
            raise
        logger.debug(f"Subscribed to signals: {self.match_rule}")

    async def unsubscribe(self, handler: SignalHandler) -> None:
        on_message = self._handlers.pop(handler, None)
        if on_message is None:
            return
        self.bus.remove_message_handler(on_message)
        if self.bus.connected:
            await self._bus_call("RemoveMatch", self.match_rule)
        logger.debug(f"Unsubscribed from signals: {self.match_rule}")

    async def close(self) -> None:
        for on_message in self._handlers.values():
            self.bus.remove_message_handler(on_message)
        self._handlers.clear()
        if self.bus.connected:
            self.bus.disconnect()
            await self.bus.wait_for_disconnect()
        logger.info("Disconnected from bus")

    def _discard_match(self) -> None:
        """在后台发送 RemoveMatch，用于撤销被取消的订阅可能留下的规则。"""
        if not self.bus.connected:
            return

        async def remove() -> None:
            try:
                await self._bus_call("RemoveMatch", self.match_rule)
            except TransportError as e:
                # 规则未注册成功时总线会返回错误，无需处理
                logger.debug(f"Discarding match rule: {e}")

        task = asyncio.ensure_future(remove())
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _bus_call(self, member: str, rule: str) -> list[Any]:
        """调用总线守护进程自身的方法（AddMatch / RemoveMatch）。"""
        message = Message(
            destination=_DBUS_NAME,
            path=_DBUS_PATH,
            interface=_DBUS_NAME,
            member=member,
            signature="s",
            body=[rule],
        )
        return await self._send(message)

    async def _send(self, message: Message) -> list[Any]:
        try:
            reply = await self.bus.call(message)
        except Exception as e:
            raise TransportError(f"{message.member} failed: {e}") from e

        if reply is None:
            return []
        if reply.message_type == MessageType.ERROR:
            text = reply.body[0] if reply.body else ""
            raise TransportError(f"{message.member} failed: {text}", error_name=reply.error_name)
        return list(reply.body)
