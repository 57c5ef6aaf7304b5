"""
通知会话 - desknotify 对外的主要入口。

Notifications 负责编排：
1. 打开会话：创建（或借用）传输层连接，并在返回前完成能力协商
2. 方法调用：Notify / CloseNotification / GetServerInformation / GetCapabilities
3. 信号：通过 SignalHub 提供共享的信号流和按通知 ID 的等待
4. 关闭会话：关闭信号分发器；仅当连接由会话自己创建时才关闭连接

【连接所有权】
- open() 未传入 transport：会话自行连接 D-Bus，并在 close() 时断开
- open() 传入 transport：会话只是借用，close() 不会关闭调用方的连接

用法:
    async with await Notifications.open() as n:
        notification_id, signal = await n.notify_and_wait(Notification(summary="Hello"))
"""

from __future__ import annotations

from typing import Any

from dbus_next import Variant
from loguru import logger

from desknotify.bus.hub import SignalHub, SignalListener
from desknotify.bus.transport import Transport
from desknotify.config.schema import Config
from desknotify.errors import ProtocolError, SessionClosedError
from desknotify.protocol.capabilities import Capability, parse_capabilities
from desknotify.protocol.marshal import marshal_notification
from desknotify.protocol.signals import NotificationSignal
from desknotify.protocol.types import Notification, ServerInformation


class Notifications:
    """
    与通知服务器的一个会话。

    不要直接构造，使用 `await Notifications.open()`。

    属性:
        transport: 传输层连接
        hub: 信号分发器
        _owns_transport: 连接是否由本会话创建（决定 close() 是否关闭连接）
        _capabilities: 已协商的服务器能力，打开会话时填充
        _closed: 会话是否已关闭
    """

    def __init__(self, transport: Transport, owns_transport: bool):
        self.transport = transport
        self.hub = SignalHub(transport)
        self._owns_transport = owns_transport
        self._capabilities: set[Capability] = set()
        self._closed = False

    @classmethod
    async def open(
        cls,
        transport: Transport | None = None,
        config: Config | None = None,
    ) -> Notifications:
        """
        打开会话并完成能力协商。

        参数:
            transport: 调用方已有的连接（借用）；为 None 时按 config 新建 D-Bus 连接
            config: 新建连接时使用的配置，为 None 时使用默认配置

        返回:
            已就绪的会话

        异常:
            TransportError: 连接失败或 GetCapabilities 调用失败
        """
        owns_transport = transport is None
        if transport is None:
            from desknotify.bus.dbus import DBusTransport

            config = config or Config()
            transport = await DBusTransport.connect(
                bus_type=config.bus.type,
                address=config.bus.address,
                bus_name=config.service.bus_name,
                object_path=config.service.object_path,
                interface=config.service.interface,
            )

        session = cls(transport, owns_transport)
        try:
            await session.refresh_capabilities()
        except BaseException:
            if owns_transport:
                await transport.close()
            raise
        logger.info(f"Notification session opened, capabilities: {sorted(c.value for c in session.capabilities)}")
        return session

    async def __aenter__(self) -> Notifications:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    @property
    def capabilities(self) -> frozenset[Capability]:
        """当前协商得到的服务器能力。"""
        self._check_open()
        return frozenset(self._capabilities)

    @property
    def owns_transport(self) -> bool:
        return self._owns_transport

    @property
    def is_closed(self) -> bool:
        return self._closed

    def has_capability(self, capability: Capability) -> bool:
        self._check_open()
        return capability in self._capabilities

    async def refresh_capabilities(self) -> set[Capability]:
        """清空并重新查询服务器能力。"""
        self._check_open()
        self._capabilities.clear()
        reply = await self.transport.call("GetCapabilities")
        names = reply[0] if reply else []
        self._capabilities.update(parse_capabilities(names))
        return set(self._capabilities)

    async def notify(self, notification: Notification) -> int:
        """
        发送（或替换）一条通知。

        返回:
            服务器分配的通知 ID
        """
        self._check_open()
        reply = await self.transport.call("Notify", marshal_notification(notification))
        if not reply or not isinstance(reply[0], int):
            raise ProtocolError(f"Malformed Notify reply: {reply!r}")
        notification_id = reply[0]
        logger.debug(f"Notification {notification_id} sent: {notification.summary!r}")
        return notification_id

    async def close_notification(self, notification_id: int) -> None:
        """让服务器关闭指定通知（之后会收到 reason=CLOSED 的 NotificationClosed）。"""
        self._check_open()
        await self.transport.call("CloseNotification", [Variant("u", notification_id)])

    async def get_server_information(self) -> ServerInformation:
        self._check_open()
        reply = await self.transport.call("GetServerInformation")
        return ServerInformation.from_reply(reply)

    def listen(self) -> SignalListener:
        """
        订阅本会话的信号流，需配合 `async with` 使用。

        用法:
            async with n.listen() as signals:
                async for signal in signals:
                    ...
        """
        self._check_open()
        return self.hub.listen()

    async def wait_closed(self, notification_id: int) -> NotificationSignal:
        """
        等待指定通知被关闭。

        通知因用户触发动作而关闭时返回 ActionInvoked，其他情况返回 NotificationClosed。
        这依赖服务器先发 ActionInvoked 再发 NotificationClosed 的惯例。

        注意：只有在调用本方法之后到达的信号才会被看到。
        如需避免发送与等待之间的竞争，请使用 notify_and_wait()。
        """
        self._check_open()
        return await self.hub.wait_for(notification_id)

    async def notify_and_wait(self, notification: Notification) -> tuple[int, NotificationSignal]:
        """
        先挂载监听者再发送通知，然后等待它被关闭。

        返回:
            (通知 ID, 关闭信号) 元组
        """
        async with self.listen() as listener:
            notification_id = await self.notify(notification)
            return notification_id, await listener.wait_for(notification_id)

    async def close(self) -> None:
        """关闭会话。仅当连接由会话创建时才关闭连接；重复调用无副作用。"""
        if self._closed:
            return
        self._closed = True
        await self.hub.close()
        if self._owns_transport:
            await self.transport.close()
        logger.info("Notification session closed")

    def _check_open(self) -> None:
        if self._closed:
            raise SessionClosedError("Notification session is closed")
