"""
信号分发器 - 把传输层的一路原始信号解码后扇出给任意多个监听者。

本模块实现了 SignalHub 和 SignalListener：

  传输层 → RawSignal → decode_signal() → SignalHub → 每个 SignalListener 的队列

【核心设计：引用计数的惰性订阅】
- Idle：没有监听者，也没有外部订阅（初始状态）
- Active：至少一个监听者，外部订阅已开启
- 第一个监听者 attach 时开启外部订阅；最后一个 detach 时撤销订阅，回到 Idle
- attach/detach 的状态切换由 asyncio.Lock 串行化，订阅调用本身是异步的

【投递语义】
- 扇出（fan-out）：每个已挂载的监听者都收到每一条信号，而非单消费者队列
- 投递时对监听者列表取快照，detach 与投递交错时不会影响仍挂载的监听者
- 未识别的信号直接丢弃；格式错误的信号记录警告后丢弃，不影响其他信号

【Java 开发者类比】
- SignalHub 类似于 RxJava 的 share()/refCount() 组合
- SignalListener 类似于每个订阅者独占的 LinkedBlockingQueue
"""

from __future__ import annotations

import asyncio
from typing import Any

from loguru import logger

from desknotify.bus.events import RawSignal
from desknotify.bus.transport import Transport
from desknotify.errors import MalformedSignalError, SessionClosedError
from desknotify.protocol.signals import NotificationSignal, decode_signal

# 分发器关闭时投递给每个监听者的结束标记
_CLOSED: Any = object()


class SignalListener:
    """
    SignalHub 的一个监听者。

    通过 `async with hub.listen() as listener` 挂载，退出上下文时自动卸载。
    挂载期间收到的信号在内部队列中排队，不会丢失。

    用法:
        async with hub.listen() as listener:
            async for signal in listener:
                ...
    """

    def __init__(self, hub: SignalHub):
        self._hub = hub
        self._queue: asyncio.Queue[NotificationSignal] = asyncio.Queue()
        self._closed = False

    async def __aenter__(self) -> SignalListener:
        await self._hub.attach(self)
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self._hub.detach(self)

    def __aiter__(self) -> SignalListener:
        return self

    async def __anext__(self) -> NotificationSignal:
        try:
            return await self.get()
        except SessionClosedError:
            raise StopAsyncIteration from None

    async def get(self) -> NotificationSignal:
        """
        等待下一条信号。

        异常:
            SessionClosedError: 分发器已关闭
        """
        if self._closed:
            raise SessionClosedError("Signal hub is closed")
        item = await self._queue.get()
        if item is _CLOSED:
            self._closed = True
            raise SessionClosedError("Signal hub is closed")
        return item

    async def wait_for(self, notification_id: int) -> NotificationSignal:
        """
        等待第一条属于指定通知的信号（NotificationClosed 或 ActionInvoked）。

        本方法不设超时，需要限时等待的调用方请自行包裹 asyncio.wait_for()。

        注意：通知因触发动作而关闭时，服务器按惯例先发 ActionInvoked、再发
        NotificationClosed，因此这里会返回 ActionInvoked。这一顺序是协议惯例，
        本方法无法强制保证。

        参数:
            notification_id: Notify 返回的通知 ID

        返回:
            第一条匹配的信号

        异常:
            SessionClosedError: 等待期间分发器被关闭
        """
        while True:
            signal = await self.get()
            if signal.notification_id == notification_id:
                return signal

    def _deliver(self, item: Any) -> None:
        self._queue.put_nowait(item)


class SignalHub:
    """
    信号分发器 - 维护对传输层的唯一订阅，并把解码后的信号扇出给所有监听者。

    属性:
        transport: 提供原始信号的传输层
        _listeners: 当前挂载的监听者列表
        _subscribed: 外部订阅是否开启（Active 状态）
        _lock: 串行化 attach/detach 的状态切换
        _closed: 分发器是否已关闭
    """

    def __init__(self, transport: Transport):
        self.transport = transport
        self._listeners: list[SignalListener] = []
        self._subscribed = False
        self._lock = asyncio.Lock()
        self._closed = False

    @property
    def is_active(self) -> bool:
        """外部订阅是否开启。"""
        return self._subscribed

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    @property
    def is_closed(self) -> bool:
        return self._closed

    def listen(self) -> SignalListener:
        """创建一个新的监听者，需配合 `async with` 使用。"""
        return SignalListener(self)

    async def wait_for(self, notification_id: int) -> NotificationSignal:
        """挂载一个临时监听者，等待第一条匹配的信号后卸载。详见 SignalListener.wait_for。"""
        async with self.listen() as listener:
            return await listener.wait_for(notification_id)

    async def attach(self, listener: SignalListener) -> None:
        """
        挂载监听者。第一个监听者挂载时开启外部订阅。

        异常:
            SessionClosedError: 分发器已关闭
            TransportError: 开启外部订阅失败（此时状态保持 Idle）
        """
        async with self._lock:
            if self._closed:
                raise SessionClosedError("Signal hub is closed")
            if not self._subscribed:
                await self.transport.subscribe(self._on_raw_signal)
                self._subscribed = True
                logger.debug("Signal hub active")
            self._listeners.append(listener)

    async def detach(self, listener: SignalListener) -> None:
        """卸载监听者。最后一个监听者卸载时撤销外部订阅。"""
        async with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)
            if not self._listeners and self._subscribed:
                await self._release()

    async def close(self) -> None:
        """
        关闭分发器：唤醒所有监听者并撤销外部订阅。

        之后的 attach 会抛出 SessionClosedError；重复调用无副作用。
        """
        async with self._lock:
            if self._closed:
                return
            self._closed = True
            for listener in self._listeners:
                listener._deliver(_CLOSED)
            self._listeners.clear()
            if self._subscribed:
                await self._release()

    async def _release(self) -> None:
        self._subscribed = False
        try:
            await self.transport.unsubscribe(self._on_raw_signal)
        except Exception as e:
            # 连接已断开时撤销订阅可能失败，状态仍回到 Idle
            logger.warning(f"Failed to release signal subscription: {e}")
        logger.debug("Signal hub idle")

    def _on_raw_signal(self, raw: RawSignal) -> None:
        """传输层回调：解码并扇出。Idle 状态下收到的信号一律丢弃。"""
        if not self._subscribed:
            return
        try:
            signal = decode_signal(raw.member, raw.args)
        except MalformedSignalError as e:
            logger.warning(f"Dropping signal: {e}")
            return
        if signal is None:
            return
        for listener in list(self._listeners):
            listener._deliver(signal)
