"""
传输层抽象 - 通知会话与消息总线之间的窄接口。

会话只依赖以下能力：
- call()：发送一个带类型参数的方法调用并等待回复
- subscribe() / unsubscribe()：开启/关闭原始信号的外部订阅
- close()：释放底层连接（仅在会话拥有该连接时调用）

默认实现是 bus/dbus.py 中基于 dbus-next 的 DBusTransport；
测试中用一个记录调用、可手动注入信号的桩实现替代。

【Java 开发者类比】
- Transport 相当于一个 interface，DBusTransport 是它的一个实现类
- SignalHandler 相当于 java.util.function.Consumer<RawSignal>
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Sequence

from dbus_next import Variant

from desknotify.bus.events import RawSignal

# 通知服务在总线上的固定标识
NOTIFICATIONS_BUS_NAME = "org.freedesktop.Notifications"
NOTIFICATIONS_OBJECT_PATH = "/org/freedesktop/Notifications"
NOTIFICATIONS_INTERFACE = "org.freedesktop.Notifications"

SignalHandler = Callable[[RawSignal], None]


class Transport(ABC):
    """通知服务的传输层接口。"""

    @abstractmethod
    async def call(self, member: str, args: Sequence[Variant] = ()) -> list[Any]:
        """
        调用通知服务的方法并返回回复的参数列表。

        参数:
            member: 方法名（如 'Notify'）
            args: 有序的类型参数

        返回:
            回复消息的参数列表（无返回值的方法为空列表）

        异常:
            TransportError: 调用失败（连接断开、服务器返回错误等）
        """
        pass

    @abstractmethod
    async def subscribe(self, handler: SignalHandler) -> None:
        """开始把通知服务发出的信号交给 handler。"""
        pass

    @abstractmethod
    async def unsubscribe(self, handler: SignalHandler) -> None:
        """停止向 handler 投递信号，并撤销外部订阅。"""
        pass

    @abstractmethod
    async def close(self) -> None:
        """关闭底层连接。"""
        pass
