"""
总线模块 - 通知会话与消息总线之间的传输与信号分发。

信号流向：
  D-Bus → DBusTransport → RawSignal → SignalHub（解码 + 扇出）→ SignalListener → 调用方

方法调用流向：
  Notifications 会话 → marshal → Transport.call() → D-Bus → 通知服务器
"""

from desknotify.bus.events import RawSignal
from desknotify.bus.hub import SignalHub, SignalListener
from desknotify.bus.transport import Transport

__all__ = ["RawSignal", "SignalHub", "SignalListener", "Transport"]
