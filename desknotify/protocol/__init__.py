"""
协议模块 - 通知服务的数据模型、类型值编组、能力表与信号解码。

本模块不依赖任何传输实现，全部为纯数据和纯函数：
- types.py：Notification / Action / Hints / ImageData / ServerInformation
- marshal.py：Notify 参数的编组（dbus_next.Variant）
- capabilities.py：能力名 ↔ Capability 枚举
- signals.py：NotificationClosed / ActionInvoked 信号及解码器
"""

from desknotify.protocol.capabilities import CAPABILITY_NAMES, Capability, parse_capabilities
from desknotify.protocol.marshal import NOTIFY_SIGNATURE, marshal_notification
from desknotify.protocol.signals import (
    ActionInvoked,
    CloseReason,
    NotificationClosed,
    NotificationSignal,
    decode_signal,
)
from desknotify.protocol.types import (
    Action,
    Hints,
    ImageData,
    Notification,
    ServerInformation,
    UrgencyLevel,
)

__all__ = [
    "Action",
    "ActionInvoked",
    "CAPABILITY_NAMES",
    "Capability",
    "CloseReason",
    "Hints",
    "ImageData",
    "NOTIFY_SIGNATURE",
    "Notification",
    "NotificationClosed",
    "NotificationSignal",
    "ServerInformation",
    "UrgencyLevel",
    "decode_signal",
    "marshal_notification",
    "parse_capabilities",
]
