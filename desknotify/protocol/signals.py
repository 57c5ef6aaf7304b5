"""
通知信号模型与解码器。

服务器通过两个信号告知通知的去向：
- NotificationClosed(id: u, reason: u)：通知被关闭
- ActionInvoked(id: u, action_key: s)：用户触发了某个动作

NotificationSignal 是二者的公共基类，只有这两个子类；
消费方应当用 isinstance / match 对两种情况做穷尽处理。
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Sequence

from desknotify.errors import MalformedSignalError

NOTIFICATION_CLOSED = "NotificationClosed"
ACTION_INVOKED = "ActionInvoked"


class CloseReason(Enum):
    """通知被关闭的原因。协议值从 1 开始编号。"""

    EXPIRED = 1    # 通知过期
    DISMISSED = 2  # 用户手动关闭
    CLOSED = 3     # 调用 CloseNotification 关闭
    UNDEFINED = 4  # 未定义/保留的原因

    @classmethod
    def from_wire(cls, value: int) -> CloseReason:
        """超出 1..3 范围的值一律映射为 UNDEFINED。"""
        if 1 <= value <= 3:
            return cls(value)
        return cls.UNDEFINED


@dataclass(frozen=True)
class NotificationSignal:
    """与某条通知关联的服务器信号。"""

    notification_id: int


@dataclass(frozen=True)
class NotificationClosed(NotificationSignal):
    reason: CloseReason


@dataclass(frozen=True)
class ActionInvoked(NotificationSignal):
    action_key: str


def decode_signal(member: str, args: Sequence[Any]) -> NotificationSignal | None:
    """
    将一条原始信号解码为 NotificationSignal。

    参数:
        member: 信号成员名
        args: 信号参数列表

    返回:
        解码后的信号；成员名未识别时返回 None（调用方应直接丢弃）

    异常:
        MalformedSignalError: 成员名已知但参数个数或类型不符合协议
    """
    if member == NOTIFICATION_CLOSED:
        notification_id, reason = _unpack(member, args, int)
        return NotificationClosed(notification_id, CloseReason.from_wire(reason))

    if member == ACTION_INVOKED:
        notification_id, action_key = _unpack(member, args, str)
        return ActionInvoked(notification_id, action_key)

    return None


def _unpack(member: str, args: Sequence[Any], second_type: type) -> tuple[Any, Any]:
    """取出 (id, 第二个参数) 并校验类型。bool 是 int 的子类，需单独排除。"""
    if len(args) < 2:
        raise MalformedSignalError(member, list(args))
    notification_id, second = args[0], args[1]
    if not isinstance(notification_id, int) or isinstance(notification_id, bool):
        raise MalformedSignalError(member, list(args))
    if not isinstance(second, second_type) or isinstance(second, bool):
        raise MalformedSignalError(member, list(args))
    return notification_id, second
