"""
原始总线事件类型定义。

RawSignal 是传输层交给信号分发器（SignalHub）的"货币"：
传输层只负责把总线上收到的信号拆成成员名 + 参数列表，
解码成 NotificationSignal 的工作由 protocol/signals.py 完成。
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class RawSignal:
    """
    一条未解码的总线信号。

    属性:
        member: 信号成员名（如 'NotificationClosed'、'ActionInvoked'）
        args: 信号参数列表（已由总线库解码为 Python 基本类型）
    """

    member: str
    args: list[Any] = field(default_factory=list)
