"""
通知数据模型 - 调用方构造、编组时一次性消费的值对象。

本模块定义了：
- Notification：一条通知的完整载荷（标题、正文、图标、过期时间、动作、提示）
- Action：动作按钮（key + label），按值比较
- Hints：提示字典（紧急程度、声音、图像等），值为 None 的条目不会被发送
- ImageData：原始光栅图像
- UrgencyLevel：紧急程度（低 / 普通 / 紧急）
- ServerInformation：GetServerInformation 的返回值

【设计要点】
- 可选字段一律用 None 表示"未设置"，缺省值只在编组边界（marshal.py）处理
- Hints 内部直接保存 dbus_next.Variant，类型在赋值时即确定
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from enum import IntEnum
from typing import Any, Callable, Iterator, Sequence

from dbus_next import Variant
from dbus_next.errors import SignatureBodyMismatchError

from desknotify.errors import MarshalError, ProtocolError
from desknotify.protocol.marshal import IMAGE_DATA_SIGNATURE, marshal_image_data, marshal_notification


class UrgencyLevel(IntEnum):
    """紧急程度，以单字节下标编码。"""

    LOW = 0
    NORMAL = 1
    CRITICAL = 2


@dataclass(frozen=True)
class Action:
    """
    通知上的一个动作按钮。

    属性:
        key: 动作标识，用户触发时通过 ActionInvoked 信号原样返回
        label: 显示给用户的文字
    """

    DEFAULT_KEY = "default"  # 平台默认动作（通常是点击通知本身）

    key: str
    label: str


@dataclass(frozen=True)
class ImageData:
    """原始光栅图像，对应 image-data 提示。"""

    width: int
    height: int
    row_stride: int
    has_alpha: bool
    bits_per_sample: int
    channels: int
    data: bytes


class _Hint:
    """Hints 上的一个具名提示属性，赋值时转换为带签名的 Variant。"""

    def __init__(
        self,
        name: str,
        signature: str,
        encode: Callable[[Any], Variant] | None = None,
        decode: Callable[[Any], Any] | None = None,
    ):
        self.name = name
        self.signature = signature
        self.encode = encode
        self.decode = decode

    def __get__(self, hints: Hints | None, owner: type) -> Any:
        if hints is None:
            return self
        variant = hints.get(self.name)
        if variant is None:
            return None
        return self.decode(variant.value) if self.decode else variant.value

    def __set__(self, hints: Hints, value: Any) -> None:
        if value is None:
            hints.set(self.name, None)
            return
        try:
            variant = self.encode(value) if self.encode else Variant(self.signature, value)
        except SignatureBodyMismatchError as e:
            raise MarshalError(f"Invalid {self.name} hint: {e}") from e
        hints.set(self.name, variant)


class Hints:
    """
    通知提示字典：提示名 → 可选的类型值。

    常用提示以属性形式提供，其他（厂商扩展）提示通过 set() 直接设置 Variant。
    将提示设为 None 会保留该条目，但编组时会被排除。

    用法:
        hints = Hints()
        hints.urgency = UrgencyLevel.CRITICAL
        hints.set("x-vendor-flag", Variant("b", True))
    """

    action_icons = _Hint("action-icons", "b")
    category = _Hint("category", "s")
    desktop_entry = _Hint("desktop-entry", "s")
    image_data = _Hint(
        "image-data",
        IMAGE_DATA_SIGNATURE,
        encode=marshal_image_data,
        decode=lambda fields: ImageData(*fields),
    )
    image_path = _Hint("image-path", "s")
    resident = _Hint("resident", "b")
    sound_file = _Hint("sound-file", "s")
    sound_name = _Hint("sound-name", "s")
    suppress_sound = _Hint("suppress-sound", "b")
    transient = _Hint("transient", "b")
    x = _Hint("x", "i")
    y = _Hint("y", "i")
    urgency = _Hint(
        "urgency",
        "y",
        encode=lambda level: Variant("y", int(UrgencyLevel(level))),
        decode=UrgencyLevel,
    )

    def __init__(self) -> None:
        self._hints: dict[str, Variant | None] = {}

    def set(self, hint: str, value: Variant | None) -> None:
        """设置任意提示。value 为 None 表示不发送该提示。"""
        self._hints[hint] = value

    def get(self, hint: str) -> Variant | None:
        return self._hints.get(hint)

    def items(self) -> Iterator[tuple[str, Variant | None]]:
        return iter(self._hints.items())

    def __contains__(self, hint: object) -> bool:
        return hint in self._hints

    def __len__(self) -> int:
        return len(self._hints)

    def __repr__(self) -> str:
        return f"Hints({self._hints!r})"


@dataclass
class Notification:
    """
    一条待发送的通知。

    只有 summary 是必填的；其余字段为 None 时在编组时使用协议缺省值。

    属性:
        summary: 通知标题
        app_name: 发送方应用名
        replaces_id: 要原地替换的已有通知 ID
        app_icon: 应用图标（图标名或 file:// URI）
        body: 通知正文（服务器支持 body-markup 时可包含 Markup）
        expire_timeout: 自动过期时间；None 表示由服务器决定，timedelta(0) 表示永不过期
        actions: 动作按钮列表，顺序即显示顺序
        hints: 提示字典
    """

    summary: str
    app_name: str | None = None
    replaces_id: int | None = None
    app_icon: str | None = None
    body: str | None = None
    expire_timeout: timedelta | None = None
    actions: list[Action] = field(default_factory=list)
    hints: Hints = field(default_factory=Hints)

    def to_marshalable(self) -> list[Variant]:
        """编组为 Notify 方法的 8 个参数。"""
        return marshal_notification(self)


@dataclass(frozen=True)
class ServerInformation:
    """通知服务器的标识信息。"""

    name: str
    vendor: str
    version: str
    spec_version: str

    @classmethod
    def from_reply(cls, values: Sequence[Any]) -> ServerInformation:
        """
        按位置从 GetServerInformation 的回复中解析。

        异常:
            ProtocolError: 回复少于 4 个字段或字段不是字符串
        """
        if len(values) < 4 or not all(isinstance(v, str) for v in values[:4]):
            raise ProtocolError(f"Malformed GetServerInformation reply: {list(values)!r}")
        return cls(name=values[0], vendor=values[1], version=values[2], spec_version=values[3])
