"""
类型值编组模块 - 把通知载荷转换为 D-Bus 的类型值模型。

Notify 方法的 8 个参数按固定顺序编组（签名 "susssasa{sv}i"）：

    app_name        s      缺省为 ""
    replaces_id     u      缺省为 0（不替换任何通知）
    app_icon        s      缺省为 ""
    summary         s      必填，无缺省值
    body            s      缺省为 ""
    actions         as     [key1, label1, key2, label2, ...]，缺省为 []
    hints           a{sv}  值为 None 的条目被排除，缺省为 {}
    expire_timeout  i      毫秒，缺省为 -1（由服务器决定）

每个参数都表示为 dbus_next.Variant，签名随值一起携带，
传输层只需拼接签名、取出值即可构造方法调用消息。

本模块全部为纯函数，不修改传入的对象。
"""

from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING, Iterable

from dbus_next import Variant
from dbus_next.errors import SignatureBodyMismatchError

from desknotify.errors import MarshalError

if TYPE_CHECKING:
    from desknotify.protocol.types import Action, Hints, ImageData, Notification

NOTIFY_SIGNATURE = "susssasa{sv}i"
IMAGE_DATA_SIGNATURE = "(iiibiiay)"

UINT32_MAX = 2**32 - 1
INT32_MAX = 2**31 - 1


def marshal_notification(notification: Notification) -> list[Variant]:
    """
    将通知编组为 Notify 方法的 8 个有序参数。

    参数:
        notification: 待发送的通知

    返回:
        8 个 Variant 组成的列表，签名依次拼接等于 NOTIFY_SIGNATURE

    异常:
        MarshalError: 字段超出协议类型的取值范围或类型不符
    """
    replaces_id = notification.replaces_id or 0
    if not 0 <= replaces_id <= UINT32_MAX:
        raise MarshalError(f"replaces_id out of uint32 range: {replaces_id}")
    try:
        return [
            Variant("s", notification.app_name or ""),
            Variant("u", replaces_id),
            Variant("s", notification.app_icon or ""),
            Variant("s", notification.summary),
            Variant("s", notification.body or ""),
            marshal_actions(notification.actions),
            marshal_hints(notification.hints),
            Variant("i", marshal_timeout(notification.expire_timeout)),
        ]
    except SignatureBodyMismatchError as e:
        raise MarshalError(f"Cannot marshal notification: {e}") from e


def marshal_actions(actions: Iterable[Action]) -> Variant:
    """按列表顺序把每个动作展开为 key、label 两个连续字符串。"""
    flattened: list[str] = []
    for action in actions:
        flattened.append(action.key)
        flattened.append(action.label)
    return Variant("as", flattened)


def marshal_hints(hints: Hints) -> Variant:
    """编组为 a{sv} 字典，值为 None 的提示被排除。"""
    return Variant("a{sv}", {name: value for name, value in hints.items() if value is not None})


def marshal_timeout(timeout: timedelta | None) -> int:
    """过期时间转换为整数毫秒；None 表示由服务器决定（-1）。"""
    if timeout is None:
        return -1
    milliseconds = timeout // timedelta(milliseconds=1)
    if not 0 <= milliseconds <= INT32_MAX:
        raise MarshalError(f"expire_timeout out of range: {timeout}")
    return milliseconds


def marshal_image_data(image: ImageData) -> Variant:
    """
    将原始图像编组为 (iiibiiay) 结构体。

    字段顺序：宽、高、行跨度、是否含 alpha、每样本位数、通道数、像素字节。
    """
    return Variant(
        IMAGE_DATA_SIGNATURE,
        [
            image.width,
            image.height,
            image.row_stride,
            image.has_alpha,
            image.bits_per_sample,
            image.channels,
            bytes(image.data),
        ],
    )


def signature_of(values: Iterable[Variant]) -> str:
    """拼接一组参数的签名，用于构造方法调用消息。"""
    return "".join(value.signature for value in values)
