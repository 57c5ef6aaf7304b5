"""
服务器能力表：能力名（wire name）与 Capability 枚举之间映射的唯一真相来源。

通知服务器通过 GetCapabilities 方法返回一组字符串，表示它支持的可选功能
（如正文 Markup、动作按钮、声音等）。本模块把这组字符串转换为类型安全的枚举集合。

CAPABILITY_NAMES 的顺序与 Capability 枚举的声明顺序一一对应，
新增能力时两处必须同步修改；已有条目的顺序和名称不得变动。

服务器可能返回本表之外的厂商扩展能力（通常以 "x-" 开头），
这些名称会被静默跳过，而不是报错。
"""

from enum import Enum
from typing import Iterable


class Capability(Enum):
    """通知服务器的可选能力。枚举值即协议中的能力名。"""

    ACTION_ICONS = "action-icons"        # 动作按钮使用图标而非文字
    ACTIONS = "actions"                  # 支持动作按钮
    BODY = "body"                        # 支持正文
    BODY_HYPERLINKS = "body-hyperlinks"  # 正文支持超链接
    BODY_IMAGES = "body-images"          # 正文支持内嵌图片
    BODY_MARKUP = "body-markup"          # 正文支持 Markup
    ICON_MULTI = "icon-multi"            # 支持多帧图标（动画）
    ICON_STATIC = "icon-static"          # 仅支持单帧图标
    PERSISTENCE = "persistence"          # 通知会被持久保存
    SOUND = "sound"                      # 支持播放声音

    @property
    def wire_name(self) -> str:
        """协议中使用的能力名。"""
        return self.value


# 有序能力名表，下标与 Capability 的声明顺序一致
CAPABILITY_NAMES: tuple[str, ...] = tuple(c.value for c in Capability)
_CAPABILITIES: tuple[Capability, ...] = tuple(Capability)


def parse_capabilities(names: Iterable[str]) -> set[Capability]:
    """
    将服务器返回的能力名列表解析为 Capability 集合。

    未知能力名被跳过；重复名称自然合并。

    参数:
        names: GetCapabilities 返回的能力名序列

    返回:
        已识别能力的集合
    """
    capabilities: set[Capability] = set()
    for name in names:
        if name not in CAPABILITY_NAMES:
            continue  # 厂商扩展或新版本能力，向前兼容
        capabilities.add(_CAPABILITIES[CAPABILITY_NAMES.index(name)])
    return capabilities