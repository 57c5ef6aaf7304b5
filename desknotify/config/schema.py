"""
配置数据模型定义 (config/schema.py)
=================================
本模块使用 Pydantic 定义 desknotify 的配置结构。
所有配置项都有默认值，用户只需在 config.json 中覆盖需要修改的部分。

整体配置结构（树形）：
Config (根配置)
├── bus        - 连接哪条总线（会话总线/系统总线/显式地址）
├── service    - 通知服务在总线上的名称、对象路径和接口
└── defaults   - CLI 发送通知时使用的默认值（应用名、图标、过期时间、紧急程度等）
"""

from datetime import timedelta
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from pydantic_settings import BaseSettings, SettingsConfigDict

from desknotify.bus.transport import (
    NOTIFICATIONS_BUS_NAME,
    NOTIFICATIONS_INTERFACE,
    NOTIFICATIONS_OBJECT_PATH,
)
from desknotify.protocol.types import Action, Notification, UrgencyLevel


class _Section(BaseModel):
    """配置文件中使用 camelCase 键名，代码中使用 snake_case 字段名，两种键名都可加载。"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BusConfig(_Section):
    """总线连接配置。"""
    type: Literal["session", "system"] = "session"  # 桌面通知通常在会话总线上
    address: str | None = None  # 显式总线地址，如 "unix:path=/run/user/1000/bus"


class ServiceConfig(_Section):
    """通知服务地址。仅在对接非标准实现时需要修改。"""
    bus_name: str = NOTIFICATIONS_BUS_NAME
    object_path: str = NOTIFICATIONS_OBJECT_PATH
    interface: str = NOTIFICATIONS_INTERFACE


class DefaultsConfig(_Section):
    """发送通知时的默认值。"""
    app_name: str = "desknotify"
    app_icon: str = ""
    expire_timeout_ms: int | None = None  # None = 由服务器决定，0 = 永不过期
    urgency: Literal["low", "normal", "critical"] | None = None
    category: str | None = None


class Config(BaseSettings):
    """
    desknotify 根配置类。

    支持从环境变量覆盖，前缀 DESKNOTIFY_，嵌套用 __ 分隔，
    例如 DESKNOTIFY_BUS__TYPE=system。
    """
    bus: BusConfig = Field(default_factory=BusConfig)
    service: ServiceConfig = Field(default_factory=ServiceConfig)
    defaults: DefaultsConfig = Field(default_factory=DefaultsConfig)

    def build_notification(
        self,
        summary: str,
        body: str | None = None,
        app_name: str | None = None,
        app_icon: str | None = None,
        expire_timeout_ms: int | None = None,
        urgency: str | None = None,
        category: str | None = None,
        actions: list[Action] | None = None,
        replaces_id: int | None = None,
    ) -> Notification:
        """
        构造一条通知，未显式给出的字段使用 defaults 中的配置。

        参数:
            summary: 通知标题
            其余参数: 显式覆盖值，为 None 时回退到默认配置

        返回:
            待发送的 Notification
        """
        d = self.defaults
        timeout_ms = expire_timeout_ms if expire_timeout_ms is not None else d.expire_timeout_ms
        notification = Notification(
            summary=summary,
            body=body,
            app_name=app_name or d.app_name or None,
            app_icon=app_icon or d.app_icon or None,
            replaces_id=replaces_id,
            expire_timeout=timedelta(milliseconds=timeout_ms) if timeout_ms is not None else None,
            actions=list(actions or []),
        )
        level = urgency or d.urgency
        if level:
            notification.hints.urgency = UrgencyLevel[level.upper()]
        notification.hints.category = category or d.category
        return notification

    model_config = SettingsConfigDict(
        env_prefix="DESKNOTIFY_",  # 环境变量前缀
        env_nested_delimiter="__"  # 嵌套配置的分隔符
    )
