"""
desknotify - 桌面通知服务（org.freedesktop.Notifications）的异步客户端

模块概述：
    本文件是 desknotify 包的入口文件（__init__.py），定义了包的元信息。
    desknotify 通过 D-Bus 会话总线与桌面通知服务器通信，
    负责发送、更新、关闭通知，并等待通知被关闭或被点击。

    整个库的核心功能包括：
    - 通知载荷到 D-Bus 类型值的编组（protocol/marshal.py）
    - 服务器能力（capabilities）协商（protocol/capabilities.py）
    - 信号解码、多路分发与按通知 ID 关联等待（bus/hub.py）
    - 会话生命周期管理（session/notifications.py）
"""

# 版本号，遵循语义化版本规范（主版本.次版本.修订号）
__version__ = "0.1.0"

# 项目 logo 表情符号，用于 CLI 输出等场景的品牌标识
__logo__ = "🔔"
