"""
会话模块 - 通知会话的生命周期与方法调用编排。

- Notifications：打开/关闭会话、发送/关闭通知、查询服务器信息与能力、等待信号
"""

from desknotify.session.notifications import Notifications

__all__ = ["Notifications"]
