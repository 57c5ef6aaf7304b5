"""
异常类型定义 - desknotify 的统一错误层级。

错误分类：
- TransportError：方法调用失败（连接断开、服务器拒绝、传输层超时），直接抛给调用方，不重试
- ProtocolError：服务器返回的数据形状不符合协议（如信号参数缺失、回复字段不足）
- MarshalError：调用方给出的通知字段无法编码（如过期时间超出 int32）
- SessionClosedError：在已关闭的会话上继续操作，属于编程错误

未识别的信号成员名和能力名不是错误，会被静默跳过（向前兼容）。
"""


class DesknotifyError(Exception):
    """desknotify 所有异常的基类。"""


class TransportError(DesknotifyError):
    """
    总线方法调用失败。

    属性:
        error_name: D-Bus 错误名（如 "org.freedesktop.DBus.Error.ServiceUnknown"），
            非 D-Bus 来源的错误为 None
    """

    def __init__(self, message: str, error_name: str | None = None):
        self.error_name = error_name
        if error_name:
            message = f"{error_name}: {message}"
        super().__init__(message)


class ProtocolError(DesknotifyError):
    """服务器发来的消息与通知协议约定的形状不一致。"""


class MalformedSignalError(ProtocolError):
    """已知成员名的信号携带了格式错误的参数列表。"""

    def __init__(self, member: str, args: list):
        self.member = member
        self.args_received = list(args)
        super().__init__(f"Malformed {member} signal: {self.args_received!r}")


class SessionClosedError(DesknotifyError):
    """在已关闭的通知会话（或信号分发器）上执行操作。"""


class MarshalError(DesknotifyError, ValueError):
    """通知载荷中的值无法编码为协议要求的类型（如超出 uint32/int32 范围）。"""
