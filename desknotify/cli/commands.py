"""
CLI 命令模块 - desknotify 的所有命令行命令定义。

本模块使用 Typer 框架定义命令体系：
- init：生成默认配置文件
- info：查看通知服务器信息和能力
- send：发送一条通知（可选等待其关闭）
- close：关闭一条通知
- listen：持续打印服务器发出的信号

技术栈：
- Typer：CLI 框架（基于 Click，支持类型注解自动生成帮助文档）
- Rich：终端美化输出（表格、颜色）
"""

import asyncio

import typer
from loguru import logger
from rich.console import Console
from rich.table import Table

from desknotify import __logo__, __version__
from desknotify.protocol.capabilities import Capability
from desknotify.protocol.signals import ActionInvoked, NotificationClosed, NotificationSignal
from desknotify.protocol.types import Action

# 创建 Typer 应用实例（CLI 根命令）
app = typer.Typer(
    name="desknotify",
    help=f"{__logo__} desknotify - Desktop notifications over D-Bus",
    no_args_is_help=True,
)

console = Console()


def version_callback(value: bool):
    """版本号回调：当用户传入 --version/-v 参数时，打印版本号并退出。"""
    if value:
        console.print(f"{__logo__} desknotify v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None, "--version", "-v", callback=version_callback, is_eager=True
    ),
):
    """desknotify CLI 根命令回调。处理全局选项（如 --version）。"""
    pass


def _configure_logs(enabled: bool) -> None:
    if enabled:
        logger.enable("desknotify")
    else:
        logger.disable("desknotify")


def parse_action(spec: str) -> Action:
    """
    解析 "key=label" 形式的动作参数。只给出 key 时 label 与 key 相同。

    异常:
        typer.BadParameter: key 为空
    """
    key, sep, label = spec.partition("=")
    key = key.strip()
    if not key:
        raise typer.BadParameter(f"Invalid action '{spec}', expected key=label")
    return Action(key, label if sep else key)


def describe_signal(signal: NotificationSignal) -> str:
    """把信号格式化为一行可读文本。"""
    if isinstance(signal, ActionInvoked):
        return f"#{signal.notification_id} action invoked: {signal.action_key}"
    if isinstance(signal, NotificationClosed):
        return f"#{signal.notification_id} closed: {signal.reason.name.lower()}"
    return f"#{signal.notification_id}: {signal!r}"


def _run(coro) -> None:
    """运行异步命令，把库的错误转换为友好的退出信息。"""
    from desknotify.errors import DesknotifyError

    try:
        asyncio.run(coro)
    except DesknotifyError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)


async def _open_session():
    from desknotify.config.loader import load_config
    from desknotify.session.notifications import Notifications

    return await Notifications.open(config=load_config())


# ============================================================================
# Setup
# ============================================================================


@app.command()
def init():
    """在 ~/.desknotify/ 下创建默认配置文件 config.json。"""
    from desknotify.config.loader import get_config_path, save_config
    from desknotify.config.schema import Config

    config_path = get_config_path()

    if config_path.exists():
        console.print(f"[yellow]Config already exists at {config_path}[/yellow]")
        if not typer.confirm("Overwrite?"):
            raise typer.Exit()

    save_config(Config())
    console.print(f"[green]✓[/green] Created config at {config_path}")


# ============================================================================
# Server
# ============================================================================


@app.command()
def info(
    logs: bool = typer.Option(False, "--logs/--no-logs", help="Show runtime logs"),
):
    """查看通知服务器信息和支持的能力。"""
    _configure_logs(logs)

    async def run():
        async with await _open_session() as n:
            server = await n.get_server_information()

            console.print(f"{__logo__} {server.name} {server.version} ({server.vendor})")
            console.print(f"Specification version: {server.spec_version}\n")

            table = Table(title="Capabilities")
            table.add_column("Capability", style="cyan")
            table.add_column("Supported")
            for capability in Capability:
                table.add_row(
                    capability.wire_name,
                    "[green]✓[/green]" if n.has_capability(capability) else "[dim]✗[/dim]",
                )
            console.print(table)

    _run(run())


# ============================================================================
# Notifications
# ============================================================================


@app.command()
def send(
    summary: str = typer.Argument(..., help="Notification summary"),
    body: str = typer.Option(None, "--body", "-b", help="Notification body"),
    icon: str = typer.Option(None, "--icon", "-i", help="Icon name or file:// URI"),
    app_name: str = typer.Option(None, "--app-name", "-a", help="Application name"),
    timeout: int = typer.Option(None, "--timeout", "-t", help="Expire timeout in milliseconds (0 = never)"),
    urgency: str = typer.Option(None, "--urgency", "-u", help="low, normal or critical"),
    category: str = typer.Option(None, "--category", "-c", help="Notification category"),
    action: list[str] = typer.Option(None, "--action", "-A", help="Action as key=label (repeatable)"),
    replaces: int = typer.Option(None, "--replaces", "-r", help="ID of the notification to replace"),
    wait: bool = typer.Option(False, "--wait", "-w", help="Wait until the notification is closed"),
    logs: bool = typer.Option(False, "--logs/--no-logs", help="Show runtime logs"),
):
    """发送一条通知并打印其 ID。"""
    from desknotify.config.loader import load_config
    from desknotify.errors import MarshalError

    _configure_logs(logs)

    if urgency and urgency.lower() not in ("low", "normal", "critical"):
        raise typer.BadParameter(f"Invalid urgency '{urgency}'", param_hint="--urgency")

    notification = load_config().build_notification(
        summary,
        body=body,
        app_name=app_name,
        app_icon=icon,
        expire_timeout_ms=timeout,
        urgency=urgency.lower() if urgency else None,
        category=category,
        actions=[parse_action(a) for a in action or []],
        replaces_id=replaces,
    )
    try:
        notification.to_marshalable()
    except MarshalError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    async def run():
        async with await _open_session() as n:
            if not wait:
                console.print(await n.notify(notification))
                return
            notification_id, signal = await n.notify_and_wait(notification)
            console.print(notification_id)
            console.print(describe_signal(signal))

    _run(run())


@app.command()
def close(
    notification_id: int = typer.Argument(..., help="Notification ID"),
    logs: bool = typer.Option(False, "--logs/--no-logs", help="Show runtime logs"),
):
    """关闭一条通知。"""
    _configure_logs(logs)

    async def run():
        async with await _open_session() as n:
            await n.close_notification(notification_id)
            console.print(f"[green]✓[/green] Closed notification {notification_id}")

    _run(run())


@app.command()
def listen(
    logs: bool = typer.Option(False, "--logs/--no-logs", help="Show runtime logs"),
):
    """持续打印通知服务器发出的信号，Ctrl+C 退出。"""
    _configure_logs(logs)

    async def run():
        async with await _open_session() as n:
            async with n.listen() as signals:
                console.print(f"{__logo__} Listening for notification signals (Ctrl+C to quit)\n")
                async for signal in signals:
                    console.print(describe_signal(signal))

    try:
        _run(run())
    except KeyboardInterrupt:
        console.print("\nStopped.")


if __name__ == "__main__":
    app()
