"""Send requests to the running monoterm instance."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any

import click

from monoterm.ipc.client import send_message
from monoterm.ipc.contracts import ConfigUpdate, CreateWindow, IpcConfig, Takeover, TakeoverRequest
from monoterm.ipc.errors import ConnectFailedError

if TYPE_CHECKING:
    from monoterm.ipc.contracts import SocketMessage

_WINDOW_ID_ENV = "MONOTERM_WINDOW_ID"


def _parse_class(
    ctx: click.Context, param: click.Parameter, value: str | None
) -> dict[str, str] | None:
    """Parse ``GENERAL`` or ``GENERAL,INSTANCE`` into a window class."""
    if value is None:
        return None
    general, sep, instance = value.partition(",")
    if not sep:
        instance = general
    elif "," in instance:
        raise click.BadParameter("expected GENERAL or GENERAL,INSTANCE", ctx=ctx, param=param)
    return {"general": general, "instance": instance}


def _send(ctx: click.Context, message: SocketMessage) -> None:
    socket_path: Path | None = ctx.obj.get("socket_path")
    try:
        send_message(message, socket_path)
    except ConnectFailedError as exc:
        click.secho(f"Error: {exc}", fg="red", err=True)
        sys.exit(1)
    except OSError as exc:
        click.secho(f"Error: failed to send message: {exc}", fg="red", err=True)
        sys.exit(1)


@click.group()
@click.option(
    "-s",
    "--socket",
    "socket_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Send to this socket only, without discovery.",
)
@click.pass_context
def msg(ctx: click.Context, socket_path: Path | None) -> None:
    """Send a request to the running instance."""
    ctx.ensure_object(dict)["socket_path"] = socket_path


@msg.command("create-window")
@click.option(
    "--working-directory",
    type=click.Path(path_type=Path, file_okay=False),
    default=None,
    help="Start the shell in this directory.",
)
@click.option("--hold", is_flag=True, help="Keep the window open after the command exits.")
@click.option("-T", "--title", default=None, help="Window title.")
@click.option(
    "--class",
    "window_class",
    default=None,
    callback=_parse_class,
    metavar="GENERAL[,INSTANCE]",
    help="Window class (X11 WM_CLASS, Wayland app id).",
)
@click.option(
    "-o",
    "--option",
    "options",
    multiple=True,
    help="Config override for the new window, 'key.path=value' (repeatable).",
)
@click.argument("command", nargs=-1)
@click.pass_context
def create_window(
    ctx: click.Context,
    working_directory: Path | None,
    hold: bool,
    title: str | None,
    window_class: dict[str, str] | None,
    options: tuple[str, ...],
    command: tuple[str, ...],
) -> None:
    """Open a new window, optionally running COMMAND (after --)."""
    window_options: dict[str, Any] = {}
    if working_directory is not None:
        window_options["cwd"] = str(working_directory)
    if hold:
        window_options["hold"] = True
    if title is not None:
        window_options["title"] = title
    if window_class is not None:
        window_options["class"] = window_class
    if options:
        window_options["options"] = list(options)
    if command:
        window_options["command"] = list(command)

    _send(ctx, CreateWindow(options=window_options))


@msg.command("config")
@click.option(
    "-w",
    "--window-id",
    type=int,
    default=None,
    envvar=_WINDOW_ID_ENV,
    help="Target window (default: all windows).",
)
@click.option("-r", "--reset", is_flag=True, help="Clear all previous IPC overrides first.")
@click.argument("options", nargs=-1)
@click.pass_context
def config(
    ctx: click.Context,
    window_id: int | None,
    reset: bool,
    options: tuple[str, ...],
) -> None:
    """Apply OPTIONS ('key.path=value') to a running window."""
    if not options and not reset:
        raise click.UsageError("Pass at least one OPTION or --reset.")
    ipc_config = IpcConfig(window_id=window_id, options=list(options), reset=reset)
    _send(ctx, ConfigUpdate(config=ipc_config))


@msg.command("takeover")
@click.option(
    "-w",
    "--window-id",
    type=int,
    required=True,
    envvar=_WINDOW_ID_ENV,
    help="Window to take over.",
)
@click.argument("payload")
@click.pass_context
def takeover(ctx: click.Context, window_id: int, payload: str) -> None:
    """Take over a window with PAYLOAD, e.g. 'image:/abs/path.png'."""
    _send(ctx, TakeoverRequest(takeover=Takeover(window_id=window_id, msg=payload)))
