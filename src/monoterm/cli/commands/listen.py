"""Run a socket listener in the foreground and report every request."""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, assert_never

import click

from monoterm.config import MonotermConfig
from monoterm.debug_log import export_logs_to_file
from monoterm.ipc.contracts import ConfigUpdate, CreateWindow, TakeoverRequest
from monoterm.ipc.server import SocketListener
from monoterm.takeover import ImageTakeover, InvalidTakeoverError, parse_takeover

if TYPE_CHECKING:
    from monoterm.ipc.events import IpcEvent
    from monoterm.ipc.settings import IpcSettings

logger = logging.getLogger(__name__)


def _target(event: IpcEvent) -> str:
    return "all windows" if event.window_id is None else f"window {event.window_id}"


def describe_event(event: IpcEvent) -> str | None:
    """One-line summary of *event*, or ``None`` if the window system would reject it."""
    message = event.message
    match message:
        case CreateWindow(options=options):
            return f"create-window {options}"
        case ConfigUpdate(config=config):
            action = "reset" if config.reset else "update"
            return f"config {action} {_target(event)}: {', '.join(config.options) or '-'}"
        case TakeoverRequest(takeover=takeover):
            try:
                takeover_event = parse_takeover(takeover.msg)
            except InvalidTakeoverError as exc:
                logger.warning("Rejected takeover for %s: %s", _target(event), exc)
                return None
            match takeover_event:
                case ImageTakeover(path=path):
                    return f"takeover {_target(event)}: image {path}"
        case _:
            assert_never(message)


def _print_event(event: IpcEvent) -> None:
    description = describe_event(event)
    if description is not None:
        click.echo(description)


async def _serve(settings: IpcSettings) -> None:
    listener = SocketListener(_print_event, settings=settings)
    socket_path = await listener.start()
    if socket_path is None:
        raise click.ClickException("unable to create the IPC socket")

    click.secho(f"Listening on {socket_path}", fg="green", bold=True)
    try:
        await asyncio.Event().wait()
    finally:
        await listener.stop()


@click.command()
@click.option(
    "-s",
    "--socket",
    "socket_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Bind this socket path instead of the per-session default.",
)
@click.option(
    "--config-file",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Read configuration from this file.",
)
@click.option(
    "--log-file",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Export buffered IPC logs to this file on exit.",
)
def listen(socket_path: Path | None, config_file: Path | None, log_file: Path | None) -> None:
    """Accept requests from other invocations until interrupted."""
    config = MonotermConfig.load(config_file)
    if not config.general.ipc_socket:
        click.secho(
            "IPC socket is disabled in the configuration (general.ipc_socket).", fg="yellow"
        )
        sys.exit(1)

    try:
        asyncio.run(_serve(config.ipc_settings(socket_path=socket_path)))
    except KeyboardInterrupt:
        logger.info("Listener interrupted")
    finally:
        if log_file is not None:
            count = export_logs_to_file(log_file)
            click.echo(f"Exported {count} log entries to {log_file}")
