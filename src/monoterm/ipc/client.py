"""Sender side: find a running monoterm instance and deliver one message."""

from __future__ import annotations

import logging
import re
import socket
from typing import TYPE_CHECKING

from monoterm.ipc.constants import CONNECT_TIMEOUT
from monoterm.ipc.contracts import encode_message
from monoterm.ipc.errors import InvalidSocketPathError, SocketNotFoundError
from monoterm.ipc.settings import IpcSettings
from monoterm.paths import SOCKET_SUFFIX, get_socket_dir, get_socket_prefix

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path

    from monoterm.ipc.contracts import SocketMessage

logger = logging.getLogger(__name__)


def _connect(path: Path) -> socket.socket:
    sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
    try:
        sock.settimeout(CONNECT_TIMEOUT)
        sock.connect(str(path))
    except OSError:
        sock.close()
        raise
    return sock


def _socket_candidates(socket_dir: Path, prefix: str) -> list[Path]:
    """List socket files belonging to the session identified by *prefix*.

    Only ``<prefix>-<pid>.sock`` names match, so a session whose display
    name extends another one's (``:1`` and ``:10``) is never picked up.
    """
    pattern = re.compile(rf"{re.escape(prefix)}-\d+{re.escape(SOCKET_SUFFIX)}")
    try:
        names = sorted(entry.name for entry in socket_dir.iterdir())
    except OSError as exc:
        logger.debug("Cannot list socket directory %s: %s", socket_dir, exc)
        return []
    return [socket_dir / name for name in names if pattern.fullmatch(name)]


def _remove_orphan(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        return
    except OSError as exc:
        logger.debug("Cannot remove orphaned socket %s: %s", path, exc)
        return
    logger.info("Removed orphaned socket %s", path)


def find_socket(
    socket_path: Path | None = None,
    *,
    settings: IpcSettings | None = None,
    environ: Mapping[str, str] | None = None,
) -> socket.socket:
    """Connect to the active monoterm socket.

    Tries, in order: the explicit *socket_path*, the socket advertised in
    ``settings.active_socket``, then every socket of the current display
    session in the socket directory. Sockets refusing connections belong to
    dead instances and are deleted on the way.

    Raises:
        InvalidSocketPathError: An explicit path was given and is unreachable.
        SocketNotFoundError: No candidate accepted the connection.
    """
    if settings is None:
        settings = IpcSettings.from_environ(environ)
    explicit = socket_path if socket_path is not None else settings.socket_path

    if explicit is not None:
        try:
            return _connect(explicit)
        except OSError as exc:
            raise InvalidSocketPathError(explicit, exc) from exc

    if settings.active_socket is not None:
        try:
            return _connect(settings.active_socket)
        except OSError as exc:
            logger.debug("Active socket %s is unreachable: %s", settings.active_socket, exc)

    socket_dir = get_socket_dir(environ)
    for candidate in _socket_candidates(socket_dir, get_socket_prefix(environ)):
        try:
            return _connect(candidate)
        except ConnectionRefusedError:
            _remove_orphan(candidate)
        except OSError as exc:
            # Sockets of other users or busy instances.
            logger.debug("Skipping socket %s: %s", candidate, exc)

    raise SocketNotFoundError(socket_dir)


def send_message(
    message: SocketMessage,
    socket_path: Path | None = None,
    *,
    settings: IpcSettings | None = None,
    environ: Mapping[str, str] | None = None,
) -> None:
    """Deliver *message* to the active monoterm instance.

    Fire-and-forget: returns once the line is written. Write failures
    propagate as ``OSError``.
    """
    payload = encode_message(message) + b"\n"
    with find_socket(socket_path, settings=settings, environ=environ) as sock:
        sock.sendall(payload)
        logger.debug("Sent %s message to %s", message.tag, sock.getpeername())


__all__ = ["find_socket", "send_message"]
