"""Exception types raised by the IPC coordinator."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path


class IpcError(Exception):
    """Base class for IPC coordinator errors."""

    code: str = "IPC_ERROR"


class BindFailedError(IpcError):
    """The listening socket could not be created.

    Never raised out of ``SocketListener.start``; it is logged and the
    coordinator stays disabled for the rest of the run.
    """

    code = "BIND_FAILED"

    def __init__(self, socket_path: Path, cause: OSError) -> None:
        self.socket_path = socket_path
        self.cause = cause
        super().__init__(f"unable to bind socket {str(socket_path)!r}: {cause}")


class ConnectFailedError(IpcError, ConnectionError):
    """No reachable socket could be found while sending a message."""

    code = "CONNECT_FAILED"


class InvalidSocketPathError(ConnectFailedError):
    """An explicitly requested socket path could not be connected to."""

    def __init__(self, socket_path: Path, cause: OSError) -> None:
        self.socket_path = socket_path
        self.cause = cause
        super().__init__(f"invalid socket path {str(socket_path)!r}: {cause.strerror or cause}")
        self.errno = cause.errno


class SocketNotFoundError(ConnectFailedError):
    """Discovery exhausted every candidate without a live socket."""

    def __init__(self, socket_dir: Path) -> None:
        self.socket_dir = socket_dir
        super().__init__(f"no socket found in {str(socket_dir)!r}")


class MalformedMessageError(IpcError, ValueError):
    """A line received on the socket is not a valid message."""

    code = "MALFORMED"


class WindowIdOutOfRangeError(IpcError, ValueError):
    """A window id does not fit the window-system identifier range."""

    code = "ID_OUT_OF_RANGE"

    def __init__(self, window_id: int) -> None:
        self.window_id = window_id
        super().__init__(f"window id {window_id} is out of range")


__all__ = [
    "BindFailedError",
    "ConnectFailedError",
    "InvalidSocketPathError",
    "IpcError",
    "MalformedMessageError",
    "SocketNotFoundError",
    "WindowIdOutOfRangeError",
]
