"""Single-instance IPC: socket naming, wire contract, listener and sender."""

from __future__ import annotations

from monoterm.ipc.client import find_socket, send_message
from monoterm.ipc.contracts import (
    ConfigUpdate,
    CreateWindow,
    IpcConfig,
    SocketMessage,
    Takeover,
    TakeoverRequest,
    decode_message,
    encode_message,
)
from monoterm.ipc.errors import (
    BindFailedError,
    ConnectFailedError,
    InvalidSocketPathError,
    IpcError,
    MalformedMessageError,
    SocketNotFoundError,
    WindowIdOutOfRangeError,
)
from monoterm.ipc.events import IpcEvent, WindowId, to_event, window_id_from
from monoterm.ipc.server import SocketListener
from monoterm.ipc.settings import IpcSettings

__all__ = [
    "BindFailedError",
    "ConfigUpdate",
    "ConnectFailedError",
    "CreateWindow",
    "InvalidSocketPathError",
    "IpcConfig",
    "IpcError",
    "IpcEvent",
    "IpcSettings",
    "MalformedMessageError",
    "SocketListener",
    "SocketMessage",
    "SocketNotFoundError",
    "Takeover",
    "TakeoverRequest",
    "WindowId",
    "WindowIdOutOfRangeError",
    "decode_message",
    "encode_message",
    "find_socket",
    "send_message",
    "to_event",
    "window_id_from",
]
