"""Dispatch boundary between the socket listener and the window system."""

from __future__ import annotations

from dataclasses import dataclass
from typing import NewType, assert_never

from monoterm.ipc.constants import MAX_WINDOW_ID
from monoterm.ipc.contracts import ConfigUpdate, CreateWindow, SocketMessage, TakeoverRequest
from monoterm.ipc.errors import WindowIdOutOfRangeError

WindowId = NewType("WindowId", int)


@dataclass(frozen=True, slots=True)
class IpcEvent:
    """A decoded message ready for the event loop.

    ``window_id`` is the converted target window, or ``None`` when the
    message is not addressed to a particular window.
    """

    message: SocketMessage
    window_id: WindowId | None = None


def window_id_from(raw: int) -> WindowId:
    """Convert a wire window id into the window-system identifier range."""
    if not 0 <= raw <= MAX_WINDOW_ID:
        raise WindowIdOutOfRangeError(raw)
    return WindowId(raw)


def to_event(message: SocketMessage) -> IpcEvent:
    """Resolve the target window of *message*.

    Raises:
        WindowIdOutOfRangeError: The message names a window id that cannot
            exist. Callers drop such messages without notifying the sender.
    """
    match message:
        case CreateWindow():
            return IpcEvent(message)
        case ConfigUpdate(config=config):
            if config.window_id is None:
                return IpcEvent(message)
            return IpcEvent(message, window_id_from(config.window_id))
        case TakeoverRequest(takeover=takeover):
            return IpcEvent(message, window_id_from(takeover.window_id))
        case _:
            assert_never(message)


__all__ = ["IpcEvent", "WindowId", "to_event", "window_id_from"]
