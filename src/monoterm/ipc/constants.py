"""Shared IPC naming and framing constants."""

from __future__ import annotations

SOCKET_ENV = "MONOTERM_SOCKET"
"""Environment variable holding the path of the active IPC socket."""

MAX_LINE_BYTES = 64 * 1024  # One JSON message per line; requests are small.

DEFAULT_READ_TIMEOUT = 5.0
CONNECT_TIMEOUT = 1.0

# Window identifiers map onto the unsigned 64-bit ids used by the window system.
MAX_WINDOW_ID = 2**64 - 1

__all__ = [
    "CONNECT_TIMEOUT",
    "DEFAULT_READ_TIMEOUT",
    "MAX_LINE_BYTES",
    "MAX_WINDOW_ID",
    "SOCKET_ENV",
]
