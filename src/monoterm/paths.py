"""Runtime and config path helpers for monoterm."""

from __future__ import annotations

import os
import sys
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING

from platformdirs import user_config_dir, user_runtime_dir

if TYPE_CHECKING:
    from collections.abc import Mapping

APP_NAME = "monoterm"
SOCKET_PREFIX = "Monoterm"
CONFIG_FILE_NAME = "monoterm.toml"
SOCKET_SUFFIX = ".sock"

# Platforms where sockets are not scoped to a display server.
_NO_DISPLAY_PLATFORMS = ("darwin", "win32")


def _env(environ: Mapping[str, str] | None) -> Mapping[str, str]:
    return os.environ if environ is None else environ


def get_socket_dir(environ: Mapping[str, str] | None = None) -> Path:
    """Get the directory holding IPC socket files.

    Prefers the per-user runtime directory and falls back to the system
    temporary directory when it is unavailable or cannot be created.
    """
    override = _env(environ).get("MONOTERM_RUNTIME_DIR")
    if override:
        return Path(override)

    if sys.platform == "darwin":
        return Path(tempfile.gettempdir())

    path = Path(user_runtime_dir(APP_NAME))
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError:
        return Path(tempfile.gettempdir())
    return path


def get_socket_prefix(environ: Mapping[str, str] | None = None) -> str:
    """File prefix shared by all sockets of the current display session.

    Includes the display server name so users running several display
    servers get one independent instance per display.
    """
    if sys.platform in _NO_DISPLAY_PLATFORMS:
        return SOCKET_PREFIX

    env = _env(environ)
    display = env.get("WAYLAND_DISPLAY") or env.get("DISPLAY") or ""
    return f"{SOCKET_PREFIX}-{display.replace('/', '-')}"


def default_socket_path(
    pid: int | None = None,
    environ: Mapping[str, str] | None = None,
) -> Path:
    """Socket path for the instance running as *pid* (default: this process)."""
    pid = os.getpid() if pid is None else pid
    return get_socket_dir(environ) / f"{get_socket_prefix(environ)}-{pid}{SOCKET_SUFFIX}"


def get_config_dir(environ: Mapping[str, str] | None = None) -> Path:
    """Get the config directory for monoterm."""
    override = _env(environ).get("MONOTERM_CONFIG_DIR")
    if override:
        return Path(override)
    return Path(user_config_dir(APP_NAME))


def get_config_path(environ: Mapping[str, str] | None = None) -> Path:
    """Get the path to the main config file."""
    return get_config_dir(environ) / CONFIG_FILE_NAME


__all__ = [
    "APP_NAME",
    "SOCKET_PREFIX",
    "SOCKET_SUFFIX",
    "default_socket_path",
    "get_config_dir",
    "get_config_path",
    "get_socket_dir",
    "get_socket_prefix",
]
