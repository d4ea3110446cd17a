"""Explicit settings consumed by the socket listener and the sender."""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from monoterm.ipc.constants import DEFAULT_READ_TIMEOUT, MAX_LINE_BYTES, SOCKET_ENV

if TYPE_CHECKING:
    from collections.abc import Mapping


class IpcSettings(BaseModel):
    """Socket locations and limits for one process.

    ``active_socket`` is the socket advertised by the instance that spawned
    this process. It is captured once, so the sender never reads ambient
    environment state on its own.
    """

    socket_path: Path | None = Field(
        default=None,
        description="Explicit socket path (listener binds it, sender requires it)",
    )
    active_socket: Path | None = Field(
        default=None,
        description="Socket path inherited through the environment",
    )
    read_timeout: float | None = Field(
        default=DEFAULT_READ_TIMEOUT,
        gt=0,
        description="Seconds to wait for a request line; None waits forever",
    )
    max_line_bytes: int = Field(
        default=MAX_LINE_BYTES,
        gt=0,
        description="Largest accepted request line, excluding the terminator",
    )

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_environ(
        cls,
        environ: Mapping[str, str] | None = None,
        **overrides: object,
    ) -> IpcSettings:
        """Build settings, taking ``active_socket`` from *environ*."""
        env = os.environ if environ is None else environ
        raw = env.get(SOCKET_ENV, "").strip()
        values: dict[str, object] = {"active_socket": Path(raw) if raw else None}
        values.update(overrides)
        return cls.model_validate(values)


__all__ = ["IpcSettings"]
