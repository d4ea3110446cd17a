"""Configuration loader for monoterm."""

from __future__ import annotations

import logging
import os
import tempfile
import tomllib
from pathlib import Path
from typing import TYPE_CHECKING

import tomlkit
from pydantic import BaseModel, Field, ValidationError

from monoterm.ipc.constants import DEFAULT_READ_TIMEOUT, MAX_LINE_BYTES
from monoterm.ipc.settings import IpcSettings
from monoterm.paths import get_config_path

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = logging.getLogger(__name__)


class GeneralConfig(BaseModel):
    """General configuration settings."""

    ipc_socket: bool = Field(
        default=True,
        description="Listen for requests from other monoterm invocations",
    )


class IpcSection(BaseModel):
    """Socket listener tuning."""

    read_timeout: float = Field(
        default=DEFAULT_READ_TIMEOUT,
        ge=0,
        description="Seconds to wait for a request line (0 waits forever)",
    )
    max_line_bytes: int = Field(default=MAX_LINE_BYTES, gt=0)


class MonotermConfig(BaseModel):
    """Root configuration model."""

    general: GeneralConfig = Field(default_factory=GeneralConfig)
    ipc: IpcSection = Field(default_factory=IpcSection)

    @classmethod
    def load(cls, config_path: Path | None = None) -> MonotermConfig:
        """Load configuration from TOML, falling back to defaults.

        A missing file is not an error. An unreadable or invalid file is
        logged and ignored so a broken config never disables the terminal.
        """
        if config_path is None:
            config_path = get_config_path()

        try:
            with open(config_path, "rb") as f:
                data = tomllib.load(f)
        except FileNotFoundError:
            return cls()
        except (OSError, tomllib.TOMLDecodeError) as exc:
            logger.warning("Unable to read config %s: %s", config_path, exc)
            return cls()

        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            logger.warning("Invalid config %s, using defaults: %s", config_path, exc)
            return cls()

    def ipc_settings(
        self,
        *,
        socket_path: Path | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> IpcSettings:
        """Combine file settings with the process environment."""
        return IpcSettings.from_environ(
            environ,
            socket_path=socket_path,
            read_timeout=self.ipc.read_timeout or None,
            max_line_bytes=self.ipc.max_line_bytes,
        )

    def save(self, path: Path) -> None:
        """Write the configuration as TOML, replacing *path* atomically."""
        doc = tomlkit.document()
        doc.add(tomlkit.comment("monoterm configuration"))
        for section, model in (("general", self.general), ("ipc", self.ipc)):
            table = tomlkit.table()
            for key, value in model.model_dump().items():
                table[key] = value
            doc[section] = table

        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=".tmp_")
        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(tomlkit.dumps(doc))
            tmp_path.replace(path)
        except BaseException:
            tmp_path.unlink(missing_ok=True)
            raise


__all__ = ["GeneralConfig", "IpcSection", "MonotermConfig"]
