"""Pytest fixtures for monoterm tests."""

from __future__ import annotations

import logging
import os
import shutil
import sys
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING

import pytest
from hypothesis import Phase, Verbosity, settings

from monoterm import debug_log

if TYPE_CHECKING:
    from collections.abc import Generator


settings.register_profile(
    "ci",
    max_examples=100,
    deadline=None,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
)
settings.register_profile(
    "dev",
    max_examples=20,
    deadline=500,
)
settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    deadline=None,
)
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "dev"))


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Skip real-socket tests where Unix sockets are unavailable."""
    del config
    if sys.platform != "win32":
        return
    skip = pytest.mark.skip(reason="Unix sockets unavailable on Windows")
    for item in items:
        if item.get_closest_marker("smoke"):
            item.add_marker(skip)


@pytest.fixture
def short_tmp() -> Generator[Path, None, None]:
    """Create a short temp directory for Unix socket paths (macOS 104-byte limit)."""
    d = tempfile.mkdtemp(prefix="m-", dir="/tmp")
    yield Path(d)
    shutil.rmtree(d, ignore_errors=True)


@pytest.fixture
def ipc_environ(short_tmp: Path) -> dict[str, str]:
    """An isolated environment: private socket directory and a fixed display."""
    return {"MONOTERM_RUNTIME_DIR": str(short_tmp), "DISPLAY": ":7"}


@pytest.fixture(autouse=True)
def _isolate_monoterm_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep the developer's running instance and config out of the tests."""
    monkeypatch.delenv("MONOTERM_SOCKET", raising=False)
    monkeypatch.delenv("MONOTERM_WINDOW_ID", raising=False)
    monkeypatch.setenv("MONOTERM_CONFIG_DIR", str(tmp_path / "config"))


@pytest.fixture(autouse=True)
def _reset_cli_logging() -> Generator[None, None, None]:
    """Detach the stderr handler installed by CLI invocations."""
    yield
    if debug_log._cli_handler is not None:
        logging.getLogger("monoterm").removeHandler(debug_log._cli_handler)
        debug_log._cli_handler = None
