"""Package version lookup."""

from __future__ import annotations

from functools import lru_cache
from importlib.metadata import PackageNotFoundError, version


@lru_cache(maxsize=1)
def get_monoterm_version() -> str:
    """Return the installed monoterm version, or 'dev' for a source checkout."""
    try:
        return version("monoterm")
    except PackageNotFoundError:
        return "dev"


__all__ = ["get_monoterm_version"]
