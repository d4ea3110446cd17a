"""monoterm: route invocations of a terminal to its single running instance."""

from __future__ import annotations

from monoterm.version import get_monoterm_version

__version__ = get_monoterm_version()

__all__ = ["__version__"]
