"""Logging setup for monoterm.

Log records from the IPC coordinator are kept in a ring buffer so a running
instance can dump recent socket activity on demand, and are optionally
echoed to stderr by the command line front end.
"""

from __future__ import annotations

import logging
import sys
from collections import deque
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path

MAX_LOG_LINES = 2000
MAX_LOG_MESSAGE_LENGTH = 4096

CLI_LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"


@dataclass(slots=True)
class LogEntry:
    """A captured log entry."""

    group: str  # Level name (DEBUG, INFO, WARNING, ERROR, etc.)
    message: str
    timestamp: float


log_buffer: deque[LogEntry] = deque(maxlen=MAX_LOG_LINES)


class DebugLogHandler(logging.Handler):
    """Logging handler that captures logs to the debug buffer."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            msg = self.format(record)
            if len(msg) > MAX_LOG_MESSAGE_LENGTH:
                msg = msg[:MAX_LOG_MESSAGE_LENGTH] + "... [truncated]"
            log_buffer.append(
                LogEntry(group=record.levelname, message=msg, timestamp=record.created)
            )
        except Exception:
            self.handleError(record)


_debug_handler: DebugLogHandler | None = None
_cli_handler: logging.StreamHandler | None = None


def setup_debug_logging() -> None:
    """Attach the ring-buffer handler to the ``monoterm`` logger.

    Idempotent; later calls have no effect.
    """
    global _debug_handler

    if _debug_handler is not None:
        return

    handler = DebugLogHandler(level=logging.DEBUG)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    package_logger = logging.getLogger("monoterm")
    package_logger.addHandler(handler)
    package_logger.setLevel(logging.DEBUG)
    _debug_handler = handler


def configure_cli_logging(verbosity: int = 0) -> None:
    """Echo monoterm log records to stderr.

    ``verbosity`` 0 shows warnings, 1 adds info, 2 or more adds debug.
    """
    levels = (logging.WARNING, logging.INFO, logging.DEBUG)
    level = levels[min(verbosity, len(levels) - 1)]

    global _cli_handler

    setup_debug_logging()
    if _cli_handler is None:
        _cli_handler = logging.StreamHandler()
        _cli_handler.setFormatter(logging.Formatter(CLI_LOG_FORMAT, datefmt="%H:%M:%S"))
        logging.getLogger("monoterm").addHandler(_cli_handler)
    # Rebind on every call; the CLI may run several times in one process.
    _cli_handler.setStream(sys.stderr)
    _cli_handler.setLevel(level)


def clear_log_buffer() -> None:
    """Clear the log buffer."""
    log_buffer.clear()


def export_logs_to_file(output_path: Path) -> int:
    """Write the buffered log entries to *output_path*.

    Returns:
        Number of log entries written.
    """
    output_path.parent.mkdir(parents=True, exist_ok=True)
    entries = list(log_buffer)
    with output_path.open("w", encoding="utf-8") as f:
        f.write("# monoterm IPC log export\n")
        f.write(f"# Total entries: {len(entries)}\n\n")
        for entry in entries:
            ts = datetime.fromtimestamp(entry.timestamp).strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]
            f.write(f"{ts} [{entry.group}] {entry.message}\n")
    return len(entries)


__all__ = [
    "DebugLogHandler",
    "LogEntry",
    "clear_log_buffer",
    "configure_cli_logging",
    "export_logs_to_file",
    "log_buffer",
    "setup_debug_logging",
]
