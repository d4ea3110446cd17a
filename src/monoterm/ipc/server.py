"""Socket listener that receives requests from other monoterm invocations."""

from __future__ import annotations

import asyncio
import contextlib
import errno
import inspect
import logging
import os
import socket
from typing import TYPE_CHECKING

from monoterm.ipc.constants import SOCKET_ENV
from monoterm.ipc.contracts import decode_message
from monoterm.ipc.errors import BindFailedError, MalformedMessageError, WindowIdOutOfRangeError
from monoterm.ipc.events import IpcEvent, to_event
from monoterm.ipc.settings import IpcSettings
from monoterm.paths import default_socket_path

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, MutableMapping
    from pathlib import Path
    from typing import Any

    DispatchCallback = Callable[[IpcEvent], Awaitable[None] | None]

logger = logging.getLogger(__name__)

_ACCEPT_RETRY_DELAY = 0.1
# Errors meaning the listening socket itself is gone.
_FATAL_ACCEPT_ERRNOS = frozenset({errno.EBADF, errno.EINVAL})


def _bind_unix_socket(path: Path) -> socket.socket:
    """Create a non-blocking listening socket at *path*.

    An existing file at *path* is left alone; if it is another instance's
    socket, bind fails and that instance keeps ownership.
    """
    family = getattr(socket, "AF_UNIX", None)
    if family is None:
        raise OSError(errno.EAFNOSUPPORT, "Unix sockets are not supported on this platform")

    sock = socket.socket(family, socket.SOCK_STREAM)
    try:
        sock.bind(str(path))
        with contextlib.suppress(OSError):
            os.chmod(path, 0o600)
        sock.listen()
        sock.setblocking(False)
    except OSError:
        sock.close()
        raise
    return sock


class SocketListener:
    """Single-instance IPC listener.

    Accepts one connection at a time, reads one JSON line from it and hands
    the decoded message to *dispatch*. Events flow through a queue so a slow
    dispatch callback never holds up accepting the next sender.

    Usage::

        def dispatch(event: IpcEvent) -> None:
            window_system.post(event)


        listener = SocketListener(dispatch)
        socket_path = await listener.start()
        if socket_path is None:
            ...  # IPC disabled for this run
    """

    def __init__(
        self,
        dispatch: DispatchCallback,
        *,
        settings: IpcSettings | None = None,
        environ: MutableMapping[str, str] | None = None,
    ) -> None:
        self._dispatch = dispatch
        self._settings = settings or IpcSettings()
        self._environ = os.environ if environ is None else environ
        self._socket: socket.socket | None = None
        self._socket_path: Path | None = None
        self._events: asyncio.Queue[IpcEvent] = asyncio.Queue()
        self._tasks: list[asyncio.Task[None]] = []

    async def __aenter__(self) -> SocketListener:
        await self.start()
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.stop()

    @property
    def socket_path(self) -> Path | None:
        """Path of the bound socket, available after a successful ``start()``."""
        return self._socket_path

    @property
    def is_running(self) -> bool:
        return self._socket is not None

    async def start(self) -> Path | None:
        """Bind the socket and start the accept loop.

        Returns:
            The bound socket path, or ``None`` when the socket could not be
            created. The caller keeps running without IPC in that case.
        """
        if self.is_running:
            msg = "Listener is already running"
            raise RuntimeError(msg)

        socket_path = self._settings.socket_path or default_socket_path(environ=self._environ)
        self._environ[SOCKET_ENV] = str(socket_path)

        try:
            self._socket = _bind_unix_socket(socket_path)
        except OSError as exc:
            logger.warning("Unable to create socket: %s", BindFailedError(socket_path, exc))
            return None

        self._socket_path = socket_path
        self._tasks = [
            asyncio.create_task(self._accept_loop(self._socket), name="monoterm-socket-listener"),
            asyncio.create_task(self._dispatch_loop(), name="monoterm-socket-dispatch"),
        ]
        logger.info("IPC socket listening on %s", socket_path)
        return socket_path

    async def stop(self) -> None:
        """Stop accepting requests and remove the socket file."""
        if self._socket is None:
            return
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []
        self._socket.close()
        self._socket = None
        if self._socket_path is not None:
            with contextlib.suppress(OSError):
                self._socket_path.unlink(missing_ok=True)
        logger.info("IPC socket listener stopped")

    async def join(self) -> None:
        """Wait until every queued event has been dispatched."""
        await self._events.join()

    async def _accept_loop(self, listener: socket.socket) -> None:
        loop = asyncio.get_running_loop()
        while True:
            try:
                conn, _ = await loop.sock_accept(listener)
            except OSError as exc:
                if exc.errno in _FATAL_ACCEPT_ERRNOS:
                    logger.error("IPC socket closed, no longer accepting requests: %s", exc)
                    return
                logger.warning("Failed to accept socket connection", exc_info=True)
                await asyncio.sleep(_ACCEPT_RETRY_DELAY)
                continue

            line = await self._read_line(conn)
            if line is None:
                continue

            try:
                message = decode_message(line)
            except MalformedMessageError as exc:
                logger.warning("Failed to convert data from socket: %s", exc)
                continue

            try:
                event = to_event(message)
            except WindowIdOutOfRangeError as exc:
                logger.debug("Dropping %s message: %s", message.tag, exc)
                continue

            self._events.put_nowait(event)

    async def _read_line(self, conn: socket.socket) -> bytes | None:
        """Read up to the first newline, or to EOF, then close *conn*.

        Returns ``None`` when nothing usable was received.
        """
        try:
            reader, writer = await asyncio.open_unix_connection(
                sock=conn, limit=self._settings.max_line_bytes
            )
        except OSError as exc:
            conn.close()
            logger.debug("Cannot read from socket connection: %s", exc)
            return None

        try:
            async with asyncio.timeout(self._settings.read_timeout):
                data = await reader.readline()
        except TimeoutError:
            logger.warning("Timed out reading from socket connection")
            return None
        except ValueError:
            logger.warning(
                "Dropping socket request over %d bytes", self._settings.max_line_bytes
            )
            return None
        except OSError as exc:
            logger.debug("Socket connection failed while reading: %s", exc)
            return None
        finally:
            writer.close()
            with contextlib.suppress(OSError):
                await writer.wait_closed()

        if not data:
            return None
        return data.removesuffix(b"\n")

    async def _dispatch_loop(self) -> None:
        while True:
            event = await self._events.get()
            try:
                result: Any = self._dispatch(event)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception("IPC dispatch callback failed for %s", event.message.tag)
            finally:
                self._events.task_done()


__all__ = ["SocketListener"]
