"""Listener behaviour against real Unix sockets."""

from __future__ import annotations

import asyncio
import json
import socket
import time
from typing import TYPE_CHECKING

import pytest

from monoterm.ipc.client import send_message
from monoterm.ipc.contracts import (
    ConfigUpdate,
    CreateWindow,
    IpcConfig,
    Takeover,
    TakeoverRequest,
    encode_message,
)
from monoterm.ipc.server import SocketListener
from monoterm.ipc.settings import IpcSettings
from tests.helpers import send_raw, wait_until

if TYPE_CHECKING:
    from pathlib import Path

    from monoterm.ipc.events import IpcEvent

pytestmark = pytest.mark.smoke


@pytest.fixture
async def listener_and_events(short_tmp: Path, ipc_environ: dict[str, str]):
    events: list[IpcEvent] = []
    listener = SocketListener(
        events.append,
        settings=IpcSettings(socket_path=short_tmp / "l.sock", read_timeout=0.5),
        environ=ipc_environ,
    )
    path = await listener.start()
    assert path is not None
    yield listener, events
    await listener.stop()


async def test_create_window_is_dispatched_once(listener_and_events) -> None:
    listener, events = listener_and_events

    await asyncio.to_thread(
        send_message, CreateWindow(options={"cwd": "/tmp"}), listener.socket_path
    )
    await wait_until(lambda: len(events) == 1, description="create-window dispatch")
    await listener.join()
    await asyncio.sleep(0.05)

    assert len(events) == 1
    assert events[0].message == CreateWindow(options={"cwd": "/tmp"})
    assert events[0].window_id is None


async def test_raw_wire_line_is_decoded(listener_and_events) -> None:
    listener, events = listener_and_events

    await asyncio.to_thread(
        send_raw, listener.socket_path, json.dumps({"CreateWindow": {"cwd": "/tmp"}}).encode()
    )
    await wait_until(lambda: len(events) == 1)

    assert isinstance(events[0].message, CreateWindow)
    assert events[0].message.options == {"cwd": "/tmp"}


async def test_negative_window_id_is_dropped(listener_and_events) -> None:
    listener, events = listener_and_events
    dropped = ConfigUpdate(config=IpcConfig(window_id=-1, options=["font.size=20"]))
    marker = CreateWindow(options={"marker": True})

    await asyncio.to_thread(send_message, dropped, listener.socket_path)
    await asyncio.to_thread(send_message, marker, listener.socket_path)
    await wait_until(lambda: len(events) >= 1)
    await listener.join()

    assert [event.message for event in events] == [marker]


async def test_targeted_messages_carry_window_id(listener_and_events) -> None:
    listener, events = listener_and_events

    await asyncio.to_thread(
        send_message, ConfigUpdate(config=IpcConfig(window_id=4, reset=True)), listener.socket_path
    )
    await asyncio.to_thread(
        send_message,
        TakeoverRequest(takeover=Takeover(window_id=9, msg="image:/nope.png")),
        listener.socket_path,
    )
    await wait_until(lambda: len(events) == 2)

    assert [event.window_id for event in events] == [4, 9]


@pytest.mark.parametrize(
    "bad_payload",
    [
        b"",
        b"\n",
        b'{"CreateWindow": {"cwd": "/t',
        b'{"Shutdown": {}}\n',
        b"\xff\xfe\n",
    ],
    ids=["empty", "blank-line", "truncated", "unknown-tag", "binary"],
)
async def test_malformed_input_keeps_loop_alive(listener_and_events, bad_payload: bytes) -> None:
    listener, events = listener_and_events

    await asyncio.to_thread(send_raw, listener.socket_path, bad_payload)
    await asyncio.to_thread(send_raw, listener.socket_path, bad_payload)
    await asyncio.to_thread(
        send_message, CreateWindow(options={"after": "bad"}), listener.socket_path
    )
    await wait_until(lambda: len(events) == 1)

    assert events[0].message == CreateWindow(options={"after": "bad"})
    assert listener.is_running


async def test_only_first_line_of_connection_is_read(listener_and_events) -> None:
    listener, events = listener_and_events
    first = b'{"CreateWindow": {"n": 1}}'
    second = b'{"CreateWindow": {"n": 2}}'

    await asyncio.to_thread(send_raw, listener.socket_path, first + b"\n" + second + b"\n")
    await asyncio.to_thread(send_raw, listener.socket_path, b'{"CreateWindow": {"n": 3}}\n')
    await wait_until(lambda: len(events) == 2)

    assert [event.message.options["n"] for event in events] == [1, 3]


async def test_messages_dispatched_in_acceptance_order(listener_and_events) -> None:
    listener, events = listener_and_events

    for n in range(5):
        await asyncio.to_thread(
            send_message, CreateWindow(options={"n": n}), listener.socket_path
        )
    await wait_until(lambda: len(events) == 5)

    assert [event.message.options["n"] for event in events] == list(range(5))


async def test_silent_sender_times_out(listener_and_events) -> None:
    listener, events = listener_and_events

    def hold_open_silently() -> None:
        with socket.socket(socket.AF_UNIX, socket.SOCK_STREAM) as sock:
            sock.connect(str(listener.socket_path))
            time.sleep(1.0)

    silent = asyncio.create_task(asyncio.to_thread(hold_open_silently))
    await asyncio.sleep(0.05)
    await asyncio.to_thread(send_message, CreateWindow(options={"late": 1}), listener.socket_path)

    # Dispatched after the 0.5s read deadline, before the silent peer hangs up.
    await wait_until(lambda: len(events) == 1, timeout=0.9)
    await silent


async def test_oversized_line_is_dropped(short_tmp: Path, ipc_environ, caplog) -> None:
    events: list[IpcEvent] = []
    settings = IpcSettings(socket_path=short_tmp / "l.sock", max_line_bytes=64)
    async with SocketListener(events.append, settings=settings, environ=ipc_environ) as listener:
        await asyncio.to_thread(
            send_message, CreateWindow(options={"pad": "x" * 200}), listener.socket_path
        )
        await asyncio.to_thread(send_message, CreateWindow(), listener.socket_path)
        await wait_until(lambda: len(events) == 1)

    assert events[0].message == CreateWindow()
    assert "Dropping socket request over 64 bytes" in caplog.text


async def test_failing_dispatch_does_not_stop_listener(
    short_tmp: Path, ipc_environ, caplog
) -> None:
    seen: list[IpcEvent] = []

    def dispatch(event: IpcEvent) -> None:
        seen.append(event)
        if len(seen) == 1:
            raise RuntimeError("window system busy")

    settings = IpcSettings(socket_path=short_tmp / "l.sock")
    async with SocketListener(dispatch, settings=settings, environ=ipc_environ) as listener:
        await asyncio.to_thread(send_message, CreateWindow(options={"n": 1}), listener.socket_path)
        await asyncio.to_thread(send_message, CreateWindow(options={"n": 2}), listener.socket_path)
        await wait_until(lambda: len(seen) == 2)

    assert "IPC dispatch callback failed" in caplog.text


async def test_async_dispatch_is_awaited(short_tmp: Path, ipc_environ) -> None:
    events: list[IpcEvent] = []

    async def dispatch(event: IpcEvent) -> None:
        await asyncio.sleep(0.01)
        events.append(event)

    settings = IpcSettings(socket_path=short_tmp / "l.sock")
    async with SocketListener(dispatch, settings=settings, environ=ipc_environ) as listener:
        await asyncio.to_thread(send_message, CreateWindow(), listener.socket_path)
        await wait_until(lambda: len(events) == 1)


async def test_line_at_size_limit_is_accepted(short_tmp: Path, ipc_environ) -> None:
    events: list[IpcEvent] = []
    line = encode_message(CreateWindow(options={"n": 1}))
    settings = IpcSettings(socket_path=short_tmp / "l.sock", max_line_bytes=len(line))
    async with SocketListener(events.append, settings=settings, environ=ipc_environ) as listener:
        await asyncio.to_thread(send_raw, listener.socket_path, line + b"\n")
        await wait_until(lambda: len(events) == 1)

    assert events[0].message == CreateWindow(options={"n": 1})


async def test_line_without_terminator_is_read_to_eof(listener_and_events) -> None:
    listener, events = listener_and_events

    await asyncio.to_thread(send_raw, listener.socket_path, b'{"CreateWindow": {"n": 7}}')
    await wait_until(lambda: len(events) == 1)

    assert events[0].message == CreateWindow(options={"n": 7})


async def test_accept_loop_stops_when_socket_is_closed(
    short_tmp: Path, ipc_environ, caplog
) -> None:
    listener = SocketListener(
        lambda _event: None,
        settings=IpcSettings(socket_path=short_tmp / "l.sock"),
        environ=ipc_environ,
    )
    closed = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
    closed.setblocking(False)
    closed.close()

    await asyncio.wait_for(listener._accept_loop(closed), timeout=1.0)

    stopped = [r for r in caplog.records if "no longer accepting requests" in r.getMessage()]
    assert len(stopped) == 1
    assert "Failed to accept socket connection" not in caplog.text
