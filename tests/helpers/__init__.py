"""Test helpers package."""

from tests.helpers.sockets import make_orphan_socket, send_raw, socket_name
from tests.helpers.wait import wait_until

__all__ = ["make_orphan_socket", "send_raw", "socket_name", "wait_until"]
