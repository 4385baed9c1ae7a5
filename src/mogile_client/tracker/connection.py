"""
Tracker connection model.
"""

from __future__ import annotations

import logging
import socket
import time
from dataclasses import dataclass, field
from typing import BinaryIO

from ..config import parse_tracker_address
from .errors import TransportError

logger = logging.getLogger(__name__)


@dataclass
class TrackerConnection:
    """An open socket to one tracker."""

    address: str
    sock: socket.socket
    reader: BinaryIO
    connected_at: float = field(default_factory=time.time)
    last_used: float = 0.0
    requests_sent: int = 0
    replies_received: int = 0

    def send_line(self, data: bytes) -> None:
        try:
            self.sock.sendall(data)
        except OSError as e:
            raise TransportError(f"write to tracker {self.address} failed: {e}") from e
        self.requests_sent += 1
        self.last_used = time.time()

    def read_line(self) -> bytes:
        """Read one reply line, terminator included."""
        try:
            line = self.reader.readline()
        except OSError as e:
            raise TransportError(f"read from tracker {self.address} failed: {e}") from e
        if not line.endswith(b"\n"):
            raise TransportError(f"tracker {self.address} closed the connection")
        self.replies_received += 1
        return line

    def close(self) -> None:
        try:
            self.reader.close()
        finally:
            self.sock.close()


def dial(address: str, timeout: float, io_timeout: float | None = None) -> TrackerConnection:
    """Open a TCP connection to ``address`` within ``timeout`` seconds.

    Raises:
        OSError: The tracker could not be reached.
    """
    host, port = parse_tracker_address(address)
    sock = socket.create_connection((host, port), timeout=timeout)
    sock.settimeout(io_timeout)
    logger.debug("Connected to tracker %s", address)
    return TrackerConnection(address=address, sock=sock, reader=sock.makefile("rb"))
