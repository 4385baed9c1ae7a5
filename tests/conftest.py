"""Shared fixtures: scripted trackers over local socket pairs."""

from __future__ import annotations

import socket

import pytest

from mogile_client.tracker.connection import TrackerConnection
from mogile_client.tracker.health import DeadTrackerRegistry


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class ScriptedTrackers:
    """Dialer standing in for a set of trackers.

    Addresses in ``down`` refuse connections. Other addresses get a socket
    pair; replies queued with ``queue_reply`` before the dial are written
    as soon as the connection is made.
    """

    def __init__(self) -> None:
        self.down: set[str] = set()
        self.dialed: list[str] = []
        self.peers: dict[str, socket.socket] = {}
        self._queued: dict[str, list[bytes]] = {}
        self._sockets: list[socket.socket] = []

    def __call__(self, address: str, timeout: float, io_timeout: float | None) -> TrackerConnection:
        self.dialed.append(address)
        if address in self.down:
            raise ConnectionRefusedError(f"connection refused by {address}")

        client_sock, server_sock = socket.socketpair()
        server_sock.settimeout(1.0)
        self._sockets.extend([client_sock, server_sock])
        self.peers[address] = server_sock
        for data in self._queued.pop(address, []):
            server_sock.sendall(data)
        return TrackerConnection(address=address, sock=client_sock, reader=client_sock.makefile("rb"))

    def queue_reply(self, address: str, data: bytes) -> None:
        if address in self.peers:
            self.peers[address].sendall(data)
        else:
            self._queued.setdefault(address, []).append(data)

    def hang_up(self, address: str) -> None:
        self.peers[address].shutdown(socket.SHUT_WR)

    def received(self, address: str) -> bytes:
        return self.peers[address].recv(65536)

    def close(self) -> None:
        for sock in self._sockets:
            sock.close()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def registry(clock):
    return DeadTrackerRegistry(dead_timeout=5.0, clock=clock)


@pytest.fixture
def trackers():
    scripted = ScriptedTrackers()
    yield scripted
    scripted.close()
