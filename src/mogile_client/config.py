"""
Configuration for tracker clients.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

DEFAULT_TRACKER_PORT = 7001
DEFAULT_DIAL_TIMEOUT = 2.0
DEFAULT_DEAD_TIMEOUT = 5.0


def parse_tracker_address(address: str) -> tuple[str, int]:
    """Split ``host:port`` (or ``[v6]:port``, or bare ``host``) into parts.

    Raises:
        ValueError: The address cannot be parsed.
    """
    address = address.strip()
    if not address:
        raise ValueError("empty tracker address")

    if address.startswith("["):
        host, sep, rest = address[1:].partition("]")
        if not sep or not host:
            raise ValueError(f"invalid tracker address: {address!r}")
        if not rest:
            return host, DEFAULT_TRACKER_PORT
        if not rest.startswith(":"):
            raise ValueError(f"invalid tracker address: {address!r}")
        port_str = rest[1:]
    elif ":" not in address:
        return address, DEFAULT_TRACKER_PORT
    elif address.count(":") == 1:
        host, _, port_str = address.partition(":")
    else:
        raise ValueError(f"IPv6 tracker address must be bracketed: {address!r}")

    if not host or not port_str.isdigit():
        raise ValueError(f"invalid tracker address: {address!r}")
    port = int(port_str)
    if not 0 < port < 65536:
        raise ValueError(f"tracker port out of range: {address!r}")
    return host, port


@dataclass
class TrackerClientConfig:
    """Settings shared by every request a client makes.

    ``io_timeout`` applies to reads and writes once connected. The default
    of None blocks until the tracker answers.
    """

    trackers: list[str] = field(default_factory=list)
    dial_timeout: float = DEFAULT_DIAL_TIMEOUT
    io_timeout: float | None = None
    dead_timeout: float = DEFAULT_DEAD_TIMEOUT

    def __post_init__(self) -> None:
        if isinstance(self.trackers, str):
            self.trackers = [self.trackers]
        self.trackers = list(self.trackers)
        if not self.trackers:
            raise ValueError("at least one tracker address is required")
        for address in self.trackers:
            parse_tracker_address(address)
        if self.dial_timeout <= 0:
            raise ValueError("dial_timeout must be positive")
        if self.io_timeout is not None and self.io_timeout <= 0:
            raise ValueError("io_timeout must be positive or None")
        if self.dead_timeout < 0:
            raise ValueError("dead_timeout must not be negative")

    def to_dict(self) -> dict[str, Any]:
        return {
            "trackers": list(self.trackers),
            "dial_timeout": self.dial_timeout,
            "io_timeout": self.io_timeout,
            "dead_timeout": self.dead_timeout,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TrackerClientConfig:
        return cls(
            trackers=data.get("trackers", []),
            dial_timeout=data.get("dial_timeout", DEFAULT_DIAL_TIMEOUT),
            io_timeout=data.get("io_timeout"),
            dead_timeout=data.get("dead_timeout", DEFAULT_DEAD_TIMEOUT),
        )
