"""
Tracker health bookkeeping.

A tracker that failed is blacklisted for ``dead_timeout`` seconds. Once the
cooldown has elapsed it becomes eligible again on its own; a successful
request marks it alive immediately.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol

from ..config import DEFAULT_DEAD_TIMEOUT

logger = logging.getLogger(__name__)


class TrackerHealth(Protocol):
    """Eligibility store consulted by the tracker client."""

    def is_blacklisted(self, address: str) -> bool: ...

    def blacklist(self, address: str) -> None: ...

    def mark_eligible(self, address: str) -> None: ...


@dataclass
class TrackerHealthState:
    """Failure record for a single tracker."""

    address: str
    failed_at: float
    fail_count: int
    cooldown_until: float

    def is_in_cooldown(self, now: float | None = None) -> bool:
        if now is None:
            now = time.time()
        return now < self.cooldown_until

    def remaining_cooldown(self, now: float | None = None) -> float:
        if now is None:
            now = time.time()
        return max(0.0, self.cooldown_until - now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "address": self.address,
            "failed_at": self.failed_at,
            "fail_count": self.fail_count,
            "cooldown_until": self.cooldown_until,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TrackerHealthState:
        return cls(
            address=data["address"],
            failed_at=data["failed_at"],
            fail_count=data.get("fail_count", 1),
            cooldown_until=data["cooldown_until"],
        )


class DeadTrackerRegistry:
    """Blacklist with a fixed recovery timeout.

    Safe to share between clients living in different threads.

    Usage::

        registry = DeadTrackerRegistry(dead_timeout=10.0)
        registry.blacklist("10.0.0.1:7001")
        registry.is_blacklisted("10.0.0.1:7001")  # True for the next 10s
    """

    def __init__(
        self,
        dead_timeout: float = DEFAULT_DEAD_TIMEOUT,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if dead_timeout < 0:
            raise ValueError("dead_timeout must not be negative")
        self._dead_timeout = dead_timeout
        self._clock = clock
        self._states: dict[str, TrackerHealthState] = {}
        self._lock = threading.Lock()

    @property
    def dead_timeout(self) -> float:
        """Seconds a blacklisted tracker stays ineligible."""
        return self._dead_timeout

    def is_blacklisted(self, address: str) -> bool:
        with self._lock:
            state = self._states.get(address)
            return state is not None and state.is_in_cooldown(self._clock())

    def blacklist(self, address: str) -> None:
        now = self._clock()
        with self._lock:
            state = self._states.get(address)
            if state is None:
                state = TrackerHealthState(
                    address=address,
                    failed_at=now,
                    fail_count=0,
                    cooldown_until=now,
                )
                self._states[address] = state
            state.failed_at = now
            state.fail_count += 1
            state.cooldown_until = now + self._dead_timeout
            fail_count = state.fail_count
        logger.warning(
            "Tracker %s blacklisted for %.1fs (failures: %d)",
            address,
            self._dead_timeout,
            fail_count,
        )

    def mark_eligible(self, address: str) -> None:
        with self._lock:
            known = self._states.pop(address, None) is not None
        if known:
            logger.debug("Tracker %s is alive again", address)

    def get_state(self, address: str) -> TrackerHealthState | None:
        """Failure record for ``address``, or None if it never failed."""
        with self._lock:
            return self._states.get(address)

    def snapshot(self) -> dict[str, dict[str, Any]]:
        """Serializable view of every recorded failure."""
        with self._lock:
            return {address: state.to_dict() for address, state in self._states.items()}

    def clear(self) -> None:
        with self._lock:
            self._states.clear()


_shared_registries: dict[float, DeadTrackerRegistry] = {}
_shared_lock = threading.Lock()


def shared_registry(dead_timeout: float = DEFAULT_DEAD_TIMEOUT) -> DeadTrackerRegistry:
    """Process-wide registry used by clients that are not given one.

    Clients configured with the same ``dead_timeout`` share one registry.
    """
    with _shared_lock:
        registry = _shared_registries.get(dead_timeout)
        if registry is None:
            registry = DeadTrackerRegistry(dead_timeout)
            _shared_registries[dead_timeout] = registry
        return registry
