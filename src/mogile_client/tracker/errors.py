"""
Tracker client exceptions.

Each error records whether the tracker that served the request should be
blamed for it. Blamed trackers are blacklisted, the others are marked alive.
"""

from __future__ import annotations


class TrackerError(Exception):
    """Base exception for tracker client errors."""

    blames_tracker = True


class NoTrackersAvailableError(TrackerError):
    """Raised when no tracker accepted a connection."""

    blames_tracker = False

    def __init__(self, message: str, last_error: BaseException | None = None) -> None:
        super().__init__(message)
        self.last_error = last_error


class TransportError(TrackerError):
    """Raised when writing the request or reading the reply fails."""

    pass


class MalformedReplyError(TrackerError):
    """Raised when a reply line is neither ``OK`` nor ``ERR``."""

    def __init__(self, line: str) -> None:
        super().__init__(f"internal:invalid tracker reply: {line!r}")
        self.line = line


class TrackerReplyError(TrackerError):
    """The tracker reported a domain failure (``ERR <code> ...``)."""

    blames_tracker = False

    def __init__(self, code: str, message: str = "") -> None:
        super().__init__(f"mogilefsd:{code}")
        self.code = code
        self.message = message


class PayloadParseError(TrackerError):
    """Raised when the payload of an ``OK`` reply cannot be decoded."""

    blames_tracker = False
