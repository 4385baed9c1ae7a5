"""
MogileFS tracker client core.

Submodules:
- errors.py: Exception classes
- protocol.py: Request/reply line codec
- health.py: TrackerHealth contract and DeadTrackerRegistry
- connection.py: TrackerConnection and dial()
- client.py: TrackerClient
"""

from .client import TrackerClient
from .connection import TrackerConnection, dial
from .errors import (
    MalformedReplyError,
    NoTrackersAvailableError,
    PayloadParseError,
    TrackerError,
    TrackerReplyError,
    TransportError,
)
from .health import DeadTrackerRegistry, TrackerHealth, TrackerHealthState, shared_registry
from .protocol import decode_args, encode_args, encode_request, parse_reply

__all__ = [
    # Main client
    "TrackerClient",
    # Connections
    "TrackerConnection",
    "dial",
    # Health bookkeeping
    "TrackerHealth",
    "TrackerHealthState",
    "DeadTrackerRegistry",
    "shared_registry",
    # Codec
    "encode_args",
    "decode_args",
    "encode_request",
    "parse_reply",
    # Errors
    "TrackerError",
    "NoTrackersAvailableError",
    "TransportError",
    "MalformedReplyError",
    "TrackerReplyError",
    "PayloadParseError",
]
