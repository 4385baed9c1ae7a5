"""
MogileFS tracker client.

Talks the line-oriented tracker protocol to a set of replicated trackers,
skipping trackers that recently failed.
"""

__version__ = "0.1.0"

from mogile_client.commands import (
    CreateOpenResult,
    Destination,
    MogileFsClient,
)
from mogile_client.config import (
    DEFAULT_DEAD_TIMEOUT,
    DEFAULT_DIAL_TIMEOUT,
    DEFAULT_TRACKER_PORT,
    TrackerClientConfig,
    parse_tracker_address,
)
from mogile_client.tracker import (
    DeadTrackerRegistry,
    MalformedReplyError,
    NoTrackersAvailableError,
    PayloadParseError,
    TrackerClient,
    TrackerConnection,
    TrackerError,
    TrackerHealth,
    TrackerHealthState,
    TrackerReplyError,
    TransportError,
    decode_args,
    encode_args,
    encode_request,
    parse_reply,
    shared_registry,
)

__all__ = [
    "__version__",
    # Config
    "TrackerClientConfig",
    "parse_tracker_address",
    "DEFAULT_TRACKER_PORT",
    "DEFAULT_DIAL_TIMEOUT",
    "DEFAULT_DEAD_TIMEOUT",
    # Client
    "TrackerClient",
    "TrackerConnection",
    # Commands
    "MogileFsClient",
    "CreateOpenResult",
    "Destination",
    # Health
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
