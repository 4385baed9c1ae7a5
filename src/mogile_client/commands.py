"""
MogileFS file commands built on top of the tracker client.

Each command is a small argument mapping passed to ``TrackerClient.execute``
plus the interpretation of the returned values.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from .config import TrackerClientConfig
from .tracker.client import Dialer, TrackerClient
from .tracker.errors import PayloadParseError
from .tracker.health import TrackerHealth
from .tracker.protocol import (
    CMD_CREATE_CLOSE,
    CMD_CREATE_OPEN,
    CMD_DELETE,
    CMD_FILE_DEBUG,
    CMD_GET_PATHS,
    CMD_RENAME,
    Values,
)

logger = logging.getLogger(__name__)


@dataclass
class Destination:
    """A storage location handed out by ``create_open``."""

    devid: int
    path: str


@dataclass
class CreateOpenResult:
    """Reply to ``create_open``: the new file id and where to upload it."""

    fid: int
    destinations: list[Destination] = field(default_factory=list)


def _first(values: Values, key: str) -> str:
    try:
        return values[key][0]
    except (KeyError, IndexError):
        raise PayloadParseError(f"missing {key!r} in tracker reply") from None


def _int(values: Values, key: str) -> int:
    raw = _first(values, key)
    try:
        return int(raw)
    except ValueError:
        raise PayloadParseError(f"{key!r} is not an integer: {raw!r}") from None


class MogileFsClient(TrackerClient):
    """Tracker client bound to a single MogileFS domain.

    Usage::

        client = MogileFsClient(["10.0.0.1:7001"], domain="media")
        for url in client.get_paths("photos/cat.jpg"):
            ...
    """

    def __init__(
        self,
        config: TrackerClientConfig | Sequence[str],
        domain: str,
        *,
        health: TrackerHealth | None = None,
        dialer: Dialer | None = None,
    ) -> None:
        if not domain:
            raise ValueError("domain is required")
        super().__init__(config, health=health, dialer=dialer)
        self.domain = domain

    def get_paths(self, key: str, noverify: bool = True) -> list[str]:
        """Return the URLs under which ``key`` can be fetched."""
        args = {"domain": self.domain, "key": key}
        if noverify:
            args["noverify"] = "1"
        values = self.execute(CMD_GET_PATHS, args)

        count = _int(values, "paths")
        return [_first(values, f"path{i}") for i in range(1, count + 1)]

    def rename(self, from_key: str, to_key: str) -> None:
        self.execute(
            CMD_RENAME,
            {"domain": self.domain, "from_key": from_key, "to_key": to_key},
        )

    def delete(self, key: str) -> None:
        self.execute(CMD_DELETE, {"domain": self.domain, "key": key})

    def file_debug(self, key: str) -> dict[str, str]:
        """Return the tracker's debug view of ``key``, one value per field."""
        values = self.execute(CMD_FILE_DEBUG, {"domain": self.domain, "key": key})
        return {name: items[0] for name, items in values.items() if items}

    def create_open(
        self,
        key: str,
        storage_class: str | None = None,
        multi_dest: bool = True,
    ) -> CreateOpenResult:
        """Reserve a file id for ``key`` and get upload destinations.

        With ``multi_dest`` the tracker returns ``dev_count`` candidates,
        otherwise a single ``devid``/``path`` pair.
        """
        args = {"domain": self.domain, "key": key}
        if storage_class:
            args["class"] = storage_class
        if multi_dest:
            args["multi_dest"] = "1"
        values = self.execute(CMD_CREATE_OPEN, args)

        result = CreateOpenResult(fid=_int(values, "fid"))
        if "dev_count" in values:
            for i in range(1, _int(values, "dev_count") + 1):
                result.destinations.append(
                    Destination(devid=_int(values, f"devid_{i}"), path=_first(values, f"path_{i}"))
                )
        else:
            result.destinations.append(
                Destination(devid=_int(values, "devid"), path=_first(values, "path"))
            )
        logger.debug("create_open %s: fid %d, %d destinations", key, result.fid, len(result.destinations))
        return result

    def create_close(self, key: str, fid: int, devid: int, path: str, size: int) -> None:
        """Commit an upload started with ``create_open``."""
        self.execute(
            CMD_CREATE_CLOSE,
            {
                "domain": self.domain,
                "key": key,
                "fid": str(fid),
                "devid": str(devid),
                "path": path,
                "size": str(size),
            },
        )
