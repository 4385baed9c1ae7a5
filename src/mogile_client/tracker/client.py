"""
Tracker client: tracker selection plus the request/reply exchange.

A client binds to one tracker the first time it needs a connection and
keeps using that connection until ``reset()`` is called. Trackers are
tried in configured order, blacklisted ones last. After every request the
serving tracker is either blamed (blacklisted) or marked alive, depending
on how the exchange ended.

A client is not thread-safe: issue one request at a time, or give each
thread its own client. Tracker health is shared between clients.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

from ..config import TrackerClientConfig
from .connection import TrackerConnection, dial
from .errors import NoTrackersAvailableError, TrackerError
from .health import TrackerHealth, shared_registry
from .protocol import Args, Values, decode_line, encode_request, parse_reply

logger = logging.getLogger(__name__)

Dialer = Callable[[str, float, float | None], TrackerConnection]


class TrackerClient:
    """Sends commands to a set of replicated trackers.

    Usage::

        client = TrackerClient(["10.0.0.1:7001", "10.0.0.2:7001"])
        values = client.execute("get_paths", {"domain": "media", "key": "a.jpg"})
        client.close()
    """

    def __init__(
        self,
        config: TrackerClientConfig | Sequence[str],
        *,
        health: TrackerHealth | None = None,
        dialer: Dialer | None = None,
    ) -> None:
        if not isinstance(config, TrackerClientConfig):
            config = TrackerClientConfig(trackers=list(config))
        self._config = config
        self._trackers = list(config.trackers)
        self._health = health if health is not None else shared_registry(config.dead_timeout)
        self._dialer = dialer or dial
        self._conn: TrackerConnection | None = None
        self._last_tracker: str | None = None
        self._initialized = False
        # Not advanced anywhere yet; zeroed on every fresh connect.
        self._reconnect_counter = 0

    @property
    def config(self) -> TrackerClientConfig:
        return self._config

    @property
    def trackers(self) -> list[str]:
        """Tracker addresses in selection order."""
        return list(self._trackers)

    @property
    def health(self) -> TrackerHealth:
        return self._health

    @property
    def last_tracker(self) -> str | None:
        """Address of the tracker serving the current connection."""
        return self._last_tracker

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    @property
    def reconnect_counter(self) -> int:
        return self._reconnect_counter

    def acquire(self) -> TrackerConnection:
        """Return the bound connection, selecting a tracker on first use.

        The first pass skips blacklisted trackers; if nothing answers, the
        second pass tries every tracker. Each failed connect blacklists
        that tracker.

        Raises:
            NoTrackersAvailableError: Every connect attempt failed.
        """
        if self._initialized and self._conn is not None:
            logger.debug("Reusing connection to tracker %s", self._last_tracker)
            return self._conn

        last_error: OSError | None = None
        for ignore_blacklist in (False, True):
            for address in self._trackers:
                if not ignore_blacklist and self._health.is_blacklisted(address):
                    logger.debug("Skipping blacklisted tracker %s", address)
                    continue

                logger.debug("Dialing tracker %s", address)
                try:
                    conn = self._dialer(address, self._config.dial_timeout, self._config.io_timeout)
                except OSError as e:
                    logger.debug("Connect to tracker %s failed: %s", address, e)
                    last_error = e
                    self._health.blacklist(address)
                    continue

                # Eligibility is left alone here; a tracker is only marked
                # alive after it answered a request.
                self._conn = conn
                self._last_tracker = address
                self._initialized = True
                self._reconnect_counter = 0
                return conn

        logger.warning("No tracker reachable out of %d configured", len(self._trackers))
        raise NoTrackersAvailableError(
            f"no tracker reachable: {last_error}",
            last_error=last_error,
        ) from last_error

    def release(self, conn: TrackerConnection, had_error: bool) -> None:
        """Record the outcome of a request against the tracker that served it.

        The connection stays open for the next request.
        """
        address = self._last_tracker
        if address is None:
            return
        if had_error:
            self._health.blacklist(address)
        else:
            self._health.mark_eligible(address)

    def teardown(self) -> None:
        """Close the socket. The client stays bound to its tracker."""
        if self._conn is not None:
            logger.debug("Closing connection to tracker %s", self._last_tracker)
            self._conn.close()

    def close(self) -> None:
        self.teardown()

    def reset(self) -> None:
        """Close the socket and forget the bound tracker.

        The next request runs tracker selection again.
        """
        self.teardown()
        self._conn = None
        self._initialized = False

    def execute(self, command: str, args: Args | None = None) -> Values:
        """Send ``command`` with ``args`` and return the decoded reply.

        Raises:
            NoTrackersAvailableError: No tracker could be reached.
            TransportError: The request could not be written or the reply read.
            MalformedReplyError: The tracker answered with an unknown line.
            TrackerReplyError: The tracker answered ``ERR``.
            PayloadParseError: The ``OK`` payload could not be decoded.
        """
        request = encode_request(command, args or {})
        conn = self.acquire()

        try:
            conn.send_line(request)
            logger.debug("Sent %s to tracker %s", command, self._last_tracker)
            values = parse_reply(decode_line(conn.read_line()))
        except TrackerError as e:
            logger.debug("%s on tracker %s failed: %s", command, self._last_tracker, e)
            self.release(conn, had_error=e.blames_tracker)
            raise

        self.release(conn, had_error=False)
        return values

    def __enter__(self) -> TrackerClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
