"""Reachability checks against the agency API."""

import time
from collections.abc import Callable

import structlog

from agency_manager.client import ApiClient
from agency_manager.errors import RemoteOperationError

logger = structlog.get_logger()


def probe_connectivity(client: ApiClient) -> bool:
    """Return True when the API health endpoint answers with a success status.

    Never raises: any network failure or error status means offline.
    """
    try:
        client.check("/health")
    except RemoteOperationError as e:
        logger.debug("Connectivity probe failed", base_url=client.base_url, error=str(e))
        return False
    logger.debug("Connectivity probe succeeded", base_url=client.base_url)
    return True


class ConnectivityMonitor:
    """Caches the probe result and re-probes lazily.

    ``reprobe_interval`` is the number of seconds after which ``is_online``
    probes again: ``None`` never re-probes after the first check, ``0``
    probes on every call.
    """

    def __init__(
        self,
        client: ApiClient,
        reprobe_interval: float | None = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.client = client
        self.reprobe_interval = reprobe_interval
        self._clock = clock
        self._online: bool | None = None
        self._last_probe: float | None = None

    @property
    def last_known(self) -> bool | None:
        """Result of the most recent probe, or None before the first one."""
        return self._online

    def refresh(self) -> bool:
        """Probe now and cache the result."""
        online = probe_connectivity(self.client)
        if self._online is not None and online != self._online:
            logger.warning("Connectivity changed", online=online)
        else:
            logger.info("Connectivity checked", online=online)
        self._online = online
        self._last_probe = self._clock()
        return online

    def is_online(self) -> bool:
        if self._online is None or self._last_probe is None:
            return self.refresh()
        if self.reprobe_interval is not None and self._clock() - self._last_probe >= self.reprobe_interval:
            return self.refresh()
        return self._online
