from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from sampleduct.config.settings import Settings
from sampleduct.sources.base import SampleSource, SourceConfigError, SourceError
from sampleduct.sources.refocus import RefocusClient
from sampleduct.sources.static import StaticSource

logger = logging.getLogger(__name__)


def build_source(source_id: str, settings: Settings) -> SampleSource:
    config = settings.sources.get(source_id)
    if config is None:
        raise SourceConfigError(source_id, "unknown source")

    if config.kind == "static":
        return StaticSource(source_id, config.samples)

    if not config.base_url:
        raise SourceConfigError(source_id, "missing base_url")
    if not config.token:
        raise SourceConfigError(source_id, "missing token")
    return RefocusClient(
        source_id,
        base_url=config.base_url,
        token=config.token,
        timeout_seconds=config.timeout_seconds,
    )


class SourceResolver:
    """Creates at most one client per source id and hands it out on every call.

    Failed initializations are logged and not remembered, so the next call
    for the same source tries again.
    """

    def __init__(self, factory: Callable[[str], SampleSource]) -> None:
        self._factory = factory
        self._clients: dict[str, SampleSource] = {}
        self._key_locks: dict[str, threading.Lock] = {}
        self._lock = threading.Lock()

    def _key_lock(self, source_id: str) -> threading.Lock:
        with self._lock:
            return self._key_locks.setdefault(source_id, threading.Lock())

    def resolve(self, source_id: str) -> SampleSource | None:
        client = self._clients.get(source_id)
        if client is not None:
            return client

        # Building a client may do I/O; only callers for the same source wait.
        with self._key_lock(source_id):
            client = self._clients.get(source_id)
            if client is not None:
                return client
            try:
                client = self._factory(source_id)
            except SourceError as exc:
                logger.error("Could not initialize source %s: %s", source_id, exc)
                return None
            self._clients[source_id] = client
            logger.info("Initialized %r", client)
            return client

    def reset(self, source_id: str | None = None) -> list[SampleSource]:
        """Forget one binding, or all of them; returns the dropped clients."""
        if source_id is None:
            with self._lock:
                source_ids = list(self._key_locks)
        else:
            source_ids = [source_id]

        dropped: list[SampleSource] = []
        for key in source_ids:
            with self._key_lock(key):
                client = self._clients.pop(key, None)
            if client is not None:
                dropped.append(client)
        return dropped
