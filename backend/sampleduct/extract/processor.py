from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence

from sampleduct.cache import CacheRegistry, SampleCache
from sampleduct.extract.outcomes import ExtractMetrics
from sampleduct.extract.resolution import resolve_sample
from sampleduct.extract.results import build_result
from sampleduct.parsing.values import default_value_message
from sampleduct.schemas.sample import ExtractResult, SampleRequest
from sampleduct.shutdown import ShutdownFlag
from sampleduct.sources.base import SampleSource
from sampleduct.sources.resolver import SourceResolver

logger = logging.getLogger(__name__)


class SampleExtractProcessor:
    """Loads the latest samples for a batch of requests, one task per source.

    Requests for the same source run one after another so that the source's
    cache sees its own writes; different sources run concurrently.
    """

    def __init__(
        self,
        resolver: SourceResolver,
        caches: CacheRegistry,
        shutdown: ShutdownFlag,
        metrics: ExtractMetrics,
    ) -> None:
        self.resolver = resolver
        self.caches = caches
        self.shutdown = shutdown
        self.metrics = metrics

    async def process(self, requests: Sequence[SampleRequest]) -> list[list[ExtractResult]]:
        by_source: dict[str, list[SampleRequest]] = {}
        for request in requests:
            by_source.setdefault(request.source, []).append(request)

        outcomes = await asyncio.gather(
            *(
                asyncio.to_thread(self._process_source, source_id, source_requests)
                for source_id, source_requests in by_source.items()
            ),
            return_exceptions=True,
        )

        rows: list[list[ExtractResult]] = []
        errors: list[BaseException] = []
        for source_id, outcome in zip(by_source, outcomes):
            if isinstance(outcome, BaseException):
                logger.error("Unexpected error processing source %s", source_id, exc_info=outcome)
                errors.append(outcome)
                continue
            rows.extend(outcome)

        if errors:
            raise errors[0]
        return rows

    def reset(self, source_id: str | None = None) -> None:
        """Drop the client and cache bindings of one source, or of all sources."""
        for client in self.resolver.reset(source_id):
            self.caches.discard(client)

    def _process_source(
        self, source_id: str, requests: list[SampleRequest]
    ) -> list[list[ExtractResult]]:
        client = self.resolver.resolve(source_id)
        if client is None:
            logger.error("No client for source %s; skipping %d request(s)", source_id, len(requests))
            self.metrics.failed()
            return []

        cache = self.caches.get_or_create(client)

        rows: list[list[ExtractResult]] = []
        for request in requests:
            result = self._process_request(request, client, cache)
            if result is not None:
                # One result per row keeps the output a matrix.
                rows.append([result])
        return rows

    def _process_request(
        self, request: SampleRequest, client: SampleSource, cache: SampleCache
    ) -> ExtractResult | None:
        resolution = resolve_sample(request, client, cache, self.shutdown, self.metrics)
        if resolution is None:
            return None

        result = build_result(resolution.sample, client.source_id, self.metrics)
        if result is None:
            return None

        if resolution.is_default:
            result = result.with_message(
                default_value_message(request.name, request.default_value)
            )

        if resolution.should_cache:
            cache.set(request.cache_key, resolution.sample, request.cache_millis)

        self.metrics.succeeded()
        logger.info("Loaded data for %s, source %s", request.name, client.source_id)
        return result
