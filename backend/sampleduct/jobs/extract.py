from __future__ import annotations

import asyncio
import functools
import logging
import threading

from sampleduct.cache import CacheRegistry
from sampleduct.config.logging import configure_logging
from sampleduct.config.settings import Settings, settings
from sampleduct.extract.outcomes import ExtractMetrics
from sampleduct.extract.processor import SampleExtractProcessor
from sampleduct.schemas.sample import SampleRequest
from sampleduct.shutdown import ShutdownFlag, install_signal_handlers
from sampleduct.sources.resolver import SourceResolver, build_source

logger = logging.getLogger(__name__)

# One processor per worker process, so clients, caches, counters and the
# shutdown flag outlive a single job.
_processor: SampleExtractProcessor | None = None
_processor_lock = threading.Lock()


def create_processor(
    config: Settings | None = None, shutdown: ShutdownFlag | None = None
) -> SampleExtractProcessor:
    config = config or settings
    return SampleExtractProcessor(
        resolver=SourceResolver(functools.partial(build_source, settings=config)),
        caches=CacheRegistry(),
        shutdown=shutdown or ShutdownFlag(),
        metrics=ExtractMetrics(config.meter_name),
    )


def get_processor() -> SampleExtractProcessor:
    global _processor
    with _processor_lock:
        if _processor is None:
            _processor = create_processor()
            install_signal_handlers(_processor.shutdown)
        return _processor


async def _extract(
    processor: SampleExtractProcessor, requests: list[SampleRequest]
) -> list[list[dict]]:
    rows = await processor.process(requests)
    return [[result.model_dump(mode="json") for result in row] for row in rows]


def run_extract(requests: list[dict]) -> list[list[dict]]:
    configure_logging(settings.log_level)
    parsed = [SampleRequest.model_validate(request) for request in requests]
    processor = get_processor()
    try:
        return asyncio.run(_extract(processor, parsed))
    finally:
        processor.metrics.log_summary()
