from __future__ import annotations

import logging
from dataclasses import dataclass

from sampleduct.cache import SampleCache
from sampleduct.extract.outcomes import ExtractMetrics
from sampleduct.parsing.values import format_number, utc_now_iso
from sampleduct.schemas.sample import Sample, SampleRequest
from sampleduct.shutdown import ShutdownFlag
from sampleduct.sources.base import SampleSource, SourceError

logger = logging.getLogger(__name__)

# Value reported by a source that timed out computing the sample.
TIMEOUT_VALUE = "Timeout"


@dataclass(frozen=True)
class SampleResolution:
    sample: Sample
    should_cache: bool = False
    is_default: bool = False


def is_timed_out(sample: Sample) -> bool:
    return sample.value == TIMEOUT_VALUE


def resolve_sample(
    request: SampleRequest,
    client: SampleSource,
    cache: SampleCache,
    shutdown: ShutdownFlag,
    metrics: ExtractMetrics,
) -> SampleResolution | None:
    """Find a usable sample for one request.

    Serves from the source's cache when possible and only fetches on a miss.
    Returns None when nothing usable exists; in that case the outcome has
    already been recorded on ``metrics``, except after a shutdown, which
    records nothing.
    """
    source_id = client.source_id

    cached = cache.get(request.cache_key)
    if cached is not None:
        return SampleResolution(cached)

    if shutdown.is_shutdown():
        return None

    try:
        with metrics.timer(f"get-sample.{source_id}"):
            sample = client.get_sample(request.name)
    except SourceError as exc:
        logger.error(
            "Could not complete request for source %s; failed metric=%s; due to %s",
            source_id,
            request.name,
            exc,
        )
        metrics.failed()
        return None

    if sample is None:
        if request.default_value is None:
            logger.error("No data for sample %s, source %s; empty response", request.name, source_id)
            metrics.no_data()
            return None

        sample = Sample(
            name=request.name,
            value=format_number(request.default_value),
            updated_at=utc_now_iso(),
        )
        logger.info("Default data provided for %s=%s, source %s", sample.name, sample.value, source_id)
        return SampleResolution(sample, is_default=True)

    if is_timed_out(sample) and request.default_value is not None:
        sample = sample.model_copy(update={"value": format_number(request.default_value)})
        logger.info("Default data provided for %s=%s, source %s", sample.name, sample.value, source_id)
        return SampleResolution(sample, is_default=True)

    should_cache = request.cache_millis > 0 and not is_timed_out(sample)
    return SampleResolution(sample, should_cache=should_cache)
