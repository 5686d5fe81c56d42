from __future__ import annotations

import logging

from sampleduct.extract.outcomes import ExtractMetrics
from sampleduct.extract.resolution import is_timed_out
from sampleduct.parsing.values import (
    InvalidTimeError,
    InvalidValueError,
    parse_number,
    parse_utc_time,
)
from sampleduct.schemas.sample import ExtractResult, Sample

logger = logging.getLogger(__name__)


def build_result(sample: Sample, source_id: str, metrics: ExtractMetrics) -> ExtractResult | None:
    try:
        parsed_time = parse_utc_time(sample.updated_at)
        parsed_number = parse_number(sample.value)
    except InvalidTimeError as exc:
        logger.warning("No data for %s, source %s; invalid time: %s", sample.name, source_id, exc)
        metrics.no_data()
        return None
    except InvalidValueError as exc:
        if is_timed_out(sample):
            logger.warning("No data for %s, source %s; timed out", sample.name, source_id)
        else:
            logger.warning("No data for %s, source %s; invalid value: %s", sample.name, source_id, exc)
        metrics.no_data()
        return None

    return ExtractResult(
        time=parsed_time,
        name=sample.name,
        value=parsed_number,
        original_value=parsed_number,
    )
