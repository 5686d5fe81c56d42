"""
Extract outcome counters and fetch timers.

Every processed request ends in exactly one of succeeded / no-data / failed.
Fetch durations are tracked per timer name (``get-sample.<source>``).
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)


class Outcome(Enum):
    SUCCEEDED = "succeeded"
    NO_DATA = "no_data"
    FAILED = "failed"


@dataclass
class LatencyStats:
    count: int = 0
    total_ms: float = 0.0
    min_ms: float = float("inf")
    max_ms: float = 0.0

    @property
    def avg_ms(self) -> float:
        return self.total_ms / self.count if self.count > 0 else 0.0

    def record(self, latency_ms: float) -> None:
        self.count += 1
        self.total_ms += latency_ms
        self.min_ms = min(self.min_ms, latency_ms)
        self.max_ms = max(self.max_ms, latency_ms)


class ExtractMetrics:
    def __init__(self, meter_name: str = "Refocus") -> None:
        self.meter_name = meter_name
        self._counts: dict[Outcome, int] = {outcome: 0 for outcome in Outcome}
        self._latency: dict[str, LatencyStats] = {}
        self._lock = threading.Lock()

    def _increment(self, outcome: Outcome) -> None:
        with self._lock:
            self._counts[outcome] += 1
        logger.debug("%s: %s", self.meter_name, outcome.value)

    def succeeded(self) -> None:
        self._increment(Outcome.SUCCEEDED)

    def no_data(self) -> None:
        self._increment(Outcome.NO_DATA)

    def failed(self) -> None:
        self._increment(Outcome.FAILED)

    @contextmanager
    def timer(self, name: str) -> Iterator[None]:
        started = time.perf_counter()
        try:
            yield
        finally:
            elapsed_ms = (time.perf_counter() - started) * 1000
            with self._lock:
                self._latency.setdefault(name, LatencyStats()).record(elapsed_ms)

    def counts(self) -> dict[str, int]:
        with self._lock:
            return {outcome.value: count for outcome, count in self._counts.items()}

    def timer_names(self) -> list[str]:
        with self._lock:
            return sorted(self._latency)

    def log_summary(self) -> None:
        counts = self.counts()
        logger.info(
            "%s outcomes: succeeded=%d no_data=%d failed=%d",
            self.meter_name,
            counts[Outcome.SUCCEEDED.value],
            counts[Outcome.NO_DATA.value],
            counts[Outcome.FAILED.value],
        )
        for name in self.timer_names():
            stats = self.latency(name)
            logger.info(
                "%s %s: count=%d avg=%.1fms min=%.1fms max=%.1fms",
                self.meter_name,
                name,
                stats.count,
                stats.avg_ms,
                stats.min_ms,
                stats.max_ms,
            )

    def latency(self, name: str) -> LatencyStats:
        with self._lock:
            stats = self._latency.get(name, LatencyStats())
            return LatencyStats(stats.count, stats.total_ms, stats.min_ms, stats.max_ms)
