from __future__ import annotations

import pytest

from sampleduct.cache import CacheRegistry
from sampleduct.extract.outcomes import ExtractMetrics
from sampleduct.extract.processor import SampleExtractProcessor
from sampleduct.schemas.sample import Sample
from sampleduct.shutdown import ShutdownFlag
from sampleduct.sources.base import SampleSource, SourceError
from sampleduct.sources.resolver import SourceResolver

VALID_TIME = "2026-01-20T10:15:00.000Z"


class FakeRedis:
    def __init__(self) -> None:
        self.store: dict[str, str] = {}
        self.expirations: dict[str, int] = {}

    def get(self, key: str) -> str | None:
        return self.store.get(key)

    def psetex(self, key: str, ttl_millis: int, value: str) -> None:
        self.store[key] = value
        self.expirations[key] = ttl_millis


class FakeSource(SampleSource):
    """Replies from a script: a Sample, None, or an exception to raise."""

    def __init__(self, source_id: str, responses: dict | None = None) -> None:
        super().__init__(source_id)
        self.responses = dict(responses or {})
        self.calls: list[str] = []

    def get_sample(self, name: str) -> Sample | None:
        self.calls.append(name)
        response = self.responses.get(name)
        if isinstance(response, Exception):
            raise response
        return response


def make_sample(name: str, value: str, updated_at: str = VALID_TIME) -> Sample:
    return Sample(name=name, value=value, updated_at=updated_at)


class FakeFactory:
    """Source factory that hands out FakeSources and records every build."""

    def __init__(self, sources: dict[str, FakeSource]) -> None:
        self.sources = sources
        self.builds: list[str] = []

    def __call__(self, source_id: str) -> SampleSource:
        self.builds.append(source_id)
        source = self.sources.get(source_id)
        if source is None:
            raise SourceError(source_id, "unavailable")
        return source


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def metrics() -> ExtractMetrics:
    return ExtractMetrics("Refocus")


@pytest.fixture
def shutdown() -> ShutdownFlag:
    return ShutdownFlag()


@pytest.fixture
def build_processor(fake_redis, metrics, shutdown):
    def _build(sources: dict[str, FakeSource]) -> tuple[SampleExtractProcessor, FakeFactory]:
        factory = FakeFactory(sources)
        processor = SampleExtractProcessor(
            resolver=SourceResolver(factory),
            caches=CacheRegistry(lambda: fake_redis),
            shutdown=shutdown,
            metrics=metrics,
        )
        return processor, factory

    return _build
