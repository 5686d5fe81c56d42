import threading
import time
from concurrent.futures import ThreadPoolExecutor

import pytest

from sampleduct.config.settings import Settings, SourceSettings
from sampleduct.sources.base import SourceConfigError
from sampleduct.sources.refocus import RefocusClient
from sampleduct.sources.resolver import SourceResolver, build_source
from sampleduct.sources.static import StaticSource
from conftest import FakeFactory, FakeSource


def test_resolver_memoizes_clients() -> None:
    factory = FakeFactory({"s1": FakeSource("s1")})
    resolver = SourceResolver(factory)

    assert resolver.resolve("s1") is resolver.resolve("s1")
    assert factory.builds == ["s1"]


def test_resolver_returns_none_and_retries_after_failure(caplog) -> None:
    factory = FakeFactory({})
    resolver = SourceResolver(factory)

    assert resolver.resolve("missing") is None
    assert resolver.resolve("missing") is None
    assert factory.builds == ["missing", "missing"]
    assert "Could not initialize source missing" in caplog.text


def test_resolver_reset_drops_bindings() -> None:
    factory = FakeFactory({"s1": FakeSource("s1"), "s2": FakeSource("s2")})
    resolver = SourceResolver(factory)
    resolver.resolve("s1")
    resolver.resolve("s2")

    resolver.reset("s1")
    resolver.resolve("s1")
    resolver.resolve("s2")
    assert factory.builds == ["s1", "s2", "s1"]

    resolver.reset()
    resolver.resolve("s2")
    assert factory.builds[-1] == "s2"


def test_resolver_builds_once_under_concurrent_first_access() -> None:
    builds = []
    lock = threading.Lock()

    def slow_factory(source_id: str) -> FakeSource:
        with lock:
            builds.append(source_id)
        time.sleep(0.05)
        return FakeSource(source_id)

    resolver = SourceResolver(slow_factory)
    with ThreadPoolExecutor(max_workers=8) as pool:
        clients = list(pool.map(lambda _: resolver.resolve("s1"), range(8)))

    assert builds == ["s1"]
    assert all(client is clients[0] for client in clients)


def test_build_source_creates_configured_clients() -> None:
    settings = Settings(
        sources={
            "prod": SourceSettings(base_url="https://refocus.example.com/", token="secret"),
            "fixed": SourceSettings(kind="static", samples={"m1": "3"}),
        }
    )

    refocus = build_source("prod", settings)
    static = build_source("fixed", settings)

    assert isinstance(refocus, RefocusClient)
    assert refocus.base_url == "https://refocus.example.com"
    assert isinstance(static, StaticSource)
    assert static.get_sample("m1").value == "3"
    assert static.get_sample("other") is None


@pytest.mark.parametrize(
    "sources",
    [
        {},
        {"prod": SourceSettings(token="secret")},
        {"prod": SourceSettings(base_url="https://refocus.example.com")},
    ],
)
def test_build_source_rejects_incomplete_config(sources) -> None:
    with pytest.raises(SourceConfigError):
        build_source("prod", Settings(sources=sources))


def test_resolver_reset_returns_dropped_clients() -> None:
    first = FakeSource("s1")
    second = FakeSource("s2")
    resolver = SourceResolver(FakeFactory({"s1": first, "s2": second}))
    resolver.resolve("s1")
    resolver.resolve("s2")

    assert resolver.reset("s1") == [first]
    assert resolver.reset("s1") == []
    assert resolver.reset() == [second]
