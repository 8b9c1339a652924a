"""Tests for valuebox.client.loader — at-most-once materialization."""

from __future__ import annotations

import asyncio

import pytest

from tests.conftest import RecordingFetch
from valuebox._errors import ResourceError
from valuebox.client.dom import parse_html
from valuebox.client.loader import (
    CountUp,
    DirectoryFetcher,
    ResourceLoader,
    default_capabilities,
    format_value,
)
from valuebox.config import ValueBoxConfig
from valuebox.observability import ResourceConflict, ResourceMaterialized, StackCollector
from valuebox.record import ResourceDescriptor
from valuebox.resources import animation_resource, baseline_resources


class TestFormatValue:
    """Slot text for numbers."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [(95, "95"), (16.0, "16"), (2.5, "2.5"), (-4, "-4")],
    )
    def test_format(self, value: float, expected: str) -> None:
        assert format_value(value) == expected


class TestCountUp:
    """The animation capability writes final text plus animation parameters."""

    def test_animate(self) -> None:
        el = parse_html("<span></span>")[0]
        CountUp(duration=1.5).animate(el, 95, start=10)
        assert el.text == "95"
        assert el.get("data-countup-from") == "10"
        assert el.get("data-countup-to") == "95"
        assert el.get("data-countup-duration") == "1.5"

    def test_default_capabilities_follow_config(self) -> None:
        config = ValueBoxConfig(animation_name="odometer", animation_duration=0.5)
        caps = default_capabilities(config)
        assert list(caps) == ["odometer"]
        animator = caps["odometer"](animation_resource(config))
        assert animator.duration == 0.5


class TestMaterialize:
    """Each bundle is fetched at most once however often it is requested."""

    @pytest.mark.asyncio
    async def test_returns_capability(self, fetch: RecordingFetch) -> None:
        loader = ResourceLoader(fetch)
        capability = await loader.materialize(animation_resource())
        assert isinstance(capability, CountUp)
        assert fetch.urls == ["/static/countup-2.8.0/countUp.umd.js"]
        assert loader.loaded == frozenset({("countup", "2.8.0")})

    @pytest.mark.asyncio
    async def test_sequential_requests_load_once(self, fetch: RecordingFetch) -> None:
        loader = ResourceLoader(fetch)
        first = await loader.materialize(animation_resource())
        second = await loader.materialize(animation_resource())
        assert first is second
        assert loader.load_count == 1
        assert len(fetch.urls) == 1

    @pytest.mark.asyncio
    async def test_concurrent_requests_share_one_load(self) -> None:
        gate = asyncio.Event()
        urls: list[str] = []

        async def slow_fetch(url: str) -> bytes:
            urls.append(url)
            await gate.wait()
            return b""

        loader = ResourceLoader(slow_fetch)
        tasks = [asyncio.ensure_future(loader.materialize(animation_resource())) for _ in range(3)]
        await asyncio.sleep(0)
        gate.set()
        results = await asyncio.gather(*tasks)
        assert loader.load_count == 1
        assert len(urls) == 1
        assert results[0] is results[1] is results[2]

    @pytest.mark.asyncio
    async def test_unknown_bundle_has_no_capability(self, fetch: RecordingFetch) -> None:
        loader = ResourceLoader(fetch)
        descriptor = ResourceDescriptor(name="charts", version="1", scripts=("c.js",))
        assert await loader.materialize(descriptor) is None
        assert loader.is_loaded(descriptor)

    @pytest.mark.asyncio
    async def test_mark_loaded_skips_fetch(self, fetch: RecordingFetch) -> None:
        loader = ResourceLoader(fetch)
        (baseline,) = baseline_resources()
        loader.mark_loaded(baseline)
        await loader.materialize(baseline)
        assert fetch.urls == []
        assert loader.load_count == 0

    @pytest.mark.asyncio
    async def test_version_mismatch_reported(
        self, fetch: RecordingFetch, collector: StackCollector,
    ) -> None:
        loader = ResourceLoader(fetch, collector=collector)
        await loader.materialize(animation_resource())
        newer = animation_resource(ValueBoxConfig(animation_version="3.0.0"))
        await loader.materialize(newer)
        assert loader.load_count == 1
        (conflict,) = collector.log.query(event_type=ResourceConflict)
        assert conflict.kept_version == "2.8.0"
        assert conflict.ignored_version == "3.0.0"

    @pytest.mark.asyncio
    async def test_materialized_event(
        self, fetch: RecordingFetch, collector: StackCollector,
    ) -> None:
        loader = ResourceLoader(fetch, collector=collector)
        await loader.materialize(animation_resource())
        (event,) = collector.log.query(event_type=ResourceMaterialized)
        assert event.name == "countup"
        assert event.files == 1


class TestFailures:
    """Failed loads raise ResourceError and are retried later."""

    @pytest.mark.asyncio
    async def test_fetch_failure_wrapped(self) -> None:
        loader = ResourceLoader(RecordingFetch(fail=("countUp",)))
        with pytest.raises(ResourceError, match="countup@2.8.0") as info:
            await loader.materialize(animation_resource())
        assert isinstance(info.value.__cause__, OSError)
        assert loader.loaded == frozenset()

    @pytest.mark.asyncio
    async def test_failure_not_cached(self) -> None:
        failing = RecordingFetch(fail=("countUp",))
        loader = ResourceLoader(failing)
        with pytest.raises(ResourceError):
            await loader.materialize(animation_resource())
        failing._fail = ()
        assert isinstance(await loader.materialize(animation_resource()), CountUp)
        assert loader.load_count == 2


class TestDirectoryFetcher:
    """Bundle files are read from the directory their descriptor names."""

    @pytest.mark.asyncio
    async def test_reads_mounted_file(self, config: ValueBoxConfig) -> None:
        fetcher = DirectoryFetcher([animation_resource(config)])
        data = await fetcher("/static/countup-2.8.0/countUp.umd.js")
        assert data == b"/* countUp */\n"

    @pytest.mark.asyncio
    async def test_baseline_assets_readable(self) -> None:
        (baseline,) = baseline_resources()
        fetcher = DirectoryFetcher([baseline])
        data = await fetcher(baseline.script_urls[0])
        assert b"ValueBox" in data

    @pytest.mark.asyncio
    async def test_unknown_url(self, config: ValueBoxConfig) -> None:
        fetcher = DirectoryFetcher([animation_resource(config)])
        with pytest.raises(FileNotFoundError):
            await fetcher("/elsewhere/x.js")

    @pytest.mark.asyncio
    async def test_missing_library_fails_load(self, tmp_path) -> None:
        config = ValueBoxConfig(root=tmp_path)
        loader = ResourceLoader(DirectoryFetcher([animation_resource(config)]))
        with pytest.raises(ResourceError):
            await loader.materialize(animation_resource(config))
