"""Tests for valuebox.client.runtime — routing records to bound outputs."""

from __future__ import annotations

import json

import pytest

from tests.conftest import RecordingFetch, make_page, wire
from valuebox._errors import MalformedRecordError, MissingSlotError
from valuebox.client.binding import RenderOutcome, ValueBoxBinding
from valuebox.client.dom import find_by_id
from valuebox.client.runtime import ClientRuntime
from valuebox.config import ValueBoxConfig
from valuebox.observability import RenderFailed, StackCollector


def _runtime(*ids: str, fetch: RecordingFetch | None = None, collector=None) -> ClientRuntime:
    runtime = ClientRuntime.for_page(
        make_page(*ids), fetch=fetch or RecordingFetch(), collector=collector,
    )
    runtime.bind()
    return runtime


class TestBind:
    """Discovery through the registered bindings."""

    def test_binds_every_output(self) -> None:
        runtime = ClientRuntime.for_page(make_page("a", "b"), fetch=RecordingFetch())
        assert runtime.bind() == 2
        assert runtime.identifiers == ("a", "b")

    def test_default_binding_registered(self) -> None:
        runtime = ClientRuntime.for_page(make_page("a"), fetch=RecordingFetch())
        assert isinstance(runtime.registry.get("valuebox"), ValueBoxBinding)

    def test_bind_scope(self) -> None:
        runtime = ClientRuntime.for_page(make_page("a", "b"), fetch=RecordingFetch())
        assert runtime.bind(find_by_id(runtime.document, "b")) == 1
        assert runtime.identifiers == ("b",)

    def test_fragment_lookup(self) -> None:
        runtime = _runtime("a")
        assert runtime.fragment("a") is find_by_id(runtime.document, "a")
        assert runtime.fragment("zzz") is None

    def test_baseline_counts_as_loaded(self) -> None:
        runtime = _runtime("a")
        assert ("valuebox", "0.1.0") in runtime.loader.loaded


class TestReceive:
    """Records reach the output they name."""

    @pytest.mark.asyncio
    async def test_two_animated_outputs_load_library_once(self, fetch: RecordingFetch) -> None:
        runtime = _runtime("a", "b", fetch=fetch)
        await runtime.receive("a", wire("A", 10, animate=True))
        await runtime.receive("b", wire("B", 20, animate=True))
        assert runtime.loader.load_count == 1
        assert fetch.urls == ["/static/countup-2.8.0/countUp.umd.js"]
        assert find_by_id(runtime.document, "a-value").text == "10"
        assert find_by_id(runtime.document, "b-value").text == "20"

    @pytest.mark.asyncio
    async def test_static_records_load_nothing(self, fetch: RecordingFetch) -> None:
        runtime = _runtime("a", fetch=fetch)
        outcome = await runtime.receive("a", wire("A", 1))
        assert outcome is RenderOutcome.RENDERED
        assert fetch.urls == []

    @pytest.mark.asyncio
    async def test_unknown_output(self, collector: StackCollector) -> None:
        runtime = _runtime("a", collector=collector)
        with pytest.raises(MissingSlotError, match="'nope'"):
            await runtime.receive("nope", wire())
        (failure,) = collector.log.query(event_type=RenderFailed)
        assert failure.side == "client"
        assert failure.output_id == "nope"

    @pytest.mark.asyncio
    async def test_malformed_record_reported(self, collector: StackCollector) -> None:
        runtime = _runtime("a", collector=collector)
        with pytest.raises(MalformedRecordError):
            await runtime.receive("a", {"title": "x"})
        assert collector.log.query(event_type=RenderFailed)[0].error_type == "MalformedRecordError"


class TestReceiveMessage:
    """Transport messages carry ``{"id", "record"}``."""

    @pytest.mark.asyncio
    async def test_json_message(self) -> None:
        runtime = _runtime("a")
        message = json.dumps({"id": "a", "record": wire("Countries", 95)})
        await runtime.receive_message(message)
        assert find_by_id(runtime.document, "a-title").text == "Countries"

    @pytest.mark.asyncio
    async def test_mapping_message(self) -> None:
        runtime = _runtime("a")
        await runtime.receive_message({"id": "a", "record": wire("T", 3)})
        assert find_by_id(runtime.document, "a-value").text == "3"

    @pytest.mark.asyncio
    async def test_invalid_json(self) -> None:
        runtime = _runtime("a")
        with pytest.raises(MalformedRecordError, match="JSON"):
            await runtime.receive_message("{not json")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("message", [[], {"record": {}}, {"id": 3, "record": {}}])
    async def test_missing_id(self, message: object) -> None:
        runtime = _runtime("a")
        with pytest.raises(MalformedRecordError, match="'id'"):
            await runtime.receive_message(message)  # type: ignore[arg-type]


class TestDefaultFetch:
    """Without a fetcher, bundles are read from their directories."""

    @pytest.mark.asyncio
    async def test_reads_animation_library_from_disk(self, config: ValueBoxConfig) -> None:
        runtime = ClientRuntime.for_page(make_page("a", config=config), config=config)
        runtime.bind()
        outcome = await runtime.receive("a", wire(value=5, animate=True, config=config))
        assert outcome is RenderOutcome.ANIMATED
