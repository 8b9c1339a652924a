"""Tests for valuebox.renderer — evaluation and conditional resource attachment."""

from __future__ import annotations

import json

import pytest

from valuebox._errors import MalformedRecordError
from valuebox.config import ValueBoxConfig
from valuebox.observability import RecordRendered, RenderFailed, StackCollector
from valuebox.producer import produce
from valuebox.record import RenderRecord, ResourceDescriptor
from valuebox.renderer import render_value_box
from valuebox.resources import animation_resource


class TestResourceAttachment:
    """The animation library rides along only when the record animates."""

    def test_static_record_has_no_resources_key(self) -> None:
        fn = render_value_box(lambda: produce("Static", 3, animate=False))
        record = fn()
        assert record.resources == ()
        assert "resources" not in json.loads(record.to_json())

    def test_animated_record_gets_one_descriptor(self) -> None:
        fn = render_value_box(lambda: produce("Countries", 95))
        for _ in range(3):
            record = fn()
            names = [r.name for r in record.resources]
            assert names == ["countup"]

    def test_descriptor_points_at_configured_location(self, config: ValueBoxConfig) -> None:
        record = render_value_box(lambda: produce("x", 1), config=config)()
        assert record.resources == (animation_resource(config),)
        assert record.resources[0].src == config.animation_path

    def test_resources_from_computation_are_replaced(self) -> None:
        stray = ResourceDescriptor(name="other", version="1")

        def compute() -> RenderRecord:
            return produce("x", 1, animate=False).with_resources(stray)

        assert render_value_box(compute)().resources == ()


class TestEvaluation:
    """Exactly one evaluation per call; failures propagate untouched."""

    def test_computation_called_once_per_invocation(self) -> None:
        calls: list[int] = []

        def compute() -> RenderRecord:
            calls.append(1)
            return produce("x", len(calls))

        fn = render_value_box(compute)
        fn()
        fn()
        assert len(calls) == 2

    def test_mapping_result_accepted(self) -> None:
        fn = render_value_box(lambda: {"title": "t", "value": 1, "color": "#fff", "animate": False})
        assert fn().title == "t"

    def test_mapping_missing_field_rejected(self) -> None:
        fn = render_value_box(lambda: {"value": 1, "color": "#fff", "animate": False})
        with pytest.raises(MalformedRecordError, match="title"):
            fn()

    @pytest.mark.parametrize("bad", [float("nan"), float("inf")])
    def test_non_finite_value_rejected(self, bad: float) -> None:
        fn = render_value_box(lambda: {"title": "t", "value": bad, "color": "#fff", "animate": False})
        with pytest.raises(MalformedRecordError, match="finite"):
            fn()

    def test_non_record_rejected(self) -> None:
        fn = render_value_box(lambda: 42)  # type: ignore[arg-type, return-value]
        with pytest.raises(MalformedRecordError, match="int"):
            fn()

    def test_computation_error_propagates_unmodified(self) -> None:
        boom = ZeroDivisionError("no data")

        def compute() -> RenderRecord:
            raise boom

        with pytest.raises(ZeroDivisionError) as info:
            render_value_box(compute)()
        assert info.value is boom


class TestDiagnostics:
    """Render events go to the collector when one is given."""

    def test_render_recorded(self, collector: StackCollector) -> None:
        render_value_box(lambda: produce("x", 1), collector=collector, output_id="sales")()
        events = collector.log.query(event_type=RecordRendered)
        assert len(events) == 1
        assert events[0].output_id == "sales"
        assert events[0].resources == ("countup",)

    def test_malformed_recorded(self, collector: StackCollector) -> None:
        fn = render_value_box(lambda: {"title": "t"}, collector=collector, output_id="bad")
        with pytest.raises(MalformedRecordError):
            fn()
        failures = collector.log.query(event_type=RenderFailed)
        assert failures[0].error_type == "MalformedRecordError"
        assert failures[0].side == "server"
