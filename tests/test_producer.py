"""Tests for valuebox.producer — defaulting, aggregation and purity."""

from __future__ import annotations

import pytest

from valuebox._errors import MalformedRecordError
from valuebox.producer import DEFAULT_PALETTE, Palette, produce


class TestDefaults:
    """Fields absent from the caller get well-defined defaults."""

    def test_countries_scenario(self) -> None:
        record = produce("Countries", 95)
        assert record.title == "Countries"
        assert record.value == 95
        assert record.color == "#ef476f"
        assert record.animate is True
        assert record.resources == ()

    def test_explicit_color_wins(self) -> None:
        assert produce("x", 500, color="#123456").color == "#123456"

    def test_animate_can_be_disabled(self) -> None:
        assert produce("x", 1, animate=False).animate is False


class TestAggregation:
    """Sequences are summed and the color follows the aggregate."""

    def test_total_scenario(self) -> None:
        record = produce("Total", [1, 6, 9])
        assert record.value == 16
        assert record.color == DEFAULT_PALETTE.low
        assert record.color != DEFAULT_PALETTE.high

    def test_above_threshold_uses_high(self) -> None:
        assert produce("Total", [60, 50]).color == DEFAULT_PALETTE.high

    def test_threshold_is_inclusive_low(self) -> None:
        assert produce("Edge", 100).color == DEFAULT_PALETTE.low

    def test_generator_aggregated(self) -> None:
        assert produce("Gen", (i for i in range(5))).value == 10

    def test_aggregation_disabled_rejects_sequence(self) -> None:
        with pytest.raises(MalformedRecordError, match="aggregation"):
            produce("Total", [1, 2], aggregate=False)

    def test_overflowing_aggregate_rejected(self) -> None:
        with pytest.raises(MalformedRecordError, match="finite"):
            produce("Total", [1e308, 1e308])

    def test_non_numeric_item_rejected(self) -> None:
        with pytest.raises(MalformedRecordError):
            produce("Total", [1, "2"])  # type: ignore[list-item]

    def test_string_value_rejected(self) -> None:
        with pytest.raises(MalformedRecordError):
            produce("Total", "16")  # type: ignore[arg-type]

    def test_custom_palette(self) -> None:
        palette = Palette(low="blue", high="red", threshold=10)
        assert produce("x", 11, palette=palette).color == "red"
        assert produce("x", 10, palette=palette).color == "blue"


class TestPurity:
    """Same inputs always give the same record, byte for byte."""

    @pytest.mark.parametrize(
        "args",
        [("Countries", 95), ("Total", [1, 6, 9]), ("Float", 2.5), ("Neg", -4)],
    )
    def test_deterministic(self, args: tuple) -> None:
        first = produce(*args)
        second = produce(*args)
        assert first == second
        assert first.to_json() == second.to_json()
