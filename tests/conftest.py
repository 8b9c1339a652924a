"""Shared test fixtures for valuebox."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from valuebox.config import ValueBoxConfig
from valuebox.observability import EventLog, StackCollector


@pytest.fixture
def config(tmp_path: Path) -> ValueBoxConfig:
    """Config rooted in a temp dir with the count-up library on disk."""
    lib = tmp_path / "lib" / "countup"
    lib.mkdir(parents=True)
    (lib / "countUp.umd.js").write_text("/* countUp */\n")
    return ValueBoxConfig(root=tmp_path)


@pytest.fixture
def collector() -> StackCollector:
    return StackCollector(EventLog(), verbose=False)


class RecordingFetch:
    """Async fetcher that records URLs and fails for chosen substrings."""

    def __init__(self, *, fail: tuple[str, ...] = ()) -> None:
        self.urls: list[str] = []
        self._fail = fail

    async def __call__(self, url: str) -> bytes:
        self.urls.append(url)
        if any(part in url for part in self._fail):
            msg = f"unreachable: {url}"
            raise OSError(msg)
        return b""


@pytest.fixture
def fetch() -> RecordingFetch:
    return RecordingFetch()


def make_page(*output_ids: str, config: ValueBoxConfig | None = None) -> str:
    """HTML page holding one value box per id."""
    from valuebox.markup import value_box_output

    boxes = "".join(str(value_box_output(i, config=config)) for i in output_ids)
    return (
        "<!DOCTYPE html>\n<html>\n<head><meta charset=\"utf-8\"><title>t</title></head>\n"
        f"<body>\n{boxes}</body>\n</html>\n"
    )


def wire(
    title: str = "Countries",
    value: float = 95,
    *,
    color: str = "#ef476f",
    animate: bool = False,
    config: ValueBoxConfig | None = None,
) -> dict[str, Any]:
    """Wire mapping for a record; animated records carry the count-up descriptor."""
    from valuebox.record import RenderRecord
    from valuebox.resources import animation_resource

    resources = (animation_resource(config),) if animate else ()
    return RenderRecord(
        title=title, value=value, color=color, animate=animate, resources=resources,
    ).to_wire()
