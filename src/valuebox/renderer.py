"""Server renderer — turns a user computation into a render function.

The reactive host assigns the returned function to an output and calls it
once per re-evaluation::

    outputs["countries"] = render_value_box(lambda: produce("Countries", 95))

Each call evaluates the computation exactly once, validates the result and
attaches the animation library's descriptor only when the record animates.
Records that do not animate carry no resources, so the library is never
shipped to the browser for those passes.

Re-entrant: the render function keeps no state between calls.
"""

from __future__ import annotations

import time
from collections.abc import Mapping
from typing import TYPE_CHECKING

from valuebox._errors import MalformedRecordError
from valuebox.config import ValueBoxConfig
from valuebox.record import RenderRecord
from valuebox.resources import animation_resource

if TYPE_CHECKING:
    from valuebox._types import Computation, RenderFunction
    from valuebox.observability.collector import StackCollector


def _coerce(result: object) -> RenderRecord:
    if isinstance(result, RenderRecord):
        return result
    if isinstance(result, Mapping):
        return RenderRecord.from_mapping(result)
    msg = f"computation must return a RenderRecord or a mapping, got {type(result).__name__}"
    raise MalformedRecordError(msg)


def render_value_box(
    computation: Computation,
    *,
    config: ValueBoxConfig | None = None,
    collector: StackCollector | None = None,
    output_id: str = "",
) -> RenderFunction:
    """Wrap ``computation`` into a render function for the reactive host.

    Args:
        computation: Zero-argument callable returning a ``RenderRecord`` or
            a mapping with the record's fields.
        config: Locates the animation library.  Defaults to ``ValueBoxConfig()``.
        collector: Optional diagnostic channel for render events.
        output_id: Output name used in diagnostics.

    Returns:
        A zero-argument function returning a fully populated record.

    """
    descriptor = animation_resource(config or ValueBoxConfig())

    def render() -> RenderRecord:
        # Exceptions from the computation reach the host unmodified.
        t0 = time.perf_counter()
        try:
            record = _coerce(computation())
        except MalformedRecordError as exc:
            if collector is not None:
                collector.record_render_failure(output_id, exc)
            raise

        # Drop whatever the computation attached; resources are decided here.
        record = RenderRecord(
            title=record.title,
            value=record.value,
            color=record.color,
            animate=record.animate,
            resources=(descriptor,) if record.animate else (),
        )

        if collector is not None:
            collector.record_render(
                output_id,
                animate=record.animate,
                resources=tuple(r.name for r in record.resources),
                duration_ms=(time.perf_counter() - t0) * 1000,
            )
        return record

    render.__name__ = f"render_value_box_{output_id}" if output_id else "render_value_box"
    return render
