"""Diagnostics — structured events for render passes and resource loading.

Aggregates events from:
- **Server renderer**: records produced and render passes that failed
- **Client runtime**: resources materialized or failed, binding overwrites
- **Host**: records pushed to connected browsers

All events are frozen dataclasses with nanosecond timestamps, safe for
concurrent production from multiple worker threads.

Quick Start:
    >>> from valuebox.observability import StackCollector, EventLog
    >>> collector = StackCollector(EventLog())
    >>> fn = render_value_box(compute, collector=collector)

"""

from valuebox.observability.collector import StackCollector
from valuebox.observability.events import (
    BindingOverwritten,
    RecordPushed,
    RecordRendered,
    RenderFailed,
    ResourceConflict,
    ResourceFailed,
    ResourceMaterialized,
    StackEvent,
    now_ns,
)
from valuebox.observability.log import EventLog

__all__ = [
    "BindingOverwritten",
    "EventLog",
    "RecordPushed",
    "RecordRendered",
    "RenderFailed",
    "ResourceConflict",
    "ResourceFailed",
    "ResourceMaterialized",
    "StackCollector",
    "StackEvent",
    "now_ns",
]
