"""Event model for value box diagnostics.

All events are frozen dataclasses with:
- ``timestamp_ns``: Monotonic nanosecond timestamp
- Descriptive fields for the specific event type

Thread Safety:
    All events are frozen (immutable) and safe to share across threads.

"""

import time
from dataclasses import dataclass
from typing import Literal


# ---------------------------------------------------------------------------
# Render events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class RecordRendered:
    """A render pass produced a record.

    Attributes:
        output_id: Output the record was rendered for (empty when unknown
            to the renderer).
        animate: Whether the record asked for animation.
        resources: Names of dynamic resources attached to the record.
        duration_ms: Time spent in the computation.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    output_id: str
    animate: bool
    resources: tuple[str, ...]
    duration_ms: float
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class RenderFailed:
    """A render pass failed on the server or the client.

    Attributes:
        output_id: Output whose render failed.
        side: Where the failure happened.
        error_type: Exception class name.
        message: Exception message.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    output_id: str
    side: Literal["server", "client"]
    error_type: str
    message: str
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class RecordPushed:
    """A serialized record was queued for connected browsers.

    Attributes:
        output_id: Output the record belongs to.
        clients_notified: Number of SSE clients that received it.
        size_bytes: Size of the serialized payload.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    output_id: str
    clients_notified: int
    size_bytes: int
    timestamp_ns: int


# ---------------------------------------------------------------------------
# Resource events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ResourceMaterialized:
    """A resource bundle was fetched and its capability made available."""

    name: str
    version: str
    files: int
    duration_ms: float
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class ResourceFailed:
    """A resource bundle could not be materialized.

    The binding falls back to plain text for the affected render pass.
    """

    name: str
    version: str
    output_id: str
    message: str
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class ResourceConflict:
    """Two descriptors share a name but not a version; the first one is kept."""

    name: str
    kept_version: str
    ignored_version: str
    timestamp_ns: int


# ---------------------------------------------------------------------------
# Binding events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class BindingOverwritten:
    """A binding name was registered twice; the later registration won."""

    name: str
    previous: str
    replacement: str
    timestamp_ns: int


# ---------------------------------------------------------------------------
# Union type
# ---------------------------------------------------------------------------

type StackEvent = (
    RecordRendered
    | RenderFailed
    | RecordPushed
    | ResourceMaterialized
    | ResourceFailed
    | ResourceConflict
    | BindingOverwritten
)


def now_ns() -> int:
    """Return the current monotonic clock value in nanoseconds."""
    return time.monotonic_ns()
