"""Stack collector — the host diagnostic channel.

Renderers, the client runtime and the host report through one collector so
a single ``EventLog`` tells the story of a render pass end to end.  Every
failure is also echoed to stderr, the way the rest of the runtime reports
problems a developer needs to see immediately.

Thread Safety:
    The collector delegates to ``EventLog`` which is internally locked.
    Safe for concurrent use from multiple worker threads.

"""

from __future__ import annotations

import sys
from typing import Literal

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


class StackCollector:
    """Unified event collector.

    Args:
        log: The EventLog to store events in.
        verbose: Echo failures and warnings to stderr.

    """

    __slots__ = ("_log", "_verbose")

    def __init__(self, log: EventLog | None = None, *, verbose: bool = True) -> None:
        self._log = log if log is not None else EventLog()
        self._verbose = verbose

    @property
    def log(self) -> EventLog:
        """The underlying event log."""
        return self._log

    def record(self, event: StackEvent) -> None:
        """Record an already-built event."""
        self._log.append(event)

    def _warn(self, message: str) -> None:
        if self._verbose:
            print(f"  {message}", file=sys.stderr)

    # ----- Render events -----

    def record_render(
        self,
        output_id: str = "",
        *,
        animate: bool = False,
        resources: tuple[str, ...] = (),
        duration_ms: float = 0.0,
    ) -> None:
        """Record a successful server-side render pass."""
        self._log.append(
            RecordRendered(
                output_id=output_id,
                animate=animate,
                resources=resources,
                duration_ms=duration_ms,
                timestamp_ns=now_ns(),
            )
        )

    def record_render_failure(
        self,
        output_id: str,
        exc: BaseException,
        *,
        side: Literal["server", "client"] = "server",
    ) -> None:
        """Record a failed render pass."""
        self._log.append(
            RenderFailed(
                output_id=output_id,
                side=side,
                error_type=type(exc).__name__,
                message=str(exc),
                timestamp_ns=now_ns(),
            )
        )
        self._warn(f"Render error ({side}) {output_id or '<unknown>'}: {exc}")

    def record_push(
        self,
        output_id: str,
        *,
        clients_notified: int = 0,
        size_bytes: int = 0,
    ) -> None:
        """Record a record pushed to SSE subscribers."""
        self._log.append(
            RecordPushed(
                output_id=output_id,
                clients_notified=clients_notified,
                size_bytes=size_bytes,
                timestamp_ns=now_ns(),
            )
        )

    # ----- Resource events -----

    def record_materialized(
        self,
        name: str,
        version: str,
        *,
        files: int = 0,
        duration_ms: float = 0.0,
    ) -> None:
        """Record a resource bundle that finished loading."""
        self._log.append(
            ResourceMaterialized(
                name=name,
                version=version,
                files=files,
                duration_ms=duration_ms,
                timestamp_ns=now_ns(),
            )
        )

    def record_resource_failure(
        self,
        name: str,
        version: str,
        *,
        output_id: str = "",
        message: str = "",
    ) -> None:
        """Record a resource bundle that could not be loaded."""
        self._log.append(
            ResourceFailed(
                name=name,
                version=version,
                output_id=output_id,
                message=message,
                timestamp_ns=now_ns(),
            )
        )
        self._warn(f"Resource error: {name}@{version}: {message}")

    def record_conflict(self, name: str, kept_version: str, ignored_version: str) -> None:
        """Record a same-name descriptor with a different version."""
        self._log.append(
            ResourceConflict(
                name=name,
                kept_version=kept_version,
                ignored_version=ignored_version,
                timestamp_ns=now_ns(),
            )
        )
        self._warn(
            f"Resource conflict: {name}@{ignored_version} ignored, "
            f"{name}@{kept_version} already declared"
        )

    # ----- Binding events -----

    def record_overwrite(self, name: str, previous: str, replacement: str) -> None:
        """Record a binding registration that replaced an earlier one."""
        self._log.append(
            BindingOverwritten(
                name=name,
                previous=previous,
                replacement=replacement,
                timestamp_ns=now_ns(),
            )
        )
        self._warn(f"Binding {name!r} re-registered: {previous} replaced by {replacement}")
