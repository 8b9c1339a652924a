"""Output session — evaluates outputs and pushes their records.

This is the seam between the reactive host and the transport: the host
decides *when* an output must update and calls ``update``; the session
renders, serializes and broadcasts.  Render failures are reported to the
collector and re-raised to the host unchanged, and nothing is pushed for
the failed pass.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from valuebox.host.broadcaster import Broadcaster, SSEConnection
    from valuebox.host.outputs import Outputs
    from valuebox.observability.collector import StackCollector


class OutputSession:
    """Connects an ``Outputs`` table to a ``Broadcaster``.

    Args:
        outputs: Render functions by output id.
        broadcaster: Pushes serialized records to browsers.
        collector: Diagnostic channel.

    """

    def __init__(
        self,
        outputs: Outputs,
        broadcaster: Broadcaster,
        *,
        collector: StackCollector | None = None,
    ) -> None:
        self._outputs = outputs
        self._broadcaster = broadcaster
        self._collector = collector

    @property
    def outputs(self) -> Outputs:
        return self._outputs

    @property
    def broadcaster(self) -> Broadcaster:
        return self._broadcaster

    def _evaluate(self, output_id: str) -> str:
        try:
            return self._outputs.evaluate(output_id)
        except Exception as exc:
            if self._collector is not None:
                self._collector.record_render_failure(output_id, exc)
            raise

    async def update(self, output_id: str, *, page: str | None = None) -> int:
        """Re-render one output and push it.  Returns clients notified."""
        payload = self._evaluate(output_id)
        count = await self._broadcaster.push_record(output_id, payload, page=page)
        if self._collector is not None:
            self._collector.record_push(
                output_id, clients_notified=count, size_bytes=len(payload.encode("utf-8")),
            )
        return count

    async def update_all(self, *, page: str | None = None) -> int:
        """Re-render every output in assignment order.  Returns total notifications."""
        total = 0
        for output_id in list(self._outputs):
            total += await self.update(output_id, page=page)
        return total

    def prime(self, conn: SSEConnection) -> int:
        """Queue the current record of every output for a new connection.

        Outputs that fail to render are skipped (already reported); the
        connection still receives the others.
        """
        count = 0
        for output_id in list(self._outputs):
            try:
                payload = self._evaluate(output_id)
            except Exception:
                continue
            if self._broadcaster.send(conn, output_id, payload):
                count += 1
        return count
