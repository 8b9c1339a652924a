"""SSE broadcaster — pushes serialized records to connected browsers.

Each browser subscribes for the page it shows.  When the host re-renders an
output, the broadcaster wraps the wire JSON in a Chirp ``SSEEvent`` named
``valuebox:render`` and enqueues it for every subscriber of that page.
"""

from __future__ import annotations

import asyncio
import json
import threading
from collections import defaultdict
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

RENDER_EVENT = "valuebox:render"


@dataclass(frozen=True, slots=True)
class SSEConnection:
    """A connected SSE client.

    Attributes:
        client_id: Unique identifier for this connection.
        page: The page path this client is viewing.
        queue: asyncio.Queue[Any] for pushing events to the client's generator.

    """

    client_id: str
    page: str
    queue: asyncio.Queue[Any] = field(default_factory=asyncio.Queue, compare=False, hash=False)


def render_message(output_id: str, wire_json: str) -> str:
    """The SSE payload for one record: ``{"id": ..., "record": {...}}``."""
    return '{"id":' + json.dumps(output_id) + ',"record":' + wire_json + "}"


class Broadcaster:
    """Manages SSE connections and pushes record events.

    Thread-safe: subscriber map protected by a lock.
    Per-worker: each server worker has its own Broadcaster instance.

    """

    def __init__(self) -> None:
        self._subscribers: dict[str, set[SSEConnection]] = defaultdict(set)
        self._lock = threading.Lock()

    @property
    def subscriber_count(self) -> int:
        """Total number of active SSE connections across all pages."""
        with self._lock:
            return sum(len(conns) for conns in self._subscribers.values())

    def subscribe(self, conn: SSEConnection) -> None:
        """Register an SSE client for its page."""
        with self._lock:
            self._subscribers[conn.page].add(conn)

    def unsubscribe(self, conn: SSEConnection) -> None:
        """Remove an SSE client."""
        with self._lock:
            conns = self._subscribers.get(conn.page)
            if conns is None:
                return
            conns.discard(conn)
            if not conns:
                del self._subscribers[conn.page]

    def get_subscribers(self, page: str | None = None) -> frozenset[SSEConnection]:
        """Subscribers of ``page``, or of every page (snapshot, no lock held on return)."""
        with self._lock:
            if page is not None:
                return frozenset(self._subscribers.get(page, set()))
            return frozenset(c for conns in self._subscribers.values() for c in conns)

    def send(self, conn: SSEConnection, output_id: str, wire_json: str) -> bool:
        """Queue one record event for a single connection."""
        from chirp import SSEEvent

        try:
            conn.queue.put_nowait(
                SSEEvent(data=render_message(output_id, wire_json), event=RENDER_EVENT)
            )
        except asyncio.QueueFull:
            return False  # Drop if client queue is full
        return True

    async def push_record(
        self,
        output_id: str,
        wire_json: str,
        *,
        page: str | None = None,
    ) -> int:
        """Push one serialized record to subscribers.

        Args:
            output_id: Output the record targets.
            wire_json: The record's wire JSON.
            page: Only notify subscribers of this page (default: all pages).

        Returns:
            Number of clients the event was queued for.

        """
        return sum(
            1 for conn in self.get_subscribers(page) if self.send(conn, output_id, wire_json)
        )

    async def client_generator(self, conn: SSEConnection) -> AsyncIterator[Any]:
        """Async generator that yields events from a connection's queue.

        Used as the generator for Chirp's ``EventStream``.  Client disconnect
        (``CancelledError``) and generator cleanup end iteration quietly.

        """
        try:
            while True:
                event = await conn.queue.get()
                yield event
        except (asyncio.CancelledError, GeneratorExit):
            return
