"""Outputs — the assignment point the reactive host exposes.

::

    outputs = Outputs()
    outputs["countries"] = render_value_box(lambda: produce("Countries", 95))
    payload = outputs.evaluate("countries")   # wire JSON

``Outputs`` only stores render functions and serializes what they return;
when to call them is the host's decision.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator, MutableMapping
from typing import TYPE_CHECKING

from valuebox._errors import MalformedRecordError
from valuebox.record import RenderRecord

if TYPE_CHECKING:
    from valuebox._types import RenderFunction


class Outputs(MutableMapping[str, "RenderFunction"]):
    """Output id → render function, in assignment order."""

    def __init__(self) -> None:
        self._functions: dict[str, RenderFunction] = {}
        self._lock = threading.Lock()

    def __setitem__(self, output_id: str, fn: RenderFunction) -> None:
        if not callable(fn):
            msg = f"output {output_id!r} must be assigned a callable, got {type(fn).__name__}"
            raise TypeError(msg)
        with self._lock:
            self._functions[output_id] = fn

    def __getitem__(self, output_id: str) -> RenderFunction:
        with self._lock:
            return self._functions[output_id]

    def __delitem__(self, output_id: str) -> None:
        with self._lock:
            del self._functions[output_id]

    def __iter__(self) -> Iterator[str]:
        with self._lock:
            return iter(tuple(self._functions))

    def __len__(self) -> int:
        with self._lock:
            return len(self._functions)

    def render(self, output_id: str) -> RenderRecord:
        """Call the output's render function once.

        Raises:
            KeyError: If nothing is assigned to ``output_id``.
            MalformedRecordError: If the function returned something other
                than a ``RenderRecord``.

        """
        record = self[output_id]()
        if not isinstance(record, RenderRecord):
            msg = f"output {output_id!r} returned {type(record).__name__}, not a RenderRecord"
            raise MalformedRecordError(msg)
        return record

    def evaluate(self, output_id: str) -> str:
        """Render and serialize to wire JSON."""
        return self.render(output_id).to_json()
