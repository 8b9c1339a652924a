"""Binding registry — binding name → handler, scoped to one runtime.

Registering a name twice is not an error: the later registration wins and
the overwrite is reported through the diagnostic channel.
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from valuebox.client.binding import OutputBinding
    from valuebox.observability.collector import StackCollector


class BindingRegistry:
    """Ordered table of registered bindings.

    Args:
        collector: Diagnostic channel for overwrites.

    """

    def __init__(self, collector: StackCollector | None = None) -> None:
        self._bindings: dict[str, OutputBinding] = {}
        self._collector = collector
        self._lock = threading.Lock()

    def register(self, name: str, binding: OutputBinding) -> None:
        """Register ``binding`` under ``name``, replacing any earlier one."""
        with self._lock:
            previous = self._bindings.get(name)
            self._bindings[name] = binding
        if previous is not None and previous is not binding and self._collector is not None:
            self._collector.record_overwrite(name, repr(previous), repr(binding))

    def get(self, name: str) -> OutputBinding | None:
        with self._lock:
            return self._bindings.get(name)

    def names(self) -> tuple[str, ...]:
        """Registered names, in first-registration order."""
        with self._lock:
            return tuple(self._bindings)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._bindings

    def __len__(self) -> int:
        with self._lock:
            return len(self._bindings)
