"""Value box client binding — discovery, identification and rendering.

A binding is the client half of the output protocol.  It finds its
fragments in a document by discovery marker, names each fragment by its
identifier, and renders received records into the fragment's slots.

Rendering is all-or-nothing.  The record is decoded and every slot
placeholder located before anything is written; dynamic resources are
materialized before their capability is used; then all writes are applied
in one step.  A render that fails, or that was superseded by a newer
render for the same output while it waited for resources, writes nothing.
"""

from __future__ import annotations

import itertools
from collections.abc import Mapping
from enum import Enum
from typing import TYPE_CHECKING, Any, Protocol

from valuebox._errors import MissingSlotError, ResourceError
from valuebox.client.dom import find_by_id, has_class, set_style, set_text
from valuebox.client.loader import format_value
from valuebox.config import ValueBoxConfig
from valuebox.record import SLOTS, RenderRecord, slot_id

if TYPE_CHECKING:
    from xml.etree.ElementTree import Element

    from valuebox.client.loader import ResourceLoader
    from valuebox.observability.collector import StackCollector

_STATE_ATTR = "data-valuebox-state"
_VALUE_ATTR = "data-value"
_COUNTUP_ATTRS = ("data-countup-from", "data-countup-to", "data-countup-duration")


class RenderOutcome(Enum):
    """How a render call ended."""

    RENDERED = "rendered"
    ANIMATED = "animated"
    STALE = "stale"


class OutputBinding(Protocol):
    """What the client runtime needs from a registered binding."""

    def discover(self, scope: Element) -> list[Element]: ...

    def get_identifier(self, element: Element) -> str: ...

    async def render(self, element: Element, record: Any) -> RenderOutcome: ...


class ValueBoxBinding:
    """Client binding for value box outputs.

    Args:
        loader: Materializes dynamic resources named by records.
        config: Discovery marker, override attribute and animation bundle name.
        collector: Diagnostic channel for resource failures.

    """

    def __init__(
        self,
        loader: ResourceLoader,
        *,
        config: ValueBoxConfig | None = None,
        collector: StackCollector | None = None,
    ) -> None:
        self._loader = loader
        self._config = config or ValueBoxConfig()
        self._collector = collector
        self._counter = itertools.count(1)
        # output id -> sequence number of the newest render started for it
        self._latest: dict[str, int] = {}

    def __repr__(self) -> str:
        return f"{type(self).__name__}(marker={self._config.marker_class!r})"

    def discover(self, scope: Element) -> list[Element]:
        """Every element under ``scope`` (inclusive) carrying the marker, in document order."""
        marker = self._config.marker_class
        return [el for el in scope.iter() if has_class(el, marker)]

    def get_identifier(self, element: Element) -> str:
        """The output id: the override attribute if set, else the element id.

        Slot placeholders are looked up from this identifier, so a fragment
        carrying ``data-output-id="sales"`` must contain ``sales-title`` and
        ``sales-value`` whatever its own ``id`` is.
        """
        override = element.get(self._config.id_override_attr)
        if override:
            return override
        return element.get("id", "")

    def is_current(self, output_id: str, sequence: int) -> bool:
        """True if ``sequence`` is the newest render started for ``output_id``."""
        return self._latest.get(output_id) == sequence

    async def render(self, element: Element, record: RenderRecord | Mapping[str, Any]) -> RenderOutcome:
        """Render ``record`` into ``element``.

        Raises:
            MalformedRecordError: If a wire mapping is not a valid record.
            MissingSlotError: If the fragment lacks a slot placeholder.

        """
        if not isinstance(record, RenderRecord):
            record = RenderRecord.from_wire(record)

        output_id = self.get_identifier(element)
        slots = self._locate_slots(element, output_id)

        sequence = next(self._counter)
        self._latest[output_id] = sequence

        animator = None
        if record.resources:
            animator = await self._materialize(record, output_id)
            if not self.is_current(output_id, sequence):
                return RenderOutcome.STALE

        return self._commit(element, slots, record, animator, output_id)

    def _locate_slots(self, element: Element, output_id: str) -> dict[str, Element]:
        slots: dict[str, Element] = {}
        for slot in SLOTS:
            target = find_by_id(element, slot_id(output_id, slot))
            if target is None:
                msg = f"output {output_id!r} has no placeholder {slot_id(output_id, slot)!r}"
                raise MissingSlotError(msg)
            slots[slot] = target
        return slots

    async def _materialize(self, record: RenderRecord, output_id: str) -> Any:
        """Load every descriptor; return the animation capability or None."""
        capabilities: dict[str, Any] = {}
        for descriptor in record.resources:
            try:
                capabilities[descriptor.name] = await self._loader.materialize(descriptor)
            except ResourceError as exc:
                if self._collector is not None:
                    self._collector.record_resource_failure(
                        descriptor.name,
                        descriptor.version,
                        output_id=output_id,
                        message=str(exc),
                    )
        return capabilities.get(self._config.animation_name)

    def _commit(
        self,
        element: Element,
        slots: dict[str, Element],
        record: RenderRecord,
        animator: Any,
        output_id: str,
    ) -> RenderOutcome:
        # The value slot goes first: a failing capability degrades to plain
        # text before any other slot is touched.
        value_el = slots["value"]
        outcome = RenderOutcome.RENDERED
        if animator is not None:
            previous = value_el.get(_VALUE_ATTR)
            try:
                animator.animate(value_el, record.value, start=float(previous) if previous else 0)
                outcome = RenderOutcome.ANIMATED
            except Exception as exc:
                if self._collector is not None:
                    version = next(
                        (r.version for r in record.resources if r.name == self._config.animation_name),
                        "",
                    )
                    self._collector.record_resource_failure(
                        self._config.animation_name,
                        version,
                        output_id=output_id,
                        message=f"animation failed: {exc}",
                    )
        if outcome is RenderOutcome.RENDERED:
            set_text(value_el, format_value(record.value))
            for attr in _COUNTUP_ATTRS:
                value_el.attrib.pop(attr, None)
        value_el.set(_VALUE_ATTR, format_value(record.value))

        set_text(slots["title"], record.title)
        set_style(element, "background-color", record.color)
        element.set(_STATE_ATTR, "rendered")
        return outcome
