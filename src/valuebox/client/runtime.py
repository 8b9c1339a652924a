"""Client runtime — routes inbound records to the fragments they target.

The runtime owns one document, one binding registry and one resource
loader.  ``bind`` asks every registered binding to discover its fragments;
``receive`` hands a record to the binding that owns the target fragment.

Records for different outputs are independent and may arrive in any order.
Records for the same output may overlap while one waits on a resource
load; the binding keeps only the newest.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from valuebox._errors import MalformedRecordError, MissingSlotError, ValueBoxError
from valuebox.client.binding import ValueBoxBinding
from valuebox.client.dom import parse_html
from valuebox.client.loader import DirectoryFetcher, ResourceLoader, default_capabilities
from valuebox.client.registry import BindingRegistry
from valuebox.config import ValueBoxConfig
from valuebox.resources import animation_resource, baseline_resources

if TYPE_CHECKING:
    from xml.etree.ElementTree import Element

    from valuebox._types import Fetcher
    from valuebox.client.binding import OutputBinding, RenderOutcome
    from valuebox.observability.collector import StackCollector


class ClientRuntime:
    """Binds outputs in a document and renders the records sent to them.

    Args:
        document: Parsed page (see ``valuebox.client.dom.parse_html``).
        registry: Registered bindings.
        loader: Loader shared by all bindings.
        collector: Diagnostic channel.

    """

    def __init__(
        self,
        document: Element,
        *,
        registry: BindingRegistry,
        loader: ResourceLoader,
        collector: StackCollector | None = None,
    ) -> None:
        self._document = document
        self._registry = registry
        self._loader = loader
        self._collector = collector
        self._fragments: dict[str, tuple[OutputBinding, Element]] = {}

    @classmethod
    def for_page(
        cls,
        html: str,
        *,
        config: ValueBoxConfig | None = None,
        fetch: Fetcher | None = None,
        collector: StackCollector | None = None,
    ) -> ClientRuntime:
        """Runtime for an HTML page with the value box binding registered.

        Baseline resources count as already loaded, as they are in a browser
        that rendered the page.  Without ``fetch``, bundles are read from
        their configured directories.
        """
        config = config or ValueBoxConfig()
        baseline = baseline_resources(config)
        if fetch is None:
            fetch = DirectoryFetcher((*baseline, animation_resource(config)))

        loader = ResourceLoader(
            fetch, capabilities=default_capabilities(config), collector=collector,
        )
        for descriptor in baseline:
            loader.mark_loaded(descriptor)

        registry = BindingRegistry(collector)
        registry.register(
            config.binding_name,
            ValueBoxBinding(loader, config=config, collector=collector),
        )
        return cls(parse_html(html), registry=registry, loader=loader, collector=collector)

    @property
    def document(self) -> Element:
        return self._document

    @property
    def registry(self) -> BindingRegistry:
        return self._registry

    @property
    def loader(self) -> ResourceLoader:
        return self._loader

    @property
    def identifiers(self) -> tuple[str, ...]:
        """Identifiers of bound fragments, in discovery order."""
        return tuple(self._fragments)

    def bind(self, scope: Element | None = None) -> int:
        """Discover fragments under ``scope`` (default: the document).

        Returns the number of fragments bound.
        """
        scope = scope if scope is not None else self._document
        count = 0
        for name in self._registry.names():
            binding = self._registry.get(name)
            if binding is None:
                continue
            for element in binding.discover(scope):
                output_id = binding.get_identifier(element)
                if output_id:
                    self._fragments[output_id] = (binding, element)
                    count += 1
        return count

    def fragment(self, output_id: str) -> Element | None:
        entry = self._fragments.get(output_id)
        return entry[1] if entry is not None else None

    async def receive(self, output_id: str, record: Any) -> RenderOutcome:
        """Render a record (``RenderRecord`` or wire mapping) into its output.

        Raises:
            MissingSlotError: If no bound fragment has ``output_id``.
            MalformedRecordError: If the record is not valid.

        """
        entry = self._fragments.get(output_id)
        try:
            if entry is None:
                msg = f"no output {output_id!r} is bound on this page"
                raise MissingSlotError(msg)
            binding, element = entry
            return await binding.render(element, record)
        except ValueBoxError as exc:
            if self._collector is not None:
                self._collector.record_render_failure(output_id, exc, side="client")
            raise

    async def receive_message(self, message: str | Mapping[str, Any]) -> RenderOutcome:
        """Handle one transport message ``{"id": ..., "record": {...}}``."""
        if isinstance(message, str):
            try:
                message = json.loads(message)
            except json.JSONDecodeError as exc:
                msg = f"message is not valid JSON: {exc}"
                raise MalformedRecordError(msg) from exc
        if not isinstance(message, Mapping) or not isinstance(message.get("id"), str):
            msg = "message must be an object with a string 'id'"
            raise MalformedRecordError(msg)
        return await self.receive(message["id"], message.get("record"))
