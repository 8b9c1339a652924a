"""Resource delivery — baseline and dynamic bundles, deduplicated by name.

Two kinds of descriptors exist:

- **Baseline** (``baseline_resources``): the binding runtime script and
  stylesheet.  Declared by the markup generator, loaded with the page.
- **Dynamic** (``animation_resource``): the count-up library.  Attached by
  the server renderer to records that animate, loaded on demand.

``ResourceRegistry`` is the page-side delivery mechanism: every fragment
declares its baseline descriptors into it, and it emits each bundle's tags
once no matter how many outputs share it.
"""

from __future__ import annotations

import threading
from html import escape
from typing import TYPE_CHECKING

from valuebox.config import ValueBoxConfig
from valuebox.record import ResourceDescriptor
from valuebox.theme import RUNTIME_SCRIPT, RUNTIME_STYLE, bundled_assets_path

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from valuebox.observability.collector import StackCollector

RUNTIME_NAME = "valuebox"
RUNTIME_VERSION = "0.1.0"


def baseline_resources(config: ValueBoxConfig | None = None) -> tuple[ResourceDescriptor, ...]:
    """Descriptors every page with a value box loads unconditionally.

    Never includes the animation library.
    """
    config = config or ValueBoxConfig()
    return (
        ResourceDescriptor(
            name=RUNTIME_NAME,
            version=RUNTIME_VERSION,
            scripts=(RUNTIME_SCRIPT,),
            styles=(RUNTIME_STYLE,),
            href=config.bundle_href(RUNTIME_NAME, RUNTIME_VERSION),
            src=bundled_assets_path(),
        ),
    )


def animation_resource(config: ValueBoxConfig | None = None) -> ResourceDescriptor:
    """Descriptor for the count-up animation library at its configured location."""
    config = config or ValueBoxConfig()
    return ResourceDescriptor(
        name=config.animation_name,
        version=config.animation_version,
        scripts=(config.animation_script,),
        href=config.bundle_href(config.animation_name, config.animation_version),
        src=config.animation_path,
    )


class ResourceRegistry:
    """Page-scoped set of resource descriptors, deduplicated by name.

    The first descriptor declared under a name wins.  A later one with the
    same name and a different version is ignored and reported as a conflict.

    Args:
        collector: Diagnostic channel for conflicts.

    """

    def __init__(self, collector: StackCollector | None = None) -> None:
        self._by_name: dict[str, ResourceDescriptor] = {}
        self._collector = collector
        self._lock = threading.Lock()

    def declare(self, descriptor: ResourceDescriptor) -> bool:
        """Declare a descriptor.  Returns True if it was new."""
        with self._lock:
            existing = self._by_name.get(descriptor.name)
            if existing is None:
                self._by_name[descriptor.name] = descriptor
                return True
        if existing.version != descriptor.version and self._collector is not None:
            self._collector.record_conflict(
                descriptor.name, existing.version, descriptor.version,
            )
        return False

    def declare_all(self, descriptors: Iterable[ResourceDescriptor]) -> int:
        """Declare several descriptors.  Returns how many were new."""
        return sum(1 for d in descriptors if self.declare(d))

    def get(self, name: str) -> ResourceDescriptor | None:
        with self._lock:
            return self._by_name.get(name)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._by_name

    def __iter__(self) -> Iterator[ResourceDescriptor]:
        with self._lock:
            return iter(tuple(self._by_name.values()))

    def __len__(self) -> int:
        with self._lock:
            return len(self._by_name)

    def render_tags(self) -> str:
        """Stylesheet links followed by scripts, one tag per file, in declaration order."""
        descriptors = tuple(self)
        lines: list[str] = []
        for d in descriptors:
            for url in d.style_urls:
                lines.append(f'<link rel="stylesheet" href="{escape(url)}" data-valuebox-resource="{escape(d.name)}">')
        for d in descriptors:
            for url in d.script_urls:
                lines.append(f'<script src="{escape(url)}" data-valuebox-resource="{escape(d.name)}"></script>')
        return "\n".join(lines) + ("\n" if lines else "")
