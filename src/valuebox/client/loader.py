"""Resource loader — on-demand materialization of resource bundles.

The loader is content-addressed by bundle name: however many outputs ask
for the count-up library, and however many times, its files are fetched
once.  Concurrent requests for a bundle that is still loading share the
in-flight task.  Failures are not cached, so a later render pass retries.

Once a bundle's files are fetched, the loader hands out its capability,
looked up by bundle name in a provider table (``countup`` → ``CountUp``).

Fetching is injected: browsers fetch over the network, headless callers
(pre-rendering, tests) read from the bundle directories with
``DirectoryFetcher``.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

from valuebox._errors import ResourceError
from valuebox.config import ValueBoxConfig

if TYPE_CHECKING:
    from xml.etree.ElementTree import Element

    from valuebox._types import Fetcher
    from valuebox.observability.collector import StackCollector
    from valuebox.record import ResourceDescriptor

type CapabilityFactory = Callable[[ResourceDescriptor], Any]


def format_value(value: int | float) -> str:
    """Text form of a slot value; integral floats drop their ``.0``."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


@dataclass(frozen=True, slots=True)
class CountUp:
    """Capability of the count-up library: animate a number into an element.

    Writes the final text (what a reader without JavaScript sees) and the
    animation parameters the browser runtime picks up.
    """

    duration: float = 2.0

    def animate(self, element: Element, value: int | float, *, start: int | float = 0) -> None:
        for child in list(element):
            element.remove(child)
        element.text = format_value(value)
        element.set("data-countup-from", format_value(start))
        element.set("data-countup-to", format_value(value))
        element.set("data-countup-duration", f"{self.duration:g}")


def default_capabilities(config: ValueBoxConfig | None = None) -> dict[str, CapabilityFactory]:
    """Capability providers for the bundles valuebox knows about."""
    config = config or ValueBoxConfig()
    animator = CountUp(duration=config.animation_duration)
    return {config.animation_name: lambda _descriptor: animator}


class DirectoryFetcher:
    """Fetch bundle files from the directories their descriptors point at.

    Args:
        descriptors: Descriptors with both ``href`` and ``src`` set.

    """

    def __init__(self, descriptors: Iterable[ResourceDescriptor]) -> None:
        self._mounts: dict[str, Path] = {}
        for d in descriptors:
            if d.href and d.src is not None:
                self._mounts[d.href.rstrip("/") + "/"] = d.src

    async def __call__(self, url: str) -> bytes:
        for prefix, directory in self._mounts.items():
            if url.startswith(prefix):
                path = directory / url[len(prefix):]
                return await asyncio.to_thread(path.read_bytes)
        msg = f"no bundle directory serves {url}"
        raise FileNotFoundError(msg)


class ResourceLoader:
    """Materializes resource bundles at most once each.

    Args:
        fetch: Async callable fetching one file URL.  Any exception it raises
            fails the bundle.
        capabilities: Bundle name → factory building the bundle's capability.
        collector: Diagnostic channel for loads.

    """

    def __init__(
        self,
        fetch: Fetcher,
        *,
        capabilities: Mapping[str, CapabilityFactory] | None = None,
        collector: StackCollector | None = None,
    ) -> None:
        self._fetch = fetch
        self._capabilities = dict(default_capabilities() if capabilities is None else capabilities)
        self._collector = collector
        # name -> (version, capability)
        self._loaded: dict[str, tuple[str, Any]] = {}
        self._pending: dict[str, asyncio.Future[Any]] = {}
        self.load_count = 0

    @property
    def loaded(self) -> frozenset[tuple[str, str]]:
        """``(name, version)`` of every materialized bundle."""
        return frozenset((name, version) for name, (version, _) in self._loaded.items())

    def is_loaded(self, descriptor: ResourceDescriptor) -> bool:
        return descriptor.name in self._loaded

    def mark_loaded(self, descriptor: ResourceDescriptor) -> None:
        """Record a bundle the page already loaded (baseline resources)."""
        if descriptor.name not in self._loaded:
            self._loaded[descriptor.name] = (descriptor.version, self._capability(descriptor))

    async def materialize(self, descriptor: ResourceDescriptor) -> Any:
        """Load ``descriptor`` if needed and return its capability.

        Returns None for bundles without a registered capability.

        Raises:
            ResourceError: If any file of the bundle cannot be fetched.

        """
        name = descriptor.name
        if name in self._loaded:
            version, capability = self._loaded[name]
            if version != descriptor.version and self._collector is not None:
                self._collector.record_conflict(name, version, descriptor.version)
            return capability

        pending = self._pending.get(name)
        if pending is None:
            pending = asyncio.ensure_future(self._load(descriptor))
            self._pending[name] = pending
            pending.add_done_callback(lambda _f: self._pending.pop(name, None))
        # One waiter being cancelled must not cancel the shared load.
        return await asyncio.shield(pending)

    async def _load(self, descriptor: ResourceDescriptor) -> Any:
        t0 = time.perf_counter()
        urls = (*descriptor.style_urls, *descriptor.script_urls)
        self.load_count += 1
        try:
            await asyncio.gather(*(self._fetch(url) for url in urls))
        except Exception as exc:
            msg = f"failed to load {descriptor.name}@{descriptor.version}: {exc}"
            raise ResourceError(msg) from exc

        capability = self._capability(descriptor)
        self._loaded[descriptor.name] = (descriptor.version, capability)
        if self._collector is not None:
            self._collector.record_materialized(
                descriptor.name,
                descriptor.version,
                files=len(urls),
                duration_ms=(time.perf_counter() - t0) * 1000,
            )
        return capability

    def _capability(self, descriptor: ResourceDescriptor) -> Any:
        factory = self._capabilities.get(descriptor.name)
        return factory(descriptor) if factory is not None else None
