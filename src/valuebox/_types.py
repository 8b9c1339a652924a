"""Shared type definitions for valuebox."""

from collections.abc import Awaitable, Callable, Mapping
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from valuebox.record import RenderRecord

# Caller-assigned output instance identifier
type OutputID = str

# Named sub-slot of an output ("title", "value")
type SlotName = str

# SSE client identifier
type ClientID = str

# (name, version) pair identifying a resource bundle
type ResourceKey = tuple[str, str]

# User computation evaluated once per render pass
type Computation = Callable[[], RenderRecord | Mapping[str, Any]]

# Zero-argument function handed to the reactive host
type RenderFunction = Callable[[], RenderRecord]

# Async asset fetcher used by the client-side loader
type Fetcher = Callable[[str], Awaitable[Any]]
