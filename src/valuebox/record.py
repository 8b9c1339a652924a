"""Render records and resource descriptors — the wire payload of one render pass.

A ``RenderRecord`` is what the server renderer hands to the transport and what
the client binding consumes.  It is validated at the serialization boundary:
a record with a missing or wrong-typed field never reaches the wire.

Wire format::

    {"title": str, "value": number, "color": str, "animate": bool,
     "resources"?: [{"name": str, "version": str,
                     "scripts": [str], "styles": [str]}]}

The ``resources`` key is present if and only if the record carries at least
one dynamic resource descriptor.

Thread Safety:
    Records and descriptors are frozen dataclasses, safe to share across threads.

"""

from __future__ import annotations

import json
import math
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

from valuebox._errors import MalformedRecordError

# Output slots, in render order.  Child placeholder ids are ``f"{id}-{slot}"``.
SLOTS: tuple[str, ...] = ("title", "value")

# Field carrying dynamic resource descriptors; never rendered into a slot.
RESOURCES_FIELD = "resources"

_WIRE_FIELDS = ("title", "value", "color", "animate")


def slot_id(output_id: str, slot: str) -> str:
    """Return the deterministic child identifier for a slot of an output."""
    return f"{output_id}-{slot}"


@dataclass(frozen=True, slots=True)
class ResourceDescriptor:
    """A named, versioned bundle of client assets.

    Attributes:
        name: Bundle name.  Two descriptors with the same name are the same
            bundle as far as the delivery layer is concerned.
        version: Bundle version.
        scripts: Script file names, relative to ``href``.
        styles: Stylesheet file names, relative to ``href``.
        href: URL prefix the files are served under.  Empty when the file
            names are already URLs (descriptors decoded from the wire).
        src: Filesystem directory holding the files.  Server side only,
            never serialized.

    """

    name: str
    version: str
    scripts: tuple[str, ...] = ()
    styles: tuple[str, ...] = ()
    href: str = ""
    src: Path | None = field(default=None, compare=False)

    @property
    def key(self) -> tuple[str, str]:
        """The ``(name, version)`` pair identifying this bundle."""
        return (self.name, self.version)

    @property
    def script_urls(self) -> tuple[str, ...]:
        return tuple(self._url(f) for f in self.scripts)

    @property
    def style_urls(self) -> tuple[str, ...]:
        return tuple(self._url(f) for f in self.styles)

    def _url(self, filename: str) -> str:
        if not self.href:
            return filename
        return f"{self.href.rstrip('/')}/{filename}"

    def to_wire(self) -> dict[str, Any]:
        """Wire mapping with resolved script/style URLs."""
        return {
            "name": self.name,
            "version": self.version,
            "scripts": list(self.script_urls),
            "styles": list(self.style_urls),
        }

    @classmethod
    def from_wire(cls, data: Any) -> ResourceDescriptor:
        """Decode a descriptor from its wire mapping.

        Raises:
            MalformedRecordError: If the mapping is not a valid descriptor.

        """
        if not isinstance(data, Mapping):
            msg = f"resource descriptor must be a mapping, got {type(data).__name__}"
            raise MalformedRecordError(msg)
        for key in ("name", "version"):
            if not isinstance(data.get(key), str) or not data[key]:
                msg = f"resource descriptor field {key!r} must be a non-empty string"
                raise MalformedRecordError(msg)
        return cls(
            name=data["name"],
            version=data["version"],
            scripts=_str_tuple(data.get("scripts", ()), "scripts"),
            styles=_str_tuple(data.get("styles", ()), "styles"),
        )


def _str_tuple(value: Any, name: str) -> tuple[str, ...]:
    if isinstance(value, str) or not isinstance(value, (list, tuple)):
        msg = f"resource descriptor field {name!r} must be a list of strings"
        raise MalformedRecordError(msg)
    if not all(isinstance(v, str) for v in value):
        msg = f"resource descriptor field {name!r} must be a list of strings"
        raise MalformedRecordError(msg)
    return tuple(value)


def _is_number(value: object) -> bool:
    # bool is an int subclass but never a valid value
    return isinstance(value, (int, float)) and not isinstance(value, bool)


@dataclass(frozen=True, slots=True)
class RenderRecord:
    """The payload of one render pass of one output instance.

    Attributes:
        title: Text for the ``title`` slot.
        value: Number for the ``value`` slot.
        color: CSS color applied to the output's root element.
        animate: Whether the value should count up on the client.
        resources: Dynamic resource descriptors needed by this render pass.

    """

    title: str
    value: int | float
    color: str
    animate: bool
    resources: tuple[ResourceDescriptor, ...] = ()

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Check every field's type.

        Raises:
            MalformedRecordError: On the first invalid field.

        """
        if not isinstance(self.title, str):
            _wrong_type("title", "a string", self.title)
        if not _is_number(self.value):
            _wrong_type("value", "a number", self.value)
        if isinstance(self.value, float) and not math.isfinite(self.value):
            msg = f"render record field 'value' must be a finite number, got {self.value!r}"
            raise MalformedRecordError(msg)
        if not isinstance(self.color, str) or not self.color:
            _wrong_type("color", "a non-empty string", self.color)
        if not isinstance(self.animate, bool):
            _wrong_type("animate", "a boolean", self.animate)
        if not isinstance(self.resources, tuple) or not all(
            isinstance(r, ResourceDescriptor) for r in self.resources
        ):
            _wrong_type("resources", "a tuple of ResourceDescriptor", self.resources)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> RenderRecord:
        """Build a record from a mapping, failing fast on any contract violation.

        Raises:
            MalformedRecordError: Missing required field, unknown field,
                or wrong-typed value.

        """
        if not isinstance(data, Mapping):
            msg = f"render record must be a mapping, got {type(data).__name__}"
            raise MalformedRecordError(msg)

        unknown = sorted(set(data) - {*_WIRE_FIELDS, RESOURCES_FIELD})
        if unknown:
            msg = f"render record has unknown fields: {', '.join(unknown)}"
            raise MalformedRecordError(msg)

        for name in _WIRE_FIELDS:
            if name not in data:
                msg = f"render record is missing required field {name!r}"
                raise MalformedRecordError(msg)

        raw_resources = data.get(RESOURCES_FIELD, ())
        if isinstance(raw_resources, (str, bytes)) or not isinstance(
            raw_resources, (list, tuple)
        ):
            _wrong_type(RESOURCES_FIELD, "a list", raw_resources)
        resources = tuple(
            r if isinstance(r, ResourceDescriptor) else ResourceDescriptor.from_wire(r)
            for r in raw_resources
        )

        return cls(
            title=data["title"],
            value=data["value"],
            color=data["color"],
            animate=data["animate"],
            resources=resources,
        )

    # The client decodes with the same rules the server validates with.
    from_wire = from_mapping

    def with_resources(self, *descriptors: ResourceDescriptor) -> RenderRecord:
        """Return a copy carrying ``descriptors``, deduplicated by name."""
        merged: dict[str, ResourceDescriptor] = {r.name: r for r in self.resources}
        for descriptor in descriptors:
            merged.setdefault(descriptor.name, descriptor)
        return replace(self, resources=tuple(merged.values()))

    def to_wire(self) -> dict[str, Any]:
        """Serialize to the wire mapping.

        The record is re-validated first so a partial record is never emitted.
        """
        self.validate()
        payload: dict[str, Any] = {
            "title": self.title,
            "value": self.value,
            "color": self.color,
            "animate": self.animate,
        }
        if self.resources:
            payload[RESOURCES_FIELD] = [r.to_wire() for r in self.resources]
        return payload

    def to_json(self) -> str:
        """Compact JSON with stable key order."""
        return json.dumps(
            self.to_wire(), separators=(",", ":"), ensure_ascii=False, allow_nan=False,
        )


def _wrong_type(name: str, expected: str, value: object) -> None:
    msg = f"render record field {name!r} must be {expected}, got {type(value).__name__}"
    raise MalformedRecordError(msg)
