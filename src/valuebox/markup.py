"""Markup generator — the static placeholder for one output instance.

``value_box_output("countries")`` renders::

    <div id="countries" class="valuebox-output">
      <span id="countries-title" class="valuebox-title"></span>
      <span id="countries-value" class="valuebox-value"></span>
    </div>

and declares the baseline resources (runtime script and stylesheet).  The
animation library is never a baseline resource; the server renderer attaches
it per render pass.

Slot ids derive from the output id.  Markup written by hand may set
``data-output-id`` to rename an output; its slots must then use that name
(``sales-title``, ``sales-value``), not the element's own ``id``.

Identifier uniqueness is the caller's obligation.  Pages that want it checked
pass a page-scoped ``IdentifierRegistry``; collisions with markup produced
elsewhere on the page still cannot be detected.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from functools import cache
from typing import TYPE_CHECKING

from valuebox._errors import DuplicateIdentifierError
from valuebox.config import ValueBoxConfig
from valuebox.record import SLOTS, ResourceDescriptor, slot_id
from valuebox.resources import baseline_resources

if TYPE_CHECKING:
    from kida import Markup, Template

    from valuebox.resources import ResourceRegistry

_FRAGMENT_TEMPLATE = """\
<div id="{{ output_id }}" class="{{ marker }}">
{% for slot in slots %}  <span id="{{ output_id }}-{{ slot }}" class="valuebox-{{ slot }}"></span>
{% end %}</div>
"""


@cache
def _fragment_template() -> Template:
    from kida import Environment

    env = Environment(autoescape=True)
    return env.from_string(_FRAGMENT_TEMPLATE)


@dataclass(frozen=True, slots=True)
class OutputFragment:
    """Placeholder markup plus the baseline resources it needs.

    Attributes:
        output_id: The caller-supplied identifier.
        html: Rendered placeholder markup, safe to embed unescaped.
        resources: Baseline resource descriptors.

    """

    output_id: str
    html: Markup
    resources: tuple[ResourceDescriptor, ...]

    def __html__(self) -> str:
        return str(self.html)

    def __str__(self) -> str:
        return str(self.html)


class IdentifierRegistry:
    """Page-scoped record of claimed output identifiers.

    Claims the output id and every derived slot id, so ``"a"`` with slot
    ``"title"`` and a separate output called ``"a-title"`` collide.
    """

    def __init__(self) -> None:
        self._claimed: dict[str, str] = {}
        self._lock = threading.Lock()

    def claim(self, output_id: str) -> None:
        """Claim ``output_id`` and its slot ids.

        Raises:
            DuplicateIdentifierError: If any of them is already claimed.

        """
        ids = (output_id, *(slot_id(output_id, s) for s in SLOTS))
        with self._lock:
            for element_id in ids:
                owner = self._claimed.get(element_id)
                if owner is not None:
                    msg = (
                        f"identifier {element_id!r} of output {output_id!r} "
                        f"is already used by output {owner!r}"
                    )
                    raise DuplicateIdentifierError(msg)
            for element_id in ids:
                self._claimed[element_id] = output_id

    def __contains__(self, element_id: object) -> bool:
        with self._lock:
            return element_id in self._claimed


def _check_id(output_id: str) -> None:
    if not isinstance(output_id, str) or not output_id:
        msg = "output id must be a non-empty string"
        raise ValueError(msg)
    if any(ch.isspace() for ch in output_id):
        msg = f"output id must not contain whitespace: {output_id!r}"
        raise ValueError(msg)


def value_box_output(
    output_id: str,
    *,
    config: ValueBoxConfig | None = None,
    identifiers: IdentifierRegistry | None = None,
    resources: ResourceRegistry | None = None,
) -> OutputFragment:
    """Render the placeholder fragment for one output instance.

    Args:
        output_id: Identifier unique on the page.
        config: Supplies the discovery marker and resource locations.
        identifiers: Optional page registry for duplicate detection.
        resources: Optional page delivery registry; baseline resources are
            declared into it (deduplicated across fragments).

    Raises:
        ValueError: If ``output_id`` is empty or contains whitespace.
        DuplicateIdentifierError: If ``identifiers`` already holds the id.

    """
    from kida import Markup

    _check_id(output_id)
    config = config or ValueBoxConfig()
    if identifiers is not None:
        identifiers.claim(output_id)

    html = _fragment_template().render(
        output_id=output_id,
        marker=config.marker_class,
        slots=SLOTS,
    )
    baseline = baseline_resources(config)
    if resources is not None:
        resources.declare_all(baseline)
    return OutputFragment(output_id=output_id, html=Markup(html), resources=baseline)
