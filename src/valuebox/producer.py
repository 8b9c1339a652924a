"""Value producer — builds a render record from user parameters.

Preprocessing is small: a sequence of numbers is summed into
a scalar, and a color is derived from the aggregated value when the caller
does not supply one.  Every field has a default applied before the record
is built, and the record is validated on construction, so a partial record
cannot leave this module.

``produce`` is pure: it reads nothing but its arguments and immutable
module constants.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from valuebox._errors import MalformedRecordError
from valuebox.record import RenderRecord


@dataclass(frozen=True, slots=True)
class Palette:
    """Threshold-based default colors.

    Attributes:
        low: Color for values at or below ``threshold``.
        high: Color for values above ``threshold``.
        threshold: Boundary between the two entries.

    """

    low: str
    high: str
    threshold: float

    def color_for(self, value: float) -> str:
        return self.low if value <= self.threshold else self.high


DEFAULT_PALETTE = Palette(low="#ef476f", high="#06d6a0", threshold=100)


def _aggregate(value: object, *, aggregate: bool) -> int | float:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value
    if isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
        msg = f"value must be a number or a sequence of numbers, got {type(value).__name__}"
        raise MalformedRecordError(msg)
    if not aggregate:
        msg = "value is a sequence but aggregation is disabled"
        raise MalformedRecordError(msg)
    items = list(value)
    for item in items:
        if not isinstance(item, (int, float)) or isinstance(item, bool):
            msg = f"cannot aggregate non-numeric item {item!r}"
            raise MalformedRecordError(msg)
    return sum(items)


def produce(
    title: str,
    value: int | float | Iterable[int | float],
    *,
    color: str | None = None,
    animate: bool = True,
    aggregate: bool = True,
    palette: Palette = DEFAULT_PALETTE,
) -> RenderRecord:
    """Build a render record.

    Args:
        title: Text for the title slot.
        value: A number, or a sequence of numbers summed when ``aggregate``.
        color: Explicit color.  Defaults to ``palette.color_for(value)``.
        animate: Whether the client should count the value up.
        aggregate: Allow summing a sequence ``value``.
        palette: Colors used when ``color`` is not given.

    Raises:
        MalformedRecordError: If ``value`` cannot be reduced to a number or
            any field has the wrong type.

    Example:
        >>> produce("Countries", 95)
        RenderRecord(title='Countries', value=95, color='#ef476f', animate=True, resources=())

    """
    scalar = _aggregate(value, aggregate=aggregate)
    return RenderRecord(
        title=title,
        value=scalar,
        color=color if color is not None else palette.color_for(scalar),
        animate=animate,
    )
