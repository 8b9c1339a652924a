"""Pre-rendering — fill a page's value boxes without a browser.

Runs the client runtime over an HTML page and returns the page with every
given record rendered in.  Used for static export and snapshot tests.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from valuebox.client.dom import to_html
from valuebox.client.runtime import ClientRuntime

if TYPE_CHECKING:
    from collections.abc import Mapping

    from valuebox._types import Fetcher
    from valuebox.config import ValueBoxConfig
    from valuebox.observability.collector import StackCollector


async def prerender(
    html: str,
    records: Mapping[str, Any],
    *,
    config: ValueBoxConfig | None = None,
    fetch: Fetcher | None = None,
    collector: StackCollector | None = None,
) -> str:
    """Render ``records`` (output id → record) into ``html``.

    Raises:
        MissingSlotError: If a record targets an output the page lacks.
        MalformedRecordError: If a record is invalid.

    """
    runtime = ClientRuntime.for_page(html, config=config, fetch=fetch, collector=collector)
    runtime.bind()
    for output_id, record in records.items():
        await runtime.receive(output_id, record)
    return to_html(runtime.document)
