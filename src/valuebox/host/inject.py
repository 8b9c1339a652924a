"""Resource injection — baseline tags and bootstrap for value box pages.

Chirp middleware that adds the page's deduplicated baseline resource tags
plus a small bootstrap connecting the browser runtime to the SSE endpoint.
Pages that declared no value box are left alone.  Tags go before
``</head>``; pages without a head get them before ``</body>``, and bare
fragments get them appended.
"""

from __future__ import annotations

import json
from dataclasses import replace
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from chirp.http.request import Request
    from chirp.http.response import Response, SSEResponse, StreamingResponse
    from chirp.middleware.protocol import Next

    from valuebox.config import ValueBoxConfig
    from valuebox.resources import ResourceRegistry

    type AnyResponse = Response | StreamingResponse | SSEResponse

EVENTS_ENDPOINT = "/__valuebox/events"


def bootstrap_script(config: ValueBoxConfig) -> str:
    """Inline script starting the browser runtime for the current page."""
    options = json.dumps({
        "binding": config.binding_name,
        "marker": config.marker_class,
        "overrideAttr": config.id_override_attr,
        "animation": config.animation_name,
        "events": EVENTS_ENDPOINT,
    })
    return (
        "<script data-valuebox-bootstrap>\n"
        "document.addEventListener('DOMContentLoaded', function() {\n"
        f"  window.ValueBox.start({options});\n"
        "});\n"
        "</script>\n"
    )


def _inject(body: str, snippet: str) -> str:
    for closing in ("</head>", "</body>"):
        if closing in body:
            return body.replace(closing, snippet + closing, 1)
    return body + snippet


def resource_middleware(resources: ResourceRegistry, config: ValueBoxConfig):  # noqa: ANN201
    """Build the middleware for a page-scoped resource registry."""
    bootstrap = bootstrap_script(config)

    async def middleware(request: Request, next: Next) -> AnyResponse:
        response = await next(request)

        # Only inject into regular (non-streaming, non-SSE) HTML responses
        if not hasattr(response, "body") or not hasattr(response, "content_type"):
            return response
        if "text/html" not in response.content_type:
            return response

        body = response.body
        if isinstance(body, bytes):
            body = body.decode("utf-8")
        if "data-valuebox-bootstrap" in body or not len(resources):
            return response
        return replace(response, body=_inject(body, resources.render_tags() + bootstrap))

    return middleware
