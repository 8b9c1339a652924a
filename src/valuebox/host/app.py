"""Chirp host — serves a value box page, its resources and its record stream.

``create_app`` wires a Chirp app for one page:

- ``/`` renders the page (a Kida template calling ``value_box(id)``)
- ``/__valuebox/events`` streams ``valuebox:render`` events over SSE
- each resource bundle is served from its directory under its ``href``
- the resource middleware injects baseline tags and the runtime bootstrap

The returned ``OutputSession`` is what the reactive host calls when an
output must update.
"""

from __future__ import annotations

import time
import uuid
from pathlib import Path
from typing import TYPE_CHECKING, Any

from valuebox._errors import ValueBoxError
from valuebox.config_loader import load_config
from valuebox.host.broadcaster import Broadcaster, SSEConnection
from valuebox.host.inject import EVENTS_ENDPOINT, resource_middleware
from valuebox.host.session import OutputSession
from valuebox.markup import IdentifierRegistry, value_box_output
from valuebox.resources import ResourceRegistry, animation_resource, baseline_resources

if TYPE_CHECKING:
    from chirp import App, Request

    from valuebox.config import ValueBoxConfig
    from valuebox.host.outputs import Outputs
    from valuebox.observability.collector import StackCollector


def _page_renderer(page_source: str, config: ValueBoxConfig, resources: ResourceRegistry):  # noqa: ANN202
    """Compile the page once; each render gets a fresh identifier registry."""
    from kida import Environment, TemplateRuntimeError

    template = Environment(autoescape=True).from_string(page_source)

    def render() -> str:
        identifiers = IdentifierRegistry()

        def value_box(output_id: str) -> Any:
            fragment = value_box_output(
                output_id, config=config, identifiers=identifiers, resources=resources,
            )
            return fragment.html

        try:
            return template.render(value_box=value_box)
        except TemplateRuntimeError as exc:
            # Kida wraps errors raised by value_box(); surface ours directly.
            if isinstance(exc.__cause__, ValueBoxError):
                raise exc.__cause__ from None
            raise

    return render


def _mount_bundles(app: App, config: ValueBoxConfig) -> None:
    """Serve every known bundle directory under the bundle's href."""
    from chirp.middleware import StaticFiles

    for descriptor in (*baseline_resources(config), animation_resource(config)):
        if descriptor.src is not None and descriptor.src.is_dir():
            app.add_middleware(StaticFiles(directory=descriptor.src, prefix=descriptor.href))


def _register_events_endpoint(app: App, session: OutputSession) -> None:
    """Register the SSE endpoint; new connections receive every current record."""
    from chirp import EventStream

    broadcaster = session.broadcaster

    async def events_handler(request: Request) -> Any:
        page = request.query.get("page", "/")
        conn = SSEConnection(client_id=str(uuid.uuid4()), page=page)
        broadcaster.subscribe(conn)
        session.prime(conn)

        async def generate():  # type: ignore[return]
            try:
                async for event in broadcaster.client_generator(conn):
                    yield event
            finally:
                broadcaster.unsubscribe(conn)

        return EventStream(generate())

    events_handler.__name__ = "valuebox_events"
    app.route(EVENTS_ENDPOINT, name="valuebox:events")(events_handler)


def create_app(
    config: ValueBoxConfig,
    page_source: str,
    outputs: Outputs,
    *,
    collector: StackCollector | None = None,
    debug: bool = False,
) -> tuple[App, OutputSession]:
    """Create a Chirp app serving one value box page.

    Args:
        config: Host, port and resource locations.
        page_source: Kida template of the page.  ``value_box(id)`` renders
            an output placeholder.
        outputs: Render functions by output id.
        collector: Diagnostic channel shared by the session and registries.
        debug: Chirp debug mode.

    """
    from chirp import App, AppConfig
    from chirp.http.response import Response

    app = App(config=AppConfig(debug=debug, host=config.host, port=config.port))
    resources = ResourceRegistry(collector)
    render_page = _page_renderer(page_source, config, resources)
    session = OutputSession(outputs, Broadcaster(), collector=collector)

    async def page_handler(request: Request) -> Any:
        return Response(
            body=render_page(),
            status=200,
            content_type="text/html; charset=utf-8",
        )

    page_handler.__name__ = "valuebox_page"
    app.route("/", name="valuebox:page")(page_handler)
    _register_events_endpoint(app, session)
    _mount_bundles(app, config)
    app.add_middleware(resource_middleware(resources, config))
    return app, session


def serve(
    page_source: str,
    outputs: Outputs,
    root: str | Path = ".",
    **kwargs: object,
) -> None:
    """Serve a value box page until interrupted.

    Args:
        page_source: Kida template of the page.
        outputs: Render functions by output id.
        root: Project root (holds ``valuebox.yaml`` and the animation library).
        **kwargs: Override ValueBoxConfig fields.

    """
    import sys

    from valuebox.observability import EventLog, StackCollector

    config = load_config(Path(root), **kwargs)
    t0 = time.perf_counter()
    collector = StackCollector(EventLog())
    app, _session = create_app(config, page_source, outputs, collector=collector)
    load_ms = (time.perf_counter() - t0) * 1000

    print(
        f"  valuebox: {len(outputs)} output{'s' if len(outputs) != 1 else ''} "
        f"on http://{config.host}:{config.port}/ ({load_ms:.0f}ms)",
        file=sys.stderr,
    )
    app.run(host=config.host, port=config.port)
