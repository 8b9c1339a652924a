"""Live sales dashboard — three value boxes refreshed every few seconds.

Run from this directory with the count-up library unpacked under
``lib/countup/`` (``countUp.umd.js``)::

    python app.py

Without the library, animated boxes fall back to plain numbers.
"""

import asyncio
import random
import sys
from pathlib import Path

from valuebox import Outputs, produce, render_value_box
from valuebox.config_loader import load_config
from valuebox.host.app import create_app
from valuebox.observability import EventLog, StackCollector

HERE = Path(__file__).parent
REFRESH_SECONDS = 3.0

orders: list[int] = [12, 30, 41]


def countries():
    return produce("Countries", random.randint(80, 120))


def order_total():
    return produce("Orders", orders)


def returns():
    # Static box: no animation, so the library is never requested for it.
    return produce("Returns", random.randint(0, 5), animate=False)


def main() -> None:
    config = load_config(HERE)
    collector = StackCollector(EventLog())

    outputs = Outputs()
    outputs["countries"] = render_value_box(countries, config=config, collector=collector, output_id="countries")
    outputs["orders"] = render_value_box(order_total, config=config, collector=collector, output_id="orders")
    outputs["returns"] = render_value_box(returns, config=config, collector=collector, output_id="returns")

    page = (HERE / "page.html").read_text()
    app, session = create_app(config, page, outputs, collector=collector)
    task: asyncio.Task[None] | None = None

    @app.on_startup
    async def _start_ticker() -> None:
        nonlocal task

        async def tick() -> None:
            while True:
                await asyncio.sleep(REFRESH_SECONDS)
                orders.append(random.randint(1, 25))
                try:
                    await session.update_all()
                except Exception as exc:
                    print(f"  Update error: {exc}", file=sys.stderr)

        task = asyncio.create_task(tick())

    @app.on_shutdown
    async def _stop_ticker() -> None:
        if task is not None and not task.done():
            task.cancel()

    print(f"  dashboard: http://{config.host}:{config.port}/", file=sys.stderr)
    app.run(host=config.host, port=config.port)


if __name__ == "__main__":
    main()
