"""Client side of the output protocol, runnable without a browser.

The browser runtime (``valuebox/theme/assets/valuebox.js``) implements the
same protocol for real pages.
"""

from valuebox.client.binding import OutputBinding, RenderOutcome, ValueBoxBinding
from valuebox.client.dom import parse_html, to_html
from valuebox.client.loader import CountUp, DirectoryFetcher, ResourceLoader
from valuebox.client.prerender import prerender
from valuebox.client.registry import BindingRegistry
from valuebox.client.runtime import ClientRuntime

__all__ = [
    "BindingRegistry",
    "ClientRuntime",
    "CountUp",
    "DirectoryFetcher",
    "OutputBinding",
    "RenderOutcome",
    "ResourceLoader",
    "ValueBoxBinding",
    "parse_html",
    "prerender",
    "to_html",
]
