"""Bundled client runtime — the binding's own script and stylesheet.

``valuebox.js`` implements the client binding for real pages and
``valuebox.css`` styles the output slots.  Both are baseline resources:
every page that contains a value box loads them exactly once.

Thread Safety:
    All returned values are read-only paths.  Safe for free-threading.

"""

from pathlib import Path

RUNTIME_SCRIPT = "valuebox.js"
RUNTIME_STYLE = "valuebox.css"


def bundled_assets_path() -> Path:
    """Return the absolute path to the bundled runtime assets."""
    return Path(__file__).parent / "assets"

