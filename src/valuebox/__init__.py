"""Valuebox — typed, styled value outputs pushed from Python to the browser.

A value box shows a title and a number on a colored background, and can
count the number up.  The animation library is only shipped to the browser
for render passes that animate.

Quick start::

    from valuebox import Outputs, produce, render_value_box, value_box_output

    outputs = Outputs()
    outputs["countries"] = render_value_box(lambda: produce("Countries", 95))

    value_box_output("countries")          # placeholder markup + baseline resources
    outputs.evaluate("countries")          # wire JSON for the client

Serve a page::

    from valuebox.host.app import serve

    serve('<body>{{ value_box("countries") }}</body>', outputs)

"""

# PEP 703: Declare this module as free-threading safe
_Py_mod_gil = 0

__version__ = "0.1.0"
__all__ = [
    "Outputs",
    "RenderRecord",
    "ResourceDescriptor",
    "ValueBoxConfig",
    "__version__",
    "produce",
    "render_value_box",
    "value_box_output",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import valuebox`` fast; Kida and Chirp load only when used.
    """
    if name == "ValueBoxConfig":
        from valuebox.config import ValueBoxConfig

        return ValueBoxConfig

    if name in ("RenderRecord", "ResourceDescriptor"):
        from valuebox import record

        return getattr(record, name)

    if name == "produce":
        from valuebox.producer import produce

        return produce

    if name == "render_value_box":
        from valuebox.renderer import render_value_box

        return render_value_box

    if name == "value_box_output":
        from valuebox.markup import value_box_output

        return value_box_output

    if name == "Outputs":
        from valuebox.host.outputs import Outputs

        return Outputs

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
