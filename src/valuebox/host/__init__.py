"""Host adapter — serves value box pages and streams records over SSE.

The reactive host itself (deciding when outputs re-evaluate) stays outside
valuebox; it assigns render functions into ``Outputs`` and calls
``OutputSession.update`` when an output changes.
"""

from valuebox.host.broadcaster import Broadcaster, SSEConnection
from valuebox.host.outputs import Outputs
from valuebox.host.session import OutputSession

__all__ = [
    "Broadcaster",
    "OutputSession",
    "Outputs",
    "SSEConnection",
]
