"""
canvas package

Drag controller plus the PyQt6 items, scene, view and palette of the canvas.
"""

from canvas.drag import ActiveDrag, DragController, DragState, palette_item_id
from canvas.items import ElementItem
from canvas.scene import CanvasScene
from canvas.view import CanvasView
from canvas.palette import PaletteWidget

__all__ = [
    "ActiveDrag",
    "DragController",
    "DragState",
    "palette_item_id",
    "ElementItem",
    "CanvasScene",
    "CanvasView",
    "PaletteWidget",
]
