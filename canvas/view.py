"""
canvas/view.py

QGraphicsView for the canvas scene with wheel zoom.
"""

from __future__ import annotations

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QPainter
from PyQt6.QtWidgets import QGraphicsView

from canvas.scene import CanvasScene
from settings import get_settings


class CanvasView(QGraphicsView):
    """
    Graphics view showing one page of the canvas.

    Palette drops are handled by the scene; the view only has to accept
    them and provide zoom.
    """

    def __init__(self, scene: CanvasScene, parent=None):
        super().__init__(scene, parent)
        self.setAcceptDrops(True)
        self.setRenderHint(QPainter.RenderHint.Antialiasing, True)
        self.setRenderHint(QPainter.RenderHint.TextAntialiasing, True)
        self.setDragMode(QGraphicsView.DragMode.NoDrag)
        self.setTransformationAnchor(QGraphicsView.ViewportAnchor.AnchorUnderMouse)
        self.setAlignment(Qt.AlignmentFlag.AlignLeft | Qt.AlignmentFlag.AlignTop)

    def wheelEvent(self, event):
        """Zoom with mouse wheel."""
        delta = event.angleDelta().y()
        if delta == 0:
            super().wheelEvent(event)
            return
        # Zoom factor from settings. Default: 1.15 (15% per scroll step)
        zoom_factor = get_settings().settings.canvas.zoom.wheel_factor
        factor = zoom_factor if delta > 0 else 1 / zoom_factor
        self.scale(factor, factor)

    def zoom_reset(self):
        self.resetTransform()

    def zoom_in(self):
        factor = get_settings().settings.canvas.zoom.wheel_factor
        self.scale(factor, factor)

    def zoom_out(self):
        factor = get_settings().settings.canvas.zoom.wheel_factor
        self.scale(1 / factor, 1 / factor)
