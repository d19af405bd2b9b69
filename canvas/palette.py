"""
canvas/palette.py

List of element types that can be dragged onto the canvas.
"""

from __future__ import annotations

import logging
from typing import List

from PyQt6.QtCore import Qt, QMimeData
from PyQt6.QtGui import QDrag
from PyQt6.QtWidgets import QAbstractItemView, QListWidget, QListWidgetItem

from canvas.drag import DragController, palette_item_id
from models import ELEMENT_TYPES

log = logging.getLogger(__name__)

PALETTE_LABELS = {
    "heading": "Heading",
    "text": "Text",
    "button": "Button",
    "image": "Image",
    "container": "Container",
}

PALETTE_ID_ROLE = Qt.ItemDataRole.UserRole


class PaletteWidget(QListWidget):
    """
    Drag source for new elements.

    Each row carries its palette id (``sidebar-<type>``).  Starting a drag
    presses the controller; a drag that ends without the canvas accepting
    it is released outside the target, which leaves the document untouched.
    """

    def __init__(self, controller: DragController, parent=None):
        super().__init__(parent)
        self.controller = controller
        self.setDragEnabled(True)
        self.setDragDropMode(QAbstractItemView.DragDropMode.DragOnly)
        self.setSelectionMode(QAbstractItemView.SelectionMode.SingleSelection)
        for element_type in ELEMENT_TYPES:
            item = QListWidgetItem(PALETTE_LABELS.get(element_type, element_type.title()))
            item.setData(PALETTE_ID_ROLE, palette_item_id(element_type))
            item.setToolTip(f"Drag onto the canvas to add a {element_type}")
            self.addItem(item)

    def palette_ids(self) -> List[str]:
        return [self.item(i).data(PALETTE_ID_ROLE) for i in range(self.count())]

    def startDrag(self, supportedActions):
        item = self.currentItem()
        if not item:
            return
        source_id = item.data(PALETTE_ID_ROLE)
        if not self.controller.press(source_id):
            return

        mime = QMimeData()
        mime.setText(source_id)
        drag = QDrag(self)
        drag.setMimeData(mime)
        result = drag.exec(Qt.DropAction.CopyAction)
        if result == Qt.DropAction.IgnoreAction:
            log.debug("Palette drag of %s ended outside the canvas", source_id)
        # No-op when the canvas already consumed the drag
        self.controller.release(None)
