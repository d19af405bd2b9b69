"""
canvas/scene.py

QGraphicsScene showing the active page and feeding pointer events to the
drag controller.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional, Tuple

from PyQt6.QtCore import Qt, QPointF, QRectF
from PyQt6.QtGui import QAction, QBrush, QColor, QPainter
from PyQt6.QtWidgets import QGraphicsScene, QMenu

from canvas.drag import CANVAS_TARGET, PALETTE_PREFIX, DragController, DragState
from canvas.items import ElementItem, css_to_qcolor
from document.operations import ElementOperations
from errors import ValidationError
from models import Element, Position
from settings import get_settings

log = logging.getLogger(__name__)

_OUTSIDE_PAGE = QColor("#e5e7eb")


def _get_page_width() -> int:
    """Get canvas page width from settings. Default: 1200."""
    return get_settings().settings.canvas.page.width


def _get_page_min_height() -> int:
    """Get canvas page min-height from settings. Default: 800."""
    return get_settings().settings.canvas.page.min_height


class CanvasScene(QGraphicsScene):
    """
    Graphics scene rendering the active page of a document.

    Element presses start an existing-element drag, palette drops finish a
    new-element drag, and Escape cancels whatever drag is in progress.
    Handles on the selected element resize it.

    Args:
        operations: ElementOperations bound to the document store.
    """

    CONTEXT_ACTIONS = ("Bring to Front", "Send to Back", "Duplicate", "Delete")

    def __init__(self, operations: ElementOperations, parent=None):
        super().__init__(parent)
        self.operations = operations
        self.store = operations.store
        self.controller = DragController(operations, on_change=self.render_page)
        self._items: Dict[str, ElementItem] = {}
        self._press_point: Optional[QPointF] = None
        # page bounds captured when an element drag starts
        self._drag_bounds: Optional[QRectF] = None
        # (element id, edge, last scene point) while a handle is dragged
        self._resize: Optional[Tuple[str, str, QPointF]] = None
        self._on_selection_changed: Optional[Callable[[Optional[Element]], None]] = None
        self.render_page()

    def set_selection_changed_callback(self, callback: Optional[Callable[[Optional[Element]], None]]):
        """Set callback for when the selected element changes."""
        self._on_selection_changed = callback

    # ---- rendering ----

    def page_rect(self) -> QRectF:
        """Page bounds: settings width, grown to fit every element."""
        width = float(_get_page_width())
        height = float(_get_page_min_height())
        for el in self.store.active_page.elements:
            width = max(width, el.position.x + el.size.width)
            height = max(height, el.position.y + el.size.height)
        return QRectF(0, 0, width, height)

    def render_page(self) -> None:
        """Rebuild every item from the active page, in paint order."""
        for item in list(self._items.values()):
            self.removeItem(item)
        self._items.clear()
        selected = self.store.selected_id
        for el in self.operations.paint_order():
            item = ElementItem(el, selected=(el.id == selected))
            self.addItem(item)
            self._items[el.id] = item
        self.setSceneRect(self.page_rect())
        self.update()

    def item_for(self, element_id: str) -> Optional[ElementItem]:
        return self._items.get(element_id)

    def element_item_at(self, scene_pt: QPointF) -> Optional[ElementItem]:
        """Topmost element item whose box contains *scene_pt*."""
        hits: List[ElementItem] = [
            it for it in self._items.values()
            if it.sceneBoundingRect().contains(scene_pt) or it.hit_test_handle(scene_pt)
        ]
        if not hits:
            return None
        return max(hits, key=lambda it: it.zValue())

    def drawBackground(self, painter: QPainter, rect: QRectF):
        painter.fillRect(rect, QBrush(_OUTSIDE_PAGE))
        page = css_to_qcolor(self.store.active_page.background_color, QColor(Qt.GlobalColor.white))
        painter.fillRect(self.sceneRect().intersected(rect), QBrush(page))

    # ---- selection ----

    def select_element(self, element_id: Optional[str]) -> None:
        try:
            self.store.select(element_id)
        except ValidationError as e:
            log.warning("Cannot select %s: %s", element_id, e)
            return
        self.render_page()
        if self._on_selection_changed:
            self._on_selection_changed(self.store.selected_element)

    # ---- drag entry points (also used directly by tests) ----

    def begin_element_drag(self, element_id: str, scene_pt: QPointF) -> bool:
        """Select *element_id* and start dragging it from *scene_pt*."""
        self.select_element(element_id)
        if not self.controller.press(element_id):
            return False
        self._press_point = QPointF(scene_pt)
        self._drag_bounds = self.page_rect()
        return True

    def drag_to(self, scene_pt: QPointF) -> None:
        if self._press_point is None or self.controller.state != DragState.DRAGGING_EXISTING:
            return
        self.controller.move(scene_pt.x() - self._press_point.x(),
                             scene_pt.y() - self._press_point.y())

    def end_drag(self, scene_pt: QPointF) -> Optional[Element]:
        """Release the drag; outside the page the element snaps back.

        The page is the one in place when the drag started, so the
        growth caused by the dragged element itself does not count.
        """
        bounds = self._drag_bounds if self._drag_bounds is not None else self.page_rect()
        self._press_point = None
        self._drag_bounds = None
        target = CANVAS_TARGET if bounds.contains(scene_pt) else None
        return self.controller.release(target)

    def cancel_drag(self) -> None:
        self._press_point = None
        self._drag_bounds = None
        self._resize = None
        self.controller.cancel()

    def drop_palette_item(self, source_id: str, scene_pt: QPointF) -> Optional[Element]:
        """Finish a palette drag by dropping *source_id* at *scene_pt*."""
        if self.controller.state == DragState.IDLE and not self.controller.press(source_id):
            return None
        if self.controller.state != DragState.DRAGGING_NEW:
            return None
        element = self.controller.release(CANVAS_TARGET, Position(scene_pt.x(), scene_pt.y()))
        if element is not None and self._on_selection_changed:
            self._on_selection_changed(element)
        return element

    # ---- resize ----

    def _resize_to(self, scene_pt: QPointF) -> None:
        element_id, edge, last = self._resize
        try:
            self.operations.resize(element_id, edge, scene_pt.x() - last.x(), scene_pt.y() - last.y())
        except ValidationError as e:
            log.warning("Resize of %s stopped: %s", element_id, e)
            self._resize = None
            return
        self._resize = (element_id, edge, QPointF(scene_pt))
        self.render_page()

    # ---- context actions ----

    def run_context_action(self, name: str, element_id: str) -> Optional[Element]:
        """Run one of ``CONTEXT_ACTIONS`` on *element_id*."""
        if name == "Bring to Front":
            result = self.operations.bring_to_front(element_id)
        elif name == "Send to Back":
            result = self.operations.send_to_back(element_id)
        elif name == "Duplicate":
            result = self.operations.duplicate(element_id)
        elif name == "Delete":
            result = self.operations.delete(element_id)
        else:
            raise ValidationError(f"Unknown canvas action {name!r}")
        self.render_page()
        if self._on_selection_changed:
            self._on_selection_changed(self.store.selected_element)
        return result

    def _show_context_menu(self, screen_pos, element_id: str):
        """Show context menu for an element."""
        menu = QMenu()
        for name in self.CONTEXT_ACTIONS:
            if name == "Delete":
                menu.addSeparator()
            act = QAction(name, menu)
            act.triggered.connect(lambda _checked=False, n=name: self.run_context_action(n, element_id))
            menu.addAction(act)
        menu.exec(screen_pos)

    # ---- Qt events ----

    def keyPressEvent(self, event):
        """Escape cancels a drag; Delete removes the selection."""
        if event.key() == Qt.Key.Key_Escape:
            self.cancel_drag()
            event.accept()
            return
        if event.key() in (Qt.Key.Key_Delete, Qt.Key.Key_Backspace) and self.store.selected_id:
            self.run_context_action("Delete", self.store.selected_id)
            event.accept()
            return
        super().keyPressEvent(event)

    def mousePressEvent(self, event):
        sp = event.scenePos()
        item = self.element_item_at(sp)

        if event.button() == Qt.MouseButton.RightButton:
            if item is not None:
                self.select_element(item.element_id)
                self._show_context_menu(event.screenPos(), item.element_id)
                event.accept()
                return
            super().mousePressEvent(event)
            return

        if event.button() != Qt.MouseButton.LeftButton:
            super().mousePressEvent(event)
            return

        if item is None:
            self.select_element(None)
            event.accept()
            return

        edge = item.hit_test_handle(sp)
        if edge:
            self._resize = (item.element_id, edge, QPointF(sp))
        else:
            self.begin_element_drag(item.element_id, sp)
        event.accept()

    def mouseMoveEvent(self, event):
        if self._resize is not None:
            self._resize_to(event.scenePos())
            event.accept()
            return
        if self.controller.state == DragState.DRAGGING_EXISTING:
            self.drag_to(event.scenePos())
            event.accept()
            return
        super().mouseMoveEvent(event)

    def mouseReleaseEvent(self, event):
        if self._resize is not None:
            self._resize = None
            event.accept()
            return
        if self.controller.state == DragState.DRAGGING_EXISTING:
            self.end_drag(event.scenePos())
            event.accept()
            return
        super().mouseReleaseEvent(event)

    def dragEnterEvent(self, event):
        """Accept palette items carried as plain text."""
        if event.mimeData().hasText() and event.mimeData().text().startswith(PALETTE_PREFIX):
            event.acceptProposedAction()
            return
        event.ignore()

    def dragMoveEvent(self, event):
        if event.mimeData().hasText() and event.mimeData().text().startswith(PALETTE_PREFIX):
            event.acceptProposedAction()
            return
        event.ignore()

    def dropEvent(self, event):
        """Create the dropped palette element under the pointer."""
        if not event.mimeData().hasText():
            event.ignore()
            return
        element = self.drop_palette_item(event.mimeData().text(), event.scenePos())
        if element is None:
            event.ignore()
            return
        event.acceptProposedAction()
