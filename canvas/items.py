"""
canvas/items.py

Graphics item that paints one page element on the canvas.

Items are views of the model only: the scene rebuilds them from the active
page and routes every pointer interaction to the drag controller, so an
item never moves itself.
"""

from __future__ import annotations

import re
from typing import Dict, Optional, Tuple

from PyQt6.QtCore import Qt, QPointF, QRectF, QLineF
from PyQt6.QtGui import QBrush, QColor, QFont, QPainter, QPen
from PyQt6.QtWidgets import QGraphicsItem, QGraphicsRectItem

from models import Element, ElementType
from utils import parse_px

# Key used with QGraphicsItem.setData() to store the element id
ELEMENT_ID_KEY = 0

# Distance from a handle point (scene units) that still counts as a hit
HANDLE_HIT_DISTANCE = 8.0
HANDLE_SIZE = 8.0

_RGB_RE = re.compile(
    r'^rgba?\(\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+)\s*(?:,\s*([\d.]+)\s*)?\)$',
    re.IGNORECASE,
)

_BORDER_STYLES = {
    "solid": Qt.PenStyle.SolidLine,
    "dashed": Qt.PenStyle.DashLine,
    "dotted": Qt.PenStyle.DotLine,
}


# ----------------------------
# Color helpers
# ----------------------------

def qcolor_to_hex(c: QColor) -> str:
    """
    Convert a QColor to a lower-case ``#rrggbb`` string.

    Args:
        c: The QColor to convert

    Returns:
        Hex string like "#3b82f6"
    """
    return "#{:02x}{:02x}{:02x}".format(c.red(), c.green(), c.blue())


def css_to_qcolor(value: Optional[str], fallback: QColor) -> QColor:
    """
    Parse a CSS color value to a QColor.

    Accepts ``#rgb``/``#rrggbb``, named colors (including ``transparent``)
    and ``rgb()``/``rgba()``.

    Args:
        value: CSS color text
        fallback: Color to return if parsing fails

    Returns:
        Parsed QColor or fallback
    """
    if not value:
        return QColor(fallback)
    s = value.strip()
    m = _RGB_RE.match(s)
    if m:
        r, g, b = (min(255, int(m.group(i))) for i in (1, 2, 3))
        color = QColor(r, g, b)
        if m.group(4) is not None:
            color.setAlphaF(max(0.0, min(1.0, float(m.group(4)))))
        return color
    color = QColor(s)
    if color.isValid():
        return color
    return QColor(fallback)


def parse_border(value: Optional[str]) -> Optional[Tuple[float, Qt.PenStyle, QColor]]:
    """Split a ``border`` shorthand into (width, pen style, color).

    Returns None for ``none``/``0`` or an empty value.
    """
    if not value:
        return None
    width = 1.0
    style = Qt.PenStyle.SolidLine
    color = QColor(Qt.GlobalColor.black)
    for token in value.split():
        low = token.lower()
        if low in ("none", "hidden", "0"):
            return None
        px = parse_px(low)
        if px is not None:
            width = px
        elif low in _BORDER_STYLES:
            style = _BORDER_STYLES[low]
        else:
            color = css_to_qcolor(token, color)
    if width <= 0:
        return None
    return width, style, color


# ----------------------------
# Element item
# ----------------------------

class ElementItem(QGraphicsRectItem):
    """Rectangle item rendering an element's box, border and content text."""

    def __init__(self, element: Element, selected: bool = False):
        super().__init__(QRectF(0, 0, element.size.width, element.size.height))
        self.element_id = element.id
        self.element_type = element.type
        self.selected = selected
        self.setData(ELEMENT_ID_KEY, element.id)
        self.setAcceptHoverEvents(True)
        self.setFlag(QGraphicsItem.GraphicsItemFlag.ItemIsSelectable, False)
        self.sync(element)

    def sync(self, element: Element) -> None:
        """Pull geometry, paint order and style from *element*."""
        self.prepareGeometryChange()
        self.setRect(QRectF(0, 0, element.size.width, element.size.height))
        self.setPos(QPointF(element.position.x, element.position.y))
        self.setZValue(element.z_index)
        self.content = element.content
        self.styles = dict(element.styles)

        fill = css_to_qcolor(self.styles.get("background-color"), QColor(0, 0, 0, 0))
        self.setBrush(QBrush(fill))
        border = parse_border(self.styles.get("border"))
        if border is None:
            self.setPen(QPen(Qt.PenStyle.NoPen))
        else:
            width, style, color = border
            pen = QPen(color, width)
            pen.setStyle(style)
            self.setPen(pen)
        self.update()

    # ---- handles ----

    def handle_points_scene(self) -> Dict[str, QPointF]:
        """Edge-midpoint resize handles in scene coordinates."""
        r = self.rect()
        p = self.pos()
        cx = p.x() + r.width() / 2
        cy = p.y() + r.height() / 2
        return {
            "top": QPointF(cx, p.y()),
            "bottom": QPointF(cx, p.y() + r.height()),
            "left": QPointF(p.x(), cy),
            "right": QPointF(p.x() + r.width(), cy),
        }

    def hit_test_handle(self, scene_pt: QPointF) -> Optional[str]:
        """Return the resize edge under *scene_pt* when selected, else None."""
        if not self.selected:
            return None
        for edge, hp in self.handle_points_scene().items():
            if QLineF(scene_pt, hp).length() <= HANDLE_HIT_DISTANCE:
                return edge
        return None

    def hoverMoveEvent(self, event):
        edge = self.hit_test_handle(event.scenePos())
        if edge in ("top", "bottom"):
            self.setCursor(Qt.CursorShape.SizeVerCursor)
        elif edge in ("left", "right"):
            self.setCursor(Qt.CursorShape.SizeHorCursor)
        else:
            self.setCursor(Qt.CursorShape.OpenHandCursor)
        super().hoverMoveEvent(event)

    def boundingRect(self) -> QRectF:
        pad = HANDLE_SIZE / 2 + 2
        return super().boundingRect().adjusted(-pad, -pad, pad, pad)

    # ---- painting ----

    def _font(self) -> QFont:
        font = QFont()
        size = parse_px(self.styles.get("font-size"))
        if size:
            font.setPixelSize(max(1, int(size)))
        weight = (self.styles.get("font-weight") or "").lower()
        if weight == "bold" or (weight.isdigit() and int(weight) >= 600):
            font.setBold(True)
        return font

    def _text_flags(self) -> int:
        align = (self.styles.get("text-align") or "").lower()
        if self.element_type == ElementType.BUTTON:
            h = Qt.AlignmentFlag.AlignHCenter
        elif align == "center":
            h = Qt.AlignmentFlag.AlignHCenter
        elif align == "right":
            h = Qt.AlignmentFlag.AlignRight
        else:
            h = Qt.AlignmentFlag.AlignLeft
        v = Qt.AlignmentFlag.AlignVCenter if self.element_type == ElementType.BUTTON else Qt.AlignmentFlag.AlignTop
        return (h | v | Qt.AlignmentFlag.AlignAbsolute).value | Qt.TextFlag.TextWordWrap.value

    def paint(self, painter: QPainter, option, widget=None):
        r = self.rect()
        radius = parse_px(self.styles.get("border-radius")) or 0.0
        painter.setRenderHint(QPainter.RenderHint.Antialiasing, True)
        painter.setPen(self.pen())
        painter.setBrush(self.brush())
        if radius > 0:
            painter.drawRoundedRect(r, radius, radius)
        else:
            painter.drawRect(r)

        if self.element_type == ElementType.IMAGE:
            painter.setPen(QPen(QColor("#9ca3af"), 1, Qt.PenStyle.DashLine))
            painter.setBrush(QBrush(QColor("#f3f4f6")))
            painter.drawRect(r.adjusted(1, 1, -1, -1))
            painter.setPen(QColor("#6b7280"))
            painter.drawText(r, Qt.AlignmentFlag.AlignCenter, "Canvas image")
        elif self.content:
            pad = parse_px((self.styles.get("padding") or "").split(" ")[0]) or 0.0
            painter.setFont(self._font())
            painter.setPen(css_to_qcolor(self.styles.get("color"), QColor(Qt.GlobalColor.black)))
            painter.drawText(r.adjusted(pad, pad, -pad, -pad), self._text_flags(), self.content)

        if self.selected:
            painter.setPen(QPen(QColor("#3b82f6"), 2))
            painter.setBrush(Qt.BrushStyle.NoBrush)
            painter.drawRect(r)
            painter.setBrush(QBrush(QColor("#ffffff")))
            painter.setPen(QPen(QColor("#3b82f6"), 1))
            half = HANDLE_SIZE / 2
            for hp in self.handle_points_scene().values():
                local = self.mapFromScene(hp)
                painter.drawRect(QRectF(local.x() - half, local.y() - half, HANDLE_SIZE, HANDLE_SIZE))
