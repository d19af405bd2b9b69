"""
document/operations.py

Create / update / duplicate / delete / reorder operations on page elements.

Every operation targets the active page unless an explicit ``page_index``
is passed.  Failures raise ``ValidationError`` before anything is mutated.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, Union

from document.store import DocumentStore
from errors import ValidationError
from models import (
    ELEMENT_TYPES,
    Element,
    Position,
    Size,
    default_content,
    default_size,
    default_styles,
    paint_order,
)
from settings import get_settings

log = logging.getLogger(__name__)

# Keys accepted in an update patch (the boundary dict shape minus id/type)
PATCH_KEYS = frozenset({"content", "styles", "position", "size", "zIndex"})

# Resize edges understood by ``resize()``
RESIZE_EDGES = ("left", "right", "top", "bottom")


def _get_duplicate_offset() -> float:
    """Get duplicate offset from settings. Default: 20."""
    return float(get_settings().settings.canvas.elements.duplicate_offset)


def drop_position(drop_x: float, drop_y: float) -> Position:
    """Top-left corner for an element dropped at (drop_x, drop_y).

    The drop point is offset by the drop anchor from settings
    (default 50, 25) and clamped at 0.
    """
    el = get_settings().settings.canvas.elements
    return Position(drop_x - el.drop_anchor_x, drop_y - el.drop_anchor_y).clamped()


class ElementOperations:
    """
    Element mutations over a DocumentStore.

    Args:
        store: The document store whose pages are mutated.
        on_change: Optional callback invoked with the affected element id
            after every successful mutation.
    """

    def __init__(self, store: DocumentStore, on_change: Optional[Callable[[str], None]] = None):
        self.store = store
        self.on_change = on_change

    def _notify(self, element_id: str) -> None:
        if self.on_change:
            self.on_change(element_id)

    def _require(self, element_id: str, page_index: Optional[int]) -> tuple:
        page = self.store.page_at(page_index)
        element = page.find(element_id)
        if element is None:
            raise ValidationError(f"No element {element_id!r} on page {page.name!r}")
        return page, element

    # ---- creation ----

    def create(self, element_type: str, position: Position, page_index: Optional[int] = None) -> Element:
        """Create an element of *element_type* with its type defaults at *position*.

        The element is appended to the page list with ``z_index = max + 1``
        (1 on an empty page) and becomes the selection when the page is active.
        """
        if element_type not in ELEMENT_TYPES:
            raise ValidationError(f"Unknown element type {element_type!r}")
        page = self.store.page_at(page_index)
        element = Element(
            id=self.store.new_element_id(),
            type=element_type,
            content=default_content(element_type),
            styles=default_styles(element_type),
            position=Position(position.x, position.y),
            size=default_size(element_type),
            z_index=page.next_z(),
        )
        page.elements.append(element)
        if page is self.store.active_page:
            self.store.select(element.id)
        log.debug("Created %s %s at (%s, %s) z=%d", element_type, element.id,
                  element.position.x, element.position.y, element.z_index)
        self._notify(element.id)
        return element

    def create_at_drop(self, element_type: str, drop_x: float, drop_y: float,
                       page_index: Optional[int] = None) -> Element:
        """Create an element for a palette drop at (drop_x, drop_y)."""
        return self.create(element_type, drop_position(drop_x, drop_y), page_index)

    # ---- mutation ----

    def update(self, element_id: str, patch: Dict[str, Any], page_index: Optional[int] = None) -> Element:
        """Merge a partial *patch* into an element, preserving id and type.

        ``position`` and ``size`` may be partial dicts (or Position/Size
        instances); ``styles`` replaces the whole mapping.  Position and size
        are clamped.

        Raises:
            ValidationError: unknown id or patch key; nothing is changed.
        """
        _, element = self._require(element_id, page_index)
        extra = set(patch) - PATCH_KEYS - {"id", "type"}
        if extra:
            raise ValidationError(f"Unsupported patch keys: {sorted(extra)}")

        # Build every new value first so a bad value leaves the element untouched
        content = element.content
        styles = element.styles
        position = element.position
        size = element.size
        z_index = element.z_index
        try:
            if "content" in patch:
                content = str(patch["content"])
            if "styles" in patch:
                styles = {str(k): str(v) for k, v in dict(patch["styles"]).items()}
            if "position" in patch:
                position = _as_position(patch["position"], element.position).clamped()
            if "size" in patch:
                size = _as_size(patch["size"], element.size).clamped()
            if "zIndex" in patch:
                z_index = int(patch["zIndex"])
        except (TypeError, ValueError) as e:
            raise ValidationError(f"Invalid patch for {element_id!r}: {e}") from e

        element.content = content
        element.styles = styles
        element.position = position
        element.size = size
        element.z_index = z_index
        self._notify(element_id)
        return element

    def move(self, element_id: str, x: float, y: float, page_index: Optional[int] = None) -> Element:
        """Set an element's position (clamped)."""
        return self.update(element_id, {"position": Position(x, y)}, page_index)

    def resize(self, element_id: str, edge: str, dx: float, dy: float,
               page_index: Optional[int] = None) -> Element:
        """Resize from a handle on *edge* by pointer delta (dx, dy).

        Right/bottom edges grow the size; left/top edges grow it the other
        way and shift the position so the opposite edge stays put.
        """
        if edge not in RESIZE_EDGES:
            raise ValidationError(f"Unknown resize edge {edge!r}")
        _, element = self._require(element_id, page_index)
        pos = element.position
        size = element.size
        if edge == "right":
            return self.update(element_id, {"size": {"width": size.width + dx}}, page_index)
        if edge == "bottom":
            return self.update(element_id, {"size": {"height": size.height + dy}}, page_index)
        if edge == "left":
            x, width = _drag_leading_edge(pos.x, size.width, dx)
            return self.update(element_id, {
                "size": {"width": width},
                "position": {"x": x},
            }, page_index)
        y, height = _drag_leading_edge(pos.y, size.height, dy)
        return self.update(element_id, {
            "size": {"height": height},
            "position": {"y": y},
        }, page_index)

    def duplicate(self, element_id: str, page_index: Optional[int] = None) -> Element:
        """Clone an element under a new id, offset by (+20, +20), on top."""
        page, source = self._require(element_id, page_index)
        offset = _get_duplicate_offset()
        dup = source.clone(self.store.new_element_id())
        dup.position = source.position.offset(offset, offset)
        dup.z_index = page.next_z()
        page.elements.append(dup)
        if page is self.store.active_page:
            self.store.select(dup.id)
        log.debug("Duplicated %s as %s", element_id, dup.id)
        self._notify(dup.id)
        return dup

    def delete(self, element_id: str, page_index: Optional[int] = None) -> Element:
        """Remove an element; clears the selection if it was selected."""
        page, element = self._require(element_id, page_index)
        page.elements.remove(element)
        self.store.forget_selection_of(element_id)
        log.debug("Deleted %s", element_id)
        self._notify(element_id)
        return element

    # ---- z-order ----

    def bring_to_front(self, element_id: str, page_index: Optional[int] = None) -> Element:
        """Set z-index to current max + 1 over the page's elements."""
        page, _ = self._require(element_id, page_index)
        return self.update(element_id, {"zIndex": page.max_z() + 1}, page_index)

    def send_to_back(self, element_id: str, page_index: Optional[int] = None) -> Element:
        """Set z-index to current min - 1 over the page's elements."""
        page, _ = self._require(element_id, page_index)
        return self.update(element_id, {"zIndex": page.min_z() - 1}, page_index)

    def paint_order(self, page_index: Optional[int] = None) -> List[Element]:
        """Elements of the page in paint order (z ascending, ties by list order)."""
        return paint_order(self.store.page_at(page_index).elements)


def _drag_leading_edge(start: float, length: float, delta: float) -> tuple:
    """New (start, length) after moving the left/top edge by *delta*.

    The trailing edge at ``start + length`` stays fixed; the length stops
    at the minimum size and the start stops at 0.
    """
    end = start + length
    new_length = max(float(get_settings().settings.canvas.elements.min_size), length - delta)
    new_start = end - new_length
    if new_start < 0:
        new_start, new_length = 0.0, end
    return new_start, new_length


def _as_position(value: Union[Position, Dict[str, Any]], base: Position) -> Position:
    if isinstance(value, Position):
        return Position(float(value.x), float(value.y))
    return Position.from_dict(dict(value), base)


def _as_size(value: Union[Size, Dict[str, Any]], base: Size) -> Size:
    if isinstance(value, Size):
        return Size(float(value.width), float(value.height))
    return Size.from_dict(dict(value), base)
