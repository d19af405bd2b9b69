"""
models.py

Data models and constants for the PageCanvas document engine.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from settings import get_settings


# ----------------------------
# Element type constants
# ----------------------------

class ElementType:
    """Element type constants for canvas elements."""
    HEADING = "heading"
    TEXT = "text"
    BUTTON = "button"
    IMAGE = "image"
    CONTAINER = "container"


ELEMENT_TYPES = (
    ElementType.HEADING,
    ElementType.TEXT,
    ElementType.BUTTON,
    ElementType.IMAGE,
    ElementType.CONTAINER,
)


# ----------------------------
# Per-type defaults
# ----------------------------

DEFAULT_CONTENT: Dict[str, str] = {
    ElementType.HEADING: "Your Heading Here",
    ElementType.TEXT: "Your text content goes here. Click to edit this text.",
    ElementType.BUTTON: "Click Me",
    ElementType.IMAGE: "/placeholder.svg?height=200&width=300",
    ElementType.CONTAINER: "",
}

# (width, height) in pixels
DEFAULT_SIZES: Dict[str, tuple] = {
    ElementType.HEADING: (300, 50),
    ElementType.TEXT: (400, 100),
    ElementType.BUTTON: (120, 44),
    ElementType.IMAGE: (300, 200),
    ElementType.CONTAINER: (400, 200),
}

# Style keys are CSS property names, in emission order
DEFAULT_STYLES: Dict[str, Dict[str, str]] = {
    ElementType.HEADING: {
        "font-size": "32px",
        "font-weight": "bold",
        "color": "#1f2937",
        "padding": "8px 16px",
        "margin": "0",
        "background-color": "transparent",
    },
    ElementType.TEXT: {
        "font-size": "16px",
        "line-height": "1.6",
        "color": "#374151",
        "padding": "8px 16px",
        "margin": "0",
        "background-color": "transparent",
    },
    ElementType.BUTTON: {
        "background-color": "#3b82f6",
        "color": "white",
        "border": "none",
        "border-radius": "6px",
        "padding": "12px 24px",
        "font-size": "16px",
        "font-weight": "500",
        "cursor": "pointer",
        "margin": "0",
    },
    ElementType.IMAGE: {
        "border-radius": "4px",
        "margin": "0",
    },
    ElementType.CONTAINER: {
        "border": "2px dashed #d1d5db",
        "background-color": "#f9fafb",
        "border-radius": "8px",
        "padding": "20px",
        "margin": "0",
    },
}


def default_content(element_type: str) -> str:
    """Default content string for *element_type* (empty for unknown types)."""
    return DEFAULT_CONTENT.get(element_type, "")


def default_size(element_type: str) -> "Size":
    """Default size for *element_type*. Unknown types get 200x100."""
    w, h = DEFAULT_SIZES.get(element_type, (200, 100))
    return Size(float(w), float(h))


def default_styles(element_type: str) -> Dict[str, str]:
    """Return a fresh copy of the default style mapping for *element_type*."""
    return dict(DEFAULT_STYLES.get(element_type, {}))


# ----------------------------
# Markup tag → element type mapping
# ----------------------------

# Maps markup tag names to element types.  The parser calls
# ``resolve_tag_type()``; tags missing from this table are skipped.
TAG_TYPE_MAP: Dict[str, str] = {
    "h1": ElementType.HEADING,
    "h2": ElementType.HEADING,
    "h3": ElementType.HEADING,
    "h4": ElementType.HEADING,
    "h5": ElementType.HEADING,
    "h6": ElementType.HEADING,
    "p": ElementType.TEXT,
    "span": ElementType.TEXT,
    "button": ElementType.BUTTON,
    "img": ElementType.IMAGE,
    "div": ElementType.CONTAINER,
}

# Element type → tag emitted by the serializer
TYPE_TAG_MAP: Dict[str, str] = {
    ElementType.HEADING: "h1",
    ElementType.TEXT: "p",
    ElementType.BUTTON: "button",
    ElementType.IMAGE: "img",
    ElementType.CONTAINER: "div",
}


def resolve_tag_type(tag: str, fallback: Optional[str] = None) -> Optional[str]:
    """Resolve a markup tag name to an element type.

    Args:
        tag: Tag name, any case (e.g. ``'H2'``, ``'span'``).
        fallback: Type to return if no mapping exists.  Defaults to ``None``.

    Returns:
        The element type string, or *fallback* if the tag is not recognised.
    """
    return TAG_TYPE_MAP.get((tag or "").lower(), fallback)


# ----------------------------
# Geometry
# ----------------------------

def _min_size() -> float:
    """Get minimum element width/height from settings. Default: 10."""
    return float(get_settings().settings.canvas.elements.min_size)


@dataclass
class Position:
    """Top-left corner of an element in page pixels."""
    x: float = 0.0
    y: float = 0.0

    def clamped(self) -> "Position":
        """Return a copy with both axes floored at 0."""
        return Position(max(0.0, float(self.x)), max(0.0, float(self.y)))

    def offset(self, dx: float, dy: float) -> "Position":
        return Position(self.x + dx, self.y + dy)

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, d: Dict[str, Any], base: Optional["Position"] = None) -> "Position":
        """Build a Position from a (possibly partial) dict.

        Missing axes are taken from *base* (or 0).
        """
        base = base or cls()
        return cls(float(d.get("x", base.x)), float(d.get("y", base.y)))


@dataclass
class Size:
    """Element box size in pixels."""
    width: float = 10.0
    height: float = 10.0

    def clamped(self) -> "Size":
        """Return a copy with both dimensions floored at the minimum size."""
        floor = _min_size()
        return Size(max(floor, float(self.width)), max(floor, float(self.height)))

    def to_dict(self) -> Dict[str, float]:
        return {"width": self.width, "height": self.height}

    @classmethod
    def from_dict(cls, d: Dict[str, Any], base: Optional["Size"] = None) -> "Size":
        """Build a Size from a (possibly partial) dict.

        Missing dimensions are taken from *base* (or the dataclass default).
        """
        base = base or cls()
        return cls(float(d.get("width", base.width)), float(d.get("height", base.height)))


# ----------------------------
# Document model
# ----------------------------

@dataclass
class Element:
    """A positioned, sized, styled unit on a page.

    ``z_index`` governs paint order only; the element's place in its page's
    list is insertion order and never changes on reorder.
    """
    id: str
    type: str
    content: str = ""
    styles: Dict[str, str] = field(default_factory=dict)
    position: Position = field(default_factory=Position)
    size: Size = field(default_factory=Size)
    z_index: int = 1

    def __post_init__(self):
        self.position = self.position.clamped()
        self.size = self.size.clamped()

    def clone(self, new_id: str) -> "Element":
        """Deep copy under *new_id*."""
        dup = copy.deepcopy(self)
        dup.id = new_id
        return dup

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the boundary dict shape shared with editing widgets.

        Returns:
            Dict with ``id, type, content, styles, position, size, zIndex``.
        """
        return {
            "id": self.id,
            "type": self.type,
            "content": self.content,
            "styles": dict(self.styles),
            "position": self.position.to_dict(),
            "size": self.size.to_dict(),
            "zIndex": self.z_index,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Element":
        """Create an Element from the boundary dict shape.

        Missing fields fall back to the type defaults.
        """
        element_type = d.get("type", ElementType.CONTAINER)
        return cls(
            id=str(d["id"]),
            type=element_type,
            content=str(d.get("content", default_content(element_type))),
            styles={str(k): str(v) for k, v in (d.get("styles") or {}).items()},
            position=Position.from_dict(d.get("position") or {}),
            size=Size.from_dict(d.get("size") or {}, default_size(element_type)),
            z_index=int(d.get("zIndex", 1)),
        )


@dataclass
class Page:
    """A named canvas with its own background and ordered element list."""
    id: str
    name: str
    elements: List[Element] = field(default_factory=list)
    background_color: str = "#ffffff"

    def find(self, element_id: str) -> Optional[Element]:
        """Return the element with *element_id*, or None."""
        for el in self.elements:
            if el.id == element_id:
                return el
        return None

    def index_of(self, element_id: str) -> int:
        """List index of *element_id*, or -1."""
        for i, el in enumerate(self.elements):
            if el.id == element_id:
                return i
        return -1

    def max_z(self) -> Optional[int]:
        if not self.elements:
            return None
        return max(el.z_index for el in self.elements)

    def min_z(self) -> Optional[int]:
        if not self.elements:
            return None
        return min(el.z_index for el in self.elements)

    def next_z(self) -> int:
        """z-index for an element placed on top: current max + 1, or 1 if empty."""
        top = self.max_z()
        return 1 if top is None else top + 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "backgroundColor": self.background_color,
            "elements": [el.to_dict() for el in self.elements],
        }


def paint_order(elements: List[Element]) -> List[Element]:
    """Return *elements* sorted for painting.

    Ascending z-index; ties keep list order (``sorted`` is stable).
    """
    return sorted(elements, key=lambda el: el.z_index)
