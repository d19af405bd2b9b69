"""
document/selection.py

Bridge between the current selection and property-editing widgets.

Widgets only ever see the boundary dict shape produced by
``Element.to_dict()`` and push changes back as partial patches.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from document.operations import ElementOperations
from errors import ValidationError
from models import ElementType, Element


class SelectionBridge:
    """Exposes the selected element's data and routes edits to it.

    Args:
        operations: ElementOperations bound to the document store.
    """

    def __init__(self, operations: ElementOperations):
        self.operations = operations
        self.store = operations.store

    def current(self) -> Optional[Dict[str, Any]]:
        """Boundary dict of the selected element, or None."""
        element = self.store.selected_element
        return element.to_dict() if element is not None else None

    def _selected(self) -> Element:
        element = self.store.selected_element
        if element is None:
            raise ValidationError("No element is selected.")
        return element

    def apply(self, patch: Dict[str, Any]) -> Dict[str, Any]:
        """Apply a partial patch to the selection and return its new data."""
        element = self._selected()
        return self.operations.update(element.id, patch).to_dict()

    def set_content(self, content: str) -> Dict[str, Any]:
        return self.apply({"content": content})

    def set_style(self, prop: str, value: str) -> Dict[str, Any]:
        """Set one style property, keeping the others in order."""
        styles = dict(self._selected().styles)
        styles[prop] = value
        return self.apply({"styles": styles})

    def remove_style(self, prop: str) -> Dict[str, Any]:
        styles = dict(self._selected().styles)
        styles.pop(prop, None)
        return self.apply({"styles": styles})

    def set_position(self, axis: str, value: float) -> Dict[str, Any]:
        """Set the x or y position; negative values clamp to 0."""
        if axis not in ("x", "y"):
            raise ValidationError(f"Unknown axis {axis!r}")
        return self.apply({"position": {axis: max(0.0, float(value))}})

    def set_size(self, dimension: str, value: float) -> Dict[str, Any]:
        """Set width or height; values clamp to the minimum size.

        Image height is derived by the renderer and cannot be edited here.
        """
        if dimension not in ("width", "height"):
            raise ValidationError(f"Unknown dimension {dimension!r}")
        if dimension == "height" and self._selected().type == ElementType.IMAGE:
            raise ValidationError("Image height is derived and cannot be edited.")
        return self.apply({"size": {dimension: float(value)}})

    def delete(self) -> None:
        self.operations.delete(self._selected().id)

    def duplicate(self) -> Dict[str, Any]:
        return self.operations.duplicate(self._selected().id).to_dict()
