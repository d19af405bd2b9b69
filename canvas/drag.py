"""
canvas/drag.py

Pointer-drag state machine that turns press / move / release / cancel
events into element creation and position updates.

Exactly one drag can be active.  The whole drag is carried by a single
immutable ``ActiveDrag`` record, so a test can drive the controller with
discrete event sequences and inspect the state after each one.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Callable, Optional

from document.operations import ElementOperations
from errors import ValidationError
from models import ELEMENT_TYPES, Element, Position

log = logging.getLogger(__name__)

# Palette items are identified as "<prefix><element type>"
PALETTE_PREFIX = "sidebar-"

# Identifier of the only valid drop target
CANVAS_TARGET = "canvas"


def palette_item_id(element_type: str) -> str:
    """Drag source id of the palette item for *element_type*."""
    return f"{PALETTE_PREFIX}{element_type}"


class DragState:
    """Drag state constants."""
    IDLE = "idle"
    DRAGGING_NEW = "dragging_new"
    DRAGGING_EXISTING = "dragging_existing"


@dataclass(frozen=True)
class ActiveDrag:
    """The one drag in progress.

    Attributes:
        state: DRAGGING_NEW or DRAGGING_EXISTING.
        source_id: Palette item id or element id that was pressed.
        element_type: Type to create (palette drags only).
        subject_id: Element being moved (existing-element drags only).
        origin: Pre-drag position of the subject.
        dx: Cumulative horizontal pointer delta.
        dy: Cumulative vertical pointer delta.
    """
    state: str
    source_id: str
    element_type: Optional[str] = None
    subject_id: Optional[str] = None
    origin: Optional[Position] = None
    dx: float = 0.0
    dy: float = 0.0

    def live_position(self) -> Position:
        """Origin plus cumulative delta, each axis clamped at 0."""
        return self.origin.offset(self.dx, self.dy).clamped()


class DragController:
    """
    Drives element mutations from pointer events.

    Args:
        operations: ElementOperations acting on the active page.
        on_change: Optional callback run after every mutation the
            controller performs (used by the canvas to repaint).
    """

    def __init__(self, operations: ElementOperations, on_change: Optional[Callable[[], None]] = None):
        self.operations = operations
        self.store = operations.store
        self.on_change = on_change
        self._drag: Optional[ActiveDrag] = None

    @property
    def state(self) -> str:
        return self._drag.state if self._drag else DragState.IDLE

    @property
    def active(self) -> Optional[ActiveDrag]:
        return self._drag

    def _changed(self) -> None:
        if self.on_change:
            self.on_change()

    def press(self, source_id: str) -> bool:
        """Begin a drag from a palette item or a placed element.

        Returns:
            True if a drag started; False if one is already in progress or
            *source_id* is neither a palette item nor an element of the
            active page.
        """
        if self._drag is not None:
            log.debug("Ignoring press on %s: drag from %s in progress", source_id, self._drag.source_id)
            return False

        if source_id.startswith(PALETTE_PREFIX):
            element_type = source_id[len(PALETTE_PREFIX):]
            if element_type not in ELEMENT_TYPES:
                log.warning("Unknown palette item %s", source_id)
                return False
            self._drag = ActiveDrag(DragState.DRAGGING_NEW, source_id, element_type=element_type)
            return True

        element = self.store.active_page.find(source_id)
        if element is None:
            log.warning("Press on unknown element %s", source_id)
            return False
        self._drag = ActiveDrag(
            DragState.DRAGGING_EXISTING,
            source_id,
            subject_id=element.id,
            origin=Position(element.position.x, element.position.y),
        )
        return True

    def move(self, dx: float, dy: float) -> Optional[Position]:
        """Record the cumulative pointer delta since the press.

        For an existing-element drag the element is moved live to
        ``origin + delta`` (clamped) and that position is returned.
        """
        if self._drag is None:
            return None
        self._drag = replace(self._drag, dx=float(dx), dy=float(dy))
        if self._drag.state != DragState.DRAGGING_EXISTING:
            return None
        return self._apply_position(self._drag.live_position())

    def release(self, target: Optional[str], point: Optional[Position] = None) -> Optional[Element]:
        """Finish the drag over *target* (``CANVAS_TARGET`` or None).

        Args:
            target: Drop target id; anything but the canvas is "elsewhere".
            point: Drop point in page coordinates (palette drops only).

        Returns:
            The created or moved element, or None when nothing changed.
        """
        drag = self._drag
        if drag is None:
            return None
        self._drag = None
        over_canvas = target == CANVAS_TARGET

        if drag.state == DragState.DRAGGING_NEW:
            if not over_canvas or point is None:
                log.debug("Palette drag of %s dropped outside the canvas", drag.element_type)
                return None
            element = self.operations.create_at_drop(drag.element_type, point.x, point.y)
            self._changed()
            return element

        if not over_canvas:
            self._restore(drag)
            return None
        position = self._apply_position(drag.live_position(), drag.subject_id)
        return self.store.active_page.find(drag.subject_id) if position is not None else None

    def cancel(self) -> None:
        """Abort the drag; an existing element returns exactly to its origin."""
        drag = self._drag
        if drag is None:
            return
        self._drag = None
        if drag.state == DragState.DRAGGING_EXISTING:
            self._restore(drag)

    def _restore(self, drag: ActiveDrag) -> None:
        self._apply_position(drag.origin, drag.subject_id)
        log.debug("Drag of %s cancelled, restored to (%s, %s)",
                  drag.subject_id, drag.origin.x, drag.origin.y)

    def _apply_position(self, position: Position, subject_id: Optional[str] = None) -> Optional[Position]:
        subject_id = subject_id or self._drag.subject_id
        try:
            element = self.operations.update(subject_id, {"position": position})
        except ValidationError as e:
            # The subject vanished mid-drag (deleted or page switched)
            log.warning("Dropping drag of %s: %s", subject_id, e)
            self._drag = None
            return None
        self._changed()
        return element.position
