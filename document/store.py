"""
document/store.py

Document state container: the ordered pages, the active page index, and the
current selection reference.
"""

from __future__ import annotations

import logging
from typing import Iterator, List, Optional

from errors import ValidationError
from models import Element, Page
from settings import get_settings
from utils import make_id_gen

log = logging.getLogger(__name__)


def _default_background() -> str:
    """Get new-page background color from settings. Default: "#ffffff"."""
    return get_settings().settings.canvas.page.default_background


class _IdView:
    """Live membership view over every id used in a store."""

    def __init__(self, store: "DocumentStore", pages: bool):
        self._store = store
        self._pages = pages

    def __contains__(self, item: object) -> bool:
        if self._pages:
            return any(p.id == item for p in self._store.pages)
        return any(el.id == item for p in self._store.pages for el in p.elements)


class DocumentStore:
    """
    Holds the page list, the active page index and the selection.

    The document always has at least one page.  The selection is a
    non-owning element id resolved against the active page on every read,
    so it is cleared whenever the element goes away or the active page
    changes.
    """

    def __init__(self, pages: Optional[List[Page]] = None):
        self._new_element_id = make_id_gen("el", _IdView(self, pages=False))
        self._new_page_id = make_id_gen("pg", _IdView(self, pages=True))
        self.pages: List[Page] = []
        self._active_index = 0
        self._selected_id: Optional[str] = None
        if pages:
            self.replace_document(pages)
        else:
            self.pages.append(self._make_page(1))

    # ---- ids ----

    def new_element_id(self) -> str:
        """Generate an element id unique within this document."""
        return self._new_element_id()

    def new_page_id(self) -> str:
        """Generate a page id unique within this document."""
        return self._new_page_id()

    def _make_page(self, number: int) -> Page:
        return Page(
            id=self.new_page_id(),
            name=f"Page {number}",
            elements=[],
            background_color=_default_background(),
        )

    # ---- pages ----

    @property
    def active_index(self) -> int:
        return self._active_index

    @property
    def active_page(self) -> Page:
        return self.pages[self._active_index]

    def page_at(self, index: Optional[int] = None) -> Page:
        """Return the page at *index*, or the active page when *index* is None."""
        if index is None:
            return self.active_page
        self._check_index(index)
        return self.pages[index]

    def iter_elements(self) -> Iterator[Element]:
        """Iterate every element of every page, in page then list order."""
        for page in self.pages:
            yield from page.elements

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self.pages):
            raise ValidationError(f"Page index {index} out of range (0..{len(self.pages) - 1})")

    def _set_active(self, index: int) -> None:
        """Make *index* active, dropping the selection if the page changes."""
        before = self.pages[self._active_index] if self._active_index < len(self.pages) else None
        self._active_index = index
        if before is not self.pages[index]:
            self._selected_id = None

    def add_page(self) -> Page:
        """Append an empty page with the default background and activate it."""
        page = self._make_page(len(self.pages) + 1)
        self.pages.append(page)
        self._selected_id = None
        self._active_index = len(self.pages) - 1
        log.debug("Added %s (%s)", page.name, page.id)
        return page

    def delete_page(self, index: int) -> Page:
        """Remove the page at *index*.

        Raises:
            ValidationError: if it is the only page or *index* is invalid.
                The document is left unchanged.
        """
        if len(self.pages) <= 1:
            raise ValidationError("Cannot delete the only page.")
        self._check_index(index)

        active_before = self.active_page
        removed = self.pages.pop(index)
        active = self._active_index
        if active >= index:
            active = max(0, active - 1)
        self._active_index = active
        if removed is active_before or self.active_page is not active_before:
            self._selected_id = None
        log.debug("Deleted %s (%s)", removed.name, removed.id)
        return removed

    def switch_page(self, index: int) -> Page:
        """Activate the page at *index*; clears the selection if the page changes."""
        self._check_index(index)
        self._set_active(index)
        return self.active_page

    def set_page_background(self, color: str) -> None:
        """Set the background color of the active page only."""
        self.active_page.background_color = color

    def clear_page(self) -> None:
        """Remove every element from the active page and reset its background."""
        page = self.active_page
        page.elements.clear()
        page.background_color = _default_background()
        self._selected_id = None

    def replace_document(self, pages: List[Page]) -> None:
        """Install *pages* as the whole document (used after parsing).

        Raises:
            ValidationError: if *pages* is empty or reuses an element id.
        """
        if not pages:
            raise ValidationError("A document needs at least one page.")
        seen = set()
        for page in pages:
            for el in page.elements:
                if el.id in seen:
                    raise ValidationError(f"Duplicate element id {el.id!r}")
                seen.add(el.id)
        self.pages = list(pages)
        self._active_index = 0
        self._selected_id = None

    # ---- selection ----

    @property
    def selected_id(self) -> Optional[str]:
        if self._selected_id is not None and self.active_page.find(self._selected_id) is None:
            self._selected_id = None
        return self._selected_id

    @property
    def selected_element(self) -> Optional[Element]:
        sid = self.selected_id
        return self.active_page.find(sid) if sid is not None else None

    def select(self, element_id: Optional[str]) -> Optional[Element]:
        """Select an element of the active page, or clear with ``None``.

        Raises:
            ValidationError: if *element_id* is not on the active page.
        """
        if element_id is None:
            self._selected_id = None
            return None
        element = self.active_page.find(element_id)
        if element is None:
            raise ValidationError(f"No element {element_id!r} on the active page")
        self._selected_id = element_id
        return element

    def forget_selection_of(self, element_id: str) -> None:
        """Clear the selection if it refers to *element_id*."""
        if self._selected_id == element_id:
            self._selected_id = None
