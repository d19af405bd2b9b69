"""Tests for DocumentStore: pages, active page and selection."""
from __future__ import annotations

import pytest

from document import DocumentStore, ElementOperations
from errors import ValidationError
from models import Element, Page, Position


def _store_with_pages(n: int) -> DocumentStore:
    store = DocumentStore()
    for _ in range(n - 1):
        store.add_page()
    return store


# ─────────────────────────────────────────────────────────
# Pages
# ─────────────────────────────────────────────────────────


class TestPages:
    def test_new_document_has_one_page(self):
        store = DocumentStore()
        assert len(store.pages) == 1
        assert store.active_page.name == "Page 1"
        assert store.active_page.background_color == "#ffffff"
        assert store.active_page.elements == []
        assert store.active_index == 0
        assert store.selected_id is None

    def test_add_page_activates_it(self):
        store = DocumentStore()
        page = store.add_page()
        assert page.name == "Page 2"
        assert store.active_index == 1
        assert store.active_page is page

    def test_add_page_clears_selection(self):
        store = DocumentStore()
        ops = ElementOperations(store)
        ops.create("text", Position(0, 0))
        assert store.selected_id is not None
        store.add_page()
        assert store.selected_id is None

    def test_page_ids_unique(self):
        store = _store_with_pages(4)
        ids = [p.id for p in store.pages]
        assert len(set(ids)) == 4

    def test_cannot_delete_only_page(self):
        store = DocumentStore()
        before = store.pages[0]
        with pytest.raises(ValidationError):
            store.delete_page(0)
        assert store.pages == [before]

    def test_delete_invalid_index(self):
        store = _store_with_pages(2)
        with pytest.raises(ValidationError):
            store.delete_page(5)
        assert len(store.pages) == 2

    def test_delete_before_active_shifts_index(self):
        store = _store_with_pages(3)
        active = store.active_page
        assert store.active_index == 2
        store.delete_page(0)
        assert store.active_index == 1
        assert store.active_page is active

    def test_delete_after_active_keeps_index(self):
        store = _store_with_pages(3)
        store.switch_page(0)
        store.delete_page(2)
        assert store.active_index == 0

    def test_delete_active_page_moves_back(self):
        store = _store_with_pages(3)
        store.switch_page(1)
        store.delete_page(1)
        assert store.active_index == 0

    def test_delete_first_active_page_stays_at_zero(self):
        store = _store_with_pages(2)
        store.switch_page(0)
        second = store.pages[1]
        store.delete_page(0)
        assert store.active_index == 0
        assert store.active_page is second

    def test_switch_page_invalid(self):
        store = DocumentStore()
        with pytest.raises(ValidationError):
            store.switch_page(1)

    def test_switch_page_clears_selection(self):
        store = _store_with_pages(2)
        ops = ElementOperations(store)
        ops.create("button", Position(10, 10))
        store.switch_page(0)
        assert store.selected_id is None

    def test_background_only_on_active_page(self):
        store = _store_with_pages(2)
        store.set_page_background("#000000")
        assert store.pages[1].background_color == "#000000"
        assert store.pages[0].background_color == "#ffffff"

    def test_clear_page(self):
        store = DocumentStore()
        ops = ElementOperations(store)
        ops.create("text", Position(0, 0))
        store.set_page_background("#123456")
        store.clear_page()
        assert store.active_page.elements == []
        assert store.active_page.background_color == "#ffffff"
        assert store.selected_id is None


class TestReplaceDocument:
    def test_replace(self):
        store = DocumentStore()
        pages = [Page("a", "Page 1"), Page("b", "Page 2")]
        store.replace_document(pages)
        assert [p.id for p in store.pages] == ["a", "b"]
        assert store.active_index == 0

    def test_rejects_empty(self):
        store = DocumentStore()
        with pytest.raises(ValidationError):
            store.replace_document([])
        assert len(store.pages) == 1

    def test_rejects_duplicate_element_ids(self):
        store = DocumentStore()
        pages = [
            Page("a", "Page 1", [Element("x", "text")]),
            Page("b", "Page 2", [Element("x", "text")]),
        ]
        with pytest.raises(ValidationError):
            store.replace_document(pages)

    def test_generated_ids_skip_existing(self):
        store = DocumentStore([Page("pg000001", "Page 1", [Element("el000001", "text")])])
        assert store.new_element_id() == "el000002"
        assert store.add_page().id == "pg000002"


# ─────────────────────────────────────────────────────────
# Selection
# ─────────────────────────────────────────────────────────


class TestSelection:
    def test_select_and_clear(self):
        store = DocumentStore()
        ops = ElementOperations(store)
        el = ops.create("text", Position(0, 0))
        store.select(None)
        assert store.selected_element is None
        assert store.select(el.id) is el
        assert store.selected_element is el

    def test_select_unknown(self):
        store = DocumentStore()
        with pytest.raises(ValidationError):
            store.select("nope")

    def test_select_only_active_page(self):
        store = _store_with_pages(2)
        ops = ElementOperations(store)
        el = ops.create("text", Position(0, 0), page_index=0)
        with pytest.raises(ValidationError):
            store.select(el.id)

    def test_selection_dropped_when_element_removed(self):
        store = DocumentStore()
        ops = ElementOperations(store)
        el = ops.create("text", Position(0, 0))
        store.active_page.elements.remove(el)
        assert store.selected_id is None
