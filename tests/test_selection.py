"""Tests for SelectionBridge: the boundary between the selection and editing widgets."""
from __future__ import annotations

import pytest

from document import DocumentStore, ElementOperations, SelectionBridge
from errors import ValidationError
from models import Position


@pytest.fixture()
def bridge():
    return SelectionBridge(ElementOperations(DocumentStore()))


class TestSelectionBridge:
    def test_no_selection(self, bridge):
        assert bridge.current() is None
        with pytest.raises(ValidationError):
            bridge.set_content("x")

    def test_current_is_boundary_dict(self, bridge):
        el = bridge.operations.create("button", Position(5, 6))
        data = bridge.current()
        assert data["id"] == el.id
        assert data["type"] == "button"
        assert data["position"] == {"x": 5, "y": 6}
        assert data["zIndex"] == 1

    def test_current_is_a_copy(self, bridge):
        el = bridge.operations.create("button", Position(5, 6))
        bridge.current()["styles"]["color"] = "black"
        assert el.styles["color"] == "white"

    def test_set_content(self, bridge):
        bridge.operations.create("heading", Position(0, 0))
        data = bridge.set_content("Welcome")
        assert data["content"] == "Welcome"

    def test_set_style_appends(self, bridge):
        el = bridge.operations.create("text", Position(0, 0))
        bridge.set_style("text-align", "center")
        assert list(el.styles)[-1] == "text-align"
        bridge.set_style("color", "red")
        assert el.styles["color"] == "red"
        assert list(el.styles)[-1] == "text-align"

    def test_remove_style(self, bridge):
        el = bridge.operations.create("text", Position(0, 0))
        bridge.remove_style("color")
        bridge.remove_style("not-there")
        assert "color" not in el.styles

    def test_set_position_clamps(self, bridge):
        bridge.operations.create("text", Position(10, 10))
        data = bridge.set_position("x", -40)
        assert data["position"] == {"x": 0, "y": 10}

    def test_set_position_bad_axis(self, bridge):
        bridge.operations.create("text", Position(10, 10))
        with pytest.raises(ValidationError):
            bridge.set_position("z", 1)

    def test_set_size_clamps(self, bridge):
        bridge.operations.create("text", Position(0, 0))
        data = bridge.set_size("width", 3)
        assert data["size"]["width"] == 10

    def test_image_height_not_editable(self, bridge):
        el = bridge.operations.create("image", Position(0, 0))
        with pytest.raises(ValidationError):
            bridge.set_size("height", 50)
        assert el.size.height == 200
        bridge.set_size("width", 150)
        assert el.size.width == 150

    def test_delete(self, bridge):
        bridge.operations.create("text", Position(0, 0))
        bridge.delete()
        assert bridge.current() is None
        assert bridge.store.active_page.elements == []

    def test_duplicate_selects_copy(self, bridge):
        el = bridge.operations.create("text", Position(0, 0))
        data = bridge.duplicate()
        assert data["id"] != el.id
        assert bridge.current()["id"] == data["id"]
