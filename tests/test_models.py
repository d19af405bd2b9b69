"""Tests for the element/page data model and default tables in models.py."""
from __future__ import annotations

import pytest

from models import (
    ELEMENT_TYPES,
    Element,
    ElementType,
    Page,
    Position,
    Size,
    TAG_TYPE_MAP,
    TYPE_TAG_MAP,
    default_content,
    default_size,
    default_styles,
    paint_order,
    resolve_tag_type,
)


# ─────────────────────────────────────────────────────────
# Default tables
# ─────────────────────────────────────────────────────────


class TestDefaults:
    @pytest.mark.parametrize("element_type,size", [
        ("heading", (300, 50)),
        ("text", (400, 100)),
        ("button", (120, 44)),
        ("image", (300, 200)),
        ("container", (400, 200)),
    ])
    def test_default_sizes(self, element_type, size):
        s = default_size(element_type)
        assert (s.width, s.height) == size

    def test_unknown_type_size(self):
        s = default_size("video")
        assert (s.width, s.height) == (200, 100)

    def test_default_content(self):
        assert default_content(ElementType.HEADING) == "Your Heading Here"
        assert default_content(ElementType.BUTTON) == "Click Me"
        assert default_content(ElementType.IMAGE) == "/placeholder.svg?height=200&width=300"
        assert default_content(ElementType.CONTAINER) == ""

    def test_button_styles(self):
        styles = default_styles(ElementType.BUTTON)
        assert styles["background-color"] == "#3b82f6"
        assert styles["color"] == "white"
        assert styles["border-radius"] == "6px"
        assert styles["padding"] == "12px 24px"

    def test_container_styles(self):
        styles = default_styles(ElementType.CONTAINER)
        assert styles["border"] == "2px dashed #d1d5db"
        assert styles["background-color"] == "#f9fafb"

    def test_default_styles_are_copies(self):
        styles = default_styles(ElementType.HEADING)
        styles["color"] = "red"
        assert default_styles(ElementType.HEADING)["color"] == "#1f2937"

    def test_every_type_has_defaults(self):
        for t in ELEMENT_TYPES:
            assert default_styles(t)
            assert t in TYPE_TAG_MAP


# ─────────────────────────────────────────────────────────
# Tag mapping
# ─────────────────────────────────────────────────────────


class TestResolveTagType:
    @pytest.mark.parametrize("tag", ["h1", "h2", "h3", "h4", "h5", "h6", "H2"])
    def test_headings(self, tag):
        assert resolve_tag_type(tag) == ElementType.HEADING

    def test_text_tags(self):
        assert resolve_tag_type("p") == ElementType.TEXT
        assert resolve_tag_type("span") == ElementType.TEXT

    def test_other_tags(self):
        assert resolve_tag_type("button") == ElementType.BUTTON
        assert resolve_tag_type("img") == ElementType.IMAGE
        assert resolve_tag_type("div") == ElementType.CONTAINER

    def test_unknown_returns_none(self):
        assert resolve_tag_type("section") is None

    def test_unknown_returns_fallback(self):
        assert resolve_tag_type("section", "text") == "text"

    def test_serializer_tags_parse_back(self):
        for element_type, tag in TYPE_TAG_MAP.items():
            assert TAG_TYPE_MAP[tag] == element_type


# ─────────────────────────────────────────────────────────
# Geometry and elements
# ─────────────────────────────────────────────────────────


class TestElement:
    def test_position_clamped(self):
        el = Element("a", "text", position=Position(-5, 3))
        assert (el.position.x, el.position.y) == (0, 3)

    def test_size_clamped_to_minimum(self):
        el = Element("a", "text", size=Size(2, 50))
        assert (el.size.width, el.size.height) == (10, 50)

    def test_clone_is_deep(self):
        el = Element("a", "button", "Go", {"color": "red"}, Position(1, 2), Size(30, 40), 3)
        dup = el.clone("b")
        dup.styles["color"] = "blue"
        dup.position.x = 99
        assert dup.id == "b"
        assert el.styles["color"] == "red"
        assert el.position.x == 1
        assert dup.z_index == 3

    def test_to_dict_shape(self):
        el = Element("a", "button", "Go", {"color": "red"}, Position(1, 2), Size(30, 40), 3)
        assert el.to_dict() == {
            "id": "a",
            "type": "button",
            "content": "Go",
            "styles": {"color": "red"},
            "position": {"x": 1, "y": 2},
            "size": {"width": 30, "height": 40},
            "zIndex": 3,
        }

    def test_from_dict_roundtrip(self):
        el = Element("a", "image", "pic.png", {"margin": "0"}, Position(5, 6), Size(70, 80), -2)
        assert Element.from_dict(el.to_dict()) == el

    def test_from_dict_fills_defaults(self):
        el = Element.from_dict({"id": "x", "type": "button"})
        assert el.content == "Click Me"
        assert (el.size.width, el.size.height) == (120, 44)
        assert el.z_index == 1


class TestPage:
    def test_next_z_empty_page(self):
        assert Page("p", "Page 1").next_z() == 1

    def test_z_bounds(self):
        page = Page("p", "Page 1", [
            Element("a", "text", z_index=3),
            Element("b", "text", z_index=-1),
        ])
        assert page.max_z() == 3
        assert page.min_z() == -1
        assert page.next_z() == 4

    def test_find_and_index_of(self):
        page = Page("p", "Page 1", [Element("a", "text"), Element("b", "text")])
        assert page.find("b").id == "b"
        assert page.find("zzz") is None
        assert page.index_of("b") == 1
        assert page.index_of("zzz") == -1


class TestPaintOrder:
    def test_sorted_by_z(self):
        els = [Element("a", "text", z_index=3), Element("b", "text", z_index=1), Element("c", "text", z_index=2)]
        assert [e.id for e in paint_order(els)] == ["b", "c", "a"]

    def test_ties_keep_list_order(self):
        els = [Element("a", "text", z_index=2), Element("b", "text", z_index=1), Element("c", "text", z_index=2)]
        assert [e.id for e in paint_order(els)] == ["b", "a", "c"]

    def test_list_is_not_modified(self):
        els = [Element("a", "text", z_index=2), Element("b", "text", z_index=1)]
        paint_order(els)
        assert [e.id for e in els] == ["a", "b"]
