"""Tests for codec/parser.py: markup + stylesheet back into pages.

The round-trip cases build documents through ElementOperations, serialize
them and check that parsing yields an equivalent document with fresh ids.
"""
from __future__ import annotations

import logging

import pytest

from codec import parse, serialize, to_standalone_html
from document import DocumentStore, ElementOperations
from models import Position


def _comparable(pages):
    """Document shape without ids."""
    return [
        (
            p.name,
            p.background_color,
            [(e.type, e.content, e.styles, e.position, e.size, e.z_index) for e in p.elements],
        )
        for p in pages
    ]


@pytest.fixture()
def document():
    store = DocumentStore()
    ops = ElementOperations(store)
    ops.create("heading", Position(50, 20))
    btn = ops.create("button", Position(12.5, 300))
    ops.update(btn.id, {"content": "Buy <now> & save"})
    ops.create("image", Position(400, 100))
    ops.bring_to_front(btn.id)
    store.set_page_background("#fafafa")
    store.add_page()
    ops.create("container", Position(0, 0))
    text = ops.create("text", Position(40, 40))
    ops.send_to_back(text.id)
    store.add_page()
    return store


# ─────────────────────────────────────────────────────────
# Round trip
# ─────────────────────────────────────────────────────────


class TestRoundTrip:
    def test_equivalent_document(self, document):
        html, css = serialize(document.pages)
        parsed = parse(html, css)
        assert _comparable(parsed) == _comparable(document.pages)

    def test_ids_regenerated_and_unique(self, document):
        html, css = serialize(document.pages)
        parsed = parse(html, css)
        ids = [e.id for p in parsed for e in p.elements]
        assert len(ids) == len(set(ids)) == 5
        assert len({p.id for p in parsed}) == 3

    def test_reserialize_is_stable(self, document):
        html, css = serialize(document.pages)
        first = parse(html, css)
        again = parse(*serialize(first))
        assert _comparable(again) == _comparable(first)

    def test_empty_trailing_page_kept(self, document):
        parsed = parse(*serialize(document.pages))
        assert parsed[2].elements == []
        assert parsed[2].name == "Page 3"

    def test_standalone_document(self, document):
        html, css = serialize(document.pages)
        parsed = parse(to_standalone_html(html, css))
        assert _comparable(parsed) == _comparable(document.pages)

    def test_image_content_from_src(self, document):
        parsed = parse(*serialize(document.pages))
        image = [e for e in parsed[0].elements if e.type == "image"][0]
        assert image.content == "/placeholder.svg?height=200&width=300"


# ─────────────────────────────────────────────────────────
# Foreign and malformed input
# ─────────────────────────────────────────────────────────


class TestForeignMarkup:
    def test_empty_input(self):
        pages = parse("", "")
        assert len(pages) == 1
        assert pages[0].name == "Page 1"
        assert pages[0].elements == []
        assert pages[0].background_color == "#ffffff"

    def test_implicit_page(self):
        pages = parse("<h2>Title</h2><span>Body</span>", "body { background-color: #000000; }")
        assert len(pages) == 1
        assert pages[0].background_color == "#000000"
        types = [e.type for e in pages[0].elements]
        assert types == ["heading", "text"]
        assert [e.z_index for e in pages[0].elements] == [1, 2]

    def test_missing_values_fall_back(self):
        pages = parse('<div class="page-1"><h2 style="left:abc; top:20px">Hi</h2></div>', "")
        el = pages[0].elements[0]
        assert el.type == "heading"
        assert el.content == "Hi"
        assert (el.position.x, el.position.y) == (0, 20)
        assert (el.size.width, el.size.height) == (300, 50)
        assert el.styles["font-size"] == "32px"

    def test_unknown_tags_skipped(self):
        pages = parse('<div class="page-1"><marquee>x</marquee><p>kept</p></div>', "")
        assert [e.content for e in pages[0].elements] == ["kept"]

    def test_unparseable_css_ignored(self):
        pages = parse('<div class="page-1"><p>x</p></div>', "garbage {{{")
        assert len(pages[0].elements) == 1

    def test_unclosed_tags(self):
        pages = parse('<div class="page-1"><p>one<button>two', "")
        assert [e.type for e in pages[0].elements] == ["text", "button"]

    def test_z_index_from_rule(self):
        pages = parse('<p id="a">x</p>', "#a { z-index: 9; }")
        assert pages[0].elements[0].z_index == 9

    def test_z_index_defaults_to_document_order(self):
        pages = parse('<p>a</p><p style="z-index:7">b</p>', "")
        assert [e.z_index for e in pages[0].elements] == [1, 2]

    def test_rule_and_inline_merge(self):
        pages = parse('<p id="a" style="left:30px">x</p>', "#a { left: 5px; top: 6px; color: red; }")
        el = pages[0].elements[0]
        assert (el.position.x, el.position.y) == (30, 6)
        assert el.styles["color"] == "red"

    def test_tracked_style_defaults_restored(self):
        pages = parse('<button style="color:black">Go</button>', "")
        styles = pages[0].elements[0].styles
        assert styles["color"] == "black"
        assert styles["background-color"] == "#3b82f6"
        assert styles["border-radius"] == "6px"

    def test_negative_geometry_clamped(self):
        pages = parse('<p style="left:-40px; top:10px; width:2px">x</p>', "")
        el = pages[0].elements[0]
        assert el.position.x == 0
        assert el.size.width == 10

    def test_page_backgrounds(self):
        html = '<div class="page-1"></div><div class="page-2"></div>'
        css = ".page-2 { background-color: #112233; }"
        pages = parse(html, css)
        assert [p.background_color for p in pages] == ["#ffffff", "#112233"]
        assert [p.name for p in pages] == ["Page 1", "Page 2"]

    def test_content_outside_page_wrappers_skipped(self, caplog):
        html = '<h1>stray</h1><div class="page-1"><p>kept</p></div><section><button>x</button></section>'
        with caplog.at_level(logging.DEBUG, logger="codec.parser"):
            pages = parse(html, "")
        assert [e.content for e in pages[0].elements] == ["kept"]
        skipped = [r.getMessage() for r in caplog.records if "outside any page wrapper" in r.getMessage()]
        assert skipped == [
            "Skipping <h1> outside any page wrapper (1 elements)",
            "Skipping <section> outside any page wrapper (1 elements)",
        ]
