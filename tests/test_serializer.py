"""Tests for codec/serializer.py: pages to markup + stylesheet."""
from __future__ import annotations

from codec import parse, serialize, to_standalone_html
from codec.serializer import element_markup, inline_style
from document import DocumentStore, ElementOperations
from models import Element, Page, Position, Size, default_styles
from utils import format_number, parse_px


def _button(**kw) -> Element:
    fields = dict(
        id="el1",
        type="button",
        content="Click Me",
        styles=default_styles("button"),
        position=Position(50, 75),
        size=Size(120, 44),
        z_index=1,
    )
    fields.update(kw)
    return Element(**fields)


# ─────────────────────────────────────────────────────────
# Page wrappers
# ─────────────────────────────────────────────────────────


class TestPages:
    def test_empty_page(self):
        html, css = serialize([Page("pg1", "Page 1", [], "#ffffff")])
        assert html == '<div class="page-1"></div>'
        assert css == ".page-1 { background-color:#ffffff; min-height:800px; position:relative; }"

    def test_fresh_store_serializes_one_empty_page(self):
        html, css = serialize(DocumentStore().pages)
        assert html == '<div class="page-1"></div>'
        assert "background-color:#ffffff" in css
        assert "min-height:800px" in css

    def test_page_numbering(self):
        pages = [Page("a", "Intro", [], "#ffffff"), Page("b", "Outro", [], "#000000")]
        html, css = serialize(pages)
        assert html == '<div class="page-1"></div>\n<div class="page-2"></div>'
        assert ".page-2 { background-color:#000000;" in css

    def test_page_with_elements(self):
        html, _ = serialize([Page("p", "Page 1", [_button()], "#ffffff")])
        lines = html.split("\n")
        assert lines[0] == '<div class="page-1">'
        assert lines[1].startswith('  <button id="element-el1" style="')
        assert lines[-1] == "</div>"


# ─────────────────────────────────────────────────────────
# Elements
# ─────────────────────────────────────────────────────────


class TestElements:
    def test_inline_style_order(self):
        style = inline_style(_button())
        assert style.startswith("background-color:#3b82f6; color:white; border:none;")
        assert style.endswith(
            "position:absolute; left:50px; top:75px; width:120px; height:44px; z-index:1")

    def test_button_markup(self):
        markup = element_markup(_button())
        assert markup.startswith('<button id="element-el1" style="background-color:#3b82f6;')
        assert markup.endswith(">Click Me</button>")

    def test_heading_tag(self):
        el = Element("h", "heading", "Title", default_styles("heading"), Position(0, 0), Size(300, 50))
        assert element_markup(el).startswith("<h1 ")
        assert element_markup(el).endswith(">Title</h1>")

    def test_text_and_container_tags(self):
        assert element_markup(Element("t", "text", "x")).startswith("<p ")
        assert element_markup(Element("c", "container", "")).endswith("></div>")

    def test_image_markup(self):
        el = Element("im", "image", "/placeholder.svg?height=200&width=300",
                     default_styles("image"), Position(0, 0), Size(300, 200))
        markup = element_markup(el)
        assert markup.startswith('<img src="/placeholder.svg?height=200&amp;width=300" id="element-im"')
        assert markup.endswith(' alt="Canvas image" />')

    def test_content_escaped(self):
        markup = element_markup(_button(content="<b>Tom & Jerry</b>"))
        assert "&lt;b&gt;Tom &amp; Jerry&lt;/b&gt;" in markup

    def test_fractional_geometry(self):
        style = inline_style(_button(position=Position(12.5, 0)))
        assert "left:12.5px" in style

    def test_positioning_follows_styles(self):
        el = _button(styles={"position": "static", "color": "red"})
        style = inline_style(el)
        assert style.index("position:static") < style.index("position:absolute")


# ─────────────────────────────────────────────────────────
# Stylesheet
# ─────────────────────────────────────────────────────────


class TestStylesheet:
    def test_element_rule(self):
        _, css = serialize([Page("p", "Page 1", [_button()], "#ffffff")])
        rules = css.split("\n")
        assert len(rules) == 2
        assert rules[1].startswith("#element-el1 { background-color:#3b82f6; color:white;")
        assert rules[1].endswith("height:44px; z-index:1; }")

    def test_list_order_not_paint_order(self):
        a = _button(id="a", z_index=5)
        b = _button(id="b", z_index=1)
        html, css = serialize([Page("p", "Page 1", [a, b], "#ffffff")])
        assert html.index("element-a") < html.index("element-b")
        assert css.index("#element-a") < css.index("#element-b")

    def test_deterministic(self):
        store = DocumentStore()
        ops = ElementOperations(store)
        ops.create("heading", Position(10, 10))
        ops.create("image", Position(40, 80))
        store.add_page()
        ops.create("container", Position(0, 0))
        assert serialize(store.pages) == serialize(store.pages)


class TestStandalone:
    def test_wraps_html_and_css(self):
        doc = to_standalone_html('<div class="page-1"></div>', ".page-1 { }", title="Landing & Co")
        assert doc.startswith("<!DOCTYPE html>")
        assert "<title>Landing &amp; Co</title>" in doc
        assert "<style>\n.page-1 { }\n</style>" in doc
        assert '<body>\n<div class="page-1"></div>\n</body>' in doc


# ─────────────────────────────────────────────────────────
# Pixel numbers
# ─────────────────────────────────────────────────────────


class TestPixelNumbers:
    def test_format(self):
        assert format_number(50.0) == "50"
        assert format_number(12.5) == "12.5"
        assert format_number(1 / 3) == "0.3333"
        assert format_number(1.7763568394002505e-15) == "0"
        assert format_number(-1e-9) == "0"

    def test_tiny_offset_survives_round_trip(self):
        el = _button(position=Position(1.7763568394002505e-15, 100.00000001))
        assert "left:0px; top:100px;" in inline_style(el)
        pages = parse(*serialize([Page("pg1", "Page 1", [el], "#ffffff")]))
        parsed = pages[0].elements[0]
        assert (parsed.position.x, parsed.position.y) == (0, 100)

    def test_exponent_lengths_parse(self):
        assert parse_px("1.5e2px") == 150
        assert parse_px("2E-1") == 0.2
        assert parse_px("12.") == 12
        assert parse_px("2em") is None
