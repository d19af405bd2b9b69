"""
codec/parser.py

Parse a markup + stylesheet pair back into pages.

Never raises on malformed input: unknown tags are skipped, missing values
fall back to type defaults, and a page without parseable elements is still
created empty.  Element and page ids are regenerated on every parse.
"""

from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional

from bs4 import BeautifulSoup, Tag
from bs4.builder import ParserRejectedMarkup

from codec.css import parse_declarations, rules_by_selector
from codec.serializer import POSITIONING_KEYS
from models import (
    Element,
    ElementType,
    Page,
    Position,
    Size,
    default_size,
    default_styles,
    resolve_tag_type,
)
from settings import get_settings
from utils import make_id_gen, parse_int, parse_px

log = logging.getLogger(__name__)

_PAGE_CLASS_RE = re.compile(r'^page-(\d+)$')

# Style properties recovered with a type-default fallback
TRACKED_PROPERTIES = (
    "font-size",
    "font-weight",
    "color",
    "background-color",
    "padding",
    "margin",
    "border",
    "border-radius",
    "text-align",
)


def _default_background() -> str:
    """Get fallback page background from settings. Default: "#ffffff"."""
    return get_settings().settings.canvas.page.default_background


def _page_class_of(node: Tag) -> Optional[str]:
    """Return the ``page-N`` class of a page wrapper div, else None."""
    if node.name != "div":
        return None
    for cls in node.get("class") or []:
        if _PAGE_CLASS_RE.match(cls):
            return cls
    return None


def _soup(html: str) -> Optional[BeautifulSoup]:
    try:
        return BeautifulSoup(html or "", "html.parser")
    except ParserRejectedMarkup as e:
        log.warning("Markup rejected by parser, treating as empty: %s", e)
        return None


class _PageBuilder:
    """Collects the elements of one page scope."""

    def __init__(self, rules: Dict[str, Dict[str, str]], new_id):
        self.rules = rules
        self.new_id = new_id
        self.counter = 0
        self.elements: List[Element] = []

    def add_scope(self, scope: Tag) -> None:
        """Add every recognised element under *scope*, in document order."""
        for node in scope.find_all(True):
            if _page_class_of(node):
                continue
            element_type = resolve_tag_type(node.name)
            if element_type is None:
                continue
            self.counter += 1
            self.elements.append(self._build(node, element_type))

    def _rendered(self, node: Tag) -> tuple:
        """Merged declarations (stylesheet rule, then inline) and the rule itself."""
        rule: Dict[str, str] = {}
        dom_id = node.get("id")
        if dom_id:
            rule = self.rules.get(f"#{dom_id}", {})
        merged = dict(rule)
        for name, value in parse_declarations(node.get("style") or "").items():
            merged.pop(name, None)
            merged[name] = value
        return merged, rule

    def _build(self, node: Tag, element_type: str) -> Element:
        decls, rule = self._rendered(node)
        defaults = default_styles(element_type)

        styles = {k: v for k, v in decls.items() if k not in POSITIONING_KEYS}
        for prop in TRACKED_PROPERTIES:
            if prop not in styles and prop in defaults:
                styles[prop] = defaults[prop]

        size = default_size(element_type)
        width = parse_px(decls.get("width"))
        height = parse_px(decls.get("height"))
        x = parse_px(decls.get("left"))
        y = parse_px(decls.get("top"))

        z_index = parse_int(rule.get("z-index"))
        if z_index is None:
            z_index = self.counter

        if element_type == ElementType.IMAGE:
            content = node.get("src") or ""
        else:
            content = node.get_text()

        return Element(
            id=self.new_id(),
            type=element_type,
            content=content,
            styles=styles,
            position=Position(x if x is not None else 0.0, y if y is not None else 0.0),
            size=Size(width if width is not None else size.width,
                      height if height is not None else size.height),
            z_index=z_index,
        )


def parse(html: str, css: str = "") -> List[Page]:
    """Parse markup and stylesheet text into pages.

    ``<style>`` blocks embedded in the markup are read before *css*, so a
    standalone document produced by ``to_standalone_html`` parses as well.

    Args:
        html: Body markup or a full HTML document.
        css: Stylesheet text.

    Returns:
        At least one Page.
    """
    soup = _soup(html)
    new_element_id = make_id_gen("el")
    new_page_id = make_id_gen("pg")

    if soup is None:
        return [Page(new_page_id(), "Page 1", [], _default_background())]

    embedded = "\n".join(s.get_text() for s in soup.find_all("style"))
    rules = rules_by_selector(f"{embedded}\n{css or ''}")

    root = soup.body or soup
    page_nodes = [c for c in root.children if isinstance(c, Tag) and _page_class_of(c)]

    pages: List[Page] = []
    if not page_nodes:
        builder = _PageBuilder(rules, new_element_id)
        builder.add_scope(root)
        background = rules.get("body", {}).get("background-color", _default_background())
        pages.append(Page(new_page_id(), "Page 1", builder.elements, background))
        log.debug("Parsed single implicit page with %d elements", len(builder.elements))
        return pages

    for node in root.children:
        if not isinstance(node, Tag) or _page_class_of(node):
            continue
        dropped = [n for n in [node, *node.find_all(True)] if resolve_tag_type(n.name)]
        if dropped:
            log.debug("Skipping <%s> outside any page wrapper (%d elements)", node.name, len(dropped))

    for number, node in enumerate(page_nodes, start=1):
        builder = _PageBuilder(rules, new_element_id)
        builder.add_scope(node)
        cls = _page_class_of(node)
        background = rules.get(f".{cls}", {}).get("background-color", _default_background())
        pages.append(Page(new_page_id(), f"Page {number}", builder.elements, background))
    log.debug("Parsed %d pages", len(pages))
    return pages
