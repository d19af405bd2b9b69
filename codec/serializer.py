"""
codec/serializer.py

Serialize pages into a standalone markup + stylesheet pair.

Output is a pure function of page order, element list order and field
values.  Each page becomes a ``<div class="page-N">`` wrapper; each element
becomes its type's tag carrying an inline style.  The stylesheet repeats
every element's styles and geometry under ``#element-<id>`` because the
read-only preview path only consumes the stylesheet.
"""

from __future__ import annotations

import html as _html
from typing import List, Sequence, Tuple

from codec.css import format_declarations
from models import Element, ElementType, Page, TYPE_TAG_MAP
from settings import get_settings
from utils import format_number

PAGE_CLASS_PREFIX = "page-"
ELEMENT_ID_PREFIX = "element-"

# Declarations generated from geometry; they always follow the style mapping
POSITIONING_KEYS = ("position", "left", "top", "width", "height", "z-index")


def _get_page_min_height() -> int:
    """Get page min-height from settings. Default: 800."""
    return get_settings().settings.canvas.page.min_height


def page_class(page_number: int) -> str:
    """Wrapper class for the 1-based *page_number* (``page-1``)."""
    return f"{PAGE_CLASS_PREFIX}{page_number}"


def element_dom_id(element: Element) -> str:
    return f"{ELEMENT_ID_PREFIX}{element.id}"


def positioning_declarations(element: Element) -> List[Tuple[str, str]]:
    """Absolute-positioning declarations for *element*."""
    return [
        ("position", "absolute"),
        ("left", f"{format_number(element.position.x)}px"),
        ("top", f"{format_number(element.position.y)}px"),
        ("width", f"{format_number(element.size.width)}px"),
        ("height", f"{format_number(element.size.height)}px"),
        ("z-index", str(int(element.z_index))),
    ]


def element_declarations(element: Element) -> List[Tuple[str, str]]:
    """Style mapping followed by positioning (positioning wins on clashes)."""
    return list(element.styles.items()) + positioning_declarations(element)


def inline_style(element: Element) -> str:
    return format_declarations(element_declarations(element))


def element_markup(element: Element) -> str:
    """Markup for one element."""
    tag = TYPE_TAG_MAP.get(element.type, "div")
    attrs = (
        f'id="{_html.escape(element_dom_id(element))}" '
        f'style="{_html.escape(inline_style(element))}"'
    )
    if element.type == ElementType.IMAGE:
        return f'<img src="{_html.escape(element.content)}" {attrs} alt="Canvas image" />'
    return f"<{tag} {attrs}>{_html.escape(element.content, quote=False)}</{tag}>"


def page_markup(page: Page, page_number: int) -> str:
    """Wrapper markup for one page with its elements in list order."""
    cls = page_class(page_number)
    if not page.elements:
        return f'<div class="{cls}"></div>'
    lines = [f'<div class="{cls}">']
    lines.extend(f"  {element_markup(el)}" for el in page.elements)
    lines.append("</div>")
    return "\n".join(lines)


def page_rules(page: Page, page_number: int) -> List[str]:
    """Stylesheet rules for one page: the wrapper, then each element."""
    page_decls = [
        ("background-color", page.background_color),
        ("min-height", f"{_get_page_min_height()}px"),
        ("position", "relative"),
    ]
    rules = [f".{page_class(page_number)} {{ {format_declarations(page_decls, terminate=True)} }}"]
    for el in page.elements:
        body = format_declarations(element_declarations(el), terminate=True)
        rules.append(f"#{element_dom_id(el)} {{ {body} }}")
    return rules


def serialize(pages: Sequence[Page]) -> Tuple[str, str]:
    """Serialize *pages* into ``(html, css)``.

    Args:
        pages: Pages in document order.

    Returns:
        Tuple of the body markup and the stylesheet text.
    """
    markup: List[str] = []
    rules: List[str] = []
    for number, page in enumerate(pages, start=1):
        markup.append(page_markup(page, number))
        rules.extend(page_rules(page, number))
    return "\n".join(markup), "\n".join(rules)


def to_standalone_html(html: str, css: str, title: str = "Template") -> str:
    """Wrap a markup/stylesheet pair into a complete HTML document."""
    return (
        "<!DOCTYPE html>\n"
        "<html>\n"
        "<head>\n"
        '<meta charset="utf-8">\n'
        f"<title>{_html.escape(title)}</title>\n"
        f"<style>\n{css}\n</style>\n"
        "</head>\n"
        f"<body>\n{html}\n</body>\n"
        "</html>\n"
    )
