"""
codec/css.py

Declarative CSS helpers shared by the serializer and the parser.

Parses inline style attributes and flat stylesheets into ordered
property → value dicts without any rendering engine.  Later declarations
of the same property win, as in the CSS cascade.
"""

from __future__ import annotations

import re
from typing import Dict, Iterable, List, Tuple

_COMMENT_RE = re.compile(r'/\*.*?\*/', re.DOTALL)
_RULE_RE = re.compile(r'([^{}]+)\{([^{}]*)\}')


def _split_top_level(text: str, sep: str) -> List[str]:
    """Split *text* on *sep* outside quotes and parentheses."""
    parts: List[str] = []
    buf: List[str] = []
    depth = 0
    quote = ""
    for ch in text:
        if quote:
            buf.append(ch)
            if ch == quote:
                quote = ""
            continue
        if ch in ("'", '"'):
            quote = ch
        elif ch == "(":
            depth += 1
        elif ch == ")" and depth > 0:
            depth -= 1
        elif ch == sep and depth == 0:
            parts.append("".join(buf))
            buf = []
            continue
        buf.append(ch)
    parts.append("".join(buf))
    return parts


def parse_declarations(text: str) -> Dict[str, str]:
    """Parse ``"a: 1; b: 2"`` into ``{"a": "1", "b": "2"}``.

    Property names are lower-cased.  Declarations without a colon or with an
    empty name/value are skipped.  ``!important`` is dropped.
    """
    result: Dict[str, str] = {}
    if not text:
        return result
    for chunk in _split_top_level(text, ";"):
        name, colon, value = chunk.partition(":")
        if not colon:
            continue
        name = name.strip().lower()
        value = re.sub(r'\s*!important\s*$', '', value.strip(), flags=re.IGNORECASE)
        if not name or not value:
            continue
        # last declaration wins and moves to the end
        result.pop(name, None)
        result[name] = value
    return result


def parse_stylesheet(css: str) -> List[Tuple[str, Dict[str, str]]]:
    """Parse a flat stylesheet into ``(selector, declarations)`` pairs.

    Comments are removed; grouped selectors (``a, b { }``) yield one pair
    per selector.  At-rule wrappers are not interpreted.
    """
    rules: List[Tuple[str, Dict[str, str]]] = []
    if not css:
        return rules
    text = _COMMENT_RE.sub("", css)
    for m in _RULE_RE.finditer(text):
        decls = parse_declarations(m.group(2))
        for selector in m.group(1).split(","):
            selector = " ".join(selector.split())
            if selector:
                rules.append((selector, dict(decls)))
    return rules


def rules_by_selector(css: str) -> Dict[str, Dict[str, str]]:
    """Index a stylesheet by selector, merging repeated rules (later wins)."""
    index: Dict[str, Dict[str, str]] = {}
    for selector, decls in parse_stylesheet(css):
        merged = index.setdefault(selector, {})
        for name, value in decls.items():
            merged.pop(name, None)
            merged[name] = value
    return index


def format_declarations(items: Iterable[Tuple[str, str]], terminate: bool = False) -> str:
    """Join ``(name, value)`` pairs as ``name:value; name:value``.

    Args:
        items: Declarations in emission order.
        terminate: Append a trailing ``;`` to every declaration
            (stylesheet rule bodies) instead of separating them.
    """
    decls = [f"{name}:{value}" for name, value in items]
    if terminate:
        return " ".join(d + ";" for d in decls)
    return "; ".join(decls)
