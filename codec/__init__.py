"""
codec package

Bidirectional translation between pages and a markup + stylesheet pair.
"""

from codec.serializer import serialize, to_standalone_html
from codec.parser import parse

__all__ = [
    "parse",
    "serialize",
    "to_standalone_html",
]
