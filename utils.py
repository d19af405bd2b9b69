"""
utils.py

Utility functions for the PageCanvas document engine.
"""

from __future__ import annotations

import re
from typing import Callable, Container, Optional


def make_id_gen(prefix: str, taken: Optional[Container[str]] = None) -> Callable[[], str]:
    """Return a callable that produces sequential IDs ``<prefix>000001, ...``.

    Args:
        prefix: Text placed before the zero-padded counter.
        taken: Optional container (or live view) of IDs already in use;
            generated IDs skip anything it contains.

    Returns:
        A zero-argument function returning a fresh ID on each call.
    """
    counter = 0

    def _next_id() -> str:
        nonlocal counter
        while True:
            counter += 1
            candidate = f"{prefix}{counter:06d}"
            if taken is None or candidate not in taken:
                return candidate

    return _next_id


def format_number(value: float) -> str:
    """Format a pixel quantity without a trailing ``.0``.

    ``50.0`` → ``"50"``, ``12.5`` → ``"12.5"``.  Values are rounded to
    ``PX_DECIMALS`` places and never written in exponent notation.
    """
    f = round(float(value), PX_DECIMALS) + 0.0
    if f.is_integer():
        return str(int(f))
    return f"{f:.{PX_DECIMALS}f}".rstrip("0").rstrip(".")


# Fractional digits kept in serialized pixel values
PX_DECIMALS = 4

_NUMBER_RE = re.compile(r'^\s*(-?(?:\d+(?:\.\d*)?|\.\d+)(?:e[+-]?\d+)?)\s*(?:px)?\s*$', re.IGNORECASE)


def parse_px(value: Optional[str]) -> Optional[float]:
    """Parse a CSS length like ``"120px"`` or ``"12.5"`` to a float.

    Returns:
        The number, or ``None`` for missing or non-pixel values
        (``"auto"``, ``"50%"``, ``"2em"``).
    """
    if value is None:
        return None
    m = _NUMBER_RE.match(str(value))
    if not m:
        return None
    return float(m.group(1))


def parse_int(value: Optional[str]) -> Optional[int]:
    """Parse an integer CSS value such as ``z-index``; ``None`` if invalid."""
    if value is None:
        return None
    try:
        return int(str(value).strip())
    except ValueError:
        f = parse_px(value)
        return int(f) if f is not None else None
