"""
errors.py

Exception types reported by the canvas document engine.

None of these are fatal: an operation that raises one of them has left the
in-memory document unchanged.
"""

from __future__ import annotations


class CanvasEngineError(Exception):
    """Base class for all engine errors."""


class ValidationError(CanvasEngineError):
    """A requested mutation was rejected (unknown id, last page, bad patch)."""


class PersistenceError(CanvasEngineError):
    """The storage collaborator failed to read or write a template.

    The in-memory document stays authoritative; nothing is rolled back and
    nothing is retried.
    """
