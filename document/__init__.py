"""
document package

In-memory page/element document: store, element operations, selection bridge.
"""

from document.store import DocumentStore
from document.operations import ElementOperations, drop_position
from document.selection import SelectionBridge

__all__ = [
    "DocumentStore",
    "ElementOperations",
    "SelectionBridge",
    "drop_position",
]
