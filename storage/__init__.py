"""
storage package

Template persistence: records, storage collaborators, background save.
"""

from storage.templates import (
    ALL_CATEGORIES,
    DocumentPersistence,
    JsonFileStorage,
    TemplateRecord,
    TemplateStorage,
    template_category,
)
from storage.worker import SaveWorker

__all__ = [
    "ALL_CATEGORIES",
    "DocumentPersistence",
    "JsonFileStorage",
    "TemplateRecord",
    "TemplateStorage",
    "SaveWorker",
    "template_category",
]
