"""
storage/templates.py

Template records and the storage collaborator that persists them.

A template is the serialized form of a whole document (markup plus
stylesheet) with a name and bookkeeping fields.  ``DocumentPersistence`` is
the only place the in-memory pages cross this boundary; it serializes on
save and parses on load.
"""

from __future__ import annotations

import json
import logging
import os
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from codec import parse, serialize
from errors import PersistenceError, ValidationError
from models import Page
from settings import get_settings

log = logging.getLogger(__name__)

TEMPLATE_SUFFIX = ".json"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class TemplateRecord:
    """A stored template.

    Attributes:
        id: Storage-assigned identifier.
        name: Display name (required, stripped).
        html: Body markup (required).
        css: Stylesheet text.
        description: Free-form description.
        category: Grouping label shown in template lists.
        thumbnail: Optional preview image reference.
        created_at: ISO-8601 creation timestamp (UTC).
        updated_at: ISO-8601 timestamp of the last write (UTC).
    """
    id: str
    name: str
    html: str
    css: str = ""
    description: str = ""
    category: str = ""
    thumbnail: str = ""
    created_at: str = field(default_factory=_now)
    updated_at: str = field(default_factory=_now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "html": self.html,
            "css": self.css,
            "description": self.description,
            "category": self.category,
            "thumbnail": self.thumbnail,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "TemplateRecord":
        return cls(
            id=str(d["id"]),
            name=str(d.get("name", "")),
            html=str(d.get("html", "")),
            css=str(d.get("css", "")),
            description=str(d.get("description", "")),
            category=str(d.get("category", "")),
            thumbnail=str(d.get("thumbnail", "")),
            created_at=str(d.get("created_at", "")),
            updated_at=str(d.get("updated_at", "")),
        )


# Category filter value matching every template
ALL_CATEGORIES = "All"


def template_category(record: TemplateRecord) -> str:
    """Category a template is listed under.

    The stored category when set, otherwise the first word of the name.
    """
    if record.category.strip():
        return record.category.strip()
    words = record.name.split()
    return words[0] if words else ""


def validate_template_fields(name: Optional[str], html: Optional[str]) -> str:
    """Check the required fields and return the stripped name.

    Raises:
        ValidationError: if the name or the markup is missing.
    """
    name = (name or "").strip()
    if not name or not html:
        raise ValidationError("Both 'name' and 'html' fields are required.")
    return name


# ----------------------------
# Storage collaborators
# ----------------------------

class TemplateStorage(ABC):
    """Create / read / update / delete access to template records.

    Implementations raise ``PersistenceError`` for missing records and I/O
    failures and ``ValidationError`` for missing required fields.
    """

    @abstractmethod
    def create(self, name: str, html: str, css: str = "", **extra: str) -> TemplateRecord:
        ...

    @abstractmethod
    def update(self, template_id: str, name: str, html: str, css: str = "", **extra: str) -> TemplateRecord:
        ...

    @abstractmethod
    def get(self, template_id: str) -> TemplateRecord:
        ...

    @abstractmethod
    def list(self) -> List[TemplateRecord]:
        """All records, newest first."""

    @abstractmethod
    def delete(self, template_id: str) -> TemplateRecord:
        ...


_EXTRA_FIELDS = ("description", "category", "thumbnail")


class JsonFileStorage(TemplateStorage):
    """
    Stores each template as ``<id>.json`` in a directory.

    Args:
        directory: Target directory; defaults to the workspace directory
            from settings.  Created on first write.
    """

    def __init__(self, directory: Optional[Path] = None):
        if directory is None:
            directory = get_settings().get_workspace_dir() / "templates"
        self.directory = Path(directory)

    def _path(self, template_id: str) -> Path:
        if not template_id or Path(template_id).name != template_id:
            raise PersistenceError(f"Invalid template id {template_id!r}")
        return self.directory / f"{template_id}{TEMPLATE_SUFFIX}"

    def _read(self, path: Path) -> TemplateRecord:
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return TemplateRecord.from_dict(data)
        except (OSError, ValueError, KeyError, TypeError) as e:
            raise PersistenceError(f"Could not read template {path.name}: {e}") from e

    def _write(self, record: TemplateRecord) -> None:
        path = self._path(record.id)
        tmp = path.with_suffix(".tmp")
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            with open(tmp, "w", encoding="utf-8") as f:
                json.dump(record.to_dict(), f, indent=2)
            os.replace(tmp, path)
        except OSError as e:
            raise PersistenceError(f"Could not write template {record.id}: {e}") from e

    def create(self, name: str, html: str, css: str = "", **extra: str) -> TemplateRecord:
        name = validate_template_fields(name, html)
        record = TemplateRecord(id=uuid.uuid4().hex, name=name, html=html, css=css or "")
        for key in _EXTRA_FIELDS:
            if key in extra:
                setattr(record, key, str(extra[key] or ""))
        self._write(record)
        log.info("Created template %s (%s)", record.name, record.id)
        return record

    def update(self, template_id: str, name: str, html: str, css: str = "", **extra: str) -> TemplateRecord:
        name = validate_template_fields(name, html)
        record = self.get(template_id)
        record.name = name
        record.html = html
        record.css = css or ""
        for key in _EXTRA_FIELDS:
            if key in extra:
                setattr(record, key, str(extra[key] or ""))
        record.updated_at = _now()
        self._write(record)
        log.info("Updated template %s (%s)", record.name, record.id)
        return record

    def get(self, template_id: str) -> TemplateRecord:
        path = self._path(template_id)
        if not path.exists():
            raise PersistenceError(f"Template {template_id!r} not found")
        return self._read(path)

    def list(self) -> List[TemplateRecord]:
        if not self.directory.exists():
            return []
        records = [self._read(p) for p in self.directory.glob(f"*{TEMPLATE_SUFFIX}")]
        records.sort(key=lambda r: r.created_at, reverse=True)
        return records

    def delete(self, template_id: str) -> TemplateRecord:
        record = self.get(template_id)
        try:
            self._path(template_id).unlink()
        except OSError as e:
            raise PersistenceError(f"Could not delete template {template_id}: {e}") from e
        log.info("Deleted template %s (%s)", record.name, record.id)
        return record


# ----------------------------
# Document <-> storage
# ----------------------------

class DocumentPersistence:
    """
    Saves and loads whole documents through a TemplateStorage.

    A failed write is reported once as ``PersistenceError``; the pages
    passed in are never modified and nothing is retried.
    """

    def __init__(self, storage: TemplateStorage):
        self.storage = storage

    def save(self, pages: Sequence[Page], name: str, template_id: Optional[str] = None,
             **extra: str) -> TemplateRecord:
        """Serialize *pages* and create a template, or update *template_id*.

        Raises:
            ValidationError: if *name* is empty.
            PersistenceError: if the storage write fails.
        """
        if not (name or "").strip():
            raise ValidationError("A template name is required.")
        html, css = serialize(pages)
        try:
            if template_id:
                return self.storage.update(template_id, name, html, css, **extra)
            return self.storage.create(name, html, css, **extra)
        except PersistenceError as e:
            log.error("Saving %r failed: %s", name, e)
            raise
        except (OSError, ValueError, TypeError) as e:
            log.error("Saving %r failed: %s", name, e)
            raise PersistenceError(f"Saving {name!r} failed: {e}") from e

    def load(self, identifier: str) -> Tuple[List[Page], TemplateRecord]:
        """Fetch a template by id and parse it into fresh pages.

        Raises:
            PersistenceError: if the template cannot be read.
        """
        try:
            record = self.storage.get(identifier)
        except PersistenceError as e:
            log.error("Loading %r failed: %s", identifier, e)
            raise
        except (OSError, ValueError, TypeError) as e:
            log.error("Loading %r failed: %s", identifier, e)
            raise PersistenceError(f"Loading {identifier!r} failed: {e}") from e
        pages = parse(record.html, record.css)
        log.info("Loaded template %s with %d page(s)", record.name, len(pages))
        return pages, record

    # ---- template library ----

    def list_templates(self, category: Optional[str] = None) -> List[TemplateRecord]:
        """Stored templates, newest first, optionally limited to *category*.

        ``None`` or ``ALL_CATEGORIES`` returns everything.
        """
        try:
            records = self.storage.list()
        except (OSError, ValueError, TypeError) as e:
            log.error("Listing templates failed: %s", e)
            raise PersistenceError(f"Listing templates failed: {e}") from e
        if category is None or category == ALL_CATEGORIES:
            return records
        return [r for r in records if template_category(r) == category]

    def categories(self) -> List[str]:
        """``ALL_CATEGORIES`` followed by each category in first-seen order."""
        seen: List[str] = []
        for record in self.list_templates():
            cat = template_category(record)
            if cat and cat not in seen:
                seen.append(cat)
        return [ALL_CATEGORIES] + seen

    def rename(self, template_id: str, name: str) -> TemplateRecord:
        """Give a stored template a new name; markup and other fields are kept.

        Raises:
            ValidationError: if *name* is empty.
            PersistenceError: if the template cannot be read or written.
        """
        if not (name or "").strip():
            raise ValidationError("A template name is required.")
        try:
            record = self.storage.get(template_id)
            return self.storage.update(template_id, name, record.html, record.css)
        except PersistenceError as e:
            log.error("Renaming %r failed: %s", template_id, e)
            raise
        except (OSError, ValueError, TypeError) as e:
            log.error("Renaming %r failed: %s", template_id, e)
            raise PersistenceError(f"Renaming {template_id!r} failed: {e}") from e

    def delete(self, template_id: str) -> TemplateRecord:
        """Remove a stored template.

        Raises:
            PersistenceError: if the template is missing or cannot be removed.
        """
        try:
            return self.storage.delete(template_id)
        except PersistenceError as e:
            log.error("Deleting %r failed: %s", template_id, e)
            raise
        except (OSError, ValueError, TypeError) as e:
            log.error("Deleting %r failed: %s", template_id, e)
            raise PersistenceError(f"Deleting {template_id!r} failed: {e}") from e
