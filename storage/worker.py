"""
storage/worker.py

Background worker that saves a document without blocking the canvas.
"""

from __future__ import annotations

import copy
import logging
import traceback
from typing import List, Optional, Sequence

from PyQt6.QtCore import QObject, pyqtSignal

from errors import CanvasEngineError
from models import Page
from storage.templates import DocumentPersistence

log = logging.getLogger(__name__)


class SaveWorker(QObject):
    """
    Runs ``DocumentPersistence.save`` on a worker thread.

    The pages are deep-copied when the worker is created, so the canvas can
    keep editing while the write is in flight.

    Signals:
        finished(dict): Emitted with the saved TemplateRecord as a dict
        failed(str): Emitted with an error message on failure
    """

    finished = pyqtSignal(dict)
    failed = pyqtSignal(str)

    def __init__(self, persistence: DocumentPersistence, pages: Sequence[Page], name: str,
                 template_id: Optional[str] = None, **extra: str):
        super().__init__()
        self.persistence = persistence
        self.pages: List[Page] = copy.deepcopy(list(pages))
        self.name = name
        self.template_id = template_id
        # description / category / thumbnail forwarded to the storage
        self.extra = dict(extra)

    def run(self):
        """Execute the save."""
        try:
            record = self.persistence.save(self.pages, self.name, self.template_id, **self.extra)
            self.finished.emit(record.to_dict())
        except CanvasEngineError as e:
            self.failed.emit(str(e))
        except Exception as e:
            log.exception("Unexpected error while saving %r", self.name)
            self.failed.emit(f"{e}\n\n{traceback.format_exc()}")
