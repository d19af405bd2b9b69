"""
template_dialog.py

Dialogs for the template library: naming a template on save, and browsing
saved templates by category to open, rename or delete them.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import (
    QComboBox,
    QDialog,
    QDialogButtonBox,
    QFormLayout,
    QHBoxLayout,
    QInputDialog,
    QLabel,
    QLineEdit,
    QListWidget,
    QListWidgetItem,
    QMessageBox,
    QPushButton,
    QVBoxLayout,
)

from errors import CanvasEngineError
from storage import ALL_CATEGORIES, DocumentPersistence, TemplateRecord, template_category

log = logging.getLogger(__name__)

TEMPLATE_ID_ROLE = Qt.ItemDataRole.UserRole
TEMPLATE_NAME_ROLE = Qt.ItemDataRole.UserRole.value + 1


class SaveTemplateDialog(QDialog):
    """Asks for the name, category and description of a template."""

    def __init__(self, name: str = "", category: str = "", description: str = "", parent=None):
        super().__init__(parent)
        self.setWindowTitle("Save Template")
        self.setMinimumWidth(380)

        self.name_edit = QLineEdit(name)
        self.category_edit = QLineEdit(category)
        self.category_edit.setPlaceholderText("Defaults to the first word of the name")
        self.description_edit = QLineEdit(description)

        form = QFormLayout()
        form.addRow("Name:", self.name_edit)
        form.addRow("Category:", self.category_edit)
        form.addRow("Description:", self.description_edit)

        self.buttons = QDialogButtonBox(
            QDialogButtonBox.StandardButton.Save | QDialogButtonBox.StandardButton.Cancel
        )
        self.buttons.accepted.connect(self.accept)
        self.buttons.rejected.connect(self.reject)

        layout = QVBoxLayout(self)
        layout.addLayout(form)
        layout.addWidget(self.buttons)

        self.name_edit.textChanged.connect(self._update_save_enabled)
        self._update_save_enabled()

    def _update_save_enabled(self):
        self.buttons.button(QDialogButtonBox.StandardButton.Save).setEnabled(
            bool(self.name_edit.text().strip())
        )

    def values(self) -> Tuple[str, str, str]:
        """(name, category, description), each stripped."""
        return (
            self.name_edit.text().strip(),
            self.category_edit.text().strip(),
            self.description_edit.text().strip(),
        )


class TemplateLibraryDialog(QDialog):
    """
    Saved templates filtered by category.

    Open accepts the dialog with ``selected_id`` set; Rename and Delete act
    on the storage immediately and refresh the list.

    Args:
        persistence: DocumentPersistence backing the library.
        allow_open: Show the Open button (hidden when only managing).
    """

    def __init__(self, persistence: DocumentPersistence, allow_open: bool = True, parent=None):
        super().__init__(parent)
        self.persistence = persistence
        self.allow_open = allow_open
        self.selected_id: Optional[str] = None
        self.renamed: List[TemplateRecord] = []
        self.deleted: List[str] = []
        self.setWindowTitle("Template Library" if allow_open else "Manage Templates")
        self.resize(520, 420)

        self.category_combo = QComboBox()
        self.category_combo.currentTextChanged.connect(self._on_category_changed)
        self.list_widget = QListWidget()
        self.list_widget.itemDoubleClicked.connect(lambda _item: self.open_selected())
        self.list_widget.currentItemChanged.connect(lambda *_: self._update_buttons())

        self.open_btn = QPushButton("Open")
        self.open_btn.clicked.connect(self.open_selected)
        self.open_btn.setVisible(allow_open)
        self.rename_btn = QPushButton("Rename...")
        self.rename_btn.clicked.connect(lambda: self.rename_selected())
        self.delete_btn = QPushButton("Delete")
        self.delete_btn.clicked.connect(lambda: self.delete_selected())
        close_btn = QPushButton("Close")
        close_btn.clicked.connect(self.reject)

        top = QHBoxLayout()
        top.addWidget(QLabel("Category:"))
        top.addWidget(self.category_combo, 1)

        buttons = QHBoxLayout()
        buttons.addWidget(self.open_btn)
        buttons.addWidget(self.rename_btn)
        buttons.addWidget(self.delete_btn)
        buttons.addStretch()
        buttons.addWidget(close_btn)

        layout = QVBoxLayout(self)
        layout.addLayout(top)
        layout.addWidget(self.list_widget)
        layout.addLayout(buttons)

        self.refresh()

    # ---- list ----

    def refresh(self):
        """Reload categories and templates from storage."""
        current = self.category_combo.currentText() or ALL_CATEGORIES
        try:
            categories = self.persistence.categories()
        except CanvasEngineError as e:
            self._report("Could not list templates", e)
            categories = [ALL_CATEGORIES]
        self.category_combo.blockSignals(True)
        self.category_combo.clear()
        self.category_combo.addItems(categories)
        self.category_combo.setCurrentText(current if current in categories else ALL_CATEGORIES)
        self.category_combo.blockSignals(False)
        self._fill_list()

    def set_category(self, category: str):
        self.category_combo.setCurrentText(category)

    def _on_category_changed(self, _text: str):
        self._fill_list()

    def _fill_list(self):
        self.list_widget.clear()
        try:
            records = self.persistence.list_templates(self.category_combo.currentText() or ALL_CATEGORIES)
        except CanvasEngineError as e:
            self._report("Could not list templates", e)
            records = []
        for record in records:
            label = f"{record.name}  [{template_category(record)}]  {record.updated_at[:19].replace('T', ' ')}"
            item = QListWidgetItem(label)
            item.setData(TEMPLATE_ID_ROLE, record.id)
            item.setData(TEMPLATE_NAME_ROLE, record.name)
            if record.description:
                item.setToolTip(record.description)
            self.list_widget.addItem(item)
        if self.list_widget.count():
            self.list_widget.setCurrentRow(0)
        self._update_buttons()

    def template_ids(self) -> List[str]:
        """Ids of the listed templates, top to bottom."""
        return [self.list_widget.item(i).data(TEMPLATE_ID_ROLE) for i in range(self.list_widget.count())]

    def _current_id(self) -> Optional[str]:
        item = self.list_widget.currentItem()
        return item.data(TEMPLATE_ID_ROLE) if item is not None else None

    def _update_buttons(self):
        has = self._current_id() is not None
        for btn in (self.open_btn, self.rename_btn, self.delete_btn):
            btn.setEnabled(has)

    def _report(self, title: str, error: CanvasEngineError):
        log.warning("%s: %s", title, error)
        QMessageBox.critical(self, title, str(error))

    # ---- actions ----

    def open_selected(self):
        template_id = self._current_id()
        if template_id is None or not self.allow_open:
            return
        self.selected_id = template_id
        self.accept()

    def rename_selected(self, name: Optional[str] = None) -> Optional[TemplateRecord]:
        """Rename the selected template; asks for the name when *name* is None."""
        template_id = self._current_id()
        if template_id is None:
            return None
        if name is None:
            old = self.list_widget.currentItem().data(TEMPLATE_NAME_ROLE)
            name, ok = QInputDialog.getText(self, "Rename Template", "New name:", text=old)
            if not ok:
                return None
        try:
            record = self.persistence.rename(template_id, name)
        except CanvasEngineError as e:
            self._report("Rename failed", e)
            return None
        self.renamed.append(record)
        self.refresh()
        return record

    def delete_selected(self, confirm: bool = True) -> bool:
        """Delete the selected template, after a confirmation prompt by default."""
        template_id = self._current_id()
        if template_id is None:
            return False
        if confirm and QMessageBox.question(
                self, "Delete Template", "Delete the selected template permanently?"
        ) != QMessageBox.StandardButton.Yes:
            return False
        try:
            self.persistence.delete(template_id)
        except CanvasEngineError as e:
            self._report("Delete failed", e)
            return False
        self.deleted.append(template_id)
        self.refresh()
        return True
