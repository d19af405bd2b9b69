"""
main.py

PageCanvas - Visual Canvas Page Builder

PyQt6 application for composing multi-page layouts with:
- Drag & drop element palette (heading, text, button, image, container)
- Move, resize, duplicate, delete and z-order of placed elements
- Per-page background colors
- HTML + CSS export and import
- Template library in the workspace directory: save with category and
  description, open by category, rename and delete

Usage:
    python main.py

Dependencies:
    pip install PyQt6 platformdirs tomli-w beautifulsoup4
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

from PyQt6.QtCore import Qt, QThread
from PyQt6.QtGui import QAction, QColor, QKeySequence
from PyQt6.QtWidgets import (
    QApplication,
    QColorDialog,
    QDialog,
    QDockWidget,
    QFileDialog,
    QInputDialog,
    QMainWindow,
    QMessageBox,
    QTabBar,
    QToolBar,
    QVBoxLayout,
    QWidget,
)

from canvas import CanvasScene, CanvasView, PaletteWidget
from canvas.items import css_to_qcolor, qcolor_to_hex
from codec import parse, serialize, to_standalone_html
from document import DocumentStore, ElementOperations, SelectionBridge
from errors import CanvasEngineError
from models import Element
from settings import SettingsManager, get_settings
from storage import DocumentPersistence, JsonFileStorage, SaveWorker
from template_dialog import SaveTemplateDialog, TemplateLibraryDialog

log = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    """
    Main application window.

    The palette dock sits on the left, the canvas fills the center, and a
    tab bar above the canvas switches between pages.
    """

    def __init__(self, settings_manager: SettingsManager):
        super().__init__()
        self.settings_manager = settings_manager
        self.setWindowTitle("PageCanvas")

        # Document model
        self.store = DocumentStore()
        self.operations = ElementOperations(self.store, on_change=self._on_element_changed)
        self.selection = SelectionBridge(self.operations)

        # Persistence
        self.persistence = DocumentPersistence(JsonFileStorage())
        self.template_id: Optional[str] = None
        self.template_name: str = ""
        self.template_category: str = ""
        self.template_description: str = ""
        self._dirty = False

        # Scene and view
        self.scene = CanvasScene(self.operations)
        self.scene.set_selection_changed_callback(self._on_selection_changed)
        self.view = CanvasView(self.scene)

        # Page tabs above the canvas
        self.page_tabs = QTabBar()
        self.page_tabs.setExpanding(False)
        self.page_tabs.currentChanged.connect(self._on_page_tab_changed)

        central = QWidget()
        layout = QVBoxLayout(central)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(0)
        layout.addWidget(self.page_tabs)
        layout.addWidget(self.view)
        self.setCentralWidget(central)

        # Palette dock (left side)
        self.palette = PaletteWidget(self.scene.controller)
        palette_dock = QDockWidget("Elements", self)
        palette_dock.setObjectName("palette_dock")
        palette_dock.setWidget(self.palette)
        palette_dock.setFeatures(QDockWidget.DockWidgetFeature.DockWidgetMovable)
        self.addDockWidget(Qt.DockWidgetArea.LeftDockWidgetArea, palette_dock)

        # Build UI (menus first since toolbar references menu actions)
        self._build_menus()
        self._build_toolbar()

        # Save worker thread
        self._save_thread: Optional[QThread] = None
        self._save_worker: Optional[SaveWorker] = None

        self._refresh()
        self.statusBar().showMessage("Drag elements from the palette onto the page.")

    # ---- UI construction ----

    def _build_menus(self):
        """Build the application menu bar."""
        file_menu = self.menuBar().addMenu("&File")

        self.new_act = QAction("&New", self)
        self.new_act.setShortcut(QKeySequence.StandardKey.New)
        self.new_act.triggered.connect(self.new_document)
        file_menu.addAction(self.new_act)

        self.open_act = QAction("&Open Template...", self)
        self.open_act.setShortcut(QKeySequence.StandardKey.Open)
        self.open_act.triggered.connect(self.open_template_dialog)
        file_menu.addAction(self.open_act)

        self.save_act = QAction("&Save Template", self)
        self.save_act.setShortcut(QKeySequence.StandardKey.Save)
        self.save_act.triggered.connect(self.save_template)
        file_menu.addAction(self.save_act)

        save_as_act = QAction("Save Template &As...", self)
        save_as_act.setShortcut(QKeySequence.StandardKey.SaveAs)
        save_as_act.triggered.connect(lambda: self.save_template(ask_name=True))
        file_menu.addAction(save_as_act)

        manage_act = QAction("&Manage Templates...", self)
        manage_act.triggered.connect(self.manage_templates_dialog)
        file_menu.addAction(manage_act)

        file_menu.addSeparator()

        import_act = QAction("&Import HTML...", self)
        import_act.triggered.connect(self.import_html_dialog)
        file_menu.addAction(import_act)

        export_act = QAction("&Export HTML...", self)
        export_act.setShortcut(QKeySequence("Ctrl+E"))
        export_act.triggered.connect(self.export_html_dialog)
        file_menu.addAction(export_act)

        file_menu.addSeparator()

        quit_act = QAction("&Quit", self)
        quit_act.setShortcut(QKeySequence.StandardKey.Quit)
        quit_act.triggered.connect(self.close)
        file_menu.addAction(quit_act)

        view_menu = self.menuBar().addMenu("&View")
        for text, shortcut, slot in (
            ("Zoom &In", "Ctrl+=", self.view.zoom_in),
            ("Zoom &Out", "Ctrl+-", self.view.zoom_out),
            ("&Reset Zoom", "Ctrl+0", self.view.zoom_reset),
        ):
            act = QAction(text, self)
            act.setShortcut(QKeySequence(shortcut))
            act.triggered.connect(slot)
            view_menu.addAction(act)

    def _build_toolbar(self):
        """Build the page and element toolbar."""
        tb = QToolBar("Main")
        tb.setObjectName("main_toolbar")
        tb.setMovable(False)
        self.addToolBar(tb)

        def add_action(text: str, slot, shortcut: str = "", tip: str = "") -> QAction:
            act = QAction(text, self)
            if shortcut:
                act.setShortcut(QKeySequence(shortcut))
            act.setToolTip(tip or text)
            act.triggered.connect(slot)
            tb.addAction(act)
            return act

        add_action("Add Page", self.add_page, "Ctrl+Shift+N")
        self.delete_page_act = add_action("Delete Page", self.delete_page)
        add_action("Background...", self.choose_page_background, tip="Set the current page background color")
        add_action("Clear Page", self.clear_page)
        tb.addSeparator()
        self.edit_content_act = add_action("Edit Content...", self.edit_selected_content, "F2")
        self.duplicate_act = add_action("Duplicate", lambda: self._run_on_selection("Duplicate"), "Ctrl+D")
        self.delete_act = add_action("Delete", lambda: self._run_on_selection("Delete"))
        self.front_act = add_action("Bring to Front", lambda: self._run_on_selection("Bring to Front"), "Ctrl+]")
        self.back_act = add_action("Send to Back", lambda: self._run_on_selection("Send to Back"), "Ctrl+[")

    # ---- refresh ----

    def _refresh(self):
        """Re-render the active page and resync the page tabs."""
        self.scene.render_page()
        self.page_tabs.blockSignals(True)
        while self.page_tabs.count():
            self.page_tabs.removeTab(0)
        for page in self.store.pages:
            self.page_tabs.addTab(page.name)
        self.page_tabs.setCurrentIndex(self.store.active_index)
        self.page_tabs.blockSignals(False)
        self.delete_page_act.setEnabled(len(self.store.pages) > 1)
        self._update_selection_actions()
        self._update_title()

    def _update_title(self):
        name = self.template_name or "Untitled"
        self.setWindowTitle(f"PageCanvas - {name}{' *' if self._dirty else ''}")

    def _update_selection_actions(self):
        has_selection = self.store.selected_id is not None
        for act in (self.edit_content_act, self.duplicate_act, self.delete_act, self.front_act, self.back_act):
            act.setEnabled(has_selection)

    def _on_element_changed(self, element_id: str):
        self._dirty = True
        self._update_title()

    def _on_selection_changed(self, element: Optional[Element]):
        self._update_selection_actions()
        data = self.selection.current()
        if data is None:
            self.statusBar().showMessage("No selection")
            return
        pos = data["position"]
        size = data["size"]
        self.statusBar().showMessage(
            f"{data['type']} {data['id']}  x={pos['x']:g} y={pos['y']:g}  "
            f"{size['width']:g}×{size['height']:g}  z={data['zIndex']}"
        )

    def _report(self, title: str, error: CanvasEngineError):
        log.warning("%s: %s", title, error)
        self.statusBar().showMessage(f"{title}: {error}")

    # ---- pages ----

    def _on_page_tab_changed(self, index: int):
        if index < 0:
            return
        self.scene.cancel_drag()
        try:
            self.store.switch_page(index)
        except CanvasEngineError as e:
            self._report("Switch page failed", e)
            return
        self._refresh()

    def add_page(self):
        page = self.store.add_page()
        self._dirty = True
        self._refresh()
        self.statusBar().showMessage(f"Added {page.name}")

    def delete_page(self):
        try:
            removed = self.store.delete_page(self.store.active_index)
        except CanvasEngineError as e:
            self._report("Delete page failed", e)
            return
        self._dirty = True
        self._refresh()
        self.statusBar().showMessage(f"Deleted {removed.name}")

    def choose_page_background(self):
        current = css_to_qcolor(self.store.active_page.background_color, QColor(Qt.GlobalColor.white))
        color = QColorDialog.getColor(current, self, "Page Background")
        if not color.isValid():
            return
        self.store.set_page_background(qcolor_to_hex(color))
        self._dirty = True
        self._refresh()

    def clear_page(self):
        if QMessageBox.question(self, "Clear Page", "Remove every element from this page?") \
                != QMessageBox.StandardButton.Yes:
            return
        self.store.clear_page()
        self._dirty = True
        self._refresh()

    # ---- elements ----

    def _run_on_selection(self, action: str):
        element_id = self.store.selected_id
        if element_id is None:
            return
        try:
            self.scene.run_context_action(action, element_id)
        except CanvasEngineError as e:
            self._report(f"{action} failed", e)
            return
        self._update_selection_actions()

    def edit_selected_content(self):
        data = self.selection.current()
        if data is None:
            return
        label = "Image URL:" if data["type"] == "image" else "Content:"
        text, ok = QInputDialog.getText(self, "Edit Content", label, text=data["content"])
        if not ok:
            return
        try:
            self.selection.set_content(text)
        except CanvasEngineError as e:
            self._report("Edit failed", e)
            return
        self.scene.render_page()

    # ---- documents ----

    def _install_pages(self, pages, name: str = "", template_id: Optional[str] = None,
                       category: str = "", description: str = ""):
        self.scene.cancel_drag()
        try:
            self.store.replace_document(pages)
        except CanvasEngineError as e:
            self._report("Load failed", e)
            return False
        self.template_id = template_id
        self.template_name = name
        self.template_category = category
        self.template_description = description
        self._dirty = False
        self._refresh()
        return True

    def new_document(self):
        self._install_pages([DocumentStore().active_page])

    def import_html_dialog(self):
        """Import an HTML document (with embedded or sibling CSS)."""
        workspace = str(self.settings_manager.get_workspace_dir())
        path, _ = QFileDialog.getOpenFileName(self, "Import HTML", workspace, "HTML (*.html *.htm)")
        if not path:
            return
        try:
            html = Path(path).read_text(encoding="utf-8")
            css_path = Path(path).with_suffix(".css")
            css = css_path.read_text(encoding="utf-8") if css_path.exists() else ""
        except OSError as e:
            QMessageBox.critical(self, "Import failed", str(e))
            return
        if self._install_pages(parse(html, css), name=Path(path).stem):
            self.statusBar().showMessage(f"Imported {len(self.store.pages)} page(s) from {path}")

    def export_html_dialog(self):
        """Export the document as a standalone HTML file."""
        workspace = str(self.settings_manager.get_workspace_dir())
        path, _ = QFileDialog.getSaveFileName(self, "Export HTML", workspace, "HTML (*.html)")
        if not path:
            return
        html, css = serialize(self.store.pages)
        try:
            Path(path).parent.mkdir(parents=True, exist_ok=True)
            Path(path).write_text(
                to_standalone_html(html, css, title=self.template_name or "Template"), encoding="utf-8")
        except OSError as e:
            QMessageBox.critical(self, "Export failed", str(e))
            return
        self.statusBar().showMessage(f"Exported HTML: {path}")

    def open_template_dialog(self):
        """Choose a saved template, optionally filtered by category, and load it."""
        dialog = TemplateLibraryDialog(self.persistence, allow_open=True, parent=self)
        accepted = dialog.exec() == QDialog.DialogCode.Accepted
        self._apply_library_changes(dialog)
        if not accepted or dialog.selected_id is None:
            return
        try:
            pages, record = self.persistence.load(dialog.selected_id)
        except CanvasEngineError as e:
            QMessageBox.critical(self, "Open failed", str(e))
            return
        if self._install_pages(pages, name=record.name, template_id=record.id,
                               category=record.category, description=record.description):
            self.statusBar().showMessage(f"Opened template: {record.name}")

    def manage_templates_dialog(self):
        """Rename or delete saved templates."""
        dialog = TemplateLibraryDialog(self.persistence, allow_open=False, parent=self)
        dialog.exec()
        self._apply_library_changes(dialog)

    def _apply_library_changes(self, dialog: TemplateLibraryDialog):
        """Keep the open document's template link in step with library edits."""
        for record in dialog.renamed:
            if record.id == self.template_id:
                self.template_name = record.name
        if self.template_id in dialog.deleted:
            self.template_id = None
            self._dirty = True
            self.statusBar().showMessage("The open template was deleted; saving creates a new one.")
        self._update_title()

    def save_template(self, ask_name: bool = False):
        """Save the document in the background; the canvas stays editable."""
        if self._save_thread is not None:
            self.statusBar().showMessage("A save is already in progress.")
            return
        name = self.template_name
        template_id = self.template_id
        category = self.template_category
        description = self.template_description
        if ask_name or not name:
            dialog = SaveTemplateDialog(name, category, description, parent=self)
            if dialog.exec() != QDialog.DialogCode.Accepted:
                return
            name, category, description = dialog.values()
            if not name:
                return
            if ask_name:
                template_id = None

        self.save_act.setEnabled(False)
        self.statusBar().showMessage(f"Saving {name} ...")

        self._save_thread = QThread()
        self._save_worker = SaveWorker(self.persistence, self.store.pages, name, template_id,
                                       category=category, description=description)
        self._save_worker.moveToThread(self._save_thread)

        self._save_thread.started.connect(self._save_worker.run)
        self._save_worker.finished.connect(self.on_save_finished)
        self._save_worker.failed.connect(self.on_save_failed)

        self._save_worker.finished.connect(self._save_thread.quit)
        self._save_worker.failed.connect(self._save_thread.quit)

        def _reenable():
            self.save_act.setEnabled(True)
            self._save_thread = None
            self._save_worker = None

        self._save_thread.finished.connect(_reenable)
        self._save_thread.finished.connect(self._save_thread.deleteLater)

        self._save_thread.start()

    def on_save_finished(self, record: dict):
        """Handle a completed background save."""
        self.template_id = record["id"]
        self.template_name = record["name"]
        self.template_category = record.get("category", "")
        self.template_description = record.get("description", "")
        self._dirty = False
        self._update_title()
        self.statusBar().showMessage(f"Saved template: {record['name']}")

    def on_save_failed(self, err: str):
        """Handle a failed background save; the document is left as is."""
        QMessageBox.critical(self, "Save failed", err)
        self.statusBar().showMessage("Save failed.")


def main():
    """Application entry point."""
    settings_manager = get_settings()

    level = getattr(logging, str(settings_manager.settings.log_level).upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = QApplication(sys.argv)

    # Ensure settings file has all sections
    settings_manager.ensure_file_complete()

    # Save settings on application quit
    app.aboutToQuit.connect(settings_manager.save)

    w = MainWindow(settings_manager)
    w.resize(1400, 900)
    w.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
