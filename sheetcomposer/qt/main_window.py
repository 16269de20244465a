# Qt Main Window - sheet editor window
#
# Provides menu bar, toolbar, dock panels (layers, properties),
# central canvas, and status bar.  Owns the Document and the
# AppSignals hub the widgets talk through.

import base64

from PySide6.QtCore import Qt, QByteArray
from PySide6.QtGui import QAction, QKeySequence
from PySide6.QtWidgets import (
    QMainWindow, QDockWidget, QStatusBar, QTabWidget, QScrollArea,
    QLabel, QFileDialog, QMessageBox,
)

from sheetcomposer import utils_core as Utils
from sheetcomposer.SceneGraph import NodeKind

from .signals import AppSignals
from .canvas_widget import CanvasPanel
from .layer_panel import LayerPanel
from .forms import (
    CanvasForm, ChartForm, EffectsForm, ExportForm, ImageForm,
    PatternForm, TextForm, IMAGE_FILTER, run_action,
)


class MainWindow(QMainWindow):
    """Main application window for one Document."""

    def __init__(self, document):
        super().__init__()
        self.document = document
        self.signals = AppSignals()
        self.signals.bind(document.bus)

        self.setWindowTitle(f"{Utils.__title__}")
        self.resize(1400, 900)
        self.setContentsMargins(4, 0, 4, 0)

        self.setTabPosition(
            Qt.DockWidgetArea.RightDockWidgetArea,
            QTabWidget.TabPosition.North)

        # --- Central widget: Canvas ---
        self.canvas_panel = CanvasPanel(document, self.signals)
        self.canvas_panel.setMinimumWidth(400)
        self.setCentralWidget(self.canvas_panel)

        # --- Dock: Layers (left) ---
        self.layer_dock = QDockWidget(Utils._("Layers"), self)
        self.layer_dock.setObjectName("LayerDock")
        self.layer_panel = LayerPanel(document, self.signals)
        self.layer_dock.setWidget(self.layer_panel)
        self.addDockWidget(Qt.DockWidgetArea.LeftDockWidgetArea,
                           self.layer_dock)

        # --- Docks: property forms (right, tabified) ---
        self.text_form = TextForm(document)
        self.image_form = ImageForm(document)
        self.pattern_form = PatternForm(document)
        self.chart_form = ChartForm(document, self.signals)
        self.effects_form = EffectsForm(document)
        self.canvas_form = CanvasForm(document)
        self.export_form = ExportForm(document, self.signals)
        self._forms = [self.text_form, self.pattern_form, self.chart_form,
                       self.effects_form, self.canvas_form, self.export_form]

        self._docks = []
        previous = None
        for title, name, form in (
                (Utils._("Text"), "TextDock", self.text_form),
                (Utils._("Image"), "ImageDock", self.image_form),
                (Utils._("Pattern"), "PatternDock", self.pattern_form),
                (Utils._("Chart"), "ChartDock", self.chart_form),
                (Utils._("Effects"), "EffectsDock", self.effects_form),
                (Utils._("Canvas"), "CanvasDock", self.canvas_form),
                (Utils._("Export"), "ExportDock", self.export_form)):
            dock = QDockWidget(title, self)
            dock.setObjectName(name)
            dock.setAllowedAreas(
                Qt.DockWidgetArea.LeftDockWidgetArea
                | Qt.DockWidgetArea.RightDockWidgetArea)
            scroll = QScrollArea()
            scroll.setWidgetResizable(True)
            scroll.setWidget(form)
            dock.setWidget(scroll)
            self.addDockWidget(Qt.DockWidgetArea.RightDockWidgetArea, dock)
            if previous is not None:
                self.tabifyDockWidget(previous, dock)
            previous = dock
            self._docks.append(dock)
        self._docks[0].raise_()

        self._setup_statusbar()
        self._setup_menubar()
        self._setup_toolbar()

        # --- Wire signals ---
        self.signals.status_message.connect(self._on_status_message)
        self.signals.canvas_coords.connect(self._on_canvas_coords)
        self.signals.selection_changed.connect(self._on_selection_changed)
        self.signals.delete_requested.connect(self._on_delete)
        self.signals.export_finished.connect(self._on_export_finished)

        self._restore_layout()

    # ------------------------------------------------------------------
    # Status bar
    # ------------------------------------------------------------------
    def _setup_statusbar(self):
        self.statusbar = QStatusBar()
        self.setStatusBar(self.statusbar)

        self._status_label = QLabel(Utils._("Ready"))
        self.statusbar.addWidget(self._status_label, 1)

        self._sel_label = QLabel("")
        self._sel_label.setMinimumWidth(90)
        self._sel_label.setStyleSheet("color: darkblue;")
        self.statusbar.addPermanentWidget(self._sel_label)

        self._coord_label = QLabel("0, 0")
        self._coord_label.setMinimumWidth(100)
        self._coord_label.setStyleSheet("color: darkred;")
        self.statusbar.addPermanentWidget(self._coord_label)

    # ------------------------------------------------------------------
    # Menu bar
    # ------------------------------------------------------------------
    def _setup_menubar(self):
        menubar = self.menuBar()

        file_menu = menubar.addMenu(Utils._("&File"))

        new_action = QAction(Utils._("&New"), self)
        new_action.setShortcut(QKeySequence("Ctrl+N"))
        new_action.triggered.connect(self._on_new)
        file_menu.addAction(new_action)

        image_action = QAction(Utils._("Add &Image..."), self)
        image_action.setShortcut(QKeySequence("Ctrl+I"))
        image_action.triggered.connect(self._on_add_image)
        file_menu.addAction(image_action)

        file_menu.addSeparator()

        export_action = QAction(Utils._("&Export PNG"), self)
        export_action.setShortcut(QKeySequence("Ctrl+E"))
        export_action.triggered.connect(self.export_form.export)
        file_menu.addAction(export_action)

        file_menu.addSeparator()

        quit_action = QAction(Utils._("&Quit"), self)
        quit_action.setShortcut(QKeySequence.StandardKey.Quit)
        quit_action.triggered.connect(self.close)
        file_menu.addAction(quit_action)

        edit_menu = menubar.addMenu(Utils._("&Edit"))
        for text, key, slot in (
                (Utils._("Bring to &Front"), "Ctrl+Shift+Up",
                 self.layer_panel.front_selected),
                (Utils._("&Raise"), "Ctrl+Up", self.layer_panel.raise_selected),
                (Utils._("&Lower"), "Ctrl+Down",
                 self.layer_panel.lower_selected),
                (Utils._("Send to &Back"), "Ctrl+Shift+Down",
                 self.layer_panel.back_selected)):
            action = QAction(text, self)
            action.setShortcut(QKeySequence(key))
            action.triggered.connect(slot)
            edit_menu.addAction(action)
        edit_menu.addSeparator()
        delete_action = QAction(Utils._("&Delete"), self)
        delete_action.triggered.connect(self._on_delete)
        edit_menu.addAction(delete_action)

        view_menu = menubar.addMenu(Utils._("&View"))
        view_menu.addAction(self.layer_dock.toggleViewAction())
        for dock in self._docks:
            view_menu.addAction(dock.toggleViewAction())
        view_menu.addSeparator()
        fit_action = QAction(Utils._("&Fit Canvas"), self)
        fit_action.setShortcut(QKeySequence("Ctrl+0"))
        fit_action.triggered.connect(self.canvas_panel.view.fit_to_canvas)
        view_menu.addAction(fit_action)

        help_menu = menubar.addMenu(Utils._("&Help"))
        about_action = QAction(Utils._("&About"), self)
        about_action.triggered.connect(self._on_about)
        help_menu.addAction(about_action)

    # ------------------------------------------------------------------
    # Toolbar
    # ------------------------------------------------------------------
    def _setup_toolbar(self):
        toolbar = self.addToolBar(Utils._("Main"))
        toolbar.setObjectName("MainToolBar")
        toolbar.setMovable(False)
        toolbar.addAction(Utils._("New"), self._on_new)
        toolbar.addSeparator()
        toolbar.addAction(Utils._("Text"), self.text_form._on_add)
        toolbar.addAction(Utils._("Image"), self._on_add_image)
        toolbar.addAction(Utils._("Pattern"), self.pattern_form._on_add)
        toolbar.addAction(Utils._("Chart"), self.chart_form._on_add_chart)
        toolbar.addSeparator()
        toolbar.addAction(Utils._("Export"), self.export_form.export)

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------
    def _on_new(self):
        if len(self.document.scene) or self.document.scene.background:
            ans = QMessageBox.question(
                self, Utils._("New sheet"),
                Utils._("Discard the current sheet?"),
                QMessageBox.StandardButton.Yes
                | QMessageBox.StandardButton.No)
            if ans != QMessageBox.StandardButton.Yes:
                return
        self.document.new_document()
        self._on_status_message(Utils._("New sheet"))

    def _on_add_image(self):
        path, _ = QFileDialog.getOpenFileName(
            self, Utils._("Add image"), "", IMAGE_FILTER)
        if path:
            run_action(self, self.document.add_image_from_file, path)

    def _on_delete(self):
        run_action(self, self.document.delete_selected)

    # ------------------------------------------------------------------
    # Signal handlers
    # ------------------------------------------------------------------
    def _on_status_message(self, msg):
        self._status_label.setText(msg)

    def _on_canvas_coords(self, x, y):
        self._coord_label.setText(f"{x:.0f}, {y:.0f}")

    def _on_export_finished(self, path):
        if path:
            self._on_status_message(Utils._("Saved {}").format(path))

    def _on_selection_changed(self, node_id):
        """Show the selected node in its property form."""
        node = self.document.node(node_id) if node_id is not None else None
        if node is None:
            self._sel_label.setText("")
            return
        self._sel_label.setText(self.document.display_name(node))
        if node.kind == NodeKind.TEXT:
            self.text_form.write_config(node.content)
        elif node.kind == NodeKind.IMAGE:
            self.image_form.write_config(node.opacity)
        elif node.kind == NodeKind.PATTERN:
            self.pattern_form.write_config(node.content.config)
        elif node.kind == NodeKind.CHART:
            self.chart_form.write_config(node.content.config)
        self.effects_form.write_config(node.effects)

    def _on_about(self):
        QMessageBox.about(
            self,
            Utils._("About {} v{}").format(Utils.__prg__, Utils.__version__),
            f"<h3>SheetComposer v{Utils.__version__}</h3>"
            f"<p>Compose text, images, radar charts and patterns "
            f"on a sheet and export it as a tightly cropped PNG.</p>")

    # ------------------------------------------------------------------
    # Layout save / restore
    # ------------------------------------------------------------------
    def _save_layout(self):
        """Save window geometry and dock state to config."""
        section = "QtLayout"
        Utils.addSection(section)
        geo = base64.b64encode(
            self.saveGeometry().data()).decode("ascii")
        state = base64.b64encode(
            self.saveState().data()).decode("ascii")
        Utils.config.set(section, "geometry", geo)
        Utils.config.set(section, "state", state)

    def _restore_layout(self):
        """Restore window geometry and dock state from config."""
        geo = Utils.getStr("QtLayout", "geometry")
        if geo:
            self.restoreGeometry(QByteArray(base64.b64decode(geo)))
        state = Utils.getStr("QtLayout", "state")
        if state:
            self.restoreState(QByteArray(base64.b64decode(state)))

    # ------------------------------------------------------------------
    # Cleanup
    # ------------------------------------------------------------------
    def closeEvent(self, event):
        """Save window layout and form values, then close."""
        self._save_layout()
        for form in self._forms:
            form.saveConfig()
        Utils.saveConfiguration()
        event.accept()
