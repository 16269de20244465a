# Qt Layer Panel - layer list with ordering toolbar
#
# Shows the document's nodes topmost first.  Rows can be dragged to
# reorder, checked to show/hide, and selected to select the node on
# the canvas.  Toolbar buttons raise, lower, bring to front, send to
# back and delete the selected node.

from PySide6.QtCore import Qt, QItemSelectionModel
from PySide6.QtGui import QKeySequence, QShortcut
from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QListView, QToolBar, QAbstractItemView,
)

from sheetcomposer import utils_core as Utils

from .forms import run_action
from .layer_model import LayerListModel


class LayerPanel(QWidget):
    """Layer list for one document."""

    def __init__(self, document, signals, parent=None):
        super().__init__(parent)
        self.document = document
        self.signals = signals
        self._syncing = False

        layout = QVBoxLayout(self)
        layout.setContentsMargins(4, 4, 4, 4)
        layout.setSpacing(2)

        self._setup_toolbar(layout)

        self._model = LayerListModel(document)
        self._list = QListView()
        self._list.setModel(self._model)
        self._list.setSelectionMode(
            QAbstractItemView.SelectionMode.SingleSelection)
        self._list.setDragDropMode(
            QAbstractItemView.DragDropMode.InternalMove)
        self._list.setDefaultDropAction(Qt.DropAction.MoveAction)
        self._list.setDragDropOverwriteMode(False)
        self._list.setDropIndicatorShown(True)
        layout.addWidget(self._list)

        self._list.selectionModel().selectionChanged.connect(
            self._on_list_selection)

        s = QShortcut(QKeySequence("Delete"), self._list)
        s.setContext(Qt.ShortcutContext.WidgetShortcut)
        s.activated.connect(self.delete_selected)

        for sig in (signals.node_added, signals.node_removed,
                    signals.order_changed):
            sig.connect(self.fill)
        signals.node_changed.connect(self._on_node_changed)
        signals.selection_changed.connect(self._on_document_selection)

    # ------------------------------------------------------------------
    # Toolbar
    # ------------------------------------------------------------------
    def _setup_toolbar(self, layout):
        toolbar = QToolBar()
        toolbar.setMovable(False)

        act = toolbar.addAction(Utils._("Up"), self.raise_selected)
        act.setToolTip(Utils._("Move one layer up"))
        act = toolbar.addAction(Utils._("Down"), self.lower_selected)
        act.setToolTip(Utils._("Move one layer down"))
        act = toolbar.addAction(Utils._("Front"), self.front_selected)
        act.setToolTip(Utils._("Bring to front"))
        act = toolbar.addAction(Utils._("Back"), self.back_selected)
        act.setToolTip(Utils._("Send to back"))
        toolbar.addSeparator()
        act = toolbar.addAction(Utils._("Delete"), self.delete_selected)
        act.setToolTip(Utils._("Delete the selected node"))

        layout.addWidget(toolbar)

    # ------------------------------------------------------------------
    # Fill / refresh
    # ------------------------------------------------------------------
    def fill(self, *_args):
        """Rebuild the list from the document and restore the selection."""
        self._syncing = True
        try:
            self._model.refresh()
        finally:
            self._syncing = False
        self._on_document_selection(self.document.selection.node_id)

    def _on_node_changed(self, node_id):
        row = self._model.row_of(node_id)
        if row is None:
            return
        index = self._model.index(row, 0)
        self._model.dataChanged.emit(index, index)

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------
    def _on_list_selection(self, *_args):
        if self._syncing:
            return
        rows = self._list.selectionModel().selectedRows()
        node = self._model.node_at(rows[0].row()) if rows else None
        self.document.selection.select(node.id if node is not None else None)

    def _on_document_selection(self, node_id):
        self._syncing = True
        try:
            sel = self._list.selectionModel()
            row = self._model.row_of(node_id) if node_id is not None else None
            if row is None:
                sel.clearSelection()
            else:
                index = self._model.index(row, 0)
                sel.select(index,
                           QItemSelectionModel.SelectionFlag.ClearAndSelect)
                self._list.scrollTo(index)
        finally:
            self._syncing = False

    # ------------------------------------------------------------------
    # Ordering
    # ------------------------------------------------------------------
    def raise_selected(self):
        run_action(self, self.document.raise_selected)

    def lower_selected(self):
        run_action(self, self.document.lower_selected)

    def front_selected(self):
        run_action(self, self.document.bring_selected_to_front)

    def back_selected(self):
        run_action(self, self.document.send_selected_to_back)

    def delete_selected(self):
        self.signals.delete_requested.emit()
