# Qt list model for the layer list
#
# One row per orderable node, topmost first, so row numbers are the
# display positions ZOrderManager.reorder() works with.  Rows are
# read from the document on every access; refresh() is called after
# any structural change.  Dropping a dragged row reorders the scene
# instead of moving rows in the model.

from PySide6.QtCore import (
    Qt, QAbstractListModel, QByteArray, QMimeData, QModelIndex, QTimer,
)
from PySide6.QtGui import QColor

from sheetcomposer.SceneGraph import NodeKind

LAYER_MIME = "application/x-sheetcomposer-layer-row"
HIDDEN_FG = QColor("Gray")

KIND_LABEL = {
    NodeKind.TEXT: "Text",
    NodeKind.IMAGE: "Image",
    NodeKind.CHART: "Radar chart",
    NodeKind.PATTERN: "Pattern",
}


def drop_target(src, row, count):
    """Display position a row dragged from src ends up at.

    row is the insertion row reported by the view: the gap the row is
    dropped into, where count means below the last row.  Taking the
    row out first shifts every later gap up by one.
    """
    if row < 0 or row > count:
        row = count
    dst = row - 1 if row > src else row
    return min(max(dst, 0), count - 1)


class LayerListModel(QAbstractListModel):
    """Flat model over document.layers()."""

    def __init__(self, document, parent=None):
        super().__init__(parent)
        self.document = document

    # ---- structure --------------------------------------------------------

    def rowCount(self, parent=QModelIndex()):
        if parent.isValid():
            return 0
        return len(self.document.scene)

    def node_at(self, row):
        layers = self.document.layers()
        if 0 <= row < len(layers):
            return layers[row]
        return None

    def row_of(self, node_id):
        return self.document.zorder.display_index(node_id)

    def flags(self, index):
        if not index.isValid():
            return Qt.ItemFlag.ItemIsDropEnabled
        return (Qt.ItemFlag.ItemIsEnabled
                | Qt.ItemFlag.ItemIsSelectable
                | Qt.ItemFlag.ItemIsUserCheckable
                | Qt.ItemFlag.ItemIsDragEnabled)

    # ---- data -------------------------------------------------------------

    def data(self, index, role=Qt.ItemDataRole.DisplayRole):
        if not index.isValid():
            return None
        node = self.node_at(index.row())
        if node is None:
            return None
        if role == Qt.ItemDataRole.DisplayRole:
            return self.document.display_name(node)
        if role == Qt.ItemDataRole.CheckStateRole:
            return Qt.CheckState.Checked if node.visible \
                else Qt.CheckState.Unchecked
        if role == Qt.ItemDataRole.ToolTipRole:
            return "{} (z={})".format(KIND_LABEL[node.kind], node.z_index)
        if role == Qt.ItemDataRole.ForegroundRole:
            return None if node.visible else HIDDEN_FG
        if role == Qt.ItemDataRole.UserRole:
            return node.id
        return None

    def setData(self, index, value, role=Qt.ItemDataRole.EditRole):
        if role != Qt.ItemDataRole.CheckStateRole or not index.isValid():
            return False
        node = self.node_at(index.row())
        if node is None:
            return False
        visible = Qt.CheckState(value) == Qt.CheckState.Checked
        if not self.document.set_visible(node.id, visible):
            return False
        self.dataChanged.emit(index, index, [role])
        return True

    # ---- drag and drop ----------------------------------------------------

    def supportedDragActions(self):
        return Qt.DropAction.MoveAction

    def supportedDropActions(self):
        return Qt.DropAction.MoveAction

    def mimeTypes(self):
        return [LAYER_MIME]

    def mimeData(self, indexes):
        rows = sorted({i.row() for i in indexes if i.isValid()})
        mime = QMimeData()
        if rows:
            mime.setData(LAYER_MIME, QByteArray(str(rows[0]).encode()))
        return mime

    def dropMimeData(self, data, action, row, column, parent):
        if action != Qt.DropAction.MoveAction or not data.hasFormat(LAYER_MIME):
            return False
        try:
            src = int(bytes(data.data(LAYER_MIME).data()).decode())
        except ValueError:
            return False
        if row < 0 and parent.isValid():
            dst = parent.row()
        else:
            dst = drop_target(src, row, self.rowCount())
        # Reorder once the drop event has returned: it resets the model.
        QTimer.singleShot(0, lambda: self.document.zorder.reorder(src, dst))
        return False

    # ---- refresh ----------------------------------------------------------

    def refresh(self, *_args):
        """Full reset after any structural mutation."""
        self.beginResetModel()
        self.endResetModel()
