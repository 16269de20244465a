# Qt Canvas Widget - QGraphicsView-based sheet editor
#
# SheetScene is the rendering engine: it mirrors a Document's Scene
# as QGraphicsItems, follows the document's event bus, measures each
# node's on-canvas extent and rasterizes arbitrary regions for export.
# SheetView adds zoom/pan and draws the canvas page; CanvasPanel wraps
# both with a small toolbar.

from PySide6.QtCore import Qt, QRectF, QPointF, Signal
from PySide6.QtGui import (
    QPen, QColor, QBrush, QPainter, QFont, QFontMetricsF, QImage,
    QPainterPath, QPixmap, QTransform, QWheelEvent, QMouseEvent, QKeyEvent,
)
from PySide6.QtWidgets import (
    QGraphicsView, QGraphicsScene, QGraphicsItem, QGraphicsPathItem,
    QGraphicsPixmapItem, QGraphicsDropShadowEffect,
    QWidget, QVBoxLayout, QToolBar, QLabel,
)

from sheetcomposer import utils_core as Utils
from sheetcomposer.errors import RenderError
from sheetcomposer.Geometry import Rect, shadow_bounds
from sheetcomposer.ImageFilters import apply_filters
from sheetcomposer.SceneGraph import NodeKind


COLORS = {
    "desk": QColor(210, 210, 215),
    "page": QColor("white"),
    "page_border": QColor(140, 140, 150),
}

ZOOM_FACTOR = 1.25
BACKGROUND_Z = -1


def text_path(content):
    """Outline of a TextContent, one addText() per line.

    The first baseline sits one ascent below the item origin so the
    origin is the top-left of the first line.
    """
    size = max(1, int(round(content.font_size)))
    font = QFont(content.font_family)
    font.setPixelSize(size)
    style = (content.font_style or "").lower()
    font.setBold("bold" in style)
    font.setItalic("italic" in style)
    ascent = QFontMetricsF(font).ascent()
    step = size * content.line_height
    path = QPainterPath()
    for i, line in enumerate(content.lines()):
        if line:
            path.addText(0, ascent + i * step, font, line)
    return path


def to_rect(qrect):
    return Rect(qrect.x(), qrect.y(), qrect.width(), qrect.height())


class _NodeItemMixin:
    """Reports interactive moves of a node item back to its scene."""

    node_id = None

    def itemChange(self, change, value):
        if change == QGraphicsItem.GraphicsItemChange.ItemPositionHasChanged:
            scene = self.scene()
            if scene is not None and self.node_id is not None:
                scene.item_moved(self)
        return super().itemChange(change, value)


class TextItem(_NodeItemMixin, QGraphicsPathItem):
    pass


class RasterItem(_NodeItemMixin, QGraphicsPixmapItem):
    pass


class SheetScene(QGraphicsScene):
    """Scene that renders one Document.

    Implements the engine side of the BoundingBoxResolver and the
    Exporter: node_effective_rect(), canvas_size() and
    rasterize_region().
    """

    def __init__(self, document, parent=None):
        super().__init__(parent)
        self.document = document
        self._items = {}            # node id -> item
        self._bg_item = None
        self._syncing = False

        bus = document.bus
        bus.on("node_added", self._on_node_added)
        bus.on("node_removed", self._on_node_removed)
        bus.on("node_changed", self._on_node_changed)
        bus.on("order_changed", self._sync_order)
        bus.on("background_changed", self._sync_background)
        bus.on("canvas_changed", self._on_canvas_changed)
        bus.on("selection_changed", self._on_document_selection)
        self.selectionChanged.connect(self._on_item_selection)

        document.attach_engine(self)
        self.rebuild()

    # ------------------------------------------------------------------
    # Engine interface
    # ------------------------------------------------------------------
    def canvas_size(self):
        return self.document.scene.width, self.document.scene.height

    def item_for(self, node):
        bg = self.document.scene.background
        if bg is not None and bg.node is node:
            return self._bg_item
        return self._items.get(node.id)

    def node_effective_rect(self, node, include_shadow=True,
                            include_stroke=True):
        """Canvas-space extent of a node, or None if it has no item."""
        item = self.item_for(node)
        if item is None:
            return None
        if include_stroke or not isinstance(item, QGraphicsPathItem):
            rect = to_rect(item.sceneBoundingRect())
        else:
            rect = to_rect(item.sceneTransform().mapRect(
                item.path().boundingRect()))
        shadow = node.effects.shadow
        if include_shadow and shadow.is_visible() and rect.is_valid():
            extent = shadow_bounds(rect, shadow.blur,
                                   shadow.offset_x, shadow.offset_y)
            rect = Rect.from_edges(
                min(rect.x, extent.x), min(rect.y, extent.y),
                max(rect.right, extent.right),
                max(rect.bottom, extent.bottom))
        return rect

    def rasterize_region(self, rect, pixel_ratio=1):
        """Render exactly rect of the canvas into a transparent QImage.

        Selection outlines are suppressed while rendering.
        """
        width = int(round(rect.width * pixel_ratio))
        height = int(round(rect.height * pixel_ratio))
        if width <= 0 or height <= 0:
            raise RenderError(Utils._("Nothing to render."))
        image = QImage(width, height, QImage.Format.Format_ARGB32_Premultiplied)
        if image.isNull():
            raise RenderError(Utils._(
                "Could not allocate a {}x{} image.").format(width, height))
        image.fill(Qt.GlobalColor.transparent)

        selected = self.selectedItems()
        self._syncing = True
        try:
            for item in selected:
                item.setSelected(False)
            painter = QPainter(image)
            if not painter.isActive():
                raise RenderError(Utils._("Could not paint the image."))
            try:
                painter.setRenderHint(QPainter.RenderHint.Antialiasing)
                painter.setRenderHint(
                    QPainter.RenderHint.SmoothPixmapTransform)
                self.render(painter, QRectF(0, 0, width, height),
                            QRectF(rect.x, rect.y, rect.width, rect.height),
                            Qt.AspectRatioMode.IgnoreAspectRatio)
            finally:
                painter.end()
        finally:
            for item in selected:
                item.setSelected(True)
            self._syncing = False
        return image

    # ------------------------------------------------------------------
    # Building items
    # ------------------------------------------------------------------
    def rebuild(self):
        """Drop every item and recreate them from the document."""
        self._syncing = True
        try:
            self.clear()
            self._items = {}
            self._bg_item = None
        finally:
            self._syncing = False
        self._on_canvas_changed(*self.canvas_size())
        self._sync_background()
        for node in self.document.scene.nodes_bottom_to_top():
            self._on_node_added(node.id)
        self._on_document_selection(self.document.selection.node_id)

    def _make_item(self, node):
        if node.kind == NodeKind.TEXT:
            item = TextItem()
        else:
            item = RasterItem()
            item.setTransformationMode(
                Qt.TransformationMode.SmoothTransformation)
        item.node_id = node.id
        item.setFlag(QGraphicsItem.GraphicsItemFlag.ItemIsSelectable, True)
        item.setFlag(
            QGraphicsItem.GraphicsItemFlag.ItemSendsGeometryChanges, True)
        return item

    def _update_content(self, item, node):
        if node.kind == NodeKind.TEXT:
            c = node.content
            item.setPath(text_path(c))
            item.setBrush(QBrush(QColor(c.fill)))
            if c.stroke_width and c.stroke_width > 0:
                pen = QPen(QColor(c.stroke))
                pen.setWidthF(c.stroke_width)
                pen.setJoinStyle(Qt.PenJoinStyle.RoundJoin)
                item.setPen(pen)
            else:
                item.setPen(QPen(Qt.PenStyle.NoPen))
            return
        image = node.raster()
        if node.kind == NodeKind.IMAGE:
            image = apply_filters(image, node.effects.filters)
        if image is None or image.isNull():
            item.setPixmap(QPixmap())
        else:
            item.setPixmap(QPixmap.fromImage(image))

    def _update_state(self, item, node):
        t = node.transform
        self._syncing = True
        try:
            item.setFlag(QGraphicsItem.GraphicsItemFlag.ItemIsMovable,
                         bool(t.draggable))
            item.setTransform(
                QTransform().rotate(t.rotation).scale(t.scale_x, t.scale_y))
            item.setPos(t.x, t.y)
        finally:
            self._syncing = False
        item.setZValue(node.z_index)
        item.setVisible(node.visible)
        item.setOpacity(node.opacity)

        shadow = node.effects.shadow
        if shadow.is_visible():
            effect = QGraphicsDropShadowEffect()
            color = QColor(shadow.color)
            color.setAlphaF(min(1.0, max(0.0, shadow.opacity)))
            effect.setColor(color)
            effect.setBlurRadius(shadow.blur)
            effect.setOffset(shadow.offset_x, shadow.offset_y)
            item.setGraphicsEffect(effect)
        else:
            item.setGraphicsEffect(None)

    # ------------------------------------------------------------------
    # Document events
    # ------------------------------------------------------------------
    def _on_node_added(self, node_id):
        node = self.document.scene.get(node_id)
        if node is None or node_id in self._items:
            return
        item = self._make_item(node)
        self._update_content(item, node)
        self._update_state(item, node)
        self.addItem(item)
        self._items[node_id] = item

    def _on_node_removed(self, node_id):
        item = self._items.pop(node_id, None)
        if item is not None:
            self._syncing = True
            try:
                self.removeItem(item)
            finally:
                self._syncing = False
        self._sync_order()

    def _on_node_changed(self, node_id):
        node = self.document.scene.get(node_id)
        item = self._items.get(node_id)
        if node is None or item is None:
            return
        self._update_content(item, node)
        self._update_state(item, node)

    def _sync_order(self):
        for node in self.document.scene.nodes_bottom_to_top():
            item = self._items.get(node.id)
            if item is not None:
                item.setZValue(node.z_index)

    def _sync_background(self):
        bg = self.document.scene.background
        if self._bg_item is not None:
            self.removeItem(self._bg_item)
            self._bg_item = None
        if bg is None:
            return
        item = QGraphicsPixmapItem(QPixmap.fromImage(bg.node.content.image))
        item.setTransformationMode(Qt.TransformationMode.SmoothTransformation)
        t = bg.node.transform
        item.setTransform(QTransform().scale(t.scale_x, t.scale_y))
        item.setPos(t.x, t.y)
        item.setZValue(BACKGROUND_Z)
        self.addItem(item)
        self._bg_item = item

    def _on_canvas_changed(self, width, height):
        self.setSceneRect(0, 0, width, height)

    # ------------------------------------------------------------------
    # Selection and dragging
    # ------------------------------------------------------------------
    def _on_document_selection(self, node_id):
        self._syncing = True
        try:
            for nid, item in self._items.items():
                item.setSelected(nid == node_id)
        finally:
            self._syncing = False

    def _on_item_selection(self):
        if self._syncing:
            return
        ids = [item.node_id for item in self.selectedItems()
               if getattr(item, "node_id", None) is not None]
        self.document.selection.select(ids[0] if ids else None)

    def item_moved(self, item):
        if self._syncing:
            return
        pos = item.pos()
        self.document.node_moved(item.node_id, pos.x(), pos.y())


class SheetView(QGraphicsView):
    """QGraphicsView with zoom/pan that draws the canvas page.

    The page is painted in drawBackground(), so it never shows up in
    rasterized exports.
    """

    coords_changed = Signal(float, float)
    delete_requested = Signal()

    def __init__(self, scene, parent=None):
        super().__init__(scene, parent)
        self.setRenderHint(QPainter.RenderHint.Antialiasing)
        self.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform)
        self.setDragMode(QGraphicsView.DragMode.NoDrag)
        self.setTransformationAnchor(
            QGraphicsView.ViewportAnchor.AnchorUnderMouse)
        self.setResizeAnchor(
            QGraphicsView.ViewportAnchor.AnchorViewCenter)
        self.setMouseTracking(True)
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)

        self._panning = False
        self._pan_start = QPointF()

    def drawBackground(self, painter, rect):
        painter.fillRect(rect, COLORS["desk"])
        page = self.sceneRect()
        painter.fillRect(page, COLORS["page"])
        pen = QPen(COLORS["page_border"])
        pen.setCosmetic(True)
        painter.setPen(pen)
        painter.drawRect(page)

    def wheelEvent(self, event: QWheelEvent):
        """Zoom in/out with mouse wheel."""
        if event.angleDelta().y() > 0:
            factor = ZOOM_FACTOR
        else:
            factor = 1.0 / ZOOM_FACTOR
        self.scale(factor, factor)

    def keyPressEvent(self, event: QKeyEvent):
        if event.key() in (Qt.Key.Key_Delete, Qt.Key.Key_Backspace):
            self.delete_requested.emit()
            event.accept()
            return
        super().keyPressEvent(event)

    def mousePressEvent(self, event: QMouseEvent):
        if event.button() == Qt.MouseButton.MiddleButton:
            self._panning = True
            self._pan_start = event.position()
            self.setCursor(Qt.CursorShape.ClosedHandCursor)
            event.accept()
        else:
            super().mousePressEvent(event)

    def mouseReleaseEvent(self, event: QMouseEvent):
        if event.button() == Qt.MouseButton.MiddleButton:
            self._panning = False
            self.setCursor(Qt.CursorShape.ArrowCursor)
            event.accept()
        else:
            super().mouseReleaseEvent(event)

    def mouseMoveEvent(self, event: QMouseEvent):
        if self._panning:
            delta = event.position() - self._pan_start
            self._pan_start = event.position()
            self.horizontalScrollBar().setValue(
                self.horizontalScrollBar().value() - int(delta.x()))
            self.verticalScrollBar().setValue(
                self.verticalScrollBar().value() - int(delta.y()))
            event.accept()
        else:
            scene_pos = self.mapToScene(event.position().toPoint())
            self.coords_changed.emit(scene_pos.x(), scene_pos.y())
            super().mouseMoveEvent(event)

    def fit_to_canvas(self):
        rect = self.sceneRect()
        if rect.isEmpty():
            return
        margin = max(rect.width(), rect.height()) * 0.03
        rect.adjust(-margin, -margin, margin, margin)
        self.fitInView(rect, Qt.AspectRatioMode.KeepAspectRatio)


class CanvasPanel(QWidget):
    """Canvas view with a toolbar for zoom controls."""

    def __init__(self, document, signals, parent=None):
        super().__init__(parent)
        self.document = document
        self.signals = signals

        self.scene = SheetScene(document)
        self.view = SheetView(self.scene)

        toolbar = QToolBar()
        toolbar.setMovable(False)
        toolbar.addAction(Utils._("Fit"), self.view.fit_to_canvas)
        toolbar.addAction(Utils._("1:1"), self.view.resetTransform)
        toolbar.addSeparator()
        self.size_label = QLabel()
        toolbar.addWidget(self.size_label)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.addWidget(toolbar)
        layout.addWidget(self.view)

        self.view.coords_changed.connect(self._on_coords)
        self.view.delete_requested.connect(self.signals.delete_requested.emit)
        self.signals.canvas_changed.connect(self._on_canvas_changed)
        self._on_canvas_changed(*self.scene.canvas_size())

    def _on_coords(self, x, y):
        self.signals.canvas_coords.emit(x, y)

    def _on_canvas_changed(self, width, height):
        self.size_label.setText(f" {width} x {height} px ")
        self.view.fit_to_canvas()
