# Document - One open sheet and every operation on it
#
# Owns the Scene, the naming registry, the selection, the z-order
# manager and the event bus, and exposes the editing operations the UI
# calls.  Each mutation emits events on the bus so the rendering engine
# and the panels can follow:
#
#   "node_added"        (node_id)
#   "node_removed"      (node_id)
#   "node_changed"      (node_id)    content, effects or transform
#   "order_changed"     ()
#   "canvas_changed"    (width, height)
#   "background_changed"()
#   "datasets_changed"  (node_id)
#   "selection_changed" (node_id or None)
#   "scene_changed"     ()           after any of the above
#   "status_message"    (message)
#
# Operations that need a selected node raise SelectionRequired;
# operations on stale ids quietly return False.

import logging

from PySide6.QtGui import QImage

from sheetcomposer import utils_core as Utils
from sheetcomposer.BoundingBox import BoundingBoxResolver
from sheetcomposer.ChartRenderer import ChartRenderer
from sheetcomposer.DatasetStore import MIN_LABELS, ChartConfig, DatasetStore
from sheetcomposer.errors import ResourceError, SelectionRequired
from sheetcomposer.EventBus import EventBus
from sheetcomposer.Exporter import Exporter
from sheetcomposer.Geometry import FIT_CONTAIN, FIT_POLICIES, fit_rect
from sheetcomposer.NameRegistry import NameRegistry
from sheetcomposer.PatternGenerator import render_pattern
from sheetcomposer.SceneGraph import (
    ChartContent, DropShadow, Effects, ImageContent, ImageFilters,
    NodeKind, PatternContent, Scene, TextContent, Transform, VisualNode,
)
from sheetcomposer.Selection import SelectionController
from sheetcomposer.ZOrder import ZOrderManager

DEFAULT_WIDTH = 1600
DEFAULT_HEIGHT = 1200

# Where new nodes land, per kind
DROP_POSITION = {
    NodeKind.TEXT: (120, 120),
    NodeKind.IMAGE: (100, 100),
    NodeKind.CHART: (200, 200),
    NodeKind.PATTERN: (120, 120),
}


def load_image(path):
    image = QImage(path)
    if image.isNull():
        raise ResourceError(Utils._(
            "The image '{}' could not be loaded.").format(path))
    return image


def decode_image(data):
    image = QImage.fromData(data)
    if image.isNull():
        raise ResourceError(Utils._("The image data could not be decoded."))
    return image


class Document:
    """An open sheet: scene, selection, naming and editing operations."""

    def __init__(self, width=None, height=None, chart_renderer=None):
        self.bus = EventBus()
        self.scene = Scene(
            width or Utils.getInt("Canvas", "width", DEFAULT_WIDTH),
            height or Utils.getInt("Canvas", "height", DEFAULT_HEIGHT))
        self.names = NameRegistry()
        self.selection = SelectionController(self.scene, self.bus)
        self.zorder = ZOrderManager(self.scene, self.bus)
        self.chart_renderer = chart_renderer if chart_renderer is not None \
            else ChartRenderer()
        self.engine = None
        self.resolver = None
        self.exporter = None

    def attach_engine(self, engine):
        """Connect the rendering engine used for bounds and export."""
        self.engine = engine
        self.resolver = BoundingBoxResolver(self.scene, engine)
        self.exporter = Exporter(self.resolver, engine, bus=self.bus)

    # ------------------------------------------------------------------
    # Document lifecycle
    # ------------------------------------------------------------------
    def new_document(self):
        """Empty the sheet and restart the name counters."""
        removed = [n.id for n in self.scene.nodes_bottom_to_top()]
        self.selection.clear()
        self.scene.clear()
        self.names.reset()
        for node_id in removed:
            self.bus.emit("node_removed", node_id)
        self.bus.emit("background_changed")
        self.bus.emit("scene_changed")

    def resize_canvas(self, width, height):
        self.scene.width = Utils.toInt(width, DEFAULT_WIDTH)
        self.scene.height = Utils.toInt(height, DEFAULT_HEIGHT)
        self.fit_background()
        self.bus.emit("canvas_changed", self.scene.width, self.scene.height)
        if self.scene.background is not None:
            self.bus.emit("background_changed")
        self.bus.emit("scene_changed")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def layers(self):
        """Nodes in layer-list order, topmost first."""
        return self.scene.display_order_top_to_bottom()

    def display_name(self, node):
        return self.names.display_name(node)

    def node(self, node_id):
        return self.scene.get(node_id)

    def _require(self, *kinds, what=None):
        node = self.selection.selected_of_kind(*kinds)
        if node is None:
            raise SelectionRequired(what or Utils._("Select a node first."))
        return node

    def _changed(self, node):
        self.bus.emit("node_changed", node.id)
        self.bus.emit("scene_changed")

    # ------------------------------------------------------------------
    # Adding and removing nodes
    # ------------------------------------------------------------------
    def _add(self, node):
        x, y = DROP_POSITION[node.kind]
        node.transform.x = x
        node.transform.y = y
        self.scene.add(node)
        self.names.display_name(node)
        logging.debug("Added %s as %s", node, self.names.display_name(node))
        self.bus.emit("node_added", node.id)
        self.bus.emit("scene_changed")
        self.selection.select(node.id)
        return node

    def remove(self, node_id):
        node = self.scene.remove(node_id)
        if node is None:
            return False
        self.names.forget(node_id)
        self.bus.emit("node_removed", node_id)
        self.bus.emit("scene_changed")
        return True

    def delete_selected(self, *kinds):
        """Delete the selected node, optionally only if of one of kinds."""
        node = self._require(*(kinds or tuple(NodeKind)))
        return self.remove(node.id)

    def set_visible(self, node_id, visible):
        if not self.scene.set_visible(node_id, visible):
            return False
        self._changed(self.scene.get(node_id))
        return True

    def toggle_visible(self, node_id):
        node = self.scene.get(node_id)
        if node is None:
            return False
        return self.set_visible(node_id, not node.visible)

    # ------------------------------------------------------------------
    # Stacking order of the selected node
    # ------------------------------------------------------------------
    def raise_selected(self):
        return self.zorder.raise_node(self._require(*tuple(NodeKind)).id)

    def lower_selected(self):
        return self.zorder.lower_node(self._require(*tuple(NodeKind)).id)

    def bring_selected_to_front(self):
        return self.zorder.bring_to_front(
            self._require(*tuple(NodeKind)).id)

    def send_selected_to_back(self):
        return self.zorder.send_to_back(self._require(*tuple(NodeKind)).id)

    # ------------------------------------------------------------------
    # Text
    # ------------------------------------------------------------------
    def add_text(self, content):
        return self._add(VisualNode(NodeKind.TEXT, content))

    def update_text(self, content):
        node = self._require(NodeKind.TEXT,
                             what=Utils._("Select a text node."))
        node.content = content
        self._changed(node)
        return node

    # ------------------------------------------------------------------
    # Images
    # ------------------------------------------------------------------
    def add_image(self, image, source=None):
        if image is None or image.isNull():
            raise ResourceError(Utils._("The image is empty."))
        return self._add(VisualNode(NodeKind.IMAGE,
                                    ImageContent(image, source)))

    def add_image_from_file(self, path):
        return self.add_image(load_image(path), path)

    def add_image_from_bytes(self, data):
        return self.add_image(decode_image(data))

    def set_opacity(self, node_id, opacity):
        node = self.scene.get(node_id)
        if node is None:
            return False
        node.opacity = min(1.0, max(0.0, float(opacity)))
        self._changed(node)
        return True

    # ------------------------------------------------------------------
    # Transform
    # ------------------------------------------------------------------
    def set_transform(self, node_id, x=None, y=None, scale=None,
                      rotation=None):
        """Update any of position, uniform scale and rotation."""
        node = self.scene.get(node_id)
        if node is None:
            return False
        t = node.transform
        if x is not None:
            t.x = float(x)
        if y is not None:
            t.y = float(y)
        if scale is not None and scale > 0:
            t.scale_x = t.scale_y = float(scale)
        if rotation is not None:
            t.rotation = float(rotation) % 360
        self._changed(node)
        return True

    def node_moved(self, node_id, x, y):
        """Record a position change made interactively in the view.

        The engine already shows the new position, so only the model
        is updated and no redraw events are sent.
        """
        node = self.scene.get(node_id)
        if node is None:
            return False
        node.transform.x = x
        node.transform.y = y
        return True

    # ------------------------------------------------------------------
    # Background
    # ------------------------------------------------------------------
    def set_background(self, image, fit=None, source=None):
        if image is None or image.isNull():
            raise ResourceError(Utils._("The background image is empty."))
        if fit not in FIT_POLICIES:
            fit = Utils.getStr("Canvas", "bgfit", FIT_CONTAIN)
        node = VisualNode(NodeKind.IMAGE, ImageContent(image, source),
                          Transform(draggable=False))
        self.scene.set_background(node, fit)
        self.fit_background()
        self.bus.emit("background_changed")
        self.bus.emit("scene_changed")
        return node

    def set_background_from_file(self, path, fit=None):
        return self.set_background(load_image(path), fit, path)

    def set_background_fit(self, fit):
        bg = self.scene.background
        if bg is None or fit not in FIT_POLICIES:
            return False
        bg.fit = fit
        self.fit_background()
        self.bus.emit("background_changed")
        self.bus.emit("scene_changed")
        return True

    def clear_background(self):
        if not self.scene.clear_background():
            return False
        self.bus.emit("background_changed")
        self.bus.emit("scene_changed")
        return True

    def fit_background(self):
        """Place the background centered with its contain/cover scale."""
        bg = self.scene.background
        if bg is None:
            return
        image = bg.node.content.image
        rect = fit_rect(image.width(), image.height(),
                        self.scene.width, self.scene.height, bg.fit)
        if rect is None:
            return
        t = bg.node.transform
        t.x, t.y = rect.x, rect.y
        t.scale_x = rect.width / image.width()
        t.scale_y = rect.height / image.height()

    # ------------------------------------------------------------------
    # Charts
    # ------------------------------------------------------------------
    def _render_chart(self, store):
        if self.chart_renderer is None:
            raise ResourceError(Utils._("Charting is not available."))
        return self.chart_renderer.render(store.render_request())

    def add_chart(self, labels, value_min, value_max, dataset):
        """Create a chart node with one dataset.

        Fewer than three labels are accepted: the chart is drawn with
        placeholder axes appended and a status message says so.
        """
        store = DatasetStore(ChartConfig(labels, value_min, value_max))
        store.add_dataset(dataset)
        image = self._render_chart(store)
        node = self._add(VisualNode(NodeKind.CHART,
                                    ChartContent(store, image)))
        self.bus.emit("datasets_changed", node.id)
        if len(store.labels) < MIN_LABELS:
            self.bus.emit("status_message", Utils._(
                "A radar chart needs at least {} labels; placeholder "
                "axes were added.").format(MIN_LABELS))
        return node

    def selected_chart(self):
        return self._require(NodeKind.CHART,
                             what=Utils._("Select a chart."))

    def _commit_chart(self, node, store):
        # Render first: a failed render leaves the node untouched
        image = self._render_chart(store)
        node.content.store = store
        node.content.image = image
        self.bus.emit("datasets_changed", node.id)
        self._changed(node)

    def add_dataset(self, dataset):
        node = self.selected_chart()
        store = node.content.store.copy()
        store.add_dataset(dataset)
        self._commit_chart(node, store)
        return node

    def update_chart(self, labels, value_min, value_max):
        node = self.selected_chart()
        store = node.content.store.copy()
        store.update_all(labels, value_min, value_max)
        self._commit_chart(node, store)
        return node

    def toggle_dataset(self, index):
        node = self.selected_chart()
        store = node.content.store.copy()
        if not store.toggle_visible(index):
            return False
        self._commit_chart(node, store)
        return True

    def select_dataset(self, index):
        node = self.selected_chart()
        node.content.store.select(index)
        self.bus.emit("datasets_changed", node.id)

    def remove_dataset(self, index=None):
        """Remove dataset index, or the picked one when index is None."""
        node = self.selected_chart()
        store = node.content.store.copy()
        if index is None:
            if store.selected_index is None:
                raise SelectionRequired(
                    Utils._("Select a dataset in the list."))
            removed = store.remove_selected()
        else:
            removed = store.remove_dataset(index)
        if not removed:
            return False
        self._commit_chart(node, store)
        return True

    # ------------------------------------------------------------------
    # Patterns
    # ------------------------------------------------------------------
    def add_pattern(self, config):
        config = config.copy()
        node = VisualNode(NodeKind.PATTERN,
                          PatternContent(config, render_pattern(config)),
                          opacity=config.opacity)
        return self._add(node)

    def update_pattern(self, config):
        node = self._require(NodeKind.PATTERN,
                             what=Utils._("Select a pattern."))
        config = config.copy()
        node.content = PatternContent(config, render_pattern(config))
        node.opacity = config.opacity
        self._changed(node)
        return node

    # ------------------------------------------------------------------
    # Effects
    # ------------------------------------------------------------------
    def apply_effects(self, shadow, filters=None):
        """Apply a drop shadow to the selected node, and filters to images.

        Filters are ignored for non-image nodes.
        """
        node = self._require(*tuple(NodeKind),
                             what=Utils._("Select a node first."))
        if not shadow.enabled:
            shadow = DropShadow(False, shadow.color)
        if node.kind != NodeKind.IMAGE or filters is None:
            filters = ImageFilters()
        node.effects = Effects(shadow, filters)
        self._changed(node)
        return node

    def reset_effects(self):
        node = self._require(*tuple(NodeKind),
                             what=Utils._("Select a node first."))
        node.effects = Effects()
        self._changed(node)
        return node

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------
    def export(self, options):
        if self.exporter is None:
            raise ResourceError(Utils._("No rendering engine attached."))
        return self.exporter.export(options)
