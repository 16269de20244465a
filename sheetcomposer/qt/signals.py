# Qt signal definitions for SheetComposer
#
# Centralized signal hub for the widgets.  Document events are
# published on the document's EventBus; bind() re-emits them here as
# Qt signals so panels can connect to them like any other signal.

from PySide6.QtCore import QObject, Signal


class AppSignals(QObject):
    """Central signal hub for the application."""

    # Document events (mirrored from the EventBus)
    scene_changed = Signal()
    node_added = Signal(int)
    node_removed = Signal(int)
    node_changed = Signal(int)
    order_changed = Signal()
    selection_changed = Signal(object)     # node id or None
    datasets_changed = Signal(int)         # chart node id
    canvas_changed = Signal(int, int)      # width, height
    background_changed = Signal()
    export_finished = Signal(object)       # path or None

    # Canvas
    delete_requested = Signal()
    canvas_coords = Signal(float, float)

    # Status bar
    status_message = Signal(str)

    # Events forwarded by bind(): bus name -> signal attribute
    BUS_EVENTS = (
        "scene_changed", "node_added", "node_removed", "node_changed",
        "order_changed", "selection_changed", "datasets_changed",
        "canvas_changed", "background_changed", "export_finished",
        "status_message",
    )

    def bind(self, bus):
        """Forward the document bus events to the matching signals."""
        for name in self.BUS_EVENTS:
            bus.on(name, getattr(self, name).emit)
