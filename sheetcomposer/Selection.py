# Selection - the single active node
#
# The controller only remembers the selected node's id and resolves it
# through the Scene on every access, so it never keeps a deleted node
# alive.  It listens for "node_removed" and clears itself when its
# target goes away.


class SelectionController:
    """Tracks at most one selected node of a Scene."""

    def __init__(self, scene, bus):
        self._scene = scene
        self._bus = bus
        self._node_id = None
        bus.on("node_removed", self._on_node_removed)

    @property
    def node_id(self):
        return self.node.id if self.node is not None else None

    @property
    def node(self):
        if self._node_id is None:
            return None
        node = self._scene.get(self._node_id)
        if node is None:
            self._node_id = None
        return node

    def select(self, node_id):
        """Select a node by id; None or an unknown id clears."""
        if node_id is not None and node_id not in self._scene:
            node_id = None
        if node_id == self._node_id:
            return
        self._node_id = node_id
        self._bus.emit("selection_changed", node_id)

    def clear(self):
        self.select(None)

    def selected_of_kind(self, *kinds):
        """Return the selected node if its kind is one of kinds."""
        node = self.node
        if node is not None and node.kind in kinds:
            return node
        return None

    def _on_node_removed(self, node_id):
        if node_id == self._node_id:
            self.clear()
