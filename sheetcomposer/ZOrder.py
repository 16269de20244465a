# ZOrder - Layer reordering on a Scene
#
# Every change of stacking order goes through reorder(): take the
# top-to-bottom display list, move one entry, reverse it and hand out
# z-indices 0..n-1 again.  Reassigning the whole list keeps the order
# dense; raise/lower and front/back are expressed as reorders too.


def move_item(items, src, dst):
    """Return a copy of items with the element at src reinserted at dst."""
    result = list(items)
    moved = result.pop(src)
    result.insert(dst, moved)
    return result


class ZOrderManager:
    """Reindexing operations on a Scene's z-order."""

    def __init__(self, scene, bus=None):
        self._scene = scene
        self._bus = bus

    def reorder(self, src, dst):
        """Move display position src to display position dst.

        Positions count from the top of the layer list (0 = topmost).

        Returns:
            True if the order changed; False for out-of-range or
            equal positions.
        """
        display = self._scene.display_order_top_to_bottom()
        n = len(display)
        if src == dst or not (0 <= src < n) or not (0 <= dst < n):
            return False
        display = move_item(display, src, dst)
        self._scene.assign_order(reversed(display))
        if self._bus is not None:
            self._bus.emit("order_changed")
            self._bus.emit("scene_changed")
        return True

    def display_index(self, node_id):
        """Top-to-bottom position of a node, or None if unknown."""
        for index, node in enumerate(
                self._scene.display_order_top_to_bottom()):
            if node.id == node_id:
                return index
        return None

    def raise_node(self, node_id):
        """Move one step towards the top."""
        index = self.display_index(node_id)
        if index is None:
            return False
        return self.reorder(index, index - 1)

    def lower_node(self, node_id):
        """Move one step towards the bottom."""
        index = self.display_index(node_id)
        if index is None:
            return False
        return self.reorder(index, index + 1)

    def bring_to_front(self, node_id):
        index = self.display_index(node_id)
        if index is None:
            return False
        return self.reorder(index, 0)

    def send_to_back(self, node_id):
        index = self.display_index(node_id)
        if index is None:
            return False
        return self.reorder(index, len(self._scene) - 1)
