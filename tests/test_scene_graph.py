"""Tests for the scene model: Scene, NameRegistry, SelectionController."""

import os
import sys
import unittest

_root = os.path.join(os.path.dirname(__file__), "..")
if _root not in sys.path:
    sys.path.insert(0, _root)

from sheetcomposer.EventBus import EventBus  # noqa: E402
from sheetcomposer.NameRegistry import NameRegistry  # noqa: E402
from sheetcomposer.SceneGraph import (  # noqa: E402
    ImageContent, NodeKind, Scene, TextContent, VisualNode,
)
from sheetcomposer.Selection import SelectionController  # noqa: E402


def text_node(text="Hi"):
    return VisualNode(NodeKind.TEXT, TextContent(text))


def image_node():
    return VisualNode(NodeKind.IMAGE, ImageContent(None))


class TestScene(unittest.TestCase):

    def setUp(self):
        self.scene = Scene()

    def test_add_assigns_ids_and_dense_z(self):
        """Nodes are appended on top with z = 0..n-1."""
        nodes = [text_node() for _ in range(3)]
        ids = [self.scene.add(n) for n in nodes]
        self.assertEqual(len(set(ids)), 3)
        self.assertEqual([n.z_index for n in nodes], [0, 1, 2])

    def test_remove_redensifies(self):
        """Removing a middle node closes the gap in the z-order."""
        a, b, c = text_node("a"), text_node("b"), text_node("c")
        for n in (a, b, c):
            self.scene.add(n)
        removed = self.scene.remove(b.id)
        self.assertIs(removed, b)
        self.assertEqual((a.z_index, c.z_index), (0, 1))
        self.assertNotIn(b.id, self.scene)

    def test_remove_unknown_is_noop(self):
        self.scene.add(text_node())
        self.assertIsNone(self.scene.remove(999))
        self.assertEqual(len(self.scene), 1)

    def test_display_order_is_topmost_first(self):
        a, b = text_node("a"), text_node("b")
        self.scene.add(a)
        self.scene.add(b)
        self.assertEqual(self.scene.display_order_top_to_bottom(), [b, a])
        self.assertEqual(self.scene.nodes_bottom_to_top(), [a, b])

    def test_set_visible(self):
        n = text_node()
        self.scene.add(n)
        self.assertTrue(self.scene.set_visible(n.id, False))
        self.assertFalse(n.visible)
        self.assertFalse(self.scene.set_visible(12345, True))

    def test_background_outside_ordering(self):
        """The background keeps z = -1 and is not counted as a layer."""
        self.scene.add(text_node())
        bg = image_node()
        self.scene.set_background(bg)
        self.assertEqual(bg.z_index, -1)
        self.assertFalse(bg.transform.draggable)
        self.assertEqual(len(self.scene), 1)
        self.assertIs(next(iter(self.scene.all_nodes())), bg)

    def test_background_replacement_keeps_id(self):
        first = image_node()
        self.scene.set_background(first)
        second = image_node()
        self.scene.set_background(second)
        self.assertEqual(first.id, second.id)
        self.assertIs(self.scene.background.node, second)

    def test_clear_background(self):
        self.assertFalse(self.scene.clear_background())
        self.scene.set_background(image_node())
        self.assertTrue(self.scene.clear_background())
        self.assertIsNone(self.scene.background)

    def test_text_lines(self):
        self.assertEqual(TextContent("a\nb").lines(), ["a", "b"])


class TestNameRegistry(unittest.TestCase):

    def setUp(self):
        self.scene = Scene()
        self.names = NameRegistry()

    def test_per_kind_counters(self):
        t1, t2, i1 = text_node(), text_node(), image_node()
        for n in (t1, i1, t2):
            self.scene.add(n)
        self.assertEqual(self.names.display_name(t1), "Text_1")
        self.assertEqual(self.names.display_name(i1), "Image_1")
        self.assertEqual(self.names.display_name(t2), "Text_2")

    def test_name_is_stable(self):
        t = text_node()
        self.scene.add(t)
        self.assertEqual(self.names.display_name(t),
                         self.names.display_name(t))

    def test_deleted_names_are_not_reused(self):
        """Counters never go back within a document."""
        t1 = text_node()
        self.scene.add(t1)
        self.names.display_name(t1)
        self.scene.remove(t1.id)
        self.names.forget(t1.id)
        t2 = text_node()
        self.scene.add(t2)
        self.assertEqual(self.names.display_name(t2), "Text_2")

    def test_reset_restarts_counters(self):
        t1 = text_node()
        self.scene.add(t1)
        self.names.display_name(t1)
        self.names.reset()
        t2 = text_node()
        self.scene.add(t2)
        self.assertEqual(self.names.display_name(t2), "Text_1")


class TestSelection(unittest.TestCase):

    def setUp(self):
        self.bus = EventBus()
        self.scene = Scene()
        self.selection = SelectionController(self.scene, self.bus)
        self.events = []
        self.bus.on("selection_changed", self.events.append)

    def test_select_and_clear(self):
        n = text_node()
        self.scene.add(n)
        self.selection.select(n.id)
        self.assertIs(self.selection.node, n)
        self.selection.clear()
        self.assertIsNone(self.selection.node)
        self.assertEqual(self.events, [n.id, None])

    def test_select_same_node_emits_once(self):
        n = text_node()
        self.scene.add(n)
        self.selection.select(n.id)
        self.selection.select(n.id)
        self.assertEqual(self.events, [n.id])

    def test_unknown_id_clears(self):
        self.selection.select(42)
        self.assertIsNone(self.selection.node_id)
        self.assertEqual(self.events, [])

    def test_cleared_when_node_removed(self):
        """A node_removed event for the selected node clears the selection."""
        n = text_node()
        self.scene.add(n)
        self.selection.select(n.id)
        self.scene.remove(n.id)
        self.bus.emit("node_removed", n.id)
        self.assertIsNone(self.selection.node_id)
        self.assertEqual(self.events, [n.id, None])

    def test_stale_reference_resolves_to_none(self):
        """Removing the node without an event still never yields it."""
        n = text_node()
        self.scene.add(n)
        self.selection.select(n.id)
        self.scene.remove(n.id)
        self.assertIsNone(self.selection.node)

    def test_selected_of_kind(self):
        n = text_node()
        self.scene.add(n)
        self.selection.select(n.id)
        self.assertIs(self.selection.selected_of_kind(NodeKind.TEXT), n)
        self.assertIsNone(self.selection.selected_of_kind(NodeKind.CHART))


if __name__ == "__main__":
    unittest.main()
