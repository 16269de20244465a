"""Tests for Document: the editing operations and the events they emit."""

import os
import sys
import unittest

os.environ["QT_QPA_PLATFORM"] = "offscreen"

_root = os.path.join(os.path.dirname(__file__), "..")
if _root not in sys.path:
    sys.path.insert(0, _root)

from PySide6.QtGui import QColor, QImage  # noqa: E402
from PySide6.QtWidgets import QApplication  # noqa: E402

app = QApplication.instance() or QApplication(sys.argv)

from sheetcomposer.DatasetStore import Dataset  # noqa: E402
from sheetcomposer.Document import Document  # noqa: E402
from sheetcomposer.errors import (  # noqa: E402
    ResourceError, SelectionRequired,
)
from sheetcomposer.Exporter import ExportOptions  # noqa: E402
from sheetcomposer.PatternGenerator import PatternConfig  # noqa: E402
from sheetcomposer.SceneGraph import (  # noqa: E402
    DropShadow, ImageFilters, NodeKind, TextContent,
)

EVENTS = ("node_added", "node_removed", "node_changed", "order_changed",
          "canvas_changed", "background_changed", "datasets_changed",
          "selection_changed", "scene_changed")


class FakeChartRenderer:
    """Records render requests instead of drawing."""

    def __init__(self):
        self.requests = []
        self.fail = False

    def render(self, request):
        if self.fail:
            raise ResourceError("chart failed")
        self.requests.append(request)
        image = QImage(8, 8, QImage.Format.Format_ARGB32_Premultiplied)
        image.fill(QColor("#0ea5e9"))
        return image


def image(w=40, h=20):
    img = QImage(w, h, QImage.Format.Format_ARGB32_Premultiplied)
    img.fill(QColor("#336699"))
    return img


class DocumentTestCase(unittest.TestCase):

    def setUp(self):
        self.charts = FakeChartRenderer()
        self.doc = Document(1600, 1200, chart_renderer=self.charts)
        self.events = []
        for name in EVENTS:
            self.doc.bus.on(name, self._recorder(name))

    def _recorder(self, name):
        def record(*args):
            self.events.append((name,) + args)
        return record

    def names(self):
        return [e[0] for e in self.events]


class TestNodes(DocumentTestCase):

    def test_add_text(self):
        node = self.doc.add_text(TextContent("Hello"))
        self.assertEqual(node.kind, NodeKind.TEXT)
        self.assertEqual((node.transform.x, node.transform.y), (120, 120))
        self.assertEqual(self.doc.display_name(node), "Text_1")
        self.assertIs(self.doc.selection.node, node)
        self.assertEqual(self.names(), ["node_added", "scene_changed",
                                        "selection_changed"])

    def test_names_per_kind(self):
        self.doc.add_text(TextContent("a"))
        img = self.doc.add_image(image())
        self.doc.add_text(TextContent("b"))
        self.assertEqual([self.doc.display_name(n) for n in self.doc.layers()],
                         ["Text_2", "Image_1", "Text_1"])
        self.assertEqual((img.transform.x, img.transform.y), (100, 100))

    def test_update_text_requires_text_selection(self):
        with self.assertRaises(SelectionRequired):
            self.doc.update_text(TextContent("x"))
        self.doc.add_image(image())
        with self.assertRaises(SelectionRequired):
            self.doc.update_text(TextContent("x"))

    def test_update_text(self):
        node = self.doc.add_text(TextContent("old"))
        self.events.clear()
        self.doc.update_text(TextContent("new", font_size=20))
        self.assertEqual(node.content.text, "new")
        self.assertEqual(self.events, [("node_changed", node.id),
                                       ("scene_changed",)])

    def test_delete_selected(self):
        node = self.doc.add_text(TextContent("x"))
        self.assertTrue(self.doc.delete_selected())
        self.assertNotIn(node.id, self.doc.scene)
        self.assertIsNone(self.doc.selection.node)
        self.assertIn(("node_removed", node.id), self.events)

    def test_delete_selected_of_kind(self):
        self.doc.add_text(TextContent("x"))
        with self.assertRaises(SelectionRequired):
            self.doc.delete_selected(NodeKind.IMAGE)

    def test_delete_without_selection(self):
        with self.assertRaises(SelectionRequired):
            self.doc.delete_selected()

    def test_ordering_requires_selection(self):
        a = self.doc.add_text(TextContent("a"))
        self.doc.add_text(TextContent("b"))
        self.doc.selection.clear()
        for op in (self.doc.raise_selected, self.doc.lower_selected,
                   self.doc.bring_selected_to_front,
                   self.doc.send_selected_to_back):
            with self.assertRaises(SelectionRequired):
                op()
        self.doc.selection.select(a.id)
        self.assertTrue(self.doc.raise_selected())
        self.assertEqual([n.content.text for n in self.doc.layers()],
                         ["a", "b"])

    def test_remove_stale_id(self):
        self.assertFalse(self.doc.remove(42))

    def test_new_document(self):
        """Everything goes, and the name counters restart."""
        self.doc.add_text(TextContent("a"))
        self.doc.add_text(TextContent("b"))
        self.doc.set_background(image())
        self.doc.new_document()
        self.assertEqual(len(self.doc.scene), 0)
        self.assertIsNone(self.doc.scene.background)
        self.assertIsNone(self.doc.selection.node)
        self.assertEqual(self.names().count("node_removed"), 2)
        node = self.doc.add_text(TextContent("c"))
        self.assertEqual(self.doc.display_name(node), "Text_1")

    def test_visibility(self):
        node = self.doc.add_text(TextContent("x"))
        self.assertTrue(self.doc.toggle_visible(node.id))
        self.assertFalse(node.visible)
        self.assertTrue(self.doc.set_visible(node.id, True))
        self.assertTrue(node.visible)
        self.assertFalse(self.doc.toggle_visible(999))

    def test_reorder_through_zorder(self):
        a = self.doc.add_text(TextContent("a"))
        b = self.doc.add_text(TextContent("b"))
        self.doc.zorder.reorder(0, 1)
        self.assertEqual(self.doc.layers(), [a, b])
        self.assertIn("order_changed", self.names())


class TestImages(DocumentTestCase):

    def test_null_image(self):
        with self.assertRaises(ResourceError):
            self.doc.add_image(QImage())

    def test_missing_file(self):
        with self.assertRaises(ResourceError):
            self.doc.add_image_from_file("/nonexistent/picture.png")

    def test_undecodable_bytes(self):
        with self.assertRaises(ResourceError):
            self.doc.add_image_from_bytes(b"definitely not an image")

    def test_opacity_clamped(self):
        node = self.doc.add_image(image())
        self.doc.set_opacity(node.id, 3)
        self.assertEqual(node.opacity, 1.0)
        self.doc.set_opacity(node.id, -1)
        self.assertEqual(node.opacity, 0.0)
        self.assertFalse(self.doc.set_opacity(999, 0.5))

    def test_set_transform(self):
        node = self.doc.add_image(image())
        self.doc.set_transform(node.id, x=5, y=6, scale=2, rotation=370)
        t = node.transform
        self.assertEqual((t.x, t.y, t.scale_x, t.scale_y, t.rotation),
                         (5, 6, 2, 2, 10))
        self.doc.set_transform(node.id, scale=0)
        self.assertEqual(t.scale_x, 2)

    def test_node_moved_is_silent(self):
        node = self.doc.add_image(image())
        self.events.clear()
        self.assertTrue(self.doc.node_moved(node.id, 33, 44))
        self.assertEqual((node.transform.x, node.transform.y), (33, 44))
        self.assertEqual(self.events, [])


class TestBackground(DocumentTestCase):

    def test_contain(self):
        node = self.doc.set_background(image(400, 200), "contain")
        t = node.transform
        self.assertEqual((t.x, t.y, t.scale_x, t.scale_y), (0, 200, 4, 4))
        self.assertFalse(t.draggable)
        self.assertEqual(len(self.doc.scene), 0)

    def test_cover(self):
        node = self.doc.set_background(image(400, 200), "cover")
        t = node.transform
        self.assertEqual((t.x, t.y, t.scale_x), (-400, 0, 6))

    def test_change_fit(self):
        node = self.doc.set_background(image(400, 200), "contain")
        self.assertTrue(self.doc.set_background_fit("cover"))
        self.assertEqual(node.transform.scale_x, 6)
        self.assertFalse(self.doc.set_background_fit("stretch"))

    def test_unknown_fit_uses_default(self):
        self.doc.set_background(image(), "stretch")
        self.assertEqual(self.doc.scene.background.fit, "contain")

    def test_refit_on_resize(self):
        node = self.doc.set_background(image(400, 200), "contain")
        self.events.clear()
        self.doc.resize_canvas(800, 800)
        self.assertEqual((node.transform.y, node.transform.scale_x),
                         (200, 2))
        self.assertEqual(self.names(), ["canvas_changed",
                                        "background_changed",
                                        "scene_changed"])

    def test_clear(self):
        self.assertFalse(self.doc.clear_background())
        self.doc.set_background(image())
        self.assertTrue(self.doc.clear_background())
        self.assertIsNone(self.doc.scene.background)

    def test_null_background(self):
        with self.assertRaises(ResourceError):
            self.doc.set_background(QImage())


class TestCanvas(DocumentTestCase):

    def test_resize(self):
        self.doc.resize_canvas(800, 600)
        self.assertEqual((self.doc.scene.width, self.doc.scene.height),
                         (800, 600))
        self.assertEqual(self.events[0], ("canvas_changed", 800, 600))

    def test_resize_with_bad_values(self):
        self.doc.resize_canvas("abc", 0)
        self.assertEqual((self.doc.scene.width, self.doc.scene.height),
                         (1600, 1200))


class TestCharts(DocumentTestCase):

    def add_chart(self):
        return self.doc.add_chart(["A", "B"], 0, 10, Dataset("d", [1, 2]))

    def test_add_chart(self):
        node = self.add_chart()
        self.assertEqual(node.kind, NodeKind.CHART)
        self.assertEqual(self.doc.display_name(node), "Chart_1")
        self.assertEqual((node.transform.x, node.transform.y), (200, 200))
        self.assertFalse(node.content.image.isNull())
        self.assertEqual(self.charts.requests[0]["labels"], ["A", "B", "#3"])
        self.assertIn(("datasets_changed", node.id), self.events)

    def test_chart_operations_require_chart(self):
        self.doc.add_text(TextContent("x"))
        with self.assertRaises(SelectionRequired):
            self.doc.add_dataset(Dataset("e"))

    def test_add_dataset(self):
        node = self.add_chart()
        self.doc.add_dataset(Dataset("e", [5]))
        self.assertEqual([d.series for d in node.content.store.datasets],
                         [[1.0, 2.0], [5.0, 0.0]])
        self.assertEqual(len(self.charts.requests), 2)

    def test_update_chart(self):
        node = self.add_chart()
        self.doc.update_chart(["A"], 0, 5)
        self.assertEqual(node.content.store.datasets[0].series, [1.0])
        self.assertEqual(self.charts.requests[-1]["max"], 5.0)

    def test_toggle_dataset(self):
        self.add_chart()
        self.assertTrue(self.doc.toggle_dataset(0))
        self.assertEqual(self.charts.requests[-1]["datasets"], [])
        self.assertFalse(self.doc.toggle_dataset(3))

    def test_remove_picked_dataset(self):
        node = self.add_chart()
        self.doc.add_dataset(Dataset("e"))
        with self.assertRaises(SelectionRequired):
            self.doc.remove_dataset()
        self.assertEqual(len(node.content.store), 2)
        self.doc.select_dataset(0)
        self.assertTrue(self.doc.remove_dataset())
        self.assertEqual([d.label for d in node.content.store.datasets],
                         ["e"])
        self.assertIsNone(node.content.store.selected_index)

    def test_few_labels_report_placeholders(self):
        messages = []
        self.doc.bus.on("status_message", messages.append)
        self.add_chart()
        self.assertEqual(len(messages), 1)
        self.doc.add_chart(["A", "B", "C"], 0, 10, Dataset("d"))
        self.assertEqual(len(messages), 1)

    def test_failed_render_keeps_chart(self):
        node = self.add_chart()
        image = node.content.image
        self.charts.fail = True
        with self.assertRaises(ResourceError):
            self.doc.update_chart(["W", "X", "Y", "Z"], 0, 5)
        with self.assertRaises(ResourceError):
            self.doc.add_dataset(Dataset("e"))
        with self.assertRaises(ResourceError):
            self.doc.toggle_dataset(0)
        store = node.content.store
        self.assertEqual(store.labels, ["A", "B"])
        self.assertEqual([d.series for d in store.datasets], [[1.0, 2.0]])
        self.assertTrue(store.datasets[0].visible)
        self.assertIs(node.content.image, image)

    def test_real_renderer(self):
        doc = Document(800, 600)
        node = doc.add_chart(["A", "B", "C"], 0, 100,
                             Dataset("d", [10, 20, 30]))
        self.assertEqual(node.content.image.width(), 800)


class TestPatterns(DocumentTestCase):

    def test_add_pattern_copies_config(self):
        config = PatternConfig(seed=3, canvas_size=200, opacity=0.5)
        node = self.doc.add_pattern(config)
        config.seed = 4
        self.assertEqual(node.content.config.seed, 3)
        self.assertEqual(node.opacity, 0.5)
        self.assertEqual(node.content.image.width(), 200)
        self.assertEqual(self.doc.display_name(node), "Pattern_1")

    def test_update_pattern(self):
        node = self.doc.add_pattern(PatternConfig(canvas_size=200))
        self.doc.update_pattern(PatternConfig(canvas_size=300, opacity=0.8))
        self.assertEqual(node.content.image.width(), 300)
        self.assertEqual(node.opacity, 0.8)

    def test_update_pattern_requires_pattern(self):
        with self.assertRaises(SelectionRequired):
            self.doc.update_pattern(PatternConfig())


class TestEffects(DocumentTestCase):

    SHADOW = DropShadow(True, "#000000", blur=12, opacity=0.5,
                        offset_x=6, offset_y=6)

    def test_filters_only_on_images(self):
        node = self.doc.add_text(TextContent("x"))
        self.doc.apply_effects(self.SHADOW, ImageFilters(hsl_enabled=True))
        self.assertTrue(node.effects.shadow.is_visible())
        self.assertTrue(node.effects.filters.is_identity())

    def test_image_filters(self):
        node = self.doc.add_image(image())
        self.doc.apply_effects(self.SHADOW, ImageFilters(hsl_enabled=True,
                                                         hue=90))
        self.assertEqual(node.effects.filters.hue, 90)

    def test_disabled_shadow_keeps_color_only(self):
        node = self.doc.add_image(image())
        self.doc.apply_effects(DropShadow(False, "#ff0000", blur=9,
                                          opacity=1))
        shadow = node.effects.shadow
        self.assertFalse(shadow.is_visible())
        self.assertEqual((shadow.color, shadow.blur), ("#ff0000", 0.0))

    def test_reset(self):
        node = self.doc.add_image(image())
        self.doc.apply_effects(self.SHADOW)
        self.doc.reset_effects()
        self.assertFalse(node.effects.shadow.enabled)

    def test_requires_selection(self):
        with self.assertRaises(SelectionRequired):
            self.doc.apply_effects(self.SHADOW)


class TestExportWithoutEngine(DocumentTestCase):

    def test_export_needs_engine(self):
        with self.assertRaises(ResourceError):
            self.doc.export(ExportOptions())


if __name__ == "__main__":
    unittest.main()
