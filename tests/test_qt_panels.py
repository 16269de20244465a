"""Tests for the Qt widgets: layer list, signal hub, property forms."""

import os
import sys
import tempfile
import unittest
from unittest import mock

# Offscreen rendering, must be set before QApplication import
os.environ["QT_QPA_PLATFORM"] = "offscreen"

_root = os.path.join(os.path.dirname(__file__), "..")
if _root not in sys.path:
    sys.path.insert(0, _root)

from PySide6.QtCore import Qt, QItemSelectionModel, QModelIndex  # noqa: E402
from PySide6.QtGui import QColor, QImage  # noqa: E402
from PySide6.QtTest import QTest  # noqa: E402
from PySide6.QtWidgets import QApplication  # noqa: E402

# Single QApplication for all tests
app = QApplication.instance() or QApplication(sys.argv)

from sheetcomposer.DatasetStore import ChartConfig, Dataset  # noqa: E402
from sheetcomposer.Document import Document  # noqa: E402
from sheetcomposer.errors import SelectionRequired  # noqa: E402
from sheetcomposer.Exporter import default_export_directory  # noqa: E402
from sheetcomposer.PatternGenerator import PatternConfig  # noqa: E402
from sheetcomposer.SceneGraph import (  # noqa: E402
    DropShadow, Effects, ImageFilters, TextContent,
)
from sheetcomposer.qt.canvas_widget import SheetScene  # noqa: E402
from sheetcomposer.qt.forms import (  # noqa: E402
    CanvasForm, ChartForm, ColorButton, EffectsForm, ExportForm,
    PatternForm, TextForm, escape_text, run_action, unescape_text,
)
from sheetcomposer.qt.layer_model import (  # noqa: E402
    LayerListModel, drop_target,
)
from sheetcomposer.qt.layer_panel import LayerPanel  # noqa: E402
from sheetcomposer.qt.main_window import MainWindow  # noqa: E402
from sheetcomposer.qt.signals import AppSignals  # noqa: E402


class FakeChartRenderer:
    def render(self, request):
        image = QImage(8, 8, QImage.Format.Format_ARGB32_Premultiplied)
        image.fill(QColor("#0ea5e9"))
        return image


def new_document():
    return Document(800, 600, chart_renderer=FakeChartRenderer())


def add_texts(document, *texts):
    return [document.add_text(TextContent(t)) for t in texts]


def layer_texts(document):
    return "".join(n.content.text for n in document.layers())


class TestDropTarget(unittest.TestCase):
    """Insertion row reported by the view -> display position."""

    def test_below_last_row(self):
        self.assertEqual(drop_target(0, 4, 4), 3)

    def test_to_top(self):
        self.assertEqual(drop_target(3, 0, 4), 0)

    def test_gap_below_itself(self):
        self.assertEqual(drop_target(1, 2, 4), 1)

    def test_downwards(self):
        self.assertEqual(drop_target(1, 3, 4), 2)

    def test_outside_rows(self):
        self.assertEqual(drop_target(0, -1, 4), 3)


class TestLayerListModel(unittest.TestCase):

    def setUp(self):
        self.document = new_document()
        self.model = LayerListModel(self.document)
        self.nodes = add_texts(self.document, "A", "B", "C")
        self.model.refresh()

    def test_rows_topmost_first(self):
        self.assertEqual(self.model.rowCount(), 3)
        names = [self.model.data(self.model.index(r, 0)) for r in range(3)]
        self.assertEqual(names, ["Text_3", "Text_2", "Text_1"])
        self.assertEqual(self.model.data(self.model.index(0, 0),
                                         Qt.ItemDataRole.UserRole),
                         self.nodes[2].id)

    def test_check_state_hides_node(self):
        index = self.model.index(0, 0)
        self.assertEqual(self.model.data(index, Qt.ItemDataRole.CheckStateRole),
                         Qt.CheckState.Checked)
        self.assertTrue(self.model.setData(
            index, Qt.CheckState.Unchecked, Qt.ItemDataRole.CheckStateRole))
        self.assertFalse(self.nodes[2].visible)
        self.assertIsNotNone(self.model.data(
            index, Qt.ItemDataRole.ForegroundRole))

    def test_drop_reorders(self):
        mime = self.model.mimeData([self.model.index(0, 0)])
        handled = self.model.dropMimeData(mime, Qt.DropAction.MoveAction,
                                          3, 0, QModelIndex())
        self.assertFalse(handled)
        app.processEvents()
        self.assertEqual(layer_texts(self.document), "BAC")

    def test_drop_onto_row(self):
        mime = self.model.mimeData([self.model.index(2, 0)])
        self.model.dropMimeData(mime, Qt.DropAction.MoveAction, -1, 0,
                                self.model.index(0, 0))
        app.processEvents()
        self.assertEqual(layer_texts(self.document), "ACB")

    def test_foreign_mime_ignored(self):
        from PySide6.QtCore import QMimeData
        mime = QMimeData()
        mime.setText("0")
        self.assertFalse(self.model.dropMimeData(
            mime, Qt.DropAction.MoveAction, 2, 0, QModelIndex()))
        app.processEvents()
        self.assertEqual(layer_texts(self.document), "CBA")


class TestAppSignals(unittest.TestCase):

    def test_bus_events_become_signals(self):
        document = new_document()
        signals = AppSignals()
        signals.bind(document.bus)
        added, canvas = [], []
        signals.node_added.connect(added.append)
        signals.canvas_changed.connect(lambda w, h: canvas.append((w, h)))
        node, = add_texts(document, "x")
        document.resize_canvas(640, 480)
        self.assertEqual(added, [node.id])
        self.assertEqual(canvas, [(640, 480)])


class TestLayerPanel(unittest.TestCase):

    def setUp(self):
        self.document = new_document()
        self.signals = AppSignals()
        self.signals.bind(self.document.bus)
        self.panel = LayerPanel(self.document, self.signals)

    def selected_rows(self):
        return [i.row() for i in
                self.panel._list.selectionModel().selectedRows()]

    def test_follows_document(self):
        add_texts(self.document, "A", "B")
        self.assertEqual(self.panel._model.rowCount(), 2)
        self.assertEqual(self.selected_rows(), [0])

    def test_list_selection_selects_node(self):
        a, _b = add_texts(self.document, "A", "B")
        self.panel._list.selectionModel().select(
            self.panel._model.index(1, 0),
            QItemSelectionModel.SelectionFlag.ClearAndSelect)
        self.assertEqual(self.document.selection.node_id, a.id)

    def test_ordering_buttons(self):
        a, _b, _c = add_texts(self.document, "A", "B", "C")
        self.document.selection.select(a.id)
        self.panel.raise_selected()
        self.assertEqual(layer_texts(self.document), "CAB")
        self.panel.front_selected()
        self.assertEqual(layer_texts(self.document), "ACB")
        self.panel.back_selected()
        self.assertEqual(layer_texts(self.document), "CBA")
        self.assertEqual(self.selected_rows(), [2])

    def test_ordering_without_selection_warns(self):
        add_texts(self.document, "A", "B")
        self.document.selection.clear()
        with mock.patch("sheetcomposer.qt.forms.QMessageBox.warning") as warn:
            self.panel.raise_selected()
            self.panel.back_selected()
        self.assertEqual(warn.call_count, 2)
        self.assertEqual(layer_texts(self.document), "BA")

    def test_delete_goes_through_signal(self):
        add_texts(self.document, "A")
        requested = []
        self.signals.delete_requested.connect(lambda: requested.append(1))
        self.panel.delete_selected()
        self.assertEqual(requested, [1])


class TestForms(unittest.TestCase):

    def setUp(self):
        self.document = new_document()
        self.signals = AppSignals()
        self.signals.bind(self.document.bus)

    def test_escape_round_trip(self):
        self.assertEqual(escape_text("a\nb"), "a\\nb")
        self.assertEqual(unescape_text("a\\nb"), "a\nb")

    def test_color_button_rejects_invalid(self):
        button = ColorButton("#ff0000")
        button.set_color("not a color")
        self.assertEqual(button.color(), "#ff0000")

    def test_text_form(self):
        form = TextForm(self.document)
        form.write_config(TextContent("two\nlines", font_size=30,
                                      font_style="bold"))
        self.assertEqual(form.text.text(), "two\\nlines")
        content = form.read_config()
        self.assertEqual(content.text, "two\nlines")
        self.assertEqual((content.font_size, content.font_style),
                         (30, "bold"))

    def test_text_form_adds_node(self):
        form = TextForm(self.document)
        form.text.setText("Hi")
        form.add_btn.click()
        self.assertEqual(self.document.layers()[0].content.text, "Hi")

    def test_pattern_form(self):
        form = PatternForm(self.document)
        cfg = PatternConfig(kind="rings", seed=42, rotation=15.0,
                            opacity=0.5, canvas_size=600)
        form.write_config(cfg)
        self.assertEqual(form.read_config(), cfg)

    def test_random_seed(self):
        form = PatternForm(self.document)
        form.randomize_seed()
        self.assertTrue(1 <= form.seed.value() <= 100000)

    def test_chart_form(self):
        form = ChartForm(self.document, self.signals)
        form.write_config(ChartConfig(["A", "B"], 0, 10,
                                      [Dataset("d", [1, 2.5])]))
        cfg = form.read_config()
        self.assertEqual(cfg.labels, ["A", "B"])
        self.assertEqual((cfg.min, cfg.max), (0.0, 10.0))
        self.assertEqual(cfg.datasets[0].series, [1.0, 2.5])

    def test_chart_dataset_list(self):
        form = ChartForm(self.document, self.signals)
        form.add_btn.click()
        app.processEvents()
        self.assertEqual(form.dataset_list.count(), 1)
        item = form.dataset_list.item(0)
        self.assertEqual(item.checkState(), Qt.CheckState.Checked)
        item.setCheckState(Qt.CheckState.Unchecked)
        app.processEvents()
        store = self.document.selection.node.content.store
        self.assertFalse(store.datasets[0].visible)
        self.assertEqual(form.dataset_list.count(), 1)

    def test_effects_form(self):
        form = EffectsForm(self.document)
        form.write_config(Effects(
            DropShadow(True, "#ff0000", 10, 0.3, 2, 3),
            ImageFilters(True, 5, True, 45, 0.5, -0.2)))
        effects = form.read_config()
        s, f = effects.shadow, effects.filters
        self.assertEqual((s.enabled, s.color, s.blur, s.opacity,
                          s.offset_x, s.offset_y),
                         (True, "#ff0000", 10, 0.3, 2, 3))
        self.assertEqual((f.blur_enabled, f.blur_radius, f.hsl_enabled,
                          f.hue, f.saturation, f.luminance),
                         (True, 5, True, 45, 0.5, -0.2))

    def test_canvas_form_defaults(self):
        form = CanvasForm(self.document)
        self.assertEqual(form.read_config()[:2], (800, 600))
        form.width_edit.setText("wide")
        form.height_edit.setText("500")
        form.resize_btn.click()
        self.assertEqual((self.document.scene.width,
                          self.document.scene.height), (1600, 500))
        self.assertEqual(form.width_edit.text(), "1600")

    def test_export_form(self):
        SheetScene(self.document)
        self.document.add_pattern(PatternConfig(canvas_size=200))
        messages = []
        self.signals.status_message.connect(messages.append)
        with tempfile.TemporaryDirectory() as tmp:
            form = ExportForm(self.document, self.signals)
            form.directory.setText(tmp)
            form.prefix.setText("form")
            form.export()
            files = os.listdir(tmp)
        self.assertEqual(len(files), 1)
        self.assertTrue(files[0].startswith("form_"))
        self.assertTrue(messages[-1].endswith(files[0]))
        self.assertEqual(ExportForm(self.document, self.signals)
                         .read_config().directory,
                         default_export_directory())

    def test_run_action_shows_errors(self):
        def fail():
            raise SelectionRequired("Select a chart.")

        with mock.patch("sheetcomposer.qt.forms.QMessageBox.warning") as warn:
            self.assertIsNone(run_action(None, fail))
        warn.assert_called_once_with(None, "Nothing selected",
                                     "Select a chart.")
        self.assertEqual(run_action(None, lambda x: x + 1, 1), 2)


class TestMainWindow(unittest.TestCase):

    def setUp(self):
        self.document = new_document()
        self.window = MainWindow(self.document)

    def tearDown(self):
        self.window.deleteLater()

    def test_selection_fills_forms(self):
        node = self.document.add_text(TextContent("Title", font_size=40))
        self.assertEqual(self.window._sel_label.text(),
                         self.document.display_name(node))
        self.assertEqual(self.window.text_form.text.text(), "Title")
        self.document.selection.clear()
        self.assertEqual(self.window._sel_label.text(), "")

    def test_delete_request(self):
        self.document.add_text(TextContent("x"))
        self.window.signals.delete_requested.emit()
        self.assertEqual(len(self.document.scene), 0)

    def test_delete_without_selection_warns(self):
        self.document.add_text(TextContent("x"))
        self.document.selection.clear()
        with mock.patch("sheetcomposer.qt.forms.QMessageBox.warning") as warn:
            self.window.signals.delete_requested.emit()
        warn.assert_called_once()
        self.assertEqual(len(self.document.scene), 1)

    def test_delete_key_on_canvas(self):
        self.document.add_text(TextContent("x"))
        QTest.keyClick(self.window.canvas_panel.view, Qt.Key.Key_Delete)
        self.assertEqual(len(self.document.scene), 0)

    def test_canvas_follows_document(self):
        self.document.resize_canvas(1000, 500)
        rect = self.window.canvas_panel.scene.sceneRect()
        self.assertEqual((rect.width(), rect.height()), (1000, 500))


if __name__ == "__main__":
    unittest.main()
