"""Tests for the matplotlib radar chart renderer."""

import math
import os
import sys
import unittest

os.environ["QT_QPA_PLATFORM"] = "offscreen"

_root = os.path.join(os.path.dirname(__file__), "..")
if _root not in sys.path:
    sys.path.insert(0, _root)

from PySide6.QtWidgets import QApplication  # noqa: E402

app = QApplication.instance() or QApplication(sys.argv)

from sheetcomposer.ChartRenderer import (  # noqa: E402
    ChartRenderer, clip_values, tick_step,
)
from sheetcomposer.DatasetStore import Dataset  # noqa: E402


class TestHelpers(unittest.TestCase):

    def test_tick_step(self):
        self.assertEqual(tick_step(0, 100), 20)
        self.assertEqual(tick_step(0, 12), 3)
        self.assertEqual(tick_step(0, 3), 1)

    def test_clip_values(self):
        self.assertEqual(clip_values([-5, 50, 200, "x", math.nan], 0, 100),
                         [0, 50, 100, 0, 0])


class TestChartRenderer(unittest.TestCase):

    def setUp(self):
        self.renderer = ChartRenderer()

    def test_render_size(self):
        image = self.renderer.render({
            "labels": ["Speed", "Power", "Range"],
            "min": 0, "max": 100,
            "datasets": [Dataset("A", [10, 50, 90])],
        })
        self.assertFalse(image.isNull())
        self.assertEqual((image.width(), image.height()), (800, 800))

    def test_background_is_transparent(self):
        image = self.renderer.render({"labels": ["a", "b", "c"],
                                      "datasets": []})
        self.assertEqual(image.pixelColor(0, 0).alpha(), 0)

    def test_bad_input_is_normalized(self):
        """Few labels, an inverted range and odd values still render."""
        image = self.renderer.render({
            "labels": ["one"],
            "min": 10, "max": 5,
            "datasets": [Dataset("bad", [1000], line_color="not-a-color")],
        })
        self.assertFalse(image.isNull())

    def test_custom_size(self):
        image = ChartRenderer(pixels=400).render({"labels": []})
        self.assertEqual((image.width(), image.height()), (400, 400))


if __name__ == "__main__":
    unittest.main()
