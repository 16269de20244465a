# Qt property forms - Text, Image, Pattern, Chart, Effects, Canvas, Export
#
# Each form edits one plain config object: read_config() builds it
# from the widgets and write_config(cfg) shows an existing one, so the
# Document never sees a widget.  loadConfig()/saveConfig() keep the
# last used values in the user INI like every other panel.
#
# Actions go through run_action(), which turns a SheetError into a
# warning dialog and leaves the document untouched.

import logging
import random

from PySide6.QtCore import Qt, Signal
from PySide6.QtGui import QColor
from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QGridLayout,
    QGroupBox, QLabel, QPushButton, QDoubleSpinBox, QSpinBox,
    QComboBox, QCheckBox, QLineEdit, QPlainTextEdit, QListWidget,
    QListWidgetItem, QColorDialog, QFileDialog, QMessageBox, QSlider,
)

from sheetcomposer import utils_core as Utils
from sheetcomposer.DatasetStore import (
    ChartConfig, Dataset, parse_labels, parse_values,
)
from sheetcomposer.errors import SheetError
from sheetcomposer.Exporter import ExportOptions, default_export_directory
from sheetcomposer.Geometry import FIT_CONTAIN, FIT_POLICIES
from sheetcomposer.PatternGenerator import (
    MIN_CANVAS, MIN_SHAPE_SIZE, SHAPE_KINDS, PatternConfig,
)
from sheetcomposer.SceneGraph import (
    DropShadow, Effects, ImageFilters, NodeKind, TextContent,
)

FONT_STYLES = ["normal", "bold", "italic", "bold italic"]
SEED_MAX = 100000
IMAGE_FILTER = "Images (*.png *.jpg *.jpeg *.bmp *.gif *.webp)"


def run_action(parent, func, *args):
    """Call func(*args); show a SheetError as a warning dialog."""
    try:
        return func(*args)
    except SheetError as e:
        logging.warning("%s: %s", e.title, e)
        QMessageBox.warning(parent, e.title, str(e))
        return None


def unescape_text(text):
    """Typed "\\n" sequences become real line breaks."""
    return text.replace("\\n", "\n")


def escape_text(text):
    return text.replace("\n", "\\n")


def _spin(lo, hi, value, decimals=None, step=None):
    if decimals is None:
        w = QSpinBox()
    else:
        w = QDoubleSpinBox()
        w.setDecimals(decimals)
    w.setRange(lo, hi)
    if step is not None:
        w.setSingleStep(step)
    w.setValue(value)
    return w


# ======================================================================
# ColorButton
# ======================================================================
class ColorButton(QPushButton):
    """Push button showing a color; clicking opens a QColorDialog."""

    color_changed = Signal(str)

    def __init__(self, color="#000000", parent=None):
        super().__init__(parent)
        self._color = "#000000"
        self.setFixedWidth(64)
        self.clicked.connect(self._pick)
        self.set_color(color)

    def color(self):
        return self._color

    def set_color(self, color):
        c = QColor(color)
        if not c.isValid():
            return
        self._color = c.name()
        self.setText(self._color)
        self.setStyleSheet(
            "background: {}; color: {};".format(
                self._color, "black" if c.lightness() > 128 else "white"))
        self.color_changed.emit(self._color)

    def _pick(self):
        c = QColorDialog.getColor(QColor(self._color), self)
        if c.isValid():
            self.set_color(c.name())


# ======================================================================
# TextForm
# ======================================================================
class TextForm(QWidget):
    """Text content and typography."""

    def __init__(self, document, parent=None):
        super().__init__(parent)
        self.document = document

        group = QGroupBox(Utils._("Text"))
        gl = QGridLayout(group)

        gl.addWidget(QLabel(Utils._("Text:")), 0, 0)
        self.text = QLineEdit()
        self.text.setToolTip(Utils._("Use \\n for a line break"))
        gl.addWidget(self.text, 0, 1, 1, 3)

        gl.addWidget(QLabel(Utils._("Font:")), 1, 0)
        self.font_family = QLineEdit()
        gl.addWidget(self.font_family, 1, 1)
        self.font_style = QComboBox()
        self.font_style.addItems(FONT_STYLES)
        gl.addWidget(self.font_style, 1, 2, 1, 2)

        gl.addWidget(QLabel(Utils._("Size:")), 2, 0)
        self.font_size = _spin(4, 1000, 64)
        gl.addWidget(self.font_size, 2, 1)
        gl.addWidget(QLabel(Utils._("Line height:")), 2, 2)
        self.line_height = _spin(0.5, 5.0, 1.2, decimals=2, step=0.05)
        gl.addWidget(self.line_height, 2, 3)

        gl.addWidget(QLabel(Utils._("Fill:")), 3, 0)
        self.fill = ColorButton("#111111")
        gl.addWidget(self.fill, 3, 1)
        gl.addWidget(QLabel(Utils._("Stroke:")), 3, 2)
        stroke_row = QHBoxLayout()
        self.stroke = ColorButton("#ffffff")
        stroke_row.addWidget(self.stroke)
        self.stroke_width = _spin(0, 50, 2, decimals=1, step=0.5)
        stroke_row.addWidget(self.stroke_width)
        gl.addLayout(stroke_row, 3, 3)

        btn_row = QHBoxLayout()
        self.add_btn = QPushButton(Utils._("Add text"))
        self.add_btn.clicked.connect(self._on_add)
        btn_row.addWidget(self.add_btn)
        self.update_btn = QPushButton(Utils._("Update selected"))
        self.update_btn.clicked.connect(self._on_update)
        btn_row.addWidget(self.update_btn)
        gl.addLayout(btn_row, 4, 0, 1, 4)
        gl.setColumnStretch(1, 1)
        gl.setColumnStretch(3, 1)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.addWidget(group)
        layout.addStretch()
        self.loadConfig()

    def read_config(self):
        return TextContent(
            text=unescape_text(self.text.text()),
            font_family=self.font_family.text().strip() or "Inter",
            font_size=self.font_size.value(),
            fill=self.fill.color(),
            stroke=self.stroke.color(),
            stroke_width=self.stroke_width.value(),
            line_height=self.line_height.value(),
            font_style=self.font_style.currentText(),
        )

    def write_config(self, content):
        self.text.setText(escape_text(content.text))
        self.font_family.setText(content.font_family)
        self.font_size.setValue(int(content.font_size))
        self.fill.set_color(content.fill)
        self.stroke.set_color(content.stroke)
        self.stroke_width.setValue(content.stroke_width)
        self.line_height.setValue(content.line_height)
        idx = self.font_style.findText(content.font_style)
        self.font_style.setCurrentIndex(max(idx, 0))

    def _on_add(self):
        run_action(self, self.document.add_text, self.read_config())

    def _on_update(self):
        run_action(self, self.document.update_text, self.read_config())

    def loadConfig(self):
        self.write_config(TextContent(
            text=unescape_text(Utils.getStr("Text", "text", "Hello")),
            font_family=Utils.getStr("Text", "font", "Inter"),
            font_size=Utils.getInt("Text", "size", 64),
            fill=Utils.getStr("Text", "fill", "#111111"),
            stroke=Utils.getStr("Text", "stroke", "#ffffff"),
            stroke_width=Utils.getFloat("Text", "strokewidth", 2),
            line_height=Utils.getFloat("Text", "lineheight", 1.2),
            font_style=Utils.getStr("Text", "weight", "normal"),
        ))

    def saveConfig(self):
        c = self.read_config()
        Utils.setStr("Text", "text", escape_text(c.text))
        Utils.setStr("Text", "font", c.font_family)
        Utils.setInt("Text", "size", c.font_size)
        Utils.setStr("Text", "fill", c.fill)
        Utils.setStr("Text", "stroke", c.stroke)
        Utils.setFloat("Text", "strokewidth", c.stroke_width)
        Utils.setFloat("Text", "lineheight", c.line_height)
        Utils.setStr("Text", "weight", c.font_style)


# ======================================================================
# ImageForm
# ======================================================================
class ImageForm(QWidget):
    """Add images, set the selected image's opacity, delete it."""

    def __init__(self, document, parent=None):
        super().__init__(parent)
        self.document = document

        group = QGroupBox(Utils._("Image"))
        gl = QGridLayout(group)

        self.add_btn = QPushButton(Utils._("Add image..."))
        self.add_btn.clicked.connect(self._on_add)
        gl.addWidget(self.add_btn, 0, 0, 1, 2)

        gl.addWidget(QLabel(Utils._("Opacity:")), 1, 0)
        self.opacity = QSlider(Qt.Orientation.Horizontal)
        self.opacity.setRange(0, 100)
        self.opacity.setValue(100)
        self.opacity.valueChanged.connect(self._on_opacity)
        gl.addWidget(self.opacity, 1, 1)

        self.delete_btn = QPushButton(Utils._("Delete image"))
        self.delete_btn.clicked.connect(self._on_delete)
        gl.addWidget(self.delete_btn, 2, 0, 1, 2)
        gl.setColumnStretch(1, 1)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.addWidget(group)
        layout.addStretch()

    def read_config(self):
        return self.opacity.value() / 100.0

    def write_config(self, opacity):
        self.opacity.blockSignals(True)
        self.opacity.setValue(int(round(opacity * 100)))
        self.opacity.blockSignals(False)

    def _on_add(self):
        path, _ = QFileDialog.getOpenFileName(
            self, Utils._("Add image"), "", IMAGE_FILTER)
        if path:
            run_action(self, self.document.add_image_from_file, path)

    def _on_opacity(self, _value):
        node = self.document.selection.selected_of_kind(NodeKind.IMAGE)
        if node is not None:
            self.document.set_opacity(node.id, self.read_config())

    def _on_delete(self):
        run_action(self, self.document.delete_selected, NodeKind.IMAGE)


# ======================================================================
# PatternForm
# ======================================================================
class PatternForm(QWidget):
    """Pattern generator parameters."""

    def __init__(self, document, parent=None):
        super().__init__(parent)
        self.document = document

        group = QGroupBox(Utils._("Pattern"))
        gl = QGridLayout(group)

        gl.addWidget(QLabel(Utils._("Shape:")), 0, 0)
        self.kind = QComboBox()
        self.kind.addItems(SHAPE_KINDS)
        gl.addWidget(self.kind, 0, 1)
        gl.addWidget(QLabel(Utils._("Seed:")), 0, 2)
        seed_row = QHBoxLayout()
        self.seed = _spin(0, 2 ** 31 - 1, 1)
        seed_row.addWidget(self.seed)
        self.random_btn = QPushButton(Utils._("Random"))
        self.random_btn.clicked.connect(self.randomize_seed)
        seed_row.addWidget(self.random_btn)
        gl.addLayout(seed_row, 0, 3)

        gl.addWidget(QLabel(Utils._("Colors:")), 1, 0)
        color_row = QHBoxLayout()
        self.color1 = ColorButton("#0ea5e9")
        self.color2 = ColorButton("#ef2c90")
        color_row.addWidget(self.color1)
        color_row.addWidget(self.color2)
        gl.addLayout(color_row, 1, 1)
        gl.addWidget(QLabel(Utils._("Background:")), 1, 2)
        bg_row = QHBoxLayout()
        self.bg_color = ColorButton("#ffffff")
        bg_row.addWidget(self.bg_color)
        self.bg_transparent = QCheckBox(Utils._("Transparent"))
        bg_row.addWidget(self.bg_transparent)
        gl.addLayout(bg_row, 1, 3)

        gl.addWidget(QLabel(Utils._("Size:")), 2, 0)
        self.shape_size = _spin(MIN_SHAPE_SIZE, 1000, 56)
        gl.addWidget(self.shape_size, 2, 1)
        gl.addWidget(QLabel(Utils._("Density:")), 2, 2)
        self.density = _spin(1, 500, 18)
        gl.addWidget(self.density, 2, 3)

        gl.addWidget(QLabel(Utils._("Rotation:")), 3, 0)
        self.rotation = _spin(-360.0, 360.0, 0.0, decimals=1, step=5)
        gl.addWidget(self.rotation, 3, 1)
        gl.addWidget(QLabel(Utils._("Canvas:")), 3, 2)
        self.canvas_size = _spin(MIN_CANVAS, 8000, 1200)
        gl.addWidget(self.canvas_size, 3, 3)

        gl.addWidget(QLabel(Utils._("Opacity:")), 4, 0)
        self.opacity = _spin(0.0, 1.0, 1.0, decimals=2, step=0.05)
        gl.addWidget(self.opacity, 4, 1)

        btn_row = QHBoxLayout()
        self.add_btn = QPushButton(Utils._("Add pattern"))
        self.add_btn.clicked.connect(self._on_add)
        btn_row.addWidget(self.add_btn)
        self.update_btn = QPushButton(Utils._("Update selected"))
        self.update_btn.clicked.connect(self._on_update)
        btn_row.addWidget(self.update_btn)
        gl.addLayout(btn_row, 5, 0, 1, 4)
        gl.setColumnStretch(1, 1)
        gl.setColumnStretch(3, 1)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.addWidget(group)
        layout.addStretch()
        self.loadConfig()

    def randomize_seed(self):
        self.seed.setValue(random.randint(1, SEED_MAX))

    def read_config(self):
        return PatternConfig(
            kind=self.kind.currentText(),
            seed=self.seed.value(),
            color1=self.color1.color(),
            color2=self.color2.color(),
            bg_color=self.bg_color.color(),
            bg_transparent=self.bg_transparent.isChecked(),
            opacity=self.opacity.value(),
            rotation=self.rotation.value(),
            shape_size=self.shape_size.value(),
            density=self.density.value(),
            canvas_size=self.canvas_size.value(),
        )

    def write_config(self, cfg):
        idx = self.kind.findText(cfg.kind)
        self.kind.setCurrentIndex(max(idx, 0))
        self.seed.setValue(int(cfg.seed))
        self.color1.set_color(cfg.color1)
        self.color2.set_color(cfg.color2)
        self.bg_color.set_color(cfg.bg_color)
        self.bg_transparent.setChecked(bool(cfg.bg_transparent))
        self.opacity.setValue(cfg.opacity)
        self.rotation.setValue(cfg.rotation)
        self.shape_size.setValue(int(cfg.shape_size))
        self.density.setValue(int(cfg.density))
        self.canvas_size.setValue(int(cfg.canvas_size))

    def _on_add(self):
        run_action(self, self.document.add_pattern, self.read_config())

    def _on_update(self):
        run_action(self, self.document.update_pattern, self.read_config())

    def loadConfig(self):
        self.write_config(PatternConfig(
            kind=Utils.getStr("Pattern", "kind", "dots"),
            seed=Utils.getInt("Pattern", "seed", 1),
            color1=Utils.getStr("Pattern", "c1", "#0ea5e9"),
            color2=Utils.getStr("Pattern", "c2", "#ef2c90"),
            bg_color=Utils.getStr("Pattern", "bgcolor", "#ffffff"),
            bg_transparent=Utils.getBool("Pattern", "transparent", False),
            opacity=Utils.getFloat("Pattern", "opacity", 1.0),
            rotation=Utils.getFloat("Pattern", "rotate", 0.0),
            shape_size=Utils.getInt("Pattern", "size", 56),
            density=Utils.getInt("Pattern", "density", 18),
            canvas_size=Utils.getInt("Pattern", "canvas", 1200),
        ))

    def saveConfig(self):
        c = self.read_config()
        Utils.setStr("Pattern", "kind", c.kind)
        Utils.setInt("Pattern", "seed", c.seed)
        Utils.setStr("Pattern", "c1", c.color1)
        Utils.setStr("Pattern", "c2", c.color2)
        Utils.setStr("Pattern", "bgcolor", c.bg_color)
        Utils.setBool("Pattern", "transparent", c.bg_transparent)
        Utils.setFloat("Pattern", "opacity", c.opacity)
        Utils.setFloat("Pattern", "rotate", c.rotation)
        Utils.setInt("Pattern", "size", c.shape_size)
        Utils.setInt("Pattern", "density", c.density)
        Utils.setInt("Pattern", "canvas", c.canvas_size)


# ======================================================================
# ChartForm
# ======================================================================
class ChartForm(QWidget):
    """Radar chart labels, range and datasets."""

    def __init__(self, document, signals, parent=None):
        super().__init__(parent)
        self.document = document
        self.signals = signals
        self._filling = False

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        # --- Axes ---
        axes_group = QGroupBox(Utils._("Chart"))
        ag = QGridLayout(axes_group)
        ag.addWidget(QLabel(Utils._("Labels (one per line):")), 0, 0, 1, 4)
        self.labels = QPlainTextEdit()
        self.labels.setMaximumHeight(110)
        ag.addWidget(self.labels, 1, 0, 1, 4)
        ag.addWidget(QLabel(Utils._("Min:")), 2, 0)
        self.value_min = _spin(-1e6, 1e6, 0.0, decimals=2)
        ag.addWidget(self.value_min, 2, 1)
        ag.addWidget(QLabel(Utils._("Max:")), 2, 2)
        self.value_max = _spin(-1e6, 1e6, 100.0, decimals=2)
        ag.addWidget(self.value_max, 2, 3)
        layout.addWidget(axes_group)

        # --- Dataset ---
        ds_group = QGroupBox(Utils._("Dataset"))
        dg = QGridLayout(ds_group)
        dg.addWidget(QLabel(Utils._("Name:")), 0, 0)
        self.ds_label = QLineEdit()
        dg.addWidget(self.ds_label, 0, 1, 1, 3)
        dg.addWidget(QLabel(Utils._("Values:")), 1, 0)
        self.ds_values = QLineEdit()
        self.ds_values.setPlaceholderText("60, 75, 50")
        dg.addWidget(self.ds_values, 1, 1, 1, 3)
        dg.addWidget(QLabel(Utils._("Line:")), 2, 0)
        self.line_color = ColorButton("#0ea5e9")
        dg.addWidget(self.line_color, 2, 1)
        dg.addWidget(QLabel(Utils._("Fill:")), 2, 2)
        fill_row = QHBoxLayout()
        self.fill_color = ColorButton("#0ea5e9")
        fill_row.addWidget(self.fill_color)
        self.fill_alpha = _spin(0.0, 1.0, 0.25, decimals=2, step=0.05)
        fill_row.addWidget(self.fill_alpha)
        dg.addLayout(fill_row, 2, 3)
        self.show_points = QCheckBox(Utils._("Show points"))
        self.show_points.setChecked(True)
        dg.addWidget(self.show_points, 3, 0, 1, 4)
        dg.setColumnStretch(1, 1)
        dg.setColumnStretch(3, 1)
        layout.addWidget(ds_group)

        btn_row = QHBoxLayout()
        self.add_btn = QPushButton(Utils._("Add chart"))
        self.add_btn.clicked.connect(self._on_add_chart)
        btn_row.addWidget(self.add_btn)
        self.add_ds_btn = QPushButton(Utils._("Add dataset"))
        self.add_ds_btn.clicked.connect(self._on_add_dataset)
        btn_row.addWidget(self.add_ds_btn)
        self.update_btn = QPushButton(Utils._("Update chart"))
        self.update_btn.clicked.connect(self._on_update_chart)
        btn_row.addWidget(self.update_btn)
        layout.addLayout(btn_row)

        # --- Datasets of the selected chart ---
        list_group = QGroupBox(Utils._("Datasets"))
        lg = QVBoxLayout(list_group)
        self.dataset_list = QListWidget()
        self.dataset_list.currentRowChanged.connect(self._on_dataset_picked)
        self.dataset_list.itemChanged.connect(self._on_dataset_checked)
        lg.addWidget(self.dataset_list)
        self.del_ds_btn = QPushButton(Utils._("Delete dataset"))
        self.del_ds_btn.clicked.connect(self._on_delete_dataset)
        lg.addWidget(self.del_ds_btn)
        layout.addWidget(list_group)
        layout.addStretch()

        signals.datasets_changed.connect(
            self.fill_datasets, Qt.ConnectionType.QueuedConnection)
        signals.selection_changed.connect(
            self.fill_datasets, Qt.ConnectionType.QueuedConnection)
        self.loadConfig()

    # ---- config -----------------------------------------------------------

    def read_dataset(self):
        return Dataset(
            label=self.ds_label.text().strip() or "Data",
            series=parse_values(self.ds_values.text()),
            line_color=self.line_color.color(),
            fill_color=self.fill_color.color(),
            fill_alpha=self.fill_alpha.value(),
            show_points=self.show_points.isChecked(),
        )

    def read_config(self):
        """ChartConfig with the axis fields and the dataset being edited."""
        return ChartConfig(parse_labels(self.labels.toPlainText()),
                           self.value_min.value(), self.value_max.value(),
                           [self.read_dataset()])

    def write_config(self, cfg):
        self.labels.setPlainText("\n".join(cfg.labels))
        self.value_min.setValue(float(cfg.min))
        self.value_max.setValue(float(cfg.max))
        if cfg.datasets:
            self.write_dataset(cfg.datasets[0])

    def write_dataset(self, ds):
        self.ds_label.setText(ds.label)
        self.ds_values.setText(", ".join("{:g}".format(v) for v in ds.series))
        self.line_color.set_color(ds.line_color)
        self.fill_color.set_color(ds.fill_color)
        self.fill_alpha.setValue(ds.fill_alpha)
        self.show_points.setChecked(bool(ds.show_points))

    # ---- actions ----------------------------------------------------------

    def _on_add_chart(self):
        cfg = self.read_config()
        run_action(self, self.document.add_chart, cfg.labels, cfg.min,
                   cfg.max, cfg.datasets[0])

    def _on_add_dataset(self):
        run_action(self, self.document.add_dataset, self.read_dataset())

    def _on_update_chart(self):
        cfg = self.read_config()
        run_action(self, self.document.update_chart, cfg.labels, cfg.min,
                   cfg.max)

    def _on_delete_dataset(self):
        run_action(self, self.document.remove_dataset)

    def _on_dataset_picked(self, row):
        if self._filling:
            return
        run_action(self, self.document.select_dataset,
                   row if row >= 0 else None)

    def _on_dataset_checked(self, item):
        if self._filling:
            return
        run_action(self, self.document.toggle_dataset,
                   self.dataset_list.row(item))

    # ---- dataset list -----------------------------------------------------

    def fill_datasets(self, *_args):
        self._filling = True
        try:
            self.dataset_list.clear()
            node = self.document.selection.selected_of_kind(NodeKind.CHART)
            if node is None:
                return
            store = node.content.store
            for ds in store.datasets:
                item = QListWidgetItem(ds.label)
                item.setFlags(item.flags() | Qt.ItemFlag.ItemIsUserCheckable)
                item.setCheckState(Qt.CheckState.Checked if ds.visible
                                   else Qt.CheckState.Unchecked)
                self.dataset_list.addItem(item)
            if store.selected_index is not None:
                self.dataset_list.setCurrentRow(store.selected_index)
        finally:
            self._filling = False

    def loadConfig(self):
        labels = Utils.getStr("Chart", "labels",
                              "Speed\nPower\nTechnique\nStamina\nMind")
        self.write_config(ChartConfig(
            parse_labels(labels),
            Utils.getFloat("Chart", "min", 0),
            Utils.getFloat("Chart", "max", 100),
            [Dataset(
                label=Utils.getStr("Chart", "name", "Data"),
                series=parse_values(
                    Utils.getStr("Chart", "values", "60, 75, 50, 80, 65")),
                line_color=Utils.getStr("Chart", "line", "#0ea5e9"),
                fill_color=Utils.getStr("Chart", "fill", "#0ea5e9"),
                fill_alpha=Utils.getFloat("Chart", "alpha", 0.25),
                show_points=Utils.getBool("Chart", "points", True),
            )],
        ))

    def saveConfig(self):
        cfg = self.read_config()
        ds = cfg.datasets[0]
        Utils.setStr("Chart", "labels", "\n".join(cfg.labels))
        Utils.setFloat("Chart", "min", cfg.min)
        Utils.setFloat("Chart", "max", cfg.max)
        Utils.setStr("Chart", "name", ds.label)
        Utils.setStr("Chart", "values", self.ds_values.text())
        Utils.setStr("Chart", "line", ds.line_color)
        Utils.setStr("Chart", "fill", ds.fill_color)
        Utils.setFloat("Chart", "alpha", ds.fill_alpha)
        Utils.setBool("Chart", "points", ds.show_points)


# ======================================================================
# EffectsForm
# ======================================================================
class EffectsForm(QWidget):
    """Drop shadow for any node, blur and HSL for images."""

    def __init__(self, document, parent=None):
        super().__init__(parent)
        self.document = document

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        shadow_group = QGroupBox(Utils._("Drop shadow"))
        sg = QGridLayout(shadow_group)
        self.shadow_enabled = QCheckBox(Utils._("Enabled"))
        sg.addWidget(self.shadow_enabled, 0, 0)
        self.shadow_color = ColorButton("#000000")
        sg.addWidget(self.shadow_color, 0, 1)
        sg.addWidget(QLabel(Utils._("Blur:")), 1, 0)
        self.shadow_blur = _spin(0.0, 200.0, 12.0, decimals=1)
        sg.addWidget(self.shadow_blur, 1, 1)
        sg.addWidget(QLabel(Utils._("Opacity:")), 1, 2)
        self.shadow_opacity = _spin(0.0, 1.0, 0.5, decimals=2, step=0.05)
        sg.addWidget(self.shadow_opacity, 1, 3)
        sg.addWidget(QLabel(Utils._("Offset X:")), 2, 0)
        self.shadow_dx = _spin(-500.0, 500.0, 6.0, decimals=1)
        sg.addWidget(self.shadow_dx, 2, 1)
        sg.addWidget(QLabel(Utils._("Offset Y:")), 2, 2)
        self.shadow_dy = _spin(-500.0, 500.0, 6.0, decimals=1)
        sg.addWidget(self.shadow_dy, 2, 3)
        layout.addWidget(shadow_group)

        filter_group = QGroupBox(Utils._("Image filters"))
        fg = QGridLayout(filter_group)
        self.blur_enabled = QCheckBox(Utils._("Blur"))
        fg.addWidget(self.blur_enabled, 0, 0)
        self.blur_radius = _spin(0.0, 100.0, 4.0, decimals=1)
        fg.addWidget(self.blur_radius, 0, 1)
        self.hsl_enabled = QCheckBox(Utils._("Hue / Sat / Lum"))
        fg.addWidget(self.hsl_enabled, 1, 0, 1, 2)
        fg.addWidget(QLabel(Utils._("Hue:")), 2, 0)
        self.hue = _spin(-360.0, 360.0, 0.0, decimals=0, step=5)
        fg.addWidget(self.hue, 2, 1)
        fg.addWidget(QLabel(Utils._("Saturation:")), 3, 0)
        self.saturation = _spin(-2.0, 2.0, 0.0, decimals=2, step=0.1)
        fg.addWidget(self.saturation, 3, 1)
        fg.addWidget(QLabel(Utils._("Luminance:")), 4, 0)
        self.luminance = _spin(-1.0, 1.0, 0.0, decimals=2, step=0.05)
        fg.addWidget(self.luminance, 4, 1)
        layout.addWidget(filter_group)

        btn_row = QHBoxLayout()
        self.apply_btn = QPushButton(Utils._("Apply"))
        self.apply_btn.clicked.connect(self._on_apply)
        btn_row.addWidget(self.apply_btn)
        self.reset_btn = QPushButton(Utils._("Reset"))
        self.reset_btn.clicked.connect(self._on_reset)
        btn_row.addWidget(self.reset_btn)
        layout.addLayout(btn_row)
        layout.addStretch()
        self.loadConfig()

    def read_config(self):
        shadow = DropShadow(
            enabled=self.shadow_enabled.isChecked(),
            color=self.shadow_color.color(),
            blur=self.shadow_blur.value(),
            opacity=self.shadow_opacity.value(),
            offset_x=self.shadow_dx.value(),
            offset_y=self.shadow_dy.value(),
        )
        filters = ImageFilters(
            blur_enabled=self.blur_enabled.isChecked(),
            blur_radius=self.blur_radius.value(),
            hsl_enabled=self.hsl_enabled.isChecked(),
            hue=self.hue.value(),
            saturation=self.saturation.value(),
            luminance=self.luminance.value(),
        )
        return Effects(shadow, filters)

    def write_config(self, effects):
        s = effects.shadow
        self.shadow_enabled.setChecked(bool(s.enabled))
        self.shadow_color.set_color(s.color)
        if s.enabled:
            self.shadow_blur.setValue(s.blur)
            self.shadow_opacity.setValue(s.opacity)
            self.shadow_dx.setValue(s.offset_x)
            self.shadow_dy.setValue(s.offset_y)
        f = effects.filters
        self.blur_enabled.setChecked(bool(f.blur_enabled))
        if f.blur_enabled:
            self.blur_radius.setValue(f.blur_radius)
        self.hsl_enabled.setChecked(bool(f.hsl_enabled))
        self.hue.setValue(f.hue)
        self.saturation.setValue(f.saturation)
        self.luminance.setValue(f.luminance)

    def _on_apply(self):
        effects = self.read_config()
        run_action(self, self.document.apply_effects, effects.shadow,
                   effects.filters)

    def _on_reset(self):
        run_action(self, self.document.reset_effects)

    def loadConfig(self):
        self.shadow_color.set_color(Utils.getStr("Shadow", "color", "#000000"))
        self.shadow_blur.setValue(Utils.getFloat("Shadow", "blur", 12))
        self.shadow_opacity.setValue(Utils.getFloat("Shadow", "opacity", 0.5))
        self.shadow_dx.setValue(Utils.getFloat("Shadow", "offsetx", 6))
        self.shadow_dy.setValue(Utils.getFloat("Shadow", "offsety", 6))

    def saveConfig(self):
        s = self.read_config().shadow
        Utils.setStr("Shadow", "color", s.color)
        Utils.setFloat("Shadow", "blur", s.blur)
        Utils.setFloat("Shadow", "opacity", s.opacity)
        Utils.setFloat("Shadow", "offsetx", s.offset_x)
        Utils.setFloat("Shadow", "offsety", s.offset_y)


# ======================================================================
# CanvasForm
# ======================================================================
class CanvasForm(QWidget):
    """Canvas size and background image."""

    def __init__(self, document, parent=None):
        super().__init__(parent)
        self.document = document

        group = QGroupBox(Utils._("Canvas"))
        gl = QGridLayout(group)
        gl.addWidget(QLabel(Utils._("Width:")), 0, 0)
        self.width_edit = QLineEdit()
        gl.addWidget(self.width_edit, 0, 1)
        gl.addWidget(QLabel(Utils._("Height:")), 0, 2)
        self.height_edit = QLineEdit()
        gl.addWidget(self.height_edit, 0, 3)
        self.resize_btn = QPushButton(Utils._("Resize"))
        self.resize_btn.clicked.connect(self._on_resize)
        gl.addWidget(self.resize_btn, 1, 0, 1, 4)

        gl.addWidget(QLabel(Utils._("Background fit:")), 2, 0)
        self.fit = QComboBox()
        self.fit.addItems(FIT_POLICIES)
        self.fit.currentTextChanged.connect(self.document.set_background_fit)
        gl.addWidget(self.fit, 2, 1)
        bg_row = QHBoxLayout()
        self.bg_btn = QPushButton(Utils._("Background..."))
        self.bg_btn.clicked.connect(self._on_background)
        bg_row.addWidget(self.bg_btn)
        self.bg_clear_btn = QPushButton(Utils._("Clear"))
        self.bg_clear_btn.clicked.connect(self.document.clear_background)
        bg_row.addWidget(self.bg_clear_btn)
        gl.addLayout(bg_row, 2, 2, 1, 2)
        gl.setColumnStretch(1, 1)
        gl.setColumnStretch(3, 1)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.addWidget(group)
        layout.addStretch()
        self.loadConfig()

    def read_config(self):
        """(width, height, fit); malformed sizes fall back to defaults."""
        return (Utils.toInt(self.width_edit.text(), 1600),
                Utils.toInt(self.height_edit.text(), 1200),
                self.fit.currentText())

    def write_config(self, cfg):
        width, height, fit = cfg
        self.width_edit.setText(str(width))
        self.height_edit.setText(str(height))
        self.fit.blockSignals(True)
        self.fit.setCurrentIndex(max(self.fit.findText(fit), 0))
        self.fit.blockSignals(False)

    def _on_resize(self):
        width, height, _fit = self.read_config()
        self.document.resize_canvas(width, height)
        self.write_config(self.read_config())

    def _on_background(self):
        path, _ = QFileDialog.getOpenFileName(
            self, Utils._("Background image"), "", IMAGE_FILTER)
        if path:
            run_action(self, self.document.set_background_from_file, path,
                       self.fit.currentText())

    def loadConfig(self):
        self.write_config((self.document.scene.width,
                           self.document.scene.height,
                           Utils.getStr("Canvas", "bgfit", FIT_CONTAIN)))

    def saveConfig(self):
        width, height, fit = self.read_config()
        Utils.setInt("Canvas", "width", width)
        Utils.setInt("Canvas", "height", height)
        Utils.setStr("Canvas", "bgfit", fit)


# ======================================================================
# ExportForm
# ======================================================================
class ExportForm(QWidget):
    """PNG export options and the export button."""

    def __init__(self, document, signals, parent=None):
        super().__init__(parent)
        self.document = document
        self.signals = signals

        group = QGroupBox(Utils._("Export PNG"))
        gl = QGridLayout(group)
        gl.addWidget(QLabel(Utils._("Margin:")), 0, 0)
        self.margin = _spin(0, 2000, 0)
        gl.addWidget(self.margin, 0, 1)
        gl.addWidget(QLabel(Utils._("Background:")), 0, 2)
        bg_row = QHBoxLayout()
        self.bg_color = ColorButton("#ffffff")
        bg_row.addWidget(self.bg_color)
        self.transparent = QCheckBox(Utils._("Transparent"))
        bg_row.addWidget(self.transparent)
        gl.addLayout(bg_row, 0, 3)

        gl.addWidget(QLabel(Utils._("Name prefix:")), 1, 0)
        self.prefix = QLineEdit()
        gl.addWidget(self.prefix, 1, 1)
        gl.addWidget(QLabel(Utils._("Folder:")), 1, 2)
        dir_row = QHBoxLayout()
        self.directory = QLineEdit()
        dir_row.addWidget(self.directory)
        self.browse_btn = QPushButton("...")
        self.browse_btn.setFixedWidth(28)
        self.browse_btn.clicked.connect(self._on_browse)
        dir_row.addWidget(self.browse_btn)
        gl.addLayout(dir_row, 1, 3)

        self.export_btn = QPushButton(Utils._("Export"))
        self.export_btn.clicked.connect(self.export)
        gl.addWidget(self.export_btn, 2, 0, 1, 4)
        gl.setColumnStretch(1, 1)
        gl.setColumnStretch(3, 1)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.addWidget(group)
        layout.addStretch()
        self.loadConfig()

    def read_config(self):
        return ExportOptions(
            margin=self.margin.value(),
            transparent=self.transparent.isChecked(),
            bg_color=self.bg_color.color(),
            prefix=self.prefix.text(),
            directory=(self.directory.text().strip()
                       or default_export_directory()),
        )

    def write_config(self, options):
        self.margin.setValue(options.margin)
        self.transparent.setChecked(options.transparent)
        self.bg_color.set_color(options.bg_color)
        self.prefix.setText(options.prefix or "")
        self.directory.setText(options.directory or "")

    def export(self):
        self.export_btn.setEnabled(False)
        try:
            result = run_action(self, self.document.export,
                                self.read_config())
        finally:
            self.export_btn.setEnabled(True)
        if result is not None:
            self.signals.status_message.emit(
                Utils._("Exported {}").format(result.path))

    def _on_browse(self):
        path = QFileDialog.getExistingDirectory(
            self, Utils._("Export folder"), self.directory.text())
        if path:
            self.directory.setText(path)

    def loadConfig(self):
        self.write_config(ExportOptions.from_config())

    def saveConfig(self):
        o = self.read_config()
        Utils.setInt("Export", "margin", o.margin)
        Utils.setBool("Export", "transparent", o.transparent)
        Utils.setStr("Export", "bgcolor", o.bg_color)
        Utils.setStr("Export", "prefix", o.prefix or "")
        directory = o.directory or ""
        if directory == default_export_directory():
            directory = ""
        Utils.setStr("Export", "directory", directory)
