# ChartRenderer - Radar chart rasters via matplotlib
#
# Turns a DatasetStore render request ({labels, min, max, datasets})
# into a QImage.  Uses the object-oriented matplotlib API on an Agg
# canvas, never pyplot, so no GUI backend or global figure state is
# involved.  Bad input is normalized instead of raising: a missing
# range is repaired, values are clipped into it and unknown colors
# fall back to the default accent.

import io
import logging
import math

from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.colors import to_rgba
from matplotlib.figure import Figure
from PySide6.QtGui import QImage

from sheetcomposer.errors import ResourceError
from sheetcomposer.DatasetStore import placeholder_labels

CHART_PIXELS = 800
CHART_DPI = 100
LABEL_FONT_SIZE = 18
LINE_WIDTH_PX = 4
POINT_RADIUS_PX = 3
GRID_COLOR = (0, 0, 0, 0.15)
DEFAULT_COLOR = "#0ea5e9"


def _rgba(value, alpha=1.0):
    try:
        r, g, b, _a = to_rgba(value)
    except (ValueError, TypeError):
        r, g, b, _a = to_rgba(DEFAULT_COLOR)
    return (r, g, b, alpha)


def tick_step(lo, hi):
    return math.ceil(max(1, (hi - lo) / 5))


def clip_values(values, lo, hi):
    result = []
    for v in values:
        try:
            v = float(v)
        except (TypeError, ValueError):
            v = lo
        if not math.isfinite(v):
            v = lo
        result.append(min(hi, max(lo, v)))
    return result


class ChartRenderer:
    """Charting capability: render(request) -> QImage."""

    def __init__(self, pixels=CHART_PIXELS, dpi=CHART_DPI):
        self.pixels = pixels
        self.dpi = dpi

    def render(self, request):
        labels = placeholder_labels(request.get("labels") or [])
        lo = float(request.get("min", 0))
        hi = float(request.get("max", 100))
        if not (math.isfinite(lo) and math.isfinite(hi)):
            lo, hi = 0.0, 100.0
        if not hi > lo:
            hi = lo + 1
        png = self._render_png(labels, lo, hi, request.get("datasets") or [])
        image = QImage.fromData(png, "PNG")
        if image.isNull():
            raise ResourceError("The chart image could not be decoded.")
        return image

    def _points(self, pixels):
        # matplotlib line widths and marker sizes are in points
        return pixels * 72.0 / self.dpi

    def _render_png(self, labels, lo, hi, datasets):
        size = self.pixels / self.dpi
        fig = Figure(figsize=(size, size), dpi=self.dpi)
        FigureCanvasAgg(fig)
        ax = fig.add_subplot(projection="polar")
        ax.set_theta_offset(math.pi / 2)
        ax.set_theta_direction(-1)

        n = len(labels)
        angles = [2 * math.pi * i / n for i in range(n)]
        ax.set_xticks(angles)
        ax.set_xticklabels(labels, fontsize=LABEL_FONT_SIZE)
        ax.set_ylim(lo, hi)
        step = tick_step(lo, hi)
        ticks = []
        t = lo
        while t <= hi + 1e-9:
            ticks.append(t)
            t += step
        ax.set_yticks(ticks)
        ax.grid(color=GRID_COLOR)
        ax.spines["polar"].set_color(GRID_COLOR)
        ax.patch.set_alpha(0)

        closed = angles + angles[:1]
        for ds in datasets:
            values = clip_values(ds.series[:n], lo, hi)
            values += [lo] * (n - len(values))
            values = values + values[:1]
            ax.plot(closed, values,
                    color=_rgba(ds.line_color),
                    linewidth=self._points(LINE_WIDTH_PX),
                    marker="o" if ds.show_points else None,
                    markersize=self._points(2 * POINT_RADIUS_PX),
                    label=ds.label)
            ax.fill(closed, values,
                    color=_rgba(ds.fill_color, ds.fill_alpha or 0.25))
        if datasets:
            ax.legend(loc="upper center", bbox_to_anchor=(0.5, 1.12),
                      ncol=min(len(datasets), 4), frameon=False)

        fig.subplots_adjust(left=0.12, right=0.88, top=0.85, bottom=0.08)
        buf = io.BytesIO()
        fig.savefig(buf, format="png", dpi=self.dpi, transparent=True)
        logging.debug("ChartRenderer: %d labels, %d datasets, %d bytes",
                      n, len(datasets), buf.tell())
        return buf.getvalue()
