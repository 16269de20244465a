# Exporter - Flatten the scene into a single PNG
#
# export() runs the whole pipeline:
#   1. content rect from the BoundingBoxResolver (with EXPORT_BLEED)
#   2. fall back to the full canvas if that rect is unusable
#   3. rasterize exactly that region at 1:1 through the engine
#   4. composite it onto a margin-sized output, over a background
#      color unless a transparent export was asked for
#   5. persist through an ordered list of strategies
#
# Each persistence strategy returns an Outcome; the next strategy is
# only tried after RETRY_NEXT.  Only a failure of the last one is
# reported to the user.

import enum
import logging
import os
import tempfile
from datetime import datetime

from PySide6.QtCore import (
    QBuffer, QByteArray, QIODevice, QStandardPaths, QUrl, Qt,
)
from PySide6.QtGui import QColor, QDesktopServices, QImage, QPainter

from sheetcomposer import utils_core as Utils
from sheetcomposer.errors import ExportError, SheetError

EXPORT_BLEED = 16
DEFAULT_PREFIX = "display"

# Searched in order when no export directory is configured
EXPORT_LOCATIONS = (
    QStandardPaths.StandardLocation.DownloadLocation,
    QStandardPaths.StandardLocation.PicturesLocation,
)


def default_export_directory():
    """First existing standard download/pictures folder, else home."""
    for location in EXPORT_LOCATIONS:
        path = QStandardPaths.writableLocation(location)
        if path and os.path.isdir(path):
            return path
    return os.path.expanduser("~")


class Outcome(enum.Enum):
    SUCCESS = "success"
    RETRY_NEXT = "retry_next"
    FATAL = "fatal"


class StrategyResult:
    __slots__ = ("outcome", "path", "message")

    def __init__(self, outcome, path=None, message=None):
        self.outcome = outcome
        self.path = path
        self.message = message


class ExportOptions:
    __slots__ = ("margin", "transparent", "bg_color", "prefix", "directory")

    def __init__(self, margin=0, transparent=False, bg_color="#ffffff",
                 prefix=DEFAULT_PREFIX, directory=None):
        self.margin = max(0, int(margin or 0))
        self.transparent = bool(transparent)
        self.bg_color = bg_color or "#ffffff"
        self.prefix = prefix
        self.directory = directory

    @classmethod
    def from_config(cls):
        """Defaults from the [Export] section."""
        return cls(
            margin=Utils.getInt("Export", "margin", 0),
            transparent=Utils.getBool("Export", "transparent", False),
            bg_color=Utils.getStr("Export", "bgcolor", "#ffffff"),
            prefix=Utils.getStr("Export", "prefix", DEFAULT_PREFIX),
            directory=(Utils.getStr("Export", "directory", "")
                       or default_export_directory()),
        )


def make_dated_filename(prefix=DEFAULT_PREFIX, now=None):
    """'{prefix}_{YYYY-MM-DD}_{HHMMSS}.png'; blank prefixes use the default."""
    prefix = (prefix or "").strip() or DEFAULT_PREFIX
    now = now or datetime.now()
    return "{}_{}.png".format(prefix, now.strftime("%Y-%m-%d_%H%M%S"))


# ----------------------------------------------------------------------
# Compositor
# ----------------------------------------------------------------------
def compose(region, margin, transparent, bg_color):
    """Place a rasterized region on a new image with a margin around it.

    Returns:
        QImage of size region + 2*margin in each direction.
    """
    out = QImage(region.width() + 2 * margin,
                 region.height() + 2 * margin,
                 QImage.Format.Format_ARGB32_Premultiplied)
    if transparent:
        out.fill(Qt.GlobalColor.transparent)
    else:
        color = QColor(bg_color)
        out.fill(color if color.isValid() else QColor("#ffffff"))
    painter = QPainter(out)
    try:
        painter.drawImage(margin, margin, region)
    finally:
        painter.end()
    return out


def encode_png(image):
    """Encode image to PNG bytes in memory, or None on failure."""
    data = QByteArray()
    buf = QBuffer(data)
    if not buf.open(QIODevice.OpenModeFlag.WriteOnly):
        return None
    try:
        if not image.save(buf, "PNG"):
            return None
    finally:
        buf.close()
    return bytes(data.data())


# ----------------------------------------------------------------------
# Persistence strategies
# ----------------------------------------------------------------------
class BufferedSaveStrategy:
    """Encode in memory, then write atomically into the target directory."""

    name = "buffered"

    def persist(self, image, directory, filename):
        if not directory or not os.path.isdir(directory):
            return StrategyResult(Outcome.RETRY_NEXT,
                                  message=f"no directory {directory!r}")
        blob = encode_png(image)
        if not blob:
            return StrategyResult(Outcome.RETRY_NEXT,
                                  message="PNG encoding failed")
        path = os.path.join(directory, filename)
        fd, tmp = tempfile.mkstemp(suffix=".png.part", dir=directory)
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(blob)
            os.replace(tmp, path)
            tmp = None
        except OSError as e:
            return StrategyResult(Outcome.RETRY_NEXT, message=str(e))
        finally:
            if tmp is not None and os.path.exists(tmp):
                os.remove(tmp)
        return StrategyResult(Outcome.SUCCESS, path)


class DirectSaveStrategy:
    """Let Qt's image writer encode straight to the target path."""

    name = "direct"

    def persist(self, image, directory, filename):
        if not directory or not os.path.isdir(directory):
            return StrategyResult(Outcome.RETRY_NEXT,
                                  message=f"no directory {directory!r}")
        path = os.path.join(directory, filename)
        if image.save(path, "PNG"):
            return StrategyResult(Outcome.SUCCESS, path)
        return StrategyResult(Outcome.RETRY_NEXT,
                              message=f"could not write {path}")


class OpenInViewerStrategy:
    """Write a temporary file and ask the desktop to show it."""

    name = "viewer"

    def __init__(self, opener=None):
        self._opener = opener or QDesktopServices.openUrl

    def persist(self, image, directory, filename):
        path = os.path.join(tempfile.gettempdir(), filename)
        if not image.save(path, "PNG"):
            return StrategyResult(Outcome.FATAL, message=Utils._(
                "The PNG could not be written."))
        if not self._opener(QUrl.fromLocalFile(path)):
            return StrategyResult(Outcome.FATAL, path, Utils._(
                "The image viewer could not be opened (blocked). "
                "The file was left at {}").format(path))
        return StrategyResult(Outcome.SUCCESS, path)


def default_strategies():
    return [BufferedSaveStrategy(), DirectSaveStrategy(),
            OpenInViewerStrategy()]


# ----------------------------------------------------------------------
# Exporter
# ----------------------------------------------------------------------
class Exporter:
    """Orchestrates one export at a time.

    Args:
        resolver: BoundingBoxResolver for the scene.
        engine: Rendering engine with rasterize_region(rect, pixel_ratio).
        strategies: Persistence strategies tried in order.
        bus: Optional EventBus, receives "export_finished".
    """

    def __init__(self, resolver, engine, strategies=None, bus=None):
        self._resolver = resolver
        self._engine = engine
        self.strategies = strategies if strategies is not None \
            else default_strategies()
        self._bus = bus
        self._busy = False

    @property
    def busy(self):
        return self._busy

    def export(self, options, now=None):
        """Run the export pipeline.

        Returns:
            The StrategyResult of the tier that succeeded, or None if
            an export was already running.

        Raises:
            ExportError: rasterization failed or every tier failed.
        """
        if self._busy:
            logging.warning("Export already in progress, request ignored")
            return None
        self._busy = True
        try:
            result = self._export(options, now)
        finally:
            self._busy = False
        if self._bus is not None:
            self._bus.emit("export_finished", result.path)
        return result

    def content_region(self):
        bleed = Utils.getInt("Export", "bleed", EXPORT_BLEED)
        rect = self._resolver.compute_content_rect(bleed)
        if not rect.is_valid():
            logging.warning("Export: invalid content rect %r, "
                            "using the full canvas", rect)
            rect = self._resolver.full_canvas_rect()
        return rect

    def render(self, options):
        """Crop, rasterize and composite; the image is not yet persisted."""
        rect = self.content_region()
        try:
            region = self._engine.rasterize_region(rect, pixel_ratio=1)
        except SheetError as e:
            logging.error("Export: rasterization failed: %s", e)
            raise ExportError(Utils._(
                "The image could not be rendered "
                "(an external image may be unreadable).")) from e
        return compose(region, options.margin, options.transparent,
                       options.bg_color)

    def _export(self, options, now):
        filename = make_dated_filename(options.prefix, now)
        logging.info("Export: %s", filename)
        image = self.render(options)

        directory = options.directory
        if directory:
            directory = os.path.expanduser(directory)
        last = None
        for strategy in self.strategies:
            last = strategy.persist(image, directory, filename)
            if last.outcome == Outcome.SUCCESS:
                logging.info("Export: saved %s via %s", last.path,
                             strategy.name)
                return last
            logging.warning("Export: %s tier failed: %s", strategy.name,
                            last.message)
            if last.outcome == Outcome.FATAL:
                break
        message = last.message if last is not None and last.message \
            else Utils._("The PNG could not be saved.")
        raise ExportError(message)
