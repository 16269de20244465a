# PatternGenerator - Deterministic geometric pattern rasters
#
# A pattern is fully described by a PatternConfig.  Generation has two
# steps: plan_shapes() draws every random decision from a seeded
# xorshift32 stream and returns a list of ShapeOp records, then
# render_pattern() paints that plan with QPainter onto a square QImage.
# Same config -> same plan -> same pixels.
#
# Only QtGui is used (QImage/QPainter); no widgets are needed.

import math

from PySide6.QtCore import QPointF, Qt
from PySide6.QtGui import QBrush, QColor, QImage, QPainter, QPen, QPolygonF

SHAPE_DOTS = "dots"
SHAPE_TRIANGLES = "triangles"
SHAPE_PLUS = "plus"
SHAPE_ZIGZAG = "zigzag"
SHAPE_RINGS = "rings"
SHAPE_KINDS = (SHAPE_DOTS, SHAPE_TRIANGLES, SHAPE_PLUS, SHAPE_ZIGZAG,
               SHAPE_RINGS)

SHAPES_PER_UNIT = 14
LINE_WIDTH = 3
MIN_CANVAS = 200
MIN_SHAPE_SIZE = 6

_UINT32 = 0xFFFFFFFF


class XorShift32:
    """32-bit xorshift generator (13, 17, 5) yielding floats in [0, 1)."""

    __slots__ = ("state",)

    def __init__(self, seed):
        self.state = (int(seed) & _UINT32) or 1

    def next_uint(self):
        t = self.state
        t ^= (t << 13) & _UINT32
        t ^= t >> 17
        t ^= (t << 5) & _UINT32
        self.state = t
        return t

    def random(self):
        return self.next_uint() / 4294967296.0

    def uniform(self, a, b):
        return a + (b - a) * self.random()


class PatternConfig:
    """Everything that determines a pattern raster."""

    __slots__ = ("kind", "seed", "color1", "color2", "bg_color",
                 "bg_transparent", "opacity", "rotation", "shape_size",
                 "density", "canvas_size")

    def __init__(self, kind=SHAPE_DOTS, seed=1, color1="#0ea5e9",
                 color2="#ef2c90", bg_color="#ffffff", bg_transparent=False,
                 opacity=1.0, rotation=0.0, shape_size=56, density=18,
                 canvas_size=1200):
        self.kind = kind
        self.seed = seed
        self.color1 = color1
        self.color2 = color2
        self.bg_color = bg_color
        self.bg_transparent = bg_transparent
        self.opacity = opacity
        self.rotation = rotation
        self.shape_size = shape_size
        self.density = density
        self.canvas_size = canvas_size

    def copy(self):
        return PatternConfig(**{k: getattr(self, k) for k in self.__slots__})

    def __eq__(self, other):
        if not isinstance(other, PatternConfig):
            return NotImplemented
        return all(getattr(self, k) == getattr(other, k)
                   for k in self.__slots__)

    # ---- effective values -------------------------------------------------

    def size(self):
        return max(MIN_CANVAS, int(self.canvas_size or 1000))

    def shape_count(self):
        density = max(1, self.density or 12)
        return _round_half_up(density * self.size() / 1000) * SHAPES_PER_UNIT

    def base_shape_size(self):
        return max(MIN_SHAPE_SIZE, self.shape_size or 48)


class ShapeOp:
    """One shape of a plan, in canvas coordinates before global rotation."""

    __slots__ = ("kind", "x", "y", "size", "color", "filled", "angle")

    def __init__(self, kind, x, y, size, color, filled=True, angle=0.0):
        self.kind = kind
        self.x = x
        self.y = y
        self.size = size
        self.color = color
        self.filled = filled
        self.angle = angle

    def as_tuple(self):
        return (self.kind, self.x, self.y, self.size, self.color,
                self.filled, self.angle)

    def __eq__(self, other):
        if not isinstance(other, ShapeOp):
            return NotImplemented
        return self.as_tuple() == other.as_tuple()

    def __repr__(self):
        return "ShapeOp{}".format(self.as_tuple())


def _round_half_up(value):
    return int(math.floor(value + 0.5))


# ----------------------------------------------------------------------
# Planning
# ----------------------------------------------------------------------
def plan_shapes(config):
    """Draw all random decisions for config and return the ShapeOps.

    Per shape the stream is consumed as: x, y, size, color, then the
    kind-specific draws (fill flag, and an angle for triangles).
    """
    rng = XorShift32(config.seed or 1)
    size = config.size()
    base = config.base_shape_size()
    plan = []
    for _i in range(config.shape_count()):
        x = rng.uniform(0, size)
        y = rng.uniform(0, size)
        s = rng.uniform(base * 0.5, base * 1.25)
        color = config.color1 if rng.random() > 0.5 else config.color2
        kind = config.kind
        if kind == SHAPE_DOTS:
            filled = rng.random() > 0.35
            plan.append(ShapeOp(kind, x, y, s * 0.5, color, filled))
        elif kind == SHAPE_TRIANGLES:
            filled = rng.random() > 0.5
            angle = rng.uniform(0, math.pi)
            plan.append(ShapeOp(kind, x, y, s * 0.65, color, filled, angle))
        elif kind == SHAPE_PLUS:
            plan.append(ShapeOp(kind, x, y, s * 0.5, color, False))
        elif kind == SHAPE_ZIGZAG:
            plan.append(ShapeOp(kind, x - s * 0.8, y, s * 1.6, color, False))
        elif kind == SHAPE_RINGS:
            plan.append(ShapeOp(kind, x, y, s, color, False))
        else:
            # unknown kinds fall back to plain filled dots
            plan.append(ShapeOp(SHAPE_DOTS, x, y, s * 0.5, color, True))
    return plan


# ----------------------------------------------------------------------
# Shape geometry
# ----------------------------------------------------------------------
def triangle_points(size):
    """Triangle around the origin: apex up, base at +size."""
    return [(0.0, -size), (size, size), (-size, size)]


def zigzag_points(x, y, width, height):
    """Polyline starting at (x, y), alternating above and below y."""
    step = max(6.0, width / 8)
    points = [(x, y)]
    t = 0.0
    while t <= width:
        up = math.floor(t / step) % 2 == 0
        points.append((x + t, y - height / 2 if up else y + height / 2))
        t += step
    return points


# ----------------------------------------------------------------------
# Rendering
# ----------------------------------------------------------------------
def _color(value, default):
    color = QColor(value) if value else QColor()
    return color if color.isValid() else QColor(default)


def _stroke(painter, color):
    pen = QPen(color)
    pen.setWidthF(LINE_WIDTH)
    painter.setPen(pen)
    painter.setBrush(Qt.BrushStyle.NoBrush)


def _fill(painter, color):
    painter.setPen(Qt.PenStyle.NoPen)
    painter.setBrush(QBrush(color))


def _circle(painter, x, y, r, color, filled):
    if filled:
        _fill(painter, color)
    else:
        _stroke(painter, color)
    painter.drawEllipse(QPointF(x, y), r, r)


def _paint_op(painter, op):
    color = _color(op.color, "#000000")
    if op.kind == SHAPE_DOTS:
        _circle(painter, op.x, op.y, op.size, color, op.filled)
    elif op.kind == SHAPE_TRIANGLES:
        painter.save()
        painter.translate(op.x, op.y)
        painter.rotate(math.degrees(op.angle))
        if op.filled:
            _fill(painter, color)
        else:
            _stroke(painter, color)
        painter.drawPolygon(QPolygonF(
            [QPointF(px, py) for px, py in triangle_points(op.size)]))
        painter.restore()
    elif op.kind == SHAPE_PLUS:
        _stroke(painter, color)
        s = op.size
        painter.drawLine(QPointF(op.x - s, op.y), QPointF(op.x + s, op.y))
        painter.drawLine(QPointF(op.x, op.y - s), QPointF(op.x, op.y + s))
    elif op.kind == SHAPE_ZIGZAG:
        _stroke(painter, color)
        pts = zigzag_points(op.x, op.y, op.size, op.size / 2)
        painter.drawPolyline(QPolygonF([QPointF(px, py) for px, py in pts]))
    elif op.kind == SHAPE_RINGS:
        _circle(painter, op.x, op.y, op.size * 0.7, color, False)
        _circle(painter, op.x, op.y, op.size * 0.35, color, True)


def render_pattern(config):
    """Render config into a new square ARGB32 QImage."""
    size = config.size()
    image = QImage(size, size, QImage.Format.Format_ARGB32_Premultiplied)
    if config.bg_transparent:
        image.fill(Qt.GlobalColor.transparent)
    else:
        image.fill(_color(config.bg_color, "#ffffff"))

    painter = QPainter(image)
    try:
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        if config.rotation:
            painter.translate(size / 2, size / 2)
            painter.rotate(float(config.rotation))
            painter.translate(-size / 2, -size / 2)
        for op in plan_shapes(config):
            _paint_op(painter, op)
    finally:
        painter.end()
    return image
