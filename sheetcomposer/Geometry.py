# Geometry - Toolkit-independent rectangle math
#
# Plain-number helpers shared by the bounding box resolver, the
# compositor and the rendering engine: axis-aligned rectangles,
# bounds of transformed rectangles, pixel alignment and the
# contain/cover fitting used for the background image.
#
# Zero Qt dependencies.

import math

FIT_CONTAIN = "contain"
FIT_COVER = "cover"
FIT_POLICIES = (FIT_CONTAIN, FIT_COVER)


class Rect:
    """Axis-aligned rectangle in canvas pixels."""

    __slots__ = ("x", "y", "width", "height")

    def __init__(self, x=0.0, y=0.0, width=0.0, height=0.0):
        self.x = x
        self.y = y
        self.width = width
        self.height = height

    @classmethod
    def from_edges(cls, left, top, right, bottom):
        return cls(left, top, right - left, bottom - top)

    @property
    def right(self):
        return self.x + self.width

    @property
    def bottom(self):
        return self.y + self.height

    def is_valid(self):
        """True when every field is finite and the area is positive."""
        if not all(map(math.isfinite,
                       (self.x, self.y, self.width, self.height))):
            return False
        return self.width > 0 and self.height > 0

    def expanded(self, amount):
        """Return a copy grown by amount on all four sides."""
        return Rect(self.x - amount, self.y - amount,
                    self.width + 2 * amount, self.height + 2 * amount)

    def aligned(self):
        """Return the smallest integer rectangle containing this one.

        The origin is floored and the far edges ceiled, so no boundary
        pixel is lost to rounding.
        """
        x = math.floor(self.x)
        y = math.floor(self.y)
        return Rect(x, y,
                    math.ceil(self.right - x),
                    math.ceil(self.bottom - y))

    def as_tuple(self):
        return (self.x, self.y, self.width, self.height)

    def __eq__(self, other):
        if not isinstance(other, Rect):
            return NotImplemented
        return self.as_tuple() == other.as_tuple()

    def __repr__(self):
        return "Rect(x={}, y={}, width={}, height={})".format(
            self.x, self.y, self.width, self.height)


class BoundsAccumulator:
    """Running min/max over the edges of several rectangles."""

    __slots__ = ("left", "top", "right", "bottom", "count")

    def __init__(self):
        self.left = math.inf
        self.top = math.inf
        self.right = -math.inf
        self.bottom = -math.inf
        self.count = 0

    def add(self, rect):
        self.left = min(self.left, rect.x)
        self.top = min(self.top, rect.y)
        self.right = max(self.right, rect.right)
        self.bottom = max(self.bottom, rect.bottom)
        self.count += 1

    def result(self):
        """Return the accumulated Rect, or None if nothing was added."""
        if not self.count:
            return None
        return Rect.from_edges(self.left, self.top, self.right, self.bottom)


def transformed_bounds(width, height, x=0.0, y=0.0, scale_x=1.0,
                       scale_y=1.0, rotation=0.0):
    """Bounds of a width x height box after scale, rotation and move.

    The box is scaled and rotated (degrees, clockwise in screen
    coordinates) about its own top-left corner, then placed at (x, y),
    which is how canvas nodes are positioned.

    Returns:
        Rect enclosing the four transformed corners.
    """
    rad = math.radians(rotation)
    c = math.cos(rad)
    s = math.sin(rad)
    acc = BoundsAccumulator()
    for cx, cy in ((0, 0), (width, 0), (width, height), (0, height)):
        px = cx * scale_x
        py = cy * scale_y
        tx = x + px * c - py * s
        ty = y + px * s + py * c
        acc.add(Rect(tx, ty, 0, 0))
    return acc.result()


def fit_rect(image_width, image_height, area_width, area_height,
             policy=FIT_CONTAIN):
    """Scale an image into an area, centered.

    Args:
        image_width, image_height: Natural image size.
        area_width, area_height: Target area (the canvas).
        policy: FIT_CONTAIN keeps the whole image visible,
                FIT_COVER fills the area and crops the overflow.

    Returns:
        Rect placement of the scaled image, or None if the image
        has no area.
    """
    if image_width <= 0 or image_height <= 0:
        return None
    if area_width <= 0 or area_height <= 0:
        return None
    image_ratio = image_width / image_height
    area_ratio = area_width / area_height
    wider = image_ratio > area_ratio
    if policy == FIT_COVER:
        scale = area_height / image_height if wider \
            else area_width / image_width
    else:
        scale = area_width / image_width if wider \
            else area_height / image_height
    w = image_width * scale
    h = image_height * scale
    return Rect((area_width - w) / 2, (area_height - h) / 2, w, h)


def shadow_bounds(rect, blur, offset_x, offset_y):
    """Extent of the shadow cast by rect: moved by the offset, grown by blur."""
    moved = Rect(rect.x + offset_x, rect.y + offset_y, rect.width, rect.height)
    return moved.expanded(max(0.0, blur))
