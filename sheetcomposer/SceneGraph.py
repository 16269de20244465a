# SceneGraph - Toolkit-independent scene model
#
# Defines the visual nodes a sheet is composed of and the Scene that
# owns them.  Nodes are plain data: kind-specific content, transform,
# effects, visibility and a z-index.  The rendering engine consumes
# this model to produce actual pixels; nothing here draws.
#
# Scene invariant: the z-indices of the orderable nodes are always
# exactly 0..n-1.  The background node is kept apart and is always
# drawn beneath everything else.

import enum
import itertools

from sheetcomposer.Geometry import FIT_CONTAIN


class NodeKind(enum.Enum):
    TEXT = "text"
    IMAGE = "image"
    CHART = "chart"
    PATTERN = "pattern"

    @property
    def base_name(self):
        return self.name.capitalize()


# ----------------------------------------------------------------------
# Kind-specific content
# ----------------------------------------------------------------------
class TextContent:
    """A text string and its typography."""

    __slots__ = ("text", "font_family", "font_size", "fill", "stroke",
                 "stroke_width", "line_height", "font_style")

    def __init__(self, text="", font_family="Inter", font_size=64,
                 fill="#111111", stroke="#ffffff", stroke_width=2,
                 line_height=1.2, font_style="normal"):
        """
        Args:
            text: Text, may contain newlines.
            font_family: Font family name.
            font_size: Pixel size.
            fill: Fill color string.
            stroke: Outline color string.
            stroke_width: Outline width in pixels, 0 disables it.
            line_height: Line spacing as a multiple of font_size.
            font_style: "normal", "bold", "italic" or "bold italic".
        """
        self.text = text
        self.font_family = font_family
        self.font_size = font_size
        self.fill = fill
        self.stroke = stroke
        self.stroke_width = stroke_width
        self.line_height = line_height
        self.font_style = font_style

    def lines(self):
        return self.text.split("\n")


class ImageContent:
    """A decoded bitmap (toolkit image object) and where it came from."""

    __slots__ = ("image", "source")

    def __init__(self, image, source=None):
        self.image = image
        self.source = source


class ChartContent:
    """A chart: its dataset store and the last raster produced for it."""

    __slots__ = ("store", "image")

    def __init__(self, store, image=None):
        self.store = store
        self.image = image

    @property
    def config(self):
        return self.store.config


class PatternContent:
    """A pattern configuration and the raster generated from it."""

    __slots__ = ("config", "image")

    def __init__(self, config, image=None):
        self.config = config
        self.image = image


# ----------------------------------------------------------------------
# Transform and effects
# ----------------------------------------------------------------------
class Transform:
    __slots__ = ("x", "y", "scale_x", "scale_y", "rotation", "draggable")

    def __init__(self, x=0.0, y=0.0, scale_x=1.0, scale_y=1.0,
                 rotation=0.0, draggable=True):
        self.x = x
        self.y = y
        self.scale_x = scale_x
        self.scale_y = scale_y
        self.rotation = rotation
        self.draggable = draggable


class DropShadow:
    __slots__ = ("enabled", "color", "blur", "opacity",
                 "offset_x", "offset_y")

    def __init__(self, enabled=False, color="#000000", blur=0.0,
                 opacity=0.0, offset_x=0.0, offset_y=0.0):
        self.enabled = enabled
        self.color = color
        self.blur = blur
        self.opacity = opacity
        self.offset_x = offset_x
        self.offset_y = offset_y

    def is_visible(self):
        return self.enabled and self.opacity > 0


class ImageFilters:
    """Image-only pixel filters: blur and hue/saturation/luminance."""

    __slots__ = ("blur_enabled", "blur_radius", "hsl_enabled",
                 "hue", "saturation", "luminance")

    def __init__(self, blur_enabled=False, blur_radius=0.0,
                 hsl_enabled=False, hue=0.0, saturation=0.0,
                 luminance=0.0):
        self.blur_enabled = blur_enabled
        self.blur_radius = blur_radius
        self.hsl_enabled = hsl_enabled
        self.hue = hue
        self.saturation = saturation
        self.luminance = luminance

    def is_identity(self):
        blur = self.blur_enabled and self.blur_radius > 0
        return not blur and not self.hsl_enabled


class Effects:
    __slots__ = ("shadow", "filters")

    def __init__(self, shadow=None, filters=None):
        self.shadow = shadow or DropShadow()
        self.filters = filters or ImageFilters()


# ----------------------------------------------------------------------
# Nodes
# ----------------------------------------------------------------------
class VisualNode:
    """The unit of composition.

    The kind is fixed at construction; content must match it.
    """

    __slots__ = ("id", "kind", "content", "z_index", "visible",
                 "opacity", "transform", "effects")

    def __init__(self, kind, content, transform=None, effects=None,
                 opacity=1.0):
        self.id = None              # assigned by Scene
        self.kind = NodeKind(kind)
        self.content = content
        self.z_index = None         # assigned by Scene
        self.visible = True
        self.opacity = opacity
        self.transform = transform or Transform()
        self.effects = effects or Effects()

    def raster(self):
        """Return the toolkit image backing this node, or None for text."""
        if self.kind == NodeKind.TEXT:
            return None
        return self.content.image

    def __repr__(self):
        return "<VisualNode {} {} z={}{}>".format(
            self.id, self.kind.value, self.z_index,
            "" if self.visible else " hidden")


class Background:
    """Background image node and its fit policy."""

    __slots__ = ("node", "fit")

    def __init__(self, node, fit=FIT_CONTAIN):
        self.node = node
        self.fit = fit


class Scene:
    """Ordered set of visual nodes plus an optional background.

    Nodes are looked up by id.  Operations on ids that no longer exist
    are no-ops returning False, since UI references may be stale.
    """

    def __init__(self, width=1600, height=1200):
        self.width = width
        self.height = height
        self.background = None
        self._nodes = {}
        self._ids = itertools.count(1)

    # ---- membership -------------------------------------------------------

    def add(self, node):
        """Append node at the top of the z-order and give it an id.

        Returns:
            The node id.
        """
        node.id = next(self._ids)
        node.z_index = len(self._nodes)
        self._nodes[node.id] = node
        return node.id

    def remove(self, node_id):
        """Delete a node and re-densify the remaining z-indices.

        Returns:
            The removed node, or None if the id was unknown.
        """
        node = self._nodes.pop(node_id, None)
        if node is None:
            return None
        self.assign_order(self.nodes_bottom_to_top())
        return node

    def clear(self):
        self._nodes.clear()
        self.background = None

    def get(self, node_id):
        return self._nodes.get(node_id)

    def __contains__(self, node_id):
        return node_id in self._nodes

    def __len__(self):
        return len(self._nodes)

    # ---- background -------------------------------------------------------

    def set_background(self, node, fit=FIT_CONTAIN):
        """Install node as background; it never joins the z-order."""
        if self.background is not None:
            node.id = self.background.node.id
        else:
            node.id = next(self._ids)
        node.z_index = -1
        node.transform.draggable = False
        self.background = Background(node, fit)
        return node.id

    def clear_background(self):
        had = self.background is not None
        self.background = None
        return had

    # ---- state ------------------------------------------------------------

    def set_visible(self, node_id, visible):
        node = self._nodes.get(node_id)
        if node is None:
            return False
        node.visible = bool(visible)
        return True

    # ---- ordering ---------------------------------------------------------

    def nodes_bottom_to_top(self):
        return sorted(self._nodes.values(), key=lambda n: n.z_index)

    def display_order_top_to_bottom(self):
        """Nodes by descending z-index: the order the layer list shows."""
        return sorted(self._nodes.values(), key=lambda n: n.z_index,
                      reverse=True)

    def assign_order(self, bottom_to_top):
        """Give each node its position in the list as z-index."""
        for index, node in enumerate(bottom_to_top):
            node.z_index = index

    def all_nodes(self):
        """Background first, then main nodes bottom to top."""
        if self.background is not None:
            yield self.background.node
        yield from self.nodes_bottom_to_top()
