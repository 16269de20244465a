# BoundingBox - Tight visual extent of a scene
#
# Asks the rendering engine for each visible node's effective
# rectangle (with stroke, rotation, scale and shadow included) and
# accumulates the union.  The engine is any object providing:
#
#   node_effective_rect(node, include_shadow, include_stroke) -> Rect
#   canvas_size() -> (width, height)
#
# so the resolver can run against the Qt engine or a test double.

import logging

from sheetcomposer.Geometry import BoundsAccumulator, Rect


class BoundingBoxResolver:
    def __init__(self, scene, engine):
        self._scene = scene
        self._engine = engine

    def full_canvas_rect(self):
        width, height = self._engine.canvas_size()
        return Rect(0, 0, width, height)

    def compute_content_rect(self, bleed=0):
        """Return the pixel-aligned extent of all visible content.

        Args:
            bleed: Extra pixels added on every side.

        Returns:
            Rect with integer origin and positive integer size.  When no
            node contributes, the full canvas is used instead.
        """
        acc = BoundsAccumulator()
        for node in self._scene.all_nodes():
            if not node.visible:
                continue
            rect = self._engine.node_effective_rect(
                node, include_shadow=True, include_stroke=True)
            if rect is None or not rect.is_valid():
                logging.debug("BoundingBox: skipping %r, rect %r", node, rect)
                continue
            acc.add(rect)

        content = acc.result()
        if content is None:
            content = self.full_canvas_rect()
        return content.expanded(bleed).aligned()
