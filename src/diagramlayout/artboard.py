"""Root container and the measure -> layout -> finalize pipeline."""
from __future__ import annotations

import logging
import math
from typing import Dict, Optional

from .element import Element, Size
from .layout import Container, SizeMode
from .rectangle import BoxModelSpec
from .render import render_svg
from .units import BoxReference

logger = logging.getLogger(__name__)

DEFAULT_ARTBOARD_WIDTH = 800
DEFAULT_ARTBOARD_HEIGHT = 600


def measure_tree(root: Element) -> None:
    """Measure every element, children before parents."""
    count = 0
    for element in root.iter_post_order():
        element.measure()
        count += 1
    logger.debug("measured %d elements under %r", count, root)


def layout_tree(root: Element) -> None:
    """Lay out every element, deepest first."""
    count = 0
    for element in root.iter_post_order():
        element.layout()
        count += 1
    logger.debug("laid out %d elements under %r", count, root)


class Artboard(Container):
    """Top-level canvas; children default to the content-box origin."""

    def __init__(
        self,
        width: SizeMode = DEFAULT_ARTBOARD_WIDTH,
        height: SizeMode = DEFAULT_ARTBOARD_HEIGHT,
        box_model: BoxModelSpec = None,
        background: Optional[str] = None,
        style: Optional[Dict[str, str]] = None,
    ) -> None:
        super().__init__(width=width, height=height, direction="none", box_model=box_model, style=style)
        self.background = background

    def run_layout(self) -> None:
        logger.debug("layout pass starting for %r", self)
        measure_tree(self)
        layout_tree(self)
        self.finalize_size()
        logger.debug("layout pass finished for %r: %gx%g", self, self.width, self.height)

    def finalize_size(self) -> None:
        """Fit auto axes to the world bounds of every descendant, rotated or escaped ones included."""
        if not self.is_auto_sized:
            return
        content_origin = self.get_position_for_box(BoxReference.CONTENT)
        min_x = min_y = math.inf
        max_x = max_y = -math.inf
        for element in self.iter_post_order():
            if element is self:
                continue
            left, top, right, bottom = element.bounding_box()
            min_x = min(min_x, left - content_origin.x)
            min_y = min(min_y, top - content_origin.y)
            max_x = max(max_x, right - content_origin.x)
            max_y = max(max_y, bottom - content_origin.y)
        if math.isinf(min_x):
            return
        content = self._normalize_to((min_x, min_y, max_x, max_y))
        thick_x, thick_y = self.box_model.thickness_to_content()
        current = self.get_box_size(BoxReference.BORDER)
        width = content.width + thick_x if self.auto_width else current.width
        height = content.height + thick_y if self.auto_height else current.height
        self._derived = Size(width, height)

    def render(self) -> str:
        self.run_layout()
        return render_svg(self)
