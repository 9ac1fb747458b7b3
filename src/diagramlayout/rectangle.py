"""Box-aware rectangle: margin/border/padding/content geometry and anchors."""
from __future__ import annotations

import math
from typing import Dict, List, Mapping, Optional, Union

from .element import Bounds, Element, Point, Size
from .errors import ConfigurationError, check_invariant
from .units import BoxModel, BoxReference, Length, SidesSpec, parse_unit, resolve_box_model

BoxModelSpec = Union[None, BoxModel, Mapping[str, SidesSpec]]
LayerLike = Union[BoxReference, str]


class BoxAccessor:
    """Anchor points of one box layer, recomputed on every read."""

    def __init__(self, owner: "Rectangle", layer: BoxReference) -> None:
        self._owner = owner
        self.layer = layer

    @property
    def size(self) -> Size:
        return self._owner.get_box_size(self.layer)

    def anchor(self, name: str) -> Point:
        return self._owner.anchor_point(name, self.layer)

    @property
    def top_left(self) -> Point:
        return self.anchor("top_left")

    @property
    def top_center(self) -> Point:
        return self.anchor("top_center")

    @property
    def top_right(self) -> Point:
        return self.anchor("top_right")

    @property
    def center_left(self) -> Point:
        return self.anchor("center_left")

    @property
    def center(self) -> Point:
        return self.anchor("center")

    @property
    def center_right(self) -> Point:
        return self.anchor("center_right")

    @property
    def bottom_left(self) -> Point:
        return self.anchor("bottom_left")

    @property
    def bottom_center(self) -> Point:
        return self.anchor("bottom_center")

    @property
    def bottom_right(self) -> Point:
        return self.anchor("bottom_right")


class Rectangle(Element):
    """Element with a border-box size and a resolved box model.

    ``width``/``height`` are border-box totals. The element's origin is the
    top-left of its margin box; unqualified anchors refer to the content box.
    """

    default_box_reference = BoxReference.CONTENT

    def __init__(
        self,
        width: Optional[Length],
        height: Optional[Length],
        box_model: BoxModelSpec = None,
        style: Optional[Dict[str, str]] = None,
    ) -> None:
        super().__init__(style=style)
        self._width = _parse_dimension(width, "width")
        self._height = _parse_dimension(height, "height")
        self._box_model = resolve_box_model(box_model)
        _check_box_fits(self._box_model, self._width, self._height)
        # Border-box size computed during measurement for axes without a fixed size.
        self._derived: Optional[Size] = None

    @property
    def box_model(self) -> BoxModel:
        return self._box_model

    @property
    def width(self) -> float:
        return self._border_box_size().width

    @property
    def height(self) -> float:
        return self._border_box_size().height

    @property
    def margin_box(self) -> BoxAccessor:
        return BoxAccessor(self, BoxReference.MARGIN)

    @property
    def border_box(self) -> BoxAccessor:
        return BoxAccessor(self, BoxReference.BORDER)

    @property
    def padding_box(self) -> BoxAccessor:
        return BoxAccessor(self, BoxReference.PADDING)

    @property
    def content_box(self) -> BoxAccessor:
        return BoxAccessor(self, BoxReference.CONTENT)

    def resize(self, width: Optional[Length] = None, height: Optional[Length] = None) -> None:
        new_width = self._width if width is None else _parse_dimension(width, "width")
        new_height = self._height if height is None else _parse_dimension(height, "height")
        _check_box_fits(self._box_model, new_width, new_height)
        self._width = new_width
        self._height = new_height
        self.invalidate_measurement()

    def set_box_model(self, value: BoxModelSpec) -> None:
        model = resolve_box_model(value)
        _check_box_fits(model, self._width, self._height)
        self._box_model = model
        self.invalidate_measurement()

    def _border_box_size(self) -> Size:
        width = self._width
        height = self._height
        if width is None or height is None:
            check_invariant(
                self.measured and self._derived is not None,
                "E_STALE_READ",
                f"{self!r} size read before measure()",
            )
            if width is None:
                width = self._derived.width
            if height is None:
                height = self._derived.height
        return Size(width, height)

    def _intrinsic_size(self) -> Size:
        return self._border_box_size()

    def get_box_size(self, layer: LayerLike = BoxReference.BORDER) -> Size:
        ref = BoxReference.coerce(layer, BoxReference.BORDER)
        border = self._border_box_size()
        model = self._box_model
        if ref is BoxReference.BORDER:
            return border
        if ref is BoxReference.MARGIN:
            return Size(border.width + model.margin.horizontal, border.height + model.margin.vertical)
        padding = Size(border.width - model.border.horizontal, border.height - model.border.vertical)
        if ref is BoxReference.PADDING:
            size = padding
        else:
            size = Size(padding.width - model.padding.horizontal, padding.height - model.padding.vertical)
        check_invariant(
            size.width >= 0 and size.height >= 0,
            "E_BOX_OVERFLOW",
            f"{self!r} has a negative {ref.value} box: {size}",
        )
        return size

    def get_box_offset(self, layer: LayerLike = BoxReference.CONTENT) -> Point:
        x, y = self._box_model.offset(BoxReference.coerce(layer, BoxReference.CONTENT))
        return Point(x, y)

    def get_position_for_box(self, layer: LayerLike = BoxReference.CONTENT) -> Point:
        return self.get_absolute_position() + self.get_box_offset(layer)

    def local_to_absolute(self, x: float, y: float, layer: LayerLike = BoxReference.CONTENT) -> Point:
        return self.get_position_for_box(layer) + Point(x, y)

    def _anchor_origin(self, layer: Optional[LayerLike]) -> Point:
        return self.get_position_for_box(BoxReference.coerce(layer, self.default_box_reference))

    def _anchor_size(self, layer: Optional[LayerLike]) -> Size:
        return self.get_box_size(BoxReference.coerce(layer, self.default_box_reference))

    def outer_size(self) -> Size:
        return self.get_box_size(BoxReference.MARGIN)

    def get_corners(self) -> List[Point]:
        """Border-box corners clockwise from top-left, rotated about the border-box centre."""
        origin = self.get_position_for_box(BoxReference.BORDER)
        size = self.get_box_size(BoxReference.BORDER)
        corners = [
            origin,
            Point(origin.x + size.width, origin.y),
            Point(origin.x + size.width, origin.y + size.height),
            Point(origin.x, origin.y + size.height),
        ]
        if not self.rotation:
            return corners
        cx = origin.x + size.width / 2
        cy = origin.y + size.height / 2
        radians = math.radians(self.rotation)
        cos = math.cos(radians)
        sin = math.sin(radians)
        rotated = []
        for corner in corners:
            dx = corner.x - cx
            dy = corner.y - cy
            rotated.append(Point(cx + dx * cos - dy * sin, cy + dx * sin + dy * cos))
        return rotated

    def bounding_box(self) -> Bounds:
        corners = self.get_corners()
        xs = [corner.x for corner in corners]
        ys = [corner.y for corner in corners]
        return min(xs), min(ys), max(xs), max(ys)


def _parse_dimension(value: Optional[Length], name: str) -> Optional[float]:
    if value is None:
        return None
    parsed = parse_unit(value)
    if parsed < 0:
        raise ConfigurationError("E_SIZE_NEGATIVE", f"{name} must be >= 0, got {value!r}")
    return parsed


def _check_box_fits(model: BoxModel, width: Optional[float], height: Optional[float]) -> None:
    thick_x, thick_y = model.thickness_to_content()
    if width is not None and thick_x > width:
        raise ConfigurationError(
            "E_BOX_OVERFLOW",
            f"border + padding ({thick_x:g}px) exceed the border-box width ({width:g}px)",
        )
    if height is not None and thick_y > height:
        raise ConfigurationError(
            "E_BOX_OVERFLOW",
            f"border + padding ({thick_y:g}px) exceed the border-box height ({height:g}px)",
        )
