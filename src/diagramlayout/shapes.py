"""Fixed-size leaf shapes."""
from __future__ import annotations

from typing import Dict, Optional

from .element import AnchorKind, Element, Size
from .errors import ConfigurationError
from .units import Length, parse_unit


class Circle(Element):
    """Circle placed by its centre; its origin is the top-left of its bounding square."""

    anchor_kind = AnchorKind.CENTER

    def __init__(self, radius: Length, style: Optional[Dict[str, str]] = None) -> None:
        super().__init__(style=style)
        self._radius = _parse_radius(radius)

    @property
    def radius(self) -> float:
        return self._radius

    @radius.setter
    def radius(self, value: Length) -> None:
        self._radius = _parse_radius(value)
        self.invalidate_measurement()

    def _intrinsic_size(self) -> Size:
        return Size(2 * self._radius, 2 * self._radius)

    def outer_size(self) -> Size:
        # Fixed geometry: known before the measurement pass.
        return self._intrinsic_size()


def _parse_radius(value: Length) -> float:
    radius = parse_unit(value)
    if radius < 0:
        raise ConfigurationError("E_SIZE_NEGATIVE", f"radius must be >= 0, got {value!r}")
    return radius
