"""Unit parsing and box-model resolution."""
from __future__ import annotations

import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Sequence, Tuple, Union

from .errors import ConfigurationError

UNIT_BASE_PX = 16.0

_UNIT_RE = re.compile(r"^(-?(?:\d+(?:\.\d*)?|\.\d+))([a-z%]*)$", re.IGNORECASE)

# px per unit; relative units are handled separately because they scale with the base.
_ABSOLUTE_UNITS = {
    "": 1.0,
    "px": 1.0,
    "pt": 4.0 / 3.0,
    "cm": 37.8,
    "mm": 3.78,
    "in": 96.0,
}

Length = Union[int, float, str]
SidesSpec = Union[None, Length, Sequence[Length], Mapping[str, Length], "Sides"]


class BoxReference(str, Enum):
    MARGIN = "margin"
    BORDER = "border"
    PADDING = "padding"
    CONTENT = "content"

    @classmethod
    def coerce(cls, value: Union["BoxReference", str, None], default: "BoxReference") -> "BoxReference":
        if value is None:
            return default
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        # "contentBox" style names are accepted alongside the bare layer name.
        if key.endswith("box"):
            key = key[:-3]
        try:
            return cls(key)
        except ValueError as exc:
            raise ConfigurationError("E_BOX_REFERENCE", f"unknown box reference: {value!r}") from exc


@dataclass(frozen=True)
class Sides:
    top: float = 0.0
    right: float = 0.0
    bottom: float = 0.0
    left: float = 0.0

    @property
    def horizontal(self) -> float:
        return self.left + self.right

    @property
    def vertical(self) -> float:
        return self.top + self.bottom

    def is_non_negative(self) -> bool:
        return min(self.top, self.right, self.bottom, self.left) >= 0


ZERO_SIDES = Sides()


@dataclass(frozen=True)
class BoxModel:
    margin: Sides = ZERO_SIDES
    border: Sides = ZERO_SIDES
    padding: Sides = ZERO_SIDES

    def offset(self, layer: Union[BoxReference, str]) -> Tuple[float, float]:
        """Top-left of ``layer`` measured from the margin-box origin."""
        ref = BoxReference.coerce(layer, BoxReference.BORDER)
        x = 0.0
        y = 0.0
        if ref is BoxReference.MARGIN:
            return x, y
        x += self.margin.left
        y += self.margin.top
        if ref is BoxReference.BORDER:
            return x, y
        x += self.border.left
        y += self.border.top
        if ref is BoxReference.PADDING:
            return x, y
        return x + self.padding.left, y + self.padding.top

    def thickness_to_content(self) -> Tuple[float, float]:
        return (
            self.border.horizontal + self.padding.horizontal,
            self.border.vertical + self.padding.vertical,
        )


EMPTY_BOX_MODEL = BoxModel()


def parse_unit(value: Length, base: float = UNIT_BASE_PX) -> float:
    """Convert a number or a unit string such as ``"2rem"`` to pixels."""
    if isinstance(value, bool) or value is None:
        raise ConfigurationError("E_UNIT", f"invalid length: {value!r}")
    if isinstance(value, (int, float)):
        if not math.isfinite(value):
            raise ConfigurationError("E_UNIT", f"length must be finite: {value!r}")
        return float(value)
    if not isinstance(value, str):
        raise ConfigurationError("E_UNIT", f"invalid length: {value!r}")
    match = _UNIT_RE.match(value.strip())
    if not match:
        raise ConfigurationError("E_UNIT", f"invalid unit value: {value!r}")
    number = float(match.group(1))
    unit = match.group(2).lower()
    if unit in _ABSOLUTE_UNITS:
        return number * _ABSOLUTE_UNITS[unit]
    if unit in ("rem", "em"):
        return number * base
    if unit == "%":
        return number / 100.0 * base
    raise ConfigurationError("E_UNIT", f"unknown unit {unit!r} in {value!r}")


def parse_sides(value: SidesSpec) -> Sides:
    if value is None:
        return ZERO_SIDES
    if isinstance(value, Sides):
        return value
    if isinstance(value, Mapping):
        unknown = set(value) - {"top", "right", "bottom", "left"}
        if unknown:
            raise ConfigurationError("E_BOX_KEY", f"unknown side(s): {', '.join(sorted(unknown))}")
        return Sides(
            top=parse_unit(value.get("top", 0)),
            right=parse_unit(value.get("right", 0)),
            bottom=parse_unit(value.get("bottom", 0)),
            left=parse_unit(value.get("left", 0)),
        )
    if isinstance(value, str):
        parts = value.split()
        if len(parts) == 1:
            side = parse_unit(parts[0])
            return Sides(side, side, side, side)
        return _shorthand(parts)
    if isinstance(value, (int, float)):
        side = parse_unit(value)
        return Sides(side, side, side, side)
    if isinstance(value, (list, tuple)):
        return _shorthand(list(value))
    raise ConfigurationError("E_BOX_VALUE", f"unsupported spacing value: {value!r}")


def _shorthand(parts: Sequence[Length]) -> Sides:
    values = [parse_unit(part) for part in parts]
    if len(values) == 1:
        return Sides(values[0], values[0], values[0], values[0])
    if len(values) == 2:
        return Sides(values[0], values[1], values[0], values[1])
    if len(values) == 3:
        return Sides(values[0], values[1], values[2], values[1])
    if len(values) == 4:
        return Sides(*values)
    raise ConfigurationError("E_BOX_VALUE", f"expected 1-4 spacing values, got {len(values)}")


def resolve_box_model(value: Union[None, BoxModel, Mapping[str, SidesSpec]]) -> BoxModel:
    """Resolve a box-model configuration to pixels, rejecting negative sides."""
    if value is None:
        return EMPTY_BOX_MODEL
    if isinstance(value, BoxModel):
        model = value
    elif isinstance(value, Mapping):
        unknown = set(value) - {"margin", "border", "padding"}
        if unknown:
            raise ConfigurationError("E_BOX_KEY", f"unknown box-model key(s): {', '.join(sorted(unknown))}")
        model = BoxModel(
            margin=parse_sides(value.get("margin")),
            border=parse_sides(value.get("border")),
            padding=parse_sides(value.get("padding")),
        )
    else:
        raise ConfigurationError("E_BOX_VALUE", f"unsupported box model: {value!r}")
    for name in ("margin", "border", "padding"):
        if not getattr(model, name).is_non_negative():
            raise ConfigurationError("E_BOX_NEGATIVE", f"{name} values must be >= 0: {getattr(model, name)}")
    return model

