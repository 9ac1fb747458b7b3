"""Layout containers: stacking, auto-sizing, freeform normalization, grids."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Union

from .element import Bounds, Element, Point, Size
from .errors import ConfigurationError
from .rectangle import BoxModelSpec, Rectangle, _check_box_fits, _parse_dimension
from .units import BoxReference, Length, parse_unit

logger = logging.getLogger(__name__)

AUTO = "auto"
DIRECTIONS = ("none", "freeform", "horizontal", "vertical", "layered")
PROACTIVE_DIRECTIONS = ("horizontal", "vertical", "layered")
HORIZONTAL_ALIGNMENTS = ("left", "center", "right")
VERTICAL_ALIGNMENTS = ("top", "center", "bottom")
_ALIGN_FACTORS = {"left": 0.0, "top": 0.0, "center": 0.5, "right": 1.0, "bottom": 1.0}

SizeMode = Union[int, float, str]


@dataclass
class ContainerConfig:
    """Container options.

    ``direction``:
      * ``"horizontal"``/``"vertical"``: proactive stacking in insertion order.
      * ``"none"``: children default to the content-box origin (artboards, cells).
      * ``"freeform"``: children position themselves.
      * ``"layered"``: every child aligned at the same point, each layer shifted
        by ``layer_offset``.
    ``width``/``height`` take a length or ``"auto"``; each axis resolves on its own.
    """

    width: SizeMode = AUTO
    height: SizeMode = AUTO
    direction: str = "none"
    spacing: Length = 0
    spread: bool = False
    horizontal_alignment: str = "left"
    vertical_alignment: str = "top"
    layer_offset: Length = 0
    box_model: BoxModelSpec = None
    style: Optional[Dict[str, str]] = None


def _is_auto(value: SizeMode) -> bool:
    return isinstance(value, str) and value.strip().lower() == AUTO


def _resolve_size_mode(value: SizeMode, name: str) -> Optional[float]:
    return None if _is_auto(value) else _parse_dimension(value, name)


def _validate_config(config: ContainerConfig) -> None:
    if config.direction not in DIRECTIONS:
        raise ConfigurationError(
            "E_CONFIG", f"direction must be one of {', '.join(DIRECTIONS)}; got {config.direction!r}"
        )
    if config.horizontal_alignment not in HORIZONTAL_ALIGNMENTS:
        raise ConfigurationError(
            "E_CONFIG", f"horizontal_alignment must be one of {', '.join(HORIZONTAL_ALIGNMENTS)}"
        )
    if config.vertical_alignment not in VERTICAL_ALIGNMENTS:
        raise ConfigurationError(
            "E_CONFIG", f"vertical_alignment must be one of {', '.join(VERTICAL_ALIGNMENTS)}"
        )


class Container(Rectangle):
    def __init__(self, config: Optional[ContainerConfig] = None, **overrides) -> None:
        if config is None:
            config = ContainerConfig(**overrides)
        elif overrides:
            config = replace(config, **overrides)
        _validate_config(config)
        auto_width = _is_auto(config.width)
        auto_height = _is_auto(config.height)
        super().__init__(
            None if auto_width else config.width,
            None if auto_height else config.height,
            box_model=config.box_model,
            style=config.style,
        )
        self.auto_width = auto_width
        self.auto_height = auto_height
        self.direction = config.direction
        self.spacing = parse_unit(config.spacing)
        if self.spacing < 0:
            raise ConfigurationError("E_CONFIG", f"spacing must be >= 0, got {config.spacing!r}")
        self.layer_offset = parse_unit(config.layer_offset)
        if self.layer_offset < 0:
            raise ConfigurationError("E_CONFIG", f"layer_offset must be >= 0, got {config.layer_offset!r}")
        self.spread = config.spread
        self.horizontal_alignment = config.horizontal_alignment
        self.vertical_alignment = config.vertical_alignment

    @property
    def is_proactive(self) -> bool:
        return self.direction in PROACTIVE_DIRECTIONS

    @property
    def is_auto_sized(self) -> bool:
        return self.auto_width or self.auto_height

    def resize(self, width: Optional[SizeMode] = None, height: Optional[SizeMode] = None) -> None:
        """Fix an axis to a length, or pass ``"auto"`` to derive it from the children again."""
        new_width = self._width if width is None else _resolve_size_mode(width, "width")
        new_height = self._height if height is None else _resolve_size_mode(height, "height")
        _check_box_fits(self.box_model, new_width, new_height)
        self._width = new_width
        self._height = new_height
        self.auto_width = new_width is None
        self.auto_height = new_height is None
        self.invalidate_measurement()

    def _children_changed(self) -> None:
        if self.is_auto_sized:
            self.invalidate_measurement()
        else:
            self.invalidate_layout()

    def _child_moved(self, child: Element) -> None:
        if self.is_proactive:
            self.invalidate_layout()
        elif self.is_auto_sized:
            self.invalidate_measurement()

    def _place_child(self, child: Element) -> None:
        if self.direction != "none" or child._has_explicit_position:
            return
        child._position = self.get_box_offset(BoxReference.CONTENT) - child.default_anchor_offset()

    # -- measurement ------------------------------------------------------------

    def perform_measurement(self) -> None:
        super().perform_measurement()
        if not self.is_auto_sized:
            return
        if self.is_proactive:
            content = self._stacked_content_size()
        else:
            content = self.normalize_bounds()
        thick_x, thick_y = self.box_model.thickness_to_content()
        self._derived = Size(content.width + thick_x, content.height + thick_y)

    def _stacked_content_size(self) -> Size:
        sizes = [child.outer_size() for child in self.children]
        if not sizes:
            logger.debug("%r has no children; auto axes resolve to 0", self)
            return Size()
        if self.direction == "layered":
            fan = self.layer_offset * (len(sizes) - 1)
            return Size(max(s.width for s in sizes) + fan, max(s.height for s in sizes) + fan)
        gaps = self.spacing * (len(sizes) - 1)
        if self.direction == "vertical":
            return Size(max(s.width for s in sizes), sum(s.height for s in sizes) + gaps)
        return Size(sum(s.width for s in sizes) + gaps, max(s.height for s in sizes))

    def normalize_bounds(self) -> Size:
        """Re-base children so none starts before the content origin on an auto axis.

        The container's own origin moves by the same amount, so no child's world
        position changes. Returns the content extent measured from the content
        origin. Children must already be measured.
        """
        bounds = self._children_bounds()
        if bounds is None:
            logger.debug("%r has no children; auto axes resolve to 0", self)
            return Size()
        return self._normalize_to(bounds)

    def _children_bounds(self) -> Optional[Bounds]:
        if not self.children:
            return None
        origin = self.get_box_offset(BoxReference.CONTENT)
        min_x = min_y = math.inf
        max_x = max_y = -math.inf
        for child in self.children:
            size = child.outer_size()
            x = child.relative_position.x - origin.x
            y = child.relative_position.y - origin.y
            min_x = min(min_x, x)
            min_y = min(min_y, y)
            max_x = max(max_x, x + size.width)
            max_y = max(max_y, y + size.height)
        return min_x, min_y, max_x, max_y

    def _normalize_to(self, bounds: Bounds) -> Size:
        min_x, min_y, max_x, max_y = bounds
        shift = Point(
            min(0.0, min_x) if self.auto_width else 0.0,
            min(0.0, min_y) if self.auto_height else 0.0,
        )
        if shift.x or shift.y:
            logger.debug("normalizing %r by (%g, %g)", self, shift.x, shift.y)
            self._position = self._position + shift
            for child in self.children:
                child._position = child._position - shift
        return Size(max(0.0, max_x - shift.x), max(0.0, max_y - shift.y))

    # -- layout -------------------------------------------------------------------

    def perform_layout(self) -> None:
        if not self.is_proactive or not self.children:
            return
        if self.direction == "layered":
            self._layout_layers()
            return
        vertical = self.direction == "vertical"
        content = self.get_box_size(BoxReference.CONTENT)
        origin = self.get_box_offset(BoxReference.CONTENT)
        sizes = [child.outer_size() for child in self.children]
        if vertical:
            main_sizes = [s.height for s in sizes]
            cross_sizes = [s.width for s in sizes]
            main_available, cross_available = content.height, content.width
            main_align, cross_align = self.vertical_alignment, self.horizontal_alignment
        else:
            main_sizes = [s.width for s in sizes]
            cross_sizes = [s.height for s in sizes]
            main_available, cross_available = content.width, content.height
            main_align, cross_align = self.horizontal_alignment, self.vertical_alignment

        gap = self._effective_spacing(main_sizes, main_available)
        used = sum(main_sizes) + gap * (len(main_sizes) - 1)
        cursor = 0.0
        if not self.spread:
            cursor = max(0.0, (main_available - used) * _ALIGN_FACTORS[main_align])

        for child, main, cross in zip(self.children, main_sizes, cross_sizes):
            cross_offset = (cross_available - cross) * _ALIGN_FACTORS[cross_align]
            if vertical:
                child._position = Point(origin.x + cross_offset, origin.y + cursor)
            else:
                child._position = Point(origin.x + cursor, origin.y + cross_offset)
            cursor += main + gap
        logger.debug("stacked %d children in %r", len(self.children), self)

    def _effective_spacing(self, main_sizes: List[float], main_available: float) -> float:
        auto_main = self.auto_height if self.direction == "vertical" else self.auto_width
        if not self.spread or len(main_sizes) < 2 or auto_main:
            return self.spacing
        return max(0.0, (main_available - sum(main_sizes)) / (len(main_sizes) - 1))

    def _layout_layers(self) -> None:
        content = self.get_box_size(BoxReference.CONTENT)
        origin = self.get_box_offset(BoxReference.CONTENT)
        last = len(self.children) - 1
        for index, child in enumerate(self.children):
            size = child.outer_size()
            x = (content.width - size.width) * _ALIGN_FACTORS[self.horizontal_alignment]
            y = (content.height - size.height) * _ALIGN_FACTORS[self.vertical_alignment]
            x += self.layer_offset * _layer_steps(self.horizontal_alignment, index, last)
            y += self.layer_offset * _layer_steps(self.vertical_alignment, index, last)
            child._position = Point(origin.x + x, origin.y + y)
        logger.debug("layered %d children in %r", len(self.children), self)


def _layer_steps(alignment: str, index: int, last: int) -> float:
    # Layers fan away from the aligned edge; centred layers fan out symmetrically.
    factor = _ALIGN_FACTORS[alignment]
    if factor == 0.5:
        return index - last / 2
    if factor == 1.0:
        return -index
    return index


class VStack(Container):
    """Vertical stack; width and height default to ``"auto"``."""

    def __init__(self, **options) -> None:
        options["direction"] = "vertical"
        super().__init__(ContainerConfig(**options))


class HStack(Container):
    """Horizontal stack; width and height default to ``"auto"``."""

    def __init__(self, **options) -> None:
        options["direction"] = "horizontal"
        super().__init__(ContainerConfig(**options))


class ZStack(Container):
    """Children layered on one aligned point, later children painted on top.

    Alignment defaults to centre on both axes; ``layer_offset`` fans the layers
    out like a card deck.
    """

    def __init__(self, **options) -> None:
        options["direction"] = "layered"
        options.setdefault("horizontal_alignment", "center")
        options.setdefault("vertical_alignment", "center")
        super().__init__(ContainerConfig(**options))


class Grid:
    """Rows of equally sized cells built from nested stacks.

    ``container`` is the element to attach; each cell is a ``direction="none"``
    container, so content added to a cell lands at the cell's content origin.
    """

    def __init__(
        self,
        rows: int,
        columns: int,
        cell_width: SizeMode,
        cell_height: SizeMode,
        gutter: Length = 0,
        box_model: BoxModelSpec = None,
        style: Optional[Dict[str, str]] = None,
    ) -> None:
        if rows < 1 or columns < 1:
            raise ConfigurationError("E_CONFIG", f"grid needs at least one row and column, got {rows}x{columns}")
        self.rows = rows
        self.columns = columns
        self.container = Container(direction="vertical", spacing=gutter)
        self._cells: List[List[Container]] = []
        for _ in range(rows):
            row = Container(direction="horizontal", height=cell_height, spacing=gutter)
            cells = []
            for _ in range(columns):
                cell = Container(
                    width=cell_width,
                    height=cell_height,
                    direction="none",
                    box_model=box_model,
                    style=style,
                )
                row.add_element(cell)
                cells.append(cell)
            self.container.add_element(row)
            self._cells.append(cells)

    @property
    def cells(self) -> List[List[Container]]:
        return [list(row) for row in self._cells]

    def get_cell(self, row: int, column: int) -> Container:
        if not (0 <= row < self.rows and 0 <= column < self.columns):
            raise IndexError(f"cell ({row}, {column}) is out of bounds for a {self.rows}x{self.columns} grid")
        return self._cells[row][column]

    def get_row(self, row: int) -> List[Container]:
        if not 0 <= row < self.rows:
            raise IndexError(f"row {row} is out of bounds")
        return list(self._cells[row])

    def get_column(self, column: int) -> List[Container]:
        if not 0 <= column < self.columns:
            raise IndexError(f"column {column} is out of bounds")
        return [row[column] for row in self._cells]


class Columns:
    """Side-by-side ``direction="none"`` columns separated by a gutter."""

    def __init__(
        self,
        count: int,
        column_width: SizeMode,
        height: SizeMode = AUTO,
        gutter: Length = 0,
        vertical_alignment: str = "top",
        box_model: BoxModelSpec = None,
        style: Optional[Dict[str, str]] = None,
    ) -> None:
        if count < 1:
            raise ConfigurationError("E_CONFIG", f"columns needs count >= 1, got {count}")
        self.count = count
        self.container = Container(
            direction="horizontal",
            height=height,
            spacing=gutter,
            vertical_alignment=vertical_alignment,
            box_model=box_model,
            style=style,
        )
        self._columns: List[Container] = []
        for _ in range(count):
            column = Container(width=column_width, height=height, direction="none")
            self.container.add_element(column)
            self._columns.append(column)

    @property
    def columns(self) -> List[Container]:
        return list(self._columns)

    def get_column(self, index: int) -> Container:
        if not 0 <= index < self.count:
            raise IndexError(f"column {index} is out of bounds")
        return self._columns[index]
