"""Public API for diagramlayout."""
from .artboard import Artboard, layout_tree, measure_tree
from .element import AnchorKind, Element, Point, PositionSpec, Size
from .errors import ConfigurationError, InvariantViolation, LayoutError
from .layout import Columns, Container, ContainerConfig, Grid, HStack, VStack, ZStack
from .logging_config import setup_logging
from .rectangle import Rectangle
from .render import render_svg
from .shapes import Circle
from .text import PillowTextMeasurer, Text, TextStyle, heuristic_measure
from .units import BoxModel, BoxReference, Sides, parse_sides, parse_unit, resolve_box_model

__version__ = "0.1.0"

__all__ = [
    "AnchorKind",
    "Artboard",
    "BoxModel",
    "BoxReference",
    "Circle",
    "Columns",
    "ConfigurationError",
    "Container",
    "ContainerConfig",
    "Element",
    "Grid",
    "HStack",
    "InvariantViolation",
    "LayoutError",
    "PillowTextMeasurer",
    "Point",
    "PositionSpec",
    "Rectangle",
    "Sides",
    "Size",
    "Text",
    "TextStyle",
    "VStack",
    "ZStack",
    "heuristic_measure",
    "layout_tree",
    "measure_tree",
    "parse_sides",
    "parse_unit",
    "render_svg",
    "resolve_box_model",
    "setup_logging",
]
