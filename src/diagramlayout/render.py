"""SVG emission for a laid-out artboard."""
from __future__ import annotations

import logging
import math
import xml.etree.ElementTree as ET
from typing import TYPE_CHECKING, List

from .element import Bounds, Element
from .errors import check_invariant
from .layout import Container
from .rectangle import Rectangle
from .shapes import Circle
from .text import Text
from .units import BoxReference

if TYPE_CHECKING:
    from .artboard import Artboard

logger = logging.getLogger(__name__)

SVG_NS = "http://www.w3.org/2000/svg"
ET.register_namespace("", SVG_NS)

BASELINE_RATIO = 0.8


def _q(tag: str) -> str:
    return f"{{{SVG_NS}}}{tag}"


def render_svg(artboard: "Artboard") -> str:
    for element in artboard.iter_post_order():
        check_invariant(element.laid_out, "E_NOT_LAID_OUT", f"{element!r} rendered before layout()")

    origin = artboard.get_position_for_box(BoxReference.BORDER)
    width = artboard.width
    height = artboard.height
    svg_root = ET.Element(
        _q("svg"),
        {
            "width": _fmt(width),
            "height": _fmt(height),
            "viewBox": f"{_fmt(origin.x)} {_fmt(origin.y)} {_fmt(width)} {_fmt(height)}",
        },
    )
    background = (artboard.background or "").strip()
    if background and background.lower() not in {"none", "transparent"}:
        ET.SubElement(
            svg_root,
            _q("rect"),
            {
                "x": _fmt(origin.x),
                "y": _fmt(origin.y),
                "width": _fmt(width),
                "height": _fmt(height),
                "fill": background,
            },
        )
    if artboard.style:
        svg_root.append(_rect_for(artboard))
    _append_children(svg_root, artboard)
    logger.debug("rendered %r", artboard)
    return _pretty_xml(svg_root)


def _paint_order(children: List[Element]) -> List[Element]:
    # Stable sort: equal z-index keeps sibling insertion order.
    return sorted(children, key=lambda child: child.z_index or 0)


def _render_element(element: Element) -> ET.Element:
    if isinstance(element, Container) or not isinstance(element, (Rectangle, Circle)):
        node = ET.Element(_q("g"))
        if isinstance(element, Container) and element.style:
            node.append(_rect_for(element))
        _append_children(node, element)
        _apply_rotation(node, element)
        return node

    if isinstance(element, Text):
        node = _text_for(element)
    elif isinstance(element, Circle):
        node = _circle_for(element)
    else:
        node = _rect_for(element)
    _apply_rotation(node, element)
    if not element.children:
        return node
    group = ET.Element(_q("g"))
    group.append(node)
    _append_children(group, element)
    return group


def _append_children(node: ET.Element, element: Element) -> None:
    for child in _paint_order(element.children):
        node.append(_render_element(child))


def _rect_for(rect: Rectangle) -> ET.Element:
    origin = rect.get_position_for_box(BoxReference.BORDER)
    size = rect.get_box_size(BoxReference.BORDER)
    attrs = {
        "x": _fmt(origin.x),
        "y": _fmt(origin.y),
        "width": _fmt(size.width),
        "height": _fmt(size.height),
        "fill": "none",
    }
    attrs.update(rect.style)
    return ET.Element(_q("rect"), attrs)


def _circle_for(circle: Circle) -> ET.Element:
    origin = circle.get_absolute_position()
    attrs = {
        "cx": _fmt(origin.x + circle.radius),
        "cy": _fmt(origin.y + circle.radius),
        "r": _fmt(circle.radius),
    }
    attrs.update(circle.style)
    return ET.Element(_q("circle"), attrs)


def _text_for(text: Text) -> ET.Element:
    style = text.text_style
    origin = text.get_position_for_box(BoxReference.CONTENT)
    x = _fmt(origin.x)
    attrs = {
        "x": x,
        "y": _fmt(origin.y + BASELINE_RATIO * style.font_size),
        "font-size": _fmt(style.font_size),
        "font-family": style.font_family,
    }
    attrs.update(text.style)
    node = ET.Element(_q("text"), attrs)
    lines = text.lines
    if len(lines) == 1:
        node.text = lines[0]
        return node
    for index, line in enumerate(lines):
        tspan = ET.SubElement(node, _q("tspan"), {"x": x, "dy": "0" if index == 0 else f"{_fmt(style.line_height)}em"})
        tspan.text = line
    return node


def _apply_rotation(node: ET.Element, element: Element) -> None:
    if not element.rotation:
        return
    left, top, right, bottom = _unrotated_box(element)
    cx = (left + right) / 2
    cy = (top + bottom) / 2
    node.set("transform", f"rotate({_fmt(element.rotation)} {_fmt(cx)} {_fmt(cy)})")


def _unrotated_box(element: Element) -> Bounds:
    if isinstance(element, Rectangle):
        origin = element.get_position_for_box(BoxReference.BORDER)
        size = element.get_box_size(BoxReference.BORDER)
        return origin.x, origin.y, origin.x + size.width, origin.y + size.height
    return element.bounding_box()


def _pretty_xml(element: ET.Element) -> str:
    ET.indent(element, space="  ")
    return ET.tostring(element, encoding="unicode")


def _fmt(value: float) -> str:
    if math.isclose(value, round(value)):
        return str(int(round(value)))
    return f"{value:.3f}".rstrip("0").rstrip(".")
