"""Element tree: parent/child membership, relative positions and the phase protocol."""
from __future__ import annotations

import itertools
import logging
import math
import weakref
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple, Type, TypeVar, Union

from .errors import ConfigurationError, InvariantViolation, check_invariant
from .units import BoxReference, Length, parse_unit

logger = logging.getLogger(__name__)

Bounds = Tuple[float, float, float, float]

ANCHOR_FRACTIONS: Dict[str, Tuple[float, float]] = {
    "top_left": (0.0, 0.0),
    "top_center": (0.5, 0.0),
    "top_right": (1.0, 0.0),
    "center_left": (0.0, 0.5),
    "center": (0.5, 0.5),
    "center_right": (1.0, 0.5),
    "bottom_left": (0.0, 1.0),
    "bottom_center": (0.5, 1.0),
    "bottom_right": (1.0, 1.0),
}

_ELEMENT_IDS = itertools.count(1)

E = TypeVar("E", bound="Element")


@dataclass(frozen=True)
class Point:
    x: float = 0.0
    y: float = 0.0

    def __add__(self, other: "Point") -> "Point":
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Point") -> "Point":
        return Point(self.x - other.x, self.y - other.y)

    def scale(self, factor: float) -> "Point":
        return Point(self.x * factor, self.y * factor)


@dataclass(frozen=True)
class Size:
    width: float = 0.0
    height: float = 0.0


PointLike = Union[Point, Tuple[float, float]]


class AnchorKind(str, Enum):
    """How containers pick an element's default reference point."""

    CORNER = "corner"
    CENTER = "center"


@dataclass
class PositionSpec:
    """One-shot move: align ``relative_from`` onto ``relative_to``, then offset by (x, y).

    Both points are absolute. When ``relative_from`` is omitted the element's own
    top-left anchor on ``box_reference`` is used.
    """

    relative_to: PointLike
    relative_from: Optional[PointLike] = None
    x: Length = 0
    y: Length = 0
    box_reference: Optional[Union[BoxReference, str]] = None


def as_point(value: PointLike) -> Point:
    if isinstance(value, Point):
        return value
    try:
        x, y = value
    except (TypeError, ValueError) as exc:
        raise ConfigurationError("E_POINT", f"expected a point, got {value!r}") from exc
    return Point(float(x), float(y))


class Element:
    """Base node of the diagram tree.

    ``_position`` is the element's origin relative to its parent's origin, or to
    the world origin while detached. World coordinates are never cached: every
    anchor walks the parent chain when read.
    """

    anchor_kind = AnchorKind.CORNER

    def __init__(self, style: Optional[Dict[str, str]] = None) -> None:
        self.id = next(_ELEMENT_IDS)
        self.children: List[Element] = []
        self._parent_ref: Optional[weakref.ReferenceType] = None
        self._position = Point()
        self.rotation = 0.0
        self.z_index: Optional[int] = None
        self.style: Dict[str, str] = dict(style or {})
        self.measured = False
        self.laid_out = False
        self.escapes_layout = False
        self._has_explicit_position = False
        self._pending_escapes: List[Element] = []
        self._escape_holder: Optional[weakref.ReferenceType] = None

    def __repr__(self) -> str:
        return f"<{type(self).__name__} #{self.id}>"

    # -- tree -----------------------------------------------------------------

    @property
    def parent(self) -> Optional["Element"]:
        if self._parent_ref is None:
            return None
        return self._parent_ref()

    @property
    def relative_position(self) -> Point:
        return self._position

    @property
    def is_proactive(self) -> bool:
        return False

    def ancestors(self) -> Iterator["Element"]:
        node = self.parent
        while node is not None:
            yield node
            node = node.parent

    def root(self) -> "Element":
        node = self
        while node.parent is not None:
            node = node.parent
        return node

    def iter_post_order(self) -> Iterator["Element"]:
        """Yield descendants before their parent, siblings in insertion order."""
        for child in list(self.children):
            yield from child.iter_post_order()
        yield self

    def add_element(self, child: E) -> E:
        if child is self or any(ancestor is child for ancestor in self.ancestors()):
            raise ConfigurationError("E_TREE_CYCLE", f"cannot add {child!r} below itself")
        if child.escapes_layout and self.is_proactive:
            self._route_escaping(child)
            return child
        self._attach(child)
        self._adopt_pending_escapes(child)
        return child

    def remove_element(self, child: "Element") -> None:
        if child.parent is not self:
            raise ConfigurationError("E_NOT_CHILD", f"{child!r} is not a child of {self!r}")
        world = child.get_absolute_position()
        self._detach(child)
        child._position = world
        child._has_explicit_position = True

    def create(self, cls: Type[E], *args, **kwargs) -> E:
        """Construct an element and attach it here in one step."""
        return self.add_element(cls(*args, **kwargs))

    def mark_escape_container_layout(self) -> None:
        """Keep this element out of stacking layouts; it positions itself from geometry."""
        self.escapes_layout = True
        parent = self.parent
        if parent is not None and parent.is_proactive:
            parent._route_escaping(self)

    def verify_tree(self) -> None:
        for element in self.iter_post_order():
            seen = set()
            for child in element.children:
                check_invariant(
                    child.parent is element,
                    "E_TWO_PARENTS",
                    f"{child!r} is listed under {element!r} but points at {child.parent!r}",
                )
                check_invariant(id(child) not in seen, "E_TWO_PARENTS", f"{child!r} listed twice under {element!r}")
                seen.add(id(child))

    def _attach(self, child: "Element") -> None:
        _release_hold(child)
        previous = child.parent
        if previous is not None:
            previous._detach(child)
        elif child._has_explicit_position:
            # A detached element's offset is in world space until it gains a parent.
            child._position = child._position - self.get_absolute_position()
        self.children.append(child)
        child._parent_ref = weakref.ref(self)
        self._children_changed()
        self._place_child(child)

    def _detach(self, child: "Element") -> None:
        for index, existing in enumerate(self.children):
            if existing is child:
                del self.children[index]
                break
        else:
            raise InvariantViolation("E_TWO_PARENTS", f"{child!r} points at {self!r} but is not in its children")
        child._parent_ref = None
        self._children_changed()

    def _route_escaping(self, child: "Element") -> None:
        if child.parent is not None:
            world = child.get_absolute_position()
            child.parent._detach(child)
            child._position = world
            child._has_explicit_position = True
        target = self._nearest_non_proactive_ancestor()
        if target is None:
            logger.debug("holding escaping %r on detached %r", child, self)
            _release_hold(child)
            self._pending_escapes.append(child)
            child._escape_holder = weakref.ref(self)
            return
        logger.debug("redirecting escaping %r from %r to %r", child, self, target)
        target.add_element(child)

    def _adopt_pending_escapes(self, child: "Element") -> None:
        for holder in list(child.iter_post_order()):
            if not holder._pending_escapes:
                continue
            target = holder._nearest_non_proactive_ancestor()
            if target is None:
                continue
            pending, holder._pending_escapes = holder._pending_escapes, []
            for element in pending:
                logger.debug("redirecting held %r from %r to %r", element, holder, target)
                target.add_element(element)

    def _nearest_non_proactive_ancestor(self) -> Optional["Element"]:
        for ancestor in self.ancestors():
            if not ancestor.is_proactive:
                return ancestor
        return None

    # Hooks for containers.
    def _children_changed(self) -> None:
        self.invalidate_layout()

    def _child_moved(self, child: "Element") -> None:
        pass

    def _place_child(self, child: "Element") -> None:
        pass

    # -- position -------------------------------------------------------------

    def get_absolute_position(self) -> Point:
        x = self._position.x
        y = self._position.y
        for ancestor in self.ancestors():
            x += ancestor._position.x
            y += ancestor._position.y
        return Point(x, y)

    def position(self, spec: Optional[PositionSpec] = None, **kwargs) -> None:
        """Move by ``(relative_to - relative_from) + (x, y)``; repeated calls compose."""
        if spec is None:
            spec = PositionSpec(**kwargs)
        elif kwargs:
            raise TypeError("pass either a PositionSpec or keyword arguments, not both")
        target = as_point(spec.relative_to)
        if spec.relative_from is None:
            source = self.anchor_point("top_left", spec.box_reference)
        else:
            source = as_point(spec.relative_from)
        offset = Point(target.x - source.x + parse_unit(spec.x), target.y - source.y + parse_unit(spec.y))
        self._position = self._position + offset
        self._has_explicit_position = True
        self._notify_moved()

    def translate(self, along: PointLike, distance: Length) -> None:
        direction = as_point(along)
        length = math.hypot(direction.x, direction.y)
        if length == 0:
            raise ConfigurationError("E_DEGENERATE", "cannot translate along a zero-length vector")
        self._position = self._position + direction.scale(parse_unit(distance) / length)
        self._has_explicit_position = True
        self._notify_moved()

    def rotate(self, deg: float) -> None:
        self.rotation += deg
        self._notify_moved()

    def _notify_moved(self) -> None:
        parent = self.parent
        if parent is not None:
            parent._child_moved(self)

    # -- anchors --------------------------------------------------------------

    def _anchor_origin(self, layer: Optional[Union[BoxReference, str]]) -> Point:
        return self.get_absolute_position()

    def _anchor_size(self, layer: Optional[Union[BoxReference, str]]) -> Size:
        return self.outer_size()

    def anchor_point(self, name: str, layer: Optional[Union[BoxReference, str]] = None) -> Point:
        try:
            fx, fy = ANCHOR_FRACTIONS[name]
        except KeyError as exc:
            raise ConfigurationError("E_ANCHOR", f"unknown anchor: {name!r}") from exc
        origin = self._anchor_origin(layer)
        if fx == 0.0 and fy == 0.0:
            return origin
        size = self._anchor_size(layer)
        return Point(origin.x + size.width * fx, origin.y + size.height * fy)

    @property
    def top_left(self) -> Point:
        return self.anchor_point("top_left")

    @property
    def top_center(self) -> Point:
        return self.anchor_point("top_center")

    @property
    def top_right(self) -> Point:
        return self.anchor_point("top_right")

    @property
    def center_left(self) -> Point:
        return self.anchor_point("center_left")

    @property
    def center(self) -> Point:
        return self.anchor_point("center")

    @property
    def center_right(self) -> Point:
        return self.anchor_point("center_right")

    @property
    def bottom_left(self) -> Point:
        return self.anchor_point("bottom_left")

    @property
    def bottom_center(self) -> Point:
        return self.anchor_point("bottom_center")

    @property
    def bottom_right(self) -> Point:
        return self.anchor_point("bottom_right")

    def default_anchor_offset(self) -> Point:
        if self.anchor_kind is AnchorKind.CENTER:
            size = self.outer_size()
            return Point(size.width / 2, size.height / 2)
        return Point()

    def bounding_box(self) -> Bounds:
        origin = self.get_absolute_position()
        size = self.outer_size()
        return origin.x, origin.y, origin.x + size.width, origin.y + size.height

    # -- phases ---------------------------------------------------------------

    @property
    def measured_size(self) -> Size:
        check_invariant(self.measured, "E_STALE_READ", f"{self!r} size read before measure()")
        return self._intrinsic_size()

    def outer_size(self) -> Size:
        """Footprint a container reserves for this element."""
        return self.measured_size

    def _intrinsic_size(self) -> Size:
        return Size()

    def measure(self) -> None:
        if self.measured:
            return
        self.measured = True
        try:
            self.perform_measurement()
        except Exception:
            self.measured = False
            raise

    def layout(self) -> None:
        if self.laid_out:
            return
        check_invariant(self.measured, "E_PHASE_ORDER", f"{self!r} laid out before measure()")
        self.laid_out = True
        try:
            self.perform_layout()
        except Exception:
            self.laid_out = False
            raise

    def perform_measurement(self) -> None:
        for child in self.children:
            child.measure()

    def perform_layout(self) -> None:
        pass

    def invalidate_measurement(self) -> None:
        for node in itertools.chain((self,), self.ancestors()):
            node.measured = False
            node.laid_out = False

    def invalidate_layout(self) -> None:
        for node in itertools.chain((self,), self.ancestors()):
            node.laid_out = False


def _release_hold(element: Element) -> None:
    """Drop ``element`` from the detached stack still waiting to re-route it."""
    if element._escape_holder is None:
        return
    holder = element._escape_holder()
    element._escape_holder = None
    if holder is not None:
        holder._pending_escapes = [pending for pending in holder._pending_escapes if pending is not element]
