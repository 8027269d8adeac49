"""
Constraint Building Blocks
==========================
Separators and pavings, on top of the codac interval library.

Why is this file needed?
------------------------
1. Single entry point: Every codac call of the model goes through the
   helpers below, so sensors and scenes only speak in terms of time
   windows, products and projections.
2. Rendering: codac returns a paving as a binary tree of box pairs.
   The renderer and the CLI only need flat lists of inner, outer and
   boundary boxes, which ``Paving`` provides.

Classes:
    Inclusion: Location of a point with respect to a paving.
    Paving: Flattened result of a paving.

Functions:
    box: IntervalVector from (lb, ub) pairs.
    window_separator: Separator of a one-dimensional time window.
    union_separator: Union of separators of the same dimension.
    product_separator: Cartesian product of separators.
    projection_separator: Existential projection over trailing axes.
    pave_box: Pave a box against a separator.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from functools import reduce
import logging
import operator
from typing import Any, List, Sequence, Tuple

from codac import (
    AnalyticFunction,
    Interval,
    IntervalVector,
    SepInverse,
    SepProj,
    Vector,
    VectorVar,
    cart_prod,
    pave,
)

logger = logging.getLogger(__name__)

# codac separators share no common Python base class worth naming
Separator = Any
Bounds = Sequence[Tuple[float, float]]


class Inclusion(Enum):
    IN = "in"
    OUT = "out"
    MAYBE = "maybe"


def box(bounds: Bounds) -> IntervalVector:
    """Build a box from (lb, ub) pairs, one pair per component."""
    return IntervalVector([[float(lb), float(ub)] for lb, ub in bounds])


def box_bounds(x: IntervalVector) -> List[Tuple[float, float]]:
    """(lb, ub) pairs of every component of a box."""
    return [(x[i].lb(), x[i].ub()) for i in range(x.size())]


def window_separator(window: Interval) -> Separator:
    """Separator of the set {u in R | u in window}."""
    u = VectorVar(1)
    return SepInverse(AnalyticFunction([u], u[0]), Interval(window.lb(), window.ub()))


def union_separator(separators: Sequence[Separator]) -> Separator:
    """
    Union of separators of the same dimension.

    Raises:
        ValueError: If no separator is given. The empty union is the
            empty set, which callers handle before reaching codac.
    """
    if not separators:
        raise ValueError("Cannot build the union of no separator.")
    return reduce(operator.or_, separators)


def product_separator(separators: Sequence[Separator]) -> Separator:
    """
    Cartesian product S_1 x ... x S_n, in the given order.

    Raises:
        ValueError: If no separator is given. The empty product puts no
            constraint at all, which callers handle before reaching codac.
    """
    if not separators:
        raise ValueError("Cannot build the Cartesian product of no separator.")
    if len(separators) == 1:
        return separators[0]
    return cart_prod(*separators)


def projection_separator(separator: Separator, kept: Sequence[int], y: IntervalVector, precision: float) -> Separator:
    """
    Projection {x | exists y in Y, (x, y) in S} onto the ``kept`` axes.

    The projected range ``y`` is bisected down to ``precision``.
    """
    if precision <= 0:
        raise ValueError(f"Projection precision must be positive, got {precision}.")
    return SepProj(separator, list(kept), y, precision)


@dataclass
class Paving:
    """
    Result of a set inversion over ``box``.

    ``inner`` boxes are inside the set and ``outer`` boxes are outside
    of it. ``boundary`` boxes could not be decided at the requested
    precision. The union of inner and boundary boxes encloses the set.
    """
    box: IntervalVector
    precision: float
    inner: List[IntervalVector] = field(default_factory=list)
    outer: List[IntervalVector] = field(default_factory=list)
    boundary: List[IntervalVector] = field(default_factory=list)

    @property
    def dim(self) -> int:
        return self.box.size()

    @property
    def is_empty(self) -> bool:
        """True if the set is proven empty over the whole box."""
        return not self.inner and not self.boundary

    def classify(self, point: Sequence[float]) -> Inclusion:
        """
        Locate a point in the paving.

        Points on a shared face of an inner and a boundary box are
        reported as IN. Points outside the initial box are OUT.
        """
        v = Vector([float(c) for c in point])
        if any(b.contains(v) for b in self.inner):
            return Inclusion.IN
        if any(b.contains(v) for b in self.boundary):
            return Inclusion.MAYBE
        return Inclusion.OUT

    def hull(self) -> IntervalVector:
        """Interval hull of the enclosure (inner and boundary boxes)."""
        boxes = self.inner + self.boundary
        if not boxes:
            return IntervalVector.empty(self.dim)
        bounds = [box_bounds(b) for b in boxes]
        return box([
            (min(b[i][0] for b in bounds), max(b[i][1] for b in bounds))
            for i in range(self.dim)
        ])


def pave_box(x: IntervalVector, separator: Separator, precision: float) -> Paving:
    """
    Pave ``x`` with respect to the set described by ``separator``.

    Each leaf of codac's paving holds two boxes: an outer approximation
    of the set and an outer approximation of its complement. A leaf
    whose first box is empty is outside the set, a leaf whose second
    box is empty is inside of it, and any other leaf keeps its outer
    approximation of the set as a boundary box.

    Args:
        x: Initial search domain.
        separator: Separator of the same dimension as ``x``.
        precision: Boundary boxes are not bisected below this width.

    Returns:
        The flattened paving.
    """
    if precision <= 0:
        raise ValueError(f"Paving precision must be positive, got {precision}.")

    paving = Paving(box=IntervalVector(x), precision=precision)
    if x.is_empty():
        return paving

    stack = [pave(x, separator, precision).tree()]
    while stack:
        node = stack.pop()
        if not node.is_leaf():
            stack.extend((node.right(), node.left()))
            continue

        in_set, in_complement = node.boxes()
        if in_set.is_empty():
            paving.outer.append(IntervalVector(in_complement))
        elif in_complement.is_empty():
            paving.inner.append(IntervalVector(in_set))
        else:
            paving.boundary.append(IntervalVector(in_set))

    logger.debug(
        f"Paving done: {len(paving.inner)} inner, {len(paving.outer)} outer, "
        f"{len(paving.boundary)} boundary boxes."
    )
    return paving
