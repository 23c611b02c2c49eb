"""
Circle packing layout for bubble charts.

Bubbles are packed as the leaves of a single root: each leaf gets a radius
proportional to the square root of its value, siblings are placed with a
front-chain packer and the enclosing circle is scaled to fit the canvas.
The layout is fully deterministic for a given ordered input.
"""

import math
from typing import Callable, List, Optional, Sequence, Tuple

import numpy as np

from chart_errors import ChartConfigurationError
from chart_types import PackedNode, WeightedItem
from config import CHART_CONFIG, OUTPUT_CONFIG

# Constants of the linear congruential generator used to shuffle circles
# before computing the enclosing circle (fixed seed, so packing is repeatable)
LCG_A = 1664525
LCG_C = 1013904223
LCG_M = 4294967296


class Circle:
    __slots__ = ("x", "y", "r")

    def __init__(self, r: float, x: float = 0.0, y: float = 0.0):
        self.r = r
        self.x = x
        self.y = y

    def __repr__(self) -> str:
        return f"Circle(x={self.x:.3f}, y={self.y:.3f}, r={self.r:.3f})"


class _ChainNode:
    __slots__ = ("circle", "next", "previous")

    def __init__(self, circle: Circle):
        self.circle = circle
        self.next = None
        self.previous = None


def lcg() -> Callable[[], float]:
    """Deterministic pseudo-random source in [0, 1)."""
    state = 1

    def random() -> float:
        nonlocal state
        state = (LCG_A * state + LCG_C) % LCG_M
        return state / LCG_M

    return random


def _shuffle(items: list, random: Callable[[], float]) -> list:
    m = len(items)
    while m:
        i = int(random() * m)
        m -= 1
        items[m], items[i] = items[i], items[m]
    return items


# Enclosing circle


def _encloses_not(a: Circle, b: Circle) -> bool:
    dr = a.r - b.r
    dx = b.x - a.x
    dy = b.y - a.y
    return dr < 0 or dr * dr < dx * dx + dy * dy


def _encloses_weak(a: Circle, b: Circle) -> bool:
    dr = a.r - b.r + max(a.r, b.r, 1) * 1e-9
    dx = b.x - a.x
    dy = b.y - a.y
    return dr > 0 and dr * dr > dx * dx + dy * dy


def _encloses_weak_all(a: Circle, basis: Sequence[Circle]) -> bool:
    return all(_encloses_weak(a, b) for b in basis)


def _enclose_basis1(a: Circle) -> Circle:
    return Circle(a.r, a.x, a.y)


def _enclose_basis2(a: Circle, b: Circle) -> Circle:
    x21 = b.x - a.x
    y21 = b.y - a.y
    r21 = b.r - a.r
    length = math.sqrt(x21 * x21 + y21 * y21)
    if length == 0:
        return _enclose_basis1(a if a.r >= b.r else b)
    return Circle(
        (length + a.r + b.r) / 2,
        (a.x + b.x + x21 / length * r21) / 2,
        (a.y + b.y + y21 / length * r21) / 2,
    )


def _enclose_basis3(a: Circle, b: Circle, c: Circle) -> Circle:
    x1, y1, r1 = a.x, a.y, a.r
    x2, y2, r2 = b.x, b.y, b.r
    x3, y3, r3 = c.x, c.y, c.r
    a2 = x1 - x2
    a3 = x1 - x3
    b2 = y1 - y2
    b3 = y1 - y3
    c2 = r2 - r1
    c3 = r3 - r1
    d1 = x1 * x1 + y1 * y1 - r1 * r1
    d2 = d1 - x2 * x2 - y2 * y2 + r2 * r2
    d3 = d1 - x3 * x3 - y3 * y3 + r3 * r3
    ab = a3 * b2 - a2 * b3
    xa = (b2 * d3 - b3 * d2) / (ab * 2) - x1
    xb = (b3 * c2 - b2 * c3) / ab
    ya = (a3 * d2 - a2 * d3) / (ab * 2) - y1
    yb = (a2 * c3 - a3 * c2) / ab
    qa = xb * xb + yb * yb - 1
    qb = 2 * (r1 + xa * xb + ya * yb)
    qc = xa * xa + ya * ya - r1 * r1
    if abs(qa) > 1e-6:
        r = -(qb + math.sqrt(max(0.0, qb * qb - 4 * qa * qc))) / (2 * qa)
    else:
        r = -(qc / qb)
    return Circle(r, x1 + xa + xb * r, y1 + ya + yb * r)


def _enclose_basis(basis: Sequence[Circle]) -> Circle:
    if len(basis) == 1:
        return _enclose_basis1(basis[0])
    if len(basis) == 2:
        return _enclose_basis2(basis[0], basis[1])
    return _enclose_basis3(basis[0], basis[1], basis[2])


def _extend_basis(basis: List[Circle], p: Circle) -> List[Circle]:
    if _encloses_weak_all(p, basis):
        return [p]

    for b in basis:
        if _encloses_not(p, b) and _encloses_weak_all(_enclose_basis2(b, p), basis):
            return [b, p]

    for i in range(len(basis) - 1):
        for j in range(i + 1, len(basis)):
            bi, bj = basis[i], basis[j]
            if (
                _encloses_not(_enclose_basis2(bi, bj), p)
                and _encloses_not(_enclose_basis2(bi, p), bj)
                and _encloses_not(_enclose_basis2(bj, p), bi)
                and _encloses_weak_all(_enclose_basis3(bi, bj, p), basis)
            ):
                return [bi, bj, p]

    raise RuntimeError("Could not extend the enclosing circle basis")


def enclose_circles(
    circles: Sequence[Circle], random: Optional[Callable[[], float]] = None
) -> Circle:
    """Smallest circle enclosing all given circles."""
    shuffled = _shuffle(list(circles), random or lcg())
    basis: List[Circle] = []
    enclosing = None
    i = 0
    while i < len(shuffled):
        p = shuffled[i]
        if enclosing is not None and _encloses_weak(enclosing, p):
            i += 1
        else:
            basis = _extend_basis(basis, p)
            enclosing = _enclose_basis(basis)
            i = 0
    return enclosing


# Sibling packing


def _place(b: Circle, a: Circle, c: Circle) -> None:
    """Position c tangent to both a and b."""
    dx = b.x - a.x
    dy = b.y - a.y
    d2 = dx * dx + dy * dy
    if d2:
        a2 = (a.r + c.r) ** 2
        b2 = (b.r + c.r) ** 2
        if a2 > b2:
            x = (d2 + b2 - a2) / (2 * d2)
            y = math.sqrt(max(0.0, b2 / d2 - x * x))
            c.x = b.x - x * dx - y * dy
            c.y = b.y - x * dy + y * dx
        else:
            x = (d2 + a2 - b2) / (2 * d2)
            y = math.sqrt(max(0.0, a2 / d2 - x * x))
            c.x = a.x + x * dx - y * dy
            c.y = a.y + x * dy + y * dx
    else:
        c.x = a.x + c.r
        c.y = a.y


def _intersects(a: Circle, b: Circle) -> bool:
    dr = a.r + b.r - 1e-6
    dx = b.x - a.x
    dy = b.y - a.y
    return dr > 0 and dr * dr > dx * dx + dy * dy


def _score(node: _ChainNode) -> float:
    a = node.circle
    b = node.next.circle
    ab = a.r + b.r
    dx = (a.x * b.r + b.x * a.r) / ab
    dy = (a.y * b.r + b.y * a.r) / ab
    return dx * dx + dy * dy


def pack_siblings(
    circles: List[Circle], random: Optional[Callable[[], float]] = None
) -> float:
    """
    Pack circles around the origin without overlap, in input order.

    Positions are written into the circles; returns the radius of the
    enclosing circle, which is centered on the origin.
    """
    n = len(circles)
    if not n:
        return 0.0
    random = random or lcg()

    a = circles[0]
    a.x = 0.0
    a.y = 0.0
    if n == 1:
        return a.r

    b = circles[1]
    a.x = -b.r
    b.x = a.r
    b.y = 0.0
    if n == 2:
        return a.r + b.r

    _place(b, a, circles[2])

    # Front chain initialised with the first three circles
    a = _ChainNode(a)
    b = _ChainNode(b)
    c = _ChainNode(circles[2])
    a.next = c.previous = b
    b.next = a.previous = c
    c.next = b.previous = a

    i = 3
    while i < n:
        _place(a.circle, b.circle, circles[i])
        c = _ChainNode(circles[i])

        # Find the closest intersecting circle on the front chain, if any
        j = b.next
        k = a.previous
        sj = b.circle.r
        sk = a.circle.r
        collided = False
        while True:
            if sj <= sk:
                if _intersects(j.circle, c.circle):
                    b = j
                    a.next = b
                    b.previous = a
                    collided = True
                    break
                sj += j.circle.r
                j = j.next
            else:
                if _intersects(k.circle, c.circle):
                    a = k
                    a.next = b
                    b.previous = a
                    collided = True
                    break
                sk += k.circle.r
                k = k.previous
            if j is k.next:
                break
        if collided:
            continue

        # Insert c between a and b
        c.previous = a
        c.next = b
        a.next = c
        b.previous = c
        b = c

        # Closest pair to the centroid becomes the new insertion point
        best = _score(a)
        c = c.next
        while c is not b:
            current = _score(c)
            if current < best:
                a = c
                best = current
            c = c.next
        b = a.next
        i += 1

    chain = [b.circle]
    c = b.next
    while c is not b:
        chain.append(c.circle)
        c = c.next
    enclosing = enclose_circles(chain, random)

    for circle in circles:
        circle.x -= enclosing.x
        circle.y -= enclosing.y

    return enclosing.r


def _check_dimension(value, name: str) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError) as e:
        raise ChartConfigurationError(f"Invalid {name}: {value!r}") from e
    if not math.isfinite(number) or number <= 0:
        raise ChartConfigurationError(
            f"{name.capitalize()} must be a finite positive number, got {value!r}"
        )
    return number


class BubbleLayoutEngine:
    """Handles bubble sizing and positioning inside the chart area."""

    def __init__(self, padding: Optional[float] = None):
        self.padding = CHART_CONFIG["bubble_padding"] if padding is None else padding

    def pack(
        self,
        items: Sequence[WeightedItem],
        width: float,
        height: float,
        padding: Optional[float] = None,
    ) -> List[PackedNode]:
        """
        Pack items into a width x height rectangle.

        Returns one PackedNode per item, in input order. Radii are
        proportional to sqrt(value), so bubble area follows the value.
        """
        width = _check_dimension(width, "width")
        height = _check_dimension(height, "height")
        padding = self.padding if padding is None else padding
        if not math.isfinite(padding) or padding < 0:
            raise ChartConfigurationError(f"Invalid bubble padding: {padding!r}")
        if not items:
            raise ChartConfigurationError("Cannot pack an empty item list")

        values = np.array([item.value for item in items], dtype=float)
        if not np.all(np.isfinite(values)) or np.any(values <= 0):
            raise ChartConfigurationError("Item values must be finite and positive")

        random = lcg()
        base_radii = np.sqrt(values)
        circles = [Circle(float(r)) for r in base_radii]

        # First pass sizes the root without padding, the second pass adds a
        # gap expressed in the root's unscaled units
        root_radius = pack_siblings(circles, random)
        extent = min(width, height)
        gap = padding * root_radius / extent
        if gap:
            for circle in circles:
                circle.r += gap
            root_radius = pack_siblings(circles, random) + gap
            for circle in circles:
                circle.r -= gap

        scale = extent / (2 * root_radius)
        xs = width / 2 + scale * np.array([c.x for c in circles])
        ys = height / 2 + scale * np.array([c.y for c in circles])
        radii = scale * base_radii

        nodes = [
            PackedNode(item=item, radius=float(r), x=float(x), y=float(y))
            for item, r, x, y in zip(items, radii, xs, ys)
        ]

        if OUTPUT_CONFIG["verbose"]:
            print(
                f"Packed {len(nodes)} bubbles into {width:g}x{height:g} "
                f"(radius range {radii.min():.1f}-{radii.max():.1f}px)"
            )
        return nodes

    @staticmethod
    def max_extent(nodes: Sequence[PackedNode], margin: float = 0.0) -> float:
        """Lowest point reached by any bubble, plus ``margin``."""
        if not nodes:
            return 0.0
        bottoms = np.array([node.y + node.radius for node in nodes])
        return float(bottoms.max() + margin)

    @staticmethod
    def check_overlap(
        nodes: Sequence[PackedNode], tolerance: float = 1e-6
    ) -> List[Tuple[int, int]]:
        """Index pairs of bubbles whose circles overlap."""
        if len(nodes) < 2:
            return []
        xs = np.array([node.x for node in nodes])
        ys = np.array([node.y for node in nodes])
        rs = np.array([node.radius for node in nodes])

        distances = np.hypot(xs[:, None] - xs[None, :], ys[:, None] - ys[None, :])
        limits = rs[:, None] + rs[None, :] - tolerance
        upper = np.triu(np.ones_like(distances, dtype=bool), k=1)
        rows, cols = np.where((distances < limits) & upper)
        return [(int(i), int(j)) for i, j in zip(rows, cols)]
