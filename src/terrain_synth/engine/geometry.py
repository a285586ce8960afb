"""
Planar geometry helpers for terrain outlines.

Convex hull (Graham scan), Chaikin corner cutting and seeded jittered rings.
All functions take and return plain lists of ``(x, y)`` tuples.
"""

import math
from typing import Callable, List, Sequence

import numpy as np

from ..models import Point


def cross(o: Point, a: Point, b: Point) -> float:
    """Z component of (a - o) x (b - o); positive for a left turn."""
    return (a[0] - o[0]) * (b[1] - o[1]) - (a[1] - o[1]) * (b[0] - o[0])


def convex_hull(points: Sequence[Point]) -> List[Point]:
    """
    Convex hull by Graham scan.

    The pivot is the lowest-y point (lowest x on ties); the rest are sorted
    by polar angle around it, nearer points first on equal angles. A point is
    popped whenever the last three do not make a strict left turn, so
    collinear points are dropped. Fewer than 3 points are returned as given.
    """

    points = list(points)
    if len(points) < 3:
        return points

    pivot = min(points, key=lambda p: (p[1], p[0]))
    rest = [p for p in points if p != pivot]

    def polar_key(p: Point):
        dx, dy = p[0] - pivot[0], p[1] - pivot[1]
        return (math.atan2(dy, dx), dx * dx + dy * dy)

    hull = [pivot]
    for p in sorted(rest, key=polar_key):
        while len(hull) >= 2 and cross(hull[-2], hull[-1], p) <= 0:
            hull.pop()
        hull.append(p)

    return hull


def chaikin_smooth(polygon: Sequence[Point]) -> List[Point]:
    """
    One pass of Chaikin corner cutting over a closed polygon.

    Every edge (p0, p1), including the closing edge, becomes the two points
    at 1/4 and 3/4 along it, so N vertices become 2N.
    """

    if len(polygon) < 3:
        return list(polygon)

    pts = np.asarray(polygon, dtype=float)
    nxt = np.roll(pts, -1, axis=0)

    smoothed = np.empty((2 * len(pts), 2))
    smoothed[0::2] = pts * 0.75 + nxt * 0.25
    smoothed[1::2] = pts * 0.25 + nxt * 0.75

    return [(float(x), float(y)) for x, y in smoothed]


def chaikin(polygon: Sequence[Point], passes: int) -> List[Point]:
    result = list(polygon)
    for _ in range(passes):
        result = chaikin_smooth(result)
    return result


def jittered_ring(
    center: Point,
    radius: float,
    count: int,
    wobble: Callable[[int], float],
    squash: float = 1.0
) -> List[Point]:
    """
    ``count`` points at equal angles around ``center``.

    ``wobble(i)`` gives the radius multiplier of point ``i``; ``squash``
    compresses the vertical axis.
    """

    ring = []
    for i in range(count):
        angle = (i / count) * 2.0 * math.pi
        r = radius * wobble(i)
        ring.append((
            center[0] + math.cos(angle) * r,
            center[1] + math.sin(angle) * r * squash
        ))
    return ring


def centroid(points: Sequence[Point]) -> Point:
    """Mean of the points."""
    pts = np.asarray(points, dtype=float)
    mean = pts.mean(axis=0)
    return (float(mean[0]), float(mean[1]))
