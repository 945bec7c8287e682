"""Small triangle helpers shared by mesh assembly and the mesh checks."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence, Tuple

Vec3 = Tuple[float, float, float]

epsilon = 1e-12


@dataclass(frozen=True)
class Triangle:
    """Immutable triangle representation in XYZ space."""

    normal: Vec3
    v0: Vec3
    v1: Vec3
    v2: Vec3


def to_vec3(point_like: Sequence[float]) -> Vec3:
    """Return the XYZ components of a point-like sequence as a tuple."""

    if len(point_like) < 3:
        raise ValueError("value must have at least three components")
    return float(point_like[0]), float(point_like[1]), float(point_like[2])


def _cross(v0: Vec3, v1: Vec3, v2: Vec3) -> Vec3:
    ax, ay, az = v1[0] - v0[0], v1[1] - v0[1], v1[2] - v0[2]
    bx, by, bz = v2[0] - v0[0], v2[1] - v0[1], v2[2] - v0[2]
    return (ay * bz - az * by, az * bx - ax * bz, ax * by - ay * bx)


def triangle_normal(v0: Vec3, v1: Vec3, v2: Vec3) -> Vec3 | None:
    """Return the unit normal of a triangle or ``None`` if degenerate."""

    n = _cross(v0, v1, v2)
    length = math.sqrt(n[0] * n[0] + n[1] * n[1] + n[2] * n[2])
    if length <= epsilon:
        return None
    return (n[0] / length, n[1] / length, n[2] / length)


def triangle_area(v0: Vec3, v1: Vec3, v2: Vec3) -> float:
    """Return the area of a triangle."""

    n = _cross(v0, v1, v2)
    return 0.5 * math.sqrt(n[0] * n[0] + n[1] * n[1] + n[2] * n[2])


def triangle_is_degenerate(v0: Vec3, v1: Vec3, v2: Vec3, tol: float = epsilon) -> bool:
    """Return ``True`` if a triangle collapses under the given tolerance.

    Matches ``triangle_normal``: a triangle is degenerate exactly when its
    edge cross product is no longer than ``tol``.
    """

    return 2.0 * triangle_area(v0, v1, v2) <= tol


__all__ = [
    "Triangle",
    "Vec3",
    "epsilon",
    "to_vec3",
    "triangle_normal",
    "triangle_area",
    "triangle_is_degenerate",
]
