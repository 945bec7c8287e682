"""Marching Cubes isosurface extraction.

Every cell of the grid is classified by comparing its eight corner values
against the iso-level.  Corners strictly below the iso-level are inside;
their bits form the cube index.  ``EDGE_TABLE`` names the cell edges the
surface crosses, each crossing is placed by linear interpolation between
the two corner values, and ``TRI_TABLE`` groups the crossings into
triangles.  The output is an unindexed triangle soup.
"""

from __future__ import annotations

import logging
import math
from typing import List, Optional, Sequence, Tuple

import numpy as np

from isomesh.errors import DegenerateEdgeInterpolation, InvalidConfiguration
from isomesh.field import FieldBuffer
from isomesh.grid import Grid
from isomesh.mesh import Mesh
from isomesh.tables import (CORNER_OFFSETS, EDGE_AXIS, EDGE_CORNERS,
                            EDGE_TABLE, TRI_TABLE)

logger = logging.getLogger(__name__)

Vec3 = Tuple[float, float, float]


def cube_index(values: Sequence[float], iso_level: float = 0.0) -> int:
    """Return the 8-bit classification of a cell's corner values."""

    if len(values) != 8:
        raise ValueError("a cell has exactly 8 corner values")
    index = 0
    for n, v in enumerate(values):
        if v < iso_level:
            index |= 1 << n
    return index


def edge_parameter(va: float, vb: float, iso_level: float = 0.0) -> Optional[float]:
    """Return where the iso-level crosses the segment from ``va`` to ``vb``.

    The result is the fraction ``mu`` of the way from the first corner to
    the second, or ``None`` when the corner values do not define one
    (equal values, or non-finite input).
    """

    denom = vb - va
    if denom == 0:
        return None
    mu = (iso_level - va) / denom
    if not math.isfinite(mu):
        return None
    return mu


def _lerp(start: float, end: float, amt: float) -> float:
    return (1 - amt) * start + amt * end


def polygonise_cell(values: Sequence[float], origin: Vec3, sample_size: float = 1.0,
                    iso_level: float = 0.0, *, strict: bool = False,
                    scratch: Optional[List[Optional[Vec3]]] = None,
                    ) -> Tuple[List[Vec3], int]:
    """Triangulate a single cell.

    ``values`` are the eight corner samples in table order and ``origin``
    is the world position of corner 0.  Returns the emitted vertices, three
    per triangle in table order, and the number of edge crossings that were
    clamped to the edge midpoint.  With ``strict=True`` such a crossing
    raises ``DegenerateEdgeInterpolation`` instead.

    ``scratch`` may be a 12-slot list reused between calls.
    """

    index = cube_index(values, iso_level)
    assert 0 <= index < 256
    mask = EDGE_TABLE[index]
    if mask == 0:
        return [], 0

    if scratch is None:
        scratch = [None] * 12

    degenerate = 0
    for edge in range(12):
        if not mask & (1 << edge):
            continue
        a, b = EDGE_CORNERS[edge]
        va = values[a]
        vb = values[b]
        mu = edge_parameter(va, vb, iso_level)
        if mu is None:
            if strict:
                raise DegenerateEdgeInterpolation(edge, va, vb, iso_level)
            mu = 0.5
            degenerate += 1

        axis = EDGE_AXIS[edge]
        off = CORNER_OFFSETS[a]
        point = [origin[0] + off[0] * sample_size,
                 origin[1] + off[1] * sample_size,
                 origin[2] + off[2] * sample_size]
        point[axis] = _lerp(point[axis], point[axis] + sample_size, mu)
        scratch[edge] = (point[0], point[1], point[2])

    out: List[Vec3] = []
    row = TRI_TABLE[index]
    for e in row:
        if e == -1:
            break
        out.append(scratch[e])
    return out, degenerate


class MarchingCubes:
    """Extracts the iso-surface of a ``FieldBuffer`` sampled on ``grid``.

    By default the Y range of cells is inset by one on both sides, which
    leaves the bottom and top layer of the lattice out of the mesh; pass
    ``inset_y=False`` to walk every cell.
    """

    def __init__(self, grid: Grid, *, strict: bool = False, inset_y: bool = True):
        self.grid = grid
        self.strict = strict
        self.inset_y = inset_y

    def __repr__(self) -> str:
        return (f"MarchingCubes({self.grid!r}, strict={self.strict!r}, "
                f"inset_y={self.inset_y!r})")

    def extract(self, buffer: FieldBuffer, iso_level: float = 0.0) -> Mesh:
        grid = self.grid
        if buffer.shape != grid.shape:
            raise InvalidConfiguration(
                f"field buffer shape {buffer.shape} does not match grid shape {grid.shape}")

        # nested lists index much faster than numpy scalars in the hot loop
        field = buffer.values.tolist()
        s = grid.sample_size
        x_max, y_max, z_max = grid.x_max, grid.y_max, grid.z_max

        vertices: List[Vec3] = []
        scratch: List[Optional[Vec3]] = [None] * 12
        degenerate = 0
        visited = 0

        for i, j, k in grid.cells(self.inset_y):
            fi = i + x_max
            fj = j + y_max
            fk = k + z_max
            values = [field[fi + di][fj + dj][fk + dk] for di, dj, dk in CORNER_OFFSETS]
            visited += 1

            points, clamped = polygonise_cell(values, (i * s, j * s, k * s), s, iso_level,
                                              strict=self.strict, scratch=scratch)
            if points:
                vertices.extend(points)
            degenerate += clamped

        if vertices:
            positions = np.array(vertices, dtype=np.float64)
        else:
            positions = np.zeros((0, 3), dtype=np.float64)
        mesh = Mesh.from_positions(positions, degenerate_edges=degenerate)

        logger.info("marching cubes: %d cells, %d triangles at iso-level %g",
                    visited, mesh.triangle_count, iso_level)
        if degenerate:
            logger.warning("%d degenerate edge crossings clamped to the edge midpoint",
                           degenerate)
        return mesh


def extract_mesh(buffer: FieldBuffer, iso_level: float = 0.0, **kwargs) -> Mesh:
    """Convenience wrapper running ``MarchingCubes`` over ``buffer.grid``."""

    return MarchingCubes(buffer.grid, **kwargs).extract(buffer, iso_level)


__all__ = [
    'cube_index',
    'edge_parameter',
    'polygonise_cell',
    'MarchingCubes',
    'extract_mesh',
]
