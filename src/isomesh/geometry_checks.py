"""Validation helpers for extracted meshes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

import numpy as np

from isomesh.geometry_utils import triangle_is_degenerate
from isomesh.grid import Grid
from isomesh.mesh import Mesh


def soup_complete(mesh: Mesh) -> "CheckResult":
    """Every vertex belongs to a complete triangle and has a normal."""

    warnings: List[str] = []
    if mesh.positions.ndim != 2 or mesh.positions.shape[1] != 3:
        warnings.append(f'positions have shape {mesh.positions.shape}, expected (n, 3)')
    elif mesh.vertex_count % 3:
        warnings.append(f'{mesh.vertex_count} vertices is not a multiple of 3')
    if mesh.normals.shape != mesh.positions.shape:
        warnings.append(f'normals shape {mesh.normals.shape} does not match '
                        f'positions shape {mesh.positions.shape}')
    return CheckResult(not warnings, warnings)


def vertices_finite(mesh: Mesh) -> "CheckResult":
    bad = np.flatnonzero(~np.isfinite(mesh.positions).all(axis=1))
    if len(bad):
        return CheckResult(False, [f'non-finite vertex indices: {bad.tolist()}'])
    return CheckResult(True, [])


def vertices_within_grid(mesh: Mesh, grid: Grid, tol: float = 1e-9) -> "CheckResult":
    """All vertices lie inside the world-space box spanned by ``grid``."""

    if mesh.is_empty():
        return CheckResult(True, ['mesh is empty'])
    lo, hi = grid.bounds()
    lo = np.asarray(lo) - tol
    hi = np.asarray(hi) + tol
    outside = np.flatnonzero(((mesh.positions < lo) | (mesh.positions > hi)).any(axis=1))
    if len(outside):
        return CheckResult(False, [f'{len(outside)} vertices outside the grid bounds'])
    return CheckResult(True, [])


def normals_unit(mesh: Mesh, tol: float = 1e-6) -> "CheckResult":
    """Each normal is a unit vector, or zero for a degenerate triangle."""

    if mesh.is_empty():
        return CheckResult(True, ['mesh is empty'])
    degenerate = np.array([triangle_is_degenerate(tri.v0, tri.v1, tri.v2)
                           for tri in mesh.triangles()], dtype=bool)
    length = np.linalg.norm(mesh.normals, axis=1)
    ok = (np.abs(length - 1.0) <= tol) | ((length == 0.0) & np.repeat(degenerate, 3))
    warnings: List[str] = []
    bad = np.flatnonzero(~ok)
    if len(bad):
        warnings.append(f'non-unit normal indices: {bad.tolist()}')
    count = int(degenerate.sum())
    if count:
        warnings.append(f'{count} degenerate triangles')
    return CheckResult(not len(bad), warnings)


@dataclass
class CheckResult:
    ok: bool
    warnings: List[str]

    def __bool__(self) -> bool:
        return self.ok


__all__ = [
    'CheckResult',
    'soup_complete',
    'vertices_finite',
    'vertices_within_grid',
    'normals_unit',
]
