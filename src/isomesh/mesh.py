"""Triangle-soup meshes produced by the extractor."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Optional, Tuple

import numpy as np

from isomesh.geometry_utils import Triangle, Vec3, epsilon, to_vec3, triangle_normal

TriTuple = Tuple[Vec3, Vec3, Vec3, Vec3]


def compute_vertex_normals(positions: np.ndarray) -> np.ndarray:
    """Return one normal per vertex of an unindexed triangle list.

    Every triangle gets its own flat normal ``(v1 - v0) x (v2 - v0)``,
    normalised and copied to its three vertices.  Coincident vertices of
    neighbouring triangles are not merged, so the result shades faceted.
    Degenerate triangles get a zero normal.
    """

    positions = np.asarray(positions, dtype=np.float64).reshape(-1, 3)
    if len(positions) % 3:
        raise ValueError("vertex count must be a multiple of 3")
    if len(positions) == 0:
        return np.zeros((0, 3), dtype=np.float64)

    tris = positions.reshape(-1, 3, 3)
    normals = np.cross(tris[:, 1] - tris[:, 0], tris[:, 2] - tris[:, 0])
    length = np.linalg.norm(normals, axis=1, keepdims=True)
    valid = length > epsilon
    normals = np.where(valid, normals / np.where(valid, length, 1.0), 0.0)
    return np.repeat(normals, 3, axis=0)


@dataclass
class Mesh:
    """Unindexed triangle mesh.

    ``positions`` and ``normals`` are ``(n, 3)`` float arrays with ``n`` a
    multiple of three; vertices ``3t``, ``3t+1`` and ``3t+2`` form
    triangle ``t``.  ``degenerate_edges`` counts the edge crossings whose
    interpolation parameter had to be clamped during extraction.
    """

    positions: np.ndarray
    normals: np.ndarray
    degenerate_edges: int = 0

    @classmethod
    def from_positions(cls, positions, degenerate_edges: int = 0) -> "Mesh":
        pos = np.asarray(positions, dtype=np.float64).reshape(-1, 3)
        return cls(pos, compute_vertex_normals(pos), degenerate_edges)

    @classmethod
    def empty(cls) -> "Mesh":
        return cls.from_positions(np.zeros((0, 3)))

    @property
    def vertex_count(self) -> int:
        return len(self.positions)

    @property
    def triangle_count(self) -> int:
        return len(self.positions) // 3

    def is_empty(self) -> bool:
        return self.vertex_count == 0

    def triangles(self) -> Iterator[Triangle]:
        """Yield every triangle with the normal stored for its vertices."""

        for t in range(self.triangle_count):
            base = 3 * t
            yield Triangle(
                normal=to_vec3(self.normals[base]),
                v0=to_vec3(self.positions[base]),
                v1=to_vec3(self.positions[base + 1]),
                v2=to_vec3(self.positions[base + 2]),
            )

    def bounds(self) -> Optional[Tuple[Vec3, Vec3]]:
        """Axis-aligned bounding box of the vertices, ``None`` when empty."""

        if self.is_empty():
            return None
        return to_vec3(self.positions.min(axis=0)), to_vec3(self.positions.max(axis=0))

    def flat_buffers(self, dtype=np.float32) -> Tuple[np.ndarray, np.ndarray]:
        """Return ``(positions, normals)`` as flat arrays for upload to a renderer."""

        return (np.ascontiguousarray(self.positions, dtype=dtype).ravel(),
                np.ascontiguousarray(self.normals, dtype=dtype).ravel())


def mesh_view(mesh: Mesh) -> Iterator[TriTuple]:
    """Yield triangles of ``mesh`` as ``(normal, v0, v1, v2)``.

    Normals are recomputed as unit vectors from the vertices.  Triangles
    with zero area are skipped silently.
    """

    for tri in mesh.triangles():
        calc_normal = triangle_normal(tri.v0, tri.v1, tri.v2)
        if calc_normal is None:
            continue
        yield calc_normal, tri.v0, tri.v1, tri.v2


__all__ = ['Mesh', 'compute_vertex_normals', 'mesh_view']
