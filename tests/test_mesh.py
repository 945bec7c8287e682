import numpy as np
import pytest

from isomesh.geometry_utils import Triangle
from isomesh.mesh import Mesh, compute_vertex_normals, mesh_view


def _two_triangles():
    return [
        (0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (0.0, 1.0, 0.0),
        (0.0, 0.0, 0.0), (0.0, 0.0, 1.0), (1.0, 0.0, 0.0),
    ]


def test_flat_normals_are_replicated_per_vertex():
    normals = compute_vertex_normals(np.array(_two_triangles()))
    assert normals.shape == (6, 3)
    assert np.allclose(normals[:3], [0.0, 0.0, 1.0])
    assert np.allclose(normals[3:], [0.0, 1.0, 0.0])


def test_shared_vertices_are_not_smoothed():
    # vertex (0,0,0) appears in both triangles but keeps each face normal
    normals = compute_vertex_normals(np.array(_two_triangles()))
    assert not np.allclose(normals[0], normals[3])


def test_degenerate_triangle_gets_zero_normal():
    normals = compute_vertex_normals(np.array([
        (0.0, 0.0, 0.0), (1.0, 1.0, 1.0), (2.0, 2.0, 2.0),
    ]))
    assert np.array_equal(normals, np.zeros((3, 3)))


def test_incomplete_triangle_rejected():
    with pytest.raises(ValueError):
        compute_vertex_normals(np.zeros((4, 3)))


def test_empty_mesh():
    mesh = Mesh.empty()
    assert mesh.is_empty()
    assert mesh.vertex_count == 0
    assert mesh.triangle_count == 0
    assert mesh.bounds() is None
    assert list(mesh.triangles()) == []
    positions, normals = mesh.flat_buffers()
    assert positions.shape == (0,)
    assert normals.shape == (0,)


def test_from_positions_and_triangles():
    mesh = Mesh.from_positions(_two_triangles())
    assert mesh.vertex_count == 6
    assert mesh.triangle_count == 2
    assert mesh.degenerate_edges == 0

    tris = list(mesh.triangles())
    assert len(tris) == 2
    assert isinstance(tris[0], Triangle)
    assert tris[0].normal == (0.0, 0.0, 1.0)
    assert tris[1].v1 == (0.0, 0.0, 1.0)


def test_bounds():
    mesh = Mesh.from_positions(_two_triangles())
    assert mesh.bounds() == ((0.0, 0.0, 0.0), (1.0, 1.0, 1.0))


def test_flat_buffers():
    mesh = Mesh.from_positions(_two_triangles())
    positions, normals = mesh.flat_buffers()
    assert positions.dtype == np.float32
    assert positions.shape == (18,)
    assert normals.shape == (18,)
    assert positions[3] == 1.0
    assert normals[2] == 1.0


def test_mesh_view_skips_degenerate():
    verts = _two_triangles() + [(0.0, 0.0, 0.0), (1.0, 1.0, 1.0), (2.0, 2.0, 2.0)]
    mesh = Mesh.from_positions(verts)
    tris = list(mesh_view(mesh))
    assert len(tris) == 2
    normal, v0, v1, v2 = tris[1]
    assert normal == (0.0, 1.0, 0.0)
    assert v2 == (1.0, 0.0, 0.0)
