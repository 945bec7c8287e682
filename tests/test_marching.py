import random

import numpy as np
import pytest

from isomesh.errors import DegenerateEdgeInterpolation, InvalidConfiguration
from isomesh.field import FieldBuffer, ScalarField, populate_field
from isomesh.geometry_checks import (
    normals_unit,
    soup_complete,
    vertices_finite,
    vertices_within_grid,
)
from isomesh.grid import Grid
from isomesh.marching import (
    MarchingCubes,
    cube_index,
    edge_parameter,
    extract_mesh,
    polygonise_cell,
)
from isomesh.mesh import mesh_view
from isomesh.noise import SimplexNoise
from isomesh.tables import CORNER_OFFSETS, EDGE_CORNERS, active_edges, triangle_count

ORIGIN = (0.0, 0.0, 0.0)


def _corner_values(index, magnitudes=None):
    values = []
    for n in range(8):
        mag = 1.0 if magnitudes is None else magnitudes[n]
        values.append(-mag if index & (1 << n) else mag)
    return values


def _edge_segment(edge, origin=ORIGIN, size=1.0):
    a, b = EDGE_CORNERS[edge]
    pa = tuple(origin[n] + CORNER_OFFSETS[a][n] * size for n in range(3))
    pb = tuple(origin[n] + CORNER_OFFSETS[b][n] * size for n in range(3))
    return pa, pb


def _on_segment(p, a, b, tol=1e-9):
    ab = np.subtract(b, a)
    ap = np.subtract(p, a)
    if np.linalg.norm(np.cross(ab, ap)) > tol:
        return False
    return -tol <= np.dot(ab, ap) <= np.dot(ab, ab) + tol


def test_cube_index():
    assert cube_index([-1, 1, 1, 1, 1, 1, 1, 1]) == 1
    assert cube_index([1, 1, 1, 1, 1, 1, 1, -1]) == 128
    assert cube_index([-1] * 8) == 255
    assert cube_index([1] * 8) == 0


def test_cube_index_uses_strict_comparison():
    assert cube_index([0.0] * 8, 0.0) == 0
    assert cube_index([0.5] * 8, 0.5) == 0
    assert cube_index([0.5] * 8, 0.50001) == 255


def test_cube_index_requires_eight_values():
    with pytest.raises(ValueError):
        cube_index([0.0] * 7)


def test_single_inside_corner():
    points, degenerate = polygonise_cell([-1, 1, 1, 1, 1, 1, 1, 1], ORIGIN)
    assert degenerate == 0
    # edges 0, 8, 3 in table order, each crossed at its midpoint
    assert points == [(0.5, 0.0, 0.0), (0.0, 0.5, 0.0), (0.0, 0.0, 0.5)]


def test_empty_and_full_cells_emit_nothing():
    assert polygonise_cell([1.0] * 8, ORIGIN) == ([], 0)
    assert polygonise_cell([-1.0] * 8, ORIGIN) == ([], 0)


def test_vertex_count_matches_table_for_every_index():
    for index in range(256):
        values = _corner_values(index)
        assert cube_index(values) == index
        points, degenerate = polygonise_cell(values, ORIGIN)
        assert len(points) == 3 * triangle_count(index)
        assert len(points) % 3 == 0
        assert degenerate == 0


def test_vertices_lie_strictly_inside_active_edges():
    rng = random.Random(1234)
    origin = (2.0, -1.0, 3.0)
    size = 0.5
    for index in range(256):
        values = _corner_values(index, [rng.uniform(0.1, 1.0) for _ in range(8)])
        points, _ = polygonise_cell(values, origin, size)
        segments = [_edge_segment(e, origin, size) for e in active_edges(index)]
        for p in points:
            matches = [(a, b) for a, b in segments if _on_segment(p, a, b)]
            assert matches, (index, p)
            for a, b in matches:
                assert p != a and p != b


def test_interpolation_parameter():
    assert edge_parameter(-1.0, 1.0) == 0.5
    assert edge_parameter(-1.0, 3.0) == 0.25
    assert edge_parameter(2.0, 4.0, 3.0) == 0.5
    assert edge_parameter(1.0, 1.0) is None
    assert edge_parameter(float('-inf'), float('inf')) is None


def test_degenerate_edges_clamp_to_midpoint():
    values = [float('-inf'), 1, 1, 1, 1, 1, 1, 1]
    points, degenerate = polygonise_cell(values, ORIGIN)
    assert degenerate == 3
    assert points == [(0.5, 0.0, 0.0), (0.0, 0.5, 0.0), (0.0, 0.0, 0.5)]


def test_degenerate_edge_strict_mode():
    values = [-1.0, float('nan'), 1, 1, 1, 1, 1, 1]
    points, degenerate = polygonise_cell(values, ORIGIN)
    assert degenerate == 1
    assert points[0] == (0.5, 0.0, 0.0)

    with pytest.raises(DegenerateEdgeInterpolation) as excinfo:
        polygonise_cell(values, ORIGIN, strict=True)
    assert excinfo.value.edge == 0
    assert isinstance(excinfo.value, ArithmeticError)


def test_extraction_counts_degenerate_edges():
    grid = Grid(1, 2, 1)
    buf = FieldBuffer.from_function(
        grid, lambda x, y, z: float('-inf') if (x, y, z) == (0.0, 0.0, 0.0) else 1.0)
    mesh = MarchingCubes(grid).extract(buf)
    assert mesh.degenerate_edges > 0
    assert vertices_finite(mesh)
    with pytest.raises(DegenerateEdgeInterpolation):
        MarchingCubes(grid, strict=True).extract(buf)


def _height_buffer(grid):
    return FieldBuffer.from_function(grid, lambda x, y, z: y)


@pytest.mark.parametrize('iso', [-1.5, -0.5, 0.5, 1.5])
def test_monotonic_field_gives_planar_slice(iso):
    grid = Grid(2, 3, 2)
    mesh = MarchingCubes(grid).extract(_height_buffer(grid), iso)

    # every xz cell of the crossed layer is cut by two triangles
    assert mesh.triangle_count == 4 * 4 * 2
    assert np.allclose(mesh.positions[:, 1], iso)
    lo, hi = mesh.bounds()
    assert (lo[0], lo[2], hi[0], hi[2]) == (-2.0, -2.0, 2.0, 2.0)
    # solid below, air above: normals face up
    assert np.allclose(mesh.normals, [0.0, 1.0, 0.0])


@pytest.mark.parametrize('iso', [-10.0, -3.0, 3.5, 10.0])
def test_no_triangles_outside_field_range(iso):
    grid = Grid(2, 3, 2)
    mesh = MarchingCubes(grid, inset_y=False).extract(_height_buffer(grid), iso)
    assert mesh.is_empty()


def test_y_inset_skips_outer_layers():
    grid = Grid(2, 3, 2)
    buf = _height_buffer(grid)
    assert MarchingCubes(grid).extract(buf, 2.5).is_empty()
    full = MarchingCubes(grid, inset_y=False).extract(buf, 2.5)
    assert full.triangle_count == 32
    assert np.allclose(full.positions[:, 1], 2.5)


def test_uniform_field_gives_empty_mesh():
    grid = Grid(3, 3, 3)
    buf = FieldBuffer.from_function(grid, lambda x, y, z: 1.0)
    mesh = MarchingCubes(grid).extract(buf, 0.0)
    assert mesh.vertex_count == 0
    assert mesh.positions.shape == (0, 3)
    assert mesh.normals.shape == (0, 3)


def test_sphere_surface():
    radius = 2.5
    grid = Grid(4, 4, 4)
    buf = FieldBuffer.from_function(grid, lambda x, y, z: x * x + y * y + z * z - radius ** 2)
    mesh = MarchingCubes(grid).extract(buf)

    assert mesh.triangle_count > 0
    assert soup_complete(mesh)
    assert vertices_within_grid(mesh, grid)
    dist = np.linalg.norm(mesh.positions, axis=1)
    assert np.all(np.abs(dist - radius) < 0.5)

    for normal, v0, v1, v2 in mesh_view(mesh):
        centroid = [(v0[n] + v1[n] + v2[n]) / 3.0 for n in range(3)]
        assert sum(normal[n] * centroid[n] for n in range(3)) > 0


def test_extraction_is_deterministic():
    grid = Grid(3, 3, 3, 10.0)
    buf = populate_field(grid, ScalarField(SimplexNoise(21)))
    a = MarchingCubes(grid).extract(buf)
    b = MarchingCubes(grid).extract(buf)
    assert a.positions.tobytes() == b.positions.tobytes()
    assert a.normals.tobytes() == b.normals.tobytes()
    assert a.vertex_count % 3 == 0


def test_extract_mesh_wrapper():
    grid = Grid(2, 3, 2)
    buf = _height_buffer(grid)
    assert np.array_equal(extract_mesh(buf, 0.5).positions,
                          MarchingCubes(grid).extract(buf, 0.5).positions)


def test_shape_mismatch():
    buf = _height_buffer(Grid(3, 3, 3))
    with pytest.raises(InvalidConfiguration):
        MarchingCubes(Grid(2, 2, 2)).extract(buf)


def test_noise_terrain_stays_in_grid():
    grid = Grid(3, 3, 3, 10.0)
    mesh = MarchingCubes(grid).extract(populate_field(grid, ScalarField(SimplexNoise(0))))
    assert mesh.triangle_count > 0
    assert soup_complete(mesh)
    assert vertices_finite(mesh)
    assert vertices_within_grid(mesh, grid)
    assert normals_unit(mesh)
