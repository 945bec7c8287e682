import numpy as np
import pytest

from isomesh.config import TerrainConfig
from isomesh.errors import InvalidConfiguration
from isomesh.field import NoiseConfig
from isomesh.geometry_checks import soup_complete, vertices_within_grid
from isomesh.noise import ConstantNoise, SimplexNoise
from isomesh.terrain import Terrain


def test_default_terrain():
    terrain = Terrain()
    assert terrain.grid.shape == (7, 7, 7)
    assert isinstance(terrain.noise, SimplexNoise)
    mesh = terrain.mesh
    assert mesh.triangle_count > 0
    assert soup_complete(mesh)
    assert vertices_within_grid(mesh, terrain.grid)


def test_terrain_is_reproducible():
    a = Terrain(TerrainConfig(seed=3))
    b = Terrain(TerrainConfig(seed=3))
    assert np.array_equal(a.field_buffer.values, b.field_buffer.values)
    assert np.array_equal(a.mesh.positions, b.mesh.positions)


def test_flat_ground_plane():
    # saturated noise contributes nothing: the surface is the plane y = -floor_offset
    terrain = Terrain(noise=ConstantNoise(1.0))
    mesh = terrain.mesh
    assert mesh.triangle_count == 6 * 6 * 2
    assert np.allclose(mesh.positions[:, 1], -5.0)
    assert np.allclose(mesh.normals, [0.0, 1.0, 0.0])


def test_iso_level_rebuilds_mesh_only():
    terrain = Terrain(noise=ConstantNoise(1.0))
    field = terrain.field_buffer
    terrain.iso_level = 10.0
    assert terrain.field_buffer is field
    assert terrain.config.iso_level == 10.0
    assert np.allclose(terrain.mesh.positions[:, 1], 5.0)


def test_reconfigure_resamples_field():
    terrain = Terrain(TerrainConfig(seed=1))
    field = terrain.field_buffer
    mesh = terrain.reconfigure(seed=2)
    assert terrain.field_buffer is not field
    assert terrain.noise.seed == 2
    assert not np.array_equal(terrain.field_buffer.values, field.values)
    assert mesh is terrain.mesh


def test_reconfigure_grid_and_noise():
    terrain = Terrain(noise=ConstantNoise(1.0))
    terrain.reconfigure(sample_size=5.0, noise={'floor_offset': 2.0})
    assert terrain.grid.x_max == 6
    assert terrain.config.noise == NoiseConfig(floor_offset=2.0)
    assert np.allclose(terrain.mesh.positions[:, 1], -2.0)


def test_reconfigure_keeps_supplied_noise():
    noise = ConstantNoise(1.0)
    terrain = Terrain(noise=noise)
    terrain.reconfigure(seed=9)
    assert terrain.noise is noise


def test_reconfigure_without_changes():
    terrain = Terrain(noise=ConstantNoise(1.0))
    mesh = terrain.mesh
    assert terrain.reconfigure() is mesh


def test_reconfigure_rejects_unknown_and_invalid():
    terrain = Terrain(noise=ConstantNoise(1.0))
    with pytest.raises(InvalidConfiguration):
        terrain.reconfigure(colour='red')
    with pytest.raises(InvalidConfiguration):
        terrain.reconfigure(sample_size=0)
    assert terrain.config.sample_size == 10.0


def test_invalid_config_rejected_before_sampling():
    with pytest.raises(InvalidConfiguration):
        Terrain(TerrainConfig(sample_size=0))
    with pytest.raises(InvalidConfiguration):
        Terrain(TerrainConfig(noise=NoiseConfig(num_octaves=0)))


def test_buffers():
    terrain = Terrain(noise=ConstantNoise(1.0))
    positions, normals = terrain.buffers()
    assert positions.dtype == np.float32
    assert len(positions) == len(normals) == terrain.mesh.vertex_count * 3


def test_bad_noise_setting_rejected_before_sampling():
    with pytest.raises(InvalidConfiguration):
        Terrain(TerrainConfig(noise=NoiseConfig(lacunarity='fast')))


def test_terrain_keeps_its_own_config():
    config = TerrainConfig(noise=NoiseConfig(floor_offset=2.0))
    terrain = Terrain(config, noise=ConstantNoise(1.0))
    config.sample_size = 5.0
    config.noise.floor_offset = 4.0
    assert terrain.config.sample_size == 10.0
    assert terrain.config.noise.floor_offset == 2.0
    assert terrain.config.noise is not config.noise
