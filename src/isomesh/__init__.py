from importlib.metadata import PackageNotFoundError, version

from isomesh.errors import DegenerateEdgeInterpolation, InvalidConfiguration, IsomeshError
from isomesh.field import FieldBuffer, NoiseConfig, ScalarField, populate_field
from isomesh.grid import Grid
from isomesh.marching import MarchingCubes, extract_mesh
from isomesh.mesh import Mesh
from isomesh.noise import ConstantNoise, NoiseSource, SimplexNoise
from isomesh.config import TerrainConfig, load_config
from isomesh.terrain import Terrain

try:
    __version__ = version("isomesh")
except PackageNotFoundError:  # pragma: no cover - handled when package not installed
    __version__ = "unknown"

__all__ = [
    'ConstantNoise',
    'DegenerateEdgeInterpolation',
    'FieldBuffer',
    'Grid',
    'InvalidConfiguration',
    'IsomeshError',
    'MarchingCubes',
    'Mesh',
    'NoiseConfig',
    'NoiseSource',
    'ScalarField',
    'SimplexNoise',
    'Terrain',
    'TerrainConfig',
    'extract_mesh',
    'load_config',
    'populate_field',
]
