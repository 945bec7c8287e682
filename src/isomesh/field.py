"""Procedural density fields and the lattice buffer that stores them."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Tuple

import numpy as np

from isomesh.errors import InvalidConfiguration, require_number
from isomesh.grid import Grid
from isomesh.noise import NoiseSource

logger = logging.getLogger(__name__)

DensityFunction = Callable[[float, float, float], float]


@dataclass
class NoiseConfig:
    """Octave parameters for the terrain density field."""

    num_octaves: int = 4
    lacunarity: float = 2.0
    persistence: float = 0.5
    noise_scale: float = 2.0
    noise_weight: float = 7.0
    floor_offset: float = 5.0
    weight_multiplier: float = 3.6
    # keeps the first sample away from the lattice origin
    offset: float = 1.0

    def validate(self) -> None:
        octaves = self.num_octaves
        if isinstance(octaves, bool) or not isinstance(octaves, int):
            raise InvalidConfiguration(f"num_octaves must be an integer, got {octaves!r}")
        if octaves <= 0:
            raise InvalidConfiguration(f"num_octaves must be positive, got {octaves}")
        for name in ('lacunarity', 'persistence', 'noise_scale', 'noise_weight',
                     'floor_offset', 'weight_multiplier', 'offset'):
            require_number(name, getattr(self, name))


class ScalarField:
    """Layered ridge noise over a ground plane.

    Values below the iso-level are solid, values at or above it are air.
    The undeformed surface is the plane ``y = -floor_offset``; each octave
    folds its noise sample into a ridge ``(1 - |n|)**2`` and the running
    ``weight`` damps higher octaves wherever lower ones were already close
    to zero.
    """

    def __init__(self, noise: NoiseSource, config: NoiseConfig | None = None):
        self.noise = noise
        self.config = config if config is not None else NoiseConfig()
        self.config.validate()

    def value(self, x: float, y: float, z: float) -> float:
        cfg = self.config
        offset = cfg.offset
        frequency = cfg.noise_scale / 100
        amplitude = 1.0
        weight = 1.0
        total = 0.0
        for _ in range(cfg.num_octaves):
            n = self.noise.sample3d((x + offset) * frequency,
                                    (y + offset) * frequency,
                                    (z + offset) * frequency)
            v = 1 - abs(n)
            v = v * v * weight
            weight = max(min(v * cfg.weight_multiplier, 1.0), 0.0)
            total += v * amplitude
            amplitude *= cfg.persistence
            frequency *= cfg.lacunarity

        final = -(y + cfg.floor_offset) + total * cfg.noise_weight
        return -final

    __call__ = value


class FieldBuffer:
    """Scalar values sampled at every lattice point of a ``Grid``.

    ``values[i, j, k]`` holds the sample for the signed coordinate
    ``(i - x_max, j - y_max, k - z_max)``.  The array is read-only once the
    buffer is built.
    """

    def __init__(self, grid: Grid, values):
        arr = np.array(values, dtype=np.float64)
        if arr.shape != grid.shape:
            raise InvalidConfiguration(
                f"field buffer shape {arr.shape} does not match grid shape {grid.shape}")
        arr.flags.writeable = False
        self.grid = grid
        self.values = arr

    def __repr__(self) -> str:
        return f"FieldBuffer(grid={self.grid!r})"

    @classmethod
    def from_function(cls, grid: Grid, fn: DensityFunction) -> "FieldBuffer":
        """Evaluate ``fn`` at the world position of every lattice point."""

        values = np.empty(grid.shape, dtype=np.float64)
        for i, j, k in grid.lattice_points():
            x, y, z = grid.world(i, j, k)
            values[grid.lattice_index(i, j, k)] = fn(x, y, z)
        return cls(grid, values)

    @property
    def shape(self) -> Tuple[int, int, int]:
        return self.values.shape

    def value(self, i: int, j: int, k: int) -> float:
        """Sample at the non-negative lattice index ``(i, j, k)``."""
        return float(self.values[i, j, k])

    def at(self, i: int, j: int, k: int) -> float:
        """Sample at the signed grid coordinate ``(i, j, k)``."""
        return float(self.values[self.grid.lattice_index(i, j, k)])

    def min(self) -> float:
        return float(self.values.min())

    def max(self) -> float:
        return float(self.values.max())


def populate_field(grid: Grid, field: ScalarField) -> FieldBuffer:
    """Sample ``field`` over every point of ``grid``."""

    logger.debug("populating %d lattice points for %r", grid.point_count, grid)
    buffer = FieldBuffer.from_function(grid, field.value)
    logger.debug("field range [%g, %g]", buffer.min(), buffer.max())
    return buffer


__all__ = [
    'NoiseConfig',
    'ScalarField',
    'FieldBuffer',
    'populate_field',
]
