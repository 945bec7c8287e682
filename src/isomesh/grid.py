"""Sampling lattice shared by the density field and the extractor."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Iterator, Tuple

from isomesh.errors import InvalidConfiguration, require_number

logger = logging.getLogger(__name__)

Index3 = Tuple[int, int, int]
Vec3 = Tuple[float, float, float]


@dataclass(frozen=True)
class Grid:
    """A lattice centred on the origin.

    ``x_max``, ``y_max`` and ``z_max`` count the samples on each side of
    the origin, so the lattice holds ``2*x_max + 1`` points along X (and
    likewise for Y and Z).  ``sample_size`` is the world-space spacing
    between neighbouring samples.
    """

    x_max: int
    y_max: int
    z_max: int
    sample_size: float = 1.0

    def __post_init__(self):
        for name in ('x_max', 'y_max', 'z_max'):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidConfiguration(f"{name} must be an integer, got {value!r}")
            if value <= 0:
                raise InvalidConfiguration(f"{name} must be positive, got {value}")
        require_number('sample_size', self.sample_size, positive=True)

    @classmethod
    def from_dimensions(cls, width: float, height: float, depth: float,
                        sample_size: float = 1.0) -> "Grid":
        """Build the grid covering a ``width x height x depth`` box."""

        require_number('sample_size', sample_size, positive=True)
        for name, value in (('width', width), ('height', height), ('depth', depth)):
            require_number(name, value, positive=True)

        grid = cls(
            x_max=int(math.floor(width / (2 * sample_size))),
            y_max=int(math.floor(height / (2 * sample_size))),
            z_max=int(math.floor(depth / (2 * sample_size))),
            sample_size=sample_size,
        )
        logger.debug("width=%s height=%s depth=%s sample_size=%s -> %r",
                     width, height, depth, sample_size, grid)
        return grid

    @property
    def shape(self) -> Index3:
        """Number of lattice points along each axis."""
        return (2 * self.x_max + 1, 2 * self.y_max + 1, 2 * self.z_max + 1)

    @property
    def point_count(self) -> int:
        nx, ny, nz = self.shape
        return nx * ny * nz

    def world(self, i: int, j: int, k: int) -> Vec3:
        """World position of the signed lattice coordinate ``(i, j, k)``."""
        s = self.sample_size
        return (i * s, j * s, k * s)

    def lattice_index(self, i: int, j: int, k: int) -> Index3:
        """Convert a signed coordinate into a non-negative buffer index."""
        return (i + self.x_max, j + self.y_max, k + self.z_max)

    def lattice_points(self) -> Iterator[Index3]:
        """Yield every signed lattice coordinate, X outermost."""

        for i in range(-self.x_max, self.x_max + 1):
            for j in range(-self.y_max, self.y_max + 1):
                for k in range(-self.z_max, self.z_max + 1):
                    yield i, j, k

    def y_cell_range(self, inset_y: bool = True) -> range:
        # The terrain generator this lattice was designed for skips the
        # bottom and top layer of cells; inset_y=False walks all of them.
        if inset_y:
            return range(-self.y_max + 1, self.y_max - 1)
        return range(-self.y_max, self.y_max)

    def cells(self, inset_y: bool = True) -> Iterator[Index3]:
        """Yield the signed coordinate of corner 0 of every extracted cell."""

        y_range = self.y_cell_range(inset_y)
        for i in range(-self.x_max, self.x_max):
            for j in y_range:
                for k in range(-self.z_max, self.z_max):
                    yield i, j, k

    def cell_count(self, inset_y: bool = True) -> int:
        return (2 * self.x_max) * len(self.y_cell_range(inset_y)) * (2 * self.z_max)

    def bounds(self) -> Tuple[Vec3, Vec3]:
        """World-space bounding box of the lattice."""
        lo = self.world(-self.x_max, -self.y_max, -self.z_max)
        hi = self.world(self.x_max, self.y_max, self.z_max)
        return lo, hi


__all__ = ['Grid']
