"""Coherent noise sources used to build density fields.

``SimplexNoise`` is the classic 3D simplex noise of Ken Perlin in the
formulation popularised by Stefan Gustavson: the input space is skewed
onto a lattice of tetrahedra, the four corners of the enclosing simplex
contribute a radially attenuated gradient each, and the sum is scaled so
that the result lies roughly in ``[-1, 1]``.

The permutation table is shuffled by a ``random.Random`` seeded from the
constructor argument, so two sources built with the same seed return
identical samples everywhere.
"""

from __future__ import annotations

import math
import random
from typing import Protocol, Tuple, runtime_checkable


@runtime_checkable
class NoiseSource(Protocol):
    """Anything that returns a deterministic scalar for a 3D position."""

    def sample3d(self, x: float, y: float, z: float) -> float:
        ...


_GRAD3: Tuple[Tuple[int, int, int], ...] = (
    (1, 1, 0), (-1, 1, 0), (1, -1, 0), (-1, -1, 0),
    (1, 0, 1), (-1, 0, 1), (1, 0, -1), (-1, 0, -1),
    (0, 1, 1), (0, -1, 1), (0, 1, -1), (0, -1, -1),
)

_F3 = 1.0 / 3.0
_G3 = 1.0 / 6.0


class SimplexNoise:
    """Seeded 3D simplex noise."""

    def __init__(self, seed: int = 0):
        self.seed = seed
        rng = random.Random(seed)
        p = list(range(256))
        rng.shuffle(p)
        # doubled so that index arithmetic never needs wrapping
        self._perm = tuple(p + p)
        self._perm_mod12 = tuple(v % 12 for v in self._perm)

    def __repr__(self) -> str:
        return f"SimplexNoise(seed={self.seed!r})"

    def sample3d(self, x: float, y: float, z: float) -> float:
        perm = self._perm
        perm_mod12 = self._perm_mod12

        # skew the input space to find the simplex cell
        s = (x + y + z) * _F3
        i = math.floor(x + s)
        j = math.floor(y + s)
        k = math.floor(z + s)
        t = (i + j + k) * _G3
        x0 = x - (i - t)
        y0 = y - (j - t)
        z0 = z - (k - t)

        # which of the six tetrahedra are we in?
        if x0 >= y0:
            if y0 >= z0:
                i1, j1, k1, i2, j2, k2 = 1, 0, 0, 1, 1, 0
            elif x0 >= z0:
                i1, j1, k1, i2, j2, k2 = 1, 0, 0, 1, 0, 1
            else:
                i1, j1, k1, i2, j2, k2 = 0, 0, 1, 1, 0, 1
        else:
            if y0 < z0:
                i1, j1, k1, i2, j2, k2 = 0, 0, 1, 0, 1, 1
            elif x0 < z0:
                i1, j1, k1, i2, j2, k2 = 0, 1, 0, 0, 1, 1
            else:
                i1, j1, k1, i2, j2, k2 = 0, 1, 0, 1, 1, 0

        x1 = x0 - i1 + _G3
        y1 = y0 - j1 + _G3
        z1 = z0 - k1 + _G3
        x2 = x0 - i2 + 2.0 * _G3
        y2 = y0 - j2 + 2.0 * _G3
        z2 = z0 - k2 + 2.0 * _G3
        x3 = x0 - 1.0 + 3.0 * _G3
        y3 = y0 - 1.0 + 3.0 * _G3
        z3 = z0 - 1.0 + 3.0 * _G3

        ii = i & 255
        jj = j & 255
        kk = k & 255
        gi0 = perm_mod12[ii + perm[jj + perm[kk]]]
        gi1 = perm_mod12[ii + i1 + perm[jj + j1 + perm[kk + k1]]]
        gi2 = perm_mod12[ii + i2 + perm[jj + j2 + perm[kk + k2]]]
        gi3 = perm_mod12[ii + 1 + perm[jj + 1 + perm[kk + 1]]]

        total = (_corner(gi0, x0, y0, z0) + _corner(gi1, x1, y1, z1)
                 + _corner(gi2, x2, y2, z2) + _corner(gi3, x3, y3, z3))
        return 32.0 * total


def _corner(gi: int, x: float, y: float, z: float) -> float:
    t = 0.6 - x * x - y * y - z * z
    if t < 0:
        return 0.0
    g = _GRAD3[gi]
    t *= t
    return t * t * (g[0] * x + g[1] * y + g[2] * z)


class ConstantNoise:
    """Noise source returning the same value everywhere; useful in tests."""

    def __init__(self, value: float = 0.0):
        self.value = value

    def __repr__(self) -> str:
        return f"ConstantNoise({self.value!r})"

    def sample3d(self, x: float, y: float, z: float) -> float:
        return self.value


__all__ = ['NoiseSource', 'SimplexNoise', 'ConstantNoise']
