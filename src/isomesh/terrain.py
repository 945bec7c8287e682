"""Noise terrain: density field plus its Marching Cubes mesh."""

from __future__ import annotations

import dataclasses
import logging
from typing import Optional, Tuple

import numpy as np

from isomesh.config import TerrainConfig, config_from_dict
from isomesh.errors import InvalidConfiguration
from isomesh.field import FieldBuffer, ScalarField, populate_field
from isomesh.grid import Grid
from isomesh.marching import MarchingCubes
from isomesh.mesh import Mesh
from isomesh.noise import NoiseSource, SimplexNoise

logger = logging.getLogger(__name__)

# changing only these leaves the sampled field valid
_MESH_ONLY_KEYS = {'iso_level'}


class Terrain:
    """Generates a terrain mesh from a ``TerrainConfig``.

    The density field is sampled once per grid and noise configuration.
    The mesh is always rebuilt in full: assigning ``iso_level`` re-runs the
    extraction, while ``reconfigure`` with any other setting resamples the
    field first.

    When no ``noise`` source is given a ``SimplexNoise`` seeded from
    ``config.seed`` is used and recreated whenever the seed changes.
    """

    def __init__(self, config: Optional[TerrainConfig] = None,
                 noise: Optional[NoiseSource] = None, *, strict: bool = False):
        config = config if config is not None else TerrainConfig()
        config.validate()
        # own copy; later edits to the caller's objects do not reach the built mesh
        self._config = dataclasses.replace(config, noise=dataclasses.replace(config.noise))
        self._owns_noise = noise is None
        self.noise: NoiseSource = noise if noise is not None else SimplexNoise(self._config.seed)
        self.strict = strict

        self._build_field()
        self._build_mesh()

    def __repr__(self) -> str:
        return f"Terrain({self._config!r})"

    @property
    def config(self) -> TerrainConfig:
        return self._config

    @property
    def grid(self) -> Grid:
        return self._grid

    @property
    def field_buffer(self) -> FieldBuffer:
        return self._field

    @property
    def mesh(self) -> Mesh:
        return self._mesh

    @property
    def iso_level(self) -> float:
        return self._config.iso_level

    @iso_level.setter
    def iso_level(self, value: float) -> None:
        self.reconfigure(iso_level=value)

    def reconfigure(self, **changes) -> Mesh:
        """Apply ``TerrainConfig`` field changes and rebuild what they affect.

        ``noise`` may be a ``NoiseConfig`` or a mapping of its settings.
        """

        if not changes:
            return self._mesh

        merged = dataclasses.asdict(self._config)
        merged['noise'] = self._config.noise
        unknown = set(changes) - set(merged)
        if unknown:
            raise InvalidConfiguration(f"unknown terrain settings: {', '.join(sorted(unknown))}")
        merged.update(changes)
        config = config_from_dict(merged)

        previous = self._config
        self._config = config
        if self._owns_noise and config.seed != previous.seed:
            self.noise = SimplexNoise(config.seed)

        if set(changes) - _MESH_ONLY_KEYS:
            self._build_field()
        self._build_mesh()
        return self._mesh

    def buffers(self) -> Tuple[np.ndarray, np.ndarray]:
        """Flat float32 ``(positions, normals)`` ready for a renderer."""
        return self._mesh.flat_buffers()

    def _build_field(self) -> None:
        self._grid = self._config.grid()
        scalar_field = ScalarField(self.noise, self._config.noise)
        self._field = populate_field(self._grid, scalar_field)

    def _build_mesh(self) -> None:
        extractor = MarchingCubes(self._grid, strict=self.strict)
        self._mesh = extractor.extract(self._field, self._config.iso_level)
        logger.debug("terrain mesh: %d vertices", self._mesh.vertex_count)


__all__ = ['Terrain']
