"""Terrain configuration and its YAML loader."""

from __future__ import annotations

import numbers
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict

from isomesh.errors import InvalidConfiguration, require_number
from isomesh.field import NoiseConfig
from isomesh.grid import Grid


@dataclass
class TerrainConfig:
    """World size, sampling and noise parameters of a terrain mesh."""

    width: float = 60.0
    height: float = 60.0
    depth: float = 60.0
    sample_size: float = 10.0
    iso_level: float = 0.0
    seed: int = 0
    noise: NoiseConfig = field(default_factory=NoiseConfig)

    def validate(self) -> None:
        for name in ('width', 'height', 'depth', 'sample_size'):
            require_number(name, getattr(self, name), positive=True)
        require_number('iso_level', self.iso_level)
        if isinstance(self.seed, bool) or not isinstance(self.seed, numbers.Integral):
            raise InvalidConfiguration(f"seed must be an integer, got {self.seed!r}")
        if not isinstance(self.noise, NoiseConfig):
            raise InvalidConfiguration(f"noise must be a NoiseConfig, got {self.noise!r}")
        self.noise.validate()

    def grid(self) -> Grid:
        self.validate()
        return Grid.from_dimensions(self.width, self.height, self.depth, self.sample_size)


_TERRAIN_KEYS = {f.name for f in fields(TerrainConfig)}
_NOISE_KEYS = {f.name for f in fields(NoiseConfig)}


def _parse_noise(raw: Any) -> NoiseConfig:
    if isinstance(raw, NoiseConfig):
        return replace(raw)
    if not isinstance(raw, dict):
        raise InvalidConfiguration(f"noise section must be a mapping, got {type(raw)!r}")
    unknown = sorted(set(raw) - _NOISE_KEYS)
    if unknown:
        raise InvalidConfiguration(f"unknown noise settings: {', '.join(unknown)}")
    return NoiseConfig(**raw)


def config_from_dict(data: Dict[str, Any]) -> TerrainConfig:
    """Build and validate a ``TerrainConfig`` from a plain mapping."""

    if not isinstance(data, dict):
        raise InvalidConfiguration(f"terrain config must be a mapping, got {type(data)!r}")
    unknown = sorted(set(data) - _TERRAIN_KEYS)
    if unknown:
        raise InvalidConfiguration(f"unknown terrain settings: {', '.join(unknown)}")

    values = dict(data)
    if 'noise' in values:
        values['noise'] = _parse_noise(values['noise'] or {})
    config = TerrainConfig(**values)
    config.validate()
    return config


def load_config(path: Path | str) -> TerrainConfig:
    """Load a YAML terrain description and return the ``TerrainConfig``."""

    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"terrain config not found: {config_path}")
    import yaml

    with config_path.open("r", encoding="utf-8") as fp:
        data = yaml.safe_load(fp) or {}
    return config_from_dict(data)


__all__ = ['TerrainConfig', 'config_from_dict', 'load_config']
