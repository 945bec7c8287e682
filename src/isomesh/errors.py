"""Exceptions raised by isomesh."""

import math
import numbers


class IsomeshError(Exception):
    """Base exception for isomesh errors."""
    pass


class InvalidConfiguration(IsomeshError, ValueError):
    """Grid, field or noise parameters that cannot produce a mesh."""
    pass


class DegenerateEdgeInterpolation(IsomeshError, ArithmeticError):
    """An active edge whose corner values give no interpolation parameter.

    Only raised by extractors running in strict mode; otherwise the
    crossing point is placed at the edge midpoint.
    """

    def __init__(self, edge: int, va: float, vb: float, iso_level: float):
        self.edge = edge
        self.va = va
        self.vb = vb
        self.iso_level = iso_level
        super().__init__(
            f"edge {edge}: cannot interpolate iso-level {iso_level!r} "
            f"between corner values {va!r} and {vb!r}"
        )


def require_number(name: str, value, positive: bool = False) -> None:
    """Raise ``InvalidConfiguration`` unless ``value`` is a finite real number."""

    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidConfiguration(f"{name} must be a number, got {value!r}")
    if not math.isfinite(value):
        raise InvalidConfiguration(f"{name} must be finite, got {value!r}")
    if positive and value <= 0:
        raise InvalidConfiguration(f"{name} must be positive, got {value!r}")


__all__ = [
    'IsomeshError',
    'InvalidConfiguration',
    'DegenerateEdgeInterpolation',
    'require_number',
]
