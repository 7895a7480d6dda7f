"""Conversions between twisted Edwards and reduced twisted Edwards forms."""

from __future__ import annotations

from zvote.fields import BN254_SCALAR_FIELD

SCALING_FACTOR = (
    6360561867910373094066688120553762416144456282423235903351243436111059670888
)

_NEG_F = (-SCALING_FACTOR) % BN254_SCALAR_FIELD
_NEG_F_INV = pow(_NEG_F, -1, BN254_SCALAR_FIELD)


def from_rte_to_te(x: int, y: int) -> tuple[int, int]:
    """Convert reduced twisted Edwards coordinates: ``x = x' / (-f)``."""
    return (x * _NEG_F_INV) % BN254_SCALAR_FIELD, y


def from_te_to_rte(x: int, y: int) -> tuple[int, int]:
    """Convert twisted Edwards coordinates: ``x' = x * (-f)``."""
    return (x * _NEG_F) % BN254_SCALAR_FIELD, y