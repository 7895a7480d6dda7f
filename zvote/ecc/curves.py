"""Registry of the supported elliptic-curve point implementations."""

from __future__ import annotations

from zvote.ecc import bjj_gnark, bjj_iden3, bn254
from zvote.ecc.point import Point

_FACTORIES = {
    bjj_gnark.CURVE_TYPE: bjj_gnark.GnarkBJJ,
    bn254.CURVE_TYPE: bn254.BN254G1,
    bjj_iden3.CURVE_TYPE: bjj_iden3.Iden3BJJ,
}


def new(curve_type: str) -> Point:
    """Return a new point of the given curve type.

    Raises ``ValueError`` for an unsupported type.
    """
    factory = _FACTORIES.get(curve_type)
    if factory is None:
        raise ValueError(f"unsupported curve type: {curve_type}")
    return factory()


def curves() -> list[str]:
    """Return the supported curve type identifiers."""
    return list(_FACTORIES)