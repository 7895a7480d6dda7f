"""BabyJubJub in reduced twisted Edwards form (a = -1)."""

from __future__ import annotations

import threading

from zvote.ecc import bjj_iden3
from zvote.ecc.bjj_iden3 import (
    _coords_from_cbor,
    _coords_from_json,
    _coords_to_cbor,
    _coords_to_json,
    _edwards_add,
    _edwards_mul,
    _inv,
    _mod_sqrt,
)
from zvote.ecc.format import from_te_to_rte
from zvote.ecc.point import Point
from zvote.fields import BN254_SCALAR_FIELD

CURVE_TYPE = "bjj_gnark"

P = BN254_SCALAR_FIELD
"""Base field of the curve."""

A = P - 1
D = (-bjj_iden3.D * pow(bjj_iden3.A, -1, P)) % P

ORDER = bjj_iden3.SUB_ORDER
"""Order of the prime subgroup."""

BASE = from_te_to_rte(*bjj_iden3.B8)
"""Subgroup generator in reduced twisted Edwards coordinates."""

Coords = tuple[int, int]


def _largest(x: int) -> bool:
    return x > (P - 1) // 2


def _coords(a: Point) -> Coords:
    if not isinstance(a, GnarkBJJ):
        raise TypeError(f"expected {CURVE_TYPE} point, got {type(a).__name__}")
    return a._x, a._y


class GnarkBJJ(Point):
    """Affine BabyJubJub point in reduced twisted Edwards coordinates."""

    def __init__(self, x: int = 0, y: int = 0) -> None:
        super().__init__()
        self._x = x % P
        self._y = y % P
        self._add_lock = threading.Lock()

    def new(self) -> GnarkBJJ:
        p = GnarkBJJ()
        p.set_zero()
        return p

    def order(self) -> int:
        return ORDER

    def add(self, a: Point, b: Point) -> None:
        self._x, self._y = _edwards_add(_coords(a), _coords(b), A, D, P)

    def safe_add(self, a: Point, b: Point) -> None:
        """Add ``a`` and ``b`` into this point while holding its lock."""
        with self._add_lock:
            self.add(a, b)

    def scalar_mult(self, a: Point, scalar: int) -> None:
        self._x, self._y = _edwards_mul(_coords(a), scalar, A, D, P)

    def scalar_base_mult(self, scalar: int) -> None:
        self.set_generator()
        self.scalar_mult(self, scalar)

    def marshal(self) -> bytes:
        """Compress to 32 bytes: little-endian Y, top bit set for a large X."""
        out = bytearray(self._y.to_bytes(32, "big"))
        if _largest(self._x):
            out[0] |= 0x80
        out.reverse()
        return bytes(out)

    def unmarshal(self, buf: bytes) -> None:
        if len(buf) < 32:
            raise ValueError("short buffer")
        data = bytearray(buf[:32])
        data.reverse()
        flag = bool(data[0] & 0x80)
        data[0] &= 0x7F
        y = int.from_bytes(data, "big") % P
        y2 = y * y % P
        quotient = (1 - y2) * _inv(A - D * y2, P) % P
        root = _mod_sqrt(quotient, P)
        x = quotient if root is None else root
        if flag != _largest(x):
            x = (-x) % P
        self._x, self._y = x, y

    def marshal_json(self) -> bytes:
        return _coords_to_json(self._x, self._y)

    def unmarshal_json(self, buf: bytes) -> None:
        x, y = _coords_from_json(buf)
        self._x, self._y = x % P, y % P

    def marshal_cbor(self) -> bytes:
        return _coords_to_cbor(self._x, self._y)

    def unmarshal_cbor(self, buf: bytes) -> None:
        x, y = _coords_from_cbor(buf)
        self._x, self._y = x % P, y % P

    def equal(self, a: Point) -> bool:
        return (self._x, self._y) == _coords(a)

    def neg(self, a: Point) -> None:
        x, y = _coords(a)
        self._x, self._y = (-x) % P, y

    def set_zero(self) -> None:
        self._x, self._y = 0, 1

    def set(self, a: Point) -> None:
        self._x, self._y = _coords(a)

    def set_generator(self) -> None:
        self._x, self._y = BASE

    def point(self) -> Coords:
        return self._x, self._y

    def set_point(self, x: int, y: int) -> GnarkBJJ:
        return GnarkBJJ(x, y)

    def type(self) -> str:
        return CURVE_TYPE

    def __str__(self) -> str:
        return f"{self._x},{self._y}"

    def __repr__(self) -> str:
        return f"GnarkBJJ({self._x}, {self._y})"


def new() -> GnarkBJJ:
    """Return a point with both coordinates zero; set it before use."""
    return GnarkBJJ()