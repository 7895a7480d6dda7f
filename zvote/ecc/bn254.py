"""G1 group of the BN254 pairing curve (y^2 = x^3 + 3)."""

from __future__ import annotations

import threading

from zvote.ecc.bjj_iden3 import (
    _coords_from_cbor,
    _coords_from_json,
    _coords_to_cbor,
    _coords_to_json,
    _inv,
    _mod_sqrt,
)
from zvote.ecc.point import Point
from zvote.fields import BN254_SCALAR_FIELD

CURVE_TYPE = "bn254"

P = 21888242871839275222246405745257275088696311157297823662689037894645226208583
"""Base field of the curve."""

R = BN254_SCALAR_FIELD
"""Order of the G1 group."""

B = 3

GENERATOR = (1, 2)

INFINITY = (0, 0)
"""Affine encoding of the point at infinity."""

_MASK = 0xC0
_UNCOMPRESSED = 0x00
_INFINITY_FLAG = 0x40
_SMALLEST = 0x80
_LARGEST = 0xC0

Coords = tuple[int, int]


def _largest(y: int) -> bool:
    return y > (P - 1) // 2


def _on_curve(x: int, y: int) -> bool:
    return (x, y) == INFINITY or (y * y - x * x * x - B) % P == 0


def _g1_add(p1: Coords, p2: Coords) -> Coords:
    if p1 == INFINITY:
        return p2
    if p2 == INFINITY:
        return p1
    x1, y1 = p1
    x2, y2 = p2
    if x1 == x2:
        if (y1 + y2) % P == 0:
            return INFINITY
        lam = 3 * x1 * x1 * _inv(2 * y1, P) % P
    else:
        lam = (y2 - y1) * _inv(x2 - x1, P) % P
    x3 = (lam * lam - x1 - x2) % P
    y3 = (lam * (x1 - x3) - y1) % P
    return x3, y3


def _g1_mul(pt: Coords, scalar: int) -> Coords:
    scalar %= R
    result = INFINITY
    addend = pt
    while scalar:
        if scalar & 1:
            result = _g1_add(result, addend)
        addend = _g1_add(addend, addend)
        scalar >>= 1
    return result


def _coords(a: Point) -> Coords:
    if not isinstance(a, BN254G1):
        raise TypeError(f"expected {CURVE_TYPE} point, got {type(a).__name__}")
    return a._x, a._y


class BN254G1(Point):
    """Affine BN254 G1 point; (0, 0) stands for the point at infinity."""

    def __init__(self, x: int = 0, y: int = 0) -> None:
        super().__init__()
        self._x = x % P
        self._y = y % P
        self._add_lock = threading.Lock()

    def new(self) -> BN254G1:
        return BN254G1()

    def order(self) -> int:
        return R

    def add(self, a: Point, b: Point) -> None:
        self._x, self._y = _g1_add(_coords(a), _coords(b))

    def safe_add(self, a: Point, b: Point) -> None:
        """Add ``a`` and ``b`` into this point while holding its lock."""
        with self._add_lock:
            self.add(a, b)

    def scalar_mult(self, a: Point, scalar: int) -> None:
        self._x, self._y = _g1_mul(_coords(a), scalar)

    def scalar_base_mult(self, scalar: int) -> None:
        self._x, self._y = _g1_mul(GENERATOR, scalar)

    def marshal(self) -> bytes:
        """Compress to 32 bytes: big-endian X with flags in the top two bits."""
        if (self._x, self._y) == INFINITY:
            return bytes([_INFINITY_FLAG]) + bytes(31)
        out = bytearray(self._x.to_bytes(32, "big"))
        out[0] |= _LARGEST if _largest(self._y) else _SMALLEST
        return bytes(out)

    def unmarshal(self, buf: bytes) -> None:
        if len(buf) < 32:
            raise ValueError("short buffer")
        flag = buf[0] & _MASK
        if flag == _INFINITY_FLAG:
            self._x, self._y = INFINITY
            return
        if flag == _UNCOMPRESSED:
            if len(buf) < 64:
                raise ValueError("short buffer")
            x = int.from_bytes(buf[:32], "big")
            y = int.from_bytes(buf[32:64], "big")
            if x >= P or y >= P:
                raise ValueError("invalid fp.Element encoding")
            if not _on_curve(x, y):
                raise ValueError("invalid point: subgroup check failed")
            self._x, self._y = x, y
            return
        data = bytearray(buf[:32])
        data[0] &= ~_MASK & 0xFF
        x = int.from_bytes(data, "big")
        if x >= P:
            raise ValueError("invalid fp.Element encoding")
        y = _mod_sqrt(x * x * x + B, P)
        if y is None:
            raise ValueError("invalid compressed coordinate: square root doesn't exist")
        if _largest(y) != (flag == _LARGEST):
            y = (-y) % P
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
        self._x, self._y = x, (-y) % P

    def set_zero(self) -> None:
        self._x, self._y = INFINITY

    def set(self, a: Point) -> None:
        self._x, self._y = _coords(a)

    def set_generator(self) -> None:
        self._x, self._y = GENERATOR

    def point(self) -> Coords:
        return self._x, self._y

    def set_point(self, x: int, y: int) -> BN254G1:
        return BN254G1(x, y)

    def type(self) -> str:
        return CURVE_TYPE

    def __str__(self) -> str:
        return self.marshal().hex()

    def __repr__(self) -> str:
        return f"BN254G1({self._x}, {self._y})"