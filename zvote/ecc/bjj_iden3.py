"""BabyJubJub in standard twisted Edwards form (a = 168700, d = 168696)."""

from __future__ import annotations

import json
import threading

import cbor2

from zvote.ecc.point import Point
from zvote.fields import BN254_SCALAR_FIELD

CURVE_TYPE = "bjj_iden3"

Q = BN254_SCALAR_FIELD
"""Base field of the curve."""

A = 168700
D = 168696

SUB_ORDER = (
    2736030358979909402780800718157159386076813972158567259200215660948447373041
)
"""Order of the prime subgroup generated by :data:`B8`."""

B8 = (
    5299619240641551281634865583518297030282874472190772894086521144482721001553,
    16950150798460657717958625567821834550301663161624707787222815936182638968203,
)
"""Generator of the prime subgroup."""

Coords = tuple[int, int]


def _inv(value: int, p: int) -> int:
    # Fermat inverse; maps 0 to 0 like the field libraries do.
    return pow(value % p, p - 2, p)


def _edwards_add(p1: Coords, p2: Coords, a: int, d: int, p: int) -> Coords:
    x1, y1 = p1
    x2, y2 = p2
    t = d * x1 * x2 * y1 * y2 % p
    x3 = (x1 * y2 + y1 * x2) * _inv(1 + t, p) % p
    y3 = (y1 * y2 - a * x1 * x2) * _inv(1 - t, p) % p
    return x3, y3


def _edwards_mul(pt: Coords, scalar: int, a: int, d: int, p: int) -> Coords:
    if scalar < 0:
        scalar = -scalar
        pt = ((-pt[0]) % p, pt[1])
    result: Coords = (0, 1)
    addend = pt
    while scalar:
        if scalar & 1:
            result = _edwards_add(result, addend, a, d, p)
        addend = _edwards_add(addend, addend, a, d, p)
        scalar >>= 1
    return result


def _mod_sqrt(n: int, p: int) -> int | None:
    """Return a square root of ``n`` modulo the odd prime ``p``, or None."""
    n %= p
    if n == 0:
        return 0
    if pow(n, (p - 1) // 2, p) != 1:
        return None
    q, s = p - 1, 0
    while q % 2 == 0:
        q //= 2
        s += 1
    z = 2
    while pow(z, (p - 1) // 2, p) != p - 1:
        z += 1
    m, c, t, r = s, pow(z, q, p), pow(n, q, p), pow(n, (q + 1) // 2, p)
    while t != 1:
        i, t2 = 0, t
        while t2 != 1:
            t2 = t2 * t2 % p
            i += 1
        b = pow(c, 1 << (m - i - 1), p)
        m, c, t, r = i, b * b % p, t * b * b % p, r * b % p
    return r


def _parse_coord(value: object) -> int:
    if isinstance(value, bool):
        raise ValueError(f"invalid coordinate: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value, 0) if value.lower().startswith("0x") else int(value)
        except ValueError as err:
            raise ValueError(f"invalid coordinate: {value!r}") from err
    raise ValueError(f"invalid coordinate: {value!r}")


def _coords_to_json(x: int, y: int) -> bytes:
    return json.dumps([str(x), str(y)], separators=(",", ":")).encode()


def _coords_from_json(buf: bytes | str) -> Coords:
    coords = json.loads(buf)
    if not isinstance(coords, list):
        raise ValueError("expected a list of coordinates")
    if len(coords) != 2:
        raise ValueError(f"expected 2 coordinates, got {len(coords)}")
    return _parse_coord(coords[0]), _parse_coord(coords[1])


def _coords_to_cbor(x: int, y: int) -> bytes:
    return cbor2.dumps([x, y])


def _coords_from_cbor(buf: bytes) -> Coords:
    try:
        coords = cbor2.loads(buf)
    except cbor2.CBORDecodeError as err:
        raise ValueError(f"invalid CBOR: {err}") from err
    if not isinstance(coords, list):
        raise ValueError("expected a list of coordinates")
    if len(coords) != 2:
        raise ValueError(f"expected 2 coordinates, got {len(coords)}")
    if not all(isinstance(c, int) and not isinstance(c, bool) for c in coords):
        raise ValueError("coordinates must be integers")
    return coords[0], coords[1]


def _sign(x: int) -> bool:
    return x > Q >> 1


def _coords(a: Point) -> Coords:
    if not isinstance(a, Iden3BJJ):
        raise TypeError(f"expected {CURVE_TYPE} point, got {type(a).__name__}")
    return a._x, a._y


class Iden3BJJ(Point):
    """Affine BabyJubJub point in standard twisted Edwards coordinates."""

    def __init__(self, x: int = 0, y: int = 1) -> None:
        super().__init__()
        self._x = x
        self._y = y
        self._add_lock = threading.Lock()

    def new(self) -> Iden3BJJ:
        return Iden3BJJ()

    def order(self) -> int:
        return SUB_ORDER

    def add(self, a: Point, b: Point) -> None:
        self._x, self._y = _edwards_add(_coords(a), _coords(b), A, D, Q)

    def safe_add(self, a: Point, b: Point) -> None:
        """Add ``a`` and ``b`` into this point while holding its lock."""
        with self._add_lock:
            self.add(a, b)

    def scalar_mult(self, a: Point, scalar: int) -> None:
        self._x, self._y = _edwards_mul(_coords(a), scalar, A, D, Q)

    def scalar_base_mult(self, scalar: int) -> None:
        self._x, self._y = _edwards_mul(B8, scalar, A, D, Q)

    def marshal(self) -> bytes:
        """Compress to 32 bytes: little-endian Y, top bit set for a large X."""
        out = bytearray(self._y.to_bytes(32, "little"))
        if _sign(self._x):
            out[31] |= 0x80
        return bytes(out)

    def unmarshal(self, buf: bytes) -> None:
        data = bytearray(bytes(buf[:32]).ljust(32, b"\x00"))
        sign = bool(data[31] & 0x80)
        data[31] &= 0x7F
        y = int.from_bytes(data, "little")
        if y >= Q:
            raise ValueError("p.y >= Q")
        y2 = y * y % Q
        denominator = (A - D * y2) % Q
        if denominator == 0:
            raise ValueError("division by zero while decompressing point")
        x = _mod_sqrt((1 - y2) * _inv(denominator, Q), Q)
        if x is None:
            raise ValueError("invalid point: square root not exists")
        if sign != _sign(x):
            x = (Q - x) % Q
        self._x, self._y = x, y

    def marshal_json(self) -> bytes:
        return _coords_to_json(self._x, self._y)

    def unmarshal_json(self, buf: bytes) -> None:
        self._x, self._y = _coords_from_json(buf)

    def marshal_cbor(self) -> bytes:
        return _coords_to_cbor(self._x, self._y)

    def unmarshal_cbor(self, buf: bytes) -> None:
        self._x, self._y = _coords_from_cbor(buf)

    def equal(self, a: Point) -> bool:
        return (self._x, self._y) == _coords(a)

    def neg(self, a: Point) -> None:
        x, y = _coords(a)
        self._x, self._y = (-x) % Q, y % Q

    def set_zero(self) -> None:
        self._x, self._y = 0, 1

    def set(self, a: Point) -> None:
        self._x, self._y = _coords(a)

    def set_generator(self) -> None:
        self._x, self._y = B8

    def point(self) -> Coords:
        return self._x, self._y

    def set_point(self, x: int, y: int) -> Iden3BJJ:
        return Iden3BJJ(x, y)

    def type(self) -> str:
        return CURVE_TYPE

    def __str__(self) -> str:
        return f"{self._x},{self._y}"

    def __repr__(self) -> str:
        return f"Iden3BJJ({self._x}, {self._y})"


def new() -> Iden3BJJ:
    """Return a new point set to the identity element."""
    return Iden3BJJ()