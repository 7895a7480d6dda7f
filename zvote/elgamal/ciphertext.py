"""ElGamal ciphertext: a pair of curve points with homomorphic addition."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

import cbor2

from zvote.ecc.point import Point
from zvote.elgamal.elgamal import encrypt_with_k, rand_k
from zvote.fields import SERIALIZED_FIELD_SIZE

FIELDS_PER_BALLOT = 8
"""Number of ciphertexts held by one ballot."""

SIZE_COORD = SERIALIZED_FIELD_SIZE
SIZE_POINT = 2 * SIZE_COORD
SIZE_CIPHERTEXT = 2 * SIZE_POINT
SERIALIZED_BALLOT_SIZE = FIELDS_PER_BALLOT * SIZE_CIPHERTEXT

BIG_INTS_PER_CIPHERTEXT = 4
"""Coordinates per ciphertext: C1.X, C1.Y, C2.X and C2.Y."""


def _load_container(data: bytes | str) -> dict[str, Any]:
    try:
        container = json.loads(data)
    except ValueError as err:
        raise ValueError(f"failed to unmarshal ciphertext container: {err}") from err
    if not isinstance(container, dict):
        raise ValueError("failed to unmarshal ciphertext container: not an object")
    return container


@dataclass(eq=False)
class Ciphertext:
    """Encrypted message ``(C1, C2)`` on one curve."""

    c1: Point | None = None
    c2: Point | None = None

    @classmethod
    def from_curve(cls, curve: Point) -> Ciphertext:
        """Return a ciphertext of two identity points on the curve of ``curve``."""
        return cls(curve.new(), curve.new())

    def encrypt(self, message: int, public_key: Point, k: int | None = None) -> Ciphertext:
        """Encrypt ``message`` into this ciphertext; ``k`` defaults to fresh randomness."""
        if k is None:
            k = rand_k()
        self.c1, self.c2 = encrypt_with_k(public_key, message, k)
        return self

    def add(self, x: Ciphertext, y: Ciphertext) -> Ciphertext:
        """Set this ciphertext to ``x + y`` and return it."""
        self._require_points()
        self.c1.safe_add(x.c1, y.c1)
        self.c2.safe_add(x.c2, y.c2)
        return self

    def serialize(self) -> bytes:
        """Return C1.X, C1.Y, C2.X, C2.Y as 32-byte little-endian values."""
        self._require_points()
        coords = (*self.c1.point(), *self.c2.point())
        return b"".join(value.to_bytes(SIZE_COORD, "little") for value in coords)

    def deserialize(self, data: bytes) -> None:
        """Load the points from the output of :meth:`serialize`."""
        if len(data) != SIZE_CIPHERTEXT:
            raise ValueError(
                f"invalid input length for Ciphertext: got {len(data)} bytes, "
                f"expected {SIZE_CIPHERTEXT} bytes"
            )
        self._require_points()
        c1x, c1y, c2x, c2y = (
            int.from_bytes(data[offset : offset + SIZE_COORD], "little")
            for offset in range(0, SIZE_CIPHERTEXT, SIZE_COORD)
        )
        self.c1 = self.c1.set_point(c1x, c1y)
        self.c2 = self.c2.set_point(c2x, c2y)

    def marshal_json(self) -> bytes:
        """Serialize to a JSON object with ``c1`` and ``c2`` keys."""
        c1 = self.c1.marshal_json() if self.c1 is not None else b"null"
        c2 = self.c2.marshal_json() if self.c2 is not None else b"null"
        return b'{"c1":' + c1 + b',"c2":' + c2 + b"}"

    def unmarshal_json(self, data: bytes | str) -> None:
        """Load from JSON into the already allocated points."""
        container = _load_container(data)
        for name in ("c1", "c2"):
            target = getattr(self, name)
            raw = container.get(name)
            if target is None or raw is None:
                continue
            try:
                target.unmarshal_json(json.dumps(raw).encode())
            except ValueError as err:
                raise ValueError(f"failed to unmarshal {name}: {err}") from err

    def marshal_cbor(self) -> bytes:
        """Serialize to a CBOR map with ``c1`` and ``c2`` keys."""
        return cbor2.dumps(
            {
                "c1": None if self.c1 is None else cbor2.loads(self.c1.marshal_cbor()),
                "c2": None if self.c2 is None else cbor2.loads(self.c2.marshal_cbor()),
            }
        )

    def unmarshal_cbor(self, buf: bytes) -> None:
        """Load from CBOR into the already allocated points."""
        try:
            container = cbor2.loads(buf)
        except (cbor2.CBORDecodeError, ValueError) as err:
            raise ValueError(f"failed to unmarshal ciphertext container: {err}") from err
        if not isinstance(container, dict):
            raise ValueError("failed to unmarshal ciphertext container: not a map")
        for name in ("c1", "c2"):
            target = getattr(self, name)
            raw = container.get(name)
            if target is None or raw is None:
                continue
            try:
                target.unmarshal_cbor(cbor2.dumps(raw))
            except ValueError as err:
                raise ValueError(f"failed to unmarshal {name}: {err}") from err

    def _require_points(self) -> None:
        if self.c1 is None or self.c2 is None:
            raise ValueError("ciphertext points are not initialized")

    def __str__(self) -> str:
        if self.c1 is None or self.c2 is None:
            return "{C1: nil, C2: nil}"
        return f"{{C1: {self.c1}, C2: {self.c2}}}"