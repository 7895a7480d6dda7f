"""Scalar encryption with an ECIES-style shared secret on any supported curve."""

from __future__ import annotations

import hashlib
import secrets
from typing import Callable

from zvote.ecc.point import Point

HashFunc = Callable[[bytes], bytes]


def _sha256(data: bytes) -> bytes:
    return hashlib.sha256(data).digest()


class ScalarECIES:
    """Encrypts and decrypts scalars modulo the curve order.

    A ciphertext is ``(c, R)`` with ``R = r*G`` and ``c = m + H(r*PK) mod n``.
    """

    def __init__(
        self,
        curve: Point | None,
        private_key: int | None = None,
        hash_func: HashFunc | None = None,
    ) -> None:
        if curve is None:
            raise ValueError("curve cannot be nil")
        self._curve = curve
        self._hash_func: HashFunc = hash_func or _sha256
        if private_key is None:
            self._generate_keys()
        else:
            self._private_key = private_key
            public_key = curve.new()
            public_key.scalar_base_mult(private_key)
            self._public_key = public_key

    def _generate_keys(self) -> None:
        private_key = secrets.randbelow(self._curve.order())
        if private_key == 0:
            private_key = 1
        self._private_key = private_key
        public_key = self._curve.new()
        public_key.set_generator()
        public_key.scalar_mult(public_key, private_key)
        self._public_key = public_key

    @property
    def private_key(self) -> int:
        """The private scalar."""
        return self._private_key

    @property
    def public_key(self) -> Point:
        """The public point ``private_key * G``."""
        return self._public_key

    @property
    def curve(self) -> Point:
        """A point on the curve this instance works with."""
        return self._curve

    def public_key_bytes(self) -> bytes:
        """Return the marshaled public key."""
        return self._public_key.marshal()

    def encrypt(self, message: int, recipient_public_key: Point) -> tuple[int, bytes]:
        """Encrypt ``message`` for ``recipient_public_key``.

        Returns ``(c, r_bytes)`` where ``r_bytes`` is the marshaled ephemeral point.
        """
        order = self._curve.order()
        message %= order

        r = secrets.randbelow(order)
        if r == 0:
            r = 1

        ephemeral = self._curve.new()
        ephemeral.scalar_base_mult(r)

        shared = self._curve.new()
        shared.scalar_mult(recipient_public_key, r)

        c = (message + self._hash_point_to_scalar(shared)) % order
        return c, ephemeral.marshal()

    def decrypt(self, c: int, r_bytes: bytes) -> int:
        """Recover the message from ``(c, r_bytes)``.

        Raises ``ValueError`` if ``r_bytes`` is not a valid point encoding.
        """
        ephemeral = self._curve.new()
        ephemeral.unmarshal(r_bytes)

        shared = self._curve.new()
        shared.scalar_mult(ephemeral, self._private_key)

        order = self._curve.order()
        return (c - self._hash_point_to_scalar(shared)) % order

    def _hash_point_to_scalar(self, point: Point) -> int:
        digest = self._hash_func(point.marshal())
        return int.from_bytes(digest, "big") % point.order()