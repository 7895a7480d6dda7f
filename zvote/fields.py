"""Finite-field helpers shared by the cryptographic modules."""

from __future__ import annotations

SERIALIZED_FIELD_SIZE = 32
"""Size in bytes of a serialized field element."""

BN254_SCALAR_FIELD = (
    21888242871839275222246405745257275088548364400416034343698204186575808495617
)
"""Order of the BN254 scalar field (the BabyJubJub base field)."""


def big_to_ff(base_field: int, iv: int) -> int:
    """Return ``iv`` reduced into the field of order ``base_field``."""
    if iv == base_field:
        return 0
    if 0 <= iv < base_field:
        return iv
    return iv % base_field


def bigint_to_ff_with_padding(input: int, base: int) -> bytes:
    """Reduce ``input`` into the field ``base`` and encode it big-endian.

    The encoding is left-padded with zeros to at least
    :data:`SERIALIZED_FIELD_SIZE` bytes.
    """
    value = big_to_ff(base, input)
    length = max(SERIALIZED_FIELD_SIZE, (value.bit_length() + 7) // 8)
    return value.to_bytes(length, "big")