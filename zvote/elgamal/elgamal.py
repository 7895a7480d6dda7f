"""ElGamal encryption over elliptic-curve groups with small-message decryption."""

from __future__ import annotations

import math
import secrets

from zvote.ecc.point import Point
from zvote.fields import BN254_SCALAR_FIELD, big_to_ff

_K_BYTES = 20


def rand_k() -> int:
    """Return random encryption randomness reduced into the ballot-proof field."""
    k = int.from_bytes(secrets.token_bytes(_K_BYTES), "big")
    return big_to_ff(BN254_SCALAR_FIELD, k)


def encrypt(public_key: Point, msg: int) -> tuple[Point, Point, int]:
    """Encrypt ``msg`` under ``public_key`` with fresh randomness.

    Returns ``(c1, c2, k)`` where ``k`` is the randomness used.
    """
    k = rand_k()
    c1, c2 = encrypt_with_k(public_key, msg, k)
    return c1, c2, k


def encrypt_with_k(pub_key: Point, msg: int, k: int) -> tuple[Point, Point]:
    """Encrypt ``msg`` under ``pub_key`` using the randomness ``k``.

    Returns ``(c1, c2)`` with ``c1 = k*G`` and ``c2 = msg*G + k*pub_key``.
    """
    msg %= pub_key.order()
    c1 = pub_key.new()
    c1.scalar_base_mult(k)
    shared = pub_key.new()
    shared.scalar_mult(pub_key, k)
    encoded = pub_key.new()
    encoded.scalar_base_mult(msg)
    c2 = pub_key.new()
    c2.add(encoded, shared)
    return c1, c2


def generate_key(curve: Point) -> tuple[Point, int]:
    """Return a new ``(public_key, private_key)`` pair on the curve of ``curve``."""
    d = secrets.randbelow(curve.order())
    if d == 0:
        d = 1
    public_key = curve.new()
    public_key.set_generator()
    public_key.scalar_mult(public_key, d)
    return public_key, d


def decrypt(
    public_key: Point, private_key: int, c1: Point, c2: Point, max_message: int
) -> tuple[Point, int]:
    """Decrypt ``(c1, c2)`` and return ``(M, message)`` with ``M = message*G``.

    Raises ``ValueError`` if the message is not in ``[0, max_message]``.
    """
    d_c1 = c2.new()
    d_c1.scalar_mult(c1, private_key)
    d_c1.neg(d_c1)

    m_point = c2.new()
    m_point.set(c2)
    m_point.add(m_point, d_c1)

    generator = public_key.new()
    generator.set_generator()
    try:
        message = baby_step_giant_step_ecc(m_point, generator, max_message)
    except ValueError as err:
        raise ValueError(f"failed to find discrete log: {err}") from err
    return m_point, message


def baby_step_giant_step_ecc(m: Point, g: Point, max_message: int) -> int:
    """Solve ``m = x*g`` for ``x`` in ``[0, max_message]``.

    Raises ``ValueError`` when no solution is found.
    """
    if max_message < 0:
        raise ValueError("max message must not be negative")
    m_sqrt = int(math.sqrt(float(max_message))) + 1

    baby_steps: dict[str, int] = {}
    baby_step = m.new()
    baby_step.set_zero()
    for j in range(m_sqrt):
        baby_steps[str(baby_step)] = j
        baby_step.add(baby_step, g)

    stride = m.new()
    stride.scalar_base_mult(m_sqrt)
    stride.neg(stride)

    giant_step = m.new()
    giant_step.set(m)
    for i in range(m_sqrt + 1):
        j = baby_steps.get(str(giant_step))
        if j is not None:
            return i * m_sqrt + j
        giant_step.add(giant_step, stride)

    raise ValueError(
        "failed to compute discrete logarithm using Baby-Step Giant-Step algorithm"
    )


def check_k(c1: Point, k: int) -> bool:
    """Return whether ``c1 == k*G``, i.e. ``k`` produced the ciphertext."""
    expected = c1.new()
    expected.scalar_base_mult(k)
    return expected.equal(c1)