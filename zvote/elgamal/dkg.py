"""Threshold distributed key generation and decryption for ElGamal."""

from __future__ import annotations

import secrets
from dataclasses import dataclass, field
from typing import Mapping, Sequence

from zvote.ecc.point import Point
from zvote.elgamal.elgamal import baby_step_giant_step_ecc


@dataclass(eq=False)
class Participant:
    """One party of a Feldman-style distributed key generation."""

    id: int
    threshold: int
    participants: list[int]
    curve_point: Point
    secret_coeffs: list[int] = field(default_factory=list)
    public_coeffs: list[Point] = field(default_factory=list)
    secret_shares: dict[int, int] = field(default_factory=dict)
    received_shares: dict[int, int] = field(default_factory=dict)
    private_share: int = 0
    public_key: Point | None = None

    def generate_secret_polynomial(self) -> None:
        """Draw ``threshold`` random coefficients and commit to each one."""
        order = self.curve_point.order()
        for _ in range(self.threshold):
            coeff = secrets.randbelow(order)
            self.secret_coeffs.append(coeff)
            commitment = self.curve_point.new()
            commitment.set_generator()
            commitment.scalar_mult(commitment, coeff)
            self.public_coeffs.append(commitment)

    def compute_shares(self) -> None:
        """Evaluate the secret polynomial at every participant's identifier."""
        for pid in self.participants:
            self.secret_shares[pid] = self._evaluate_polynomial(pid)

    def _evaluate_polynomial(self, x: int) -> int:
        order = self.curve_point.order()
        result = 0
        x_power = 1
        for coeff in self.secret_coeffs:
            result = (result + coeff * x_power) % order
            x_power = x_power * x % order
        return result

    def receive_share(self, from_id: int, share: int, public_coeffs: Sequence[Point]) -> None:
        """Store a share after checking it against the sender's commitments.

        Raises ``ValueError`` if the share does not match.
        """
        if not self._verify_share(share, public_coeffs):
            raise ValueError(f"invalid share from participant {from_id}: {share}")
        self.received_shares[from_id] = share

    def _verify_share(self, share: int, public_coeffs: Sequence[Point]) -> bool:
        lhs = self.curve_point.new()
        lhs.scalar_base_mult(share)

        rhs = self.curve_point.new()
        x_power = 1
        for commitment in public_coeffs:
            term = self.curve_point.new()
            term.scalar_mult(commitment, x_power)
            rhs.add(rhs, term)
            x_power *= self.id
        return lhs.equal(rhs)

    def aggregate_shares(self) -> None:
        """Sum the own share and the received shares into the private share."""
        order = self.curve_point.order()
        total = self.secret_shares[self.id]
        for share in self.received_shares.values():
            total = (total + share) % order
        self.private_share = total

    def aggregate_public_key(self, all_public_coeffs: Mapping[int, Sequence[Point]]) -> None:
        """Sum every participant's constant-term commitment into the public key."""
        pk = self.curve_point.new()
        for coeffs in all_public_coeffs.values():
            pk.add(pk, coeffs[0])
        self.public_key = pk

    def compute_partial_decryption(self, c1: Point) -> Point:
        """Return ``private_share * c1``."""
        partial = c1.new()
        partial.scalar_mult(c1, self.private_share)
        return partial


def _lagrange_coefficients(participants: Sequence[int], mod: int) -> dict[int, int]:
    coeffs: dict[int, int] = {}
    for i in participants:
        numerator = 1
        denominator = 1
        for j in participants:
            if i != j:
                numerator = numerator * (-j % mod) % mod
                denominator = denominator * ((i - j) % mod) % mod
        try:
            inverse = pow(denominator, -1, mod)
        except ValueError as err:
            raise ValueError(
                f"modular inverse does not exist for denominator {denominator} modulo {mod}"
            ) from err
        coeffs[i] = numerator * inverse % mod
    return coeffs


def combine_partial_decryptions(
    c2: Point,
    partial_decryptions: Mapping[int, Point],
    participants: Sequence[int],
    max_message: int,
) -> int:
    """Recover the message scalar from ``c2`` and the partial decryptions.

    Raises ``ValueError`` when the coefficients or the discrete log cannot be found.
    """
    try:
        lagrange = _lagrange_coefficients(participants, c2.order())
    except ValueError as err:
        raise ValueError(f"failed to compute Lagrange coefficients: {err}") from err

    s = c2.new()
    for pid in participants:
        partial = partial_decryptions.get(pid)
        if partial is None:
            raise ValueError(f"missing partial decryption from participant {pid}")
        term = s.new()
        term.scalar_mult(partial, lagrange[pid])
        s.add(s, term)
    s.neg(s)
    m = c2.new()
    m.add(c2, s)

    generator = c2.new()
    generator.set_generator()
    try:
        return baby_step_giant_step_ecc(m, generator, max_message)
    except ValueError as err:
        raise ValueError(f"failed to decrypt message: {err}") from err