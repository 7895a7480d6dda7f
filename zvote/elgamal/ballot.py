"""Ballot: a fixed number of ElGamal ciphertexts on one curve."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Sequence

import cbor2

from zvote.ecc import curves
from zvote.ecc.point import Point
from zvote.elgamal.ciphertext import (
    FIELDS_PER_BALLOT,
    SERIALIZED_BALLOT_SIZE,
    SIZE_CIPHERTEXT,
    Ciphertext,
)


def _empty_ciphertexts() -> list[Ciphertext | None]:
    return [None] * FIELDS_PER_BALLOT


@dataclass(eq=False)
class Ballot:
    """A vote as :data:`FIELDS_PER_BALLOT` ciphertexts on the curve ``curve_type``."""

    curve_type: str = ""
    ciphertexts: list[Ciphertext | None] = field(default_factory=_empty_ciphertexts)

    @classmethod
    def from_curve(cls, curve: Point) -> Ballot:
        """Return a ballot of identity ciphertexts on the curve of ``curve``."""
        return cls(
            curve.type(),
            [Ciphertext.from_curve(curve) for _ in range(FIELDS_PER_BALLOT)],
        )

    def valid(self) -> bool:
        """Return whether every ciphertext is set and the curve is supported."""
        if len(self.ciphertexts) != FIELDS_PER_BALLOT:
            return False
        if any(ct is None for ct in self.ciphertexts):
            return False
        return self.curve_type in curves.curves()

    def encrypt(
        self, message: Sequence[int], public_key: Point, k: int | None = None
    ) -> Ballot:
        """Encrypt one message field into each ciphertext; ``k`` defaults to random."""
        if len(message) != FIELDS_PER_BALLOT:
            raise ValueError(
                f"expected {FIELDS_PER_BALLOT} message fields, got {len(message)}"
            )
        for ct, value in zip(self._allocated(), message):
            ct.encrypt(value, public_key, k)
        return self

    def add(self, x: Ballot, y: Ballot) -> Ballot:
        """Set this ballot to the field-wise sum ``x + y`` and return it."""
        for ct, a, b in zip(self._allocated(), x._allocated(), y._allocated()):
            ct.add(a, b)
        return self

    def big_ints(self) -> list[int]:
        """Return C1.X, C1.Y, C2.X, C2.Y of every ciphertext in order."""
        values: list[int] = []
        for ct in self._allocated():
            ct._require_points()
            values.extend(ct.c1.point())
            values.extend(ct.c2.point())
        return values

    def serialize(self) -> bytes:
        """Concatenate the serialized ciphertexts."""
        return b"".join(ct.serialize() for ct in self._allocated())

    def deserialize(self, data: bytes) -> None:
        """Load every ciphertext from the output of :meth:`serialize`."""
        if len(data) != SERIALIZED_BALLOT_SIZE:
            raise ValueError(
                f"invalid input length for Ballot: got {len(data)} bytes, "
                f"expected {SERIALIZED_BALLOT_SIZE} bytes"
            )
        for index, ct in enumerate(self._allocated()):
            start = index * SIZE_CIPHERTEXT
            ct.deserialize(data[start : start + SIZE_CIPHERTEXT])

    def marshal_json(self) -> bytes:
        """Serialize to JSON; an unset curve type gives null ciphertexts."""
        raws: list[bytes] = []
        for index, ct in enumerate(self.ciphertexts):
            if not self.curve_type:
                raws.append(b"null")
                continue
            if ct is None:
                ct = Ciphertext.from_curve(curves.new(self.curve_type))
                self.ciphertexts[index] = ct
            try:
                raws.append(ct.marshal_json())
            except ValueError as err:
                raise ValueError(f"failed to marshal ciphertext[{index}]: {err}") from err
        return (
            b'{"curveType":'
            + json.dumps(self.curve_type).encode()
            + b',"ciphertexts":['
            + b",".join(raws)
            + b"]}"
        )

    def unmarshal_json(self, data: bytes | str) -> None:
        """Load from the output of :meth:`marshal_json`."""
        try:
            container = json.loads(data)
        except ValueError as err:
            raise ValueError(f"failed to unmarshal ballot container: {err}") from err
        if not isinstance(container, dict):
            raise ValueError("failed to unmarshal ballot container: not an object")
        self.curve_type, raws = self._split(container)

        cts = _empty_ciphertexts()
        if self.curve_type:
            for index, raw in enumerate(raws):
                ct = Ciphertext.from_curve(curves.new(self.curve_type))
                if raw is not None:
                    try:
                        ct.unmarshal_json(json.dumps(raw).encode())
                    except ValueError as err:
                        raise ValueError(
                            f"failed to unmarshal ciphertext[{index}]: {err}"
                        ) from err
                cts[index] = ct
        self.ciphertexts = cts

    def marshal_cbor(self) -> bytes:
        """Serialize to CBOR; an unset curve type gives null ciphertexts."""
        raws: list[Any] = []
        for index, ct in enumerate(self.ciphertexts):
            if not self.curve_type:
                raws.append(None)
                continue
            if ct is None:
                ct = Ciphertext.from_curve(curves.new(self.curve_type))
                self.ciphertexts[index] = ct
            try:
                raws.append(cbor2.loads(ct.marshal_cbor()))
            except ValueError as err:
                raise ValueError(f"failed to marshal ciphertext[{index}]: {err}") from err
        return cbor2.dumps({"curveType": self.curve_type, "ciphertexts": raws})

    def unmarshal_cbor(self, buf: bytes) -> None:
        """Load from the output of :meth:`marshal_cbor`."""
        try:
            container = cbor2.loads(buf)
        except (cbor2.CBORDecodeError, ValueError) as err:
            raise ValueError(f"failed to unmarshal ballot container: {err}") from err
        if not isinstance(container, dict):
            raise ValueError("failed to unmarshal ballot container: not a map")
        self.curve_type, raws = self._split(container)

        self.ciphertexts = _empty_ciphertexts()
        if self.curve_type:
            for index, raw in enumerate(raws):
                ct = Ciphertext.from_curve(curves.new(self.curve_type))
                if raw is not None:
                    try:
                        ct.unmarshal_cbor(cbor2.dumps(raw))
                    except ValueError as err:
                        raise ValueError(
                            f"failed to unmarshal ciphertext[{index}]: {err}"
                        ) from err
                self.ciphertexts[index] = ct

    @staticmethod
    def _split(container: dict[str, Any]) -> tuple[str, list[Any]]:
        curve_type = container.get("curveType") or ""
        if not isinstance(curve_type, str):
            raise ValueError("curveType must be a string")
        raws = container.get("ciphertexts") or []
        if not isinstance(raws, list):
            raise ValueError("ciphertexts must be a list")
        if len(raws) != FIELDS_PER_BALLOT:
            raise ValueError(
                f"expected {FIELDS_PER_BALLOT} ciphertexts, got {len(raws)}"
            )
        return curve_type, raws

    def _allocated(self) -> list[Ciphertext]:
        if len(self.ciphertexts) != FIELDS_PER_BALLOT or any(
            ct is None for ct in self.ciphertexts
        ):
            raise ValueError("ballot ciphertexts are not initialized")
        return list(self.ciphertexts)  # type: ignore[arg-type]

    def __str__(self) -> str:
        try:
            return self.marshal_json().decode()
        except ValueError:
            return ""