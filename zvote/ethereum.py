"""Ethereum-style secp256k1 ECDSA signing, verification and address recovery."""

from __future__ import annotations

import hashlib
import hmac
import secrets
from dataclasses import dataclass
from typing import Iterator

from Crypto.Hash import keccak

from zvote.fields import bigint_to_ff_with_padding

SIGNATURE_LENGTH = 65
"""Size of an ECDSA signature with recovery byte."""
COMPRESSED_PUB_KEY_LENGTH = 33
SIGNATURE_MIN_LENGTH = SIGNATURE_LENGTH - 1
"""Minimum length of a signature (without recovery byte)."""
SIGNING_PREFIX = "\u0019Ethereum Signed Message:\n"
HASH_LENGTH = 32

BLS12_377_SCALAR_FIELD = (
    8444461749428370424248824938781546531375899335154063827935233455917409239041
)

# secp256k1 domain parameters
_P = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEFFFFFC2F
_N = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
_G = (
    0x79BE667EF9DCBBAC55A06295CE870B07029BFCDB2DCE28D959F2815B16F81798,
    0x483ADA7726A3C4655DA4FBFC0E1108A8FD17B448A68554199C47D08FFB10D4B8,
)
_HALF_N = _N // 2

_Affine = tuple[int, int]


def _ec_add(p1: _Affine | None, p2: _Affine | None) -> _Affine | None:
    if p1 is None:
        return p2
    if p2 is None:
        return p1
    x1, y1 = p1
    x2, y2 = p2
    if x1 == x2:
        if (y1 + y2) % _P == 0:
            return None
        lam = 3 * x1 * x1 * pow(2 * y1, -1, _P) % _P
    else:
        lam = (y2 - y1) * pow(x2 - x1, -1, _P) % _P
    x3 = (lam * lam - x1 - x2) % _P
    return x3, (lam * (x1 - x3) - y1) % _P


def _ec_mul(pt: _Affine | None, k: int) -> _Affine | None:
    k %= _N
    result: _Affine | None = None
    addend = pt
    while k:
        if k & 1:
            result = _ec_add(result, addend)
        addend = _ec_add(addend, addend)
        k >>= 1
    return result


def _lift_x(x: int, odd: bool) -> _Affine:
    if x >= _P:
        raise ValueError("invalid x coordinate")
    alpha = (pow(x, 3, _P) + 7) % _P
    y = pow(alpha, (_P + 1) // 4, _P)
    if y * y % _P != alpha:
        raise ValueError("invalid point: not on curve")
    if (y & 1) != int(odd):
        y = _P - y
    return x, y


def _parse_public_key(data: bytes) -> _Affine:
    if len(data) == COMPRESSED_PUB_KEY_LENGTH and data[0] in (2, 3):
        return _lift_x(int.from_bytes(data[1:], "big"), data[0] == 3)
    if len(data) == 65 and data[0] == 4:
        x = int.from_bytes(data[1:33], "big")
        y = int.from_bytes(data[33:], "big")
        if x >= _P or y >= _P or (y * y - x * x * x - 7) % _P != 0:
            raise ValueError("invalid point: not on curve")
        return x, y
    raise ValueError("invalid public key encoding")


def _uncompressed(point: _Affine) -> bytes:
    return b"\x04" + point[0].to_bytes(32, "big") + point[1].to_bytes(32, "big")


def _address_of(point: _Affine) -> str:
    digest = hash_raw(_uncompressed(point)[1:])[12:]
    lower = digest.hex()
    check = keccak.new(digest_bits=256, data=lower.encode()).hexdigest()
    chars = (c.upper() if int(h, 16) >= 8 else c for c, h in zip(lower, check))
    return "0x" + "".join(chars)


def _nonces(private_key: int, digest: bytes) -> Iterator[int]:
    """Deterministic nonces as specified by RFC 6979 with HMAC-SHA256."""
    x = private_key.to_bytes(32, "big")
    h1 = (int.from_bytes(digest, "big") % _N).to_bytes(32, "big")
    v = b"\x01" * 32
    k = b"\x00" * 32
    k = hmac.new(k, v + b"\x00" + x + h1, hashlib.sha256).digest()
    v = hmac.new(k, v, hashlib.sha256).digest()
    k = hmac.new(k, v + b"\x01" + x + h1, hashlib.sha256).digest()
    v = hmac.new(k, v, hashlib.sha256).digest()
    while True:
        v = hmac.new(k, v, hashlib.sha256).digest()
        candidate = int.from_bytes(v, "big")
        if 1 <= candidate < _N:
            yield candidate
        k = hmac.new(k, v + b"\x00", hashlib.sha256).digest()
        v = hmac.new(k, v, hashlib.sha256).digest()


def _verify(public_key: bytes, digest: bytes, r: int, s: int) -> bool:
    if not (1 <= r < _N and 1 <= s <= _HALF_N):
        return False
    try:
        q = _parse_public_key(public_key)
    except ValueError:
        return False
    z = int.from_bytes(digest, "big")
    w = pow(s, -1, _N)
    point = _ec_add(_ec_mul(_G, z * w), _ec_mul(q, r * w))
    return point is not None and point[0] % _N == r


def _recover(digest: bytes, signature: bytes) -> _Affine:
    if len(signature) != SIGNATURE_LENGTH:
        raise ValueError("invalid signature length")
    r = int.from_bytes(signature[:32], "big")
    s = int.from_bytes(signature[32:64], "big")
    v = signature[64]
    if v > 3:
        raise ValueError("invalid signature recovery id")
    if not (1 <= r < _N and 1 <= s < _N):
        raise ValueError("invalid signature values")
    big_r = _lift_x(r + (_N if v >= 2 else 0), bool(v & 1))
    z = int.from_bytes(digest, "big")
    r_inv = pow(r, -1, _N)
    q = _ec_add(_ec_mul(big_r, s * r_inv), _ec_mul(_G, -z * r_inv))
    if q is None:
        raise ValueError("recovered public key is the point at infinity")
    return q


@dataclass
class ECDSASignature:
    """Ethereum ECDSA signature components."""

    r: int | None
    s: int | None
    recovery: int = 0

    @classmethod
    def from_bytes(cls, signature: bytes) -> ECDSASignature:
        """Parse ``R || S || V``; the recovery byte defaults to 0 when absent."""
        if len(signature) < SIGNATURE_MIN_LENGTH:
            raise ValueError(f"signature length is less than {SIGNATURE_MIN_LENGTH}")
        recovery = signature[64] if len(signature) > 64 else 0
        return cls(
            r=int.from_bytes(signature[:32], "big"),
            s=int.from_bytes(signature[32:64], "big"),
            recovery=recovery,
        )

    def valid(self) -> bool:
        """Return whether both R and S are set."""
        return self.r is not None and self.s is not None

    def to_bytes(self) -> bytes:
        """Return ``R || S || recovery`` with R and S padded to 32 bytes."""
        if not self.valid():
            raise ValueError("signature is not valid")
        try:
            return (
                self.r.to_bytes(32, "big")
                + self.s.to_bytes(32, "big")
                + bytes([self.recovery])
            )
        except OverflowError as err:
            raise ValueError(f"signature component too large: {err}") from err

    def verify_bls12377(self, signed_input: int, expected_pub_key: bytes) -> bool:
        """Verify a signature over ``signed_input`` reduced into the BLS12-377 field."""
        if not self.valid():
            return False
        ff_input = bigint_to_ff_with_padding(signed_input, BLS12_377_SCALAR_FIELD)
        return _verify(expected_pub_key, hash_message(ff_input), self.r, self.s)

    def verify(self, signed_input: bytes, expected_pub_key: bytes) -> bool:
        """Verify the signature over ``signed_input`` for the given public key."""
        if not self.valid():
            return False
        return _verify(expected_pub_key, hash_message(signed_input), self.r, self.s)

    def __str__(self) -> str:
        return f"R: {self.r}, S: {self.s}, Recovery: {self.recovery}"


@dataclass(frozen=True, repr=False)
class Signer:
    """A secp256k1 private key signing Ethereum-prefixed messages."""

    private_key: int

    def __post_init__(self) -> None:
        if not 0 < self.private_key < _N:
            raise ValueError("invalid private key")

    @classmethod
    def generate(cls) -> Signer:
        """Return a signer with a fresh random key."""
        return cls(secrets.randbelow(_N - 1) + 1)

    @classmethod
    def from_hex(cls, hex_key: str) -> Signer:
        """Return a signer from a 32-byte hex-encoded private key."""
        try:
            raw = bytes.fromhex(hex_key)
        except ValueError as err:
            raise ValueError(f"could not generate key: invalid hex string: {err}") from err
        if len(raw) != 32:
            raise ValueError("could not generate key: invalid length, need 256 bits")
        try:
            return cls(int.from_bytes(raw, "big"))
        except ValueError as err:
            raise ValueError(f"could not generate key: {err}") from err

    def public_key_bytes(self) -> bytes:
        """Return the uncompressed 65-byte public key."""
        point = _ec_mul(_G, self.private_key)
        assert point is not None
        return _uncompressed(point)

    def address(self) -> str:
        """Return the checksummed Ethereum address of the public key."""
        return _address_of(_parse_public_key(self.public_key_bytes()))

    def sign(self, msg: bytes) -> ECDSASignature:
        """Sign ``msg`` with the Ethereum message prefix."""
        return sign(msg, self.private_key)

    def __repr__(self) -> str:
        return f"Signer(address={self.address()})"


def sign(msg: bytes, priv_key: int) -> ECDSASignature:
    """Sign an Ethereum message (prefix added) with the private scalar ``priv_key``."""
    if not 0 < priv_key < _N:
        raise ValueError("could not sign message: invalid private key")
    digest = hash_message(msg)
    z = int.from_bytes(digest, "big")
    for k in _nonces(priv_key, digest):
        point = _ec_mul(_G, k)
        if point is None:
            continue
        r = point[0] % _N
        if r == 0:
            continue
        s = pow(k, -1, _N) * (z + r * priv_key) % _N
        if s == 0:
            continue
        recovery = (point[1] & 1) | (2 if point[0] >= _N else 0)
        if s > _HALF_N:
            s = _N - s
            recovery ^= 1
        return ECDSASignature(r=r, s=s, recovery=recovery)
    raise AssertionError("unreachable")


def addr_from_signature(message: bytes, signature: bytes) -> str:
    """Recover the checksummed address that signed ``message``."""
    if len(signature) < SIGNATURE_MIN_LENGTH:
        raise ValueError(f"signature too short ({len(signature)})")
    sig = bytearray(signature)
    if len(sig) == SIGNATURE_LENGTH:
        if sig[64] > 1:
            sig[64] = (sig[64] - 27) & 0xFF
        if sig[64] > 1:
            raise ValueError("bad recover ID byte")
    try:
        point = _recover(hash_message(message), bytes(sig))
    except ValueError as err:
        raise ValueError(f"sigToPub {err}") from err
    return _address_of(point)


def hash_message(data: bytes) -> bytes:
    """Keccak256 of ``data`` with the Ethereum signed-message prefix."""
    return hash_raw(SIGNING_PREFIX.encode() + str(len(data)).encode() + bytes(data))


def hash_raw(data: bytes) -> bytes:
    """Keccak256 of ``data``."""
    return keccak.new(digest_bits=256, data=bytes(data)).digest()