# zvote

This package provides cryptographic primitives for zero-knowledge voting systems. It is written in pure Python and has two dependencies, `cbor2` and `pycryptodome`.

## What it provides

- **Elliptic curves** (`zvote.ecc`):
  - BabyJubJub comes in two coordinate conventions. `Iden3BJJ` (in `zvote.ecc.bjj_iden3`) uses standard twisted Edwards coordinates. `GnarkBJJ` (in `zvote.ecc.bjj_gnark`) uses reduced twisted Edwards coordinates.
  - The BN254 G1 group is provided as `BN254G1` (in `zvote.ecc.bn254`).
  - All of them implement the abstract `Point` class from `zvote.ecc.point`.
  - `zvote.ecc.curves.new(curve_type)` builds a point by its type name: `"bjj_gnark"`, `"bn254"` or `"bjj_iden3"`. It raises `ValueError` for any other name.
  - `zvote.ecc.curves.curves()` lists the supported names.
  - `zvote.ecc.format` converts x coordinates between the two BabyJubJub forms, with `from_te_to_rte` and `from_rte_to_te`.
- **Homomorphic ElGamal** (`zvote.elgamal.elgamal`):
  - `generate_key`, `encrypt`, `encrypt_with_k` and `decrypt`.
  - `baby_step_giant_step_ecc` solves the small discrete logarithm.
  - `check_k` checks the randomness of a ciphertext.
- **Ciphertexts and ballots**:
  - `zvote.elgamal.ciphertext.Ciphertext` is a pair of points.
  - `zvote.elgamal.ballot.Ballot` holds eight ciphertexts.
  - Both support homomorphic `add`, fixed-size binary `serialize`/`deserialize`, and JSON and CBOR encoding.
- **Threshold key generation** (`zvote.elgamal.dkg`):
  - `Participant` runs a Feldman-style distributed key generation.
  - `combine_partial_decryptions` recovers a message, such as a tallied sum, from the partial decryptions of a subset of participants.
- **Scalar ECIES** (`zvote.elgamal.secies`): `ScalarECIES` encrypts scalars modulo the curve order to a curve public point.
- **Ethereum signatures** (`zvote.ethereum`):
  - `Signer` signs messages with the Ethereum message prefix.
  - `ECDSASignature` parses signatures, serializes them and verifies them.
  - `addr_from_signature` recovers the checksummed signer address.
  - `hash_message` and `hash_raw` compute Keccak-256 hashes.
- **Field helpers** (`zvote.fields`): `big_to_ff` and `bigint_to_ff_with_padding`.
- **Logger** (`zvote.log`): a process-wide logger with level helpers such as `debugf`, `infow` and `errorw`.

## Installation

```
pip install zvote
```

## Example: encrypted tally

```python
from zvote.ecc import curves
from zvote.elgamal.elgamal import generate_key, encrypt, decrypt

curve = curves.new("bn254")
pair = generate_key(curve)

c1, c2, k = encrypt(pair[0], 42)
m_point, message = decrypt(pair[0], pair[1], c1, c2, 1000)
assert message == 42
```

Ciphertexts add homomorphically. The sum of two ciphertexts decrypts to the sum of their messages, provided that sum is within the `max_message` bound given to `decrypt`.

## Example: Ethereum signatures

```python
from zvote.ethereum import Signer, addr_from_signature

signer = Signer.generate()
signature = signer.sign(b"Hello world!")
assert signature.verify(b"Hello world!", signer.public_key_bytes())
assert addr_from_signature(b"Hello world!", signature.to_bytes()) == signer.address()
```

## What it does not do

This is a library only. It has:

- no command-line tool,
- no server,
- no storage,
- no zero-knowledge proof generation or verification.

It supplies the cryptographic pieces that such components would use.

## Running the tests

```
pip install -e ".[test]"
pytest
```