import json

import pytest

from zvote.ecc import curves
from zvote.elgamal.ballot import Ballot
from zvote.elgamal.ciphertext import FIELDS_PER_BALLOT, SERIALIZED_BALLOT_SIZE
from zvote.elgamal.elgamal import decrypt, generate_key

MSG = [42] * FIELDS_PER_BALLOT
K = 789


def _encrypted(curve_type):
    curve = curves.new(curve_type)
    public_key, private_key = generate_key(curve)
    ballot = Ballot.from_curve(curve).encrypt(MSG, public_key, K)
    return ballot, public_key, private_key


def _assert_same_points(a, b):
    for ct_a, ct_b in zip(a.ciphertexts, b.ciphertexts):
        assert ct_a.c1.point() == ct_b.c1.point()
        assert ct_a.c2.point() == ct_b.c2.point()


@pytest.mark.parametrize("curve_type", curves.curves())
def test_ballot_marshal_cbor(curve_type):
    ballot, _, _ = _encrypted(curve_type)
    marshaled = ballot.marshal_cbor()
    assert len(marshaled) > 0
    restored = Ballot()
    restored.unmarshal_cbor(marshaled)
    assert restored.curve_type == curve_type
    _assert_same_points(ballot, restored)


@pytest.mark.parametrize("curve_type", curves.curves())
def test_ballot_marshal_json(curve_type):
    ballot, _, _ = _encrypted(curve_type)
    marshaled = ballot.marshal_json()
    assert json.loads(marshaled)["curveType"] == curve_type
    restored = Ballot()
    restored.unmarshal_json(marshaled)
    assert restored.curve_type == curve_type
    _assert_same_points(ballot, restored)


@pytest.mark.parametrize("curve_type", curves.curves())
def test_serialize_deserialize_round_trip(curve_type):
    ballot, public_key, _ = _encrypted(curve_type)
    data = ballot.serialize()
    assert len(data) == SERIALIZED_BALLOT_SIZE == 1024
    restored = Ballot.from_curve(public_key)
    restored.deserialize(data)
    _assert_same_points(ballot, restored)


def test_deserialize_wrong_length():
    ballot = Ballot.from_curve(curves.new("bn254"))
    with pytest.raises(ValueError, match="invalid input length for Ballot"):
        ballot.deserialize(bytes(SERIALIZED_BALLOT_SIZE - 1))


def test_big_ints_layout():
    ballot, _, _ = _encrypted("bn254")
    values = ballot.big_ints()
    assert len(values) == FIELDS_PER_BALLOT * 4
    first = ballot.ciphertexts[0]
    assert values[:4] == [*first.c1.point(), *first.c2.point()]


def test_valid():
    ballot = Ballot.from_curve(curves.new("bjj_iden3"))
    assert ballot.valid() is True
    assert Ballot().valid() is False
    unknown = Ballot.from_curve(curves.new("bjj_iden3"))
    unknown.curve_type = "unknown"
    assert unknown.valid() is False
    missing = Ballot.from_curve(curves.new("bjj_iden3"))
    missing.ciphertexts[3] = None
    assert missing.valid() is False


def test_add_is_homomorphic():
    curve = curves.new("bn254")
    public_key, private_key = generate_key(curve)
    a = Ballot.from_curve(curve).encrypt(list(range(1, 9)), public_key)
    b = Ballot.from_curve(curve).encrypt(list(range(10, 18)), public_key)
    total = Ballot.from_curve(curve).add(a, b)
    recovered = [
        decrypt(public_key, private_key, ct.c1, ct.c2, 100)[1] for ct in total.ciphertexts
    ]
    assert recovered == [x + y for x, y in zip(range(1, 9), range(10, 18))]


def test_encrypt_wrong_field_count():
    curve = curves.new("bn254")
    public_key, _ = generate_key(curve)
    with pytest.raises(ValueError, match="message fields"):
        Ballot.from_curve(curve).encrypt([1, 2, 3], public_key, K)


def test_uninitialized_ballot_json():
    ballot = Ballot()
    marshaled = ballot.marshal_json()
    assert json.loads(marshaled) == {"curveType": "", "ciphertexts": [None] * 8}
    restored = Ballot.from_curve(curves.new("bn254"))
    restored.unmarshal_json(marshaled)
    assert restored.curve_type == ""
    assert restored.ciphertexts == [None] * 8


def test_unmarshal_json_wrong_count():
    with pytest.raises(ValueError, match="expected 8 ciphertexts, got 2"):
        Ballot().unmarshal_json(b'{"curveType":"bn254","ciphertexts":[null,null]}')


def test_unmarshal_cbor_wrong_count():
    ballot, _, _ = _encrypted("bjj_gnark")
    import cbor2

    doc = cbor2.loads(ballot.marshal_cbor())
    doc["ciphertexts"] = doc["ciphertexts"][:3]
    with pytest.raises(ValueError, match="expected 8 ciphertexts, got 3"):
        Ballot().unmarshal_cbor(cbor2.dumps(doc))


def test_marshal_fills_missing_ciphertexts():
    ballot = Ballot(curve_type="bjj_iden3")
    doc = json.loads(ballot.marshal_json())
    assert doc["ciphertexts"][0] == {"c1": ["0", "1"], "c2": ["0", "1"]}
    assert all(ct is not None for ct in ballot.ciphertexts)


def test_str_is_json():
    ballot, _, _ = _encrypted("bjj_gnark")
    assert json.loads(str(ballot))["curveType"] == "bjj_gnark"