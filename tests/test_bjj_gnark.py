import pytest

from zvote.ecc import bjj_gnark, bjj_iden3
from zvote.ecc.format import from_rte_to_te, from_te_to_rte


def point_from_rte_to_te(p):
    return p.new().set_point(*from_rte_to_te(*p.point()))


def point_from_te_to_rte(p):
    return p.new().set_point(*from_te_to_rte(*p.point()))


def generate_non_base_point():
    scalar = 123456789
    bjj_point = bjj_gnark.new()
    iden3_point = bjj_iden3.new()
    bjj_point.scalar_base_mult(scalar)
    iden3_point.scalar_base_mult(scalar)
    return bjj_point, iden3_point


def test_set_generator():
    bjj_point = bjj_gnark.new()
    iden3_point = bjj_iden3.new()
    bjj_point.set_generator()
    iden3_point.set_generator()
    assert str(point_from_rte_to_te(bjj_point)) == str(iden3_point)


def test_order():
    assert str(bjj_gnark.new().order()) == str(bjj_iden3.new().order())


def test_set_zero():
    bjj_point = bjj_gnark.new()
    iden3_point = bjj_iden3.new()
    bjj_point.set_zero()
    iden3_point.set_zero()
    assert str(point_from_rte_to_te(bjj_point)) == str(iden3_point)


def test_scalar_base_mult():
    bjj_point = bjj_gnark.new()
    iden3_point = bjj_iden3.new()
    bjj_point.scalar_base_mult(42)
    iden3_point.scalar_base_mult(42)
    assert str(point_from_rte_to_te(bjj_point)) == str(iden3_point)


def test_scalar_mult():
    bjj_point, iden3_point = generate_non_base_point()
    bjj_point.scalar_mult(bjj_point, 88)
    iden3_point.scalar_mult(iden3_point, 88)
    assert str(point_from_rte_to_te(bjj_point)) == str(iden3_point)


def test_add():
    bjj_a, bjj_b = bjj_gnark.new(), bjj_gnark.new()
    iden3_a, iden3_b = bjj_iden3.new(), bjj_iden3.new()
    bjj_a.scalar_base_mult(123456789)
    iden3_a.scalar_base_mult(123456789)
    bjj_b.scalar_base_mult(987654321)
    iden3_b.scalar_base_mult(987654321)
    bjj_a.add(bjj_a, bjj_b)
    iden3_a.add(iden3_a, iden3_b)
    assert str(point_from_rte_to_te(bjj_a)) == str(iden3_a)


def test_neg():
    bjj_point, iden3_point = generate_non_base_point()
    bjj_point.neg(bjj_point)
    iden3_point.neg(iden3_point)
    assert str(point_from_rte_to_te(bjj_point)) == str(iden3_point)


def test_double():
    bjj_point, iden3_point = generate_non_base_point()
    bjj_dbl = bjj_gnark.new()
    iden3_dbl = bjj_iden3.new()
    bjj_dbl.add(bjj_point, bjj_point)
    iden3_dbl.add(iden3_point, iden3_point)
    assert str(point_from_rte_to_te(bjj_dbl)) == str(iden3_dbl)


def test_equal():
    bjj_point1, iden3_point1 = generate_non_base_point()
    bjj_point2 = bjj_gnark.new()
    iden3_point2 = bjj_iden3.new()
    bjj_point2.set(bjj_point1)
    iden3_point2.set(iden3_point1)
    assert bjj_point1.equal(bjj_point2)
    assert iden3_point1.equal(iden3_point2)
    bjj_point2.scalar_mult(bjj_point2, 2)
    iden3_point2.scalar_mult(iden3_point2, 2)
    assert not bjj_point1.equal(bjj_point2)
    assert not iden3_point1.equal(iden3_point2)


def test_te_to_rte_matches_gnark():
    bjj_point, iden3_point = generate_non_base_point()
    assert point_from_te_to_rte(iden3_point).equal(bjj_point)


def test_method_new_is_identity():
    p = bjj_gnark.new().new()
    assert p.point() == (0, 1)
    assert p.type() == "bjj_gnark"


def test_marshal_roundtrip():
    for scalar in (1, 7, 123456789):
        p = bjj_gnark.new()
        p.scalar_base_mult(scalar)
        q = bjj_gnark.new()
        q.unmarshal(p.marshal())
        assert q.equal(p)


def test_unmarshal_short_buffer():
    with pytest.raises(ValueError):
        bjj_gnark.new().unmarshal(b"\x01" * 31)


def test_json_and_cbor_roundtrip():
    p, _ = generate_non_base_point()
    q = bjj_gnark.new()
    q.unmarshal_json(p.marshal_json())
    assert q.equal(p)
    r = bjj_gnark.new()
    r.unmarshal_cbor(p.marshal_cbor())
    assert r.equal(p)


def test_json_wrong_length():
    with pytest.raises(ValueError):
        bjj_gnark.new().unmarshal_json(b'["1"]')