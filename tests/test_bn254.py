import pytest

from zvote.ecc.bn254 import GENERATOR, P, R, BN254G1


def _mul(scalar):
    p = BN254G1()
    p.scalar_base_mult(scalar)
    return p


def _on_curve(p):
    x, y = p.point()
    return (y * y - x * x * x - 3) % P == 0


def test_generator_and_order():
    g = BN254G1()
    g.set_generator()
    assert g.point() == GENERATOR
    assert _on_curve(g)
    p = g.new()
    p.scalar_mult(g, R)
    assert p.point() == (0, 0)
    assert g.order() == R
    assert g.type() == "bn254"


def test_infinity_marshal():
    assert BN254G1().marshal() == bytes([0x40]) + bytes(31)


def test_generator_marshal():
    g = BN254G1()
    g.set_generator()
    assert g.marshal() == bytes([0x80]) + bytes(30) + bytes([1])
    assert str(g) == g.marshal().hex()


def test_add_matches_scalar_mult():
    a, b = _mul(1234), _mul(5678)
    s = a.new()
    s.add(a, b)
    assert s.equal(_mul(1234 + 5678))
    assert _on_curve(s)


def test_double_via_safe_add():
    p = _mul(99)
    d = p.new()
    d.safe_add(p, p)
    assert d.equal(_mul(198))


def test_add_identity():
    p = _mul(17)
    zero = p.new()
    zero.set_zero()
    s = p.new()
    s.add(p, zero)
    assert s.equal(p)


def test_neg_cancels():
    p = _mul(31)
    n = p.new()
    n.neg(p)
    s = p.new()
    s.add(p, n)
    assert s.point() == (0, 0)


def test_scalar_mult_negative_scalar():
    n = _mul(5).new()
    n.neg(_mul(5))
    assert _mul(-5).equal(n)


def test_marshal_roundtrip():
    for scalar in (0, 1, 2, 42, R - 1):
        p = _mul(scalar)
        q = BN254G1()
        q.unmarshal(p.marshal())
        assert q.equal(p)


def test_unmarshal_uncompressed():
    p = _mul(7)
    x, y = p.point()
    q = BN254G1()
    q.unmarshal(x.to_bytes(32, "big") + y.to_bytes(32, "big"))
    assert q.equal(p)
    with pytest.raises(ValueError):
        q.unmarshal(x.to_bytes(32, "big") + (y + 1).to_bytes(32, "big"))


def test_unmarshal_errors():
    p = BN254G1()
    with pytest.raises(ValueError):
        p.unmarshal(b"\x80" * 10)
    with pytest.raises(ValueError):
        p.unmarshal(b"\xff" * 32)


def test_json_and_cbor_roundtrip():
    p = _mul(424242)
    q = BN254G1()
    q.unmarshal_json(p.marshal_json())
    assert q.equal(p)
    r = BN254G1()
    r.unmarshal_cbor(p.marshal_cbor())
    assert r.equal(p)


def test_cbor_wrong_length():
    with pytest.raises(ValueError):
        BN254G1().unmarshal_cbor(b"\x83\x01\x02\x03")


def test_set_point_and_set():
    p = _mul(3)
    q = p.new().set_point(*p.point())
    assert q.equal(p)
    r = BN254G1()
    r.set(p)
    assert r.point() == p.point()