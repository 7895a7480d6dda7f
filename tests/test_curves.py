import pytest

from zvote.ecc import curves


def test_curves_list():
    assert curves.curves() == ["bjj_gnark", "bn254", "bjj_iden3"]


def test_new_returns_matching_type():
    for curve_type in curves.curves():
        point = curves.new(curve_type)
        assert point.type() == curve_type
        assert point.new().type() == curve_type


def test_new_points_support_arithmetic():
    for curve_type in curves.curves():
        point = curves.new(curve_type)
        a = point.new()
        a.scalar_base_mult(3)
        b = point.new()
        b.scalar_base_mult(4)
        s = point.new()
        s.add(a, b)
        expected = point.new()
        expected.scalar_base_mult(7)
        assert s.equal(expected)


def test_new_returns_fresh_instances():
    a = curves.new("bn254")
    b = curves.new("bn254")
    a.set_generator()
    assert not a.equal(b)


def test_unsupported_curve():
    with pytest.raises(ValueError, match="unsupported curve type"):
        curves.new("secp256k1")