import pytest

from zvote.ecc import curves
from zvote.ecc.bn254 import CURVE_TYPE as BN254
from zvote.elgamal.elgamal import (
    baby_step_giant_step_ecc,
    check_k,
    decrypt,
    encrypt,
    encrypt_with_k,
    generate_key,
    rand_k,
)
from zvote.fields import BN254_SCALAR_FIELD


def test_generate_key():
    curve = curves.new(BN254)
    public_key, private_key = generate_key(curve)
    assert 0 < private_key < curve.order()
    expected = curve.new()
    expected.set_generator()
    expected.scalar_mult(expected, private_key)
    assert expected.equal(public_key)


@pytest.mark.parametrize("m", [0, 1, 42, 999])
def test_encrypt_decrypt(m):
    curve = curves.new(BN254)
    public_key, private_key = generate_key(curve)
    c1, c2, k = encrypt(public_key, m)
    assert check_k(c1, k)
    point, recovered = decrypt(public_key, private_key, c1, c2, 1000)
    assert recovered == m
    expected = curve.new()
    expected.set_generator()
    expected.scalar_mult(expected, m)
    assert expected.equal(point)


@pytest.mark.parametrize("curve_type", curves.curves())
def test_encrypt_decrypt_all_curves(curve_type):
    curve = curves.new(curve_type)
    public_key, private_key = generate_key(curve)
    c1, c2, _ = encrypt(public_key, 37)
    _, recovered = decrypt(public_key, private_key, c1, c2, 100)
    assert recovered == 37


def test_check_k():
    curve = curves.new(BN254)
    public_key, private_key = generate_key(curve)
    c1, c2, k = encrypt(public_key, 42)
    assert check_k(c1, k) is True
    assert check_k(c1, 999999) is False
    point, recovered = decrypt(public_key, private_key, c1, c2, 100)
    assert recovered == 42
    assert point.point() != (0, 0)


def test_decrypt_out_of_range_raises():
    curve = curves.new(BN254)
    public_key, private_key = generate_key(curve)
    c1, c2, _ = encrypt(public_key, 500)
    with pytest.raises(ValueError, match="failed to find discrete log"):
        decrypt(public_key, private_key, c1, c2, 10)


def test_encrypt_with_k_reduces_message():
    curve = curves.new(BN254)
    public_key, _ = generate_key(curve)
    a1, a2 = encrypt_with_k(public_key, 5, 789)
    b1, b2 = encrypt_with_k(public_key, curve.order() + 5, 789)
    assert a1.equal(b1)
    assert a2.equal(b2)


def test_encrypt_with_k_c1_is_k_times_generator():
    curve = curves.new(BN254)
    public_key, _ = generate_key(curve)
    c1, _ = encrypt_with_k(public_key, 3, 789)
    expected = curve.new()
    expected.scalar_base_mult(789)
    assert expected.equal(c1)


def test_baby_step_giant_step_finds_scalar():
    curve = curves.new(BN254)
    g = curve.new()
    g.set_generator()
    target = curve.new()
    target.scalar_base_mult(77)
    assert baby_step_giant_step_ecc(target, g, 100) == 77


def test_baby_step_giant_step_zero():
    curve = curves.new(BN254)
    g = curve.new()
    g.set_generator()
    target = curve.new()
    target.set_zero()
    assert baby_step_giant_step_ecc(target, g, 10) == 0


def test_baby_step_giant_step_not_found():
    curve = curves.new(BN254)
    g = curve.new()
    g.set_generator()
    target = curve.new()
    target.scalar_base_mult(1000)
    with pytest.raises(ValueError, match="Baby-Step Giant-Step"):
        baby_step_giant_step_ecc(target, g, 4)


def test_rand_k_in_range():
    values = {rand_k() for _ in range(20)}
    assert all(0 <= k < BN254_SCALAR_FIELD and k < 2**160 for k in values)
    assert len(values) > 1