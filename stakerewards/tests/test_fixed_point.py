import pytest

from stakerewards.errors import ArithmeticOverflow, ArithmeticUnderflow, DivisionByZero
from stakerewards.fixedpoint import (
    SCALE,
    U256_MAX,
    FixedPoint,
    checked_add,
    checked_div,
    checked_mul,
    checked_sub,
    mul_div_down,
    require_u256,
)


def test_checked_ops_within_envelope():
    assert checked_add(2, 3) == 5
    assert checked_sub(5, 3) == 2
    assert checked_mul(7, 6) == 42
    assert checked_div(7, 2) == 3  # truncating
    assert mul_div_down(10, 3, 4) == 7


def test_overflow_and_underflow_are_rejected():
    with pytest.raises(ArithmeticOverflow):
        checked_add(U256_MAX, 1)
    with pytest.raises(ArithmeticOverflow):
        checked_mul(U256_MAX, 2)
    with pytest.raises(ArithmeticUnderflow):
        checked_sub(1, 2)
    with pytest.raises(DivisionByZero):
        checked_div(1, 0)
    with pytest.raises(ArithmeticOverflow):
        require_u256(-1)


def test_underflow_and_div_zero_are_overflow_family():
    # callers catching the base class also see the narrower failures
    assert issubclass(ArithmeticUnderflow, ArithmeticOverflow)
    assert issubclass(DivisionByZero, ArithmeticOverflow)
    assert ArithmeticUnderflow().code == "STAKE_UNDERFLOW"
    assert DivisionByZero().code == "STAKE_DIV_BY_ZERO"


def test_fixed_point_construction_and_rendering():
    one = FixedPoint.from_int(1)
    assert one.raw == SCALE
    assert int(one) == 1

    half = FixedPoint.from_ratio(1, 2)
    assert half.raw == SCALE // 2
    assert half.to_decimal_str() == "0.5"
    assert (one + half).to_decimal_str() == "1.5"
    assert (one - half) == half
    assert half < one

    third = FixedPoint.from_ratio(1, 3)
    assert third.to_decimal_str(4) == "0.3333"
    assert third.to_decimal_str(0) == "0"
    assert FixedPoint().to_decimal_str() == "0"


def test_fixed_point_mul_int_truncates():
    assert FixedPoint.from_ratio(1, 3).mul_int(10) == 3
    assert FixedPoint.from_int(5).mul_int(7) == 35


def test_fixed_point_rejects_negative_raw():
    with pytest.raises(ArithmeticOverflow):
        FixedPoint(-1)
    with pytest.raises(ArithmeticUnderflow):
        FixedPoint.from_int(1) - FixedPoint.from_int(2)
