import pytest

from cpamm.math import U128_MAX, checked_ceil_div

PAIRS = [(10, 3), (1_000_000, 7), (999, 999), (12345678901234567890, 97), (U128_MAX, 3)]


@pytest.mark.parametrize("dividend, divisor", PAIRS)
def test_quotient_is_rounded_up(dividend, divisor):
    quotient, _ = checked_ceil_div(dividend, divisor)
    assert (quotient - 1) * divisor < dividend <= quotient * divisor


@pytest.mark.parametrize("dividend, divisor", PAIRS)
def test_returned_divisor_is_minimal(dividend, divisor):
    quotient, new_divisor = checked_ceil_div(dividend, divisor)
    assert quotient * new_divisor >= dividend
    assert quotient * (new_divisor - 1) < dividend
    assert new_divisor <= divisor


def test_exact_division_keeps_divisor():
    quotient, new_divisor = checked_ceil_div(600, 200)
    assert quotient * new_divisor == 600
    assert new_divisor == 200


def test_small_dividend_at_least_half_rounds_to_one():
    assert checked_ceil_div(2, 3) == (1, 0)


def test_small_dividend_below_half_rounds_to_zero():
    assert checked_ceil_div(1, 3) == (0, 0)
    assert checked_ceil_div(0, 5) == (0, 0)


def test_zero_divisor_raises():
    with pytest.raises(ZeroDivisionError):
        checked_ceil_div(5, 0)


def test_doubling_overflow_raises():
    with pytest.raises(OverflowError):
        checked_ceil_div(U128_MAX - 1, U128_MAX)


def test_out_of_range_operands_raise():
    with pytest.raises(OverflowError):
        checked_ceil_div(-1, 3)
    with pytest.raises(OverflowError):
        checked_ceil_div(U128_MAX + 1, 3)