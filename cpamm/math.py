"""Integer helpers for 128-bit pool arithmetic."""

U128_MAX = (1 << 128) - 1


def _require_u128(name: str, value: int) -> None:
    if not 0 <= value <= U128_MAX:
        raise OverflowError(f"{name} does not fit in an unsigned 128-bit integer")


def checked_ceil_div(dividend: int, divisor: int) -> tuple[int, int]:
    """Divide rounding up, returning the quotient and the smallest divisor giving it.

    A dividend smaller than the divisor yields ``(1, 0)`` when it is at least
    half the divisor and ``(0, 0)`` otherwise.
    """
    _require_u128("dividend", dividend)
    _require_u128("divisor", divisor)
    if divisor == 0:
        raise ZeroDivisionError("ceiling division by zero")

    quotient, remainder = divmod(dividend, divisor)
    if quotient == 0:
        doubled = dividend * 2
        if doubled > U128_MAX:
            raise OverflowError("doubled dividend does not fit in 128 bits")
        return (1, 0) if doubled >= divisor else (0, 0)

    if remainder:
        quotient += 1
        # smallest divisor that still produces the rounded-up quotient
        divisor, rest = divmod(dividend, quotient)
        if rest:
            divisor += 1
    return quotient, divisor