"""Integer fixed-point arithmetic for the auction engine.

All prices, debts and amounts are int. No float, no Decimal.
Values are bounded to the unsigned 256-bit range so results match what an
on-chain settlement layer can represent.

Rounding convention (house never loses):
  - what a buyer pays (price, debt used for price) rounds up
  - what a buyer receives (payout) rounds down
"""

from src.bm_common.errors import ArithmeticOverflowError

MAX_UINT256: int = (1 << 256) - 1
ONE_HUNDRED_PERCENT: int = 100_000  # percentages are expressed in 1e5 units


def _check_operands(a: int, b: int, denominator: int) -> None:
    if denominator == 0:
        raise ArithmeticOverflowError("division by zero")
    if a < 0 or b < 0 or denominator < 0:
        raise ArithmeticOverflowError(f"negative operand in mul_div({a}, {b}, {denominator})")


def _check_result(result: int) -> int:
    if result > MAX_UINT256:
        raise ArithmeticOverflowError(f"result {result} exceeds uint256")
    return result


def mul_div(a: int, b: int, denominator: int) -> int:
    """Return floor(a * b / denominator)."""
    _check_operands(a, b, denominator)
    return _check_result((a * b) // denominator)


def mul_div_up(a: int, b: int, denominator: int) -> int:
    """Return ceil(a * b / denominator).

    Integer ceiling: (x + d - 1) // d
    """
    _check_operands(a, b, denominator)
    return _check_result((a * b + denominator - 1) // denominator)


def checked_sub(a: int, b: int) -> int:
    """a - b, failing instead of going negative."""
    if b > a:
        raise ArithmeticOverflowError(f"underflow: {a} - {b}")
    return a - b


def pow10(exponent: int) -> int:
    """10**exponent for a non-negative exponent."""
    if exponent < 0:
        raise ArithmeticOverflowError(f"negative exponent {exponent}")
    return _check_result(10**exponent)


def count_decimals(value: int) -> int:
    """Number of digits after the leading one: 1 -> 0, 12_345 -> 4."""
    digits = 0
    while value >= 10:
        value //= 10
        digits += 1
    return digits
