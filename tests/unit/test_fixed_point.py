"""Tests for bm_common.fixed_point."""

import pytest

from src.bm_common.errors import ArithmeticOverflowError
from src.bm_common.fixed_point import (
    MAX_UINT256,
    checked_sub,
    count_decimals,
    mul_div,
    mul_div_up,
    pow10,
)


class TestMulDiv:
    def test_rounds_down(self) -> None:
        assert mul_div(10, 3, 4) == 7  # 7.5

    def test_up_rounds_up(self) -> None:
        assert mul_div_up(10, 3, 4) == 8

    def test_exact_division_identical(self) -> None:
        assert mul_div(12, 3, 4) == mul_div_up(12, 3, 4) == 9

    def test_zero_numerator(self) -> None:
        assert mul_div_up(0, 5, 7) == 0

    def test_intermediate_product_may_exceed_uint256(self) -> None:
        assert mul_div(MAX_UINT256, 2, 2) == MAX_UINT256

    def test_division_by_zero(self) -> None:
        with pytest.raises(ArithmeticOverflowError):
            mul_div(1, 1, 0)
        with pytest.raises(ArithmeticOverflowError):
            mul_div_up(1, 1, 0)

    def test_result_overflow(self) -> None:
        with pytest.raises(ArithmeticOverflowError):
            mul_div(MAX_UINT256, 2, 1)

    def test_negative_operand(self) -> None:
        with pytest.raises(ArithmeticOverflowError):
            mul_div(-1, 2, 3)


class TestHelpers:
    def test_checked_sub(self) -> None:
        assert checked_sub(5, 5) == 0
        with pytest.raises(ArithmeticOverflowError):
            checked_sub(4, 5)

    def test_pow10(self) -> None:
        assert pow10(0) == 1
        assert pow10(36) == 10**36
        with pytest.raises(ArithmeticOverflowError):
            pow10(-1)

    @pytest.mark.parametrize(
        ("value", "expected"),
        [(0, 0), (1, 0), (9, 0), (10, 1), (12_345, 4), (2 * 10**18, 18)],
    )
    def test_count_decimals(self, value: int, expected: int) -> None:
        assert count_decimals(value) == expected
