"""Tests for bm_risk.rules.market_params - creation and interval checks."""

import pytest

from src.bm_auction.domain.defaults import AuctionDefaults
from src.bm_common.enums import VestingType
from src.bm_common.errors import InvalidParamsError
from src.bm_risk.rules.market_params import (
    MAX_FIXED_TERM,
    check_capacity,
    check_debt_buffer,
    check_discounts,
    check_intervals,
    check_scale_adjustment,
    check_schedule,
    check_sda_prices,
    check_target_interval_discount,
    check_token_decimals,
    check_vesting,
)

DAY = 86_400
NOW = 1_700_000_000


@pytest.fixture
def defaults() -> AuctionDefaults:
    return AuctionDefaults()


class TestTokenAndScale:
    def test_decimals_bounds(self) -> None:
        check_token_decimals(6, 18)
        with pytest.raises(InvalidParamsError):
            check_token_decimals(5, 18)
        with pytest.raises(InvalidParamsError):
            check_token_decimals(18, 19)

    def test_scale_adjustment_bounds(self) -> None:
        check_scale_adjustment(-24)
        check_scale_adjustment(24)
        with pytest.raises(InvalidParamsError):
            check_scale_adjustment(25)

    def test_capacity_positive(self) -> None:
        with pytest.raises(InvalidParamsError):
            check_capacity(0)


class TestSchedule:
    def test_zero_start_opens_now(self, defaults: AuctionDefaults) -> None:
        assert check_schedule(0, 10 * DAY, DAY, defaults, NOW) == (NOW, NOW + 10 * DAY)

    def test_future_start_kept(self, defaults: AuctionDefaults) -> None:
        start = NOW + DAY
        assert check_schedule(start, 10 * DAY, DAY, defaults, NOW) == (start, start + 10 * DAY)

    def test_past_start_rejected(self, defaults: AuctionDefaults) -> None:
        with pytest.raises(InvalidParamsError):
            check_schedule(NOW - 1, 10 * DAY, DAY, defaults, NOW)

    def test_duration_below_minimum(self, defaults: AuctionDefaults) -> None:
        with pytest.raises(InvalidParamsError):
            check_schedule(0, DAY - 1, 3600, defaults, NOW)

    def test_deposit_interval_bounds(self, defaults: AuctionDefaults) -> None:
        with pytest.raises(InvalidParamsError):
            check_schedule(0, 10 * DAY, 3599, defaults, NOW)
        with pytest.raises(InvalidParamsError):
            check_schedule(0, 10 * DAY, 10 * DAY + 1, defaults, NOW)


class TestVesting:
    def test_fixed_term(self) -> None:
        assert check_vesting(0, VestingType.FIXED_TERM, NOW) == 0
        assert check_vesting(MAX_FIXED_TERM, VestingType.FIXED_TERM, NOW) == MAX_FIXED_TERM
        with pytest.raises(InvalidParamsError):
            check_vesting(MAX_FIXED_TERM + 1, VestingType.FIXED_TERM, NOW)

    def test_fixed_expiry_rounds_down_to_day(self) -> None:
        conclusion = 10 * DAY
        assert check_vesting(12 * DAY + 500, VestingType.FIXED_EXPIRY, conclusion) == 12 * DAY

    def test_fixed_expiry_before_conclusion(self) -> None:
        with pytest.raises(InvalidParamsError):
            check_vesting(9 * DAY, VestingType.FIXED_EXPIRY, 10 * DAY)

    def test_fixed_expiry_zero_is_instant(self) -> None:
        assert check_vesting(0, VestingType.FIXED_EXPIRY, 10 * DAY) == 0

    def test_negative(self) -> None:
        with pytest.raises(InvalidParamsError):
            check_vesting(-1, VestingType.FIXED_TERM, NOW)


class TestPricesAndDiscounts:
    def test_sda_prices(self) -> None:
        check_sda_prices(10, 10)
        with pytest.raises(InvalidParamsError):
            check_sda_prices(10, 0)
        with pytest.raises(InvalidParamsError):
            check_sda_prices(9, 10)

    def test_debt_buffer(self, defaults: AuctionDefaults) -> None:
        check_debt_buffer(0, defaults)
        check_debt_buffer(defaults.max_debt_buffer, defaults)
        with pytest.raises(InvalidParamsError):
            check_debt_buffer(defaults.max_debt_buffer + 1, defaults)

    def test_discounts(self) -> None:
        check_discounts(10_000, 20_000)
        check_discounts(0, 100_000)
        with pytest.raises(InvalidParamsError):
            check_discounts(100_000, 100_000)
        with pytest.raises(InvalidParamsError):
            check_discounts(10_000, 5_000)
        with pytest.raises(InvalidParamsError):
            check_discounts(10_000, 100_001)

    def test_target_interval_discount(self) -> None:
        check_target_interval_discount(0)
        with pytest.raises(InvalidParamsError):
            check_target_interval_discount(100_000)


class TestIntervals:
    def test_valid(self, defaults: AuctionDefaults) -> None:
        check_intervals(DAY, 3600, 5 * DAY, DAY, defaults)

    @pytest.mark.parametrize(
        ("tune", "adjust", "decay"),
        [
            (0, 3600, 5 * DAY),  # zero interval
            (3600, 7200, 5 * DAY),  # tune shorter than adjustment delay
            (7200, 3600, 5 * DAY),  # tune shorter than deposit interval
            (DAY, 3600, 2 * DAY),  # decay below minimum
        ],
    )
    def test_invalid(
        self, defaults: AuctionDefaults, tune: int, adjust: int, decay: int
    ) -> None:
        with pytest.raises(InvalidParamsError):
            check_intervals(tune, adjust, decay, DAY, defaults)


class TestAuctionDefaults:
    def test_adjustment_delay_above_tune_interval(self) -> None:
        with pytest.raises(InvalidParamsError):
            AuctionDefaults(tune_interval=3600, tune_adjustment_delay=7200)

    def test_deposit_interval_above_duration(self) -> None:
        with pytest.raises(InvalidParamsError):
            AuctionDefaults(min_deposit_interval=2 * DAY, min_market_duration=DAY)
