"""Creation and interval checks. Every check raises InvalidParamsError and
touches no state, so the engine runs them all before its first write."""

from src.bm_auction.domain.defaults import AuctionDefaults
from src.bm_common.datetime_utils import round_down_to_day
from src.bm_common.enums import VestingType
from src.bm_common.errors import InvalidParamsError
from src.bm_common.fixed_point import ONE_HUNDRED_PERCENT

MIN_TOKEN_DECIMALS = 6
MAX_TOKEN_DECIMALS = 18
MAX_SCALE_ADJUSTMENT = 24
MAX_FIXED_TERM = 52 * 7 * 86_400 * 50  # 50 years


def check_token_decimals(payout_decimals: int, quote_decimals: int) -> None:
    for decimals in (payout_decimals, quote_decimals):
        if not (MIN_TOKEN_DECIMALS <= decimals <= MAX_TOKEN_DECIMALS):
            raise InvalidParamsError(
                f"token decimals {decimals} not in [{MIN_TOKEN_DECIMALS}, {MAX_TOKEN_DECIMALS}]"
            )


def check_scale_adjustment(scale_adjustment: int) -> None:
    if not (-MAX_SCALE_ADJUSTMENT <= scale_adjustment <= MAX_SCALE_ADJUSTMENT):
        raise InvalidParamsError(f"scale adjustment {scale_adjustment} out of range")


def check_capacity(capacity: int) -> None:
    if capacity <= 0:
        raise InvalidParamsError("capacity must be positive")


def check_schedule(
    start: int,
    duration: int,
    deposit_interval: int,
    defaults: AuctionDefaults,
    now: int,
) -> tuple[int, int]:
    """Return (start, conclusion); start=0 means the market opens now."""
    if start != 0 and start < now:
        raise InvalidParamsError(f"start {start} is in the past")
    if duration < defaults.min_market_duration:
        raise InvalidParamsError(
            f"duration {duration} below minimum {defaults.min_market_duration}"
        )
    if not (defaults.min_deposit_interval <= deposit_interval <= duration):
        raise InvalidParamsError(
            f"deposit interval {deposit_interval} not in "
            f"[{defaults.min_deposit_interval}, {duration}]"
        )
    effective_start = start or now
    return effective_start, effective_start + duration


def check_vesting(vesting: int, vesting_type: VestingType, conclusion: int) -> int:
    """Return the vesting value to store.

    FIXED_TERM: a duration, 0 for instant swap.
    FIXED_EXPIRY: a timestamp rounded down to the day, 0 or at/after conclusion.
    """
    if vesting < 0:
        raise InvalidParamsError("vesting must be non-negative")
    if vesting_type == VestingType.FIXED_TERM:
        if vesting > MAX_FIXED_TERM:
            raise InvalidParamsError(f"fixed term {vesting} exceeds {MAX_FIXED_TERM}")
        return vesting
    if vesting == 0:
        return 0
    expiry = round_down_to_day(vesting)
    if expiry < conclusion:
        raise InvalidParamsError(f"expiry {expiry} before conclusion {conclusion}")
    return expiry


def check_sda_prices(initial_price: int, minimum_price: int) -> None:
    if minimum_price <= 0:
        raise InvalidParamsError("minimum price must be positive")
    if initial_price < minimum_price:
        raise InvalidParamsError(
            f"initial price {initial_price} below minimum price {minimum_price}"
        )


def check_fixed_price(price: int) -> None:
    if price <= 0:
        raise InvalidParamsError("fixed price must be positive")


def check_debt_buffer(debt_buffer: int, defaults: AuctionDefaults) -> None:
    if not (0 <= debt_buffer <= defaults.max_debt_buffer):
        raise InvalidParamsError(
            f"debt buffer {debt_buffer} not in [0, {defaults.max_debt_buffer}]"
        )


def check_discounts(discount: int, max_discount_from_current: int) -> None:
    """discount < 100% and discount <= max_discount_from_current <= 100%."""
    if not (0 <= discount < ONE_HUNDRED_PERCENT):
        raise InvalidParamsError(f"discount {discount} not in [0, {ONE_HUNDRED_PERCENT})")
    if not (discount <= max_discount_from_current <= ONE_HUNDRED_PERCENT):
        raise InvalidParamsError(
            f"max discount from current {max_discount_from_current} not in "
            f"[{discount}, {ONE_HUNDRED_PERCENT}]"
        )


def check_target_interval_discount(target_interval_discount: int) -> None:
    if not (0 <= target_interval_discount < ONE_HUNDRED_PERCENT):
        raise InvalidParamsError(
            f"target interval discount {target_interval_discount} not in [0, {ONE_HUNDRED_PERCENT})"
        )


def check_intervals(
    tune_interval: int,
    tune_adjustment_delay: int,
    debt_decay_interval: int,
    deposit_interval: int,
    defaults: AuctionDefaults,
) -> None:
    if tune_interval == 0 or tune_adjustment_delay == 0 or debt_decay_interval == 0:
        raise InvalidParamsError("intervals must be non-zero")
    if tune_interval < tune_adjustment_delay:
        raise InvalidParamsError("tune interval shorter than tune adjustment delay")
    if tune_interval < deposit_interval:
        raise InvalidParamsError("tune interval shorter than deposit interval")
    if debt_decay_interval < defaults.min_debt_decay_interval:
        raise InvalidParamsError(
            f"debt decay interval {debt_decay_interval} below minimum "
            f"{defaults.min_debt_decay_interval}"
        )
