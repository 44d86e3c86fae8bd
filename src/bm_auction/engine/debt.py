"""Debt decay for sequential dutch auction (SDA) markets.

Debt is a time-decayed measure of recent purchases. Stored total_debt is
the debt as of metadata.last_decay; it falls linearly to zero over one
debt_decay_interval:

    debt(now) = total_debt * (last_decay + interval - now) / interval

Purchases add debt (price goes up), inactivity lets it decay (price goes
down):

    |    debt falls with
    |   / \\  inactivity
    |  /   \\ /\\
    | /     \\  \\
    |/          \\ /\\ /\\
    |       \\ /  \\/  \\
    |           debt increases
    |______________

A purchase pushes last_decay forward in proportion to its payout instead of
resetting it to now, so price is continuous across the purchase. Large
purchases can push last_decay past now; the debt formula above covers
that case as well (the factor is then greater than one).
"""

import logging

from src.bm_common.fixed_point import checked_sub, mul_div, mul_div_up
from src.bm_market.domain.models import Adjustment, Market, MarketRecord, Metadata, Terms

logger = logging.getLogger(__name__)


def current_debt(market: Market, terms: Terms, meta: Metadata, now: int) -> int:
    """Debt as of `now`. Decay starts at the market start."""
    if now < terms.start:
        return market.total_debt
    interval = meta.debt_decay_interval
    if meta.last_decay > now:
        return mul_div_up(market.total_debt, interval + (meta.last_decay - now), interval)
    elapsed = now - meta.last_decay
    if elapsed >= interval:
        return 0
    return mul_div(market.total_debt, interval - elapsed, interval)


def control_decay(adjustment: Adjustment, now: int) -> tuple[int, int, bool]:
    """Amount of an in-flight adjustment that has elapsed by `now`.

    Returns (decay, seconds_since_last_adjustment, still_active).
    """
    if not adjustment.active:
        return 0, 0, False
    seconds_since = max(now - adjustment.last_adjustment, 0)
    still_active = seconds_since < adjustment.time_to_adjusted
    if still_active:
        decay = mul_div(adjustment.change, seconds_since, adjustment.time_to_adjusted)
    else:
        decay = adjustment.change
    return decay, seconds_since, still_active


def current_control_variable(terms: Terms, adjustment: Adjustment, now: int) -> int:
    decay, _, _ = control_decay(adjustment, now)
    return checked_sub(terms.control_variable, decay)


def debt_price(control_variable: int, debt: int, scale: int, min_price: int) -> int:
    """price = control_variable * debt / scale, rounded up, floored at min_price."""
    price = mul_div_up(control_variable, debt, scale)
    return price if price > min_price else min_price


def decay_and_get_price(record: MarketRecord, amount: int, now: int) -> tuple[int, int]:
    """Bring debt and control variable up to `now`, price the purchase, and
    book its debt. Returns (price, payout).

    Mutates `record`; callers pass a detached copy and only persist it once
    the purchase passes every check.
    """
    market, terms, adjustment = record.market, record.terms, record.adjustment
    meta = record.metadata
    assert meta is not None, f"market {record.id} has no SDA metadata"

    decayed_debt = current_debt(market, terms, meta, now)
    market.total_debt = decayed_debt

    if adjustment.active:
        adjust_by, seconds_since, still_active = control_decay(adjustment, now)
        terms.control_variable = checked_sub(terms.control_variable, adjust_by)
        if still_active:
            adjustment.change -= adjust_by
            adjustment.time_to_adjusted -= seconds_since
            adjustment.last_adjustment = now
        else:
            adjustment.active = False

    price = debt_price(terms.control_variable, decayed_debt, market.scale, market.min_price)
    payout = mul_div(amount, market.scale, price)

    interval = meta.debt_decay_interval
    last_decay = meta.last_decay
    # Remaining decay window at `now`
    if last_decay > now:
        decay_offset = interval + (last_decay - now)
    elif now - last_decay < interval:
        decay_offset = interval - (now - last_decay)
    else:
        # Fully decayed: anchor the window so it lags now by exactly one interval
        decay_offset = 0
        last_decay = now - interval

    last_decay_increment = mul_div_up(interval, payout, meta.last_tune_debt)
    meta.last_decay = last_decay + last_decay_increment

    carried_debt = 0
    if decayed_debt > 0:
        carried_debt = mul_div(decayed_debt, interval, decay_offset + last_decay_increment)
    # +1 keeps price strictly above the pre-purchase price
    market.total_debt = carried_debt + payout + 1

    logger.debug(
        "Market %d decay: debt %d -> %d, last_decay=%d, price=%d, payout=%d",
        record.id,
        decayed_debt,
        market.total_debt,
        meta.last_decay,
        price,
        payout,
    )
    return price, payout
