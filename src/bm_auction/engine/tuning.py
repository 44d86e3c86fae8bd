"""Control-variable tuning for SDA markets, and max-payout refresh for the
oracle and fixed-price models.

After each purchase the engine compares actual remaining capacity with a
"time-neutral capacity": what would remain had the market sold linearly.

    initial_capacity      = capacity + sold
    time_neutral_capacity = initial_capacity * elapsed / length + capacity

time_neutral_capacity < initial_capacity  -> oversold, ahead of schedule
time_neutral_capacity > initial_capacity  -> undersold, behind schedule

Oversold markets retune as soon as capacity drops below the next
tune_below_capacity threshold; undersold markets retune once per
tune_interval. A higher control variable applies at once. A lower one is
glided in over tune_adjustment_delay through an Adjustment, which
debt.decay_and_get_price drains on later purchases.
"""

import logging
from dataclasses import dataclass

from src.bm_common.fixed_point import mul_div, mul_div_up
from src.bm_market.domain.models import Adjustment, MarketRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TuneResult:
    old_control_variable: int
    new_control_variable: int
    target_debt: int
    max_payout: int

    @property
    def is_decrease(self) -> bool:
        return self.new_control_variable < self.old_control_variable


def payout_capacity(record: MarketRecord, price: int) -> tuple[int, int]:
    """(remaining, initial) capacity in payout units, converting quote
    capacity at `price`."""
    market = record.market
    if market.capacity_in_quote:
        capacity = mul_div(market.capacity, market.scale, price)
        return capacity, capacity + mul_div(market.purchased, market.scale, price)
    return market.capacity, market.capacity + market.sold


def tune(record: MarketRecord, now: int, price: int) -> TuneResult | None:
    """Retune an SDA market after a purchase at `price`. Mutates `record`."""
    market, terms, meta = record.market, record.terms, record.metadata
    assert meta is not None, f"market {record.id} has no SDA metadata"

    if market.capacity == 0:
        return None

    time_remaining = terms.conclusion - now
    capacity, initial_capacity = payout_capacity(record, price)
    elapsed = max(meta.length - time_remaining, 0)
    time_neutral_capacity = mul_div(initial_capacity, elapsed, meta.length) + capacity

    oversold = (
        market.capacity < meta.tune_below_capacity
        and time_neutral_capacity < initial_capacity
    )
    undersold = (
        now >= meta.last_tune + meta.tune_interval
        and time_neutral_capacity > initial_capacity
    )
    if not (oversold or undersold):
        return None

    # Max payout that sells out on time if every deposit interval takes one max bond
    market.max_payout = mul_div(capacity, meta.deposit_interval, time_remaining)

    target_debt = mul_div(time_neutral_capacity, meta.debt_decay_interval, meta.length)
    if target_debt == 0:
        return None

    old_control_variable = terms.control_variable
    new_control_variable = mul_div_up(price, market.scale, target_debt)

    if new_control_variable < old_control_variable:
        record.adjustment = Adjustment(
            change=old_control_variable - new_control_variable,
            last_adjustment=now,
            time_to_adjusted=meta.tune_adjustment_delay,
            active=True,
        )
    else:
        terms.control_variable = new_control_variable
        record.adjustment.active = False

    meta.last_tune = now
    if market.capacity > meta.tune_interval_capacity:
        meta.tune_below_capacity = market.capacity - meta.tune_interval_capacity
    else:
        meta.tune_below_capacity = 0
    meta.last_tune_debt = target_debt

    logger.info(
        "Tuned market %d: control variable %d -> %d (%s), target debt %d",
        record.id,
        old_control_variable,
        new_control_variable,
        "oversold" if oversold else "undersold",
        target_debt,
    )
    return TuneResult(
        old_control_variable=old_control_variable,
        new_control_variable=new_control_variable,
        target_debt=target_debt,
        max_payout=market.max_payout,
    )


def update_max_payout(record: MarketRecord, now: int, price: int) -> int:
    """Spread remaining capacity evenly over the remaining deposit intervals."""
    time_remaining = record.terms.conclusion - now
    capacity, _ = payout_capacity(record, price)
    record.market.max_payout = mul_div(capacity, record.terms.deposit_interval, time_remaining)
    return record.market.max_payout
