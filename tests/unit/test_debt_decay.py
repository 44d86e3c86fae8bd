"""Unit tests for bm_auction.engine.debt - debt decay, control variable
glide, and the purchase-time debt update."""

from typing import Any

from src.bm_auction.engine.debt import (
    control_decay,
    current_control_variable,
    current_debt,
    debt_price,
    decay_and_get_price,
)
from src.bm_market.domain.models import Adjustment, Market, MarketRecord, Metadata, Terms

T0 = 1_700_000_000
DAY = 86_400
E18 = 10**18
E36 = 10**36
INTERVAL = 5 * DAY


def _make_record(**meta_overrides: Any) -> MarketRecord:
    meta: dict[str, Any] = {
        "last_tune": T0,
        "last_decay": T0,
        "length": 10 * DAY,
        "deposit_interval": DAY,
        "tune_interval": DAY,
        "tune_adjustment_delay": 3600,
        "debt_decay_interval": INTERVAL,
        "tune_interval_capacity": 100 * E18,
        "tune_below_capacity": 900 * E18,
        "last_tune_debt": 500 * E18,
    }
    meta.update(meta_overrides)
    return MarketRecord(
        id=0,
        market=Market(
            owner="owner",
            payout_token="PAY",
            quote_token="QTE",
            callback_addr=None,
            capacity_in_quote=False,
            capacity=1000 * E18,
            total_debt=500 * E18,
            min_price=E36 // 2,
            max_payout=100 * E18,
        ),
        terms=Terms(
            control_variable=2 * 10**51,
            max_debt=750 * E18,
            start=T0,
            conclusion=T0 + 10 * DAY,
            vesting=0,
        ),
        metadata=Metadata(**meta),
    )


class TestCurrentDebt:
    def test_before_start_no_decay(self) -> None:
        r = _make_record()
        assert current_debt(r.market, r.terms, r.metadata, T0 - DAY) == 500 * E18

    def test_linear_decay(self) -> None:
        r = _make_record()
        assert current_debt(r.market, r.terms, r.metadata, T0 + INTERVAL // 2) == 250 * E18

    def test_fully_decayed(self) -> None:
        r = _make_record()
        assert current_debt(r.market, r.terms, r.metadata, T0 + INTERVAL) == 0
        assert current_debt(r.market, r.terms, r.metadata, T0 + 3 * INTERVAL) == 0

    def test_last_decay_ahead_of_now_grows_debt(self) -> None:
        r = _make_record(last_decay=T0 + DAY)
        # factor (interval + 1 day) / interval = 1.2
        assert current_debt(r.market, r.terms, r.metadata, T0) == 600 * E18


class TestControlDecay:
    def test_inactive(self) -> None:
        assert control_decay(Adjustment(), T0) == (0, 0, False)

    def test_partial(self) -> None:
        adj = Adjustment(change=1000, last_adjustment=T0, time_to_adjusted=3600, active=True)
        assert control_decay(adj, T0 + 900) == (250, 900, True)

    def test_complete(self) -> None:
        adj = Adjustment(change=1000, last_adjustment=T0, time_to_adjusted=3600, active=True)
        assert control_decay(adj, T0 + 3600) == (1000, 3600, False)

    def test_current_control_variable_applies_glide(self) -> None:
        r = _make_record()
        r.adjustment = Adjustment(
            change=10**51, last_adjustment=T0, time_to_adjusted=3600, active=True
        )
        assert current_control_variable(r.terms, r.adjustment, T0 + 1800) == 15 * 10**50
        assert current_control_variable(r.terms, r.adjustment, T0 + 7200) == 10**51


class TestDebtPrice:
    def test_rounds_up(self) -> None:
        assert debt_price(3, 1, 2, 0) == 2

    def test_floored_at_min_price(self) -> None:
        assert debt_price(2 * 10**51, 0, E36, E36 // 2) == E36 // 2

    def test_initial_price(self) -> None:
        assert debt_price(2 * 10**51, 500 * E18, E36, E36 // 2) == E36


class TestDecayAndGetPrice:
    def test_purchase_at_start(self) -> None:
        r = _make_record()
        price, payout = decay_and_get_price(r, 100 * E18, T0)

        assert price == E36
        assert payout == 100 * E18
        # increment = ceil(5d * 100 / 500) = 1 day
        assert r.metadata.last_decay == T0 + DAY
        # carried = 500e18 * 5d / 6d, plus payout, plus one
        assert r.market.total_debt == (500 * E18 * 5) // 6 + 100 * E18 + 1

    def test_price_rises_after_purchase(self) -> None:
        r = _make_record()
        price_before, _ = decay_and_get_price(r, 100 * E18, T0)
        price_after = debt_price(
            r.terms.control_variable,
            current_debt(r.market, r.terms, r.metadata, T0),
            r.market.scale,
            r.market.min_price,
        )
        assert price_after > price_before
        assert abs(price_after - 124 * E36 // 100) < E36 // 10**15

    def test_fully_decayed_market_reanchors_last_decay(self) -> None:
        r = _make_record()
        now = T0 + 3 * INTERVAL
        price, payout = decay_and_get_price(r, 50 * E18, now)

        assert price == E36 // 2  # floored at min price
        assert payout == 100 * E18
        assert r.metadata.last_decay == now - INTERVAL + DAY
        assert r.market.total_debt == payout + 1

    def test_drains_active_adjustment(self) -> None:
        r = _make_record()
        r.adjustment = Adjustment(
            change=10**51, last_adjustment=T0, time_to_adjusted=3600, active=True
        )
        decay_and_get_price(r, E18, T0 + 900)

        assert r.terms.control_variable == 2 * 10**51 - 10**51 // 4
        assert r.adjustment.active is True
        assert r.adjustment.change == 10**51 - 10**51 // 4
        assert r.adjustment.time_to_adjusted == 2700
        assert r.adjustment.last_adjustment == T0 + 900

    def test_finishes_adjustment(self) -> None:
        r = _make_record()
        r.adjustment = Adjustment(
            change=10**51, last_adjustment=T0, time_to_adjusted=3600, active=True
        )
        decay_and_get_price(r, E18, T0 + 4000)

        assert r.terms.control_variable == 10**51
        assert r.adjustment.active is False
