"""Engine fixtures shared by the unit tests.

Every market factory produces the reference market used throughout:
18/18 decimals, 1000e18 capacity, 10 day duration, 1 day deposit interval,
opening at T0.
"""

from collections.abc import Callable
from typing import Any

import pytest

from src.bm_aggregator.domain.registry import Aggregator
from src.bm_auction.domain.params import (
    FixedPriceMarketParams,
    OFDAMarketParams,
    OSDAMarketParams,
    SDAMarketParams,
)
from src.bm_auction.engine.engine import AuctionEngine
from src.bm_market.infrastructure.store import InMemoryMarketStore
from src.bm_oracle.infrastructure.manual_oracle import ManualOracle
from src.bm_risk.rules.authorization import allow_admins
from src.bm_teller.domain.fees import FeeSchedule

T0 = 1_700_000_000
DAY = 86_400
E18 = 10**18
E36 = 10**36


def _base(overrides: dict[str, Any]) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "payout_token": "PAY",
        "quote_token": "QTE",
        "payout_decimals": 18,
        "quote_decimals": 18,
        "capacity": 1000 * E18,
        "duration": 10 * DAY,
        "deposit_interval": DAY,
    }
    fields.update(overrides)
    return fields


@pytest.fixture
def store() -> InMemoryMarketStore:
    return InMemoryMarketStore()


@pytest.fixture
def aggregator() -> Aggregator:
    return Aggregator()


@pytest.fixture
def teller() -> FeeSchedule:
    return FeeSchedule(address="teller")


@pytest.fixture
def oracle() -> ManualOracle:
    return ManualOracle(decimals=18, max_age=DAY)


@pytest.fixture
def engine(
    store: InMemoryMarketStore,
    aggregator: Aggregator,
    teller: FeeSchedule,
    oracle: ManualOracle,
) -> AuctionEngine:
    return AuctionEngine(
        store=store,
        aggregator=aggregator,
        teller=teller,
        authorize=allow_admins(["admin"]),
        oracles={"manual": oracle},
    )


@pytest.fixture
def sda_params() -> Callable[..., SDAMarketParams]:
    def _make(**overrides: Any) -> SDAMarketParams:
        fields = {
            "formatted_initial_price": E36,
            "formatted_minimum_price": E36 // 2,
            "debt_buffer": 50_000,
        }
        fields.update(overrides)
        return SDAMarketParams(**_base(fields))

    return _make


@pytest.fixture
def fpa_params() -> Callable[..., FixedPriceMarketParams]:
    def _make(**overrides: Any) -> FixedPriceMarketParams:
        fields: dict[str, Any] = {"formatted_price": 2 * E36}
        fields.update(overrides)
        return FixedPriceMarketParams(**_base(fields))

    return _make


@pytest.fixture
def ofda_params() -> Callable[..., OFDAMarketParams]:
    def _make(**overrides: Any) -> OFDAMarketParams:
        fields: dict[str, Any] = {
            "oracle": "manual",
            "fixed_discount": 10_000,
            "max_discount_from_current": 20_000,
        }
        fields.update(overrides)
        return OFDAMarketParams(**_base(fields))

    return _make


@pytest.fixture
def osda_params() -> Callable[..., OSDAMarketParams]:
    def _make(**overrides: Any) -> OSDAMarketParams:
        fields: dict[str, Any] = {
            "oracle": "manual",
            "base_discount": 10_000,
            "max_discount_from_current": 50_000,
            "target_interval_discount": 1_000,
        }
        fields.update(overrides)
        return OSDAMarketParams(**_base(fields))

    return _make
