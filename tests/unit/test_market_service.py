"""Tests for MarketApplicationService - the async layer the routers call."""

import asyncio

import pytest

from config.settings import settings
from src.bm_auction.application.container import Container, build_container
from src.bm_auction.domain.params import OFDAMarketParams, SDAMarketParams
from src.bm_common.errors import MarketNotFoundError

T0 = 1_700_000_000
DAY = 86_400
E18 = 10**18
E36 = 10**36


class _Clock:
    def __init__(self, now: int) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now


def _sda_params() -> SDAMarketParams:
    return SDAMarketParams(
        payout_token="PAY",
        quote_token="QTE",
        payout_decimals=18,
        quote_decimals=18,
        capacity=1000 * E18,
        duration=10 * DAY,
        deposit_interval=DAY,
        formatted_initial_price=E36,
        formatted_minimum_price=E36 // 2,
        debt_buffer=50_000,
    )


@pytest.fixture
def clock() -> _Clock:
    return _Clock(T0)


@pytest.fixture
def container(clock: _Clock) -> Container:
    return build_container(settings, clock=clock)


class TestMarketService:
    async def test_create_and_get(self, container: Container) -> None:
        created = await container.markets.create_market("owner", _sda_params())
        detail = await container.markets.get_market(created.market_id)

        assert detail.id == created.market_id
        assert detail.price_model == "SDA"
        assert detail.is_live is True
        assert detail.market_price == E36
        assert detail.current_debt == 500 * E18
        assert detail.capacity == 1000 * E18

    async def test_get_unknown(self, container: Container) -> None:
        with pytest.raises(MarketNotFoundError):
            await container.markets.get_market(9)

    async def test_purchase(self, container: Container) -> None:
        created = await container.markets.create_market("owner", _sda_params())
        result = await container.markets.purchase("teller", created.market_id, 100 * E18, 0)
        assert result.payout == 100 * E18
        assert result.capacity == 900 * E18
        assert result.is_live is True

    async def test_concurrent_purchases_serialized(self, container: Container) -> None:
        created = await container.markets.create_market("owner", _sda_params())
        results = await asyncio.gather(
            *(
                container.markets.purchase("teller", created.market_id, 10 * E18, 0)
                for _ in range(5)
            )
        )
        detail = await container.markets.get_market(created.market_id)
        assert detail.sold == sum(r.payout for r in results)
        assert detail.capacity + detail.sold == 1000 * E18
        assert detail.purchased == 50 * E18

    async def test_stale_oracle_detail_has_no_price(
        self, container: Container, clock: _Clock
    ) -> None:
        container.oracle.set_price("PAY", "QTE", 2 * E18, T0)
        created = await container.markets.create_market(
            "owner",
            OFDAMarketParams(
                payout_token="PAY",
                quote_token="QTE",
                payout_decimals=18,
                quote_decimals=18,
                capacity=1000 * E18,
                duration=10 * DAY,
                deposit_interval=DAY,
                oracle="manual",
                fixed_discount=10_000,
                max_discount_from_current=20_000,
            ),
        )
        clock.now = T0 + 2 * DAY
        detail = await container.markets.get_market(created.market_id)
        assert detail.market_price is None
        assert detail.is_live is True

    async def test_close(self, container: Container, clock: _Clock) -> None:
        created = await container.markets.create_market("owner", _sda_params())
        clock.now = T0 + DAY
        detail = await container.markets.close_market("owner", created.market_id)
        assert detail.capacity == 0
        assert detail.conclusion == T0 + DAY
        assert detail.is_live is False
