"""MarketApplicationService - thin async layer over the synchronous engine.

Serializes mutating calls per market with an asyncio.Lock (creation takes
a single global lock since it allocates ids) and stamps every call with
the injected clock.
"""

import asyncio
from collections import defaultdict
from collections.abc import Callable

from src.bm_auction.engine.engine import AuctionEngine
from src.bm_common.datetime_utils import unix_now
from src.bm_common.errors import OraclePriceStaleError, OraclePriceZeroError
from src.bm_market.application.schemas import (
    CreateMarketResponse,
    MarketDetail,
    MaxAmountQuote,
    PayoutQuote,
    PurchaseResponse,
)
from src.bm_auction.domain.params import MarketParams


class MarketApplicationService:
    def __init__(self, engine: AuctionEngine, clock: Callable[[], int] = unix_now) -> None:
        self._engine = engine
        self._clock = clock
        self._market_locks: dict[int, asyncio.Lock] = defaultdict(asyncio.Lock)
        self._create_lock = asyncio.Lock()

    async def create_market(self, caller: str, params: MarketParams) -> CreateMarketResponse:
        async with self._create_lock:
            market_id = self._engine.create_market(caller, params, self._clock())
        return CreateMarketResponse(market_id=market_id)

    async def get_market(self, market_id: int) -> MarketDetail:
        now = self._clock()
        record = self._engine.get_market(market_id)
        try:
            price: int | None = self._engine.market_price(market_id, now)
        except (OraclePriceZeroError, OraclePriceStaleError):
            price = None
        return MarketDetail.from_record(
            record,
            is_live=self._engine.is_live(market_id, now),
            market_price=price,
            current_debt=self._engine.current_debt(market_id, now),
            current_control_variable=self._engine.current_control_variable(market_id, now),
        )

    async def payout_for(self, market_id: int, amount: int, referrer: str | None) -> PayoutQuote:
        payout = self._engine.payout_for(amount, market_id, referrer, self._clock())
        return PayoutQuote(market_id=market_id, amount=amount, payout=payout)

    async def max_amount_accepted(self, market_id: int, referrer: str | None) -> MaxAmountQuote:
        amount = self._engine.max_amount_accepted(market_id, referrer, self._clock())
        return MaxAmountQuote(market_id=market_id, max_amount_accepted=amount)

    async def purchase(
        self, caller: str, market_id: int, amount: int, min_amount_out: int
    ) -> PurchaseResponse:
        async with self._market_locks[market_id]:
            now = self._clock()
            payout = self._engine.purchase_bond(caller, market_id, amount, min_amount_out, now)
            return PurchaseResponse(
                market_id=market_id,
                payout=payout,
                capacity=self._engine.current_capacity(market_id),
                is_live=self._engine.is_live(market_id, now),
            )

    async def close_market(self, caller: str, market_id: int) -> MarketDetail:
        async with self._market_locks[market_id]:
            self._engine.close_market(caller, market_id, self._clock())
        return await self.get_market(market_id)

    async def set_intervals(
        self,
        caller: str,
        market_id: int,
        tune_interval: int,
        tune_adjustment_delay: int,
        debt_decay_interval: int,
    ) -> None:
        async with self._market_locks[market_id]:
            self._engine.set_intervals(
                caller,
                market_id,
                tune_interval,
                tune_adjustment_delay,
                debt_decay_interval,
                self._clock(),
            )

    async def push_ownership(self, caller: str, market_id: int, new_owner: str) -> None:
        async with self._market_locks[market_id]:
            self._engine.push_ownership(caller, market_id, new_owner, self._clock())

    async def pull_ownership(self, caller: str, market_id: int) -> None:
        async with self._market_locks[market_id]:
            self._engine.pull_ownership(caller, market_id, self._clock())
