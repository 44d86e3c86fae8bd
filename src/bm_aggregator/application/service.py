"""Read-only cross-market queries backed by the Aggregator."""

from collections.abc import Callable

from src.bm_aggregator.domain.registry import Aggregator
from src.bm_common.datetime_utils import unix_now


class AggregatorQueryService:
    def __init__(self, aggregator: Aggregator, clock: Callable[[], int] = unix_now) -> None:
        self._aggregator = aggregator
        self._clock = clock

    async def list_markets(self, payout_token: str, quote_token: str, live_only: bool) -> dict:
        if live_only:
            ids = self._aggregator.live_markets_for(payout_token, quote_token, self._clock())
        else:
            ids = self._aggregator.markets_for(payout_token, quote_token)
        return {"payout_token": payout_token, "quote_token": quote_token, "market_ids": ids}

    async def find_best(
        self,
        payout_token: str,
        quote_token: str,
        amount_in: int,
        min_amount_out: int,
        max_expiry: int,
    ) -> dict:
        now = self._clock()
        market_id = self._aggregator.find_market_for(
            payout_token, quote_token, amount_in, min_amount_out, max_expiry, now
        )
        payout = None
        if market_id is not None:
            payout = self._aggregator.get_auctioneer(market_id).payout_for(
                amount_in, market_id, None, now
            )
        return {"market_id": market_id, "payout": payout}
