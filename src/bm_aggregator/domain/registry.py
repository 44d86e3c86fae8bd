"""Aggregator - global market id authority and cross-market lookups.

Ids are sequential from 0 and never reused. Each id remembers the
auctioneer that priced it so lookups can project payouts without knowing
which price model a market uses.
"""

import logging
from typing import Protocol

from src.bm_common.errors import MarketNotFoundError, MaxPayoutExceededError
from src.bm_common.enums import VestingType
from src.bm_market.domain.models import MarketInfoForPurchase

logger = logging.getLogger(__name__)


class AuctioneerProtocol(Protocol):
    def is_live(self, market_id: int, now: int) -> bool: ...

    def payout_for(self, amount: int, market_id: int, referrer: str | None, now: int) -> int: ...

    def get_market_info_for_purchase(self, market_id: int) -> MarketInfoForPurchase: ...

    def vesting_type(self, market_id: int) -> VestingType: ...


class Aggregator:
    def __init__(self) -> None:
        self._market_counter = 0
        self._pairs: dict[int, tuple[str, str]] = {}
        self._auctioneers: dict[int, AuctioneerProtocol] = {}
        self._markets_for_pair: dict[tuple[str, str], list[int]] = {}

    @property
    def market_counter(self) -> int:
        return self._market_counter

    def register_market(
        self,
        payout_token: str,
        quote_token: str,
        auctioneer: AuctioneerProtocol | None = None,
    ) -> int:
        market_id = self._market_counter
        self._market_counter += 1
        self._pairs[market_id] = (payout_token, quote_token)
        self._markets_for_pair.setdefault((payout_token, quote_token), []).append(market_id)
        if auctioneer is not None:
            self._auctioneers[market_id] = auctioneer
        logger.info("Registered market %d for %s/%s", market_id, payout_token, quote_token)
        return market_id

    def get_auctioneer(self, market_id: int) -> AuctioneerProtocol:
        auctioneer = self._auctioneers.get(market_id)
        if auctioneer is None:
            raise MarketNotFoundError(market_id)
        return auctioneer

    def markets_for(self, payout_token: str, quote_token: str) -> list[int]:
        """All market ids ever registered for a pair, oldest first."""
        return list(self._markets_for_pair.get((payout_token, quote_token), []))

    def live_markets_for(self, payout_token: str, quote_token: str, now: int) -> list[int]:
        return [
            mid
            for mid in self.markets_for(payout_token, quote_token)
            if mid in self._auctioneers and self._auctioneers[mid].is_live(mid, now)
        ]

    def find_market_for(
        self,
        payout_token: str,
        quote_token: str,
        amount_in: int,
        min_amount_out: int,
        max_expiry: int,
        now: int,
    ) -> int | None:
        """Live market paying the most for amount_in, or None.

        Markets whose bonds would vest after max_expiry, or whose max payout
        cannot reach min_amount_out, are skipped.
        """
        best_id: int | None = None
        highest_out = 0
        for mid in self.live_markets_for(payout_token, quote_token, now):
            auctioneer = self._auctioneers[mid]
            info = auctioneer.get_market_info_for_purchase(mid)
            if auctioneer.vesting_type(mid) == VestingType.FIXED_TERM:
                expiry = now + info.vesting
            else:
                expiry = info.vesting
            if expiry > max_expiry or min_amount_out > info.max_payout:
                continue
            try:
                payout = auctioneer.payout_for(amount_in, mid, None, now)
            except MaxPayoutExceededError:
                continue
            if payout > highest_out:
                highest_out = payout
                best_id = mid
        return best_id
