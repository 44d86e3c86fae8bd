"""ManualOracle - in-process price feed keyed by token pair.

Prices are pushed by an operator (or a test) with the time they were
observed. Reads fail closed on a zero price or a price older than max_age.
"""

import logging
from dataclasses import dataclass

from src.bm_common.errors import (
    InvalidParamsError,
    OraclePriceStaleError,
    OraclePriceZeroError,
)

logger = logging.getLogger(__name__)


@dataclass
class PricePoint:
    price: int
    updated_at: int


class ManualOracle:
    def __init__(self, decimals: int = 18, max_age: int = 24 * 3600) -> None:
        if not (6 <= decimals <= 18):
            raise InvalidParamsError(f"oracle decimals {decimals} not in [6, 18]")
        self._decimals = decimals
        self._max_age = max_age
        self._prices: dict[tuple[str, str], PricePoint] = {}
        self._market_pairs: dict[int, tuple[str, str]] = {}

    def set_price(self, payout_token: str, quote_token: str, price: int, now: int) -> None:
        """Record a quote-per-payout price observed at `now`."""
        if price < 0:
            raise InvalidParamsError(f"negative oracle price {price}")
        self._prices[(payout_token, quote_token)] = PricePoint(price=price, updated_at=now)
        logger.debug("Oracle price %s/%s = %d at %d", payout_token, quote_token, price, now)

    def register_market(self, market_id: int, payout_token: str, quote_token: str) -> None:
        if (payout_token, quote_token) not in self._prices:
            raise InvalidParamsError(f"no oracle price for pair {payout_token}/{quote_token}")
        self._market_pairs[market_id] = (payout_token, quote_token)

    def current_price(self, market_id: int, now: int) -> int:
        pair = self._market_pairs.get(market_id)
        if pair is None:
            raise InvalidParamsError(f"market {market_id} not registered with oracle")
        point = self._prices[pair]
        if point.price == 0:
            raise OraclePriceZeroError(market_id)
        age = now - point.updated_at
        if age > self._max_age:
            raise OraclePriceStaleError(market_id, age)
        return point.price

    def decimals(self, market_id: int) -> int:
        return self._decimals
