"""Price-feed interface consumed by the oracle-referenced price models."""

from typing import Protocol


class OracleProtocol(Protocol):
    def register_market(self, market_id: int, payout_token: str, quote_token: str) -> None: ...

    def current_price(self, market_id: int, now: int) -> int:
        """Quote per payout, with decimals(market_id) decimals. Must be > 0 and fresh."""
        ...

    def decimals(self, market_id: int) -> int: ...
