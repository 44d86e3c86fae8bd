# src/bm_market/domain/repository.py
"""Repository Protocol - dependency inversion for testability.

Unit tests may inject any object that conforms to this Protocol.
Infrastructure layer provides the in-memory arena implementation.
"""

from typing import Protocol

from src.bm_market.domain.models import MarketRecord


class MarketStoreProtocol(Protocol):
    def get(self, market_id: int) -> MarketRecord | None: ...

    def load_for_update(self, market_id: int) -> MarketRecord | None: ...

    def save(self, record: MarketRecord) -> None: ...

    def list_ids(self) -> list[int]: ...
