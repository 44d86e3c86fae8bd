"""In-memory market arena keyed by market id.

Reads hand out the stored record; writers call load_for_update() to get a
detached copy, mutate it freely, and save() it once every check passed.
A failed operation therefore leaves the stored record untouched.
"""

import copy
import logging

from src.bm_market.domain.models import MarketRecord

logger = logging.getLogger(__name__)


class InMemoryMarketStore:
    def __init__(self) -> None:
        self._records: dict[int, MarketRecord] = {}

    def get(self, market_id: int) -> MarketRecord | None:
        return self._records.get(market_id)

    def load_for_update(self, market_id: int) -> MarketRecord | None:
        record = self._records.get(market_id)
        if record is None:
            return None
        return copy.deepcopy(record)

    def save(self, record: MarketRecord) -> None:
        self._records[record.id] = record
        logger.debug("Saved market %d: capacity=%d", record.id, record.market.capacity)

    def list_ids(self) -> list[int]:
        return sorted(self._records)

    def __len__(self) -> int:
        return len(self._records)
