from src.bm_common.errors import MarketNotActiveError, MarketNotFoundError
from src.bm_market.domain.models import MarketRecord


def is_live(record: MarketRecord, now: int) -> bool:
    """Capacity left, conclusion not reached, and start reached."""
    return (
        record.market.capacity != 0
        and record.terms.conclusion > now
        and record.terms.start <= now
    )


def check_market_exists(record: MarketRecord | None, market_id: int) -> MarketRecord:
    if record is None:
        raise MarketNotFoundError(market_id)
    return record


def check_market_live(record: MarketRecord, now: int) -> None:
    if not is_live(record, now):
        raise MarketNotActiveError(record.id)
