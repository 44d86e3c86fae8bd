"""Process-wide wiring of the engine, its collaborators and the services
the routers call.

Built lazily from settings on first use. Tests build their own container
with build_container() and swap it in through
app.dependency_overrides[get_container].
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from config.settings import Settings, settings
from src.bm_admin.application.service import AdminService
from src.bm_aggregator.application.service import AggregatorQueryService
from src.bm_aggregator.domain.registry import Aggregator
from src.bm_auction.domain.defaults import AuctionDefaults
from src.bm_auction.engine.engine import AuctionEngine
from src.bm_common.datetime_utils import unix_now
from src.bm_market.application.service import MarketApplicationService
from src.bm_market.infrastructure.store import InMemoryMarketStore
from src.bm_oracle.infrastructure.manual_oracle import ManualOracle
from src.bm_risk.rules.authorization import allow_admins
from src.bm_teller.domain.fees import FeeSchedule

logger = logging.getLogger(__name__)

MANUAL_ORACLE = "manual"


@dataclass
class Container:
    engine: AuctionEngine
    aggregator: Aggregator
    oracle: ManualOracle
    teller: FeeSchedule
    clock: Callable[[], int]
    markets: MarketApplicationService = field(init=False)
    admin: AdminService = field(init=False)
    aggregator_queries: AggregatorQueryService = field(init=False)

    def __post_init__(self) -> None:
        self.markets = MarketApplicationService(self.engine, self.clock)
        self.admin = AdminService(self.engine, self.oracle, self.clock)
        self.aggregator_queries = AggregatorQueryService(self.aggregator, self.clock)


def build_container(cfg: Settings, clock: Callable[[], int] = unix_now) -> Container:
    aggregator = Aggregator()
    oracle = ManualOracle(max_age=cfg.ORACLE_MAX_AGE)
    teller = FeeSchedule(address=cfg.TELLER_ID, protocol_fee=cfg.PROTOCOL_FEE)
    engine = AuctionEngine(
        store=InMemoryMarketStore(),
        aggregator=aggregator,
        teller=teller,
        defaults=AuctionDefaults.from_settings(cfg),
        authorize=allow_admins(cfg.ADMIN_IDS),
        oracles={MANUAL_ORACLE: oracle},
        allow_new_markets=cfg.ALLOW_NEW_MARKETS,
    )
    logger.info("Auction engine ready: teller=%s defaults=%s", cfg.TELLER_ID, engine.defaults)
    return Container(
        engine=engine, aggregator=aggregator, oracle=oracle, teller=teller, clock=clock
    )


_container: Container | None = None


def get_container() -> Container:
    """FastAPI dependency returning the process-wide container."""
    global _container  # noqa: PLW0603
    if _container is None:
        _container = build_container(settings)
    return _container
