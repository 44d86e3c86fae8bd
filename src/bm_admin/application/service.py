"""Admin application service: protocol-wide switches and the manual oracle feed."""

from collections.abc import Callable
from dataclasses import asdict

from src.bm_admin.application.schemas import DefaultsRequest
from src.bm_auction.domain.defaults import AuctionDefaults
from src.bm_auction.engine.engine import AuctionEngine
from src.bm_common.datetime_utils import unix_now
from src.bm_common.enums import Capability
from src.bm_oracle.infrastructure.manual_oracle import ManualOracle


class AdminService:
    def __init__(
        self,
        engine: AuctionEngine,
        oracle: ManualOracle,
        clock: Callable[[], int] = unix_now,
    ) -> None:
        self._engine = engine
        self._oracle = oracle
        self._clock = clock

    async def set_defaults(self, caller: str, body: DefaultsRequest) -> dict:
        self._engine.require_capability(caller, Capability.SET_DEFAULTS)
        defaults = AuctionDefaults(**body.model_dump())
        self._engine.set_defaults(caller, defaults, self._clock())
        return asdict(self._engine.defaults)

    async def get_defaults(self) -> dict:
        return {
            **asdict(self._engine.defaults),
            "allow_new_markets": self._engine.allow_new_markets,
        }

    async def set_allow_new_markets(self, caller: str, allowed: bool) -> dict:
        self._engine.set_allow_new_markets(caller, allowed, self._clock())
        return {"allow_new_markets": self._engine.allow_new_markets}

    async def set_callback_auth(self, caller: str, address: str, status: bool) -> dict:
        self._engine.set_callback_auth_status(caller, address, status, self._clock())
        return {"address": address, "authorized": self._engine.is_callback_authorized(address)}

    async def set_oracle_price(
        self, caller: str, payout_token: str, quote_token: str, price: int
    ) -> dict:
        self._engine.require_capability(caller, Capability.SET_ORACLE_PRICE)
        now = self._clock()
        self._oracle.set_price(payout_token, quote_token, price, now)
        return {
            "payout_token": payout_token,
            "quote_token": quote_token,
            "price": price,
            "updated_at": now,
        }
