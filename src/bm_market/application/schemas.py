"""Pydantic schemas for bm_market API requests and responses.

All amounts are integers in token base units; prices are scale-formatted
(payout = amount * scale / price). Creation requests map one-to-one onto
the engine's frozen param dataclasses.
"""

from typing import Annotated, ClassVar, Literal

from pydantic import BaseModel, Field

from src.bm_auction.domain.params import (
    FixedPriceMarketParams,
    MarketParams,
    OFDAMarketParams,
    OSDAMarketParams,
    SDAMarketParams,
)
from src.bm_common.enums import VestingType
from src.bm_market.domain.models import MarketRecord

# ---------------------------------------------------------------------------
# Create market
# ---------------------------------------------------------------------------


class _CreateMarketBase(BaseModel):
    payout_token: str
    quote_token: str
    payout_decimals: int
    quote_decimals: int
    capacity: int
    duration: int
    deposit_interval: int
    vesting: int = 0
    vesting_type: VestingType = VestingType.FIXED_TERM
    capacity_in_quote: bool = False
    callback_addr: str | None = None
    start: int = Field(0, description="Unix seconds; 0 opens the market immediately")

    params_cls: ClassVar[type[MarketParams]] = MarketParams

    def to_params(self) -> MarketParams:
        return self.params_cls(**self.model_dump(exclude={"price_model"}))


class CreateSDAMarketRequest(_CreateMarketBase):
    price_model: Literal["SDA"]
    formatted_initial_price: int
    formatted_minimum_price: int
    debt_buffer: int = Field(..., description="1e5 = 100%")
    scale_adjustment: int = 0

    params_cls: ClassVar[type[MarketParams]] = SDAMarketParams


class CreateFixedPriceMarketRequest(_CreateMarketBase):
    price_model: Literal["FPA"]
    formatted_price: int
    scale_adjustment: int = 0

    params_cls: ClassVar[type[MarketParams]] = FixedPriceMarketParams


class CreateOFDAMarketRequest(_CreateMarketBase):
    price_model: Literal["OFDA"]
    oracle: str = "manual"
    fixed_discount: int
    max_discount_from_current: int

    params_cls: ClassVar[type[MarketParams]] = OFDAMarketParams


class CreateOSDAMarketRequest(_CreateMarketBase):
    price_model: Literal["OSDA"]
    oracle: str = "manual"
    base_discount: int
    max_discount_from_current: int
    target_interval_discount: int

    params_cls: ClassVar[type[MarketParams]] = OSDAMarketParams


CreateMarketRequest = Annotated[
    CreateSDAMarketRequest
    | CreateFixedPriceMarketRequest
    | CreateOFDAMarketRequest
    | CreateOSDAMarketRequest,
    Field(discriminator="price_model"),
]


class CreateMarketResponse(BaseModel):
    market_id: int


# ---------------------------------------------------------------------------
# Purchase / owner operations
# ---------------------------------------------------------------------------


class PurchaseRequest(BaseModel):
    amount: int = Field(..., gt=0)
    min_amount_out: int = Field(0, ge=0)


class PurchaseResponse(BaseModel):
    market_id: int
    payout: int
    capacity: int
    is_live: bool


class IntervalsRequest(BaseModel):
    tune_interval: int
    tune_adjustment_delay: int
    debt_decay_interval: int


class OwnershipRequest(BaseModel):
    new_owner: str


# ---------------------------------------------------------------------------
# Market detail (stored state + live projections)
# ---------------------------------------------------------------------------


class MarketDetail(BaseModel):
    id: int
    price_model: str
    owner: str
    payout_token: str
    quote_token: str
    callback_addr: str | None
    capacity_in_quote: bool
    capacity: int
    sold: int
    purchased: int
    max_payout: int
    min_price: int
    scale: int
    start: int
    conclusion: int
    vesting: int
    vesting_type: str
    is_live: bool
    market_price: int | None
    current_debt: int
    current_control_variable: int
    max_debt: int

    @classmethod
    def from_record(
        cls,
        record: MarketRecord,
        *,
        is_live: bool,
        market_price: int | None,
        current_debt: int,
        current_control_variable: int,
    ) -> "MarketDetail":
        m, t = record.market, record.terms
        return cls(
            id=record.id,
            price_model=m.price_model.value,
            owner=m.owner,
            payout_token=m.payout_token,
            quote_token=m.quote_token,
            callback_addr=m.callback_addr,
            capacity_in_quote=m.capacity_in_quote,
            capacity=m.capacity,
            sold=m.sold,
            purchased=m.purchased,
            max_payout=m.max_payout,
            min_price=m.min_price,
            scale=m.scale,
            start=t.start,
            conclusion=t.conclusion,
            vesting=t.vesting,
            vesting_type=t.vesting_type.value,
            is_live=is_live,
            market_price=market_price,
            current_debt=current_debt,
            current_control_variable=current_control_variable,
            max_debt=t.max_debt,
        )


class PayoutQuote(BaseModel):
    market_id: int
    amount: int
    payout: int


class MaxAmountQuote(BaseModel):
    market_id: int
    max_amount_accepted: int
