"""Request/response schemas for admin endpoints."""

from pydantic import BaseModel, Field


class DefaultsRequest(BaseModel):
    tune_interval: int = Field(..., gt=0)
    tune_adjustment_delay: int = Field(..., gt=0)
    min_debt_decay_interval: int = Field(..., gt=0)
    min_deposit_interval: int = Field(..., gt=0)
    min_market_duration: int = Field(..., gt=0)
    max_debt_buffer: int = Field(..., ge=0)


class AllowNewMarketsRequest(BaseModel):
    allowed: bool


class CallbackAuthRequest(BaseModel):
    status: bool


class OraclePriceRequest(BaseModel):
    payout_token: str
    quote_token: str
    price: int = Field(..., ge=0, description="Quote per payout, in oracle decimals")
