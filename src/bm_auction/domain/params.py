"""Market creation parameters, one dataclass per price model.

Prices are "formatted": quote per payout, adjusted for token decimals and
multiplied by the market scale, so that payout = amount * scale / price.
"""

from dataclasses import dataclass

from src.bm_common.enums import PriceModel, VestingType


@dataclass(frozen=True, kw_only=True)
class MarketParams:
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
    start: int = 0  # 0 = now

    price_model = PriceModel.SDA


@dataclass(frozen=True, kw_only=True)
class SDAMarketParams(MarketParams):
    formatted_initial_price: int
    formatted_minimum_price: int
    debt_buffer: int
    scale_adjustment: int = 0

    price_model = PriceModel.SDA


@dataclass(frozen=True, kw_only=True)
class FixedPriceMarketParams(MarketParams):
    formatted_price: int
    scale_adjustment: int = 0

    price_model = PriceModel.FPA


@dataclass(frozen=True, kw_only=True)
class OFDAMarketParams(MarketParams):
    oracle: str
    fixed_discount: int
    max_discount_from_current: int

    price_model = PriceModel.OFDA


@dataclass(frozen=True, kw_only=True)
class OSDAMarketParams(MarketParams):
    oracle: str
    base_discount: int
    max_discount_from_current: int
    target_interval_discount: int

    price_model = PriceModel.OSDA
