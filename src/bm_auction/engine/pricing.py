"""Market price per price model.

SDA:  control_variable * debt / scale
FPA:  the fixed price
OFDA: oracle price * conversion * (1 - fixed discount)
OSDA: oracle price * conversion * (1 - base discount) * capacity adjustment

All results are floored at the market's min_price and rounded up (the
buyer pays).
"""

from src.bm_auction.engine.debt import current_control_variable, current_debt, debt_price
from src.bm_common.enums import PriceModel
from src.bm_common.errors import InvalidParamsError, OraclePriceZeroError
from src.bm_common.fixed_point import (
    ONE_HUNDRED_PERCENT,
    count_decimals,
    mul_div,
    mul_div_up,
    pow10,
)
from src.bm_market.domain.models import Market, MarketRecord, Terms
from src.bm_oracle.domain.oracle import OracleProtocol


def _floor_at_min(price: int, min_price: int) -> int:
    return price if price > min_price else min_price


def oracle_price(oracle: OracleProtocol, market_id: int, now: int) -> int:
    price = oracle.current_price(market_id, now)
    if price == 0:
        raise OraclePriceZeroError(market_id)
    return price


def discounted_oracle_price(raw_price: int, conversion: int, discount: int) -> int:
    """raw_price * conversion * (1e5 - discount) / 1e5, rounded up."""
    return mul_div_up(raw_price * conversion, ONE_HUNDRED_PERCENT - discount, ONE_HUNDRED_PERCENT)


def oracle_scale(
    raw_price: int,
    oracle_decimals: int,
    payout_decimals: int,
    quote_decimals: int,
) -> tuple[int, int]:
    """Derive (scale, conversion) for an oracle-priced market.

    The scale adjustment keeps formatted prices near 1e36 whatever the
    magnitude of the oracle price; conversion turns a raw oracle price
    into a formatted price.
    """
    price_decimals = count_decimals(raw_price) - oracle_decimals
    # Round half the price decimals toward zero
    half_price_decimals = int(price_decimals / 2)
    scale_adjustment = payout_decimals - quote_decimals - half_price_decimals
    if abs(scale_adjustment) > 24:
        raise InvalidParamsError(f"derived scale adjustment {scale_adjustment} out of range")
    conversion_exponent = 36 + scale_adjustment + quote_decimals - payout_decimals - oracle_decimals
    if conversion_exponent < 0:
        raise InvalidParamsError(f"oracle decimals {oracle_decimals} too large for this pair")
    return pow10(36 + scale_adjustment), pow10(conversion_exponent)


def capacity_adjustment(market: Market, terms: Terms, now: int) -> int:
    """OSDA price multiplier in 1e5 units.

    P(t) = P(0) * (1 + k * (X(t) - C(t)) / C(0))
      X(t): capacity expected to remain at t if selling were linear
      C(t): actual remaining capacity, C(0): initial capacity
      k:    decay_speed = duration / deposit_interval * target interval discount
    Oversold (X > C) raises price; undersold lowers it, never below zero.
    """
    initial_capacity = market.capacity + (
        market.purchased if market.capacity_in_quote else market.sold
    )
    if initial_capacity == 0:
        return ONE_HUNDRED_PERCENT
    time_remaining = min(max(terms.conclusion - now, 0), terms.duration)
    expected_capacity = mul_div(initial_capacity, time_remaining, terms.duration)
    if expected_capacity > market.capacity:
        return ONE_HUNDRED_PERCENT + mul_div(
            terms.decay_speed, expected_capacity - market.capacity, initial_capacity
        )
    factor = mul_div(terms.decay_speed, market.capacity - expected_capacity, initial_capacity)
    return ONE_HUNDRED_PERCENT - factor if factor < ONE_HUNDRED_PERCENT else 0


def market_price(record: MarketRecord, now: int, oracle: OracleProtocol | None = None) -> int:
    """Current price of a market without mutating it."""
    market, terms = record.market, record.terms
    model = market.price_model

    if model == PriceModel.SDA:
        assert record.metadata is not None
        control_variable = current_control_variable(terms, record.adjustment, now)
        debt = current_debt(market, terms, record.metadata, now)
        return debt_price(control_variable, debt, market.scale, market.min_price)

    if model == PriceModel.FPA:
        return _floor_at_min(terms.fixed_price, market.min_price)

    if oracle is None:
        raise InvalidParamsError(f"market {record.id} requires oracle {terms.oracle}")
    raw = oracle_price(oracle, record.id, now)

    if model == PriceModel.OFDA:
        price = discounted_oracle_price(raw, terms.conversion, terms.base_discount)
        return _floor_at_min(price, market.min_price)

    base = discounted_oracle_price(raw, terms.conversion, terms.base_discount)
    price = mul_div_up(base, capacity_adjustment(market, terms, now), ONE_HUNDRED_PERCENT)
    return _floor_at_min(price, market.min_price)
