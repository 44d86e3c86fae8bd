"""Global enums shared by the engine and the HTTP layer."""

from enum import Enum


class PriceModel(str, Enum):
    """Price source of a market, fixed at creation."""
    SDA = "SDA"    # sequential dutch auction: debt-decayed price
    OFDA = "OFDA"  # oracle price with a fixed discount
    OSDA = "OSDA"  # oracle price with a capacity-vs-time discount
    FPA = "FPA"    # static fixed price


class VestingType(str, Enum):
    FIXED_TERM = "FIXED_TERM"      # vesting is a duration from purchase
    FIXED_EXPIRY = "FIXED_EXPIRY"  # vesting is an absolute timestamp


class AuctionEventType(str, Enum):
    MARKET_CREATED = "MARKET_CREATED"
    MARKET_CLOSED = "MARKET_CLOSED"
    TUNED = "TUNED"
    BOND_PURCHASED = "BOND_PURCHASED"
    OWNERSHIP_PUSHED = "OWNERSHIP_PUSHED"
    OWNERSHIP_PULLED = "OWNERSHIP_PULLED"
    INTERVALS_UPDATED = "INTERVALS_UPDATED"
    DEFAULTS_UPDATED = "DEFAULTS_UPDATED"
    ALLOW_NEW_MARKETS_UPDATED = "ALLOW_NEW_MARKETS_UPDATED"
    CALLBACK_AUTH_UPDATED = "CALLBACK_AUTH_UPDATED"


class Capability(str, Enum):
    """Admin capabilities checked through the injected authorization gate."""
    SET_DEFAULTS = "SET_DEFAULTS"
    SET_ALLOW_NEW_MARKETS = "SET_ALLOW_NEW_MARKETS"
    SET_CALLBACK_AUTH = "SET_CALLBACK_AUTH"
    SET_ORACLE_PRICE = "SET_ORACLE_PRICE"
