"""Domain models for bm_market - pure dataclasses, no business logic.

One MarketRecord per market id. Records are never deleted; a market whose
capacity is zero or whose conclusion has passed is simply inert.
"""

from dataclasses import dataclass, field

from src.bm_common.enums import PriceModel, VestingType


@dataclass
class Market:
    owner: str
    payout_token: str
    quote_token: str
    callback_addr: str | None
    capacity_in_quote: bool
    capacity: int           # remaining, in quote units if capacity_in_quote else payout units
    total_debt: int         # SDA only; debt as of metadata.last_decay
    min_price: int          # scale-formatted price floor
    max_payout: int         # payout units per purchase
    sold: int = 0           # payout units delivered
    purchased: int = 0      # quote units received
    scale: int = 10**36
    price_model: PriceModel = PriceModel.SDA


@dataclass
class Terms:
    control_variable: int
    max_debt: int
    start: int
    conclusion: int
    vesting: int
    vesting_type: VestingType = VestingType.FIXED_TERM
    duration: int = 0
    deposit_interval: int = 0
    # FPA
    fixed_price: int = 0
    # OFDA / OSDA
    oracle: str | None = None
    conversion: int = 0
    base_discount: int = 0  # OFDA fixed discount, OSDA base discount
    max_discount_from_current: int = 0
    decay_speed: int = 0


@dataclass
class Metadata:
    """SDA tuning state. lastDecay may run ahead of 'now' after large purchases."""

    last_tune: int
    last_decay: int
    length: int
    deposit_interval: int
    tune_interval: int
    tune_adjustment_delay: int
    debt_decay_interval: int
    tune_interval_capacity: int
    tune_below_capacity: int
    last_tune_debt: int


@dataclass
class Adjustment:
    """In-flight downward glide of the control variable."""

    change: int = 0
    last_adjustment: int = 0
    time_to_adjusted: int = 0
    active: bool = False


@dataclass
class MarketRecord:
    id: int
    market: Market
    terms: Terms
    metadata: Metadata | None = None
    adjustment: Adjustment = field(default_factory=Adjustment)
    pending_owner: str | None = None


@dataclass(frozen=True)
class MarketInfoForPurchase:
    owner: str
    callback_addr: str | None
    payout_token: str
    quote_token: str
    vesting: int
    max_payout: int


@dataclass(frozen=True)
class AuctionEvent:
    """Append-only audit entry for every state transition."""

    event_type: str
    market_id: int | None
    timestamp: int
    payload: dict = field(default_factory=dict)
