"""AuctionDefaults - the tuning constants every new market is created with.

Immutable: an admin change builds a new instance and the engine swaps it in
(recording a DEFAULTS_UPDATED event), so a market being created never sees
a half-updated set.
"""

from dataclasses import dataclass

from config.settings import Settings
from src.bm_common.errors import InvalidParamsError


@dataclass(frozen=True)
class AuctionDefaults:
    tune_interval: int = 24 * 3600
    tune_adjustment_delay: int = 3600
    min_debt_decay_interval: int = 3 * 24 * 3600
    min_deposit_interval: int = 3600
    min_market_duration: int = 24 * 3600
    max_debt_buffer: int = 100_000

    def __post_init__(self) -> None:
        if (
            self.tune_interval <= 0
            or self.tune_adjustment_delay <= 0
            or self.min_debt_decay_interval <= 0
            or self.min_deposit_interval <= 0
            or self.min_market_duration <= 0
        ):
            raise InvalidParamsError("default intervals must be positive")
        if self.tune_adjustment_delay > self.tune_interval:
            raise InvalidParamsError("tune adjustment delay exceeds tune interval")
        if self.min_deposit_interval > self.min_market_duration:
            raise InvalidParamsError("min deposit interval exceeds min market duration")
        if self.max_debt_buffer < 0:
            raise InvalidParamsError("max debt buffer must be non-negative")

    @classmethod
    def from_settings(cls, settings: Settings) -> "AuctionDefaults":
        return cls(
            tune_interval=settings.DEFAULT_TUNE_INTERVAL,
            tune_adjustment_delay=settings.DEFAULT_TUNE_ADJUSTMENT,
            min_debt_decay_interval=settings.MIN_DEBT_DECAY_INTERVAL,
            min_deposit_interval=settings.MIN_DEPOSIT_INTERVAL,
            min_market_duration=settings.MIN_MARKET_DURATION,
            max_debt_buffer=settings.MAX_DEBT_BUFFER,
        )
