"""Teller fee schedule.

The teller settles purchases and takes a fee off the quote amount before
the auctioneer sees it. The auctioneer only needs the fee rate to project
payouts and maximum accepted amounts.

fee = floor(amount * (protocol_fee + referrer_fee) / 100_000)
"""

from typing import Protocol

from src.bm_common.errors import InvalidParamsError
from src.bm_common.fixed_point import ONE_HUNDRED_PERCENT

MAX_FEE: int = 5_000  # 5%


class TellerProtocol(Protocol):
    address: str

    def get_fee(self, referrer: str | None) -> int: ...


class FeeSchedule:
    """Protocol fee plus an optional per-referrer fee, both in 1e5 units."""

    def __init__(self, address: str, protocol_fee: int = 0) -> None:
        _check_fee(protocol_fee)
        self.address = address
        self.protocol_fee = protocol_fee
        self._referrer_fees: dict[str, int] = {}

    def set_referrer_fee(self, referrer: str, fee: int) -> None:
        _check_fee(fee)
        self._referrer_fees[referrer] = fee

    def get_fee(self, referrer: str | None) -> int:
        if referrer is None:
            return self.protocol_fee
        return self.protocol_fee + self._referrer_fees.get(referrer, 0)


def _check_fee(fee: int) -> None:
    if not (0 <= fee <= MAX_FEE):
        raise InvalidParamsError(f"fee {fee} not in [0, {MAX_FEE}] of {ONE_HUNDRED_PERCENT}")
