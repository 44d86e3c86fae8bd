"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Auth/Caller
  3xxx: Market
  4xxx: Purchase
  6xxx: Oracle
  9xxx: System
"""


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 1xxx: Auth/Caller ---

class UnauthorizedError(AppError):
    def __init__(self, detail: str = "Caller not authorized") -> None:
        super().__init__(1001, detail, 403)


class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1002, "Invalid or expired token", 401)


# --- 3xxx: Market ---

class MarketNotFoundError(AppError):
    def __init__(self, market_id: int) -> None:
        super().__init__(3001, f"Market not found: {market_id}", 404)


class MarketNotActiveError(AppError):
    def __init__(self, market_id: int) -> None:
        super().__init__(3002, f"Market is not active: {market_id}", 422)


class InvalidParamsError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(3003, f"Invalid params: {detail}", 400)


class NewMarketsNotAllowedError(AppError):
    def __init__(self) -> None:
        super().__init__(3004, "New markets are not allowed", 422)


# --- 4xxx: Purchase ---

class AmountLessThanMinimumError(AppError):
    def __init__(self, payout: int, min_amount_out: int) -> None:
        super().__init__(
            4001,
            f"Payout {payout} is less than minimum {min_amount_out}",
            422,
        )


class NotEnoughCapacityError(AppError):
    def __init__(self, required: int, capacity: int) -> None:
        super().__init__(
            4002,
            f"Not enough capacity: required {required}, remaining {capacity}",
            422,
        )


class MaxPayoutExceededError(AppError):
    def __init__(self, payout: int, max_payout: int) -> None:
        super().__init__(
            4003,
            f"Payout {payout} exceeds max payout {max_payout}",
            422,
        )


# --- 6xxx: Oracle ---

class OraclePriceZeroError(AppError):
    def __init__(self, market_id: int) -> None:
        super().__init__(6001, f"Oracle returned zero price for market {market_id}", 503)


class OraclePriceStaleError(AppError):
    def __init__(self, market_id: int, age: int) -> None:
        super().__init__(
            6002, f"Oracle price for market {market_id} is stale ({age}s old)", 503
        )


# --- 9xxx: System ---

class ArithmeticOverflowError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(9001, f"Arithmetic overflow: {detail}", 500)


class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)
