"""Caller checks for every mutating engine operation.

Admin capabilities go through an injected predicate; market-owner and
teller checks compare identities directly.
"""

from collections.abc import Callable

from src.bm_common.enums import Capability
from src.bm_common.errors import UnauthorizedError
from src.bm_market.domain.models import MarketRecord

AuthorizePredicate = Callable[[str, Capability], bool]


def allow_admins(admin_ids: list[str]) -> AuthorizePredicate:
    """Predicate granting every capability to the listed callers."""
    admins = frozenset(admin_ids)

    def _authorize(caller: str, capability: Capability) -> bool:
        return caller in admins

    return _authorize


def check_capability(authorize: AuthorizePredicate, caller: str, capability: Capability) -> None:
    if not authorize(caller, capability):
        raise UnauthorizedError(f"{caller} lacks capability {capability.value}")


def check_teller(caller: str, teller_address: str) -> None:
    if caller != teller_address:
        raise UnauthorizedError("Only the registered teller may purchase bonds")


def check_market_owner(caller: str, record: MarketRecord) -> None:
    if caller != record.market.owner:
        raise UnauthorizedError(f"Only the owner of market {record.id} may do this")
