"""Admin REST API. Every endpoint is gated by an engine capability."""

from typing import Annotated

from fastapi import APIRouter, Depends

from src.bm_admin.application.schemas import (
    AllowNewMarketsRequest,
    CallbackAuthRequest,
    DefaultsRequest,
    OraclePriceRequest,
)
from src.bm_auction.application.container import Container, get_container
from src.bm_common.response import ApiResponse, success_response
from src.bm_gateway.auth.dependencies import get_caller

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/defaults")
async def get_defaults(
    caller: Annotated[str, Depends(get_caller)],
    container: Annotated[Container, Depends(get_container)],
) -> ApiResponse:
    return success_response(await container.admin.get_defaults())


@router.put("/defaults")
async def set_defaults(
    body: DefaultsRequest,
    caller: Annotated[str, Depends(get_caller)],
    container: Annotated[Container, Depends(get_container)],
) -> ApiResponse:
    return success_response(await container.admin.set_defaults(caller, body))


@router.put("/allow-new-markets")
async def set_allow_new_markets(
    body: AllowNewMarketsRequest,
    caller: Annotated[str, Depends(get_caller)],
    container: Annotated[Container, Depends(get_container)],
) -> ApiResponse:
    return success_response(await container.admin.set_allow_new_markets(caller, body.allowed))


@router.put("/callbacks/{address}")
async def set_callback_auth(
    address: str,
    body: CallbackAuthRequest,
    caller: Annotated[str, Depends(get_caller)],
    container: Annotated[Container, Depends(get_container)],
) -> ApiResponse:
    return success_response(await container.admin.set_callback_auth(caller, address, body.status))


@router.put("/oracle-prices")
async def set_oracle_price(
    body: OraclePriceRequest,
    caller: Annotated[str, Depends(get_caller)],
    container: Annotated[Container, Depends(get_container)],
) -> ApiResponse:
    result = await container.admin.set_oracle_price(
        caller, body.payout_token, body.quote_token, body.price
    )
    return success_response(result)
