"""bm_market REST endpoints.

POST /markets                           - create (body discriminated on price_model)
GET  /markets/{market_id}               - stored state + live price/debt
GET  /markets/{market_id}/payout        - payout quote for an amount, after fees
GET  /markets/{market_id}/max-amount    - largest quote amount accepted
POST /markets/{market_id}/purchase      - teller only
POST /markets/{market_id}/close         - owner only
PUT  /markets/{market_id}/intervals     - owner only, SDA markets
POST /markets/{market_id}/ownership     - owner nominates a new owner
POST /markets/{market_id}/ownership/accept - pending owner accepts
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status

from src.bm_auction.application.container import Container, get_container
from src.bm_common.response import ApiResponse, success_response
from src.bm_gateway.auth.dependencies import get_caller
from src.bm_market.application.schemas import (
    CreateMarketRequest,
    IntervalsRequest,
    OwnershipRequest,
    PurchaseRequest,
)

router = APIRouter(prefix="/markets", tags=["markets"])


def _respond(request: Request, data: object, message: str | None = None) -> ApiResponse:
    resp = success_response(data)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    if message is not None:
        resp.message = message
    return resp


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_market(
    request: Request,
    body: CreateMarketRequest,
    caller: Annotated[str, Depends(get_caller)],
    container: Annotated[Container, Depends(get_container)],
) -> ApiResponse:
    result = await container.markets.create_market(caller, body.to_params())
    return _respond(request, result.model_dump(), "Market created")


@router.get("/{market_id}")
async def get_market(
    market_id: int,
    request: Request,
    caller: Annotated[str, Depends(get_caller)],
    container: Annotated[Container, Depends(get_container)],
) -> ApiResponse:
    result = await container.markets.get_market(market_id)
    return _respond(request, result.model_dump())


@router.get("/{market_id}/payout")
async def get_payout(
    market_id: int,
    request: Request,
    caller: Annotated[str, Depends(get_caller)],
    container: Annotated[Container, Depends(get_container)],
    amount: int = Query(..., gt=0, description="Quote amount in base units"),
    referrer: str | None = Query(None),
) -> ApiResponse:
    result = await container.markets.payout_for(market_id, amount, referrer)
    return _respond(request, result.model_dump())


@router.get("/{market_id}/max-amount")
async def get_max_amount(
    market_id: int,
    request: Request,
    caller: Annotated[str, Depends(get_caller)],
    container: Annotated[Container, Depends(get_container)],
    referrer: str | None = Query(None),
) -> ApiResponse:
    result = await container.markets.max_amount_accepted(market_id, referrer)
    return _respond(request, result.model_dump())


@router.post("/{market_id}/purchase")
async def purchase(
    market_id: int,
    request: Request,
    body: PurchaseRequest,
    caller: Annotated[str, Depends(get_caller)],
    container: Annotated[Container, Depends(get_container)],
) -> ApiResponse:
    result = await container.markets.purchase(
        caller, market_id, body.amount, body.min_amount_out
    )
    return _respond(request, result.model_dump())


@router.post("/{market_id}/close")
async def close_market(
    market_id: int,
    request: Request,
    caller: Annotated[str, Depends(get_caller)],
    container: Annotated[Container, Depends(get_container)],
) -> ApiResponse:
    result = await container.markets.close_market(caller, market_id)
    return _respond(request, result.model_dump(), "Market closed")


@router.put("/{market_id}/intervals")
async def set_intervals(
    market_id: int,
    request: Request,
    body: IntervalsRequest,
    caller: Annotated[str, Depends(get_caller)],
    container: Annotated[Container, Depends(get_container)],
) -> ApiResponse:
    await container.markets.set_intervals(
        caller,
        market_id,
        body.tune_interval,
        body.tune_adjustment_delay,
        body.debt_decay_interval,
    )
    return _respond(request, body.model_dump())


@router.post("/{market_id}/ownership")
async def push_ownership(
    market_id: int,
    request: Request,
    body: OwnershipRequest,
    caller: Annotated[str, Depends(get_caller)],
    container: Annotated[Container, Depends(get_container)],
) -> ApiResponse:
    await container.markets.push_ownership(caller, market_id, body.new_owner)
    return _respond(request, {"market_id": market_id, "pending_owner": body.new_owner})


@router.post("/{market_id}/ownership/accept")
async def pull_ownership(
    market_id: int,
    request: Request,
    caller: Annotated[str, Depends(get_caller)],
    container: Annotated[Container, Depends(get_container)],
) -> ApiResponse:
    await container.markets.pull_ownership(caller, market_id)
    return _respond(request, {"market_id": market_id, "owner": caller})
