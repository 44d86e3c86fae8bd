"""Aggregator REST endpoints.

GET /aggregator/markets - market ids for a token pair
GET /aggregator/best    - live market paying the most for an amount
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from src.bm_auction.application.container import Container, get_container
from src.bm_common.response import ApiResponse, success_response
from src.bm_gateway.auth.dependencies import get_caller

router = APIRouter(prefix="/aggregator", tags=["aggregator"])


@router.get("/markets")
async def list_markets(
    request: Request,
    caller: Annotated[str, Depends(get_caller)],
    container: Annotated[Container, Depends(get_container)],
    payout_token: str = Query(...),
    quote_token: str = Query(...),
    live: bool = Query(False, description="Only markets open for purchase"),
) -> ApiResponse:
    result = await container.aggregator_queries.list_markets(payout_token, quote_token, live)
    resp = success_response(result)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/best")
async def find_best_market(
    request: Request,
    caller: Annotated[str, Depends(get_caller)],
    container: Annotated[Container, Depends(get_container)],
    payout_token: str = Query(...),
    quote_token: str = Query(...),
    amount_in: int = Query(..., gt=0),
    min_amount_out: int = Query(0, ge=0),
    max_expiry: int = Query(..., ge=0, description="Latest acceptable vesting timestamp"),
) -> ApiResponse:
    result = await container.aggregator_queries.find_best(
        payout_token, quote_token, amount_in, min_amount_out, max_expiry
    )
    resp = success_response(result)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
