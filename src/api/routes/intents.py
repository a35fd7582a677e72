"""
Intent API routes.

Posting an intent escrows the give amount and matches immediately; the
response is either the resting intent or the settled swap.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from src.api.dependencies import get_trading_floor, result_response
from src.services.trading_floor import TradingFloor

router = APIRouter()


class GiveRequest(BaseModel):
    token: str
    amount: Decimal


class WantRequest(BaseModel):
    token: str
    min_amount: Decimal | None = None
    max_slippage: Decimal | None = Field(default=None, description="Fraction, e.g. 0.01 for 1%")


class PostIntentRequest(BaseModel):
    """Request body for posting an intent."""

    agent: str
    give: GiveRequest
    want: WantRequest
    expires_at: datetime | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


@router.post(
    "",
    summary="Post intent",
    description="Escrow the give amount and try to match against resting intents.",
)
def post_intent(
    body: PostIntentRequest,
    floor: TradingFloor = Depends(get_trading_floor),
) -> JSONResponse:
    options: dict[str, Any] = {"metadata": body.metadata}
    if body.expires_at is not None:
        options["expires_at"] = body.expires_at
    result = floor.post_intent(body.agent, body.give.model_dump(), body.want.model_dump(), options)
    return result_response(result, success_status=status.HTTP_201_CREATED)


@router.get(
    "",
    summary="List active intents",
    description="Active intents, optionally only those giving or wanting `token`.",
)
def list_intents(
    token: str | None = Query(default=None),
    floor: TradingFloor = Depends(get_trading_floor),
) -> JSONResponse:
    return result_response(floor.get_active_intents(token))


@router.get("/{intent_id}", summary="Get intent")
def get_intent(intent_id: str, floor: TradingFloor = Depends(get_trading_floor)) -> JSONResponse:
    return result_response(floor.get_intent(intent_id))


@router.delete(
    "/{intent_id}",
    summary="Cancel intent",
    description="Withdraw an active intent and release its escrow to the owner.",
)
def cancel_intent(
    intent_id: str,
    agent: str = Query(..., description="Owner of the intent"),
    floor: TradingFloor = Depends(get_trading_floor),
) -> JSONResponse:
    return result_response(floor.cancel_intent(agent, intent_id))
