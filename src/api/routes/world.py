"""
World view API routes.

Read-only views over the trading floor: world summary, leaderboard, the
event stream and the reference price table.
"""

import asyncio
from datetime import datetime

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from src.api.dependencies import encode, get_price_oracle, get_trading_floor
from src.core.constants import EVENTS_PAGE_LIMIT
from src.services.price_oracle import JupiterPriceOracle
from src.services.trading_floor import TradingFloor

router = APIRouter()


@router.get(
    "/world",
    summary="World state",
    description="Counters, prices, treasury, recent events and the top of the leaderboard.",
)
def get_world(floor: TradingFloor = Depends(get_trading_floor)) -> JSONResponse:
    return JSONResponse(content=encode(floor.get_world_state()))


@router.get(
    "/leaderboard",
    summary="Leaderboard",
    description="Top agents by USD volume.",
)
def get_leaderboard(floor: TradingFloor = Depends(get_trading_floor)) -> JSONResponse:
    return JSONResponse(content=encode(floor.get_leaderboard()))


@router.get(
    "/events",
    summary="World events",
    description="Most recent events, optionally only those after `since`.",
)
def get_events(
    since: datetime | None = Query(default=None, description="ISO timestamp; only newer events"),
    limit: int = Query(default=EVENTS_PAGE_LIMIT, ge=1, le=EVENTS_PAGE_LIMIT),
    floor: TradingFloor = Depends(get_trading_floor),
) -> JSONResponse:
    return JSONResponse(content=encode(floor.get_events(since=since, limit=limit)))


@router.get(
    "/prices",
    summary="Reference prices",
    description="Refresh prices from the oracle and return the current table.",
)
async def get_prices(
    floor: TradingFloor = Depends(get_trading_floor),
    oracle: JupiterPriceOracle | None = Depends(get_price_oracle),
) -> JSONResponse:
    """
    Live prices when the oracle answers, the current table otherwise.
    """
    if oracle is not None:
        prices = await oracle.fetch_prices(floor.supported_symbols())
        if prices:
            await asyncio.to_thread(floor.update_prices, prices)
    return JSONResponse(content=encode(await asyncio.to_thread(floor.get_prices)))
