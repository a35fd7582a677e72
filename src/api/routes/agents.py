"""
Agent API routes.

Registration, agent snapshots and deposits.
"""

from decimal import Decimal
from typing import Any

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from src.api.dependencies import get_trading_floor, result_response
from src.services.trading_floor import TradingFloor

router = APIRouter()


class RegisterAgentRequest(BaseModel):
    """Request body for entering the trading floor."""

    name: str = Field(..., min_length=1, max_length=100)
    wallet_address: str | None = Field(default=None, description="Base wallet for on-chain rewards")
    metadata: dict[str, Any] = Field(default_factory=dict)


class DepositRequest(BaseModel):
    """Request body for a deposit."""

    token: str = Field(..., description="Token symbol, e.g. USDC")
    amount: Decimal


@router.post(
    "",
    summary="Register agent",
    description="Register an agent with zero balances in every supported token.",
)
def register_agent(
    body: RegisterAgentRequest,
    floor: TradingFloor = Depends(get_trading_floor),
) -> JSONResponse:
    result = floor.register_agent(body.name, body.wallet_address, body.metadata)
    return result_response(result, success_status=status.HTTP_201_CREATED)


@router.get(
    "/{name}",
    summary="Get agent",
    description="Agent record with free and escrowed balances.",
)
def get_agent(name: str, floor: TradingFloor = Depends(get_trading_floor)) -> JSONResponse:
    return result_response(floor.get_agent(name))


@router.post(
    "/{name}/deposit",
    summary="Deposit",
    description="Credit tokens to the agent's free balance.",
)
def deposit(
    name: str,
    body: DepositRequest,
    floor: TradingFloor = Depends(get_trading_floor),
) -> JSONResponse:
    return result_response(floor.deposit(name, body.token, body.amount))
