"""
Request dependencies and response helpers shared by the route modules.

The trading floor and its collaborators are built once in the application
lifespan and stored on ``app.state``.
"""

from decimal import Decimal
from typing import Any

from fastapi import Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from src.core.errors import status_for_result
from src.services.chain_state_service import BaseChainReader
from src.services.governance_service import GovernanceService
from src.services.price_oracle import JupiterPriceOracle
from src.services.proof_service import SwapProofRecorder
from src.services.reward_service import OnChainRewardDistributor
from src.services.trading_floor import TradingFloor


def get_trading_floor(request: Request) -> TradingFloor:
    return request.app.state.trading_floor


def get_governance(request: Request) -> GovernanceService:
    return request.app.state.governance


def get_reward_distributor(request: Request) -> OnChainRewardDistributor:
    return request.app.state.reward_distributor


def get_chain_reader(request: Request) -> BaseChainReader:
    return request.app.state.chain_reader


def get_price_oracle(request: Request) -> JupiterPriceOracle:
    return request.app.state.price_oracle


def get_proof_recorder(request: Request) -> SwapProofRecorder:
    return request.app.state.proof_recorder


def encode(content: Any) -> Any:
    """JSON-ready content; Decimals stay exact as strings."""
    return jsonable_encoder(content, custom_encoder={Decimal: str})


def result_response(result: dict[str, Any], success_status: int = status.HTTP_200_OK) -> JSONResponse:
    """
    Render a trading floor result.

    Failures keep their body and get the status mapped from their error code.
    """
    status_code = success_status if result.get("success") else status_for_result(result)
    return JSONResponse(status_code=status_code, content=encode(result))
