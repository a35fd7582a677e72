"""
On-chain API routes.

Reward distributor status, read-only contract state from Base and wallet
balances.
"""

import asyncio

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from src.api.dependencies import get_chain_reader, get_reward_distributor
from src.services.chain_state_service import BaseChainReader
from src.services.reward_service import OnChainRewardDistributor

router = APIRouter()


@router.get(
    "/status",
    summary="Reward distributor status",
    description="Initialization state, deployer address, contracts and reward counters.",
)
def get_status(distributor: OnChainRewardDistributor = Depends(get_reward_distributor)) -> JSONResponse:
    return JSONResponse(content=distributor.status())


@router.get(
    "/state",
    summary="Contract state",
    description="Token pools, halving epoch, settler order counters and DAO parameters read from Base.",
)
async def get_state(reader: BaseChainReader = Depends(get_chain_reader)) -> JSONResponse:
    state = await reader.get_state()
    if state is None:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"error": "Base chain not connected"},
        )
    return JSONResponse(content=state)


@router.get("/contracts", summary="Deployed contract addresses")
def get_contracts(reader: BaseChainReader = Depends(get_chain_reader)) -> JSONResponse:
    return JSONResponse(content=reader.contracts())


@router.get("/balance/{address}", summary="On-chain $SWAP and ETH balances")
async def get_balance(
    address: str,
    distributor: OnChainRewardDistributor = Depends(get_reward_distributor),
    reader: BaseChainReader = Depends(get_chain_reader),
) -> JSONResponse:
    balance, eth = await asyncio.gather(
        distributor.get_swap_balance(address),
        reader.get_eth_balance(address),
    )
    return JSONResponse(content={"address": address, "balance": balance, "token": "$SWAP", "eth": eth})
