"""
Swap history API routes.
"""

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from src.api.dependencies import encode, get_proof_recorder, get_trading_floor, result_response
from src.core.constants import SWAP_HISTORY_DEFAULT_LIMIT
from src.services.proof_service import SwapProofRecorder
from src.services.trading_floor import TradingFloor

router = APIRouter()


@router.get(
    "",
    summary="Swap history",
    description="Settled swaps, most recent first.",
)
def list_swaps(
    limit: int = Query(default=SWAP_HISTORY_DEFAULT_LIMIT, ge=1, le=1000),
    floor: TradingFloor = Depends(get_trading_floor),
) -> JSONResponse:
    return JSONResponse(content=encode(floor.get_swap_history(limit)))


@router.get("/{swap_id}", summary="Get swap")
def get_swap(swap_id: str, floor: TradingFloor = Depends(get_trading_floor)) -> JSONResponse:
    return result_response(floor.get_swap(swap_id))


@router.get(
    "/{swap_id}/proof",
    summary="Swap proofs",
    description="Journal entries recorded for a swap.",
)
async def get_swap_proofs(
    swap_id: str,
    recorder: SwapProofRecorder = Depends(get_proof_recorder),
) -> JSONResponse:
    proofs = await recorder.list_for_swap(swap_id)
    return JSONResponse(content=encode({
        "swap_id": swap_id,
        "proofs": [
            {
                "reference": proof.id,
                "swap_hash": proof.swap_hash,
                "memo": proof.memo,
                "created_at": proof.created_at,
            }
            for proof in proofs
        ],
    }))
