"""
$SWAP governance API routes.
"""

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from src.api.dependencies import encode, get_governance, result_response
from src.services.governance_service import GovernanceService

router = APIRouter()


class CreateProposalRequest(BaseModel):
    agent: str
    title: str = ""
    description: str = ""
    options: list[str] = Field(default_factory=list, description="Vote options, at least two")


class VoteRequest(BaseModel):
    agent: str
    option_index: int


@router.get("/tokenomics", summary="Tokenomics")
def get_tokenomics(governance: GovernanceService = Depends(get_governance)) -> JSONResponse:
    return JSONResponse(content=encode(governance.get_tokenomics()))


@router.get("/proposals", summary="List proposals")
def list_proposals(governance: GovernanceService = Depends(get_governance)) -> JSONResponse:
    return JSONResponse(content=encode(governance.get_proposals()))


@router.post("/proposals", summary="Create proposal")
def create_proposal(
    body: CreateProposalRequest,
    governance: GovernanceService = Depends(get_governance),
) -> JSONResponse:
    result = governance.create_proposal(body.agent, body.title, body.description, body.options)
    return result_response(result, success_status=status.HTTP_201_CREATED)


@router.post("/proposals/{proposal_id}/vote", summary="Vote on proposal")
def vote(
    proposal_id: str,
    body: VoteRequest,
    governance: GovernanceService = Depends(get_governance),
) -> JSONResponse:
    return result_response(governance.vote(body.agent, proposal_id, body.option_index))


@router.get("/balance/{agent}", summary="$SWAP balance")
def get_balance(agent: str, governance: GovernanceService = Depends(get_governance)) -> JSONResponse:
    return JSONResponse(content={
        "agent": agent,
        "balance": governance.get_token_balance(agent),
        "token": "$SWAP",
    })
