"""
Swap proof recording.

Builds an integrity proof for every settled swap and appends it to the proof
journal. The proof payload is hashed with SHA-256; the first 16 hex digits
identify the swap in the compact memo, which is small enough to inscribe in
an on-chain memo later.
"""

import hashlib
import json
import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.models.swaps import SwapProof
from src.schemas.trading import SwapRecord

logger = logging.getLogger(__name__)

PROTOCOL = "agentswaps"
PROOF_VERSION = "0.1.0"
MEMO_VERSION = "0.1"


def _compact(data: dict[str, Any]) -> str:
    return json.dumps(data, separators=(",", ":"))


def build_proof(swap: SwapRecord) -> dict[str, Any]:
    return {
        "protocol": PROTOCOL,
        "version": PROOF_VERSION,
        "swap_id": swap.id,
        "agent_a": swap.agent_a,
        "agent_b": swap.agent_b,
        "give_a": f"{swap.give_a.amount} {swap.give_a.token.value}",
        "give_b": f"{swap.give_b.amount} {swap.give_b.token.value}",
        "volume_usd": str(swap.volume_usd),
        "executed_at": swap.executed_at.isoformat(),
    }


def swap_hash(proof: dict[str, Any]) -> str:
    return hashlib.sha256(_compact(proof).encode("utf-8")).hexdigest()[:16]


def build_memo(swap: SwapRecord, proof_hash: str) -> str:
    return _compact({
        "p": PROTOCOL,
        "v": MEMO_VERSION,
        "id": swap.id[:8],
        "a": swap.agent_a,
        "b": swap.agent_b,
        "ga": f"{swap.give_a.amount}{swap.give_a.token.value}",
        "gb": f"{swap.give_b.amount}{swap.give_b.token.value}",
        "vol": round(swap.volume_usd),
        "h": proof_hash,
        "t": int(swap.executed_at.timestamp()),
    })


class SwapProofRecorder:
    """Writes swap proofs to the journal database."""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        self.session_maker = session_maker

    async def record_swap(self, swap: SwapRecord) -> dict[str, Any]:
        """
        Append a proof row for ``swap``.

        Returns:
            ``{"reference", "swap_hash", "memo"}`` where ``reference`` is the
            journal row id; on a database failure ``reference`` is None and
            ``error`` says why
        """
        proof = build_proof(swap)
        proof_hash = swap_hash(proof)
        memo = build_memo(swap, proof_hash)

        try:
            reference = await self._insert(swap, proof, proof_hash, memo)
        except SQLAlchemyError as e:
            logger.error(f"Failed to record proof for swap {swap.id}: {e}")
            return {"reference": None, "swap_hash": proof_hash, "memo": memo, "error": str(e)}

        logger.info(f"Swap {swap.id[:8]} proof recorded: {proof_hash}")
        return {"reference": reference, "swap_hash": proof_hash, "memo": memo}

    async def _insert(self, swap: SwapRecord, proof: dict[str, Any], proof_hash: str, memo: str) -> str:
        async with self.session_maker() as session:
            row = SwapProof(
                swap_id=swap.id,
                agent_a=swap.agent_a,
                agent_b=swap.agent_b,
                volume_usd=float(swap.volume_usd),
                swap_hash=proof_hash,
                payload=_compact(proof),
                memo=memo,
            )
            session.add(row)
            await session.commit()
            return row.id

    async def list_for_swap(self, swap_id: str) -> list[SwapProof]:
        async with self.session_maker() as session:
            result = await session.execute(
                select(SwapProof).where(SwapProof.swap_id == swap_id).order_by(SwapProof.created_at)
            )
            return list(result.scalars().all())
