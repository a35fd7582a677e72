"""
Swap proof journal models.

Each settled swap gets one proof row: the full proof payload, its integrity
hash and the compact memo form.
"""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import DateTime, Float, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from src.core.database import Base


class SwapProof(Base):
    """Integrity record for a settled swap."""

    __tablename__ = "swap_proofs"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    swap_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    agent_a: Mapped[str] = mapped_column(String(255), nullable=False)
    agent_b: Mapped[str] = mapped_column(String(255), nullable=False)
    volume_usd: Mapped[float] = mapped_column(Float, nullable=False)
    swap_hash: Mapped[str] = mapped_column(String(16), nullable=False)
    payload: Mapped[str] = mapped_column(Text, nullable=False)
    memo: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=func.now())

    def __repr__(self) -> str:
        return f"<SwapProof(id={self.id}, swap_id={self.swap_id}, hash='{self.swap_hash}')>"
