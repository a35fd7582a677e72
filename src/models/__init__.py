"""
Database models package.

This package contains SQLAlchemy ORM models for the swap proof journal.
"""

from src.core.database import Base
from src.models.swaps import SwapProof

__all__ = [
    "Base",
    "SwapProof",
]
