"""
Core module containing configuration, errors and database wiring.

This module provides:
    - config: Application settings and environment variable management
    - database: Async engine and sessions for the swap proof journal
"""

from src.core.config import settings
from src.core.database import Base, engine, get_db

__all__ = ["settings", "get_db", "engine", "Base"]
