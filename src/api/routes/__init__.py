"""
API routes package.

This package contains all FastAPI route modules organized by domain.
"""

from . import agents, governance, intents, metrics, onchain, swaps, world

__all__ = ["world", "agents", "intents", "swaps", "governance", "onchain", "metrics"]
