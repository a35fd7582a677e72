"""
API module containing FastAPI routes and endpoints.

This module provides the main API router that includes all sub-routers
for the trading floor domains (world, agents, intents, swaps, governance,
on-chain rewards, metrics).
"""

from fastapi import APIRouter

from src.api.routes import (
    agents,
    governance,
    intents,
    metrics,
    onchain,
    swaps,
    world,
)

router = APIRouter()

# Include all route modules
router.include_router(world.router, prefix="", tags=["World"])
router.include_router(agents.router, prefix="/agents", tags=["Agents"])
router.include_router(intents.router, prefix="/intents", tags=["Intents"])
router.include_router(swaps.router, prefix="/swaps", tags=["Swaps"])
router.include_router(governance.router, prefix="/governance", tags=["Governance"])
router.include_router(onchain.router, prefix="/onchain", tags=["On-chain"])
router.include_router(metrics.router, prefix="", tags=["Monitoring"])

__all__ = ["router"]
