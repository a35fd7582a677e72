"""
AgentSwaps Trading Floor

Main FastAPI application entry point with OpenAPI documentation.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from src.api import router as api_router
from src.core.config import Settings, settings
from src.core.database import async_session_maker, close_db, init_db
from src.core.errors import (
    TradingFloorError,
    general_exception_handler,
    http_exception_handler,
    trading_floor_exception_handler,
)
from src.core.security import configure_secure_logging
from src.middleware.metrics import metrics_middleware
from src.services.chain_state_service import BaseChainReader
from src.services.governance_service import GovernanceService
from src.services.notification_service import NotificationDispatcher
from src.services.price_oracle import JupiterPriceOracle, PriceRefresher
from src.services.proof_service import SwapProofRecorder
from src.services.reward_service import OnChainRewardDistributor
from src.services.trading_floor import TradingFloor

configure_secure_logging(settings.log_level, settings.log_format)
logger = logging.getLogger(__name__)


def install_trading_floor(app: FastAPI, config: Settings, session_maker=async_session_maker) -> TradingFloor:
    """
    Build the trading floor and its collaborators and store them on ``app.state``.

    Nothing is started here; the lifespan starts the background workers.
    """
    governance = GovernanceService(
        reward_per_usd=config.reward_per_usd,
        voting_period_seconds=config.governance_voting_period_seconds,
    )
    reward_distributor = OnChainRewardDistributor(
        rpc_url=config.base_rpc_url,
        private_key=config.deployer_private_key,
        token_address=config.swap_token_address,
        base_reward_wei=config.base_reward_per_swap_wei,
        timeout_seconds=config.onchain_timeout_seconds,
    )
    proof_recorder = SwapProofRecorder(session_maker)
    dispatcher = NotificationDispatcher(
        reward_distributor=reward_distributor,
        proof_recorder=proof_recorder,
    )
    floor = TradingFloor(config, governance=governance, dispatcher=dispatcher)
    price_oracle = JupiterPriceOracle(
        api_url=config.price_oracle_url,
        timeout=config.price_oracle_timeout_seconds,
    )

    app.state.settings = config
    app.state.trading_floor = floor
    app.state.governance = governance
    app.state.reward_distributor = reward_distributor
    app.state.proof_recorder = proof_recorder
    app.state.dispatcher = dispatcher
    app.state.price_oracle = price_oracle
    app.state.chain_reader = BaseChainReader(
        rpc_url=config.base_rpc_url,
        enabled=config.onchain_state_enabled,
        cache_seconds=config.onchain_state_cache_seconds,
    )
    app.state.price_refresher = PriceRefresher(
        floor, price_oracle, interval_seconds=config.price_refresh_interval_seconds
    )
    return floor


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler for startup and shutdown events.
    """
    # Startup
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Debug mode: {settings.debug}")

    logger.info("Initializing swap proof journal...")
    try:
        await init_db()
        logger.info("Swap proof journal ready")
    except Exception as e:
        logger.warning(f"Swap proof journal unavailable: {e}")

    install_trading_floor(app, settings)

    if settings.onchain_enabled:
        await app.state.reward_distributor.initialize()
    else:
        logger.info("On-chain rewards disabled (no DEPLOYER_PRIVATE_KEY)")

    await app.state.dispatcher.start()
    if settings.price_refresh_enabled:
        app.state.price_refresher.start()

    yield

    # Shutdown
    logger.info("Shutting down...")
    await app.state.price_refresher.stop()
    await app.state.dispatcher.stop()
    await app.state.price_oracle.close()
    await close_db()
    logger.info("All connections closed")


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    description="""
## Off-chain matching and settlement for autonomous trading agents

Agents register, deposit tokens and post swap intents. Intents are escrowed
and matched immediately against reciprocal intents within slippage
tolerance of the reference prices; matches settle atomically with a fee on
each leg.

### Key Features

- **Intent matching**: greedy first-fit matching on reciprocal token pairs
- **Escrow**: posted amounts are held until filled, cancelled or expired
- **$SWAP governance**: usage rewards proportional to volume, proposals and voting
- **On-chain rewards**: optional $SWAP reward distribution on Base
- **Swap proofs**: integrity hash and memo for every settled swap
    """,
    version=settings.app_version,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add metrics middleware
app.middleware("http")(metrics_middleware)


# Global exception handlers
app.add_exception_handler(Exception, general_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(TradingFloorError, trading_floor_exception_handler)


# Health check endpoint
@app.get(
    "/health",
    tags=["Health"],
    summary="Health check",
    response_description="Application health status",
)
async def health_check() -> dict[str, Any]:
    """
    Check application health status.

    Returns basic health information including version and environment.
    """
    dispatcher = getattr(app.state, "dispatcher", None)
    return {
        "status": "healthy",
        "version": settings.app_version,
        "environment": settings.environment,
        "notifications_running": bool(dispatcher and dispatcher.running),
    }


# Include API routes
app.include_router(api_router, prefix="/api/v1")


# Root endpoint
@app.get(
    "/",
    tags=["Root"],
    summary="API root",
    include_in_schema=False,
)
async def root() -> dict[str, str]:
    """Root endpoint with API information."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs",
        "redoc": "/redoc",
        "openapi": "/openapi.json",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
