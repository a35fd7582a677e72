"""
Pytest configuration and shared fixtures.

This module provides common test fixtures for trading floors, funded
agents, the proof journal database and HTTP test clients.
"""

from collections.abc import AsyncGenerator
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from src.core.config import Settings
from src.core.database import Base, create_session_maker
from src.services.governance_service import GovernanceService
from src.services.trading_floor import TradingFloor

# Test database URL (in-memory SQLite for tests)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
def floor_settings() -> Settings:
    """Settings with every outbound collaborator switched off."""
    return Settings(
        database_url=TEST_DATABASE_URL,
        deployer_private_key=None,
        price_refresh_enabled=False,
        alert_webhook_url=None,
        onchain_state_enabled=False,
    )


@pytest.fixture
def governance() -> GovernanceService:
    return GovernanceService()


@pytest.fixture
def floor(floor_settings, governance) -> TradingFloor:
    return TradingFloor(floor_settings, governance=governance)


@pytest.fixture
def funded_floor(floor) -> TradingFloor:
    """Floor with alice holding 1000 USDC and bob holding 1 ETH."""
    floor.register_agent("alice", wallet_address="0x" + "a" * 40)
    floor.register_agent("bob", wallet_address="0x" + "b" * 40)
    floor.deposit("alice", "USDC", Decimal("1000"))
    floor.deposit("bob", "ETH", Decimal("1"))
    return floor


@pytest.fixture
async def async_engine():
    """Create a test database engine with the journal tables."""
    from src.models import swaps  # noqa: F401

    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def session_maker(async_engine):
    return create_session_maker(async_engine)


@pytest.fixture
def price_oracle() -> MagicMock:
    oracle = MagicMock()
    oracle.fetch_prices = AsyncMock(return_value={})
    oracle.close = AsyncMock()
    return oracle


@pytest.fixture
def api_app(floor_settings, session_maker, price_oracle):
    """The application with a fresh trading floor installed on its state."""
    from src.main import app, install_trading_floor

    install_trading_floor(app, floor_settings, session_maker=session_maker)
    app.state.price_oracle = price_oracle
    return app


@pytest.fixture
async def client(api_app) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP test client."""
    async with AsyncClient(transport=ASGITransport(app=api_app), base_url="http://test") as ac:
        yield ac
