"""
Application configuration and settings management.

This module loads configuration from environment variables and provides
a centralized settings object for the entire application.
"""

from functools import lru_cache
from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from .constants import (
    BASE_REWARD_PER_SWAP_WEI,
    BASE_RPC_URL,
    CHAIN_STATE_CACHE_SECONDS,
    DEFAULT_APP_PORT,
    DEFAULT_ENTRY_FEE_USDC,
    DEFAULT_FEE_RATE,
    DEFAULT_MAX_SLIPPAGE,
    DEFAULT_SUPPORTED_TOKENS,
    DEFAULT_TOKEN_PRICES_USD,
    EVENT_LOG_LIMIT,
    GOVERNANCE_VOTING_PERIOD_SECONDS,
    INTENT_TTL_SECONDS,
    JUPITER_PRICE_API,
    LEADERBOARD_SIZE,
    PRICE_ORACLE_TIMEOUT_SECONDS,
    PRICE_REFRESH_INTERVAL_SECONDS,
    REPUTATION_INITIAL,
    REPUTATION_PER_SWAP,
    SWAP_REWARD_PER_USD,
    SWAP_TOKEN_ADDRESS,
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "AgentSwaps Trading Floor"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: str = Field(default="development", description="deployment environment")

    # API Server
    host: str = "0.0.0.0"
    port: int = DEFAULT_APP_PORT
    # NoDecode hands the raw env string to parse_cors_origins instead of json.loads
    cors_origins: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: ["http://localhost:3000", "http://localhost:8800"]
    )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: str | list[str]) -> list[str]:
        """Parse CORS origins from a comma-separated string or a list."""
        if isinstance(v, str):
            if not v.strip():
                return ["http://localhost:3000", "http://localhost:8800"]
            return [origin.strip() for origin in v.split(",")]
        return v

    # World economy
    fee_rate: float = Field(default=DEFAULT_FEE_RATE, ge=0, lt=1, description="fee fraction taken from each leg")
    entry_fee: float = DEFAULT_ENTRY_FEE_USDC
    supported_tokens: list[str] = Field(default_factory=lambda: list(DEFAULT_SUPPORTED_TOKENS))
    initial_token_prices: dict[str, float] = Field(default_factory=lambda: dict(DEFAULT_TOKEN_PRICES_USD))

    # Intents and matching
    intent_ttl_seconds: int = INTENT_TTL_SECONDS
    default_max_slippage: float = DEFAULT_MAX_SLIPPAGE
    enforce_intent_expiry: bool = Field(
        default=True,
        description="Skip and release intents whose expires_at has passed",
    )
    allow_fallback_match: bool = Field(
        default=True,
        description="Match the first reciprocal intent when none is within slippage tolerance",
    )

    # Reputation and world views
    reputation_initial: int = REPUTATION_INITIAL
    reputation_reward: int = REPUTATION_PER_SWAP
    event_log_limit: int = EVENT_LOG_LIMIT
    leaderboard_size: int = LEADERBOARD_SIZE

    # $SWAP governance
    reward_per_usd: int = SWAP_REWARD_PER_USD
    governance_voting_period_seconds: int = GOVERNANCE_VOTING_PERIOD_SECONDS

    # On-chain rewards (Base)
    base_rpc_url: str = Field(default=BASE_RPC_URL, description="Base JSON-RPC URL")
    swap_token_address: str = SWAP_TOKEN_ADDRESS
    base_reward_per_swap_wei: int = BASE_REWARD_PER_SWAP_WEI
    deployer_private_key: str | None = Field(
        default=None,
        description="Reward distributor key; rewards stay off-chain when unset",
    )
    onchain_timeout_seconds: int = 120
    onchain_state_enabled: bool = Field(
        default=True,
        description="Serve read-only contract state from Base on /onchain/state",
    )
    onchain_state_cache_seconds: int = CHAIN_STATE_CACHE_SECONDS

    # Price oracle
    price_oracle_url: str = JUPITER_PRICE_API
    price_oracle_timeout_seconds: float = PRICE_ORACLE_TIMEOUT_SECONDS
    price_refresh_enabled: bool = True
    price_refresh_interval_seconds: int = PRICE_REFRESH_INTERVAL_SECONDS

    # Swap proof journal
    database_url: str = Field(
        default="sqlite+aiosqlite:///./agentswaps.db",
        description="Database connection URL for the swap proof journal",
    )

    # Logging
    log_level: str = "INFO"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # Alerting
    alert_webhook_url: str | None = Field(
        default=None,
        description="Webhook URL for collaborator failure notifications"
    )
    alert_enabled: bool = Field(
        default=True,
        description="Whether to raise alerts for collaborator failures"
    )

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def onchain_enabled(self) -> bool:
        """On-chain reward distribution needs a distributor key."""
        return bool(self.deployer_private_key)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
