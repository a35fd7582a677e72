"""
Tests for the configuration module.

This module tests the Settings class and configuration loading functionality.
"""

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from src.core.config import Settings, get_settings


class TestSettings:
    """Test the Settings class and configuration loading."""

    def test_default_settings(self):
        """Test that default settings are properly initialized."""
        settings = Settings(_env_file=None)

        assert settings.app_name == "AgentSwaps Trading Floor"
        assert settings.app_version == "0.1.0"
        assert settings.debug is False
        assert settings.port == 8800
        assert settings.fee_rate == 0.003
        assert settings.supported_tokens == ["USDC", "ETH", "SOL", "MON", "BTC"]
        assert settings.initial_token_prices["ETH"] == 2800.0
        assert settings.allow_fallback_match is True
        assert settings.enforce_intent_expiry is True
        assert "http://localhost:3000" in settings.cors_origins

    def test_production_environment(self):
        """Test production environment settings."""
        with patch.dict(os.environ, {"ENVIRONMENT": "production"}):
            settings = Settings(_env_file=None)
            assert settings.environment == "production"
            assert settings.is_production is True

    def test_cors_origins_parsing_string(self):
        """Test parsing CORS origins from comma-separated string."""
        settings = Settings(cors_origins="https://example.com,https://api.example.com")

        assert settings.cors_origins == ["https://example.com", "https://api.example.com"]

    def test_cors_origins_empty_string(self):
        """Test that empty CORS origins string returns defaults."""
        settings = Settings(cors_origins="")
        assert "http://localhost:8800" in settings.cors_origins

    def test_fee_rate_bounds(self):
        with pytest.raises(ValidationError):
            Settings(fee_rate=1.5)
        with pytest.raises(ValidationError):
            Settings(fee_rate=-0.01)

    def test_onchain_enabled_needs_key(self):
        assert Settings(deployer_private_key=None).onchain_enabled is False
        assert Settings(deployer_private_key="0x" + "1" * 64).onchain_enabled is True

    def test_alert_config(self):
        """Test alert configuration."""
        webhook_url = "https://hooks.example.com/alerts"
        settings = Settings(alert_webhook_url=webhook_url, alert_enabled=False)

        assert settings.alert_webhook_url == webhook_url
        assert settings.alert_enabled is False

    def test_get_settings_cached(self):
        """Test that get_settings returns cached instance."""
        assert get_settings() is get_settings()

    def test_environment_variable_override(self):
        """Test environment variable overrides."""
        test_env = {
            "FEE_RATE": "0.001",
            "ALLOW_FALLBACK_MATCH": "false",
            "PRICE_REFRESH_INTERVAL_SECONDS": "15",
            "CORS_ORIGINS": "https://test.com,https://api.test.com",
        }

        with patch.dict(os.environ, test_env):
            settings = Settings(_env_file=None)

            assert settings.fee_rate == 0.001
            assert settings.allow_fallback_match is False
            assert settings.price_refresh_interval_seconds == 15
            assert settings.cors_origins == ["https://test.com", "https://api.test.com"]

    def test_cors_origins_from_environment_only(self):
        """A plain comma-separated CORS_ORIGINS must not be JSON-decoded."""
        with patch.dict(os.environ, {"CORS_ORIGINS": "https://a.example, https://b.example"}):
            settings = Settings(_env_file=None)

            assert settings.cors_origins == ["https://a.example", "https://b.example"]

        with patch.dict(os.environ, {"CORS_ORIGINS": "https://only.example"}):
            assert Settings(_env_file=None).cors_origins == ["https://only.example"]

    def test_extra_fields_ignored(self):
        settings = Settings(extra_field="ignored", app_name="ValidApp")

        assert settings.app_name == "ValidApp"
        assert not hasattr(settings, "extra_field")
