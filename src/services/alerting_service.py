"""
Error alerting for failures that never reach a caller.

Settlement side effects (governance rewards, on-chain reward distribution,
proof recording, price refreshes) fail without failing the request that
triggered them. Those failures are raised here so operators still see them.

Supported alert channels:
- Console logging (always enabled)
- Webhook notifications (``ALERT_WEBHOOK_URL``)
"""

import asyncio
import inspect
import logging
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any

import httpx

from src.core.config import settings

logger = logging.getLogger(__name__)

RECENT_ALERTS_LIMIT = 100


class AlertSeverity(Enum):
    """Severity levels for alerts."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AlertType(Enum):
    """Types of alerts."""
    INTERNAL_ERROR = "internal_error"
    DATABASE_ERROR = "database_error"
    EXTERNAL_SERVICE_FAILURE = "external_service_failure"
    GOVERNANCE_FAILURE = "governance_failure"
    REWARD_DISTRIBUTION_FAILURE = "reward_distribution_failure"
    PRICE_ORACLE_FAILURE = "price_oracle_failure"


@dataclass
class Alert:
    """Represents a single alert."""

    alert_type: AlertType
    severity: AlertSeverity
    message: str
    timestamp: str
    details: dict[str, Any] | None = None
    correlation_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": settings.app_name,
            "alert_type": self.alert_type.value,
            "severity": self.severity.value,
            "message": self.message,
            "timestamp": self.timestamp,
            "details": self.details or {},
            "correlation_id": self.correlation_id,
        }


class AlertingService:
    """
    Dispatches alerts to registered handlers.

    Handlers may be plain callables or coroutine functions. Coroutine
    handlers are scheduled on the running loop and skipped when there is
    none, so ``send_alert`` is safe from worker threads.
    """

    def __init__(self, webhook_url: str | None = None, enabled: bool = True) -> None:
        self.webhook_url = webhook_url
        self.enabled = enabled
        self.alert_handlers: list[Callable[[Alert], Any]] = [self._console_handler]
        if webhook_url:
            self.alert_handlers.append(self._webhook_handler)
        self.recent: deque[Alert] = deque(maxlen=RECENT_ALERTS_LIMIT)

    def _console_handler(self, alert: Alert) -> None:
        level = {
            AlertSeverity.INFO: logging.INFO,
            AlertSeverity.WARNING: logging.WARNING,
            AlertSeverity.ERROR: logging.ERROR,
            AlertSeverity.CRITICAL: logging.CRITICAL,
        }.get(alert.severity, logging.INFO)

        logger.log(
            level,
            f"[ALERT] {alert.alert_type.value.upper()}: {alert.message} | "
            f"Details: {alert.details} | Correlation: {alert.correlation_id}"
        )

    async def _webhook_handler(self, alert: Alert) -> None:
        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    self.webhook_url,
                    json=alert.to_dict(),
                    headers={"Content-Type": "application/json"},
                    timeout=5.0,
                )
            if response.status_code >= 400:
                logger.warning(f"Webhook alert returned status {response.status_code}")
        except httpx.HTTPError as e:
            logger.error(f"Failed to send webhook alert: {e}")

    def add_handler(self, handler: Callable[[Alert], Any]) -> None:
        self.alert_handlers.append(handler)
        logger.info(f"Added custom alert handler: {handler.__name__}")

    def _build(
        self,
        alert_type: AlertType,
        severity: AlertSeverity,
        message: str,
        details: dict[str, Any] | None,
        correlation_id: str | None,
    ) -> Alert:
        alert = Alert(
            alert_type=alert_type,
            severity=severity,
            message=message,
            timestamp=datetime.now(timezone.utc).isoformat(),
            details=details,
            correlation_id=correlation_id,
        )
        self.recent.append(alert)
        return alert

    def send_alert(
        self,
        alert_type: AlertType,
        severity: AlertSeverity,
        message: str,
        details: dict[str, Any] | None = None,
        correlation_id: str | None = None
    ) -> None:
        """
        Send an alert through all registered handlers.

        Args:
            alert_type: Type of alert
            severity: Severity level
            message: Alert message
            details: Additional context/details
            correlation_id: ID for tracking related events
        """
        if not self.enabled:
            return
        alert = self._build(alert_type, severity, message, details, correlation_id)

        for handler in self.alert_handlers:
            try:
                if inspect.iscoroutinefunction(handler):
                    try:
                        loop = asyncio.get_running_loop()
                    except RuntimeError:
                        logger.debug(f"Cannot call async handler {handler.__name__} - no running loop")
                        continue
                    loop.create_task(handler(alert))
                else:
                    handler(alert)
            except Exception as e:
                logger.error(f"Alert handler {handler.__name__} failed: {e}")

    async def send_alert_async(
        self,
        alert_type: AlertType,
        severity: AlertSeverity,
        message: str,
        details: dict[str, Any] | None = None,
        correlation_id: str | None = None
    ) -> None:
        """Send an alert, awaiting coroutine handlers."""
        if not self.enabled:
            return
        alert = self._build(alert_type, severity, message, details, correlation_id)

        for handler in self.alert_handlers:
            try:
                if inspect.iscoroutinefunction(handler):
                    await handler(alert)
                else:
                    handler(alert)
            except Exception as e:
                logger.error(f"Alert handler {handler.__name__} failed: {e}")


def _create_alerting_service() -> AlertingService:
    return AlertingService(
        webhook_url=settings.alert_webhook_url,
        enabled=settings.alert_enabled,
    )


# Global alerting service instance
alerting_service = _create_alerting_service()


def send_alert(
    alert_type: AlertType,
    severity: AlertSeverity,
    message: str,
    details: dict[str, Any] | None = None,
    correlation_id: str | None = None
) -> None:
    """Convenience function to send an alert."""
    alerting_service.send_alert(
        alert_type=alert_type,
        severity=severity,
        message=message,
        details=details,
        correlation_id=correlation_id,
    )


def send_critical_alert(
    alert_type: AlertType,
    message: str,
    details: dict[str, Any] | None = None,
    correlation_id: str | None = None
) -> None:
    alerting_service.send_alert(alert_type, AlertSeverity.CRITICAL, message, details, correlation_id)


def send_error_alert(
    alert_type: AlertType,
    message: str,
    details: dict[str, Any] | None = None,
    correlation_id: str | None = None
) -> None:
    alerting_service.send_alert(alert_type, AlertSeverity.ERROR, message, details, correlation_id)


def send_warning_alert(
    alert_type: AlertType,
    message: str,
    details: dict[str, Any] | None = None,
    correlation_id: str | None = None
) -> None:
    alerting_service.send_alert(alert_type, AlertSeverity.WARNING, message, details, correlation_id)


def get_alerting_service() -> AlertingService:
    """Get the global alerting service instance."""
    return alerting_service


def reset_alerting_service() -> None:
    """Reset the alerting service (for testing)."""
    global alerting_service
    alerting_service = _create_alerting_service()
