"""
Prometheus metrics service for the trading floor.

This module provides application-wide metrics tracking and exposes
Prometheus-formatted metrics for monitoring and observability.
"""

import time
from dataclasses import dataclass, field


@dataclass
class MetricsCollector:
    """Collects and exposes application metrics for Prometheus."""

    # Request metrics
    request_count: int = 0
    request_duration_seconds: float = 0.0
    request_errors: int = 0

    # Trading metrics
    intents_posted: int = 0
    swaps_executed: int = 0
    swap_volume_usd: float = 0.0

    # Outbound notification metrics
    notifications_delivered: int = 0
    notifications_failed: int = 0

    # Price oracle metrics
    price_refreshes: int = 0
    price_refresh_failures: int = 0

    # Timing tracking
    start_time: float = field(default_factory=time.time)

    def record_request(self, duration_seconds: float, error: bool = False):
        """Record a request."""
        self.request_count += 1
        self.request_duration_seconds += duration_seconds
        if error:
            self.request_errors += 1

    def record_intent(self):
        """Record a posted intent."""
        self.intents_posted += 1

    def record_swap(self, volume_usd: float):
        """Record a settled swap."""
        self.swaps_executed += 1
        self.swap_volume_usd += volume_usd

    def record_notification(self, success: bool):
        """Record one outbound delivery attempt."""
        if success:
            self.notifications_delivered += 1
        else:
            self.notifications_failed += 1

    def record_price_refresh(self, success: bool):
        """Record a price oracle refresh."""
        if success:
            self.price_refreshes += 1
        else:
            self.price_refresh_failures += 1

    def reset(self):
        """Zero every counter (for testing)."""
        fresh = MetricsCollector()
        self.__dict__.update(fresh.__dict__)

    def get_prometheus_metrics(self) -> str:
        """
        Get all metrics in Prometheus text format.

        Returns:
            Prometheus-formatted metrics string
        """
        uptime_seconds = time.time() - self.start_time

        avg_request_duration = (
            self.request_duration_seconds / self.request_count
            if self.request_count > 0 else 0.0
        )

        metrics = [
            "# HELP agentswaps_uptime_seconds Application uptime in seconds",
            "# TYPE agentswaps_uptime_seconds gauge",
            f"agentswaps_uptime_seconds {uptime_seconds:.2f}",
            "",
            "# HELP agentswaps_request_total Total number of HTTP requests",
            "# TYPE agentswaps_request_total counter",
            f"agentswaps_request_total {self.request_count}",
            "",
            "# HELP agentswaps_request_errors_total Total number of HTTP request errors",
            "# TYPE agentswaps_request_errors_total counter",
            f"agentswaps_request_errors_total {self.request_errors}",
            "",
            "# HELP agentswaps_request_duration_seconds_total Total duration of all requests in seconds",
            "# TYPE agentswaps_request_duration_seconds_total counter",
            f"agentswaps_request_duration_seconds_total {self.request_duration_seconds:.3f}",
            "",
            "# HELP agentswaps_request_duration_seconds Average request duration in seconds",
            "# TYPE agentswaps_request_duration_seconds gauge",
            f"agentswaps_request_duration_seconds {avg_request_duration:.3f}",
            "",
            "# HELP agentswaps_intents_posted_total Total number of intents posted",
            "# TYPE agentswaps_intents_posted_total counter",
            f"agentswaps_intents_posted_total {self.intents_posted}",
            "",
            "# HELP agentswaps_swaps_executed_total Total number of settled swaps",
            "# TYPE agentswaps_swaps_executed_total counter",
            f"agentswaps_swaps_executed_total {self.swaps_executed}",
            "",
            "# HELP agentswaps_swap_volume_usd_total Total settled volume in USD",
            "# TYPE agentswaps_swap_volume_usd_total counter",
            f"agentswaps_swap_volume_usd_total {self.swap_volume_usd:.2f}",
            "",
            "# HELP agentswaps_notifications_delivered_total Successful outbound deliveries",
            "# TYPE agentswaps_notifications_delivered_total counter",
            f"agentswaps_notifications_delivered_total {self.notifications_delivered}",
            "",
            "# HELP agentswaps_notifications_failed_total Failed outbound deliveries",
            "# TYPE agentswaps_notifications_failed_total counter",
            f"agentswaps_notifications_failed_total {self.notifications_failed}",
            "",
            "# HELP agentswaps_price_refreshes_total Successful price oracle refreshes",
            "# TYPE agentswaps_price_refreshes_total counter",
            f"agentswaps_price_refreshes_total {self.price_refreshes}",
            "",
            "# HELP agentswaps_price_refresh_failures_total Failed price oracle refreshes",
            "# TYPE agentswaps_price_refresh_failures_total counter",
            f"agentswaps_price_refresh_failures_total {self.price_refresh_failures}",
        ]

        return "\n".join(metrics)


# Global metrics collector instance
metrics_collector = MetricsCollector()
