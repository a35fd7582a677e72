"""
Prometheus metrics API routes.
"""

from fastapi import APIRouter, Response
from fastapi.responses import PlainTextResponse

from src.services.metrics_service import metrics_collector

router = APIRouter()


@router.get(
    "/metrics",
    response_class=PlainTextResponse,
    summary="Prometheus metrics endpoint",
    description="Exposes application metrics in Prometheus text format for monitoring.",
)
async def get_metrics() -> Response:
    """
    Get Prometheus-formatted metrics.

    Metrics include:
    - Request counts and durations
    - Intents posted, swaps settled and settled USD volume
    - Outbound notification deliveries and failures
    - Price oracle refreshes
    """
    return PlainTextResponse(metrics_collector.get_prometheus_metrics())
