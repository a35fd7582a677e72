"""
Request metrics middleware.

Counts API requests, their total duration and how many ended in an error
status. The metrics endpoint itself is not counted.
"""

import time
from collections.abc import Awaitable, Callable

from fastapi import Request, Response

from src.services.metrics_service import metrics_collector

METRICS_PATH = "/api/v1/metrics"


async def metrics_middleware(
    request: Request,
    call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    path = request.url.path
    if not path.startswith("/api/") or path == METRICS_PATH:
        return await call_next(request)

    start_time = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception:
        metrics_collector.record_request(time.perf_counter() - start_time, error=True)
        raise

    metrics_collector.record_request(
        time.perf_counter() - start_time,
        error=response.status_code >= 400,
    )
    return response
