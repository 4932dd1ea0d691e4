"""Request observability and engine metrics exported for Prometheus."""
from typing import Optional
import time

from fastapi import APIRouter, Request
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Gauge, Histogram, generate_latest

request_counter = Counter(
    "sentiment_http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status"],
)

request_latency = Histogram(
    "sentiment_http_request_duration_seconds",
    "HTTP request latency",
    ["method", "path"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1, 2, 5),
)

analyses_counter = Counter(
    "sentiment_analyses_total",
    "Texts scored by the engine",
    ["sentiment", "mode"],
)

history_size_gauge = Gauge(
    "sentiment_history_size",
    "Records currently retained in the analysis history",
)

storage_errors_counter = Counter(
    "sentiment_storage_errors_total",
    "Persisted state reads or writes that failed and were degraded",
    ["operation"],
)

metrics_router = APIRouter()


@metrics_router.get("/metrics")
async def metrics_endpoint():
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)


def record_request_metrics(request: Request, status_code: int, duration: float):
    path = request.url.path
    method = request.method
    request_counter.labels(method=method, path=path, status=str(status_code)).inc()
    request_latency.labels(method=method, path=path).observe(duration)


def record_analysis(sentiment: str, mode: str):
    analyses_counter.labels(sentiment=sentiment, mode=mode).inc()


def record_history_size(size: int):
    history_size_gauge.set(size)


def record_storage_error(operation: str):
    storage_errors_counter.labels(operation=operation).inc()


def request_timer() -> float:
    return time.perf_counter()


def elapsed(start_time: Optional[float]) -> float:
    if start_time is None:
        return 0.0
    return time.perf_counter() - start_time
