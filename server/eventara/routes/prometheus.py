# ─────────────────────────────────────────────────────────────────────────────
# Prometheus Metrics Endpoint — text exposition format
# ─────────────────────────────────────────────────────────────────────────────
# GET /metrics/prometheus → text/plain Prometheus format
# Bridges GenerationMetrics → prometheus-client gauges.
# ─────────────────────────────────────────────────────────────────────────────

from fastapi import APIRouter, Depends
from fastapi.responses import Response
from prometheus_client import CollectorRegistry, Gauge, generate_latest

from eventara.dependencies import get_generation_service, get_metrics
from eventara.services.generation import EventGenerationService
from eventara.services.metrics import FAILURE_KINDS, GenerationMetrics

router = APIRouter()

# ── Prometheus metrics (custom registry to avoid default process metrics) ─────

_registry = CollectorRegistry()

_requests = Gauge(
    "eventara_generation_requests",
    "AI drafting requests by outcome since process start",
    ["outcome"],
    registry=_registry,
)

_latency = Gauge(
    "eventara_generation_latency_ms",
    "AI drafting latency over the last 1000 model runs",
    ["quantile"],
    registry=_registry,
)

_backend_configured = Gauge(
    "eventara_model_backend_configured",
    "Whether a model backend is configured (1) or not (0)",
    registry=_registry,
)


def _sync_metrics(metrics: GenerationMetrics, service: EventGenerationService) -> None:
    """Copy GenerationMetrics counters into the Prometheus gauges."""
    data = metrics.to_dict()

    _requests.labels(outcome="success").set(data["successes"])
    _requests.labels(outcome="rate_limited").set(data["rate_limited"])
    _requests.labels(outcome="unconfigured").set(data["unconfigured"])
    for kind in FAILURE_KINDS:
        _requests.labels(outcome=kind).set(data["failures"][kind])

    _latency.labels(quantile="0.5").set(data["latency_p50_ms"])
    _latency.labels(quantile="0.95").set(data["latency_p95_ms"])

    _backend_configured.set(1 if service.is_configured else 0)


@router.get("/metrics/prometheus")
async def prometheus_metrics(
    metrics: GenerationMetrics = Depends(get_metrics),
    service: EventGenerationService = Depends(get_generation_service),
) -> Response:
    """Prometheus text exposition format metrics endpoint."""
    _sync_metrics(metrics, service)
    return Response(
        content=generate_latest(_registry),
        media_type="text/plain; version=0.0.4; charset=utf-8",
    )
