# ─────────────────────────────────────────────────────────────────────────────
# Health Check Routes — liveness, readiness, metrics
# ─────────────────────────────────────────────────────────────────────────────
#   /health        → Liveness probe. Near-zero cost, always 200.
#   /health/ready  → Readiness. 503 while no model backend is configured,
#                    so the load balancer withholds AI traffic.
#   /metrics       → Generation outcome counters and latency percentiles.
# ─────────────────────────────────────────────────────────────────────────────

from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from eventara.config import Settings
from eventara.dependencies import get_generation_service, get_metrics, get_settings_dep
from eventara.schemas import LivenessResponse, ReadinessResponse
from eventara.services.generation import EventGenerationService
from eventara.services.metrics import GenerationMetrics

router = APIRouter()


@router.get("/health", response_model=LivenessResponse)
async def liveness() -> LivenessResponse:
    """Liveness probe — is the process alive? No deps, no I/O."""
    return LivenessResponse(status="ok")


@router.get("/health/ready", response_model=ReadinessResponse)
async def readiness(
    service: EventGenerationService = Depends(get_generation_service),
    settings: Settings = Depends(get_settings_dep),
) -> JSONResponse:
    """Readiness probe — can this instance serve AI drafting traffic?"""
    ready = service.is_configured
    response = ReadinessResponse(
        status="ready" if ready else "not_ready",
        backend=settings.model_backend,
        credential_configured=ready,
    )
    return JSONResponse(
        status_code=200 if ready else 503,
        content=response.model_dump(),
    )


@router.get("/metrics")
async def metrics_endpoint(
    metrics: GenerationMetrics = Depends(get_metrics),
) -> dict[str, Any]:
    """Generation metrics — outcomes, latency."""
    return metrics.to_dict()
