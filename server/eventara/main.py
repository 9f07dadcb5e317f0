# FastAPI application factory with lifespan management.
# Entrypoint: uvicorn eventara.main:create_app --factory --host 0.0.0.0 --port 8080

import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from limits import parse
from slowapi.errors import RateLimitExceeded
from starlette.requests import Request
from starlette.responses import JSONResponse

from eventara.config import get_settings
from eventara.exceptions import register_exception_handlers
from eventara.logging_config import configure_logging
from eventara.middleware import RequestContextMiddleware
from eventara.models import create_model_client
from eventara.rate_limit import SlidingWindowRateLimiter, limiter
from eventara.routes import catalog, generate, health
from eventara.routes import prometheus as prometheus_routes
from eventara.services.generation import EventGenerationService
from eventara.services.metrics import GenerationMetrics
from eventara.store.memory import InMemoryEventStore

logger = structlog.get_logger(__name__)


def _parse_retry_after(rate_limit: str) -> str:
    """Window length in seconds for a limits-style string such as "30/minute"."""
    try:
        return str(parse(rate_limit).get_expiry())
    except ValueError:
        return "60"


async def _rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Return a structured JSON 429 consistent with EventaraError responses."""
    settings = get_settings()
    retry_after = _parse_retry_after(settings.rate_limit)
    logger.warning(
        "rate_limit_exceeded",
        path=request.url.path,
        method=request.method,
        detail=str(exc.detail),
    )
    return JSONResponse(
        status_code=429,
        content={
            "error": "Too many requests. Please try again after a short break.",
            "type": "RateLimitedError",
            "details": f"Rate limit exceeded: {exc.detail}",
        },
        headers={"Retry-After": retry_after},
    )


if TYPE_CHECKING:
    from opentelemetry.sdk.trace import TracerProvider


def _configure_otel(exporter_type: str) -> "TracerProvider | None":
    """Configure OpenTelemetry tracing (console or gcp)."""
    from opentelemetry.sdk.trace import TracerProvider
    from opentelemetry.sdk.trace.export import BatchSpanProcessor

    provider = TracerProvider()

    if exporter_type == "console":
        from opentelemetry.sdk.trace.export import ConsoleSpanExporter

        provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))
    elif exporter_type == "gcp":
        try:
            from opentelemetry.exporter.cloud_trace import CloudTraceSpanExporter

            provider.add_span_processor(BatchSpanProcessor(CloudTraceSpanExporter()))  # type: ignore[no-untyped-call]
        except ImportError:
            logger.warning("gcp_trace_exporter_not_available")
            return None
    else:
        logger.warning("unknown_otel_exporter", exporter=exporter_type)
        return None

    from opentelemetry import trace

    trace.set_tracer_provider(provider)
    logger.info("otel_configured", exporter=exporter_type)
    return provider


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Build shared state. A missing model credential does not block startup."""
    settings = get_settings()

    otel_provider = None
    otel_exporter = os.environ.get("OTEL_EXPORTER", "")
    if otel_exporter:
        otel_provider = _configure_otel(otel_exporter)

    rate_limiter = SlidingWindowRateLimiter.from_settings(settings)
    model_client = create_model_client(settings)
    metrics = GenerationMetrics()
    service = EventGenerationService(model_client, rate_limiter, settings, metrics=metrics)

    app.state.settings = settings
    app.state.rate_limiter = rate_limiter
    app.state.metrics = metrics
    app.state.generation_service = service
    app.state.event_store = InMemoryEventStore()

    logger.info(
        "server_ready",
        backend=settings.model_backend,
        model_configured=service.is_configured,
        ai_rate_limit=settings.ai_rate_limit,
    )

    yield

    # Flush OTel spans before shutdown (critical for Cloud Run scale-to-zero)
    if otel_provider is not None:
        otel_provider.shutdown()


def _parse_origins(allowed_origins: str) -> list[str]:
    """Parse comma-separated CORS origins. Empty string → deny all."""
    if not allowed_origins.strip():
        logger.warning(
            "cors_no_origins_configured",
            hint="Set ALLOWED_ORIGINS env var. Cross-origin requests will be rejected.",
        )
        return []
    return [origin.strip() for origin in allowed_origins.split(",") if origin.strip()]


def create_app() -> FastAPI:
    """Application factory. Invoked by: uvicorn eventara.main:create_app --factory"""
    settings = get_settings()
    configure_logging(log_level=settings.log_level, json_output=settings.log_json)

    app = FastAPI(
        title="Eventara",
        description="Event discovery API with AI-assisted event drafting",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)  # type: ignore[arg-type]

    # Middleware order (Starlette applies in reverse): CORS → RequestContext
    app.add_middleware(RequestContextMiddleware)

    origins = _parse_origins(settings.allowed_origins)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_methods=["POST", "GET", "PATCH", "OPTIONS"],
        allow_headers=["Content-Type", "X-Request-ID"],
        expose_headers=[
            "Retry-After",
            "X-RateLimit-Limit",
            "X-RateLimit-Remaining",
            "X-RateLimit-Reset",
        ],
    )

    register_exception_handlers(app)

    app.include_router(health.router, tags=["health"])
    app.include_router(generate.router, tags=["generate"])
    app.include_router(catalog.router, tags=["catalog"])
    app.include_router(prometheus_routes.router, tags=["prometheus"])

    return app
