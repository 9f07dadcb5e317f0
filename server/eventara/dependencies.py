# ─────────────────────────────────────────────────────────────────────────────
# Dependency Injection — FastAPI Depends() providers
# ─────────────────────────────────────────────────────────────────────────────
# State flows: lifespan creates → app.state stores → Depends() injects.
# Tests swap any of these by assigning app.state after startup.
# ─────────────────────────────────────────────────────────────────────────────


from fastapi import Request

from eventara.config import Settings
from eventara.rate_limit import SlidingWindowRateLimiter
from eventara.services.generation import EventGenerationService
from eventara.services.metrics import GenerationMetrics
from eventara.store.memory import InMemoryEventStore


def get_settings_dep(request: Request) -> Settings:
    """Inject Settings into endpoints via Depends()."""
    return request.app.state.settings  # type: ignore[no-any-return]


def get_rate_limiter(request: Request) -> SlidingWindowRateLimiter:
    return request.app.state.rate_limiter  # type: ignore[no-any-return]


def get_metrics(request: Request) -> GenerationMetrics:
    return request.app.state.metrics  # type: ignore[no-any-return]


def get_generation_service(request: Request) -> EventGenerationService:
    """Inject EventGenerationService into endpoints via Depends()."""
    return request.app.state.generation_service  # type: ignore[no-any-return]


def get_store(request: Request) -> InMemoryEventStore:
    """Inject the event store into endpoints via Depends()."""
    return request.app.state.event_store  # type: ignore[no-any-return]
