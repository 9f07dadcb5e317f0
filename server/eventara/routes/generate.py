# ─────────────────────────────────────────────────────────────────────────────
# POST /api/generate-event — AI event drafting proxy (THIN)
# ─────────────────────────────────────────────────────────────────────────────
# Check order: method → JSON body → fields → sliding window → credential.
# The last two live in EventGenerationService.generate().
# ─────────────────────────────────────────────────────────────────────────────


import json

from fastapi import APIRouter, Depends, Request
from slowapi.util import get_remote_address

from eventara.config import Settings, get_settings
from eventara.dependencies import get_generation_service, get_settings_dep
from eventara.exceptions import InvalidRequestError, MethodNotAllowedError
from eventara.rate_limit import limiter
from eventara.schemas import ErrorResponse, GenerationResult
from eventara.services.generation import EventGenerationService, parse_generation_request

router = APIRouter()

# CORS preflight never reaches the router; a bare OPTIONS gets the 405 like any other.
_ROUTED_METHODS = ["POST", "GET", "HEAD", "PUT", "PATCH", "DELETE", "OPTIONS"]


def _outer_rate_limit() -> str:
    return get_settings().rate_limit


@router.api_route(
    "/api/generate-event",
    methods=_ROUTED_METHODS,
    response_model=GenerationResult,
    responses={
        400: {"model": ErrorResponse},
        405: {"model": ErrorResponse},
        429: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)
# Coarse flood guard per IP; the AI quota itself is the 5/30s sliding window.
@limiter.limit(_outer_rate_limit)
async def generate_event(
    request: Request,
    service: EventGenerationService = Depends(get_generation_service),
    settings: Settings = Depends(get_settings_dep),
) -> GenerationResult:
    """Draft a localized event (title, description, city, category, image).

    Validation is explicit here so every failure maps to a field-specific
    400 instead of FastAPI's 422. Logic is in the service.
    """
    if request.method != "POST":
        raise MethodNotAllowedError(request.method)

    try:
        payload = json.loads(await request.body())
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise InvalidRequestError("Invalid JSON in request body.") from e

    body = parse_generation_request(payload, settings)
    return await service.generate(body, caller=get_remote_address(request))
