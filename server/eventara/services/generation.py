# Event drafting service: rate-limit gate → credential → text model → image model.
# One call is one atomic unit of work; a failed image step is never resumed
# from the text step (the client retries the whole request).


import json
import time
from typing import Any

import pydantic
import structlog
from opentelemetry import trace

from eventara.config import Settings
from eventara.exceptions import (
    GenerationFailedError,
    ImageGenerationError,
    InvalidRequestError,
    RateLimitedError,
    SchemaViolationError,
    ServiceUnavailableError,
)
from eventara.models.protocol import ContentPart, GenerativeModelClient
from eventara.pipeline.encoding import encode_bytes
from eventara.pipeline.prompt_templates import build_system_instruction, build_user_text
from eventara.pipeline.response_schema import build_response_schema
from eventara.rate_limit import SlidingWindowRateLimiter
from eventara.schemas import EventDetails, GenerationRequest, GenerationResult
from eventara.services.metrics import GenerationMetrics

logger = structlog.get_logger(__name__)
tracer = trace.get_tracer(__name__)

_REQUIRED_FIELDS = ("prompt", "cities", "categories")
_FIELD_HINTS = {
    "prompt": "must be a non-empty string of at least {min_prompt_length} characters",
    "cities": "must be a non-empty array of {id, name} objects",
    "categories": "must be a non-empty array of {id, name} objects",
}


def _field_message(error: dict[str, Any], min_prompt_length: int) -> str:
    """Turn the first pydantic error into a message naming the field."""
    loc = error.get("loc") or ()
    field = str(loc[0]) if loc else ""
    ctx_error = (error.get("ctx") or {}).get("error")
    reason = str(ctx_error) if ctx_error is not None else error.get("msg", "is invalid")

    if len(loc) == 1 and field in _REQUIRED_FIELDS and error.get("type") == "missing":
        return f'Missing required parameter: "{field}".'
    if field == "prompt" and error.get("type") != "value_error":
        reason = _FIELD_HINTS["prompt"].format(min_prompt_length=min_prompt_length)
    elif field in ("cities", "categories"):
        reason = _FIELD_HINTS[field] if len(loc) == 1 else f"contains an invalid entry ({reason})"
    elif not field:
        return f"Validation Error: {reason}."
    return f'Validation Error: "{field}" {reason}.'


def parse_generation_request(payload: Any, settings: Settings) -> GenerationRequest:
    """Validate a decoded JSON body into a GenerationRequest.

    Raises:
        InvalidRequestError: with a message naming the offending field.
    """
    if not isinstance(payload, dict):
        raise InvalidRequestError("Invalid JSON in request body: expected an object.")
    try:
        return GenerationRequest.model_validate(
            payload,
            context={
                "min_prompt_length": settings.min_prompt_length,
                "max_prompt_length": settings.max_prompt_length,
                "max_image_bytes": settings.max_image_bytes,
            },
        )
    except pydantic.ValidationError as e:
        errors = e.errors()
        # Report a missing top-level field first so each one gets its own message.
        errors.sort(key=lambda err: not (err.get("type") == "missing" and len(err["loc"]) == 1))
        raise InvalidRequestError(_field_message(errors[0], settings.min_prompt_length)) from e


def parse_event_details(
    raw: str, city_ids: set[str], category_ids: set[str]
) -> EventDetails:
    """Strictly parse model output and check ids against the offered lists.

    Raises:
        SchemaViolationError: on invalid JSON, missing fields or unknown ids.
    """
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise SchemaViolationError("Model response was not valid JSON.") from e
    try:
        details = EventDetails.model_validate(data)
    except pydantic.ValidationError as e:
        raise SchemaViolationError("Model response did not match the event schema.") from e

    if details.suggested_city_id not in city_ids:
        raise SchemaViolationError(
            f"Model suggested unknown city id '{details.suggested_city_id}'."
        )
    if details.suggested_category_id not in category_ids:
        raise SchemaViolationError(
            f"Model suggested unknown category id '{details.suggested_category_id}'."
        )
    return details


def _failure_kind(exc: GenerationFailedError) -> str:
    if isinstance(exc, SchemaViolationError):
        return "schema_violation"
    if isinstance(exc, ImageGenerationError):
        return "image_missing"
    return "model_error"


class EventGenerationService:
    """Drafts event content and a cover image for one validated request."""

    def __init__(
        self,
        model_client: GenerativeModelClient | None,
        rate_limiter: SlidingWindowRateLimiter,
        settings: Settings,
        metrics: GenerationMetrics | None = None,
    ) -> None:
        self._model_client = model_client
        self._rate_limiter = rate_limiter
        self._settings = settings
        self._metrics = metrics

    @property
    def is_configured(self) -> bool:
        return self._model_client is not None

    async def generate(self, request: GenerationRequest, caller: str) -> GenerationResult:
        """Gate, then run text + image generation."""
        with tracer.start_as_current_span("generate_event") as span:
            span.set_attribute("has_image", request.image_base64 is not None)

            decision = await self._rate_limiter.check(caller)
            if not decision.allowed:
                span.set_attribute("rate_limited", True)
                if self._metrics:
                    self._metrics.record_rate_limited()
                raise RateLimitedError(
                    limit=decision.limit,
                    remaining=decision.remaining,
                    reset_at=decision.reset_at,
                    retry_after_seconds=decision.retry_after_seconds,
                )

            if self._model_client is None:
                logger.critical(
                    "model_credential_missing",
                    backend=self._settings.model_backend,
                    hint="Set GEMINI_API_KEY in the server environment.",
                )
                if self._metrics:
                    self._metrics.record_unconfigured()
                raise ServiceUnavailableError()

            start = time.perf_counter()
            try:
                result = await self._run(self._model_client, request)
            except GenerationFailedError as e:
                elapsed = (time.perf_counter() - start) * 1000
                logger.error(
                    "generation_failed",
                    reason=e.details,
                    error_type=type(e).__name__,
                    exc_info=e.__cause__ or e,
                )
                if self._metrics:
                    self._metrics.record_failure(_failure_kind(e), elapsed)
                raise
            except Exception as e:
                elapsed = (time.perf_counter() - start) * 1000
                # Full SDK/transport detail stays in the server log only.
                logger.exception("generation_error", error_type=type(e).__name__)
                if self._metrics:
                    self._metrics.record_failure("model_error", elapsed)
                raise GenerationFailedError(f"Upstream model error ({type(e).__name__}).") from e

            elapsed = (time.perf_counter() - start) * 1000
            span.set_attribute("latency_ms", round(elapsed))
            if self._metrics:
                self._metrics.record_success(elapsed)
            logger.info(
                "event_draft_generated",
                city=result.suggested_city_id,
                category=result.suggested_category_id,
                time_ms=round(elapsed, 1),
                remaining_quota=decision.remaining,
            )
            return result

    async def _run(
        self, client: GenerativeModelClient, request: GenerationRequest
    ) -> GenerationResult:
        categories = request.selectable_categories
        image = request.inline_image

        instruction = build_system_instruction(
            request.cities, categories, has_image=image is not None
        )
        parts: list[ContentPart] = [build_user_text(request.prompt)]
        if image is not None:
            # Image goes first so the model reads it before the idea text.
            parts.insert(0, image)
        city_ids = [c.id for c in request.cities]
        category_ids = [c.id for c in categories]
        schema = build_response_schema(city_ids, category_ids)

        with tracer.start_as_current_span("structured_generation"):
            raw = await client.generate_structured(
                system_instruction=instruction, parts=parts, response_schema=schema
            )
        details = parse_event_details(raw, set(city_ids), set(category_ids))

        with tracer.start_as_current_span("image_generation"):
            images = await client.generate_images(details.image_prompt, number_of_images=1)
        if not images:
            raise ImageGenerationError("AI failed to generate an image after generating text.")
        if len(images) > 1:
            logger.warning("extra_images_discarded", count=len(images))

        return GenerationResult(
            title=details.title,
            description=details.description,
            suggested_city_id=details.suggested_city_id,
            suggested_category_id=details.suggested_category_id,
            generated_image_base64=encode_bytes(images[0]),
        )
