# ─────────────────────────────────────────────────────────────────────────────
# Custom Exceptions + FastAPI Exception Handlers
# ─────────────────────────────────────────────────────────────────────────────


from email.utils import formatdate

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = structlog.get_logger(__name__)


# ── Exception hierarchy ──────────────────────────────────────────────────────


class EventaraError(Exception):
    """Base exception for all server-side Eventara errors."""

    def __init__(self, message: str, status_code: int = 500, details: str | None = None):
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(message)


class InvalidRequestError(EventaraError):
    """Malformed body or a missing/invalid field. Message names the field."""

    def __init__(self, message: str):
        super().__init__(message, status_code=400)


class MethodNotAllowedError(EventaraError):
    """Raised for any method other than the ones a route accepts."""

    def __init__(self, method: str, allowed: tuple[str, ...] = ("POST",)):
        self.allowed = allowed
        super().__init__(f"Method {method} Not Allowed", status_code=405)


class RateLimitedError(EventaraError):
    """Raised when a caller exhausts its sliding-window quota.

    Carries the window metadata so the handler can emit X-RateLimit-* and
    Retry-After headers.
    """

    def __init__(self, limit: int, remaining: int, reset_at: float, retry_after_seconds: float):
        self.limit = limit
        self.remaining = remaining
        self.reset_at = reset_at
        self.retry_after_seconds = retry_after_seconds
        super().__init__(
            "Too many requests. Please try again after a short break.",
            status_code=429,
        )


class ServiceUnavailableError(EventaraError):
    """Raised when the model credential is not configured server-side."""

    def __init__(self) -> None:
        super().__init__(
            "Server configuration error. The AI service is currently unavailable.",
            status_code=503,
        )


class GenerationFailedError(EventaraError):
    """Raised when the model pipeline fails. `details` is a short diagnostic."""

    def __init__(self, details: str):
        super().__init__(
            "The AI service failed to process the request.",
            status_code=500,
            details=details,
        )


class SchemaViolationError(GenerationFailedError):
    """Model output was not valid JSON or did not match the response schema."""


class ImageGenerationError(GenerationFailedError):
    """Image model returned no image after text generation succeeded."""


class NotFoundError(EventaraError):
    def __init__(self, message: str):
        super().__init__(message, status_code=404)


class ConflictError(EventaraError):
    def __init__(self, message: str):
        super().__init__(message, status_code=409)


class AuthenticationError(EventaraError):
    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message, status_code=401)


def _error_body(exc: EventaraError) -> dict[str, str]:
    body = {"error": exc.message, "type": type(exc).__name__}
    if exc.details:
        body["details"] = exc.details
    return body


# ── Handler registration ────────────────────────────────────────────────────


def register_exception_handlers(app: FastAPI) -> None:
    """Register all custom exception handlers on the FastAPI app.

    Endpoints raise EventaraError subclasses; these handlers catch them
    and return structured JSON -- no inline try/except in endpoints.
    """

    @app.exception_handler(RateLimitedError)
    async def rate_limited_handler(request: Request, exc: RateLimitedError) -> JSONResponse:
        """429 with quota headers — tells the client exactly when to retry."""
        retry_after = max(1, int(exc.retry_after_seconds))
        logger.warning(
            "generation_rate_limited_response",
            path=request.url.path,
            retry_after=retry_after,
            remaining=exc.remaining,
        )
        return JSONResponse(
            status_code=429,
            content=_error_body(exc),
            headers={
                "Retry-After": str(retry_after),
                "X-RateLimit-Limit": str(exc.limit),
                "X-RateLimit-Remaining": str(exc.remaining),
                "X-RateLimit-Reset": formatdate(exc.reset_at, usegmt=True),
            },
        )

    @app.exception_handler(MethodNotAllowedError)
    async def method_not_allowed_handler(
        request: Request, exc: MethodNotAllowedError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=405,
            content=_error_body(exc),
            headers={"Allow": ", ".join(exc.allowed)},
        )

    @app.exception_handler(EventaraError)
    async def eventara_error_handler(request: Request, exc: EventaraError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error(
                "eventara_error",
                error=exc.message,
                details=exc.details,
                error_type=type(exc).__name__,
                exc_info=exc,
            )
        else:
            logger.info("request_rejected", error=exc.message, error_type=type(exc).__name__)
        return JSONResponse(status_code=exc.status_code, content=_error_body(exc))

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        """Routing errors (404, 405 on unmatched methods) in the same JSON shape."""
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail), "type": "HTTPException"},
            headers=exc.headers,
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error("unhandled_error", error=str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error", "type": "UnhandledError"},
        )
