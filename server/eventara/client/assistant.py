# ─────────────────────────────────────────────────────────────────────────────
# Event Assistant Client — httpx caller for POST /api/generate-event
# ─────────────────────────────────────────────────────────────────────────────
# One get_suggestions() call = run_with_retry() over single POST attempts.
# Every failed attempt is normalized to AttemptFailedError(status, message)
# so the retry loop only ever reasons about status codes.
# ─────────────────────────────────────────────────────────────────────────────

from __future__ import annotations

from collections.abc import Sequence
from types import TracebackType
from typing import Any

import httpx
import pydantic
import structlog

from eventara.client.errors import AttemptFailedError
from eventara.client.retry import RetryPolicy, run_with_retry
from eventara.schemas import Category, City, GenerationResult

logger = structlog.get_logger(__name__)

GENERATE_PATH = "/api/generate-event"


def _option(item: City | Category) -> dict[str, Any]:
    return {"id": item.id, "name": item.name.model_dump()}


def _error_message(response: httpx.Response) -> str:
    """The server's ``error`` field, or a generic line for non-JSON bodies."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and isinstance(body.get("error"), str):
        return body["error"]
    return f"Request failed with status {response.status_code}."


class EventAssistantClient:
    """Requests AI event suggestions from the proxy.

    Usage:
        async with EventAssistantClient("http://localhost:8080") as assistant:
            result = await assistant.get_suggestions(prompt, cities, categories)
    """

    def __init__(
        self,
        base_url: str = "",
        *,
        policy: RetryPolicy | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.policy = policy or RetryPolicy()
        self._owns_client = client is None
        # The httpx deadline sits past the attempt deadline so wait_for fires first.
        self._client = client or httpx.AsyncClient(
            base_url=base_url,
            timeout=httpx.Timeout(self.policy.attempt_timeout_s + 5.0),
        )

    async def __aenter__(self) -> EventAssistantClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def get_suggestions(
        self,
        prompt: str,
        cities: Sequence[City],
        categories: Sequence[Category],
        image_data_url: str | None = None,
    ) -> GenerationResult:
        """Draft an event from ``prompt`` and an optional reference image.

        Raises:
            SuggestionTimeoutError, SuggestionRejectedError,
            SuggestionsUnavailableError: see ``run_with_retry``.
        """
        payload: dict[str, Any] = {
            "prompt": prompt,
            "cities": [_option(c) for c in cities],
            "categories": [_option(c) for c in categories],
        }
        if image_data_url:
            payload["imageBase64"] = image_data_url

        async def attempt() -> GenerationResult:
            return await self._post_once(payload)

        return await run_with_retry(attempt, self.policy)

    async def _post_once(self, payload: dict[str, Any]) -> GenerationResult:
        try:
            response = await self._client.post(GENERATE_PATH, json=payload)
        except httpx.TimeoutException as e:
            # Deadline exceeded inside httpx; never retried.
            logger.warning("assistant_transport_timeout", error_type=type(e).__name__)
            raise TimeoutError(str(e)) from e
        except httpx.TransportError as e:
            logger.warning("assistant_network_error", error_type=type(e).__name__)
            raise AttemptFailedError(None, f"Network error: {type(e).__name__}.") from e

        if response.is_error:
            raise AttemptFailedError(response.status_code, _error_message(response))

        try:
            return GenerationResult.model_validate(response.json())
        except (ValueError, pydantic.ValidationError) as e:
            # A malformed 200 is the server's fault; retry like a 5xx.
            logger.warning("assistant_malformed_response", status=response.status_code)
            raise AttemptFailedError(502, "The AI service returned an invalid response.") from e
