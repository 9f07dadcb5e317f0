# ─────────────────────────────────────────────────────────────────────────────
# Model Registry — selects the generative model backend from Settings
# ─────────────────────────────────────────────────────────────────────────────


from collections.abc import Callable

import structlog

from eventara.config import Settings
from eventara.models.protocol import GenerativeModelClient

logger = structlog.get_logger(__name__)


def _build_gemini(settings: Settings) -> GenerativeModelClient | None:
    api_key = settings.gemini_api_key.get_secret_value()
    if not api_key:
        # Degrade instead of crashing: the endpoint answers 503 until configured.
        logger.critical(
            "model_credential_missing",
            backend="gemini",
            hint="Set GEMINI_API_KEY in the server environment.",
        )
        return None

    from eventara.models.gemini import GeminiModelClient

    return GeminiModelClient(
        api_key,
        text_model=settings.text_model,
        image_model=settings.image_model,
        aspect_ratio=settings.image_aspect_ratio,
        image_mime_type=settings.image_mime_type,
    )


def _build_mock(settings: Settings) -> GenerativeModelClient | None:
    from eventara.models.mock import MockModelClient

    return MockModelClient()


_BACKENDS: dict[str, Callable[[Settings], GenerativeModelClient | None]] = {
    "gemini": _build_gemini,
    "mock": _build_mock,
}


def available_backends() -> list[str]:
    return sorted(_BACKENDS)


def create_model_client(settings: Settings) -> GenerativeModelClient | None:
    """Build the configured backend, or None when its credential is missing.

    Called once in the lifespan; the result is stored in app.state and
    injected via Depends().
    """
    try:
        factory = _BACKENDS[settings.model_backend]
    except KeyError:
        raise ValueError(
            f"Unknown model backend '{settings.model_backend}'. Available: {available_backends()}"
        ) from None
    client = factory(settings)
    if client is not None:
        logger.info("model_backend_selected", backend=client.name)
    return client
