# ─────────────────────────────────────────────────────────────────────────────
# Test Fixtures — shared across all tests
# ─────────────────────────────────────────────────────────────────────────────

import base64
import io
import json
import os
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import PIL.Image
import pytest
from fastapi.testclient import TestClient

from eventara.config import Settings
from eventara.main import create_app
from eventara.rate_limit import SlidingWindowRateLimiter, limiter
from eventara.services.generation import EventGenerationService
from eventara.services.metrics import GenerationMetrics

CITIES = [
    {"id": "erbil", "name": {"en": "Erbil", "ar": "أربيل", "ku": "هەولێر"}},
    {"id": "duhok", "name": {"en": "Duhok", "ar": "دهوك", "ku": "دهۆک"}},
]
CATEGORIES = [
    {"id": "all", "name": {"en": "All", "ar": "الكل", "ku": "هەموو"}},
    {"id": "music", "name": {"en": "Music", "ar": "موسيقى", "ku": "مۆسیقا"}},
    {"id": "food", "name": {"en": "Food & Drink", "ar": "طعام وشراب", "ku": "خواردن"}},
]
VALID_PROMPT = "A rooftop jazz night with local bands"


def make_png(size: tuple[int, int] = (8, 8), color: tuple[int, int, int] = (200, 40, 40)) -> bytes:
    buffer = io.BytesIO()
    PIL.Image.new("RGB", size, color=color).save(buffer, format="PNG")
    return buffer.getvalue()


def png_data_url() -> str:
    return "data:image/png;base64," + base64.b64encode(make_png()).decode()


def model_json(city_id: str = "erbil", category_id: str = "music", **overrides: Any) -> str:
    """Structured output the text model would return."""
    data = {
        "title": {"en": "Jazz on the Roof", "ar": "جاز على السطح", "ku": "جاز لەسەر بان"},
        "description": {"en": "Live jazz.", "ar": "جاز حي.", "ku": "جازی ڕاستەوخۆ."},
        "suggestedCityId": city_id,
        "suggestedCategoryId": category_id,
        "imagePrompt": "Warm-lit rooftop stage with a saxophonist at dusk",
    }
    data.update(overrides)
    return json.dumps(data)


def valid_body(**overrides: Any) -> dict[str, Any]:
    body: dict[str, Any] = {
        "prompt": VALID_PROMPT,
        "cities": CITIES,
        "categories": CATEGORIES,
    }
    body.update(overrides)
    return body


@pytest.fixture
def test_settings() -> Settings:
    """Settings configured for testing — fake credential, no network."""
    return Settings(
        gemini_api_key="test-key",
        model_backend="gemini",
        log_json=False,
        log_level="DEBUG",
    )


@pytest.fixture
def mock_model() -> MagicMock:
    """Model client whose text and image calls succeed by default."""
    model = MagicMock()
    model.name = "test-model"
    model.generate_structured = AsyncMock(return_value=model_json())
    model.generate_images = AsyncMock(return_value=[make_png()])
    return model


@pytest.fixture
def rate_limiter() -> SlidingWindowRateLimiter:
    return SlidingWindowRateLimiter("5/30 seconds")


@pytest.fixture
def metrics() -> GenerationMetrics:
    return GenerationMetrics()


@pytest.fixture
def service(
    mock_model: MagicMock,
    rate_limiter: SlidingWindowRateLimiter,
    test_settings: Settings,
    metrics: GenerationMetrics,
) -> EventGenerationService:
    return EventGenerationService(mock_model, rate_limiter, test_settings, metrics=metrics)


@contextmanager
def _app_client(env_overrides: dict[str, str]) -> Iterator[TestClient]:
    from eventara.config import get_settings

    get_settings.cache_clear()
    limiter.reset()
    for k, v in env_overrides.items():
        os.environ[k] = v
    try:
        app = create_app()
        # One TestClient context = one event loop for the async limiter storage.
        with TestClient(app) as client:
            yield client
    finally:
        for k in env_overrides:
            os.environ.pop(k, None)
        get_settings.cache_clear()


@pytest.fixture
def client(
    test_settings: Settings,
    service: EventGenerationService,
    rate_limiter: SlidingWindowRateLimiter,
    metrics: GenerationMetrics,
) -> Iterator[TestClient]:
    """FastAPI TestClient with the model client mocked out.

    The lifespan builds real state from env vars; we then swap in the
    test service so every request hits ``mock_model`` instead of Gemini.
    """
    env = {
        "GEMINI_API_KEY": "test-key",
        "LOG_JSON": "false",
        "LOG_LEVEL": "DEBUG",
        "ALLOWED_ORIGINS": "*",  # Tests need permissive CORS (prod defaults to deny-all)
    }
    with _app_client(env) as client:
        app = client.app
        app.state.settings = test_settings  # type: ignore[attr-defined]
        app.state.rate_limiter = rate_limiter  # type: ignore[attr-defined]
        app.state.metrics = metrics  # type: ignore[attr-defined]
        app.state.generation_service = service  # type: ignore[attr-defined]
        yield client


@pytest.fixture
def unconfigured_client() -> Iterator[TestClient]:
    """App started with no model credential at all."""
    env = {"GEMINI_API_KEY": "", "MODEL_BACKEND": "gemini", "LOG_JSON": "false"}
    with _app_client(env) as client:
        yield client


@pytest.fixture
def mock_backend_client() -> Iterator[TestClient]:
    """App running the offline mock backend end to end."""
    env = {"GEMINI_API_KEY": "", "MODEL_BACKEND": "mock", "LOG_JSON": "false"}
    with _app_client(env) as client:
        yield client
