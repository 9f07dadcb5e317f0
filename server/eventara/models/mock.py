# ─────────────────────────────────────────────────────────────────────────────
# Mock Model Client — deterministic drafts for local development
# ─────────────────────────────────────────────────────────────────────────────
# Selected with MODEL_BACKEND=mock. Needs no credential and no network.
# Picks the first offered city/category (read from the response schema enum)
# and paints a solid 16:9 PNG whose colour is derived from the prompt hash.
# ─────────────────────────────────────────────────────────────────────────────

import hashlib
import io
import json
from collections.abc import Sequence
from typing import Any

import PIL.Image
import structlog

from eventara.models.protocol import ContentPart
from eventara.schemas import Locale

logger = structlog.get_logger(__name__)

_IMAGE_SIZE = (640, 360)


class MockModelClient:
    """Offline stand-in for GeminiModelClient."""

    @property
    def name(self) -> str:
        return "mock"

    async def generate_structured(
        self,
        *,
        system_instruction: str,
        parts: Sequence[ContentPart],
        response_schema: dict[str, Any],
    ) -> str:
        idea = next((p for p in parts if isinstance(p, str)), "")
        properties = response_schema["properties"]
        city_id = properties["suggestedCityId"]["enum"][0]
        category_id = properties["suggestedCategoryId"]["enum"][0]
        logger.info("mock_text_generated", city=city_id, category=category_id)
        return json.dumps(
            {
                "title": {locale.value: f"[{locale.value}] Draft event" for locale in Locale},
                "description": {locale.value: f"[{locale.value}] {idea}" for locale in Locale},
                "suggestedCityId": city_id,
                "suggestedCategoryId": category_id,
                "imagePrompt": f"Poster photograph for: {idea}",
            }
        )

    async def generate_images(self, prompt: str, *, number_of_images: int = 1) -> list[bytes]:
        digest = hashlib.sha256(prompt.encode()).digest()
        images = []
        for i in range(number_of_images):
            colour = (digest[i % 32], digest[(i + 1) % 32], digest[(i + 2) % 32])
            buffer = io.BytesIO()
            PIL.Image.new("RGB", _IMAGE_SIZE, color=colour).save(buffer, format="PNG")
            images.append(buffer.getvalue())
        return images
