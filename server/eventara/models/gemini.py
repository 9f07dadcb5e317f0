# ─────────────────────────────────────────────────────────────────────────────
# Gemini Model Client — Google Gen AI SDK (async surface)
# ─────────────────────────────────────────────────────────────────────────────
# Implements the GenerativeModelClient protocol from models/protocol.py.
#
# Text:  client.aio.models.generate_content with response_schema → JSON text
# Image: client.aio.models.generate_images → PNG bytes
#
# The API key only ever lives inside this object (held by genai.Client).
# ─────────────────────────────────────────────────────────────────────────────

import time
from collections.abc import Sequence
from typing import Any

import structlog
from google import genai
from google.genai import types

from eventara.models.protocol import ContentPart
from eventara.pipeline.encoding import InlineImage

logger = structlog.get_logger(__name__)

_DEFAULT_TEXT_MODEL = "gemini-2.5-flash"
_DEFAULT_IMAGE_MODEL = "imagen-4.0-generate-001"


class GeminiModelClient:
    """Gemini + Imagen wrapper for event drafting.

    Satisfies the ``GenerativeModelClient`` protocol defined in
    ``eventara.models.protocol``. Both calls go through the SDK's async
    client so cancellation of the request task aborts the HTTP call.
    """

    def __init__(
        self,
        api_key: str,
        *,
        text_model: str = _DEFAULT_TEXT_MODEL,
        image_model: str = _DEFAULT_IMAGE_MODEL,
        aspect_ratio: str = "16:9",
        image_mime_type: str = "image/png",
        client: genai.Client | None = None,
    ) -> None:
        self._client = client if client is not None else genai.Client(api_key=api_key)
        self._text_model = text_model
        self._image_model = image_model
        self._aspect_ratio = aspect_ratio
        self._image_mime_type = image_mime_type
        logger.info("gemini_client_ready", text_model=text_model, image_model=image_model)

    @property
    def name(self) -> str:
        return "gemini"

    @staticmethod
    def _to_part(part: ContentPart) -> types.Part:
        if isinstance(part, InlineImage):
            return types.Part.from_bytes(data=part.data, mime_type=part.mime_type)
        return types.Part.from_text(text=part)

    async def generate_structured(
        self,
        *,
        system_instruction: str,
        parts: Sequence[ContentPart],
        response_schema: dict[str, Any],
    ) -> str:
        t0 = time.perf_counter()
        response = await self._client.aio.models.generate_content(
            model=self._text_model,
            contents=[types.Content(role="user", parts=[self._to_part(p) for p in parts])],
            config=types.GenerateContentConfig(
                system_instruction=system_instruction,
                response_mime_type="application/json",
                response_schema=response_schema,
            ),
        )
        text = (response.text or "").strip()
        logger.info(
            "gemini_text_generated",
            model=self._text_model,
            chars=len(text),
            time_ms=round((time.perf_counter() - t0) * 1000, 1),
        )
        return text

    async def generate_images(self, prompt: str, *, number_of_images: int = 1) -> list[bytes]:
        t0 = time.perf_counter()
        response = await self._client.aio.models.generate_images(
            model=self._image_model,
            prompt=prompt,
            config=types.GenerateImagesConfig(
                number_of_images=number_of_images,
                output_mime_type=self._image_mime_type,
                aspect_ratio=self._aspect_ratio,
            ),
        )
        images = [
            generated.image.image_bytes
            for generated in response.generated_images or []
            if generated.image is not None and generated.image.image_bytes
        ]
        logger.info(
            "gemini_images_generated",
            model=self._image_model,
            count=len(images),
            time_ms=round((time.perf_counter() - t0) * 1000, 1),
        )
        return images
