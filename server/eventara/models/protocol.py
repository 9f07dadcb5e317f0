# ─────────────────────────────────────────────────────────────────────────────
# Model Protocol — runtime_checkable interface for generative model clients
# ─────────────────────────────────────────────────────────────────────────────
# Every backend (Gemini, mock) satisfies GenerativeModelClient, which makes
# the generation service mockable and the backend swappable by config.
# ─────────────────────────────────────────────────────────────────────────────

from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable

from eventara.pipeline.encoding import InlineImage

# Content parts in send order: plain text or an inline image.
ContentPart = str | InlineImage


@runtime_checkable
class GenerativeModelClient(Protocol):
    """Structured text generation plus image generation."""

    @property
    def name(self) -> str: ...

    async def generate_structured(
        self,
        *,
        system_instruction: str,
        parts: Sequence[ContentPart],
        response_schema: dict[str, Any],
    ) -> str:
        """Return the raw JSON text produced under ``response_schema``."""
        ...

    async def generate_images(self, prompt: str, *, number_of_images: int = 1) -> list[bytes]:
        """Return raw image bytes; an empty list means nothing was generated."""
        ...
