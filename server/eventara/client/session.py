"""One assistant dialog: collect an idea, show a suggestion, hand it to the form.

The session never publishes anything. ``apply()`` only pre-fills an
``EventForm``; the user still edits and submits that form.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import structlog

from eventara.client.assistant import EventAssistantClient
from eventara.client.errors import AssistantError, InvalidImageError, SessionBusyError
from eventara.client.forms import EventForm
from eventara.pipeline.encoding import to_data_url
from eventara.schemas import (
    DEFAULT_MAX_IMAGE_BYTES,
    AIAutofillData,
    Category,
    City,
    GenerationResult,
    Locale,
)

logger = structlog.get_logger(__name__)

EMPTY_PROMPT_MESSAGE = "Please describe your event idea."


@dataclass(frozen=True)
class SuggestionPreview:
    title: str
    description: str
    city_name: str
    category_name: str
    image_data_url: str


class AssistantSession:
    def __init__(
        self,
        assistant: EventAssistantClient,
        cities: Sequence[City],
        categories: Sequence[Category],
        *,
        max_image_bytes: int = DEFAULT_MAX_IMAGE_BYTES,
    ) -> None:
        self._assistant = assistant
        self.cities = list(cities)
        self.categories = list(categories)
        self._max_image_bytes = max_image_bytes

        self.prompt = ""
        self.image_data_url: str | None = None
        self.result: GenerationResult | None = None
        self.error: str | None = None
        self.is_loading = False

    def attach_image(self, data: bytes, mime_type: str) -> None:
        """Attach a reference image for the model to look at.

        Raises:
            InvalidImageError: not an image, or larger than the upload cap.
        """
        if not mime_type.startswith("image/"):
            raise InvalidImageError("Please upload a valid image file.")
        if len(data) > self._max_image_bytes:
            raise InvalidImageError(
                f"Image size cannot exceed {self._max_image_bytes // (1024 * 1024)}MB."
            )
        self.image_data_url = to_data_url(data, mime_type)
        self.error = None

    def remove_image(self) -> None:
        self.image_data_url = None

    async def submit(self, prompt: str) -> GenerationResult | None:
        """Request a suggestion. Failures end up in ``self.error`` verbatim.

        Raises:
            SessionBusyError: a request is in flight or a suggestion is on screen.
        """
        if self.is_loading:
            raise SessionBusyError("A suggestion request is already in progress.")
        if self.result is not None:
            raise SessionBusyError("Apply or discard the current suggestion first.")

        self.prompt = prompt
        if not prompt.strip():
            self.error = EMPTY_PROMPT_MESSAGE
            return None

        self.error = None
        self.is_loading = True
        try:
            self.result = await self._assistant.get_suggestions(
                prompt, self.cities, self.categories, self.image_data_url
            )
        except AssistantError as e:
            self.error = e.message
            logger.info("assistant_suggestion_failed", error_type=type(e).__name__)
            return None
        finally:
            self.is_loading = False
        return self.result

    def preview(self, locale: Locale = Locale.en) -> SuggestionPreview | None:
        """Display view of the current suggestion with ids resolved to names."""
        if self.result is None:
            return None
        return SuggestionPreview(
            title=getattr(self.result.title, locale.value),
            description=getattr(self.result.description, locale.value),
            city_name=_display_name(self.cities, self.result.suggested_city_id, locale),
            category_name=_display_name(self.categories, self.result.suggested_category_id, locale),
            image_data_url=to_data_url(self.result.generated_image_base64),
        )

    def apply(self, form: EventForm) -> AIAutofillData:
        """Pre-fill ``form`` with the suggestion and reset the session."""
        if self.result is None:
            raise AssistantError("There is no suggestion to apply.")
        data = AIAutofillData.from_result(self.result)
        form.apply_autofill(data)
        logger.info("assistant_suggestion_applied", city=data.city_id, category=data.category_id)
        self._reset()
        return data

    def discard(self) -> None:
        """Drop the shown suggestion so the user can ask again."""
        self.result = None

    def close(self) -> None:
        if self.is_loading:
            raise SessionBusyError("Wait for the current request to finish before closing.")
        self._reset()

    def _reset(self) -> None:
        self.prompt = ""
        self.image_data_url = None
        self.result = None
        self.error = None


def _display_name(items: Sequence[City | Category], item_id: str, locale: Locale) -> str:
    for item in items:
        if item.id == item_id:
            return str(getattr(item.name, locale.value))
    return item_id
