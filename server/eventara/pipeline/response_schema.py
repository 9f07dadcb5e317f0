# ─────────────────────────────────────────────────────────────────────────────
# Response Schema — constrains the structured-generation call
# ─────────────────────────────────────────────────────────────────────────────
# OpenAPI-subset dict accepted by google-genai's `response_schema`.
# Mirrors schemas.EventDetails (camelCase keys, all strings).
# ─────────────────────────────────────────────────────────────────────────────

from collections.abc import Sequence
from typing import Any

from eventara.schemas import Locale


def _localized(description: str) -> dict[str, Any]:
    return {
        "type": "OBJECT",
        "description": description,
        "properties": {locale.value: {"type": "STRING"} for locale in Locale},
        "required": [locale.value for locale in Locale],
    }


def build_response_schema(
    city_ids: Sequence[str], category_ids: Sequence[str]
) -> dict[str, Any]:
    """Schema for EventDetails with id fields restricted to the offered ids."""
    return {
        "type": "OBJECT",
        "properties": {
            "title": _localized("A catchy and creative title for the event."),
            "description": _localized("An engaging and detailed description of the event."),
            "suggestedCityId": {
                "type": "STRING",
                "enum": list(city_ids),
                "description": "The ID of the most appropriate city from the provided list.",
            },
            "suggestedCategoryId": {
                "type": "STRING",
                "enum": list(category_ids),
                "description": "The ID of the most appropriate category from the provided list.",
            },
            "imagePrompt": {
                "type": "STRING",
                "description": (
                    "A highly descriptive, visually rich prompt for an AI image generator "
                    "to create a compelling featured image for this event."
                ),
            },
        },
        "required": [
            "title",
            "description",
            "suggestedCityId",
            "suggestedCategoryId",
            "imagePrompt",
        ],
    }
