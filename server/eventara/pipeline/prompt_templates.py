# ─────────────────────────────────────────────────────────────────────────────
# Prompt Templates — system instruction + user text for event drafting
# ─────────────────────────────────────────────────────────────────────────────


from collections.abc import Sequence

from eventara.schemas import ALL_CATEGORY_ID, CatalogOption

_INSTRUCTION_HEADER = (
    "You are an expert event planner assistant. Your task is to take a user's event idea "
    "and generate structured, creative, and appealing event details. "
    "The output must be in JSON format."
)

_IMAGE_STEP = (
    "5. Analyze the Provided Image: An image has been uploaded. "
    "Your suggestions should be heavily influenced by this image."
)

_INSTRUCTION_FOOTER = "Your final output must strictly follow the JSON schema provided."


def format_options(options: Sequence[CatalogOption], *, exclude_all: bool = False) -> str:
    """Render options as ``id: "x", name: "y"`` pairs joined by semicolons.

    The English display name is used; ids are passed through unchanged so
    the model can echo them back verbatim.
    """
    return "; ".join(
        f'id: "{option.id}", name: "{option.name.en}"'
        for option in options
        if not (exclude_all and option.id == ALL_CATEGORY_ID)
    )


def build_system_instruction(
    cities: Sequence[CatalogOption],
    categories: Sequence[CatalogOption],
    *,
    has_image: bool = False,
) -> str:
    """Build the system instruction for the structured-generation call.

    Embeds the id→name mappings so the model can only pick from what the
    caller offered. The reserved "all" category is never listed.

    Args:
        cities: Cities offered by the caller, in display order.
        categories: Categories offered by the caller, "all" included or not.
        has_image: Whether an inspiration image precedes the text part.

    Returns:
        A newline-separated instruction string.
    """
    lines = [
        _INSTRUCTION_HEADER,
        "1. Analyze the User's Prompt: Understand the core concept, location hints, "
        "and event type.",
        "2. Generate Titles & Descriptions: Create a catchy title and an engaging description. "
        "Provide translations for English (en), Arabic (ar), and Kurdish (ku).",
        "3. Suggest City & Category: Based on the prompt, choose the most appropriate city "
        "and category from the provided lists. Use the ids exactly as given.",
        f"   - Available Cities: {format_options(cities)}",
        f"   - Available Categories: {format_options(categories, exclude_all=True)}",
        "4. Create an Image Prompt: Generate a descriptive prompt for an AI image generator.",
    ]
    if has_image:
        lines.append(_IMAGE_STEP)
    lines.append(_INSTRUCTION_FOOTER)
    return "\n".join(lines)


def build_user_text(prompt: str) -> str:
    """Wrap the user's idea as the text part of the request."""
    return f'Here is my event idea: "{prompt.strip()}"'
