# ─────────────────────────────────────────────────────────────────────────────
# Pydantic v2 Request / Response Schemas
# ─────────────────────────────────────────────────────────────────────────────
# Wire format is camelCase (alias generator); Python code uses snake_case.
# populate_by_name lets both spellings construct a model.
# ─────────────────────────────────────────────────────────────────────────────


from datetime import UTC, datetime
from enum import StrEnum
from typing import Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from eventara.pipeline.encoding import InlineImage, parse_data_url, verify_image

ALL_CATEGORY_ID = "all"  # Reserved browse-everything category, never suggested
DEFAULT_MIN_PROMPT_LENGTH = 10
DEFAULT_MAX_PROMPT_LENGTH = 2000
DEFAULT_MAX_IMAGE_BYTES = 10 * 1024 * 1024


class Locale(StrEnum):
    """Locales every generated title/description must cover."""

    en = "en"
    ar = "ar"
    ku = "ku"  # Kurdish (Sorani)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ── Generation contract ──────────────────────────────────────────────────────


class LocalizedText(BaseModel):
    """Text in all three locales. Partial translations are invalid."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    en: str
    ar: str
    ku: str


class OptionName(BaseModel):
    """Display name of a city or category. Only English is required."""

    en: str = Field(..., min_length=1)
    ar: str | None = None
    ku: str | None = None


class CatalogOption(BaseModel):
    """A selectable city or category offered to the model."""

    id: str = Field(..., min_length=1)
    name: OptionName


class GenerationRequest(CamelModel):
    """Incoming request to draft an event with the AI assistant.

    Validation context keys (optional): ``min_prompt_length``,
    ``max_prompt_length``, ``max_image_bytes``.
    """

    prompt: str
    cities: list[CatalogOption] = Field(..., min_length=1)
    categories: list[CatalogOption] = Field(..., min_length=1)
    image_base64: str | None = None

    @field_validator("prompt")
    @classmethod
    def prompt_length_in_bounds(cls, v: str, info: ValidationInfo) -> str:
        minimum = (info.context or {}).get("min_prompt_length", DEFAULT_MIN_PROMPT_LENGTH)
        v = v.strip()
        if len(v) < minimum:
            raise ValueError(f"must be a non-empty string of at least {minimum} characters")
        maximum = (info.context or {}).get("max_prompt_length", DEFAULT_MAX_PROMPT_LENGTH)
        if len(v) > maximum:
            raise ValueError(f"cannot exceed {maximum} characters")
        return v

    @field_validator("image_base64")
    @classmethod
    def image_is_data_url(cls, v: str | None, info: ValidationInfo) -> str | None:
        if v is None or not v.strip():
            return None
        image = parse_data_url(v)
        if not image.mime_type.startswith("image/"):
            raise ValueError(f"must be an image, got '{image.mime_type}'")
        limit = (info.context or {}).get("max_image_bytes", DEFAULT_MAX_IMAGE_BYTES)
        if image.size_bytes > limit:
            raise ValueError(f"cannot exceed {limit // (1024 * 1024)}MB")
        verify_image(image.data)
        return v.strip()

    @model_validator(mode="after")
    def has_selectable_category(self) -> "GenerationRequest":
        if not any(c.id != ALL_CATEGORY_ID for c in self.categories):
            raise ValueError(f"categories must include a category other than '{ALL_CATEGORY_ID}'")
        return self

    @property
    def inline_image(self) -> InlineImage | None:
        return parse_data_url(self.image_base64) if self.image_base64 else None

    @property
    def selectable_categories(self) -> list[CatalogOption]:
        return [c for c in self.categories if c.id != ALL_CATEGORY_ID]


class EventDetails(CamelModel):
    """Structured output of the text model (before image generation)."""

    title: LocalizedText
    description: LocalizedText
    suggested_city_id: str
    suggested_category_id: str
    image_prompt: str = Field(..., min_length=1)


class GenerationResult(CamelModel):
    """Final AI suggestion returned to the caller. Immutable once built."""

    model_config = ConfigDict(frozen=True)

    title: LocalizedText
    description: LocalizedText
    suggested_city_id: str
    suggested_category_id: str
    generated_image_base64: str = Field(..., min_length=1, description="Base64 PNG bytes")


class AIAutofillData(CamelModel):
    """Projection of a GenerationResult handed to the event-creation form."""

    title: LocalizedText
    description: LocalizedText
    category_id: str
    city_id: str
    image_base64: str

    @classmethod
    def from_result(cls, result: GenerationResult) -> "AIAutofillData":
        return cls(
            title=result.title,
            description=result.description,
            category_id=result.suggested_category_id,
            city_id=result.suggested_city_id,
            image_base64=result.generated_image_base64,
        )


class ErrorResponse(BaseModel):
    error: str
    type: str | None = None
    details: str | None = None


# ── Catalog / events ─────────────────────────────────────────────────────────


class City(CamelModel):
    id: str
    name: LocalizedText
    image: str


class Category(CamelModel):
    id: str
    name: LocalizedText
    image: str


class User(CamelModel):
    """Public user view. Never carries a password."""

    id: str
    name: str
    avatar_url: str
    phone: str
    email: str
    is_verified: bool = False


class UserRecord(User):
    """Stored user, password excluded from every dump."""

    password: str = Field(..., exclude=True, repr=False)

    def public(self) -> User:
        return User.model_validate(self.model_dump())


class Coordinates(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lon: float = Field(..., ge=-180, le=180)


class Review(CamelModel):
    id: str
    user: User
    rating: int = Field(..., ge=1, le=5)
    comment: str
    timestamp: datetime


class Event(CamelModel):
    id: str
    title: LocalizedText
    description: LocalizedText
    organizer_id: str
    organizer_name: str
    category_id: str
    city_id: str
    date: datetime
    venue: str
    coordinates: Coordinates | None = None
    organizer_phone: str
    whatsapp_number: str | None = None
    image_url: str
    ticket_info: str | None = None
    reviews: list[Review] = Field(default_factory=list)
    is_featured: bool = False
    is_top: bool = False

    @field_validator("date")
    @classmethod
    def date_is_aware(cls, v: datetime) -> datetime:
        # Naive timestamps are UTC.
        return v if v.tzinfo is not None else v.replace(tzinfo=UTC)


class EventCreate(CamelModel):
    """Payload for creating an event (organizer name comes from the user)."""

    organizer_id: str
    title: LocalizedText
    description: LocalizedText
    category_id: str = Field(..., min_length=1)
    city_id: str = Field(..., min_length=1)
    date: datetime
    venue: str = Field(..., min_length=1)
    coordinates: Coordinates | None = None
    organizer_phone: str = Field(..., min_length=1)
    whatsapp_number: str | None = None
    image_url: str = Field(..., min_length=1)
    ticket_info: str | None = None


class EventUpdate(CamelModel):
    """Partial update; only fields that are set are applied."""

    title: LocalizedText | None = None
    description: LocalizedText | None = None
    category_id: str | None = None
    city_id: str | None = None
    date: datetime | None = None
    venue: str | None = None
    coordinates: Coordinates | None = None
    organizer_phone: str | None = None
    whatsapp_number: str | None = None
    image_url: str | None = None
    ticket_info: str | None = None


class ReviewCreate(CamelModel):
    user_id: str
    rating: int = Field(..., ge=1, le=5)
    comment: str = Field(..., min_length=1, max_length=2000)


class SignupRequest(CamelModel):
    name: str = Field(..., min_length=1)
    phone: str
    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=1)


class UnverifiedLogin(BaseModel):
    error: Literal["unverified"] = "unverified"
    email: str


class EventPage(CamelModel):
    items: list[Event]
    page: int
    page_size: int
    total: int
    total_pages: int


# ── Health ───────────────────────────────────────────────────────────────────


class LivenessResponse(BaseModel):
    """Liveness probe — minimal, near-zero cost."""

    status: str = "ok"


class ReadinessResponse(BaseModel):
    """Readiness probe — can the instance serve AI traffic?"""

    status: str  # "ready" or "not_ready"
    backend: str
    credential_configured: bool
