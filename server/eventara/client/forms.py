# Event-creation form state. AI suggestions land here as editable defaults and
# are only published once the user submits the form.

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from eventara.pipeline.encoding import to_data_url
from eventara.schemas import AIAutofillData, Coordinates, EventCreate, LocalizedText


@dataclass
class EventForm:
    title: LocalizedText | None = None
    description: LocalizedText | None = None
    category_id: str = ""
    city_id: str = ""
    image_base64: str = ""  # raw base64 from the assistant
    image_url: str = ""  # uploaded or hosted image, wins over image_base64
    date: datetime | None = None
    venue: str = ""
    organizer_phone: str = ""
    whatsapp_number: str | None = None
    ticket_info: str | None = None
    coordinates: Coordinates | None = None

    def apply_autofill(self, data: AIAutofillData) -> None:
        """Pre-fill the AI-owned fields. Everything else is left untouched."""
        self.title = data.title
        self.description = data.description
        self.category_id = data.category_id
        self.city_id = data.city_id
        self.image_base64 = data.image_base64
        self.image_url = ""

    def autofill_values(self) -> AIAutofillData:
        """Read the AI-owned fields back in the shape they were applied."""
        if self.title is None or self.description is None:
            raise ValueError("Form has no title/description to read back.")
        return AIAutofillData(
            title=self.title,
            description=self.description,
            category_id=self.category_id,
            city_id=self.city_id,
            image_base64=self.image_base64,
        )

    @property
    def image_src(self) -> str:
        if self.image_url:
            return self.image_url
        return to_data_url(self.image_base64) if self.image_base64 else ""

    def missing_fields(self) -> list[str]:
        required = {
            "title": self.title,
            "description": self.description,
            "category_id": self.category_id,
            "city_id": self.city_id,
            "date": self.date,
            "venue": self.venue,
            "organizer_phone": self.organizer_phone,
            "image": self.image_src,
        }
        return [name for name, value in required.items() if not value]

    def to_event_create(self, organizer_id: str) -> EventCreate:
        """Build the store payload. Raises ValueError naming missing fields."""
        missing = self.missing_fields()
        if missing:
            raise ValueError(f"Missing required fields: {', '.join(missing)}")
        return EventCreate(
            organizer_id=organizer_id,
            title=self.title,
            description=self.description,
            category_id=self.category_id,
            city_id=self.city_id,
            date=self.date,
            venue=self.venue,
            coordinates=self.coordinates,
            organizer_phone=self.organizer_phone,
            whatsapp_number=self.whatsapp_number or None,
            image_url=self.image_src,
            ticket_info=self.ticket_info or None,
        )
