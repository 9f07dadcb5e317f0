# In-memory event catalog: cities, categories, users, events, reviews.
# Each instance deep-copies the seed, so tests and app instances never share
# state. A single asyncio.Lock serializes writes.

from __future__ import annotations

import asyncio
import copy
import uuid
from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Any

import pydantic
import structlog

from eventara.exceptions import (
    AuthenticationError,
    ConflictError,
    InvalidRequestError,
    NotFoundError,
)
from eventara.schemas import (
    Category,
    City,
    Event,
    EventCreate,
    EventUpdate,
    Review,
    ReviewCreate,
    SignupRequest,
    UnverifiedLogin,
    User,
    UserRecord,
)
from eventara.store import seed

logger = structlog.get_logger(__name__)


def _new_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


class InMemoryEventStore:
    """Async event catalog backed by process memory."""

    def __init__(
        self,
        *,
        cities: Sequence[dict[str, Any]] | None = None,
        categories: Sequence[dict[str, Any]] | None = None,
        users: Sequence[dict[str, Any]] | None = None,
        events: Sequence[dict[str, Any]] | None = None,
    ) -> None:
        self._cities = [
            City.model_validate(c) for c in copy.deepcopy(seed.CITIES if cities is None else cities)
        ]
        self._categories = [
            Category.model_validate(c)
            for c in copy.deepcopy(seed.CATEGORIES if categories is None else categories)
        ]
        self._users = [
            UserRecord.model_validate(u) for u in copy.deepcopy(seed.USERS if users is None else users)
        ]
        self._events = [
            Event.model_validate(e) for e in copy.deepcopy(seed.EVENTS if events is None else events)
        ]
        self._lock = asyncio.Lock()

    # ── Reference data ───────────────────────────────────────────────────────

    async def get_cities(self) -> list[City]:
        return [c.model_copy(deep=True) for c in self._cities]

    async def get_categories(self) -> list[Category]:
        return [c.model_copy(deep=True) for c in self._categories]

    # ── Events ───────────────────────────────────────────────────────────────

    async def get_events(
        self,
        *,
        city_id: str | None = None,
        category_id: str | None = None,
        query: str | None = None,
    ) -> list[Event]:
        """Events newest date first, optionally filtered.

        ``category_id="all"`` means no category filter. ``query`` is a
        case-insensitive substring match over the title and description in
        every locale.
        """
        needle = query.strip().casefold() if query else ""
        matched = []
        for event in self._events:
            if city_id and event.city_id != city_id:
                continue
            if category_id and category_id != "all" and event.category_id != category_id:
                continue
            if needle and not _matches(event, needle):
                continue
            matched.append(event.model_copy(deep=True))
        return sorted(matched, key=lambda e: e.date, reverse=True)

    async def get_event(self, event_id: str) -> Event:
        return self._find_event(event_id).model_copy(deep=True)

    async def add_event(self, data: EventCreate) -> Event:
        organizer = self._find_user(data.organizer_id)
        if organizer is None:
            raise NotFoundError("Organizer not found")

        event = Event.model_validate(
            {
                **data.model_dump(),
                "id": _new_id("event"),
                "organizer_name": organizer.name,
                "reviews": [],
            }
        )
        async with self._lock:
            self._events.insert(0, event)
        logger.info("event_created", event_id=event.id, city=event.city_id)
        return event.model_copy(deep=True)

    async def update_event(self, event_id: str, data: EventUpdate) -> Event:
        async with self._lock:
            index = self._event_index(event_id)
            current = self._events[index]
            patch = data.model_dump(exclude_unset=True)
            try:
                updated = Event.model_validate({**current.model_dump(), **patch})
            except pydantic.ValidationError as e:
                field = ".".join(str(p) for p in e.errors()[0]["loc"])
                raise InvalidRequestError(f"Invalid value for \"{field}\".") from e
            self._events[index] = updated
        logger.info("event_updated", event_id=event_id, fields=sorted(patch))
        return updated.model_copy(deep=True)

    async def add_review(self, event_id: str, data: ReviewCreate) -> Event:
        user = self._find_user(data.user_id)
        async with self._lock:
            index = self._event_index(event_id, missing="Event or user not found")
            if user is None:
                raise NotFoundError("Event or user not found")
            review = Review(
                id=_new_id("review"),
                user=user.public(),
                rating=data.rating,
                comment=data.comment,
                timestamp=datetime.now(UTC),
            )
            self._events[index].reviews.insert(0, review)
            event = self._events[index]
        logger.info("review_added", event_id=event_id, rating=review.rating)
        return event.model_copy(deep=True)

    # ── Users ────────────────────────────────────────────────────────────────

    async def get_user_by_id(self, user_id: str) -> User | None:
        user = self._find_user(user_id)
        return user.public() if user else None

    async def login(self, email: str, password: str) -> User | UnverifiedLogin:
        """Authenticate. Unverified accounts get a marker instead of a user."""
        user = next(
            (u for u in self._users if u.email == email and u.password == password),
            None,
        )
        if user is None:
            raise AuthenticationError("Invalid credentials")
        if not user.is_verified:
            return UnverifiedLogin(email=user.email)
        logger.info("login_success", user_id=user.id)
        return user.public()

    async def signup(self, data: SignupRequest) -> User:
        async with self._lock:
            if any(u.email == data.email for u in self._users):
                raise ConflictError("An account with this email already exists.")
            record = UserRecord(
                id=_new_id("user"),
                name=data.name,
                avatar_url=f"https://i.pravatar.cc/150?u={data.email}",
                phone=data.phone,
                email=data.email,
                password=data.password,
                is_verified=False,
            )
            self._users.append(record)
        logger.info("signup_success", user_id=record.id)
        return record.public()

    async def verify_user(self, email: str) -> User:
        async with self._lock:
            user = next((u for u in self._users if u.email == email), None)
            if user is None:
                raise NotFoundError("User not found for verification.")
            user.is_verified = True
        logger.info("user_verified", user_id=user.id)
        return user.public()

    # ── Internals ────────────────────────────────────────────────────────────

    def _find_user(self, user_id: str) -> UserRecord | None:
        return next((u for u in self._users if u.id == user_id), None)

    def _event_index(self, event_id: str, missing: str = "Event not found") -> int:
        for i, event in enumerate(self._events):
            if event.id == event_id:
                return i
        raise NotFoundError(missing)

    def _find_event(self, event_id: str) -> Event:
        return self._events[self._event_index(event_id)]


def _matches(event: Event, needle: str) -> bool:
    texts = [*event.title.model_dump().values(), *event.description.model_dump().values()]
    return any(needle in text.casefold() for text in texts)
