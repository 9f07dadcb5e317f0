# ─────────────────────────────────────────────────────────────────────────────
# Catalog Routes — cities, categories, events, reviews
# ─────────────────────────────────────────────────────────────────────────────
# Thin wrappers over InMemoryEventStore. The assistant reads its city and
# category lists from here; publishing a drafted event goes to POST /api/events.
# ─────────────────────────────────────────────────────────────────────────────

import math

from fastapi import APIRouter, Depends, Query

from eventara.dependencies import get_store
from eventara.schemas import (
    Category,
    City,
    ErrorResponse,
    Event,
    EventCreate,
    EventPage,
    EventUpdate,
    ReviewCreate,
)
from eventara.store.memory import InMemoryEventStore

router = APIRouter(prefix="/api")

_NOT_FOUND = {404: {"model": ErrorResponse}}


@router.get("/cities", response_model=list[City])
async def list_cities(store: InMemoryEventStore = Depends(get_store)) -> list[City]:
    return await store.get_cities()


@router.get("/categories", response_model=list[Category])
async def list_categories(store: InMemoryEventStore = Depends(get_store)) -> list[Category]:
    return await store.get_categories()


@router.get("/events", response_model=EventPage)
async def list_events(
    city: str | None = Query(default=None, description="City id filter"),
    category: str | None = Query(default=None, description="Category id filter; 'all' disables it"),
    q: str | None = Query(default=None, max_length=200, description="Text search"),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=12, ge=1, le=50),
    store: InMemoryEventStore = Depends(get_store),
) -> EventPage:
    """Events newest first, filtered then paged."""
    events = await store.get_events(city_id=city, category_id=category, query=q)
    start = (page - 1) * page_size
    return EventPage(
        items=events[start : start + page_size],
        page=page,
        page_size=page_size,
        total=len(events),
        total_pages=math.ceil(len(events) / page_size),
    )


@router.get("/events/{event_id}", response_model=Event, responses=_NOT_FOUND)
async def get_event(event_id: str, store: InMemoryEventStore = Depends(get_store)) -> Event:
    return await store.get_event(event_id)


@router.post("/events", response_model=Event, status_code=201, responses=_NOT_FOUND)
async def create_event(
    body: EventCreate,
    store: InMemoryEventStore = Depends(get_store),
) -> Event:
    return await store.add_event(body)


@router.patch("/events/{event_id}", response_model=Event, responses=_NOT_FOUND)
async def update_event(
    event_id: str,
    body: EventUpdate,
    store: InMemoryEventStore = Depends(get_store),
) -> Event:
    return await store.update_event(event_id, body)


@router.post(
    "/events/{event_id}/reviews",
    response_model=Event,
    status_code=201,
    responses=_NOT_FOUND,
)
async def add_review(
    event_id: str,
    body: ReviewCreate,
    store: InMemoryEventStore = Depends(get_store),
) -> Event:
    return await store.add_review(event_id, body)
