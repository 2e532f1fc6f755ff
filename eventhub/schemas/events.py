from datetime import datetime
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, Field

from eventhub.models.events import EventMode


def _lowercase(value: Any) -> Any:
    return value.strip().lower() if isinstance(value, str) else value


def _clean_items(value: Any) -> Any:
    if not isinstance(value, list):
        return value
    return [item.strip() for item in value if isinstance(item, str) and item.strip()]


def _clean_unique_items(value: Any) -> Any:
    cleaned = _clean_items(value)
    return list(dict.fromkeys(cleaned)) if isinstance(cleaned, list) else cleaned


Text = Annotated[str, Field(min_length=1)]
ShortText = Annotated[str, Field(min_length=1, max_length=200)]
ImageRef = Annotated[str, Field(min_length=1, max_length=2048)]
Mode = Annotated[EventMode, BeforeValidator(_lowercase)]
Agenda = Annotated[list[str], BeforeValidator(_clean_items), Field(min_length=1)]
Tags = Annotated[list[str], BeforeValidator(_clean_unique_items), Field(min_length=1)]


# ---------- Event ----------
class EventCreate(BaseModel):
    title: ShortText
    description: Text
    overview: Text
    image: ImageRef
    venue: ShortText
    location: ShortText
    date: Text
    time: Text
    mode: Mode
    audience: ShortText
    agenda: Agenda
    organizer: ShortText
    tags: Tags

    class Config:
        str_strip_whitespace = True


class EventUpdate(BaseModel):
    title: ShortText | None = None
    description: Text | None = None
    overview: Text | None = None
    image: ImageRef | None = None
    venue: ShortText | None = None
    location: ShortText | None = None
    date: Text | None = None
    time: Text | None = None
    mode: Mode | None = None
    audience: ShortText | None = None
    agenda: Agenda | None = None
    organizer: ShortText | None = None
    tags: Tags | None = None

    class Config:
        str_strip_whitespace = True


class EventOut(BaseModel):
    id: int
    title: str
    slug: str
    description: str
    overview: str
    image: str
    venue: str
    location: str
    date: str
    time: str
    mode: str
    audience: str
    agenda: list[str]
    organizer: str
    tags: list[str]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class EventEnvelope(BaseModel):
    message: str
    event: EventOut


class EventListOut(BaseModel):
    events: list[EventOut]


class EventStatsOut(BaseModel):
    event_id: int
    slug: str
    bookings_count: int
