import logging
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from eventhub.models.bookings import Booking
from eventhub.models.events import Event
from eventhub.schemas.events import EventCreate, EventUpdate
from eventhub.services.normalizer import normalize_event, unique_slug

logger = logging.getLogger(__name__)


class EventNotFoundError(Exception):
    pass


def slug_exists(db: Session, slug: str, exclude_id: int | None = None) -> bool:
    stmt = select(Event.id).where(Event.slug == slug)
    if exclude_id is not None:
        stmt = stmt.where(Event.id != exclude_id)
    return db.scalar(stmt.limit(1)) is not None


def _payload_values(payload: EventCreate | EventUpdate) -> dict[str, Any]:
    values = payload.model_dump(exclude_unset=isinstance(payload, EventUpdate), exclude_none=True)
    if "mode" in values:
        values["mode"] = values["mode"].value
    return values


def _save(db: Session, event: Event, values: dict[str, Any], exclude_id: int | None) -> Event:
    """Normalize ``values`` onto ``event`` and commit, retrying once on a slug clash."""
    normalized = normalize_event(
        values,
        current=event if exclude_id is not None else None,
        slug_taken=lambda slug: slug_exists(db, slug, exclude_id),
    )
    for field, value in normalized.items():
        setattr(event, field, value)
    db.add(event)

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        if "slug" not in normalized:
            raise
        # another writer took the slug between the check and the commit
        logger.warning("Slug %r collided on write, retrying with a suffix", normalized["slug"])
        if exclude_id is not None:
            event = db.get(Event, exclude_id)  # type: ignore[assignment]
        for field, value in normalized.items():
            setattr(event, field, value)
        event.slug = unique_slug(normalized["title"], slug_taken=lambda slug: True)
        db.add(event)
        db.commit()

    db.refresh(event)
    return event


def create_event(db: Session, payload: EventCreate) -> Event:
    values = _payload_values(payload)
    event = _save(db, Event(), values, exclude_id=None)
    logger.info("Event %s created with slug %r", event.id, event.slug)
    return event


def update_event(db: Session, slug: str, changes: EventUpdate) -> Event:
    event = get_event_by_slug(db, slug)
    if event is None:
        raise EventNotFoundError(f"No event exists with slug: {slug}")

    values = _payload_values(changes)
    if not values:
        return event

    event = _save(db, event, values, exclude_id=event.id)
    logger.info("Event %s updated (%s)", event.id, ", ".join(sorted(values)))
    return event


def get_event_by_slug(db: Session, slug: str) -> Event | None:
    return db.scalar(select(Event).where(Event.slug == slug.strip().lower()))


def list_events(db: Session) -> list[Event]:
    stmt = select(Event).order_by(Event.created_at.desc(), Event.id.desc())
    return list(db.scalars(stmt))


def get_similar_events(db: Session, slug: str, limit: int = 3) -> list[Event]:
    """Other events sharing at least one tag with the event at ``slug``, newest first."""
    event = get_event_by_slug(db, slug)
    if event is None:
        raise EventNotFoundError(f"No event exists with slug: {slug}")

    tags = set(event.tags)
    similar = [
        other for other in list_events(db)
        if other.id != event.id and tags.intersection(other.tags)
    ]
    return similar[:limit]


def get_event_stats(db: Session, event_id: int) -> dict:
    event = db.get(Event, event_id)
    if not event:
        return {}

    bookings_count = db.scalar(
        select(func.count(Booking.id)).where(Booking.event_id == event_id)
    )

    return {
        "event_id": event.id,
        "slug": event.slug,
        "bookings_count": int(bookings_count or 0),
    }
