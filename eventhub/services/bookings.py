import logging

from pydantic import EmailStr, TypeAdapter, ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from eventhub.models.bookings import Booking
from eventhub.models.events import Event
from eventhub.services.events import EventNotFoundError

logger = logging.getLogger(__name__)

_email_adapter = TypeAdapter(EmailStr)


class InvalidEmailError(Exception):
    pass


class EventLookupError(Exception):
    pass


def normalize_email(email: str) -> str:
    try:
        normalized = _email_adapter.validate_python((email or "").strip())
    except ValidationError as e:
        raise InvalidEmailError("Please provide a valid email address") from e
    return normalized.lower()


def ensure_event_exists(db: Session, event_id: int) -> Event:
    """Return the event a booking would point at, or raise."""
    try:
        event = db.get(Event, event_id)
    except SQLAlchemyError as e:
        logger.error("Event lookup for booking failed: %s", e)
        raise EventLookupError(
            "Failed to verify event existence. Please check the event ID."
        ) from e

    if event is None:
        raise EventNotFoundError(
            f"Event with ID {event_id} does not exist. "
            "Cannot create booking for non-existent event."
        )
    return event


def create_booking(db: Session, *, event_id: int, email: str) -> Booking:
    """
    Create a booking for an existing event.

    The event is looked up before the insert; a booking is never written
    against an id that does not resolve.
    """
    normalized_email = normalize_email(email)
    ensure_event_exists(db, event_id)

    booking = Booking(event_id=event_id, email=normalized_email)
    db.add(booking)
    db.commit()
    db.refresh(booking)
    logger.info("Booking %s created for event %s", booking.id, event_id)
    return booking

