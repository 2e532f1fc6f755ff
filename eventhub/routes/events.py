import json

from fastapi import APIRouter, Depends, Form, HTTPException
from pydantic import ValidationError
from sqlalchemy.orm import Session

from eventhub.database.db import get_db
from eventhub.schemas.events import (
    EventCreate,
    EventEnvelope,
    EventListOut,
    EventStatsOut,
    EventUpdate,
)
from eventhub.services.events import (
    EventNotFoundError,
    create_event,
    get_event_by_slug,
    get_event_stats,
    get_similar_events,
    list_events,
    update_event,
)
from eventhub.services.normalizer import EventValidationError, is_valid_slug

router = APIRouter(prefix="/events", tags=["events"])


def valid_slug(slug: str) -> str:
    """Path dependency: reject slugs that could never have been generated."""
    slug = slug.strip()
    if not slug:
        raise HTTPException(status_code=400, detail="Slug must be a non-empty string")
    if not is_valid_slug(slug):
        raise HTTPException(
            status_code=400,
            detail="Invalid slug format: slug must contain only lowercase letters, numbers, and hyphens",
        )
    return slug


def _json_array(field: str, raw: str) -> list:
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        raise HTTPException(status_code=400, detail=f"{field} must be a JSON-encoded array")
    if not isinstance(value, list):
        raise HTTPException(status_code=400, detail=f"{field} must be a JSON-encoded array")
    return value


@router.get("", response_model=EventListOut)
def get_events(db: Session = Depends(get_db)):
    return {"events": list_events(db)}


@router.post("", response_model=EventEnvelope, status_code=201)
def post_event(
    title: str = Form(...),
    description: str = Form(...),
    overview: str = Form(...),
    image: str = Form(...),
    venue: str = Form(...),
    location: str = Form(...),
    date: str = Form(...),
    time: str = Form(...),
    mode: str = Form(...),
    audience: str = Form(...),
    agenda: str = Form(...),
    organizer: str = Form(...),
    tags: str = Form(...),
    db: Session = Depends(get_db),
):
    try:
        payload = EventCreate(
            title=title,
            description=description,
            overview=overview,
            image=image,
            venue=venue,
            location=location,
            date=date,
            time=time,
            mode=mode,
            audience=audience,
            agenda=_json_array("agenda", agenda),
            organizer=organizer,
            tags=_json_array("tags", tags),
        )
    except ValidationError as e:
        raise HTTPException(
            status_code=400,
            detail=[{"loc": err["loc"], "msg": err["msg"]} for err in e.errors()],
        )

    try:
        event = create_event(db, payload)
    except EventValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return {"message": "Event created successfully", "event": event}


@router.get("/{slug}", response_model=EventEnvelope)
def get_event(slug: str = Depends(valid_slug), db: Session = Depends(get_db)):
    event = get_event_by_slug(db, slug)
    if event is None:
        raise HTTPException(status_code=404, detail=f"No event exists with slug: {slug}")
    return {"message": "Event fetched successfully", "event": event}


@router.patch("/{slug}", response_model=EventEnvelope)
def patch_event(
    changes: EventUpdate,
    slug: str = Depends(valid_slug),
    db: Session = Depends(get_db),
):
    try:
        event = update_event(db, slug, changes)
    except EventNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except EventValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"message": "Event updated successfully", "event": event}


@router.get("/{slug}/similar", response_model=EventListOut)
def similar_events(slug: str = Depends(valid_slug), db: Session = Depends(get_db)):
    try:
        events = get_similar_events(db, slug)
    except EventNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"events": events}


@router.get("/{slug}/stats", response_model=EventStatsOut)
def event_stats(slug: str = Depends(valid_slug), db: Session = Depends(get_db)):
    event = get_event_by_slug(db, slug)
    if event is None:
        raise HTTPException(status_code=404, detail="Event not found")
    return get_event_stats(db, event.id)
