from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from eventhub.database.db import get_db
from eventhub.schemas.bookings import BookingOut, BookRequest
from eventhub.services.bookings import EventLookupError, InvalidEmailError, create_booking
from eventhub.services.events import EventNotFoundError

router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.post("", response_model=BookingOut, status_code=201)
def book_event(payload: BookRequest, db: Session = Depends(get_db)):
    try:
        return create_booking(db, event_id=payload.event_id, email=payload.email)
    except InvalidEmailError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except EventNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except EventLookupError as e:
        raise HTTPException(status_code=503, detail=str(e))
