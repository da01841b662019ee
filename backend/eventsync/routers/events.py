"""Event API routes — delegates to event_service for invariant enforcement."""
import logging
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from eventsync.database import get_db
from eventsync.deps import get_current_user
from eventsync.models.event import Event
from eventsync.models.invitation import InvitationStatus
from eventsync.models.user import User
from eventsync.schemas.event import EventCreate, EventUpdate, EventOut, EventWithStatusOut
from eventsync.services import event_service
from eventsync.services.ics_export import build_ics, ics_filename

logger = logging.getLogger(__name__)
router = APIRouter()


def _with_status(event: Event, is_owner: bool, my_status: InvitationStatus) -> EventWithStatusOut:
    data = EventOut.model_validate(event).model_dump()
    return EventWithStatusOut(**data, is_owner=is_owner, my_status=my_status)


@router.get("/", response_model=list[EventWithStatusOut])
def list_events(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Events the caller owns, then events the caller is invited to."""
    return [
        _with_status(event, is_owner, my_status)
        for event, is_owner, my_status in event_service.list_events_for(db, current_user)
    ]


@router.post("/", response_model=EventOut, status_code=status.HTTP_201_CREATED)
def create_event(
    payload: EventCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return event_service.create_event(
        db=db,
        owner_id=current_user.user_id,
        title=payload.title,
        start_utc=payload.start_time_utc,
        end_utc=payload.end_time_utc,
        description=payload.description,
        location=payload.location,
    )


@router.get("/{event_id}", response_model=EventWithStatusOut)
def get_event(event_id: str, current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Fetch a single event (owner or invitee only)."""
    event = event_service.get_visible_event(db, event_id, current_user)
    return _with_status(
        event,
        event.owner_id == current_user.user_id,
        event_service.my_status(db, event, current_user),
    )


@router.patch("/{event_id}", response_model=EventOut)
def update_event(
    event_id: str,
    payload: EventUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Partial update (owner only)."""
    updates = payload.model_dump(exclude_unset=True)
    return event_service.update_event(db, event_id, current_user.user_id, updates)


@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_event(event_id: str, current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    event_service.delete_event(db, event_id, current_user.user_id)


@router.post("/{event_id}/duplicate", response_model=EventOut, status_code=status.HTTP_201_CREATED)
def duplicate_event(event_id: str, current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return event_service.duplicate_event(db, event_id, current_user)


@router.get("/{event_id}/export")
def export_event(event_id: str, current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Download the event as an .ics file."""
    event = event_service.get_visible_event(db, event_id, current_user)
    return Response(
        content=build_ics(event),
        media_type="text/calendar; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{ics_filename(event.title)}"'},
    )
