"""Event search route."""
from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from eventsync.database import get_db
from eventsync.deps import get_current_user
from eventsync.models.user import User
from eventsync.schemas.event import EventOut
from eventsync.services import event_service

router = APIRouter()


@router.get("", response_model=list[EventOut])
def search_events(
    q: Optional[str] = Query(None, description="Matches title or description"),
    start_from: Optional[datetime] = Query(None, alias="from"),
    start_to: Optional[datetime] = Query(None, alias="to"),
    location: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Search events the caller owns or is invited to."""
    return event_service.search_events(db, current_user, q=q, start_from=start_from, start_to=start_to, location=location)
