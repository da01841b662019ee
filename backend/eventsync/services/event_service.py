"""Core event service — enforces event invariants for every caller.

Both the HTTP routes and the assistant dispatcher go through these functions,
so the ownership and validation rules are identical on both paths:
- Authorization hook: only the owner may edit, delete or invite
- Visibility: owner or invitee may read, export or duplicate
- Title is required and cannot be cleared; start time cannot be cleared
- End time, when present, must be strictly after start time (checked on the
  merged values for partial updates)
"""
import logging
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import HTTPException, status
from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from eventsync.models.event import Event
from eventsync.models.invitation import Invitation, InvitationStatus
from eventsync.models.user import User

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("title", "description", "location", "start_time_utc", "end_time_utc")


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Return an aware UTC datetime. Naive values (as read back from SQLite) are taken as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    try:
        return value.astimezone(timezone.utc)
    except OverflowError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Date is out of range")


def _clean_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _check_time_range(start_utc: datetime, end_utc: Optional[datetime]) -> None:
    if end_utc is not None and as_utc(end_utc) <= as_utc(start_utc):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="End time must be after start time")


def _check_authorization(event: Event, actor_user_id: str, verb: str) -> None:
    """Only the owner may mutate an event."""
    if event.owner_id != actor_user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Only the owner can {verb} this event",
        )


def get_event(db: Session, event_id: str) -> Event:
    event = db.query(Event).filter(Event.event_id == event_id).first()
    if not event:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Event not found")
    return event


def get_owned_event(db: Session, event_id: str, actor_user_id: str, verb: str = "modify") -> Event:
    event = get_event(db, event_id)
    _check_authorization(event, actor_user_id, verb)
    return event


def find_user_invitation(db: Session, event_id: str, user: User) -> Optional[Invitation]:
    """The caller's own invitation: linked to their account, or unlinked but sent to their email."""
    return (
        db.query(Invitation)
        .filter(
            Invitation.event_id == event_id,
            or_(
                Invitation.user_id == user.user_id,
                and_(Invitation.user_id.is_(None), Invitation.invitee_email == user.email),
            ),
        )
        .first()
    )


def get_visible_event(db: Session, event_id: str, user: User) -> Event:
    """Owner or invitee may see an event; anyone else gets a 403."""
    event = get_event(db, event_id)
    if event.owner_id != user.user_id and find_user_invitation(db, event.event_id, user) is None:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized")
    return event


def my_status(db: Session, event: Event, user: User) -> InvitationStatus:
    if event.owner_id == user.user_id:
        return InvitationStatus.attending
    invitation = find_user_invitation(db, event.event_id, user)
    return invitation.status if invitation else InvitationStatus.upcoming


def create_event(
    db: Session,
    owner_id: str,
    title: Optional[str],
    start_utc: Optional[datetime],
    end_utc: Optional[datetime] = None,
    description: Optional[str] = None,
    location: Optional[str] = None,
) -> Event:
    """Create an event owned by ``owner_id`` after validating title and time range."""
    title = _clean_text(title)
    if not title:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Title is required")
    if start_utc is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Start time is required")
    _check_time_range(start_utc, end_utc)

    event = Event(
        title=title,
        description=_clean_text(description),
        location=_clean_text(location),
        start_time_utc=as_utc(start_utc),
        end_time_utc=as_utc(end_utc),
        owner_id=owner_id,
    )
    db.add(event)
    db.commit()
    db.refresh(event)
    logger.info("Created event '%s' (%s) by owner %s", title, event.event_id, owner_id)
    return event


def update_event(
    db: Session,
    event_id: str,
    actor_user_id: str,
    updates: dict[str, Any],
) -> Event:
    """Apply a partial update.

    ``updates`` holds only the fields the caller actually sent. A present
    description, location or end time that is empty clears the stored value;
    an empty title or start time is ignored because neither can be cleared.
    """
    event = get_owned_event(db, event_id, actor_user_id, verb="edit")

    changes: dict[str, Any] = {}
    for field, value in updates.items():
        if field not in EDITABLE_FIELDS:
            continue
        if field == "title":
            value = _clean_text(value)
            if value:
                changes[field] = value
        elif field == "start_time_utc":
            if value is not None:
                changes[field] = as_utc(value)
        elif field == "end_time_utc":
            changes[field] = as_utc(value)
        else:
            changes[field] = _clean_text(value)

    _check_time_range(
        changes.get("start_time_utc", event.start_time_utc),
        changes.get("end_time_utc", event.end_time_utc),
    )

    for field, value in changes.items():
        setattr(event, field, value)
    event.updated_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(event)
    logger.info("Updated event %s (%s)", event_id, ", ".join(sorted(changes)) or "no changes")
    return event


def delete_event(db: Session, event_id: str, actor_user_id: str) -> None:
    """Hard-delete an event; its invitations go with it."""
    event = get_owned_event(db, event_id, actor_user_id, verb="delete")
    db.delete(event)
    db.commit()
    logger.info("Deleted event %s by owner %s", event_id, actor_user_id)


def duplicate_event(db: Session, event_id: str, user: User) -> Event:
    """Copy an event the caller can see into a new event the caller owns."""
    source = get_visible_event(db, event_id, user)
    return create_event(
        db=db,
        owner_id=user.user_id,
        title=f"{source.title} (Copy)",
        start_utc=source.start_time_utc,
        end_utc=source.end_time_utc,
        description=source.description,
        location=source.location,
    )


def list_events_for(db: Session, user: User) -> list[tuple[Event, bool, InvitationStatus]]:
    """Owned events first, then events the user is invited to, each ordered by start time."""
    owned = (
        db.query(Event)
        .filter(Event.owner_id == user.user_id)
        .order_by(Event.start_time_utc)
        .all()
    )
    invitations = db.query(Invitation).filter(Invitation.user_id == user.user_id).all()
    status_by_event = {inv.event_id: inv.status for inv in invitations}

    invited: list[Event] = []
    if status_by_event:
        invited = (
            db.query(Event)
            .filter(Event.event_id.in_(list(status_by_event)), Event.owner_id != user.user_id)
            .order_by(Event.start_time_utc)
            .all()
        )

    result = [(ev, True, InvitationStatus.attending) for ev in owned]
    result += [(ev, False, status_by_event.get(ev.event_id, InvitationStatus.upcoming)) for ev in invited]
    return result


def search_events(
    db: Session,
    user: User,
    q: Optional[str] = None,
    start_from: Optional[datetime] = None,
    start_to: Optional[datetime] = None,
    location: Optional[str] = None,
) -> list[Event]:
    """Search events the user owns or is invited to."""
    invited_ids = db.query(Invitation.event_id).filter(Invitation.user_id == user.user_id)
    query = db.query(Event).filter(
        or_(Event.owner_id == user.user_id, Event.event_id.in_(invited_ids))
    )
    if q and q.strip():
        pattern = f"%{q.strip()}%"
        query = query.filter(or_(Event.title.ilike(pattern), Event.description.ilike(pattern)))
    if start_from:
        query = query.filter(Event.start_time_utc >= as_utc(start_from))
    if start_to:
        query = query.filter(Event.start_time_utc <= as_utc(start_to))
    if location and location.strip():
        query = query.filter(Event.location.ilike(f"%{location.strip()}%"))
    return query.order_by(Event.start_time_utc).all()
