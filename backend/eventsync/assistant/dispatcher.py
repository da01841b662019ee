"""Action dispatcher — one parsed action to at most one mutation and one result.

Handlers go through the same service functions as the HTTP routes, so
ownership and validation rules are identical on both paths. A 4xx raised by a
service (unknown event, not the owner, invalid time range) drops the action:
no result is returned and nothing about the reason reaches the model or the
user, so the assistant cannot be used to discover other users' events. Database
errors are not caught here.
"""
import logging
from typing import Callable, Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from eventsync.assistant.actions import (
    AssistantAction,
    CreateEventAction,
    DeleteEventAction,
    InviteAction,
    ReplyAction,
    SetStatusAction,
    UpdateEventAction,
)
from eventsync.models.user import User
from eventsync.schemas.assistant import (
    ActionResult,
    CreatedResult,
    DeletedResult,
    InvitedResult,
    InviteFailedResult,
    StatusUpdatedResult,
    UpdatedResult,
)
from eventsync.schemas.event import EventOut
from eventsync.services import event_service
from eventsync.services.invitation_service import (
    InviteOutcome,
    invite_by_email,
    parse_status,
    set_own_status,
)

logger = logging.getLogger(__name__)

# action field -> event column
_UPDATE_FIELDS = {
    "title": "title",
    "description": "description",
    "location": "location",
    "start_time": "start_time_utc",
    "end_time": "end_time_utc",
}


def _create_event(db: Session, caller: User, action: CreateEventAction) -> ActionResult:
    event = event_service.create_event(
        db=db,
        owner_id=caller.user_id,
        title=action.title,
        start_utc=action.start_time,
        end_utc=action.end_time,
        description=action.description,
        location=action.location,
    )

    invited: list[str] = []
    for raw_email in action.invite_emails or []:
        result = invite_by_email(db, event, raw_email, caller)
        if result.outcome == InviteOutcome.created:
            invited.append(result.invitation.invitee_email)
        else:
            logger.info("Skipped invite on new event %s: %s", event.event_id, result.outcome.value)

    db.refresh(event)
    return CreatedResult(event=EventOut.model_validate(event), invited=invited)


def _update_event(db: Session, caller: User, action: UpdateEventAction) -> ActionResult:
    updates = {
        column: getattr(action, field)
        for field, column in _UPDATE_FIELDS.items()
        if field in action.model_fields_set
    }
    event = event_service.update_event(db, action.event_id, caller.user_id, updates)
    return UpdatedResult(event=EventOut.model_validate(event))


def _delete_event(db: Session, caller: User, action: DeleteEventAction) -> ActionResult:
    event_service.delete_event(db, action.event_id, caller.user_id)
    return DeletedResult(event_id=action.event_id)


def _set_status(db: Session, caller: User, action: SetStatusAction) -> Optional[ActionResult]:
    new_status = parse_status(action.status)
    if new_status is None:
        logger.info("Dropped set_status with unknown status %r", action.status)
        return None
    # The assistant only updates an existing invitation; it never self-invites.
    invitation = set_own_status(db, action.event_id, caller, new_status, create_missing=False)
    if invitation is None:
        logger.info("Dropped set_status: user %s has no invitation on event %s", caller.user_id, action.event_id)
        return None
    return StatusUpdatedResult(event_id=invitation.event_id, status=invitation.status)


def _invite(db: Session, caller: User, action: InviteAction) -> Optional[ActionResult]:
    event = event_service.get_owned_event(db, action.event_id, caller.user_id, verb="invite people to")
    result = invite_by_email(db, event, action.email, caller)
    if result.outcome == InviteOutcome.created:
        return InvitedResult(event_id=event.event_id, email=result.invitation.invitee_email)
    if result.outcome == InviteOutcome.invalid_email:
        return InviteFailedResult(email=action.email)
    logger.info("Invite on event %s was a no-op: %s", event.event_id, result.outcome.value)
    return None


def _reply(db: Session, caller: User, action: ReplyAction) -> None:
    return None


_HANDLERS: dict[str, Callable[..., Optional[ActionResult]]] = {
    "create_event": _create_event,
    "update_event": _update_event,
    "delete_event": _delete_event,
    "set_status": _set_status,
    "invite": _invite,
    "reply": _reply,
}


def dispatch(db: Session, caller: User, action: AssistantAction) -> Optional[ActionResult]:
    """Apply ``action`` for ``caller``. None means nothing was applied."""
    handler = _HANDLERS[action.action]
    try:
        return handler(db, caller, action)
    except HTTPException as exc:
        if exc.status_code >= 500:
            raise
        db.rollback()
        logger.info("Dropped assistant action %s for user %s: %s", action.action, caller.user_id, exc.detail)
        return None
