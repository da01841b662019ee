"""Invitation service — invite by email, RSVP status, revocation, account linking.

``invite_by_email`` is the single resolver used by both the invitations route
and the assistant. It never raises for the expected no-op cases (self-invite,
already invited); callers decide whether those are errors. The unique
constraint on (event_id, invitee_email) is the authoritative duplicate guard:
the lookup before insert is only a shortcut, and a constraint violation on
commit is reported as ``already_invited``.
"""
import enum
import logging
from typing import NamedTuple, Optional

from email_validator import EmailNotValidError, validate_email
from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from eventsync.models.event import Event
from eventsync.models.invitation import Invitation, InvitationStatus
from eventsync.models.user import User
from eventsync.services.event_service import get_event, get_owned_event, find_user_invitation

logger = logging.getLogger(__name__)


class InviteOutcome(str, enum.Enum):
    created = "created"
    self_invite = "self_invite"
    already_invited = "already_invited"
    invalid_email = "invalid_email"


class InviteResult(NamedTuple):
    outcome: InviteOutcome
    invitation: Optional[Invitation] = None


def normalize_email(raw: Optional[str]) -> str:
    return (raw or "").strip().lower()


def is_valid_email(email: str) -> bool:
    """Syntax check only; no DNS lookup."""
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def invite_by_email(db: Session, event: Event, raw_email: Optional[str], inviter: User) -> InviteResult:
    """Invite ``raw_email`` to ``event``. The caller must already have checked ownership."""
    email = normalize_email(raw_email)
    if not is_valid_email(email):
        return InviteResult(InviteOutcome.invalid_email)
    if email == normalize_email(inviter.email):
        return InviteResult(InviteOutcome.self_invite)

    existing = (
        db.query(Invitation)
        .filter(Invitation.event_id == event.event_id, Invitation.invitee_email == email)
        .first()
    )
    if existing:
        return InviteResult(InviteOutcome.already_invited, existing)

    invitee = db.query(User).filter(User.email == email).first()
    invitation = Invitation(
        event_id=event.event_id,
        invitee_email=email,
        user_id=invitee.user_id if invitee else None,
        status=InvitationStatus.upcoming,
    )
    db.add(invitation)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race with an identical invite; the stored row wins.
        db.rollback()
        logger.info("Invitation for %s on event %s already exists", email, event.event_id)
        return InviteResult(InviteOutcome.already_invited)

    db.refresh(invitation)
    logger.info("Invited %s to event %s (linked user: %s)", email, event.event_id, invitation.user_id)
    return InviteResult(InviteOutcome.created, invitation)


def create_invitation(db: Session, event_id: str, raw_email: Optional[str], actor: User) -> Invitation:
    """HTTP path: owner-only invite where every no-op is reported as an error."""
    event = get_owned_event(db, event_id, actor.user_id, verb="invite people to")
    if not normalize_email(raw_email):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email is required")

    result = invite_by_email(db, event, raw_email, actor)
    if result.outcome == InviteOutcome.invalid_email:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email address is not valid")
    if result.outcome == InviteOutcome.self_invite:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You can't invite yourself to your own event",
        )
    if result.outcome == InviteOutcome.already_invited:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="This person is already invited")
    return result.invitation


def parse_status(raw: Optional[str]) -> Optional[InvitationStatus]:
    try:
        return InvitationStatus(raw)
    except ValueError:
        return None


def set_own_status(
    db: Session,
    event_id: str,
    user: User,
    new_status: InvitationStatus,
    create_missing: bool = True,
) -> Optional[Invitation]:
    """Overwrite the caller's RSVP status on an event.

    Any status may follow any other; no history is kept. With
    ``create_missing`` the caller's invitation is created when absent,
    otherwise None is returned and nothing is written.
    """
    event = get_event(db, event_id)
    invitation = find_user_invitation(db, event.event_id, user)

    if invitation is None:
        if not create_missing:
            return None
        invitation = Invitation(
            event_id=event.event_id,
            invitee_email=normalize_email(user.email),
            user_id=user.user_id,
            status=new_status,
        )
        db.add(invitation)
        try:
            db.commit()
        except IntegrityError:
            # A concurrent request created it first; overwrite that row below.
            db.rollback()
            invitation = find_user_invitation(db, event.event_id, user)
            if invitation is None:
                raise
        else:
            db.refresh(invitation)
            logger.info("User %s set status '%s' on event %s", user.user_id, new_status.value, event_id)
            return invitation

    invitation.status = new_status
    invitation.user_id = user.user_id
    db.commit()
    db.refresh(invitation)
    logger.info("User %s set status '%s' on event %s", user.user_id, new_status.value, event_id)
    return invitation


def revoke_invitation(db: Session, event_id: str, invitation_id: str, actor: User) -> None:
    """Owner removes an invitation from their event."""
    event = db.query(Event).filter(Event.event_id == event_id).first()
    if not event or event.owner_id != actor.user_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized")

    invitation = (
        db.query(Invitation)
        .filter(Invitation.invitation_id == invitation_id, Invitation.event_id == event_id)
        .first()
    )
    if not invitation:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Invitation not found")
    db.delete(invitation)
    db.commit()
    logger.info("Revoked invitation %s on event %s", invitation_id, event_id)


def link_pending_invitations(db: Session, user: User) -> int:
    """Attach invitations sent to ``user.email`` before the account existed. Caller commits."""
    count = (
        db.query(Invitation)
        .filter(Invitation.invitee_email == normalize_email(user.email), Invitation.user_id.is_(None))
        .update({Invitation.user_id: user.user_id}, synchronize_session=False)
    )
    if count:
        logger.info("Linked %d pending invitation(s) to user %s", count, user.user_id)
    return count
