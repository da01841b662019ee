"""Invitation / RSVP API routes."""
import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from eventsync.database import get_db
from eventsync.deps import get_current_user
from eventsync.models.user import User
from eventsync.schemas.invitation import InvitationCreate, InvitationOut, StatusOut, StatusUpdate
from eventsync.services import invitation_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/{event_id}/invitations", response_model=InvitationOut, status_code=status.HTTP_201_CREATED)
def invite(
    event_id: str,
    payload: InvitationCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Invite someone by email (owner only)."""
    return invitation_service.create_invitation(db, event_id, payload.email, current_user)


@router.patch("/{event_id}/status", response_model=StatusOut)
def set_status(
    event_id: str,
    payload: StatusUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Set or update the caller's own RSVP status for an event."""
    new_status = invitation_service.parse_status(payload.status)
    if new_status is None:
        raise HTTPException(status_code=400, detail=f"Invalid status: {payload.status}")
    invitation = invitation_service.set_own_status(db, event_id, current_user, new_status)
    return StatusOut(status=invitation.status)


@router.delete("/{event_id}/invitations/{invitation_id}", status_code=status.HTTP_204_NO_CONTENT)
def revoke(
    event_id: str,
    invitation_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Remove an invitation (owner only)."""
    invitation_service.revoke_invitation(db, event_id, invitation_id, current_user)
