"""Pydantic schemas for Invitations and RSVP status."""
from __future__ import annotations
from datetime import datetime
from typing import Optional
from pydantic import BaseModel

from eventsync.models.invitation import InvitationStatus
from eventsync.schemas.user import UserSummary


class InvitationCreate(BaseModel):
    email: str = ""


class StatusUpdate(BaseModel):
    status: str  # upcoming, attending, maybe, declined


class StatusOut(BaseModel):
    status: InvitationStatus


class InvitationOut(BaseModel):
    invitation_id: str
    event_id: str
    invitee_email: str
    user_id: Optional[str] = None
    status: InvitationStatus
    created_at: Optional[datetime] = None
    user: Optional[UserSummary] = None

    model_config = {"from_attributes": True}
