"""Pydantic schemas for Events."""
from __future__ import annotations
from datetime import datetime
from typing import Optional
from pydantic import BaseModel

from eventsync.models.invitation import InvitationStatus
from eventsync.schemas.invitation import InvitationOut
from eventsync.schemas.user import UserSummary


class EventCreate(BaseModel):
    # Title and start are checked by the service so that a missing value is a 400, not a 422.
    title: str = ""
    description: Optional[str] = None
    location: Optional[str] = None
    start_time_utc: Optional[datetime] = None
    end_time_utc: Optional[datetime] = None


class EventUpdate(BaseModel):
    """Partial update: only fields present in the request body are applied."""

    title: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    start_time_utc: Optional[datetime] = None
    end_time_utc: Optional[datetime] = None


class EventOut(BaseModel):
    event_id: str
    title: str
    description: Optional[str] = None
    location: Optional[str] = None
    start_time_utc: datetime
    end_time_utc: Optional[datetime] = None
    owner_id: str
    owner: UserSummary
    invitations: list[InvitationOut] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class EventWithStatusOut(EventOut):
    is_owner: bool
    my_status: InvitationStatus
