"""Pydantic schemas for the assistant endpoint: request, per-action results, reply."""
from __future__ import annotations
from typing import Annotated, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field

from eventsync.models.invitation import InvitationStatus
from eventsync.schemas.event import EventOut


class EventSnapshot(BaseModel):
    """One line of the client's current view, passed through to the prompt."""

    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    id: str
    title: str
    start_time: str = Field(alias="startTime")
    location: Optional[str] = None


class AssistantRequest(BaseModel):
    # Null message or events are tolerated; a missing message is a 400 from the route.
    message: Optional[str] = None
    events: Optional[list[EventSnapshot]] = None


class CreatedResult(BaseModel):
    type: Literal["created"] = "created"
    event: EventOut
    invited: list[str] = []


class UpdatedResult(BaseModel):
    type: Literal["updated"] = "updated"
    event: EventOut


class DeletedResult(BaseModel):
    type: Literal["deleted"] = "deleted"
    event_id: str


class InvitedResult(BaseModel):
    type: Literal["invited"] = "invited"
    event_id: str
    email: str


class InviteFailedResult(BaseModel):
    type: Literal["invite_failed"] = "invite_failed"
    email: str


class StatusUpdatedResult(BaseModel):
    type: Literal["status_updated"] = "status_updated"
    event_id: str
    status: InvitationStatus


ActionResult = Annotated[
    Union[
        CreatedResult,
        UpdatedResult,
        DeletedResult,
        InvitedResult,
        InviteFailedResult,
        StatusUpdatedResult,
    ],
    Field(discriminator="type"),
]


class AssistantReply(BaseModel):
    reply: str
    actions: list[ActionResult] = []
