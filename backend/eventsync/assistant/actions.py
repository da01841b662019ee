"""Assistant action schema — the closed set of actions the model may emit.

Each action is one JSON object tagged by ``action``. Required fields must be
present with the right JSON type or the whole object is rejected; nothing is
coerced (a numeric ``eventId`` is invalid, not "123"). Shape is all that is
checked here. Ownership, date ordering and status values are the
dispatcher's job.

Wire keys are camelCase because that is what the prompt asks the model for.
"""
from datetime import datetime, timezone
from typing import Annotated, Literal, NamedTuple, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictStr, TypeAdapter, field_validator


class Capability(NamedTuple):
    tag: str
    summary: str
    required: tuple[str, ...]
    optional: tuple[str, ...] = ()


CAPABILITIES = (
    Capability(
        "create_event",
        "Create a new event.",
        ("title", "startTime (ISO 8601)"),
        ("description", "location", "endTime", "inviteEmails (array of email strings to invite after creation)"),
    ),
    Capability(
        "update_event",
        "Update an existing event.",
        ("eventId",),
        ("title", "description", "location", "startTime", "endTime"),
    ),
    Capability("delete_event", "Delete an event.", ("eventId",)),
    Capability("set_status", "Set RSVP status.", ("eventId", "status (upcoming | attending | maybe | declined)")),
    Capability("invite", "Invite someone to an existing event.", ("eventId", "email")),
    Capability("reply", "Just respond with text (no action).", ("message",)),
)

ACTION_TAGS = tuple(capability.tag for capability in CAPABILITIES)


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None or value.tzinfo is None:
        return value
    try:
        return value.astimezone(timezone.utc)
    except OverflowError as exc:
        raise ValueError("timestamp is out of range") from exc


class _Action(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    message: Optional[StrictStr] = None


class CreateEventAction(_Action):
    action: Literal["create_event"]
    title: StrictStr
    start_time: datetime = Field(alias="startTime")
    description: Optional[StrictStr] = None
    location: Optional[StrictStr] = None
    end_time: Optional[datetime] = Field(default=None, alias="endTime")
    invite_emails: Optional[list[StrictStr]] = Field(default=None, alias="inviteEmails")

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("title must not be empty")
        return value

    @field_validator("end_time", mode="before")
    @classmethod
    def blank_end_time(cls, value):
        return _blank_to_none(value)

    @field_validator("start_time", "end_time")
    @classmethod
    def times_in_utc(cls, value):
        return _utc(value)


class UpdateEventAction(_Action):
    action: Literal["update_event"]
    event_id: StrictStr = Field(alias="eventId", min_length=1)
    title: Optional[StrictStr] = None
    description: Optional[StrictStr] = None
    location: Optional[StrictStr] = None
    start_time: Optional[datetime] = Field(default=None, alias="startTime")
    end_time: Optional[datetime] = Field(default=None, alias="endTime")

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def blank_times(cls, value):
        return _blank_to_none(value)

    @field_validator("start_time", "end_time")
    @classmethod
    def times_in_utc(cls, value):
        return _utc(value)


class DeleteEventAction(_Action):
    action: Literal["delete_event"]
    event_id: StrictStr = Field(alias="eventId", min_length=1)


class SetStatusAction(_Action):
    action: Literal["set_status"]
    event_id: StrictStr = Field(alias="eventId", min_length=1)
    status: StrictStr


class InviteAction(_Action):
    action: Literal["invite"]
    event_id: StrictStr = Field(alias="eventId", min_length=1)
    email: StrictStr = Field(min_length=1)


class ReplyAction(_Action):
    action: Literal["reply"]
    message: StrictStr


AssistantAction = Annotated[
    Union[
        CreateEventAction,
        UpdateEventAction,
        DeleteEventAction,
        SetStatusAction,
        InviteAction,
        ReplyAction,
    ],
    Field(discriminator="action"),
]

ACTION_ADAPTER: TypeAdapter[AssistantAction] = TypeAdapter(AssistantAction)
