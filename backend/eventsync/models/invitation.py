"""Invitation ORM model — one row per (event, invitee email)."""
import enum
import uuid
from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint, Enum as SAEnum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from eventsync.database import Base


class InvitationStatus(str, enum.Enum):
    upcoming = "upcoming"
    attending = "attending"
    maybe = "maybe"
    declined = "declined"


class Invitation(Base):
    __tablename__ = "invitations"
    __table_args__ = (
        UniqueConstraint("event_id", "invitee_email", name="uq_invitation_event_email"),
    )

    invitation_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    event_id = Column(String(36), ForeignKey("events.event_id", ondelete="CASCADE"), nullable=False, index=True)
    invitee_email = Column(String(320), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.user_id"), nullable=True, index=True)
    status = Column(SAEnum(InvitationStatus), nullable=False, default=InvitationStatus.upcoming)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    event = relationship("Event", back_populates="invitations")
    user = relationship("User")
