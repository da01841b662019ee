"""User ORM model — local mirror of an upstream identity."""
import uuid
from sqlalchemy import Column, String, DateTime
from sqlalchemy.sql import func
from eventsync.database import Base


class User(Base):
    __tablename__ = "users"

    user_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    auth_subject = Column(String(255), nullable=True, unique=True)  # id from the identity provider
    email = Column(String(320), nullable=False, unique=True)
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    image_url = Column(String(1024), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    @property
    def display_name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}".strip()
