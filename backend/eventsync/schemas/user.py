"""Pydantic schemas for Users."""
from __future__ import annotations
from datetime import datetime
from typing import Optional
from pydantic import BaseModel


class UserSummary(BaseModel):
    user_id: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    image_url: Optional[str] = None

    model_config = {"from_attributes": True}


class UserOut(UserSummary):
    created_at: Optional[datetime] = None
