"""Request dependencies: the authenticated caller and the injected model client.

Identity is verified upstream (the auth gateway); it forwards the verified
subject and profile as ``X-Auth-*`` headers. Every authenticated request
syncs that identity into the local users table.
"""
from typing import Optional

from fastapi import Depends, Header, HTTPException, Request, status
from sqlalchemy.orm import Session

from eventsync.assistant.model_client import ModelClient
from eventsync.database import get_db
from eventsync.models.user import User
from eventsync.services.user_service import sync_user


def get_current_user(
    x_auth_subject: Optional[str] = Header(None),
    x_auth_email: Optional[str] = Header(None),
    x_auth_first_name: Optional[str] = Header(None),
    x_auth_last_name: Optional[str] = Header(None),
    x_auth_image_url: Optional[str] = Header(None),
    db: Session = Depends(get_db),
) -> User:
    if not x_auth_subject or not x_auth_email or not x_auth_email.strip():
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    return sync_user(
        db,
        auth_subject=x_auth_subject,
        email=x_auth_email,
        first_name=x_auth_first_name,
        last_name=x_auth_last_name,
        image_url=x_auth_image_url,
    )


def get_model_client(request: Request) -> Optional[ModelClient]:
    """The client built at startup, or None when the assistant is not configured."""
    return getattr(request.app.state, "model_client", None)
