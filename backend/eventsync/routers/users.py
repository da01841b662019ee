"""User API routes."""
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from eventsync.database import get_db
from eventsync.deps import get_current_user
from eventsync.models.user import User
from eventsync.schemas.user import UserOut, UserSummary
from eventsync.services import user_service

router = APIRouter()


@router.get("/me", response_model=UserOut)
def get_me(current_user: User = Depends(get_current_user)):
    """The caller's local account (created on first request)."""
    return current_user


@router.get("/search", response_model=list[UserSummary])
def search_users(
    email: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Email autocomplete for the invite form."""
    return user_service.search_users(db, email)
