"""User service — sync upstream identities into the local users table."""
import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from eventsync.models.user import User
from eventsync.services.invitation_service import link_pending_invitations, normalize_email

logger = logging.getLogger(__name__)

MIN_SEARCH_LENGTH = 2
SEARCH_LIMIT = 10


def sync_user(
    db: Session,
    auth_subject: str,
    email: str,
    first_name: Optional[str] = None,
    last_name: Optional[str] = None,
    image_url: Optional[str] = None,
) -> User:
    """Return the local user for an authenticated identity, creating it on first sight.

    A known subject is returned as-is. Otherwise the user is upserted by email
    (an account may pre-exist from an earlier identity) and any invitations
    that were sent to that email before sign-up are linked to it.
    """
    user = db.query(User).filter(User.auth_subject == auth_subject).first()
    if user:
        return user

    email = normalize_email(email)
    user = db.query(User).filter(User.email == email).first()
    if user:
        user.auth_subject = auth_subject
        user.first_name = first_name
        user.last_name = last_name
        user.image_url = image_url
    else:
        user = User(
            auth_subject=auth_subject,
            email=email,
            first_name=first_name,
            last_name=last_name,
            image_url=image_url,
        )
        db.add(user)

    try:
        db.flush()
        link_pending_invitations(db, user)
        db.commit()
    except IntegrityError:
        # Two first requests for the same identity raced; use the stored row.
        db.rollback()
        user = db.query(User).filter(User.auth_subject == auth_subject).first()
        if user is None:
            raise
        return user

    db.refresh(user)
    logger.info("Synced user %s (%s)", user.user_id, email)
    return user


def search_users(db: Session, fragment: Optional[str]) -> list[User]:
    """Users whose email contains ``fragment`` (for invite autocomplete)."""
    fragment = normalize_email(fragment)
    if len(fragment) < MIN_SEARCH_LENGTH:
        return []
    return (
        db.query(User)
        .filter(User.email.contains(fragment, autoescape=True))
        .order_by(User.email)
        .limit(SEARCH_LIMIT)
        .all()
    )
