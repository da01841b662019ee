"""AI assistant route — message in, at most one applied action out.

Lifecycle of one request:
  validate message → check model configured → build prompt → one model call
  → parse → dispatch the single action → reply

Only a blank message (400) and a missing model configuration (503) are
reported as errors. Model failures and unusable model output become a
plain-text reply with no actions; a dropped action keeps the 200 shape.
Anything unexpected after the model is called is rolled back and answered
with a generic 500.
"""
import logging
from datetime import date, datetime
from typing import Optional

import pytz
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from eventsync.assistant.dispatcher import dispatch
from eventsync.assistant.model_client import ModelClient, ModelClientError
from eventsync.assistant.prompt_builder import build_prompt
from eventsync.assistant.response_parser import Unparsable, parse_model_output
from eventsync.config import settings
from eventsync.database import get_db
from eventsync.deps import get_current_user, get_model_client
from eventsync.models.user import User
from eventsync.schemas.assistant import AssistantReply, AssistantRequest

logger = logging.getLogger(__name__)
router = APIRouter()

DEFAULT_REPLY = "Done!"
NOT_APPLIED_REPLY = (
    "I couldn't make that change, so nothing was updated. "
    "Please check the event and try again."
)
MODEL_UNAVAILABLE_REPLY = "I'm having trouble reaching the AI service right now. Please try again in a moment."


def current_date(tz_name: str) -> date:
    """Today's date in the assistant's timezone, for resolving "tomorrow" and friends."""
    try:
        tz = pytz.timezone(tz_name)
    except pytz.UnknownTimeZoneError:
        logger.warning("Unknown ASSISTANT_TIMEZONE %r, using UTC", tz_name)
        tz = pytz.utc
    return datetime.now(tz).date()


@router.post("/chat", response_model=AssistantReply)
def assistant_chat(
    payload: AssistantRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    model_client: Optional[ModelClient] = Depends(get_model_client),
):
    message = (payload.message or "").strip()
    if not message:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Message is required")
    if model_client is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="AI is not configured yet")

    events = payload.events or []
    logger.info("Assistant request from user %s (%d events in context)", current_user.user_id, len(events))
    try:
        return _run(db, current_user, model_client, message, events)
    except HTTPException:
        raise
    except Exception:
        db.rollback()
        logger.exception("Assistant request failed for user %s", current_user.user_id)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="AI request failed")


def _run(db: Session, caller: User, model_client: ModelClient, message: str, events) -> AssistantReply:
    prompt = build_prompt(message, events, current_date(settings.ASSISTANT_TIMEZONE))

    try:
        raw = model_client.complete(prompt)
    except ModelClientError:
        return AssistantReply(reply=MODEL_UNAVAILABLE_REPLY, actions=[])

    parsed = parse_model_output(raw)
    if isinstance(parsed, Unparsable):
        return AssistantReply(reply=parsed.text, actions=[])

    result = dispatch(db, caller, parsed)
    if result is None and parsed.action != "reply":
        reply = NOT_APPLIED_REPLY
    else:
        reply = parsed.message or DEFAULT_REPLY
    logger.info("Assistant action %s for user %s: %s", parsed.action, caller.user_id,
                result.type if result else "no result")
    return AssistantReply(reply=reply, actions=[result] if result else [])
