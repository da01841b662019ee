"""Response parser — model text to one typed action, or ``Unparsable``.

Two pure stages: strip code fences, then parse-or-fail. Every failure is the
same terminal outcome: the raw text becomes a plain reply and no action runs.
Nothing here raises.
"""
import json
import logging
import re
from dataclasses import dataclass
from typing import Union

from pydantic import ValidationError

from eventsync.assistant.actions import ACTION_ADAPTER, AssistantAction

logger = logging.getLogger(__name__)

FALLBACK_REPLY = "Sorry, I had trouble understanding that. Try something like 'Create a meeting tomorrow at 2pm'."

_OPENING_FENCE = re.compile(r"^```[\w+-]*[ \t]*\n?")
_CLOSING_FENCE = re.compile(r"\n?[ \t]*```$")


@dataclass(frozen=True)
class Unparsable:
    text: str


ParseResult = Union[AssistantAction, Unparsable]


def strip_fences(raw: str) -> str:
    """Remove surrounding whitespace and an optional ```/```json fence pair."""
    text = (raw or "").strip()
    text = _OPENING_FENCE.sub("", text, count=1)
    text = _CLOSING_FENCE.sub("", text, count=1)
    return text.strip()


def parse_model_output(raw: str) -> ParseResult:
    text = (raw or "").strip()
    fallback = Unparsable(text or FALLBACK_REPLY)

    try:
        payload = json.loads(strip_fences(text))
    except (ValueError, RecursionError):
        logger.info("Model output is not JSON; replying with raw text")
        return fallback
    if not isinstance(payload, dict):
        logger.info("Model output is JSON but not an object (%s)", type(payload).__name__)
        return fallback

    try:
        return ACTION_ADAPTER.validate_python(payload)
    except ValidationError as exc:
        logger.info("Model output rejected for action %r: %d error(s)", payload.get("action"), exc.error_count())
        return fallback
