"""Prompt builder — the single instruction string sent to the language model.

Pure function of its inputs: the same message, snapshot and date always give
the same bytes. User-controlled text (message, event titles, locations) is
JSON-quoted so it cannot break out of its line.
"""
import json
from datetime import date
from typing import Sequence

from eventsync.assistant.actions import CAPABILITIES
from eventsync.schemas.assistant import EventSnapshot

NO_EVENTS_MARKER = "User has no events yet."

SYSTEM_PROMPT = """You are an AI assistant for the EventSync event scheduler app. You help users manage their events.

CAPABILITIES:
{capabilities}

RULES:
- Always respond with a single JSON object and nothing else.
- For actions: include "action" plus the required/optional fields.
- For plain replies: use {{"action": "reply", "message": "your text"}}.
- Infer dates relative to today. Today is {today}.
- Write startTime and endTime as ISO 8601 timestamps.
- Only use eventId values that appear in the user's event list.
- If the user asks to create an event AND invite someone, use create_event with the inviteEmails field.
- If the user asks to invite someone to an existing event, use the invite action.
- If the user is ambiguous, pick the most likely interpretation and confirm in your reply message.
- Always include a friendly "message" field describing what you did."""


def _quote(text: str) -> str:
    return json.dumps(text, ensure_ascii=False)


def render_capabilities() -> str:
    lines = []
    for number, capability in enumerate(CAPABILITIES, start=1):
        line = f"{number}. {capability.tag} — {capability.summary} Required: {', '.join(capability.required)}."
        if capability.optional:
            line += f" Optional: {', '.join(capability.optional)}."
        lines.append(line)
    return "\n".join(lines)


def render_events(events: Sequence[EventSnapshot]) -> str:
    if not events:
        return NO_EVENTS_MARKER
    lines = ["User's current events:"]
    for ev in events:
        line = f"- [{ev.id}] {_quote(ev.title)} at {ev.start_time}"
        if ev.location:
            line += f" ({_quote(ev.location)})"
        lines.append(line)
    return "\n".join(lines)


def build_prompt(message: str, events: Sequence[EventSnapshot], today: date) -> str:
    system = SYSTEM_PROMPT.format(capabilities=render_capabilities(), today=today.isoformat())
    return f"{system}\n\n{render_events(events)}\n\nUser says: {_quote(message)}\n\nRespond with JSON only:"
