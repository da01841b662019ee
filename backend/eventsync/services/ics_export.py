"""iCalendar (RFC 5545) export for a single event."""
import re
from datetime import datetime, timezone
from typing import Optional

from eventsync.models.event import Event
from eventsync.services.event_service import as_utc

PRODID = "-//EventSync//EN"


def _ics_date(value: datetime) -> str:
    return as_utc(value).strftime("%Y%m%dT%H%M%SZ")


def _escape(text: str) -> str:
    return re.sub(r"([,;\\])", r"\\\1", text)


def build_ics(event: Event, now: Optional[datetime] = None) -> str:
    """Render ``event`` as a VCALENDAR with one VEVENT, CRLF-separated."""
    now = now or datetime.now(timezone.utc)
    owner = event.owner

    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        f"PRODID:{PRODID}",
        "CALSCALE:GREGORIAN",
        "METHOD:PUBLISH",
        "BEGIN:VEVENT",
        f"UID:{event.event_id}@eventsync",
        f"DTSTART:{_ics_date(event.start_time_utc)}",
    ]
    if event.end_time_utc:
        lines.append(f"DTEND:{_ics_date(event.end_time_utc)}")
    lines.append(f"SUMMARY:{_escape(event.title)}")
    if event.description:
        # Backslashes are escaped before newlines become the literal "\n" sequence.
        description = _escape(event.description).replace("\r\n", "\n").replace("\n", "\\n")
        lines.append(f"DESCRIPTION:{description}")
    if event.location:
        lines.append(f"LOCATION:{_escape(event.location)}")
    lines += [
        f"ORGANIZER;CN={owner.display_name}:mailto:{owner.email}",
        f"DTSTAMP:{_ics_date(now)}",
        "END:VEVENT",
        "END:VCALENDAR",
    ]
    return "\r\n".join(lines)


def ics_filename(title: str) -> str:
    return re.sub(r"[^a-zA-Z0-9]", "_", title) + ".ics"
