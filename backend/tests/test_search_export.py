"""Tests for event search and iCalendar export."""
from datetime import datetime, timezone, timedelta
from types import SimpleNamespace

from eventsync.services.ics_export import build_ics, ics_filename
from tests.conftest import auth_headers, create_test_event, invite


class TestSearch:
    """GET /api/search."""

    def test_matches_title_and_description(self, client):
        create_test_event(client, title="Team standup")
        create_test_event(client, title="Lunch", description="Monthly STANDUP retro")
        create_test_event(client, title="Dentist")
        resp = client.get("/api/search", params={"q": "standup"}, headers=auth_headers())
        assert resp.status_code == 200
        assert sorted(e["title"] for e in resp.json()) == ["Lunch", "Team standup"]

    def test_location_filter(self, client):
        create_test_event(client, title="A", location="Berlin office")
        create_test_event(client, title="B", location="Paris")
        resp = client.get("/api/search", params={"location": "berlin"}, headers=auth_headers())
        assert [e["title"] for e in resp.json()] == ["A"]

    def test_date_bounds(self, client):
        create_test_event(client, title="Soon", start_offset_hours=2)
        create_test_event(client, title="Next week", start_offset_hours=24 * 7)
        create_test_event(client, title="Next month", start_offset_hours=24 * 30)
        now = datetime.now(timezone.utc)
        params = {
            "from": (now + timedelta(days=2)).isoformat(),
            "to": (now + timedelta(days=10)).isoformat(),
        }
        resp = client.get("/api/search", params=params, headers=auth_headers())
        assert [e["title"] for e in resp.json()] == ["Next week"]

    def test_includes_invited_excludes_strangers(self, client):
        mine = create_test_event(client, name="Bob", title="Bob's shared").json()
        create_test_event(client, name="Bob", title="Bob's private")
        assert create_test_event(client, title="Alice's own").status_code == 201
        invite(client, mine["event_id"], "alice@example.com", name="Bob")

        resp = client.get("/api/search", headers=auth_headers())
        assert sorted(e["title"] for e in resp.json()) == ["Alice's own", "Bob's shared"]


class TestIcsExport:
    """build_ics and GET /api/events/{id}/export."""

    def _event(self, **overrides):
        fields = dict(
            event_id="abc-123",
            title="Planning, Q3; final",
            description="Line one\nLine two with \\ backslash",
            location="Room 1, HQ",
            start_time_utc=datetime(2030, 5, 1, 14, 0),
            end_time_utc=datetime(2030, 5, 1, 15, 30, tzinfo=timezone.utc),
            owner=SimpleNamespace(display_name="Alice Smith", email="alice@example.com"),
        )
        fields.update(overrides)
        return SimpleNamespace(**fields)

    def test_build_ics(self):
        ics = build_ics(self._event(), now=datetime(2030, 1, 1, tzinfo=timezone.utc))
        lines = ics.split("\r\n")
        assert lines[0] == "BEGIN:VCALENDAR"
        assert lines[-1] == "END:VCALENDAR"
        assert "PRODID:-//EventSync//EN" in lines
        assert "UID:abc-123@eventsync" in lines
        assert "DTSTART:20300501T140000Z" in lines
        assert "DTEND:20300501T153000Z" in lines
        assert "SUMMARY:Planning\\, Q3\\; final" in lines
        assert "DESCRIPTION:Line one\\nLine two with \\\\ backslash" in lines
        assert "LOCATION:Room 1\\, HQ" in lines
        assert "ORGANIZER;CN=Alice Smith:mailto:alice@example.com" in lines
        assert "DTSTAMP:20300101T000000Z" in lines

    def test_optional_fields_omitted(self):
        ics = build_ics(self._event(end_time_utc=None, description=None, location=None))
        assert "DTEND" not in ics
        assert "DESCRIPTION" not in ics
        assert "LOCATION" not in ics

    def test_filename(self):
        assert ics_filename("Team sync: Q3!") == "Team_sync__Q3_.ics"

    def test_export_route(self, client):
        event = create_test_event(client, title="Board games").json()
        resp = client.get(f"/api/events/{event['event_id']}/export", headers=auth_headers())
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/calendar")
        assert resp.headers["content-disposition"] == 'attachment; filename="Board_games.ics"'
        assert "SUMMARY:Board games" in resp.text

    def test_export_requires_visibility(self, client):
        event = create_test_event(client).json()
        resp = client.get(f"/api/events/{event['event_id']}/export", headers=auth_headers("Mallory"))
        assert resp.status_code == 403
