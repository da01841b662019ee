"""Tests for model-output parsing and the action schema."""
import json
from datetime import datetime, timezone

import pytest

from eventsync.assistant.actions import CreateEventAction, InviteAction, ReplyAction, UpdateEventAction
from eventsync.assistant.response_parser import FALLBACK_REPLY, Unparsable, parse_model_output, strip_fences


class TestStripFences:

    def test_plain(self):
        assert strip_fences('  {"a": 1}\n') == '{"a": 1}'

    def test_json_fence(self):
        assert strip_fences('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_bare_fence(self):
        assert strip_fences('```\n{"a": 1}```') == '{"a": 1}'


class TestParseModelOutput:
    """Every failure becomes Unparsable carrying the raw text."""

    def test_create_event(self):
        parsed = parse_model_output(
            '{"action": "create_event", "title": "Standup", "startTime": "2024-06-11T14:00:00Z",'
            ' "message": "Created Standup"}'
        )
        assert isinstance(parsed, CreateEventAction)
        assert parsed.title == "Standup"
        assert parsed.start_time == datetime(2024, 6, 11, 14, 0, tzinfo=timezone.utc)
        assert parsed.end_time is None
        assert parsed.message == "Created Standup"

    def test_fenced_json(self):
        parsed = parse_model_output('```json\n{"action": "reply", "message": "hello"}\n```')
        assert isinstance(parsed, ReplyAction)
        assert parsed.message == "hello"

    def test_free_text(self):
        assert parse_model_output("Sure, I'll do that!") == Unparsable("Sure, I'll do that!")

    def test_empty_output_uses_apology(self):
        assert parse_model_output("   ") == Unparsable(FALLBACK_REPLY)

    def test_json_array_is_rejected(self):
        raw = '[{"action": "reply", "message": "hi"}]'
        assert parse_model_output(raw) == Unparsable(raw)

    def test_unknown_action(self):
        raw = '{"action": "launch_rocket"}'
        assert parse_model_output(raw) == Unparsable(raw)

    def test_missing_required_field(self):
        raw = '{"action": "create_event", "startTime": "2024-06-11T14:00:00Z"}'
        assert isinstance(parse_model_output(raw), Unparsable)

    def test_blank_title(self):
        raw = '{"action": "create_event", "title": "  ", "startTime": "2024-06-11T14:00:00Z"}'
        assert isinstance(parse_model_output(raw), Unparsable)

    def test_unparseable_start_time(self):
        raw = '{"action": "create_event", "title": "x", "startTime": "next tuesday-ish"}'
        assert isinstance(parse_model_output(raw), Unparsable)

    def test_numbers_are_not_coerced(self):
        assert isinstance(parse_model_output('{"action": "delete_event", "eventId": 123}'), Unparsable)

    def test_invite_emails_must_be_strings(self):
        raw = '{"action": "create_event", "title": "x", "startTime": "2024-06-11T14:00:00Z", "inviteEmails": [1]}'
        assert isinstance(parse_model_output(raw), Unparsable)

    def test_extra_keys_ignored(self):
        parsed = parse_model_output('{"action": "invite", "eventId": "E1", "email": "b@x.com", "confidence": 0.9}')
        assert isinstance(parsed, InviteAction)
        assert parsed.event_id == "E1"

    def test_deeply_nested_json(self):
        raw = "[" * 100000 + "]" * 100000
        assert isinstance(parse_model_output(raw), Unparsable)

    @pytest.mark.parametrize("stamp", ["9999-12-31T23:00:00-05:00", "0001-01-01T00:00:00+01:00"])
    def test_timestamp_outside_utc_range(self, stamp):
        create = json.dumps({"action": "create_event", "title": "Edge", "startTime": stamp})
        update = json.dumps({"action": "update_event", "eventId": "E1", "endTime": stamp})
        assert parse_model_output(create) == Unparsable(create)
        assert parse_model_output(update) == Unparsable(update)


class TestUpdatePresence:
    """Absent and explicitly empty fields are distinguishable."""

    def test_absent_fields_not_set(self):
        parsed = parse_model_output('{"action": "update_event", "eventId": "E1", "title": "New"}')
        assert isinstance(parsed, UpdateEventAction)
        assert parsed.model_fields_set == {"action", "event_id", "title"}

    def test_empty_end_time_is_explicit_null(self):
        parsed = parse_model_output('{"action": "update_event", "eventId": "E1", "endTime": ""}')
        assert "end_time" in parsed.model_fields_set
        assert parsed.end_time is None
