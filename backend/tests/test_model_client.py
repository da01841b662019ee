"""Tests for the OpenAI-backed model client and its factory."""
from types import SimpleNamespace

import pytest
from openai import OpenAIError

from eventsync.assistant.model_client import (
    ModelClient,
    ModelClientError,
    OpenAIModelClient,
    build_model_client,
)
from eventsync.config import Settings


class FakeCompletions:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        return self.response


def _fake_openai(completions):
    return SimpleNamespace(chat=SimpleNamespace(completions=completions))


def _response(content, tokens=42):
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))],
        usage=SimpleNamespace(total_tokens=tokens),
    )


class TestOpenAIModelClient:

    def test_sends_prompt_as_single_user_message(self):
        completions = FakeCompletions(response=_response('{"action": "reply", "message": "hi"}'))
        client = OpenAIModelClient(api_key="sk-test", model="gpt-4o-mini", client=_fake_openai(completions))
        assert client.complete("PROMPT") == '{"action": "reply", "message": "hi"}'
        assert completions.calls == [
            {"model": "gpt-4o-mini", "messages": [{"role": "user", "content": "PROMPT"}]}
        ]

    def test_empty_content(self):
        completions = FakeCompletions(response=_response(None))
        client = OpenAIModelClient(api_key="sk-test", model="m", client=_fake_openai(completions))
        assert client.complete("p") == ""

    def test_no_choices(self):
        completions = FakeCompletions(response=SimpleNamespace(choices=[], usage=None))
        client = OpenAIModelClient(api_key="sk-test", model="m", client=_fake_openai(completions))
        assert client.complete("p") == ""

    def test_api_error_is_wrapped(self):
        completions = FakeCompletions(error=OpenAIError("rate limited"))
        client = OpenAIModelClient(api_key="sk-test", model="m", client=_fake_openai(completions))
        with pytest.raises(ModelClientError):
            client.complete("p")


class TestBuildModelClient:

    @pytest.mark.parametrize("key", ["", "   ", "your-api-key-here"])
    def test_unconfigured(self, key):
        assert build_model_client(Settings(OPENAI_API_KEY=key)) is None

    def test_configured(self):
        client = build_model_client(Settings(OPENAI_API_KEY="sk-test", OPENAI_MODEL="gpt-4o-mini"))
        assert isinstance(client, OpenAIModelClient)
        assert isinstance(client, ModelClient)
