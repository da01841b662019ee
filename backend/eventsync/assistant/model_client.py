"""Language-model client — single-shot text completion.

The client is built once at startup from settings and handed to request
handlers through ``app.state`` (see ``eventsync.deps.get_model_client``);
nothing imports a global SDK instance.
"""
import logging
import time
from typing import Optional, Protocol, runtime_checkable

from openai import OpenAI, OpenAIError

from eventsync.config import Settings

logger = logging.getLogger(__name__)

PLACEHOLDER_KEYS = {"", "your-api-key-here", "REPLACE_ME"}


class ModelClientError(RuntimeError):
    """Raised when the model cannot be reached or returns an API error."""


@runtime_checkable
class ModelClient(Protocol):
    def complete(self, prompt: str) -> str: ...


class OpenAIModelClient:
    """Chat Completions backed client; the prompt is sent as one user message."""

    def __init__(
        self,
        *,
        api_key: str,
        model: str,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[OpenAI] = None,
    ) -> None:
        self._model = model
        self._client = client or OpenAI(api_key=api_key, base_url=base_url or None, timeout=timeout)

    def complete(self, prompt: str) -> str:
        start_time = time.time()
        try:
            response = self._client.chat.completions.create(
                model=self._model,
                messages=[{"role": "user", "content": prompt}],
            )
        except OpenAIError as exc:
            logger.error("LLM API error: %s", exc)
            raise ModelClientError(str(exc)) from exc

        latency_ms = int((time.time() - start_time) * 1000)
        total_tokens = response.usage.total_tokens if response.usage else 0
        logger.info("Model %s answered in %dms (%d tokens)", self._model, latency_ms, total_tokens)

        if not response.choices:
            return ""
        return response.choices[0].message.content or ""


def build_model_client(settings: Settings) -> Optional[ModelClient]:
    """Return a configured client, or None when no API key is set."""
    if settings.OPENAI_API_KEY.strip() in PLACEHOLDER_KEYS:
        logger.warning("OpenAI API key not configured, assistant endpoint will answer 503")
        return None
    return OpenAIModelClient(
        api_key=settings.OPENAI_API_KEY,
        model=settings.OPENAI_MODEL,
        base_url=settings.OPENAI_BASE_URL,
        timeout=settings.OPENAI_TIMEOUT_SECONDS,
    )
