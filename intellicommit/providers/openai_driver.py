from __future__ import annotations

import threading
from typing import Any, Mapping, Optional

import openai

from ..config import ProviderSettings
from ..exceptions import (
    ProviderMalformed,
    ProviderRateLimited,
    ProviderRejected,
    ProviderTimeout,
)
from .base import BaseDriver

MAX_TOKENS = 150


class OpenAIDriver(BaseDriver):
    """Driver for OpenAI and OpenAI-compatible chat completion endpoints.

    AIML exposes the same ``/chat/completions`` schema, so both providers
    share this class and differ only in settings (endpoint, model, key).
    The SDK's own retries are disabled; retrying is the executor's job.
    """

    temperature = 0.7

    def __init__(
        self,
        settings: ProviderSettings,
        env: Optional[Mapping[str, str]] = None,
        client: Any = None,
    ) -> None:
        super().__init__(settings, env)
        self._client = client

    def _get_client(self) -> Any:
        if self._client is None:
            self._client = openai.OpenAI(
                base_url=self.settings.endpoint,
                api_key=self._api_key or "",
                timeout=self.timeout,
                max_retries=0,
            )
        return self._client

    def submit(
        self, prompt: str, cancel_event: Optional[threading.Event] = None
    ) -> str:
        self._check_cancelled(cancel_event)
        client = self._get_client()
        try:
            resp = client.chat.completions.create(
                model=self.settings.model,
                messages=[{"role": "user", "content": prompt}],
                max_tokens=MAX_TOKENS,
                temperature=self.temperature,
            )
        except openai.APITimeoutError as exc:
            raise ProviderTimeout(
                f"{self.name} timed out after {self.timeout:g}s", self.name
            ) from exc
        except openai.RateLimitError as exc:
            raise ProviderRateLimited(
                f"{self.name} rate limited", self.name, retry_after=_retry_after(exc)
            ) from exc
        except openai.APIStatusError as exc:
            raise ProviderRejected(
                f"{self.name} API error: {exc.status_code}",
                self.name,
                status_code=exc.status_code,
            ) from exc
        except openai.OpenAIError as exc:
            raise ProviderRejected(f"{self.name} client error: {exc}", self.name) from exc
        return _extract_content(self.name, resp)


class AIMLDriver(OpenAIDriver):
    """AIML gateway (OpenAI-compatible)."""

    temperature = 0.5


def _extract_content(provider: str, resp: Any) -> str:
    try:
        choice0 = resp.choices[0]
    except (AttributeError, IndexError, TypeError):
        raise ProviderMalformed(f"Missing choices in {provider} response", provider) from None
    message = getattr(choice0, "message", None)
    content = getattr(message, "content", "") if message is not None else ""
    if isinstance(content, list):
        fragments: list[str] = []
        for part in content:
            if isinstance(part, dict):
                fragments.append(str(part.get("text") or part.get("content") or ""))
            else:
                fragments.append(str(getattr(part, "text", "") or ""))
        content = "".join(fragments)
    text = (content or "").strip() if isinstance(content, str) else ""
    if not text:
        raise ProviderMalformed(f"No content in {provider} response", provider)
    return text


def _retry_after(exc: Any) -> Optional[float]:
    response = getattr(exc, "response", None)
    headers = getattr(response, "headers", None) or {}
    raw = headers.get("retry-after")
    try:
        return max(0.0, float(raw)) if raw is not None else None
    except (TypeError, ValueError):
        return None
