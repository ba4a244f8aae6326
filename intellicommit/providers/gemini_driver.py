from __future__ import annotations

import threading
from typing import Any, Optional

from ..exceptions import ProviderMalformed
from .base import BaseDriver

MAX_OUTPUT_TOKENS = 150


class GeminiDriver(BaseDriver):
    """Driver for Google Gemini ``generateContent``."""

    def submit(
        self, prompt: str, cancel_event: Optional[threading.Event] = None
    ) -> str:
        self._check_cancelled(cancel_event)
        base = self.settings.endpoint.rstrip("/")
        url = f"{base}/{self.settings.model}:generateContent"
        payload = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "maxOutputTokens": MAX_OUTPUT_TOKENS,
                "temperature": 0.7,
            },
        }
        data = self._post_json(
            url, payload, headers={"X-goog-api-key": self._api_key or ""}
        )
        text = _first_candidate_text(data)
        if not text:
            raise ProviderMalformed("No content in Gemini response", self.name)
        return text


def _first_candidate_text(data: Any) -> str:
    if not isinstance(data, dict):
        return ""
    try:
        text = data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return ""
    return str(text or "").strip()
