from __future__ import annotations

import threading
from typing import Any, Mapping, Optional

from ..analysis import DiffAnalysis
from ..config import ProviderSettings
from ..exceptions import ProviderError, ProviderMalformed
from ..prompts import build_completion_prompt, build_free_prompt
from .base import BaseDriver

MIN_FREE_OUTPUT_CHARS = 10


def _generated_text(data: Any) -> str:
    if isinstance(data, list):
        data = data[0] if data else {}
    if not isinstance(data, dict):
        return ""
    text = data.get("generated_text") or data.get("text") or ""
    return str(text).strip()


def clean_free_output(text: str, prompt: str) -> str:
    """Strip the echoed prompt and keep only the first line."""
    cleaned = text.replace(prompt, "").strip()
    return cleaned.split("\n")[0] if cleaned else ""


class HuggingFaceDriver(BaseDriver):
    """Hugging Face inference API, walking an ordered list of models.

    With a token, the first model returning non-empty text wins. Without
    one (the key-less ``freehf`` provider) a shorter prompt is used and the
    output must survive :func:`clean_free_output` with more than
    ``MIN_FREE_OUTPUT_CHARS`` characters.
    """

    def __init__(
        self,
        settings: ProviderSettings,
        env: Optional[Mapping[str, str]] = None,
    ) -> None:
        super().__init__(settings, env)
        self.free = not settings.requires_key
        self.models = tuple(settings.models) or (settings.model,)

    def generate(
        self,
        diff: str,
        analysis: DiffAnalysis,
        cancel_event: Optional[threading.Event] = None,
    ) -> str:
        prompt = build_free_prompt(diff) if self.free else build_completion_prompt(diff)
        return self.submit(prompt, cancel_event=cancel_event)

    def submit(
        self, prompt: str, cancel_event: Optional[threading.Event] = None
    ) -> str:
        last_error: Optional[ProviderError] = None
        headers: dict[str, str] = {}
        if self._api_key and not self.free:
            headers["Authorization"] = f"Bearer {self._api_key}"
        payload = {
            "inputs": prompt,
            "parameters": {
                "max_new_tokens": 100 if self.free else 150,
                "temperature": 0.7 if self.free else 0.5,
                "return_full_text": False,
            },
        }
        base = self.settings.endpoint.rstrip("/")
        for model in self.models:
            self._check_cancelled(cancel_event)
            try:
                data = self._post_json(f"{base}/{model}", payload, headers=headers)
            except ProviderError as exc:
                last_error = exc
                continue
            text = _generated_text(data)
            if self.free:
                text = clean_free_output(text, prompt)
                if len(text) > MIN_FREE_OUTPUT_CHARS:
                    return text
            elif text:
                return text
            last_error = ProviderMalformed(f"{self.name} {model} returned no text", self.name)
        if last_error is None:
            last_error = ProviderMalformed(f"All {self.name} models failed", self.name)
        raise last_error
