from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from typing import Any, Mapping, Optional

import httpx

from ..analysis import DiffAnalysis
from ..config import ProviderSettings
from ..exceptions import (
    ProviderCancelled,
    ProviderMalformed,
    ProviderRateLimited,
    ProviderRejected,
    ProviderTimeout,
)
from ..prompts import build_prompt


class BaseDriver(ABC):
    """Abstract base for provider-specific commit generation.

    Each driver encapsulates one provider's request shaping, HTTP call and
    response parsing behind a single ``submit`` capability. Drivers never
    retry and never touch health state; that belongs to the retry executor.
    Every failure leaves the driver as one of ``ProviderTimeout``,
    ``ProviderRejected`` or ``ProviderMalformed``.
    """

    def __init__(
        self,
        settings: ProviderSettings,
        env: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.settings = settings
        self.name = settings.name
        self._api_key = settings.resolve_api_key(env)

    @property
    def timeout(self) -> float:
        return self.settings.timeout

    def is_configured(self) -> bool:
        return bool(self._api_key) or not self.settings.requires_key

    def generate(
        self,
        diff: str,
        analysis: DiffAnalysis,
        cancel_event: Optional[threading.Event] = None,
    ) -> str:
        """Build the prompt for ``diff`` and submit it."""
        return self.submit(build_prompt(diff, analysis), cancel_event=cancel_event)

    @abstractmethod
    def submit(
        self, prompt: str, cancel_event: Optional[threading.Event] = None
    ) -> str:
        """Send ``prompt`` and return the generated text."""
        raise NotImplementedError

    # ------------------------------------------------------------------
    # Shared HTTP helpers
    # ------------------------------------------------------------------
    def _check_cancelled(self, cancel_event: Optional[threading.Event]) -> None:
        if cancel_event is not None and cancel_event.is_set():
            raise ProviderCancelled(f"{self.name} request cancelled", self.name)

    def _post_json(
        self,
        url: str,
        payload: dict[str, Any],
        headers: Optional[dict[str, str]] = None,
    ) -> Any:
        """POST ``payload`` and return decoded JSON, mapping failures."""
        try:
            response = httpx.post(
                url,
                headers={"Content-Type": "application/json", **(headers or {})},
                json=payload,
                timeout=self.timeout,
            )
        except httpx.TimeoutException as exc:
            raise ProviderTimeout(
                f"{self.name} timed out after {self.timeout:g}s", self.name
            ) from exc
        except httpx.HTTPError as exc:
            raise ProviderRejected(
                f"{self.name} network error: {exc}", self.name
            ) from exc
        status = int(getattr(response, "status_code", 200) or 200)
        if status == 429:
            raise ProviderRateLimited(
                f"{self.name} rate limited",
                self.name,
                retry_after=_retry_after(response),
            )
        if status >= 400:
            raise ProviderRejected(
                f"{self.name} API error: {status}", self.name, status_code=status
            )
        try:
            return response.json()
        except ValueError as exc:
            raise ProviderMalformed(
                f"{self.name} returned non-JSON body", self.name
            ) from exc


def _retry_after(response: Any) -> Optional[float]:
    headers = getattr(response, "headers", None) or {}
    raw = headers.get("retry-after") or headers.get("Retry-After")
    if raw is None:
        return None
    try:
        return max(0.0, float(raw))
    except (TypeError, ValueError):
        return None
