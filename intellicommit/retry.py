"""Bounded retries with exponential backoff around a single provider."""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Optional

from .exceptions import (
    ProviderCancelled,
    ProviderError,
    ProviderMalformed,
    ProviderRateLimited,
)
from .health import HealthTracker

MAX_RETRIES = 2
BACKOFF_BASE = 1.0
RATE_LIMIT_COOLDOWN = 60.0

logger = logging.getLogger(__name__)


class RetryExecutor:
    """Run one provider call up to ``max_retries`` times.

    Between attempts it waits ``backoff_base * 2**attempt`` seconds on the
    shared cancellation event, so a decided race wakes it immediately.
    Only the final outcome is reported to the health tracker: a success
    with its measured latency, or one failure once attempts run out.
    """

    def __init__(
        self,
        tracker: HealthTracker,
        max_retries: int = MAX_RETRIES,
        backoff_base: float = BACKOFF_BASE,
        rate_limit_cooldown: float = RATE_LIMIT_COOLDOWN,
    ) -> None:
        self.tracker = tracker
        self.max_retries = max(1, int(max_retries))
        self.backoff_base = max(0.0, backoff_base)
        self.rate_limit_cooldown = rate_limit_cooldown

    def backoff_delay(self, attempt: int) -> float:
        return self.backoff_base * (2**attempt)

    def execute(
        self,
        provider: str,
        call: Callable[[], str],
        cancel_event: Optional[threading.Event] = None,
    ) -> str:
        cancel_event = cancel_event or threading.Event()
        last_error: Optional[ProviderError] = None
        for attempt in range(1, self.max_retries + 1):
            if cancel_event.is_set():
                raise ProviderCancelled(f"{provider} cancelled before attempt {attempt}", provider)
            start = time.perf_counter()
            try:
                text = call()
                if not text or not text.strip():
                    raise ProviderMalformed(f"{provider} returned empty text", provider)
            except ProviderCancelled:
                raise
            except ProviderRateLimited as exc:
                cooldown = exc.retry_after or self.rate_limit_cooldown
                self._safe(self.tracker.place_on_cooldown, provider, cooldown)
                self._safe(self.tracker.report_failure, provider)
                raise
            except ProviderError as exc:
                last_error = exc
            except Exception as exc:  # noqa: BLE001 - adapters are third-party code
                last_error = ProviderError(f"{provider} failed: {exc}", provider)
                last_error.__cause__ = exc
            else:
                latency_ms = (time.perf_counter() - start) * 1000.0
                self._safe(self.tracker.report_success, provider, latency_ms)
                return text

            logger.debug(
                "%s attempt %d/%d failed: %s",
                provider,
                attempt,
                self.max_retries,
                last_error,
            )
            if attempt == self.max_retries:
                break
            delay = self.backoff_delay(attempt)
            if delay > 0 and cancel_event.wait(delay):
                raise ProviderCancelled(f"{provider} cancelled during backoff", provider)
            if cancel_event.is_set():
                raise ProviderCancelled(f"{provider} cancelled during backoff", provider)

        self._safe(self.tracker.report_failure, provider)
        assert last_error is not None
        raise last_error

    @staticmethod
    def _safe(fn: Callable[..., None], *args: object) -> None:
        # Health bookkeeping must never abort a request.
        try:
            fn(*args)
        except Exception:  # noqa: BLE001
            logger.exception("health update %s failed", getattr(fn, "__name__", fn))
