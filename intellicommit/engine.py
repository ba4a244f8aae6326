"""Request orchestration: sanitize, cache, classify, race, fall back."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from .analysis import DiffAnalysis, analyze_diff
from .cache import ResponseCache, fingerprint
from .config import Config, get_active_config
from .exceptions import (
    AllProvidersExhausted,
    IntelliCommitError,
    InternalFault,
    ValidationError,
)
from .health import HealthTracker
from .local import LocalGenerator
from .providers.base import BaseDriver
from .providers.registry import build_drivers
from .race import RaceCoordinator
from .retry import RetryExecutor
from .sanitize import sanitize

CACHE_PROVIDER = "cache"
LOCAL_PROVIDER = "local"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GenerationResult:
    """Outcome of one request."""

    message: str
    provider: str
    analysis: DiffAnalysis
    cached: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "commit_message": self.message,
            "provider": self.provider,
            "cached": self.cached,
            "analysis": self.analysis.summary(cache_hit=self.cached),
        }


class CommitEngine:
    """Owns the cache, the health tracker and the provider race.

    One engine is meant to live for the whole process; its cache and health
    state are not persisted. ``generate`` returns a message for every
    non-empty diff: when no provider answers, the local generator does.
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        drivers: Optional[Iterable[BaseDriver]] = None,
        clock: Optional[Callable[[], float]] = None,
        env: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.config = config or get_active_config()
        if drivers is None:
            drivers = build_drivers(self.config, env)
        self.drivers: List[BaseDriver] = list(drivers)
        self.tracker = HealthTracker(
            [d.settings for d in self.drivers],
            threshold=self.config.circuit_breaker_threshold,
            reset_timeout=self.config.circuit_reset_timeout,
            clock=clock,
        )
        self.cache = ResponseCache(ttl=self.config.cache_ttl, clock=clock)
        self.retry = RetryExecutor(
            self.tracker,
            max_retries=self.config.max_retries,
            backoff_base=self.config.backoff_base,
            rate_limit_cooldown=self.config.rate_limit_cooldown,
        )
        self.coordinator = RaceCoordinator(
            self.drivers,
            self.tracker,
            self.retry,
            teardown_timeout=self.config.teardown_timeout,
        )
        self.local = LocalGenerator()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def generate(self, diff: str) -> GenerationResult:
        """Produce a commit message for ``diff``.

        Raises:
            ValidationError: ``diff`` is missing or blank.
            InternalFault: something unexpected broke outside the providers.
        """
        if not isinstance(diff, str) or not diff:
            raise ValidationError("Git diff is required")
        try:
            safe_diff = sanitize(diff, self.config.max_diff_chars)
            key = fingerprint(safe_diff)
            hit = self.cache.get(key)
            if hit is not None:
                logger.info("Cache hit for %s", key[:19])
                return GenerationResult(
                    message=hit.response,
                    provider=CACHE_PROVIDER,
                    analysis=hit.analysis,
                    cached=True,
                )

            analysis = analyze_diff(safe_diff)
            message, provider = self._race_or_fallback(safe_diff, analysis)
            self.cache.put(key, message, analysis, provider)
            return GenerationResult(message=message, provider=provider, analysis=analysis)
        except IntelliCommitError:
            raise
        except Exception as exc:  # noqa: BLE001
            logger.exception("Unexpected failure while generating commit message")
            raise InternalFault("Failed to generate commit message") from exc

    def status(self) -> List[Dict[str, Any]]:
        """Per-provider view: configured, eligible and health numbers."""
        eligible = set(self.coordinator.eligible_providers())
        health = self.tracker.snapshot()
        rows: List[Dict[str, Any]] = []
        for driver in sorted(self.drivers, key=lambda d: d.settings.priority):
            state = health.get(driver.name)
            row: Dict[str, Any] = {
                "name": driver.name,
                "display_name": driver.settings.display_name,
                "configured": driver.is_configured(),
                "eligible": driver.name in eligible,
            }
            if state is not None:
                row.update(state.to_dict())
            rows.append(row)
        return rows

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _race_or_fallback(self, diff: str, analysis: DiffAnalysis) -> tuple[str, str]:
        try:
            return self.coordinator.race(diff, analysis)
        except AllProvidersExhausted as exc:
            if exc.errors:
                logger.info(
                    "All AI providers failed (%s); using local engine",
                    ", ".join(sorted(exc.errors)),
                )
            else:
                logger.info("No AI provider available; using local engine")
        except Exception:  # noqa: BLE001 - provider faults never reach callers
            logger.exception("Provider race failed unexpectedly; using local engine")
        return self.local.generate(diff, analysis), LOCAL_PROVIDER
