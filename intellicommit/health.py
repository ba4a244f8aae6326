"""Per-provider health state and circuit breaking.

One :class:`HealthTracker` owns the mutable :class:`ProviderHealth` records
for the life of the process. All reads and writes go through the tracker's
lock; callers only ever receive copies.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, replace
from typing import Callable, Dict, Iterable, List, Optional

from .config import ProviderSettings

CIRCUIT_BREAKER_THRESHOLD = 3
SUCCESS_RATE_STEP_UP = 0.01
SUCCESS_RATE_STEP_DOWN = 0.05
# Weight of the newest sample in the response-time average
RESPONSE_TIME_SMOOTHING = 0.5

logger = logging.getLogger(__name__)


@dataclass
class ProviderHealth:
    name: str
    priority: int
    is_healthy: bool = True
    consecutive_failures: int = 0
    success_rate: float = 1.0
    avg_response_time_ms: float = 0.0
    last_success: Optional[float] = None
    cooldown_until: Optional[float] = None
    circuit_open_until: Optional[float] = None

    def to_dict(self) -> Dict[str, object]:
        return {
            "name": self.name,
            "priority": self.priority,
            "is_healthy": self.is_healthy,
            "consecutive_failures": self.consecutive_failures,
            "success_rate": round(self.success_rate, 3),
            "avg_response_time_ms": round(self.avg_response_time_ms, 1),
            "last_success": self.last_success,
            "cooldown_until": self.cooldown_until,
        }


class HealthTracker:
    """Rolling success rate, latency and circuit-breaker state per provider."""

    def __init__(
        self,
        providers: Iterable[ProviderSettings] = (),
        threshold: int = CIRCUIT_BREAKER_THRESHOLD,
        reset_timeout: float = 0.0,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        self.threshold = max(1, int(threshold))
        self.reset_timeout = reset_timeout
        self._clock = clock or time.time
        self._lock = threading.Lock()
        self._state: Dict[str, ProviderHealth] = {}
        now = self._clock()
        for settings in providers:
            self._state[settings.name] = ProviderHealth(
                name=settings.name,
                priority=settings.priority,
                success_rate=settings.seed_success_rate,
                avg_response_time_ms=settings.seed_response_time_ms,
                last_success=now,
            )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def _get(self, name: str) -> ProviderHealth:
        state = self._state.get(name)
        if state is None:
            state = ProviderHealth(name=name, priority=len(self._state) + 1)
            self._state[name] = state
        return state

    def _eligible(self, state: ProviderHealth, now: float) -> bool:
        if state.cooldown_until is not None and now < state.cooldown_until:
            return False
        if state.is_healthy and state.consecutive_failures < self.threshold:
            return True
        # Half-open: a tripped circuit gets one more chance once its window ends
        return (
            state.circuit_open_until is not None and now >= state.circuit_open_until
        )

    def is_eligible(self, name: str) -> bool:
        now = self._clock()
        with self._lock:
            return self._eligible(self._get(name), now)

    def eligible(self, names: Iterable[str]) -> List[str]:
        """Filter ``names`` to eligible providers, ordered by priority."""
        now = self._clock()
        with self._lock:
            states = [self._get(name) for name in names]
            ready = [s for s in states if self._eligible(s, now)]
        ready.sort(key=lambda s: s.priority)
        return [s.name for s in ready]

    def get(self, name: str) -> ProviderHealth:
        """Return a copy of one provider's state."""
        with self._lock:
            return replace(self._get(name))

    def snapshot(self) -> Dict[str, ProviderHealth]:
        with self._lock:
            return {name: replace(state) for name, state in self._state.items()}

    # ------------------------------------------------------------------
    # Updates
    # ------------------------------------------------------------------
    def report_success(self, name: str, latency_ms: Optional[float] = None) -> None:
        now = self._clock()
        with self._lock:
            state = self._get(name)
            was_open = not state.is_healthy
            state.consecutive_failures = 0
            state.is_healthy = True
            state.circuit_open_until = None
            state.last_success = now
            state.success_rate = min(1.0, state.success_rate + SUCCESS_RATE_STEP_UP)
            if latency_ms is not None and latency_ms > 0:
                state.avg_response_time_ms = (
                    (1 - RESPONSE_TIME_SMOOTHING) * state.avg_response_time_ms
                    + RESPONSE_TIME_SMOOTHING * latency_ms
                )
        if was_open:
            logger.info("Circuit breaker closed for %s", name)

    def report_failure(self, name: str) -> None:
        now = self._clock()
        tripped = False
        with self._lock:
            state = self._get(name)
            state.consecutive_failures += 1
            state.success_rate = max(0.0, state.success_rate - SUCCESS_RATE_STEP_DOWN)
            if state.consecutive_failures >= self.threshold:
                tripped = True
                state.is_healthy = False
                state.circuit_open_until = (
                    now + self.reset_timeout if self.reset_timeout > 0 else None
                )
        if tripped:
            logger.warning("Circuit breaker opened for %s", name)

    def place_on_cooldown(self, name: str, seconds: float) -> None:
        """Exclude ``name`` from races for ``seconds`` regardless of health."""
        until = self._clock() + max(0.0, seconds)
        with self._lock:
            state = self._get(name)
            if state.cooldown_until is None or until > state.cooldown_until:
                state.cooldown_until = until
        logger.info("Provider %s cooling down for %.1fs", name, seconds)

    def reset(self, name: Optional[str] = None) -> None:
        """Close circuits and clear cooldowns (one provider or all)."""
        with self._lock:
            targets = [self._get(name)] if name else list(self._state.values())
            for state in targets:
                state.is_healthy = True
                state.consecutive_failures = 0
                state.cooldown_until = None
                state.circuit_open_until = None
