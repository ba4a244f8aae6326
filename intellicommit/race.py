"""First-success-wins fan-out across eligible providers."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import Dict, Iterable, List, Optional, Tuple

from .analysis import DiffAnalysis
from .exceptions import AllProvidersExhausted, ProviderCancelled
from .health import HealthTracker
from .providers.base import BaseDriver
from .retry import RetryExecutor

DEFAULT_TEARDOWN_TIMEOUT = 1.0

logger = logging.getLogger(__name__)


class RaceCoordinator:
    """Launch one retrying task per eligible provider and take the first win.

    All tasks share one ``threading.Event``. When a winner is found the
    event is set, queued tasks are cancelled and started ones get up to
    ``teardown_timeout`` seconds to stand down before the pool is released.
    Errors from losing tasks are collected, never raised individually.
    """

    def __init__(
        self,
        drivers: Iterable[BaseDriver],
        tracker: HealthTracker,
        executor: RetryExecutor,
        teardown_timeout: float = DEFAULT_TEARDOWN_TIMEOUT,
    ) -> None:
        self.drivers: Dict[str, BaseDriver] = {d.name: d for d in drivers}
        self.tracker = tracker
        self.executor = executor
        self.teardown_timeout = teardown_timeout

    def eligible_providers(self) -> List[str]:
        configured = [name for name, d in self.drivers.items() if d.is_configured()]
        return self.tracker.eligible(configured)

    def _run(
        self,
        driver: BaseDriver,
        diff: str,
        analysis: DiffAnalysis,
        cancel_event: threading.Event,
    ) -> str:
        return self.executor.execute(
            driver.name,
            lambda: driver.generate(diff, analysis, cancel_event=cancel_event),
            cancel_event,
        )

    def race(self, diff: str, analysis: DiffAnalysis) -> Tuple[str, str]:
        """Return ``(text, provider_name)`` or raise ``AllProvidersExhausted``."""
        names = self.eligible_providers()
        logger.info("Intelligent routing: %d eligible provider(s)", len(names))
        if not names:
            raise AllProvidersExhausted("No eligible providers")

        cancel_event = threading.Event()
        pool = ThreadPoolExecutor(
            max_workers=len(names), thread_name_prefix="intellicommit-race"
        )
        futures: Dict[Future[str], str] = {
            pool.submit(self._run, self.drivers[name], diff, analysis, cancel_event): name
            for name in names
        }
        errors: Dict[str, BaseException] = {}
        pending = set(futures)
        winner: Optional[Tuple[str, str]] = None
        try:
            while pending and winner is None:
                done, pending = wait(pending, return_when=FIRST_COMPLETED)
                for fut in done:
                    name = futures[fut]
                    try:
                        text = fut.result()
                    except Exception as exc:  # noqa: BLE001 - losers are swallowed
                        errors[name] = exc
                        logger.debug("%s dropped out of the race: %s", name, exc)
                        continue
                    if text and text.strip():
                        winner = (text.strip(), name)
                        break
        finally:
            cancel_event.set()
            for fut in pending:
                fut.cancel()
            still_running = [f for f in pending if not f.cancelled()]
            if still_running:
                wait(still_running, timeout=self.teardown_timeout)
            pool.shutdown(wait=False, cancel_futures=True)

        if winner is not None:
            logger.info("%s won the race", winner[1])
            return winner
        raise AllProvidersExhausted(
            "All providers failed",
            errors={
                k: v for k, v in errors.items() if not isinstance(v, ProviderCancelled)
            },
        )
