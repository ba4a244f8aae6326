import os
import threading
import time
from collections.abc import Generator
from pathlib import Path

import pytest

from intellicommit.config import ProviderSettings
from intellicommit.providers.base import BaseDriver

PROVIDER_KEY_ENVS = (
    "AIML_API_KEY",
    "GEMINI_API_KEY",
    "HUGGING_FACE_TOKEN",
    "OPENAI_API_KEY",
)


@pytest.fixture(autouse=True)
def reset_config(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> Generator[None, None, None]:
    for var in PROVIDER_KEY_ENVS:
        monkeypatch.delenv(var, raising=False)
    for var in list(os.environ):
        if var.startswith("INTELLICOMMIT_"):
            monkeypatch.delenv(var, raising=False)
    # No real backoff sleeps in unit tests
    monkeypatch.setenv("INTELLICOMMIT_BACKOFF_BASE", "0")
    # Ensure no persisted config interferes
    monkeypatch.chdir(tmp_path)

    from intellicommit.config import clear_active_config

    clear_active_config()
    yield
    clear_active_config()


# Nothing in the unit suite may reach a real provider. Tests that need a
# response patch httpx.post themselves.
@pytest.fixture(autouse=True)
def _block_network(monkeypatch):
    import httpx

    def fake_post(url, *args, **kwargs):  # noqa: D401
        raise httpx.ConnectError(f"network disabled in tests: {url}")

    monkeypatch.setattr(httpx, "post", fake_post)


class FakeDriver(BaseDriver):
    """Scripted driver: each call consumes the next outcome.

    An outcome is a string (returned), an exception instance (raised) or a
    callable taking the cancel event.
    """

    def __init__(self, name, outcomes, priority=1, delay=0.0, configured=True):
        settings = ProviderSettings(
            name=name,
            display_name=name.title(),
            priority=priority,
            endpoint="http://fake.invalid",
            model="fake-model",
            timeout=1.0,
            requires_key=False,
        )
        super().__init__(settings, env={})
        self._outcomes = list(outcomes)
        self._delay = delay
        self._configured = configured
        self.prompts: list[str] = []
        self.calls = 0
        self._lock = threading.Lock()

    def is_configured(self) -> bool:
        return self._configured

    def submit(self, prompt, cancel_event=None):
        with self._lock:
            self.calls += 1
            self.prompts.append(prompt)
            outcome = self._outcomes.pop(0) if self._outcomes else ""
        if self._delay:
            if cancel_event is not None:
                cancel_event.wait(self._delay)
            else:
                time.sleep(self._delay)
        if isinstance(outcome, BaseException):
            raise outcome
        if callable(outcome):
            return outcome(cancel_event)
        return outcome


@pytest.fixture
def make_driver():
    return FakeDriver


class FakeClock:
    def __init__(self, start: float = 1_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


SAMPLE_DIFF = """diff --git a/src/utils/format.py b/src/utils/format.py
index 1111111..2222222 100644
--- a/src/utils/format.py
+++ b/src/utils/format.py
@@ -1,3 +1,4 @@
 def normalise(value):
-    return value
+    return value.strip()
+    # handle whitespace
"""


@pytest.fixture
def sample_diff():
    return SAMPLE_DIFF
