import httpx
import pytest

from intellicommit.config import Config
from intellicommit.engine import CommitEngine
from intellicommit.exceptions import (
    InternalFault,
    ProviderRejected,
    ProviderTimeout,
    ValidationError,
)


@pytest.fixture
def config():
    return Config(max_retries=1, backoff_base=0, cache_ttl=300)


class _Resp:
    def __init__(self, data, status_code=200):
        self._data = data
        self.status_code = status_code
        self.headers = {}

    def json(self):
        return self._data


@pytest.mark.parametrize("diff", ["", None])
def test_missing_diff_is_invalid_input(config, diff):
    engine = CommitEngine(config, drivers=[])
    with pytest.raises(ValidationError):
        engine.generate(diff)


def test_whitespace_only_diff_still_gets_a_message(config):
    engine = CommitEngine(config, drivers=[])

    result = engine.generate("   \n")

    assert result.provider == "local"
    assert result.message.startswith("chore: update unknown")


def test_no_providers_uses_local(config, sample_diff):
    engine = CommitEngine(config, drivers=[])

    result = engine.generate(sample_diff)

    assert result.provider == "local"
    assert result.message.startswith("style: update formatting and styling")
    assert not result.cached


def test_failed_providers_fall_back_to_local(config, make_driver, sample_diff):
    drivers = [
        make_driver("a", [ProviderTimeout("t", "a")]),
        make_driver("b", [ProviderRejected("503", "b", status_code=503)]),
    ]
    engine = CommitEngine(config, drivers=drivers)

    result = engine.generate(sample_diff)

    assert result.provider == "local"
    assert result.message


def test_second_request_is_served_from_cache(config, make_driver, clock, sample_diff):
    driver = make_driver("a", ["style: normalise whitespace"])
    engine = CommitEngine(config, drivers=[driver], clock=clock)

    first = engine.generate(sample_diff)
    second = engine.generate(sample_diff)

    assert first.provider == "a"
    assert second.provider == "cache"
    assert second.cached
    assert second.message == first.message
    assert second.to_dict()["analysis"]["cache_hit"] is True
    assert driver.calls == 1


def test_cache_expires_after_ttl(config, make_driver, clock, sample_diff):
    driver = make_driver("a", ["style: one", "style: two"])
    engine = CommitEngine(config, drivers=[driver], clock=clock)

    assert engine.generate(sample_diff).message == "style: one"
    clock.advance(301)
    result = engine.generate(sample_diff)

    assert result.message == "style: two"
    assert result.provider == "a"
    assert driver.calls == 2


def test_local_results_are_cached(config, make_driver, clock, sample_diff):
    engine = CommitEngine(
        config, drivers=[make_driver("a", [ProviderTimeout("t", "a")])], clock=clock
    )

    assert engine.generate(sample_diff).provider == "local"
    assert engine.generate(sample_diff).provider == "cache"


def test_secrets_never_reach_providers(config, make_driver):
    driver = make_driver("a", ["chore: rotate credentials"])
    engine = CommitEngine(config, drivers=[driver])
    diff = (
        "diff --git a/.env b/.env\n"
        "+OPENAI_API_KEY=sk-aaaaaaaaaaaaaaaaaaaaaaaaaaaa\n"
    )

    engine.generate(diff)

    assert "[REDACTED]" in driver.prompts[0]
    assert "sk-aaaaaaaaaaaaaaaaaaaaaaaaaaaa" not in driver.prompts[0]


def test_secrets_never_reach_the_wire(monkeypatch):
    # Given a real Gemini driver whose HTTP call is captured
    captured = {}

    def fake_post(url, headers=None, json=None, timeout=None):
        captured["url"] = url
        captured["body"] = json
        return _Resp({"candidates": [{"content": {"parts": [{"text": "chore: x"}]}}]})

    monkeypatch.setattr(httpx, "post", fake_post)
    config = Config(enabled_providers=["gemini"], max_retries=1, backoff_base=0)
    engine = CommitEngine(config, env={"GEMINI_API_KEY": "g-test"})

    # When
    result = engine.generate("+password = 'supersecretvalue123456'\n")

    # Then
    assert result.provider == "gemini"
    sent = captured["body"]["contents"][0]["parts"][0]["text"]
    assert "supersecretvalue123456" not in sent
    assert "[REDACTED]" in sent


def test_long_diffs_are_truncated(make_driver):
    driver = make_driver("a", ["chore: big"])
    engine = CommitEngine(
        Config(max_diff_chars=100, max_retries=1, backoff_base=0), drivers=[driver]
    )

    engine.generate("+" + "x" * 200 + "TAIL_MARKER")

    assert "TAIL_MARKER" not in driver.prompts[0]


def test_unexpected_race_error_falls_back(config, make_driver, monkeypatch, sample_diff):
    engine = CommitEngine(config, drivers=[make_driver("a", ["never"])])

    def boom(diff, analysis):
        raise RuntimeError("scheduler exploded")

    monkeypatch.setattr(engine.coordinator, "race", boom)

    assert engine.generate(sample_diff).provider == "local"


def test_internal_failure_surfaces_as_internal_fault(config, monkeypatch, sample_diff):
    engine = CommitEngine(config, drivers=[])

    def broken(key):
        raise RuntimeError("cache corrupted")

    monkeypatch.setattr(engine.cache, "get", broken)

    with pytest.raises(InternalFault):
        engine.generate(sample_diff)


def test_status_rows(config, make_driver):
    drivers = [
        make_driver("b", ["x"], priority=2),
        make_driver("a", ["x"], priority=1, configured=False),
    ]
    engine = CommitEngine(config, drivers=drivers)

    rows = engine.status()

    assert [r["name"] for r in rows] == ["a", "b"]
    assert rows[0]["configured"] is False
    assert rows[0]["eligible"] is False
    assert rows[1]["eligible"] is True
    assert "success_rate" in rows[1]


def test_result_to_dict_shape(config, sample_diff):
    body = CommitEngine(config, drivers=[]).generate(sample_diff).to_dict()
    assert set(body) == {"commit_message", "provider", "cached", "analysis"}
    assert body["analysis"]["file_name"] == "src/utils/format.py"
