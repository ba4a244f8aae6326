from intellicommit.exceptions import (
    AllProvidersExhausted,
    ConfigError,
    GitError,
    IntelliCommitError,
    InternalFault,
    InvalidInput,
    LLMError,
    ProviderCancelled,
    ProviderError,
    ProviderMalformed,
    ProviderRateLimited,
    ProviderRejected,
    ProviderTimeout,
    ValidationError,
)


def test_exceptions_hierarchy_and_str():
    # Given exception classes
    # When instantiating
    g = GitError("git")
    c = ConfigError("cfg")
    v = ValidationError("val")
    p = ProviderTimeout("slow", "gemini")

    # Then hierarchy holds
    for exc in (g, c, v, p, InternalFault("x"), AllProvidersExhausted()):
        assert isinstance(exc, IntelliCommitError)
    assert isinstance(p, ProviderError)
    assert isinstance(p, LLMError)
    # And messages are retained
    assert "git" in str(g)
    assert "cfg" in str(c)
    assert p.provider == "gemini"


def test_codes():
    assert InvalidInput is ValidationError
    assert ValidationError("x").code == "invalid_input"
    assert InternalFault("x").code == "internal_fault"


def test_provider_variants():
    rate = ProviderRateLimited("429", "aiml", retry_after=5)
    assert isinstance(rate, ProviderRejected)
    assert rate.status_code == 429
    assert rate.retry_after == 5
    assert ProviderRejected("500", "x", status_code=500).status_code == 500
    for cls in (ProviderMalformed, ProviderCancelled):
        assert issubclass(cls, ProviderError)


def test_exhausted_copies_errors():
    errors = {"a": ProviderTimeout("t", "a")}
    exc = AllProvidersExhausted(errors=errors)
    errors.clear()

    assert list(exc.errors) == ["a"]
    assert str(exc) == "All providers failed"
