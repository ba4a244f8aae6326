"""Exception hierarchy for intellicommit."""

from __future__ import annotations

from typing import Optional


class IntelliCommitError(Exception):
    """Base exception for all intellicommit errors."""

    code = "internal_fault"


class ValidationError(IntelliCommitError):
    """Raised when a request is structurally invalid (e.g. missing diff)."""

    code = "invalid_input"


# The request-level name used by the service layer.
InvalidInput = ValidationError


class ConfigError(IntelliCommitError):
    """Raised when configuration cannot be loaded or is inconsistent."""

    code = "config_error"


class GitError(IntelliCommitError):
    """Raised when a Git command fails."""

    code = "git_error"


class InternalFault(IntelliCommitError):
    """Unexpected internal failure surfaced to callers as a generic error."""

    code = "internal_fault"


class LLMError(IntelliCommitError):
    """Base class for text-generation provider failures."""

    code = "provider_error"


class ProviderError(LLMError):
    """A single provider call failed.

    All concrete subclasses are treated the same way by the retry executor
    and the health tracker; the distinction only matters for logging.
    """

    def __init__(self, message: str, provider: Optional[str] = None) -> None:
        super().__init__(message)
        self.provider = provider


class ProviderTimeout(ProviderError):
    """The provider did not answer within its per-call deadline."""


class ProviderRejected(ProviderError):
    """Non-2xx status or an error payload."""

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message, provider)
        self.status_code = status_code


class ProviderRateLimited(ProviderRejected):
    """HTTP 429; the provider asks us to back off for a while."""

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        retry_after: Optional[float] = None,
    ) -> None:
        super().__init__(message, provider, status_code=429)
        self.retry_after = retry_after


class ProviderMalformed(ProviderError):
    """Empty or unparsable provider output."""


class ProviderCancelled(ProviderError):
    """The race was decided elsewhere; this attempt stood down."""


class AllProvidersExhausted(LLMError):
    """No provider produced text. Internal signal for the local fallback."""

    def __init__(self, message: str = "", errors: Optional[dict] = None) -> None:
        super().__init__(message or "All providers failed")
        self.errors: dict[str, BaseException] = dict(errors or {})
