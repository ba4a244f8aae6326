"""Secret redaction and size limiting applied before any provider sees a diff."""

from __future__ import annotations

import re

REDACTION_MARKER = "[REDACTED]"
DEFAULT_MAX_CHARS = 12000

_SECRET_PATTERNS: tuple[re.Pattern[str], ...] = (
    # key/token/secret/password/api followed by an assignment and a long value
    re.compile(
        r"(api|secret|password|token|key)\s*[:=]\s*[\"']?[A-Za-z0-9_\-.]{16,}[\"']?",
        re.IGNORECASE,
    ),
    re.compile(r"(bearer)\s+[A-Za-z0-9\-_.]{16,}", re.IGNORECASE),
)


def redact_secrets(text: str) -> str:
    """Replace secret-shaped substrings with :data:`REDACTION_MARKER`."""
    out = text
    for pattern in _SECRET_PATTERNS:
        out = pattern.sub(REDACTION_MARKER, out)
    return out


def truncate_diff(text: str, max_chars: int = DEFAULT_MAX_CHARS) -> str:
    """Keep the first ``max_chars`` characters, discarding the tail."""
    if max_chars <= 0 or len(text) <= max_chars:
        return text
    return text[:max_chars]


def sanitize(raw: str, max_chars: int = DEFAULT_MAX_CHARS) -> str:
    """Redact, then truncate. Never raises for string input."""
    return truncate_diff(redact_secrets(raw or ""), max_chars)
