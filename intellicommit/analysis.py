"""Diff classification: change type, complexity tier and confidence.

Classification walks :data:`CATEGORY_RULES` in order and stops at the first
rule whose pattern matches the lower-cased diff. The order of that table is
the tie-break priority, so a diff that looks like both a feature and a
database change is a feature.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Tuple

_FILE_HEADER_RE = re.compile(r"diff --git a/(\S+)")
_PLUS_HEADER_RE = re.compile(r"^\+\+\+ b/(\S+)", re.MULTILINE)

BASE_CONFIDENCE = 0.5
MATCH_CONFIDENCE_BOOST = 0.3
MAX_CONFIDENCE = 0.9
HIGH_CHANGE_THRESHOLD = 50
MEDIUM_CHANGE_THRESHOLD = 20
UNKNOWN_FILE = "unknown"


class ChangeType(str, Enum):
    FEATURE = "feature"
    BUG_FIX = "bugFix"
    SECURITY = "security"
    PERFORMANCE = "performance"
    REFACTOR = "refactor"
    STYLING = "styling"
    TEST = "test"
    DOCS = "docs"
    CONFIG = "config"
    DATABASE = "database"
    API = "api"
    CHORE = "chore"


class Complexity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


def _rule(pattern: str) -> re.Pattern[str]:
    return re.compile(pattern, re.IGNORECASE)


# (category, predicate) pairs; first match wins.
CATEGORY_RULES: Tuple[Tuple[ChangeType, re.Pattern[str]], ...] = (
    (
        ChangeType.FEATURE,
        _rule(
            r"const\s+\w+\s*=|function\s+\w+|export\s+default|component|interface"
            r"|class\s+\w+|new\s+\w+|add|create|implement"
        ),
    ),
    (
        ChangeType.BUG_FIX,
        _rule(
            r"\.trim\(\)|\.tolowercase\(\)|\.touppercase\(\)|null|undefined|error"
            r"|exception|catch|try|fix|bug"
        ),
    ),
    (
        ChangeType.SECURITY,
        _rule(r"password|auth|token|secret|key|encrypt|decrypt|hash|salt|jwt|oauth"),
    ),
    (
        ChangeType.PERFORMANCE,
        _rule(r"optimize|performance|speed|memory|cache|lazy|memo|debounce|throttle"),
    ),
    (
        ChangeType.REFACTOR,
        _rule(r"refactor|clean|optimize|import|require|restructure|reorganize"),
    ),
    (
        ChangeType.STYLING,
        _rule(r"style|format|lint|css|classname|class=|color|font|margin|padding"),
    ),
    (
        ChangeType.TEST,
        _rule(r"test|spec|\.test\.|\.spec\.|describe|it\(|expect|assert"),
    ),
    (ChangeType.DOCS, _rule(r"doc|readme|comment|//|/\*|md|\.md")),
    (
        ChangeType.CONFIG,
        _rule(r"config|package\.json|dependencies|webpack|babel|eslint|tsconfig"),
    ),
    (
        ChangeType.DATABASE,
        _rule(
            r"sql|query|database|db|migration|schema|table|index|select|insert"
            r"|update|delete"
        ),
    ),
    (
        ChangeType.API,
        _rule(r"api|endpoint|route|controller|service|fetch|axios|http"),
    ),
)


@dataclass(frozen=True)
class DiffAnalysis:
    """Immutable classification of one diff."""

    file_name: str
    file_extension: str
    added_lines: int
    removed_lines: int
    total_changes: int
    file_count: int
    change_type: ChangeType
    confidence: float
    complexity: Complexity
    matched_patterns: FrozenSet[str] = field(default_factory=frozenset)

    def summary(self, cache_hit: bool = False) -> Dict[str, Any]:
        """Client-facing subset of the analysis."""
        return {
            "change_type": self.change_type.value,
            "complexity": self.complexity.value,
            "confidence": self.confidence,
            "file_name": self.file_name,
            "total_changes": self.total_changes,
            "cache_hit": cache_hit,
        }


def split_changed_lines(diff: str) -> Tuple[list[str], list[str]]:
    """Return (added, removed) line bodies with the +/- prefix stripped.

    ``+++``/``---`` lines are file headers only between ``diff --git`` and
    the first ``@@`` hunk marker; inside a hunk they are content (an added
    ``++i;`` shows up as ``+++i;``).
    """
    added: list[str] = []
    removed: list[str] = []
    in_hunk = False
    for line in diff.split("\n"):
        if line.startswith("diff --git"):
            in_hunk = False
            continue
        if line.startswith("@@"):
            in_hunk = True
            continue
        if not in_hunk and line.startswith(("+++", "---")):
            continue
        if line.startswith("+"):
            added.append(line[1:])
        elif line.startswith("-"):
            removed.append(line[1:])
    return added, removed


def extract_file_name(diff: str) -> str:
    match = _FILE_HEADER_RE.search(diff) or _PLUS_HEADER_RE.search(diff)
    return match.group(1) if match else UNKNOWN_FILE


def file_extension(file_name: str) -> str:
    """Text after the last dot; a name without one is returned whole."""
    return file_name.rsplit(".", 1)[-1]


def classify(content: str) -> Tuple[ChangeType, float]:
    """Return the first matching category and the resulting confidence."""
    for change_type, pattern in CATEGORY_RULES:
        if pattern.search(content):
            return change_type, min(MAX_CONFIDENCE, BASE_CONFIDENCE + MATCH_CONFIDENCE_BOOST)
    return ChangeType.CHORE, BASE_CONFIDENCE


def assess_complexity(total_changes: int, file_count: int) -> Complexity:
    if total_changes > HIGH_CHANGE_THRESHOLD or file_count > 1:
        return Complexity.HIGH
    if total_changes > MEDIUM_CHANGE_THRESHOLD:
        return Complexity.MEDIUM
    return Complexity.LOW


def analyze_diff(diff: str) -> DiffAnalysis:
    """Classify ``diff``. Pure and deterministic; never raises for str input."""
    diff = diff or ""
    added, removed = split_changed_lines(diff)
    total = len(added) + len(removed)
    file_count = diff.count("diff --git")
    file_name = extract_file_name(diff)

    content = diff.lower()
    change_type, confidence = classify(content)
    matched = frozenset(
        ct.value for ct, pattern in CATEGORY_RULES if pattern.search(content)
    )

    return DiffAnalysis(
        file_name=file_name,
        file_extension=file_extension(file_name),
        added_lines=len(added),
        removed_lines=len(removed),
        total_changes=total,
        file_count=file_count,
        change_type=change_type,
        confidence=confidence,
        complexity=assess_complexity(total, file_count),
        matched_patterns=matched,
    )
