"""Rule-based, offline commit message generator.

This is the guaranteed fallback when every network provider fails. Output
is a ``type: summary`` subject, a blank line and three bullets, chosen by
the diff's :class:`~intellicommit.analysis.ChangeType` and a few cheap
heuristics over the added/removed lines. Pure and deterministic.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Sequence, Tuple

from .analysis import ChangeType, Complexity, DiffAnalysis, split_changed_lines

COMPONENT_EXTENSIONS = (".js", ".jsx", ".ts", ".tsx")
VALIDATION_HINTS = (".trim()", "validation", "check")
NEW_FILE_MIN_LINES = 5


@dataclass(frozen=True)
class CommitContext:
    added_lines: Tuple[str, ...]
    removed_lines: Tuple[str, ...]
    file_type: str
    complexity: Complexity
    is_new_file: bool
    is_deletion: bool
    is_modification: bool

    @property
    def defines_component(self) -> bool:
        return any(
            "const " in line and "=" in line and "{" in line
            for line in self.added_lines
        )

    @property
    def touches_validation(self) -> bool:
        return any(
            hint in line for line in self.added_lines for hint in VALIDATION_HINTS
        )


def build_context(diff: str, analysis: DiffAnalysis) -> CommitContext:
    added, removed = split_changed_lines(diff)
    return CommitContext(
        added_lines=tuple(added),
        removed_lines=tuple(removed),
        file_type=analysis.file_extension,
        complexity=analysis.complexity,
        is_new_file=not removed and len(added) > NEW_FILE_MIN_LINES,
        is_deletion=not added and bool(removed),
        is_modification=bool(added) and bool(removed),
    )


def extract_component_name(file_name: str) -> str:
    name = file_name.split("/")[-1]
    for ext in COMPONENT_EXTENSIONS:
        if name.endswith(ext):
            name = name[: -len(ext)]
            break
    name = name or "component"
    return name[:1].upper() + name[1:]


def _message(subject: str, bullets: Sequence[str]) -> str:
    body = "\n".join(f"- {b}" for b in bullets)
    return f"{subject}\n\n{body}"


def feature_commit(file_name: str, ctx: CommitContext) -> str:
    if "component" in file_name.lower() or ctx.defines_component:
        return _message(
            f"feat: implement {extract_component_name(file_name)} component",
            [
                "Add reusable component with props support",
                "Implement interactive functionality",
                "Enhance user experience with new features",
            ],
        )
    if ctx.is_new_file:
        return _message(
            f"feat: add {file_name}",
            [
                "Introduce new module with initial implementation",
                "Add necessary components and logic",
                "Enhance user experience",
            ],
        )
    return _message(
        f"feat: add new functionality to {file_name}",
        [
            "Implement new feature as requested",
            "Add necessary components and logic",
            "Enhance user experience",
        ],
    )


def bug_fix_commit(file_name: str, ctx: CommitContext) -> str:
    if ctx.touches_validation:
        return _message(
            f"fix: improve validation in {file_name}",
            [
                "Add input sanitization to prevent edge cases",
                "Handle whitespace and formatting issues",
                "Improve data validation reliability",
            ],
        )
    return _message(
        f"fix: resolve issue in {file_name}",
        [
            "Address the problem identified in the code",
            "Improve error handling and validation",
            "Ensure proper functionality",
        ],
    )


def security_commit(file_name: str, ctx: CommitContext) -> str:
    return _message(
        f"security: enhance security in {file_name}",
        [
            "Implement security improvements",
            "Address potential vulnerabilities",
            "Strengthen authentication/authorization",
        ],
    )


def performance_commit(file_name: str, ctx: CommitContext) -> str:
    return _message(
        f"perf: optimize performance in {file_name}",
        [
            "Improve code efficiency and speed",
            "Reduce memory usage and processing time",
            "Enhance overall application performance",
        ],
    )


def refactor_commit(file_name: str, ctx: CommitContext) -> str:
    if ctx.is_deletion:
        return _message(
            f"refactor: remove unused code from {file_name}",
            [
                "Delete obsolete code paths",
                "Reduce maintenance surface",
                "Maintain existing functionality",
            ],
        )
    return _message(
        f"refactor: improve code structure in {file_name}",
        [
            "Clean up code organization",
            "Optimize performance and readability",
            "Maintain existing functionality",
        ],
    )


def styling_commit(file_name: str, ctx: CommitContext) -> str:
    return _message(
        "style: update formatting and styling",
        [
            "Apply consistent code formatting",
            "Fix linting issues",
            "Improve code readability",
        ],
    )


def testing_commit(file_name: str, ctx: CommitContext) -> str:
    return _message(
        f"test: add test coverage for {file_name}",
        [
            "Add comprehensive test cases",
            "Ensure proper test coverage",
            "Validate functionality",
        ],
    )


def docs_commit(file_name: str, ctx: CommitContext) -> str:
    return _message(
        "docs: update documentation",
        [
            "Improve code documentation",
            "Add helpful comments and examples",
            "Update README and guides",
        ],
    )


def config_commit(file_name: str, ctx: CommitContext) -> str:
    return _message(
        "chore: update configuration and dependencies",
        [
            "Update package dependencies",
            "Modify configuration settings",
            "Maintain project setup",
        ],
    )


def database_commit(file_name: str, ctx: CommitContext) -> str:
    return _message(
        "db: update database schema or queries",
        [
            "Modify database structure or queries",
            "Improve data handling and storage",
            "Optimize database performance",
        ],
    )


def api_commit(file_name: str, ctx: CommitContext) -> str:
    return _message(
        "api: update API endpoints or services",
        [
            "Modify API functionality",
            "Improve request/response handling",
            "Enhance service integration",
        ],
    )


def chore_commit(file_name: str, ctx: CommitContext) -> str:
    if ctx.is_deletion:
        return _message(
            f"chore: remove content from {file_name}",
            [
                "Delete code that is no longer needed",
                "Keep the project tidy",
                "Maintain project standards",
            ],
        )
    return _message(
        f"chore: update {file_name}",
        [
            "Make necessary changes to improve functionality",
            "Update code as required",
            "Maintain project standards",
        ],
    )


TEMPLATES: Dict[ChangeType, Callable[[str, CommitContext], str]] = {
    ChangeType.FEATURE: feature_commit,
    ChangeType.BUG_FIX: bug_fix_commit,
    ChangeType.SECURITY: security_commit,
    ChangeType.PERFORMANCE: performance_commit,
    ChangeType.REFACTOR: refactor_commit,
    ChangeType.STYLING: styling_commit,
    ChangeType.TEST: testing_commit,
    ChangeType.DOCS: docs_commit,
    ChangeType.CONFIG: config_commit,
    ChangeType.DATABASE: database_commit,
    ChangeType.API: api_commit,
    ChangeType.CHORE: chore_commit,
}


class LocalGenerator:
    """Templated commit messages keyed by change type. Never fails."""

    name = "local"

    def generate(self, diff: str, analysis: DiffAnalysis) -> str:
        template = TEMPLATES.get(analysis.change_type, chore_commit)
        return template(analysis.file_name, build_context(diff or "", analysis))
