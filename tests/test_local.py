import pytest

from intellicommit.analysis import ChangeType, Complexity, analyze_diff
from intellicommit.local import (
    TEMPLATES,
    CommitContext,
    LocalGenerator,
    build_context,
    extract_component_name,
)

EMPTY_CONTEXT = CommitContext(
    added_lines=(),
    removed_lines=(),
    file_type="py",
    complexity=Complexity.LOW,
    is_new_file=False,
    is_deletion=False,
    is_modification=False,
)

EXPECTED_PREFIX = {
    ChangeType.FEATURE: "feat: ",
    ChangeType.BUG_FIX: "fix: ",
    ChangeType.SECURITY: "security: ",
    ChangeType.PERFORMANCE: "perf: ",
    ChangeType.REFACTOR: "refactor: ",
    ChangeType.STYLING: "style: ",
    ChangeType.TEST: "test: ",
    ChangeType.DOCS: "docs: ",
    ChangeType.CONFIG: "chore: ",
    ChangeType.DATABASE: "db: ",
    ChangeType.API: "api: ",
    ChangeType.CHORE: "chore: ",
}


def _generate(diff: str) -> str:
    return LocalGenerator().generate(diff, analyze_diff(diff))


@pytest.mark.parametrize("change_type", list(ChangeType))
def test_every_change_type_has_a_template(change_type):
    message = TEMPLATES[change_type]("src/mod.py", EMPTY_CONTEXT)

    subject, blank, *bullets = message.split("\n")
    assert subject.startswith(EXPECTED_PREFIX[change_type])
    assert blank == ""
    assert len(bullets) == 3
    assert all(b.startswith("- ") for b in bullets)


def test_trim_diff_gets_validation_message():
    diff = (
        "diff --git a/src/a.js b/src/a.js\n"
        "-  return value\n"
        "+  return value.trim()\n"
    )
    assert _generate(diff).startswith("fix: improve validation in src/a.js")


def test_component_file_names_the_component():
    diff = (
        "diff --git a/src/components/button.jsx b/src/components/button.jsx\n"
        "+export default function Button() {}\n"
    )
    assert _generate(diff).startswith("feat: implement Button component")


def test_new_file_feature():
    body = "\n".join(f"+def create_item_{i}(name):" for i in range(6))
    diff = "diff --git a/src/items.py b/src/items.py\n" + body + "\n"

    assert _generate(diff).startswith("feat: add src/items.py\n")


def test_pure_removal_refactor():
    diff = (
        "diff --git a/src/tool.py b/src/tool.py\n"
        "-import os\n"
        "-import sys\n"
    )
    assert _generate(diff).startswith("refactor: remove unused code from src/tool.py")


def test_output_is_deterministic(sample_diff):
    assert _generate(sample_diff) == _generate(sample_diff)


def test_build_context_flags():
    diff = "diff --git a/x.txt b/x.txt\n+a\n-b\n"
    ctx = build_context(diff, analyze_diff(diff))
    assert ctx.is_modification
    assert not ctx.is_new_file
    assert not ctx.is_deletion
    assert ctx.file_type == "txt"


def test_chore_deletion_branch():
    message = TEMPLATES[ChangeType.CHORE](
        "notes.txt",
        CommitContext(
            added_lines=(),
            removed_lines=("old",),
            file_type="txt",
            complexity=Complexity.LOW,
            is_new_file=False,
            is_deletion=True,
            is_modification=False,
        ),
    )
    assert message.startswith("chore: remove content from notes.txt")


def test_extract_component_name():
    assert extract_component_name("src/ui/navBar.tsx") == "NavBar"
    assert extract_component_name("README") == "README"
