from intellicommit.analysis import (
    ChangeType,
    Complexity,
    analyze_diff,
    assess_complexity,
    extract_file_name,
    file_extension,
    split_changed_lines,
)

PLAIN_DIFF = """diff --git a/notes.txt b/notes.txt
--- a/notes.txt
+++ b/notes.txt
@@ -1 +1 @@
-hello
+world
"""


def _notes_diff(count: int) -> str:
    body = "\n".join(f"+x{i}" for i in range(count))
    return (
        "diff --git a/notes.txt b/notes.txt\n"
        "--- a/notes.txt\n+++ b/notes.txt\n@@ -0,0 +1 @@\n" + body + "\n"
    )


def test_unmatched_diff_defaults_to_chore():
    analysis = analyze_diff(PLAIN_DIFF)

    assert analysis.change_type is ChangeType.CHORE
    assert analysis.confidence == 0.5
    assert analysis.matched_patterns == frozenset()


def test_changed_line_counts_skip_file_headers():
    analysis = analyze_diff(PLAIN_DIFF)

    assert analysis.added_lines == 1
    assert analysis.removed_lines == 1
    assert analysis.total_changes == 2
    assert analysis.file_count == 1


def test_feature_wins_over_database_when_both_match():
    diff = (
        "diff --git a/src/app.js b/src/app.js\n"
        "+const x = () => {}\n"
        "+db.run('SELECT * FROM users')\n"
    )

    analysis = analyze_diff(diff)

    assert analysis.change_type is ChangeType.FEATURE
    assert analysis.confidence == 0.8
    assert {"feature", "database"} <= analysis.matched_patterns


def test_trim_call_is_a_bug_fix():
    diff = (
        "diff --git a/src/a.js b/src/a.js\n"
        "-  return value\n"
        "+  return value.trim()\n"
    )
    assert analyze_diff(diff).change_type is ChangeType.BUG_FIX


def test_classification_is_deterministic():
    diff = _notes_diff(3) + "+SELECT name FROM users\n"
    assert analyze_diff(diff) == analyze_diff(diff)


def test_complexity_tiers():
    assert analyze_diff(_notes_diff(20)).complexity is Complexity.LOW
    assert analyze_diff(_notes_diff(21)).complexity is Complexity.MEDIUM
    assert analyze_diff(_notes_diff(51)).complexity is Complexity.HIGH


def test_multiple_files_are_high_complexity():
    assert assess_complexity(2, 2) is Complexity.HIGH
    assert analyze_diff(PLAIN_DIFF + PLAIN_DIFF).complexity is Complexity.HIGH


def test_file_name_and_extension():
    assert extract_file_name(PLAIN_DIFF) == "notes.txt"
    assert extract_file_name("--- a/x\n+++ b/pkg/Mod.PY\n") == "pkg/Mod.PY"
    assert extract_file_name("no headers") == "unknown"
    assert file_extension("pkg/Mod.PY") == "PY"
    assert file_extension("Makefile") == "Makefile"
    assert file_extension("unknown") == "unknown"


def test_split_changed_lines_strips_prefix():
    added, removed = split_changed_lines("+++ b/x\n--- a/x\n+new\n-old\n context")
    assert added == ["new"]
    assert removed == ["old"]


def test_summary_shape():
    summary = analyze_diff(PLAIN_DIFF).summary(cache_hit=True)
    assert summary == {
        "change_type": "chore",
        "complexity": "low",
        "confidence": 0.5,
        "file_name": "notes.txt",
        "total_changes": 2,
        "cache_hit": True,
    }


def test_empty_diff_is_analysed_without_error():
    analysis = analyze_diff("")
    assert analysis.file_name == "unknown"
    assert analysis.total_changes == 0


def test_header_like_content_inside_a_hunk_is_counted():
    # Given content lines that begin with the header markers
    diff = (
        "diff --git a/src/loop.c b/src/loop.c\n"
        "--- a/src/loop.c\n"
        "+++ b/src/loop.c\n"
        "@@ -1 +1 @@\n"
        "---i;\n"
        "+++i;\n"
    )

    # When
    analysis = analyze_diff(diff)

    # Then only the real file headers are skipped
    assert analysis.added_lines == 1
    assert analysis.removed_lines == 1
    assert analysis.total_changes == 2
    assert split_changed_lines(diff) == (["++i;"], ["--i;"])


def test_headers_of_every_file_are_skipped():
    added, removed = split_changed_lines(PLAIN_DIFF + PLAIN_DIFF)
    assert added == ["world", "world"]
    assert removed == ["hello", "hello"]
