"""Command line entrypoint for intellicommit."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional, TextIO

from . import __version__
from .config import DEFAULT_PROVIDERS, load_config
from .engine import CommitEngine
from .exceptions import GitError, IntelliCommitError, ValidationError
from .git import GitRepo, find_git_repo_root
from .service import handle_request

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INVALID_INPUT = 2


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="intellicommit",
        description=(
            "Generate a commit message from a diff by racing AI providers, "
            "with an offline fallback that always answers."
        ),
    )
    parser.add_argument(
        "command",
        nargs="?",
        choices=("generate", "status"),
        default="generate",
        help="generate a message (default) or show provider status",
    )
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--file", "-f", help="read the diff from a file ('-' for stdin)")
    source.add_argument(
        "--staged", action="store_true", help="use `git diff --cached`"
    )
    source.add_argument("--working", action="store_true", help="use `git diff`")
    parser.add_argument("--repo-path", default=None, help="repository for --staged/--working")
    parser.add_argument(
        "--provider",
        action="append",
        choices=sorted(DEFAULT_PROVIDERS),
        help="restrict the race to this provider (repeatable)",
    )
    parser.add_argument(
        "--no-network",
        action="store_true",
        help="skip all providers and use the local generator",
    )
    parser.add_argument("--json", action="store_true", help="print the full response as JSON")
    parser.add_argument("--verbose", "-v", action="store_true", help="show analysis details")
    parser.add_argument("--debug", action="store_true", help="enable debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


class CLI:
    """Argument parsing and dispatch."""

    def __init__(
        self,
        stdin: Optional[TextIO] = None,
        stdout: Optional[TextIO] = None,
        stderr: Optional[TextIO] = None,
    ) -> None:
        self.parser = _build_parser()
        self._stdin = stdin
        self._stdout = stdout
        self._stderr = stderr

    @property
    def stdin(self) -> TextIO:
        return self._stdin or sys.stdin

    @property
    def stdout(self) -> TextIO:
        return self._stdout or sys.stdout

    @property
    def stderr(self) -> TextIO:
        return self._stderr or sys.stderr

    def run(self, args: Optional[list[str]] = None) -> int:
        try:
            parsed = self.parser.parse_args(args)
        except SystemExit as exc:  # argparse exits on --help / errors
            return int(exc.code or 0)

        logging.basicConfig(
            level=logging.DEBUG if parsed.debug else logging.WARNING,
            format="%(levelname)s %(name)s: %(message)s",
        )

        overrides = {}
        if parsed.provider:
            overrides["enabled_providers"] = parsed.provider
        if parsed.repo_path:
            overrides["repo_path"] = parsed.repo_path
        config = load_config(overrides=overrides)
        engine = CommitEngine(config, drivers=[] if parsed.no_network else None)

        if parsed.command == "status":
            return self._print_status(engine, parsed.json)

        try:
            diff = self._read_diff(parsed, config.git_repo_path)
        except (GitError, OSError) as exc:
            self.stderr.write(f"error: {exc}\n")
            return EXIT_FAILURE

        if parsed.json:
            status, body = handle_request(engine, {"diff": diff})
            self.stdout.write(json.dumps(body, indent=2) + "\n")
            if status == 400:
                return EXIT_INVALID_INPUT
            return EXIT_OK if status == 200 else EXIT_FAILURE

        try:
            result = engine.generate(diff)
        except ValidationError as exc:
            self.stderr.write(f"error: {exc}\n")
            return EXIT_INVALID_INPUT
        except IntelliCommitError as exc:
            self.stderr.write(f"error: {exc}\n")
            return EXIT_FAILURE

        self.stdout.write(result.message.rstrip("\n") + "\n")
        if parsed.verbose:
            summary = result.analysis.summary(cache_hit=result.cached)
            self.stderr.write(
                "provider={} type={} complexity={} confidence={:.2f} file={} changes={}\n".format(
                    result.provider,
                    summary["change_type"],
                    summary["complexity"],
                    summary["confidence"],
                    summary["file_name"],
                    summary["total_changes"],
                )
            )
        return EXIT_OK

    def _read_diff(self, parsed: argparse.Namespace, repo_path: str) -> str:
        if parsed.staged or parsed.working:
            target = parsed.repo_path or repo_path
            root = find_git_repo_root(Path(target))
            repo = GitRepo(str(root) if root else target)
            return repo.get_staged_diff() if parsed.staged else repo.get_working_diff()
        if parsed.file and parsed.file != "-":
            return Path(parsed.file).read_text(encoding="utf-8", errors="replace")
        return self.stdin.read()

    def _print_status(self, engine: CommitEngine, as_json: bool) -> int:
        rows = engine.status()
        if as_json:
            self.stdout.write(json.dumps(rows, indent=2) + "\n")
            return EXIT_OK
        if not rows:
            self.stdout.write("No providers configured; the local generator will be used.\n")
            return EXIT_OK
        for row in rows:
            self.stdout.write(
                "{:<12} {:<8} success={:.2f} avg={:.0f}ms failures={}\n".format(
                    row["name"],
                    "ready" if row["eligible"] else "excluded",
                    row.get("success_rate", 0.0),
                    row.get("avg_response_time_ms", 0.0),
                    row.get("consecutive_failures", 0),
                )
            )
        return EXIT_OK


def main(argv: Optional[list[str]] = None) -> int:
    return CLI().run(argv)


if __name__ == "__main__":
    sys.exit(main())
