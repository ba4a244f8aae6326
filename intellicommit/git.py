"""Diff sources for the CLI's ``--staged`` and ``--working`` options."""

import subprocess
from pathlib import Path
from typing import Optional

from .exceptions import GitError


def find_git_repo_root(start_path: Optional[Path] = None) -> Optional[Path]:
    """Locate the repository holding ``start_path`` (default: cwd).

    Asks git first; when git is missing or refuses, looks for a ``.git``
    entry in ``start_path`` and its parents. Returns ``None`` outside a
    repository.
    """

    path = Path(start_path or Path.cwd()).expanduser().resolve(strict=False)
    if path.is_file():
        path = path.parent

    try:
        result = subprocess.run(
            ["git", "rev-parse", "--show-toplevel"],
            cwd=path,
            capture_output=True,
            text=True,
            check=True,
        )
        top = result.stdout.strip()
        if top:
            return Path(top)
    except (subprocess.CalledProcessError, FileNotFoundError):
        pass

    for candidate in (path, *path.parents):
        if (candidate / ".git").exists():
            return candidate

    return None


class GitRepo:
    """Read-only access to the diffs a commit message is written for."""

    def __init__(self, repo_path: Optional[str] = None) -> None:
        self.repo_path = Path(repo_path or ".")
        if not self._is_git_repo():
            raise GitError(f"Not a Git repository: {self.repo_path}")

    def _is_git_repo(self) -> bool:
        try:
            self._run_git_command(["rev-parse", "--git-dir"])
        except GitError:
            return False
        return True

    def _run_git_command(self, args: list[str]) -> str:
        # stdout is returned verbatim; diffs keep their trailing newline
        try:
            result = subprocess.run(
                ["git"] + args,
                cwd=self.repo_path,
                capture_output=True,
                text=True,
                check=True,
            )
        except subprocess.CalledProcessError as exc:
            raise GitError(
                f"git {' '.join(args)} failed: {(exc.stderr or '').strip()}"
            ) from exc
        except FileNotFoundError as exc:
            raise GitError("git executable not found on PATH") from exc
        return result.stdout

    def get_staged_diff(self) -> str:
        """What ``git commit`` would record right now."""
        return self._run_git_command(["diff", "--cached"])

    def get_working_diff(self) -> str:
        """Unstaged edits in the working tree."""
        return self._run_git_command(["diff"])
