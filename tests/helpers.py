"""Git helpers shared by the test suite."""

import shutil
import subprocess
from pathlib import Path

import pytest

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")


def git(args: list[str], cwd: Path | None = None) -> str:
    """Run git for test setup/inspection, failing the test on error."""
    result = subprocess.run(
        ["git", *args],
        cwd=str(cwd) if cwd else None,
        check=True,
        capture_output=True,
        text=True,
    )
    return result.stdout


def write_file(root: Path, rel: str, content: str | bytes) -> Path:
    path = root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(content, bytes):
        path.write_bytes(content)
    else:
        path.write_text(content)
    return path


def tracked_files(repo: Path) -> set[str]:
    return {line for line in git(["ls-files"], repo).splitlines() if line}


def remote_files(remote: Path, branch: str = "master") -> set[str]:
    out = git(["ls-tree", "-r", "--name-only", branch], remote)
    return {line for line in out.splitlines() if line}


def remote_commit_count(remote: Path, branch: str = "master") -> int:
    result = subprocess.run(
        ["git", "rev-list", "--count", branch],
        cwd=str(remote), capture_output=True, text=True,
    )
    if result.returncode != 0:
        return 0
    return int(result.stdout.strip())


class RecordingSink:
    """StatusSink that keeps every message for assertions."""

    def __init__(self):
        self.statuses: list[str] = []
        self.errors: list[str] = []

    def log_status(self, message: str) -> None:
        self.statuses.append(message)

    def log_error(self, message: str) -> None:
        self.errors.append(message)

    @property
    def lines(self) -> list[str]:
        return self.statuses + self.errors
