"""Git status operations."""

from pathlib import Path

from gitdeploy.git.runner import run_git, GitResult


def get_status_porcelain(worktree: Path) -> GitResult:
    """Get git status in -z porcelain format, listing every untracked file.

    Compares index and working tree against HEAD. On an unborn branch every
    staged path is reported as added.
    """
    return run_git(["status", "--porcelain", "-z", "--untracked-files=all"], worktree)


def remove_untracked(worktree: Path) -> GitResult:
    """Delete untracked files and directories, nested repositories included.

    Ignored files are left alone.
    """
    return run_git(["clean", "-f", "-f", "-d"], worktree)
