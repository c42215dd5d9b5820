"""Git branch operations."""

from pathlib import Path

from gitdeploy.git.runner import GitResult, run_git


def get_commit_sha(worktree: Path, ref: str = "HEAD") -> str | None:
    """Get the SHA of a ref, or None if it does not resolve (e.g. unborn HEAD)."""
    result = run_git(["rev-parse", "--verify", "--quiet", f"{ref}^{{commit}}"], worktree)
    if result.success:
        return result.stdout.strip() or None
    return None


def start_orphan_branch(worktree: Path, branch: str) -> GitResult:
    """
    Point HEAD at an unborn branch, dropping any local commits on it.

    The index and working tree are left alone; the next commit has no parent.
    """
    result = run_git(["symbolic-ref", "HEAD", f"refs/heads/{branch}"], worktree)
    if not result.success or get_commit_sha(worktree, f"refs/heads/{branch}") is None:
        return result
    return run_git(["update-ref", "-d", f"refs/heads/{branch}"], worktree)
