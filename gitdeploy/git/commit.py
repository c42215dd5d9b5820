"""Git commit operations."""

from pathlib import Path

from gitdeploy.git.runner import run_git, GitResult


def stage_files(worktree: Path, files: list[str]) -> GitResult:
    """Stage specific files (paths relative to worktree, forward slashes).

    Forced, so paths matched by a global excludes file are staged as well.
    """
    return run_git(["add", "-f", "--"] + files, worktree)


def identity_env(name: str, email: str) -> dict[str, str]:
    """Environment that sets author and committer for one command."""
    return {
        "GIT_AUTHOR_NAME": name,
        "GIT_AUTHOR_EMAIL": email,
        "GIT_COMMITTER_NAME": name,
        "GIT_COMMITTER_EMAIL": email,
    }


def commit(
    worktree: Path,
    message: str,
    author_name: str | None = None,
    author_email: str | None = None,
) -> GitResult:
    """Create a commit with the given message.

    Author/committer default to the repository's git config when not given.
    """
    env = None
    if author_name and author_email:
        env = identity_env(author_name, author_email)
    return run_git(["commit", "-m", message], worktree, env=env)
