"""Git remote operations."""

from pathlib import Path

from gitdeploy.git.credentials import GitCredentials, credentials_env
from gitdeploy.git.runner import run_git, GitResult

NETWORK_TIMEOUT = 300

# Fragments git prints when the remote rejects the supplied credentials
AUTH_FAILURE_MARKERS = (
    "authentication failed",
    "could not read username",
    "could not read password",
    "permission denied",
    "401",
    "403",
)


def is_auth_failure(result: GitResult) -> bool:
    """Check whether a failed remote command was rejected for credentials."""
    message = result.stderr.lower()
    return any(marker in message for marker in AUTH_FAILURE_MARKERS)


def is_repository(path: Path) -> bool:
    """Check if path is the top level of a git working tree."""
    if not (path / ".git").exists():
        return False
    result = run_git(["rev-parse", "--show-toplevel"], path)
    return result.success and Path(result.stdout.strip()).resolve() == path.resolve()


def clone(
    url: str,
    dest: Path,
    credentials: GitCredentials | None = None,
    timeout: int = NETWORK_TIMEOUT,
) -> GitResult:
    """Clone url into dest (dest's parent must exist)."""
    return run_git(
        ["clone", url, str(dest)],
        dest.parent,
        timeout=timeout,
        env=credentials_env(credentials),
    )


def set_remote_url(repo: Path, url: str, remote: str = "origin") -> GitResult:
    """Point an existing remote at url, adding it if missing."""
    result = run_git(["remote", "set-url", remote, url], repo)
    if result.success:
        return result
    return run_git(["remote", "add", remote, url], repo)


def fetch(
    repo: Path,
    url: str,
    remote: str = "origin",
    credentials: GitCredentials | None = None,
    timeout: int = NETWORK_TIMEOUT,
) -> GitResult:
    """Fetch every branch of url into refs/remotes/<remote>/, pruning deleted ones."""
    refspec = f"+refs/heads/*:refs/remotes/{remote}/*"
    return run_git(
        ["fetch", "--prune", url, refspec],
        repo,
        timeout=timeout,
        env=credentials_env(credentials),
    )


def get_remote_branches(repo: Path) -> set[str]:
    """Get remote-tracking branch names, e.g. {"origin/master"}.

    Returns an empty set on failure or when the remote has no branches.
    """
    prefix = "refs/remotes/"
    result = run_git(["for-each-ref", "--format=%(refname)", prefix], repo)
    if not result.success:
        return set()
    branches = set()
    for line in result.stdout.splitlines():
        ref = line.strip()
        # Symbolic refs (origin/HEAD) are not branches
        if ref.startswith(prefix) and not ref.endswith("/HEAD"):
            branches.add(ref[len(prefix):])
    return branches


def checkout_branch(repo: Path, branch: str, start_point: str | None = None) -> GitResult:
    """Force checkout of branch, resetting it to start_point when given."""
    if start_point:
        return run_git(["checkout", "-f", "-B", branch, start_point], repo)
    return run_git(["checkout", "-f", branch], repo)


def push(
    worktree: Path,
    url: str,
    branch: str,
    credentials: GitCredentials | None = None,
    timeout: int = NETWORK_TIMEOUT,
) -> GitResult:
    """Push HEAD to branch on url. Non-fast-forward updates are rejected by git."""
    return run_git(
        ["push", url, f"HEAD:refs/heads/{branch}"],
        worktree,
        timeout=timeout,
        env=credentials_env(credentials),
    )
