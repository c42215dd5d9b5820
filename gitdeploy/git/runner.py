"""Git command runner with timeout handling."""

import os
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path

DEFAULT_TIMEOUT = 30

# Overrides the git installation used for every command
GIT_EXE_ENV = "GITDEPLOY_GIT_EXE"


@dataclass
class GitResult:
    """Result of a git command."""
    returncode: int
    stdout: str
    stderr: str
    timed_out: bool = False

    @property
    def success(self) -> bool:
        return self.returncode == 0 and not self.timed_out

    @property
    def error_message(self) -> str:
        """Best human-readable description of a failure."""
        return self.stderr.strip() or self.stdout.strip() or f"git exited with {self.returncode}"


def get_git_exe() -> str:
    """Resolve the git executable, honouring GITDEPLOY_GIT_EXE."""
    configured = os.environ.get(GIT_EXE_ENV)
    if configured:
        return configured
    return shutil.which("git") or "git"


def run_git(
    args: list[str],
    cwd: Path,
    timeout: int = DEFAULT_TIMEOUT,
    env: dict[str, str] | None = None,
) -> GitResult:
    """
    Run a git command with timeout handling.

    Args:
        args: Git command arguments (e.g., ["status", "--porcelain"])
        cwd: Working directory for the command
        timeout: Timeout in seconds
        env: Extra environment variables for this command only
            (credentials, committer identity)

    Returns:
        GitResult with returncode, stdout, stderr, and timed_out flag
    """
    cmd = [get_git_exe(), "-C", str(cwd)] + args
    # Never block on an interactive credential prompt
    command_env = {**os.environ, "GIT_TERMINAL_PROMPT": "0", **(env or {})}
    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            timeout=timeout,
            env=command_env,
        )
        return GitResult(
            returncode=result.returncode,
            stdout=result.stdout,
            stderr=result.stderr,
        )
    except subprocess.TimeoutExpired:
        return GitResult(
            returncode=-1,
            stdout="",
            stderr=f"Command timed out after {timeout}s",
            timed_out=True,
        )
