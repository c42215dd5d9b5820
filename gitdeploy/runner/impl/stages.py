"""
Stage implementations for gitdeploy.

Each stage function takes a DeployContext and raises StageError on failure.
"""

import logging
import shutil
from pathlib import Path

from gitdeploy import git
from gitdeploy.git import IndexLockError, IndexReadError
from gitdeploy.lib.constants import DEPLOY_COMMIT_MESSAGE
from gitdeploy.lib.envparse import expand_vars
from gitdeploy.lib.fileset import scan_files, to_git_path
from gitdeploy.runner.context import DeployContext
from gitdeploy.runner.stages import StageError

logger = logging.getLogger(__name__)

# Paths handed to a single `git add`
STAGE_BATCH_SIZE = 100


def _remote_error(stage: str, action: str, url: str, result: git.GitResult) -> StageError:
    """Build a StageError for a failed clone/fetch/push, flagging credential failures."""
    if result.timed_out:
        return StageError(stage, f"{action} {url} timed out: {result.error_message}",
                          {"type": "timeout"})
    if git.is_auth_failure(result):
        return StageError(stage, f"Authentication failed for {url}: {result.error_message}",
                          {"type": "authentication"})
    return StageError(stage, f"{action} {url} failed: {result.error_message}",
                      {"type": "git_operation"})


def stage_synchronize(ctx: DeployContext):
    """Clone (or refresh) the deploy repository and check out the deploy branch if the remote has it."""
    repo = ctx.repo_path
    url = ctx.target.git_url
    credentials = ctx.target.credentials
    settings = ctx.settings

    reused = git.is_repository(repo)
    if reused:
        ctx.log(f"Reusing deploy repository at {repo}")
        result = git.set_remote_url(repo, url)
        if not result.success:
            raise StageError("synchronize", f"Could not configure remote: {result.error_message}")
        result = git.fetch(repo, url, credentials=credentials, timeout=settings.clone_timeout)
        if not result.success:
            raise _remote_error("synchronize", "Fetching", url, result)
    else:
        if repo.exists():
            logger.warning(f"{repo} is not a git repository, removing it before cloning")
            shutil.rmtree(repo)
        repo.parent.mkdir(parents=True, exist_ok=True)
        ctx.log(f"Cloning {url} into {repo}")
        result = git.clone(url, repo, credentials=credentials, timeout=settings.clone_timeout)
        if not result.success:
            raise _remote_error("synchronize", "Cloning", url, result)

    branches = git.get_remote_branches(repo)
    if settings.remote_branch in branches:
        result = git.checkout_branch(repo, settings.branch, settings.remote_branch)
        if not result.success:
            raise StageError("synchronize", f"Could not check out {settings.branch}: {result.error_message}")
    elif reused:
        # Local commits left by an earlier failed push were never deployed
        ctx.log(f"Remote branch {settings.remote_branch} not found, starting {settings.branch} from scratch")
        result = git.start_orphan_branch(repo, settings.branch)
        if not result.success:
            raise StageError("synchronize", f"Could not start {settings.branch}: {result.error_message}")
    else:
        ctx.log(f"Remote branch {settings.remote_branch} not found, keeping cloned state")

    # Leftovers of an aborted copy are untracked and invisible to the cleaner
    result = git.remove_untracked(repo)
    if not result.success:
        raise StageError("synchronize", f"Could not remove untracked files: {result.error_message}")


def stage_clean(ctx: DeployContext):
    """Untrack and delete every file in the deploy repository."""
    try:
        removed = git.clean_working_tree(ctx.repo_path, lock_timeout=ctx.settings.index_lock_timeout)
    except (IndexLockError, IndexReadError) as e:
        raise StageError("clean", str(e), {"type": "index"}) from e
    ctx.log(f"Removed {removed} tracked files")


def _flush(repo: Path, batch: list[str]):
    if not batch:
        return
    result = git.stage_files(repo, batch)
    if not result.success:
        raise StageError("copy", f"Could not stage files: {result.error_message}")
    batch.clear()


def stage_copy(ctx: DeployContext):
    """Copy the selected workspace files into the deploy repository and stage them."""
    repo = ctx.repo_path
    target_dir = ctx.selection.target_dir
    source = ctx.workspace / ctx.selection.source_dir if ctx.selection.source_dir else ctx.workspace
    if not source.is_dir():
        raise StageError("copy", f"Source directory {source} does not exist")
    # The deploy repository lives inside the workspace; never deploy it into itself
    excludes = []
    repo_abs, source_abs = repo.resolve(), source.resolve()
    if repo_abs.is_relative_to(source_abs) and repo_abs != source_abs:
        excludes.append(f"/{repo_abs.relative_to(source_abs).as_posix()}/")
    files = scan_files(source, ctx.selection.pattern, excludes=excludes)

    batch = []
    for rel_path in files:
        git_path = to_git_path(target_dir, rel_path)
        dest = repo.joinpath(*git_path.split("/"))
        dest.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(source.joinpath(*rel_path.split("/")), dest)

        batch.append(git_path)
        ctx.staged_paths.append(git_path)
        if len(batch) >= STAGE_BATCH_SIZE:
            _flush(repo, batch)
    _flush(repo, batch)

    ctx.log(f"Staged {len(files)} files under '{target_dir or '.'}'")


def is_working_tree_changed(repo: Path) -> bool:
    """
    Check whether index or working tree differ from HEAD.

    Any added, removed, modified or untracked path counts. On an unborn
    branch everything staged counts as added.

    Raises:
        StageError: If status cannot be computed
    """
    result = git.get_status_porcelain(repo)
    if not result.success:
        raise StageError("detect", f"Could not compute changes: {result.error_message}")
    return bool(result.stdout.strip("\0\n"))


def stage_detect(ctx: DeployContext):
    """Record whether the staged tree differs from the last deployment."""
    ctx.has_changes = is_working_tree_changed(ctx.repo_path)
    ctx.log(f"Working tree changed: {ctx.has_changes}")


def stage_commit(ctx: DeployContext):
    """Create the deployment commit."""
    repo = ctx.repo_path
    message = expand_vars(DEPLOY_COMMIT_MESSAGE, ctx.env)
    result = git.commit(
        repo,
        message,
        author_name=ctx.settings.committer_name,
        author_email=ctx.settings.committer_email,
    )
    if not result.success:
        raise StageError("commit", f"Commit failed: {result.error_message}")

    ctx.commit_sha = git.get_commit_sha(repo)
    if ctx.commit_sha is None:
        raise StageError("commit", "Commit succeeded but HEAD does not resolve")
    ctx.log(f"Created commit {ctx.commit_sha[:8]}: {message}")


def stage_push(ctx: DeployContext):
    """Push the deployment commit. Rejected (non-fast-forward) pushes fail."""
    url = ctx.target.git_url
    result = git.push(
        ctx.repo_path,
        url,
        ctx.settings.branch,
        credentials=ctx.target.credentials,
        timeout=ctx.settings.push_timeout,
    )
    if not result.success:
        raise _remote_error("push", "Pushing to", url, result)
