"""Git operations for gitdeploy.

Every CLI call goes through gitdeploy.git.runner.run_git.

Return type conventions:
- Functions returning GitResult: Caller must check .success before using output.
  Examples: clone(), fetch(), stage_files(), commit(), push()
- Functions returning bool: True on success/condition met, False otherwise.
  Examples: is_repository(), is_auth_failure()
- Functions returning parsed values (str, set): Return empty/None on failure.
  Examples: get_remote_branches() -> set(), get_commit_sha() -> None
- Index operations raise (IndexLockError, IndexReadError) because a
  half-rewritten index is never acceptable.
"""

from gitdeploy.git.runner import (
    GitResult,
    run_git,
)
from gitdeploy.git.credentials import (
    GitCredentials,
)
from gitdeploy.git.status import (
    get_status_porcelain,
    remove_untracked,
)
from gitdeploy.git.branch import (
    get_commit_sha,
    start_orphan_branch,
)
from gitdeploy.git.commit import (
    stage_files,
    commit,
)
from gitdeploy.git.remote import (
    is_repository,
    is_auth_failure,
    clone,
    set_remote_url,
    fetch,
    get_remote_branches,
    checkout_branch,
    push,
)
from gitdeploy.git.index import (
    IndexLockError,
    IndexReadError,
    clean_working_tree,
)

__all__ = [
    # runner
    "GitResult",
    "run_git",
    # credentials
    "GitCredentials",
    # status
    "get_status_porcelain",
    "remove_untracked",
    # branch
    "get_commit_sha",
    "start_orphan_branch",
    # commit
    "stage_files",
    "commit",
    # remote
    "is_repository",
    "is_auth_failure",
    "clone",
    "set_remote_url",
    "fetch",
    "get_remote_branches",
    "checkout_branch",
    "push",
    # index
    "IndexLockError",
    "IndexReadError",
    "clean_working_tree",
]
