"""
Low-level index (staging area) operations.

The index is read and rewritten with dulwich under git's own lock
protocol: `<index>.lock` is created exclusively, the replacement is
written into it, and closing renames it over the index. While we hold the
lock, git commands that write the index fail.
"""

import logging
import os
import stat
import time
from contextlib import contextmanager
from pathlib import Path

from dulwich.errors import NoIndexPresent, NotGitRepository
from dulwich.file import FileLocked, GitFile
from dulwich.index import write_index_dict
from dulwich.pack import SHA1Writer
from dulwich.repo import Repo

logger = logging.getLogger(__name__)

LOCK_POLL_INTERVAL = 0.1


class IndexLockError(Exception):
    """The index lock could not be acquired."""
    pass


class IndexReadError(Exception):
    """The index could not be read."""
    pass


def is_blob_mode(mode: int) -> bool:
    """True for regular files, executables and symlinks; gitlinks and trees are not blobs."""
    return stat.S_ISREG(mode) or stat.S_ISLNK(mode)


def _entry_mode(entry) -> int:
    # Conflicted entries carry one IndexEntry per side
    if hasattr(entry, "mode"):
        return entry.mode
    for side in (entry.this, entry.other, entry.ancestor):
        if side is not None:
            return side.mode
    return 0


def _open_repo(repo: Path) -> Repo:
    try:
        return Repo(str(repo))
    except NotGitRepository as e:
        raise IndexReadError(f"Not a git repository: {repo}") from e


def get_index_path(repo: Path) -> Path:
    """Location of the index file (worktree-aware)."""
    return Path(_open_repo(repo).index_path())


def list_index_paths(repo: Path) -> list[tuple[str, int]]:
    """
    Get (path, mode) for every index entry, in index order.

    Paths are forward-slash separated. A missing index means no entries.
    """
    try:
        index = _open_repo(repo).open_index()
    except NoIndexPresent as e:
        raise IndexReadError(f"Repository {repo} has no index") from e
    except (OSError, ValueError) as e:
        raise IndexReadError(f"Could not read index of {repo}: {e}") from e
    return [(os.fsdecode(path), _entry_mode(entry)) for path, entry in index.items()]


@contextmanager
def index_lock(repo: Path, timeout: float = 0):
    """
    Acquire the index lock and yield the open lock file.

    Closing the yielded file installs what was written to it as the new
    index. Any other exit aborts: the lock file is removed and the index is
    left untouched.

    Args:
        repo: Path to the working tree
        timeout: Seconds to keep retrying while another process holds the lock

    Raises:
        IndexLockError: If the lock is still held after timeout
    """
    index_path = get_index_path(repo)
    start = time.time()

    while True:
        try:
            lock = GitFile(str(index_path), "wb")
            break
        except FileLocked:
            if time.time() - start >= timeout:
                raise IndexLockError(
                    f"Unable to lock index {index_path}.lock: another git process seems to be running"
                ) from None
            time.sleep(LOCK_POLL_INTERVAL)

    try:
        yield lock
    finally:
        # No-op once the lock has been closed (committed)
        lock.abort()


def _delete_path(worktree: Path, path: Path) -> None:
    """Delete a tracked file, then prune parents emptied by it (never the root)."""
    if path.is_symlink() or path.is_file():
        path.unlink()
    elif path.exists():
        # A directory now sits where a blob was tracked; leave it alone
        return

    parent = path.parent
    while parent != worktree and parent.is_dir() and not any(parent.iterdir()):
        parent.rmdir()
        parent = parent.parent


def clean_working_tree(repo: Path, lock_timeout: float = 0) -> int:
    """
    Remove every tracked file from both the working tree and the index.

    Holds the index lock for the whole operation: entries are read, each blob
    is deleted from disk, and an empty index replaces the old one in a single
    rename. If anything fails before the rename, the original index is kept.

    Args:
        repo: Path to the working tree
        lock_timeout: Seconds to wait for a concurrent index lock

    Returns:
        Number of blobs removed

    Raises:
        IndexLockError: If the index is locked
        IndexReadError: If the index cannot be read
        OSError: If a tracked file cannot be deleted
    """
    worktree = repo.resolve()

    with index_lock(repo, timeout=lock_timeout) as lock:
        removed = 0
        for path, mode in list_index_paths(repo):
            if not is_blob_mode(mode):
                continue
            _delete_path(worktree, worktree.joinpath(*path.split("/")))
            removed += 1

        writer = SHA1Writer(lock)
        write_index_dict(writer, {})
        writer.write_sha()
        lock.close()

    logger.debug(f"Cleared {removed} tracked files from {repo}")
    return removed
