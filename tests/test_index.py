"""Tests for gitdeploy.git.index module."""

import os

import pytest

from gitdeploy.git.index import (
    IndexLockError,
    IndexReadError,
    clean_working_tree,
    get_index_path,
    index_lock,
    is_blob_mode,
    list_index_paths,
)
from tests.helpers import git, requires_git, tracked_files, write_file


class TestIsBlobMode:
    """Test blob classification of index modes."""

    @pytest.mark.parametrize("mode", [0o100644, 0o100755, 0o120000])
    def test_files_and_symlinks_are_blobs(self, mode):
        assert is_blob_mode(mode)

    @pytest.mark.parametrize("mode", [0o160000, 0o040000])
    def test_gitlinks_and_trees_are_not(self, mode):
        assert not is_blob_mode(mode)


@requires_git
class TestListIndexPaths:
    """Test reading index entries."""

    def test_reads_paths_and_modes(self, tmp_path):
        repo = tmp_path / "repo"
        git(["init", str(repo)])
        write_file(repo, "dir/a file.txt", "a")
        write_file(repo, "bin/run.sh", "#!/bin/sh\n")
        os.chmod(repo / "bin/run.sh", 0o755)
        git(["add", "-A"], repo)

        entries = dict(list_index_paths(repo))
        assert set(entries) == {"dir/a file.txt", "bin/run.sh"}
        assert entries["bin/run.sh"] == 0o100755

    def test_fresh_repository_has_no_entries(self, tmp_path):
        repo = tmp_path / "repo"
        git(["init", str(repo)])
        assert list_index_paths(repo) == []

    def test_not_a_repository(self, tmp_path):
        with pytest.raises(IndexReadError):
            list_index_paths(tmp_path)


@requires_git
class TestIndexLock:
    """Test acquisition and release of the index lock."""

    @pytest.fixture
    def repo(self, tmp_path):
        path = tmp_path / "repo"
        git(["init", str(path)])
        return path

    def test_lock_file_exists_while_held(self, repo):
        lock_path = get_index_path(repo).with_name("index.lock")
        with index_lock(repo):
            assert lock_path.exists()
        assert not lock_path.exists()

    def test_fails_when_already_locked(self, repo):
        lock_path = get_index_path(repo).with_name("index.lock")
        lock_path.write_text("")
        with pytest.raises(IndexLockError):
            with index_lock(repo, timeout=0):
                pass
        # Someone else's lock is never removed
        assert lock_path.exists()

    def test_waits_for_lock_until_timeout(self, repo):
        lock_path = get_index_path(repo).with_name("index.lock")
        lock_path.write_text("")
        with pytest.raises(IndexLockError):
            with index_lock(repo, timeout=0.3):
                pass

    def test_released_when_body_raises(self, repo):
        lock_path = get_index_path(repo).with_name("index.lock")
        with pytest.raises(RuntimeError):
            with index_lock(repo):
                raise RuntimeError("walk failed")
        assert not lock_path.exists()

    def test_released_on_keyboard_interrupt(self, repo):
        lock_path = get_index_path(repo).with_name("index.lock")
        with pytest.raises(KeyboardInterrupt):
            with index_lock(repo):
                raise KeyboardInterrupt
        assert not lock_path.exists()


@requires_git
class TestCleanWorkingTree:
    """Test clearing of tracked files from disk and index."""

    @pytest.fixture
    def repo(self, tmp_path):
        path = tmp_path / "repo"
        git(["init", str(path)])
        write_file(path, "index.html", "<html/>")
        write_file(path, "assets/css/site.css", "body {}")
        write_file(path, "assets/js/app.js", "1;")
        write_file(path, "bin/run.sh", "#!/bin/sh\n")
        os.chmod(path / "bin/run.sh", 0o755)
        git(["add", "-A"], path)
        git(["-c", "user.name=t", "-c", "user.email=t@example.com", "commit", "-m", "init"], path)
        return path

    def test_removes_every_tracked_file(self, repo):
        removed = clean_working_tree(repo)
        assert removed == 4
        assert list_index_paths(repo) == []
        assert tracked_files(repo) == set()
        # Only git metadata remains
        assert sorted(p.name for p in repo.iterdir()) == [".git"]

    def test_keeps_directories_with_untracked_content(self, repo):
        write_file(repo, "assets/css/local.css", "untracked")
        clean_working_tree(repo)
        assert (repo / "assets/css/local.css").exists()
        assert not (repo / "assets/css/site.css").exists()
        assert not (repo / "assets/js").exists()

    def test_skips_files_already_missing_on_disk(self, repo):
        (repo / "index.html").unlink()
        clean_working_tree(repo)
        assert tracked_files(repo) == set()

    def test_idempotent(self, repo):
        clean_working_tree(repo)
        assert clean_working_tree(repo) == 0
        assert tracked_files(repo) == set()

    def test_status_reports_deletions_against_head(self, repo):
        clean_working_tree(repo)
        status = git(["status", "--porcelain"], repo)
        assert "D  index.html" in status.splitlines()

    def test_git_can_stage_after_clean(self, repo):
        clean_working_tree(repo)
        write_file(repo, "new.txt", "new")
        git(["add", "new.txt"], repo)
        assert tracked_files(repo) == {"new.txt"}

    def test_locked_index_is_left_untouched(self, repo):
        lock_path = get_index_path(repo).with_name("index.lock")
        lock_path.write_text("")
        with pytest.raises(IndexLockError):
            clean_working_tree(repo)
        lock_path.unlink()
        assert (repo / "index.html").exists()
        assert len(tracked_files(repo)) == 4

    def test_failed_walk_keeps_original_index(self, repo, monkeypatch):
        import gitdeploy.git.index as index_module

        def boom(worktree, path):
            raise PermissionError(f"cannot delete {path}")

        monkeypatch.setattr(index_module, "_delete_path", boom)
        with pytest.raises(PermissionError):
            clean_working_tree(repo)
        assert len(tracked_files(repo)) == 4
        assert not get_index_path(repo).with_name("index.lock").exists()

    def test_empty_repository(self, tmp_path):
        path = tmp_path / "empty"
        git(["init", str(path)])
        assert clean_working_tree(path) == 0
        assert tracked_files(path) == set()
