"""Tests for gitdeploy.lib.fileset module."""

import pytest

from gitdeploy.lib.fileset import scan_files, split_patterns, to_git_path
from tests.helpers import write_file


class TestSplitPatterns:
    """Test comma-separated pattern lists."""

    def test_splits_and_trims(self):
        assert split_patterns(" out/**, *.war ,") == ["out/**", "*.war"]

    def test_empty(self):
        assert split_patterns("") == []
        assert split_patterns(None) == []


class TestScanFiles:
    """Test glob resolution against a directory tree."""

    @pytest.fixture
    def root(self, tmp_path):
        write_file(tmp_path, "out/app.jar", "jar")
        write_file(tmp_path, "out/readme.txt", "txt")
        write_file(tmp_path, "out/lib/dep.jar", "dep")
        write_file(tmp_path, "src/Main.java", "java")
        write_file(tmp_path, "out/.git/config", "meta")
        write_file(tmp_path, "out/.svn/entries", "meta")
        return tmp_path

    def test_double_star_selects_whole_directory(self, root):
        assert set(scan_files(root, "out/**")) == {
            "out/app.jar", "out/readme.txt", "out/lib/dep.jar",
        }

    def test_extension_glob_matches_at_any_depth(self, root):
        assert set(scan_files(root, "*.jar")) == {"out/app.jar", "out/lib/dep.jar"}

    def test_anchored_pattern(self, root):
        assert scan_files(root, "out/*.txt") == ["out/readme.txt"]

    def test_multiple_patterns(self, root):
        assert set(scan_files(root, "out/*.jar, src/**")) == {"out/app.jar", "src/Main.java"}

    def test_vcs_metadata_never_selected(self, root):
        paths = scan_files(root, "**")
        assert not any("/.git/" in p or "/.svn/" in p for p in paths)

    def test_extra_excludes(self, root):
        assert set(scan_files(root, "out/**", excludes=["out/lib/"])) == {
            "out/app.jar", "out/readme.txt",
        }

    def test_no_match(self, root):
        assert scan_files(root, "*.war") == []

    def test_empty_pattern_selects_nothing(self, root):
        assert scan_files(root, "") == []

    def test_missing_root(self, tmp_path):
        assert scan_files(tmp_path / "nope", "**") == []

    def test_returns_forward_slash_paths(self, root):
        assert all("\\" not in p for p in scan_files(root, "**"))

    def test_stable_between_calls(self, root):
        assert scan_files(root, "**") == scan_files(root, "**")


class TestToGitPath:
    """Test repository path normalization."""

    def test_joins_target_directory(self):
        assert to_git_path("app", "out/app.jar") == "app/out/app.jar"

    def test_empty_target_directory_means_root(self):
        assert to_git_path("", "out/app.jar") == "out/app.jar"
        assert to_git_path(None, "out/app.jar") == "out/app.jar"

    def test_host_separator_becomes_forward_slash(self, monkeypatch):
        monkeypatch.setattr("gitdeploy.lib.fileset.os.sep", "\\")
        assert to_git_path("site\\wwwroot", "out\\lib\\dep.jar") == "site/wwwroot/out/lib/dep.jar"

    def test_backslash_is_part_of_the_name_on_posix(self, monkeypatch):
        monkeypatch.setattr("gitdeploy.lib.fileset.os.sep", "/")
        assert to_git_path("app", "a\\b.txt") == "app/a\\b.txt"

    def test_redundant_segments_removed(self):
        assert to_git_path("app/", "./out//app.jar") == "app/out/app.jar"

    def test_leading_slash_dropped(self):
        assert to_git_path("/app", "a.txt") == "app/a.txt"

    def test_rejects_escaping_paths(self):
        with pytest.raises(ValueError):
            to_git_path("..", "a.txt")
