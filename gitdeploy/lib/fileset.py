"""
Artifact selection.

Resolves a comma-separated list of gitignore-style glob patterns against a
directory and returns the matching files as relative, forward-slash paths.
"""

import os
import posixpath
from pathlib import Path

import pathspec

# Version-control and editor metadata never deployed
DEFAULT_EXCLUDES = [
    ".git/",
    ".gitmodules",
    ".svn/",
    ".hg/",
    ".bzr/",
    "CVS/",
    ".DS_Store",
    "*~",
    "#*#",
    ".#*",
]


def split_patterns(pattern: str | None) -> list[str]:
    """Split "a/**, b/*.txt" into ["a/**", "b/*.txt"]."""
    if not pattern:
        return []
    return [p.strip() for p in pattern.split(",") if p.strip()]


def build_spec(patterns: list[str]) -> pathspec.PathSpec:
    return pathspec.PathSpec.from_lines("gitwildmatch", patterns)


def scan_files(root: Path, pattern: str | None, excludes: list[str] | None = None) -> list[str]:
    """
    Find files under root matching pattern.

    Args:
        root: Directory to scan
        pattern: Comma-separated gitignore-style globs (e.g. "out/**, *.war")
        excludes: Extra globs to skip, on top of DEFAULT_EXCLUDES

    Returns:
        Relative paths with forward slashes, in directory-scan order.
        Directories are never returned, only files.
    """
    includes = split_patterns(pattern)
    if not includes or not root.is_dir():
        return []

    include_spec = build_spec(includes)
    exclude_spec = build_spec(DEFAULT_EXCLUDES + list(excludes or []))

    matched = []
    for dirpath, dirnames, filenames in os.walk(root):
        rel_dir = Path(dirpath).relative_to(root).as_posix()
        if rel_dir == ".":
            rel_dir = ""

        # Prune excluded directories so the walk never descends into them
        dirnames[:] = sorted(
            d for d in dirnames
            if not exclude_spec.match_file(posixpath.join(rel_dir, d) + "/")
        )

        for name in sorted(filenames):
            rel_path = posixpath.join(rel_dir, name)
            if exclude_spec.match_file(rel_path):
                continue
            if include_spec.match_file(rel_path):
                matched.append(rel_path)

    return matched


def to_git_path(target_dir: str | None, rel_path: str) -> str:
    """
    Join target_dir and rel_path into a repository path.

    Git paths always use "/" regardless of the host separator; the host
    separator is converted and redundant segments removed. Other characters,
    a backslash on POSIX included, are part of the file name.
    """
    parts = [p for p in (target_dir or "", rel_path) if p]
    joined = "/".join(parts).replace(os.sep, "/")
    normalized = posixpath.normpath(joined)
    if normalized == "." or normalized.startswith("../") or normalized == "..":
        raise ValueError(f"Path escapes the repository: {joined}")
    return normalized.lstrip("/")
