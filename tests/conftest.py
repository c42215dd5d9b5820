"""Shared fixtures: throwaway git remotes, workspaces and a recording status sink."""

from pathlib import Path

import pytest

from gitdeploy.lib.config import DeploySettings
from gitdeploy.runner.context import DeployContext, DeploymentTarget, FileSelection
from tests.helpers import RecordingSink, git, write_file


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def bare_remote(tmp_path):
    """An empty bare repository acting as the deployment target."""
    path = tmp_path / "remote.git"
    git(["init", "--bare", str(path)])
    return path


@pytest.fixture
def seeded_remote(tmp_path):
    """A bare repository whose master already holds a previous deployment."""
    path = tmp_path / "seeded.git"
    git(["init", "--bare", str(path)])

    seed = tmp_path / "seed"
    git(["init", str(seed)])
    write_file(seed, "old/index.html", "<html>old</html>")
    write_file(seed, "old/assets/site.css", "body {}")
    write_file(seed, "README.md", "previous deployment")
    git(["add", "-A"], seed)
    git(["-c", "user.name=seed", "-c", "user.email=seed@example.com",
         "commit", "-m", "seed"], seed)
    git(["push", str(path), "HEAD:refs/heads/master"], seed)
    return path


@pytest.fixture
def workspace(tmp_path):
    """Build workspace with two artifacts under out/."""
    ws = tmp_path / "workspace"
    write_file(ws, "out/app.jar", b"PK\x03\x04jar-bytes")
    write_file(ws, "out/readme.txt", "read me")
    write_file(ws, "src/Main.java", "class Main {}")
    return ws


@pytest.fixture
def make_ctx(workspace, sink):
    """Factory for a DeployContext against a given remote."""
    def _make(remote: Path, pattern: str = "out/**", target_directory: str | None = "app",
              source_directory: str | None = None, env: dict | None = None) -> DeployContext:
        return DeployContext(
            workspace=workspace,
            target=DeploymentTarget(git_url=str(remote)),
            selection=FileSelection(pattern, target_directory, source_directory),
            env=env if env is not None else {"BUILD_TAG": "jenkins-app-1"},
            settings=DeploySettings(committer_name="Deployer", committer_email="deploy@example.com"),
            sink=sink,
        )
    return _make
