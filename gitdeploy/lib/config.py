"""
Configuration loaders for gitdeploy.

Loads deployment settings from a deploy.env file.
"""

from dataclasses import dataclass
from pathlib import Path

from . import constants
from . import envparse
from . import validate


@dataclass
class DeploySettings:
    """Tunables for one deployment target (deploy.env)."""
    deploy_repo: str = constants.DEPLOY_REPO  # Directory name inside the workspace
    branch: str = constants.DEPLOY_BRANCH
    committer_name: str = constants.DEFAULT_COMMITTER_NAME
    committer_email: str = constants.DEFAULT_COMMITTER_EMAIL
    clone_timeout: int = 300
    push_timeout: int = 300
    index_lock_timeout: float = 0

    @property
    def remote_branch(self) -> str:
        return f"{constants.DEPLOY_REMOTE}/{self.branch}"


@dataclass
class DeployConfig:
    """Parsed deploy.env: what to deploy plus how."""
    file_pattern: str
    target_directory: str | None
    source_directory: str | None
    settings: DeploySettings


def parse_deploy_env(env: dict) -> DeployConfig:
    """Validate a parsed deploy.env mapping and build DeployConfig.

    Raises:
        ValidationError: If env doesn't match the deploy schema
    """
    validate.validate(env, "deploy")
    defaults = DeploySettings()
    settings = DeploySettings(
        deploy_repo=env.get("DEPLOY_REPO", defaults.deploy_repo),
        branch=env.get("DEPLOY_BRANCH", defaults.branch),
        committer_name=env.get("COMMITTER_NAME", defaults.committer_name),
        committer_email=env.get("COMMITTER_EMAIL", defaults.committer_email),
        clone_timeout=int(env.get("CLONE_TIMEOUT", defaults.clone_timeout)),
        push_timeout=int(env.get("PUSH_TIMEOUT", defaults.push_timeout)),
        index_lock_timeout=float(env.get("INDEX_LOCK_TIMEOUT", defaults.index_lock_timeout)),
    )
    return DeployConfig(
        file_pattern=env["FILE_PATTERN"],
        target_directory=env.get("TARGET_DIRECTORY") or None,
        source_directory=env.get("SOURCE_DIRECTORY") or None,
        settings=settings,
    )


def load_deploy_config(path: Path) -> DeployConfig:
    """Load deploy.env and return DeployConfig."""
    return parse_deploy_env(envparse.load_env(str(path)))
