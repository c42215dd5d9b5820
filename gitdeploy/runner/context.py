"""
Deployment context and result types for gitdeploy.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Optional, Protocol

from gitdeploy.git.credentials import GitCredentials
from gitdeploy.lib.config import DeployConfig, DeploySettings

logger = logging.getLogger(__name__)


class DeploymentStatus(Enum):
    SUCCESS = "success"
    NO_OP_SUCCESS = "no_op_success"
    ERROR = "error"


@dataclass(frozen=True)
class DeploymentTarget:
    """Remote the deployment is pushed to. Supplied by the caller, never modified."""
    git_url: str
    username: str = ""
    password: str = ""

    def __repr__(self) -> str:
        return f"DeploymentTarget(git_url={self.git_url!r}, username={self.username!r}, password='***')"

    @property
    def credentials(self) -> GitCredentials | None:
        if not self.username:
            return None
        return GitCredentials(self.username, self.password)


@dataclass
class FileSelection:
    """Which workspace files to deploy and where they land in the repository."""
    pattern: str
    target_directory: Optional[str] = None  # None/"" means repository root
    source_directory: Optional[str] = None  # Scan root inside the workspace; None/"" means the workspace itself

    @property
    def target_dir(self) -> str:
        return self.target_directory or ""

    @property
    def source_dir(self) -> str:
        return self.source_directory or ""


@dataclass
class DeploymentResult:
    """Terminal outcome of one deployment run."""
    status: DeploymentStatus
    message: str = ""
    commit_sha: Optional[str] = None
    stages: dict = field(default_factory=dict)


class StatusSink(Protocol):
    """Where user-facing deployment messages go (typically the build log)."""

    def log_status(self, message: str) -> None: ...

    def log_error(self, message: str) -> None: ...


class LoggingStatusSink:
    """StatusSink that writes to a standard logger."""

    def __init__(self, log: logging.Logger | None = None):
        self.log = log or logging.getLogger("gitdeploy.status")

    def log_status(self, message: str) -> None:
        self.log.info(message)

    def log_error(self, message: str) -> None:
        self.log.error(message)


@dataclass
class DeployContext:
    """Context for a single deployment run."""
    workspace: Path
    target: DeploymentTarget
    selection: FileSelection
    env: dict = field(default_factory=dict)  # Build variables, used for message expansion
    settings: DeploySettings = field(default_factory=DeploySettings)
    sink: StatusSink = field(default_factory=LoggingStatusSink)
    start_time: datetime = field(default_factory=datetime.now)
    stages: dict = field(default_factory=dict)
    # Filled in as stages run
    staged_paths: list = field(default_factory=list)
    has_changes: Optional[bool] = None
    commit_sha: Optional[str] = None
    result: Optional[DeploymentResult] = None

    @classmethod
    def from_config(cls, workspace: Path, target: DeploymentTarget, config: DeployConfig,
                    env: dict | None = None, sink: StatusSink | None = None) -> 'DeployContext':
        """Create a context from a loaded deploy.env."""
        return cls(
            workspace=workspace,
            target=target,
            selection=FileSelection(config.file_pattern, config.target_directory, config.source_directory),
            env=dict(env or {}),
            settings=config.settings,
            sink=sink or LoggingStatusSink(),
        )

    @property
    def repo_path(self) -> Path:
        """Fixed location of the local deploy repository."""
        return self.workspace / self.settings.deploy_repo

    def log(self, message: str):
        """Internal progress message (not shown in the build log)."""
        logger.debug(f"[DEPLOY] {message}")

    def log_status(self, message: str):
        self.sink.log_status(message)

    def log_error(self, message: str):
        self.sink.log_error(message)

    def record_stage(self, stage: str, status: str, duration: float, notes: str = ""):
        """Record stage result."""
        self.stages[stage] = {
            "status": status,
            "duration_seconds": duration,
            "notes": notes,
        }

    def set_deployment_result(self, result: DeploymentResult):
        """Store the terminal result; callers read it back from .result."""
        self.result = result
