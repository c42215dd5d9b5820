"""
Deployment pipeline.

Mirrors build artifacts into the deploy branch of a git remote:

1. SYNCHRONIZE - clone or refresh the local deploy repository
2. CLEAN       - untrack and delete every file
3. COPY        - copy the selected artifacts in and stage them
4. DETECT      - compare against HEAD; stop with NO_OP_SUCCESS if identical
5. COMMIT/PUSH - one commit, pushed to the remote

Every failure is caught here and turned into an ERROR result.
"""

import logging
from pathlib import Path

from gitdeploy.lib.config import DeploySettings, load_deploy_config
from gitdeploy.lib.constants import ERROR_PREFIX, UP_TO_DATE_MESSAGE
from gitdeploy.lib.validate import ValidationError
from gitdeploy.runner.context import (
    DeployContext,
    DeploymentResult,
    DeploymentStatus,
    DeploymentTarget,
    FileSelection,
    LoggingStatusSink,
    StatusSink,
)
from gitdeploy.runner.impl.stages import (
    stage_synchronize,
    stage_clean,
    stage_copy,
    stage_detect,
    stage_commit,
    stage_push,
)
from gitdeploy.runner.stages import StageError, run_stage
from gitdeploy.workflow.fsm import DeploymentFSM

logger = logging.getLogger(__name__)


def _finish(ctx: DeployContext, fsm: DeploymentFSM, message: str) -> DeploymentResult:
    result = DeploymentResult(
        status=fsm.deployment_status,
        message=message,
        commit_sha=ctx.commit_sha,
        stages=ctx.stages,
    )
    ctx.set_deployment_result(result)
    return result


def run_deployment(ctx: DeployContext) -> DeploymentResult:
    """
    Run one deployment attempt.

    Never raises: the outcome is returned and also handed to
    ctx.set_deployment_result(). Exactly one status or error line is
    written to ctx's sink.
    """
    fsm = DeploymentFSM(ctx.target.git_url)
    logger.info(f"[DEPLOY] Deploying '{ctx.selection.pattern}' to {ctx.target.git_url} "
                f"({ctx.settings.branch})")

    try:
        run_stage(ctx, "synchronize", stage_synchronize)
        fsm.synchronize()

        run_stage(ctx, "clean", stage_clean)
        fsm.clean()

        run_stage(ctx, "copy", stage_copy)
        fsm.stage()

        run_stage(ctx, "detect", stage_detect)
        if not ctx.has_changes:
            fsm.skip()
            ctx.log_status(UP_TO_DATE_MESSAGE)
            return _finish(ctx, fsm, UP_TO_DATE_MESSAGE)

        run_stage(ctx, "commit", stage_commit)
        fsm.commit()

        run_stage(ctx, "push", stage_push)
        fsm.publish()

    except (Exception, KeyboardInterrupt) as e:
        message = f"{ERROR_PREFIX}{e}"
        # Tracebacks only for failures outside the stage framework
        logger.debug(f"[DEPLOY] {message}", exc_info=not isinstance(e, StageError))
        if fsm.can("fail"):
            fsm.fail()
        ctx.log_error(message)
        return _finish(ctx, fsm, message)

    message = f"Deployed {ctx.commit_sha[:8]} to {ctx.settings.branch} ({len(ctx.staged_paths)} files)"
    ctx.log_status(message)
    return _finish(ctx, fsm, message)


def deploy(
    workspace: Path,
    target: DeploymentTarget,
    selection: FileSelection,
    env: dict | None = None,
    settings: DeploySettings | None = None,
    sink: StatusSink | None = None,
) -> DeploymentResult:
    """Build a DeployContext and run one deployment."""
    ctx = DeployContext(
        workspace=workspace,
        target=target,
        selection=selection,
        env=dict(env or {}),
        settings=settings or DeploySettings(),
    )
    if sink is not None:
        ctx.sink = sink
    return run_deployment(ctx)


def deploy_from_config(
    workspace: Path,
    target: DeploymentTarget,
    config_path: Path,
    env: dict | None = None,
    sink: StatusSink | None = None,
) -> DeploymentResult:
    """Run one deployment configured by a deploy.env file.

    Configuration errors are reported as an ERROR result like any other failure.
    """
    try:
        config = load_deploy_config(config_path)
    except (FileNotFoundError, ValueError, ValidationError) as e:
        message = f"{ERROR_PREFIX}{e}"
        (sink or LoggingStatusSink()).log_error(message)
        return DeploymentResult(DeploymentStatus.ERROR, message)
    return run_deployment(DeployContext.from_config(workspace, target, config, env=env, sink=sink))
