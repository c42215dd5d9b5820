"""
Stage execution framework for gitdeploy.

Defines the stage pipeline and error handling.
"""

import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from gitdeploy.runner.context import DeployContext


class StageResult(Enum):
    PASSED = "passed"
    FAILED = "failed"


@dataclass
class StageError(Exception):
    """A stage failed."""
    stage: str
    message: str
    details: Optional[dict] = None  # Structured details (e.g., {"type": "authentication"})

    def __str__(self):
        return f"[{self.stage}] {self.message}"


# Stage function signature: (ctx: DeployContext) -> None
# Raises StageError on failure


def run_stage(ctx: DeployContext, stage_name: str, stage_fn: Callable[[DeployContext], None]) -> StageResult:
    """
    Run a single stage with timing and error handling.

    Returns StageResult and updates ctx.stages. Any failure is re-raised as
    StageError; an interrupt is recorded and propagated unchanged.
    """
    ctx.log(f"Starting stage: {stage_name}")
    start = time.time()

    try:
        stage_fn(ctx)
        duration = time.time() - start
        ctx.record_stage(stage_name, "passed", duration)
        ctx.log(f"Stage {stage_name} passed ({duration:.2f}s)")
        return StageResult.PASSED

    except StageError as e:
        duration = time.time() - start
        ctx.record_stage(stage_name, "failed", duration, e.message)
        ctx.log(f"Stage {stage_name} failed: {e.message}")
        raise

    except KeyboardInterrupt:
        duration = time.time() - start
        ctx.record_stage(stage_name, "interrupted", duration)
        ctx.log(f"Stage {stage_name} interrupted")
        raise

    except Exception as e:
        duration = time.time() - start
        ctx.record_stage(stage_name, "failed", duration, str(e))
        ctx.log(f"Stage {stage_name} error: {e}")
        raise StageError(stage_name, str(e)) from e
