"""Deployment pipeline state machine using transitions library.

One FSM instance tracks a single deployment run:

    start -> synchronized -> cleaned -> staged -> no_op
                                              \\-> committed -> published

`fail` moves any non-terminal state to `error`. Terminal states
(published, no_op, error) accept no triggers.

Usage:
    from gitdeploy.workflow.fsm import DeploymentFSM

    fsm = DeploymentFSM("https://example.com/app.git")
    fsm.synchronize()
    fsm.clean()
"""

import logging

from transitions import Machine

from gitdeploy.runner.context import DeploymentStatus

logger = logging.getLogger(__name__)


STATES = [
    "start",
    "synchronized",
    "cleaned",
    "staged",
    "committed",
    "published",
    "no_op",
    "error",
]

TERMINAL_STATES = {"published", "no_op", "error"}

# Each trigger becomes a method on the FSM
TRANSITIONS = [
    {"trigger": "synchronize", "source": "start", "dest": "synchronized"},
    {"trigger": "clean", "source": "synchronized", "dest": "cleaned"},
    {"trigger": "stage", "source": "cleaned", "dest": "staged"},

    # Change detection outcome
    {"trigger": "skip", "source": "staged", "dest": "no_op"},
    {"trigger": "commit", "source": "staged", "dest": "committed"},

    {"trigger": "publish", "source": "committed", "dest": "published"},

    # Any failure is terminal
    {"trigger": "fail", "source": [s for s in STATES if s not in TERMINAL_STATES], "dest": "error"},
]

STATUS_FOR_STATE = {
    "published": DeploymentStatus.SUCCESS,
    "no_op": DeploymentStatus.NO_OP_SUCCESS,
    "error": DeploymentStatus.ERROR,
}


class DeploymentFSM:
    """State machine for one deployment run.

    Wraps the transitions library with deployment-specific logic:
    - Logs all transitions
    - Maps terminal states to DeploymentStatus
    """

    def __init__(self, label: str):
        """Initialize FSM for a deployment.

        Args:
            label: Name used in log lines (usually the remote URL)
        """
        self.label = label

        self.machine = Machine(
            model=self,
            states=STATES,
            transitions=TRANSITIONS,
            initial="start",
            auto_transitions=False,  # Only explicit transitions
            send_event=True,  # Pass EventData to callbacks
            after_state_change="on_state_change",
        )

    def on_state_change(self, event) -> None:
        """Callback after any state transition."""
        from_state = event.transition.source
        to_state = event.transition.dest
        trigger = event.event.name

        logger.info(f"[FSM] {self.label}: {from_state} -> {to_state} ({trigger})")

    def can(self, trigger: str) -> bool:
        """Check if a trigger can be executed in current state."""
        return trigger in self.machine.get_triggers(self.state)

    @property
    def deployment_status(self) -> DeploymentStatus | None:
        """Outcome for a terminal state, None while the run is in progress."""
        return STATUS_FOR_STATE.get(self.state)
