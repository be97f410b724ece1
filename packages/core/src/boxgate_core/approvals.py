"""Approve a located run's pending deployment, or dispatch an unprotected workflow.

A located run is not necessarily ready: GitHub reports ``pending`` while the
run is being scheduled and only switches to ``waiting`` once it is blocked on
the environment's required reviewers. The poll loop is a status → action
table so the timeout and the abort condition stay independent:

    waiting   → READY    (stop polling, approve)
    pending   → RETRY    (sleep one retry interval)
    <other>   → ABORTED  (the run will never reach waiting)
    <elapsed> → TIMEOUT
"""

from __future__ import annotations

import enum
import logging
import time
from typing import Callable

from boxgate_core.errors import ApprovalTimeoutError, InconsistentDeploymentError
from boxgate_core.gh.actions import (
    approve_pending_deployments,
    create_dispatch,
    get_pending_deployments,
    get_run_status,
    workflow_file,
)
from boxgate_core.models import WorkflowResult

logger = logging.getLogger(__name__)

WAITING = "waiting"
PENDING = "pending"


class PollOutcome(enum.Enum):
    READY = "ready"
    RETRY = "retry"
    ABORTED = "aborted"
    TIMEOUT = "timeout"


_STATUS_ACTIONS = {
    WAITING: PollOutcome.READY,
    PENDING: PollOutcome.RETRY,
}


def next_action(status: str | None) -> PollOutcome:
    return _STATUS_ACTIONS.get(status, PollOutcome.ABORTED)


def wait_for_waiting(
    repo,
    run_id: int,
    timeout: float,
    retry_delay: float,
    sleep: Callable[[float], None] | None = None,
    clock: Callable[[], float] | None = None,
) -> PollOutcome:
    """Poll a run until it is ``waiting``; returns READY, ABORTED or TIMEOUT."""
    sleep = sleep or time.sleep
    clock = clock or time.monotonic
    start = clock()
    while clock() - start < timeout:
        status = get_run_status(repo, run_id)
        logger.info("Workflow run %s status: %s", run_id, status)

        action = next_action(status)
        if action is PollOutcome.READY:
            logger.info("Workflow run %s is 'waiting'. Ready for approval.", run_id)
            return action
        if action is PollOutcome.ABORTED:
            logger.warning(
                "Workflow run %s has status '%s', not 'pending' or 'waiting'. Aborting approval.", run_id, status
            )
            return action

        logger.info("Workflow run %s is 'pending', checking again in %gs...", run_id, retry_delay)
        sleep(retry_delay)

    return PollOutcome.TIMEOUT


def approval_comment(pr_number: int) -> str:
    return f"Approved via checkbox toggle in PR #{pr_number}."


def approve_run(
    repo,
    workflow: str,
    run,
    env_id: int,
    pr_number: int,
    timeout: float,
    retry_delay: float,
    sleep: Callable[[float], None] | None = None,
    clock: Callable[[], float] | None = None,
) -> WorkflowResult:
    """Approve ``run``'s deployment into ``env_id``, polling first if it is not waiting yet.

    Raises ApprovalTimeoutError when the run never reaches waiting and
    InconsistentDeploymentError when the waiting run has deployments, none of
    them for ``env_id``.
    """
    if run.status != WAITING:
        outcome = wait_for_waiting(repo, run.id, timeout, retry_delay, sleep=sleep, clock=clock)
        if outcome is PollOutcome.TIMEOUT:
            raise ApprovalTimeoutError(run.id, timeout)
        if outcome is PollOutcome.ABORTED:
            return WorkflowResult(workflow, "aborted", f"Run {run.id} left the pending state without waiting.")

    # The deployment may have been approved or cancelled elsewhere while polling.
    deployments = get_pending_deployments(repo, run.id)
    if not deployments:
        logger.info("Run %s has no pending deployments left. Nothing to approve.", run.id)
        return WorkflowResult(workflow, "noop", f"Run {run.id} has no pending deployments.")
    if not any(d.environment_id == int(env_id) for d in deployments):
        raise InconsistentDeploymentError(
            f"Run {run.id} is waiting on environment(s) "
            f"{', '.join(str(d.environment_id) for d in deployments)}, not {env_id}."
        )

    logger.info("Attempting to approve deployment for run ID %s / environment ID %s.", run.id, env_id)
    approve_pending_deployments(repo, run.id, [int(env_id)], approval_comment(pr_number))
    logger.info("Successfully approved deployment for run ID %s and environment ID %s.", run.id, env_id)
    return WorkflowResult(workflow, "approved", f"Run {run.id} approved for environment {env_id}.")


def dispatch_workflow(repo, workflow: str, ref: str) -> WorkflowResult:
    logger.info("Dispatching %s on '%s' (no environment protection).", workflow_file(workflow), ref)
    create_dispatch(repo, workflow, ref)
    return WorkflowResult(workflow, "dispatched", f"Dispatched on {ref}.")
