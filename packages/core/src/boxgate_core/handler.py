"""Comment-edit event orchestration.

One event is processed to completion per invocation. Workflows are handled
one after another: dispatch and approve are not safe to race. Each workflow
runs in its own try block so a failure is recorded and the remaining
workflows are still processed; the caller decides what the aggregate means.
"""

from __future__ import annotations

import logging
from typing import Callable

from boxgate_core.approvals import approve_run, dispatch_workflow
from boxgate_core.config import configured_workflows
from boxgate_core.environments import EnvironmentTable, resolve_environment_id
from boxgate_core.errors import (
    ApprovalTimeoutError,
    EnvironmentNotFoundError,
    InconsistentDeploymentError,
    ValidationError,
)
from boxgate_core.events import parse_comment_event
from boxgate_core.gh.actions import get_workflow, workflow_file
from boxgate_core.gh.pull_request import get_branch_name
from boxgate_core.models import ChangeEvent, EventReport, WorkflowResult
from boxgate_core.runs import find_waiting_run
from boxgate_core.toggles import was_toggled_on

logger = logging.getLogger(__name__)


def validate_workflows(repo, workflows: list[str]) -> None:
    """Check every workflow file exists and is readable; raise ValidationError listing all failures."""
    logger.info("Validating %d configured workflow(s)...", len(workflows))
    errors = []
    for workflow in workflows:
        try:
            get_workflow(repo, workflow)
        except Exception as e:
            logger.error("Workflow %s validation failed: %s", workflow_file(workflow), e)
            errors.append(f"{workflow_file(workflow)}: {e}")
            continue
        logger.debug("Workflow %s exists and is accessible.", workflow_file(workflow))

    if errors:
        raise ValidationError(
            f"Workflow validation failed for {len(errors)} workflow(s):\n" + "\n".join(f"  - {e}" for e in errors)
        )
    logger.info("All %d configured workflows are valid.", len(workflows))


def process_workflow(
    repo,
    workflow: str,
    event: ChangeEvent,
    branch: str,
    config: dict,
    environments: EnvironmentTable,
    sleep: Callable[[float], None] | None = None,
) -> WorkflowResult:
    mappings = config.get("environment_mappings", {})

    if not mappings.get(workflow):
        logger.info("No environment mapping found for workflow: %s", workflow)
        return dispatch_workflow(repo, workflow, branch)

    # No SHA means no run to approve; skip before touching the environments table.
    if not event.commit_sha:
        logger.warning("No commit hash in the comment; cannot look up runs for '%s'.", workflow)
        return WorkflowResult(workflow, "skipped", "Commit hash not found in comment.")

    env_id = resolve_environment_id(workflow, mappings, environments.ids)

    logger.info(
        "Processing approval request for workflow '%s' (Environment ID: %s) for commit %s",
        workflow,
        env_id,
        event.commit_sha,
    )
    run = find_waiting_run(repo, workflow, event.commit_sha, env_id, strict=config.get("strict_reviewers", False))
    if run is None:
        logger.warning(
            "No workflow run found for '%s' with SHA %s that requires approval for environment ID %s. Cannot approve.",
            workflow,
            event.commit_sha,
            env_id,
        )
        return WorkflowResult(workflow, "not_found", f"No run waiting on environment {env_id}.")

    return approve_run(
        repo,
        workflow,
        run,
        env_id,
        event.pr_number,
        timeout=config["poll_timeout"],
        retry_delay=config["retry_interval"],
        sleep=sleep,
    )


def _failure_kind(error: Exception) -> str:
    if isinstance(error, EnvironmentNotFoundError):
        return "configuration"
    if isinstance(error, ApprovalTimeoutError):
        return "timeout"
    if isinstance(error, InconsistentDeploymentError):
        return "inconsistent"
    return "external"


def handle_comment_event(
    repo,
    payload: dict,
    config: dict,
    bot_login: str,
    sleep: Callable[[float], None] | None = None,
) -> EventReport | None:
    """Process one ``issue_comment`` edit. Returns None when the event does not apply."""
    workflows = configured_workflows(config)
    validate_workflows(repo, workflows)

    event = parse_comment_event(payload, bot_login)
    if event is None:
        return None

    logger.info("Handling comment edit event for PR #%d by bot %s", event.pr_number, bot_login)
    branch = get_branch_name(repo, event.pr_number)
    logger.info("Branch name: %s", branch)

    if event.commit_sha:
        logger.info("Commit hash extracted: %s", event.commit_sha)
    else:
        logger.warning("Could not extract commit hash from comment body. Workflow approvals will be skipped.")

    environments = EnvironmentTable(repo)
    report = EventReport(pr_number=event.pr_number, commit_sha=event.commit_sha)

    for workflow in workflows:
        if not was_toggled_on(workflow, event.previous_body, event.current_body):
            continue
        logger.info("Detected toggle ON for: '%s'", workflow)
        try:
            result = process_workflow(repo, workflow, event, branch, config, environments, sleep=sleep)
        except Exception as e:
            logger.error("Failed to process workflow '%s': %s", workflow, e)
            result = WorkflowResult(workflow, "failed", str(e), kind=_failure_kind(e))
        report.results.append(result)

    logger.info("Checkbox analysis complete: %d workflow(s) toggled.", len(report.results))
    return report
