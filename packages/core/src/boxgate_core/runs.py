"""Locate the in-flight run of a workflow that waits on a given environment."""

from __future__ import annotations

import logging
from typing import Callable, Iterable

from boxgate_core.gh.actions import WORKFLOWS_DIR, get_pending_deployments, iter_run_pages
from boxgate_core.models import PendingDeployment

logger = logging.getLogger(__name__)


def matches_workflow(run, workflow: str) -> bool:
    """Return True if ``run`` belongs to the workflow file ``<workflow>.yml``."""
    path = getattr(run, "path", None) or ""
    if path in (f"{WORKFLOWS_DIR}/{workflow}.yml", f"{WORKFLOWS_DIR}/{workflow}.yaml"):
        return True
    return getattr(run, "name", None) == workflow


def needs_approval(deployments: list[PendingDeployment], target_env_id: int, strict: bool = False) -> bool:
    target = int(target_env_id)
    for deployment in deployments:
        if deployment.environment_id != target:
            continue
        if strict and not deployment.waiting_for_reviewers:
            continue
        return True
    return False


def locate_run(
    pages: Iterable[list],
    workflow: str,
    target_env_id: int,
    get_pending: Callable[[int], list[PendingDeployment]],
    strict: bool = False,
):
    """Return the first run of ``workflow`` with a pending deployment for ``target_env_id``.

    ``pages`` is consumed lazily and closed as soon as a run is found, so no
    page past the match is ever requested. Returns None when every page has
    been searched without a match; that is a normal outcome (the run may not
    have started yet, already finished, or been rejected).
    """
    page_iter = iter(pages)
    try:
        for runs in page_iter:
            for run in runs:
                if not matches_workflow(run, workflow):
                    continue
                deployments = get_pending(run.id)
                logger.debug("Run %s pending deployments: %s", run.id, deployments)
                if needs_approval(deployments, target_env_id, strict):
                    logger.info("Found target run ID: %s waiting for environment %s.", run.id, target_env_id)
                    return run
                logger.info(
                    "Run ID %s found, but not waiting for environment %s. Checking next runs/pages.",
                    run.id,
                    target_env_id,
                )
    finally:
        close = getattr(page_iter, "close", None)
        if close is not None:
            close()
    return None


def find_waiting_run(repo, workflow: str, commit_sha: str, target_env_id: int, strict: bool = False):
    logger.info("Fetching workflow runs for '%s' with SHA %s...", workflow, commit_sha)
    return locate_run(
        iter_run_pages(repo, commit_sha),
        workflow,
        target_env_id,
        lambda run_id: get_pending_deployments(repo, run_id),
        strict=strict,
    )
