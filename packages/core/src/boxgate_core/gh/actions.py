"""Thin gateway over the GitHub Actions endpoints boxgate needs.

PyGithub wraps workflows, runs and environments. Pending deployments are not
wrapped, so those two endpoints go through the repository's requester.
"""

from __future__ import annotations

import logging
from typing import Iterator

from boxgate_core.errors import BoxgateError
from boxgate_core.models import PendingDeployment

logger = logging.getLogger(__name__)

WORKFLOWS_DIR = ".github/workflows"


def workflow_file(workflow: str) -> str:
    return f"{workflow}.yml"


def get_workflow(repo, workflow: str):
    return repo.get_workflow(workflow_file(workflow))


def list_environments(repo) -> dict[str, int]:
    """Return a name → id table of the repository's deployment environments."""
    return {env.name: int(env.id) for env in repo.get_environments()}


def iter_run_pages(repo, head_sha: str) -> Iterator[list]:
    """Yield pages of workflow runs for a commit, one API call per page.

    Callers that stop early should close the generator so no further page is
    requested.
    """
    runs = repo.get_workflow_runs(head_sha=head_sha)
    page = 0
    while True:
        batch = runs.get_page(page)
        if not batch:
            return
        logger.debug("Fetched page %d of runs for %s (%d run(s)).", page + 1, head_sha, len(batch))
        yield batch
        page += 1


def get_pending_deployments(repo, run_id: int) -> list[PendingDeployment]:
    _, data = repo.requester.requestJsonAndCheck("GET", f"{repo.url}/actions/runs/{run_id}/pending_deployments")
    return [PendingDeployment.from_api(item) for item in data or []]


def get_run_status(repo, run_id: int) -> str:
    return repo.get_workflow_run(run_id).status


def create_dispatch(repo, workflow: str, ref: str) -> None:
    if not get_workflow(repo, workflow).create_dispatch(ref=ref):
        raise BoxgateError(f"GitHub refused to dispatch {workflow_file(workflow)} on '{ref}'.")


def approve_pending_deployments(repo, run_id: int, environment_ids: list[int], comment: str) -> None:
    repo.requester.requestJsonAndCheck(
        "POST",
        f"{repo.url}/actions/runs/{run_id}/pending_deployments",
        input={
            "environment_ids": [int(env_id) for env_id in environment_ids],
            "state": "approved",
            "comment": comment,
        },
    )
