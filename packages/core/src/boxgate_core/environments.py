"""Workflow → protected environment resolution."""

from __future__ import annotations

import logging
import types
from typing import Mapping

from boxgate_core.errors import EnvironmentNotFoundError
from boxgate_core.gh.actions import list_environments

logger = logging.getLogger(__name__)


class EnvironmentTable:
    """Environment name → id table, fetched from GitHub on first use.

    One instance lives for one event. Events where no toggled workflow needs
    approval never hit the environments endpoint. A failed fetch is not
    cached, so the next workflow that needs the table tries again. The table
    is read-only once fetched.
    """

    def __init__(self, repo):
        self._repo = repo
        self._ids: dict[str, int] | None = None

    @property
    def ids(self) -> Mapping[str, int]:
        if self._ids is None:
            logger.info("Fetching environment IDs...")
            self._ids = list_environments(self._repo)
            logger.info("Found environments: %s", ", ".join(self._ids) or "(none)")
        return types.MappingProxyType(self._ids)


def resolve_environment_id(workflow: str, mappings: dict, environment_ids: Mapping[str, int]) -> int | None:
    """Return the id of the environment guarding ``workflow``.

    None means the workflow has no environment mapping and needs no approval.
    A mapping to an environment missing from ``environment_ids`` is a
    configuration error and raises EnvironmentNotFoundError.
    """
    env_name = mappings.get(workflow)
    if not env_name:
        logger.info("No environment mapping found for workflow: %s", workflow)
        return None

    if env_name not in environment_ids:
        raise EnvironmentNotFoundError(workflow, env_name)

    env_id = int(environment_ids[env_name])
    logger.info("Found environment mapping: %s -> %s (ID: %d)", workflow, env_name, env_id)
    return env_id
