"""Tests for locating the run that waits on an environment."""

import types
from unittest.mock import MagicMock

from boxgate_core.models import PendingDeployment
from boxgate_core.runs import find_waiting_run, locate_run, matches_workflow, needs_approval

TARGET_PATH = ".github/workflows/build-preview.yml"


def make_run(run_id, path=TARGET_PATH, status="waiting", name="Build preview"):
    return types.SimpleNamespace(id=run_id, path=path, status=status, name=name)


def deployments(*env_ids, waiting=True):
    return [PendingDeployment(environment_id=i, waiting_for_reviewers=waiting) for i in env_ids]


def tracked_pages(pages):
    """Generator over ``pages`` that records how many pages were requested and whether it was closed."""
    state = {"fetched": 0, "closed": False}

    def gen():
        try:
            for page in pages:
                state["fetched"] += 1
                yield page
        finally:
            state["closed"] = True

    return gen(), state


class TestMatchesWorkflow:
    def test_matches_yml_path(self):
        assert matches_workflow(make_run(1), "build-preview")

    def test_matches_yaml_path(self):
        assert matches_workflow(make_run(1, path=".github/workflows/build-preview.yaml"), "build-preview")

    def test_matches_name(self):
        assert matches_workflow(make_run(1, path="other.yml", name="build-preview"), "build-preview")

    def test_other_workflow(self):
        assert not matches_workflow(make_run(1, path=".github/workflows/lint.yml", name="Lint"), "build-preview")


class TestNeedsApproval:
    def test_matching_environment(self):
        assert needs_approval(deployments(3, 5), 5)

    def test_no_matching_environment(self):
        assert not needs_approval(deployments(3), 5)

    def test_empty(self):
        assert not needs_approval([], 5)

    def test_string_target_id(self):
        assert needs_approval(deployments(5), "5")

    def test_strict_requires_waiting_for_reviewers(self):
        assert not needs_approval(deployments(5, waiting=False), 5, strict=True)
        assert needs_approval(deployments(5, waiting=True), 5, strict=True)


class TestLocateRun:
    def test_returns_first_match_without_fetching_further_pages(self):
        run_a = make_run(1, path=".github/workflows/other.yml", name="Other")
        run_b = make_run(2)
        run_c = make_run(3)
        pages, state = tracked_pages([[run_a], [run_b], [run_c]])
        get_pending = MagicMock(return_value=deployments(5))

        result = locate_run(pages, "build-preview", 5, get_pending)

        assert result is run_b
        assert state["fetched"] == 2
        assert state["closed"] is True
        get_pending.assert_called_once_with(2)

    def test_skips_run_not_waiting_on_target(self):
        first = make_run(1)
        second = make_run(2)
        get_pending = MagicMock(side_effect=lambda run_id: deployments(9) if run_id == 1 else deployments(5))

        assert locate_run([[first, second]], "build-preview", 5, get_pending) is second

    def test_returns_none_when_exhausted(self):
        pages, state = tracked_pages([[make_run(1)], [make_run(2)]])
        get_pending = MagicMock(return_value=[])

        assert locate_run(pages, "build-preview", 5, get_pending) is None
        assert state["fetched"] == 2
        assert state["closed"] is True

    def test_no_pages(self):
        get_pending = MagicMock()
        assert locate_run([], "build-preview", 5, get_pending) is None
        get_pending.assert_not_called()

    def test_other_workflows_never_queried(self):
        get_pending = MagicMock()
        locate_run([[make_run(1, path=".github/workflows/lint.yml", name="Lint")]], "build-preview", 5, get_pending)
        get_pending.assert_not_called()

    def test_keeps_api_order(self):
        newer, older = make_run(10), make_run(4)
        get_pending = MagicMock(return_value=deployments(5))
        assert locate_run([[newer, older]], "build-preview", 5, get_pending) is newer


class TestFindWaitingRun:
    def test_wires_gateway_calls(self, mocker):
        run = make_run(2)
        iter_pages = mocker.patch("boxgate_core.runs.iter_run_pages", return_value=iter([[run]]))
        get_pending = mocker.patch("boxgate_core.runs.get_pending_deployments", return_value=deployments(5))
        repo = MagicMock()

        assert find_waiting_run(repo, "build-preview", "a" * 40, 5) is run
        iter_pages.assert_called_once_with(repo, "a" * 40)
        get_pending.assert_called_once_with(repo, 2)
