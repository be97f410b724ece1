"""Tests for environment resolution."""

import types
from unittest.mock import MagicMock

import pytest

from boxgate_core.environments import EnvironmentTable, resolve_environment_id
from boxgate_core.errors import EnvironmentNotFoundError
from boxgate_core.models import PendingDeployment
from boxgate_core.runs import needs_approval


class TestResolveEnvironmentId:
    def test_no_mapping_returns_none(self):
        assert resolve_environment_id("wf", {}, {"Staging": 1}) is None

    def test_no_mapping_with_any_table(self):
        assert resolve_environment_id("wf", {}, {}) is None

    def test_empty_mapping_value_returns_none(self):
        assert resolve_environment_id("wf", {"wf": None}, {"Staging": 1}) is None

    def test_mapping_to_missing_environment_raises(self):
        with pytest.raises(EnvironmentNotFoundError) as exc:
            resolve_environment_id("wf", {"wf": "Staging"}, {})
        assert exc.value.workflow == "wf"
        assert exc.value.environment == "Staging"

    def test_resolves_id(self):
        assert resolve_environment_id("wf", {"wf": "Preview"}, {"Preview": 7}) == 7

    def test_string_id_is_returned_as_int(self):
        env_id = resolve_environment_id("wf", {"wf": "Preview"}, {"Preview": "7"})
        assert env_id == 7
        assert isinstance(env_id, int)

    def test_resolved_id_matches_string_id_from_deployments(self):
        """A string id in the deployments payload must still match the resolved int."""
        env_id = resolve_environment_id("wf", {"wf": "Preview"}, {"Preview": 7})
        deployment = PendingDeployment.from_api({"environment": {"id": "7", "name": "Preview"}})
        assert needs_approval([deployment], env_id)


class TestEnvironmentTable:
    def _repo(self, envs):
        repo = MagicMock()
        repo.get_environments.return_value = [types.SimpleNamespace(name=n, id=i) for n, i in envs]
        return repo

    def test_fetches_lazily(self):
        repo = self._repo([("Preview", 7)])
        EnvironmentTable(repo)
        repo.get_environments.assert_not_called()

    def test_fetches_once(self):
        repo = self._repo([("Preview", 7), ("Prod", "9")])
        table = EnvironmentTable(repo)
        assert table.ids == {"Preview": 7, "Prod": 9}
        assert table.ids == {"Preview": 7, "Prod": 9}
        repo.get_environments.assert_called_once()

    def test_failed_fetch_is_not_cached(self):
        repo = MagicMock()
        repo.get_environments.side_effect = [RuntimeError("boom"), [types.SimpleNamespace(name="Preview", id=7)]]
        table = EnvironmentTable(repo)
        with pytest.raises(RuntimeError):
            table.ids
        assert table.ids == {"Preview": 7}

    def test_table_is_read_only(self):
        table = EnvironmentTable(self._repo([("Preview", 7)]))
        with pytest.raises(TypeError):
            table.ids["Preview"] = 8
        assert table.ids["Preview"] == 7
