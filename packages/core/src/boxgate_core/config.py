import json
import os
from pathlib import Path
from typing import Optional

import yaml

from boxgate_core.comments import DEFAULT_TIMEZONES
from boxgate_core.errors import ConfigError

DEFAULT_CONFIG: dict = {
    "environment_mappings": {},  # workflow id -> environment name; empty/None = no approval gate
    "required_workflows": [],
    "optional_workflows": [],
    "action_bot": None,  # None = the user the token belongs to
    "doc_link": None,
    "poll_timeout": 300,  # seconds
    "retry_interval": 10,  # seconds
    "strict_reviewers": False,
    "timezones": list(DEFAULT_TIMEZONES),
}

_LIST_KEYS = ("required_workflows", "optional_workflows")


def split_workflows(workflows) -> list[str]:
    """Split a comma-separated workflow list, dropping blanks.

    Lists (as written in YAML) are trimmed the same way.
    """
    if not workflows:
        return []
    if isinstance(workflows, str):
        workflows = workflows.split(",")
    return [str(w).strip() for w in workflows if str(w).strip()]


def parse_environment_mappings(raw) -> dict:
    """Parse the workflow → environment table from a JSON string or a mapping."""
    if raw is None or raw == "":
        return {}
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Failed to parse environment mappings: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigError(f"Environment mappings must be a JSON object, got {type(raw).__name__}.")
    return {str(workflow): (str(env) if env else None) for workflow, env in raw.items()}


def load_config(config_path: str = ".boxgate.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .boxgate.yml in the current directory
      3. Environment variables (as set by the GitHub Actions step)
      4. CLI argument overrides
    """
    config = {
        **DEFAULT_CONFIG,
        "environment_mappings": dict(DEFAULT_CONFIG["environment_mappings"]),
        "timezones": list(DEFAULT_CONFIG["timezones"]),
    }

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            try:
                file_config = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigError(f"Could not parse {config_path}: {e}") from e
        if not isinstance(file_config, dict):
            raise ConfigError(f"{config_path} must contain a mapping at the top level.")
        config.update(file_config)

    env_overrides = {
        "environment_mappings": os.environ.get("ENVIRONMENT_MAPPINGS"),
        "required_workflows": os.environ.get("REQUIRED_WORKFLOWS"),
        "optional_workflows": os.environ.get("OPTIONAL_WORKFLOWS"),
        "action_bot": os.environ.get("ACTION_BOT"),
        "doc_link": os.environ.get("DOC_LINK"),
    }
    for key, value in env_overrides.items():
        if value:
            config[key] = value

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    config["environment_mappings"] = parse_environment_mappings(config["environment_mappings"])
    for key in _LIST_KEYS:
        config[key] = split_workflows(config[key])

    for key in ("poll_timeout", "retry_interval"):
        try:
            config[key] = float(config[key])
        except (TypeError, ValueError):
            raise ConfigError(f"{key} must be a number, got {config[key]!r}.")
        if config[key] <= 0:
            raise ConfigError(f"{key} must be positive, got {config[key]:g}.")

    config["github_token"] = os.environ.get("GITHUB_TOKEN")

    return config


def configured_workflows(config: dict) -> list[str]:
    """Every workflow boxgate manages: mapped ones first, then required, then optional."""
    seen: dict[str, None] = {}
    for workflow in list(config.get("environment_mappings", {})) + list(config.get("required_workflows", [])) + list(
        config.get("optional_workflows", [])
    ):
        seen.setdefault(workflow, None)
    return list(seen)
