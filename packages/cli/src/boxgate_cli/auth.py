"""Credentials and the identity whose comment edits are trusted."""

from __future__ import annotations

import logging
import subprocess

import click

logger = logging.getLogger(__name__)

_NO_TOKEN_HELP = (
    "No GitHub token found. Set GITHUB_TOKEN or run `gh auth login` first.\n"
    "Create a token at https://github.com/settings/tokens"
)


def _gh_session_token() -> str | None:
    try:
        proc = subprocess.run(["gh", "auth", "token"], capture_output=True, text=True, timeout=5)
    except (FileNotFoundError, subprocess.TimeoutExpired) as e:
        logger.debug("gh CLI token unavailable: %s", e)
        return None
    if proc.returncode != 0:
        return None
    return proc.stdout.strip() or None


def require_token(config: dict) -> str:
    """Return the token for API calls: ``github_token`` from config, else the gh CLI session.

    The token found is stored back in ``config``. Raises UsageError when neither
    source has one.
    """
    token = config.get("github_token")
    if not token:
        token = _gh_session_token()
        if not token:
            raise click.UsageError(_NO_TOKEN_HELP)
        logger.debug("Using the gh CLI session token.")
        config["github_token"] = token
    return token


def resolve_bot_login(config: dict, token: str) -> str:
    """The account whose comment edits are trusted: ``action_bot`` or the token's owner."""
    if config.get("action_bot"):
        return config["action_bot"]

    from boxgate_core.gh.pull_request import get_authenticated_login

    login = get_authenticated_login(token)
    logger.info("Current token belongs to: %s", login)
    return login
