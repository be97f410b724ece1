from __future__ import annotations

import logging

from boxgate_core.errors import ValidationError
from boxgate_core.gh.pull_request import parse_pr_number
from boxgate_core.models import ChangeEvent
from boxgate_core.toggles import extract_commit_sha

logger = logging.getLogger(__name__)


def parse_comment_event(payload: dict | None, bot_login: str) -> ChangeEvent | None:
    """Turn an ``issue_comment`` payload into a ChangeEvent.

    Returns None when the event does not apply (not a pull request, not the
    bot's comment, or not an edit). An edit whose pull request url carries no
    number raises ValidationError.
    """
    issue = (payload or {}).get("issue") or {}
    if not issue.get("pull_request"):
        logger.info("Event payload is missing required issue or pull_request information. Skipping.")
        return None

    comment = payload.get("comment") or {}
    actor = (comment.get("user") or {}).get("login")
    if actor != bot_login:
        logger.info('Comment user "%s" is not the expected bot "%s". Skipping.', actor, bot_login)
        return None

    previous_body = ((payload.get("changes") or {}).get("body") or {}).get("from")
    if not previous_body:
        logger.info("Event payload does not contain the previous comment body. Cannot detect changes. Skipping.")
        return None

    pr_url = issue["pull_request"].get("url", "")
    pr_number = parse_pr_number(pr_url)
    if pr_number is None:
        raise ValidationError(f"Could not parse PR number from event payload URL: {pr_url}")

    current_body = comment.get("body") or ""
    return ChangeEvent(
        previous_body=previous_body,
        current_body=current_body,
        pr_number=pr_number,
        pr_url=pr_url,
        actor_login=actor,
        commit_sha=extract_commit_sha(current_body),
    )
