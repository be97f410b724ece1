"""The workflow triggers comment: rendering and create-or-update."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from urllib.parse import quote
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from boxgate_core.gh.actions import workflow_file
from boxgate_core.gh.pull_request import get_issue

logger = logging.getLogger(__name__)

DEFAULT_TIMEZONES = ("Asia/Ho_Chi_Minh", "Australia/Sydney")


def comment_marker(pr_number: int) -> str:
    return f"<!-- workflow-triggers-{pr_number} -->"


def workflow_line(owner: str, repo: str, workflow: str, head_ref: str) -> str:
    url = (
        f"https://github.com/{owner}/{repo}/actions/workflows/{workflow_file(workflow)}"
        f"?query=branch%3A{quote(head_ref, safe='')}"
    )
    return f"- [ ] `{workflow}` on CI at this [workflow]({url})."


def _format_timestamp(now: datetime, zone: str) -> str:
    try:
        local = now.astimezone(ZoneInfo(zone))
    except (ZoneInfoNotFoundError, ValueError) as e:
        logger.warning("Failed to format date for %s: %s", zone, e)
        return f"- _{now.date().isoformat()} (unknown timezone {zone})_"
    return f"- _{local.strftime('%d/%m/%Y - %H:%M:%S')} ({zone})_"


def render_comment_body(
    owner: str,
    repo: str,
    pr_number: int,
    commit_sha: str,
    head_ref: str,
    required: list[str],
    optional: list[str],
    doc_link: str | None = None,
    now: datetime | None = None,
    timezones=DEFAULT_TIMEZONES,
) -> str:
    now = now or datetime.now(timezone.utc)

    lines = [f"# Workflow triggers {comment_marker(pr_number)}\n"]
    if doc_link:
        lines.append(f"_For details on each workflow or feedback, please check out this [document]({doc_link})_\n")

    lines.append("## Required")
    lines.extend(workflow_line(owner, repo, w, head_ref) for w in required)
    lines.append("")
    lines.append("## Optional")
    lines.extend(workflow_line(owner, repo, w, head_ref) for w in optional)
    lines.append("")
    lines.append(f"_This comment is generated against commit {commit_sha}, updated at:_")
    lines.extend(_format_timestamp(now, zone) for zone in timezones)

    return "\n".join(lines)


def find_trigger_comment(issue, bot_login: str, marker: str):
    """Return the bot's triggers comment on ``issue``, or None.

    Comments are paginated; iteration stops at the first match.
    """
    for comment in issue.get_comments():
        if comment.user.login == bot_login and marker in (comment.body or ""):
            return comment
    return None


def upsert_trigger_comment(repo, pr_number: int, body: str, bot_login: str) -> str:
    """Update the existing triggers comment or create one. Returns "updated" or "created"."""
    issue = get_issue(repo, pr_number)

    logger.info("Searching for existing comment by %s...", bot_login)
    existing = find_trigger_comment(issue, bot_login, comment_marker(pr_number))
    if existing is not None:
        logger.info("Updating existing comment ID %s...", existing.id)
        existing.edit(body)
        return "updated"

    logger.info("Creating new comment...")
    issue.create_comment(body)
    return "created"
