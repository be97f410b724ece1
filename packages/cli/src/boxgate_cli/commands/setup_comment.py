"""setup-comment command — post or refresh the workflow triggers comment."""

from __future__ import annotations

import re

import click
from github import GithubException
from rich.console import Console

from boxgate_core.comments import render_comment_body, upsert_trigger_comment
from boxgate_core.config import split_workflows
from boxgate_core.gh.pull_request import get_repo

console = Console()

_SHA_RE = re.compile(r"^[0-9a-f]{40}$")


@click.command("setup-comment")
@click.option("--repo", required=True, envvar="GITHUB_REPOSITORY", help="GitHub repository in owner/name format.")
@click.option("--pr", "pr_number", type=int, envvar="PR_NUMBER", default=None, help="Pull request number.")
@click.option("--commit", "commit_sha", envvar="COMMIT_HASH", default=None, help="Head commit SHA of the PR.")
@click.option("--head-ref", envvar="HEAD_REF", default=None, help="Head branch of the PR.")
@click.option("--required", "required", default=None, help="Comma-separated required workflows. Overrides config.")
@click.option("--optional", "optional", default=None, help="Comma-separated optional workflows. Overrides config.")
@click.pass_context
def setup_comment_cmd(
    ctx,
    repo: str,
    pr_number: int | None,
    commit_sha: str | None,
    head_ref: str | None,
    required: str | None,
    optional: str | None,
):
    """Create or update the checkbox comment listing the PR's workflows."""
    from boxgate_cli.auth import require_token, resolve_bot_login

    config = ctx.obj["config"]
    required_workflows = split_workflows(required) if required is not None else config["required_workflows"]
    optional_workflows = split_workflows(optional) if optional is not None else config["optional_workflows"]

    if pr_number is None or not commit_sha or not head_ref or not required_workflows:
        raise click.UsageError("Missing or invalid required input: --pr, --commit, --head-ref or required workflows.")
    if not _SHA_RE.match(commit_sha):
        raise click.UsageError(f"--commit must be a 40-character lowercase hex SHA, got {commit_sha!r}.")

    token = require_token(config)
    owner, _, name = repo.partition("/")
    body = render_comment_body(
        owner,
        name,
        pr_number,
        commit_sha,
        head_ref,
        required_workflows,
        optional_workflows,
        doc_link=config.get("doc_link"),
        timezones=config.get("timezones") or (),
    )

    console.print(f"Starting for PR #{pr_number} on {repo} at commit {commit_sha[:7]}")
    try:
        this_repo = get_repo(repo, token=token)
        bot_login = resolve_bot_login(config, token)
        action = upsert_trigger_comment(this_repo, pr_number, body, bot_login)
    except GithubException as e:
        raise click.ClickException(f"Failed to create/update comment: {e}")

    console.print(f"[green]Comment {action}.[/green]")
