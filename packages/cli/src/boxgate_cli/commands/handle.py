"""handle-event command — act on an edit of the workflow triggers comment."""

from __future__ import annotations

import json
from pathlib import Path

import click
from github import GithubException
from rich.console import Console
from rich.table import Table

from boxgate_core.errors import ValidationError
from boxgate_core.gh.pull_request import get_repo
from boxgate_core.handler import handle_comment_event
from boxgate_core.models import EventReport

console = Console()

_STATUS_STYLE = {
    "approved": "green",
    "dispatched": "green",
    "noop": "dim",
    "not_found": "yellow",
    "skipped": "yellow",
    "aborted": "yellow",
    "failed": "red",
}


def _print_report(report: EventReport) -> None:
    if not report.results:
        console.print("[dim]No checkbox was toggled on. Nothing to do.[/dim]")
        return

    table = Table(title=f"Workflow triggers for PR #{report.pr_number}", show_header=True, header_style="bold cyan")
    table.add_column("Workflow", style="bold")
    table.add_column("Result", width=12)
    table.add_column("Detail")
    for r in report.results:
        style = _STATUS_STYLE.get(r.status, "white")
        table.add_row(r.workflow, f"[{style}]{r.status}[/{style}]", r.detail)
    console.print(table)


def _load_payload(event_path: str) -> dict:
    try:
        return json.loads(Path(event_path).read_text())
    except json.JSONDecodeError as e:
        raise click.UsageError(f"Event payload at {event_path} is not valid JSON: {e}")


@click.command("handle-event")
@click.option("--repo", required=True, envvar="GITHUB_REPOSITORY", help="GitHub repository in owner/name format.")
@click.option(
    "--event-path",
    required=True,
    envvar="GITHUB_EVENT_PATH",
    type=click.Path(exists=True, dir_okay=False),
    help="Path to the issue_comment event payload (JSON).",
)
@click.pass_context
def handle_event_cmd(ctx, repo: str, event_path: str):
    """Dispatch or approve the workflows whose checkbox was just ticked.

    Meant to run on `issue_comment` events of type `edited`. Events that are
    not edits of the bot's comment are skipped without error.
    """
    from boxgate_cli.auth import require_token, resolve_bot_login

    config = ctx.obj["config"]
    token = require_token(config)
    payload = _load_payload(event_path)

    try:
        this_repo = get_repo(repo, token=token)
        bot_login = resolve_bot_login(config, token)
        report = handle_comment_event(this_repo, payload, config, bot_login)
    except ValidationError as e:
        raise click.ClickException(str(e))
    except GithubException as e:
        raise click.ClickException(f"GitHub API error: {e}")

    if report is None:
        console.print("[yellow]Event does not apply. Skipping.[/yellow]")
        return

    _print_report(report)

    if report.failures:
        succeeded = ", ".join(r.workflow for r in report.succeeded) or "none"
        failed = "\n".join(f"  - {r.workflow} ({r.kind}): {r.detail}" for r in report.failures)
        raise click.ClickException(
            f"{len(report.failures)} workflow(s) failed (succeeded: {succeeded}):\n{failed}"
        )
