"""validate command — check the configured workflows exist."""

from __future__ import annotations

import click
from rich.console import Console

from boxgate_core.config import configured_workflows
from boxgate_core.errors import ValidationError
from boxgate_core.gh.pull_request import get_repo
from boxgate_core.handler import validate_workflows

console = Console()


@click.command("validate")
@click.option("--repo", required=True, envvar="GITHUB_REPOSITORY", help="GitHub repository in owner/name format.")
@click.pass_context
def validate_cmd(ctx, repo: str):
    """Check every workflow named in the configuration has a readable workflow file."""
    from boxgate_cli.auth import require_token

    config = ctx.obj["config"]
    token = require_token(config)
    workflows = configured_workflows(config)
    if not workflows:
        console.print("[yellow]No workflows configured.[/yellow]")
        return

    try:
        validate_workflows(get_repo(repo, token=token), workflows)
    except ValidationError as e:
        raise click.ClickException(str(e))

    console.print(f"[green]All {len(workflows)} workflow(s) are valid.[/green]")
