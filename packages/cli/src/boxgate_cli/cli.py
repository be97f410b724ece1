"""CLI entry point for boxgate.

Commands:
  setup-comment  — post or refresh the workflow triggers comment on a PR
  handle-event   — act on an edit of that comment (dispatch / approve)
  validate       — check every configured workflow file exists
"""

from __future__ import annotations

import importlib.metadata
import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from boxgate_cli.commands.handle import handle_event_cmd
from boxgate_cli.commands.setup_comment import setup_comment_cmd
from boxgate_cli.commands.validate import validate_cmd

console = Console()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )
    # PyGithub logs every request at DEBUG.
    logging.getLogger("github").setLevel(logging.WARNING)


@click.group()
@click.version_option(
    version=importlib.metadata.version("boxgate"),
    prog_name="boxgate",
)
@click.option(
    "--config",
    "config_path",
    default=".boxgate.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="BOXGATE_CONFIG",
)
@click.option("--verbose", "-v", is_flag=True, help="Log debug output.")
@click.pass_context
def main(ctx: click.Context, config_path: str, verbose: bool):
    """Dispatch and approve GitHub Actions workflows from PR comment checkboxes."""
    from boxgate_core.config import load_config
    from boxgate_core.errors import ConfigError

    _configure_logging(verbose)
    ctx.ensure_object(dict)

    try:
        config = load_config(config_path)
    except ConfigError as e:
        raise click.UsageError(str(e))

    ctx.obj["config"] = config


main.add_command(setup_comment_cmd)
main.add_command(handle_event_cmd)
main.add_command(validate_cmd)
