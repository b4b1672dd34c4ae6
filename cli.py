#!/usr/bin/env python3
"""
Hanlon CLI.

Command-line client for the Hanlon bare-metal provisioning engine.
Built with Typer for the command surface and Rich for formatted output.

Usage:
    hanlon --help

    # Policies
    hanlon policy                                   # List policies in rule order
    hanlon policy templates                         # List policy templates
    hanlon policy 5Kq8VbYF1Ge4GWJhGyGe9y            # Show one policy
    hanlon policy add -p linux_deploy -l web -m MODEL_UUID -t memsize_1GiB
    hanlon policy update 5Kq8VbYF1Ge4GWJhGyGe9y -n 0 -e true
    hanlon policy remove 5Kq8VbYF1Ge4GWJhGyGe9y
    hanlon policy add --help                        # Options for one command

Options:
    --verbose, -v     Enable verbose output
    --debug, -d       Enable debug mode (detailed logging)
    --help            Show help message
"""

import sys
from pathlib import Path

import typer
from rich.console import Console

# Add project root to path for absolute imports
project_root = Path(__file__).resolve().parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from hanlon.cli.commands import boot, policy
from hanlon.cli.context import CliContext
from hanlon.core.config import validate_project_root
from hanlon.core.exceptions import ConfigurationError

# Slice commands receive their raw tokens; help is handled by the slice itself.
SLICE_CONTEXT_SETTINGS = {"allow_extra_args": True, "ignore_unknown_options": True}

app = typer.Typer(
    name="hanlon",
    help="Hanlon CLI - manage provisioning policies on the Hanlon engine.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

console = Console()

app.command(
    name="policy",
    context_settings=SLICE_CONTEXT_SETTINGS,
    add_help_option=False,
)(policy)
app.command(
    name="boot",
    context_settings=SLICE_CONTEXT_SETTINGS,
    add_help_option=False,
    hidden=True,
)(boot)


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose output (INFO level logging)",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        "-d",
        help="Enable debug mode (DEBUG level logging)",
    ),
) -> None:
    """
    Hanlon CLI.

    Views and edits the engine's ordered policy rules table.
    """
    validate_project_root()

    from hanlon.core.logging import setup_logging

    # None keeps the level from logging.yaml
    if debug:
        log_level = "DEBUG"
    elif verbose:
        log_level = "INFO"
    else:
        log_level = None

    setup_logging(level=log_level, format_type="console")

    if debug:
        console.print("[dim]Debug mode enabled[/dim]")

    if ctx.obj is None:
        try:
            ctx.obj = CliContext.from_config()
        except ConfigurationError as e:
            console.print(f"[red]Error: {e.message}[/red]")
            raise typer.Exit(1)


if __name__ == "__main__":
    app()
