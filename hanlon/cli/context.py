"""
Invocation Context.

The root callback builds one CliContext per invocation and hands it to every
command through typer.Context.obj. Tests pass their own via
CliRunner.invoke(..., obj=CliContext(...)).
"""

from dataclasses import dataclass, field

import typer

from hanlon.cli.client import APIClient
from hanlon.cli.presenter import Presenter, RichPresenter
from hanlon.core.exceptions import ConfigurationError


@dataclass
class CliContext:
    """Collaborators shared by the commands of one invocation."""

    client: APIClient
    presenter: Presenter = field(default_factory=RichPresenter)

    @classmethod
    def from_config(cls) -> "CliContext":
        """Build the context from config/settings/application.yaml."""
        return cls(client=APIClient())


def get_cli_context(ctx: typer.Context) -> CliContext:
    """Fetch the CliContext installed by the root callback."""
    cli_context = ctx.find_object(CliContext)
    if cli_context is None:
        raise ConfigurationError("CLI context was not initialized")
    return cli_context
