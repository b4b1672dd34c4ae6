"""
Boot Command.

Boot check-in is issued by booting nodes against the engine API. The
command exists so that `hanlon boot` answers with a clear error instead of
"no such command"; it never contacts the engine.
"""

import asyncio

import typer

from hanlon.cli.context import get_cli_context
from hanlon.core.exceptions import BadRequestError
from hanlon.services.boot import BootCheckin, RestBootEngine


def boot(ctx: typer.Context) -> None:
    """
    Boot check-in for nodes (engine API only).
    """
    cli_context = get_cli_context(ctx)
    checkin = BootCheckin(RestBootEngine(cli_context.client))
    raw_json = ctx.args[0] if ctx.args else ""

    try:
        script = asyncio.run(checkin.checkin(raw_json, web_command=False))
    except BadRequestError as e:
        cli_context.presenter.error(e.message)
        raise typer.Exit(1)

    cli_context.presenter.message(script)
