"""
Policy Commands.

Commands for viewing and editing the ordered policy rules table.
The tokens after `policy` are routed and parsed by the slice option
framework rather than by Typer, so every flag is listed by
`hanlon policy --help` and `hanlon policy add --help`.
"""

import asyncio
from typing import Awaitable, Callable

import httpx
import typer

from hanlon.cli.context import CliContext, get_cli_context
from hanlon.cli.options import (
    ValidationMode,
    check_option_usage,
    format_option_help,
    parse_and_validate,
)
from hanlon.cli.router import CommandRouter, Handler, policy_command_map
from hanlon.core.exceptions import ApplicationError, CommandParsingError
from hanlon.core.logging import get_logger, log_with_source
from hanlon.services.policy import (
    ADD_BANNER,
    ADD_OPTIONS,
    UPDATE_BANNER,
    UPDATE_OPTIONS,
    PolicyResource,
    command_option_data,
)

logger = get_logger(__name__)

POLICY_HELP = "\n".join([
    "Policy Slice:",
    "Used to view, create, update, and remove policies.",
    "Policy commands:",
    "    hanlon policy [get] [all]                      View all policies",
    "    hanlon policy [get] (UUID)                     View a specific policy",
    "    hanlon policy [get] templates|types            View available policy templates",
    "    hanlon policy add (options...)                 Create a new policy",
    "    hanlon policy update (UUID) (options...)       Update an existing policy",
    "    hanlon policy remove (UUID)|all                Remove existing policy(s)",
    "    hanlon policy --help|-h                        Display this screen",
])

PolicyHandler = Callable[[CliContext, PolicyResource, str, list[str]], Awaitable[None]]


def policy(ctx: typer.Context) -> None:
    """
    Manage policies: get, add, update, remove. See `hanlon policy --help`.
    """
    cli_context = get_cli_context(ctx)
    asyncio.run(_policy(cli_context, list(ctx.args)))


async def _policy(cli_context: CliContext, tokens: list[str]) -> None:
    """Async implementation of the policy command."""
    router = CommandRouter(policy_command_map())
    verb, args = router.split_command(tokens)
    handler = router.route(verb, args)

    log_with_source(logger, "cli", "debug", "Policy command routed", verb=verb, handler=handler.value)

    resource = PolicyResource(cli_context.client)
    presenter = cli_context.presenter

    try:
        await _HANDLERS[handler](cli_context, resource, verb, args)

    except ApplicationError as e:
        presenter.error(e.message)
        raise typer.Exit(1)

    except httpx.HTTPStatusError as e:
        presenter.error(f"Engine returned {e.response.status_code}: {e.response.text}")
        raise typer.Exit(1)

    except httpx.HTTPError as e:
        presenter.error(f"Cannot reach engine at {cli_context.client.base_url}: {e}")
        raise typer.Exit(1)

    finally:
        await cli_context.client.close()


async def _help(cli_context: CliContext, resource: PolicyResource, verb: str, args: list[str]) -> None:
    option_data = command_option_data(verb)
    if option_data is not None:
        schema, banner = option_data
        cli_context.presenter.message(format_option_help(schema, banner))
        return
    cli_context.presenter.message(POLICY_HELP)


async def _get_all(cli_context: CliContext, resource: PolicyResource, verb: str, args: list[str]) -> None:
    if len(args) > 1:
        raise CommandParsingError(f"Unexpected arguments found in command get_all_policies -> {args[1:]}")
    policies = await resource.list_policies()
    cli_context.presenter.render(policies, "Policies:", style="table")


async def _get_templates(cli_context: CliContext, resource: PolicyResource, verb: str, args: list[str]) -> None:
    if len(args) > 1:
        raise CommandParsingError(f"Unexpected arguments found in command get_policy_templates -> {args[1:]}")
    templates = await resource.list_templates()
    cli_context.presenter.render(templates, "Policy Templates:", style="table")


async def _get_by_uuid(cli_context: CliContext, resource: PolicyResource, verb: str, args: list[str]) -> None:
    if len(args) > 1:
        raise CommandParsingError(f"Unexpected arguments found in command get_policy_by_uuid -> {args[1:]}")
    policy_record = await resource.get_policy(args[0])
    cli_context.presenter.render([policy_record], "Policy:")


async def _add(cli_context: CliContext, resource: PolicyResource, verb: str, args: list[str]) -> None:
    policy_uuid, options = parse_and_validate(
        ADD_OPTIONS, args, ValidationMode.REQUIRE_ALL, banner=ADD_BANNER,
    )
    check_option_usage(ADD_OPTIONS, options, policy_uuid is not None, False, banner=ADD_BANNER)
    created = await resource.create_policy(options)
    cli_context.presenter.render([created], "Policy Created:")


async def _update(cli_context: CliContext, resource: PolicyResource, verb: str, args: list[str]) -> None:
    policy_uuid, options = parse_and_validate(
        UPDATE_OPTIONS, args, ValidationMode.REQUIRE_ONE, banner=UPDATE_BANNER,
    )
    check_option_usage(UPDATE_OPTIONS, options, policy_uuid is not None, False, banner=UPDATE_BANNER)
    updated = await resource.update_policy(policy_uuid, options)
    cli_context.presenter.render([updated], "Policy Updated:")


async def _remove_all(cli_context: CliContext, resource: PolicyResource, verb: str, args: list[str]) -> None:
    resource.remove_all_policies()


async def _remove_by_uuid(cli_context: CliContext, resource: PolicyResource, verb: str, args: list[str]) -> None:
    if len(args) > 1:
        raise CommandParsingError(f"Unexpected arguments found in command remove_policy_by_uuid -> {args[1:]}")
    result = await resource.remove_policy(args[0])
    cli_context.presenter.message(result)


async def _unknown(cli_context: CliContext, resource: PolicyResource, verb: str, args: list[str]) -> None:
    raise CommandParsingError(f"Unknown policy command '{verb}'")


_HANDLERS: dict[Handler, PolicyHandler] = {
    Handler.HELP: _help,
    Handler.GET_ALL: _get_all,
    Handler.GET_TEMPLATES: _get_templates,
    Handler.GET_BY_UUID: _get_by_uuid,
    Handler.ADD: _add,
    Handler.UPDATE: _update,
    Handler.REMOVE_ALL: _remove_all,
    Handler.REMOVE_BY_UUID: _remove_by_uuid,
    Handler.UNKNOWN: _unknown,
}
