"""
Command Routing.

Maps a slice verb and its trailing tokens to a handler. The table is built
from the canonical slice command list and then specialised per slice, so a
new verb is added by data rather than by another branch.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Sequence

HELP_TOKENS = frozenset({"-h", "--help"})
ALL_TOKENS = frozenset({"all", "{}"})


class Handler(str, Enum):
    """Handler identifiers a route can resolve to."""

    HELP = "help"
    GET_ALL = "get_all"
    GET_BY_UUID = "get_by_uuid"
    GET_TEMPLATES = "get_templates"
    ADD = "add"
    UPDATE = "update"
    REMOVE_ALL = "remove_all"
    REMOVE_BY_UUID = "remove_by_uuid"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Rule:
    """A token pattern and the handler it selects."""

    pattern: re.Pattern[str]
    handler: Handler

    def matches(self, token: str) -> bool:
        return self.pattern.fullmatch(token) is not None


@dataclass(frozen=True)
class VerbRoutes:
    """
    Routes for one verb.

    `default` handles an empty token list; `rules` are tried in order against
    the first token; `fallback` handles anything else.
    """

    default: Handler
    rules: tuple[Rule, ...]
    fallback: Handler

    def resolve(self, tokens: Sequence[str]) -> Handler:
        if not tokens:
            return self.default
        first = tokens[0]
        for rule in self.rules:
            if rule.matches(first):
                return rule.handler
        return self.fallback


def _exact(tokens: frozenset[str]) -> re.Pattern[str]:
    return re.compile("|".join(re.escape(token) for token in sorted(tokens)))


_HELP_RULE = Rule(_exact(HELP_TOKENS), Handler.HELP)


def build_command_map() -> dict[str, VerbRoutes]:
    """Build the routes shared by every slice (help, get, add, update, remove)."""
    return {
        "get": VerbRoutes(
            default=Handler.GET_ALL,
            rules=(
                _HELP_RULE,
                Rule(_exact(ALL_TOKENS), Handler.GET_ALL),
                Rule(re.compile(r"\S+"), Handler.GET_BY_UUID),
            ),
            fallback=Handler.UNKNOWN,
        ),
        "add": VerbRoutes(default=Handler.ADD, rules=(_HELP_RULE,), fallback=Handler.ADD),
        "update": VerbRoutes(default=Handler.UPDATE, rules=(_HELP_RULE,), fallback=Handler.UPDATE),
        "remove": VerbRoutes(
            default=Handler.HELP,
            rules=(
                _HELP_RULE,
                Rule(re.compile("all"), Handler.REMOVE_ALL),
            ),
            fallback=Handler.REMOVE_BY_UUID,
        ),
        "help": VerbRoutes(default=Handler.HELP, rules=(), fallback=Handler.HELP),
    }


class CommandRouter:
    """
    Resolves (verb, tokens) to a Handler.

    Routing is pure: the same input always yields the same handler and an
    unknown verb yields Handler.UNKNOWN rather than falling through.

    Usage:
        router = CommandRouter(policy_command_map())
        router.route("get", ["types"])  # Handler.GET_TEMPLATES
    """

    def __init__(self, command_map: dict[str, VerbRoutes]) -> None:
        self._command_map = dict(command_map)

    @property
    def verbs(self) -> frozenset[str]:
        return frozenset(self._command_map) | HELP_TOKENS

    def route(self, verb: str, trailing: Sequence[str] = ()) -> Handler:
        if verb in HELP_TOKENS:
            return Handler.HELP
        routes = self._command_map.get(verb)
        if routes is None:
            return Handler.UNKNOWN
        return routes.resolve(trailing)

    def split_command(self, tokens: Sequence[str]) -> tuple[str, list[str]]:
        """
        Separate the verb from its arguments.

        An empty command is `get`; a first token that is not a verb is the
        argument of an implicit `get` (so `policy <uuid>` == `policy get <uuid>`).
        """
        if not tokens:
            return "get", []
        first, rest = tokens[0], list(tokens[1:])
        if first in self.verbs:
            return first, rest
        return "get", [first, *rest]


def policy_command_map() -> dict[str, VerbRoutes]:
    """
    Policy slice routes.

    `get` accepts any single token as a policy UUID, except the template
    aliases, which list the available policy templates.
    """
    command_map = build_command_map()
    base = command_map["get"]
    command_map["get"] = VerbRoutes(
        default=base.default,
        rules=(
            _HELP_RULE,
            Rule(_exact(ALL_TOKENS), Handler.GET_ALL),
            Rule(re.compile(r"temp|template|templates|types"), Handler.GET_TEMPLATES),
        ),
        fallback=Handler.GET_BY_UUID,
    )
    return command_map
