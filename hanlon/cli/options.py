"""
Declarative Command Options.

Each mutating command describes the flags it accepts as an OptionSchema, an
immutable tuple of OptionSpec records. parse_and_validate() turns the raw
tokens that follow the command into a ResolvedOptions mapping, and
check_option_usage() applies the cross-option rules.

A spec's long form carries the metavar of its value, e.g.
"--template TEMPLATE_NAME". A long form without a metavar ("--default")
is a switch that resolves to True when present.

Usage:
    schema = OptionSchema(
        OptionSpec(name="label", short_form="-l", long_form="--label LABEL",
                   description="A label.", required=True),
    )
    uuid, options = parse_and_validate(
        schema, ["-l", "web"], ValidationMode.REQUIRE_ALL, banner="hanlon thing add",
    )
    options["label"]  # "web"
"""

from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

from hanlon.core.exceptions import OptionValidationError
from hanlon.core.logging import get_logger

logger = get_logger(__name__)


class UuidRequirement(str, Enum):
    """Whether an option may be combined with a positional UUID."""

    NOT_ALLOWED = "not_allowed"
    REQUIRED = "required"
    OPTIONAL = "optional"


class ValidationMode(str, Enum):
    """How required options are enforced."""

    REQUIRE_ALL = "require_all"
    REQUIRE_ONE = "require_one"


# =============================================================================
# Value converters
# =============================================================================


def parse_bool(value: str) -> bool:
    """Convert 'true'/'false' (and yes/no, 1/0) to a bool."""
    lowered = value.strip().lower()
    if lowered in ("true", "yes", "1"):
        return True
    if lowered in ("false", "no", "0"):
        return False
    raise ValueError(f"expected true or false, got '{value}'")


def parse_non_negative_int(value: str) -> int:
    """Convert a decimal string to an int >= 0."""
    try:
        number = int(value)
    except ValueError:
        raise ValueError(f"expected a non-negative integer, got '{value}'") from None
    if number < 0:
        raise ValueError(f"expected a non-negative integer, got '{value}'")
    return number


def parse_csv(value: str) -> list[str]:
    """Split a comma-delimited list, dropping empty items."""
    return [item.strip() for item in value.split(",") if item.strip()]


# =============================================================================
# Schema
# =============================================================================


@dataclass(frozen=True)
class OptionSpec:
    """One accepted flag of a command."""

    name: str
    short_form: str
    long_form: str
    description: str
    default: Any = None
    uuid_requirement: UuidRequirement = UuidRequirement.NOT_ALLOWED
    required: bool = False
    converter: Callable[[str], Any] | None = None

    @property
    def flag(self) -> str:
        """The long flag without its metavar."""
        return self.long_form.split()[0]

    @property
    def metavar(self) -> str | None:
        parts = self.long_form.split(maxsplit=1)
        return parts[1] if len(parts) > 1 else None

    @property
    def takes_value(self) -> bool:
        return self.metavar is not None


class OptionSchema:
    """
    Ordered, immutable collection of OptionSpec for one command.

    Raises:
        ValueError: If two specs share a name or a flag
    """

    def __init__(self, *specs: OptionSpec) -> None:
        names: set[str] = set()
        flags: dict[str, OptionSpec] = {}
        for spec in specs:
            if spec.name in names:
                raise ValueError(f"Duplicate option name '{spec.name}' in schema")
            names.add(spec.name)
            for flag in (spec.short_form, spec.flag):
                if flag in flags:
                    raise ValueError(f"Duplicate option flag '{flag}' in schema")
                flags[flag] = spec
        self._specs = tuple(specs)
        self._by_flag = flags

    def __iter__(self) -> Iterator[OptionSpec]:
        return iter(self._specs)

    def __len__(self) -> int:
        return len(self._specs)

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(spec.name for spec in self._specs)

    def find(self, flag: str) -> OptionSpec | None:
        """Look up a spec by its short or long flag."""
        return self._by_flag.get(flag)


class ResolvedOptions(Mapping[str, Any]):
    """
    Option values after parsing, plus the positional UUID.

    The mapping holds supplied values and applied defaults. `supplied`
    names only what the operator typed.
    """

    def __init__(
        self,
        values: Mapping[str, Any],
        supplied: frozenset[str] = frozenset(),
        uuid: str | None = None,
    ) -> None:
        self._values = dict(values)
        self._supplied = frozenset(supplied)
        self._uuid = uuid

    def __getitem__(self, name: str) -> Any:
        return self._values[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"ResolvedOptions({self._values!r}, supplied={sorted(self._supplied)!r}, uuid={self._uuid!r})"

    @property
    def uuid(self) -> str | None:
        return self._uuid

    @property
    def supplied(self) -> frozenset[str]:
        return self._supplied

    def is_supplied(self, name: str) -> bool:
        return name in self._supplied


# =============================================================================
# Parsing and validation
# =============================================================================


def _convert(spec: OptionSpec, raw: str, banner: str | None) -> Any:
    if spec.converter is None:
        return raw
    try:
        return spec.converter(raw)
    except ValueError as e:
        raise OptionValidationError(f"Invalid value for '{spec.flag}': {e}", banner) from e


def _is_flag(schema: OptionSchema, token: str) -> bool:
    return token.startswith("-") and schema.find(token.split("=", 1)[0]) is not None


def _scan(
    schema: OptionSchema,
    tokens: Sequence[str],
    banner: str | None,
) -> tuple[str | None, dict[str, Any]]:
    """Split tokens into the positional UUID and supplied option values."""
    positionals: list[str] = []
    values: dict[str, Any] = {}
    seen_flag = False

    i = 0
    while i < len(tokens):
        token = tokens[i]
        i += 1

        if not token.startswith("-") or token == "-":
            if seen_flag:
                raise OptionValidationError(f"Unexpected argument '{token}'", banner)
            positionals.append(token)
            continue

        seen_flag = True
        inline = None
        flag = token
        if token.startswith("--") and "=" in token:
            flag, inline = token.split("=", 1)

        spec = schema.find(flag)
        if spec is None:
            raise OptionValidationError(f"Invalid option '{flag}'", banner)
        if spec.name in values:
            raise OptionValidationError(f"Option '{spec.flag}' given more than once", banner)

        if not spec.takes_value:
            if inline is not None:
                raise OptionValidationError(f"Option '{spec.flag}' does not take a value", banner)
            values[spec.name] = True
            continue

        if inline is None:
            if i >= len(tokens) or _is_flag(schema, tokens[i]):
                raise OptionValidationError(
                    f"Missing argument for '{spec.flag}' ({spec.metavar})", banner,
                )
            inline = tokens[i]
            i += 1
        values[spec.name] = _convert(spec, inline, banner)

    if len(positionals) > 1:
        raise OptionValidationError(
            f"Unexpected arguments {positionals[1:]}", banner,
        )
    return (positionals[0] if positionals else None), values


def _check_uuid_usage(
    selected: Sequence[OptionSpec],
    includes_uuid: bool,
    banner: str | None,
) -> None:
    for spec in selected:
        if spec.uuid_requirement is UuidRequirement.REQUIRED and not includes_uuid:
            raise OptionValidationError(
                f"Must include a UUID when using the '{spec.flag}' flag", banner,
            )
        if spec.uuid_requirement is UuidRequirement.NOT_ALLOWED and includes_uuid:
            raise OptionValidationError(
                f"Must not include a UUID when using the '{spec.flag}' flag", banner,
            )


def parse_and_validate(
    schema: OptionSchema,
    tokens: Sequence[str],
    mode: ValidationMode,
    banner: str | None = None,
) -> tuple[str | None, ResolvedOptions]:
    """
    Parse command tokens against a schema and validate the result.

    Args:
        schema: Accepted options for the command
        tokens: Raw tokens following the command verb
        mode: REQUIRE_ALL (every required option) or REQUIRE_ONE (at least
            one of the required options)
        banner: Usage line appended to every error message

    Returns:
        Tuple of (positional UUID or None, ResolvedOptions)

    Raises:
        OptionValidationError: On unknown, duplicate, malformed or missing options
    """
    uuid, supplied_values = _scan(schema, tokens, banner)

    values = dict(supplied_values)
    for spec in schema:
        if spec.name not in values and not spec.required and spec.default is not None:
            values[spec.name] = spec.default

    options = ResolvedOptions(values, frozenset(supplied_values), uuid)

    if mode is ValidationMode.REQUIRE_ALL:
        missing = [spec.flag for spec in schema if spec.required and spec.name not in options]
        if missing:
            raise OptionValidationError(
                f"Missing required option(s): {', '.join(missing)}", banner,
            )
    else:
        required = [spec for spec in schema if spec.required]
        if required and not any(options.is_supplied(spec.name) for spec in required):
            raise OptionValidationError(
                f"Must provide one option from [{', '.join(spec.flag for spec in required)}]",
                banner,
            )

    selected = [spec for spec in schema if options.is_supplied(spec.name)]
    _check_uuid_usage(selected, uuid is not None, banner)

    logger.debug(
        "Options resolved",
        uuid=uuid,
        supplied=sorted(options.supplied),
        mode=mode.value,
    )
    return uuid, options


def check_option_usage(
    schema: OptionSchema,
    options: ResolvedOptions,
    includes_uuid: bool,
    exclusive: bool,
    banner: str | None = None,
) -> None:
    """
    Apply the cross-option rules to already parsed options.

    Args:
        schema: Accepted options for the command
        options: Result of parse_and_validate
        includes_uuid: Whether a positional UUID was given
        exclusive: When True, at most one option may be used
        banner: Usage line appended to every error message

    Raises:
        OptionValidationError: On conflicting options
    """
    selected = [spec for spec in schema if options.is_supplied(spec.name)]

    if exclusive and len(selected) > 1:
        raise OptionValidationError(
            f"Only one of the [{', '.join(spec.flag for spec in selected)}] flags may be used",
            banner,
        )

    _check_uuid_usage(selected, includes_uuid, banner)

    if options.get("is_default") is True and options.is_supplied("enabled") and options["enabled"] is False:
        raise OptionValidationError(
            "A default policy cannot be explicitly disabled (--default with --enabled false)",
            banner,
        )


def format_option_help(schema: OptionSchema, banner: str) -> str:
    """Render the usage banner and one line per option."""
    lines = [banner, ""]
    width = max((len(f"{spec.short_form}, {spec.long_form}") for spec in schema), default=0)
    for spec in schema:
        forms = f"{spec.short_form}, {spec.long_form}"
        suffix = " (required)" if spec.required else ""
        lines.append(f"    {forms.ljust(width)}    {spec.description}{suffix}")
    return "\n".join(lines)
