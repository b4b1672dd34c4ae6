"""
Policy Slice.

Policies form an ordered rule table on the engine: each policy sits at a
line number and nodes are matched top to bottom. The ordering is owned by
the engine; this client only sends line_number / new_line_number in its
requests and never reorders anything locally.
"""

from collections.abc import Mapping
from typing import Any, NoReturn

from pydantic import ValidationError

from hanlon.cli.client import APIClient
from hanlon.cli.options import (
    OptionSchema,
    OptionSpec,
    ResolvedOptions,
    UuidRequirement,
    parse_bool,
    parse_csv,
    parse_non_negative_int,
)
from hanlon.cli.presenter import expand_response_with_uris, sort_records
from hanlon.core.exceptions import MethodNotAllowedError, OptionValidationError
from hanlon.core.logging import get_logger, log_with_source
from hanlon.schemas.policy import PolicyCreate, PolicyUpdate

logger = get_logger(__name__)

POLICY_PATH = "/policy"
TEMPLATES_PATH = f"{POLICY_PATH}/templates"

ADD_BANNER = "hanlon policy add (options...)"
UPDATE_BANNER = "hanlon policy update UUID (options...)"

UPDATE_FIELDS = (
    "label",
    "model_uuid",
    "tags",
    "broker_uuid",
    "enabled",
    "maximum",
    "new_line_number",
)

_NOT_ALLOWED = UuidRequirement.NOT_ALLOWED
_REQUIRED = UuidRequirement.REQUIRED

ADD_OPTIONS = OptionSchema(
    OptionSpec(
        name="template", short_form="-p", long_form="--template TEMPLATE_NAME",
        description="The policy template name to use.",
        uuid_requirement=_NOT_ALLOWED, required=True,
    ),
    OptionSpec(
        name="label", short_form="-l", long_form="--label POLICY_LABEL",
        description="A label to name this policy.",
        uuid_requirement=_NOT_ALLOWED, required=True,
    ),
    OptionSpec(
        name="model_uuid", short_form="-m", long_form="--model-uuid MODEL_UUID",
        description="The model to attach to the policy.",
        uuid_requirement=_NOT_ALLOWED, required=True,
    ),
    OptionSpec(
        name="tags", short_form="-t", long_form="--tags TAG{,TAG,TAG}",
        description="Policy tags. Comma delimited.",
        uuid_requirement=_NOT_ALLOWED, converter=parse_csv,
    ),
    OptionSpec(
        name="broker_uuid", short_form="-b", long_form="--broker-uuid BROKER_UUID",
        description="The broker to attach to the policy [default: none].",
        default="none", uuid_requirement=_NOT_ALLOWED,
    ),
    OptionSpec(
        name="line_number", short_form="-n", long_form="--number LINE_NO",
        description="Line number in policy rules table [default: appended].",
        uuid_requirement=_NOT_ALLOWED, converter=parse_non_negative_int,
    ),
    OptionSpec(
        name="enabled", short_form="-e", long_form="--enabled ENABLED_FLAG",
        description="Should policy be enabled (true|false) [default: false]?",
        default=False, uuid_requirement=_NOT_ALLOWED, converter=parse_bool,
    ),
    OptionSpec(
        name="is_default", short_form="-d", long_form="--default",
        description="Set the policy as the system default policy on creation.",
        default=False, uuid_requirement=_NOT_ALLOWED,
    ),
    OptionSpec(
        name="maximum", short_form="-x", long_form="--maximum MAXIMUM_COUNT",
        description="Sets the policy maximum count for nodes [default: 0].",
        default=0, uuid_requirement=_NOT_ALLOWED, converter=parse_non_negative_int,
    ),
)

UPDATE_OPTIONS = OptionSchema(
    OptionSpec(
        name="label", short_form="-l", long_form="--label POLICY_LABEL",
        description="A label to name this policy.",
        uuid_requirement=_REQUIRED, required=True,
    ),
    OptionSpec(
        name="model_uuid", short_form="-m", long_form="--model-uuid MODEL_UUID",
        description="The model attached to the policy.",
        uuid_requirement=_REQUIRED, required=True,
    ),
    OptionSpec(
        name="broker_uuid", short_form="-b", long_form="--broker-uuid BROKER_UUID",
        description="The broker attached to the policy.",
        uuid_requirement=_REQUIRED, required=True,
    ),
    OptionSpec(
        name="tags", short_form="-t", long_form="--tags TAG{,TAG,TAG}",
        description="Policy tags. Comma delimited.",
        uuid_requirement=_REQUIRED, required=True, converter=parse_csv,
    ),
    OptionSpec(
        name="enabled", short_form="-e", long_form="--enabled ENABLED_FLAG",
        description="Should policy be enabled (true|false)?",
        uuid_requirement=_REQUIRED, required=True, converter=parse_bool,
    ),
    OptionSpec(
        name="maximum", short_form="-x", long_form="--maximum MAXIMUM_COUNT",
        description="Sets the policy maximum count for nodes.",
        uuid_requirement=_REQUIRED, required=True, converter=parse_non_negative_int,
    ),
    OptionSpec(
        name="new_line_number", short_form="-n", long_form="--new-line-number NEW_NUM",
        description="New line number in policy rules table.",
        uuid_requirement=_REQUIRED, required=True, converter=parse_non_negative_int,
    ),
)

_COMMAND_OPTIONS: dict[str, tuple[OptionSchema, str]] = {
    "add": (ADD_OPTIONS, ADD_BANNER),
    "update": (UPDATE_OPTIONS, UPDATE_BANNER),
}


def command_option_data(command: str) -> tuple[OptionSchema, str] | None:
    """Option schema and banner for a policy command, or None if it has none."""
    return _COMMAND_OPTIONS.get(command)


def _supplied(options: Mapping[str, Any]) -> frozenset[str]:
    if isinstance(options, ResolvedOptions):
        return options.supplied
    return frozenset(options)


def build_create_request(options: Mapping[str, Any]) -> dict[str, Any]:
    """
    Map add options onto the policy creation payload.

    maximum, broker_uuid and enabled are always present. A default policy
    is always enabled; any other policy is disabled unless --enabled says
    otherwise.
    """
    is_default = bool(options.get("is_default", False))
    enabled = True if is_default else bool(options.get("enabled", False))

    maximum = options.get("maximum")
    broker_uuid = options.get("broker_uuid")

    try:
        payload = PolicyCreate(
            template=options.get("template"),
            label=options.get("label"),
            model_uuid=options.get("model_uuid"),
            tags=options.get("tags"),
            broker_uuid=broker_uuid if broker_uuid is not None else "none",
            line_number=options.get("line_number"),
            enabled=enabled,
            maximum=maximum if maximum is not None else 0,
            is_default=is_default,
        )
    except ValidationError as e:
        raise OptionValidationError(f"Invalid policy: {e}", ADD_BANNER) from e
    return payload.model_dump()


def build_update_request(options: Mapping[str, Any]) -> dict[str, Any]:
    """Map update options onto a sparse payload holding only supplied fields."""
    supplied = _supplied(options)
    fields = {name: options[name] for name in UPDATE_FIELDS if name in supplied and name in options}
    try:
        payload = PolicyUpdate(**fields)
    except ValidationError as e:
        raise OptionValidationError(f"Invalid policy update: {e}", UPDATE_BANNER) from e
    return payload.model_dump(exclude_unset=True)


class PolicyResource:
    """
    Policy operations against the engine's /policy resource.

    Usage:
        resource = PolicyResource(client)
        policies = await resource.list_policies()
        created = await resource.create_policy(options)
    """

    def __init__(self, client: APIClient) -> None:
        self.client = client

    @property
    def base_uri(self) -> str:
        return f"{self.client.base_url}{POLICY_PATH}"

    async def list_policies(self) -> list[dict[str, Any]]:
        """All policies, in rule-table order."""
        result = await self.client.get_json(POLICY_PATH)
        if not result:
            return []
        return sort_records(expand_response_with_uris(result, self.base_uri), "line_number")

    async def list_templates(self) -> list[dict[str, Any]]:
        """Available policy templates, sorted by name."""
        result = await self.client.get_json(TEMPLATES_PATH)
        if not result:
            return []
        records = expand_response_with_uris(result, f"{self.base_uri}/templates", id_field="template")
        return sort_records(records, "template")

    async def get_policy(self, policy_uuid: str) -> dict[str, Any]:
        result = await self.client.get_json(f"{POLICY_PATH}/{policy_uuid}")
        return expand_response_with_uris([result], self.base_uri)[0]

    async def create_policy(self, options: Mapping[str, Any]) -> dict[str, Any]:
        payload = build_create_request(options)
        log_with_source(
            logger, "cli", "info", "Creating policy",
            label=payload["label"], template=payload["template"], line_number=payload["line_number"],
        )
        return await self.client.post_json(POLICY_PATH, payload)

    async def update_policy(self, policy_uuid: str, options: Mapping[str, Any]) -> dict[str, Any]:
        payload = build_update_request(options)
        log_with_source(
            logger, "cli", "info", "Updating policy",
            uuid=policy_uuid, fields=sorted(payload),
        )
        return await self.client.put_json(f"{POLICY_PATH}/{policy_uuid}", payload)

    async def remove_policy(self, policy_uuid: str) -> str:
        log_with_source(logger, "cli", "info", "Removing policy", uuid=policy_uuid)
        return await self.client.delete(f"{POLICY_PATH}/{policy_uuid}")

    def remove_all_policies(self) -> NoReturn:
        """Bulk removal would discard the rule-table ordering; always refused."""
        raise MethodNotAllowedError("This method has been deprecated")
