"""
Unit Tests for the Declarative Option Framework.

Uses the policy add/update schemas, which exercise every feature:
required flags, defaults, switches, converters and UUID rules.
"""

import pytest

from hanlon.cli.options import (
    OptionSchema,
    OptionSpec,
    ResolvedOptions,
    UuidRequirement,
    ValidationMode,
    check_option_usage,
    format_option_help,
    parse_and_validate,
    parse_bool,
    parse_csv,
    parse_non_negative_int,
)
from hanlon.core.exceptions import OptionValidationError
from hanlon.services.policy import ADD_BANNER, ADD_OPTIONS, UPDATE_BANNER, UPDATE_OPTIONS

REQUIRED_ADD_ARGS = ["-p", "linux_deploy", "-l", "web", "-m", "model-1"]


# =============================================================================
# Converters
# =============================================================================


class TestConverters:
    """Tests for the value converters used by option specs."""

    @pytest.mark.parametrize("raw", ["true", "TRUE", "yes", "1"])
    def test_parse_bool_true(self, raw):
        assert parse_bool(raw) is True

    @pytest.mark.parametrize("raw", ["false", "False", "no", "0"])
    def test_parse_bool_false(self, raw):
        assert parse_bool(raw) is False

    def test_parse_bool_rejects_other_text(self):
        with pytest.raises(ValueError, match="expected true or false"):
            parse_bool("maybe")

    def test_parse_non_negative_int(self):
        assert parse_non_negative_int("7") == 7
        assert parse_non_negative_int("0") == 0

    @pytest.mark.parametrize("raw", ["-1", "two", "1.5"])
    def test_parse_non_negative_int_rejects(self, raw):
        with pytest.raises(ValueError, match="non-negative integer"):
            parse_non_negative_int(raw)

    def test_parse_csv_keeps_order_and_drops_blanks(self):
        assert parse_csv("memsize_1GiB, nics_2,,cpus_4") == ["memsize_1GiB", "nics_2", "cpus_4"]


# =============================================================================
# Schema construction
# =============================================================================


class TestOptionSchema:
    """Tests for OptionSchema invariants."""

    def test_rejects_duplicate_names(self):
        with pytest.raises(ValueError, match="Duplicate option name"):
            OptionSchema(
                OptionSpec(name="label", short_form="-l", long_form="--label L", description=""),
                OptionSpec(name="label", short_form="-x", long_form="--other L", description=""),
            )

    def test_rejects_duplicate_flags(self):
        with pytest.raises(ValueError, match="Duplicate option flag '-l'"):
            OptionSchema(
                OptionSpec(name="label", short_form="-l", long_form="--label L", description=""),
                OptionSpec(name="limit", short_form="-l", long_form="--limit N", description=""),
            )

    def test_keeps_declaration_order(self):
        assert ADD_OPTIONS.names[:3] == ("template", "label", "model_uuid")
        assert len(UPDATE_OPTIONS) == 7

    def test_one_uuid_serves_every_uuid_required_spec(self):
        assert all(spec.uuid_requirement is UuidRequirement.REQUIRED for spec in UPDATE_OPTIONS)
        policy_uuid, options = parse_and_validate(
            UPDATE_OPTIONS, ["abc123", "-l", "x", "-m", "m2", "-n", "1"],
            ValidationMode.REQUIRE_ONE, UPDATE_BANNER,
        )
        assert policy_uuid == "abc123"
        assert options.supplied == {"label", "model_uuid", "new_line_number"}

    def test_find_by_short_and_long_flag(self):
        assert ADD_OPTIONS.find("-p").name == "template"
        assert ADD_OPTIONS.find("--model-uuid").name == "model_uuid"
        assert ADD_OPTIONS.find("--nope") is None

    def test_spec_metavar_and_switch(self):
        template = ADD_OPTIONS.find("--template")
        is_default = ADD_OPTIONS.find("--default")
        assert template.metavar == "TEMPLATE_NAME"
        assert template.takes_value is True
        assert is_default.metavar is None
        assert is_default.takes_value is False


# =============================================================================
# parse_and_validate: require_all
# =============================================================================


class TestParseRequireAll:
    """Tests for the add command (every required option must be present)."""

    def test_parses_required_options(self):
        uuid, options = parse_and_validate(
            ADD_OPTIONS, REQUIRED_ADD_ARGS, ValidationMode.REQUIRE_ALL, ADD_BANNER,
        )
        assert uuid is None
        assert options["template"] == "linux_deploy"
        assert options["label"] == "web"
        assert options["model_uuid"] == "model-1"

    def test_applies_defaults_without_marking_them_supplied(self):
        _, options = parse_and_validate(
            ADD_OPTIONS, REQUIRED_ADD_ARGS, ValidationMode.REQUIRE_ALL, ADD_BANNER,
        )
        assert options["broker_uuid"] == "none"
        assert options["maximum"] == 0
        assert options["enabled"] is False
        assert options["is_default"] is False
        assert not options.is_supplied("enabled")
        assert options.supplied == frozenset({"template", "label", "model_uuid"})

    def test_options_without_default_are_absent(self):
        _, options = parse_and_validate(
            ADD_OPTIONS, REQUIRED_ADD_ARGS, ValidationMode.REQUIRE_ALL, ADD_BANNER,
        )
        assert "tags" not in options
        assert "line_number" not in options

    def test_converts_values(self):
        _, options = parse_and_validate(
            ADD_OPTIONS,
            REQUIRED_ADD_ARGS + ["-t", "a,b", "-n", "3", "-e", "true", "-x", "5"],
            ValidationMode.REQUIRE_ALL,
            ADD_BANNER,
        )
        assert options["tags"] == ["a", "b"]
        assert options["line_number"] == 3
        assert options["enabled"] is True
        assert options["maximum"] == 5

    def test_switch_resolves_to_true(self):
        _, options = parse_and_validate(
            ADD_OPTIONS, REQUIRED_ADD_ARGS + ["--default"], ValidationMode.REQUIRE_ALL, ADD_BANNER,
        )
        assert options["is_default"] is True
        assert options.is_supplied("is_default")

    def test_accepts_long_flag_with_equals(self):
        _, options = parse_and_validate(
            ADD_OPTIONS,
            ["--template=linux_deploy", "--label=web", "--model-uuid=model-1"],
            ValidationMode.REQUIRE_ALL,
            ADD_BANNER,
        )
        assert options["template"] == "linux_deploy"

    def test_missing_required_option_fails_with_banner(self):
        with pytest.raises(OptionValidationError) as exc_info:
            parse_and_validate(
                ADD_OPTIONS, ["-p", "linux_deploy"], ValidationMode.REQUIRE_ALL, ADD_BANNER,
            )
        message = str(exc_info.value)
        assert "Missing required option(s): --label, --model-uuid" in message
        assert message.endswith(ADD_BANNER)

    def test_unknown_flag_fails(self):
        with pytest.raises(OptionValidationError, match="Invalid option '--colour'"):
            parse_and_validate(
                ADD_OPTIONS, REQUIRED_ADD_ARGS + ["--colour", "red"], ValidationMode.REQUIRE_ALL, ADD_BANNER,
            )

    def test_duplicate_flag_fails(self):
        with pytest.raises(OptionValidationError, match="given more than once"):
            parse_and_validate(
                ADD_OPTIONS, REQUIRED_ADD_ARGS + ["--label", "again"], ValidationMode.REQUIRE_ALL, ADD_BANNER,
            )

    def test_flag_without_value_fails(self):
        with pytest.raises(OptionValidationError, match="Missing argument for '--label'"):
            parse_and_validate(
                ADD_OPTIONS, ["-p", "linux_deploy", "-m", "model-1", "-l"], ValidationMode.REQUIRE_ALL, ADD_BANNER,
            )

    def test_flag_followed_by_flag_is_missing_value(self):
        with pytest.raises(OptionValidationError, match="Missing argument for '--template'"):
            parse_and_validate(
                ADD_OPTIONS, ["-p", "-l", "web"], ValidationMode.REQUIRE_ALL, ADD_BANNER,
            )

    @pytest.mark.parametrize("label", ["-web", "--web", "-", "-1"])
    def test_dash_prefixed_value_is_accepted(self, label):
        _, options = parse_and_validate(
            ADD_OPTIONS, ["-p", "linux_deploy", "-m", "model-1", "--label", label],
            ValidationMode.REQUIRE_ALL, ADD_BANNER,
        )
        assert options["label"] == label

    def test_inline_flag_after_flag_is_missing_value(self):
        with pytest.raises(OptionValidationError, match="Missing argument for '--label'"):
            parse_and_validate(
                ADD_OPTIONS, ["-p", "linux_deploy", "-l", "--model-uuid=m"], ValidationMode.REQUIRE_ALL, ADD_BANNER,
            )

    def test_switch_with_value_fails(self):
        with pytest.raises(OptionValidationError, match="does not take a value"):
            parse_and_validate(
                ADD_OPTIONS, REQUIRED_ADD_ARGS + ["--default=yes"], ValidationMode.REQUIRE_ALL, ADD_BANNER,
            )

    def test_bad_converted_value_fails(self):
        with pytest.raises(OptionValidationError, match="Invalid value for '--number'"):
            parse_and_validate(
                ADD_OPTIONS, REQUIRED_ADD_ARGS + ["-n", "first"], ValidationMode.REQUIRE_ALL, ADD_BANNER,
            )

    def test_uuid_not_allowed_for_add(self):
        with pytest.raises(OptionValidationError, match="Must not include a UUID"):
            parse_and_validate(
                ADD_OPTIONS, ["abc123"] + REQUIRED_ADD_ARGS, ValidationMode.REQUIRE_ALL, ADD_BANNER,
            )

    def test_bare_token_after_flags_fails(self):
        with pytest.raises(OptionValidationError, match="Unexpected argument 'stray'"):
            parse_and_validate(
                ADD_OPTIONS, REQUIRED_ADD_ARGS + ["-e", "true", "stray"], ValidationMode.REQUIRE_ALL, ADD_BANNER,
            )


# =============================================================================
# parse_and_validate: require_one
# =============================================================================


class TestParseRequireOne:
    """Tests for the update command (UUID plus at least one option)."""

    def test_uuid_and_single_option(self):
        uuid, options = parse_and_validate(
            UPDATE_OPTIONS, ["abc123", "-n", "0"], ValidationMode.REQUIRE_ONE, UPDATE_BANNER,
        )
        assert uuid == "abc123"
        assert options.uuid == "abc123"
        assert dict(options) == {"new_line_number": 0}

    def test_no_option_fails(self):
        with pytest.raises(OptionValidationError, match="Must provide one option from"):
            parse_and_validate(
                UPDATE_OPTIONS, ["abc123"], ValidationMode.REQUIRE_ONE, UPDATE_BANNER,
            )

    def test_missing_uuid_fails(self):
        with pytest.raises(OptionValidationError, match="Must include a UUID when using the '--label' flag"):
            parse_and_validate(
                UPDATE_OPTIONS, ["-l", "renamed"], ValidationMode.REQUIRE_ONE, UPDATE_BANNER,
            )

    def test_two_positionals_fail(self):
        with pytest.raises(OptionValidationError, match="Unexpected arguments"):
            parse_and_validate(
                UPDATE_OPTIONS, ["abc123", "def456", "-l", "x"], ValidationMode.REQUIRE_ONE, UPDATE_BANNER,
            )

    def test_optional_uuid_requirement_accepts_either(self):
        schema = OptionSchema(
            OptionSpec(
                name="verbose", short_form="-V", long_form="--verbose", description="",
                uuid_requirement=UuidRequirement.OPTIONAL, required=True,
            ),
        )
        assert parse_and_validate(schema, ["-V"], ValidationMode.REQUIRE_ONE)[0] is None
        assert parse_and_validate(schema, ["u1", "-V"], ValidationMode.REQUIRE_ONE)[0] == "u1"


# =============================================================================
# check_option_usage
# =============================================================================


class TestCheckOptionUsage:
    """Tests for cross-option rules."""

    def test_exclusive_rejects_several_options(self):
        options = ResolvedOptions({"label": "a", "maximum": 1}, frozenset({"label", "maximum"}), "u1")
        with pytest.raises(OptionValidationError, match="Only one of the"):
            check_option_usage(UPDATE_OPTIONS, options, True, True, UPDATE_BANNER)

    def test_exclusive_accepts_one_option(self):
        options = ResolvedOptions({"label": "a"}, frozenset({"label"}), "u1")
        check_option_usage(UPDATE_OPTIONS, options, True, True, UPDATE_BANNER)

    def test_default_policy_cannot_be_explicitly_disabled(self):
        options = ResolvedOptions(
            {"is_default": True, "enabled": False},
            frozenset({"is_default", "enabled"}),
        )
        with pytest.raises(OptionValidationError, match="cannot be explicitly disabled"):
            check_option_usage(ADD_OPTIONS, options, False, False, ADD_BANNER)

    def test_default_policy_with_defaulted_enabled_is_fine(self):
        options = ResolvedOptions({"is_default": True, "enabled": False}, frozenset({"is_default"}))
        check_option_usage(ADD_OPTIONS, options, False, False, ADD_BANNER)

    def test_uuid_rule_rechecked(self):
        options = ResolvedOptions({"label": "a"}, frozenset({"label"}))
        with pytest.raises(OptionValidationError, match="Must include a UUID"):
            check_option_usage(UPDATE_OPTIONS, options, False, False)


class TestFormatOptionHelp:
    """Tests for the per-command option listing."""

    def test_lists_every_option_under_banner(self):
        text = format_option_help(ADD_OPTIONS, ADD_BANNER)
        lines = text.splitlines()
        assert lines[0] == ADD_BANNER
        assert "-p, --template TEMPLATE_NAME" in text
        assert "-d, --default" in text
        assert "The policy template name to use. (required)" in text
        assert len(lines) == 2 + len(ADD_OPTIONS)
