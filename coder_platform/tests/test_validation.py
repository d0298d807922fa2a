"""Unit tests for input validation."""

from __future__ import annotations

import pytest

from coder_platform._platform_errors import InvalidInput
from coder_platform._platform_models import (
    Environment,
    NameOverrides,
    Overrides,
    RawPlatformInputs,
    Region,
)
from coder_platform._validation import (
    parse_bool_input,
    parse_int_input,
    validate_bucket_name,
    validate_domain,
    validate_environment,
    validate_inputs,
    validate_project_name,
    validate_region,
    validate_subdomain,
    validate_zone,
)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("dev", Environment.DEV),
        ("staging", Environment.STAGING),
        ("prod", Environment.PROD),
    ],
)
def test_validate_environment_accepts_known_names(
    value: str, expected: Environment
) -> None:
    assert validate_environment(value) is expected, f"{value} should be accepted"


@pytest.mark.parametrize("value", ["qa", "Dev", "", " dev", None])
def test_validate_environment_rejects_unknown_names(value: str | None) -> None:
    with pytest.raises(InvalidInput, match="unknown environment") as excinfo:
        validate_environment(value)
    assert excinfo.value.field == "environment", "Error should name the field"
    assert excinfo.value.value == value, "Error should carry the rejected value"


def test_validate_region() -> None:
    assert validate_region("nl-ams") is Region.NL_AMS, "nl-ams should be accepted"
    with pytest.raises(InvalidInput, match="unknown region"):
        validate_region("us-east-1")


@pytest.mark.parametrize(
    ("value", "region", "expected"),
    [
        ("fr-par-1", Region.FR_PAR, "fr-par-1"),
        ("pl-waw-3", Region.PL_WAW, "pl-waw-3"),
        ("", Region.FR_PAR, None),
        (None, Region.NL_AMS, None),
    ],
)
def test_validate_zone_accepts_region_zones(
    value: str | None, region: Region, expected: str | None
) -> None:
    assert validate_zone(value, region) == expected, f"Unexpected zone for {value!r}"


@pytest.mark.parametrize("value", ["nl-ams-1", "fr-par-4", "fr-par"])
def test_validate_zone_rejects_foreign_zones(value: str) -> None:
    with pytest.raises(InvalidInput, match="unknown zone"):
        validate_zone(value, Region.FR_PAR)


@pytest.mark.parametrize(
    "value", ["", "example.com", "coder.example.co.uk", "xn--bcher-kva.example"]
)
def test_validate_domain_accepts_hostnames(value: str) -> None:
    assert validate_domain(value) == value, f"{value!r} should be accepted unchanged"


@pytest.mark.parametrize(
    "value",
    [
        "-bad-.com",
        "example..com",
        "example.com.",
        "exa mple.com",
        "under_score.com",
        f"{'a' * 63}." * 4 + "com",
    ],
)
def test_validate_domain_rejects_malformed(value: str) -> None:
    with pytest.raises(InvalidInput, match="malformed domain") as excinfo:
        validate_domain(value)
    assert excinfo.value.field == "domain_name", "Error should name domain_name"


def test_validate_subdomain() -> None:
    assert validate_subdomain("") == "", "Empty subdomain selects the default"
    assert validate_subdomain("workspaces") == "workspaces", "Single label is valid"
    with pytest.raises(InvalidInput, match="malformed subdomain"):
        validate_subdomain("a.b")


@pytest.mark.parametrize("value", ["coder", "my-project", "p1"])
def test_validate_project_name_accepts_labels(value: str) -> None:
    assert validate_project_name(value) == value, f"{value} should be accepted"


@pytest.mark.parametrize("value", ["", "Coder", "-coder", "coder_app", "coder-"])
def test_validate_project_name_is_not_coerced(value: str) -> None:
    with pytest.raises(InvalidInput, match="malformed project name"):
        validate_project_name(value)


def test_validate_bucket_name() -> None:
    assert validate_bucket_name("my-state.bucket") == "my-state.bucket"
    for value in ("ab", "a..b", "UPPER-case", "-leading"):
        with pytest.raises(InvalidInput, match="malformed bucket name"):
            validate_bucket_name(value)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("true", True),
        ("YES", True),
        ("1", True),
        ("on", True),
        ("false", False),
        (" Off ", False),
        ("0", False),
        (None, None),
    ],
)
def test_parse_bool_input(value: str | None, expected: bool | None) -> None:
    assert parse_bool_input("flag", value) is expected, f"Unexpected result for {value!r}"


def test_parse_bool_input_rejects_other_strings() -> None:
    with pytest.raises(InvalidInput, match="malformed boolean"):
        parse_bool_input("enable_monitoring", "maybe")


def test_parse_int_input() -> None:
    assert parse_int_input("node_count", " 4 ") == 4, "Whitespace around digits is fine"
    assert parse_int_input("node_count", None) is None, "None means not provided"
    with pytest.raises(InvalidInput, match="malformed integer") as excinfo:
        parse_int_input("node_count", "three")
    assert excinfo.value.field == "node_count", "Error should name the field"


def test_validate_inputs_applies_defaults() -> None:
    inputs = validate_inputs(RawPlatformInputs(environment="dev"))

    assert inputs.environment is Environment.DEV, "Environment should parse"
    assert inputs.region is Region.FR_PAR, "Region should default to fr-par"
    assert inputs.zone is None, "Zone should stay unset"
    assert inputs.project_name == "coder", "Project should default to coder"
    assert inputs.domain_name == "", "Domain should default to IP-based access"
    assert inputs.subdomain == "", "Subdomain should default to empty"
    assert inputs.overrides == Overrides(), "No sizing field should be overridden"
    assert inputs.name_overrides == NameOverrides(), "No names should be overridden"
    assert inputs.load_balancer_enabled is True, "Load balancer defaults to on"


def test_validate_inputs_converts_overrides() -> None:
    inputs = validate_inputs(
        RawPlatformInputs(
            environment="staging",
            region="pl-waw",
            zone="pl-waw-2",
            project_name="devbox",
            cluster_name="devbox-blue",
            bucket_name="devbox-state",
            domain_name="example.com",
            subdomain="ide",
            node_count="4",
            node_type="GP1-M",
            database_is_ha="true",
            enable_monitoring="false",
            enable_load_balancer="no",
        )
    )

    assert inputs.zone == "pl-waw-2", "Zone should be kept"
    assert inputs.overrides == Overrides(
        node_count=4,
        node_type="GP1-M",
        database_is_ha=True,
        enable_monitoring=False,
    ), "Only supplied fields should become overrides"
    assert inputs.name_overrides == NameOverrides(
        cluster_name="devbox-blue", bucket_name="devbox-state"
    ), "Explicit names should be kept"
    assert inputs.load_balancer_enabled is False, "no should disable the load balancer"


def test_validate_inputs_treats_empty_names_as_unset() -> None:
    inputs = validate_inputs(
        RawPlatformInputs(environment="dev", cluster_name="", bucket_name="")
    )
    assert inputs.name_overrides == NameOverrides(), "Empty names should not override"


@pytest.mark.parametrize(
    ("raw", "field", "reason"),
    [
        (RawPlatformInputs(environment="qa"), "environment", "unknown environment"),
        (
            RawPlatformInputs(environment="dev", region="eu-west-1"),
            "region",
            "unknown region",
        ),
        (
            RawPlatformInputs(environment="dev", zone="nl-ams-1"),
            "zone",
            "unknown zone",
        ),
        (
            RawPlatformInputs(environment="dev", domain_name="-bad-.com"),
            "domain_name",
            "malformed domain",
        ),
        (
            RawPlatformInputs(environment="dev", cluster_name="Bad_Name"),
            "cluster_name",
            "malformed cluster name",
        ),
        (
            RawPlatformInputs(environment="dev", node_type="  "),
            "node_type",
            "tier must not be blank",
        ),
        (
            RawPlatformInputs(environment="dev", min_size="one"),
            "min_size",
            "malformed integer",
        ),
    ],
)
def test_validate_inputs_reports_first_bad_field(
    raw: RawPlatformInputs, field: str, reason: str
) -> None:
    with pytest.raises(InvalidInput, match=reason) as excinfo:
        validate_inputs(raw)
    assert excinfo.value.field == field, f"Expected {field} to be reported"
