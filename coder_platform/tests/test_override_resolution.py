"""Unit tests for merging environment defaults with overrides."""

from __future__ import annotations

import dataclasses
import logging
import random

import pytest

from coder_platform._environment_registry import DEFAULTS_REGISTRY
from coder_platform._override_resolution import explain, resolve
from coder_platform._platform_errors import InvalidInput
from coder_platform._platform_models import (
    SIZING_FIELDS,
    EffectiveConfiguration,
    Environment,
    EnvironmentDefaults,
    Overrides,
)


def _changed_value(field: str, defaults: EnvironmentDefaults) -> object:
    """Return a value for ``field`` that differs from the default but stays valid."""
    current = getattr(defaults, field)
    match field:
        case "node_count":
            return defaults.max_size
        case "min_size":
            return defaults.node_count
        case "max_size" | "database_backup_retention_days":
            return current + 1
        case "node_type":
            return "GP1-L"
        case "database_node_type":
            return "DB-GP-L"
        case _:
            return not current


@pytest.mark.parametrize("environment", list(Environment))
def test_resolve_without_overrides_returns_defaults(environment: Environment) -> None:
    config = resolve(environment, Overrides())

    assert config.sizing() == dataclasses.asdict(DEFAULTS_REGISTRY[environment]), (
        f"{environment} should resolve to its registry defaults"
    )
    assert config.environment is environment, "Environment should be recorded"
    assert config.overridden_fields == frozenset(), "Nothing should be overridden"


def test_dev_defaults() -> None:
    config = resolve(Environment.DEV, Overrides())

    assert config.node_count == 2, "dev runs two nodes"
    assert config.node_type == "GP1-XS", "dev uses GP1-XS"
    assert (config.min_size, config.max_size) == (1, 3), "dev scales between 1 and 3"
    assert config.database_node_type == "DB-DEV-S", "dev uses the dev database"
    assert config.database_is_ha is False, "dev database is not HA"
    assert config.database_backup_retention_days == 7, "dev keeps 7 days of backups"


@pytest.mark.parametrize("environment", list(Environment))
@pytest.mark.parametrize("field", SIZING_FIELDS)
def test_single_field_override_is_isolated(environment: Environment, field: str) -> None:
    defaults = DEFAULTS_REGISTRY[environment]
    value = _changed_value(field, defaults)

    config = resolve(environment, Overrides(**{field: value}))

    assert getattr(config, field) == value, f"{field} should take the override"
    for other in SIZING_FIELDS:
        if other != field:
            assert getattr(config, other) == getattr(defaults, other), (
                f"{other} should keep its default when only {field} is overridden"
            )
    assert config.overridden_fields == frozenset({field}), "Only one field is overridden"
    assert explain(config)[field] == "override", f"{field} should be reported as override"


def test_override_equal_to_default_still_counts() -> None:
    config = resolve(Environment.DEV, Overrides(node_count=2))

    assert config.node_count == 2, "Value is unchanged"
    assert "node_count" in config.overridden_fields, "Explicit value is an override"
    assert explain(config)["node_type"] == "default", "Other fields stay default"


def test_false_override_is_not_unset() -> None:
    config = resolve(Environment.PROD, Overrides(database_is_ha=False))

    assert config.database_is_ha is False, "False must override a True default"


@pytest.mark.parametrize(
    ("overrides", "field"),
    [
        (Overrides(node_count=5), "node_count"),
        (Overrides(node_count=0, min_size=0), "node_count"),
        (Overrides(min_size=4), "min_size"),
        (Overrides(min_size=-1), "min_size"),
        (Overrides(max_size=0), "min_size"),
        (Overrides(database_backup_retention_days=0), "database_backup_retention_days"),
        (Overrides(database_backup_retention_days=366), "database_backup_retention_days"),
    ],
)
def test_inconsistent_overrides_are_rejected(overrides: Overrides, field: str) -> None:
    with pytest.raises(InvalidInput) as excinfo:
        resolve(Environment.DEV, overrides)
    assert excinfo.value.field == field, f"Expected {field} to be reported"


def test_retention_upper_bound_is_inclusive() -> None:
    config = resolve(Environment.DEV, Overrides(database_backup_retention_days=365))
    assert config.database_backup_retention_days == 365, "365 days is allowed"


def test_resolve_rejects_environment_missing_from_registry() -> None:
    registry = {Environment.DEV: DEFAULTS_REGISTRY[Environment.DEV]}
    with pytest.raises(InvalidInput, match="unknown environment"):
        resolve(Environment.PROD, Overrides(), registry)


def test_resolve_is_deterministic() -> None:
    overrides = Overrides(node_count=4, node_type="GP1-S", enable_monitoring=False)
    first = resolve(Environment.STAGING, overrides)
    second = resolve(Environment.STAGING, overrides)

    assert first == second, "Same inputs should resolve to equal configurations"


def test_effective_configuration_is_frozen() -> None:
    config = resolve(Environment.DEV, Overrides())
    with pytest.raises(dataclasses.FrozenInstanceError):
        config.node_count = 9  # type: ignore[misc]


def test_resolve_logs_overridden_fields(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.DEBUG, logger="coder_platform._override_resolution")
    resolve(Environment.DEV, Overrides(node_type="GP1-S"))

    assert "node_type" in caplog.text, "Overridden fields should be logged"


def test_sizing_invariant_holds_for_random_overrides() -> None:
    rng = random.Random(20240117)

    def pick(upper: int) -> int | None:
        return None if rng.random() < 0.3 else rng.randint(-1, upper)

    for _ in range(500):
        environment = rng.choice(list(Environment))
        overrides = Overrides(node_count=pick(12), min_size=pick(12), max_size=pick(12))
        defaults = DEFAULTS_REGISTRY[environment]
        merged = dataclasses.asdict(defaults) | overrides.explicit()
        node_count = merged["node_count"]
        low = merged["min_size"]
        high = merged["max_size"]
        consistent = node_count >= 1 and 0 <= low <= node_count <= high

        if consistent:
            config = resolve(environment, overrides)
            assert config.min_size <= config.node_count <= config.max_size, (
                f"Invariant broken for {environment} with {overrides}"
            )
        else:
            with pytest.raises(InvalidInput):
                resolve(environment, overrides)


def test_effective_configuration_enforces_invariant_directly() -> None:
    values = dataclasses.asdict(DEFAULTS_REGISTRY[Environment.DEV]) | {"node_count": 7}
    with pytest.raises(InvalidInput, match="node_count must lie between"):
        EffectiveConfiguration(environment=Environment.DEV, **values)
