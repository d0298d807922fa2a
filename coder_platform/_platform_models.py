"""Data models for environment resolution and cost estimation.

These records form the contract between the resolver, the name deriver, the
cost estimator, and the provisioning collaborators that consume their output.
All of them are frozen so a resolved plan can be shared freely.

Examples
--------
>>> Environment("dev")
<Environment.DEV: 'dev'>
>>> Overrides(node_count=3).explicit()
{'node_count': 3}
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from decimal import Decimal
from enum import StrEnum

from coder_platform._platform_errors import InvalidInput, UnknownTier

MAX_BACKUP_RETENTION_DAYS = 365


class Environment(StrEnum):
    """Deployment tier selecting a defaults profile."""

    DEV = "dev"
    STAGING = "staging"
    PROD = "prod"


class Region(StrEnum):
    """Scaleway regions the platform can be deployed to."""

    FR_PAR = "fr-par"
    NL_AMS = "nl-ams"
    PL_WAW = "pl-waw"


class Period(StrEnum):
    """Reporting period for cost figures."""

    HOURLY = "hourly"
    DAILY = "daily"
    MONTHLY = "monthly"
    YEARLY = "yearly"


@dataclass(frozen=True, slots=True)
class EnvironmentDefaults:
    """Baseline sizing and feature flags for one environment.

    Attributes
    ----------
    node_count, min_size, max_size : int
        Kubernetes pool size and autoscaling bounds.
    node_type : str
        Compute tier for the pool (e.g. ``GP1-XS``).
    database_node_type : str
        Managed database tier (e.g. ``DB-DEV-S``).
    database_is_ha : bool
        Whether the database runs with a standby node.
    database_backup_retention_days : int
        Days of automated backups to keep.
    enable_monitoring, enable_pod_security, enable_network_policy : bool
        Platform feature flags.
    """

    node_count: int
    node_type: str
    min_size: int
    max_size: int
    database_node_type: str
    database_is_ha: bool
    database_backup_retention_days: int
    enable_monitoring: bool
    enable_pod_security: bool
    enable_network_policy: bool


SIZING_FIELDS: tuple[str, ...] = tuple(f.name for f in fields(EnvironmentDefaults))


@dataclass(frozen=True, slots=True)
class Overrides:
    """Caller overrides for the environment defaults.

    ``None`` marks a field as unset. Any other value, including one equal to
    the default, is an explicit override.
    """

    node_count: int | None = None
    node_type: str | None = None
    min_size: int | None = None
    max_size: int | None = None
    database_node_type: str | None = None
    database_is_ha: bool | None = None
    database_backup_retention_days: int | None = None
    enable_monitoring: bool | None = None
    enable_pod_security: bool | None = None
    enable_network_policy: bool | None = None

    def explicit(self) -> dict[str, object]:
        """Return the explicitly set fields in declaration order."""
        return {
            name: value
            for name in SIZING_FIELDS
            if (value := getattr(self, name)) is not None
        }


@dataclass(frozen=True, slots=True)
class EffectiveConfiguration:
    """Fully resolved sizing and feature record for one environment.

    Construction enforces the sizing invariants, so every instance satisfies
    ``min_size <= node_count <= max_size``.

    Attributes
    ----------
    environment : Environment
        Environment the configuration was resolved for.
    overridden_fields : frozenset[str]
        Names of the fields whose value came from an explicit override.

    Raises
    ------
    InvalidInput
        If the sizing fields are inconsistent.
    """

    environment: Environment
    node_count: int
    node_type: str
    min_size: int
    max_size: int
    database_node_type: str
    database_is_ha: bool
    database_backup_retention_days: int
    enable_monitoring: bool
    enable_pod_security: bool
    enable_network_policy: bool
    overridden_fields: frozenset[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        if self.node_count < 1:
            raise InvalidInput("node_count", self.node_count, "node_count must be at least 1")
        if self.min_size < 0:
            raise InvalidInput("min_size", self.min_size, "min_size must not be negative")
        if self.min_size > self.max_size:
            msg = f"min_size must not exceed max_size ({self.max_size})"
            raise InvalidInput("min_size", self.min_size, msg)
        if not self.min_size <= self.node_count <= self.max_size:
            msg = (
                f"node_count must lie between min_size ({self.min_size}) "
                f"and max_size ({self.max_size})"
            )
            raise InvalidInput("node_count", self.node_count, msg)
        retention = self.database_backup_retention_days
        if not 1 <= retention <= MAX_BACKUP_RETENTION_DAYS:
            msg = f"backup retention must be between 1 and {MAX_BACKUP_RETENTION_DAYS} days"
            raise InvalidInput("database_backup_retention_days", retention, msg)

    def sizing(self) -> dict[str, object]:
        """Return the resolved field values without bookkeeping attributes."""
        return {name: getattr(self, name) for name in SIZING_FIELDS}


@dataclass(frozen=True, slots=True)
class NameOverrides:
    """Explicit identifiers that win over the derived ones."""

    cluster_name: str | None = None
    bucket_name: str | None = None


@dataclass(frozen=True, slots=True)
class DerivedNames:
    """Resource identifiers computed from project and environment."""

    cluster_name: str
    database_name: str
    database_user: str
    namespace: str
    monitoring_namespace: str | None
    state_bucket_name: str
    state_key: str


@dataclass(frozen=True, slots=True)
class AccessHostnames:
    """Public hostnames for a domain-backed deployment."""

    subdomain: str
    full_domain: str
    access_url: str
    wildcard_hostname: str


@dataclass(frozen=True, slots=True)
class StateBackendConfig:
    """S3-compatible remote state settings on Scaleway Object Storage."""

    bucket: str
    key: str
    region: str
    endpoint: str


@dataclass(frozen=True, slots=True)
class CostBreakdown:
    """Itemised cost estimate for one environment.

    Amounts are ``Decimal`` values quantized to cents and cover ``period``.
    ``unknown_tiers`` lists every pricing lookup that fell back to zero.
    """

    cluster_cost: Decimal
    database_cost: Decimal
    network_cost: Decimal
    total_cost: Decimal
    currency: str = "EUR"
    period: Period = Period.MONTHLY
    unknown_tiers: tuple[UnknownTier, ...] = ()


@dataclass(frozen=True, slots=True)
class BudgetStatus:
    """Result of comparing an estimate with a budget."""

    budget: Decimal
    total_cost: Decimal
    usage_percent: int
    alert_threshold: int
    alert: bool
    exceeded: bool


@dataclass(frozen=True, slots=True)
class CostDelta:
    """Difference between the current and a proposed estimate."""

    current: Decimal
    proposed: Decimal
    difference: Decimal

    @property
    def is_increase(self) -> bool:
        return self.difference > 0


@dataclass(frozen=True, slots=True)
class RawPlatformInputs:
    """Raw CLI and environment inputs before validation.

    Every attribute is the string a caller supplied, or ``None`` when the
    caller left it out. Sizing fields that stay ``None`` are not overrides.
    """

    environment: str | None = None
    region: str | None = None
    zone: str | None = None
    project_name: str | None = None
    cluster_name: str | None = None
    bucket_name: str | None = None
    domain_name: str | None = None
    subdomain: str | None = None
    node_count: str | None = None
    node_type: str | None = None
    min_size: str | None = None
    max_size: str | None = None
    database_node_type: str | None = None
    database_is_ha: str | None = None
    database_backup_retention_days: str | None = None
    enable_monitoring: str | None = None
    enable_pod_security: str | None = None
    enable_network_policy: str | None = None
    enable_load_balancer: str | None = None


@dataclass(frozen=True, slots=True)
class ValidatedInputs:
    """Inputs that passed validation, converted to their canonical types."""

    environment: Environment
    region: Region
    zone: str | None
    project_name: str
    domain_name: str
    subdomain: str
    name_overrides: NameOverrides
    overrides: Overrides
    load_balancer_enabled: bool
