"""Validate caller inputs before any configuration is resolved.

Each check returns the canonical value or raises ``InvalidInput`` naming the
field and the rejected value. Nothing is trimmed, lowercased, or otherwise
coerced: a value that does not already satisfy the rule is rejected.

Examples
--------
>>> validate_environment("dev")
<Environment.DEV: 'dev'>
>>> validate_domain("")
''
>>> validate_domain("-bad-.com")
Traceback (most recent call last):
...
coder_platform._platform_errors.InvalidInput: malformed domain: domain_name='-bad-.com'
"""

from __future__ import annotations

import re

from coder_platform._environment_registry import DEFAULT_PROJECT_NAME, DEFAULT_REGION
from coder_platform._platform_errors import InvalidInput
from coder_platform._platform_models import (
    Environment,
    NameOverrides,
    Overrides,
    RawPlatformInputs,
    Region,
    ValidatedInputs,
)

MAX_HOSTNAME_LENGTH = 253
ZONES_PER_REGION = 3

_LABEL = r"[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?"
_HOSTNAME_RE = re.compile(rf"^{_LABEL}(?:\.{_LABEL})*$")
_LABEL_RE = re.compile(rf"^{_LABEL}$")
_PROJECT_NAME_RE = re.compile(r"^[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?$")
_BUCKET_NAME_RE = re.compile(r"^[a-z0-9][a-z0-9.-]{1,61}[a-z0-9]$")

_TRUE_VALUES = frozenset({"true", "yes", "1", "on"})
_FALSE_VALUES = frozenset({"false", "no", "0", "off"})

_INT_FIELDS = ("node_count", "min_size", "max_size", "database_backup_retention_days")
_BOOL_FIELDS = (
    "database_is_ha",
    "enable_monitoring",
    "enable_pod_security",
    "enable_network_policy",
)
_TIER_FIELDS = ("node_type", "database_node_type")


def validate_environment(value: str | None) -> Environment:
    """Return the ``Environment`` named by ``value``.

    Raises
    ------
    InvalidInput
        If ``value`` is not ``dev``, ``staging`` or ``prod``.
    """
    try:
        return Environment(value)
    except ValueError:
        raise InvalidInput("environment", value, "unknown environment") from None


def validate_region(value: str | None) -> Region:
    """Return the ``Region`` named by ``value``.

    Raises
    ------
    InvalidInput
        If ``value`` is not a supported Scaleway region.
    """
    try:
        return Region(value)
    except ValueError:
        raise InvalidInput("region", value, "unknown region") from None


def validate_zone(value: str | None, region: Region) -> str | None:
    """Check that ``value`` is one of the availability zones of ``region``.

    ``None`` and ``""`` mean "let the provider pick" and return ``None``.

    Examples
    --------
    >>> validate_zone("fr-par-2", Region.FR_PAR)
    'fr-par-2'
    """
    if not value:
        return None
    zones = {f"{region}-{index}" for index in range(1, ZONES_PER_REGION + 1)}
    if value not in zones:
        raise InvalidInput("zone", value, "unknown zone")
    return value


def validate_domain(value: str) -> str:
    """Check a domain name; the empty string selects IP-based access.

    Parameters
    ----------
    value : str
        Candidate domain such as ``example.com``.

    Returns
    -------
    str
        ``value`` unchanged.

    Raises
    ------
    InvalidInput
        If ``value`` is non-empty and not a dot-separated DNS hostname.
    """
    if value == "":
        return value
    if len(value) > MAX_HOSTNAME_LENGTH or not _HOSTNAME_RE.match(value):
        raise InvalidInput("domain_name", value, "malformed domain")
    return value


def validate_subdomain(value: str) -> str:
    """Check a subdomain; it must be empty or a single DNS label."""
    if value == "":
        return value
    if not _LABEL_RE.match(value):
        raise InvalidInput("subdomain", value, "malformed subdomain")
    return value


def validate_project_name(value: str) -> str:
    """Check that a project name is a lowercase DNS label.

    Derived resource names embed the project name, so it has to be usable in
    cluster, bucket, and database identifiers alike.
    """
    if not _PROJECT_NAME_RE.match(value):
        raise InvalidInput("project_name", value, "malformed project name")
    return value


def validate_bucket_name(value: str) -> str:
    """Check an explicit state bucket name against S3 naming rules."""
    if not _BUCKET_NAME_RE.match(value) or ".." in value:
        raise InvalidInput("bucket_name", value, "malformed bucket name")
    return value


def parse_bool_input(field: str, value: str | None) -> bool | None:
    """Parse a boolean input, keeping ``None`` as "not provided".

    Examples
    --------
    >>> parse_bool_input("enable_monitoring", "Yes")
    True
    >>> parse_bool_input("enable_monitoring", None) is None
    True
    """
    if value is None:
        return None
    normalised = value.strip().lower()
    if normalised in _TRUE_VALUES:
        return True
    if normalised in _FALSE_VALUES:
        return False
    raise InvalidInput(field, value, "malformed boolean")


def parse_int_input(field: str, value: str | None) -> int | None:
    """Parse an integer input, keeping ``None`` as "not provided"."""
    if value is None:
        return None
    try:
        return int(value.strip())
    except ValueError:
        raise InvalidInput(field, value, "malformed integer") from None


def _build_overrides(raw: RawPlatformInputs) -> Overrides:
    values: dict[str, object] = {}
    for name in _INT_FIELDS:
        values[name] = parse_int_input(name, getattr(raw, name))
    for name in _BOOL_FIELDS:
        values[name] = parse_bool_input(name, getattr(raw, name))
    for name in _TIER_FIELDS:
        tier = getattr(raw, name)
        if tier is not None and not tier.strip():
            raise InvalidInput(name, tier, "tier must not be blank")
        values[name] = tier
    return Overrides(**values)


def _build_name_overrides(raw: RawPlatformInputs) -> NameOverrides:
    cluster_name = raw.cluster_name or None
    if cluster_name is not None and not _LABEL_RE.match(cluster_name):
        raise InvalidInput("cluster_name", cluster_name, "malformed cluster name")
    bucket_name = raw.bucket_name or None
    if bucket_name is not None:
        validate_bucket_name(bucket_name)
    return NameOverrides(cluster_name=cluster_name, bucket_name=bucket_name)


def validate_inputs(raw: RawPlatformInputs) -> ValidatedInputs:
    """Validate raw inputs and convert them to canonical types.

    Parameters
    ----------
    raw : RawPlatformInputs
        Inputs as supplied by the CLI or environment. ``region`` defaults to
        ``fr-par``, ``project_name`` to ``coder``, and the domain settings to
        IP-based access when they are ``None``.

    Returns
    -------
    ValidatedInputs
        Canonical inputs ready for override resolution.

    Raises
    ------
    InvalidInput
        On the first field that breaks a rule.

    Examples
    --------
    >>> validate_inputs(RawPlatformInputs(environment="dev")).region
    <Region.FR_PAR: 'fr-par'>
    """
    environment = validate_environment(raw.environment)
    region = validate_region(raw.region if raw.region is not None else DEFAULT_REGION)
    zone = validate_zone(raw.zone, region)
    project_name = validate_project_name(
        raw.project_name if raw.project_name is not None else DEFAULT_PROJECT_NAME
    )
    domain_name = validate_domain(raw.domain_name or "")
    subdomain = validate_subdomain(raw.subdomain or "")
    load_balancer = parse_bool_input("enable_load_balancer", raw.enable_load_balancer)

    return ValidatedInputs(
        environment=environment,
        region=region,
        zone=zone,
        project_name=project_name,
        domain_name=domain_name,
        subdomain=subdomain,
        name_overrides=_build_name_overrides(raw),
        overrides=_build_overrides(raw),
        load_balancer_enabled=True if load_balancer is None else load_balancer,
    )
