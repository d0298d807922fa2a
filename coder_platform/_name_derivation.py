"""Derive resource identifiers from project and environment.

Downstream resources are looked up by these names on every run, so the
derivation is pure: the same inputs always produce the same identifiers. The
state bucket name in particular must be known before the remote state backend
is initialised, because the backend bootstraps itself from it.

Examples
--------
>>> names = derive("coder", Environment.DEV, NameOverrides())
>>> names.cluster_name, names.state_bucket_name
('coder-dev-cluster', 'terraform-state-coder-dev')
"""

from __future__ import annotations

from collections.abc import Collection

from coder_platform._environment_registry import DEFAULT_SUBDOMAINS
from coder_platform._platform_errors import NameCollision
from coder_platform._platform_models import (
    AccessHostnames,
    DerivedNames,
    Environment,
    NameOverrides,
    Region,
    StateBackendConfig,
)

APP_NAMESPACE = "coder"
MONITORING_NAMESPACE = "monitoring"
STATE_BUCKET_PREFIX = "terraform-state-coder"


def derive(
    project_name: str,
    environment: Environment,
    overrides: NameOverrides,
    *,
    enable_monitoring: bool = False,
) -> DerivedNames:
    """Compute the identifiers for one environment.

    Parameters
    ----------
    project_name : str
        Validated project name, e.g. ``coder``.
    environment : Environment
        Target environment.
    overrides : NameOverrides
        Explicit cluster and bucket names; each wins over the derived one.
    enable_monitoring : bool, optional
        Whether the observability stack gets its own namespace.

    Returns
    -------
    DerivedNames
        Cluster, database, namespace, and state identifiers.
    """
    db_prefix = project_name.replace("-", "_")
    return DerivedNames(
        cluster_name=overrides.cluster_name or f"{project_name}-{environment}-cluster",
        database_name=f"{db_prefix}_{environment}_db",
        database_user=f"{db_prefix}_{environment}_user",
        namespace=APP_NAMESPACE,
        monitoring_namespace=MONITORING_NAMESPACE if enable_monitoring else None,
        state_bucket_name=overrides.bucket_name or f"{STATE_BUCKET_PREFIX}-{environment}",
        state_key=f"{environment}/terraform.tfstate",
    )


def build_backend_config(names: DerivedNames, region: Region) -> StateBackendConfig:
    """Build the Object Storage backend settings for the derived state bucket.

    Examples
    --------
    >>> names = derive("coder", Environment.PROD, NameOverrides())
    >>> build_backend_config(names, Region.NL_AMS).endpoint
    'https://s3.nl-ams.scw.cloud'
    """
    return StateBackendConfig(
        bucket=names.state_bucket_name,
        key=names.state_key,
        region=str(region),
        endpoint=f"https://s3.{region}.scw.cloud",
    )


def derive_access_hostnames(
    domain_name: str,
    subdomain: str,
    environment: Environment,
) -> AccessHostnames | None:
    """Derive the public hostnames, or ``None`` in IP-based mode.

    An empty ``subdomain`` falls back to the environment's default
    (``coder-dev``, ``coder-staging`` or ``coder``).
    """
    if not domain_name:
        return None
    label = subdomain or DEFAULT_SUBDOMAINS[environment]
    full_domain = f"{label}.{domain_name}"
    return AccessHostnames(
        subdomain=label,
        full_domain=full_domain,
        access_url=f"https://{full_domain}",
        wildcard_hostname=f"*.{full_domain}",
    )


def check_name_collisions(names: DerivedNames, existing: Collection[str]) -> None:
    """Raise ``NameCollision`` if a provisioned identifier is already taken.

    ``existing`` is whatever the caller knows to be in use; the check cannot
    see provider state on its own.
    """
    for field in ("cluster_name", "database_name", "state_bucket_name"):
        value = getattr(names, field)
        if value in existing:
            raise NameCollision(field, value)
