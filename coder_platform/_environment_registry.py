"""Per-environment defaults for the Coder platform.

The registry is versioned alongside the pricing table so that a cost estimate
produced from the same inputs stays reproducible across runs. Pass it to the
resolver explicitly when testing alternative profiles.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import TypeAlias

from coder_platform._platform_models import Environment, EnvironmentDefaults, Region

REGISTRY_VERSION = "2024.1"
DEFAULT_REGION = Region.FR_PAR
DEFAULT_PROJECT_NAME = "coder"

DefaultsRegistry: TypeAlias = Mapping[Environment, EnvironmentDefaults]

DEFAULTS_REGISTRY: DefaultsRegistry = MappingProxyType(
    {
        Environment.DEV: EnvironmentDefaults(
            node_count=2,
            node_type="GP1-XS",
            min_size=1,
            max_size=3,
            database_node_type="DB-DEV-S",
            database_is_ha=False,
            database_backup_retention_days=7,
            enable_monitoring=False,
            enable_pod_security=False,
            enable_network_policy=True,
        ),
        Environment.STAGING: EnvironmentDefaults(
            node_count=3,
            node_type="GP1-S",
            min_size=2,
            max_size=5,
            database_node_type="DB-GP-S",
            database_is_ha=False,
            database_backup_retention_days=14,
            enable_monitoring=True,
            enable_pod_security=True,
            enable_network_policy=True,
        ),
        Environment.PROD: EnvironmentDefaults(
            node_count=5,
            node_type="GP1-M",
            min_size=3,
            max_size=10,
            database_node_type="DB-GP-M",
            database_is_ha=True,
            database_backup_retention_days=30,
            enable_monitoring=True,
            enable_pod_security=True,
            enable_network_policy=True,
        ),
    }
)

# Subdomain used when a domain is configured without an explicit subdomain.
DEFAULT_SUBDOMAINS: Mapping[Environment, str] = MappingProxyType(
    {
        Environment.DEV: "coder-dev",
        Environment.STAGING: "coder-staging",
        Environment.PROD: "coder",
    }
)
