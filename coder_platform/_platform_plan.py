"""Assemble the full environment plan from raw inputs.

The plan is the single record handed to the provisioning collaborators: the
validated inputs, the effective configuration, the derived names, the state
backend settings, the public hostnames, and the advisory cost estimate.

Examples
--------
>>> plan = build_plan(validate_inputs(RawPlatformInputs(environment="dev")))
>>> plan.names.cluster_name, str(plan.cost.total_cost)
('coder-dev-cluster', '152.99')
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from coder_platform._cost_estimation import estimate
from coder_platform._environment_registry import DEFAULTS_REGISTRY, DefaultsRegistry
from coder_platform._name_derivation import (
    build_backend_config,
    derive,
    derive_access_hostnames,
)
from coder_platform._override_resolution import resolve
from coder_platform._platform_models import (
    AccessHostnames,
    CostBreakdown,
    DerivedNames,
    EffectiveConfiguration,
    RawPlatformInputs,
    StateBackendConfig,
    ValidatedInputs,
)
from coder_platform._pricing import DEFAULT_PRICING_TABLE, PricingTable
from coder_platform._validation import validate_inputs

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PlatformPlan:
    """Everything the provisioning steps need for one environment."""

    inputs: ValidatedInputs
    config: EffectiveConfiguration
    names: DerivedNames
    backend: StateBackendConfig
    hostnames: AccessHostnames | None
    cost: CostBreakdown


def build_plan(
    inputs: ValidatedInputs,
    *,
    registry: DefaultsRegistry = DEFAULTS_REGISTRY,
    pricing: PricingTable = DEFAULT_PRICING_TABLE,
) -> PlatformPlan:
    """Resolve, derive, and estimate for validated inputs.

    Parameters
    ----------
    inputs : ValidatedInputs
        Output of ``validate_inputs``.
    registry : DefaultsRegistry, optional
        Environment defaults to resolve against.
    pricing : PricingTable, optional
        Prices used for the cost estimate.

    Returns
    -------
    PlatformPlan
        The combined, immutable plan.

    Raises
    ------
    InvalidInput
        If the overrides produce an inconsistent configuration.
    """
    config = resolve(inputs.environment, inputs.overrides, registry)
    names = derive(
        inputs.project_name,
        inputs.environment,
        inputs.name_overrides,
        enable_monitoring=config.enable_monitoring,
    )
    cost = estimate(config, pricing, load_balancer_enabled=inputs.load_balancer_enabled)
    logger.info(
        "Resolved %s plan: cluster=%s bucket=%s estimate=%s %s/month",
        inputs.environment,
        names.cluster_name,
        names.state_bucket_name,
        cost.total_cost,
        cost.currency,
    )
    return PlatformPlan(
        inputs=inputs,
        config=config,
        names=names,
        backend=build_backend_config(names, inputs.region),
        hostnames=derive_access_hostnames(
            inputs.domain_name, inputs.subdomain, inputs.environment
        ),
        cost=cost,
    )


def plan_from_raw(
    raw: RawPlatformInputs,
    *,
    registry: DefaultsRegistry = DEFAULTS_REGISTRY,
    pricing: PricingTable = DEFAULT_PRICING_TABLE,
) -> PlatformPlan:
    """Validate ``raw`` and build its plan in one step."""
    return build_plan(validate_inputs(raw), registry=registry, pricing=pricing)


def _flag(value: bool) -> str:
    return str(value).lower()


def build_tfvars(plan: PlatformPlan) -> dict[str, object]:
    """Map the plan onto the provisioning modules' input variables."""
    config = plan.config
    names = plan.names
    variables: dict[str, object] = {
        "environment": str(plan.inputs.environment),
        "region": str(plan.inputs.region),
        "project_name": plan.inputs.project_name,
        "cluster_name": names.cluster_name,
        "node_count": config.node_count,
        "node_type": config.node_type,
        "min_size": config.min_size,
        "max_size": config.max_size,
        "database_name": names.database_name,
        "database_user": names.database_user,
        "database_node_type": config.database_node_type,
        "database_is_ha": config.database_is_ha,
        "database_backup_retention_days": config.database_backup_retention_days,
        "enable_monitoring": config.enable_monitoring,
        "enable_pod_security": config.enable_pod_security,
        "enable_network_policy": config.enable_network_policy,
        "enable_load_balancer": plan.inputs.load_balancer_enabled,
        "namespace": names.namespace,
        "domain_name": plan.inputs.domain_name,
        "subdomain": plan.hostnames.subdomain if plan.hostnames else "",
    }
    if plan.inputs.zone:
        variables["zone"] = plan.inputs.zone
    if names.monitoring_namespace:
        variables["monitoring_namespace"] = names.monitoring_namespace
    return variables


def build_env_vars(plan: PlatformPlan) -> dict[str, str]:
    """Build ``GITHUB_ENV`` entries for the downstream workflow steps."""
    config = plan.config
    names = plan.names
    env_vars = {
        "ENVIRONMENT": str(plan.inputs.environment),
        "REGION": str(plan.inputs.region),
        "PROJECT_NAME": plan.inputs.project_name,
        "CLUSTER_NAME": names.cluster_name,
        "DATABASE_NAME": names.database_name,
        "DATABASE_USER": names.database_user,
        "NAMESPACE": names.namespace,
        "STATE_BUCKET": plan.backend.bucket,
        "STATE_KEY": plan.backend.key,
        "STATE_ENDPOINT": plan.backend.endpoint,
        "NODE_COUNT": str(config.node_count),
        "NODE_TYPE": config.node_type,
        "MIN_SIZE": str(config.min_size),
        "MAX_SIZE": str(config.max_size),
        "DATABASE_NODE_TYPE": config.database_node_type,
        "DATABASE_IS_HA": _flag(config.database_is_ha),
        "DATABASE_BACKUP_RETENTION_DAYS": str(config.database_backup_retention_days),
        "ENABLE_MONITORING": _flag(config.enable_monitoring),
        "ENABLE_POD_SECURITY": _flag(config.enable_pod_security),
        "ENABLE_NETWORK_POLICY": _flag(config.enable_network_policy),
        "ENABLE_LOAD_BALANCER": _flag(plan.inputs.load_balancer_enabled),
        "DOMAIN_NAME": plan.inputs.domain_name,
        "ESTIMATED_MONTHLY_COST": str(plan.cost.total_cost),
        "COST_CURRENCY": plan.cost.currency,
    }
    if plan.inputs.zone:
        env_vars["ZONE"] = plan.inputs.zone
    if names.monitoring_namespace:
        env_vars["MONITORING_NAMESPACE"] = names.monitoring_namespace
    if plan.hostnames:
        env_vars["FULL_DOMAIN"] = plan.hostnames.full_domain
        env_vars["ACCESS_URL"] = plan.hostnames.access_url
        env_vars["WILDCARD_HOSTNAME"] = plan.hostnames.wildcard_hostname
    return env_vars


def build_outputs(plan: PlatformPlan) -> dict[str, str]:
    """Build the action outputs published through ``GITHUB_OUTPUT``."""
    outputs = {
        "cluster_name": plan.names.cluster_name,
        "state_bucket_name": plan.names.state_bucket_name,
        "monthly_cost": str(plan.cost.total_cost),
        "currency": plan.cost.currency,
    }
    if plan.hostnames:
        outputs["access_url"] = plan.hostnames.access_url
    return outputs
