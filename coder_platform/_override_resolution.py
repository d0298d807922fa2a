"""Merge environment defaults with caller overrides.

Every field resolves independently: an explicit override (any value other
than ``None``) replaces the default, even when it is equal to it, and an
unset field takes the default verbatim. Cross-field rules are enforced by
``EffectiveConfiguration`` itself once the merge is done.

Examples
--------
>>> config = resolve(Environment.DEV, Overrides(node_count=3))
>>> config.node_count, config.node_type
(3, 'GP1-XS')
>>> explain(config)["node_count"], explain(config)["node_type"]
('override', 'default')
"""

from __future__ import annotations

import logging
from dataclasses import asdict

from coder_platform._environment_registry import DEFAULTS_REGISTRY, DefaultsRegistry
from coder_platform._platform_errors import InvalidInput
from coder_platform._platform_models import (
    SIZING_FIELDS,
    EffectiveConfiguration,
    Environment,
    Overrides,
)

logger = logging.getLogger(__name__)


def resolve(
    environment: Environment,
    overrides: Overrides,
    registry: DefaultsRegistry = DEFAULTS_REGISTRY,
) -> EffectiveConfiguration:
    """Resolve the effective configuration for ``environment``.

    Parameters
    ----------
    environment : Environment
        Environment whose defaults form the baseline.
    overrides : Overrides
        Caller overrides; ``None`` fields are left at their default.
    registry : DefaultsRegistry, optional
        Defaults table to resolve against (default: ``DEFAULTS_REGISTRY``).

    Returns
    -------
    EffectiveConfiguration
        The merged configuration, recording which fields were overridden.

    Raises
    ------
    InvalidInput
        If ``environment`` has no registry entry, or the merged sizing breaks
        ``min_size <= node_count <= max_size``.
    """
    try:
        defaults = registry[environment]
    except KeyError:
        raise InvalidInput("environment", environment, "unknown environment") from None

    explicit = overrides.explicit()
    values = asdict(defaults) | explicit
    if explicit:
        logger.debug(
            "Overriding %s defaults: %s", environment, ", ".join(sorted(explicit))
        )
    return EffectiveConfiguration(
        environment=environment,
        overridden_fields=frozenset(explicit),
        **values,
    )


def explain(config: EffectiveConfiguration) -> dict[str, str]:
    """Report where each resolved value came from.

    Returns
    -------
    dict[str, str]
        ``"override"`` or ``"default"`` per sizing field.
    """
    return {
        name: "override" if name in config.overridden_fields else "default"
        for name in SIZING_FIELDS
    }
