"""Estimate the monthly cost of an environment from its effective configuration.

All arithmetic is done on ``Decimal`` amounts and quantized to cents, so a
total is always the exact sum of its line items. Tiers missing from the
pricing table cost zero and are reported as ``UnknownTier`` records rather
than aborting: the estimate is advisory.

Examples
--------
>>> config = resolve(Environment.DEV, Overrides())
>>> estimate(config, DEFAULT_PRICING_TABLE, load_balancer_enabled=True).total_cost
Decimal('152.99')
"""

from __future__ import annotations

import logging
from dataclasses import replace
from decimal import ROUND_DOWN, ROUND_HALF_UP, Decimal

from coder_platform._platform_errors import InvalidInput, UnknownTier
from coder_platform._platform_models import (
    BudgetStatus,
    CostBreakdown,
    CostDelta,
    EffectiveConfiguration,
    Period,
)
from coder_platform._pricing import HOURS_PER_MONTH, PERIOD_HOURS, PricingTable

CENT = Decimal("0.01")
DEFAULT_ALERT_THRESHOLD = 80

logger = logging.getLogger(__name__)


def to_cents(amount: Decimal) -> Decimal:
    """Quantize ``amount`` to two decimal places, rounding half up."""
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def estimate(
    config: EffectiveConfiguration,
    pricing: PricingTable,
    *,
    load_balancer_enabled: bool,
) -> CostBreakdown:
    """Compute the itemised monthly cost of ``config``.

    Parameters
    ----------
    config : EffectiveConfiguration
        Resolved sizing for the environment.
    pricing : PricingTable
        Unit prices to apply.
    load_balancer_enabled : bool
        Whether a load balancer fronts the cluster.

    Returns
    -------
    CostBreakdown
        Cluster, database, and network lines with their total. The database
        line is the tier price whether or not ``database_is_ha`` is set.
    """
    unknown: list[UnknownTier] = []

    node_price = pricing.compute_price(config.node_type)
    if node_price is None:
        unknown.append(UnknownTier("compute", config.node_type))
        node_price = Decimal(0)

    db_price = pricing.database_price(config.database_node_type)
    if db_price is None:
        unknown.append(UnknownTier("database", config.database_node_type))
        db_price = Decimal(0)

    for tier in unknown:
        logger.warning("Pricing lookup failed, counting as zero: %s", tier)

    cluster_cost = to_cents(node_price * config.node_count)
    database_cost = to_cents(db_price)
    network_cost = to_cents(
        pricing.load_balancer if load_balancer_enabled else pricing.no_load_balancer
    )

    return CostBreakdown(
        cluster_cost=cluster_cost,
        database_cost=database_cost,
        network_cost=network_cost,
        total_cost=cluster_cost + database_cost + network_cost,
        currency=pricing.currency,
        period=Period.MONTHLY,
        unknown_tiers=tuple(unknown),
    )


def scale_to_period(breakdown: CostBreakdown, period: Period | str) -> CostBreakdown:
    """Convert a monthly breakdown to another reporting period.

    A month counts as 720 hours. Each line is converted and rounded on its
    own and the total is re-summed, so it still matches its lines to the cent.

    Examples
    --------
    >>> monthly = CostBreakdown(Decimal("72.00"), Decimal("0.00"), Decimal("0.00"), Decimal("72.00"))
    >>> scale_to_period(monthly, "daily").total_cost
    Decimal('2.40')
    """
    try:
        target = Period(period)
    except ValueError:
        raise InvalidInput("period", period, "unknown period") from None
    if breakdown.period is not Period.MONTHLY:
        msg = "only monthly breakdowns can be rescaled"
        raise InvalidInput("period", breakdown.period, msg)
    if target is Period.MONTHLY:
        return breakdown

    factor = Decimal(PERIOD_HOURS[target]) / Decimal(HOURS_PER_MONTH)
    cluster_cost = to_cents(breakdown.cluster_cost * factor)
    database_cost = to_cents(breakdown.database_cost * factor)
    network_cost = to_cents(breakdown.network_cost * factor)
    return replace(
        breakdown,
        cluster_cost=cluster_cost,
        database_cost=database_cost,
        network_cost=network_cost,
        total_cost=cluster_cost + database_cost + network_cost,
        period=target,
    )


def evaluate_budget(
    total_cost: Decimal,
    budget: Decimal,
    alert_threshold: int = DEFAULT_ALERT_THRESHOLD,
) -> BudgetStatus:
    """Compare an estimate with a budget.

    The alert fires once usage reaches ``alert_threshold`` percent of the
    budget; ``exceeded`` is set only when the estimate is above the budget.

    Raises
    ------
    InvalidInput
        If the budget is not positive or the threshold is outside 1-100.
    """
    if budget <= 0:
        raise InvalidInput("budget", budget, "budget must be positive")
    if not 1 <= alert_threshold <= 100:
        raise InvalidInput("alert_threshold", alert_threshold, "threshold must be 1-100")

    usage = int((total_cost * 100 / budget).to_integral_value(rounding=ROUND_DOWN))
    status = BudgetStatus(
        budget=budget,
        total_cost=total_cost,
        usage_percent=usage,
        alert_threshold=alert_threshold,
        alert=usage >= alert_threshold,
        exceeded=total_cost > budget,
    )
    if status.exceeded:
        logger.warning("Estimate %s exceeds budget %s", total_cost, budget)
    elif status.alert:
        logger.warning("Estimate is at %d%% of budget %s", usage, budget)
    return status


def compare_costs(current: CostBreakdown, proposed: CostBreakdown) -> CostDelta:
    """Return the change in total cost between two estimates."""
    if current.period is not proposed.period:
        msg = f"cannot compare {current.period} and {proposed.period} estimates"
        raise InvalidInput("period", proposed.period, msg)
    return CostDelta(
        current=current.total_cost,
        proposed=proposed.total_cost,
        difference=proposed.total_cost - current.total_cost,
    )
