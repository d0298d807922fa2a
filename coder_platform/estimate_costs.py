#!/usr/bin/env -S uv run python
# /// script
# requires-python = ">=3.13"
# dependencies = ["cyclopts>=2.9"]
# ///
"""Report estimated infrastructure costs for Coder environments.

This script:
- resolves the effective configuration for one environment or for all;
- prices it against the bundled Scaleway pricing table;
- prints the breakdown per hour, day, month, or year as a table, JSON or CSV;
- shows the change against the environment defaults when sizing is overridden;
  and
- checks the monthly estimate against an optional budget.

Examples
--------
>>> python coder_platform/estimate_costs.py --environment all
>>> python coder_platform/estimate_costs.py --environment prod --period yearly
>>> python coder_platform/estimate_costs.py --environment dev --budget 100 --alert-threshold 90
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Sequence
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Annotated

from cyclopts import App, Parameter
from coder_platform._cost_estimation import (
    DEFAULT_ALERT_THRESHOLD,
    compare_costs,
    estimate,
    evaluate_budget,
    scale_to_period,
)
from coder_platform._cost_reporting import CostReport, ReportFormat, render
from coder_platform._github_actions import append_step_summary, emit_annotation
from coder_platform._input_resolution import InputResolution, resolve_input
from coder_platform._override_resolution import resolve
from coder_platform._platform_errors import InvalidInput, PlatformConfigError
from coder_platform._platform_models import (
    BudgetStatus,
    Environment,
    Overrides,
    Period,
)
from coder_platform._pricing import DEFAULT_PRICING_TABLE, PricingTable
from coder_platform._validation import (
    parse_bool_input,
    parse_int_input,
    validate_environment,
)

app = App(help="Estimate Coder environment costs on Scaleway.")
logger = logging.getLogger(__name__)

ALL_ENVIRONMENTS = "all"


def select_environments(value: str) -> list[Environment]:
    """Expand ``all`` to every environment, otherwise validate one name."""
    if value == ALL_ENVIRONMENTS:
        return list(Environment)
    return [validate_environment(value)]


def build_report(
    environment: Environment,
    overrides: Overrides,
    *,
    load_balancer_enabled: bool,
    pricing: PricingTable = DEFAULT_PRICING_TABLE,
) -> CostReport:
    """Resolve ``environment`` and price it for one month."""
    config = resolve(environment, overrides)
    breakdown = estimate(config, pricing, load_balancer_enabled=load_balancer_enabled)
    return CostReport(
        environment=environment,
        config=config,
        breakdown=breakdown,
        load_balancer_enabled=load_balancer_enabled,
    )


def rescale(report: CostReport, period: Period | str) -> CostReport:
    return CostReport(
        environment=report.environment,
        config=report.config,
        breakdown=scale_to_period(report.breakdown, period),
        load_balancer_enabled=report.load_balancer_enabled,
    )


def parse_budget(value: str) -> Decimal:
    """Parse a budget amount such as ``500`` or ``99.50``."""
    try:
        amount = Decimal(value.strip())
    except InvalidOperation:
        raise InvalidInput("budget", value, "malformed budget amount") from None
    if not amount.is_finite():
        raise InvalidInput("budget", value, "malformed budget amount")
    return amount


def describe_budget(environment: Environment, status: BudgetStatus) -> str:
    line = (
        f"{environment}: {status.total_cost} of {status.budget} budget "
        f"({status.usage_percent}%, alert at {status.alert_threshold}%)"
    )
    if status.exceeded:
        return f"BUDGET EXCEEDED {line}"
    if status.alert:
        return f"BUDGET ALERT {line}"
    return f"Budget OK {line}"


def run_estimate(
    environments: Sequence[Environment],
    overrides: Overrides,
    *,
    load_balancer_enabled: bool,
    period: str,
    output_format: str,
    budget: Decimal | None = None,
    alert_threshold: int = DEFAULT_ALERT_THRESHOLD,
) -> tuple[str, list[str]]:
    """Build the rendered report and the budget and delta notes.

    Returns
    -------
    tuple[str, list[str]]
        The rendered report and human-readable notes to print after it.
    """
    monthly = [
        build_report(env, overrides, load_balancer_enabled=load_balancer_enabled)
        for env in environments
    ]
    notes: list[str] = []

    if overrides.explicit():
        for report in monthly:
            baseline = build_report(
                report.environment, Overrides(), load_balancer_enabled=load_balancer_enabled
            )
            delta = compare_costs(baseline.breakdown, report.breakdown)
            sign = "+" if delta.is_increase else ""
            notes.append(
                f"{report.environment}: {sign}{delta.difference} "
                f"{report.breakdown.currency}/month against defaults"
            )

    if budget is not None:
        for report in monthly:
            status = evaluate_budget(report.breakdown.total_cost, budget, alert_threshold)
            notes.append(describe_budget(report.environment, status))

    rendered = render([rescale(report, period) for report in monthly], output_format)
    return rendered, notes


@app.command()
def main(
    environment: Annotated[str | None, Parameter(help="dev, staging, prod, or all.")] = None,
    period: Annotated[str, Parameter(help="hourly, daily, monthly, or yearly.")] = "monthly",
    output_format: Annotated[
        str, Parameter(name="--format", help="table, json, or csv.")
    ] = "table",
    budget: Annotated[str | None, Parameter(help="Monthly budget to check against.")] = None,
    alert_threshold: int = DEFAULT_ALERT_THRESHOLD,
    load_balancer: str | None = None,
    node_count: str | None = None,
    node_type: str | None = None,
    min_size: str | None = None,
    max_size: str | None = None,
    database_node_type: str | None = None,
    database_is_ha: str | None = None,
    step_summary: Annotated[
        Path | None, Parameter(help="GITHUB_STEP_SUMMARY path override.")
    ] = None,
) -> int:
    """Print the cost estimate for one or all environments."""
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    env_value = resolve_input(
        environment, InputResolution(env_key="INPUT_ENVIRONMENT", required=True)
    )

    try:
        environments = select_environments(str(env_value))
        overrides = Overrides(
            node_count=parse_int_input("node_count", node_count),
            node_type=node_type,
            min_size=parse_int_input("min_size", min_size),
            max_size=parse_int_input("max_size", max_size),
            database_node_type=database_node_type,
            database_is_ha=parse_bool_input("database_is_ha", database_is_ha),
        )
        if overrides.explicit() and len(environments) > 1:
            msg = "sizing overrides need a single environment"
            raise InvalidInput("environment", env_value, msg)
        # Blank action inputs are unset.
        lb_flag = parse_bool_input("load_balancer", load_balancer or None)
        rendered, notes = run_estimate(
            environments,
            overrides,
            load_balancer_enabled=True if lb_flag is None else lb_flag,
            period=period,
            output_format=output_format,
            budget=parse_budget(budget) if budget is not None else None,
            alert_threshold=alert_threshold,
        )
    except PlatformConfigError as exc:
        logger.error("Cannot estimate costs: %s", exc)
        emit_annotation("error", str(exc), stream=lambda line: print(line, file=sys.stderr))
        return 1

    print(rendered, end="")
    for note in notes:
        print(note)

    summary_file = resolve_input(
        step_summary, InputResolution(env_key="GITHUB_STEP_SUMMARY", as_path=True)
    )
    if summary_file is not None and output_format == ReportFormat.TABLE:
        append_step_summary(Path(summary_file), f"```\n{rendered}```\n")
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entrypoint
    raise SystemExit(app())
