"""Render cost estimates as a table, JSON, or CSV.

Amounts are written from their ``Decimal`` value, never through ``float``, so
the report shows exactly what the estimator computed.
"""

from __future__ import annotations

import csv
import io
import json
from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal
from enum import StrEnum

from coder_platform._platform_errors import InvalidInput
from coder_platform._platform_models import CostBreakdown, EffectiveConfiguration, Environment

CURRENCY_SYMBOLS = {"EUR": "€"}
TABLE_WIDTH = 65
CSV_HEADER = ("Environment", "Period", "Category", "Resource", "Quantity", "Cost")


class ReportFormat(StrEnum):
    """Output formats supported by the cost report."""

    TABLE = "table"
    JSON = "json"
    CSV = "csv"


@dataclass(frozen=True, slots=True)
class CostReport:
    """An estimate together with the configuration it was computed from."""

    environment: Environment
    config: EffectiveConfiguration
    breakdown: CostBreakdown
    load_balancer_enabled: bool


@dataclass(frozen=True, slots=True)
class LineItem:
    """One row of a cost report."""

    category: str
    resource: str
    quantity: int
    cost: Decimal


def line_items(report: CostReport) -> list[LineItem]:
    """Return the compute, database, and network rows for ``report``."""
    config = report.config
    breakdown = report.breakdown
    lb_resource = "Load Balancer" if report.load_balancer_enabled else "No Load Balancer"
    return [
        LineItem("Compute", config.node_type, config.node_count, breakdown.cluster_cost),
        LineItem("Database", config.database_node_type, 1, breakdown.database_cost),
        LineItem(
            "Network",
            lb_resource,
            1 if report.load_balancer_enabled else 0,
            breakdown.network_cost,
        ),
    ]


def format_amount(amount: Decimal, currency: str) -> str:
    """Format ``amount`` with its currency symbol, e.g. ``€152.99``."""
    symbol = CURRENCY_SYMBOLS.get(currency, f"{currency} ")
    return f"{symbol}{amount:.2f}"


def grand_total(reports: Sequence[CostReport]) -> Decimal:
    return sum((report.breakdown.total_cost for report in reports), Decimal("0.00"))


def render_table(reports: Sequence[CostReport]) -> str:
    """Render a fixed-width table per environment plus a grand total."""
    rule = "-" * TABLE_WIDTH
    lines: list[str] = []
    for report in reports:
        breakdown = report.breakdown
        lines.append(f"Cost breakdown for environment: {report.environment} ({breakdown.period})")
        lines.append("")
        lines.append(f"{'CATEGORY':<15} {'RESOURCE':<20} {'QUANTITY':<10} COST")
        lines.append(rule)
        for item in line_items(report):
            cost = format_amount(item.cost, breakdown.currency)
            lines.append(
                f"{item.category:<15} {item.resource:<20} {item.quantity!s:<10} {cost}"
            )
        lines.append(rule)
        total = format_amount(breakdown.total_cost, breakdown.currency)
        lines.append(f"{f'TOTAL ({breakdown.period})':<47} {total}")
        lines.extend(f"WARNING: {tier}" for tier in breakdown.unknown_tiers)
        lines.append("")

    if len(reports) > 1:
        currency = reports[0].breakdown.currency
        period = reports[0].breakdown.period
        total = format_amount(grand_total(reports), currency)
        lines.append(f"TOTAL COST (all environments): {total}/{period}")
    return "\n".join(lines).rstrip("\n") + "\n"


def _report_payload(report: CostReport) -> dict[str, object]:
    breakdown = report.breakdown
    return {
        "environment": str(report.environment),
        "period": str(breakdown.period),
        "currency": breakdown.currency,
        "cluster_cost": str(breakdown.cluster_cost),
        "database_cost": str(breakdown.database_cost),
        "network_cost": str(breakdown.network_cost),
        "total_cost": str(breakdown.total_cost),
        "breakdown": [
            {
                "category": item.category,
                "resource": item.resource,
                "quantity": item.quantity,
                "cost": str(item.cost),
            }
            for item in line_items(report)
        ],
        "unknown_tiers": [
            {"category": tier.category, "tier": tier.tier}
            for tier in breakdown.unknown_tiers
        ],
    }


def render_json(reports: Sequence[CostReport]) -> str:
    """Render the reports as a JSON document with string amounts."""
    payload = {
        "reports": [_report_payload(report) for report in reports],
        "total_cost": str(grand_total(reports)),
    }
    return json.dumps(payload, indent=2) + "\n"


def render_csv(reports: Sequence[CostReport]) -> str:
    """Render one CSV row per line item and a TOTAL row per environment."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for report in reports:
        period = str(report.breakdown.period)
        env = str(report.environment)
        for item in line_items(report):
            writer.writerow(
                (env, period, item.category, item.resource, item.quantity, item.cost)
            )
        writer.writerow((env, period, "TOTAL", "TOTAL", "", report.breakdown.total_cost))
    return buffer.getvalue()


RENDERERS = {
    ReportFormat.TABLE: render_table,
    ReportFormat.JSON: render_json,
    ReportFormat.CSV: render_csv,
}


def render(reports: Sequence[CostReport], output_format: ReportFormat | str) -> str:
    """Render ``reports`` in ``output_format``.

    Raises
    ------
    InvalidInput
        If ``output_format`` is not ``table``, ``json`` or ``csv``.
    """
    try:
        renderer = RENDERERS[ReportFormat(output_format)]
    except ValueError:
        raise InvalidInput("format", output_format, "unknown output format") from None
    return renderer(reports)
