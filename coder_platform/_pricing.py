"""Scaleway pricing table used for cost estimates.

Prices are monthly list prices in EUR for the Paris region, held as
``Decimal`` so summing line items never drifts. The table is frozen and
versioned with the defaults registry.

Examples
--------
>>> DEFAULT_PRICING_TABLE.compute_price("GP1-XS")
Decimal('66.43')
>>> DEFAULT_PRICING_TABLE.compute_price("GP1-XL") is None
True
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal
from types import MappingProxyType

from coder_platform._platform_models import Period

PRICING_VERSION = "2024.1"
HOURS_PER_MONTH = 720

# Hours covered by each reporting period; a month is 30 days.
PERIOD_HOURS: Mapping[Period, int] = MappingProxyType(
    {
        Period.HOURLY: 1,
        Period.DAILY: 24,
        Period.MONTHLY: HOURS_PER_MONTH,
        Period.YEARLY: HOURS_PER_MONTH * 12,
    }
)


@dataclass(frozen=True, slots=True)
class PricingTable:
    """Monthly unit prices for compute, database, and network resources.

    Attributes
    ----------
    compute : Mapping[str, Decimal]
        Price per Kubernetes node, keyed by node type.
    database : Mapping[str, Decimal]
        Price per managed database node, keyed by database node type.
    load_balancer : Decimal
        Flat network cost when a load balancer is provisioned.
    no_load_balancer : Decimal
        Flat network cost when no load balancer is provisioned.
    currency : str
        ISO currency code for every amount.
    version : str
        Identifier of the price list the amounts come from.
    """

    compute: Mapping[str, Decimal]
    database: Mapping[str, Decimal]
    load_balancer: Decimal
    no_load_balancer: Decimal
    currency: str = "EUR"
    version: str = PRICING_VERSION

    def compute_price(self, node_type: str) -> Decimal | None:
        """Return the monthly price of one node, or ``None`` if unpriced."""
        return self.compute.get(node_type)

    def database_price(self, node_type: str) -> Decimal | None:
        """Return the monthly price of one database node, or ``None``."""
        return self.database.get(node_type)


DEFAULT_PRICING_TABLE = PricingTable(
    compute=MappingProxyType(
        {
            "GP1-XS": Decimal("66.43"),  # 4 vCPU, 16 GB
            "GP1-S": Decimal("136.51"),  # 8 vCPU, 32 GB
            "GP1-M": Decimal("274.48"),  # 16 vCPU, 64 GB
        }
    ),
    database=MappingProxyType(
        {
            "DB-DEV-S": Decimal("11.23"),
            "DB-GP-S": Decimal("273.82"),
            "DB-GP-M": Decimal("547.24"),
        }
    ),
    load_balancer=Decimal("8.90"),  # LB-S
    no_load_balancer=Decimal("0.00"),
)
