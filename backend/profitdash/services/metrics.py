"""Normalized metric records shared by adapters, aggregator and calculator.

WHAT: Plain dataclasses for per-provider results and the merged daily record
WHY: Every provider speaks its own response shape; everything downstream of
     the adapters only sees these.

All money values are Decimal. Upstream APIs encode amounts as strings, and
float sums drift once a day has a few hundred orders.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Dict, Optional

ZERO = Decimal("0")


@dataclass(frozen=True)
class OrderMetrics:
    """Paid orders created within one day."""
    revenue_total: Decimal
    order_count: int


@dataclass(frozen=True)
class AdSpendMetrics:
    """Spend reported by one ad provider for one day."""
    spend: Decimal = ZERO


@dataclass
class AggregatedMetrics:
    """
    Merged record for one day across all providers.

    `ad_spend_by_provider` holds an entry for every configured ad provider,
    zero when the provider had no data, was unreachable or is not set up.
    `degraded_providers` maps provider id to a short reason code
    ("unconfigured", "unavailable", "timeout") for every provider whose zero
    is a fallback rather than a reported value.

    `date` is None for metrics posted back by a client without a day.
    """
    date: Optional[date]
    revenue: Decimal
    orders: int
    ad_spend_by_provider: Dict[str, Decimal] = field(default_factory=dict)
    degraded_providers: Dict[str, str] = field(default_factory=dict)

    @property
    def total_ad_spend(self) -> Decimal:
        return sum(self.ad_spend_by_provider.values(), ZERO)

    @property
    def is_degraded(self) -> bool:
        return bool(self.degraded_providers)
