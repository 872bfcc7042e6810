"""Daily profit calculation.

WHAT: Turns one day's AggregatedMetrics plus the user's cost assumptions into a
      profit breakdown
WHY: The cost assumptions are edited per session and never stored, so the
     calculation is a pure function the dashboard can re-run on every change.

REFERENCES:
  - profitdash/services/aggregator.py: Produces AggregatedMetrics
  - profitdash/routers/profit_data.py: /api/profit-breakdown exposes this

Formulas:
  total_cogs        = orders * unit_cogs
  total_shipping    = orders * unit_shipping
  total_ad_spend    = sum(ad_spend_by_provider)
  daily_fixed_costs = monthly_fixed_costs / 30
  net_profit        = revenue - total_cogs - total_shipping - total_ad_spend - daily_fixed_costs

Known simplification: fixed costs are spread over a flat 30 days, not the
actual length of the month.

Rounding policy: every component is rounded to cents (ROUND_HALF_UP) and
net_profit is derived from the rounded components, so the identity above
holds exactly on the returned values.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict

from profitdash.services.metrics import AggregatedMetrics

DAYS_PER_MONTH = Decimal("30")
CENT = Decimal("0.01")

DEFAULT_UNIT_COGS = Decimal("12.50")
DEFAULT_UNIT_SHIPPING = Decimal("4.30")
DEFAULT_MONTHLY_FIXED_COSTS = Decimal("2500")


def to_cents(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class CostAssumptions:
    """Session-scoped cost settings. Never persisted."""
    unit_cogs: Decimal = DEFAULT_UNIT_COGS
    unit_shipping: Decimal = DEFAULT_UNIT_SHIPPING
    monthly_fixed_costs: Decimal = DEFAULT_MONTHLY_FIXED_COSTS


@dataclass(frozen=True)
class ProfitBreakdown:
    """Derived profit figures for one day. Never persisted."""
    revenue: Decimal
    total_cogs: Decimal
    total_shipping: Decimal
    total_ad_spend: Decimal
    daily_fixed_costs: Decimal
    net_profit: Decimal
    orders: int

    @property
    def is_profit(self) -> bool:
        return self.net_profit > 0

    @property
    def total_costs(self) -> Decimal:
        return self.total_cogs + self.total_shipping + self.total_ad_spend + self.daily_fixed_costs

    def as_dict(self) -> Dict[str, Any]:
        return {
            "revenue": self.revenue,
            "total_cogs": self.total_cogs,
            "total_shipping": self.total_shipping,
            "total_ad_spend": self.total_ad_spend,
            "daily_fixed_costs": self.daily_fixed_costs,
            "net_profit": self.net_profit,
            "orders": self.orders,
        }


def compute_breakdown(metrics: AggregatedMetrics, costs: CostAssumptions) -> ProfitBreakdown:
    """Compute the profit breakdown for one day.

    Pure and total: inputs are assumed already validated (non-negative).
    An empty `ad_spend_by_provider` gives zero ad spend; zero orders give
    zero COGS and shipping.

    Example:
        orders=100, revenue=5000, unit_cogs=12.50, unit_shipping=4.30,
        ad spend {meta: 300, tiktok: 150}, monthly_fixed_costs=2500
        -> cogs 1250.00, shipping 430.00, ad 450.00, fixed 83.33, net 2786.67
    """
    revenue = to_cents(Decimal(metrics.revenue))
    total_cogs = to_cents(metrics.orders * Decimal(costs.unit_cogs))
    total_shipping = to_cents(metrics.orders * Decimal(costs.unit_shipping))
    total_ad_spend = to_cents(sum((Decimal(v) for v in metrics.ad_spend_by_provider.values()), Decimal("0")))
    daily_fixed_costs = to_cents(Decimal(costs.monthly_fixed_costs) / DAYS_PER_MONTH)

    net_profit = revenue - total_cogs - total_shipping - total_ad_spend - daily_fixed_costs

    return ProfitBreakdown(
        revenue=revenue,
        total_cogs=total_cogs,
        total_shipping=total_shipping,
        total_ad_spend=total_ad_spend,
        daily_fixed_costs=daily_fixed_costs,
        net_profit=net_profit,
        orders=metrics.orders,
    )
