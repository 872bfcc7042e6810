"""Tests for the daily profit calculation.

WHAT: Formulas, rounding policy and edge cases of compute_breakdown
WHY: The dashboard's headline number comes straight from here
"""

from datetime import date
from decimal import Decimal

import pytest

from profitdash.services.metrics import AggregatedMetrics
from profitdash.services.profit_calculator import (
    DAYS_PER_MONTH,
    CostAssumptions,
    compute_breakdown,
)


def _metrics(revenue="5000.00", orders=100, spend=None) -> AggregatedMetrics:
    return AggregatedMetrics(
        date=date(2024, 1, 15),
        revenue=Decimal(revenue),
        orders=orders,
        ad_spend_by_provider=spend if spend is not None else {"meta": Decimal("300"), "tiktok": Decimal("150")},
    )


def _costs(unit_cogs="12.50", unit_shipping="4.30", monthly_fixed_costs="2500") -> CostAssumptions:
    return CostAssumptions(
        unit_cogs=Decimal(unit_cogs),
        unit_shipping=Decimal(unit_shipping),
        monthly_fixed_costs=Decimal(monthly_fixed_costs),
    )


def test_reference_example():
    breakdown = compute_breakdown(_metrics(), _costs())

    assert breakdown.revenue == Decimal("5000.00")
    assert breakdown.total_cogs == Decimal("1250.00")
    assert breakdown.total_shipping == Decimal("430.00")
    assert breakdown.total_ad_spend == Decimal("450.00")
    assert breakdown.daily_fixed_costs == Decimal("83.33")
    assert breakdown.net_profit == Decimal("2786.67")
    assert breakdown.orders == 100
    assert breakdown.is_profit


def test_zero_orders_means_no_cogs_or_shipping():
    breakdown = compute_breakdown(_metrics(revenue="0", orders=0), _costs())

    assert breakdown.total_cogs == Decimal("0")
    assert breakdown.total_shipping == Decimal("0")
    assert breakdown.net_profit == Decimal("-533.33")
    assert not breakdown.is_profit


def test_empty_ad_spend_map_is_zero():
    breakdown = compute_breakdown(_metrics(spend={}), _costs())

    assert breakdown.total_ad_spend == Decimal("0")
    assert breakdown.net_profit == Decimal("3236.67")


def test_fixed_costs_use_flat_thirty_days():
    """February or not, fixed costs are divided by 30."""
    assert DAYS_PER_MONTH == Decimal("30")
    breakdown = compute_breakdown(_metrics(), _costs(monthly_fixed_costs="3000"))
    assert breakdown.daily_fixed_costs == Decimal("100.00")


def test_is_deterministic():
    metrics, costs = _metrics(), _costs()
    assert compute_breakdown(metrics, costs) == compute_breakdown(metrics, costs)


def test_does_not_mutate_inputs():
    metrics = _metrics()
    before = dict(metrics.ad_spend_by_provider)
    compute_breakdown(metrics, _costs())
    assert metrics.ad_spend_by_provider == before


@pytest.mark.parametrize(
    "revenue,orders,spend,costs",
    [
        ("1234.567", 7, {"meta": Decimal("10.005")}, _costs("3.333", "1.115", "1000")),
        ("0.01", 1, {"meta": Decimal("0.004"), "tiktok": Decimal("0.004")}, _costs("0", "0", "1")),
        ("99999.99", 2500, {"meta": Decimal("8123.45"), "tiktok": Decimal("2200.10")}, _costs("7.77", "5.55", "45000")),
    ],
)
def test_net_profit_identity_holds_exactly(revenue, orders, spend, costs):
    b = compute_breakdown(_metrics(revenue=revenue, orders=orders, spend=spend), costs)
    assert b.net_profit == b.revenue - b.total_cogs - b.total_shipping - b.total_ad_spend - b.daily_fixed_costs
    assert b.total_costs == b.revenue - b.net_profit


def test_components_are_rounded_to_cents():
    b = compute_breakdown(_metrics(revenue="10.005", orders=3, spend={"meta": Decimal("1.005")}), _costs("0.3333", "0", "100"))

    assert b.revenue == Decimal("10.01")
    assert b.total_cogs == Decimal("1.00")
    assert b.total_ad_spend == Decimal("1.01")
    assert b.daily_fixed_costs == Decimal("3.33")


def test_default_cost_assumptions():
    costs = CostAssumptions()
    assert costs.unit_cogs == Decimal("12.50")
    assert costs.unit_shipping == Decimal("4.30")
    assert costs.monthly_fixed_costs == Decimal("2500")
