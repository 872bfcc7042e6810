"""Pydantic schemas for request/response payloads."""

from datetime import date
from decimal import Decimal
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, condecimal, field_serializer

from .services.metrics import AggregatedMetrics
from .services.profit_calculator import (
    DEFAULT_MONTHLY_FIXED_COSTS,
    DEFAULT_UNIT_COGS,
    DEFAULT_UNIT_SHIPPING,
    CostAssumptions,
    ProfitBreakdown,
)

META_PROVIDER_ID = "meta"
TIKTOK_PROVIDER_ID = "tiktok"


class ErrorResponse(BaseModel):
    """Standard error response body."""

    error: str = Field(
        description="Human-readable error message",
        examples=["Date parameter required"],
    )


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(
        description="Service health status",
        examples=["ok"],
    )


class ProviderStatus(BaseModel):
    """Configuration state of one upstream provider."""

    provider: str = Field(description="Provider id", examples=["shopify"])
    configured: bool = Field(description="Whether credentials and identifiers are present and well-formed")
    required: bool = Field(description="Whether aggregation fails without this provider")
    missing: List[str] = Field(
        default_factory=list,
        description="Configuration problems (variable names only, never values)",
    )


class ProviderHealthResponse(BaseModel):
    """Startup/health configuration check for all providers."""

    status: Literal["ok", "degraded", "misconfigured"] = Field(
        description="ok: all configured; degraded: an ad provider is missing; misconfigured: orders provider is missing"
    )
    providers: List[ProviderStatus]


class ProfitDataResponse(BaseModel):
    """Aggregated metrics for one day.

    `metaAdSpend` and `tiktokAdSpend` are kept for existing dashboard clients;
    `adSpendByProvider` carries the same values keyed by provider id.
    """

    model_config = ConfigDict(populate_by_name=True)

    day: date = Field(alias="date", description="Calendar day the metrics cover")
    revenue: Decimal = Field(description="Sum of paid order totals for the day")
    orders: int = Field(description="Number of paid orders for the day")
    meta_ad_spend: Decimal = Field(alias="metaAdSpend")
    tiktok_ad_spend: Decimal = Field(alias="tiktokAdSpend")
    ad_spend_by_provider: Dict[str, Decimal] = Field(alias="adSpendByProvider")
    degraded_providers: Dict[str, str] = Field(
        default_factory=dict,
        alias="degradedProviders",
        description="Providers whose spend is a zero fallback, with a reason code",
    )

    @field_serializer("revenue", "meta_ad_spend", "tiktok_ad_spend")
    def _money_to_float(self, value: Decimal) -> float:
        return float(value)

    @field_serializer("ad_spend_by_provider")
    def _spend_map_to_float(self, value: Dict[str, Decimal]) -> Dict[str, float]:
        return {provider: float(spend) for provider, spend in value.items()}

    @classmethod
    def from_metrics(cls, metrics: AggregatedMetrics) -> "ProfitDataResponse":
        spend = metrics.ad_spend_by_provider
        return cls(
            day=metrics.date,
            revenue=metrics.revenue,
            orders=metrics.orders,
            meta_ad_spend=spend.get(META_PROVIDER_ID, Decimal("0")),
            tiktok_ad_spend=spend.get(TIKTOK_PROVIDER_ID, Decimal("0")),
            ad_spend_by_provider=dict(spend),
            degraded_providers=dict(metrics.degraded_providers),
        )


class CostAssumptionsIn(BaseModel):
    """User-editable cost settings, owned by the dashboard session."""

    model_config = ConfigDict(populate_by_name=True)

    unit_cogs: Decimal = Field(DEFAULT_UNIT_COGS, ge=0, alias="unitCOGS", description="Cost of goods per order")
    unit_shipping: Decimal = Field(DEFAULT_UNIT_SHIPPING, ge=0, alias="unitShipping", description="Shipping cost per order")
    monthly_fixed_costs: Decimal = Field(
        DEFAULT_MONTHLY_FIXED_COSTS, ge=0, alias="monthlyFixedCosts", description="Fixed costs per month"
    )

    @field_serializer("unit_cogs", "unit_shipping", "monthly_fixed_costs")
    def _money_to_float(self, value: Decimal) -> float:
        return float(value)

    def to_domain(self) -> CostAssumptions:
        return CostAssumptions(
            unit_cogs=self.unit_cogs,
            unit_shipping=self.unit_shipping,
            monthly_fixed_costs=self.monthly_fixed_costs,
        )


class MetricsIn(BaseModel):
    """Aggregated metrics as returned by /api/profit-data."""

    model_config = ConfigDict(populate_by_name=True)

    day: Optional[date] = Field(None, alias="date", description="Day the metrics cover, if known")
    revenue: Decimal = Field(ge=0)
    orders: int = Field(ge=0)
    ad_spend_by_provider: Optional[Dict[str, condecimal(ge=0)]] = Field(None, alias="adSpendByProvider")
    meta_ad_spend: Optional[Decimal] = Field(None, ge=0, alias="metaAdSpend")
    tiktok_ad_spend: Optional[Decimal] = Field(None, ge=0, alias="tiktokAdSpend")

    def spend_by_provider(self) -> Dict[str, Decimal]:
        """Keyed spend; falls back to the two legacy fields when no map is sent."""
        if self.ad_spend_by_provider is not None:
            return dict(self.ad_spend_by_provider)
        spend = {}
        if self.meta_ad_spend is not None:
            spend[META_PROVIDER_ID] = self.meta_ad_spend
        if self.tiktok_ad_spend is not None:
            spend[TIKTOK_PROVIDER_ID] = self.tiktok_ad_spend
        return spend

    def to_domain(self) -> AggregatedMetrics:
        return AggregatedMetrics(
            date=self.day,
            revenue=self.revenue,
            orders=self.orders,
            ad_spend_by_provider=self.spend_by_provider(),
        )


class ProfitBreakdownRequest(BaseModel):
    """Body for /api/profit-breakdown."""

    metrics: MetricsIn
    costs: CostAssumptionsIn = Field(default_factory=CostAssumptionsIn)


class ProfitBreakdownResponse(BaseModel):
    """Derived profit figures, rounded to cents."""

    model_config = ConfigDict(populate_by_name=True)

    revenue: Decimal
    total_cogs: Decimal = Field(alias="totalCOGS")
    total_shipping: Decimal = Field(alias="totalShipping")
    total_ad_spend: Decimal = Field(alias="totalAdSpend")
    daily_fixed_costs: Decimal = Field(alias="dailyFixedCosts")
    net_profit: Decimal = Field(alias="netProfit")
    orders: int
    is_profit: bool = Field(alias="isProfit")

    @field_serializer(
        "revenue", "total_cogs", "total_shipping", "total_ad_spend", "daily_fixed_costs", "net_profit"
    )
    def _money_to_float(self, value: Decimal) -> float:
        return float(value)

    @classmethod
    def from_breakdown(cls, breakdown: ProfitBreakdown) -> "ProfitBreakdownResponse":
        return cls(is_profit=breakdown.is_profit, **breakdown.as_dict())
