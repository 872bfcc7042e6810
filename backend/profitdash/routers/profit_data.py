"""Profit data endpoints.

WHAT: REST API behind the daily profit dashboard
WHY: The dashboard picks a day, gets that day's revenue, orders and ad spend,
     and applies its own (session-scoped) cost assumptions.

REFERENCES:
  - profitdash/services/aggregator.py: Fan-out/fan-in across providers
  - profitdash/services/profit_calculator.py: Pure profit breakdown
  - profitdash/schemas.py: Request/response payloads

Status codes for /api/profit-data:
  - 400: date missing or not a real YYYY-MM-DD calendar day
  - 405: any method other than GET or HEAD (framework)
  - 503: orders provider not configured (deployment problem)
  - 500: orders provider failed at runtime (generic message only)
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from profitdash import schemas
from profitdash.deps import get_aggregator
from profitdash.services.aggregator import ProfitDataAggregator
from profitdash.services.profit_calculator import CostAssumptions, compute_breakdown
from profitdash.services.providers import AggregationError, parse_date_key
from profitdash.telemetry import capture_exception

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api",
    tags=["Profit"],
)


@router.head("/profit-data", include_in_schema=False)
@router.get(
    "/profit-data",
    response_model=schemas.ProfitDataResponse,
    responses={
        400: {"model": schemas.ErrorResponse, "description": "Missing or invalid date"},
        500: {"model": schemas.ErrorResponse, "description": "Orders provider failed"},
        503: {"model": schemas.ErrorResponse, "description": "Orders provider not configured"},
    },
    summary="Get aggregated metrics for one day",
    description="""
    Fetch revenue and order count from the orders provider and spend from every
    ad provider for a single calendar day, concurrently.

    Ad providers that fail, time out or are not configured report zero spend
    and are listed in `degradedProviders`. Profit is not computed here: it
    depends on cost assumptions that live in the dashboard session.
    """,
)
async def get_profit_data(
    date_param: Optional[str] = Query(None, alias="date", description="Day to fetch (YYYY-MM-DD)"),
    aggregator: ProfitDataAggregator = Depends(get_aggregator),
):
    if not date_param:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Date parameter required")

    try:
        day = parse_date_key(date_param)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid date parameter, expected YYYY-MM-DD",
        )

    try:
        metrics = await aggregator.aggregate(day)
    except AggregationError as e:
        if e.is_configuration_error:
            logger.error(f"[PROFIT_DATA] Orders provider not configured: {e.cause}")
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Orders provider is not configured",
            )
        logger.error(f"[PROFIT_DATA] Aggregation failed for {day.isoformat()}: {e.cause}")
        capture_exception(e, extra={"date": day.isoformat(), "provider": e.cause.source})
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch data",
        )

    return schemas.ProfitDataResponse.from_metrics(metrics)


@router.post(
    "/profit-breakdown",
    response_model=schemas.ProfitBreakdownResponse,
    summary="Compute a profit breakdown",
    description="""
    Apply cost assumptions to a day's metrics. Stateless: the cost assumptions
    are taken from the request body and nothing is stored.
    """,
)
def post_profit_breakdown(payload: schemas.ProfitBreakdownRequest):
    breakdown = compute_breakdown(payload.metrics.to_domain(), payload.costs.to_domain())
    return schemas.ProfitBreakdownResponse.from_breakdown(breakdown)


@router.get(
    "/cost-defaults",
    response_model=schemas.CostAssumptionsIn,
    summary="Default cost assumptions",
    description="Starting values for the dashboard settings form.",
)
def get_cost_defaults():
    defaults = CostAssumptions()
    return schemas.CostAssumptionsIn(
        unit_cogs=defaults.unit_cogs,
        unit_shipping=defaults.unit_shipping,
        monthly_fixed_costs=defaults.monthly_fixed_costs,
    )
