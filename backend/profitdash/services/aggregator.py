"""
Profit Data Aggregator
======================

Fans out one request per provider for the same day, joins them, and merges
the results into a single AggregatedMetrics record.

WHAT: Concurrent fetch of orders + every ad provider
WHY: The dashboard needs revenue, orders and spend for one day in one call

Failure policy (partial-tolerant):
- Orders provider fails (transport or configuration) -> AggregationError.
  Revenue is the primary signal; a profit figure without it is meaningless.
- An ad provider fails (for any reason), times out or is not configured ->
  its spend is 0 and it is listed in `degraded_providers` with a reason code.
  The failure is logged server-side; no upstream detail reaches the client.
- An unexpected (non-provider) error in the orders branch propagates as is.
- Ad branches are bounded by `ad_deadline_seconds`; on expiry the branch is
  cancelled and degrades to zero. The orders branch is bounded by its own
  per-request timeout and retry budget.
- Nothing is retried at this level. Each adapter retries on its own.

Branches share no mutable state; results are merged only after every branch
has settled.

References:
- profitdash/services/providers/: adapters
- profitdash/routers/profit_data.py: maps AggregationError to 500/503
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Dict, Optional, Sequence

from profitdash.services.metrics import AggregatedMetrics, OrderMetrics
from profitdash.services.providers.base import ProviderAdapter
from profitdash.services.providers.errors import (
    AggregationError,
    ProviderConfigurationError,
    ProviderError,
)

logger = logging.getLogger(__name__)

DEGRADED_UNCONFIGURED = "unconfigured"
DEGRADED_UNAVAILABLE = "unavailable"
DEGRADED_TIMEOUT = "timeout"


@dataclass
class AdSpendOutcome:
    """Settled result of one ad provider branch."""
    source: str
    spend: Decimal
    degraded_reason: Optional[str] = None


class ProfitDataAggregator:
    """Runs all provider adapters for one day and merges their results.

    Usage:
        aggregator = ProfitDataAggregator(orders_adapter, [meta_adapter, tiktok_adapter])
        metrics = await aggregator.aggregate(date(2024, 1, 15))
    """

    def __init__(
        self,
        orders_adapter: ProviderAdapter,
        ad_adapters: Sequence[ProviderAdapter] = (),
        ad_deadline_seconds: Optional[float] = None,
    ):
        sources = [a.source for a in ad_adapters]
        if len(set(sources)) != len(sources):
            raise ValueError(f"Duplicate ad provider ids: {sources}")
        self.orders_adapter = orders_adapter
        self.ad_adapters = list(ad_adapters)
        self.ad_deadline_seconds = ad_deadline_seconds

    @property
    def provider_ids(self) -> list:
        return [self.orders_adapter.source] + [a.source for a in self.ad_adapters]

    async def aggregate(self, day: date) -> AggregatedMetrics:
        """Fetch and merge all provider metrics for `day`.

        Raises:
            AggregationError: the orders provider failed or is not configured
        """
        logger.info(f"[AGGREGATOR] Fetching {self.provider_ids} for {day.isoformat()}")

        results = await asyncio.gather(
            self.orders_adapter.fetch(day),
            *(self._fetch_ad_spend(adapter, day) for adapter in self.ad_adapters),
            return_exceptions=True,
        )
        orders_result, ad_results = results[0], results[1:]

        if isinstance(orders_result, ProviderError):
            logger.error(f"[AGGREGATOR] Orders provider failed for {day.isoformat()}: {orders_result}")
            raise AggregationError(orders_result) from orders_result
        # Ad branches never raise; anything left here is a bug in the orders branch
        if isinstance(orders_result, BaseException):
            raise orders_result

        order_metrics: OrderMetrics = orders_result
        ad_spend: Dict[str, Decimal] = {}
        degraded: Dict[str, str] = {}
        for outcome in ad_results:
            ad_spend[outcome.source] = outcome.spend
            if outcome.degraded_reason:
                degraded[outcome.source] = outcome.degraded_reason

        metrics = AggregatedMetrics(
            date=day,
            revenue=order_metrics.revenue_total,
            orders=order_metrics.order_count,
            ad_spend_by_provider=ad_spend,
            degraded_providers=degraded,
        )
        spend_summary = ", ".join(f"{k}={v}" for k, v in ad_spend.items()) or "none"
        logger.info(
            f"[AGGREGATOR] {day.isoformat()}: revenue={metrics.revenue} orders={metrics.orders} "
            f"ad_spend=({spend_summary}) degraded={degraded or 'none'}"
        )
        return metrics

    async def _fetch_ad_spend(self, adapter: ProviderAdapter, day: date) -> AdSpendOutcome:
        """Run one ad branch; provider failures degrade to zero spend."""
        try:
            if self.ad_deadline_seconds:
                metrics = await asyncio.wait_for(adapter.fetch(day), timeout=self.ad_deadline_seconds)
            else:
                metrics = await adapter.fetch(day)
            return AdSpendOutcome(source=adapter.source, spend=metrics.spend)
        except ProviderConfigurationError as e:
            logger.warning(f"[AGGREGATOR] {adapter.source} skipped: {e}")
            return AdSpendOutcome(adapter.source, Decimal("0"), DEGRADED_UNCONFIGURED)
        except ProviderError as e:
            logger.warning(f"[AGGREGATOR] {adapter.source} unavailable, using zero spend: {e}")
            return AdSpendOutcome(adapter.source, Decimal("0"), DEGRADED_UNAVAILABLE)
        except asyncio.TimeoutError:
            logger.warning(
                f"[AGGREGATOR] {adapter.source} exceeded {self.ad_deadline_seconds}s deadline, "
                f"using zero spend"
            )
            return AdSpendOutcome(adapter.source, Decimal("0"), DEGRADED_TIMEOUT)
        except Exception as e:
            logger.exception(f"[AGGREGATOR] {adapter.source} failed unexpectedly, using zero spend: {type(e).__name__}")
            return AdSpendOutcome(adapter.source, Decimal("0"), DEGRADED_UNAVAILABLE)
