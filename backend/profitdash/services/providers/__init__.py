"""
Provider Adapters
=================

One adapter per upstream data source, each turning a calendar day into a
provider-specific request and the response into a normalized metric.

- shopify_orders.py: paid orders -> OrderMetrics (required)
- meta_spend.py: Meta Marketing API -> AdSpendMetrics
- tiktok_spend.py: TikTok Business API -> AdSpendMetrics

Usage:
    from profitdash.services.providers import ShopifyOrdersAdapter, ShopifyConfig

    adapter = ShopifyOrdersAdapter(ShopifyConfig(shop_domain=..., access_token=...))
    metrics = await adapter.fetch(date(2024, 1, 15))
"""

from profitdash.services.providers.base import (
    ProviderAdapter,
    ProviderRequest,
    day_interval,
    parse_date_key,
)
from profitdash.services.providers.config import MetaConfig, ShopifyConfig, TikTokConfig
from profitdash.services.providers.errors import (
    AggregationError,
    ProviderConfigurationError,
    ProviderError,
    ProviderTransportError,
)
from profitdash.services.providers.meta_spend import MetaSpendAdapter
from profitdash.services.providers.shopify_orders import ShopifyOrdersAdapter
from profitdash.services.providers.tiktok_spend import TikTokSpendAdapter

__all__ = [
    "ProviderAdapter",
    "ProviderRequest",
    "day_interval",
    "parse_date_key",
    "MetaConfig",
    "ShopifyConfig",
    "TikTokConfig",
    "AggregationError",
    "ProviderConfigurationError",
    "ProviderError",
    "ProviderTransportError",
    "MetaSpendAdapter",
    "ShopifyOrdersAdapter",
    "TikTokSpendAdapter",
]
