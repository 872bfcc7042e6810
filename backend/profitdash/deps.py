"""Dependency providers and settings management."""

from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from .services.aggregator import ProfitDataAggregator
from .services.providers import (
    MetaConfig,
    MetaSpendAdapter,
    ShopifyConfig,
    ShopifyOrdersAdapter,
    TikTokConfig,
    TikTokSpendAdapter,
)
from .services.providers.config import SHOPIFY_DEFAULT_API_VERSION


class Settings(BaseSettings):
    """Application settings loaded from environment or .env.

    Every provider credential is optional so the API always starts; a
    provider with missing values is reported by /health/providers and
    handled by the aggregation policy at request time.
    """

    BACKEND_CORS_ORIGINS: str = "http://localhost:3000"
    ENVIRONMENT: str = "development"

    # Orders provider (Shopify)
    SHOPIFY_SHOP_DOMAIN: Optional[str] = None
    SHOPIFY_ACCESS_TOKEN: Optional[str] = None
    SHOPIFY_API_VERSION: str = SHOPIFY_DEFAULT_API_VERSION

    # Ad provider A (Meta)
    META_AD_ACCOUNT_ID: Optional[str] = None
    META_ACCESS_TOKEN: Optional[str] = None
    META_API_VERSION: Optional[str] = None

    # Ad provider B (TikTok)
    TIKTOK_ADVERTISER_ID: Optional[str] = None
    TIKTOK_ACCESS_TOKEN: Optional[str] = None

    # Outbound fetch tuning
    PROVIDER_TIMEOUT_SECONDS: float = 30.0
    PROVIDER_MAX_RETRIES: int = 3
    PROVIDER_RETRY_BACKOFF_SECONDS: float = 1.0
    AD_PROVIDER_DEADLINE_SECONDS: float = 20.0

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    @property
    def cors_origins(self) -> List[str]:
        return [origin.strip() for origin in self.BACKEND_CORS_ORIGINS.split(",") if origin.strip()]

    def shopify_config(self) -> ShopifyConfig:
        return ShopifyConfig(
            shop_domain=self.SHOPIFY_SHOP_DOMAIN,
            access_token=self.SHOPIFY_ACCESS_TOKEN,
            api_version=self.SHOPIFY_API_VERSION,
        )

    def meta_config(self) -> MetaConfig:
        return MetaConfig(
            ad_account_id=self.META_AD_ACCOUNT_ID,
            access_token=self.META_ACCESS_TOKEN,
            api_version=self.META_API_VERSION,
        )

    def tiktok_config(self) -> TikTokConfig:
        return TikTokConfig(
            advertiser_id=self.TIKTOK_ADVERTISER_ID,
            access_token=self.TIKTOK_ACCESS_TOKEN,
        )


@lru_cache()
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()  # type: ignore[call-arg]


def build_aggregator(settings: Settings) -> ProfitDataAggregator:
    """Wire one adapter per provider from explicit config objects."""
    retry_options = {
        "timeout": settings.PROVIDER_TIMEOUT_SECONDS,
        "max_retries": settings.PROVIDER_MAX_RETRIES,
        "backoff_seconds": settings.PROVIDER_RETRY_BACKOFF_SECONDS,
    }
    return ProfitDataAggregator(
        orders_adapter=ShopifyOrdersAdapter(settings.shopify_config(), **retry_options),
        ad_adapters=[
            MetaSpendAdapter(settings.meta_config(), **retry_options),
            TikTokSpendAdapter(settings.tiktok_config(), **retry_options),
        ],
        ad_deadline_seconds=settings.AD_PROVIDER_DEADLINE_SECONDS,
    )


@lru_cache()
def get_aggregator() -> ProfitDataAggregator:
    """FastAPI dependency: one aggregator per process, built from settings.

    Adapters hold no per-request state. The Meta SDK session is initialised
    once, on the first Meta fetch. Tests override this dependency.
    """
    return build_aggregator(get_settings())
