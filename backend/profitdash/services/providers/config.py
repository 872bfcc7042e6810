"""Per-provider connection settings.

WHAT: Explicit config objects handed to each adapter at construction
WHY: Adapters never read the environment. A provider with missing or malformed
     credentials is "unconfigured", which the aggregator and the health check
     can detect without making a network call.

REFERENCES:
  - profitdash/deps.py: Builds these from Settings
  - profitdash/routers/health.py: /health/providers reports `problems()` per provider
"""

from dataclasses import dataclass
from typing import List, Optional

SHOPIFY_DEFAULT_API_VERSION = "2024-07"


def _blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


@dataclass(frozen=True)
class ShopifyConfig:
    """Orders provider: shop domain + Admin API token."""
    shop_domain: Optional[str] = None
    access_token: Optional[str] = None
    api_version: str = SHOPIFY_DEFAULT_API_VERSION

    @property
    def normalized_domain(self) -> str:
        """Strip scheme and trailing slash ("https://x.myshopify.com/" -> "x.myshopify.com")."""
        domain = (self.shop_domain or "").strip()
        for prefix in ("https://", "http://"):
            if domain.lower().startswith(prefix):
                domain = domain[len(prefix):]
        return domain.rstrip("/")

    def problems(self) -> List[str]:
        problems = []
        if _blank(self.shop_domain):
            problems.append("SHOPIFY_SHOP_DOMAIN is missing")
        elif "/" in self.normalized_domain or "." not in self.normalized_domain:
            problems.append("SHOPIFY_SHOP_DOMAIN is malformed")
        if _blank(self.access_token):
            problems.append("SHOPIFY_ACCESS_TOKEN is missing")
        return problems

    @property
    def is_configured(self) -> bool:
        return not self.problems()


@dataclass(frozen=True)
class MetaConfig:
    """Ad provider A: Meta ad account id + Marketing API token."""
    ad_account_id: Optional[str] = None
    access_token: Optional[str] = None
    api_version: Optional[str] = None  # None = SDK default

    @property
    def account_path(self) -> str:
        """Account id in Graph API form ("123" and "act_123" both -> "act_123")."""
        raw = (self.ad_account_id or "").strip()
        if raw.startswith("act_"):
            raw = raw[len("act_"):]
        return f"act_{raw}"

    def problems(self) -> List[str]:
        problems = []
        if _blank(self.ad_account_id):
            problems.append("META_AD_ACCOUNT_ID is missing")
        elif not self.account_path[len("act_"):].isdigit():
            problems.append("META_AD_ACCOUNT_ID is malformed")
        if _blank(self.access_token):
            problems.append("META_ACCESS_TOKEN is missing")
        return problems

    @property
    def is_configured(self) -> bool:
        return not self.problems()


@dataclass(frozen=True)
class TikTokConfig:
    """Ad provider B: TikTok advertiser id + Business API token."""
    advertiser_id: Optional[str] = None
    access_token: Optional[str] = None

    def problems(self) -> List[str]:
        problems = []
        if _blank(self.advertiser_id):
            problems.append("TIKTOK_ADVERTISER_ID is missing")
        elif not self.advertiser_id.strip().isdigit():
            problems.append("TIKTOK_ADVERTISER_ID is malformed")
        if _blank(self.access_token):
            problems.append("TIKTOK_ACCESS_TOKEN is missing")
        return problems

    @property
    def is_configured(self) -> bool:
        return not self.problems()
