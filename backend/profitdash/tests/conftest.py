"""Pytest configuration for profitdash tests

WHAT: Shared fixtures for adapter, aggregator and HTTP endpoint tests
WHY: Keeps every test offline: upstream providers are replaced by fake
     adapters or httpx.MockTransport, and settings come from the test, not
     from the developer's environment.
REFERENCES:
    - profitdash/main.py: FastAPI application factory
    - profitdash/deps.py: Settings and aggregator dependency
    - profitdash/services/aggregator.py: Aggregation policy
"""

import asyncio
import os
import sys
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import List, Optional

import pytest
from fastapi.testclient import TestClient

# Ensure backend is in path
BACKEND_ROOT = Path(__file__).resolve().parents[2]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

# Provider credentials must come from the tests, never from the shell
for _name in (
    "SHOPIFY_SHOP_DOMAIN",
    "SHOPIFY_ACCESS_TOKEN",
    "META_AD_ACCOUNT_ID",
    "META_ACCESS_TOKEN",
    "TIKTOK_ADVERTISER_ID",
    "TIKTOK_ACCESS_TOKEN",
    "SENTRY_DSN",
):
    os.environ.pop(_name, None)

from profitdash.deps import Settings, get_aggregator, get_settings
from profitdash.services.aggregator import ProfitDataAggregator
from profitdash.services.metrics import AdSpendMetrics, OrderMetrics
from profitdash.services.providers.base import ProviderAdapter


# ============================================================================
# Fake adapters
# ============================================================================

class FakeAdapter(ProviderAdapter):
    """In-memory adapter recording every day it was asked for."""

    def __init__(self, source: str, result=None, error: Optional[Exception] = None,
                 required: bool = False, delay: float = 0.0):
        super().__init__(max_retries=1, backoff_seconds=0)
        self.source = source
        self.required = required
        self.result = result
        self.error = error
        self.delay = delay
        self.calls: List[date] = []

    @property
    def is_configured(self) -> bool:
        return True

    async def fetch(self, day: date):
        self.calls.append(day)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def sample_day() -> date:
    return date(2024, 1, 15)


@pytest.fixture
def orders_adapter() -> FakeAdapter:
    return FakeAdapter(
        "shopify",
        result=OrderMetrics(revenue_total=Decimal("5000.00"), order_count=100),
        required=True,
    )


@pytest.fixture
def meta_adapter() -> FakeAdapter:
    return FakeAdapter("meta", result=AdSpendMetrics(spend=Decimal("300.00")))


@pytest.fixture
def tiktok_adapter() -> FakeAdapter:
    return FakeAdapter("tiktok", result=AdSpendMetrics(spend=Decimal("150.00")))


@pytest.fixture
def make_adapter():
    """Factory for one-off fake adapters."""
    return FakeAdapter


@pytest.fixture
def aggregator(orders_adapter, meta_adapter, tiktok_adapter) -> ProfitDataAggregator:
    return ProfitDataAggregator(orders_adapter, [meta_adapter, tiktok_adapter], ad_deadline_seconds=1.0)


# ============================================================================
# Application & Client Fixtures
# ============================================================================

@pytest.fixture
def settings_factory():
    """Build Settings without reading the environment or a .env file."""
    def _make(**overrides) -> Settings:
        return Settings(_env_file=None, **overrides)
    return _make


@pytest.fixture
def app():
    from profitdash.main import create_app

    application = create_app()
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
def client(app, aggregator) -> TestClient:
    """Test client whose aggregator uses the fake adapters above."""
    app.dependency_overrides[get_aggregator] = lambda: aggregator
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    get_settings.cache_clear()
    get_aggregator.cache_clear()
    yield
    get_settings.cache_clear()
    get_aggregator.cache_clear()
