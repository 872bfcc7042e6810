"""Tests for TikTokSpendAdapter (httpx.MockTransport)."""

import asyncio
from datetime import date
from decimal import Decimal

import httpx
import pytest

from profitdash.services.providers.config import TikTokConfig
from profitdash.services.providers.errors import ProviderConfigurationError, ProviderTransportError
from profitdash.services.providers.tiktok_spend import TIKTOK_REPORT_URL, TikTokSpendAdapter

DAY = date(2024, 1, 15)
CONFIG = TikTokConfig(advertiser_id="7001234567890", access_token="tt_test")


def _report(rows, code=0, message="OK"):
    return {"code": code, "message": message, "request_id": "req-1", "data": {"list": rows, "page_info": {}}}


def _adapter(handler, config=CONFIG, **options) -> TikTokSpendAdapter:
    options.setdefault("backoff_seconds", 0)
    return TikTokSpendAdapter(config, transport=httpx.MockTransport(handler), **options)


def test_request_parameters():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["url"] = str(request.url.copy_with(query=None))
        seen["params"] = dict(request.url.params)
        seen["token"] = request.headers.get("Access-Token")
        return httpx.Response(200, json=_report([]))

    asyncio.run(_adapter(handler).fetch(DAY))

    assert seen["method"] == "GET"
    assert seen["url"] == TIKTOK_REPORT_URL
    assert seen["token"] == "tt_test"
    assert seen["params"]["advertiser_id"] == "7001234567890"
    assert seen["params"]["data_level"] == "AUCTION_ADVERTISER"
    assert seen["params"]["start_date"] == "2024-01-15"
    assert seen["params"]["end_date"] == "2024-01-15"
    assert seen["params"]["metrics"] == '["spend"]'
    assert seen["params"]["dimensions"] == '["advertiser_id"]'


def test_sums_report_rows():
    rows = [
        {"dimensions": {"advertiser_id": "7001234567890"}, "metrics": {"spend": "100.25"}},
        {"dimensions": {"advertiser_id": "7001234567890"}, "metrics": {"spend": "49.75"}},
    ]

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=_report(rows))

    metrics = asyncio.run(_adapter(handler).fetch(DAY))

    assert metrics.spend == Decimal("150.00")


def test_empty_report_is_zero_spend():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=_report([]))

    assert asyncio.run(_adapter(handler).fetch(DAY)).spend == Decimal("0")


def test_non_zero_code_raises():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=_report([], code=40105, message="Access token is incorrect"))

    with pytest.raises(ProviderTransportError) as exc_info:
        asyncio.run(_adapter(handler).fetch(DAY))

    assert "40105" in exc_info.value.message
    assert not exc_info.value.retryable


def test_rate_limited_code_is_retried():
    responses = iter([
        httpx.Response(200, json=_report([], code=40100, message="Too many requests")),
        httpx.Response(200, json=_report([{"metrics": {"spend": "12.00"}}])),
    ])

    def handler(request: httpx.Request) -> httpx.Response:
        return next(responses)

    assert asyncio.run(_adapter(handler, max_retries=2).fetch(DAY)).spend == Decimal("12.00")


def test_http_error_raises_with_status():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, text="Bad Gateway")

    with pytest.raises(ProviderTransportError) as exc_info:
        asyncio.run(_adapter(handler, max_retries=1).fetch(DAY))

    assert exc_info.value.status_code == 502


def test_unconfigured_raises():
    with pytest.raises(ProviderConfigurationError) as exc_info:
        asyncio.run(TikTokSpendAdapter(TikTokConfig(access_token="tt_test")).fetch(DAY))

    assert exc_info.value.problems == ["TIKTOK_ADVERTISER_ID is missing"]


@pytest.mark.parametrize(
    "body",
    [
        ["not", "an", "object"],
        {"code": 0, "data": {"list": {"metrics": {"spend": "1.00"}}}},
        {"code": 0, "data": {"list": ["row"]}},
        {"code": 0, "data": "nope"},
    ],
)
def test_malformed_body_raises_typed_error(body):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=body)

    with pytest.raises(ProviderTransportError, match="Malformed response"):
        asyncio.run(_adapter(handler).fetch(DAY))
