"""Shopify orders adapter.

WHAT:
    Fetches paid orders created within one day from the Shopify Admin GraphQL
    API and reduces them to revenue + order count.
    - Half-open UTC interval [day, day + 1)
    - Only orders with financial_status "paid"
    - Cursor-based pagination (250 orders per page)
    - Amounts arrive as strings and are summed as Decimal

WHY:
    Orders are the primary signal of the dashboard. This is the one provider
    whose failure aborts the whole aggregation.

REFERENCES:
    - Shopify GraphQL Admin API: https://shopify.dev/docs/api/admin-graphql
    - Search syntax: https://shopify.dev/docs/api/usage/search-syntax
    - Pagination: https://shopify.dev/docs/api/usage/pagination-graphql
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from ..metrics import OrderMetrics
from .base import (
    HttpProviderAdapter,
    ProviderRequest,
    day_interval,
    expect_type,
    format_utc_timestamp,
    parse_money,
)
from .config import ShopifyConfig
from .errors import ProviderConfigurationError, ProviderTransportError

logger = logging.getLogger(__name__)

ORDERS_PAGE_SIZE = 250

# Safety net against a cursor that never terminates
MAX_PAGES = 200

ORDERS_QUERY = """
query DailyPaidOrders($cursor: String, $limit: Int!, $query: String!) {
    orders(first: $limit, after: $cursor, query: $query, sortKey: CREATED_AT) {
        edges {
            node {
                id
                createdAt
                totalPriceSet {
                    shopMoney {
                        amount
                        currencyCode
                    }
                }
            }
        }
        pageInfo {
            hasNextPage
            endCursor
        }
    }
}
"""


def build_orders_search_query(day: date) -> str:
    """Shopify search string selecting paid orders created within `day` (UTC)."""
    start, end = day_interval(day)
    return (
        f"created_at:>='{format_utc_timestamp(start)}' "
        f"AND created_at:<'{format_utc_timestamp(end)}' "
        f"AND financial_status:paid"
    )


class ShopifyOrdersAdapter(HttpProviderAdapter):
    """Orders provider backed by Shopify Admin GraphQL.

    Usage:
        adapter = ShopifyOrdersAdapter(ShopifyConfig(shop_domain="x.myshopify.com", access_token="shpat_x"))
        metrics = await adapter.fetch(date(2024, 1, 15))
    """

    source = "shopify"
    required = True
    log_tag = "[SHOPIFY_ADAPTER]"

    def __init__(self, config: ShopifyConfig, **http_options):
        super().__init__(**http_options)
        self.config = config

    @property
    def is_configured(self) -> bool:
        return self.config.is_configured

    @property
    def endpoint(self) -> str:
        return (
            f"https://{self.config.normalized_domain}/admin/api/"
            f"{self.config.api_version}/graphql.json"
        )

    def build_request(self, day: date, cursor: Optional[str] = None) -> ProviderRequest:
        """Build the GraphQL request for one page of the day's paid orders."""
        return ProviderRequest(
            method="POST",
            url=self.endpoint,
            headers={
                "X-Shopify-Access-Token": self.config.access_token or "",
                "Content-Type": "application/json",
            },
            json={
                "query": ORDERS_QUERY,
                "variables": {
                    "cursor": cursor,
                    "limit": ORDERS_PAGE_SIZE,
                    "query": build_orders_search_query(day),
                },
            },
        )

    async def fetch(self, day: date) -> OrderMetrics:
        """Sum paid order totals created within `day`.

        Raises:
            ProviderConfigurationError: shop domain or token missing/malformed
            ProviderTransportError: non-success response, GraphQL errors, network failure
        """
        problems = self.config.problems()
        if problems:
            raise ProviderConfigurationError(self.source, problems)

        revenue = Decimal("0")
        count = 0
        cursor = None

        for page in range(1, MAX_PAGES + 1):
            payload = await self._send(self.build_request(day, cursor))
            amounts, cursor = self._parse_page(payload)
            revenue += sum(amounts, Decimal("0"))
            count += len(amounts)

            if cursor is None:
                break
        else:
            logger.warning(f"{self.log_tag} Stopped after {MAX_PAGES} pages for {day.isoformat()}")

        logger.info(
            f"{self.log_tag} {day.isoformat()}: {count} paid orders, revenue {revenue} "
            f"({page} page{'s' if page != 1 else ''})"
        )
        return OrderMetrics(revenue_total=revenue, order_count=count)

    def _check_payload(self, payload: Dict[str, Any]) -> None:
        errors = payload.get("errors")
        if not errors:
            return
        if not isinstance(errors, list):
            errors = [errors]
        messages = [e.get("message", str(e)) if isinstance(e, dict) else str(e) for e in errors]
        logger.error(f"{self.log_tag} GraphQL errors: {messages}")
        throttled = any("throttled" in m.lower() for m in messages)
        raise ProviderTransportError(
            self.source,
            "GraphQL request was throttled" if throttled else "GraphQL request failed",
            status_code=200,
            retryable=throttled,
        )

    def _parse_page(self, payload: Dict[str, Any]) -> Tuple[List[Decimal], Optional[str]]:
        data = expect_type(self.source, payload.get("data") or {}, dict, "data")
        orders = data.get("orders")
        if orders is None:
            raise ProviderTransportError(self.source, "Response is missing the orders connection")
        expect_type(self.source, orders, dict, "data.orders")

        amounts = []
        for edge in expect_type(self.source, orders.get("edges") or [], list, "orders.edges"):
            edge = expect_type(self.source, edge, dict, "order edge")
            node = expect_type(self.source, edge.get("node") or {}, dict, "order node")
            price_set = expect_type(self.source, node.get("totalPriceSet") or {}, dict, "totalPriceSet")
            shop_money = expect_type(self.source, price_set.get("shopMoney") or {}, dict, "shopMoney")
            amounts.append(parse_money(self.source, shop_money.get("amount"), f"order {node.get('id')}"))

        page_info = expect_type(self.source, orders.get("pageInfo") or {}, dict, "pageInfo")
        next_cursor = page_info.get("endCursor") if page_info.get("hasNextPage") else None
        return amounts, next_cursor

