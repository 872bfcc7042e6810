"""TikTok ad spend adapter.

WHAT:
    Fetches advertiser-level spend for one day from the TikTok Business API
    integrated report endpoint.

WHY:
    Second ad provider. Like Meta, an empty report list is zero spend.

NOTES:
    - TikTok wraps every response in {"code", "message", "data"}; a non-zero
      code inside an HTTP 200 is still a failure.
    - `dimensions` and `metrics` are JSON-encoded list parameters.
    - Codes 40100 (rate limited) and 5xxxx (server side) are retried.

REFERENCES:
    - https://business-api.tiktok.com/portal/docs?id=1740302848100353
"""

import json
import logging
from datetime import date
from decimal import Decimal
from typing import Any, Dict

from ..metrics import AdSpendMetrics
from .base import HttpProviderAdapter, ProviderRequest, expect_type, parse_money
from .config import TikTokConfig
from .errors import ProviderConfigurationError, ProviderTransportError

logger = logging.getLogger(__name__)

TIKTOK_REPORT_URL = "https://business-api.tiktok.com/open_api/v1.3/report/integrated/get/"

TIKTOK_RATE_LIMITED_CODE = 40100


class TikTokSpendAdapter(HttpProviderAdapter):
    """Ad provider B: TikTok Business API reporting."""

    source = "tiktok"
    required = False
    log_tag = "[TIKTOK_ADAPTER]"

    def __init__(self, config: TikTokConfig, report_url: str = TIKTOK_REPORT_URL, **http_options):
        super().__init__(**http_options)
        self.config = config
        self.report_url = report_url

    @property
    def is_configured(self) -> bool:
        return self.config.is_configured

    def build_request(self, day: date) -> ProviderRequest:
        day_key = day.isoformat()
        return ProviderRequest(
            method="GET",
            url=self.report_url,
            headers={
                "Access-Token": self.config.access_token or "",
                "Content-Type": "application/json",
            },
            params={
                "advertiser_id": (self.config.advertiser_id or "").strip(),
                "service_type": "AUCTION",
                "report_type": "BASIC",
                "data_level": "AUCTION_ADVERTISER",
                "dimensions": json.dumps(["advertiser_id"], separators=(",", ":")),
                "metrics": json.dumps(["spend"], separators=(",", ":")),
                "start_date": day_key,
                "end_date": day_key,
            },
        )

    async def fetch(self, day: date) -> AdSpendMetrics:
        """Spend for `day`, zero when the report has no rows.

        Raises:
            ProviderConfigurationError: advertiser id or token missing/malformed
            ProviderTransportError: HTTP failure or non-zero API code
        """
        problems = self.config.problems()
        if problems:
            raise ProviderConfigurationError(self.source, problems)

        payload = await self._send(self.build_request(day))
        data = expect_type(self.source, payload.get("data") or {}, dict, "data")
        rows = expect_type(self.source, data.get("list") or [], list, "data.list")

        spend = Decimal("0")
        for row in rows:
            row = expect_type(self.source, row, dict, "report row")
            metrics = expect_type(self.source, row.get("metrics") or {}, dict, "row metrics")
            spend += parse_money(self.source, metrics.get("spend"), "report row")

        if not rows:
            logger.info(f"{self.log_tag} Empty report for {day.isoformat()} - reporting zero spend")
        else:
            logger.info(f"{self.log_tag} {day.isoformat()}: spend {spend}")
        return AdSpendMetrics(spend=spend)

    def _check_payload(self, payload: Dict[str, Any]) -> None:
        try:
            code = int(payload.get("code") or 0)
        except (TypeError, ValueError):
            code = -1
        if code == 0:
            return
        logger.error(
            f"{self.log_tag} API error code {code}: {payload.get('message')} "
            f"(request_id={payload.get('request_id')})"
        )
        raise ProviderTransportError(
            self.source,
            f"Reporting API returned error code {code}",
            status_code=200,
            retryable=code == TIKTOK_RATE_LIMITED_CODE or code >= 50000,
        )
