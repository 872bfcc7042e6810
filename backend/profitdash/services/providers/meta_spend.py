"""Meta ad spend adapter.

WHAT:
    Fetches account-level spend for a single day through the Facebook Business
    SDK (Marketing API insights edge on the ad account).

WHY:
    Supplementary signal for the profit figure. An empty insights list means
    the account did not deliver that day: that is zero spend, not an error.

NOTES:
    - The SDK is synchronous (requests-based); calls run in a worker thread so
      the other provider branches keep making progress.
    - Insights are requested at `level=account` with `time_range` since == until.
      The SDK JSON-encodes `time_range` into the query string.
    - Dates are sent as YYYY-MM-DD, which is what the Graph API expects today.

REFERENCES:
    - https://developers.facebook.com/docs/marketing-api/insights
"""

import asyncio
import logging
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional

import requests
from facebook_business.adobjects.adaccount import AdAccount
from facebook_business.adobjects.adsinsights import AdsInsights
from facebook_business.api import FacebookAdsApi
from facebook_business.exceptions import FacebookRequestError

from ..metrics import AdSpendMetrics
from .base import ProviderAdapter, parse_money
from .config import MetaConfig
from .errors import ProviderConfigurationError, ProviderTransportError

logger = logging.getLogger(__name__)


class MetaSpendAdapter(ProviderAdapter):
    """Ad provider A: Meta Marketing API.

    Usage:
        adapter = MetaSpendAdapter(MetaConfig(ad_account_id="123", access_token="EAAB..."))
        metrics = await adapter.fetch(date(2024, 1, 15))
    """

    source = "meta"
    required = False
    log_tag = "[META_ADAPTER]"

    def __init__(self, config: MetaConfig, **options):
        super().__init__(**options)
        self.config = config
        self._api: Optional[FacebookAdsApi] = None

    @property
    def is_configured(self) -> bool:
        return self.config.is_configured

    def build_request(self, day: date) -> Dict[str, Any]:
        """Insights call parameters for one day of account-level spend."""
        day_key = day.isoformat()
        return {
            "account_id": self.config.account_path,
            "fields": [AdsInsights.Field.spend],
            "params": {
                "level": "account",
                "time_range": {"since": day_key, "until": day_key},
            },
        }

    async def fetch(self, day: date) -> AdSpendMetrics:
        """Spend for `day`, zero when Meta reports no rows.

        Raises:
            ProviderConfigurationError: account id or token missing/malformed
            ProviderTransportError: Graph API error or network failure
        """
        problems = self.config.problems()
        if problems:
            raise ProviderConfigurationError(self.source, problems)

        request = self.build_request(day)
        rows = await self._run_with_retries(lambda: self._fetch_once(request))

        spend = sum(
            (parse_money(self.source, row.get("spend"), f"{request['account_id']} insights") for row in rows),
            Decimal("0"),
        )
        if not rows:
            logger.info(f"{self.log_tag} No insights for {day.isoformat()} - reporting zero spend")
        else:
            logger.info(f"{self.log_tag} {day.isoformat()}: spend {spend}")
        return AdSpendMetrics(spend=spend)

    async def _fetch_once(self, request: Dict[str, Any]) -> List[Dict[str, Any]]:
        try:
            return await asyncio.to_thread(self._get_insights, request)
        except FacebookRequestError as e:
            status = e.http_status()
            logger.error(
                f"{self.log_tag} API error: HTTP {status}, "
                f"Code {e.api_error_code()}, Message: {e.api_error_message()}"
            )
            raise ProviderTransportError(
                self.source,
                "Marketing API returned an error response",
                status_code=status,
                retryable=bool(e.api_transient_error()) or status == 429 or (status or 0) >= 500,
            ) from e
        except requests.RequestException as e:
            raise ProviderTransportError(
                self.source, f"Request error ({type(e).__name__})", retryable=True
            ) from e

    def _get_insights(self, request: Dict[str, Any]) -> List[Dict[str, Any]]:
        account = AdAccount(request["account_id"], api=self._get_api())
        insights = account.get_insights(fields=request["fields"], params=request["params"])
        return [dict(insight) for insight in insights]

    def _get_api(self) -> FacebookAdsApi:
        if self._api is None:
            self._api = FacebookAdsApi.init(
                access_token=self.config.access_token,
                api_version=self.config.api_version,
                timeout=self.timeout,
                crash_log=False,
            )
        return self._api
