"""
Sentry Error Tracking
=====================

Centralized error tracking for the profit API.

Related files:
- profitdash/main.py: Initializes Sentry in create_app()
- profitdash/routers/profit_data.py: Captures fatal aggregation failures

Environment Variables:
- SENTRY_DSN: Sentry project DSN (Sentry stays disabled when unset)
- ENVIRONMENT: Environment name (production, staging, development)
- RELEASE_VERSION: Release identifier (optional, set via CI/CD)

Upstream credentials never reach Sentry: send_default_pii is off and
provider errors carry only status codes and short messages.
"""

from __future__ import annotations

import logging
import os
from typing import Optional

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration

logger = logging.getLogger(__name__)


def get_sentry_dsn() -> Optional[str]:
    return os.environ.get("SENTRY_DSN") or None


def init_sentry() -> bool:
    """
    Initialize Sentry SDK for FastAPI.

    Returns:
        True if Sentry was initialized, False when no DSN is configured.
    """
    dsn = get_sentry_dsn()
    if not dsn:
        logger.info("[SENTRY] SENTRY_DSN not set - error tracking disabled")
        return False

    environment = os.environ.get("ENVIRONMENT", "development")

    try:
        sentry_sdk.init(
            dsn=dsn,
            environment=environment,
            integrations=[
                FastApiIntegration(transaction_style="endpoint"),
                LoggingIntegration(
                    level=logging.INFO,         # INFO+ as breadcrumbs
                    event_level=logging.ERROR,  # ERROR+ as events
                ),
            ],
            traces_sample_rate=0.1,
            send_default_pii=False,
            release=os.environ.get("RELEASE_VERSION"),
        )
        logger.info(f"[SENTRY] Initialized for {environment} environment")
        return True

    except Exception as e:
        logger.error(f"[SENTRY] Failed to initialize: {e}")
        return False


def capture_exception(exception: BaseException, extra: Optional[dict] = None) -> None:
    """
    Capture a handled exception to Sentry.

    Args:
        exception: The exception to capture
        extra: Additional context (e.g. {"date": "2024-01-15", "provider": "shopify"})
    """
    if not sentry_sdk.is_initialized():
        return

    with sentry_sdk.new_scope() as scope:
        for key, value in (extra or {}).items():
            scope.set_extra(key, value)
        sentry_sdk.capture_exception(exception)
