"""
Telemetry Module
================

Observability for the profit API.

Components:
- sentry.py: Error tracking (fatal aggregation failures, unhandled errors)

Logging itself is plain `logging` with bracketed component tags
([SHOPIFY_ADAPTER], [AGGREGATOR], [PROFIT_DATA], ...).

Usage:
    from profitdash.telemetry import init_observability, capture_exception

    init_observability()  # once, in create_app()
"""

from profitdash.telemetry.sentry import capture_exception, init_sentry


def init_observability() -> dict:
    """
    Initialize all observability tools.

    Returns:
        Dict with status of each tool initialization: {"sentry": True/False}
    """
    return {
        "sentry": init_sentry(),
    }


__all__ = [
    "init_observability",
    "init_sentry",
    "capture_exception",
]
