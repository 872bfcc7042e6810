"""
Provider Exceptions
===================

Typed failures raised by the provider adapters and the aggregator.

WHY THIS FILE EXISTS
--------------------
A daily profit figure is built from three remote services, and each of them
can fail in a different way:
- The adapter was never given credentials (deployment problem)
- The upstream answered with a non-success status or an error envelope
- The network call itself failed or timed out

Callers need to tell these apart. Zero spend is a valid answer for an empty
day, so adapters never return a default value on failure; they raise one of
these instead.

RELATED FILES
-------------
- profitdash/services/providers/base.py: Retry loop raises ProviderTransportError
- profitdash/services/aggregator.py: Wraps fatal failures in AggregationError
- profitdash/routers/profit_data.py: Maps these to HTTP status codes
"""

from typing import Optional


class ProviderError(Exception):
    """
    Base exception for all provider adapter failures.

    ATTRIBUTES:
        source: Provider id that failed ("shopify", "meta", "tiktok")
        status_code: Upstream HTTP status when the failure came from a response
    """

    def __init__(self, source: str, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.source = source
        self.message = message
        self.status_code = status_code

    def __str__(self) -> str:
        if self.status_code is not None:
            return f"[{self.source}] {self.message} (HTTP {self.status_code})"
        return f"[{self.source}] {self.message}"


class ProviderConfigurationError(ProviderError):
    """
    Required credentials or identifiers are missing or malformed.

    WHAT:
        Raised by an adapter before any network call when its config is unusable.

    WHY:
        A missing token is a deployment problem, not a transient outage.
        Retrying will not help and the operator needs a different message.
    """

    def __init__(self, source: str, problems: list):
        self.problems = list(problems)
        super().__init__(source, f"Provider not configured: {', '.join(self.problems)}")


class ProviderTransportError(ProviderError):
    """
    The upstream call failed at runtime.

    Covers non-2xx responses, network errors, timeouts and API-level error
    envelopes inside a 200 response.

    ATTRIBUTES:
        retryable: Whether another attempt may succeed (429, 5xx, network)
        retry_after: Seconds the upstream asked us to wait, if it said so
    """

    def __init__(
        self,
        source: str,
        message: str,
        status_code: Optional[int] = None,
        retryable: bool = False,
        retry_after: Optional[float] = None,
    ):
        super().__init__(source, message, status_code)
        self.retryable = retryable
        self.retry_after = retry_after


class AggregationError(Exception):
    """
    The aggregation could not produce a result.

    Wraps the fatal provider failure (the orders provider under the
    partial-tolerant policy). Full detail stays on `cause` for server-side
    logging; clients only ever see a generic message.
    """

    def __init__(self, cause: ProviderError):
        super().__init__(f"Aggregation failed: {cause}")
        self.cause = cause

    @property
    def is_configuration_error(self) -> bool:
        return isinstance(self.cause, ProviderConfigurationError)
