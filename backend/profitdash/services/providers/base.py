"""Shared adapter plumbing: date keys, request builders and the retry loop.

WHAT:
    - parse_date_key / day_interval: the single-day query granularity
    - ProviderRequest: a typed, network-free description of one upstream call
    - ProviderAdapter: base class with per-adapter bounded retry + backoff
    - HttpProviderAdapter: httpx-based single attempt with status mapping

WHY:
    Every adapter needs the same retry policy, and request building must be
    unit-testable without touching the network.

RETRY POLICY:
    - Network errors, HTTP 429 and HTTP 5xx are retried
    - 429 honours Retry-After when present
    - Backoff is linear: backoff_seconds * attempt
    - Other 4xx fail immediately (bad token / bad request will not heal)
"""

import asyncio
import logging
import re
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple, TypeVar

import httpx

from .errors import ProviderTransportError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_MAX_RETRIES = 3
DEFAULT_BACKOFF_SECONDS = 1.0

# Upstream bodies are logged for diagnostics, never returned to clients
MAX_LOGGED_BODY_CHARS = 500

_DATE_KEY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_date_key(value: Optional[str]) -> date:
    """Parse a `YYYY-MM-DD` string into a calendar date.

    Raises:
        ValueError: if the value is missing, not in that exact form, or not a
            real calendar day (e.g. 2024-02-30).
    """
    if value is None or not _DATE_KEY_RE.match(value.strip()):
        raise ValueError(f"Invalid date key: {value!r} (expected YYYY-MM-DD)")
    return date.fromisoformat(value.strip())


def day_interval(day: date) -> Tuple[datetime, datetime]:
    """Half-open UTC interval [day 00:00, next day 00:00) for range queries."""
    start = datetime.combine(day, time.min, tzinfo=timezone.utc)
    return start, start + timedelta(days=1)


def format_utc_timestamp(value: datetime) -> str:
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def parse_money(source: str, value: Any, context: str) -> Decimal:
    """Parse an upstream money amount, tolerating string encoding ("19.99").

    Missing/empty values count as zero. Anything else that is not a finite
    number is a malformed response.
    """
    if value is None or value == "":
        return Decimal("0")
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation as e:
        raise ProviderTransportError(source, f"Malformed amount on {context}: {value!r}") from e
    if not amount.is_finite():
        raise ProviderTransportError(source, f"Malformed amount on {context}: {value!r}")
    return amount


@dataclass(frozen=True)
class ProviderRequest:
    """One upstream HTTP call, fully described but not yet sent."""
    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    params: Dict[str, Any] = field(default_factory=dict)
    json: Optional[Dict[str, Any]] = None


class ProviderAdapter:
    """Base class for all provider adapters.

    Subclasses set `source` and `required`, implement `fetch(day)` and call
    `_run_with_retries` around a single attempt.
    """

    source: str = "unknown"
    # A required provider's failure aborts aggregation
    required: bool = False
    log_tag: str = "[PROVIDER]"

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        max_retries: int = DEFAULT_MAX_RETRIES,
        backoff_seconds: float = DEFAULT_BACKOFF_SECONDS,
    ):
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.backoff_seconds = backoff_seconds

    @property
    def is_configured(self) -> bool:
        raise NotImplementedError

    async def fetch(self, day: date):
        raise NotImplementedError

    async def _run_with_retries(self, attempt_fn: Callable[[], Awaitable[T]]) -> T:
        """Run `attempt_fn` until it succeeds or fails with a non-retryable error.

        Raises:
            ProviderTransportError: the last failure once attempts are exhausted
        """
        for attempt in range(1, self.max_retries + 1):
            try:
                return await attempt_fn()
            except ProviderTransportError as e:
                if not e.retryable or attempt >= self.max_retries:
                    raise
                delay = e.retry_after if e.retry_after is not None else self.backoff_seconds * attempt
                logger.warning(
                    f"{self.log_tag} {e} - retrying in {delay:.1f}s "
                    f"(attempt {attempt}/{self.max_retries})"
                )
                await asyncio.sleep(delay)

        # max_retries >= 1 so the loop always returns or raises
        raise ProviderTransportError(self.source, "No attempts were made")


class HttpProviderAdapter(ProviderAdapter):
    """Adapter whose upstream is plain HTTP + JSON via httpx.

    `transport` lets tests plug in an `httpx.MockTransport`.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        max_retries: int = DEFAULT_MAX_RETRIES,
        backoff_seconds: float = DEFAULT_BACKOFF_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(timeout=timeout, max_retries=max_retries, backoff_seconds=backoff_seconds)
        self._transport = transport

    async def _send(self, request: ProviderRequest) -> Dict[str, Any]:
        """Send one request, with retries, and return the decoded JSON payload."""
        return await self._run_with_retries(lambda: self._send_once(request))

    async def _send_once(self, request: ProviderRequest) -> Dict[str, Any]:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.request(
                    request.method,
                    request.url,
                    headers=request.headers,
                    params=request.params or None,
                    json=request.json,
                )
        except httpx.TimeoutException as e:
            raise ProviderTransportError(
                self.source, f"Request timed out ({type(e).__name__})", retryable=True
            ) from e
        except httpx.RequestError as e:
            raise ProviderTransportError(
                self.source, f"Request error ({type(e).__name__})", retryable=True
            ) from e

        status = response.status_code
        if not response.is_success:
            logger.error(
                f"{self.log_tag} HTTP {status} from upstream: "
                f"{response.text[:MAX_LOGGED_BODY_CHARS]}"
            )
            raise ProviderTransportError(
                self.source,
                "Upstream returned an error response",
                status_code=status,
                retryable=status == 429 or status >= 500,
                retry_after=_parse_retry_after(response) if status == 429 else None,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise ProviderTransportError(
                self.source, "Upstream returned invalid JSON", status_code=status
            ) from e

        if not isinstance(payload, dict):
            logger.error(f"{self.log_tag} Expected a JSON object, got {type(payload).__name__}")
            raise ProviderTransportError(self.source, "Malformed response", status_code=status)

        self._check_payload(payload)
        return payload

    def _check_payload(self, payload: Dict[str, Any]) -> None:
        """Hook for API-level error envelopes inside a 2xx response."""


def expect_type(source: str, value: Any, expected: type, context: str) -> Any:
    """Return `value` if it has the expected JSON shape, else raise a typed error."""
    if not isinstance(value, expected):
        raise ProviderTransportError(
            source, f"Malformed response: {context} is {type(value).__name__}, expected {expected.__name__}"
        )
    return value


def _parse_retry_after(response: httpx.Response) -> Optional[float]:
    value = response.headers.get("Retry-After")
    if value is None:
        return None
    try:
        return max(0.0, float(value))
    except ValueError:
        return None
