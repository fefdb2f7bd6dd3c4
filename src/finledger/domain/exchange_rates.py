"""Exchange-rate lookup against a third-party HTTP rate service.

A failed lookup never raises: callers get the ``UNAVAILABLE`` sentinel and
leave the rate blank for the user to fill in.
"""

import logging
import os
import itertools
import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Callable, Hashable, Optional, Union

import requests

logger = logging.getLogger(__name__)

DEFAULT_RATE_API_URL = "https://api.exchangerate-api.com/v4/latest"
DEFAULT_TIMEOUT = 10.0


class RateStatus(Enum):
    UNAVAILABLE = "unavailable"

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNAVAILABLE"


UNAVAILABLE = RateStatus.UNAVAILABLE

RateResult = Union[Decimal, RateStatus]


class ExchangeRateClient:
    """Client for a rate service answering ``GET {base_url}/{FROM}`` with ``{"rates": {...}}``."""

    def __init__(
        self,
        base_url: str = DEFAULT_RATE_API_URL,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        """Initialize exchange-rate client.

        Args:
            base_url: Service URL without the trailing currency segment
            timeout: Request timeout in seconds
            session: Optional requests session, mainly for tests
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def get_rate(self, from_currency: str, to_currency: str) -> RateResult:
        """Get the rate converting one unit of from_currency into to_currency.

        Returns:
            Positive Decimal rate, or UNAVAILABLE on any failure
        """
        from_currency = from_currency.upper()
        to_currency = to_currency.upper()
        if from_currency == to_currency:
            return Decimal("1")

        url = f"{self.base_url}/{from_currency}"
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning("Exchange rate request for %s->%s failed: %s", from_currency, to_currency, e)
            return UNAVAILABLE

        if response.status_code != 200:
            logger.warning(
                "Exchange rate service returned %s for %s->%s",
                response.status_code,
                from_currency,
                to_currency,
            )
            return UNAVAILABLE

        try:
            payload = response.json()
            raw_rate = payload["rates"][to_currency]
        except (ValueError, KeyError, TypeError) as e:
            logger.warning("Malformed exchange rate response for %s->%s: %s", from_currency, to_currency, e)
            return UNAVAILABLE

        return _parse_rate(raw_rate, from_currency, to_currency)


def _parse_rate(raw_rate, from_currency: str, to_currency: str) -> RateResult:
    if raw_rate is None or isinstance(raw_rate, bool):
        logger.warning("No exchange rate for %s->%s", from_currency, to_currency)
        return UNAVAILABLE
    try:
        rate = Decimal(str(raw_rate))
    except InvalidOperation:
        logger.warning("Non-numeric exchange rate %r for %s->%s", raw_rate, from_currency, to_currency)
        return UNAVAILABLE
    if not rate.is_finite() or rate <= 0:
        logger.warning("Unusable exchange rate %s for %s->%s", rate, from_currency, to_currency)
        return UNAVAILABLE
    return rate


class RateFetcher:
    """Background rate lookups keyed by the record being edited.

    Each request for a key supersedes the previous one. A result is only
    handed to its callback when its request is still the latest for that key,
    so a slow earlier lookup can never overwrite a newer one.

    Callbacks run under the fetcher's lock; a newer request for the same key
    waits until a callback in progress has returned.
    """

    def __init__(self, client: ExchangeRateClient, executor: Optional[Executor] = None):
        self.client = client
        self._owns_executor = executor is None
        self.executor = executor or ThreadPoolExecutor(max_workers=2, thread_name_prefix="fx-rate")
        # generations are unique across keys, so a key can be dropped once settled
        self._counter = itertools.count(1)
        self._generations: dict[Hashable, int] = {}
        self._lock = threading.RLock()

    def _next_generation(self, key: Hashable) -> int:
        with self._lock:
            generation = next(self._counter)
            self._generations[key] = generation
            return generation

    def is_current(self, key: Hashable, generation: int) -> bool:
        with self._lock:
            return self._generations.get(key) == generation

    def pending_keys(self) -> list[Hashable]:
        """Return keys with a lookup that has not been delivered or cancelled."""
        with self._lock:
            return list(self._generations)

    def _deliver(
        self,
        key: Hashable,
        generation: int,
        rate: RateResult,
        on_result: Callable[[RateResult], None],
    ) -> bool:
        with self._lock:
            if self._generations.get(key) != generation:
                logger.debug("Dropping stale rate for %s (generation %s)", key, generation)
                return False
            del self._generations[key]
            on_result(rate)
            return True

    def request(
        self,
        key: Hashable,
        from_currency: str,
        to_currency: str,
        on_result: Callable[[RateResult], None],
    ) -> "Future[bool]":
        """Start a lookup for key.

        Returns:
            Future resolving to True if the result was delivered, False if stale
        """
        generation = self._next_generation(key)

        def run() -> bool:
            rate = self.client.get_rate(from_currency, to_currency)
            return self._deliver(key, generation, rate, on_result)

        return self.executor.submit(run)

    def cancel(self, key: Hashable) -> None:
        """Invalidate any pending lookup for key."""
        with self._lock:
            self._generations.pop(key, None)

    def shutdown(self) -> None:
        if self._owns_executor:
            self.executor.shutdown(wait=True)


def create_exchange_rate_client(
    base_url: Optional[str] = None, timeout: Optional[float] = None
) -> ExchangeRateClient:
    """Create an exchange-rate client.

    Args:
        base_url: Service URL. If None, checks FINLEDGER_RATE_API_URL, then
            falls back to the public exchangerate-api endpoint
        timeout: Seconds per request. If None, checks FINLEDGER_RATE_TIMEOUT

    Returns:
        ExchangeRateClient instance
    """
    if base_url is None:
        base_url = os.environ.get("FINLEDGER_RATE_API_URL", DEFAULT_RATE_API_URL)
    if timeout is None:
        raw_timeout = os.environ.get("FINLEDGER_RATE_TIMEOUT")
        try:
            timeout = float(raw_timeout) if raw_timeout else DEFAULT_TIMEOUT
        except ValueError:
            logger.warning("Ignoring invalid FINLEDGER_RATE_TIMEOUT %r", raw_timeout)
            timeout = DEFAULT_TIMEOUT
    return ExchangeRateClient(base_url=base_url, timeout=timeout)
