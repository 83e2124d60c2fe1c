from __future__ import annotations

"""Concrete rate providers and factory.

'http' talks to a Frankfurter-compatible endpoint (``GET /latest?from=XXX``);
'static' serves the offline reference table so the service and its smoke
scripts work without network access.
"""
import logging
import math
import time
from typing import Any, Callable, Dict, Optional

import httpx

from sheetrates.core.config import Settings
from sheetrates.models.constants import CURRENCY_CODE_RE, REFERENCE_RATES_EUR
from sheetrates.models.rates import RateTable
from sheetrates.services.http_client import HttpError, HttpParseError, get_json
from .base import RateFetchError, RateProvider

logger = logging.getLogger("sheetrates.rates.providers")

# Statuses the provider uses to reject an unsupported base currency
_INVALID_BASE_STATUSES = {404, 422}


class StaticRateProvider(RateProvider):
    name = "static"

    def __init__(self, reference: Optional[Dict[str, float]] = None):
        self._reference = dict(reference or REFERENCE_RATES_EUR)

    def fetch_rates(self, base_currency: str) -> RateTable:
        ref_base = self._reference.get(base_currency)
        if ref_base is None:
            raise RateFetchError(
                RateFetchError.INVALID_CURRENCY,
                f"'{base_currency}' not in static table",
            )
        return RateTable(
            base=base_currency,
            rates={code: rate / ref_base for code, rate in self._reference.items()},
        )


class HTTPRateProvider(RateProvider):
    """Fetches latest rates over HTTP; one GET per call, no caching here."""

    name = "http"

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 5.0,
        retries: int = 1,
        backoff: float = 0.5,
        client: Optional[httpx.Client] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._owns_client = client is None
        self._client = client or httpx.Client(base_url=base_url, timeout=timeout)
        self._retries = retries
        self._backoff = backoff
        self._sleep = sleep

    def fetch_rates(self, base_currency: str) -> RateTable:
        try:
            data = get_json(
                self._client,
                "latest",
                params={"from": base_currency},
                retries=self._retries,
                backoff=self._backoff,
                sleep=self._sleep,
            )
        except HttpParseError as e:
            raise RateFetchError(RateFetchError.PARSE_ERROR, str(e)) from e
        except HttpError as e:
            if e.status_code in _INVALID_BASE_STATUSES:
                raise RateFetchError(
                    RateFetchError.INVALID_CURRENCY,
                    f"provider rejected base '{base_currency}'",
                ) from e
            logger.warning("rate fetch for %s failed: %s", base_currency, e)
            raise RateFetchError(RateFetchError.NETWORK_ERROR, str(e)) from e
        return _parse_rates_payload(base_currency, data)

    def close(self) -> None:
        if self._owns_client:
            self._client.close()


def _parse_rates_payload(base_currency: str, data: Any) -> RateTable:
    """Validate ``{"base": ..., "rates": {CODE: number}}`` into a RateTable."""

    def fail(reason: str) -> RateFetchError:
        return RateFetchError(RateFetchError.PARSE_ERROR, reason)

    if not isinstance(data, dict):
        raise fail("response body is not an object")
    reported_base = data.get("base")
    if reported_base is not None and reported_base != base_currency:
        raise fail(f"response base '{reported_base}' != requested '{base_currency}'")
    raw = data.get("rates")
    if not isinstance(raw, dict):
        raise fail("response has no 'rates' object")
    rates: Dict[str, float] = {}
    for code, value in raw.items():
        if not isinstance(code, str) or not CURRENCY_CODE_RE.match(code):
            raise fail(f"bad currency code {code!r}")
        # bool is an int subclass; reject it explicitly
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise fail(f"rate for {code} is not a number")
        try:
            rate = float(value)
        except OverflowError:
            raise fail(f"rate for {code} does not fit a float") from None
        if not math.isfinite(rate) or rate <= 0:
            raise fail(f"rate for {code} is not a positive finite number")
        rates[code] = rate
    return RateTable(base=base_currency, rates=rates)


_PROVIDER_REGISTRY = {
    "static": StaticRateProvider,
    "http": HTTPRateProvider,
}


def make_rate_provider(
    kind: str, settings: Settings, *, client: Optional[httpx.Client] = None
) -> RateProvider:
    cls = _PROVIDER_REGISTRY.get(kind)
    if not cls:
        raise ValueError(f"Unknown rate provider kind '{kind}'")
    if cls is HTTPRateProvider:
        return HTTPRateProvider(
            str(settings.rates_api_base_url),
            timeout=settings.http_timeout_seconds,
            retries=settings.http_retries,
            backoff=settings.http_backoff_seconds,
            client=client,
        )
    return cls()
