"""
Shared pytest fixtures for the SheetRates test suite.

Nothing here touches the network: the HTTP provider runs over
httpx.MockTransport and the API tests use an in-memory fake provider.
"""

from typing import Callable, Dict, List, Optional

import httpx
import pytest
from fastapi.testclient import TestClient

from sheetrates.core.config import Settings
from sheetrates.main import create_app
from sheetrates.models.rates import RateTable
from sheetrates.services.rates.base import RateFetchError, RateProvider
from sheetrates.services.rates.cache_service import RateCache, RateFetchClient
from sheetrates.services.rates.providers import HTTPRateProvider


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class CountingProvider(RateProvider):
    """Serves fixed tables and records every fetch."""

    name = "fake"

    def __init__(self, tables: Dict[str, Dict[str, float]]):
        self.tables = tables
        self.calls: List[str] = []
        self.fail_with: Optional[RateFetchError] = None

    def fetch_rates(self, base_currency: str) -> RateTable:
        self.calls.append(base_currency)
        if self.fail_with is not None:
            raise self.fail_with
        if base_currency not in self.tables:
            raise RateFetchError(RateFetchError.INVALID_CURRENCY, base_currency)
        return RateTable(base=base_currency, rates=self.tables[base_currency])


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def provider():
    return CountingProvider(
        {
            "EUR": {"EUR": 1.0, "USD": 1.08, "GBP": 0.85},
            "USD": {"USD": 1.0, "EUR": 0.925, "GBP": 0.787},
        }
    )


@pytest.fixture
def rate_client(provider, clock):
    return RateFetchClient(provider, RateCache(60, clock=clock))


@pytest.fixture
def eur_payload():
    """Same shape as a Frankfurter ``/latest?from=EUR`` answer (base omitted from rates)."""
    return {
        "amount": 1.0,
        "base": "EUR",
        "date": "2026-10-16",
        "rates": {"USD": 1.08, "GBP": 0.85},
    }


@pytest.fixture
def eur_table():
    return RateTable(base="EUR", rates={"USD": 1.08, "GBP": 0.85})


@pytest.fixture
def make_http_provider() -> Callable[..., HTTPRateProvider]:
    """Build an HTTPRateProvider whose requests go to ``handler``.

    The returned provider exposes ``sleeps`` (recorded backoff delays).
    """
    created: List[httpx.Client] = []

    def _make(handler, *, retries: int = 1, backoff: float = 0.5) -> HTTPRateProvider:
        client = httpx.Client(
            base_url="https://rates.test", transport=httpx.MockTransport(handler)
        )
        created.append(client)
        sleeps: List[float] = []
        prov = HTTPRateProvider(
            "https://rates.test",
            retries=retries,
            backoff=backoff,
            client=client,
            sleep=sleeps.append,
        )
        prov.sleeps = sleeps  # type: ignore[attr-defined]
        return prov

    yield _make
    for c in created:
        c.close()


@pytest.fixture
def settings():
    return Settings(rate_provider="static", enable_cache_admin=True)


@pytest.fixture
def api(settings, rate_client):
    app = create_app(settings_override=settings, rate_client=rate_client)
    with TestClient(app) as c:
        yield c
