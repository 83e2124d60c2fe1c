import threading
import time

import pytest

from sheetrates.models.rates import RateTable
from sheetrates.services.rates.base import RateFetchError, RateProvider
from sheetrates.services.rates.cache_service import RateCache, RateFetchClient


def test_base_currency_maps_to_one(rate_client):
    for base in ("EUR", "USD"):
        assert rate_client.get_rates(base)[base] == 1.0


def test_second_call_within_ttl_uses_cache(rate_client, provider, clock):
    first = rate_client.get_rates("USD")
    clock.advance(59)
    second = rate_client.get_rates("USD")
    assert second is first
    assert provider.calls == ["USD"]


def test_expired_entry_triggers_refetch(rate_client, provider, clock):
    first = rate_client.get_rates("EUR")
    clock.advance(60)
    second = rate_client.get_rates("EUR")
    assert second is not first
    assert provider.calls == ["EUR", "EUR"]


def test_force_refresh_bypasses_cache(rate_client, provider):
    rate_client.get_rates("EUR")
    rate_client.get_rates("EUR", force_refresh=True)
    assert provider.calls == ["EUR", "EUR"]


def test_codes_are_normalized_before_lookup(rate_client, provider):
    rate_client.get_rates("eur")
    rate_client.get_rates(" EUR ")
    assert provider.calls == ["EUR"]


@pytest.mark.parametrize("code", ["???", "", "EU", "EURO", "12$", None])
def test_invalid_code_raises_without_network(rate_client, provider, code):
    with pytest.raises(RateFetchError) as exc:
        rate_client.get_rates(code)
    assert exc.value.kind == RateFetchError.INVALID_CURRENCY
    assert provider.calls == []


def test_unsupported_code_surfaces_provider_error(rate_client):
    with pytest.raises(RateFetchError) as exc:
        rate_client.get_rates("XYZ")
    assert exc.value.kind in (RateFetchError.INVALID_CURRENCY, RateFetchError.PARSE_ERROR)


def test_failures_are_not_cached(rate_client, provider):
    provider.fail_with = RateFetchError(RateFetchError.NETWORK_ERROR, "down")
    with pytest.raises(RateFetchError):
        rate_client.get_rates("EUR")
    provider.fail_with = None
    assert rate_client.get_rates("EUR")["USD"] == 1.08
    assert provider.calls == ["EUR", "EUR"]


def test_stale_entry_is_not_served_when_refresh_fails(rate_client, provider, clock):
    rate_client.get_rates("EUR")
    clock.advance(120)
    provider.fail_with = RateFetchError(RateFetchError.NETWORK_ERROR, "down")
    with pytest.raises(RateFetchError):
        rate_client.get_rates("EUR")


def test_bases_are_cached_independently(rate_client, provider):
    rate_client.get_rates("EUR")
    rate_client.get_rates("USD")
    rate_client.get_rates("EUR")
    assert provider.calls == ["EUR", "USD"]


def test_invalidate_and_clear(rate_client, provider):
    rate_client.get_rates("EUR")
    rate_client.get_rates("USD")
    assert rate_client.invalidate("eur") is True
    assert rate_client.invalidate("EUR") is False
    assert rate_client.clear() == 1
    rate_client.get_rates("USD")
    assert provider.calls == ["EUR", "USD", "USD"]


def test_snapshot_reports_age_and_validity(rate_client, clock):
    rate_client.get_rates("EUR")
    clock.advance(61)
    snap = rate_client.cache.snapshot()
    assert snap["EUR"]["valid"] is False
    assert snap["EUR"]["age_seconds"] == 61


def test_cache_rejects_non_positive_ttl():
    with pytest.raises(ValueError):
        RateCache(0)


class _SlowProvider(RateProvider):
    name = "slow"

    def __init__(self):
        self.calls = 0
        self._lock = threading.Lock()

    def fetch_rates(self, base_currency: str) -> RateTable:
        with self._lock:
            self.calls += 1
        time.sleep(0.05)
        return RateTable(base=base_currency, rates={"USD": 1.08})


def test_concurrent_requests_for_same_base_share_one_fetch():
    slow = _SlowProvider()
    client = RateFetchClient(slow, RateCache(60))
    results = []

    def worker():
        results.append(client.get_rates("EUR"))

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert slow.calls == 1
    assert len(results) == 8
    assert all(r is results[0] for r in results)
