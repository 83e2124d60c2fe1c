"""Smoke script for the rate fetch client.

Demonstrates:
 1. First access triggers a provider fetch.
 2. Second access within TTL is served from the cache (same fetched_at).
 3. After invalidation the next access fetches again.
 4. A conversion through the cached table.

Uses the configured provider (RATE_PROVIDER=static works offline).
NOTE: This is a lightweight diagnostic and not a formal test.
"""

import os
import sys
from pprint import pprint

ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from sheetrates.services.rates.base import RateFetchError  # noqa: E402
from sheetrates.services.rates.cache_service import get_rate_fetch_client  # noqa: E402
from sheetrates.services.rates.conversion import convert  # noqa: E402


def run(base: str = "EUR"):
    client = get_rate_fetch_client()
    out = {"provider": client.provider.name}

    try:
        first = client.get_rates(base)
    except RateFetchError as e:
        out["error"] = {"kind": e.kind, "message": str(e)}
        pprint(out)
        return
    out["initial"] = {"codes": len(first), "fetched_at": first.fetched_at.isoformat()}

    second = client.get_rates(base)
    out["second"] = {
        "fetched_at": second.fetched_at.isoformat(),
        "from_cache": second is first,
    }

    client.invalidate(base)
    third = client.get_rates(base)
    out["after_invalidate"] = {
        "fetched_at": third.fetched_at.isoformat(),
        "from_cache": third is first,
    }

    if "USD" in third:
        out["100_to_USD"] = convert(100, base, "USD", third)
    out["cache"] = client.cache.snapshot()
    pprint(out)


if __name__ == "__main__":
    run(*sys.argv[1:2])
