from __future__ import annotations

from typing import Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from sheetrates.models.rates import ConversionOut, RateRowsOut, RateTableOut
from sheetrates.services.rate_board import build_rate_rows, parse_symbols
from sheetrates.services.rates.cache_service import RateFetchClient
from sheetrates.services.rates.conversion import convert_with_client

"""Rates router.

Endpoints:
    - GET /rates/convert          -> convert amount between two currencies
    - GET /rates/{base}           -> full rate table for a base currency
    - GET /rates/{base}/rows      -> header + [code, rate] rows for the dashboard sheet
    - DELETE /rates/cache         -> drop cached tables (guarded by settings.enable_cache_admin)

RateFetchError / ConversionError propagate to the app-level handlers, which
render them as 400/404/502 JSON errors.
"""

router = APIRouter(prefix="/rates", tags=["rates"])


def get_rate_client(request: Request) -> RateFetchClient:
    return request.app.state.rate_client


def require_cache_admin(request: Request) -> bool:
    if not request.app.state.settings.enable_cache_admin:
        raise HTTPException(status_code=403, detail="cache admin feature disabled")
    return True


@router.get("/convert", response_model=ConversionOut, summary="Convert an amount")
def convert_amount(
    amount: float = Query(..., description="Amount in the source currency"),
    from_currency: str = Query(..., alias="from", description="Source currency (e.g. EUR)"),
    to_currency: str = Query(..., alias="to", description="Target currency (e.g. USD)"),
    client: RateFetchClient = Depends(get_rate_client),
) -> ConversionOut:
    result = convert_with_client(amount, from_currency, to_currency, client)
    return ConversionOut(
        amount=result.amount,
        from_currency=result.from_currency,
        to_currency=result.to_currency,
        rate=result.rate,
        converted=result.converted,
    )


@router.delete("/cache", summary="Clear cached rate tables")
def clear_cache(
    base: Optional[str] = Query(None, description="Only drop this base currency"),
    _: bool = Depends(require_cache_admin),
    client: RateFetchClient = Depends(get_rate_client),
) -> Dict[str, int | str]:
    if base is not None:
        removed = client.invalidate(base)
        if not removed:
            raise HTTPException(status_code=404, detail="base not cached")
        return {"status": "cleared", "base": base.strip().upper()}
    return {"status": "cleared", "entries": client.clear()}


@router.get("/{base}", response_model=RateTableOut, summary="Rates for a base currency")
def get_rates(
    base: str,
    refresh: bool = Query(False, description="Bypass the cache for this request"),
    client: RateFetchClient = Depends(get_rate_client),
) -> RateTableOut:
    table = client.get_rates(base, force_refresh=refresh)
    return RateTableOut.from_table(table)


@router.get("/{base}/rows", response_model=RateRowsOut, summary="Rate rows for a sheet range")
def get_rate_rows(
    base: str,
    symbols: Optional[str] = Query(None, description="Comma separated codes, e.g. USD,GBP"),
    client: RateFetchClient = Depends(get_rate_client),
) -> RateRowsOut:
    table = client.get_rates(base)
    return RateRowsOut(
        base=table.base,
        fetched_at=table.fetched_at,
        rows=build_rate_rows(table, parse_symbols(symbols)),
    )
