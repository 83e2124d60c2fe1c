"""Rows for the rates dashboard sheet.

The sheet writes the result straight into a range: a header row, then one
``[code, rate]`` row per quote currency, rates rounded for display.
"""

from __future__ import annotations
from typing import Iterable, List, Optional

from sheetrates.models.rates import RateTable
from sheetrates.services.money import round_to
from sheetrates.services.rates.base import ConversionError

DEFAULT_PRECISION = 4


def parse_symbols(raw: Optional[str]) -> List[str]:
    """Split a ``USD,GBP`` query value into upper-cased codes, keeping order."""
    if not raw:
        return []
    out: List[str] = []
    for part in raw.split(","):
        code = part.strip().upper()
        if code and code not in out:
            out.append(code)
    return out


def build_rate_rows(
    table: RateTable,
    symbols: Optional[Iterable[str]] = None,
    precision: int = DEFAULT_PRECISION,
) -> List[List[str | float]]:
    codes = list(symbols or [])
    if not codes:
        codes = [c for c in table.codes() if c != table.base]
    missing = [c for c in codes if c not in table]
    if missing:
        raise ConversionError(
            ConversionError.UNKNOWN_CURRENCY,
            f"{', '.join(missing)} not in rates for base {table.base}",
        )
    rows: List[List[str | float]] = [["Currency", f"Rate ({table.base})"]]
    rows.extend([code, round_to(table[code], precision)] for code in codes)
    return rows
