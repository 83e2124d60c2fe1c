from __future__ import annotations

from dataclasses import dataclass

from sheetrates.models.rates import RateTable
from .base import ConversionError, SupportsGetRates, normalize_currency

"""Currency conversion over a RateTable.

All rates in a table are relative to one implicit base, so any pair converts
as ``amount / rates[from] * rates[to]``. No rounding happens here; display
rounding is left to callers (formulas, API responses).
"""


@dataclass(frozen=True)
class ConversionResult:
    amount: float
    from_currency: str
    to_currency: str
    rate: float
    converted: float


def convert(amount: float, from_currency: str, to_currency: str, rates: RateTable) -> float:
    src = from_currency.strip().upper()
    dst = to_currency.strip().upper()
    if src == dst:
        return amount
    try:
        rate_from = rates[src]
        rate_to = rates[dst]
    except KeyError as e:
        raise ConversionError(
            ConversionError.UNKNOWN_CURRENCY,
            f"{e.args[0]} not in rates for base {rates.base}",
        ) from None
    return amount / rate_from * rate_to


def convert_with_client(
    amount: float, from_currency: str, to_currency: str, client: SupportsGetRates
) -> ConversionResult:
    """Fetch the table based on ``from_currency`` and convert through it."""
    src = normalize_currency(from_currency)
    dst = normalize_currency(to_currency)
    if src == dst:
        return ConversionResult(amount, src, dst, 1.0, amount)
    rates = client.get_rates(src)
    converted = convert(amount, src, dst, rates)
    return ConversionResult(
        amount=amount,
        from_currency=src,
        to_currency=dst,
        rate=convert(1.0, src, dst, rates),
        converted=converted,
    )
