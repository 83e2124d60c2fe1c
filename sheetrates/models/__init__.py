"""Domain models and API schemas for SheetRates."""

from .constants import CURRENCY_CODE_RE, REFERENCE_RATES_EUR  # re-export
from .rates import RateTable, RateTableOut, ConversionOut, RateRowsOut

__all__ = [
    "CURRENCY_CODE_RE",
    "REFERENCE_RATES_EUR",
    "RateTable",
    "RateTableOut",
    "ConversionOut",
    "RateRowsOut",
]
