from __future__ import annotations

"""Rate provider abstraction and the domain errors shared by the rates package.

A provider turns a base currency into a fresh RateTable; caching, conversion
and fallback display are layered on top by the callers.
"""
from abc import ABC, abstractmethod
from typing import Protocol

from sheetrates.models.constants import CURRENCY_CODE_RE
from sheetrates.models.rates import RateTable


class RateFetchError(Exception):
    """Raised when a RateTable cannot be produced for a base currency."""

    INVALID_CURRENCY = "InvalidCurrency"
    NETWORK_ERROR = "NetworkError"
    PARSE_ERROR = "ParseError"

    def __init__(self, kind: str, message: str = ""):
        super().__init__(f"{kind}: {message}" if message else kind)
        self.kind = kind


class ConversionError(Exception):
    UNKNOWN_CURRENCY = "UnknownCurrency"

    def __init__(self, kind: str, message: str = ""):
        super().__init__(f"{kind}: {message}" if message else kind)
        self.kind = kind


def normalize_currency(code: str) -> str:
    """Return the upper-cased code or raise InvalidCurrency."""
    if not isinstance(code, str):
        raise RateFetchError(RateFetchError.INVALID_CURRENCY, f"{code!r} is not a string")
    norm = code.strip().upper()
    if not CURRENCY_CODE_RE.match(norm):
        raise RateFetchError(RateFetchError.INVALID_CURRENCY, f"'{code}' is not a 3-letter code")
    return norm


class RateProvider(ABC):
    name: str = "abstract"

    @abstractmethod
    def fetch_rates(self, base_currency: str) -> RateTable:
        """Return a fresh RateTable for an already-normalized base code."""
        raise NotImplementedError

    def close(self) -> None:
        """Release any underlying resources (HTTP connections)."""


class SupportsGetRates(Protocol):
    def get_rates(self, base_currency: str) -> RateTable: ...
