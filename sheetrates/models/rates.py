from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Dict, Iterator, List, Mapping, Optional

from pydantic import BaseModel, Field, field_validator

from .constants import CURRENCY_CODE_RE


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class RateTable:
    """Rates of 1 unit of ``base`` expressed in each quote currency.

    The mapping is copied and wrapped read-only on construction, and the base
    is always present with rate 1.0.
    """

    base: str
    rates: Mapping[str, float]
    fetched_at: datetime = field(default_factory=_utcnow)

    def __post_init__(self) -> None:
        if not CURRENCY_CODE_RE.match(self.base):
            raise ValueError(f"invalid base currency '{self.base}'")
        data = {code: float(rate) for code, rate in self.rates.items()}
        for code, rate in data.items():
            if not CURRENCY_CODE_RE.match(code):
                raise ValueError(f"invalid currency code '{code}'")
            if rate <= 0:
                raise ValueError(f"rate for {code} must be positive")
        data[self.base] = 1.0
        object.__setattr__(self, "rates", MappingProxyType(data))

    def __getitem__(self, code: str) -> float:
        return self.rates[code]

    def __contains__(self, code: object) -> bool:
        return code in self.rates

    def __iter__(self) -> Iterator[str]:
        return iter(self.rates)

    def __len__(self) -> int:
        return len(self.rates)

    def get(self, code: str, default: Optional[float] = None) -> Optional[float]:
        return self.rates.get(code, default)

    def codes(self) -> List[str]:
        return sorted(self.rates)

    def as_dict(self) -> Dict[str, float]:
        return dict(self.rates)


# API schemas ---------------------------------------------------------------


class RateTableOut(BaseModel):
    base: str
    rates: Dict[str, float]
    fetched_at: datetime

    @classmethod
    def from_table(cls, table: RateTable) -> "RateTableOut":
        return cls(base=table.base, rates=table.as_dict(), fetched_at=table.fetched_at)


class ConversionOut(BaseModel):
    amount: float
    from_currency: str
    to_currency: str
    rate: float = Field(..., gt=0)
    converted: float

    @field_validator("from_currency", "to_currency")
    @classmethod
    def valid_currency(cls, v: str) -> str:
        if not CURRENCY_CODE_RE.match(v):
            raise ValueError("invalid currency code")
        return v


class RateRowsOut(BaseModel):
    base: str
    fetched_at: datetime
    rows: List[List[str | float]]
