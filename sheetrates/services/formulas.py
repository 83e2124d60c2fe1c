from __future__ import annotations

"""Spreadsheet formula helpers.

Each function mirrors a custom sheet function (WORDCOUNT, ROI, FIBONACCI,
CONVERTCURRENCY, ...). All are pure except ``convert_currency``, which goes
through the rate client and is the one place rate errors are turned into a
placeholder cell value instead of propagating.
"""
import logging
import re
from typing import Dict, List

from sheetrates.services.money import round2
from sheetrates.services.rates.base import ConversionError, RateFetchError, SupportsGetRates
from sheetrates.services.rates.conversion import convert_with_client

logger = logging.getLogger("sheetrates.formulas")

FIBONACCI_MAX_N = 1000
DEFAULT_PLACEHOLDER = "N/A"

_WORD_RE = re.compile(r"\b[\w'-]+\b")
_SENTENCE_END_RE = re.compile(r"[.!?]+(?:\s|$)")
_EMAIL_RE = re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}")


# ------------- Text analytics --------------------


def word_count(text: str) -> int:
    return len(_WORD_RE.findall(text or ""))


def char_count(text: str, include_spaces: bool = True) -> int:
    text = text or ""
    if include_spaces:
        return len(text)
    return sum(1 for ch in text if not ch.isspace())


def sentence_count(text: str) -> int:
    """Count sentences by terminal punctuation; trailing text without one counts too."""
    stripped = (text or "").strip()
    if not stripped:
        return 0
    ends = len(_SENTENCE_END_RE.findall(stripped))
    if not re.search(r"[.!?]$", stripped):
        ends += 1
    return ends


def text_stats(text: str) -> Dict[str, float | int]:
    words = _WORD_RE.findall(text or "")
    avg = round2(sum(len(w) for w in words) / len(words)) if words else 0.0
    return {
        "words": len(words),
        "characters": char_count(text),
        "characters_no_spaces": char_count(text, include_spaces=False),
        "sentences": sentence_count(text),
        "avg_word_length": avg,
    }


def extract_emails(text: str) -> List[str]:
    seen: Dict[str, None] = {}
    for match in _EMAIL_RE.findall(text or ""):
        seen.setdefault(match, None)
    return list(seen)


# ------------- Finance / maths -------------------


def roi(gain: float, cost: float) -> float:
    """Return on investment as a percentage, rounded to 2 places."""
    if cost == 0:
        raise ValueError("cost must be non-zero")
    return round2((gain - cost) / cost * 100)


def fibonacci(n: int) -> int:
    if n < 0:
        raise ValueError("n must be non-negative")
    if n > FIBONACCI_MAX_N:
        raise ValueError(f"n must be <= {FIBONACCI_MAX_N}")
    a, b = 0, 1
    for _ in range(n):
        a, b = b, a + b
    return a


def convert_currency(
    amount: float,
    from_currency: str,
    to_currency: str,
    client: SupportsGetRates,
    placeholder: str = DEFAULT_PLACEHOLDER,
) -> float | str:
    try:
        result = convert_with_client(amount, from_currency, to_currency, client)
    except (RateFetchError, ConversionError) as e:
        logger.warning(
            "convert %s %s->%s failed (%s); showing placeholder",
            amount,
            from_currency,
            to_currency,
            e.kind,
        )
        return placeholder
    return round2(result.converted)


__all__ = [
    "word_count",
    "char_count",
    "sentence_count",
    "text_stats",
    "extract_emails",
    "roi",
    "fibonacci",
    "convert_currency",
]
