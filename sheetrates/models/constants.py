"""Domain constants for currency validation.

Kept lightweight; the remote provider is the authority on which bases it
actually supports, these only cover shape checks and the offline table.
"""

import re
from typing import Dict, Pattern

CURRENCY_CODE_RE: Pattern[str] = re.compile(r"^[A-Z]{3}$")

# Offline reference table: units of each currency per 1 EUR. Used by the
# static provider when the network is unavailable.
REFERENCE_RATES_EUR: Dict[str, float] = {
    "EUR": 1.0,
    "USD": 1.08,
    "GBP": 0.85,
    "JPY": 161.5,
    "CHF": 0.97,
    "CAD": 1.47,
    "AUD": 1.65,
    "INR": 90.1,
    "SGD": 1.46,
    "MYR": 5.1,
}
