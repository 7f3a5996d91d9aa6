# points.py
from __future__ import annotations

import math
import re
from datetime import date, datetime, time
from decimal import Decimal, InvalidOperation
from typing import Callable, List, Optional, Tuple

from ..schemas import DATE_RE, Receipt

# -----------------------------
# Tunables
# -----------------------------
POINTS = {
    "round_dollar_total": 50,
    "quarter_multiple_total": 25,
    "item_pair": 5,
    "odd_purchase_day": 6,
    "afternoon_purchase": 10,
}

DESCRIPTION_LENGTH_MULTIPLE = 3
DESCRIPTION_PRICE_MULTIPLIER = Decimal("0.2")

# amounts of 10**19 and above are treated as unparseable
MAX_AMOUNT_EXPONENT = 18

# H:MM or HH:MM, ASCII digits only
CLOCK_RE = re.compile(r"^[0-9]{1,2}:[0-9]{2}$")

# exclusive on both ends
AFTERNOON_START = time(14, 0)
AFTERNOON_END = time(16, 0)

# -----------------------------
# Helpers
# -----------------------------
def parse_amount(value: str | None) -> Optional[Decimal]:
    """Decimal amount, or None when the string is not a finite number."""
    if not value or not value.isascii() or value != value.strip():
        return None
    try:
        amount = Decimal(value)
    except (InvalidOperation, ValueError):
        return None
    if not amount.is_finite() or amount.adjusted() > MAX_AMOUNT_EXPONENT:
        return None
    return amount

def parse_date(value: str | None) -> Optional[date]:
    if not value or not DATE_RE.match(value):
        return None
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        return None

def parse_time(value: str | None) -> Optional[time]:
    if not value or not CLOCK_RE.match(value):
        return None
    try:
        return datetime.strptime(value, "%H:%M").time()
    except ValueError:
        return None

# -----------------------------
# Rules
# Each rule maps a receipt to its own contribution; a sub-field that does not
# parse makes that rule return 0.
# -----------------------------
def alphanumeric_retailer(receipt: Receipt) -> int:
    return sum(1 for ch in receipt.retailer if ch.isalpha() or ch.isdecimal())

def round_dollar_total(receipt: Receipt) -> int:
    total = parse_amount(receipt.total)
    if total is None:
        return 0
    return POINTS["round_dollar_total"] if total == total.to_integral_value() else 0

def quarter_multiple_total(receipt: Receipt) -> int:
    total = parse_amount(receipt.total)
    if total is None:
        return 0
    cents = int(total * 100)  # truncates toward zero
    return POINTS["quarter_multiple_total"] if cents % 25 == 0 else 0

def item_pairs(receipt: Receipt) -> int:
    return (len(receipt.items) // 2) * POINTS["item_pair"]

def description_length(receipt: Receipt) -> int:
    total = 0
    for item in receipt.items:
        length = len(item.short_description.strip())
        if length == 0 or length % DESCRIPTION_LENGTH_MULTIPLE != 0:
            continue
        price = parse_amount(item.price)
        if price is None:
            continue
        earned = math.ceil(price * DESCRIPTION_PRICE_MULTIPLIER)
        if earned > 0:
            total += earned
    return total

def odd_purchase_day(receipt: Receipt) -> int:
    purchased = parse_date(receipt.purchase_date)
    if purchased is None:
        return 0
    return POINTS["odd_purchase_day"] if purchased.day % 2 == 1 else 0

def afternoon_purchase(receipt: Receipt) -> int:
    purchased = parse_time(receipt.purchase_time)
    if purchased is None:
        return 0
    return POINTS["afternoon_purchase"] if AFTERNOON_START < purchased < AFTERNOON_END else 0

DEFAULT_RULES: List[Tuple[str, Callable[[Receipt], int]]] = [
    ("alphanumeric_retailer", alphanumeric_retailer),
    ("round_dollar_total", round_dollar_total),
    ("quarter_multiple_total", quarter_multiple_total),
    ("item_pairs", item_pairs),
    ("description_length", description_length),
    ("odd_purchase_day", odd_purchase_day),
    ("afternoon_purchase", afternoon_purchase),
]

# -----------------------------
# Main entry
# -----------------------------
def breakdown(receipt: Receipt) -> List[Tuple[str, int]]:
    """(rule name, points) for every rule, in evaluation order."""
    return [(name, rule(receipt)) for name, rule in DEFAULT_RULES]

def score(receipt: Receipt) -> int:
    """
    Total points for a receipt. Pure: no I/O, keeps no reference to the
    receipt, and never raises on malformed sub-fields.
    """
    return sum(points for _, points in breakdown(receipt))
