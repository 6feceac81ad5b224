"""Currency, percentage and count formatting for narrative text"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

Number = Union[Decimal, float, int]


def format_currency(amount: Number) -> str:
    """$1,234.56 with thousands separators; negatives as -$1,234.56"""
    value = Decimal(str(amount)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.2f}"


def format_percent(value: Number, signed: bool = False) -> str:
    """One decimal place; signed=True prefixes + on non-negative values"""
    rounded = Decimal(str(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
    prefix = "+" if signed and rounded >= 0 else ""
    return f"{prefix}{rounded:.1f}%"


def pluralize(count: int, singular: str, plural: Optional[str] = None) -> str:
    """'1 card', '3 cards'"""
    word = singular if count == 1 else (plural or f"{singular}s")
    return f"{count} {word}"


def humanize_key(value: str) -> str:
    """emergency_fund -> emergency fund"""
    return value.replace("_", " ")
