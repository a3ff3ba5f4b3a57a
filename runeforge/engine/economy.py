"""Currency helpers - balance clamping, debits, and number formatting."""

from __future__ import annotations

import math
from decimal import Decimal

from runeforge.data.balance import BALANCE


def clamp_non_negative(value: float) -> float:
    """Pin rounding drift below zero (or NaN) back to zero."""
    if value != value or value < 0:
        return type(value)(0)
    return value


def debit(balance: float, amount: float) -> float:
    """Return balance - amount, never below zero."""
    return clamp_non_negative(balance - amount)


def _scientific(mantissa: float, exponent: int) -> str:
    if round(mantissa, 2) >= 10:
        mantissa /= 10
        exponent += 1
    return f"{mantissa:.2f}e{exponent}"


def format_number(n: float | Decimal) -> str:
    """Format a number with suffixes for readability."""
    threshold = BALANCE.economy.scientific_threshold

    if isinstance(n, Decimal):
        if not n.is_finite():
            return str(n)
        if n < 0:
            return f"-{format_number(-n)}"
        if n >= Decimal(threshold):
            exponent = n.adjusted()
            return _scientific(float(n.scaleb(-exponent)), exponent)
        n = float(n)

    if n < 0:
        return f"-{format_number(-n)}"
    if math.isinf(n):
        return "Infinity"

    if n >= threshold:
        exponent = math.floor(math.log10(n))
        return _scientific(n / 10.0 ** exponent, exponent)

    for limit, suffix in reversed(BALANCE.economy.suffixes):
        if n >= limit:
            value = n / limit
            if value >= 100:
                return f"{value:.0f}{suffix}"
            elif value >= 10:
                return f"{value:.1f}{suffix}"
            else:
                return f"{value:.2f}{suffix}"

    if n >= 100:
        return f"{n:.0f}"
    elif n >= 10:
        return f"{n:.1f}"
    elif n == int(n):
        return str(int(n))
    else:
        return f"{n:.2f}"


def format_percent_increase(multiplier: float) -> str:
    """Render a multiplier like 1.25 as '+25%'."""
    return f"+{format_number(100 * (multiplier - 1))}%"
