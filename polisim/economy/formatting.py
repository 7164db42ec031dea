"""Display helpers for economic values."""

from __future__ import annotations


def format_gdp(value: float) -> str:
    """Format a currency amount with a T/B/M/K suffix (e.g., '$25.00T')."""
    sign = "-" if value < 0 else ""
    value = abs(value)
    if value >= 1e12:
        return "%s$%.2fT" % (sign, value / 1e12)
    if value >= 1e9:
        return "%s$%.2fB" % (sign, value / 1e9)
    if value >= 1e6:
        return "%s$%.2fM" % (sign, value / 1e6)
    if value >= 1e3:
        return "%s$%.2fK" % (sign, value / 1e3)
    return "%s$%.2f" % (sign, value)


def format_population(value: int) -> str:
    if value >= 1_000_000_000:
        return "%.2fB" % (value / 1e9)
    if value >= 1_000_000:
        return "%.1fM" % (value / 1e6)
    if value >= 1_000:
        return "%.1fK" % (value / 1e3)
    return str(value)


def format_percentage(value: float, decimals: int = 1) -> str:
    return "%.*f%%" % (decimals, value)
