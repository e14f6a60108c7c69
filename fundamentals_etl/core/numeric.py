"""Numeric parsing for raw statement fields.

Alpha Vantage encodes every figure as a string, sometimes with thousands
separators, accounting-style parentheses, or the literal "None".
"""

from __future__ import annotations

import math
from typing import Any

# Placeholders that mean "not reported"
_ABSENT_TOKENS = frozenset({"", "none", "null", "nan", "n/a", "-", "--"})


def parse_number(value: Any, default: float | None = None) -> float | None:
    """Parse a raw field value into a float.

    Total over arbitrary input: anything that cannot be read as a finite
    number yields ``default`` instead of raising.

    Examples:
        "1,234,567" -> 1234567.0
        "(500)"     -> -500.0
        "None"      -> default

    Args:
        value: Raw value (string, number, or None)
        default: Value returned when the input is absent or unparseable

    Returns:
        Parsed float, or ``default``
    """
    if value is None or isinstance(value, bool):
        return default

    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return default
        return number if math.isfinite(number) else default

    try:
        text = str(value).strip().replace(",", "")
    except Exception:
        return default

    if text.lower() in _ABSENT_TOKENS:
        return default

    if text.startswith("(") and text.endswith(")"):
        text = "-" + text[1:-1].strip()

    try:
        number = float(text)
    except (TypeError, ValueError, OverflowError):
        return default

    return number if math.isfinite(number) else default


def parse_fiscal_year(date_value: Any) -> int | None:
    """Extract the fiscal year from an ISO-like date string ("2023-12-31" -> 2023)."""
    if not isinstance(date_value, str):
        return None

    prefix = date_value.strip()[:4]
    if len(prefix) != 4 or not (prefix.isascii() and prefix.isdecimal()):
        return None
    return int(prefix)
