"""
Text conventions for values entered in the designer's preview.

Answers arrive as whatever the form runtime stored: strings, numbers, booleans
or lists of option values. Exports have always rendered them the same way:
booleans as `true`/`false`, whole numbers without a decimal part, lists joined
with commas, and number answers parsed from their leading numeric part.
"""

import math
import re
from typing import Any

_LEADING_DECIMAL = re.compile(
    r"[+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)"
)


def format_number(value: float) -> str:
    """Render a number: 5.0 -> "5", 5.5 -> "5.5", nan -> "NaN"."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value.is_integer():
        return str(int(value))
    return repr(value)


def stringify_value(value: Any) -> str:
    """Render an answer value as text."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return format_number(value)
    if isinstance(value, (list, tuple)):
        return ",".join(stringify_value(v) for v in value)
    return str(value)


def parse_decimal(value: Any) -> float:
    """Parse a number answer.

    Numbers pass through. Anything else is rendered as text and parsed from its
    leading numeric part, so "12.5 kg" gives 12.5. Text without a leading number
    (and booleans) gives nan.
    """
    if isinstance(value, bool):
        return math.nan
    if isinstance(value, (int, float)):
        try:
            return float(value)
        except OverflowError:
            # ints beyond the float range
            return -math.inf if value < 0 else math.inf

    match = _LEADING_DECIMAL.match(stringify_value(value).lstrip())
    if not match:
        return math.nan

    number = match.group(0)
    if number.lstrip("+-") == "Infinity":
        return -math.inf if number.startswith("-") else math.inf
    return float(number)
