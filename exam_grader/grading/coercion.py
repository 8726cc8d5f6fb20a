"""
Answer value coercion.

Correct and submitted answers arrive as untyped JSON-like values. The
functions here turn them into the typed values each grader compares, so
every grader works on ``str``, ``frozenset[str]``, ``bool`` or ``float``.

None of these functions raise: a value that cannot be interpreted becomes
the neutral value of its kind (empty set, False, NaN).
"""

import math
import re
from collections.abc import Mapping
from decimal import Decimal
from typing import Any

# Longest numeric prefix, after leading whitespace has been removed.
_LEADING_NUMBER = re.compile(r"[+-]?(?:Infinity|(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?)")

# Integral floats at or above this magnitude keep exponent notation.
_EXPONENT_THRESHOLD = 1e21


def canonical_string(value: Any) -> str:
    """
    Render an answer value in its canonical string form.

    Option identifiers are compared through this form so that ``1``, ``1.0``
    and ``"1"`` all compare equal.
    """
    if value is None:
        return "null"
    if value is True:
        return "true"
    if value is False:
        return "false"
    if isinstance(value, str):
        return value
    if isinstance(value, int):
        return str(value)
    if isinstance(value, Decimal):
        value = float(value)
    if isinstance(value, float):
        return _float_string(value)
    if isinstance(value, (list, tuple)):
        return ",".join("" if item is None else canonical_string(item) for item in value)
    if isinstance(value, Mapping):
        return "[object Object]"
    return str(value)


def _float_string(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value.is_integer() and abs(value) < _EXPONENT_THRESHOLD:
        return str(int(value))
    return repr(value)


def option_set(value: Any) -> frozenset[str]:
    """Option identifiers of a multi-select value; non-lists are empty."""
    if not isinstance(value, (list, tuple)):
        return frozenset()
    return frozenset(canonical_string(item) for item in value)


def truth_value(value: Any) -> bool:
    """Only the boolean True and the string "true" count as true."""
    return value is True or (isinstance(value, str) and value == "true")


def parse_number(value: Any) -> float:
    """
    Parse the leading number of an answer value.

    Leading whitespace is skipped and trailing garbage ignored, so
    ``" 3.5 cm"`` parses as 3.5. Returns NaN when no number is found.
    """
    text = canonical_string(value).lstrip()
    match = _LEADING_NUMBER.match(text)
    if not match:
        return math.nan
    return float(match.group(0).replace("Infinity", "inf"))


def normalize_text(value: Any) -> str:
    """Trim surrounding whitespace and case-fold."""
    return canonical_string(value).strip().lower()


def delimited_pattern(text: str) -> str | None:
    """Return the interior of a ``/.../`` delimited key, else None."""
    if text.startswith("/") and text.endswith("/"):
        return text[1:-1]
    return None


# re.compile raises more than re.error: huge repeat counts overflow and deep
# group nesting exhausts the recursion limit.
PATTERN_ERRORS = (re.error, OverflowError, RecursionError)
