"""
Date-expression classification for holiday registration arguments.

A closed, ordered decision list: the argument text of a registration call is
matched against a fixed-date constructor, then an Easter-relative expression,
and anything else falls into the catch-all `CalculatedDate` variant with the
raw text preserved. Classification never fails.
"""

import re

from core.models import CalculatedDate, DateExpression, EasterBasedDate, FixedDate

FIXED_DATE_PATTERN = re.compile(
    r"\bdate\s*\(\s*(?:self\._?)?year\s*,\s*([A-Za-z]+|\d+)\s*,\s*(\d{1,2})\s*\)"
)

EASTER_PATTERN = re.compile(
    r"\beaster\s*\(\s*(?:self\._?)?year\s*\)"
    r"(?:\s*([+-])\s*(?:rd|td|timedelta|relativedelta)\s*\(\s*days\s*=\s*([+-]?)\s*(\d+)\s*\))?"
)


def classify(argument_text: str) -> DateExpression:
    """
    Classify the argument text of a registration call.

    Recognized shapes, in order:
        1. `date(year, <MONTH>, <DAY>)` -> FixedDate with the raw month token.
        2. `easter(year)` optionally followed by `+/- rd(days=N)` (also `td`,
           `timedelta`, `relativedelta`) -> EasterBasedDate with the signed
           offset, zero when no delta clause is present.
        3. Anything else -> CalculatedDate carrying the stripped text.

    Args:
        argument_text: Text of the call arguments, with or without the
            holiday name.

    Returns:
        Exactly one DateExpression variant.
    """
    fixed = FIXED_DATE_PATTERN.search(argument_text)
    if fixed:
        return FixedDate(month=fixed.group(1), day=int(fixed.group(2)))

    easter = EASTER_PATTERN.search(argument_text)
    if easter:
        return EasterBasedDate(offset=_signed_offset(easter))

    return CalculatedDate(raw_text=argument_text.strip())


def _signed_offset(match: re.Match[str]) -> int:
    operator, inner_sign, digits = match.group(1), match.group(2), match.group(3)
    if not digits:
        return 0
    offset = int(digits)
    if inner_sign == "-":
        offset = -offset
    return -offset if operator == "-" else offset
