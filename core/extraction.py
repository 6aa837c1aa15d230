"""
Line-pattern extraction of holiday registration calls.

The extractor works directly on raw source lines rather than on the token
stream, so gaps in the tokenizer never hide a registration site. Each line is
offered to an ordered table of named call recognizers; the first recognizer
whose call shape matches turns the line into a HolidayCall.

A recognizer that matches a line but cannot find the quoted holiday name fails
that single call. The extractor records the failure, skips the line and keeps
going, so one malformed call never aborts extraction of the rest of the file.
"""

from dataclasses import dataclass
import logging
import re
from typing import Callable, Final, Mapping

from constants import MONTH_ABBREVIATIONS
from core.classifier import classify
from core.exceptions import ExtractionError
from core.models import (
    CalculatedDate,
    DateExpression,
    EasterBasedDate,
    FixedDate,
    HolidayCall,
    WeekdayBasedDate,
)
from models import CallShape

logger = logging.getLogger(__name__)

# Calls split over several lines are joined up to this many continuation lines.
MAX_CONTINUATION_LINES: Final[int] = 8

# Helpers of the upstream library whose date is implied by their name.
NAMED_HELPER_DATES: Final[Mapping[str, DateExpression]] = {
    "_add_new_years_day": FixedDate("JAN", 1),
    "_add_epiphany_day": FixedDate("JAN", 6),
    "_add_labor_day": FixedDate("MAY", 1),
    "_add_assumption_of_mary_day": FixedDate("AUG", 15),
    "_add_all_saints_day": FixedDate("NOV", 1),
    "_add_immaculate_conception_day": FixedDate("DEC", 8),
    "_add_christmas_eve": FixedDate("DEC", 24),
    "_add_christmas_day": FixedDate("DEC", 25),
    "_add_christmas_day_two": FixedDate("DEC", 26),
    "_add_new_years_eve": FixedDate("DEC", 31),
    "_add_ash_wednesday": EasterBasedDate(-46),
    "_add_holy_thursday": EasterBasedDate(-3),
    "_add_good_friday": EasterBasedDate(-2),
    "_add_holy_saturday": EasterBasedDate(-1),
    "_add_easter_sunday": EasterBasedDate(0),
    "_add_easter_monday": EasterBasedDate(1),
    "_add_ascension_thursday": EasterBasedDate(39),
    "_add_whit_sunday": EasterBasedDate(49),
    "_add_whit_monday": EasterBasedDate(50),
    "_add_corpus_christi_day": EasterBasedDate(60),
}

_DOUBLE_QUOTED = re.compile(r'"((?:[^"\\]|\\.)*)"')
_SINGLE_QUOTED = re.compile(r"'((?:[^'\\]|\\.)*)'")
_STRING_LITERAL = re.compile(r""""(?:[^"\\]|\\.)*"|'(?:[^'\\]|\\.)*'""")
_SIGNED_INTEGER = re.compile(r"(?<![\w.])([+-])?\s*(\d+)\b")


@dataclass(frozen=True)
class CallRecognizer:
    """
    A named call-shape recognizer.

    Attributes:
        shape: The registration idiom this recognizer handles.
        pattern: Regex locating the call; group 1 is the method name and the
            match ends right after the opening parenthesis.
        build: Sub-extractor taking (match, argument text, line number) and
            returning (holiday name, date expression). Raises
            ExtractionError when the call is malformed.
    """

    shape: CallShape
    pattern: re.Pattern[str]
    build: Callable[[re.Match[str], str, int], tuple[str, DateExpression]]

    def recognize(
        self, line: str, line_number: int, arguments: str | None = None
    ) -> HolidayCall | None:
        """
        Turn one line into a HolidayCall if it has this recognizer's shape.

        Args:
            line: The raw source line.
            line_number: 1-based line number, used in diagnostics.
            arguments: Optional full argument text when the call continues on
                following lines. Defaults to the rest of `line`.

        Returns:
            The HolidayCall, or None when the line has a different shape.

        Raises:
            ExtractionError: If the shape matches but the call is malformed.
        """
        match = self.pattern.search(line)
        if not match:
            return None
        if arguments is None:
            arguments = line[match.end() :]
        holiday_name, date_expression = self.build(match, arguments, line_number)
        return HolidayCall(
            registration_method=match.group(1),
            shape=self.shape,
            holiday_name=holiday_name,
            date_expression=date_expression,
            source_line=line.strip(),
            line_number=line_number,
        )


def extract_quoted_name(arguments: str, line_number: int) -> tuple[str, str]:
    """
    Find the holiday name in the argument text.

    Double-quoted strings are tried first, then single-quoted ones.

    Returns:
        Tuple of (holiday name, argument text following the name).

    Raises:
        ExtractionError: If no quoted string is present.
    """
    for pattern in (_DOUBLE_QUOTED, _SINGLE_QUOTED):
        match = pattern.search(arguments)
        if match:
            name = match.group(1).replace('\\"', '"').replace("\\'", "'")
            return name, arguments[match.end() :]
    raise ExtractionError(line_number, "could not extract holiday name")


def argument_tail(text: str) -> str:
    """
    Clean up the argument text left after the holiday name.

    Drops a trailing comment, the separators closing the name (e.g. the `)`
    of a `tr("...")` wrapper and the comma), and the closing parenthesis of
    the registration call itself.
    """
    tail = re.sub(r"#.*$", "", text, flags=re.MULTILINE).strip()
    tail = tail.lstrip("),").strip()
    if tail.endswith(")"):
        tail = tail[:-1].rstrip()
    return tail.rstrip(",").strip()


def _build_generic(
    match: re.Match[str], arguments: str, line_number: int
) -> tuple[str, DateExpression]:
    name, rest = extract_quoted_name(arguments, line_number)
    # The date may precede the name, so the full argument text is classified
    expression = classify(arguments)
    if isinstance(expression, CalculatedDate):
        expression = CalculatedDate(argument_tail(rest))
    return name, expression


def _build_easter_based(
    match: re.Match[str], arguments: str, line_number: int
) -> tuple[str, DateExpression]:
    name, rest = extract_quoted_name(arguments, line_number)
    offset_match = _SIGNED_INTEGER.search(argument_tail(rest))
    offset = 0
    if offset_match:
        offset = int(offset_match.group(2))
        if offset_match.group(1) == "-":
            offset = -offset
    return name, EasterBasedDate(offset)


def _build_weekday_based(
    match: re.Match[str], arguments: str, line_number: int
) -> tuple[str, DateExpression]:
    name, rest = extract_quoted_name(arguments, line_number)
    return name, WeekdayBasedDate(argument_tail(rest))


def _build_date_suffixed(
    match: re.Match[str], arguments: str, line_number: int
) -> tuple[str, DateExpression]:
    month = match.group(2).upper()
    if month not in MONTH_ABBREVIATIONS:
        raise ExtractionError(line_number, f"unknown month in '{match.group(1)}'")
    name, _ = extract_quoted_name(arguments, line_number)
    return name, FixedDate(month, int(match.group(3)))


def _build_named_helper(
    match: re.Match[str], arguments: str, line_number: int
) -> tuple[str, DateExpression]:
    name, _ = extract_quoted_name(arguments, line_number)
    return name, NAMED_HELPER_DATES[match.group(1)]


def _named_helper_pattern() -> re.Pattern[str]:
    alternatives = "|".join(
        re.escape(helper)
        for helper in sorted(NAMED_HELPER_DATES, key=len, reverse=True)
    )
    return re.compile(rf"\bself\.({alternatives})\s*\(")


DEFAULT_RECOGNIZERS: tuple[CallRecognizer, ...] = (
    CallRecognizer(
        CallShape.GENERIC,
        re.compile(r"\bself\.(_add_holiday)\s*\("),
        _build_generic,
    ),
    CallRecognizer(
        CallShape.EASTER_BASED,
        re.compile(r"\bself\.(_add_easter_based_holiday)\s*\("),
        _build_easter_based,
    ),
    CallRecognizer(
        CallShape.WEEKDAY_BASED,
        re.compile(r"\bself\.(_add_weekday_holiday)\s*\("),
        _build_weekday_based,
    ),
    CallRecognizer(
        CallShape.DATE_SUFFIXED,
        re.compile(r"\bself\.(_add_holiday_([a-z]{3})_(\d{1,2}))\s*\("),
        _build_date_suffixed,
    ),
    CallRecognizer(
        CallShape.NAMED_HELPER,
        _named_helper_pattern(),
        _build_named_helper,
    ),
)


class HolidayCallExtractor:
    """
    Extracts HolidayCall values from raw source text.

    Attributes:
        recognizers: Ordered recognizer table; the first matching shape wins.
        join_continuations: When True, a call whose parentheses are still open
            at the end of its line is completed from the following lines.
        errors: Per-call failures recorded during the last extraction.
    """

    def __init__(
        self,
        recognizers: tuple[CallRecognizer, ...] = DEFAULT_RECOGNIZERS,
        join_continuations: bool = True,
    ):
        self.recognizers = recognizers
        self.join_continuations = join_continuations
        self.errors: list[ExtractionError] = []

    def extract_calls(self, text: str) -> list[HolidayCall]:
        """
        Find every recognizable registration call in the source text.

        Args:
            text: Raw source text.

        Returns:
            HolidayCall values in source order. Malformed calls are omitted
            and recorded in `errors`.
        """
        self.errors = []
        calls: list[HolidayCall] = []
        lines = text.splitlines()

        for index, line in enumerate(lines):
            if line.lstrip().startswith("#"):
                continue
            line_number = index + 1
            for recognizer in self.recognizers:
                match = recognizer.pattern.search(line)
                if not match:
                    continue
                arguments = line[match.end() :]
                if self.join_continuations:
                    arguments = _complete_arguments(
                        arguments, lines[index + 1 :], self.recognizers
                    )
                try:
                    call = recognizer.recognize(line, line_number, arguments)
                except ExtractionError as e:
                    logger.debug("Skipping call: %s", e.message)
                    self.errors.append(e)
                    break
                if call is not None:
                    calls.append(call)
                break

        return calls


def _complete_arguments(
    arguments: str,
    following: list[str],
    recognizers: tuple[CallRecognizer, ...] = DEFAULT_RECOGNIZERS,
) -> str:
    """
    Append continuation lines until the call's opening parenthesis is closed.

    Comment-only lines are dropped. Joining stops before a line holding
    another registration call, and after MAX_CONTINUATION_LINES; whatever
    was collected is returned.
    """
    depth = 1 + _paren_balance(arguments)
    if depth <= 0:
        return arguments

    parts = [arguments]
    for line in following[:MAX_CONTINUATION_LINES]:
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        if any(recognizer.pattern.search(stripped) for recognizer in recognizers):
            break
        parts.append(stripped)
        depth += _paren_balance(stripped)
        if depth <= 0:
            break
    return " ".join(parts)


def _paren_balance(text: str) -> int:
    code = _STRING_LITERAL.sub('""', text).split("#", 1)[0]
    return code.count("(") - code.count(")")
