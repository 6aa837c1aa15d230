"""
Tests for the extraction module.

Tests cover:
- CallRecognizer.recognize: each registration call shape
- HolidayCallExtractor.extract_calls: source order, malformed call recovery,
  multi-line calls, comment handling
- extract_quoted_name and argument_tail helpers
"""

import pytest

from core.exceptions import ExtractionError
from core.extraction import (
    DEFAULT_RECOGNIZERS,
    HolidayCallExtractor,
    argument_tail,
    extract_quoted_name,
)
from core.models import CalculatedDate, EasterBasedDate, FixedDate, WeekdayBasedDate
from models import CallShape


def extract_one(line):
    extractor = HolidayCallExtractor()
    calls = extractor.extract_calls(line)
    assert extractor.errors == []
    assert len(calls) == 1
    return calls[0]


# ============================================================================
# Tests for call shapes
# ============================================================================


@pytest.mark.unit
def test_generic_fixed_date_call():
    """A generic call with a date constructor should yield a fixed date."""
    call = extract_one("""        self._add_holiday("New Year's Day", date(year, JAN, 1))""")

    assert call.shape == CallShape.GENERIC
    assert call.registration_method == "_add_holiday"
    assert call.holiday_name == "New Year's Day"
    assert call.date_expression == FixedDate("JAN", 1)
    assert call.line_number == 1
    assert call.source_line.startswith("self._add_holiday(")


@pytest.mark.unit
def test_generic_call_with_translation_wrapper():
    """A tr() wrapped name should be extracted from inside the wrapper."""
    call = extract_one('self._add_holiday(tr("Independence Day"), date(year, JUL, 4))')

    assert call.holiday_name == "Independence Day"
    assert call.date_expression == FixedDate("JUL", 4)


@pytest.mark.unit
def test_generic_call_with_single_quotes():
    """Single-quoted names should be accepted."""
    call = extract_one("self._add_holiday('Boxing Day', date(year, DEC, 26))")

    assert call.holiday_name == "Boxing Day"


@pytest.mark.unit
def test_generic_call_with_easter_expression():
    """A generic call with an Easter expression should yield an Easter offset."""
    call = extract_one('self._add_holiday("Whit Monday", easter(year) + td(days=+50))')

    assert call.date_expression == EasterBasedDate(50)


@pytest.mark.unit
def test_generic_call_with_calculated_date():
    """Unrecognized dates should keep the argument text after the name."""
    call = extract_one('self._add_holiday("Election Day", self._get_election_date())')

    assert call.date_expression == CalculatedDate("self._get_election_date()")


@pytest.mark.unit
@pytest.mark.parametrize(
    "line, offset",
    [
        ('self._add_easter_based_holiday("Good Friday", -2)', -2),
        ('self._add_easter_based_holiday(tr("Easter Monday"), +1)', 1),
        ('self._add_easter_based_holiday("Ascension Day", 39)', 39),
        ('self._add_easter_based_holiday("Easter Sunday")', 0),
    ],
)
def test_easter_based_call(line, offset):
    """Easter-based calls should carry the signed literal offset."""
    call = extract_one(line)

    assert call.shape == CallShape.EASTER_BASED
    assert call.date_expression == EasterBasedDate(offset)


@pytest.mark.unit
def test_weekday_based_call():
    """Weekday calls should keep the rule arguments as text."""
    call = extract_one('self._add_weekday_holiday("Memorial Day", MAY, MON, -1)')

    assert call.shape == CallShape.WEEKDAY_BASED
    assert call.date_expression == WeekdayBasedDate("MAY, MON, -1")


@pytest.mark.unit
def test_date_suffixed_call():
    """The date should be read from the method name."""
    call = extract_one('self._add_holiday_jul_4(tr("Independence Day"))')

    assert call.shape == CallShape.DATE_SUFFIXED
    assert call.registration_method == "_add_holiday_jul_4"
    assert call.date_expression == FixedDate("JUL", 4)


@pytest.mark.unit
@pytest.mark.parametrize(
    "line, expected",
    [
        ('self._add_christmas_day("Christmas Day")', FixedDate("DEC", 25)),
        ('self._add_christmas_day_two("Boxing Day")', FixedDate("DEC", 26)),
        ('self._add_good_friday(tr("Good Friday"))', EasterBasedDate(-2)),
        ('self._add_whit_monday("Whit Monday")', EasterBasedDate(50)),
    ],
)
def test_named_helper_call(line, expected):
    """Helpers with an implied date should map through the helper table."""
    call = extract_one(line)

    assert call.shape == CallShape.NAMED_HELPER
    assert call.date_expression == expected


@pytest.mark.unit
def test_recognizers_are_ordered_by_shape():
    """The recognizer table should try the three core shapes first."""
    shapes = [recognizer.shape for recognizer in DEFAULT_RECOGNIZERS]

    assert shapes[:3] == [
        CallShape.GENERIC,
        CallShape.EASTER_BASED,
        CallShape.WEEKDAY_BASED,
    ]


@pytest.mark.unit
def test_recognizer_returns_none_for_other_shape():
    """A recognizer should ignore lines of another shape."""
    generic = DEFAULT_RECOGNIZERS[0]

    assert generic.recognize('self._add_easter_based_holiday("x", 1)', 1) is None


# ============================================================================
# Tests for HolidayCallExtractor.extract_calls
# ============================================================================


@pytest.mark.unit
def test_extract_calls_sample_source(sample_source):
    """Every registration call of the sample should be found in order."""
    calls = HolidayCallExtractor().extract_calls(sample_source)

    assert [c.holiday_name for c in calls] == [
        "New Year's Day",
        "Good Friday",
        "Memorial Day",
        "Independence Day",
        "Christmas Day",
    ]
    assert [c.line_number for c in calls] == [26, 27, 28, 29, 30]


@pytest.mark.unit
def test_extract_calls_skips_malformed_calls():
    """N well-formed calls interleaved with M malformed ones should yield N."""
    text = "\n".join(
        [
            'self._add_holiday("A", date(year, JAN, 1))',
            "self._add_holiday(date(year, JAN, 2))",
            'self._add_easter_based_holiday("B", -2)',
            "self._add_easter_based_holiday(offset)",
            'self._add_holiday_foo_3("C")',
            'self._add_weekday_holiday("D", NOV, THU, 4)',
        ]
    )
    extractor = HolidayCallExtractor()

    calls = extractor.extract_calls(text)

    assert [c.holiday_name for c in calls] == ["A", "B", "D"]
    assert [e.line_number for e in extractor.errors] == [2, 4, 5]


@pytest.mark.unit
def test_extract_calls_unclosed_call_does_not_borrow_next_call():
    """An unclosed malformed call should fail alone, not absorb the next call."""
    text = "\n".join(
        [
            "        self._add_holiday(date(year, JAN, 1)",
            '        self._add_holiday("Christmas Day", date(year, DEC, 25))',
            "        self._add_easter_based_holiday(",
            '        self._add_easter_based_holiday("Good Friday", -2)',
        ]
    )
    extractor = HolidayCallExtractor()

    calls = extractor.extract_calls(text)

    assert [(c.line_number, c.holiday_name) for c in calls] == [
        (2, "Christmas Day"),
        (4, "Good Friday"),
    ]
    assert calls[0].date_expression == FixedDate("DEC", 25)
    assert [e.line_number for e in extractor.errors] == [1, 3]


@pytest.mark.unit
def test_extract_calls_joins_multiline_call():
    """A call split over several lines should be completed."""
    text = "\n".join(
        [
            "        self._add_holiday(",
            "            # Labor day",
            '            "Labor Day",',
            "            date(year, MAY, 1),",
            "        )",
            '        self._add_holiday("Next", date(year, MAY, 2))',
        ]
    )

    calls = HolidayCallExtractor().extract_calls(text)

    assert [c.holiday_name for c in calls] == ["Labor Day", "Next"]
    assert calls[0].date_expression == FixedDate("MAY", 1)
    assert calls[0].line_number == 1


@pytest.mark.unit
def test_extract_calls_without_joining():
    """With joining disabled a split call should fail on its first line."""
    text = 'self._add_holiday(\n    "Labor Day", date(year, MAY, 1))'
    extractor = HolidayCallExtractor(join_continuations=False)

    assert extractor.extract_calls(text) == []
    assert len(extractor.errors) == 1


@pytest.mark.unit
def test_extract_calls_ignores_commented_calls():
    """Commented-out calls should not be extracted."""
    text = '# self._add_holiday("Old", date(year, JAN, 1))'

    assert HolidayCallExtractor().extract_calls(text) == []


@pytest.mark.unit
def test_extract_calls_resets_errors():
    """Each extraction should start with an empty error list."""
    extractor = HolidayCallExtractor()
    extractor.extract_calls("self._add_holiday(x)")
    extractor.extract_calls('self._add_holiday("A", date(year, JAN, 1))')

    assert extractor.errors == []


# ============================================================================
# Tests for helpers
# ============================================================================


@pytest.mark.unit
def test_extract_quoted_name_prefers_double_quotes():
    """Double quotes should win over single quotes."""
    name, rest = extract_quoted_name("""'a', "b", c)""", 1)

    assert name == "b"
    assert rest == ", c)"


@pytest.mark.unit
def test_extract_quoted_name_missing():
    """Missing names should raise ExtractionError with the line number."""
    with pytest.raises(ExtractionError) as exc_info:
        extract_quoted_name("date(year, JAN, 1))", 7)

    assert exc_info.value.line_number == 7


@pytest.mark.unit
@pytest.mark.parametrize(
    "text, expected",
    [
        (", -2)", "-2"),
        ("), +1)  # comment", "+1"),
        (", MAY, MON, -1)", "MAY, MON, -1"),
        (")", ""),
        (", x(), )", "x()"),
    ],
)
def test_argument_tail(text, expected):
    """The tail should drop separators, the closing paren and comments."""
    assert argument_tail(text) == expected
