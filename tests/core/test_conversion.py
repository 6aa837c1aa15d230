"""
Tests for the conversion module.

Tests cover:
- make_holiday_key: canonical key derivation
- normalize_month and parse_weekday_rule
- DefinitionConverter: per-variant conversion, idempotence, collision policies
"""

import pytest

from core.conversion import (
    CollisionPolicy,
    DefinitionConverter,
    make_holiday_key,
    normalize_month,
    parse_weekday_rule,
)
from core.exceptions import DefinitionCollisionError
from core.extraction import HolidayCallExtractor
from core.models import (
    CalculatedDate,
    EasterBasedDate,
    FixedDate,
    HolidayCall,
    WeekdayBasedDate,
    WeekdayRule,
)
from models import CalculationKind, CallShape


def make_call(name, expression, line_number=1):
    return HolidayCall(
        registration_method="_add_holiday",
        shape=CallShape.GENERIC,
        holiday_name=name,
        date_expression=expression,
        source_line="",
        line_number=line_number,
    )


# ============================================================================
# Tests for make_holiday_key
# ============================================================================


@pytest.mark.unit
@pytest.mark.parametrize(
    "name, key",
    [
        ("New Year's Day", "new_year's_day"),
        ("Good Friday", "good_friday"),
        ("Day of the Dead (observed)", "day_of_the_dead_observed"),
        ("  Labour   Day  ", "labour_day"),
        ("Half-day__Holiday", "half_day_holiday"),
        ("Día de la Independencia", "día_de_la_independencia"),
        ("!!!", ""),
    ],
)
def test_make_holiday_key(name, key):
    """Keys should be lower-case with single underscores between words."""
    assert make_holiday_key(name) == key


# ============================================================================
# Tests for normalize_month
# ============================================================================


@pytest.mark.unit
@pytest.mark.parametrize(
    "token, month",
    [("JAN", 1), ("dec", 12), ("September", 9), ("7", 7), (12, 12)],
)
def test_normalize_month(token, month):
    """Abbreviations, full names and numbers should map to 1..12."""
    assert normalize_month(token) == month


@pytest.mark.unit
@pytest.mark.parametrize(
    "token", ["13", "0", "FOO", "", "MAYBE", "Janu", "DECEMBERS"]
)
def test_normalize_month_falls_back_to_january(token, caplog):
    """Unknown tokens should fall back to January with a warning."""
    assert normalize_month(token) == 1
    assert "defaulting to January" in caplog.text


# ============================================================================
# Tests for parse_weekday_rule
# ============================================================================


@pytest.mark.unit
@pytest.mark.parametrize(
    "text, rule",
    [
        ("MAY, MON, -1", WeekdayRule(5, 0, -1)),
        ("NOV, THU, 4", WeekdayRule(11, 3, 4)),
        ("JAN, 3, MON", WeekdayRule(1, 0, 3)),
        ("month=SEP, weekday=MON, number=1", WeekdayRule(9, 0, 1)),
    ],
)
def test_parse_weekday_rule(text, rule):
    """Month, weekday and occurrence should be found by token type."""
    assert parse_weekday_rule(text) == rule


@pytest.mark.unit
@pytest.mark.parametrize("text", ["", "MAY, MON", "MAY, MON, 0", "self._rule()"])
def test_parse_weekday_rule_incomplete(text):
    """Incomplete rules should give None."""
    assert parse_weekday_rule(text) is None


# ============================================================================
# Tests for DefinitionConverter.to_definition
# ============================================================================


@pytest.mark.unit
def test_to_definition_fixed():
    """Fixed dates should normalize the month token."""
    definition = DefinitionConverter().to_definition(
        make_call("New Year's Day", FixedDate("JAN", 1))
    )

    assert definition.calculation_kind == CalculationKind.FIXED
    assert (definition.month, definition.day) == (1, 1)
    assert definition.category == "public"
    assert definition.language_names == {"en": "New Year's Day"}


@pytest.mark.unit
def test_to_definition_easter_based():
    """Easter offsets should be copied as-is."""
    definition = DefinitionConverter().to_definition(
        make_call("Good Friday", EasterBasedDate(-2))
    )

    assert definition.calculation_kind == CalculationKind.EASTER_BASED
    assert definition.easter_offset == -2
    assert definition.month is None


@pytest.mark.unit
def test_to_definition_weekday_based():
    """Weekday rules should be parsed and the raw text kept."""
    definition = DefinitionConverter().to_definition(
        make_call("Memorial Day", WeekdayBasedDate("MAY, MON, -1"))
    )

    assert definition.calculation_kind == CalculationKind.WEEKDAY_BASED
    assert definition.weekday_rule == WeekdayRule(5, 0, -1)
    assert definition.expression == "MAY, MON, -1"


@pytest.mark.unit
def test_to_definition_calculated():
    """Calculated dates should become complex definitions."""
    converter = DefinitionConverter(category="optional")
    definition = converter.to_definition(
        make_call("Election Day", CalculatedDate("self._election()"))
    )

    assert definition.calculation_kind == CalculationKind.COMPLEX
    assert definition.expression == "self._election()"
    assert definition.category == "optional"


# ============================================================================
# Tests for DefinitionConverter.convert
# ============================================================================


@pytest.mark.unit
def test_convert_is_idempotent(sample_source):
    """Converting the same calls twice should give identical results."""
    calls = HolidayCallExtractor().extract_calls(sample_source)
    converter = DefinitionConverter()

    first = converter.convert(calls)
    second = converter.convert(calls)

    assert list(first) == list(second)
    assert first == second
    assert {k: v.to_dict() for k, v in first.items()} == {
        k: v.to_dict() for k, v in second.items()
    }


@pytest.mark.unit
def test_convert_collapses_identical_definitions():
    """The same holiday registered twice should give one entry."""
    calls = [
        make_call("Labour Day", FixedDate("MAY", 1), 1),
        make_call("Labour Day", FixedDate("MAY", 1), 5),
    ]
    converter = DefinitionConverter()

    definitions = converter.convert(calls)

    assert list(definitions) == ["labour_day"]
    assert converter.collisions == []


@pytest.mark.unit
def test_convert_suffixes_conflicting_definitions():
    """A different definition under the same key should get a suffix."""
    calls = [
        make_call("Labour Day", FixedDate("MAY", 1)),
        make_call("Labour Day", FixedDate("SEP", 1)),
        make_call("Labour Day", FixedDate("OCT", 1)),
        make_call("Labour Day", FixedDate("SEP", 1)),
    ]
    converter = DefinitionConverter()

    definitions = converter.convert(calls)

    assert list(definitions) == ["labour_day", "labour_day_2", "labour_day_3"]
    assert definitions["labour_day_2"].month == 9
    assert definitions["labour_day_3"].month == 10
    assert converter.collisions == ["labour_day"] * 3


@pytest.mark.unit
def test_convert_overwrite_keeps_last():
    """OVERWRITE should keep the last definition seen."""
    calls = [
        make_call("Labour Day", FixedDate("MAY", 1)),
        make_call("Labour Day", FixedDate("SEP", 1)),
    ]

    definitions = DefinitionConverter(CollisionPolicy.OVERWRITE).convert(calls)

    assert list(definitions) == ["labour_day"]
    assert definitions["labour_day"].month == 9


@pytest.mark.unit
def test_convert_reject_raises():
    """REJECT should raise on a conflicting definition."""
    calls = [
        make_call("Labour Day", FixedDate("MAY", 1)),
        make_call("Labour Day", FixedDate("SEP", 1)),
    ]

    with pytest.raises(DefinitionCollisionError) as exc_info:
        DefinitionConverter(CollisionPolicy.REJECT).convert(calls)

    assert exc_info.value.key == "labour_day"


@pytest.mark.unit
def test_convert_skips_empty_keys():
    """Names without any word characters should be dropped."""
    definitions = DefinitionConverter().convert([make_call("???", FixedDate("JAN", 1))])

    assert definitions == {}
