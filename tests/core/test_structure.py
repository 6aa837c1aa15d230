"""
Tests for the structure module.

Tests cover:
- StructuralParser.parse_classes: class names, bases, methods, recovery
- StructuralParser.parse_method: parameter names
- class_spans: line ranges covered by each class
"""

import pytest

from core.structure import StructuralParser, class_spans
from core.tokenizer import Tokenizer


def parse(text):
    parser = StructuralParser()
    return parser, parser.parse_classes(Tokenizer().tokenize(text))


# ============================================================================
# Tests for StructuralParser.parse_classes
# ============================================================================


@pytest.mark.unit
def test_parse_classes_sample_source(sample_source):
    """The sample source should yield the country class and its alias."""
    parser, classes = parse(sample_source)

    assert [c.name for c in classes] == ["UnitedStates", "US"]
    assert classes[0].base_type_names == ("HolidayBase",)
    assert classes[1].base_type_names == ("UnitedStates",)
    assert set(classes[0].methods) == {"__init__", "_populate_public_holidays"}
    assert classes[1].methods == {}
    assert parser.errors == []


@pytest.mark.unit
def test_parse_classes_joins_dotted_bases_and_skips_keywords():
    """Dotted bases should be joined and keyword arguments ignored."""
    _, classes = parse("class Foo(holidays.HolidayBase, Mixin, metaclass=Meta):\n    pass")

    assert classes[0].base_type_names == ("holidays.HolidayBase", "Mixin")


@pytest.mark.unit
def test_parse_classes_without_bases():
    """A class without parentheses should have no base types."""
    _, classes = parse("class Foo:\n    x = 1")

    assert classes[0].name == "Foo"
    assert classes[0].base_type_names == ()
    assert classes[0].declaration_line == 1


@pytest.mark.unit
def test_parse_classes_multiline_header():
    """A header spanning lines inside parentheses should parse."""
    text = "class Foo(\n    Base,\n    Other,\n):\n    def f(self):\n        pass"
    _, classes = parse(text)

    assert classes[0].base_type_names == ("Base", "Other")
    assert "f" in classes[0].methods


@pytest.mark.unit
def test_parse_classes_recovers_from_unterminated_header():
    """A broken class header should be skipped and scanning resumed."""
    text = "class Broken(Base)\n    x = 1\nclass Good(Base):\n    pass"
    parser, classes = parse(text)

    assert [c.name for c in classes] == ["Good"]
    assert len(parser.errors) == 1
    assert parser.errors[0].line_number == 1


@pytest.mark.unit
def test_parse_classes_missing_name():
    """A class keyword without a name should be recorded as an error."""
    parser, classes = parse("class (Base):\n    pass")

    assert classes == []
    assert "expected class name" in parser.errors[0].message


@pytest.mark.unit
def test_parse_classes_warns_about_nested_class():
    """A nested class should be reported and flattened to top level."""
    text = "class Outer:\n    class Inner:\n        pass"
    parser, classes = parse(text)

    assert [c.name for c in classes] == ["Outer", "Inner"]
    assert len(parser.warnings) == 1
    assert "Outer" in parser.warnings[0]


@pytest.mark.unit
def test_parse_classes_skips_broken_method():
    """A broken method header should not drop the rest of the class."""
    text = "class Foo:\n    def broken(self)\n    def ok(self):\n        pass"
    parser, classes = parse(text)

    assert list(classes[0].methods) == ["ok"]
    assert len(parser.errors) == 1


# ============================================================================
# Tests for StructuralParser.parse_method
# ============================================================================


@pytest.mark.unit
def test_parse_method_parameter_names():
    """Parameters should ignore annotations, defaults and star prefixes."""
    text = "class Foo:\n    def f(self, year: int = 2000, *args, **kwargs) -> None:\n        pass"
    _, classes = parse(text)

    method = classes[0].methods["f"]
    assert method.parameter_names == ("self", "year", "args", "kwargs")
    assert method.declaration_line == 2


@pytest.mark.unit
def test_parse_method_without_parameters():
    """A method without parameters should have an empty tuple."""
    _, classes = parse("class Foo:\n    def f():\n        pass")

    assert classes[0].methods["f"].parameter_names == ()


# ============================================================================
# Tests for class_spans
# ============================================================================


@pytest.mark.unit
def test_class_spans(sample_source):
    """Each class should span up to the line before the next class."""
    _, classes = parse(sample_source)
    last_line = len(sample_source.splitlines())

    spans = class_spans(classes, last_line)

    assert spans[0] == (6, 32)
    assert spans[1] == (33, last_line)


@pytest.mark.unit
def test_class_spans_empty():
    """No classes should give no spans."""
    assert class_spans([], 10) == []
