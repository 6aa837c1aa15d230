"""
Core data models for the holiday extraction pipeline.

This module defines the data structures flowing through the pipeline: tokens
and the shallow class/method model recovered from them, the holiday calls found
at registration sites, the tagged date-expression variants, and the canonical
holiday definitions and per-country aggregate handed to the persistence layer.

All values are created fresh per processed source file and discarded after
conversion.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from models import CalculationKind, CallShape, DateType, StrategyName, TokenKind


@dataclass(frozen=True)
class Token:
    """
    A single lexical token with its position in the source.

    Attributes:
        kind: The token kind (see TokenKind).
        text: The exact source text of the token. For INDENT tokens, the run
            of leading spaces.
        line: 1-based source line number.
        column: 0-based column of the first character of the token.
    """

    kind: TokenKind
    text: str
    line: int
    column: int


@dataclass(frozen=True)
class MethodInfo:
    name: str
    parameter_names: tuple[str, ...]
    declaration_line: int


@dataclass(frozen=True)
class ClassInfo:
    """
    Shallow model of a class declaration recovered from the token stream.

    Attributes:
        name: The declared class name.
        base_type_names: Candidate base types found in the header. Dotted
            references are joined (e.g., "holidays.HolidayBase"). These are
            heuristic and never resolved against imports.
        methods: Mapping of method name to MethodInfo for every `def` found
            before the next class keyword.
        declaration_line: Line of the `class` keyword.
    """

    name: str
    base_type_names: tuple[str, ...]
    methods: dict[str, MethodInfo]
    declaration_line: int


@dataclass(frozen=True)
class FixedDate:
    """A calendar date repeating every year. `month` is the raw token."""

    month: str
    day: int

    @property
    def date_type(self) -> DateType:
        return DateType.FIXED


@dataclass(frozen=True)
class EasterBasedDate:
    """A movable feast expressed as a signed day offset from Easter Sunday."""

    offset: int = 0

    @property
    def date_type(self) -> DateType:
        return DateType.EASTER_BASED


@dataclass(frozen=True)
class WeekdayBasedDate:
    """An Nth-weekday-of-month rule, kept as opaque argument text."""

    rule_text: str

    @property
    def date_type(self) -> DateType:
        return DateType.WEEKDAY_BASED


@dataclass(frozen=True)
class CalculatedDate:
    """Catch-all for argument text outside the recognized shapes."""

    raw_text: str

    @property
    def date_type(self) -> DateType:
        return DateType.CALCULATED


DateExpression = FixedDate | EasterBasedDate | WeekdayBasedDate | CalculatedDate


@dataclass(frozen=True)
class HolidayCall:
    """
    One recognized rule-registration site.

    Attributes:
        registration_method: The called method name (e.g., "_add_holiday").
        shape: The registration idiom the call was recognized as.
        holiday_name: The quoted holiday name found in the arguments.
        date_expression: The classified date calculation.
        source_line: The raw call-site line, kept for diagnostics.
        line_number: 1-based line number of the call site.
    """

    registration_method: str
    shape: CallShape
    holiday_name: str
    date_expression: DateExpression
    source_line: str
    line_number: int


@dataclass(frozen=True)
class WeekdayRule:
    """
    Structured form of a weekday-relative rule.

    Attributes:
        month: Calendar month, 1-12.
        weekday: Day of week, Monday=0 through Sunday=6.
        occurrence: 1 for the first occurrence, 2 for the second, and so on;
            negative values count from the end of the month (-1 = last).
    """

    month: int
    weekday: int
    occurrence: int


@dataclass(frozen=True)
class HolidayDefinition:
    """
    Canonical, language-neutral description of how one holiday is computed.

    Invariants:
        - FIXED implies month and day are set and 1 <= month <= 12.
        - EASTER_BASED implies easter_offset is set (zero allowed).
    """

    name: str
    calculation_kind: CalculationKind
    category: str = "public"
    language_names: dict[str, str] = field(default_factory=dict)
    month: int | None = None
    day: int | None = None
    easter_offset: int | None = None
    weekday_rule: WeekdayRule | None = None
    expression: str | None = None

    def __post_init__(self):
        if self.calculation_kind == CalculationKind.FIXED:
            if self.month is None or self.day is None:
                raise ValueError(f"Fixed holiday '{self.name}' needs month and day")
            if not 1 <= self.month <= 12:
                raise ValueError(
                    f"Fixed holiday '{self.name}' has invalid month {self.month}"
                )
        if (
            self.calculation_kind == CalculationKind.EASTER_BASED
            and self.easter_offset is None
        ):
            raise ValueError(f"Easter-based holiday '{self.name}' needs an offset")

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the JSON record shape, omitting unset optional fields."""
        data: dict[str, Any] = {
            "name": self.name,
            "category": self.category,
            "languages": dict(self.language_names),
            "calculation": str(self.calculation_kind),
        }
        if self.month is not None:
            data["month"] = self.month
        if self.day is not None:
            data["day"] = self.day
        if self.easter_offset is not None:
            data["easter_offset"] = self.easter_offset
        if self.weekday_rule is not None:
            data["weekday_rule"] = {
                "month": self.weekday_rule.month,
                "weekday": self.weekday_rule.weekday,
                "occurrence": self.weekday_rule.occurrence,
            }
        if self.expression is not None:
            data["expression"] = self.expression
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "HolidayDefinition":
        rule = data.get("weekday_rule")
        return cls(
            name=data["name"],
            calculation_kind=CalculationKind(data["calculation"]),
            category=data.get("category", "public"),
            language_names=dict(data.get("languages", {})),
            month=data.get("month"),
            day=data.get("day"),
            easter_offset=data.get("easter_offset"),
            weekday_rule=WeekdayRule(**rule) if rule else None,
            expression=data.get("expression"),
        )


@dataclass
class CountryData:
    """
    Aggregate of everything extracted from one country source file.

    Attributes:
        country_code: ISO 3166-1 alpha-2 code, or an empty string when it
            could not be determined.
        name: Human-readable country name.
        subdivisions: Mapping of subdivision code to subdivision name.
        categories: Holiday categories supported by the source.
        languages: Languages supported by the source.
        holidays: Mapping of canonical key to HolidayDefinition.
        fetched_at: When the data was produced (UTC).
    """

    country_code: str
    name: str
    subdivisions: dict[str, str] = field(default_factory=dict)
    categories: list[str] = field(default_factory=lambda: ["public"])
    languages: list[str] = field(default_factory=lambda: ["en"])
    holidays: dict[str, HolidayDefinition] = field(default_factory=dict)
    fetched_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict[str, Any]:
        return {
            "country_code": self.country_code,
            "name": self.name,
            "subdivisions": dict(self.subdivisions),
            "categories": list(self.categories),
            "languages": list(self.languages),
            "holidays": {
                key: definition.to_dict()
                for key, definition in sorted(self.holidays.items())
            },
            "fetched_at": self.fetched_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CountryData":
        return cls(
            country_code=data.get("country_code", ""),
            name=data.get("name", ""),
            subdivisions=dict(data.get("subdivisions") or {}),
            categories=list(data.get("categories") or []),
            languages=list(data.get("languages") or []),
            holidays={
                key: HolidayDefinition.from_dict(value)
                for key, value in (data.get("holidays") or {}).items()
            },
            fetched_at=datetime.fromisoformat(data["fetched_at"])
            if data.get("fetched_at")
            else datetime.now(timezone.utc),
        )


@dataclass(frozen=True)
class ParsingComparison:
    """
    Diagnostic record comparing the structural and line-pattern strategies.

    Attributes:
        structural_count: Definitions produced by the structural pipeline.
        line_pattern_count: Definitions produced by the line-pattern path.
        structural_error: Message of the structural pipeline failure, if any.
        chosen_strategy: Which result was selected.
        differing_keys: Sorted symmetric difference of the two key sets.
    """

    structural_count: int
    line_pattern_count: int
    chosen_strategy: StrategyName
    differing_keys: tuple[str, ...] = ()
    structural_error: str | None = None
