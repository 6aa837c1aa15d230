"""
Canonicalization of extracted holiday calls into holiday definitions.

Each HolidayCall becomes a HolidayDefinition keyed by a deterministic key
derived from the holiday name. Symbolic month and weekday tokens are
normalized through closed tables, Easter offsets are copied as-is, and
weekday rules are parsed on a best-effort basis.

Two different calls can normalize to the same key (e.g. one holiday whose
date rule changed between year ranges). What happens then is governed by an
explicit CollisionPolicy instead of silently keeping the last definition.
"""

from enum import StrEnum
import logging
import re

from constants import (
    DEFAULT_CATEGORY,
    DEFAULT_LANGUAGE,
    MONTH_ABBREVIATIONS,
    MONTH_NAMES,
    WEEKDAY_ABBREVIATIONS,
)
from core.exceptions import DefinitionCollisionError
from core.models import (
    EasterBasedDate,
    FixedDate,
    HolidayCall,
    HolidayDefinition,
    WeekdayBasedDate,
    WeekdayRule,
)
from models import CalculationKind

logger = logging.getLogger(__name__)

_KEY_SEPARATORS = re.compile(r"(?:[^\w']|_)+")


class CollisionPolicy(StrEnum):
    """
    What to do when two calls normalize to the same key.

    Attributes:
        OVERWRITE: Keep the last definition seen.
        SUFFIX: Keep both. Identical definitions collapse into one; a
            different one is stored under `<key>_2`, `<key>_3`, ...
        REJECT: Raise DefinitionCollisionError.
    """

    OVERWRITE = "overwrite"
    SUFFIX = "suffix"
    REJECT = "reject"


def make_holiday_key(name: str) -> str:
    """
    Derive the canonical lookup key from a holiday name.

    The name is lower-cased; apostrophes stay part of the word, every other
    run of non-alphanumeric characters becomes one underscore, and leading or
    trailing underscores are trimmed.

    Examples:
        >>> make_holiday_key("New Year's Day")
        "new_year's_day"
        >>> make_holiday_key("Day of the Dead (observed)")
        'day_of_the_dead_observed'
    """
    return _KEY_SEPARATORS.sub("_", name.lower()).strip("_")


def normalize_month(token: str | int) -> int:
    """
    Convert a month token to its calendar number.

    Exact three-letter abbreviations and full English names (any case) are
    looked up first, then numeric strings in 1..12. Anything else falls back
    to January.
    """
    text = str(token).strip()
    upper = text.upper()
    month = MONTH_ABBREVIATIONS.get(upper) or MONTH_NAMES.get(upper)
    if month is not None:
        return month
    if text.isdigit() and 1 <= int(text) <= 12:
        return int(text)
    logger.warning("Unrecognized month token '%s', defaulting to January", text)
    return 1


def parse_weekday_rule(rule_text: str) -> WeekdayRule | None:
    """
    Best-effort parse of weekday rule arguments such as `MAY, MON, -1`.

    The month, the weekday and the signed occurrence are picked out by token
    type, whatever their order. Returns None unless all three are found.
    """
    month = weekday = occurrence = None
    for part in (p.strip() for p in rule_text.split(",")):
        if "=" in part:
            part = part.split("=", 1)[1].strip()
        upper = part.upper()
        if month is None and upper in MONTH_ABBREVIATIONS:
            month = MONTH_ABBREVIATIONS[upper]
        elif weekday is None and upper[:3] in WEEKDAY_ABBREVIATIONS and upper.isalpha():
            weekday = WEEKDAY_ABBREVIATIONS[upper[:3]]
        elif occurrence is None and re.fullmatch(r"[+-]?\s*\d+", part):
            occurrence = int(part.replace(" ", ""))

    if month is None or weekday is None or occurrence is None or occurrence == 0:
        return None
    return WeekdayRule(month=month, weekday=weekday, occurrence=occurrence)


class DefinitionConverter:
    """
    Converts HolidayCall lists into keyed HolidayDefinition mappings.

    Attributes:
        collision_policy: Behavior on key collisions.
        category: Category assigned to every definition.
        collisions: Keys that collided during the last `convert` call.
    """

    def __init__(
        self,
        collision_policy: CollisionPolicy = CollisionPolicy.SUFFIX,
        category: str = DEFAULT_CATEGORY,
    ):
        self.collision_policy = collision_policy
        self.category = category
        self.collisions: list[str] = []

    def convert(self, calls: list[HolidayCall]) -> dict[str, HolidayDefinition]:
        """
        Canonicalize calls into definitions keyed by `make_holiday_key`.

        The result only depends on the calls and their order, so converting
        the same list twice yields identical mappings.

        Raises:
            DefinitionCollisionError: Under CollisionPolicy.REJECT, when two
                different definitions share a key.
        """
        self.collisions = []
        definitions: dict[str, HolidayDefinition] = {}

        for call in calls:
            definition = self.to_definition(call)
            key = make_holiday_key(call.holiday_name)
            if not key:
                logger.debug("Skipping call with empty key on line %d", call.line_number)
                continue

            existing = definitions.get(key)
            if existing is None or existing == definition:
                definitions[key] = definition
                continue

            self.collisions.append(key)
            if self.collision_policy == CollisionPolicy.REJECT:
                raise DefinitionCollisionError(key)
            if self.collision_policy == CollisionPolicy.OVERWRITE:
                logger.debug("Overwriting definition for '%s'", key)
                definitions[key] = definition
                continue

            definitions[self._free_key(definitions, key, definition)] = definition

        return definitions

    def to_definition(self, call: HolidayCall) -> HolidayDefinition:
        """Build the canonical definition for a single call."""
        expression = call.date_expression
        common = {
            "name": call.holiday_name,
            "category": self.category,
            "language_names": {DEFAULT_LANGUAGE: call.holiday_name},
        }

        if isinstance(expression, FixedDate):
            return HolidayDefinition(
                calculation_kind=CalculationKind.FIXED,
                month=normalize_month(expression.month),
                day=expression.day,
                **common,
            )
        if isinstance(expression, EasterBasedDate):
            return HolidayDefinition(
                calculation_kind=CalculationKind.EASTER_BASED,
                easter_offset=expression.offset,
                **common,
            )
        if isinstance(expression, WeekdayBasedDate):
            return HolidayDefinition(
                calculation_kind=CalculationKind.WEEKDAY_BASED,
                weekday_rule=parse_weekday_rule(expression.rule_text),
                expression=expression.rule_text or None,
                **common,
            )
        return HolidayDefinition(
            calculation_kind=CalculationKind.COMPLEX,
            expression=expression.raw_text or None,
            **common,
        )

    @staticmethod
    def _free_key(
        definitions: dict[str, HolidayDefinition],
        key: str,
        definition: HolidayDefinition,
    ) -> str:
        suffix = 2
        while True:
            candidate = f"{key}_{suffix}"
            existing = definitions.get(candidate)
            if existing is None or existing == definition:
                return candidate
            suffix += 1
