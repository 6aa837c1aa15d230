"""
Dual-strategy extraction with an explicit comparison record.

Two independent strategies turn source text into holiday definitions:

- StructuralStrategy tokenizes the text, recovers class boundaries with the
  StructuralParser, and only keeps registration calls found inside a class.
- LinePatternStrategy applies the same call recognizers straight to the raw
  lines, with no tokenization or structural parsing at all.

ComparisonEngine runs both, prefers the structural result when it succeeded
and found something, and always reports both counts and the keys on which they
disagree so divergence between the two never goes unnoticed.
"""

import logging
from typing import Protocol

from core.conversion import CollisionPolicy, DefinitionConverter
from core.exceptions import ExtractionError, StructuralParseError
from core.extraction import HolidayCallExtractor
from core.models import HolidayCall, HolidayDefinition, ParsingComparison
from core.structure import StructuralParser, class_spans
from core.tokenizer import DEFAULT_RULES, TokenRule, Tokenizer
from models import StrategyName

logger = logging.getLogger(__name__)


class ExtractionStrategy(Protocol):
    """
    Protocol defining the interface for a definition extraction strategy.

    Implementations must be safe to call concurrently for different files,
    which in practice means building fresh pipeline components per call.
    """

    name: StrategyName

    def extract(self, text: str) -> dict[str, HolidayDefinition]:
        """
        Extract canonical holiday definitions from source text.

        Args:
            text: Decoded source text of one country file.

        Returns:
            Mapping of canonical key to HolidayDefinition.
        """


class LinePatternStrategy:
    """
    Extracts definitions by matching call shapes against raw source lines.

    Attributes:
        errors: Per-call extraction failures from the last `extract` call.
    """

    name = StrategyName.LINE_PATTERN

    def __init__(self, collision_policy: CollisionPolicy = CollisionPolicy.SUFFIX):
        self.collision_policy = collision_policy
        self.errors: list[ExtractionError] = []

    def extract(self, text: str) -> dict[str, HolidayDefinition]:
        extractor = HolidayCallExtractor()
        calls = extractor.extract_calls(text)
        self.errors = extractor.errors
        return DefinitionConverter(self.collision_policy).convert(calls)


class StructuralStrategy:
    """
    Extracts definitions from registration calls located inside class bodies.

    The token rules are injectable so tests can induce tokenizer gaps.

    Attributes:
        skipped_characters: Characters the tokenizer skipped in the last run.
        parse_errors: Class or method headers that failed to parse.
        errors: Per-call extraction failures from the last `extract` call.
    """

    name = StrategyName.STRUCTURAL

    def __init__(
        self,
        rules: tuple[TokenRule, ...] = DEFAULT_RULES,
        collision_policy: CollisionPolicy = CollisionPolicy.SUFFIX,
    ):
        self.rules = rules
        self.collision_policy = collision_policy
        self.skipped_characters = 0
        self.parse_errors: list[StructuralParseError] = []
        self.errors: list[ExtractionError] = []

    def extract(self, text: str) -> dict[str, HolidayDefinition]:
        """
        Run the tokenizer -> parser -> extractor -> converter pipeline.

        Raises:
            StructuralParseError: If no class could be recovered from the text.
        """
        tokenizer = Tokenizer(self.rules)
        tokens = tokenizer.tokenize(text)
        self.skipped_characters = tokenizer.skipped_characters

        parser = StructuralParser()
        classes = parser.parse_classes(tokens)
        self.parse_errors = parser.errors
        for warning in parser.warnings:
            logger.debug(warning)
        if not classes:
            raise StructuralParseError(0, "no class definition recovered")

        extractor = HolidayCallExtractor()
        calls = extractor.extract_calls(text)
        self.errors = extractor.errors

        spans = class_spans(classes, last_line=len(text.splitlines()))
        in_classes = [call for call in calls if _within(call, spans)]
        return DefinitionConverter(self.collision_policy).convert(in_classes)


def _within(call: HolidayCall, spans: list[tuple[int, int]]) -> bool:
    return any(start <= call.line_number <= end for start, end in spans)


class ComparisonEngine:
    """
    Runs the structural and line-pattern strategies and picks one result.

    Attributes:
        structural: The preferred strategy.
        line_pattern: The fallback strategy.
    """

    def __init__(
        self,
        structural: ExtractionStrategy | None = None,
        line_pattern: ExtractionStrategy | None = None,
    ):
        self.structural = structural or StructuralStrategy()
        self.line_pattern = line_pattern or LinePatternStrategy()

    def compare_strategies(
        self, text: str
    ) -> tuple[dict[str, HolidayDefinition], ParsingComparison]:
        """
        Extract definitions with both strategies and select the preferred one.

        The structural result is chosen when it did not error and produced at
        least one definition; otherwise the line-pattern result is chosen.

        Args:
            text: Decoded source text.

        Returns:
            Tuple of (chosen definitions, comparison record).
        """
        structural_error: str | None = None
        try:
            structural = self.structural.extract(text)
        except (StructuralParseError, ExtractionError) as e:
            logger.debug("Structural strategy failed: %s", e.message)
            structural_error = e.message
            structural = {}

        line_pattern = self.line_pattern.extract(text)

        if structural_error is None and structural:
            chosen, chosen_name = structural, self.structural.name
        else:
            chosen, chosen_name = line_pattern, self.line_pattern.name

        differing = sorted(set(structural) ^ set(line_pattern))
        if differing:
            logger.debug(
                "Strategies disagree on %d key(s): %s", len(differing), differing
            )

        comparison = ParsingComparison(
            structural_count=len(structural),
            line_pattern_count=len(line_pattern),
            chosen_strategy=chosen_name,
            differing_keys=tuple(differing),
            structural_error=structural_error,
        )
        return chosen, comparison
