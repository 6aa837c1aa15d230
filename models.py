"""
Type definitions and data models used across the holiday sync application.

This module contains shared enumerations and TypedDict structures that describe
the closed vocabularies of the extraction pipeline (token kinds, call shapes,
calculation kinds) and the JSON payloads returned by the remote code host.
"""

from enum import StrEnum
from typing import TypedDict


class TokenKind(StrEnum):
    """Closed set of token kinds produced by the tokenizer."""

    CLASS = "class"
    DEF = "def"
    SELF = "self"
    STRING = "string"
    NUMBER = "number"
    IDENTIFIER = "identifier"
    OPERATOR = "operator"
    INDENT = "indent"


class CallShape(StrEnum):
    """
    Enumeration of the rule-registration idioms recognized in source text.

    GENERIC, EASTER_BASED and WEEKDAY_BASED cover the three registration calls
    of the upstream library. DATE_SUFFIXED covers helpers that encode a fixed
    date in their own name (e.g. `_add_holiday_jan_1`) and NAMED_HELPER covers
    well-known feast helpers (e.g. `_add_good_friday`).
    """

    GENERIC = "generic"
    EASTER_BASED = "easter_based"
    WEEKDAY_BASED = "weekday_based"
    DATE_SUFFIXED = "date_suffixed"
    NAMED_HELPER = "named_helper"


class DateType(StrEnum):
    """Tag of a classified date expression."""

    FIXED = "fixed"
    EASTER_BASED = "easter_based"
    WEEKDAY_BASED = "weekday_based"
    CALCULATED = "calculated"


class CalculationKind(StrEnum):
    """Calculation strategy recorded in a canonical holiday definition."""

    FIXED = "fixed"
    EASTER_BASED = "easter_based"
    WEEKDAY_BASED = "weekday_based"
    COMPLEX = "complex"


class StrategyName(StrEnum):
    STRUCTURAL = "structural"
    LINE_PATTERN = "line_pattern"


class FileEntry(TypedDict):
    """
    One entry of a directory listing returned by the contents endpoint.

    Attributes:
        name: The file or directory name (e.g., "united_states.py").
        type: The entry type, "file" or "dir".
        path: Repository-relative path of the entry.
    """

    name: str
    type: str
    path: str


class FileContent(TypedDict):
    """
    File payload returned by the contents endpoint for a single file.

    Attributes:
        content: Transport-encoded file body, possibly with embedded newlines.
        encoding: Name of the transport encoding; only "base64" is supported.
    """

    content: str
    encoding: str
