"""
Per-file parsing pipeline and batch synchronization.

`parse_country_data` turns the decoded text of one country source file into a
CountryData record: it validates the text, reads the country metadata
(name, code, subdivisions, supported categories and languages) and extracts
the holiday definitions with the structural strategy, falling back to the
line-pattern strategy when the structural one fails or finds nothing.

`sync_countries` drives that pipeline over many countries through a shared,
rate-limited fetcher. File-level failures are reported per country and never
stop the batch; only caller cancellation does.
"""

import asyncio
from dataclasses import dataclass, field
import logging
from pathlib import Path
import re
from typing import Optional

from adapters.github import GitHubFetcher
from constants import DEFAULT_CATEGORY, DEFAULT_LANGUAGE
from core.comparison import ComparisonEngine, LinePatternStrategy, StructuralStrategy
from core.content import validate_content
from core.exceptions import (
    ContentValidationError,
    DecodeError,
    FetchCancelledError,
    FetchError,
    FileIOError,
    StructuralParseError,
    UnknownCountryError,
)
from core.file_io import (
    FileWriter,
    country_record_path,
    load_country_data,
    save_country_data,
)
from core.models import CountryData, HolidayDefinition, ParsingComparison
from ui.progress_display import NoOpSyncProgressDisplay, SyncProgressDisplay

logger = logging.getLogger(__name__)

_CLASS_HEADER = re.compile(
    r"^class\s+([A-Za-z_]\w*)\s*(?:\(([^)]*)\))?\s*:", re.MULTILINE
)
_CAMEL_BOUNDARY = re.compile(r"([a-z])([A-Z])")
_COUNTRY_ATTRIBUTE = re.compile(r"^\s+country\s*=\s*['\"]([A-Z]{2,3})['\"]", re.MULTILINE)
_SUBDIVISION_PAIR = re.compile(r"['\"]([A-Z0-9]{1,3})['\"]:\s*['\"]([^'\"]+)['\"]")
_SUBDIVISION_ALIAS = re.compile(r"['\"]([^'\"]+)['\"]:\s*['\"]([A-Z0-9]{1,3})['\"]")
_QUOTED = re.compile(r"['\"]([^'\"]+)['\"]")
_IDENTIFIER = re.compile(r"\b([A-Za-z_]\w*)\b")

# Errors that fail one country without stopping the batch.
FILE_LEVEL_ERRORS = (
    FetchError,
    DecodeError,
    ContentValidationError,
    UnknownCountryError,
    FileIOError,
)


@dataclass
class ParseResult:
    """
    Outcome of parsing one country source file.

    Attributes:
        country_data: The extracted country record.
        strategy_error: Why the structural strategy was not used, if it
            failed and the line-pattern fallback was taken.
        comparison: Strategy comparison record, when requested.
    """

    country_data: CountryData
    strategy_error: Optional[str] = None
    comparison: Optional[ParsingComparison] = None


@dataclass
class SyncReport:
    """
    Success/failure tally of a batch sync.

    Attributes:
        succeeded: Country codes that synced, in completion order.
        failed: Mapping of country code to failure message.
        written: Paths of the records written to disk.
    """

    succeeded: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)
    written: list[Path] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.succeeded) + len(self.failed)


@dataclass
class ValidationReport:
    """
    Outcome of checking stored records against fresh upstream data.

    Attributes:
        unchanged: Country codes whose record matches upstream.
        differences: Mapping of country code to its differences.
        missing: Country codes without a stored record.
        failed: Mapping of country code to failure message.
    """

    unchanged: list[str] = field(default_factory=list)
    differences: dict[str, list[str]] = field(default_factory=dict)
    missing: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)


def country_name_from_class(class_name: str) -> str:
    """
    Split a CamelCase class name into words.

    Examples:
        >>> country_name_from_class("UnitedStates")
        'United States'
    """
    return _CAMEL_BOUNDARY.sub(r"\1 \2", class_name)


def find_country_class(text: str) -> Optional[str]:
    """
    Return the name of the main country class.

    Upstream files declare the country class with several base types and then
    short aliases (`class US(UnitedStates)`). The first class deriving from a
    `*HolidayBase` type wins, otherwise the first declared class.
    """
    headers = _CLASS_HEADER.findall(text)
    for name, bases in headers:
        if "HolidayBase" in bases:
            return name
    return headers[0][0] if headers else None


def extract_subdivisions(text: str) -> dict[str, str]:
    """
    Collect subdivision codes and names.

    Literal `"CODE": "Name"` pairs are taken as-is. Codes listed in a
    `subdivisions = (...)` tuple are named through `subdivisions_aliases`
    when an alias exists, and by their code otherwise.
    """
    subdivisions = dict(_SUBDIVISION_PAIR.findall(text))

    aliases: dict[str, str] = {}
    alias_block = _assignment_block(text, "subdivisions_aliases")
    if alias_block:
        for name, code in _SUBDIVISION_ALIAS.findall(alias_block):
            aliases.setdefault(code, name)

    tuple_block = _assignment_block(text, "subdivisions")
    if tuple_block:
        for code in _QUOTED.findall(tuple_block):
            subdivisions.setdefault(code, aliases.get(code, code))

    return subdivisions


def extract_supported(text: str, attribute: str, default: str) -> list[str]:
    """
    Read a `supported_*` tuple, accepting string literals or constants.

    Constants such as `PUBLIC` are lower-cased. Returns `[default]` when the
    attribute is absent or empty.
    """
    block = _assignment_block(text, attribute)
    if not block:
        return [default]
    inner = block[block.find("(") + 1 :] if "(" in block else block
    values = _QUOTED.findall(inner) or [
        name.lower() for name in _IDENTIFIER.findall(inner)
    ]
    return list(dict.fromkeys(values)) or [default]


def _assignment_block(text: str, attribute: str) -> Optional[str]:
    """Return the bracketed value assigned to a class attribute, if any."""
    match = re.search(rf"^\s+{attribute}\s*=\s*([(\[{{])", text, re.MULTILINE)
    if not match:
        return None
    start = match.start(1)
    depth = 0
    for index in range(start, len(text)):
        char = text[index]
        if char in "([{":
            depth += 1
        elif char in ")]}":
            depth -= 1
            if depth == 0:
                return text[start : index + 1]
    return text[start:]


def extract_definitions(text: str) -> tuple[dict[str, HolidayDefinition], Optional[str]]:
    """
    Extract definitions with the structural strategy and line-pattern fallback.

    Returns:
        Tuple of (definitions, structural failure message or None).
    """
    try:
        definitions = StructuralStrategy().extract(text)
    except StructuralParseError as e:
        logger.debug("Falling back to line patterns: %s", e.message)
        return LinePatternStrategy().extract(text), e.message

    if definitions:
        return definitions, None
    logger.debug("Structural strategy found no definitions, using line patterns")
    return LinePatternStrategy().extract(text), "no definitions found"


def parse_country_data(
    text: str,
    country_code: Optional[str] = None,
    compare: bool = False,
    engine: Optional[ComparisonEngine] = None,
) -> ParseResult:
    """
    Parse the decoded source of one country into a CountryData record.

    Args:
        text: Decoded source text.
        country_code: Code the file was fetched for. A `country = "XX"`
            attribute in the source takes precedence.
        compare: When True, run both strategies through the comparison
            engine and attach the comparison record.
        engine: Optional comparison engine (used when `compare` is True).

    Returns:
        ParseResult with the country record.

    Raises:
        ContentValidationError: If the text fails the relevance heuristics.
    """
    validate_content(text)

    class_name = find_country_class(text) or ""
    declared = _COUNTRY_ATTRIBUTE.search(text)
    code = declared.group(1) if declared else (country_code or "").upper()

    comparison = None
    strategy_error = None
    if compare:
        definitions, comparison = (engine or ComparisonEngine()).compare_strategies(text)
        strategy_error = comparison.structural_error
    else:
        definitions, strategy_error = extract_definitions(text)

    country_data = CountryData(
        country_code=code,
        name=country_name_from_class(class_name) if class_name else code,
        subdivisions=extract_subdivisions(text),
        categories=extract_supported(text, "supported_categories", DEFAULT_CATEGORY),
        languages=extract_supported(text, "supported_languages", DEFAULT_LANGUAGE),
        holidays=definitions,
    )
    logger.debug(
        "Parsed %s (%s): %d holidays",
        country_data.name,
        code or "?",
        len(definitions),
    )
    return ParseResult(
        country_data=country_data,
        strategy_error=strategy_error,
        comparison=comparison,
    )


def compare_country_data(existing: CountryData, fresh: CountryData) -> list[str]:
    """
    Describe how a stored record differs from freshly parsed data.

    Returns:
        Human-readable differences, empty when the holiday sets and their
        definitions match. Fetch timestamps are ignored.
    """
    differences: list[str] = []
    if existing.name != fresh.name:
        differences.append(f"name: '{existing.name}' -> '{fresh.name}'")

    for key in sorted(set(existing.holidays) - set(fresh.holidays)):
        differences.append(f"removed holiday: {key}")
    for key in sorted(set(fresh.holidays) - set(existing.holidays)):
        differences.append(f"added holiday: {key}")
    for key in sorted(set(existing.holidays) & set(fresh.holidays)):
        if existing.holidays[key] != fresh.holidays[key]:
            differences.append(f"changed holiday: {key}")

    if existing.subdivisions != fresh.subdivisions:
        differences.append("subdivisions changed")
    return differences


async def sync_country(
    fetcher: GitHubFetcher,
    country_code: str,
    output_dir: Optional[Path] = None,
    compare: bool = False,
    cancel: Optional[asyncio.Event] = None,
    writer: Optional[FileWriter] = None,
) -> tuple[ParseResult, Optional[Path]]:
    """
    Fetch, parse and optionally persist one country.

    Args:
        fetcher: Rate-limited fetcher shared by the batch.
        country_code: ISO code of the country.
        output_dir: Directory for the JSON record; None for a dry run.
        compare: Attach a strategy comparison record to the result.
        cancel: Optional cancellation signal.
        writer: Optional writer used instead of the filesystem.

    Returns:
        Tuple of (parse result, written path or None).

    Raises:
        FetchError, DecodeError, ContentValidationError, UnknownCountryError,
        FileIOError: The country could not be synced.
        FetchCancelledError: `cancel` fired during the fetch.
    """
    text = await fetcher.fetch_country_source(country_code, cancel)
    result = parse_country_data(text, country_code=country_code, compare=compare)
    if not result.country_data.country_code:
        result.country_data.country_code = country_code.upper()

    if output_dir is None:
        return result, None
    path = save_country_data(result.country_data, output_dir, writer)
    return result, path


async def sync_countries(
    fetcher: GitHubFetcher,
    country_codes: list[str],
    output_dir: Optional[Path] = None,
    compare: bool = False,
    concurrency: int = 4,
    cancel: Optional[asyncio.Event] = None,
    display: Optional[SyncProgressDisplay] = None,
) -> SyncReport:
    """
    Sync many countries concurrently through one fetcher.

    At most `concurrency` countries are in flight; the fetcher's permit
    limiter still spaces the actual requests. A failing country is recorded
    in the report and the batch continues.

    Raises:
        FetchCancelledError: If `cancel` fires; remaining countries are
            abandoned.
    """
    display = display or NoOpSyncProgressDisplay()
    report = SyncReport()
    slots = asyncio.Semaphore(max(1, concurrency))

    async def run_one(code: str) -> None:
        async with slots:
            try:
                _, path = await sync_country(
                    fetcher, code, output_dir, compare=compare, cancel=cancel
                )
            except FILE_LEVEL_ERRORS as e:
                message = getattr(e, "message", str(e))
                logger.warning("Failed to sync %s: %s", code, message)
                report.failed[code] = message
                display.on_country_done(code, error=message)
                return
        report.succeeded.append(code)
        if path is not None:
            report.written.append(path)
        display.on_country_done(code)

    display.on_start(len(country_codes))
    tasks = [asyncio.create_task(run_one(code)) for code in country_codes]
    try:
        await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise
    finally:
        display.on_complete(len(report.succeeded), len(report.failed))

    logger.info(
        "Sync finished: %d succeeded, %d failed",
        len(report.succeeded),
        len(report.failed),
    )
    return report


async def validate_countries(
    fetcher: GitHubFetcher,
    country_codes: list[str],
    output_dir: Path,
    cancel: Optional[asyncio.Event] = None,
) -> ValidationReport:
    """
    Diff the stored record of each country against freshly parsed data.

    Countries are checked one after another. A country without a stored
    record is listed as missing; a file-level failure is recorded and the
    run continues.

    Raises:
        FetchCancelledError: If `cancel` fires; remaining countries are
            not checked.
    """
    report = ValidationReport()
    for code in country_codes:
        path = country_record_path(output_dir, code)
        if not path.exists():
            report.missing.append(code)
            continue
        try:
            existing = load_country_data(path)
            text = await fetcher.fetch_country_source(code, cancel)
            fresh = parse_country_data(text, country_code=code).country_data
        except FILE_LEVEL_ERRORS as e:
            message = getattr(e, "message", str(e))
            logger.warning("Failed to validate %s: %s", code, message)
            report.failed[code] = message
            continue

        differences = compare_country_data(existing, fresh)
        if differences:
            report.differences[code] = differences
        else:
            report.unchanged.append(code)

    logger.info(
        "Validation finished: %d unchanged, %d changed, %d failed",
        len(report.unchanged),
        len(report.differences),
        len(report.failed),
    )
    return report
