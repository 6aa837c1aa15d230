"""
Custom exception classes for the holiday sync pipeline.

This module defines application-specific exceptions raised while fetching
upstream source files, decoding and validating their content, extracting
holiday definitions, and persisting the resulting country records. File-level
errors (fetch, decode, validation) abort processing of one source file;
extraction and structural-parse errors are local and recovered by skipping the
offending call or class.
"""

import os
from typing import Optional


class HolidaySyncError(Exception):
    """
    Base exception for all pipeline errors.

    Attributes:
        message: A human-readable error message describing what went wrong.
        original_exception: The underlying exception that caused this error, if any.
        diagnostic_info: A dictionary containing diagnostic information including
            exception type, details, and OS name.
    """

    default_message = "An error occurred while syncing holiday definitions"

    def __init__(
        self,
        message: Optional[str] = None,
        original_exception: Optional[Exception] = None,
    ):
        self.message = message or self.default_message
        super().__init__(self.message)
        self.original_exception = original_exception
        self.diagnostic_info = {
            "type": (
                type(original_exception).__name__ if original_exception else "Unknown"
            ),
            "details": str(original_exception) if original_exception else "No details",
            "os_name": os.name,
        }


class FetchError(HolidaySyncError):
    """
    Raised when a request to the remote code host cannot be completed.

    This covers transport failures (DNS, connection reset, timeouts) and
    responses whose body is not the JSON shape the contents endpoint returns.
    """

    default_message = "Failed to fetch data from the remote code host"


class RemoteAPIError(FetchError):
    """
    Raised when the remote API answers with a non-2xx status.

    Never retried by the fetcher; retry policy belongs to the caller.

    Attributes:
        status_code: The HTTP status code of the response.
        body: The raw response body.
    """

    def __init__(
        self,
        status_code: int,
        body: str = "",
        message: Optional[str] = None,
    ):
        super().__init__(message=message or f"Remote API error {status_code}: {body}")
        self.status_code = status_code
        self.body = body


class FetchCancelledError(HolidaySyncError):
    """Raised when the caller's cancellation signal fires during a fetch."""

    default_message = "Fetch cancelled by caller"


class DecodeError(HolidaySyncError):
    """Raised when a file body has an unsupported or malformed transport encoding."""

    default_message = "Failed to decode file content"


class ContentValidationError(HolidaySyncError):
    """
    Raised when decoded source text fails the cheap relevance heuristics.

    Attributes:
        reason: Short description of the failed check.
    """

    def __init__(self, reason: str):
        super().__init__(message=f"Invalid source content: {reason}")
        self.reason = reason


class ExtractionError(HolidaySyncError):
    """
    Raised by a call sub-extractor that cannot make sense of one call site.

    Always recovered by the extractor, which skips the line and continues.

    Attributes:
        line_number: 1-based line of the failing call site.
        reason: Short description of what was missing.
    """

    def __init__(self, line_number: int, reason: str):
        super().__init__(message=f"Line {line_number}: {reason}")
        self.line_number = line_number
        self.reason = reason


class StructuralParseError(HolidaySyncError):
    """
    Raised when a class or method header cannot be parsed.

    Attributes:
        line_number: Line of the keyword that started the failed header.
    """

    def __init__(self, line_number: int, reason: str):
        super().__init__(message=f"Line {line_number}: {reason}")
        self.line_number = line_number
        self.reason = reason


class DefinitionCollisionError(HolidaySyncError):
    """
    Raised under the REJECT collision policy when two different definitions
    normalize to the same canonical key.
    """

    def __init__(self, key: str):
        super().__init__(message=f"Conflicting holiday definitions for key '{key}'")
        self.key = key


class UnknownCountryError(HolidaySyncError):
    """Raised for country codes or filenames absent from the country table."""

    def __init__(self, value: str):
        super().__init__(message=f"Unknown country code or filename: '{value}'")
        self.value = value


class FileIOError(Exception):
    """
    Base exception for file I/O operation errors.

    Attributes:
        message: A human-readable error message describing what went wrong.
        file_path: The path to the file involved in the error, if applicable.
        original_exception: The underlying exception that caused this error, if any.
    """

    def __init__(
        self,
        message: Optional[str] = None,
        file_path: Optional[str] = None,
        original_exception: Optional[Exception] = None,
    ):
        self.message = message or "A file I/O error occurred"
        super().__init__(self.message)
        self.file_path = file_path
        self.original_exception = original_exception


class InvalidFilePathError(FileIOError):
    """Raised when a file path is missing or points into an unusable directory."""


class FileReadError(FileIOError):
    """Raised when reading a file fails."""


class FileWriteError(FileIOError):
    """Raised when writing a file fails."""
