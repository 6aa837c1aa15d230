"""
Bidirectional lookups over the closed country table.

The same table picks the upstream filename to fetch for a country code and
classifies a listed filename back to its code. Anything outside the table is
rejected with UnknownCountryError, never guessed.
"""

from typing import Mapping

from constants import COUNTRY_FILENAMES
from core.exceptions import UnknownCountryError

CODES_BY_FILENAME: Mapping[str, str] = {
    filename: code for code, filename in COUNTRY_FILENAMES.items()
}


def filename_for(country_code: str) -> str:
    """Return the upstream source filename for an ISO country code."""
    code = country_code.strip().upper()
    if code not in COUNTRY_FILENAMES:
        raise UnknownCountryError(country_code)
    return COUNTRY_FILENAMES[code]


def code_from_filename(filename: str) -> str:
    """Return the ISO country code for an upstream source filename."""
    if filename not in CODES_BY_FILENAME:
        raise UnknownCountryError(filename)
    return CODES_BY_FILENAME[filename]


def supported_codes() -> list[str]:
    return sorted(COUNTRY_FILENAMES)
