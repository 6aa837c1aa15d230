"""
Application-wide constants and closed lookup tables.

This module defines the remote repository coordinates, rate-limit defaults,
the hand-maintained country table used to map ISO codes to upstream source
filenames, and the closed month and weekday tables used when normalizing
symbolic tokens found in holiday definitions.
"""

from typing import Final, Mapping

APP_NAME: Final[str] = "holidaysync"
APP_VERSION: Final[str] = "0.1.0"

GITHUB_API_URL: Final[str] = "https://api.github.com"
UPSTREAM_OWNER: Final[str] = "vacanza"
UPSTREAM_REPO: Final[str] = "holidays"
UPSTREAM_COUNTRIES_PATH: Final[str] = "holidays/countries"

# Seconds between two outbound requests of one fetcher.
DEFAULT_REQUEST_INTERVAL: Final[float] = 1.0
DEFAULT_REQUEST_TIMEOUT: Final[float] = 30.0

SOURCE_EXTENSION: Final[str] = ".py"
IGNORED_SOURCE_FILES: Final[frozenset[str]] = frozenset({"__init__.py"})

DEFAULT_CATEGORY: Final[str] = "public"
DEFAULT_LANGUAGE: Final[str] = "en"

# Substrings whose presence marks a file as containing rule registrations.
REGISTRATION_MARKERS: Final[tuple[str, ...]] = (
    "_add_holiday",
    "_add_easter_based_holiday",
    "_add_weekday_holiday",
    "_add_new_years_day",
    "_add_christmas_day",
)

MONTH_ABBREVIATIONS: Final[Mapping[str, int]] = {
    "JAN": 1,
    "FEB": 2,
    "MAR": 3,
    "APR": 4,
    "MAY": 5,
    "JUN": 6,
    "JUL": 7,
    "AUG": 8,
    "SEP": 9,
    "OCT": 10,
    "NOV": 11,
    "DEC": 12,
}

MONTH_NAMES: Final[Mapping[str, int]] = {
    "JANUARY": 1,
    "FEBRUARY": 2,
    "MARCH": 3,
    "APRIL": 4,
    "MAY": 5,
    "JUNE": 6,
    "JULY": 7,
    "AUGUST": 8,
    "SEPTEMBER": 9,
    "OCTOBER": 10,
    "NOVEMBER": 11,
    "DECEMBER": 12,
}

# Monday is 0, matching datetime.date.weekday().
WEEKDAY_ABBREVIATIONS: Final[Mapping[str, int]] = {
    "MON": 0,
    "TUE": 1,
    "WED": 2,
    "THU": 3,
    "FRI": 4,
    "SAT": 5,
    "SUN": 6,
}

# Closed country table. Codes or filenames absent from it are rejected, never
# guessed.
COUNTRY_FILENAMES: Final[Mapping[str, str]] = {
    "AE": "united_arab_emirates.py",
    "AR": "argentina.py",
    "AT": "austria.py",
    "AU": "australia.py",
    "BD": "bangladesh.py",
    "BE": "belgium.py",
    "BG": "bulgaria.py",
    "BH": "bahrain.py",
    "BO": "bolivia.py",
    "BR": "brazil.py",
    "BY": "belarus.py",
    "CA": "canada.py",
    "CH": "switzerland.py",
    "CL": "chile.py",
    "CN": "china.py",
    "CO": "colombia.py",
    "CY": "cyprus.py",
    "CZ": "czechia.py",
    "DE": "germany.py",
    "DK": "denmark.py",
    "EC": "ecuador.py",
    "EE": "estonia.py",
    "EG": "egypt.py",
    "ES": "spain.py",
    "FI": "finland.py",
    "FR": "france.py",
    "GB": "united_kingdom.py",
    "GR": "greece.py",
    "HK": "hong_kong.py",
    "HR": "croatia.py",
    "HU": "hungary.py",
    "ID": "indonesia.py",
    "IE": "ireland.py",
    "IL": "israel.py",
    "IN": "india.py",
    "IQ": "iraq.py",
    "IR": "iran.py",
    "IT": "italy.py",
    "JO": "jordan.py",
    "JP": "japan.py",
    "KH": "cambodia.py",
    "KR": "south_korea.py",
    "KW": "kuwait.py",
    "LA": "laos.py",
    "LB": "lebanon.py",
    "LK": "sri_lanka.py",
    "LT": "lithuania.py",
    "LU": "luxembourg.py",
    "LV": "latvia.py",
    "MM": "myanmar.py",
    "MN": "mongolia.py",
    "MT": "malta.py",
    "MX": "mexico.py",
    "MY": "malaysia.py",
    "NL": "netherlands.py",
    "NO": "norway.py",
    "NP": "nepal.py",
    "NZ": "new_zealand.py",
    "OM": "oman.py",
    "PE": "peru.py",
    "PH": "philippines.py",
    "PK": "pakistan.py",
    "PL": "poland.py",
    "PT": "portugal.py",
    "PY": "paraguay.py",
    "QA": "qatar.py",
    "RO": "romania.py",
    "RU": "russia.py",
    "SA": "saudi_arabia.py",
    "SE": "sweden.py",
    "SG": "singapore.py",
    "SI": "slovenia.py",
    "SK": "slovakia.py",
    "TH": "thailand.py",
    "TR": "turkey.py",
    "TW": "taiwan.py",
    "UA": "ukraine.py",
    "US": "united_states.py",
    "UY": "uruguay.py",
    "VE": "venezuela.py",
    "VN": "vietnam.py",
    "ZA": "south_africa.py",
}
