"""
Shared fixtures for the test suite.

Provides a realistic upstream country source file, its base64 transport
encoding, and the anyio backend used by the async tests.
"""

import base64

import pytest

SAMPLE_SOURCE = '''\
from holidays.calendars.gregorian import JAN, MAY, JUL, DEC, MON
from holidays.constants import PUBLIC, UNOFFICIAL
from holidays.holiday_base import HolidayBase


class UnitedStates(HolidayBase):
    """United States holidays."""

    country = "US"
    supported_categories = (PUBLIC, UNOFFICIAL)
    supported_languages = ("en_US", "th")
    subdivisions = (
        "AK",
        "AL",
    )
    subdivisions_aliases = {
        "Alaska": "AK",
        "Alabama": "AL",
    }

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)

    def _populate_public_holidays(self):
        # New Year's Day
        self._add_holiday("New Year's Day", date(year, JAN, 1))
        self._add_easter_based_holiday("Good Friday", -2)
        self._add_weekday_holiday("Memorial Day", MAY, MON, -1)
        self._add_holiday_jul_4("Independence Day")
        self._add_christmas_day("Christmas Day")


class US(UnitedStates):
    pass
'''


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def sample_source():
    """Upstream-style source file with one call of each registration shape."""
    return SAMPLE_SOURCE


@pytest.fixture
def encoded_source(sample_source):
    """The sample source as the contents API returns it (wrapped base64)."""
    encoded = base64.b64encode(sample_source.encode("utf-8")).decode("ascii")
    return "\n".join(encoded[i : i + 60] for i in range(0, len(encoded), 60))
