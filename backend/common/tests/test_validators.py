"""
Tests for shared time helpers.
"""

import pytest
from datetime import date, datetime, timezone as dt_timezone

from common.validators import (
    ceil_minutes,
    format_duration,
    get_business_date,
    hours_to_minutes,
    minutes_to_hours,
)


class TestTimeHelpers:

    def test_minutes_to_hours_rounds_to_two_decimals(self):
        assert minutes_to_hours(600) == 10.0
        assert minutes_to_hours(100) == 1.67

    def test_hours_to_minutes(self):
        assert hours_to_minutes(4.5) == 270

    def test_ceil_minutes(self):
        assert ceil_minutes(375) == 375
        assert ceil_minutes(85.71) == 86
        assert ceil_minutes(375.0000000001) == 375

    def test_format_duration(self):
        assert format_duration(0) == "00:00"
        assert format_duration(570) == "09:30"


class TestBusinessDate:

    def test_date_passthrough(self):
        assert get_business_date(date(2025, 6, 1)) == date(2025, 6, 1)

    def test_aware_datetime_converted_to_paris(self):
        value = datetime(2025, 1, 15, 23, 30, tzinfo=dt_timezone.utc)

        assert get_business_date(value) == date(2025, 1, 16)

    def test_naive_datetime_taken_as_is(self):
        assert get_business_date(datetime(2025, 1, 15, 23, 30)) == date(2025, 1, 15)

    def test_other_time_zone(self):
        value = datetime(2025, 1, 15, 23, 30, tzinfo=dt_timezone.utc)

        assert get_business_date(value, "UTC") == date(2025, 1, 15)

    def test_rejects_strings(self):
        with pytest.raises(TypeError):
            get_business_date("2025-01-15")
