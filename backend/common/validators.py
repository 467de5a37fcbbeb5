"""
Common validators and utilities for the transport operations backend.

This module contains shared validation logic and time helpers used
across the fleet and RSE compliance apps.
"""

import math
from datetime import date, datetime
from decimal import Decimal
from zoneinfo import ZoneInfo

from django.core.validators import BaseValidator


class HoursValidator(BaseValidator):
    """
    Validator for hours values in RSE context.

    Ensures hours are positive and within a duty day.
    """

    def __init__(self, max_hours=24, allow_decimal=True):
        self.limit_value = max_hours
        self.allow_decimal = allow_decimal
        self.message = f"Hours must be between 0 and {max_hours}."

    def compare(self, value, limit_value):
        try:
            hours = float(value)
            return not (0 <= hours <= limit_value)
        except (ValueError, TypeError):
            return True

    def clean(self, value):
        if self.allow_decimal:
            return Decimal(str(value))
        else:
            return int(value)


class SpeedValidator(BaseValidator):
    """Validator for average speed caps (km/h)."""

    def __init__(self, max_kmh=130):
        self.limit_value = max_kmh
        self.message = f"Speed must be between 1 and {max_kmh} km/h."

    def compare(self, value, limit_value):
        try:
            return not (0 < float(value) <= limit_value)
        except (ValueError, TypeError):
            return True

    def clean(self, value):
        return value


def validate_daily_hours(value):
    """Validate a daily driving or amplitude ceiling."""
    validator = HoursValidator(max_hours=24)
    validator(value)


def validate_speed_kmh(value):
    """Validate a capped average speed."""
    validator = SpeedValidator()
    validator(value)


def minutes_to_hours(minutes):
    """Convert minutes to hours, rounded to 2 decimal places."""
    return round(float(minutes) / 60, 2)


def hours_to_minutes(hours):
    """Convert (possibly Decimal) hours to minutes."""
    return float(hours) * 60


def ceil_minutes(minutes):
    """
    Round a duration up to the next whole minute.

    Float noise below a microsecond of a minute is discarded first so that
    exact results such as 375.0000000001 are not pushed to 376.
    """
    return int(math.ceil(round(float(minutes), 6)))


def get_business_date(value, time_zone="Europe/Paris"):
    """
    Normalize a date or datetime to the calendar day it falls on.

    Aware datetimes are converted to the business time zone before taking
    the date; naive datetimes and dates are taken as-is.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(ZoneInfo(time_zone))
        return value.date()
    if isinstance(value, date):
        return value
    raise TypeError(f"Cannot derive a business date from {type(value).__name__}")


def format_duration(minutes):
    """Format a duration in minutes as HH:MM."""
    total = int(round(minutes))
    return f"{total // 60:02d}:{total % 60:02d}"
