"""
Settings access for the RSE compliance app.

Values come from the ``RSE_COMPLIANCE`` dict in Django settings; anything
missing there falls back to the defaults below.
"""

from django.conf import settings

DEFAULTS = {
    "WARNING_THRESHOLD": 0.9,
    "DEFAULT_COST_PARAMETERS": {
        "driver_hourly_cost": 25,
        "hotel_cost_per_night": 100,
        "meal_allowance_per_day": 30,
    },
    "DOUBLE_CREW_AMPLITUDE_HOURS": 18,
    "MAX_MULTI_DAY_DAYS": 3,
    "MIN_DAILY_REST_HOURS": 11,
    "BUSINESS_TIME_ZONE": "Europe/Paris",
}


def get_setting(name):
    overrides = getattr(settings, "RSE_COMPLIANCE", {}) or {}
    if name in overrides:
        return overrides[name]
    return DEFAULTS[name]
