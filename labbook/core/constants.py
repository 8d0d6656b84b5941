# labbook/core/constants.py
"""Shared constants for the lab booking core."""

BRAND_NAME = "Lab Booking"

# Cache keys
BOOKINGS_CACHE_PREFIX = "bookings"
BOOKINGS_ALL_CACHE_KEY = f"{BOOKINGS_CACHE_PREFIX}:all"

# Field limits
MAX_PURPOSE_LENGTH = 255
MAX_NAME_LENGTH = 255
MIN_DELAY_REASON_LENGTH = 5

# Display fallbacks
UNKNOWN_USER_NAME = "Unknown User"
UNKNOWN_INSTRUMENT_NAME = "Unknown Instrument"

# Dashboards
UPCOMING_BOOKINGS_LIMIT = 5

# Statistics
HOURS_PRECISION = 2
WEEKDAY_LABELS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
