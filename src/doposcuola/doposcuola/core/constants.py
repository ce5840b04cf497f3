"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

MAX_BOOKINGS_PER_DAY = 2
BOOKING_WINDOW_DAYS = 30

# Weekday numbers use Sunday = 0 (Tuesday and Thursday by default).
DEFAULT_CLASS_DAYS = (2, 4)

MINOR_AGE = 16
MIN_PASSWORD_LENGTH = 6

OTP_LENGTH = 6
TOKEN_TTL_MINUTES = 10
MAX_OTP_ATTEMPTS = 5

SUPPORTED_LANGUAGES = ("it", "es", "en", "fr", "de")
BASE_LANGUAGE = "it"
FALLBACK_LANGUAGE = "en"

SETTING_CLASS_DAYS = "class_days"
SETTING_ACCESS_CODE = "access_code"

DEFAULT_SESSION_DAYS = 7
