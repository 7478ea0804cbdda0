"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

API_PREFIX = "/api/v1"
API_VERSION = "1.0.0"

ACCESS_TOKEN_MINUTES = 15
REFRESH_TOKEN_DAYS = 7
RESET_TOKEN_MINUTES = 60
OTP_MINUTES = 10
PASSWORD_HASH_METHOD = "scrypt"

DEFAULT_HISTORY_LIMIT = 100
DEFAULT_ADMIN_LIMIT = 1000
WORKING_DAYS_PER_MONTH = 30
MAX_DELIVERY_ATTEMPTS = 5
