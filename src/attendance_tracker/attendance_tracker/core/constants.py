"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

TOKEN_TYPE = "Bearer"
DEFAULT_TOKEN_TTL_SECONDS = 24 * 60 * 60
MIN_SECRET_BYTES = 32

USERNAME_MAX_LENGTH = 50
PASSWORD_MIN_LENGTH = 5
PASSWORD_MAX_LENGTH = 100
FULL_NAME_MAX_LENGTH = 100

REFERENCE_ID_HEADER = "X-Reference-Id"

# Backfill fires shortly after midnight for the previous calendar day.
BACKFILL_HOUR = 0
BACKFILL_MINUTE = 5
