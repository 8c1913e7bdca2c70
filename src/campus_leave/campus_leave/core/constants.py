"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

API_PREFIX = "/api/v1"

MAX_LEAVE_DAYS = 30
REASON_MIN_LENGTH = 10
REASON_MAX_LENGTH = 500
REMARKS_MAX_LENGTH = 200

SUBJECT_MAX_LENGTH = 50
PERIOD_MAX_LENGTH = 20

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 100
PASSWORD_MIN_LENGTH = 6

DEFAULT_PAGE_LIMIT = 10
MAX_PAGE_LIMIT = 100
DEFAULT_NOTIFICATION_LIMIT = 20

DEFAULT_TOKEN_HOURS = 24
