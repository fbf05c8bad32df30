"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

EMPLOYEE_CODE_PREFIX = "NM"
EMPLOYEE_CODE_MAX_ATTEMPTS = 5

DEFAULT_LIST_LIMIT = 100
MIN_SEARCH_LENGTH = 2

OTP_LENGTH = 6
OTP_TTL_MINUTES = 10
TEMP_PASSWORD_BYTES = 8
MIN_PASSWORD_LENGTH = 6

UPLOAD_FOLDER_EMPLOYEES = "employees"
