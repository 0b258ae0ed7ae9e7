"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from datetime import time

DEFAULT_SESSION_DAYS = 7

DEFAULT_WORK_START = time(9, 0)
DEFAULT_WORK_END = time(17, 0)
DEFAULT_EARLY_THRESHOLD_MINUTES = 15
DEFAULT_LATE_THRESHOLD_MINUTES = 15
MAX_THRESHOLD_MINUTES = 240

MIN_COMPLETION_POINTS = 0
MAX_COMPLETION_POINTS = 100

DEFAULT_HISTORY_DAYS = 30
DEFAULT_HISTORY_PAGE_SIZE = 20

DEFAULT_INVITE_EXPIRY_DAYS = 7
INVITE_CODE_LENGTH = 8

DEFAULT_DUE_REMINDER_HOURS = 24

DEFAULT_PROJECT_PHASES = (
    "Planning Phase",
    "Analysis Phase",
    "Design Phase",
    "Development Phase",
    "Testing Phase",
    "Deployment Phase",
    "Maintenance Phase",
)
