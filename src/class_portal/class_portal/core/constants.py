"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_SESSION_DAYS = 7
RECENT_ATTENDANCE_LIMIT = 10
MIN_PASSWORD_LENGTH = 6
SEED_CLASS_NAMES = ("Class A", "Class B", "Class C")
