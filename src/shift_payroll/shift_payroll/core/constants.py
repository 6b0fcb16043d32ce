"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_GEOFENCE_RADIUS_M = 100
DEFAULT_LIST_CACHE_TTL_SECONDS = 120
DEFAULT_SHIFT_START = "08:00"
DEFAULT_SHIFT_END = "18:30"
DEFAULT_BREAK_MINUTES = 0
BULK_SHIFT_NOTE = "Working day (5/2 schedule)"

# Used when a month has no Monday-Friday days at all.
FALLBACK_WORKING_DAYS = 22
# Overtime is paid per minute at shift_rate / STANDARD_SHIFT_MINUTES unless overridden.
STANDARD_SHIFT_MINUTES = 8 * 60
EARTH_RADIUS_M = 6371000.0
