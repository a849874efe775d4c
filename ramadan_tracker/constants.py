"""
Application constants.
Checklist categories, point values, streak and level tables, sync defaults.
"""
import os

# Checklist
CHECKLIST_KEYS = ("fasted", "quran", "dhikr", "prayer", "masjid")
DETAIL_SUFFIX = "_data"

# Points (distinct weights per category)
POINT_VALUES = {
    "fasted": 50,
    "masjid": 40,
    "quran": 10,
    "prayer": 5,
    "dhikr": 1,
}
PERFECT_BONUS = 50

# Highest threshold first, first match wins
STREAK_MULTIPLIERS = (
    (21, 2.0),
    (14, 1.8),
    (7, 1.5),
    (3, 1.2),
)
DEFAULT_MULTIPLIER = 1.0

# Streaks
MIN_FOR_STREAK = 3  # out of 5
MAX_STREAK_LOOKBACK = 30

# Levels, descending by min_points
LEVELS = (
    {"min_points": 4000, "level": 5, "label": "Champion", "arabic": "البطل"},
    {"min_points": 2500, "level": 4, "label": "Illuminated", "arabic": "المنير"},
    {"min_points": 1000, "level": 3, "label": "Steadfast", "arabic": "الصابر"},
    {"min_points": 300, "level": 2, "label": "Devoted", "arabic": "المحسن"},
    {"min_points": 0, "level": 1, "label": "Seeker", "arabic": "المبتدئ"},
)

# Calendar: America/Guyana, UTC-4, no DST
CALENDAR_UTC_OFFSET_HOURS = -4

# Local storage
STORAGE_KEY = "ramadan_tracker_v1"

# Sync
SYNC_DEBOUNCE_SECONDS = float(os.getenv("TRACKER_SYNC_DEBOUNCE_SECONDS", "0.5"))
REMOTE_TIMEOUT_SECONDS = 10
TRACKING_API_PATH = "/api/tracking"

# Logging
DEFAULT_LOG_DIRECTORY_PROD = "/var/log/ramadan-tracker"
DEFAULT_LOG_DIRECTORY_DEV = "./logs"

# CORS
CORS_ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv(
        "TRACKER_CORS_ORIGINS", "http://localhost:5173,http://localhost:3000"
    ).split(",")
    if origin.strip()
]
