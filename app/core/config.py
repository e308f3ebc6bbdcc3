"""
Configuration constants for the Club Grouping Engine.
All configurable settings are defined here.
"""

import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# Supabase Configuration
# No defaults: the reader/writer refuse to start without credentials
SUPABASE_URL = os.getenv("SUPABASE_URL", "")
SUPABASE_SERVICE_KEY = os.getenv("SUPABASE_SERVICE_KEY", os.getenv("SUPABASE_ANON_KEY", ""))

# Celery / Redis
REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")

# API
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",")
    if origin.strip()
]

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Group Rules
DEFAULT_GROUP_CAPACITY = int(os.getenv("GROUP_CAPACITY", "4"))  # Foursomes

# Partner Preference Rules
MIN_PREFERENCE_RANK = 1   # Strongest preference
MAX_PREFERENCE_RANK = 10  # Weakest preference

# Tee Time Preferences (values stored on rsvps.tee_time_preference)
TEE_TIME_PREFERENCES = ["none", "early", "late"]
TEE_TIME_ALIASES = {
    "no_preference": "none",
    "": "none",
}

# Optimization Settings
# Swap iterations allowed per golfer on the roster
OPTIMIZER_ITERATION_FACTOR = int(os.getenv("OPTIMIZER_ITERATION_FACTOR", "10"))

# Supabase table names
TABLE_RSVPS = "rsvps"
TABLE_PARTNER_PREFERENCES = "playing_partner_preferences"
TABLE_GUEST_REQUESTS = "guest_requests"
TABLE_EVENT_SCHEDULES = "event_schedules"
TABLE_GROUPINGS = "groupings"
