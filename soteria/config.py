"""
Central configuration for Soteria.

All paths, weights, endpoints and service configs defined here.
"""
import os
from pathlib import Path

# Paths (absolute). Runtime data lives under SOTERIA_HOME, default the working
# directory; writers create the directories on first use.
BASE_DIR = Path(os.environ.get("SOTERIA_HOME", Path.cwd())).absolute()
LOGS_DIR = BASE_DIR / "logs"
CACHE_DIR = BASE_DIR / "cache"

# FastAPI
API_HOST = "0.0.0.0"
API_PORT = 8000
API_VERSION = "1.0.0"

# Google Safe Browsing (reputation signal)
SAFE_BROWSING_ENDPOINT = "https://safebrowsing.googleapis.com/v4/threatMatches:find"
SAFE_BROWSING_API_KEY = os.environ.get("SAFE_BROWSING_API_KEY", "")
SAFE_BROWSING_CLIENT_ID = "checker"
SAFE_BROWSING_CLIENT_VERSION = "1.5.2"
THREAT_TYPES = ["MALWARE", "SOCIAL_ENGINEERING"]
PLATFORM_TYPES = ["WINDOWS"]
THREAT_ENTRY_TYPES = ["URL"]

# RDAP (registration lookup)
RDAP_BASE_URL = "https://rdap.org"

# Timeout applied to every outbound HTTP call (seconds)
REQUEST_TIMEOUT_SECONDS = 5.0

# Signal weights (must sum to 100)
SIGNAL_WEIGHTS = {
    "reputation": 70,
    "ssl": 20,
    "contact": 10
}

# Score used when the reputation service cannot be reached
NEUTRAL_REPUTATION_SCORE = 50

# Cache time-to-live (24 hours, milliseconds)
CACHE_TTL_MS = 24 * 60 * 60 * 1000

# Link keywords that indicate contact information on a page
CONTACT_KEYWORDS = ["contact", "about", "support", "help"]

# Registration lookup sentinels
REGISTRATION_UNAVAILABLE = "unavailable"
REGISTRATION_LOOKUP_FAILED = "lookup failed"

# Event ID definitions (Windows Event Viewer style)
EVENT_IDS = {
    # Scoring events (1001-1999)
    1001: "Trust score computed",
    1002: "Trust score served from cache",
    1003: "Invalid URL rejected",

    # Reputation events (2001-2999)
    2001: "Reputation lookup failed - neutral score applied",
    2002: "Reputation threat match found",

    # Registration events (3001-3999)
    3001: "Registration date found",
    3002: "Registration event unavailable",
    3003: "Registration lookup failed",

    # System events (4001-4999)
    4001: "Soteria service started",
    4002: "Score cache unavailable - computing fresh result",
    4003: "Score cache reset"
}

# Logging settings
EVENT_LOG_FILE = LOGS_DIR / "events.jsonl"
CACHE_FILE = CACHE_DIR / "scores.json"
