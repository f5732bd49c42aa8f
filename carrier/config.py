"""Configuration for Carrier Challenges."""

import os
from pathlib import Path

# Paths
BASE_DIR = Path(__file__).parent.parent
DATA_DIR = Path(os.getenv("CARRIER_DATA_DIR", BASE_DIR / "data"))
DB_PATH = DATA_DIR / "carrier.db"
DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{DB_PATH}")

# Leaderboard limits
LEADERBOARD_DEFAULT_LIMIT = int(os.getenv("LEADERBOARD_DEFAULT_LIMIT", "50"))
LEADERBOARD_MAX_LIMIT = int(os.getenv("LEADERBOARD_MAX_LIMIT", "100"))
AROUND_DEFAULT_RADIUS = int(os.getenv("AROUND_DEFAULT_RADIUS", "5"))
AROUND_MAX_RADIUS = int(os.getenv("AROUND_MAX_RADIUS", "50"))

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# API
API_HOST = os.getenv("API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("API_PORT", "8000"))
