"""Centralized configuration for the fairrate backend.

All settings come from environment variables (optionally loaded from a
``.env`` file at the project root) so values are not scattered across the
codebase.
"""
import os
from pathlib import Path

# Try to load .env file from project root
try:
    from dotenv import load_dotenv
    env_path = Path(__file__).resolve().parents[1] / ".env"
    load_dotenv(env_path)
except ImportError:
    pass

# Application
APP_ENV = os.getenv("APP_ENV", "development").lower()
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "5000"))
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:5173")

# MongoDB Configuration
MONGODB_URI = os.getenv("MONGODB_URI")
MONGODB_DB_NAME = os.getenv("MONGODB_DB", "fairrate")
MONGODB_TIMEOUT_SECONDS = int(os.getenv("MONGODB_TIMEOUT_SECONDS", "5"))

# Collection names match the layout of the existing deployment
PPP_COLLECTION_NAME = "ratecaches"
STATS_COLLECTION_NAME = "stats"
SESSIONS_COLLECTION_NAME = "adminsessions"

# Admin sessions
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD")
SESSION_TTL_HOURS = int(os.getenv("SESSION_TTL_HOURS", "24"))
SESSION_SWEEP_INTERVAL_SECONDS = int(os.getenv("SESSION_SWEEP_INTERVAL_SECONDS", "3600"))
FAILED_LOGIN_DELAY_SECONDS = float(os.getenv("FAILED_LOGIN_DELAY_SECONDS", "1.0"))

# Analytics window
STATS_DEFAULT_DAYS = 30
STATS_MAX_DAYS = 90

# Email drafting (LLM)
DEFAULT_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
EMAIL_MAX_TOKENS = 300
EMAIL_TEMPERATURE = 0.7
EMAIL_TIMEOUT_SECONDS = float(os.getenv("EMAIL_TIMEOUT_SECONDS", "10"))


def is_production() -> bool:
    return APP_ENV == "production"
