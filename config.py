"""
config.py
---------
Central configuration module. Loads all environment variables
from the .env file and exposes them as typed constants.
"""

import os
from dotenv import load_dotenv

load_dotenv()


# ── PostgreSQL ────────────────────────────────────────────
DB_HOST: str = os.getenv("DB_HOST", "localhost")
DB_PORT: int = int(os.getenv("DB_PORT", "5432"))
DB_NAME: str = os.getenv("DB_NAME", "postgres")
DB_USER: str = os.getenv("DB_USER", "postgres")
DB_PASS: str = os.getenv("DB_PASS", "")

# ── Error handling ────────────────────────────────────────
DB_EXIT_ON_ERROR: bool = os.getenv("DB_EXIT_ON_ERROR", "").strip().lower() in ("1", "true", "yes")

# ── Logging ───────────────────────────────────────────────
APP_ROOT: str = os.getenv("APP_ROOT", os.path.dirname(os.path.abspath(__file__)))
LOG_DIR: str = os.getenv("LOG_DIR", "logs")
LOG_EXCEPTIONS: bool = os.getenv("LOG_EXCEPTIONS", "1").strip().lower() in ("1", "true", "yes")
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_TIMEZONE: str = os.getenv("LOG_TIMEZONE", "")


def load_settings() -> dict[str, str]:
    """
    Read the connection settings fresh from the environment.

    Returns:
        Dict with 'host', 'dbname', 'user', 'password' and 'port' keys.
    """
    return {
        "host": os.getenv("DB_HOST", DB_HOST),
        "dbname": os.getenv("DB_NAME", DB_NAME),
        "user": os.getenv("DB_USER", DB_USER),
        "password": os.getenv("DB_PASS", DB_PASS),
        "port": os.getenv("DB_PORT", str(DB_PORT)),
    }
