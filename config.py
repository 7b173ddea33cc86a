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
DB_NAME: str = os.getenv("DB_NAME", "bobocode_db")
DB_USER: str = os.getenv("DB_USER", "bobouser")
DB_PASS: str = os.getenv("DB_PASS", "bobodpass")

DATABASE_URL: str = os.getenv(
    "DATABASE_URL",
    f"postgresql://{DB_USER}:{DB_PASS}@{DB_HOST}:{DB_PORT}/{DB_NAME}",
)

# ── Connection Pool ───────────────────────────────────────
DB_POOL_MIN_CONN: int = int(os.getenv("DB_POOL_MIN_CONN", "1"))
DB_POOL_MAX_CONN: int = int(os.getenv("DB_POOL_MAX_CONN", "5"))

# ── Logging ───────────────────────────────────────────────
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

# ── Tests ─────────────────────────────────────────────────
# Integration tests against a live PostgreSQL run only when this is set.
TEST_DATABASE_URL: str = os.getenv("TEST_DATABASE_URL", "")
