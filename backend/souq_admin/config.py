# backend/souq_admin/config.py
from __future__ import annotations
import os


def _env_flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/souq.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///souq.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Bearer token for /api/commands; unset means the API is open (local dev only)
    ADMIN_API_TOKEN = os.environ.get("ADMIN_API_TOKEN")

    # Store capabilities. Turning counters off forces the read-then-write stock path.
    ATOMIC_STOCK_COUNTERS = _env_flag("ATOMIC_STOCK_COUNTERS", True)
    READONLY_SQL_ENABLED = _env_flag("READONLY_SQL_ENABLED", True)

    # Local midnight for "today" figures on the dashboard
    STORE_TIMEZONE = os.environ.get("STORE_TIMEZONE", "UTC")

    # Window width when a caller sends offset without limit
    DEFAULT_PAGE_SIZE = int(os.environ.get("DEFAULT_PAGE_SIZE", "50"))

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Admin frontends allowed to call the API from a browser
    CORS_ALLOWED_ORIGINS = [
        o.strip()
        for o in os.environ.get(
            "CORS_ALLOWED_ORIGINS",
            "http://localhost:5173,http://127.0.0.1:5173,http://localhost:4173,http://127.0.0.1:4173",
        ).split(",")
        if o.strip()
    ]
