"""Application configuration."""

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent

# Upstream (openexchangerates.org)
APP_ID = os.getenv("APP_ID", "")
EXCHANGE_RATE_URL = os.getenv(
    "EXCHANGE_RATE_URL", "https://openexchangerates.org/api/latest.json"
)
CURRENCIES_URL = os.getenv(
    "CURRENCIES_URL", "https://openexchangerates.org/api/currencies.json"
)
FETCH_TIMEOUT = float(os.getenv("FETCH_TIMEOUT", "10"))  # seconds

# Cache settings
CACHE_BACKEND = os.getenv("CACHE_BACKEND", "memory")  # memory | file
CACHE_DIR = Path(os.getenv("CACHE_DIR") or BASE_DIR / "data" / "cache")
CACHE_POLICY = os.getenv("CACHE_POLICY", "rolling")  # rolling | aligned
CACHE_TTL = int(os.getenv("CACHE_TTL", "3600"))  # seconds
CACHE_ALIGN_OFFSET_MINUTES = int(os.getenv("CACHE_ALIGN_OFFSET_MINUTES", "5"))
CACHE_WARMUP_ENABLED = os.getenv("CACHE_WARMUP_ENABLED", "false").lower() in ("1", "true", "yes")

# Success bodies: "envelope" -> {"data": ...}, "raw" -> bare upstream JSON
RESPONSE_MODE = os.getenv("RESPONSE_MODE", "envelope")

# Server
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "8080"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


def missing_required() -> list[str]:
    """Return names of required env vars that are not set."""
    required = {"APP_ID": APP_ID}
    return [name for name, value in required.items() if not value]
