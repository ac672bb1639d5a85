"""
Application settings read from environment variables.

In Azure these come from the Function App's application settings; locally
from the Values section of local.settings.json.
"""

import os
import logging
from typing import List

logger = logging.getLogger(__name__)

DEFAULT_MAX_UPLOAD_BYTES = 50 * 1024 * 1024
DEFAULT_SIGNED_URL_EXPIRY_SECONDS = 24 * 60 * 60
DEFAULT_ALLOWED_ORIGINS = [
    "http://localhost:5173",
    "http://localhost:3000",
    "http://127.0.0.1:5173",
    "http://127.0.0.1:3000",
]


def _get_int(key: str, default: int) -> int:
    raw = os.environ.get(key)
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning(f"Ignoring non-integer {key}={raw!r}, using {default}")
        return default
    if value <= 0:
        logger.warning(f"Ignoring non-positive {key}={value}, using {default}")
        return default
    return value


def get_max_upload_bytes() -> int:
    """Largest request body accepted by the upload endpoints."""
    return _get_int("MAX_UPLOAD_BYTES", DEFAULT_MAX_UPLOAD_BYTES)


def get_signed_url_expiry() -> int:
    """Validity of generated storage URLs, in seconds."""
    return _get_int("SIGNED_URL_EXPIRY_SECONDS", DEFAULT_SIGNED_URL_EXPIRY_SECONDS)


def get_allowed_origins() -> List[str]:
    """Origins echoed back in Access-Control-Allow-Origin."""
    raw = os.environ.get("CORS_ALLOWED_ORIGINS")
    if not raw:
        return list(DEFAULT_ALLOWED_ORIGINS)
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def get_environment() -> str:
    return os.environ.get("AZURE_FUNCTIONS_ENVIRONMENT", "Development")
