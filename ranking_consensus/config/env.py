"""
Environment variable loading for Ranking Consensus.

- CONSENSUS_API_BASE_URL: base URL of the ranking API (default: http://localhost:3000)
- CONSENSUS_HTTP_TIMEOUT_SEC: request timeout for the API client (default: 10)
- CONSENSUS_CACHE_TTL_SEC: community ranking cache TTL (default: 60)
- CONSENSUS_COLOR_SCHEME: default | colorblind | monochrome (default: default)
- Loads .env from project root when available.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

from ranking_consensus.consensus_logging import get_logger

logger = get_logger(__name__)

# Project root: config is ranking_consensus/config/, root is 2 levels up
_CONFIG_DIR = Path(__file__).resolve().parent
_PACKAGE_DIR = _CONFIG_DIR.parent
_ROOT = _PACKAGE_DIR.parent
_ENV_PATH = _ROOT / ".env"

DEFAULT_API_BASE_URL = "http://localhost:3000"
DEFAULT_HTTP_TIMEOUT_SEC = 10.0
DEFAULT_CACHE_TTL_SEC = 60.0
DEFAULT_COLOR_SCHEME = "default"
COLOR_SCHEMES = ("default", "colorblind", "monochrome")


def load_consensus_env() -> None:
    """Load .env from project root. Safe to call multiple times; existing env wins."""
    load_dotenv(_ENV_PATH, override=False)


def _positive_float(name: str, default: float) -> float:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("env_value_invalid", variable=name, value=raw, default=default)
        return default
    if value <= 0:
        logger.warning("env_value_not_positive", variable=name, value=value, default=default)
        return default
    return value


def get_api_base_url() -> str:
    """Return CONSENSUS_API_BASE_URL without a trailing slash."""
    load_consensus_env()
    url = (os.getenv("CONSENSUS_API_BASE_URL") or "").strip()
    return (url or DEFAULT_API_BASE_URL).rstrip("/")


def get_http_timeout_sec() -> float:
    load_consensus_env()
    return _positive_float("CONSENSUS_HTTP_TIMEOUT_SEC", DEFAULT_HTTP_TIMEOUT_SEC)


def get_cache_ttl_sec() -> float:
    load_consensus_env()
    return _positive_float("CONSENSUS_CACHE_TTL_SEC", DEFAULT_CACHE_TTL_SEC)


def get_color_scheme() -> str:
    """Return CONSENSUS_COLOR_SCHEME; unknown values fall back to default."""
    load_consensus_env()
    raw = (os.getenv("CONSENSUS_COLOR_SCHEME") or "").strip().lower()
    if not raw:
        return DEFAULT_COLOR_SCHEME
    if raw not in COLOR_SCHEMES:
        logger.warning("env_color_scheme_unknown", value=raw, default=DEFAULT_COLOR_SCHEME)
        return DEFAULT_COLOR_SCHEME
    return raw
