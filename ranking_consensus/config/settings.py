"""
Application settings.

Typed, immutable view of the environment (see env.py) for the composition
root: API base URL and timeout for the client, cache TTL for the service,
default colour scheme for heatmap sessions.
"""

from __future__ import annotations

import functools
from dataclasses import dataclass

from ranking_consensus.config import env


@dataclass(frozen=True)
class Settings:
    api_base_url: str = env.DEFAULT_API_BASE_URL
    http_timeout_sec: float = env.DEFAULT_HTTP_TIMEOUT_SEC
    cache_ttl_sec: float = env.DEFAULT_CACHE_TTL_SEC
    color_scheme: str = env.DEFAULT_COLOR_SCHEME


@functools.lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Return the current application settings.

    Read once from the environment and cached; call reset_settings_cache()
    after changing environment variables.
    """
    return Settings(
        api_base_url=env.get_api_base_url(),
        http_timeout_sec=env.get_http_timeout_sec(),
        cache_ttl_sec=env.get_cache_ttl_sec(),
        color_scheme=env.get_color_scheme(),
    )


def reset_settings_cache() -> None:
    get_settings.cache_clear()
