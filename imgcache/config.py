"""Configuration objects and constants for the image cache."""

from __future__ import annotations

import enum
import os
from dataclasses import dataclass


class CachingMode(enum.IntEnum):
    """How an existing cached artifact is validated before reuse."""

    DEBUG = 0  # always recompute
    NORMAL = 1  # recompute when the source is newer than the artifact
    PERFORMANCE = 2  # reuse whenever the artifact exists


DEFAULT_CACHE_PATH = "cache"
DEFAULT_ERROR_IMAGE = "error.jpg"
DEFAULT_QUALITY = 90


@dataclass(frozen=True)
class CacheConfig:
    """Settings shared by every image rendered against one cache directory."""

    cache_path: str = DEFAULT_CACHE_PATH
    cache_url: str = DEFAULT_CACHE_PATH
    url_separator: str = "/"
    error_image: str = DEFAULT_ERROR_IMAGE
    caching_mode: CachingMode = CachingMode.PERFORMANCE
    request_timeout: float = 15.0

    @classmethod
    def from_env(cls) -> "CacheConfig":
        """Build a config from ``IMGCACHE_*`` environment variables."""
        mode_name = os.getenv("IMGCACHE_MODE", "performance").strip().upper()
        try:
            mode = CachingMode[mode_name]
        except KeyError:
            raise ValueError(f"Unknown caching mode: {mode_name.lower()}") from None
        cache_path = os.getenv("IMGCACHE_PATH", DEFAULT_CACHE_PATH)
        return cls(
            cache_path=cache_path,
            cache_url=os.getenv("IMGCACHE_URL", cache_path),
            url_separator=os.getenv("IMGCACHE_URL_SEPARATOR", "/"),
            error_image=os.getenv("IMGCACHE_ERROR_IMAGE", DEFAULT_ERROR_IMAGE),
            caching_mode=mode,
        )


DEFAULT_CONFIG = CacheConfig()
