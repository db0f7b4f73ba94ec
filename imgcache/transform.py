"""Fluent, cache-aware wrapper around one source image.

Typical use::

    image = CachedImage("photos/source.jpg", config=CacheConfig(cache_path="cache"))
    url = image.set_mask("watermark.png").resize(120, 120).get_url()

Every configuration call replaces the frozen ``TransformParams`` and bumps a
version counter. The cache key and cached flag are memoized together with
the version they were computed at, so any configuration call makes the next
entry point recompute both.
"""

from __future__ import annotations

import dataclasses
import logging
import os
import shutil
import sys
from typing import Any, Optional, Tuple, Union, cast

from .cache import cache_file_path, compute_cache_key, is_cached
from .config import DEFAULT_CONFIG, CacheConfig, CachingMode
from .errors import CacheReadError
from .images import (
    content_type_for,
    detect_image_format,
    download_source,
    normalize_format,
    resolve_source,
)
from .models import Mask, ResolvedSource, TransformParams
from .pipeline import render_image

logger = logging.getLogger("imgcache")


def _to_int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


class CachedImage:
    """Resize, crop and watermark an image, caching the result on disk."""

    def __init__(
        self,
        file_image: str,
        quality: Optional[int] = None,
        ratio: Optional[bool] = None,
        base64_data: Optional[str] = None,
        config: Optional[CacheConfig] = None,
        source: Optional[ResolvedSource] = None,
    ) -> None:
        self.config = config or DEFAULT_CONFIG
        self.source = source or resolve_source(file_image, self.config, base64_data)
        self.caching_mode: CachingMode = self.config.caching_mode
        self.params = TransformParams()
        self.resize_requested = False
        self._version = 0
        self._memo_key: Optional[Tuple[int, str]] = None
        self._memo_cached: Optional[Tuple[int, bool]] = None
        self.output_format: Optional[str] = None
        self.set_quality(quality)
        self.set_ratio(ratio)

    @classmethod
    def create(
        cls,
        file_image: str,
        quality: Optional[int] = None,
        ratio: Optional[bool] = None,
        config: Optional[CacheConfig] = None,
    ) -> "CachedImage":
        return cls(file_image, quality, ratio, config=config)

    @classmethod
    def from_url(
        cls,
        url: str,
        quality: Optional[int] = None,
        ratio: Optional[bool] = None,
        config: Optional[CacheConfig] = None,
    ) -> "CachedImage":
        """Download ``url`` and wrap the local copy."""
        config = config or DEFAULT_CONFIG
        return cls(url, quality, ratio, config=config, source=download_source(url, config))

    def __str__(self) -> str:
        try:
            return self.get_url()
        except Exception as exc:  # noqa: BLE001 - string conversion never raises
            logger.warning("Failed to render %s: %s", self.source.path, exc)
            return self.config.error_image

    def __repr__(self) -> str:
        return f"CachedImage({self.source.path!r}, {self.params!r})"

    @property
    def source_path(self) -> str:
        return self.source.path

    def _update(self, **changes: Any) -> "CachedImage":
        if changes:
            self.params = dataclasses.replace(self.params, **changes)
        self._invalidate()
        return self

    def _invalidate(self) -> None:
        self._version += 1

    # configuration

    def set_quality(self, value: Optional[int]) -> "CachedImage":
        """Set encode quality; values outside 0-100 are ignored."""
        if (
            isinstance(value, (int, float))
            and not isinstance(value, bool)
            and 0 <= value <= 100
        ):
            return self._update(quality=int(value))
        return self._update()

    def set_ratio(self, value: Optional[bool]) -> "CachedImage":
        """Keep the aspect ratio (True) or stretch to the target (False)."""
        if isinstance(value, bool):
            return self._update(keep_ratio=value)
        return self._update()

    def set_fit(self, value: Optional[bool]) -> "CachedImage":
        """Fill the target box and crop the overflow."""
        if isinstance(value, bool):
            return self._update(fit=value)
        return self._update()

    def set_offset_x(self, value: Any) -> "CachedImage":
        return self._update(offset_x=_to_int(value))

    def set_offset_y(self, value: Any) -> "CachedImage":
        return self._update(offset_y=_to_int(value))

    def set_mask(
        self,
        filename: str,
        transparency: Optional[int] = None,
        position: Optional[str] = None,
    ) -> "CachedImage":
        """Watermark the output with ``filename`` in the bottom-right corner.

        ``transparency`` is only used for masks without an alpha channel.
        ``position`` is reserved and currently has no effect.
        """
        mask = self.params.mask
        if os.path.exists(filename):
            mask = Mask(filename, mask.transparency if mask else 100)
        else:
            logger.warning("Mask %s does not exist; ignoring it", filename)
        if (
            mask is not None
            and isinstance(transparency, (int, float))
            and not isinstance(transparency, bool)
            and 0 < transparency <= 100
        ):
            mask = Mask(mask.path, int(transparency))
        return self._update(mask=mask)

    def set_caching_mode(self, mode: CachingMode) -> "CachedImage":
        self.caching_mode = CachingMode(mode)
        return self._update()

    def resize(self, width: Optional[int], height: Optional[int]) -> "CachedImage":
        """Target ``width`` x ``height``; ``None`` or 0 leaves a side unconstrained."""
        self.resize_requested = True
        return self._update(
            width=max(0, _to_int(width)),
            height=max(0, _to_int(height)),
        )

    def resize_width(self, width: Optional[int]) -> "CachedImage":
        self.params = dataclasses.replace(self.params, keep_ratio=True, fit=False)
        return self.resize(width, None)

    def resize_height(self, height: Optional[int]) -> "CachedImage":
        self.params = dataclasses.replace(self.params, keep_ratio=True, fit=False)
        return self.resize(None, height)

    # cache state

    @property
    def cache_key(self) -> str:
        if self._memo_key is None or self._memo_key[0] != self._version:
            self._memo_key = (
                self._version,
                compute_cache_key(self.params, self.source.path, self.output_format),
            )
        return self._memo_key[1]

    def cached_name(self, full_path: bool = False) -> str:
        if full_path:
            return cache_file_path(self.config, self.cache_key)
        return self.cache_key

    @property
    def is_cached(self) -> bool:
        if self._memo_cached is None or self._memo_cached[0] != self._version:
            cached = is_cached(
                self.caching_mode, self.cached_name(True), self.source.path
            )
            logger.debug(
                "Cache %s for %s", "hit" if cached else "miss", self.cache_key
            )
            self._memo_cached = (self._version, cached)
        return self._memo_cached[1]

    def _select_format(self, format_override: Optional[str]) -> None:
        fmt = normalize_format(format_override)
        if fmt != self.output_format:
            self.output_format = fmt
            self._invalidate()

    def _ensure_rendered(self, format_override: Optional[str] = None) -> None:
        if not self.resize_requested:
            self.resize(self.params.width, self.params.height)
        self._select_format(format_override)
        if not self.is_cached:
            render_image(
                self.source.path,
                self.params,
                destination=self.cached_name(True),
                output_format=format_override,
            )
            if self.caching_mode != CachingMode.DEBUG:
                self._memo_cached = (self._version, True)

    # entry points

    def get_url(self, full_path: bool = True, format_override: Optional[str] = None) -> str:
        """URL of the rendered image, rendering it first on a cache miss."""
        self._ensure_rendered(format_override)
        name = self.cached_name(full_path)
        name = name.replace(self.config.cache_path, self.config.cache_url)
        return name.replace(os.sep, self.config.url_separator)

    def get_path(self, format_override: Optional[str] = None) -> str:
        """Filesystem path of the rendered image."""
        self._ensure_rendered(format_override)
        return self.cached_name(True)

    def render(
        self, return_bytes: bool = False, format_override: Optional[str] = None
    ) -> Union[bytes, int]:
        """Write the rendered image to stdout and return its size in bytes.

        With ``return_bytes`` the content is returned instead of written.
        """
        self._ensure_rendered(format_override)
        path = self.cached_name(True)
        try:
            with open(path, "rb") as handle:
                data = handle.read()
        except OSError as exc:
            raise CacheReadError(f"File {path} cannot be opened") from exc
        if return_bytes:
            return data
        sys.stdout.buffer.write(data)
        sys.stdout.buffer.flush()
        return len(data)

    def get_content_type(self) -> str:
        """MIME type of the source image."""
        return content_type_for(detect_image_format(self.source.path))

    def live_render(self, format_override: Optional[str] = None) -> bytes:
        """Render straight to bytes without touching the cache directory."""
        if not self.resize_requested:
            self.resize(self.params.width, self.params.height)
        data = render_image(self.source.path, self.params, output_format=format_override)
        return cast(bytes, data)

    def save(self, target_file: str) -> bool:
        """Copy the rendered image to ``target_file``."""
        self._ensure_rendered()
        try:
            shutil.copyfile(self.cached_name(True), target_file)
        except OSError as exc:
            logger.warning("Failed to save %s to %s: %s", self.cache_key, target_file, exc)
            return False
        return True
