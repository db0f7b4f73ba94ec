"""Image format detection, metadata and source resolution utilities."""

from __future__ import annotations

import base64
import binascii
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

import requests
from filetype import guess
from PIL import Image

from .config import CacheConfig
from .errors import UnsupportedFormat
from .models import ImageMetadata, ResolvedSource

logger = logging.getLogger("imgcache")

TEMP_PREFIX = "tmp://"
MAX_IMAGE_BYTES = 10 * 1024 * 1024

CONTENT_TYPES = {
    "png": "image/png",
    "gif": "image/gif",
    "jpg": "image/jpeg",
}
PIL_FORMATS = {
    "png": "PNG",
    "gif": "GIF",
    "jpg": "JPEG",
}
ALPHA_FORMATS = {"png"}


def normalize_format(value: Optional[str]) -> Optional[str]:
    """Lowercase a format tag and fold ``jpeg`` into ``jpg``."""
    if value is None:
        return None
    fmt = value.strip().lower().lstrip(".")
    if fmt == "jpeg":
        return "jpg"
    return fmt


def detect_image_format(path: str | Path) -> Optional[str]:
    """Detect image type using filetype; returns lowercase extension."""
    kind = guess(str(path))
    if kind and kind.mime.startswith("image/"):
        return normalize_format(kind.extension)
    return None


def require_format(fmt: Optional[str], path: str | Path) -> str:
    if fmt not in PIL_FORMATS:
        raise UnsupportedFormat(f"Unsupported image type {fmt!r} for {path}")
    return fmt


def content_type_for(fmt: Optional[str]) -> str:
    if fmt not in CONTENT_TYPES:
        raise UnsupportedFormat(f"Unknown image type: {fmt!r}")
    return CONTENT_TYPES[fmt]


def read_metadata(path: str | Path) -> ImageMetadata:
    """Read width, height and format of a PNG, GIF or JPEG file."""
    fmt = require_format(detect_image_format(path), path)
    with Image.open(path) as img:
        width, height = img.size
    return ImageMetadata(width=width, height=height, format=fmt)


def _temp_target(name: str) -> Path:
    if name.startswith(TEMP_PREFIX):
        name = name[len(TEMP_PREFIX):]
    return Path(tempfile.gettempdir()) / os.path.basename(name)


def _is_real_file(name: str) -> bool:
    return not name.startswith(TEMP_PREFIX) and os.path.isfile(name)


def resolve_source(
    name: str,
    config: CacheConfig,
    base64_data: Optional[str] = None,
) -> ResolvedSource:
    """Resolve a source image, falling back to the configured error image.

    An existing file is used as is. Otherwise a base64 payload, when given,
    is decoded into the temporary directory under the file's base name.
    Names prefixed with ``tmp://`` never resolve to a real file.
    """
    if _is_real_file(name):
        return ResolvedSource(name)
    if base64_data is not None:
        destination = _temp_target(name)
        try:
            destination.write_bytes(base64.b64decode(base64_data))
        except (binascii.Error, OSError) as exc:
            logger.warning("Failed to decode payload for %s: %s", name, exc)
        else:
            return ResolvedSource(str(destination))
    logger.warning("Source %s is unavailable; using %s", name, config.error_image)
    return ResolvedSource(config.error_image, fallback=True)


def download_source(url: str, config: CacheConfig) -> ResolvedSource:
    """Fetch a remote image into the temporary directory."""
    name = os.path.basename(urlparse(url).path) or "image"
    try:
        resp = requests.get(url, timeout=config.request_timeout)
        resp.raise_for_status()
    except requests.RequestException as exc:
        logger.warning("Failed to fetch image %s: %s", url, exc)
        return ResolvedSource(config.error_image, fallback=True)

    data = resp.content
    if len(data) > MAX_IMAGE_BYTES:
        logger.warning(
            "Skipping %s: image larger than %s bytes",
            url,
            MAX_IMAGE_BYTES,
        )
        return ResolvedSource(config.error_image, fallback=True)

    destination = _temp_target(name)
    try:
        destination.write_bytes(data)
    except OSError as exc:
        logger.warning("Failed to write image %s: %s", destination, exc)
        return ResolvedSource(config.error_image, fallback=True)
    logger.debug("Downloaded %s to %s", url, destination)
    return ResolvedSource(str(destination))
