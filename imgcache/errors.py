"""Exceptions raised by the image cache."""

from __future__ import annotations


class UnsupportedFormat(ValueError):
    """Raised when a source, mask or output format is not PNG, GIF or JPEG."""


class CacheReadError(OSError):
    """Raised when a cached artifact cannot be opened for reading."""
