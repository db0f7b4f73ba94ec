"""Data models used throughout the transform pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .config import DEFAULT_QUALITY


@dataclass(frozen=True)
class Mask:
    """Watermark overlaid in the bottom-right corner of the output."""

    path: str
    transparency: int = 100


@dataclass(frozen=True)
class TransformParams:
    """Every parameter that affects the rendered output of one source."""

    width: int = 0
    height: int = 0
    keep_ratio: bool = True
    fit: bool = False
    quality: int = DEFAULT_QUALITY
    offset_x: int = 0
    offset_y: int = 0
    mask: Optional[Mask] = None


@dataclass(frozen=True)
class ImageMetadata:
    """Dimensions and format tag read from an image file."""

    width: int
    height: int
    format: str


@dataclass(frozen=True)
class FinalSize:
    """Resampled size, output canvas size and paste position."""

    width: int
    height: int
    canvas_width: int
    canvas_height: int
    x: int = 0
    y: int = 0


@dataclass(frozen=True)
class ResolvedSource:
    """Source path, flagged when the configured error image was substituted."""

    path: str
    fallback: bool = False
