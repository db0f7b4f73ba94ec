"""Resample, watermark and encode one source image."""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Optional

from PIL import Image

from .images import (
    ALPHA_FORMATS,
    PIL_FORMATS,
    normalize_format,
    read_metadata,
    require_format,
)
from .models import FinalSize, ImageMetadata, Mask, TransformParams
from .sizing import resolve_size

logger = logging.getLogger("imgcache")


def png_compress_level(quality: int) -> int:
    """Map a 0-100 quality onto PNG's 0-9 compression scale."""
    return min(quality // 10, 9)


def _encode_options(fmt: str, quality: int) -> dict:
    if fmt == "png":
        return {"compress_level": png_compress_level(quality)}
    if fmt == "jpg":
        return {"quality": quality}
    return {}


def _apply_mask(canvas: Image.Image, mask: Mask) -> None:
    meta = read_metadata(mask.path)
    x = canvas.width - meta.width
    y = canvas.height - meta.height
    with Image.open(mask.path) as mask_image:
        if meta.format in ALPHA_FORMATS:
            overlay = mask_image.convert("RGBA")
            if canvas.mode == "RGBA":
                # alpha_composite takes non-negative positions only
                canvas.alpha_composite(
                    overlay, dest=(max(x, 0), max(y, 0)), source=(max(-x, 0), max(-y, 0))
                )
            else:
                canvas.paste(overlay, (x, y), overlay)
        else:
            alpha = round(255 * mask.transparency / 100)
            overlay = mask_image.convert(canvas.mode)
            canvas.paste(overlay, (x, y), Image.new("L", overlay.size, alpha))


def compose(
    source_path: str,
    meta: ImageMetadata,
    params: TransformParams,
    output_format: str,
) -> Image.Image:
    """Build the output canvas for ``source_path`` without encoding it."""
    size: FinalSize = resolve_size(meta.width, meta.height, params)
    if min(size.width, size.height, size.canvas_width, size.canvas_height) <= 0:
        raise ValueError(
            f"Cannot render {source_path} at {size.canvas_width}x{size.canvas_height}"
        )

    mode = "RGBA" if output_format in ALPHA_FORMATS else "RGB"
    canvas = Image.new(mode, (size.canvas_width, size.canvas_height))
    with Image.open(source_path) as original:
        resampled = original.convert(mode).resize(
            (size.width, size.height), Image.LANCZOS
        )
    canvas.paste(resampled, (size.x, size.y))

    if params.mask is not None:
        _apply_mask(canvas, params.mask)
    return canvas


def render_image(
    source_path: str,
    params: TransformParams,
    destination: Optional[str] = None,
    output_format: Optional[str] = None,
) -> Optional[bytes]:
    """Render ``source_path`` and write it to ``destination``.

    Without a destination the encoded bytes are returned instead and
    nothing is written. The output format defaults to the source format.
    """
    meta = read_metadata(source_path)
    fmt = require_format(normalize_format(output_format) or meta.format, source_path)
    canvas = compose(source_path, meta, params, fmt)
    options = _encode_options(fmt, params.quality)

    if destination is None:
        buffer = io.BytesIO()
        canvas.save(buffer, format=PIL_FORMATS[fmt], **options)
        logger.debug("Rendered %s in memory as %s", source_path, fmt)
        return buffer.getvalue()

    Path(destination).parent.mkdir(parents=True, exist_ok=True)
    canvas.save(destination, format=PIL_FORMATS[fmt], **options)
    logger.debug("Rendered %s to %s as %s", source_path, destination, fmt)
    return None
