"""Output size resolution for the stretch, fit-within and fill-and-crop policies."""

from __future__ import annotations

from .models import FinalSize, TransformParams
from .utils import round_half_away


def _ratios(original_width: int, original_height: int, width: int, height: int):
    return float(width) / original_width, float(height) / original_height


def resolve_size(original_width: int, original_height: int, params: TransformParams) -> FinalSize:
    """Compute the resampled size and where it lands on the output canvas.

    A target dimension of 0 leaves that dimension unconstrained. Without
    ``keep_ratio`` the target is used verbatim. With ``fit`` the image fills
    the target box and is centered on a canvas of exactly the target size,
    shifted by the configured offsets; anything outside the canvas is
    clipped.
    """
    if original_width <= 0 or original_height <= 0:
        raise ValueError(
            f"Invalid original size {original_width}x{original_height}"
        )
    width, height = params.width, params.height

    if not params.keep_ratio:
        final_width, final_height = width, height
    else:
        x_ratio, y_ratio = _ratios(original_width, original_height, width, height)
        if x_ratio == 0.0 and y_ratio == 0.0:
            ratio = 1.0
        elif params.fit or x_ratio == 0.0 or y_ratio == 0.0:
            # one dimension unconstrained, or filling the box
            ratio = max(x_ratio, y_ratio)
        else:
            ratio = min(x_ratio, y_ratio)
        final_width = round_half_away(ratio * original_width)
        final_height = round_half_away(ratio * original_height)

    if not params.fit:
        return FinalSize(final_width, final_height, final_width, final_height)

    # truncated toward zero
    x = int((width - final_width) / 2) + params.offset_x
    y = int((height - final_height) / 2) + params.offset_y
    return FinalSize(final_width, final_height, width, height, x, y)
