"""Cache key derivation and staleness checks for rendered artifacts."""

from __future__ import annotations

import logging
import os
from typing import Optional

from .config import CacheConfig, CachingMode
from .images import normalize_format
from .models import TransformParams
from .utils import path_checksum, path_info

logger = logging.getLogger("imgcache")


def policy_suffix(params: TransformParams) -> str:
    """Suffix naming the scaling policy, offsets and watermark of a render."""
    suffix = ""
    if not params.keep_ratio:
        suffix = "-stretched"
    elif params.fit:
        suffix = "-scale"
    if params.fit and (params.offset_x or params.offset_y):
        suffix += f"-o{params.offset_x}_{params.offset_y}"
    if params.mask is not None:
        _, mask_name, _ = path_info(params.mask.path)
        suffix += f"-{mask_name}-{params.mask.transparency}"
    return suffix


def compute_cache_key(
    params: TransformParams,
    source_path: str,
    output_format: Optional[str] = None,
) -> str:
    """Derive the cache file name for ``source_path`` rendered with ``params``.

    Format: ``{crc32(dir)}-{name}-{W}x{H}-{quality}{suffix}.{ext}``. The
    extension is the source's unless ``output_format`` names another format.
    """
    directory, name, extension = path_info(source_path)
    output_format = normalize_format(output_format)
    if output_format and normalize_format(extension) != output_format:
        extension = output_format
    return "%s-%s-%dx%d-%d%s.%s" % (
        path_checksum(directory),
        name,
        params.width,
        params.height,
        params.quality,
        policy_suffix(params),
        extension,
    )


def cache_file_path(config: CacheConfig, key: str) -> str:
    return config.cache_path + os.sep + key


def is_cached(mode: CachingMode, artifact_path: str, source_path: str) -> bool:
    """Decide whether the artifact at ``artifact_path`` may be reused."""
    if mode == CachingMode.DEBUG:
        return False
    if mode == CachingMode.NORMAL:
        try:
            artifact_mtime = os.stat(artifact_path).st_mtime
        except FileNotFoundError:
            return False
        return os.stat(source_path).st_mtime < artifact_mtime
    return os.path.exists(artifact_path)
