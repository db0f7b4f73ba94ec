"""Utility helpers for path handling and rounding."""

from __future__ import annotations

import math
import os
import zlib
from typing import Tuple


def path_info(path: str) -> Tuple[str, str, str]:
    """Split ``path`` into (directory, name without extension, extension).

    A bare file name has ``"."`` as its directory.
    """
    directory = os.path.dirname(path) or "."
    base = os.path.basename(path)
    name, dot, extension = base.rpartition(".")
    if not dot:
        return directory, base, ""
    return directory, name, extension


def path_checksum(directory: str) -> str:
    """CRC-32 of a directory string as unpadded lowercase hex."""
    return format(zlib.crc32(directory.encode("utf-8")) & 0xFFFFFFFF, "x")


def round_half_away(value: float) -> int:
    """Round to the nearest integer, halves away from zero."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))
