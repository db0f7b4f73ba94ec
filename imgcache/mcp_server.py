"""MCP server exposing image cache tools."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from mcp.server.fastmcp import FastMCP

from .config import CacheConfig
from .transform import CachedImage

logger = logging.getLogger("imgcache.mcp")
logger.setLevel(logging.ERROR)

mcp = FastMCP(name="imgcache")


def _load_source(path: str, config: CacheConfig) -> CachedImage:
    source = Path(path).expanduser()
    if not source.exists():
        raise FileNotFoundError(f"Image path does not exist: {source}")
    return CachedImage(str(source), config=config)


@mcp.tool()
def transform_image(
    path: str,
    width: int = 0,
    height: int = 0,
    quality: int = 90,
    keep_ratio: bool = True,
    fit: bool = False,
    offset_x: int = 0,
    offset_y: int = 0,
    mask: Optional[str] = None,
    transparency: int = 100,
) -> str:
    """Resize, crop or watermark an image and return its cache URL."""

    config = CacheConfig.from_env()
    image = _load_source(path, config)
    image.set_quality(quality).set_ratio(keep_ratio).set_fit(fit)
    image.set_offset_x(offset_x).set_offset_y(offset_y)
    if mask:
        image.set_mask(str(Path(mask).expanduser()), transparency)
    return image.resize(width, height).get_url()


@mcp.tool()
def image_content_type(path: str) -> str:
    """Return the MIME type of a PNG, GIF or JPEG image."""

    return _load_source(path, CacheConfig.from_env()).get_content_type()


def main() -> None:
    """Entry point for running the MCP server."""
    logging.basicConfig(level=logging.ERROR)
    mcp.run()


if __name__ == "__main__":
    main()
