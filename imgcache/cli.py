"""Command-line entry point for the image cache."""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
import time
from pathlib import Path
from typing import Sequence

from .config import CacheConfig, CachingMode
from .transform import CachedImage

logger = logging.getLogger("imgcache.cli")

COMMANDS = ("url", "path", "render", "save", "content-type")


def _add_transform_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("source", help="Source image (PNG, GIF or JPEG)")
    parser.add_argument(
        "--width",
        type=int,
        default=0,
        help="Target width in pixels (0 leaves it unconstrained)",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=0,
        help="Target height in pixels (0 leaves it unconstrained)",
    )
    parser.add_argument(
        "--quality",
        type=int,
        default=None,
        help="Encode quality between 0 and 100 (default: 90)",
    )
    parser.add_argument(
        "--stretch",
        action="store_true",
        help="Ignore the aspect ratio and stretch to the target size",
    )
    parser.add_argument(
        "--fit",
        action="store_true",
        help="Fill the target box and crop the overflow",
    )
    parser.add_argument("--offset-x", type=int, default=0, help="Horizontal shift when fitting")
    parser.add_argument("--offset-y", type=int, default=0, help="Vertical shift when fitting")
    parser.add_argument("--mask", default=None, help="Watermark image to overlay")
    parser.add_argument(
        "--transparency",
        type=int,
        default=None,
        help="Watermark opacity percentage for masks without alpha",
    )
    parser.add_argument(
        "--format",
        default=None,
        choices=("png", "gif", "jpg", "jpeg"),
        help="Output format (default: the source format)",
    )
    parser.add_argument(
        "--mode",
        default=None,
        choices=[mode.name.lower() for mode in CachingMode],
        help="Caching mode (default: IMGCACHE_MODE or performance)",
    )
    parser.add_argument("--cache-path", default=None, help="Directory holding rendered images")
    parser.add_argument("--cache-url", default=None, help="URL prefix replacing the cache path")
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Resize, crop and watermark images through an on-disk cache.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    helps = {
        "url": "Print the cache URL of the rendered image",
        "path": "Print the filesystem path of the rendered image",
        "render": "Write the rendered image to STDOUT",
        "save": "Copy the rendered image to a destination file",
        "content-type": "Print the MIME type of the source image",
    }
    for command in COMMANDS:
        sub = subparsers.add_parser(command, help=helps[command])
        _add_transform_arguments(sub)
        if command == "save":
            sub.add_argument("destination", type=Path, help="Where to copy the image")

    argv = list(sys.argv[1:] if argv is None else argv)
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> CacheConfig:
    config = CacheConfig.from_env()
    changes = {}
    if args.cache_path:
        changes["cache_path"] = args.cache_path
        changes["cache_url"] = args.cache_url or args.cache_path
    elif args.cache_url:
        changes["cache_url"] = args.cache_url
    if args.mode:
        changes["caching_mode"] = CachingMode[args.mode.upper()]
    return dataclasses.replace(config, **changes)


def build_image(args: argparse.Namespace, config: CacheConfig) -> CachedImage:
    image = CachedImage(args.source, quality=args.quality, config=config)
    image.set_ratio(not args.stretch).set_fit(args.fit)
    image.set_offset_x(args.offset_x).set_offset_y(args.offset_y)
    if args.mask:
        image.set_mask(args.mask, args.transparency)
    return image.resize(args.width, args.height)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
        force=True,
    )

    config = build_config(args)
    image = build_image(args, config)
    if image.source.fallback:
        logger.warning("Rendering fallback image %s", image.source.path)

    start = time.perf_counter()
    if args.command == "url":
        print(image.get_url(format_override=args.format))
    elif args.command == "path":
        print(image.get_path(format_override=args.format))
    elif args.command == "render":
        size = image.render(format_override=args.format)
        logger.debug("Wrote %d bytes", size)
    elif args.command == "save":
        if not image.save(str(args.destination)):
            return 1
        print(args.destination)
    else:
        print(image.get_content_type())
    logger.debug("Finished %s in %.2fs", args.command, time.perf_counter() - start)
    return 0


if __name__ == "__main__":
    sys.exit(main())
