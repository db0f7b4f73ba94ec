"""Shared fixtures: an isolated cache directory and generated source images."""

from pathlib import Path

import pytest
from PIL import Image

from imgcache.config import CacheConfig, CachingMode


def _write_image(path: Path, size, fmt: str, mode: str = "RGB", color=(200, 30, 30)) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new(mode, size, color).save(path, format=fmt)
    return path


@pytest.fixture
def cache_dir(tmp_path):
    return tmp_path / "cache"


@pytest.fixture
def config(cache_dir):
    return CacheConfig(
        cache_path=str(cache_dir),
        cache_url="/media/cache",
        error_image=str(cache_dir.parent / "missing-error.jpg"),
        caching_mode=CachingMode.PERFORMANCE,
    )


@pytest.fixture
def jpeg_source(tmp_path):
    return _write_image(tmp_path / "src" / "photo.jpg", (200, 100), "JPEG")


@pytest.fixture
def png_source(tmp_path):
    return _write_image(
        tmp_path / "src" / "logo.png", (200, 100), "PNG", mode="RGBA", color=(0, 0, 255, 128)
    )


@pytest.fixture
def gif_source(tmp_path):
    return _write_image(tmp_path / "src" / "anim.gif", (200, 100), "GIF", color=(10, 200, 10))


@pytest.fixture
def png_mask(tmp_path):
    return _write_image(
        tmp_path / "masks" / "stamp.png", (20, 10), "PNG", mode="RGBA", color=(255, 255, 255, 0)
    )


@pytest.fixture
def jpeg_mask(tmp_path):
    return _write_image(tmp_path / "masks" / "mark.jpg", (20, 10), "JPEG", color=(255, 255, 255))


@pytest.fixture
def make_image():
    return _write_image
