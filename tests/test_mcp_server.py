import pytest

from imgcache import mcp_server


@pytest.fixture(autouse=True)
def _cache_env(monkeypatch, cache_dir):
    monkeypatch.setenv("IMGCACHE_PATH", str(cache_dir))
    monkeypatch.setenv("IMGCACHE_URL", "/cdn")
    monkeypatch.delenv("IMGCACHE_MODE", raising=False)


def test_transform_image_returns_url(jpeg_source, png_mask):
    url = mcp_server.transform_image(
        str(jpeg_source), width=40, height=40, fit=True, mask=str(png_mask)
    )
    assert url.startswith("/cdn/")
    assert url.endswith("-photo-40x40-90-scale-stamp-100.jpg")


def test_transform_image_missing_source(tmp_path):
    with pytest.raises(FileNotFoundError):
        mcp_server.transform_image(str(tmp_path / "nope.jpg"))


def test_image_content_type(gif_source):
    assert mcp_server.image_content_type(str(gif_source)) == "image/gif"
