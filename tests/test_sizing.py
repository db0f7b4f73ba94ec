import pytest

from imgcache.models import TransformParams
from imgcache.sizing import resolve_size
from imgcache.utils import round_half_away


def test_width_only_keeps_aspect():
    size = resolve_size(200, 100, TransformParams(width=100, height=0))
    assert (size.width, size.height) == (100, 50)
    assert (size.canvas_width, size.canvas_height) == (100, 50)
    assert (size.x, size.y) == (0, 0)


def test_height_only_keeps_aspect():
    size = resolve_size(200, 100, TransformParams(width=0, height=25))
    assert (size.width, size.height) == (50, 25)


def test_unconstrained_keeps_original_size():
    size = resolve_size(200, 100, TransformParams())
    assert (size.width, size.height) == (200, 100)


def test_box_fits_within():
    size = resolve_size(200, 100, TransformParams(width=50, height=50))
    assert (size.width, size.height) == (50, 25)


def test_upscale_within_box():
    size = resolve_size(200, 100, TransformParams(width=400, height=400))
    assert (size.width, size.height) == (400, 200)


def test_fit_fills_and_centers():
    size = resolve_size(200, 100, TransformParams(width=50, height=50, fit=True))
    assert (size.width, size.height) == (100, 50)
    assert (size.canvas_width, size.canvas_height) == (50, 50)
    assert (size.x, size.y) == (-25, 0)


def test_fit_applies_offsets():
    params = TransformParams(width=50, height=50, fit=True, offset_x=5, offset_y=-3)
    size = resolve_size(200, 100, params)
    assert (size.x, size.y) == (-20, -3)


def test_fit_odd_overhang_truncates_toward_zero():
    size = resolve_size(3, 1, TransformParams(width=2, height=2, fit=True))
    assert (size.width, size.height) == (6, 2)
    assert size.x == -2
    size = resolve_size(101, 100, TransformParams(width=100, height=100, fit=True))
    assert (size.width, size.height) == (101, 100)
    assert size.x == 0


def test_fit_without_target_keeps_size():
    size = resolve_size(200, 100, TransformParams(fit=True))
    assert (size.width, size.height) == (200, 100)
    assert (size.canvas_width, size.canvas_height) == (0, 0)


def test_fit_with_one_dimension():
    size = resolve_size(200, 100, TransformParams(width=100, fit=True))
    assert (size.width, size.height) == (100, 50)
    assert (size.canvas_width, size.canvas_height) == (100, 0)


@pytest.mark.parametrize("width,height", [(10, 300), (300, 10), (0, 0), (123, 45)])
def test_stretch_uses_target_verbatim(width, height):
    size = resolve_size(200, 100, TransformParams(width=width, height=height, keep_ratio=False))
    assert (size.width, size.height) == (width, height)


def test_half_rounds_away_from_zero():
    # 0.5 * 5 = 2.5
    size = resolve_size(4, 5, TransformParams(width=2))
    assert (size.width, size.height) == (2, 3)


def test_round_half_away():
    assert round_half_away(2.5) == 3
    assert round_half_away(1.5) == 2
    assert round_half_away(2.4999) == 2
    assert round_half_away(-2.5) == -3


def test_invalid_original_size():
    with pytest.raises(ValueError):
        resolve_size(0, 100, TransformParams(width=10))
