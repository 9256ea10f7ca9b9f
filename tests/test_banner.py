import pytest
from PIL import Image

from poster_export.banner import CompositingError, stitch
from poster_export.capture import RasterSurface


def _solid(width: int, height: int, color, mode: str = "RGB") -> RasterSurface:
    return RasterSurface(Image.new(mode, (width, height), color))


def test_stitch_width_is_sum_of_inputs() -> None:
    surfaces = [_solid(3, 5, "red"), _solid(4, 5, "green"), _solid(2, 5, "blue")]
    banner = stitch(surfaces)
    assert banner.size == (9, 5)


def test_stitch_places_surfaces_left_to_right() -> None:
    banner = stitch([_solid(3, 5, (255, 0, 0)), _solid(4, 5, (0, 255, 0))])
    assert banner.image.getpixel((0, 0)) == (255, 0, 0)
    assert banner.image.getpixel((2, 4)) == (255, 0, 0)
    assert banner.image.getpixel((3, 0)) == (0, 255, 0)
    assert banner.image.getpixel((6, 4)) == (0, 255, 0)


def test_transparent_corners_show_banner_background() -> None:
    surface = _solid(4, 4, (0, 0, 0, 0), mode="RGBA")
    banner = stitch([surface], background="#F5F6F8")
    assert banner.image.mode == "RGB"
    assert banner.image.getpixel((0, 0)) == (245, 246, 248)


def test_stitch_rejects_empty_input() -> None:
    with pytest.raises(ValueError):
        stitch([])


def test_stitch_rejects_mismatched_heights() -> None:
    with pytest.raises(CompositingError):
        stitch([_solid(2, 5, "red"), _solid(2, 6, "red")])
