import io

import pytest
from PIL import Image

from poster_export.assets import ResourceLoader
from poster_export.capture import CaptureError, RasterSurface, capture
from poster_export.nodes import FLOAT_UP, Box, Picture, Text, animate
from tests.helpers import broken_node, make_node


def test_capture_scales_both_axes_and_rounds() -> None:
    node = make_node(width=375, height=812)
    assert capture(node, 3).size == (1125, 2436)
    assert capture(node, 1.5).size == (round(375 * 1.5), round(812 * 1.5))


@pytest.mark.parametrize("scale", [0, -1, float("nan"), float("inf"), "3", True])
def test_capture_rejects_invalid_scale(scale) -> None:
    with pytest.raises(ValueError):
        capture(make_node(), scale)


def test_capture_fills_background_and_is_opaque() -> None:
    surface = capture(make_node(), 2)
    assert surface.image.mode == "RGB"
    assert surface.image.getpixel((0, 0)) == (245, 246, 248)


def test_translucent_fill_is_blended_over_background() -> None:
    node = make_node(elements=(Box(x=0, y=0, width=10, height=10, fill="#000000", opacity=0.5),))
    pixel = capture(node, 1).image.getpixel((2, 2))
    assert pixel != (0, 0, 0)
    assert pixel != (245, 246, 248)
    assert all(100 < channel < 140 for channel in pixel)


def test_capture_refuses_interactive_nodes() -> None:
    with pytest.raises(CaptureError):
        capture(make_node(static=False), 1)


def test_capture_refuses_unsettled_motion() -> None:
    moving = animate(Text(x=0, y=0, text="hi"), FLOAT_UP, 0.5)
    with pytest.raises(CaptureError, match="motion"):
        capture(make_node(elements=(moving,)), 1)


def test_remote_picture_failure_becomes_capture_error(offline_loader) -> None:
    with pytest.raises(CaptureError) as excinfo:
        capture(broken_node(), 1, loader=offline_loader)
    assert excinfo.value.__cause__ is not None


def test_local_picture_is_drawn(tmp_path) -> None:
    Image.new("RGB", (4, 4), (255, 0, 0)).save(tmp_path / "dot.png")
    node = make_node(elements=(Picture(x=0, y=0, width=10, height=10, source="dot.png"),))

    surface = capture(node, 1, loader=ResourceLoader(assets_dir=tmp_path))
    assert surface.image.getpixel((5, 5)) == (255, 0, 0)
    # below the picture the background shows
    assert surface.image.getpixel((5, 15)) == (245, 246, 248)


def test_encode_produces_lossless_png() -> None:
    surface = RasterSurface(Image.new("RGB", (3, 2), (1, 2, 3)))
    data = surface.encode()
    assert data.startswith(b"\x89PNG")
    decoded = Image.open(io.BytesIO(data))
    assert decoded.size == (3, 2)
    assert decoded.convert("RGB").getpixel((2, 1)) == (1, 2, 3)


def test_capture_closes_its_own_loader(monkeypatch) -> None:
    closed = []
    monkeypatch.setattr(ResourceLoader, "close", lambda self: closed.append(self))

    capture(make_node(), 1)
    assert len(closed) == 1

    capture(make_node(), 1, loader=ResourceLoader())
    assert len(closed) == 1
