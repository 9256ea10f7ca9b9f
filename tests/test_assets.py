import httpx
import pytest
from PIL import Image

from poster_export.assets import ResourceError, ResourceLoader, find_asset


def test_find_asset_by_relative_path(tmp_path) -> None:
    (tmp_path / "images").mkdir()
    target = tmp_path / "images" / "logo.png"
    Image.new("RGB", (2, 2)).save(target)
    assert find_asset("images/logo.png", tmp_path) == target


def test_find_asset_by_slug(tmp_path) -> None:
    target = tmp_path / "brand-logo-v2.png"
    Image.new("RGB", (2, 2)).save(target)
    (tmp_path / "logo-notes.txt").write_text("not an image")
    assert find_asset("images/logo.png", tmp_path) == target


def test_find_asset_missing_dir(tmp_path) -> None:
    assert find_asset("logo.png", tmp_path / "absent") is None


def test_remote_picture_is_fetched_once(tmp_path) -> None:
    png = tmp_path / "qr.png"
    Image.new("RGB", (3, 3), (0, 0, 0)).save(png)
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(str(request.url))
        return httpx.Response(200, content=png.read_bytes(), request=request)

    with httpx.Client(transport=httpx.MockTransport(handler)) as client:
        loader = ResourceLoader(assets_dir=tmp_path, client=client)
        first = loader.load("https://cdn.test/qr.png")
        second = loader.load("https://cdn.test/qr.png")

    assert first.size == (3, 3)
    assert first is second
    assert calls == ["https://cdn.test/qr.png"]


def test_remote_non_image_fails_fast(tmp_path) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>blocked</html>", request=request)

    with httpx.Client(transport=httpx.MockTransport(handler)) as client:
        loader = ResourceLoader(assets_dir=tmp_path, client=client)
        with pytest.raises(ResourceError, match="did not return image data"):
            loader.load("https://cdn.test/qr.png")


def test_missing_local_asset(tmp_path) -> None:
    with pytest.raises(ResourceError, match="not found"):
        ResourceLoader(assets_dir=tmp_path).load("images/qr.jpg")


def test_empty_source(tmp_path) -> None:
    with pytest.raises(ResourceError):
        ResourceLoader(assets_dir=tmp_path).load("")
