import io
import logging
from pathlib import Path
from typing import Dict, Optional

import httpx
from PIL import Image, UnidentifiedImageError

IMAGE_EXTENSIONS = {".png", ".jpg", ".jpeg", ".webp"}

logger = logging.getLogger(__name__)


class ResourceError(RuntimeError):
    """Raised when a picture embedded in a poster cannot be turned into pixels."""


def find_asset(name: str, assets_dir: Path) -> Optional[Path]:
    """
    Try to locate a picture in the assets folder.

    Search heuristics (in order):
    - `name` as a path relative to assets_dir
    - image files whose stem contains the slugged name
    """
    if not assets_dir.exists():
        return None

    candidate = assets_dir / name
    if candidate.is_file():
        return candidate

    slug = _slugify(Path(name).stem)
    for path in sorted(assets_dir.rglob("*")):
        if not path.is_file() or path.suffix.lower() not in IMAGE_EXTENSIONS:
            continue
        if slug in path.stem.lower():
            return path

    return None


def is_remote(source: str) -> bool:
    return source.startswith(("http://", "https://"))


class ResourceLoader:
    """
    Resolves `Picture.source` values into decoded Pillow images.

    Remote sources are fetched with httpx; anything that does not come back as
    a decodable image fails immediately with ResourceError. Results are cached
    so repeated captures of the same node see identical pixels.
    """

    def __init__(
        self,
        assets_dir: Optional[Path] = None,
        client: Optional[httpx.Client] = None,
        timeout: float = 10.0,
    ) -> None:
        self.assets_dir = assets_dir or Path("assets")
        self._client = client
        self._owns_client = client is None
        self.timeout = timeout
        self._cache: Dict[str, Image.Image] = {}

    def load(self, source: str) -> Image.Image:
        if not source:
            raise ResourceError("Picture has no source.")
        cached = self._cache.get(source)
        if cached is not None:
            return cached

        if is_remote(source):
            img = self._fetch(source)
        else:
            img = self._open_local(source)

        self._cache[source] = img
        return img

    def close(self) -> None:
        if self._client is not None and self._owns_client:
            self._client.close()
        self._client = None

    def __enter__(self) -> "ResourceLoader":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _open_local(self, source: str) -> Image.Image:
        path = find_asset(source, self.assets_dir)
        if path is None:
            raise ResourceError(f"Asset {source!r} not found under {self.assets_dir}")
        logger.debug("Loading asset %s from %s", source, path)
        try:
            with Image.open(path) as img:
                return img.convert("RGBA")
        except (OSError, UnidentifiedImageError) as exc:
            raise ResourceError(f"Asset {path} is not a readable image") from exc

    def _fetch(self, url: str) -> Image.Image:
        if self._client is None:
            self._client = httpx.Client(timeout=self.timeout, follow_redirects=True)

        logger.debug("Fetching remote picture %s", url)
        try:
            response = self._client.get(url)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise ResourceError(f"Could not fetch {url}: {exc}") from exc

        try:
            with Image.open(io.BytesIO(response.content)) as img:
                return img.convert("RGBA")
        except (OSError, UnidentifiedImageError) as exc:
            raise ResourceError(f"{url} did not return image data") from exc


def _slugify(text: str) -> str:
    slug = "".join(ch.lower() if ch.isalnum() else "-" for ch in text)
    while "--" in slug:
        slug = slug.replace("--", "-")
    return slug.strip("-") or "item"
