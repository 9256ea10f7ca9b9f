import io
import logging
import math
from dataclasses import dataclass
from typing import Optional, Tuple

from PIL import Image

from .assets import ResourceError, ResourceLoader
from .core import CANVAS_BACKGROUND, DEFAULT_SCALE
from .nodes import RenderableNode
from .render import rasterize

logger = logging.getLogger(__name__)


class CaptureError(RuntimeError):
    """Raised when a single node cannot be converted into a raster surface."""


@dataclass
class RasterSurface:
    """
    In-memory pixel buffer produced by `capture` or `banner.stitch`.
    """

    image: Image.Image

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    @property
    def size(self) -> Tuple[int, int]:
        return self.image.size

    def encode(self, format: str = "PNG") -> bytes:
        """Lossless, full-quality encoding (PNG by default)."""
        buf = io.BytesIO()
        self.image.save(buf, format=format, optimize=False)
        return buf.getvalue()


def capture(
    node: RenderableNode,
    scale: float = DEFAULT_SCALE,
    *,
    background: str = CANVAS_BACKGROUND,
    loader: Optional[ResourceLoader] = None,
) -> RasterSurface:
    """
    Convert one static node into a RasterSurface of
    round(W*scale) x round(H*scale) pixels.

    Raises CaptureError when the node is still animating or when any of its
    pictures cannot be loaded; the caller decides whether that is fatal.
    """
    if isinstance(scale, bool) or not isinstance(scale, (int, float)):
        raise ValueError(f"scale must be a number, got {scale!r}")
    if not math.isfinite(scale) or scale <= 0:
        raise ValueError(f"scale must be positive, got {scale!r}")

    if not node.static:
        raise CaptureError(f"Layout {node.layout_id!r} was not rendered in static mode")
    if not node.is_settled:
        raise CaptureError(f"Layout {node.layout_id!r} still has entrance motion pending")

    owns_loader = loader is None
    loader = loader or ResourceLoader()
    try:
        image = rasterize(node, scale, background, loader)
    except ResourceError as exc:
        raise CaptureError(f"Layout {node.layout_id!r}: {exc}") from exc
    except (OSError, ValueError, MemoryError) as exc:
        raise CaptureError(f"Layout {node.layout_id!r} failed to rasterize") from exc
    finally:
        if owns_loader:
            loader.close()

    surface = RasterSurface(image)
    logger.debug(
        "Captured %s at x%s -> %dx%d", node.layout_id, scale, surface.width, surface.height
    )
    return surface
