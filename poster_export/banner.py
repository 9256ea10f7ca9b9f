import logging
from typing import Sequence

from PIL import Image

from .capture import RasterSurface
from .core import CANVAS_BACKGROUND
from .render import parse_color

logger = logging.getLogger(__name__)


class CompositingError(RuntimeError):
    """Raised when the combined banner surface cannot be produced."""


def stitch(
    surfaces: Sequence[RasterSurface],
    *,
    background: str = CANVAS_BACKGROUND,
) -> RasterSurface:
    """
    Place surfaces side by side, left to right, in the given order.

    Output width is the sum of the input widths and the height is their common
    height. The banner is filled with `background` before pasting so corners
    of the inputs never show a default color.
    """
    if not surfaces:
        raise ValueError("Cannot stitch an empty sequence of surfaces.")

    heights = {surface.height for surface in surfaces}
    if len(heights) != 1:
        raise CompositingError(f"Surfaces have differing heights: {sorted(heights)}")

    height = heights.pop()
    total_width = sum(surface.width for surface in surfaces)

    try:
        banner = Image.new("RGB", (total_width, height), parse_color(background))
    except (ValueError, MemoryError) as exc:
        raise CompositingError(
            f"Could not allocate a {total_width}x{height} banner"
        ) from exc

    x = 0
    for surface in surfaces:
        image = surface.image
        if image.mode == "RGBA":
            banner.paste(image, (x, 0), image)
        else:
            banner.paste(image.convert("RGB"), (x, 0))
        x += surface.width

    logger.debug("Stitched %d surfaces into %dx%d", len(surfaces), total_width, height)
    return RasterSurface(banner)
