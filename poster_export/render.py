from functools import lru_cache
from pathlib import Path
from typing import List, Optional, Tuple

from PIL import Image, ImageDraw, ImageFont, ImageOps

from .assets import ResourceLoader
from .nodes import Box, Circle, Element, Line, Picture, RenderableNode, Text


RGB = Tuple[int, int, int]
RGBA = Tuple[int, int, int, int]

FONTS_DIR = Path(__file__).parent.parent / "fonts"

# CJK-capable faces first; the poster copy is mostly Chinese.
SYSTEM_FONTS = {
    "serif": [
        "/usr/share/fonts/opentype/noto/NotoSerifCJK-Bold.ttc",
        "/usr/share/fonts/opentype/noto/NotoSerifCJK-Regular.ttc",
        "/usr/share/fonts/noto-cjk/NotoSerifCJK-Regular.ttc",
        "/System/Library/Fonts/Supplemental/Songti.ttc",
        "C:/Windows/Fonts/simsun.ttc",
        "/usr/share/fonts/truetype/dejavu/DejaVuSerif.ttf",
        "/usr/share/fonts/truetype/liberation/LiberationSerif-Regular.ttf",
    ],
    "sans": [
        "/usr/share/fonts/opentype/noto/NotoSansCJK-Regular.ttc",
        "/usr/share/fonts/noto-cjk/NotoSansCJK-Regular.ttc",
        "/System/Library/Fonts/PingFang.ttc",
        "/System/Library/Fonts/STHeiti Medium.ttc",
        "C:/Windows/Fonts/msyh.ttc",
        "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
        "/usr/share/fonts/truetype/liberation/LiberationSans-Regular.ttf",
    ],
}


def rasterize(
    node: RenderableNode,
    scale: float,
    background: str,
    loader: ResourceLoader,
) -> Image.Image:
    """
    Paint a node onto a fresh opaque canvas of round(W*scale) x round(H*scale).

    The canvas is filled with `background` before anything else so that no
    transparent pixel reaches the encoded file.
    """
    size = (round(node.width * scale), round(node.height * scale))
    # RGB canvas + RGBA draw mode blends translucent fills instead of
    # punching alpha holes into the surface.
    canvas = Image.new("RGB", size, parse_color(background))
    draw = ImageDraw.Draw(canvas, "RGBA")
    draw.rectangle([0, 0, size[0], size[1]], fill=_rgba(node.background, 1.0))

    for element in node.elements:
        draw_element(canvas, element, scale, loader)

    return canvas


def draw_element(
    canvas: Image.Image,
    element: Element,
    scale: float,
    loader: ResourceLoader,
) -> None:
    alpha, dy, grow = _motion_factors(element)
    opacity = element.opacity * alpha
    if opacity <= 0:
        return

    draw = ImageDraw.Draw(canvas, "RGBA")

    if isinstance(element, Box):
        x0, y0, x1, y1 = _scaled_box(
            element.x, element.y + dy, element.width, element.height, grow, scale
        )
        draw.rounded_rectangle(
            [x0, y0, x1, y1],
            radius=int(element.radius * grow * scale),
            fill=_rgba(element.fill, opacity),
            outline=_rgba(element.outline, opacity),
            width=max(1, round(scale)) if element.outline else 0,
        )
    elif isinstance(element, Circle):
        r = element.r * grow * scale
        cx = element.cx * scale
        cy = (element.cy + dy) * scale
        draw.ellipse(
            [cx - r, cy - r, cx + r, cy + r],
            fill=_rgba(element.fill, opacity),
            outline=_rgba(element.outline, opacity),
            width=max(1, round(scale)) if element.outline else 0,
        )
    elif isinstance(element, Line):
        draw.line(
            [
                (element.x0 * scale, (element.y0 + dy) * scale),
                (element.x1 * scale, (element.y1 + dy) * scale),
            ],
            fill=_rgba(element.fill, opacity),
            width=max(1, round(element.width * scale)),
        )
    elif isinstance(element, Text):
        _draw_text(draw, element, dy, opacity, scale)
    elif isinstance(element, Picture):
        _draw_picture(canvas, element, dy, grow, opacity, scale, loader)
    else:
        raise TypeError(f"Unsupported element type: {type(element).__name__}")


def _motion_factors(element: Element) -> Tuple[float, float, float]:
    motion = element.motion
    if motion is None:
        return 1.0, 0.0, 1.0
    return motion.opacity, motion.dy, motion.scale


def _scaled_box(
    x: float, y: float, w: float, h: float, grow: float, scale: float
) -> Tuple[int, int, int, int]:
    cx = x + w / 2
    cy = y + h / 2
    w *= grow
    h *= grow
    return (
        round((cx - w / 2) * scale),
        round((cy - h / 2) * scale),
        round((cx + w / 2) * scale),
        round((cy + h / 2) * scale),
    )


def _draw_text(
    draw: ImageDraw.ImageDraw,
    element: Text,
    dy: float,
    opacity: float,
    scale: float,
) -> None:
    font = _load_font(element.role, element.bold, max(1, round(element.size * scale)))
    fill = _rgba(element.fill, opacity)
    tracking = element.tracking * scale
    step = element.size * element.line_height * scale

    lines: List[str] = []
    for paragraph in element.text.split("\n"):
        if element.max_width and paragraph:
            lines.extend(wrap_text(draw, paragraph, font, int(element.max_width * scale)))
        else:
            lines.append(paragraph)

    y = (element.y + dy) * scale
    for line in lines:
        line_w = _line_width(draw, line, font, tracking)
        if element.align == "center":
            x = element.x * scale - line_w / 2
        elif element.align == "right":
            x = element.x * scale - line_w
        else:
            x = element.x * scale

        if tracking:
            for ch in line:
                draw.text((x, y), ch, font=font, fill=fill)
                x += draw.textlength(ch, font=font) + tracking
        else:
            draw.text((x, y), line, font=font, fill=fill)
        y += step


def _line_width(
    draw: ImageDraw.ImageDraw, line: str, font: ImageFont.ImageFont, tracking: float
) -> float:
    width = draw.textlength(line, font=font)
    if tracking and line:
        width += tracking * (len(line) - 1)
    return width


def _draw_picture(
    canvas: Image.Image,
    element: Picture,
    dy: float,
    grow: float,
    opacity: float,
    scale: float,
    loader: ResourceLoader,
) -> None:
    source = loader.load(element.source)
    x0, y0, x1, y1 = _scaled_box(
        element.x, element.y + dy, element.width, element.height, grow, scale
    )
    box_w, box_h = max(1, x1 - x0), max(1, y1 - y0)

    # object-fit: contain, centered in the box
    fitted = ImageOps.contain(source, (box_w, box_h), Image.LANCZOS).convert("RGBA")
    tile = Image.new("RGBA", (box_w, box_h), (0, 0, 0, 0))
    tile.paste(fitted, ((box_w - fitted.width) // 2, (box_h - fitted.height) // 2))

    mask = tile.getchannel("A")
    if element.radius:
        rounded = Image.new("L", (box_w, box_h), 0)
        ImageDraw.Draw(rounded).rounded_rectangle(
            [0, 0, box_w - 1, box_h - 1], radius=int(element.radius * grow * scale), fill=255
        )
        mask = Image.composite(mask, rounded, rounded)
    if opacity < 1.0:
        mask = mask.point(lambda v: int(v * opacity))

    canvas.paste(tile, (x0, y0), mask)


def wrap_text(
    draw: ImageDraw.ImageDraw, text: str, font: ImageFont.ImageFont, max_width: int
) -> List[str]:
    """
    Greedy wrap. Words are split on spaces; text without spaces (CJK) wraps
    per character.
    """
    tokens = text.split() if " " in text else list(text)
    joiner = " " if " " in text else ""
    lines: List[str] = []
    current = ""
    for token in tokens:
        test = f"{current}{joiner}{token}" if current else token
        if draw.textlength(test, font=font) <= max_width or not current:
            current = test
        else:
            lines.append(current)
            current = token
    if current:
        lines.append(current)
    return lines


def _rgba(color: Optional[str], opacity: float) -> Optional[RGBA]:
    if color is None:
        return None
    return parse_color(color) + (int(round(255 * opacity)),)


def parse_color(color_str: str) -> RGB:
    """
    Parse hex color strings like '#F5F6F8', 'F5F6F8' or '#FFF' into RGB tuple.
    Fallbacks to a neutral grey if parsing fails.
    """
    s = color_str.strip().lstrip("#")
    if len(s) == 3:
        s = "".join(ch * 2 for ch in s)
    try:
        if len(s) == 6:
            return (int(s[0:2], 16), int(s[2:4], 16), int(s[4:6], 16))
    except ValueError:
        pass
    return (245, 246, 248)


@lru_cache(maxsize=64)
def _load_font(role: str, bold: bool, size: int) -> ImageFont.ImageFont:
    """
    Load a TrueType font with fallbacks to avoid pixelated bitmap fonts.
    Prioritizes fonts from the fonts/ folder, then CJK-capable system fonts.
    """
    if FONTS_DIR.exists():
        font_files = sorted(FONTS_DIR.glob("*.[to]t[fc]"))
        # role match first, then weight match
        font_files.sort(
            key=lambda p: (
                role not in p.stem.lower(),
                bold != ("bold" in p.stem.lower()),
            )
        )
        for font_file in font_files:
            try:
                return ImageFont.truetype(str(font_file), size=size)
            except OSError:
                continue

    for font_file in SYSTEM_FONTS.get(role, SYSTEM_FONTS["sans"]):
        try:
            return ImageFont.truetype(font_file, size=size)
        except OSError:
            continue

    # Pillow's bundled font scales but has no CJK glyphs
    return ImageFont.load_default(size=size)
