from dataclasses import dataclass, field, replace
from typing import Optional, Tuple, Union


@dataclass(frozen=True)
class Motion:
    """
    Entrance animation state of one element.

    `progress` runs from 0 (hidden) to 1 (settled). The element starts
    `offset_y` logical pixels lower and `start_scale` times its size, and fades
    in from fully transparent.
    """

    offset_y: float = 0.0
    start_scale: float = 1.0
    progress: float = 1.0

    @property
    def settled(self) -> bool:
        return self.progress >= 1.0

    @property
    def opacity(self) -> float:
        return max(0.0, min(1.0, self.progress))

    @property
    def dy(self) -> float:
        return self.offset_y * (1.0 - self.opacity)

    @property
    def scale(self) -> float:
        return self.start_scale + (1.0 - self.start_scale) * self.opacity


FLOAT_UP = Motion(offset_y=40.0)
SCALE_IN = Motion(start_scale=0.8)


@dataclass(frozen=True)
class Box:
    x: float
    y: float
    width: float
    height: float
    fill: Optional[str] = None
    outline: Optional[str] = None
    radius: float = 0.0
    opacity: float = 1.0
    motion: Optional[Motion] = None


@dataclass(frozen=True)
class Circle:
    cx: float
    cy: float
    r: float
    fill: Optional[str] = None
    outline: Optional[str] = None
    opacity: float = 1.0
    motion: Optional[Motion] = None


@dataclass(frozen=True)
class Line:
    x0: float
    y0: float
    x1: float
    y1: float
    fill: str = "#C9A96E"
    width: float = 1.0
    opacity: float = 1.0
    motion: Optional[Motion] = None


@dataclass(frozen=True)
class Text:
    x: float
    y: float
    text: str
    size: float = 14.0
    fill: str = "#1A1A1A"
    # "serif" or "sans"
    role: str = "sans"
    bold: bool = False
    # "left", "center" or "right"; for center/right `x` is the anchor point
    align: str = "left"
    line_height: float = 1.4
    tracking: float = 0.0
    max_width: Optional[float] = None
    opacity: float = 1.0
    motion: Optional[Motion] = None


@dataclass(frozen=True)
class Picture:
    x: float
    y: float
    width: float
    height: float
    # asset name relative to the assets directory, or an http(s) URL
    source: str = ""
    radius: float = 0.0
    opacity: float = 1.0
    motion: Optional[Motion] = None


Element = Union[Box, Circle, Line, Text, Picture]


@dataclass(frozen=True)
class RenderableNode:
    """
    A fully laid out poster: fixed logical size plus an ordered element tree.

    Nodes are produced by the layout provider and only read by the capture
    engine.
    """

    layout_id: str
    width: int
    height: int
    background: str
    elements: Tuple[Element, ...] = field(default_factory=tuple)
    static: bool = True

    @property
    def is_settled(self) -> bool:
        return all(el.motion is None or el.motion.settled for el in self.elements)

    @property
    def size(self) -> Tuple[int, int]:
        return (self.width, self.height)


def animate(element: Element, motion: Optional[Motion], progress: float) -> Element:
    if motion is None:
        return element
    return replace(element, motion=replace(motion, progress=progress))
