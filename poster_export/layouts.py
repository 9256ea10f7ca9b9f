"""
The four YIWO posters as element trees.

One view function serves both modes: interactive renders carry entrance
motion evaluated at `progress` and the scroll hint, static renders are fixed
375x812 trees with nothing left to animate. Capture only ever sees static
renders, built inside a StaticRenderTarget.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence

from .core import CANVAS_BACKGROUND, LAYOUT_IDS, POSTER_HEIGHT, POSTER_WIDTH
from .nodes import (
    FLOAT_UP,
    SCALE_IN,
    Box,
    Circle,
    Element,
    Line,
    Motion,
    Picture,
    RenderableNode,
    Text,
    animate,
)

logger = logging.getLogger(__name__)

SOFT_BLACK = "#1A1A1A"
TEXT_GREY = "#8E8E93"
GOLD = "#C9A96E"
CERAMIC_WHITE = "#FDFDFD"
CERAMIC_BG = "#F0F1F3"
CARD_BLACK = "#0F0F0F"

CENTER_X = POSTER_WIDTH / 2
FADE = Motion()


class UnknownLayoutError(KeyError):
    pass


class _Tree:
    """Collects elements, attaching entrance motion only in interactive mode."""

    def __init__(self, static: bool, progress: float) -> None:
        self.static = static
        self.progress = progress
        self.elements: List[Element] = []

    def add(self, element: Element, motion: Optional[Motion] = None) -> None:
        if self.static:
            motion = None
        self.elements.append(animate(element, motion, self.progress))


def _backdrop(tree: _Tree) -> None:
    # light glaze top-left, depth blob bottom-right
    tree.add(Circle(cx=60, cy=80, r=260, fill="#FFFFFF", opacity=0.35))
    tree.add(Circle(cx=340, cy=760, r=175, fill="#D1D5DB", opacity=0.2))


def _ceramic_card(tree: _Tree, y: float, height: float) -> None:
    tree.add(Box(x=26, y=y + 6, width=323, height=height, fill="#000000", radius=24, opacity=0.04))
    tree.add(Box(x=24, y=y, width=327, height=height, fill=CERAMIC_WHITE, radius=24), FLOAT_UP)


def _section_header(tree: _Tree, label: str, title: str) -> None:
    tree.add(
        Text(x=24, y=48, text=label, size=12, fill=GOLD, role="serif", bold=True, tracking=3),
        FLOAT_UP,
    )
    tree.add(
        Text(x=24, y=72, text=title, size=36, fill=SOFT_BLACK, role="serif", bold=True),
        FLOAT_UP,
    )


def _identity(tree: _Tree, sources: "LayoutProvider") -> None:
    tree.add(
        Text(x=CENTER_X, y=16, text="YIWO  APP", size=10, fill=TEXT_GREY,
             align="center", tracking=4, opacity=0.5),
        FLOAT_UP,
    )

    tree.add(Circle(cx=CENTER_X, cy=300, r=96, fill=CERAMIC_WHITE), SCALE_IN)
    tree.add(Circle(cx=CENTER_X, cy=300, r=88, outline="#E5E7EB"), SCALE_IN)
    if sources.logo:
        tree.add(
            Picture(x=CENTER_X - 88, y=212, width=176, height=176, source=sources.logo, radius=88),
            SCALE_IN,
        )

    tree.add(
        Text(x=CENTER_X, y=450, text="如果不进店，\n客户还会买\n你的衣服吗？", size=36,
             fill=SOFT_BLACK, role="serif", bold=True, align="center", line_height=1.375),
        FLOAT_UP,
    )
    tree.add(
        Text(x=CENTER_X, y=636, text="专为有品位的女装店打造\n解决实体店流量焦虑", size=14,
             fill=TEXT_GREY, align="center", line_height=1.6),
        FLOAT_UP,
    )

    if not tree.static:
        # scroll hint chevron
        tree.add(Line(x0=CENTER_X - 8, y0=764, x1=CENTER_X, y1=772, fill="#D1D5DB", width=2), FLOAT_UP)
        tree.add(Line(x0=CENTER_X, y0=772, x1=CENTER_X + 8, y1=764, fill="#D1D5DB", width=2), FLOAT_UP)


def _tryon(tree: _Tree, sources: "LayoutProvider") -> None:
    _section_header(tree, "01 / 功能", "手机就是试衣间")
    tree.add(
        Text(x=24, y=130, text="无需聘请模特，无需寄送样衣。\n顾客上传照片，立马看到上身效果。",
             size=14, fill=TEXT_GREY, line_height=1.6),
        FLOAT_UP,
    )

    tree.add(Line(x0=CENTER_X, y0=398, x1=CENTER_X, y1=478, fill=GOLD, opacity=0.4), FADE)

    rows = (
        (302, "商家拍照上新", "MERCHANT UPLOAD", "camera"),
        (478, "顾客在家试穿", "USER EXPERIENCE", "phone"),
    )
    for y, title, caption, icon in rows:
        _ceramic_card(tree, y, 96)
        tree.add(Circle(cx=72, cy=y + 48, r=24, fill=CERAMIC_BG), FLOAT_UP)
        if icon == "camera":
            tree.add(Box(x=62, y=y + 41, width=20, height=15, outline=SOFT_BLACK, radius=3), FLOAT_UP)
            tree.add(Circle(cx=72, cy=y + 48, r=4, outline=SOFT_BLACK), FLOAT_UP)
        else:
            tree.add(Box(x=66, y=y + 36, width=12, height=22, outline=SOFT_BLACK, radius=3), FLOAT_UP)
        tree.add(
            Text(x=112, y=y + 26, text=title, size=20, fill=SOFT_BLACK, role="serif", bold=True),
            FLOAT_UP,
        )
        tree.add(
            Text(x=112, y=y + 58, text=caption, size=10, fill=TEXT_GREY, tracking=1),
            FLOAT_UP,
        )


def _data(tree: _Tree, sources: "LayoutProvider") -> None:
    _section_header(tree, "02 / 价值", "AI 帮你卖衣服")

    tree.add(Circle(cx=320, cy=200, r=64, fill="#DBEAFE", opacity=0.4), SCALE_IN)
    tree.add(Circle(cx=56, cy=440, r=64, fill=GOLD, opacity=0.1), SCALE_IN)
    tree.add(
        Box(x=24, y=180, width=327, height=250, fill="#FFFFFF", outline="#FFFFFF",
            radius=24, opacity=0.7),
        SCALE_IN,
    )

    tree.add(Circle(cx=68, cy=224, r=20, fill="#E5E7EB"), SCALE_IN)
    tree.add(Text(x=98, y=206, text="刚刚", size=12, fill=TEXT_GREY), SCALE_IN)
    tree.add(Text(x=98, y=224, text="顾客 小美 试穿了", size=14, fill=SOFT_BLACK, role="serif"), SCALE_IN)
    tree.add(Box(x=263, y=208, width=64, height=22, fill=GOLD, radius=11, opacity=0.1), SCALE_IN)
    tree.add(Text(x=295, y=212, text="高意向", size=10, fill=GOLD, align="center"), SCALE_IN)

    tree.add(Box(x=48, y=268, width=279, height=64, fill=CERAMIC_BG, radius=12, opacity=0.5), SCALE_IN)
    tree.add(Box(x=60, y=280, width=40, height=40, fill="#FFFFFF", radius=8), SCALE_IN)
    tree.add(Text(x=112, y=282, text="法式复古碎花连衣裙", size=12, fill=SOFT_BLACK, role="serif"), SCALE_IN)
    tree.add(Text(x=112, y=302, text="2024 春季新款", size=10, fill=TEXT_GREY), SCALE_IN)

    tree.add(Line(x0=48, y0=360, x1=327, y1=360, fill="#E5E7EB"), SCALE_IN)
    tree.add(
        Text(x=CENTER_X, y=374, text="该顾客已浏览 3 次，试穿 2 次", size=12,
             fill=TEXT_GREY, align="center"),
        SCALE_IN,
    )

    points = (
        ("知道谁想买", "不再盲目群发，精准触达意向客户"),
        ("数据雷达锁定", "实时捕捉每一次试穿行为"),
        ("告别无效刷屏", "让每一次沟通都更有价值"),
    )
    for idx, (title, desc) in enumerate(points):
        y = 500 + idx * 76
        tree.add(Circle(cx=52, cy=y + 12, r=5, fill=GOLD), FLOAT_UP)
        tree.add(Text(x=72, y=y, text=title, size=18, fill=SOFT_BLACK, role="serif", bold=True), FLOAT_UP)
        tree.add(Text(x=72, y=y + 30, text=desc, size=12, fill=TEXT_GREY), FLOAT_UP)


def _invitation(tree: _Tree, sources: "LayoutProvider") -> None:
    tree.add(Box(x=0, y=0, width=POSTER_WIDTH, height=POSTER_HEIGHT, fill="#FFFFFF", opacity=0.3))

    tree.add(
        Text(x=CENTER_X, y=112, text="INVITATION", size=10, fill=TEXT_GREY,
             align="center", tracking=5),
        FLOAT_UP,
    )

    tree.add(Box(x=24, y=144, width=327, height=548, fill=CARD_BLACK, radius=32), SCALE_IN)
    tree.add(Line(x0=64, y0=144, x1=311, y1=144, fill=GOLD, opacity=0.5), SCALE_IN)
    tree.add(Line(x0=64, y0=691, x1=311, y1=691, fill=GOLD, opacity=0.2), SCALE_IN)

    tree.add(
        Text(x=CENTER_X, y=208, text="寻找 100 位店长", size=36, fill="#FFFFFF",
             role="serif", bold=True, align="center"),
        SCALE_IN,
    )
    tree.add(Box(x=92, y=268, width=191, height=28, outline=GOLD, radius=14, opacity=0.3), SCALE_IN)
    tree.add(
        Text(x=CENTER_X, y=274, text="内测资格 · 品质审核", size=12, fill=GOLD,
             align="center", tracking=2),
        SCALE_IN,
    )
    tree.add(
        Text(x=CENTER_X, y=328, text="我们不追求数量，\n只寻找有独特审美的店铺。", size=12,
             fill="#9CA3AF", align="center", line_height=2.0, max_width=240),
        SCALE_IN,
    )
    tree.add(
        Text(x=CENTER_X, y=376, text="宁缺毋滥，期待与你同行。", size=12, fill="#FFFFFF",
             align="center"),
        SCALE_IN,
    )

    qr_x, qr_y, qr_size = CENTER_X - 72, 500, 144
    tree.add(Box(x=qr_x, y=qr_y, width=qr_size, height=qr_size, fill="#FFFFFF", radius=16), SCALE_IN)
    if sources.qr:
        tree.add(
            Picture(x=qr_x + 12, y=qr_y + 12, width=qr_size - 24, height=qr_size - 24, source=sources.qr),
            SCALE_IN,
        )
    for cx, cy, sx, sy in ((8, 8, 1, 1), (136, 8, -1, 1), (8, 136, 1, -1), (136, 136, -1, -1)):
        x, y = qr_x + cx, qr_y + cy
        tree.add(Line(x0=x, y0=y, x1=x + 8 * sx, y1=y, fill=CARD_BLACK), SCALE_IN)
        tree.add(Line(x0=x, y0=y, x1=x, y1=y + 8 * sy, fill=CARD_BLACK), SCALE_IN)

    tree.add(
        Text(x=CENTER_X, y=660, text="扫码添加 · 申请名额  →", size=10, fill="#FFFFFF",
             align="center", tracking=1, opacity=0.5),
        SCALE_IN,
    )
    tree.add(
        Text(x=CENTER_X, y=736, text="Y I W O", size=12, fill=SOFT_BLACK, role="serif",
             align="center", opacity=0.4),
        FLOAT_UP,
    )


_BUILDERS: Dict[str, Callable[[_Tree, "LayoutProvider"], None]] = {
    "identity": _identity,
    "tryon": _tryon,
    "data": _data,
    "invitation": _invitation,
}

_BACKGROUNDS: Dict[str, str] = {
    "invitation": CERAMIC_BG,
}


@dataclass
class LayoutProvider:
    """
    Builds poster nodes. `logo` and `qr` are asset names or URLs; a falsy
    value leaves that picture out of the poster.
    """

    logo: Optional[str] = "images/logo.png"
    qr: Optional[str] = "images/qr.jpg"

    def render(self, layout_id: str, static: bool = False, progress: float = 1.0) -> RenderableNode:
        builder = _BUILDERS.get(layout_id)
        if builder is None:
            raise UnknownLayoutError(layout_id)

        progress = 1.0 if static else max(0.0, min(1.0, progress))
        tree = _Tree(static=static, progress=progress)
        _backdrop(tree)
        builder(tree, self)

        return RenderableNode(
            layout_id=layout_id,
            width=POSTER_WIDTH,
            height=POSTER_HEIGHT,
            background=_BACKGROUNDS.get(layout_id, CANVAS_BACKGROUND),
            elements=tuple(tree.elements),
            static=static,
        )

    def render_static(self, layout_id: str) -> RenderableNode:
        return self.render(layout_id, static=True)


def render_layout(layout_id: str, static: bool = False, progress: float = 1.0) -> RenderableNode:
    return LayoutProvider().render(layout_id, static=static, progress=progress)


class StaticRenderTarget:
    """
    Off-screen set of static posters used only for capture.

    Nodes exist between __enter__ and __exit__; reading them after disposal is
    an error.
    """

    def __init__(
        self,
        provider: Optional[LayoutProvider] = None,
        layout_ids: Sequence[str] = LAYOUT_IDS,
    ) -> None:
        self.provider = provider or LayoutProvider()
        self.layout_ids = tuple(layout_ids)
        self._nodes: Optional[List[RenderableNode]] = None

    def __enter__(self) -> "StaticRenderTarget":
        self._nodes = [self.provider.render_static(layout_id) for layout_id in self.layout_ids]
        logger.debug("Built static render target: %s", ", ".join(self.layout_ids))
        return self

    def __exit__(self, *exc_info) -> None:
        self._nodes = None

    @property
    def nodes(self) -> List[RenderableNode]:
        if self._nodes is None:
            raise RuntimeError("Static render target is not mounted.")
        return list(self._nodes)
