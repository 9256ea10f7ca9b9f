from typing import List

from poster_export.nodes import Picture, RenderableNode


class RecordingSleep:
    """Stand-in for asyncio.sleep that records delays without waiting."""

    def __init__(self) -> None:
        self.calls: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.calls.append(delay)


def make_node(layout_id: str = "swatch", width: int = 10, height: int = 20, **kwargs) -> RenderableNode:
    kwargs.setdefault("background", "#F5F6F8")
    return RenderableNode(layout_id=layout_id, width=width, height=height, **kwargs)


def broken_node(layout_id: str = "broken", width: int = 10, height: int = 20) -> RenderableNode:
    """Node whose only picture lives on a host the test loaders answer with 404."""

    return make_node(
        layout_id,
        width,
        height,
        elements=(Picture(x=0, y=0, width=width, height=height, source="https://cdn.test/missing.png"),),
    )
