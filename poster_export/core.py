from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional, Sequence, Tuple

from .assets import _slugify
from .nodes import RenderableNode


POSTER_WIDTH = 375
POSTER_HEIGHT = 812
CANVAS_BACKGROUND = "#F5F6F8"
DEFAULT_SCALE = 3

BANNER_FILE_NAME = "yiwo-full-banner.png"

# Order defines download order and left-to-right banner order.
LAYOUTS: Tuple[Tuple[str, str], ...] = (
    ("identity", "yiwo-identity.png"),
    ("tryon", "yiwo-tryon.png"),
    ("data", "yiwo-data.png"),
    ("invitation", "yiwo-invitation.png"),
)

LAYOUT_IDS: Tuple[str, ...] = tuple(layout_id for layout_id, _ in LAYOUTS)


class RunPhase(str, Enum):
    IDLE = "idle"
    CAPTURING = "capturing"
    DOWNLOADING = "downloading"
    COMPOSITING = "compositing"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class ExportEntry:
    node: RenderableNode
    file_name: str


class ExportJob:
    """
    Ordered, fixed-length sequence of (node, output file name) pairs.
    """

    def __init__(self, entries: Sequence[ExportEntry]) -> None:
        entries = tuple(entries)
        if not entries:
            raise ValueError("An export job needs at least one entry.")

        seen = set()
        for entry in entries:
            if entry.file_name in seen:
                raise ValueError(f"Duplicate output file name: {entry.file_name!r}")
            seen.add(entry.file_name)

        self._entries = entries

    @property
    def entries(self) -> Tuple[ExportEntry, ...]:
        return self._entries

    @property
    def file_names(self) -> List[str]:
        return [entry.file_name for entry in self._entries]

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[ExportEntry]:
        return iter(self._entries)

    def __getitem__(self, index: int) -> ExportEntry:
        return self._entries[index]


def build_export_job(
    nodes: Sequence[RenderableNode],
    file_names: Optional[Sequence[str]] = None,
) -> ExportJob:
    """
    Pair static nodes with their output names, in order.

    Without explicit names, each node's layout id is looked up in LAYOUTS and
    unknown ids fall back to `yiwo-<slug>.png`.
    """
    if file_names is None:
        known = dict(LAYOUTS)
        file_names = [
            known.get(node.layout_id) or f"yiwo-{_slugify(node.layout_id)}.png"
            for node in nodes
        ]

    if len(file_names) != len(nodes):
        raise ValueError(
            f"Got {len(nodes)} nodes but {len(file_names)} file names."
        )

    return ExportJob(
        [ExportEntry(node=node, file_name=name) for node, name in zip(nodes, file_names)]
    )
