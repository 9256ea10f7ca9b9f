import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, List, Optional, Tuple

from .assets import ResourceLoader
from .banner import CompositingError, stitch
from .capture import RasterSurface, capture
from .core import (
    BANNER_FILE_NAME,
    CANVAS_BACKGROUND,
    DEFAULT_SCALE,
    ExportEntry,
    ExportJob,
    RunPhase,
)
from .delivery import DownloadSink

logger = logging.getLogger(__name__)

DEFAULT_SETTLE_DELAY = 0.8
DEFAULT_PACING_DELAY = 0.6

Sleep = Callable[[float], Awaitable[None]]


@dataclass
class RunResult:
    requested: int
    captured: List[int] = field(default_factory=list)
    delivered: List[str] = field(default_factory=list)
    failed: Dict[int, str] = field(default_factory=dict)
    banner_size: Optional[Tuple[int, int]] = None
    banner_delivered: bool = False

    @property
    def succeeded(self) -> int:
        return len(self.captured)

    @property
    def complete(self) -> bool:
        return (
            self.succeeded == self.requested
            and len(self.delivered) == self.requested
            and self.banner_delivered
        )

    @property
    def partial(self) -> bool:
        return not self.complete and bool(self.delivered)


class ExportOrchestrator:
    """
    Runs one export job end to end:

    - wait for the static posters to settle
    - capture every entry in job order, skipping the ones that fail
    - hand each capture to the sink as a PNG, pacing consecutive downloads
    - stitch the captures into one banner and deliver it last
    """

    def __init__(
        self,
        sink: DownloadSink,
        *,
        scale: float = DEFAULT_SCALE,
        background: str = CANVAS_BACKGROUND,
        settle_delay: float = DEFAULT_SETTLE_DELAY,
        pacing_delay: float = DEFAULT_PACING_DELAY,
        loader: Optional[ResourceLoader] = None,
        sleep: Optional[Sleep] = None,
        on_phase: Optional[Callable[[RunPhase], None]] = None,
    ) -> None:
        self.sink = sink
        self.scale = scale
        self.background = background
        self.settle_delay = settle_delay
        self.pacing_delay = pacing_delay
        self._owns_loader = loader is None
        self.loader = loader or ResourceLoader()
        self._sleep = sleep or asyncio.sleep
        self._on_phase = on_phase

    async def run(self, job: ExportJob) -> RunResult:
        try:
            return await self._run(job)
        finally:
            if self._owns_loader:
                self.loader.close()

    async def _run(self, job: ExportJob) -> RunResult:
        result = RunResult(requested=len(job))

        self._phase(RunPhase.CAPTURING)
        await self._sleep(self.settle_delay)
        captures = self._capture_all(job, result)

        self._phase(RunPhase.DOWNLOADING)
        downloads = 0
        for index, entry, surface in captures:
            if downloads:
                await self._sleep(self.pacing_delay)
            downloads += 1
            if self._deliver(entry.file_name, surface):
                result.delivered.append(entry.file_name)
            else:
                result.failed.setdefault(index, "delivery failed")

        self._phase(RunPhase.COMPOSITING)
        if not captures:
            logger.warning("No poster could be captured; skipping the banner.")
            return result

        try:
            banner = stitch([surface for _, _, surface in captures], background=self.background)
        except CompositingError:
            logger.exception("Banner compositing failed; individual files are unaffected.")
            return result

        result.banner_size = banner.size
        await self._sleep(self.pacing_delay)
        result.banner_delivered = self._deliver(BANNER_FILE_NAME, banner)
        return result

    def _capture_all(
        self, job: ExportJob, result: RunResult
    ) -> List[Tuple[int, ExportEntry, RasterSurface]]:
        captures: List[Tuple[int, ExportEntry, RasterSurface]] = []
        for index, entry in enumerate(job):
            try:
                surface = capture(
                    entry.node,
                    self.scale,
                    background=self.background,
                    loader=self.loader,
                )
            except Exception as exc:
                logger.error("Failed to render poster %d (%s)", index, entry.file_name, exc_info=True)
                result.failed[index] = str(exc) or type(exc).__name__
                continue
            captures.append((index, entry, surface))
            result.captured.append(index)
        return captures

    def _deliver(self, file_name: str, surface: RasterSurface) -> bool:
        try:
            self.sink.deliver(file_name, surface.encode("PNG"))
        except Exception:
            # sinks may raise anything; one lost file must not stop the batch
            logger.exception("Could not deliver %s", file_name)
            return False
        logger.info("Delivered %s (%dx%d)", file_name, surface.width, surface.height)
        return True

    def _phase(self, phase: RunPhase) -> None:
        logger.debug("Export phase: %s", phase.value)
        if self._on_phase is not None:
            self._on_phase(phase)
