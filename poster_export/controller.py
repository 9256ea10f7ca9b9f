import logging
from typing import Awaitable, Callable, Optional

from .core import RunPhase
from .export import RunResult

logger = logging.getLogger(__name__)

FAILURE_MESSAGE = "生成图片失败，请刷新后重试。"

RunFactory = Callable[[Callable[[RunPhase], None]], Awaitable[RunResult]]


def _log_notice(message: str) -> None:
    logger.error(message)


class GenerationStateController:
    """
    Guards the export pipeline with a single busy flag.

    `run_factory` receives a phase callback and returns the awaitable run,
    e.g. ``lambda on_phase: orchestrator_for(on_phase).run(job)``. At most one
    run is active; `trigger` while busy does nothing and returns None.
    """

    def __init__(
        self,
        run_factory: RunFactory,
        notify: Optional[Callable[[str], None]] = None,
    ) -> None:
        self._run_factory = run_factory
        self._notify = notify or _log_notice
        self._busy = False
        self._phase = RunPhase.IDLE
        self.last_result: Optional[RunResult] = None

    @property
    def is_busy(self) -> bool:
        return self._busy

    @property
    def phase(self) -> RunPhase:
        return self._phase

    def _set_phase(self, phase: RunPhase) -> None:
        self._phase = phase

    async def trigger(self) -> Optional[RunResult]:
        if self._busy:
            logger.info("Export already running; ignoring trigger.")
            return None

        # set before the first await so a second trigger sees it
        self._busy = True
        self._phase = RunPhase.CAPTURING
        try:
            result = await self._run_factory(self._set_phase)
            self.last_result = result
            self._phase = RunPhase.DONE
            logger.info(
                "Export finished: %d/%d posters, banner %s",
                result.succeeded,
                result.requested,
                "delivered" if result.banner_delivered else "skipped",
            )
            return result
        except Exception:
            logger.exception("Export failed")
            self._phase = RunPhase.FAILED
            self._notify(FAILURE_MESSAGE)
            return None
        finally:
            self._busy = False
