import asyncio
import io

from PIL import Image

from poster_export.controller import GenerationStateController
from poster_export.core import BANNER_FILE_NAME, LAYOUTS, build_export_job
from poster_export.delivery import MemorySink
from poster_export.export import ExportOrchestrator
from poster_export.layouts import StaticRenderTarget
from tests.helpers import broken_node

FILE_NAMES = [name for _, name in LAYOUTS]


def _sizes(sink: MemorySink):
    return [Image.open(io.BytesIO(data)).size for _, data in sink.files]


def _controller(job, sink, sleep, loader, scale=3):
    def start(on_phase):
        orchestrator = ExportOrchestrator(
            sink, scale=scale, sleep=sleep, loader=loader, on_phase=on_phase
        )
        return orchestrator.run(job)

    return GenerationStateController(start)


def test_four_posters_at_scale_three(bare_provider, memory_sink, recording_sleep, offline_loader) -> None:
    with StaticRenderTarget(bare_provider) as target:
        job = build_export_job(target.nodes)

    controller = _controller(job, memory_sink, recording_sleep, offline_loader)
    result = asyncio.run(controller.trigger())

    assert memory_sink.names == FILE_NAMES + [BANNER_FILE_NAME]
    assert _sizes(memory_sink) == [(1125, 2436)] * 4 + [(4500, 2436)]
    assert result.complete
    assert not controller.is_busy


def test_second_poster_fails(bare_provider, memory_sink, recording_sleep, offline_loader) -> None:
    with StaticRenderTarget(bare_provider) as target:
        nodes = target.nodes
    nodes[1] = broken_node("tryon", 375, 812)
    job = build_export_job(nodes, FILE_NAMES)

    controller = _controller(job, memory_sink, recording_sleep, offline_loader)
    result = asyncio.run(controller.trigger())

    assert memory_sink.names == [
        "yiwo-identity.png",
        "yiwo-data.png",
        "yiwo-invitation.png",
        BANNER_FILE_NAME,
    ]
    assert _sizes(memory_sink)[-1] == (3 * 1125, 2436)
    assert result.succeeded == 3
    assert result.partial
    assert not controller.is_busy


def test_repeated_runs_give_identical_dimensions(bare_provider, recording_sleep, offline_loader) -> None:
    with StaticRenderTarget(bare_provider) as target:
        job = build_export_job(target.nodes)

    runs = []
    for _ in range(2):
        sink = MemorySink()
        controller = _controller(job, sink, recording_sleep, offline_loader, scale=1)
        asyncio.run(controller.trigger())
        runs.append(_sizes(sink))

    assert runs[0] == runs[1]
    assert runs[0][-1] == (4 * 375, 812)
