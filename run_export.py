import argparse
import asyncio
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from poster_export.assets import ResourceLoader
from poster_export.config import ConfigError, ExportSettings
from poster_export.controller import GenerationStateController
from poster_export.core import BANNER_FILE_NAME, LAYOUTS, LAYOUT_IDS, build_export_job
from poster_export.delivery import DirectorySink
from poster_export.export import ExportOrchestrator
from poster_export.layouts import LayoutProvider, StaticRenderTarget


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Render the YIWO posters to PNG files plus one stitched banner."
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        help="Folder where the PNG files are written (default: POSTER_OUTPUT_DIR or outputs/).",
    )
    parser.add_argument(
        "--assets-dir",
        type=Path,
        help="Folder holding the logo and QR pictures (default: POSTER_ASSETS_DIR or assets/).",
    )
    parser.add_argument("--scale", type=float, help="Resolution multiplier (default: 3).")
    parser.add_argument("--settle-ms", type=float, help="Pause before the first capture.")
    parser.add_argument("--pacing-ms", type=float, help="Pause between consecutive downloads.")
    parser.add_argument(
        "--layouts",
        nargs="+",
        choices=LAYOUT_IDS,
        default=list(LAYOUT_IDS),
        help="Posters to export, in banner order.",
    )
    parser.add_argument("--logo", default="images/logo.png", help="Logo asset name or URL.")
    parser.add_argument("--qr", default="images/qr.jpg", help="QR code asset name or URL.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging.")
    return parser.parse_args(argv)


def build_settings(args: argparse.Namespace) -> ExportSettings:
    settings = ExportSettings.from_env()
    if args.output_dir is not None:
        settings.output_dir = args.output_dir
    if args.assets_dir is not None:
        settings.assets_dir = args.assets_dir
    if args.scale is not None:
        if args.scale <= 0:
            raise ConfigError("--scale must be greater than zero")
        settings.scale = args.scale
    if args.settle_ms is not None:
        if args.settle_ms < 0:
            raise ConfigError("--settle-ms must not be negative")
        settings.settle_delay = args.settle_ms / 1000.0
    if args.pacing_ms is not None:
        if args.pacing_ms < 0:
            raise ConfigError("--pacing-ms must not be negative")
        settings.pacing_delay = args.pacing_ms / 1000.0
    repeated = sorted({layout_id for layout_id in args.layouts if args.layouts.count(layout_id) > 1})
    if repeated:
        raise ConfigError(f"--layouts lists {', '.join(repeated)} more than once")
    return settings


def main(argv=None) -> int:
    # Load environment variables from a local .env file if present
    # (e.g. POSTER_OUTPUT_DIR=exports).
    load_dotenv()

    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        settings = build_settings(args)
    except ConfigError as exc:
        print(f"⚠️  {exc}", file=sys.stderr)
        return 2

    provider = LayoutProvider(logo=args.logo or None, qr=args.qr or None)
    names = dict(LAYOUTS)
    sink = DirectorySink(settings.output_dir)

    with ResourceLoader(settings.assets_dir, timeout=settings.http_timeout) as loader, \
            StaticRenderTarget(provider, args.layouts) as target:
        job = build_export_job(target.nodes, [names[layout_id] for layout_id in args.layouts])

        def start_run(on_phase):
            orchestrator = ExportOrchestrator(
                sink,
                scale=settings.scale,
                background=settings.background,
                settle_delay=settings.settle_delay,
                pacing_delay=settings.pacing_delay,
                loader=loader,
                on_phase=on_phase,
            )
            return orchestrator.run(job)

        controller = GenerationStateController(
            start_run, notify=lambda message: print(f"❌ {message}", file=sys.stderr)
        )
        result = asyncio.run(controller.trigger())

    if result is None:
        return 1

    for file_name in result.delivered:
        print(f"🖼️  {settings.output_dir / file_name}")
    if result.banner_delivered:
        print(f"🧵 {settings.output_dir / BANNER_FILE_NAME}")
    print(f"✅ {result.succeeded}/{result.requested} posters exported")
    return 0 if result.complete else 1


if __name__ == "__main__":
    sys.exit(main())
