"""Shelf display entry point.

Usage:
    python -m shelfdisplay [options]

Options:
    --config PATH        Path to config file
    --demo               Use the mock provider with drifting amounts
    --surfaces N         Number of surfaces when the config declares none
    --width W            Surface width for generated surfaces
    --height H           Surface height for generated surfaces
    --duration SECONDS   Stop after this many seconds
    --snapshot-dir PATH  Write a PNG of every surface on exit
    --debug              Enable debug logging
"""

import argparse
import asyncio
import logging
import random
import signal
import sys
from pathlib import Path

from . import __version__
from .core.config import Config, SurfaceConfig, load_config
from .core.logging import apply_logging_config, setup_logging
from .providers.mock import MockProvider
from .runtime import DisplaySystem

logger = logging.getLogger(__name__)

DEMO_DRIFT_INTERVAL = 2.0


async def _drift(provider: MockProvider, interval: float) -> None:
    rng = random.Random()
    while True:
        await asyncio.sleep(interval)
        provider.drift(rng)


async def run(args: argparse.Namespace, config: Config) -> int:
    """Run the display system until a signal or the duration ends."""
    provider = MockProvider() if args.demo else None
    system = DisplaySystem(config, driver=provider)

    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except NotImplementedError:
            # Windows event loops have no signal handlers
            pass

    drift_task = None
    if provider is not None:
        drift_task = asyncio.create_task(_drift(provider, DEMO_DRIFT_INTERVAL), name="drift")

    try:
        await system.run(duration=args.duration, stop_event=stop_event)
    finally:
        if drift_task is not None:
            drift_task.cancel()
            await asyncio.gather(drift_task, return_exceptions=True)

    for slot in system.slots.values():
        logger.info("%s [%s]:\n%s", slot.id, slot.view_id, getattr(slot.surface, "text", lambda: "")())

    if args.snapshot_dir:
        for path in system.save_snapshots(args.snapshot_dir):
            logger.info("Snapshot written: %s", path)
    return 0


def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Shelf display system",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument("--config", type=Path, default=None, help="Path to config file")
    parser.add_argument(
        "--demo",
        action="store_true",
        help="Use the mock provider (no network required)",
    )
    parser.add_argument(
        "--surfaces",
        type=int,
        default=1,
        help="Number of surfaces when the config declares none",
    )
    parser.add_argument("--width", type=int, default=39, help="Width of generated surfaces")
    parser.add_argument("--height", type=int, default=13, help="Height of generated surfaces")
    parser.add_argument(
        "--duration",
        type=float,
        default=None,
        help="Stop after this many seconds",
    )
    parser.add_argument(
        "--snapshot-dir",
        type=Path,
        default=None,
        help="Write a PNG of every surface on exit",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    args = parser.parse_args()

    # Initial logging until the config is read
    setup_logging(level="DEBUG" if args.debug else "INFO")
    logger.info("Shelf display v%s", __version__)

    try:
        config = load_config(args.config, strict=args.config is not None)
    except Exception as e:
        logger.error("Cannot load config: %s", e)
        return 1

    apply_logging_config(config.logging, debug=args.debug)

    if not config.surfaces:
        config.surfaces = [
            SurfaceConfig(id=f"surface-{i + 1}", width=args.width, height=args.height)
            for i in range(max(1, args.surfaces))
        ]

    try:
        return asyncio.run(run(args, config))
    except Exception as e:
        logger.exception("Fatal error: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
