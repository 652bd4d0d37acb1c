"""
Skyframe Pixoo Display

Shows the flights currently inside a configured area on a Pixoo64, one
flight card at a time, and falls back to a photo slideshow with a drifting
clock when the sky stays empty.

Usage:
    python skyframe_display.py
    python skyframe_display.py --check-config   # validate config.py and exit
    python skyframe_display.py --caffeinate     # prevent macOS sleep

Configuration:
    Copy config.example.py to config.py and edit it.
"""

import argparse
import logging
import os
import subprocess
import sys

LOGGER = logging.getLogger("skyframe")


def _configure_logging(level_name: str, verbose_events: bool) -> None:
    """Configure app logging with standard Python logging."""
    level = getattr(logging, str(level_name).upper(), logging.INFO)
    if not verbose_events and level < logging.WARNING:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Skyframe Pixoo flight display")
    parser.add_argument("--caffeinate", action="store_true", help="Prevent macOS from sleeping while the display runs")
    parser.add_argument("--check-config", action="store_true", help="Validate config.py and exit")
    return parser.parse_args(argv)


def main(argv=None):
    args = _parse_args(argv)

    if args.caffeinate:
        sys.exit(subprocess.call(["caffeinate", "-i", sys.executable, os.path.abspath(__file__)]))

    try:
        from skyframe.settings import load_settings

        settings = load_settings()
    except ModuleNotFoundError as exc:
        if exc.name != "config":
            raise
        logging.basicConfig(level=logging.ERROR, format="%(levelname)s %(message)s")
        LOGGER.error("config.py not found. Copy config.example.py to config.py and edit it.")
        return 2
    except ValueError as exc:
        logging.basicConfig(level=logging.ERROR, format="%(levelname)s %(message)s")
        LOGGER.error("%s", exc)
        return 2

    _configure_logging(settings.log_level, settings.log_verbose_events)
    if args.check_config:
        LOGGER.warning("Configuration OK (provider: %s, area: %s).", settings.flight_provider, settings.area_mode)
        return 0

    from skyframe.controller import SkyframeController

    LOGGER.info("Starting Skyframe.")
    controller = SkyframeController(settings)
    try:
        controller.run()
    except KeyboardInterrupt:
        LOGGER.info("Stopped by user.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
