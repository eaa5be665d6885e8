#!/usr/bin/env python3
"""Main entry point for the tunez player."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import logging.config
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING

from tunez import __version__
from tunez.domain.shared.constants import LogLevels
from tunez.domain.shared.exceptions import PlayerStartError
from tunez.domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from tunez.config.settings import Settings

_LOGGING_CONFIG_PATH = Path(__file__).resolve().parents[2] / "logging_config.json"
_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

logger = logging.getLogger(__name__)


def setup_logging(log_level: str = "INFO", log_file: Path | None = None) -> None:
    resolved_level = getattr(logging, log_level.upper(), logging.INFO)

    try:
        with open(_LOGGING_CONFIG_PATH) as f:
            config = json.load(f)
        logging.config.dictConfig(config)
    except (FileNotFoundError, json.JSONDecodeError, ValueError):
        logging.basicConfig(
            level=resolved_level,
            format=_LOG_FORMAT,
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        logging.warning(
            "Could not load %s, falling back to basic config", _LOGGING_CONFIG_PATH
        )

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(_LOG_FORMAT))
        logging.getLogger().addHandler(file_handler)

    logging.getLogger().setLevel(resolved_level)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tunez",
        description="Play audio files through mpv with a persistent queue.",
    )
    parser.add_argument("paths", nargs="*", metavar="PATH", help="files to append to the queue")
    parser.add_argument(
        "--no-restore",
        dest="restore",
        action="store_false",
        help="do not restore the queue saved by the previous run",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=sorted(LogLevels.ALL),
        default=None,
        help="override TUNEZ_LOG_LEVEL",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


async def run(settings: Settings, paths: Sequence[str], *, restore: bool = True) -> int:
    """Restore, extend and play the queue until it runs out or the player exits."""
    from tunez.config.container import create_container

    container = create_container(settings)
    service = container.playback_service

    try:
        await container.initialize()

        if restore:
            await service.restore_queue()

        existing = []
        for raw in paths:
            if Path(raw).expanduser().is_file():
                existing.append(raw)
            else:
                logger.warning(LogTemplates.APP_PATH_MISSING, raw)
        if existing:
            await service.add(*container.provider.tracks_for(existing))

        if not service.queue:
            logger.info(LogTemplates.APP_NOTHING_TO_PLAY)
            return 0

        await service.start()
        await service.play_current()
        await service.watch_events(until_exhausted=True)
        return 0
    except PlayerStartError as e:
        logger.error(LogTemplates.APP_FATAL_ERROR, e)
        return 1
    finally:
        await container.shutdown()


def main(argv: Sequence[str] | None = None) -> int:
    from tunez.config.settings import get_settings

    args = build_parser().parse_args(argv)
    settings = get_settings()
    setup_logging(args.log_level or settings.log_level, settings.log_file)

    logger.info(LogTemplates.APP_STARTING.format(environment=settings.environment))

    try:
        code = asyncio.run(run(settings, args.paths, restore=args.restore))
        logger.info(LogTemplates.APP_STOPPED)
        return code
    except KeyboardInterrupt:
        logger.info(LogTemplates.APP_KEYBOARD_INTERRUPT)
        return 0
    except Exception as e:
        logger.exception(LogTemplates.APP_FATAL_ERROR, e)
        return 1


def cli() -> None:
    """Console script entry point (used by pyproject.toml [project.scripts])."""
    sys.exit(main())


if __name__ == "__main__":
    cli()  # pragma: no cover
