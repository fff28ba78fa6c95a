# src/todolist/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState on the event loop, runs the console REPL,
then shuts storage down (pending writes are allowed to finish).
"""

from __future__ import annotations

import asyncio
import logging

from ..cli.bootstrap import create_initial_state, shutdown_state
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..errors import StorageUnavailable
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


async def _run(settings) -> int:
    try:
        state = create_initial_state(settings=settings)
    except StorageUnavailable as e:
        logger.error("Cannot open task storage: %s", e)
        return 1

    try:
        if settings.console_enabled:
            await run_console_loop(state)
        else:
            logger.info("Console disabled, nothing to run.")
    finally:
        await shutdown_state(state)

    return 2 if state.blocked else 0


def main() -> int:
    settings = get_settings()

    # choose console log level from settings.log_level
    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)

    setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logger.info("Starting %s...", settings.app_name)
    try:
        code = asyncio.run(_run(settings))
    except KeyboardInterrupt:
        logger.info("Interrupted.")
        code = 130
    logger.info("Bye.")
    return code


if __name__ == "__main__":
    raise SystemExit(main())
