# src/taskdesk/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then runs on one asyncio loop:
- the credential file watcher (picks up logins/logouts from other processes),
- the console REPL (optional).
"""

from __future__ import annotations

import asyncio
import contextlib
import logging

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.console_connector import ConsoleNavigator, console_confirm, run_console_loop
from ..core.state import AppState
from ..logging_setup import setup_logging
from ..session.storage import FileStorage

logger = logging.getLogger(__name__)


async def _shutdown(state: AppState) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    try:
        await state.http.aclose()
    except Exception:
        logger.debug("HTTP client close failed.", exc_info=True)


async def run_app(settings) -> None:
    state = create_initial_state(
        settings=settings,
        navigator=ConsoleNavigator(),
        confirm=console_confirm,
    )

    watcher: asyncio.Task[None] | None = None
    if isinstance(state.storage, FileStorage):
        watcher = asyncio.create_task(state.storage.watch(settings.storage_poll_seconds))

    try:
        if settings.console_enabled:
            await run_console_loop(state)
        else:
            logger.info("Console disabled. Watching the session only. Press Ctrl+C to stop.")
            await asyncio.Event().wait()
    finally:
        if watcher is not None:
            watcher.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await watcher
        await _shutdown(state)


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)

    log_file = setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    logger.info("Starting %s (service=%s, log=%s)...", settings.app_name, settings.api_base_url, log_file)

    try:
        asyncio.run(run_app(settings))
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down...")
    logger.info("Bye.")


if __name__ == "__main__":
    main()
