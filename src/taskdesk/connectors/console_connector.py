# src/taskdesk/connectors/console_connector.py

from __future__ import annotations

import asyncio
import getpass
import logging
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..cli.commands import render_tasks
from ..core.state import AppState
from ..session.controller import HOME_ROUTE, LOGIN_ROUTE, TASKS_ROUTE

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}", flush=True)


class ConsoleNavigator:
    """Navigator port for the console: "routes" are just the screen the user is on."""

    def __init__(self) -> None:
        self.current_route = HOME_ROUTE

    def navigate(self, route: str) -> None:
        self.current_route = route
        logger.debug("Navigate -> %s", route)
        if route == LOGIN_ROUTE:
            _print_ts("[SESSION] You are logged out. Use /login to sign in.")
        elif route == TASKS_ROUTE:
            _print_ts("[SESSION] Logged in. Use /tasks to see your tasks.")


async def console_prompt(question: str, secret: bool = False) -> str:
    reader = getpass.getpass if secret else input
    return await asyncio.to_thread(reader, question)


async def console_confirm(message: str) -> bool:
    answer = await console_prompt(f"{message} [y/N] ")
    return answer.strip().lower() in ("y", "yes")


async def run_console_loop(state: AppState) -> None:
    app_name = str(getattr(state.settings, "app_name", "taskdesk"))
    logger.info("Console connector started (session=%s).", state.session.state)
    _print_ts(f"[{app_name}] Use /help for commands. Use /exit to quit.\n")

    start_route = state.session.resolve_route(TASKS_ROUTE)
    if start_route == TASKS_ROUTE:
        if await state.tasks.load():
            _print_ts(render_tasks(state.tasks))
        elif state.tasks.error:
            _print_ts(f"Error: {state.tasks.error}")
    else:
        _print_ts("[SESSION] Not logged in. Use /login (or /signup to create an account).")

    while True:
        try:
            user_input = (await console_prompt(">>> ")).strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        try:
            reply = await command_registry.handle(state, user_input, prompt=console_prompt)
        except (EOFError, KeyboardInterrupt):
            logger.info("Input closed during a command, exiting.")
            break
        except Exception:
            logger.exception("Command handler crashed.")
            reply = "Internal error while handling a command."

        if reply is None:
            reply = "Commands start with '/'. Use /help to list available commands."
        _print_ts(reply)

    logger.info("Console connector finished.")
