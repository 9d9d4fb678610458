# src/taskdesk/cli/commands.py

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from ..core.errors import AuthError, EditSessionError, StorageUnavailableError, ValidationError
from ..core.state import AppState
from ..session.controller import TASKS_ROUTE
from ..tasks.collection import TaskCollectionManager

Prompt = Callable[[str, bool], Awaitable[str]]
# (question, secret) -> answer; secret=True hides the input (passwords).
CommandHandler = Callable[[AppState, list[str], Prompt | None], Awaitable[str]]

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console connector (/help, /login, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    async def handle(self, state: AppState, line: str, prompt: Prompt | None = None) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            return await handler(state, args, prompt)
        except (ValidationError, AuthError, EditSessionError, StorageUnavailableError) as e:
            return str(e)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


async def _ask(prompt: Prompt | None, question: str, *, secret: bool = False) -> str:
    if prompt is None:
        raise ValidationError(f"Missing input: {question.strip(': ')}")
    return (await prompt(question, secret)).strip()


def _resolve_task_id(tasks: TaskCollectionManager, raw: str) -> Any:
    for task in tasks.tasks:
        if str(task.id) == raw:
            return task.id
    raise ValidationError(f"No task with id {raw} in the current list. Use /tasks to refresh.")


def render_tasks(tasks: TaskCollectionManager) -> str:
    counts = tasks.counts()
    lines = [f"Tasks: {counts.total} | Completed: {counts.completed} | Pending: {counts.pending}"]
    editing = tasks.edit_session
    for task in tasks.tasks:
        mark = "*" if editing.is_editing(task.id) else " "
        desc = f" ({task.description})" if task.description else ""
        lines.append(f" {mark}[{task.id}] {task.status:<9} {task.title}{desc}")
    if not tasks.tasks:
        lines.append("  (no tasks yet; add one with /add)")
    return "\n".join(lines)


def _outcome(tasks: TaskCollectionManager, ok: bool, success: str) -> str:
    if ok:
        return f"{success}\n{render_tasks(tasks)}"
    if tasks.error:
        return f"Error: {tasks.error}"
    if tasks.busy:
        return "Another task operation is still running."
    return "Nothing changed."


def _require_session(state: AppState) -> str | None:
    if state.session.resolve_route(TASKS_ROUTE) != TASKS_ROUTE:
        return "You are not logged in. Use /login."
    return None


async def cmd_help(state: AppState, args: list[str], prompt: Prompt | None) -> str:
    return registry.build_help()


async def cmd_status(state: AppState, args: list[str], prompt: Prompt | None) -> str:
    counts = state.tasks.counts()
    edit = state.tasks.edit_session
    editing = f"task {edit.task_id}" if edit.draft is not None else "nothing"
    return (
        "Status:\n"
        f"  Session: {state.session.state}\n"
        f"  Service: {getattr(state.settings, 'api_base_url', '?')}\n"
        f"  Remembered email: {state.session.remembered_identifier() or '-'}\n"
        f"  Tasks loaded: {counts.total} (completed {counts.completed}, pending {counts.pending})\n"
        f"  Editing: {editing}"
    )


async def cmd_login(state: AppState, args: list[str], prompt: Prompt | None) -> str:
    """
    /login [email] [--remember|--forget]

    Without an email the remembered one is used (and stays remembered unless --forget).
    """
    flags = {a for a in args if a.startswith("--")}
    positional = [a for a in args if not a.startswith("--")]

    remembered = state.session.remembered_identifier()
    email = positional[0] if positional else (remembered or await _ask(prompt, "Email: "))
    remember = "--remember" in flags or (bool(remembered) and email == remembered and "--forget" not in flags)
    password = await _ask(prompt, "Password: ", secret=True)

    await state.session.login(email, password, remember=remember)
    await state.tasks.load()
    return _outcome(state.tasks, state.tasks.error is None, f"Logged in as {email}.")


async def cmd_logout(state: AppState, args: list[str], prompt: Prompt | None) -> str:
    if not state.session.is_authenticated:
        return "Already logged out."
    state.session.logout()
    return "Logged out."


async def cmd_signup(state: AppState, args: list[str], prompt: Prompt | None) -> str:
    username = await _ask(prompt, "Username: ")
    email = await _ask(prompt, "Email: ")
    password = await _ask(prompt, "Password: ", secret=True)
    confirm = await _ask(prompt, "Confirm password: ", secret=True)
    await state.session.register(
        username=username, email=email, password=password, confirm_password=confirm
    )
    return "Signup successful. You can /login now."


async def cmd_forgot(state: AppState, args: list[str], prompt: Prompt | None) -> str:
    email = args[0] if args else await _ask(prompt, "Email: ")
    message = await state.session.forgot_password(email)
    return message or "If the account exists, a reset link has been sent."


async def cmd_reset(state: AppState, args: list[str], prompt: Prompt | None) -> str:
    """/reset <token> (the token from the reset link)"""
    token = args[0] if args else ""
    password = await _ask(prompt, "New password: ", secret=True)
    confirm = await _ask(prompt, "Confirm password: ", secret=True)
    message = await state.session.reset_password(token, password, confirm)
    return message or "Password reset. You can /login now."


async def cmd_tasks(state: AppState, args: list[str], prompt: Prompt | None) -> str:
    msg = _require_session(state)
    if msg is not None:
        return msg
    ok = await state.tasks.load()
    return _outcome(state.tasks, ok, "Task list refreshed.")


async def cmd_add(state: AppState, args: list[str], prompt: Prompt | None) -> str:
    """/add <title> | <description> | <PENDING|COMPLETED>"""
    msg = _require_session(state)
    if msg is not None:
        return msg
    fields = [f.strip() for f in " ".join(args).split("|")]
    title = fields[0] if fields else ""
    description = fields[1] if len(fields) > 1 else ""
    status = fields[2] if len(fields) > 2 and fields[2] else "PENDING"
    ok = await state.tasks.create(title, description, status)
    return _outcome(state.tasks, ok, "Task created.")


async def cmd_edit(state: AppState, args: list[str], prompt: Prompt | None) -> str:
    if not args:
        return "Usage: /edit <task id>"
    task_id = _resolve_task_id(state.tasks, args[0])
    draft = state.tasks.start_edit(task_id)
    return (
        f"Editing task {task_id}: title={draft.title!r} description={draft.description!r} "
        f"status={draft.status}. Use /set, then /save or /cancel."
    )


async def cmd_set(state: AppState, args: list[str], prompt: Prompt | None) -> str:
    """/set title|description|status <value>"""
    if len(args) < 1 or args[0].lower() not in ("title", "description", "status"):
        return "Usage: /set title|description|status <value>"
    field = args[0].lower()
    value = " ".join(args[1:])
    draft = state.tasks.edit_session.change(**{field: value})
    return f"Draft: title={draft.title!r} description={draft.description!r} status={draft.status}"


async def cmd_save(state: AppState, args: list[str], prompt: Prompt | None) -> str:
    ok = await state.tasks.save_edit()
    return _outcome(state.tasks, ok, "Task updated.")


async def cmd_cancel(state: AppState, args: list[str], prompt: Prompt | None) -> str:
    if state.tasks.edit_session.draft is None:
        return "Nothing is being edited."
    state.tasks.edit_session.cancel()
    return "Edit cancelled."


async def cmd_delete(state: AppState, args: list[str], prompt: Prompt | None) -> str:
    if not args:
        return "Usage: /delete <task id>"
    task_id = _resolve_task_id(state.tasks, args[0])
    ok = await state.tasks.delete(task_id)
    return _outcome(state.tasks, ok, "Task deleted.")


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show session and task summary.")
registry.register("login", cmd_login, help_text="Log in: /login [email] [--remember|--forget].")
registry.register("logout", cmd_logout, help_text="Log out and clear the saved session.")
registry.register("signup", cmd_signup, help_text="Create an account.", aliases=["register"])
registry.register("forgot", cmd_forgot, help_text="Send a password reset link: /forgot [email].")
registry.register("reset", cmd_reset, help_text="Reset password: /reset <token>.")
registry.register("tasks", cmd_tasks, help_text="Reload and show your tasks.", aliases=["ls"])
registry.register("add", cmd_add, help_text="Create a task: /add title | description | PENDING|COMPLETED.")
registry.register("edit", cmd_edit, help_text="Start editing a task: /edit <id>.")
registry.register("set", cmd_set, help_text="Change the draft: /set title|description|status <value>.")
registry.register("save", cmd_save, help_text="Save the task being edited.")
registry.register("cancel", cmd_cancel, help_text="Discard the current edit.")
registry.register("delete", cmd_delete, help_text="Delete a task (asks for confirmation): /delete <id>.", aliases=["rm"])
