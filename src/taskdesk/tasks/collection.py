# src/taskdesk/tasks/collection.py

"""
Task collection manager.

Owns the local task list for the current session. Every mutation is a full
request/response/reconcile cycle: after the server accepts a write, the whole
collection is fetched again and replaced. Nothing is patched locally, so
server-assigned fields (ids) and server-side normalization never drift.

One busy flag guards load/create/update/delete and the start of an inline
edit. A call made while another one is in flight is rejected (not queued).

reset() ends the session generation. An operation still in flight when that
happens stops before its next request and its result is dropped, so a
finished session never writes into the next one.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from ..api.gateway import AuthenticatedGateway
from ..core.errors import (
    EditSessionError,
    GatewayError,
    UnauthorizedError,
    ValidationError,
    friendly_error_message,
)
from ..core.ports import Confirmer
from .edit_session import EditSession
from .task_api import create_task, delete_task, fetch_tasks, replace_task
from .task_models import Task, TaskCounts, TaskDraft, TaskStatus, task_payload

logger = logging.getLogger(__name__)

DELETE_PROMPT = "Are you sure you want to delete this task?"


class _SessionEnded(Exception):
    """Raised inside an operation whose session was reset while it was in flight."""


class TaskCollectionManager:
    def __init__(
        self,
        gateway: AuthenticatedGateway,
        confirm: Confirmer,
        edit_session: EditSession | None = None,
    ) -> None:
        self._gateway = gateway
        self._confirm = confirm
        self._edit = edit_session or EditSession()
        self._tasks: tuple[Task, ...] = ()
        self._busy = False
        self._error: str | None = None
        self._generation = 0

    # ---- read-only view ----

    @property
    def tasks(self) -> tuple[Task, ...]:
        return self._tasks

    @property
    def busy(self) -> bool:
        return self._busy

    @property
    def error(self) -> str | None:
        """Last user-visible error (None after any success)."""
        return self._error

    @property
    def edit_session(self) -> EditSession:
        return self._edit

    def counts(self) -> TaskCounts:
        completed = sum(1 for t in self._tasks if t.completed)
        return TaskCounts(
            total=len(self._tasks),
            completed=completed,
            pending=len(self._tasks) - completed,
        )

    def find(self, task_id: Any) -> Task | None:
        for task in self._tasks:
            if task.id == task_id:
                return task
        return None

    def reset(self) -> None:
        """Drop everything owned by the finished session, including an in-flight claim."""
        self._generation += 1
        self._busy = False
        self._tasks = ()
        self._error = None
        self._edit.cancel()

    def start_edit(self, task_id: Any) -> TaskDraft:
        if self._busy:
            raise EditSessionError("Another task operation is in progress. Try again when it finishes.")
        task = self.find(task_id)
        if task is None:
            raise EditSessionError(f"Task {task_id} is not in the current list.")
        return self._edit.start(task)

    # ---- operations ----

    def _ensure_current(self, generation: int) -> None:
        if generation != self._generation:
            raise _SessionEnded()

    async def _reload(self, generation: int) -> None:
        tasks = await fetch_tasks(self._gateway)
        self._ensure_current(generation)
        self._tasks = tasks

    async def _run(self, op: str, action: Callable[[int], Awaitable[bool]]) -> bool:
        if self._busy:
            logger.info("Rejected %s: another task operation is in flight.", op)
            return False

        generation = self._generation
        self._busy = True
        done = False
        error: str | None = None
        try:
            done = await action(generation)
        except _SessionEnded:
            pass
        except ValidationError as e:
            error = str(e)
        except UnauthorizedError:
            # The session controller has already navigated to login.
            logger.info("Task %s aborted: session is no longer valid.", op)
        except GatewayError as e:
            logger.info("Task %s failed: %s", op, e.__class__.__name__)
            error = friendly_error_message(e)
        finally:
            if generation == self._generation:
                self._busy = False

        if generation != self._generation:
            logger.info("Dropped %s result: the session ended while it was in flight.", op)
            return False
        if error is not None:
            self._error = error
        elif done:
            self._error = None
        return done

    async def load(self) -> bool:
        async def action(generation: int) -> bool:
            await self._reload(generation)
            return True

        return await self._run("load", action)

    async def create(
        self,
        title: str,
        description: str = "",
        status: TaskStatus | str = TaskStatus.PENDING,
    ) -> bool:
        async def action(generation: int) -> bool:
            payload = task_payload(title, description, status)
            await create_task(self._gateway, payload)
            self._ensure_current(generation)
            await self._reload(generation)
            return True

        return await self._run("create", action)

    async def update(
        self,
        task_id: Any,
        title: str,
        description: str,
        status: TaskStatus | str,
    ) -> bool:
        if not self._edit.is_editing(task_id):
            raise EditSessionError(f"Task {task_id} is not being edited.")

        async def action(generation: int) -> bool:
            payload = task_payload(title, description, status)
            await replace_task(self._gateway, task_id, payload)
            self._ensure_current(generation)
            self._edit.finish(task_id)
            await self._reload(generation)
            return True

        return await self._run("update", action)

    async def save_edit(self) -> bool:
        draft = self._edit.draft
        if draft is None:
            raise EditSessionError("No task is being edited.")
        return await self.update(self._edit.task_id, draft.title, draft.description, draft.status)

    async def delete(self, task_id: Any) -> bool:
        async def action(generation: int) -> bool:
            if not await self._confirm(DELETE_PROMPT):
                logger.info("Delete of task %s not confirmed.", task_id)
                return False
            self._ensure_current(generation)
            await delete_task(self._gateway, task_id)
            self._ensure_current(generation)
            if self._edit.is_editing(task_id):
                self._edit.cancel()
            await self._reload(generation)
            return True

        return await self._run("delete", action)
