# src/taskdesk/tasks/edit_session.py

from __future__ import annotations

import logging
from enum import StrEnum
from typing import Any

from ..core.errors import EditSessionError
from .task_models import Task, TaskDraft, TaskStatus

logger = logging.getLogger(__name__)


class EditState(StrEnum):
    IDLE = "idle"
    EDITING = "editing"


class EditSession:
    """
    Single-slot inline edit.

    Starting an edit while another one is open discards the earlier draft
    without asking (last writer wins).
    """

    def __init__(self) -> None:
        self._task_id: Any = None
        self._draft: TaskDraft | None = None

    @property
    def state(self) -> EditState:
        return EditState.IDLE if self._draft is None else EditState.EDITING

    @property
    def task_id(self) -> Any:
        return self._task_id

    @property
    def draft(self) -> TaskDraft | None:
        return self._draft

    def is_editing(self, task_id: Any) -> bool:
        return self._draft is not None and self._task_id == task_id

    def start(self, task: Task) -> TaskDraft:
        if self._draft is not None and self._task_id != task.id:
            logger.info("Discarding unsaved draft for task %s", self._task_id)
        self._task_id = task.id
        self._draft = TaskDraft.from_task(task)
        return self._draft

    def change(
        self,
        *,
        title: str | None = None,
        description: str | None = None,
        status: TaskStatus | str | None = None,
    ) -> TaskDraft:
        if self._draft is None:
            raise EditSessionError("No task is being edited.")
        if title is not None:
            self._draft.title = title
        if description is not None:
            self._draft.description = description
        if status is not None:
            self._draft.status = TaskStatus.parse(status)
        return self._draft

    def cancel(self) -> None:
        self._task_id = None
        self._draft = None

    def finish(self, task_id: Any) -> None:
        """Close the edit after its update was accepted by the server."""
        if self.is_editing(task_id):
            self.cancel()
