# src/taskdesk/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from ..core.errors import ValidationError


class TaskStatus(StrEnum):
    """
    Display status of a task.

    Derived 1:1 from the server-side `completed` flag; there is no third state.
    """

    PENDING = "PENDING"
    COMPLETED = "COMPLETED"

    @classmethod
    def from_completed(cls, completed: bool) -> TaskStatus:
        return cls.COMPLETED if completed else cls.PENDING

    @classmethod
    def parse(cls, raw: TaskStatus | str) -> TaskStatus:
        if isinstance(raw, TaskStatus):
            return raw
        try:
            return cls(str(raw).strip().upper())
        except ValueError:
            raise ValidationError(f"Unknown status: {raw!r} (expected PENDING or COMPLETED).") from None

    @property
    def completed(self) -> bool:
        return self is TaskStatus.COMPLETED


@dataclass(frozen=True, slots=True)
class Task:
    id: Any
    title: str
    description: str
    completed: bool

    @property
    def status(self) -> TaskStatus:
        return TaskStatus.from_completed(self.completed)

    @classmethod
    def from_api(cls, raw: dict[str, Any]) -> Task:
        return cls(
            id=raw.get("id"),
            title=str(raw.get("title") or ""),
            description=str(raw.get("description") or ""),
            completed=raw.get("completed") is True,
        )


@dataclass(slots=True)
class TaskDraft:
    """Working copy edited inline; only title/description/status are mutable."""

    title: str
    description: str
    status: TaskStatus

    @classmethod
    def from_task(cls, task: Task) -> TaskDraft:
        return cls(title=task.title, description=task.description, status=task.status)


@dataclass(frozen=True, slots=True)
class TaskCounts:
    total: int
    completed: int
    pending: int


def task_payload(title: str, description: str | None, status: TaskStatus | str) -> dict[str, Any]:
    """Validate user input and build the body for POST/PUT /tasks."""
    clean_title = (title or "").strip()
    if not clean_title:
        raise ValidationError("Title is required.")
    return {
        "title": clean_title,
        "description": description or "",
        "completed": TaskStatus.parse(status).completed,
    }
