# tests/test_edit_session.py

from __future__ import annotations

import pytest

from taskdesk.core.errors import EditSessionError, ValidationError
from taskdesk.tasks.edit_session import EditSession, EditState
from taskdesk.tasks.task_models import Task, TaskStatus, task_payload


def test_status_is_derived_from_completed_flag() -> None:
    assert Task(id=1, title="t", description="", completed=True).status is TaskStatus.COMPLETED
    assert Task(id=1, title="t", description="", completed=False).status is TaskStatus.PENDING
    assert TaskStatus.parse("completed") is TaskStatus.COMPLETED
    assert TaskStatus.parse(" Pending ") is TaskStatus.PENDING

    with pytest.raises(ValidationError):
        TaskStatus.parse("IN_PROGRESS")


def test_from_api_normalizes_missing_fields() -> None:
    task = Task.from_api({"id": 7, "title": "t", "description": None, "completed": "yes"})
    assert task == Task(id=7, title="t", description="", completed=False)


def test_task_payload_validates_and_maps_status() -> None:
    assert task_payload("  Buy milk ", None, "COMPLETED") == {
        "title": "Buy milk",
        "description": "",
        "completed": True,
    }
    with pytest.raises(ValidationError, match="Title is required."):
        task_payload("", "d", TaskStatus.PENDING)


def test_start_change_cancel() -> None:
    edit = EditSession()
    assert edit.state is EditState.IDLE

    draft = edit.start(Task(id=1, title="A", description="d", completed=True))
    assert draft.status is TaskStatus.COMPLETED
    assert edit.state is EditState.EDITING
    assert edit.is_editing(1)

    edit.change(title="A2", status="PENDING")
    assert edit.draft.title == "A2"
    assert edit.draft.description == "d"
    assert edit.draft.status is TaskStatus.PENDING

    edit.cancel()
    assert edit.state is EditState.IDLE
    assert edit.draft is None


def test_new_edit_replaces_previous_draft() -> None:
    edit = EditSession()
    edit.start(Task(id=1, title="A", description="", completed=False))
    edit.change(title="unsaved")

    edit.start(Task(id=2, title="B", description="", completed=False))

    assert not edit.is_editing(1)
    assert edit.is_editing(2)
    assert edit.draft.title == "B"


def test_finish_only_closes_matching_task() -> None:
    edit = EditSession()
    edit.start(Task(id=2, title="B", description="", completed=False))

    edit.finish(1)
    assert edit.is_editing(2)

    edit.finish(2)
    assert edit.state is EditState.IDLE


def test_change_without_edit_raises() -> None:
    with pytest.raises(EditSessionError):
        EditSession().change(title="x")
