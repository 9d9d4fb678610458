# src/taskdesk/tasks/task_api.py

"""Small helpers mapping the task API endpoints onto gateway calls."""

from __future__ import annotations

import logging
from typing import Any

from ..api.gateway import AuthenticatedGateway
from ..core.errors import TransportError
from .task_models import Task

logger = logging.getLogger(__name__)

TASKS_ENDPOINT = "/tasks"


def _task_endpoint(task_id: Any) -> str:
    return f"{TASKS_ENDPOINT}/{task_id}"


def tasks_from_payload(payload: Any) -> tuple[Task, ...]:
    """Decode GET /tasks. An empty body means an empty collection."""
    if payload is None or payload == "":
        return ()
    if not isinstance(payload, list):
        raise TransportError("Unexpected task list payload from the task service.")

    if not all(isinstance(item, dict) for item in payload):
        logger.warning("Task list payload holds non-object entries; rejecting it.")
        raise TransportError("Unexpected task entry in the task list payload.")
    return tuple(Task.from_api(item) for item in payload)


async def fetch_tasks(gateway: AuthenticatedGateway) -> tuple[Task, ...]:
    return tasks_from_payload(await gateway.request(TASKS_ENDPOINT, "GET"))


async def create_task(gateway: AuthenticatedGateway, payload: dict[str, Any]) -> Any:
    return await gateway.request(TASKS_ENDPOINT, "POST", payload)


async def replace_task(gateway: AuthenticatedGateway, task_id: Any, payload: dict[str, Any]) -> Any:
    return await gateway.request(_task_endpoint(task_id), "PUT", payload)


async def delete_task(gateway: AuthenticatedGateway, task_id: Any) -> Any:
    return await gateway.request(_task_endpoint(task_id), "DELETE")
