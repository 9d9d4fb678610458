# src/taskdesk/core/ports.py

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
This keeps the storage medium, router and prompts swappable and makes testing easier.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Awaitable, Protocol

StorageListener = Callable[[str, str | None], None]
# (key, new_value) for a change made by another context; new_value is None on removal.


class StorageBackend(Protocol):
    """
    Durable key/value medium (browser localStorage equivalent).

    subscribe() must only report changes made by *other* contexts,
    never the writes issued through this instance.
    """

    def get(self, key: str) -> str | None: ...
    def set(self, key: str, value: str) -> None: ...
    def remove(self, key: str) -> None: ...
    def subscribe(self, listener: StorageListener) -> None: ...


class Navigator(Protocol):
    """Router capability. The core decides *when* to navigate, never how routes render."""

    def navigate(self, route: str) -> None: ...


class Confirmer(Protocol):
    """User confirmation prompt (e.g. "Are you sure you want to delete this task?")."""

    def __call__(self, message: str) -> Awaitable[bool]: ...
