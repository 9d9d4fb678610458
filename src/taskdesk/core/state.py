# src/taskdesk/core/state.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import httpx

from ..api.gateway import AuthenticatedGateway
from ..session.controller import SessionController
from ..session.credential_store import CredentialStore
from ..tasks.collection import TaskCollectionManager


@dataclass
class AppState:
    """
    Runtime state container passed to connectors and command handlers.

    `settings` is kept as Any so tests can pass a lightweight namespace.
    """

    settings: Any
    http: httpx.AsyncClient
    credentials: CredentialStore
    session: SessionController
    gateway: AuthenticatedGateway
    tasks: TaskCollectionManager
    storage: Any = None  # concrete backend (FileStorage exposes watch())
