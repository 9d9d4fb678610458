# src/taskdesk/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires storage -> credential store -> session controller -> gateway -> task manager,
- resets the task list whenever the session ends.
"""

from __future__ import annotations

import logging

import httpx

from ..api.auth import AuthClient
from ..api.gateway import AuthenticatedGateway
from ..config import get_settings
from ..core.ports import Confirmer, Navigator, StorageBackend
from ..core.state import AppState
from ..session.controller import SessionController, SessionState, SessionTrigger
from ..session.credential_store import CredentialStore
from ..session.storage import FileStorage
from ..tasks.collection import TaskCollectionManager

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.credential_path.parent.mkdir(parents=True, exist_ok=True)


def build_http_client(settings, *, transport: httpx.AsyncBaseTransport | None = None) -> httpx.AsyncClient:
    timeout = httpx.Timeout(
        connect=settings.connect_timeout_seconds,
        read=settings.request_timeout_seconds,
        write=settings.request_timeout_seconds,
        pool=settings.connect_timeout_seconds,
    )
    return httpx.AsyncClient(base_url=settings.api_base_url, timeout=timeout, transport=transport)


def create_initial_state(
    *,
    navigator: Navigator,
    confirm: Confirmer,
    settings=None,
    storage: StorageBackend | None = None,
    http: httpx.AsyncClient | None = None,
) -> AppState:
    """
    Create AppState from the provided settings.

    Storage and the HTTP client are injectable so tests can run against
    in-memory storage and an httpx.MockTransport.
    """
    if settings is None:
        settings = get_settings()

    if storage is None:
        _ensure_local_dirs(settings)
        storage = FileStorage(settings.credential_path)

    if http is None:
        http = build_http_client(settings)

    credentials = CredentialStore(storage)
    session = SessionController(credentials, navigator, AuthClient(http))
    gateway = AuthenticatedGateway(http, credentials, on_unauthorized=session.expire_session)
    tasks = TaskCollectionManager(gateway, confirm)

    def _on_session_change(new_state: SessionState, trigger: SessionTrigger) -> None:
        if new_state is SessionState.UNAUTHENTICATED:
            tasks.reset()

    session.subscribe(_on_session_change)

    return AppState(
        settings=settings,
        http=http,
        credentials=credentials,
        session=session,
        gateway=gateway,
        tasks=tasks,
        storage=storage,
    )
