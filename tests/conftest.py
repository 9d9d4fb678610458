# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import httpx
import pytest

from taskdesk.cli.bootstrap import create_initial_state
from taskdesk.core.state import AppState
from taskdesk.session.storage import MemoryStorageArea

from .fakes import FakeConfirm, FakeNavigator, FakeTaskServer

BASE_URL = "http://tasks.test"


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the bootstrap.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="taskdesk-test",
        api_base_url=BASE_URL,
        request_timeout_seconds=5.0,
        connect_timeout_seconds=1.0,
        data_dir=tmp_path,
        credential_path=tmp_path / "session.json",
        storage_poll_seconds=0.01,
        console_enabled=False,
    )


@pytest.fixture()
def server() -> FakeTaskServer:
    return FakeTaskServer()


@pytest.fixture()
def http(server: FakeTaskServer) -> httpx.AsyncClient:
    return httpx.AsyncClient(base_url=BASE_URL, transport=server.transport())


@pytest.fixture()
def area() -> MemoryStorageArea:
    return MemoryStorageArea()


@pytest.fixture()
def navigator() -> FakeNavigator:
    return FakeNavigator()


@pytest.fixture()
def confirm() -> FakeConfirm:
    return FakeConfirm(answer=True)


def build_state(settings, area, http, navigator, confirm) -> AppState:
    return create_initial_state(
        settings=settings,
        navigator=navigator,
        confirm=confirm,
        storage=area.open(),
        http=http,
    )


@pytest.fixture()
def state(settings, area, http, navigator, confirm) -> AppState:
    """AppState with no saved session (fresh install)."""
    return build_state(settings, area, http, navigator, confirm)


@pytest.fixture()
def logged_in_state(settings, area, http, navigator, confirm) -> AppState:
    """AppState started with a valid token already in storage (page reload while logged in)."""
    area.data["token"] = "tok-1"
    return build_state(settings, area, http, navigator, confirm)
