# tests/test_session_controller.py

from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from taskdesk.cli.bootstrap import create_initial_state
from taskdesk.core.errors import AuthError, StorageUnavailableError, ValidationError
from taskdesk.session.controller import (
    LOGIN_ROUTE,
    TASKS_ROUTE,
    SessionState,
    SessionTrigger,
)
from taskdesk.session.credential_store import CredentialStore
from taskdesk.session.storage import FileStorage

from .fakes import FakeNavigator


def test_initial_state_follows_stored_credential(state, logged_in_state) -> None:
    # Both fixtures share one storage area; the first was built before the token was written.
    assert state.session.state is SessionState.UNAUTHENTICATED
    assert logged_in_state.session.state is SessionState.AUTHENTICATED


@pytest.mark.asyncio
async def test_login_persists_token_and_navigates_to_tasks(state, navigator, server) -> None:
    await state.session.login("ann@example.com", "secret", remember=True)

    assert state.session.is_authenticated
    assert state.credentials.get() == "tok-1"
    assert state.credentials.remembered_identifier() == "ann@example.com"
    assert navigator.routes == [TASKS_ROUTE]

    login_request = server.calls("POST", "/auth/login")[0]
    assert json.loads(login_request.content)["remember"] is True
    assert "authorization" not in login_request.headers


@pytest.mark.asyncio
async def test_login_without_remember_forgets_previous_email(state) -> None:
    state.credentials.remember_identifier("old@example.com")

    await state.session.login("ann@example.com", "secret")

    assert state.credentials.remembered_identifier() is None


@pytest.mark.asyncio
async def test_login_failure_reports_server_message(state, navigator) -> None:
    with pytest.raises(AuthError, match="Invalid email or password"):
        await state.session.login("ann@example.com", "wrong")

    assert state.session.state is SessionState.UNAUTHENTICATED
    assert state.credentials.get() is None
    assert navigator.routes == []


@pytest.mark.asyncio
async def test_login_failure_with_plain_text_body(state, server) -> None:
    server.failures.append(httpx.Response(500, text="backend down"))

    with pytest.raises(AuthError, match="Login Failed: backend down"):
        await state.session.login("ann@example.com", "secret")


@pytest.mark.asyncio
async def test_login_without_token_in_response(state, server) -> None:
    server.failures.append(httpx.Response(200, json={"user": "ann"}))

    with pytest.raises(AuthError, match="no token received"):
        await state.session.login("ann@example.com", "secret")
    assert not state.session.is_authenticated


@pytest.mark.asyncio
async def test_login_requires_email_and_password(state, server) -> None:
    with pytest.raises(ValidationError):
        await state.session.login("  ", "secret")
    assert server.requests == []


@pytest.mark.asyncio
async def test_login_with_unwritable_storage_stays_logged_out(state, area, navigator) -> None:
    area.available = False

    with pytest.raises(StorageUnavailableError):
        await state.session.login("ann@example.com", "secret")

    assert not state.session.is_authenticated
    assert navigator.routes == []


def test_logout_is_idempotent(logged_in_state, navigator) -> None:
    changes: list[tuple[SessionState, SessionTrigger]] = []
    logged_in_state.session.subscribe(lambda s, t: changes.append((s, t)))

    logged_in_state.session.logout()
    logged_in_state.session.logout()

    assert logged_in_state.credentials.get() is None
    assert navigator.routes == [LOGIN_ROUTE]
    assert changes == [(SessionState.UNAUTHENTICATED, SessionTrigger.LOGOUT)]


@pytest.mark.asyncio
async def test_concurrent_unauthorized_collapses_to_one_logout(logged_in_state, navigator, server) -> None:
    server.valid_tokens.clear()
    changes: list[SessionTrigger] = []
    logged_in_state.session.subscribe(lambda s, t: changes.append(t))

    await asyncio.gather(
        logged_in_state.gateway.request("/tasks"),
        logged_in_state.gateway.request("/tasks/1", "DELETE"),
        return_exceptions=True,
    )

    assert logged_in_state.credentials.get() is None
    assert logged_in_state.session.state is SessionState.UNAUTHENTICATED
    assert navigator.routes == [LOGIN_ROUTE]
    assert changes == [SessionTrigger.UNAUTHORIZED]


def test_logout_in_another_context_ends_this_session(logged_in_state, area, navigator) -> None:
    other_tab = CredentialStore(area.open())

    other_tab.clear()

    assert logged_in_state.session.state is SessionState.UNAUTHENTICATED
    assert navigator.routes == [LOGIN_ROUTE]


def test_login_in_another_context_authenticates_without_navigation(state, area, navigator) -> None:
    other_tab = CredentialStore(area.open())

    other_tab.set("tok-1")

    assert state.session.state is SessionState.AUTHENTICATED
    assert navigator.routes == []


def test_route_guard(state, logged_in_state) -> None:
    assert state.session.resolve_route(TASKS_ROUTE) == LOGIN_ROUTE
    assert state.session.resolve_route(LOGIN_ROUTE) == LOGIN_ROUTE
    assert logged_in_state.session.resolve_route(LOGIN_ROUTE) == TASKS_ROUTE
    assert logged_in_state.session.resolve_route(TASKS_ROUTE) == TASKS_ROUTE
    assert logged_in_state.session.resolve_route("/signup") == "/signup"


@pytest.mark.asyncio
async def test_register_checks_password_confirmation_locally(state, server, navigator) -> None:
    with pytest.raises(ValidationError, match="Passwords do not match."):
        await state.session.register(
            username="bob", email="bob@example.com", password="a", confirm_password="b"
        )
    assert server.requests == []

    await state.session.register(
        username="bob", email="bob@example.com", password="pw", confirm_password="pw"
    )
    assert server.users["bob@example.com"] == "pw"
    assert navigator.routes == [LOGIN_ROUTE]


@pytest.mark.asyncio
async def test_register_conflict_message(state) -> None:
    with pytest.raises(AuthError, match="Email already registered"):
        await state.session.register(
            username="ann", email="ann@example.com", password="pw", confirm_password="pw"
        )


@pytest.mark.asyncio
async def test_password_reset_flow(state, navigator) -> None:
    assert await state.session.forgot_password(" ann@example.com ") == "Reset link sent."

    with pytest.raises(ValidationError, match="Invalid reset link."):
        await state.session.reset_password("", "pw", "pw")

    with pytest.raises(AuthError, match="Invalid or expired token."):
        await state.session.reset_password("stale", "pw", "pw")

    assert await state.session.reset_password("reset-ok", "pw", "pw") == "Password updated."
    assert navigator.routes == [LOGIN_ROUTE]


@pytest.mark.asyncio
async def test_file_backed_sessions_share_logout_through_poll(settings, http, navigator, confirm) -> None:
    first = create_initial_state(settings=settings, navigator=navigator, confirm=confirm, http=http)
    await first.session.login("ann@example.com", "secret")

    second_nav = FakeNavigator()
    second = create_initial_state(settings=settings, navigator=second_nav, confirm=confirm, http=http)
    assert isinstance(second.storage, FileStorage)
    assert second.session.is_authenticated

    first.session.logout()
    second.storage.poll()

    assert not second.session.is_authenticated
    assert second_nav.routes == [LOGIN_ROUTE]
