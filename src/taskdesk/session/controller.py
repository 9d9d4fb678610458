# src/taskdesk/session/controller.py

"""
Session controller.

Two states (authenticated / unauthenticated) and an enumerated set of triggers.
The controller is the only subscriber to credential changes from other contexts
and the only component that navigates on login/logout.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import StrEnum

from ..api.auth import AuthClient
from ..core.errors import ValidationError
from ..core.ports import Navigator
from .credential_store import CredentialStore

logger = logging.getLogger(__name__)

HOME_ROUTE = "/"
LOGIN_ROUTE = "/login"
TASKS_ROUTE = "/dashboard"


class SessionState(StrEnum):
    AUTHENTICATED = "authenticated"
    UNAUTHENTICATED = "unauthenticated"


class SessionTrigger(StrEnum):
    LOGIN = "login"
    LOGOUT = "logout"
    UNAUTHORIZED = "unauthorized"  # 401/403 or missing token on a gateway call
    EXTERNAL_CLEAR = "external_clear"  # another context removed the token
    EXTERNAL_SET = "external_set"  # another context logged in


SessionListener = Callable[[SessionState, SessionTrigger], None]


class SessionController:
    def __init__(self, store: CredentialStore, navigator: Navigator, auth: AuthClient) -> None:
        self._store = store
        self._navigator = navigator
        self._auth = auth
        self._listeners: list[SessionListener] = []
        self._state = (
            SessionState.AUTHENTICATED if store.get() else SessionState.UNAUTHENTICATED
        )
        store.on_external_change(self._on_external_change)
        logger.info("Session controller ready state=%s", self._state)

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_authenticated(self) -> bool:
        return self._state is SessionState.AUTHENTICATED

    def remembered_identifier(self) -> str | None:
        return self._store.remembered_identifier()

    def subscribe(self, listener: SessionListener) -> None:
        self._listeners.append(listener)

    def _set_state(self, new_state: SessionState, trigger: SessionTrigger) -> bool:
        if new_state is self._state:
            return False
        logger.info("Session %s -> %s (%s)", self._state, new_state, trigger)
        self._state = new_state
        for listener in list(self._listeners):
            try:
                listener(new_state, trigger)
            except Exception:
                logger.exception("Session listener failed (trigger=%s)", trigger)
        return True

    def _end_session(self, trigger: SessionTrigger) -> None:
        # Clearing is idempotent; the transition and navigation happen once.
        self._store.clear()
        if self._set_state(SessionState.UNAUTHENTICATED, trigger):
            self._navigator.navigate(LOGIN_ROUTE)
        else:
            logger.debug("Already logged out; ignoring %s", trigger)

    # ---- triggers ----

    async def login(self, email: str, password: str, *, remember: bool = False) -> None:
        email = (email or "").strip()
        if not email or not password:
            raise ValidationError("Email and password are required.")

        token = await self._auth.login(email, password, remember=remember)
        self._store.set(token)
        if remember:
            self._store.remember_identifier(email)
        else:
            self._store.forget_identifier()

        self._set_state(SessionState.AUTHENTICATED, SessionTrigger.LOGIN)
        self._navigator.navigate(TASKS_ROUTE)

    def logout(self) -> None:
        self._end_session(SessionTrigger.LOGOUT)

    def expire_session(self) -> None:
        """Gateway callback for auth-rejected responses (and requests without a token)."""
        self._end_session(SessionTrigger.UNAUTHORIZED)

    def _on_external_change(self, token: str | None) -> None:
        if token is None:
            self._end_session(SessionTrigger.EXTERNAL_CLEAR)
        else:
            self._set_state(SessionState.AUTHENTICATED, SessionTrigger.EXTERNAL_SET)

    # ---- routing ----

    def resolve_route(self, route: str) -> str:
        """Apply the session guard to a requested route."""
        if route == TASKS_ROUTE and not self.is_authenticated:
            return LOGIN_ROUTE
        if route == LOGIN_ROUTE and self.is_authenticated:
            return TASKS_ROUTE
        return route

    # ---- account screens (no session required) ----

    async def register(self, *, username: str, email: str, password: str, confirm_password: str) -> None:
        if password != confirm_password:
            raise ValidationError("Passwords do not match.")
        await self._auth.register(username=username, email=email, password=password)
        self._navigator.navigate(LOGIN_ROUTE)

    async def forgot_password(self, email: str) -> str:
        if not (email or "").strip():
            raise ValidationError("Email is required.")
        return await self._auth.forgot_password(email)

    async def reset_password(self, token: str, password: str, confirm_password: str) -> str:
        if not token:
            raise ValidationError("Invalid reset link.")
        if password != confirm_password:
            raise ValidationError("Passwords do not match.")
        message = await self._auth.reset_password(token, password)
        self._navigator.navigate(LOGIN_ROUTE)
        return message
