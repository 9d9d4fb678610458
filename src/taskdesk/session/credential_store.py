# src/taskdesk/session/credential_store.py

from __future__ import annotations

import logging
from collections.abc import Callable

from ..core.errors import StorageUnavailableError
from ..core.ports import StorageBackend

logger = logging.getLogger(__name__)

TOKEN_KEY = "token"
REMEMBERED_EMAIL_KEY = "rememberedEmail"

CredentialListener = Callable[[str | None], None]


class CredentialStore:
    """
    Single source of truth for "is a session active".

    Reads fail open: if the medium cannot be read the session counts as logged out.
    Writes of the token fail loudly, so a login is never reported without a persisted token.
    """

    def __init__(self, storage: StorageBackend) -> None:
        self._storage = storage
        self._listeners: list[CredentialListener] = []
        storage.subscribe(self._on_storage_change)

    def get(self) -> str | None:
        try:
            token = self._storage.get(TOKEN_KEY)
        except StorageUnavailableError:
            logger.warning("Credential storage unavailable; treating session as logged out.")
            return None
        return token or None

    def set(self, token: str) -> None:
        if not token:
            raise ValueError("token is required")
        self._storage.set(TOKEN_KEY, token)

    def clear(self) -> None:
        try:
            self._storage.remove(TOKEN_KEY)
        except StorageUnavailableError:
            logger.warning("Credential storage unavailable; token could not be removed.")

    def on_external_change(self, callback: CredentialListener) -> None:
        self._listeners.append(callback)

    def _on_storage_change(self, key: str, value: str | None) -> None:
        if key != TOKEN_KEY:
            return
        for cb in list(self._listeners):
            cb(value or None)

    # ---- remembered identifier ("remember me") ----

    def remembered_identifier(self) -> str | None:
        try:
            return self._storage.get(REMEMBERED_EMAIL_KEY) or None
        except StorageUnavailableError:
            return None

    def remember_identifier(self, value: str) -> None:
        try:
            self._storage.set(REMEMBERED_EMAIL_KEY, value)
        except StorageUnavailableError:
            logger.warning("Credential storage unavailable; remembered email not saved.")

    def forget_identifier(self) -> None:
        try:
            self._storage.remove(REMEMBERED_EMAIL_KEY)
        except StorageUnavailableError:
            logger.warning("Credential storage unavailable; remembered email not removed.")
