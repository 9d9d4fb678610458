# src/taskdesk/api/gateway.py

"""
Authenticated request gateway.

Every call to the task API goes through AuthenticatedGateway.request():
- no token -> NoCredentialError, the request is never sent
- attaches "Authorization: Bearer <token>" (nothing else in the app touches credentials)
- classifies the response and raises a typed GatewayError on failure

No retries here: a failed call is surfaced to the caller as-is.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from typing import Any

import httpx

from ..core.errors import (
    NoCredentialError,
    ServerError,
    TransportError,
    UnauthorizedError,
)
from ..session.credential_store import CredentialStore

logger = logging.getLogger(__name__)

AUTH_REJECTED = frozenset({401, 403})


def extract_error_message(response: httpx.Response) -> str:
    """Prefer a JSON {"message"|"error": ...} body, then the status text."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for field in ("message", "error"):
            value = body.get(field)
            if isinstance(value, str) and value.strip():
                return value
    reason = (response.reason_phrase or "").strip()
    return reason or f"HTTP error! Status: {response.status_code}"


def decode_success_body(response: httpx.Response) -> Any:
    if response.status_code == 204 or response.headers.get("content-length") == "0":
        return None
    if not response.content:
        return None
    content_type = response.headers.get("content-type", "")
    if "text/plain" in content_type:
        return response.text
    try:
        return response.json()
    except ValueError as e:
        raise TransportError(f"Malformed response from {response.request.url}") from e


class AuthenticatedGateway:
    def __init__(
        self,
        client: httpx.AsyncClient,
        store: CredentialStore,
        *,
        on_unauthorized: Callable[[], None] | None = None,
    ) -> None:
        self._client = client
        self._store = store
        self._on_unauthorized = on_unauthorized

    def _reject(self) -> None:
        self._store.clear()
        if self._on_unauthorized is not None:
            self._on_unauthorized()

    async def request(self, endpoint: str, method: str = "GET", body: Any | None = None) -> Any:
        token = self._store.get()
        if not token:
            logger.info("No credential for %s %s; forcing logout.", method, endpoint)
            self._reject()
            raise NoCredentialError()

        headers = {"Authorization": f"Bearer {token}"}
        content: bytes | None = None
        if body is not None:
            headers["Content-Type"] = "application/json"
            content = json.dumps(body, ensure_ascii=False).encode("utf-8")

        try:
            response = await self._client.request(method, endpoint, headers=headers, content=content)
        except httpx.RequestError as e:
            logger.info("Transport error on %s %s: %s", method, endpoint, e.__class__.__name__)
            raise TransportError(f"Request failed: {method} {endpoint}") from e

        status = response.status_code
        logger.debug("%s %s -> %s", method, endpoint, status)

        if status in AUTH_REJECTED:
            current = self._store.get()
            if current is not None and current != token:
                # Sent with a credential that has since been replaced; the new session stands.
                logger.info("Auth rejected (%s) on %s %s for a replaced credential.", status, method, endpoint)
            else:
                logger.info("Auth rejected (%s) on %s %s; forcing logout.", status, method, endpoint)
                self._reject()
            raise UnauthorizedError(status)

        if not response.is_success:
            raise ServerError(status, extract_error_message(response))

        return decode_success_body(response)
