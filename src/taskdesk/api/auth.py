# src/taskdesk/api/auth.py

"""
Auth API client (/auth/*).

These calls are made before a session exists, so they do not go through the
authenticated gateway and never attach a bearer token.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ..core.errors import AuthError

logger = logging.getLogger(__name__)

UNEXPECTED = "An unexpected error occurred."


def _failure_message(response: httpx.Response, action: str) -> str:
    content_type = response.headers.get("content-type", "")
    if "application/json" in content_type:
        try:
            data = response.json()
        except ValueError:
            data = None
        if isinstance(data, dict) and data.get("message"):
            return str(data["message"])
        if data is not None:
            return f"{action} Failed (Status: {response.status_code})"
    text = response.text.strip()
    return f"{action} Failed: {text or response.reason_phrase}"


def _json_or_empty(response: httpx.Response) -> dict[str, Any]:
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


class AuthClient:
    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def _post(self, path: str, payload: dict[str, Any]) -> httpx.Response:
        try:
            return await self._client.post(path, json=payload)
        except httpx.RequestError as e:
            logger.info("Auth request failed path=%s (%s)", path, e.__class__.__name__)
            raise AuthError(UNEXPECTED) from e

    async def login(self, email: str, password: str, *, remember: bool = False) -> str:
        """Return the session token issued for these credentials."""
        response = await self._post(
            "/auth/login",
            {"email": email, "password": password, "remember": remember},
        )
        if not response.is_success:
            raise AuthError(_failure_message(response, "Login"))

        token = _json_or_empty(response).get("token")
        if not token or not isinstance(token, str):
            raise AuthError("Login successful but no token received.")
        return token

    async def register(self, *, username: str, email: str, password: str) -> None:
        response = await self._post(
            "/auth/register",
            {"username": username, "password": password, "email": email, "roles": []},
        )
        if not response.is_success:
            raise AuthError(_failure_message(response, "Signup"))
        logger.info("Signup successful for %s", email)

    async def forgot_password(self, email: str) -> str:
        response = await self._post("/auth/forgot-password", {"email": email.strip()})
        data = _json_or_empty(response)
        if not response.is_success:
            raise AuthError(str(data.get("message") or "Failed to send reset link."))
        return str(data.get("message") or "")

    async def reset_password(self, token: str, password: str) -> str:
        response = await self._post("/auth/reset-password", {"token": token, "password": password})
        data = _json_or_empty(response)
        if not response.is_success:
            raise AuthError(str(data.get("message") or "Failed to reset password."))
        return str(data.get("message") or "")
