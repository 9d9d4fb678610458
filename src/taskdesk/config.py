# src/taskdesk/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- No secrets required at import time (the session token lives in the credential file).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "TASKDESK"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _load_dotenv() -> None:
    """Load a local .env without overriding variables already set in the process."""
    load_dotenv(override=False)


_load_dotenv()


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    s = raw.strip()
    if not s:
        return default
    try:
        return float(s)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Connector flags ----
    console_enabled: bool

    # ---- Task service ----
    api_base_url: str
    request_timeout_seconds: float
    connect_timeout_seconds: float

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    credential_path: Path

    # ---- Cross-process credential watch ----
    storage_poll_seconds: float

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "taskdesk") or "taskdesk"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        console_enabled = _env_bool(_k("CONSOLE_ENABLED"), True)

        api_base_url = _env(_k("API_BASE_URL"), "http://localhost:8080").strip().rstrip("/")

        request_timeout_seconds = _env_float(_k("REQUEST_TIMEOUT_SECONDS"), 30.0)
        connect_timeout_seconds = _env_float(_k("CONNECT_TIMEOUT_SECONDS"), 5.0)
        # keep read >= connect as a sane baseline
        request_timeout_seconds = max(request_timeout_seconds, connect_timeout_seconds)

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/taskdesk"))
        credential_path = _env_path(_k("CREDENTIAL_PATH"), data_dir / "session.json")

        storage_poll_seconds = _env_float(_k("STORAGE_POLL_SECONDS"), 1.0)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            console_enabled=console_enabled,
            api_base_url=api_base_url,
            request_timeout_seconds=request_timeout_seconds,
            connect_timeout_seconds=connect_timeout_seconds,
            data_dir=data_dir,
            credential_path=credential_path,
            storage_poll_seconds=storage_poll_seconds,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
