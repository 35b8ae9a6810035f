# src/person_tasks/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- No credentials required at import time (Cloud Datastore uses ADC when the client is built).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

ENV_PREFIX = "PERSON_TASKS"

BACKENDS = ("datastore", "sqlite", "memory")


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _first_env(*names: str, default: str | None = None) -> str | None:
    for n in names:
        v = os.getenv(n)
        if v is not None and v.strip() != "":
            return v
    return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
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

    # ---- Storage ----
    backend: str
    kind: str
    order_by_created: bool

    # ---- Cloud Datastore ----
    datastore_project: Optional[str]
    datastore_namespace: Optional[str]

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    db_path: Path

    # ---- REST API ----
    api_host: str
    api_port: int

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "person-tasks") or "person-tasks"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        backend = _env(_k("BACKEND"), "datastore").strip().lower()
        kind = _env(_k("KIND"), "Person").strip() or "Person"
        order_by_created = _env_bool(_k("ORDER_BY_CREATED"), True)

        # Fall back to the variables the Google client libraries already understand.
        datastore_project = _first_env(
            _k("DATASTORE_PROJECT"), "DATASTORE_PROJECT_ID", "GOOGLE_CLOUD_PROJECT", default=None
        )
        datastore_namespace = _first_env(_k("DATASTORE_NAMESPACE"), default=None)

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/person_tasks"))
        db_path = _env_path(_k("DB_PATH"), data_dir / "records.sqlite3")

        api_host = _env(_k("API_HOST"), "127.0.0.1")
        api_port = _env_int(_k("API_PORT"), _env_int("PORT", 8080))

        return Settings(
            app_name=app_name,
            log_level=log_level,
            backend=backend,
            kind=kind,
            order_by_created=order_by_created,
            datastore_project=datastore_project,
            datastore_namespace=datastore_namespace,
            data_dir=data_dir,
            db_path=db_path,
            api_host=api_host,
            api_port=api_port,
        )


_SETTINGS: Settings | None = None


def get_settings() -> Settings:
    """Process-wide settings; the .env file is read on first use."""
    global _SETTINGS
    if _SETTINGS is None:
        load_dotenv(override=False)
        _SETTINGS = Settings.from_env()
    return _SETTINGS
