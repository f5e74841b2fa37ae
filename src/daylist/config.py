# src/daylist/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app (normal "settings layer").
- No secrets required at import time.
- Remote store is optional: without URL/key the app runs on a local JSON file.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

ENV_PREFIX = "DAYLIST"

STORE_BACKENDS = ("auto", "remote", "local")


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _load_dotenv() -> None:
    """Load .env from the working directory (never overrides real env vars)."""
    from dotenv import load_dotenv

    load_dotenv(override=False)


_load_dotenv()


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _first_env(*names: str, default: str | None = None) -> str | None:
    for n in names:
        v = os.getenv(n)
        if v is not None and v.strip() != "":
            return v
    return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
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

    # ---- Document store ----
    store_backend: str
    remote_url: str
    remote_api_key: str | None
    remote_table: str
    remote_timeout_seconds: float

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    local_store_path: Path
    user_token_path: Path

    # ---- Identity ----
    user_token: str | None

    # ---- Saving ----
    save_debounce_seconds: float

    def use_remote_store(self) -> bool:
        if self.store_backend == "remote":
            return True
        if self.store_backend == "local":
            return False
        return bool(self.remote_url.strip() and (self.remote_api_key or "").strip())

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "daylist") or "daylist"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        store_backend = _env(_k("STORE_BACKEND"), "auto").strip().lower()
        if store_backend not in STORE_BACKENDS:
            store_backend = "auto"

        # Accept the usual Supabase variable names as a fallback.
        remote_url = (_first_env(_k("REMOTE_URL"), "SUPABASE_URL", default="") or "").strip()
        remote_api_key = _first_env(_k("REMOTE_API_KEY"), "SUPABASE_ANON_KEY", default=None)
        remote_table = _env(_k("REMOTE_TABLE"), "user_data").strip() or "user_data"
        remote_timeout_seconds = max(1.0, _env_float(_k("REMOTE_TIMEOUT_SECONDS"), 10.0))

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/daylist"))
        local_store_path = _env_path(_k("LOCAL_STORE_PATH"), data_dir / "documents.json")
        user_token_path = _env_path(_k("USER_TOKEN_PATH"), data_dir / "user_token")

        user_token = (_first_env(_k("USER_TOKEN"), default="") or "").strip() or None

        save_debounce_seconds = max(0.0, _env_float(_k("SAVE_DEBOUNCE_SECONDS"), 0.5))

        return Settings(
            app_name=app_name,
            log_level=log_level,
            store_backend=store_backend,
            remote_url=remote_url,
            remote_api_key=remote_api_key,
            remote_table=remote_table,
            remote_timeout_seconds=remote_timeout_seconds,
            data_dir=data_dir,
            local_store_path=local_store_path,
            user_token_path=user_token_path,
            user_token=user_token,
            save_debounce_seconds=save_debounce_seconds,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
