# src/daylist/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- resolves the user token (generated once, stored locally),
- wires a concrete document store and the save queue into AppState.
"""

from __future__ import annotations

import contextlib
import logging
import os
import secrets
import string
from pathlib import Path

from ..config import get_settings
from ..core.ports import DocumentStore
from ..core.state import AppState
from ..tasks.save_queue import DebouncedSaveQueue
from ..tasks.task_store import LocalDocumentStore, RemoteDocumentStore

logger = logging.getLogger(__name__)

TOKEN_ALPHABET = string.ascii_letters + string.digits
TOKEN_LENGTH = 8


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.local_store_path.parent.mkdir(parents=True, exist_ok=True)
    settings.user_token_path.parent.mkdir(parents=True, exist_ok=True)


def generate_user_token(length: int = TOKEN_LENGTH) -> str:
    return "".join(secrets.choice(TOKEN_ALPHABET) for _ in range(length))


def load_or_create_user_token(path: str | Path, *, override: str | None = None) -> str:
    """
    Return the client token identifying this user's document.

    This is an identifier, not a credential: anyone holding it can read the document.
    """
    if override:
        return override.strip()

    path = Path(path)
    if path.exists():
        token = path.read_text("utf-8").strip()
        if token:
            return token
        logger.warning("Empty user token file %s; generating a new token", path)

    token = generate_user_token()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(token + "\n", "utf-8")
    with contextlib.suppress(Exception):
        os.chmod(path, 0o600)
    logger.info("Generated new user token at %s", path)
    return token


def create_store(settings) -> DocumentStore:
    """Remote store when configured, otherwise the local JSON file."""
    if settings.use_remote_store():
        try:
            return RemoteDocumentStore(
                settings.remote_url,
                settings.remote_api_key or "",
                table=settings.remote_table,
                timeout_seconds=settings.remote_timeout_seconds,
            )
        except ValueError:
            logger.exception("Remote store misconfigured; falling back to local store.")
    return LocalDocumentStore(settings.local_store_path)


def create_initial_state(*, settings=None, store: DocumentStore | None = None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings/store injectable makes the app easier to test and avoids hidden global config reads.
    The save queue is attached but not started; main() runs it in a background thread.
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    if store is None:
        store = create_store(settings)

    token = load_or_create_user_token(settings.user_token_path, override=settings.user_token)

    saver = DebouncedSaveQueue(store, token, delay_seconds=settings.save_debounce_seconds)
    state = AppState(settings=settings, store=store, user_token=token, saver=saver)
    logger.info("State ready token=%s store=%s", token, store.describe())
    return state
