# src/daylist/tasks/task_store.py

from __future__ import annotations

import contextlib
import json
import logging
import os
import threading
from pathlib import Path
from typing import Any

import httpx

from ..core.errors import StoreUnavailable
from .task_models import Snapshot

logger = logging.getLogger(__name__)


class RemoteDocumentStore:
    """
    Row-per-user JSON document store behind a PostgREST (Supabase) endpoint.

    Table layout:
        <table>(user_token text unique, data jsonb)

    Every save is a full-document upsert; there are no partial updates.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        table: str = "user_data",
        timeout_seconds: float = 10.0,
        client: httpx.Client | None = None,
    ) -> None:
        if not base_url or not base_url.strip():
            raise ValueError("remote store URL is not set. Set DAYLIST_REMOTE_URL in your .env.")
        if not api_key or not api_key.strip():
            raise ValueError("remote store key is not set. Set DAYLIST_REMOTE_API_KEY in your .env.")

        self._table = table
        self._endpoint = f"{base_url.rstrip('/')}/rest/v1/{table}"
        headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }
        if client is None:
            client = httpx.Client(
                timeout=httpx.Timeout(timeout_seconds, connect=min(5.0, timeout_seconds)),
            )
        client.headers.update(headers)
        self._client = client
        logger.info("RemoteDocumentStore ready endpoint=%s", self._endpoint)

    def describe(self) -> str:
        return f"remote ({self._endpoint})"

    def close(self) -> None:
        with contextlib.suppress(Exception):
            self._client.close()

    def load_all(self, user_token: str) -> Snapshot | None:
        try:
            resp = self._client.get(
                self._endpoint,
                params={"user_token": f"eq.{user_token}", "select": "data"},
            )
            resp.raise_for_status()
            rows = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise StoreUnavailable(f"load failed: {exc}") from exc

        if not isinstance(rows, list) or not rows:
            logger.info("No remote document for token=%s", user_token)
            return None

        row = rows[0]
        data = row.get("data") if isinstance(row, dict) else None
        return Snapshot.from_document(data)

    def save_all(self, user_token: str, snapshot: Snapshot) -> None:
        payload = {"user_token": user_token, "data": snapshot.to_document()}
        try:
            resp = self._client.post(
                self._endpoint,
                params={"on_conflict": "user_token"},
                json=payload,
                headers={"Prefer": "resolution=merge-duplicates,return=minimal"},
            )
            resp.raise_for_status()
        except httpx.HTTPError as exc:
            raise StoreUnavailable(f"save failed: {exc}") from exc
        logger.debug("Remote document saved token=%s", user_token)


class LocalDocumentStore:
    """
    Offline store: a single JSON file mapping user token -> document.

    Writes go to a temp file first and are swapped in with os.replace.
    """

    def __init__(self, path: str | Path = "documents.json") -> None:
        self._path = Path(path)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        logger.info("LocalDocumentStore ready path=%s", self._path)

    def describe(self) -> str:
        return f"local ({self._path})"

    def close(self) -> None:
        return

    def _read(self) -> dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text("utf-8"))
        except (OSError, ValueError) as exc:
            raise StoreUnavailable(f"cannot read {self._path}: {exc}") from exc
        return data if isinstance(data, dict) else {}

    def load_all(self, user_token: str) -> Snapshot | None:
        with self._lock:
            docs = self._read()
        doc = docs.get(user_token)
        if doc is None:
            logger.info("No local document for token=%s", user_token)
            return None
        return Snapshot.from_document(doc)

    def save_all(self, user_token: str, snapshot: Snapshot) -> None:
        with self._lock:
            docs = self._read()
            docs[user_token] = snapshot.to_document()
            tmp = self._path.with_suffix(".tmp")
            try:
                tmp.write_text(json.dumps(docs, ensure_ascii=False, indent=2), "utf-8")
                os.replace(tmp, self._path)
            except OSError as exc:
                raise StoreUnavailable(f"cannot write {self._path}: {exc}") from exc
            with contextlib.suppress(Exception):
                # Best-effort: keep the file private on disk.
                os.chmod(self._path, 0o600)
        logger.debug("Local document saved token=%s", user_token)
