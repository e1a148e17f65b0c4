"""
work_store.py — Design Handoff
==============================
Ephemeral Work Store backends. Each holds at most one AnonymousWorkSnapshot:
the chat transcript and generated files of a visitor who has not signed in.

  InMemoryWorkStore  — process-local slot (one per browser session on the server)
  JsonFileWorkStore  — single JSON file on disk, survives CLI restarts

Both answer get()/clear() for the reconciler and record_message()/write_file()
for the chat that produces the work.
"""

import json
import logging
import os
import pathlib
import threading
from typing import Optional

from pydantic import ValidationError

from handoff.states import AnonymousWorkSnapshot

logger = logging.getLogger(__name__)


class InMemoryWorkStore:

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._snapshot: Optional[AnonymousWorkSnapshot] = None

    def get(self) -> Optional[AnonymousWorkSnapshot]:
        with self._lock:
            return self._snapshot

    def clear(self) -> None:
        with self._lock:
            self._snapshot = None

    def record_message(self, message: dict) -> AnonymousWorkSnapshot:
        """Appends one chat message, starting a snapshot if there is none yet."""
        with self._lock:
            current = self._snapshot or AnonymousWorkSnapshot()
            self._snapshot = current.model_copy(
                update={"messages": [*(current.messages or []), dict(message)]}
            )
            return self._snapshot

    def write_file(self, path: str, content: str) -> AnonymousWorkSnapshot:
        with self._lock:
            current = self._snapshot or AnonymousWorkSnapshot()
            self._snapshot = current.model_copy(
                update={"file_system_data": {**current.file_system_data, path: content}}
            )
            return self._snapshot


class JsonFileWorkStore:
    """
    Keeps the snapshot as {"messages": [...], "fileSystemData": {...}} in one file.

    A file that is not valid JSON, or not a valid snapshot, reads as no work.
    Filesystem errors other than a missing file propagate.
    """

    def __init__(self, path: str | os.PathLike) -> None:
        self.path = pathlib.Path(path)
        self._lock = threading.Lock()

    def get(self) -> Optional[AnonymousWorkSnapshot]:
        with self._lock:
            return self._read_unlocked()

    def clear(self) -> None:
        with self._lock:
            self.path.unlink(missing_ok=True)

    def record_message(self, message: dict) -> AnonymousWorkSnapshot:
        with self._lock:
            current = self._read_unlocked() or AnonymousWorkSnapshot()
            updated = current.model_copy(
                update={"messages": [*(current.messages or []), dict(message)]}
            )
            self._write_unlocked(updated)
            return updated

    def write_file(self, path: str, content: str) -> AnonymousWorkSnapshot:
        with self._lock:
            current = self._read_unlocked() or AnonymousWorkSnapshot()
            updated = current.model_copy(
                update={"file_system_data": {**current.file_system_data, path: content}}
            )
            self._write_unlocked(updated)
            return updated

    def _read_unlocked(self) -> Optional[AnonymousWorkSnapshot]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

        try:
            return AnonymousWorkSnapshot.model_validate(json.loads(raw))
        except (json.JSONDecodeError, ValidationError) as exc:
            logger.warning("[work_store] Ignoring unreadable anonymous work in %s: %s", self.path, exc)
            return None

    def _write_unlocked(self, snapshot: AnonymousWorkSnapshot) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        # Write-then-rename so a concurrent get() never sees half a file
        tmp = self.path.with_name(self.path.name + ".tmp")
        tmp.write_text(
            json.dumps(snapshot.model_dump(by_alias=True), ensure_ascii=False, indent=2),
            encoding="utf-8",
        )
        os.replace(tmp, self.path)
