"""
JSON array files used for contact and dashboard submissions.

Every file holds a single JSON array. Appends rewrite the whole file, so each
append holds an exclusive lock for the path across the read, modify and write
steps. The lock is a process-local mutex plus an advisory ``flock`` on a
sibling ``.lock`` file, which also serialises multiple server processes.
"""

from __future__ import annotations

import fcntl
import json
import logging
import os
import tempfile
import threading
from contextlib import contextmanager
from typing import Any, Iterator

from cosmic_events.errors import StorageReadError, StorageWriteError

logger = logging.getLogger(__name__)


class JsonFileStore:
    """Read-modify-write access to JSON array files."""

    def __init__(self, indent: int = 2):
        self.indent = indent
        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _lock_for(self, path: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(path)
            if lock is None:
                lock = threading.Lock()
                self._locks[path] = lock
            return lock

    @contextmanager
    def locked(self, path: str) -> Iterator[str]:
        """Hold the exclusive lock for ``path``; yields the resolved path."""
        resolved = os.path.abspath(path)
        with self._lock_for(resolved):
            try:
                os.makedirs(os.path.dirname(resolved), exist_ok=True)
                lock_file = open(resolved + ".lock", "a")
            except OSError as exc:
                raise StorageWriteError(f"Cannot open lock for {resolved}") from exc
            with lock_file:
                fcntl.flock(lock_file.fileno(), fcntl.LOCK_EX)
                try:
                    yield resolved
                finally:
                    fcntl.flock(lock_file.fileno(), fcntl.LOCK_UN)

    def ensure_file(self, path: str) -> None:
        """Create ``path`` holding an empty array if it does not exist."""
        directory = os.path.dirname(os.path.abspath(path))
        try:
            os.makedirs(directory, exist_ok=True)
            with open(path, "x", encoding="utf-8") as f:
                f.write("[]")
            logger.info("Created %s", path)
        except FileExistsError:
            pass
        except OSError as exc:
            raise StorageWriteError(f"Cannot create {path}") from exc

    def _read(self, path: str) -> list[Any]:
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = f.read()
        except FileNotFoundError:
            return []
        except (OSError, UnicodeDecodeError) as exc:
            raise StorageReadError(f"Cannot read {path}") from exc

        if not data:
            return []
        try:
            records = json.loads(data)
        except json.JSONDecodeError as exc:
            raise StorageReadError(f"Invalid JSON in {path}") from exc
        if not isinstance(records, list):
            raise StorageReadError(f"{path} does not hold a JSON array")
        return records

    def _write(self, path: str, records: list[Any]) -> None:
        directory = os.path.dirname(path)
        tmp_path = None
        try:
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=directory,
                prefix=os.path.basename(path) + ".",
                suffix=".tmp",
                delete=False,
            ) as tmp:
                tmp_path = tmp.name
                json.dump(records, tmp, indent=self.indent, ensure_ascii=False)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_path, path)
        except (OSError, TypeError, ValueError) as exc:
            if tmp_path and os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise StorageWriteError(f"Cannot write {path}") from exc

    def read_all(self, path: str) -> list[Any]:
        with self.locked(path) as resolved:
            return self._read(resolved)

    def append(self, path: str, record: Any) -> list[Any]:
        """
        Append ``record`` to the array stored at ``path`` and return the new
        contents. A missing file is treated as an empty array.
        """
        with self.locked(path) as resolved:
            records = self._read(resolved)
            records.append(record)
            self._write(resolved, records)
            return records
