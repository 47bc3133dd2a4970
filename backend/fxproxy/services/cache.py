"""Cache stores holding the last fetched value and its fetch time per resource.

Stores do not decide staleness; they only hand back ``CacheEntry`` pairs and
replace them whole. The staleness decision lives in ``staleness.py``.
"""

import json
import logging
import os
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Protocol

from fxproxy.errors import ConfigError, StoreError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    value: Any
    fetched_at: datetime


class CacheStore(Protocol):
    def get(self, key: str) -> CacheEntry | None: ...

    def put(self, key: str, value: Any, now: datetime) -> None: ...


class MemoryCacheStore:
    """Thread-safe in-memory store. Entries are never evicted."""

    def __init__(self):
        self._store: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> CacheEntry | None:
        with self._lock:
            return self._store.get(key)

    def put(self, key: str, value: Any, now: datetime) -> None:
        entry = CacheEntry(value=value, fetched_at=now)
        with self._lock:
            self._store[key] = entry

    def clear(self) -> None:
        with self._lock:
            self._store.clear()


class FileCacheStore:
    """One JSON file per key; the file's mtime is the fetch time.

    All file I/O goes through a single lock. Writes land in a temp file that
    is renamed over the target, so a reader never sees a half-written file.
    """

    def __init__(self, cache_dir: Path | str):
        self._dir = Path(cache_dir)
        self._lock = threading.Lock()
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StoreError(f"Cannot create cache dir {self._dir}: {e}") from e

    def path_for(self, key: str) -> Path:
        return self._dir / f"{key}.json"

    def get(self, key: str) -> CacheEntry | None:
        path = self.path_for(key)
        with self._lock:
            try:
                mtime = path.stat().st_mtime
                raw = path.read_text(encoding="utf-8")
            except FileNotFoundError:
                return None
            except OSError as e:
                raise StoreError(f"Cannot read {path}: {e}") from e
        try:
            value = json.loads(raw)
        except ValueError as e:
            raise StoreError(f"Corrupt cache file {path}: {e}") from e
        return CacheEntry(
            value=value, fetched_at=datetime.fromtimestamp(mtime, tz=timezone.utc)
        )

    def put(self, key: str, value: Any, now: datetime) -> None:
        path = self.path_for(key)
        tmp = path.with_suffix(".json.tmp")
        payload = json.dumps(value, ensure_ascii=False)
        ts = now.timestamp()
        with self._lock:
            try:
                tmp.write_text(payload, encoding="utf-8")
                os.utime(tmp, (ts, ts))
                os.replace(tmp, path)
            except OSError as e:
                raise StoreError(f"Cannot write {path}: {e}") from e
        logger.debug(f"Wrote {path}")


def build_store(backend: str, cache_dir: Path | str) -> CacheStore:
    if backend == "memory":
        return MemoryCacheStore()
    if backend == "file":
        return FileCacheStore(cache_dir)
    raise ConfigError(f"Unknown cache backend: {backend!r} (expected 'memory' or 'file')")
