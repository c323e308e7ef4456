"""Persistent cache mapping canonical repo identifiers to checkout paths.

The cache is only a hint: every lookup re-checks that the path still
exists and that one of its remotes still normalizes to the key.  Stale
entries are removed, not flagged.

The file is re-read before every mutation and rewritten in full.  A
process-wide lock per cache file serializes those read-modify-write
cycles and each write lands through a temp file plus ``os.replace``, so
a reader never sees a half-written file.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from dataclasses import dataclass
from datetime import datetime, timezone

from repo_locator.remotes import ReadRemotes, normalized_remotes, read_remotes

_LOCKS: dict[str, threading.RLock] = {}
_LOCKS_GUARD = threading.Lock()


def _lock_for(path: str) -> threading.RLock:
    key = os.path.abspath(path)
    with _LOCKS_GUARD:
        lock = _LOCKS.get(key)
        if lock is None:
            lock = _LOCKS[key] = threading.RLock()
        return lock


def _now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace(
        "+00:00", "Z"
    )


@dataclass
class CacheEntry:
    path: str
    last_used: str

    def to_json(self) -> dict:
        return {"path": self.path, "lastUsed": self.last_used}

    @classmethod
    def from_json(cls, data: object) -> CacheEntry | None:
        if not isinstance(data, dict) or not isinstance(data.get("path"), str):
            return None
        last_used = data.get("lastUsed")
        return cls(path=data["path"], last_used=last_used if isinstance(last_used, str) else "")


class RepoCache:
    def __init__(self, path: str, read_remotes: ReadRemotes = read_remotes) -> None:
        self.path = path
        self.read_remotes = read_remotes
        self._lock = _lock_for(path)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def load(self) -> dict[str, CacheEntry]:
        """Read the cache file.  Missing or corrupt files read as empty."""
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except (OSError, ValueError):
            logging.warning("Ignoring unreadable repo cache at %s", self.path, exc_info=True)
            return {}
        if not isinstance(data, dict):
            logging.warning("Ignoring repo cache with unexpected shape at %s", self.path)
            return {}

        entries: dict[str, CacheEntry] = {}
        for key, raw in data.items():
            entry = CacheEntry.from_json(raw)
            if entry is None:
                logging.debug("Dropping malformed cache entry %r", key)
                continue
            entries[key] = entry
        return entries

    def _save(self, entries: dict[str, CacheEntry]) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)
        payload = {key: entry.to_json() for key, entry in entries.items()}
        tmp_path: str | None = None
        try:
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=directory,
                prefix=f".{os.path.basename(self.path)}.",
                suffix=".tmp",
                delete=False,
            ) as tmp:
                tmp_path = tmp.name
                json.dump(payload, tmp, indent=2)
                tmp.write("\n")
            os.replace(tmp_path, self.path)
        except Exception:
            if tmp_path and os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def _persist(self, entries: dict[str, CacheEntry]) -> bool:
        """Write *entries*, logging instead of raising on I/O failure."""
        try:
            self._save(entries)
        except OSError:
            logging.warning("Could not write repo cache at %s", self.path, exc_info=True)
            return False
        return True

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def lookup(self, repo_id: str) -> str | None:
        """Return the cached path for *repo_id* if it is still valid.

        Stale entries (path gone, remote changed) are evicted and the
        lookup reports a miss.
        """
        with self._lock:
            entries = self.load()
            entry = entries.get(repo_id)
            if entry is None:
                return None

            reason = self._stale_reason(repo_id, entry)
            if reason:
                del entries[repo_id]
                self._persist(entries)
                logging.info("[repo-resolver] Cache stale (%s): %s", reason, entry.path)
                return None

            entry.last_used = _now()
            self._persist(entries)
            logging.info("[repo-resolver] Cache hit: %s -> %s", repo_id, entry.path)
            return entry.path

    def store(self, repo_id: str, path: str) -> None:
        with self._lock:
            entries = self.load()
            entries[repo_id] = CacheEntry(path=path, last_used=_now())
            self._persist(entries)

    def evict(self, repo_id: str) -> bool:
        """Remove *repo_id* from the cache.  Returns ``False`` if absent."""
        with self._lock:
            entries = self.load()
            if repo_id not in entries:
                return False
            del entries[repo_id]
            self._save(entries)
            return True

    def clear(self) -> int:
        """Drop every entry and return how many there were."""
        with self._lock:
            entries = self.load()
            self._save({})
            return len(entries)

    def prune(self) -> list[str]:
        """Validate every entry, evicting the stale ones.

        Returns the evicted identifiers.
        """
        with self._lock:
            entries = self.load()
            stale = [
                repo_id
                for repo_id, entry in entries.items()
                if self._stale_reason(repo_id, entry)
            ]
            if stale:
                for repo_id in stale:
                    del entries[repo_id]
                self._save(entries)
                logging.info("Pruned %d stale cache entries", len(stale))
            return stale

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _stale_reason(self, repo_id: str, entry: CacheEntry) -> str | None:
        if not os.path.exists(entry.path):
            return "path gone"
        if repo_id not in normalized_remotes(entry.path, self.read_remotes):
            return "remote mismatch"
        return None
