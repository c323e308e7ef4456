from __future__ import annotations

import logging
import os
from typing import Callable

from repo_locator.cache import RepoCache
from repo_locator.config import DEFAULT_MAX_DEPTH, DEFAULT_SEARCH_PATH, RepoConfig
from repo_locator.errors import NoSearchRootsError
from repo_locator.normalize import normalize_repo_url
from repo_locator.paths import cache_path
from repo_locator.remotes import ReadRemotes, remotes_with_timeout
from repo_locator.scanner import scan_for_repo

Scanner = Callable[[str, list[str], int, ReadRemotes], str | None]


class RepoResolver:
    """Resolve a repo reference to a local checkout path.

    Pipeline: normalize -> cache lookup (verified) -> filesystem scan ->
    cache the result.
    """

    def __init__(
        self,
        config: RepoConfig,
        cache: RepoCache,
        read_remotes: ReadRemotes | None = None,
        scan: Scanner = scan_for_repo,
    ) -> None:
        self.config = config
        self.cache = cache
        self.read_remotes = read_remotes or cache.read_remotes
        self.scan = scan

    @classmethod
    def from_config(cls, config: RepoConfig) -> RepoResolver:
        read_remotes = remotes_with_timeout(config.remote_timeout_seconds)
        cache_file = os.path.expanduser(config.cache_file) if config.cache_file else cache_path()
        cache = RepoCache(cache_file, read_remotes=read_remotes)
        return cls(config, cache, read_remotes=read_remotes)

    @property
    def max_depth(self) -> int:
        if self.config.max_depth is None:
            return DEFAULT_MAX_DEPTH
        return self.config.max_depth

    def search_roots(self) -> list[str]:
        """Return the expanded search roots, falling back to the default.

        Raises ``NoSearchRootsError`` when nothing is configured and the
        default root cannot be expanded.
        """
        roots = [
            os.path.expanduser(p.strip())
            for p in self.config.search_paths or []
            if p and p.strip()
        ]
        if roots:
            return roots
        default = os.path.expanduser(DEFAULT_SEARCH_PATH)
        if default.startswith("~"):
            raise NoSearchRootsError(
                "No search paths configured and the home directory is unavailable "
                f"to expand the default {DEFAULT_SEARCH_PATH!r}"
            )
        return [default]

    def resolve(self, raw: str | None) -> str | None:
        """Return the absolute checkout path for *raw*, or ``None``."""
        normalized = normalize_repo_url(raw)
        if not normalized:
            logging.info("[repo-resolver] Invalid repo URL: %r", raw)
            return None

        logging.info("[repo-resolver] Resolving: %s", normalized)

        cached = self.cache.lookup(normalized)
        if cached:
            return cached
        logging.info("[repo-resolver] Cache miss: %s", normalized)

        roots = self.search_roots()
        depth = self.max_depth
        logging.info("[repo-resolver] Scanning %s (depth %d)", ", ".join(roots), depth)
        found = self.scan(normalized, roots, depth, self.read_remotes)

        if found:
            logging.info("[repo-resolver] Found: %s", found)
            self.cache.store(normalized, found)
            return found

        logging.info("[repo-resolver] Not found: %s", normalized)
        return None
