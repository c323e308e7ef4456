"""Read the git remotes recorded for a local checkout."""

from __future__ import annotations

import logging
import subprocess
from typing import Callable

from repo_locator.normalize import normalize_repo_url

ReadRemotes = Callable[[str], list[str]]

DEFAULT_TIMEOUT_SECONDS = 5.0


def read_remotes(path: str, timeout: float = DEFAULT_TIMEOUT_SECONDS) -> list[str]:
    """Run ``git remote -v`` in *path* and return the deduplicated URLs.

    Any failure (git missing, timeout, not a repository, path gone)
    yields an empty list so callers can treat it as "no match".
    """
    try:
        result = subprocess.run(
            ["git", "-C", path, "remote", "-v"],
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except (subprocess.TimeoutExpired, OSError) as exc:
        logging.debug("git remote -v failed in %s: %s", path, exc)
        return []
    if result.returncode != 0:
        logging.debug(
            "git remote -v exited %d in %s: %s",
            result.returncode,
            path,
            result.stderr.strip(),
        )
        return []

    urls: list[str] = []
    for line in result.stdout.splitlines():
        parts = line.split()
        if len(parts) >= 2 and parts[1] not in urls:
            urls.append(parts[1])
    return urls


def remotes_with_timeout(timeout: float) -> ReadRemotes:
    """Return a :func:`read_remotes` bound to *timeout* seconds."""

    def _read(path: str) -> list[str]:
        return read_remotes(path, timeout=timeout)

    return _read


def normalized_remotes(path: str, reader: ReadRemotes = read_remotes) -> list[str]:
    """Return the canonical identifiers of every remote of *path*."""
    norms: list[str] = []
    for url in reader(path):
        norm = normalize_repo_url(url)
        if norm and norm not in norms:
            norms.append(norm)
    return norms
