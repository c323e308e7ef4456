"""Bounded filesystem walk that locates a checkout by name and remote.

Only directories whose name matches the identifier's repo name (case
insensitively) and that carry a ``.git`` entry are asked for their
remotes, which keeps the walk cheap on large development trees.
"""

from __future__ import annotations

import logging
import os
from typing import Iterable

from repo_locator.normalize import repo_name
from repo_locator.remotes import ReadRemotes, normalized_remotes, read_remotes

SKIP_DIRS = frozenset({
    ".git",
    "node_modules",
    "dist",
    ".bare",
    "__pycache__",
    "vendor",
    ".venv",
    "build",
    ".cache",
    ".next",
    ".turbo",
})


def has_git_marker(path: str) -> bool:
    """True if *path* holds a ``.git`` directory or a worktree ``.git`` file."""
    return os.path.lexists(os.path.join(path, ".git"))


def scan_for_repo(
    repo_id: str,
    search_paths: Iterable[str],
    max_depth: int,
    read_remotes: ReadRemotes = read_remotes,
) -> str | None:
    """Return the first checkout under *search_paths* whose remote is *repo_id*.

    Roots are searched in order.  Each root sits at depth 0 and a
    directory at depth ``d`` has its children listed only while
    ``d <= max_depth``, so a repo at ``root/a/b/repo`` needs
    ``max_depth >= 2``.
    """
    name = repo_name(repo_id)
    if not name:
        return None

    for raw in search_paths:
        base = os.path.abspath(os.path.expanduser(raw))
        found = _walk(base, name, repo_id, max_depth, read_remotes)
        if found:
            return found
    return None


def _walk(
    base: str,
    name: str,
    repo_id: str,
    max_depth: int,
    read_remotes: ReadRemotes,
) -> str | None:
    # Pre-order: a child's whole subtree is searched before its next sibling.
    stack: list[tuple[str, int]] = [(base, 0)]
    while stack:
        directory, depth = stack.pop()
        if depth > 0 and os.path.basename(directory).lower() == name:
            if has_git_marker(directory) and repo_id in normalized_remotes(
                directory, read_remotes
            ):
                return directory

        if depth > max_depth:
            continue
        children = _child_dirs(directory)
        for child in reversed(children):
            stack.append((os.path.join(directory, child), depth + 1))
    return None


def _child_dirs(directory: str) -> list[str]:
    try:
        with os.scandir(directory) as it:
            names = [
                entry.name
                for entry in it
                if entry.name not in SKIP_DIRS and _is_dir(entry)
            ]
    except OSError as exc:
        logging.debug("Skipping unreadable directory %s: %s", directory, exc)
        return []
    return sorted(names)


def _is_dir(entry: os.DirEntry) -> bool:
    try:
        return entry.is_dir(follow_symlinks=False)
    except OSError:
        return False
