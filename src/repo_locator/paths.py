"""Shared path utilities for repo-locator."""

from __future__ import annotations

import os

STATE_DIR_ENV = "REPO_LOCATOR_HOME"


def state_dir() -> str:
    """Return the per-installation directory holding config and cache.

    ``$REPO_LOCATOR_HOME`` wins when set; otherwise ``~/.repo-locator``.
    """
    override = os.environ.get(STATE_DIR_ENV)
    if override:
        return os.path.abspath(os.path.expanduser(override))
    return os.path.join(os.path.expanduser("~"), ".repo-locator")


def config_path() -> str:
    return os.path.join(state_dir(), "config.yaml")


def cache_path() -> str:
    return os.path.join(state_dir(), "repo-cache.json")
