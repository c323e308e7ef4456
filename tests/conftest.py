"""Shared test fixtures for the repo-locator test suite."""

from __future__ import annotations

import os
import subprocess

import pytest

from repo_locator.cache import RepoCache
from repo_locator.config import RepoConfig

# ------------------------------------------------------------------
# State directory isolation
# ------------------------------------------------------------------

@pytest.fixture(autouse=True)
def isolated_state_dir(tmp_path, monkeypatch):
    """Point REPO_LOCATOR_HOME at a temp dir so no test touches ~/.repo-locator."""
    state = tmp_path / "state"
    monkeypatch.setenv("REPO_LOCATOR_HOME", str(state))
    return state


# ------------------------------------------------------------------
# Remote-reading test double
# ------------------------------------------------------------------

class FakeRemotes:
    """Stand-in for ``read_remotes``: returns canned URLs per directory."""

    def __init__(self) -> None:
        self.remotes: dict[str, list[str]] = {}
        self.calls: list[str] = []

    def set(self, path, *urls: str) -> None:
        self.remotes[os.path.abspath(str(path))] = list(urls)

    def __call__(self, path: str) -> list[str]:
        self.calls.append(path)
        return list(self.remotes.get(os.path.abspath(path), []))


@pytest.fixture
def fake_remotes() -> FakeRemotes:
    return FakeRemotes()


@pytest.fixture
def make_checkout(fake_remotes):
    """Create a directory with a ``.git`` marker and register its remotes."""

    def _make(path, *urls: str, worktree: bool = False):
        path.mkdir(parents=True, exist_ok=True)
        marker = path / ".git"
        if worktree:
            marker.write_text("gitdir: /elsewhere/.git/worktrees/x\n", encoding="utf-8")
        else:
            marker.mkdir(exist_ok=True)
        fake_remotes.set(path, *urls)
        return path

    return _make


@pytest.fixture
def cache_file(tmp_path) -> str:
    return str(tmp_path / "cache" / "repo-cache.json")


@pytest.fixture
def fake_cache(cache_file, fake_remotes) -> RepoCache:
    return RepoCache(cache_file, read_remotes=fake_remotes)


@pytest.fixture
def search_root(tmp_path):
    root = tmp_path / "code"
    root.mkdir()
    return root


@pytest.fixture
def repo_config(search_root, cache_file) -> RepoConfig:
    return RepoConfig(search_paths=[str(search_root)], max_depth=4, cache_file=cache_file)


# ------------------------------------------------------------------
# Real git repositories
# ------------------------------------------------------------------

@pytest.fixture
def git_repo():
    """Create a real git repo at *path* with an ``origin`` remote."""

    def _make(path, remote_url: str):
        path.mkdir(parents=True, exist_ok=True)
        subprocess.run(["git", "init", "-q"], cwd=path, check=True)
        subprocess.run(
            ["git", "remote", "add", "origin", remote_url], cwd=path, check=True
        )
        return path

    return _make
