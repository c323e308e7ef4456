from __future__ import annotations

import os
from dataclasses import asdict, dataclass, field

import yaml

from repo_locator.errors import ConfigError
from repo_locator.paths import config_path

DEFAULT_SEARCH_PATH = "~/src"
DEFAULT_MAX_DEPTH = 4


@dataclass
class AppConfig:
    name: str = "repo-locator"
    log_level: str = "INFO"


@dataclass
class RepoConfig:
    search_paths: list[str] = field(default_factory=lambda: [DEFAULT_SEARCH_PATH])
    max_depth: int | None = DEFAULT_MAX_DEPTH
    remote_timeout_seconds: float = 5.0
    cache_file: str | None = None  # defaults to <state dir>/repo-cache.json


@dataclass
class Config:
    app: AppConfig = field(default_factory=AppConfig)
    repo: RepoConfig = field(default_factory=RepoConfig)


def load_config(path: str | None = None) -> Config:
    """Load ``config.yaml``; a missing or empty file means all defaults."""
    path = path or config_path()
    data = _read_yaml(path)
    try:
        return Config(
            app=_load_app_config(data.get("app") or {}),
            repo=_load_repo_config(data.get("repo") or {}),
        )
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid config in {path}: {exc}") from exc


def _load_app_config(data: dict) -> AppConfig:
    data = dict(data)
    if "log_level" in data:
        data["log_level"] = _parse_log_level(data["log_level"])
    return AppConfig(**data)


def _load_repo_config(data: dict) -> RepoConfig:
    """Build RepoConfig, coercing search paths and validating depth."""
    data = dict(data)
    if "search_paths" in data:
        data["search_paths"] = _parse_search_paths(data["search_paths"])
    if data.get("max_depth") is not None:
        data["max_depth"] = _parse_depth(data["max_depth"])
    if "remote_timeout_seconds" in data:
        data["remote_timeout_seconds"] = _parse_timeout(data["remote_timeout_seconds"])
    return RepoConfig(**data)


def _parse_search_paths(value: object) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        items = value.split(",")
    elif isinstance(value, (list, tuple)):
        items = [str(v) for v in value]
    else:
        raise ConfigError(f"search_paths must be a list or comma-separated string, got {value!r}")
    return [p.strip() for p in items if p and p.strip()]


def _parse_depth(value: object) -> int:
    try:
        depth = int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"max_depth must be an integer, got {value!r}") from exc
    if depth < 0:
        raise ConfigError(f"max_depth must be non-negative, got {depth}")
    return depth


def _parse_timeout(value: object) -> float:
    try:
        timeout = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"remote_timeout_seconds must be a number, got {value!r}") from exc
    if timeout <= 0:
        raise ConfigError(f"remote_timeout_seconds must be positive, got {timeout}")
    return timeout


def _parse_log_level(value: object) -> str:
    level = str(value).upper()
    if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        raise ConfigError(f"Unknown log level {value!r}")
    return level


# Settable keys and their coercion functions.
_SETTERS = {
    "app.log_level": _parse_log_level,
    "repo.search_paths": _parse_search_paths,
    "repo.max_depth": _parse_depth,
    "repo.remote_timeout_seconds": _parse_timeout,
    "repo.cache_file": str,
}

VALID_KEYS = tuple(_SETTERS)


def set_config_value(key: str, value: str, path: str | None = None) -> object:
    """Update a single dotted *key* in the config file and return the
    coerced value that was written.

    Raises ``ConfigError`` for unknown keys or values that fail coercion.
    """
    if key not in _SETTERS:
        raise ConfigError(f"Unknown key: {key}. Valid keys: {', '.join(VALID_KEYS)}")
    coerced = _SETTERS[key](value)

    path = path or config_path()
    data = _read_yaml(path)
    section, option = key.split(".", 1)
    current = data.get(section) or {}
    if not isinstance(current, dict):
        raise ConfigError(f"Section '{section}' in {path} is not a mapping")
    current[option] = coerced
    data[section] = current

    os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
    return coerced


def config_as_dict(config: Config) -> dict:
    return asdict(config)


def _read_yaml(path: str) -> dict:
    if not os.path.exists(path):
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"Could not read config {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config {path} must contain a mapping at top level")
    return data
