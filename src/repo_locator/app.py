from __future__ import annotations

import argparse
import logging
import sys

import yaml

from repo_locator.config import (
    VALID_KEYS,
    RepoConfig,
    config_as_dict,
    load_config,
    set_config_value,
)
from repo_locator.errors import ConfigError, NoSearchRootsError
from repo_locator.logging_conf import configure_logging
from repo_locator.normalize import normalize_repo_url
from repo_locator.paths import config_path
from repo_locator.repo import RepoResolver


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="repo-locator",
        description="Resolve a repository URL to a local checkout path.",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Override the configured log level",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    resolve_parser = subparsers.add_parser("resolve", help="Print the checkout path for a repo")
    resolve_parser.add_argument("url", help="SSH, HTTPS or host/owner/repo reference")

    normalize_parser = subparsers.add_parser("normalize", help="Print the canonical repo id")
    normalize_parser.add_argument("url")

    cache_parser = subparsers.add_parser("cache", help="Inspect or maintain the repo cache")
    cache_parser.add_argument(
        "action",
        nargs="?",
        default="list",
        choices=["list", "clear", "prune", "path"],
    )

    config_parser = subparsers.add_parser("config", help="Show or change configuration")
    config_sub = config_parser.add_subparsers(dest="config_command")
    config_sub.add_parser("show", help="Show current config")
    config_sub.add_parser("path", help="Print config file path")
    set_parser = config_sub.add_parser("set", help="Set a config value")
    set_parser.add_argument("key", choices=VALID_KEYS)
    set_parser.add_argument("value", nargs="+")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config()
        configure_logging(args.log_level or config.app.log_level)

        if args.command == "resolve":
            resolver = RepoResolver.from_config(config.repo)
            found = resolver.resolve(args.url)
            if not found:
                print(f"Not found: {args.url}", file=sys.stderr)
                return 1
            print(found)
            return 0

        if args.command == "normalize":
            normalized = normalize_repo_url(args.url)
            if not normalized:
                print(f"Invalid repo URL: {args.url!r}", file=sys.stderr)
                return 1
            print(normalized)
            return 0

        if args.command == "cache":
            return _cmd_cache(args.action, config.repo)

        if args.command == "config":
            return _cmd_config(args)
    except (ConfigError, NoSearchRootsError, OSError) as exc:
        logging.debug("Command failed", exc_info=True)
        print(f"error: {exc}", file=sys.stderr)
        return 2

    parser.error(f"Unknown command: {args.command}")


def _cmd_cache(action: str, repo_config: RepoConfig) -> int:
    cache = RepoResolver.from_config(repo_config).cache
    path = cache.path
    if action == "path":
        print(path)
        return 0

    if action == "clear":
        count = cache.clear()
        print(f"Cleared {count} cache entries")
    elif action == "prune":
        stale = cache.prune()
        for repo_id in stale:
            print(f"Evicted {repo_id}")
        print(f"Pruned {len(stale)} stale cache entries")
    else:
        entries = cache.load()
        if not entries:
            print(f"No cached repos in {path}")
        for repo_id, entry in sorted(entries.items()):
            print(f"{repo_id} = {entry.path} (last used {entry.last_used or 'unknown'})")
    return 0


def _cmd_config(args: argparse.Namespace) -> int:
    if args.config_command == "path":
        print(config_path())
        return 0

    if args.config_command == "set":
        # Separate arguments are separate roots; a quoted root may contain spaces.
        sep = "," if args.key == "repo.search_paths" else " "
        value = set_config_value(args.key, sep.join(args.value))
        print(f"Updated {args.key} = {value}")
        return 0

    print(yaml.safe_dump(config_as_dict(load_config()), default_flow_style=False, sort_keys=False), end="")
    return 0


if __name__ == "__main__":
    sys.exit(main())
