"""Custom exceptions for repo-locator.

Almost every failure inside the resolver degrades to "not found"; these
are the few conditions a caller is expected to act on.
"""


class ConfigError(Exception):
    """Raised when the configuration file cannot be parsed or holds an
    invalid value.

    A *missing* config file is not an error; defaults are used instead.
    """


class NoSearchRootsError(Exception):
    """Raised when no search root is configured and the default root
    cannot be expanded either (e.g. no home directory is available).

    This is the only resolution-time error surfaced by
    :meth:`RepoResolver.resolve`; every other problem yields ``None``.
    """
