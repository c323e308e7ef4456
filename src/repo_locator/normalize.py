"""Repository identifier normalization.

Every supported spelling of a repository reference collapses to one
canonical key: ``host/owner/.../repo``, lowercase, with no scheme, no
trailing ``.git`` and no trailing slashes.
"""

from __future__ import annotations

import re

# user@ssh.dev.azure.com:v3/org/project/repo
_PROVIDER_SSH_RE = re.compile(r"^[^@\s/]+@ssh\.([^:/\s]+):v3/(.+)$")
# user@host:owner/repo
_SSH_RE = re.compile(r"^[^@\s/]+@([^:/\s]+):(.+)$")
_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)


def normalize_repo_url(raw: str | None) -> str | None:
    """Normalize any repo reference to ``host/owner/repo``.

    Returns ``None`` for empty input.  Purely syntactic: no
    percent-decoding, no DNS lookups.
    """
    if not raw:
        return None
    url = raw.strip()
    # Every changing pass shortens the string or only lowercases it, so this terminates.
    while True:
        reduced = _reduce(url)
        if reduced == url:
            break
        url = reduced
    return url or None


def _reduce(url: str) -> str:
    url = _SCHEME_RE.sub("", url)
    match = _PROVIDER_SSH_RE.match(url) or _SSH_RE.match(url)
    if match:
        url = f"{match.group(1)}/{match.group(2)}"
    return url.lower().rstrip("/").removesuffix(".git").rstrip("/")


def repo_name(canonical: str | None) -> str | None:
    """Return the last path segment of a canonical identifier."""
    if not canonical:
        return None
    return canonical.rsplit("/", 1)[-1] or None
