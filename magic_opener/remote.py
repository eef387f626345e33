"""Parse git remote URLs into repository coordinates."""

from __future__ import annotations

import re

from .exceptions import UnsupportedRemoteError
from .models import RemoteDescriptor

_HOST = r"(?P<host>[A-Za-z0-9.-]+)"
_PORT = r"(?::(?P<port>\d+))?"
_PATH = r"(?P<owner>[A-Za-z0-9_.-]+(?:/[A-Za-z0-9_.-]+)*)/(?P<name>[A-Za-z0-9_.-]+?)(?:\.git)?"

_REMOTE_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    (
        "https",
        re.compile(
            rf"^(?P<scheme>https?)://(?:[A-Za-z0-9\-._~!$&'()*+,;=%:]*@)?(?:www\.)?{_HOST}{_PORT}"
            rf"/{_PATH}/?$",
            re.IGNORECASE,
        ),
    ),
    ("git", re.compile(rf"^git://{_HOST}{_PORT}/{_PATH}/?$", re.IGNORECASE)),
    ("ssh", re.compile(rf"^ssh://(?:[A-Za-z0-9_.-]+@)?{_HOST}{_PORT}/{_PATH}/?$", re.IGNORECASE)),
    ("ssh", re.compile(rf"^[A-Za-z0-9_.-]+@{_HOST}:/?{_PATH}/?$")),
    ("https", re.compile(rf"^(?:www\.)?{_HOST}/{_PATH}/?$", re.IGNORECASE)),
)


def parse_remote(url: str | None) -> RemoteDescriptor:
    """Return the repository coordinates encoded in ``url``.

    SSH (``git@host:owner/repo.git``), ``ssh://``, ``git://``, HTTP(S) and bare
    ``host/owner/repo`` forms all normalise to the same host, owner and name,
    so they share one web URL.
    """

    raw = (url or "").strip()
    if not raw:
        raise UnsupportedRemoteError("Remote URL is empty.")
    for scheme, pattern in _REMOTE_PATTERNS:
        match = pattern.match(raw)
        if not match:
            continue
        scheme = (match.groupdict().get("scheme") or scheme).lower()
        host = match.group("host").lower()
        owner = match.group("owner")
        name = match.group("name")
        if host.startswith("api.") and owner.startswith("repos/"):
            # REST API URL: https://api.<host>/repos/<owner>/<name>
            host = host[len("api."):]
            owner = owner[len("repos/"):]
        if not is_valid_hostname(host) or not _valid_owner(owner) or not _valid_name(name):
            break
        return RemoteDescriptor(host=host, owner=owner, name=name, scheme=scheme, url=raw)
    raise UnsupportedRemoteError(
        f"Unsupported remote URL: {raw}. Supported formats include git@host:owner/repo.git and https URLs."
    )


def is_valid_hostname(hostname: str) -> bool:
    if not hostname or len(hostname) > 253:
        return False
    for label in hostname.split("."):
        if not label or len(label) > 63:
            return False
        if label.startswith("-") or label.endswith("-"):
            return False
        if not all(ch.isascii() and (ch.isalnum() or ch == "-") for ch in label):
            return False
    return True


def _valid_owner(owner: str) -> bool:
    segments = owner.split("/")
    if segments[0].lower() == "none":
        return False
    return all(segment not in {".", ".."} for segment in segments)


def _valid_name(name: str) -> bool:
    return bool(name) and name not in {".", ".."}


__all__ = ["parse_remote", "is_valid_hostname"]
