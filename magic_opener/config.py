"""Environment configuration helpers."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping

from .exceptions import ConfigError

DEFAULT_REMOTE = "origin"
DEFAULT_BRANCHES = ("main", "master", "develop")
DEFAULT_FORWARD_PORT = 2226

# Squash merges "(#123)", merge commits "Merge pull request #123" and
# GitLab's "See merge request group/repo!123".
DEFAULT_PR_PATTERN = r"\(#(\d+)\)|^Merge pull request #(\d+)|See merge request \S+!(\d+)"


@dataclass(frozen=True)
class Config:
    """Runtime configuration resolved from the environment."""

    remote: str = DEFAULT_REMOTE
    pr_pattern: re.Pattern[str] = field(default_factory=lambda: re.compile(DEFAULT_PR_PATTERN, re.MULTILINE))
    default_branches: tuple[str, ...] = DEFAULT_BRANCHES
    open_command: str | None = None
    forward: bool = False
    forward_port: int = DEFAULT_FORWARD_PORT
    client_home: Path | None = None
    mount_prefix: str | None = None


def load_config(environ: Mapping[str, str] | None = None, *, remote: str | None = None) -> Config:
    env = os.environ if environ is None else environ
    return Config(
        remote=remote or env.get("MAGIC_OPENER_REMOTE") or DEFAULT_REMOTE,
        pr_pattern=compile_pr_pattern(env.get("MAGIC_OPENER_PR_PATTERN") or DEFAULT_PR_PATTERN),
        default_branches=_split_list(env.get("MAGIC_OPENER_DEFAULT_BRANCHES")) or DEFAULT_BRANCHES,
        open_command=env.get("MAGIC_OPENER_COMMAND") or None,
        forward=bool(env.get("SSH_TTY")) and not _truthy(env.get("MAGIC_OPENER_NO_FORWARD")),
        forward_port=_parse_port(env.get("MAGIC_OPENER_FORWARD_PORT")),
        client_home=Path(env["SSH_CLIENT_HOME"]) if env.get("SSH_CLIENT_HOME") else None,
        mount_prefix=env.get("MAGIC_OPENER_MOUNT_PREFIX") or None,
    )


def compile_pr_pattern(raw: str) -> re.Pattern[str]:
    try:
        pattern = re.compile(raw, re.MULTILINE)
    except re.error as exc:
        raise ConfigError(f"Invalid MAGIC_OPENER_PR_PATTERN {raw!r}: {exc}") from exc
    if pattern.groups < 1:
        raise ConfigError("MAGIC_OPENER_PR_PATTERN must capture the PR number in a group.")
    return pattern


def _parse_port(raw: str | None) -> int:
    if not raw:
        return DEFAULT_FORWARD_PORT
    try:
        port = int(raw)
    except ValueError as exc:
        raise ConfigError(f"MAGIC_OPENER_FORWARD_PORT must be an integer, got {raw!r}.") from exc
    if not 0 < port < 65536:
        raise ConfigError(f"MAGIC_OPENER_FORWARD_PORT out of range: {port}.")
    return port


def _split_list(raw: str | None) -> tuple[str, ...]:
    if not raw:
        return ()
    return tuple(item.strip() for item in raw.split(",") if item.strip())


def _truthy(raw: str | None) -> bool:
    return (raw or "").strip().lower() in {"1", "true", "yes", "on"}


__all__ = ["Config", "load_config", "compile_pr_pattern", "DEFAULT_PR_PATTERN"]
