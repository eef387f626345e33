"""Thin wrappers around git CLI commands."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Iterable

from .exceptions import GitCommandError, NotARepositoryError

log = logging.getLogger(__name__)


def run_git(
    args: Iterable[str],
    *,
    cwd: Path | None = None,
    raise_on_error: bool = True,
) -> subprocess.CompletedProcess[str]:
    """Execute a git command and optionally raise on failure."""

    cmd = ["git", *args]
    log.debug("Running command: %s", " ".join(cmd))
    try:
        proc = subprocess.run(
            cmd,
            cwd=str(cwd) if cwd else None,
            capture_output=True,
            text=True,
            check=False,
        )
    except FileNotFoundError as exc:
        raise NotARepositoryError("git executable not found in PATH.") from exc
    if raise_on_error and proc.returncode != 0:
        raise GitCommandError(cmd, proc.returncode, proc.stderr)
    return proc


def rev_parse_toplevel(path: Path | None = None) -> Path | None:
    proc = run_git(["rev-parse", "--show-toplevel"], cwd=path, raise_on_error=False)
    if proc.returncode != 0:
        return None
    return Path(proc.stdout.strip())


def remote_url(path: Path, remote: str = "origin") -> str | None:
    proc = run_git(["remote", "get-url", "--", remote], cwd=path, raise_on_error=False)
    if proc.returncode != 0:
        return None
    return proc.stdout.strip() or None


def current_branch(path: Path) -> str | None:
    proc = run_git(["symbolic-ref", "--short", "-q", "HEAD"], cwd=path, raise_on_error=False)
    if proc.returncode == 0:
        return proc.stdout.strip() or None
    return None


def short_head(path: Path) -> str:
    proc = run_git(["rev-parse", "--short", "HEAD"], cwd=path, raise_on_error=False)
    return proc.stdout.strip() if proc.returncode == 0 else ""


def default_branch(path: Path, remote: str = "origin", fallbacks: Iterable[str] = ("main", "master")) -> str | None:
    proc = run_git(
        ["symbolic-ref", f"refs/remotes/{remote}/HEAD"],
        cwd=path,
        raise_on_error=False,
    )
    if proc.returncode == 0:
        ref = proc.stdout.strip()
        prefix = f"refs/remotes/{remote}/"
        if ref.startswith(prefix):
            return ref[len(prefix):]
        return ref.split("/")[-1]
    for candidate in fallbacks:
        if branch_exists(path, candidate):
            return candidate
    return None


def branch_exists(path: Path, branch: str) -> bool:
    proc = run_git(
        ["show-ref", "--verify", "--quiet", f"refs/heads/{branch}"],
        cwd=path,
        raise_on_error=False,
    )
    return proc.returncode == 0


def upstream_ref(path: Path, branch: str) -> str | None:
    """Return the short upstream ref (``origin/feature``) tracked by ``branch``."""

    proc = run_git(
        ["rev-parse", "--abbrev-ref", "--symbolic-full-name", f"{branch}@{{upstream}}"],
        cwd=path,
        raise_on_error=False,
    )
    if proc.returncode == 0:
        return proc.stdout.strip() or None
    return None


def differs_from(path: Path, ref: str, other: str = "HEAD") -> bool:
    proc = run_git(["rev-list", "--count", f"{ref}...{other}"], cwd=path, raise_on_error=False)
    if proc.returncode != 0:
        return True
    return proc.stdout.strip() != "0"


def resolve_commit(path: Path, revision: str) -> str | None:
    proc = run_git(
        ["rev-parse", "--verify", "--quiet", f"{revision}^{{commit}}"],
        cwd=path,
        raise_on_error=False,
    )
    if proc.returncode == 0:
        return proc.stdout.strip() or None
    return None


def commit_message(path: Path, sha: str) -> str:
    proc = run_git(["log", "-1", "--format=%B", sha], cwd=path)
    return proc.stdout


__all__ = [
    "run_git",
    "rev_parse_toplevel",
    "remote_url",
    "current_branch",
    "short_head",
    "default_branch",
    "branch_exists",
    "upstream_ref",
    "differs_from",
    "resolve_commit",
    "commit_message",
]
